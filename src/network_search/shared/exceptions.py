"""
Unified Exception Hierarchy for Network Search.

Exception Hierarchy:
    NetworkSearchError (base)
    ├── APIError
    │   ├── ProviderUnavailableError
    │   └── RateLimitError
    ├── ValidationError
    │   └── EmptyQueryError
    ├── DataError
    │   └── MalformedResponseError
    └── ConfigurationError

None of these are fatal to a search request: providers convert them into
empty contributions, and the aggregator converts EmptyQueryError into a
designated empty response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    WARNING = auto()  # Recoverable, can continue
    ERROR = auto()  # Failed but can retry
    CRITICAL = auto()  # Cannot continue
    TRANSIENT = auto()  # Temporary, should retry automatically


class ErrorCategory(Enum):
    """Categories for error classification."""

    API = "api"
    VALIDATION = "validation"
    DATA = "data"
    CONFIGURATION = "config"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context attached to an error."""

    source_name: str | None = None
    operation: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    retry_after: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class NetworkSearchError(Exception):
    """
    Base exception for all Network Search errors.

    Provides:
    - Structured error context
    - Severity classification
    - Retry guidance
    """

    __slots__ = ("context", "severity", "category", "retryable")

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.API,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.context = context or ErrorContext()
        self.severity = severity
        self.category = category
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error": str(self),
            "category": self.category.value,
            "severity": self.severity.name.lower(),
            "retryable": self.retryable,
        }
        if self.context.source_name:
            result["source"] = self.context.source_name
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        if self.context.retry_after:
            result["retry_after_seconds"] = self.context.retry_after
        return result


# =============================================================================
# API Errors
# =============================================================================


class APIError(NetworkSearchError):
    """Base class for errors talking to a content provider."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        retryable: bool = True,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.API,
            retryable=retryable,
        )


class ProviderUnavailableError(APIError):
    """Transport failure or non-2xx status from a content provider."""

    def __init__(
        self,
        message: str = "Provider unavailable",
        *,
        source: str = "remote",
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext(source_name=source)
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        super().__init__(f"{source}: {message}", context=ctx, retryable=True)
        self.status_code = status_code
        self.severity = ErrorSeverity.TRANSIENT


class RateLimitError(APIError):
    """Raised when a provider is being throttled (including an open circuit)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: float = 1.0,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = ErrorContext(
            source_name=ctx.source_name,
            operation=ctx.operation,
            input_value=ctx.input_value,
            suggestion=ctx.suggestion or "Wait and retry the request",
            retry_after=retry_after,
            metadata=ctx.metadata,
        )
        super().__init__(message, context=ctx, retryable=True)
        self.severity = ErrorSeverity.TRANSIENT


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(NetworkSearchError):
    """Base class for caller input errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.WARNING,
            category=ErrorCategory.VALIDATION,
            retryable=False,
        )


class EmptyQueryError(ValidationError):
    """Raised when the search query is empty or whitespace only."""

    def __init__(
        self,
        query: str | None = None,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext(
            input_value=query,
            suggestion="Please enter a search term.",
        )
        super().__init__("Invalid query: Query cannot be empty", context=ctx)


# =============================================================================
# Data Errors
# =============================================================================


class DataError(NetworkSearchError):
    """Base class for data-related errors."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=ErrorCategory.DATA,
            retryable=False,
        )


class MalformedResponseError(DataError):
    """Raised when a provider response does not have the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        full_msg = f"Malformed response: {message}"
        if source:
            full_msg = f"Malformed response ({source}): {message}"
        super().__init__(full_msg, context=context or ErrorContext(source_name=source))


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(NetworkSearchError):
    """Raised for invalid settings or search source definitions."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
            retryable=False,
        )


def is_provider_failure(error: BaseException) -> bool:
    """True for errors that should be isolated to a single provider."""
    if isinstance(error, (APIError, DataError)):
        return True
    error_str = str(error).lower()
    transient_patterns = [
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "service unavailable",
    ]
    return any(pattern in error_str for pattern in transient_patterns)
