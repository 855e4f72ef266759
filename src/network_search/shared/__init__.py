"""
Shared kernel for Network Search.

Provides:
- Unified exception hierarchy
- Async utilities for isolated provider fan-out
- Optional per-source profiling
"""

from .async_utils import (
    CircuitBreaker,
    gather_isolated,
    timeout_with_fallback,
)
from .exceptions import (
    APIError,
    ConfigurationError,
    DataError,
    EmptyQueryError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    MalformedResponseError,
    NetworkSearchError,
    ProviderUnavailableError,
    RateLimitError,
    ValidationError,
    is_provider_failure,
)

__all__ = [
    # Exceptions
    "NetworkSearchError",
    "ErrorContext",
    "ErrorSeverity",
    "ErrorCategory",
    "APIError",
    "ProviderUnavailableError",
    "RateLimitError",
    "ValidationError",
    "EmptyQueryError",
    "DataError",
    "MalformedResponseError",
    "ConfigurationError",
    "is_provider_failure",
    # Async utilities
    "CircuitBreaker",
    "gather_isolated",
    "timeout_with_fallback",
]
