"""Tests for the unified exception hierarchy."""

from network_search.shared.exceptions import (
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


class TestNetworkSearchError:
    def test_basic_creation(self):
        err = NetworkSearchError("something broke")
        assert str(err) == "something broke"
        assert err.severity is ErrorSeverity.ERROR
        assert err.category is ErrorCategory.API
        assert err.retryable is False

    def test_to_dict(self):
        err = NetworkSearchError(
            "failed",
            context=ErrorContext(source_name="footeducation.com", suggestion="try later", retry_after=5.0),
            retryable=True,
        )
        assert err.to_dict() == {
            "error": "failed",
            "category": "api",
            "severity": "error",
            "retryable": True,
            "source": "footeducation.com",
            "suggestion": "try later",
            "retry_after_seconds": 5.0,
        }

    def test_to_dict_minimal(self):
        assert set(NetworkSearchError("x").to_dict()) == {"error", "category", "severity", "retryable"}


class TestProviderErrors:
    def test_provider_unavailable(self):
        err = ProviderUnavailableError("unexpected status", source="footeducation.com", status_code=503)
        assert str(err) == "footeducation.com: unexpected status (HTTP 503)"
        assert err.status_code == 503
        assert err.severity is ErrorSeverity.TRANSIENT
        assert err.context.source_name == "footeducation.com"
        assert isinstance(err, APIError)

    def test_rate_limit(self):
        err = RateLimitError(retry_after=30.0)
        assert err.context.retry_after == 30.0
        assert err.context.suggestion == "Wait and retry the request"
        assert err.retryable

    def test_malformed_response(self):
        err = MalformedResponseError("not a list", source="footeducation.com")
        assert str(err) == "Malformed response (footeducation.com): not a list"
        assert isinstance(err, DataError)
        assert err.category is ErrorCategory.DATA


class TestCallerErrors:
    def test_empty_query(self):
        err = EmptyQueryError("   ")
        assert isinstance(err, ValidationError)
        assert err.context.input_value == "   "
        assert err.severity is ErrorSeverity.WARNING
        assert not err.retryable

    def test_configuration(self):
        err = ConfigurationError("missing base URL")
        assert err.category is ErrorCategory.CONFIGURATION
        assert err.severity is ErrorSeverity.CRITICAL


class TestIsProviderFailure:
    def test_typed_errors(self):
        assert is_provider_failure(ProviderUnavailableError("down"))
        assert is_provider_failure(MalformedResponseError("bad"))

    def test_transient_messages(self):
        assert is_provider_failure(OSError("Connection refused"))
        assert is_provider_failure(RuntimeError("operation timed out"))

    def test_other_errors(self):
        assert not is_provider_failure(KeyError("title"))
        assert not is_provider_failure(EmptyQueryError(""))
