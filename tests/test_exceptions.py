"""Tests for exceptions.py: hierarchy, context and provider classification."""

import pytest

from diagram_search.core.exceptions import (
    AllSourcesExhaustedError,
    ConfigurationError,
    DiagramSearchError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    InvalidParameterError,
    InvalidQueryError,
    MalformedResponseError,
    PoolExhaustedError,
    ProviderError,
    QuotaExceededError,
    SourceError,
    TransientNetworkError,
    ValidationError,
    classify_provider_error,
    get_retry_delay,
)


class TestDiagramSearchError:
    def test_basic_creation(self):
        e = DiagramSearchError("test error")
        assert str(e) == "test error"
        assert e.severity == ErrorSeverity.ERROR
        assert e.category == ErrorCategory.PROVIDER
        assert e.retryable is False

    def test_to_dict(self):
        ctx = ErrorContext(operation="search_images", suggestion="s", retry_after=5.0, status_code=429)
        e = DiagramSearchError("fail", context=ctx, retryable=True)
        d = e.to_dict()
        assert d["error"] == "fail"
        assert d["type"] == "DiagramSearchError"
        assert d["operation"] == "search_images"
        assert d["suggestion"] == "s"
        assert d["status_code"] == 429
        assert d["retry_after_seconds"] == 5.0
        assert d["retryable"] is True

    def test_to_dict_minimal(self):
        d = DiagramSearchError("fail").to_dict()
        assert "operation" not in d
        assert "status_code" not in d

    def test_context_is_frozen(self):
        ctx = ErrorContext()
        with pytest.raises(AttributeError):
            ctx.operation = "x"


class TestProviderErrors:
    def test_quota(self):
        e = QuotaExceededError()
        assert isinstance(e, ProviderError)
        assert e.retryable is True
        assert e.context.suggestion == "Rotate to another credential"

    def test_quota_keeps_custom_suggestion(self):
        e = QuotaExceededError("x", context=ErrorContext(suggestion="wait"))
        assert e.context.suggestion == "wait"

    def test_transient(self):
        e = TransientNetworkError("timeout")
        assert e.severity == ErrorSeverity.TRANSIENT
        assert e.category == ErrorCategory.NETWORK

    def test_malformed(self):
        e = MalformedResponseError("bad json")
        assert str(e) == "Parse error: bad json"
        assert e.retryable is False


class TestSourceErrors:
    def test_pool_exhausted(self):
        e = PoolExhaustedError(tried=3)
        assert isinstance(e, SourceError)
        assert e.tried == 3
        assert e.category == ErrorCategory.SOURCE

    def test_all_sources_exhausted(self):
        e = AllSourcesExhaustedError("network", 2)
        assert e.query == "network"
        assert e.page == 2
        assert "page 2" in str(e)
        assert e.severity == ErrorSeverity.CRITICAL
        assert e.context.input_value == "network"


class TestValidationErrors:
    def test_invalid_query(self):
        e = InvalidQueryError("  ")
        assert isinstance(e, ValidationError)
        assert str(e) == "Invalid query: Query cannot be empty"
        assert e.context.input_value == "  "

    def test_invalid_parameter(self):
        e = InvalidParameterError("page", 0, "an integer >= 1")
        assert "'page'" in str(e)
        assert e.context.suggestion == "Expected an integer >= 1"

    def test_configuration(self):
        e = ConfigurationError("bad")
        assert e.category == ErrorCategory.CONFIGURATION
        assert e.severity == ErrorSeverity.CRITICAL


# ============================================================
# Classification
# ============================================================


class TestClassifyProviderError:
    @pytest.mark.parametrize("status", [401, 402, 403, 429])
    def test_quota_statuses(self, status):
        e = classify_provider_error(status, "denied")
        assert isinstance(e, QuotaExceededError)
        assert e.context.status_code == status

    @pytest.mark.parametrize("status", [408, 500, 502, 503, 504, 599])
    def test_transient_statuses(self, status):
        assert isinstance(classify_provider_error(status), TransientNetworkError)

    def test_bad_request_mentioning_key(self):
        e = classify_provider_error(400, "API key not valid. Please pass a valid API key.")
        assert isinstance(e, QuotaExceededError)
        assert not str(e).startswith("Unclassified")

    def test_unclassified_is_quota(self):
        e = classify_provider_error(418, "teapot")
        assert isinstance(e, QuotaExceededError)
        assert str(e) == "Unclassified provider error: teapot"

    def test_default_message(self):
        assert "HTTP 404" in str(classify_provider_error(404))


class TestGetRetryDelay:
    def test_exponential(self):
        e = TransientNetworkError()
        assert get_retry_delay(e, 0) == 0.5
        assert get_retry_delay(e, 2) == 2.0

    def test_capped(self):
        assert get_retry_delay(TransientNetworkError(), 20) == 30.0

    def test_retry_after_wins(self):
        e = TransientNetworkError(context=ErrorContext(retry_after=3.0))
        assert get_retry_delay(e, 0) == 3.0

    def test_plain_exception(self):
        assert get_retry_delay(ValueError(), 1, base=1.0) == 2.0
