"""Core building blocks: error hierarchy and async helpers."""

from .async_utils import RateLimiter
from .exceptions import (
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

__all__ = [
    "RateLimiter",
    # Errors
    "DiagramSearchError",
    "ProviderError",
    "QuotaExceededError",
    "TransientNetworkError",
    "MalformedResponseError",
    "SourceError",
    "PoolExhaustedError",
    "AllSourcesExhaustedError",
    "ValidationError",
    "InvalidQueryError",
    "InvalidParameterError",
    "ConfigurationError",
    # Error metadata
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    # Helpers
    "classify_provider_error",
    "get_retry_delay",
]
