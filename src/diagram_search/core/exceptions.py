"""
Unified Exception Hierarchy for Diagram Search.

Exception Hierarchy:
    DiagramSearchError (base)
    ├── ProviderError
    │   ├── QuotaExceededError
    │   ├── TransientNetworkError
    │   └── MalformedResponseError
    ├── SourceError
    │   ├── PoolExhaustedError
    │   └── AllSourcesExhaustedError
    ├── ValidationError
    │   ├── InvalidQueryError
    │   └── InvalidParameterError
    └── ConfigurationError

Only AllSourcesExhaustedError is expected to escape the search client;
the provider errors drive credential rotation and fallback.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = auto()      # Recoverable, degraded output served
    ERROR = auto()        # Failed but can retry
    CRITICAL = auto()     # Cannot continue
    TRANSIENT = auto()    # Temporary, should retry automatically


class ErrorCategory(Enum):
    """Categories for error classification."""
    PROVIDER = "provider"
    NETWORK = "network"
    SOURCE = "source"
    VALIDATION = "validation"
    CONFIGURATION = "config"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Rich context attached to an error."""
    operation: str | None = None
    input_value: Any = None
    suggestion: str | None = None
    retry_after: float | None = None
    status_code: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class DiagramSearchError(Exception):
    """
    Base exception for all diagram search errors.

    Provides:
    - Structured error context
    - Severity classification
    - Retry guidance
    """

    __slots__ = ('context', 'severity', 'category', 'retryable')

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        category: ErrorCategory = ErrorCategory.PROVIDER,
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
            "type": type(self).__name__,
            "category": self.category.value,
            "severity": self.severity.name.lower(),
            "retryable": self.retryable,
        }
        if self.context.operation:
            result["operation"] = self.context.operation
        if self.context.suggestion:
            result["suggestion"] = self.context.suggestion
        if self.context.status_code is not None:
            result["status_code"] = self.context.status_code
        if self.context.retry_after:
            result["retry_after_seconds"] = self.context.retry_after
        return result


# =============================================================================
# Provider Errors
# =============================================================================

class ProviderError(DiagramSearchError):
    """Base class for errors raised by an image search provider call."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        category: ErrorCategory = ErrorCategory.PROVIDER,
        retryable: bool = True,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=ErrorSeverity.ERROR,
            category=category,
            retryable=retryable,
        )


class QuotaExceededError(ProviderError):
    """Credential rejected: quota used up, rate limited or not authorized."""

    def __init__(
        self,
        message: str = "Search quota exceeded",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = replace(ctx, suggestion=ctx.suggestion or "Rotate to another credential")
        super().__init__(message, context=ctx, retryable=True)


class TransientNetworkError(ProviderError):
    """Timeout, connection failure or 5xx from the provider."""

    def __init__(
        self,
        message: str = "Network connection failed",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context, category=ErrorCategory.NETWORK, retryable=True)
        self.severity = ErrorSeverity.TRANSIENT


class MalformedResponseError(ProviderError):
    """Provider answered but the payload could not be used."""

    def __init__(
        self,
        message: str = "Malformed provider response",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(f"Parse error: {message}", context=context, retryable=False)


# =============================================================================
# Source Errors
# =============================================================================

class SourceError(DiagramSearchError):
    """Base class for errors about the availability of result sources."""

    def __init__(
        self,
        message: str,
        *,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.WARNING,
    ) -> None:
        super().__init__(
            message,
            context=context,
            severity=severity,
            category=ErrorCategory.SOURCE,
            retryable=False,
        )


class PoolExhaustedError(SourceError):
    """No credential is usable for the current request."""

    def __init__(
        self,
        message: str = "No search credential available",
        *,
        tried: int = 0,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.tried = tried


class AllSourcesExhaustedError(SourceError):
    """Live search, fallback content and stale cache all came up empty."""

    def __init__(
        self,
        query: str,
        page: int = 1,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = replace(
            ctx,
            input_value=query,
            suggestion=ctx.suggestion or "Try again later or use a different query",
        )
        super().__init__(
            f"No results available for {query!r} (page {page})",
            context=ctx,
            severity=ErrorSeverity.CRITICAL,
        )
        self.query = query
        self.page = page


# =============================================================================
# Validation Errors
# =============================================================================

class ValidationError(DiagramSearchError):
    """Base class for validation errors."""

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


class InvalidQueryError(ValidationError):
    """Raised when a search query is invalid."""

    def __init__(
        self,
        query: str | None,
        reason: str = "Query cannot be empty",
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = replace(
            ctx,
            input_value=query,
            suggestion=ctx.suggestion or 'Provide a search query such as "network diagram"',
        )
        super().__init__(f"Invalid query: {reason}", context=ctx)


class InvalidParameterError(ValidationError):
    """Raised when a parameter value is invalid."""

    def __init__(
        self,
        param_name: str,
        value: Any,
        expected: str,
        *,
        context: ErrorContext | None = None,
    ) -> None:
        ctx = context or ErrorContext()
        ctx = replace(ctx, input_value=value, suggestion=f"Expected {expected}")
        super().__init__(
            f"Invalid parameter '{param_name}': {value!r} (expected {expected})",
            context=ctx,
        )


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(DiagramSearchError):
    """Raised for configuration-related errors."""

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


# =============================================================================
# Classification Helpers
# =============================================================================

_QUOTA_STATUS = frozenset({401, 402, 403, 429})
_TRANSIENT_STATUS = frozenset({408, 500, 502, 503, 504})
_KEY_MARKERS = ("api key", "api_key", "apikey", "credential", "quota", "limit")


def classify_provider_error(status_code: int | None, message: str = "") -> ProviderError:
    """
    Map a provider HTTP status (and error message) to a ProviderError.

    401/402/403/429, or a 400 that mentions the key or quota, are
    quota-class. 408 and 5xx are transient. Anything else is treated as
    quota-class so the request rotates away from the credential.
    """
    ctx = ErrorContext(operation="search_images", status_code=status_code)
    text = message or f"HTTP {status_code}"
    lowered = text.lower()

    if status_code in _QUOTA_STATUS:
        return QuotaExceededError(text, context=ctx)
    if status_code in _TRANSIENT_STATUS or (status_code is not None and 500 <= status_code < 600):
        return TransientNetworkError(text, context=ctx)
    if status_code == 400 and any(marker in lowered for marker in _KEY_MARKERS):
        return QuotaExceededError(text, context=ctx)
    return QuotaExceededError(f"Unclassified provider error: {text}", context=ctx)


def get_retry_delay(error: Exception, attempt: int = 0, base: float = 0.5) -> float:
    """Retry delay for an error, honouring an explicit retry_after."""
    if isinstance(error, DiagramSearchError) and error.context.retry_after:
        return error.context.retry_after
    return min(base * (2 ** attempt), 30.0)
