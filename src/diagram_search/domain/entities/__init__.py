"""Domain entities."""

from .credential import (
    CredentialStatus,
    FailureKind,
    PoolHealth,
    PoolStatus,
    SearchCredential,
)
from .result import (
    PageOrigin,
    ResultItem,
    ResultPage,
    normalize_image_location,
)

__all__ = [
    "CredentialStatus",
    "FailureKind",
    "PoolHealth",
    "PoolStatus",
    "SearchCredential",
    "PageOrigin",
    "ResultItem",
    "ResultPage",
    "normalize_image_location",
]
