"""
Domain Layer - Core Data Types

Contains:
- entities: ResultItem/ResultPage and the credential pool types
"""

from .entities import (
    CredentialStatus,
    FailureKind,
    PageOrigin,
    PoolHealth,
    PoolStatus,
    ResultItem,
    ResultPage,
    SearchCredential,
    normalize_image_location,
)

__all__ = [
    "ResultItem",
    "ResultPage",
    "PageOrigin",
    "normalize_image_location",
    "SearchCredential",
    "CredentialStatus",
    "FailureKind",
    "PoolHealth",
    "PoolStatus",
]
