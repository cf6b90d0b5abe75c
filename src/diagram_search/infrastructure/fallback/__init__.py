"""Offline fallback content."""

from .collections import DEFAULT_COLLECTIONS, FallbackCollection, FallbackTemplate
from .provider import GENERAL_COLLECTION, FallbackContentProvider, query_seed

__all__ = [
    "DEFAULT_COLLECTIONS",
    "FallbackCollection",
    "FallbackTemplate",
    "FallbackContentProvider",
    "GENERAL_COLLECTION",
    "query_seed",
]
