"""Result page caching."""

from .result_cache import (
    CacheEntry,
    CacheStats,
    InMemoryStore,
    KeyValueStore,
    ResultCache,
    normalize_query,
)

__all__ = [
    "CacheEntry",
    "CacheStats",
    "InMemoryStore",
    "KeyValueStore",
    "ResultCache",
    "normalize_query",
]
