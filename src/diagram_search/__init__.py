"""
Diagram Search - Resilient Diagram Image Search

Searches an external image provider through a rotating pool of API
keys, caches result pages, falls back to curated offline collections
when no key is usable, and aggregates ranked, deduplicated pages per
query session.

Usage:
    from diagram_search import SearchSettings, create_container

    container = create_container(SearchSettings.from_env())
    aggregator = container.aggregator()

    await aggregator.search("network diagram")
    await aggregator.load_more()
    for item in aggregator.results:
        print(f"{item.title}: {item.image_location}")

Features:
    - Round-robin credential rotation with cooldown
    - TTL result cache with stale serving
    - Deterministic offline fallback
    - Relevance ranking and cross-page deduplication
"""

from .application.search import RelevanceRanker, SearchClient, get_search_suggestions
from .application.session import PaginationAggregator, SessionSnapshot, SessionState
from .config import SearchSettings
from .container import ApplicationContainer, create_container
from .core.exceptions import (
    AllSourcesExhaustedError,
    DiagramSearchError,
    MalformedResponseError,
    PoolExhaustedError,
    QuotaExceededError,
    TransientNetworkError,
)
from .domain import FailureKind, PageOrigin, PoolStatus, ResultItem, ResultPage
from .infrastructure.cache import ResultCache
from .infrastructure.credentials import CredentialPoolManager
from .infrastructure.fallback import FallbackContentProvider
from .infrastructure.sources import GoogleImageSearchClient, ProviderHit

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "PaginationAggregator",
    "SessionSnapshot",
    "SessionState",
    "SearchClient",
    "get_search_suggestions",
    # Configuration
    "SearchSettings",
    "ApplicationContainer",
    "create_container",
    # Components
    "CredentialPoolManager",
    "ResultCache",
    "FallbackContentProvider",
    "RelevanceRanker",
    "GoogleImageSearchClient",
    "ProviderHit",
    # Types
    "ResultItem",
    "ResultPage",
    "PageOrigin",
    "PoolStatus",
    "FailureKind",
    # Errors
    "DiagramSearchError",
    "QuotaExceededError",
    "TransientNetworkError",
    "MalformedResponseError",
    "PoolExhaustedError",
    "AllSourcesExhaustedError",
]
