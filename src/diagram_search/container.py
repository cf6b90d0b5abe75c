"""
Application DI Container (dependency-injector).

Wires the shared search stack once per process: one credential pool,
one result cache and one search client, shared by every per-session
aggregator.

Usage::

    from diagram_search.config import SearchSettings
    from diagram_search.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict(SearchSettings.from_env().to_container_config())

    aggregator = container.aggregator()   # new session each call
    pool = container.pool()               # shared singleton

    # In tests, override any provider:
    container.provider.override(providers.Object(fake_provider))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

from diagram_search.config import SearchSettings

logger = logging.getLogger(__name__)


def _create_pool(api_keys: list[str] | None, search_engine_id: str, cooldown: float) -> object:
    """Lazy factory for CredentialPoolManager (empty without an engine id)."""
    from diagram_search.infrastructure.credentials import CredentialPoolManager

    if api_keys and not search_engine_id:
        logger.warning("Search engine id missing; credentials left out of rotation")
        api_keys = []
    return CredentialPoolManager.from_secrets(api_keys or [], cooldown=cooldown)


def _create_cache(ttl: float, retention: float, capacity: int) -> object:
    """Lazy factory for ResultCache."""
    from diagram_search.infrastructure.cache import ResultCache

    return ResultCache(ttl=ttl, retention=retention, capacity=capacity)


def _create_fallback() -> object:
    from diagram_search.infrastructure.fallback import FallbackContentProvider

    return FallbackContentProvider()


def _create_ranker() -> object:
    from diagram_search.application.search.ranking import RelevanceRanker

    return RelevanceRanker()


def _create_provider(search_engine_id: str, timeout: float, rate_limit: float) -> object:
    """Lazy factory for the Google image client (owns an httpx client)."""
    from diagram_search.application.search.query_enhancer import enhance_query
    from diagram_search.infrastructure.sources import GoogleImageSearchClient

    return GoogleImageSearchClient(
        search_engine_id=search_engine_id,
        timeout=timeout,
        rate_limit=rate_limit,
        query_builder=enhance_query,
    )


def _create_search_client(
    provider: object,
    pool: object,
    cache: object,
    fallback: object,
    ranker: object,
    page_size: int,
    retry_delay: float,
) -> object:
    from diagram_search.application.search.client import SearchClient

    return SearchClient(
        provider=provider,
        pool=pool,
        cache=cache,
        fallback=fallback,
        ranker=ranker,
        page_size=page_size,
        retry_delay=retry_delay,
    )


def _create_aggregator(
    client: object,
    pool: object,
    ranker: object,
    max_pages: int,
    max_results: int,
) -> object:
    """Lazy factory for a per-session PaginationAggregator."""
    from diagram_search.application.session import PaginationAggregator

    return PaginationAggregator(
        client=client,
        pool=pool,
        ranker=ranker,
        max_pages=max_pages,
        max_results=max_results,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the diagram search stack.

    Manages creation and lifecycle of:
    - ``pool``: credential rotation and cooldown (singleton)
    - ``cache``: result page cache (singleton)
    - ``provider``: Google image client (singleton, owns HTTP connections)
    - ``search_client``: cache/provider/fallback ladder (singleton)
    - ``aggregator``: one pagination session per call (factory)
    """

    config = providers.Configuration(default=SearchSettings().to_container_config())

    pool = providers.Singleton(
        _create_pool,
        api_keys=config.api_keys,
        search_engine_id=config.search_engine_id,
        cooldown=config.cooldown,
    )

    cache = providers.Singleton(
        _create_cache,
        ttl=config.cache_ttl,
        retention=config.cache_retention,
        capacity=config.cache_capacity,
    )

    fallback = providers.Singleton(_create_fallback)

    ranker = providers.Singleton(_create_ranker)

    provider = providers.Singleton(
        _create_provider,
        search_engine_id=config.search_engine_id,
        timeout=config.timeout,
        rate_limit=config.rate_limit,
    )

    search_client = providers.Singleton(
        _create_search_client,
        provider=provider,
        pool=pool,
        cache=cache,
        fallback=fallback,
        ranker=ranker,
        page_size=config.page_size,
        retry_delay=config.retry_delay,
    )

    aggregator = providers.Factory(
        _create_aggregator,
        client=search_client,
        pool=pool,
        ranker=ranker,
        max_pages=config.max_pages,
        max_results=config.max_results,
    )


def create_container(settings: SearchSettings | None = None) -> ApplicationContainer:
    """Container configured from ``settings`` (default: environment)."""
    settings = (settings or SearchSettings.from_env()).validate()
    container = ApplicationContainer()
    container.config.from_dict(settings.to_container_config())
    return container


__all__ = ["ApplicationContainer", "create_container"]
