"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from diagram_search.application.search.client import SearchClient
from diagram_search.application.search.ranking import RelevanceRanker
from diagram_search.domain.entities.result import ResultItem
from diagram_search.infrastructure.cache.result_cache import ResultCache
from diagram_search.infrastructure.credentials.pool import CredentialPoolManager
from diagram_search.infrastructure.fallback.provider import FallbackContentProvider
from diagram_search.infrastructure.sources.google_images import ProviderHit

# ============================================================
# Time
# ============================================================


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# ============================================================
# Result Data
# ============================================================


def make_hits(count: int, prefix: str = "diagram", title: str = "Network Diagram") -> list[ProviderHit]:
    """Provider hits with distinct image locations."""
    return [
        ProviderHit(
            title=f"{title} {i}",
            image_location=f"https://img.example.com/{prefix}/{i}.png?size=large",
            context_location=f"https://example.com/{prefix}/{i}",
            display_origin="example.com",
            snippet="An educational network topology diagram",
        )
        for i in range(count)
    ]


@pytest.fixture
def make_item():
    """Factory for ResultItem."""

    def _make(
        title: str = "Sample Diagram",
        location: str = "https://img.example.com/sample.png",
        tags: tuple[str, ...] = (),
        item_id: str | None = None,
    ) -> ResultItem:
        return ResultItem(
            id=item_id or f"item-{abs(hash((title, location))) % 10_000}",
            title=title,
            image_location=location,
            tags=tags,
        )

    return _make


@pytest.fixture
def hit_factory():
    """Factory for provider hits."""
    return make_hits


# ============================================================
# Components
# ============================================================


@pytest.fixture
def pool(clock):
    """Two-credential pool on the fake clock."""
    return CredentialPoolManager.from_secrets(
        ["AIzaFirstKey0000000", "AIzaSecondKey000000"],
        cooldown=3600.0,
        clock=clock,
    )


@pytest.fixture
def cache(clock):
    return ResultCache(ttl=1800.0, retention=3600.0, capacity=100, clock=clock)


@pytest.fixture
def fallback():
    return FallbackContentProvider()


@pytest.fixture
def mock_provider():
    """Image provider returning ten hits by default."""
    provider = AsyncMock()
    provider.search_images.return_value = make_hits(10)
    return provider


@pytest.fixture
def search_client(mock_provider, pool, cache, fallback):
    return SearchClient(
        provider=mock_provider,
        pool=pool,
        cache=cache,
        fallback=fallback,
        ranker=RelevanceRanker(),
        page_size=10,
        retry_delay=0.0,
    )
