"""Tests for the search client: cache, rotation, retry and fallback ladder."""

import asyncio
from collections import Counter
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from diagram_search.application.search.client import SearchClient, hit_to_item
from diagram_search.core.exceptions import (
    AllSourcesExhaustedError,
    InvalidParameterError,
    InvalidQueryError,
    MalformedResponseError,
    QuotaExceededError,
    TransientNetworkError,
)
from diagram_search.domain.entities.result import PageOrigin
from diagram_search.infrastructure.credentials.pool import CredentialPoolManager
from diagram_search.infrastructure.fallback import FallbackCollection, FallbackContentProvider
from diagram_search.infrastructure.sources.google_images import ProviderHit


def used_keys(provider):
    return [call.args[1] for call in provider.search_images.call_args_list]


# ============================================================
# Cache
# ============================================================


class TestCaching:
    @pytest.mark.asyncio
    async def test_live_page_is_cached(self, search_client, mock_provider):
        first = await search_client.fetch_page("network diagram", 1)
        second = await search_client.fetch_page("Network  Diagram", 1)

        assert first.origin is PageOrigin.LIVE
        assert second.origin is PageOrigin.CACHE
        assert second.items == first.items
        assert mock_provider.search_images.await_count == 1

    @pytest.mark.asyncio
    async def test_expired_entry_refetched(self, search_client, mock_provider, clock):
        await search_client.fetch_page("network diagram", 1)
        clock.advance(1800)
        page = await search_client.fetch_page("network diagram", 1)
        assert page.origin is PageOrigin.LIVE
        assert mock_provider.search_images.await_count == 2

    @pytest.mark.asyncio
    async def test_live_items_ranked(self, search_client, mock_provider, hit_factory):
        mock_provider.search_images.return_value = (
            hit_factory(3, prefix="a", title="Unrelated Chart")
            + hit_factory(1, prefix="b", title="Network Diagram")
        )
        page = await search_client.fetch_page("network diagram", 1)
        assert page.items[0].title == "Network Diagram 0"

    @pytest.mark.asyncio
    async def test_query_terms_not_copied_into_tags(self, search_client, mock_provider):
        mock_provider.search_images.return_value = [
            ProviderHit(title="Sunset Beach", image_location="https://img.example.com/beach.jpg", snippet="holiday photo"),
            ProviderHit(title="Star Topology", image_location="https://img.example.com/star.png", snippet="network layout"),
        ]

        page = await search_client.fetch_page("network topology", 1)

        scores = {item.title: item.relevance_score for item in page.items}
        assert scores["Sunset Beach"] == 0
        assert scores["Star Topology"] > 0
        assert "network" not in page.items[-1].tags


# ============================================================
# Rotation
# ============================================================


class TestRotation:
    @pytest.mark.asyncio
    async def test_quota_error_rotates(self, search_client, mock_provider, pool, hit_factory):
        mock_provider.search_images.side_effect = [QuotaExceededError(), hit_factory(10)]

        page = await search_client.fetch_page("network diagram", 1)

        assert page.origin is PageOrigin.LIVE
        assert len(page.items) == 10
        assert used_keys(mock_provider) == ["AIzaFirstKey0000000", "AIzaSecondKey000000"]
        assert pool.status().available_credentials == 1

    @pytest.mark.asyncio
    async def test_each_credential_tried_once(self, search_client, mock_provider, pool):
        mock_provider.search_images.side_effect = QuotaExceededError()

        page = await search_client.fetch_page("network diagram", 1)

        assert page.origin is PageOrigin.FALLBACK
        assert mock_provider.search_images.await_count == 2
        assert pool.status().available_credentials == 0

    @pytest.mark.asyncio
    async def test_unclassified_error_treated_as_quota(self, search_client, mock_provider, pool, hit_factory):
        mock_provider.search_images.side_effect = [RuntimeError("boom"), hit_factory(10)]

        page = await search_client.fetch_page("network diagram", 1)

        assert page.origin is PageOrigin.LIVE
        assert pool.status().available_credentials == 1

    @pytest.mark.asyncio
    async def test_success_counts_usage(self, search_client, pool):
        await search_client.fetch_page("network diagram", 1)
        assert pool.status().total_usage == 1

    @pytest.mark.asyncio
    async def test_exhaustion_lasts_only_until_cooldown(self, search_client, mock_provider, pool, clock, hit_factory):
        mock_provider.search_images.side_effect = [QuotaExceededError(), QuotaExceededError(), hit_factory(10)]

        first = await search_client.fetch_page("network diagram", 1)
        assert first.origin is PageOrigin.FALLBACK
        assert pool.status().available_credentials == 0

        clock.advance(3600)
        second = await search_client.fetch_page("network diagram", 1)

        assert second.origin is PageOrigin.LIVE
        assert pool.status().available_credentials == 2


# ============================================================
# Shared Pool
# ============================================================


class TestConcurrentRequests:
    @pytest.mark.asyncio
    async def test_same_credential_failed_twice_stays_consistent(self, search_client, mock_provider, pool):
        gate = asyncio.Event()

        async def over_quota(query, credential, page, page_size):
            await gate.wait()
            raise QuotaExceededError()

        mock_provider.search_images.side_effect = over_quota

        tasks = [
            asyncio.create_task(search_client.fetch_page("network diagram", 1)),
            asyncio.create_task(search_client.fetch_page("network diagram", 2)),
        ]
        await asyncio.sleep(0)
        gate.set()
        pages = await asyncio.gather(*tasks)

        assert [page.origin for page in pages] == [PageOrigin.FALLBACK, PageOrigin.FALLBACK]
        status = pool.status()
        assert status.available_credentials == 0
        assert status.unavailable_credentials == 2
        # one call per credential per request at most
        assert all(count <= 2 for count in Counter(used_keys(mock_provider)).values())
        assert mock_provider.search_images.await_count <= 4


# ============================================================
# Transient Retry
# ============================================================


class TestTransientRetry:
    @pytest.mark.asyncio
    async def test_retry_same_credential_once(self, search_client, mock_provider, pool, hit_factory):
        mock_provider.search_images.side_effect = [TransientNetworkError(), hit_factory(10)]

        with patch("diagram_search.application.search.client.asyncio.sleep", new=AsyncMock()) as sleep:
            page = await search_client.fetch_page("network diagram", 1)

        assert page.origin is PageOrigin.LIVE
        assert used_keys(mock_provider) == ["AIzaFirstKey0000000", "AIzaFirstKey0000000"]
        assert sleep.await_count == 1
        assert pool.status().available_credentials == 2

    @pytest.mark.asyncio
    async def test_second_transient_failure_counts_as_quota(self, search_client, mock_provider, pool, hit_factory):
        mock_provider.search_images.side_effect = [
            TransientNetworkError(),
            TransientNetworkError(),
            hit_factory(10),
        ]

        page = await search_client.fetch_page("network diagram", 1)

        assert page.origin is PageOrigin.LIVE
        assert used_keys(mock_provider) == [
            "AIzaFirstKey0000000",
            "AIzaFirstKey0000000",
            "AIzaSecondKey000000",
        ]
        assert pool.status().available_credentials == 1


# ============================================================
# Fallback and Stale Cache
# ============================================================


class TestDegradation:
    @pytest.mark.asyncio
    async def test_exhausted_pool_uses_fallback(self, mock_provider, cache, fallback, clock):
        empty_pool = CredentialPoolManager([], clock=clock)
        client = SearchClient(mock_provider, empty_pool, cache, fallback, retry_delay=0)

        page = await client.fetch_page("network diagram", 1)

        assert page.origin is PageOrigin.FALLBACK
        assert page.is_degraded
        assert page.notice
        assert all(item.is_fallback for item in page.items)
        mock_provider.search_images.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_results_use_fallback(self, search_client, mock_provider, pool):
        mock_provider.search_images.return_value = []

        page = await search_client.fetch_page("network diagram", 1)

        assert page.origin is PageOrigin.FALLBACK
        assert pool.status().available_credentials == 2

    @pytest.mark.asyncio
    async def test_malformed_response_uses_fallback(self, search_client, mock_provider, pool):
        mock_provider.search_images.side_effect = MalformedResponseError("bad json")

        page = await search_client.fetch_page("network diagram", 1)

        assert page.origin is PageOrigin.FALLBACK
        assert mock_provider.search_images.await_count == 1
        assert pool.status().available_credentials == 2

    @pytest.mark.asyncio
    async def test_fallback_pages_not_cached(self, search_client, mock_provider, cache):
        mock_provider.search_images.return_value = []
        await search_client.fetch_page("network diagram", 1)
        assert ("network diagram", 1) not in cache

    @pytest.mark.asyncio
    async def test_stale_cache_when_fallback_empty(self, mock_provider, pool, cache, clock, hit_factory):
        empty = FallbackCollection(name="empty", keywords=frozenset({"network"}), templates=())
        client = SearchClient(mock_provider, pool, cache, FallbackContentProvider([empty]), retry_delay=0)

        fresh = await client.fetch_page("network diagram", 1)
        clock.advance(7200)
        mock_provider.search_images.side_effect = QuotaExceededError()

        page = await client.fetch_page("network diagram", 1)

        assert page.origin is PageOrigin.STALE_CACHE
        assert page.stale
        assert page.items == fresh.items

    @pytest.mark.asyncio
    async def test_all_sources_exhausted(self, mock_provider, cache, clock):
        empty = FallbackCollection(name="empty", keywords=frozenset(), templates=())
        client = SearchClient(
            mock_provider,
            CredentialPoolManager([], clock=clock),
            cache,
            FallbackContentProvider([empty]),
        )
        # Unmatched queries get a general mix built from the (empty) collections
        with pytest.raises(AllSourcesExhaustedError):
            await client.fetch_page("anything", 1)

    @pytest.mark.asyncio
    async def test_fallback_error_propagates_without_stale(self, mock_provider, cache, clock):
        broken = MagicMock(spec=FallbackContentProvider)
        broken.fetch.side_effect = RuntimeError("fallback down")
        client = SearchClient(mock_provider, CredentialPoolManager([], clock=clock), cache, broken)

        with pytest.raises(RuntimeError):
            await client.fetch_page("network", 1)


# ============================================================
# Validation and Mapping
# ============================================================


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["", "   "])
    async def test_blank_query(self, search_client, query):
        with pytest.raises(InvalidQueryError):
            await search_client.fetch_page(query, 1)

    @pytest.mark.asyncio
    async def test_page_must_be_positive(self, search_client):
        with pytest.raises(InvalidParameterError):
            await search_client.fetch_page("network", 0)


def test_hit_to_item_is_stable(hit_factory):
    hit = hit_factory(1)[0]
    first = hit_to_item(hit)
    second = hit_to_item(hit)
    assert first.id == second.id
    assert first.id.startswith("search-")
    assert first.author == "example.com"
    assert first.source_location == hit.context_location
    assert "network" in first.tags
