"""
Search Client - one result page, whatever it takes.

Resolution ladder for fetch_page(query, page):

1. Fresh cache entry: returned unchanged.
2. Live provider, one attempt per Available credential in rotation
   order. Quota/auth errors put the credential in cooldown and move on.
   A transient error earns one retry on the same credential after a
   short delay; a second failure counts as quota.
3. Malformed response, zero hits or no usable credential: offline
   fallback collection (never cached).
4. Nothing from the fallback: a stale cache entry if one exists.
5. Otherwise AllSourcesExhaustedError, the only error meant to reach
   the caller.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging

from diagram_search.core.exceptions import (
    AllSourcesExhaustedError,
    DiagramSearchError,
    InvalidParameterError,
    InvalidQueryError,
    MalformedResponseError,
    PoolExhaustedError,
    QuotaExceededError,
    TransientNetworkError,
    get_retry_delay,
)
from diagram_search.domain.entities.credential import FailureKind, SearchCredential
from diagram_search.domain.entities.result import (
    PageOrigin,
    ResultItem,
    ResultPage,
    normalize_image_location,
)
from diagram_search.infrastructure.cache.result_cache import ResultCache
from diagram_search.infrastructure.credentials.pool import CredentialPoolManager
from diagram_search.infrastructure.fallback.provider import FallbackContentProvider
from diagram_search.infrastructure.sources.google_images import ImageSearchProvider, ProviderHit

from .query_enhancer import generate_tags
from .ranking import RelevanceRanker

logger = logging.getLogger(__name__)

MAX_RETRY_DELAY = 5.0


def hit_to_item(hit: ProviderHit) -> ResultItem:
    """Map a provider hit to a ResultItem with a stable id."""
    digest = hashlib.sha1(normalize_image_location(hit.image_location).encode("utf-8")).hexdigest()
    return ResultItem(
        id=f"search-{digest[:12]}",
        title=hit.title,
        image_location=hit.image_location,
        author=hit.display_origin,
        tags=generate_tags(hit.title, hit.snippet),
        source_location=hit.context_location,
        is_generated=False,
    )


class SearchClient:
    """
    Executes one page request against cache, provider pool and fallback.

    Usage:
        client = SearchClient(provider, pool, cache, FallbackContentProvider())
        page = await client.fetch_page("network diagram", 1)
        if page.is_degraded:
            print(page.notice)
    """

    def __init__(
        self,
        provider: ImageSearchProvider,
        pool: CredentialPoolManager,
        cache: ResultCache,
        fallback: FallbackContentProvider,
        ranker: RelevanceRanker | None = None,
        page_size: int = 10,
        retry_delay: float = 0.5,
    ):
        self._provider = provider
        self._pool = pool
        self._cache = cache
        self._fallback = fallback
        self._ranker = ranker or RelevanceRanker()
        self._page_size = page_size
        self._retry_delay = retry_delay

    @property
    def page_size(self) -> int:
        return self._page_size

    async def fetch_page(self, query: str, page: int = 1) -> ResultPage:
        """
        Fetch one page of results.

        Raises:
            InvalidQueryError: blank query
            InvalidParameterError: page < 1
            AllSourcesExhaustedError: no live, fallback or stale results
        """
        if not query or not query.strip():
            raise InvalidQueryError(query)
        if page < 1:
            raise InvalidParameterError("page", page, "an integer >= 1")

        entry = self._cache.get(query, page)
        if entry is not None:
            return ResultPage(query=query, page=page, items=list(entry.results), origin=PageOrigin.CACHE)

        try:
            items = await self._fetch_live(query, page)
        except (PoolExhaustedError, MalformedResponseError) as e:
            return self._degrade(query, page, str(e))
        if not items:
            return self._degrade(query, page, f"No live results for {query!r} page {page}")

        ranked = self._ranker.rank(items, query)
        self._cache.put(query, page, ranked)
        logger.info(f"Live search {query!r} page {page}: {len(ranked)} item(s)")
        return ResultPage(query=query, page=page, items=ranked, origin=PageOrigin.LIVE)

    # ------------------------------------------------------------------
    # Live provider
    # ------------------------------------------------------------------

    async def _fetch_live(self, query: str, page: int) -> list[ResultItem]:
        """
        Try each Available credential once.

        Raises:
            PoolExhaustedError: every credential failed or none was available
            MalformedResponseError: provider answered with an unusable payload
        """
        tried: set[str] = set()
        while True:
            credential = self._pool.acquire()
            if credential is None or credential.id in tried:
                raise PoolExhaustedError(tried=len(tried))
            tried.add(credential.id)

            try:
                hits = await self._call_with_retry(credential, query, page)
            except MalformedResponseError:
                self._pool.report_success(credential)
                raise
            except (QuotaExceededError, TransientNetworkError) as e:
                self._pool.report_failure(credential, FailureKind.QUOTA)
                logger.warning(f"Credential {credential.id} failed ({type(e).__name__}): {e}")
                continue
            except DiagramSearchError:
                raise
            except Exception as e:
                # Unclassifiable provider failure: rotate like a quota error
                self._pool.report_failure(credential, FailureKind.QUOTA)
                logger.warning(f"Credential {credential.id} failed with unexpected error: {e!r}")
                continue

            self._pool.report_success(credential)
            return [hit_to_item(hit) for hit in hits]

    async def _call_with_retry(
        self,
        credential: SearchCredential,
        query: str,
        page: int,
    ) -> list[ProviderHit]:
        try:
            return await self._provider.search_images(query, credential.secret, page, self._page_size)
        except TransientNetworkError as e:
            self._pool.report_failure(credential, FailureKind.TRANSIENT)
            delay = min(get_retry_delay(e, 0, base=self._retry_delay), MAX_RETRY_DELAY)
            logger.info(f"Transient error on {credential.id}, retrying in {delay:.1f}s: {e}")
            await asyncio.sleep(delay)
            return await self._provider.search_images(query, credential.secret, page, self._page_size)

    # ------------------------------------------------------------------
    # Degraded paths
    # ------------------------------------------------------------------

    def _degrade(self, query: str, page: int, notice: str) -> ResultPage:
        logger.warning(f"Degrading {query!r} page {page}: {notice}")

        try:
            items = self._fallback.fetch(query, page, self._page_size)
        except Exception:
            stale = self._cache.get_stale(query, page)
            if stale is None:
                raise
            logger.exception(f"Fallback failed for {query!r}; serving stale cache")
            return self._stale_page(query, page, stale.results, notice)

        if items:
            return ResultPage(query=query, page=page, items=items, origin=PageOrigin.FALLBACK, notice=notice)

        stale = self._cache.get_stale(query, page)
        if stale is not None:
            return self._stale_page(query, page, stale.results, notice)

        raise AllSourcesExhaustedError(query, page)

    @staticmethod
    def _stale_page(query: str, page: int, results: tuple[ResultItem, ...], notice: str) -> ResultPage:
        logger.warning(f"Serving stale cache for {query!r} page {page}")
        return ResultPage(
            query=query,
            page=page,
            items=list(results),
            origin=PageOrigin.STALE_CACHE,
            notice=notice,
        )
