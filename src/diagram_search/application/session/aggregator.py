"""
Pagination Aggregator - the query-session facade.

Holds the accumulated results of the active query and pages through the
search client on demand.

States:
    EMPTY -> LOADING -> LOADED <-> LOADING_MORE -> LOADED | EXHAUSTED
    LOADING / LOADING_MORE -> ERROR when the search client raises

Provides:
- search / load_more / reset_search
- Deduplication by normalized image location across pages
- Page and result ceilings
- Stale-response protection via a session generation counter
- Credential pool status and administrative reset
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from diagram_search.application.search.client import SearchClient
from diagram_search.application.search.ranking import RelevanceRanker
from diagram_search.domain.entities.credential import PoolStatus
from diagram_search.domain.entities.result import PageOrigin, ResultItem, ResultPage
from diagram_search.infrastructure.credentials.pool import CredentialPoolManager

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 5
DEFAULT_MAX_RESULTS = 30


class SessionState(str, Enum):
    """Search session lifecycle."""

    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"
    LOADING_MORE = "loading_more"
    EXHAUSTED = "exhausted"
    ERROR = "error"


@dataclass
class SearchSession:
    """
    Mutable state of one query session.

    Invariant: ``results`` never holds two items with the same
    normalized image location.
    """

    query: str = ""
    results: list[ResultItem] = field(default_factory=list)
    page_cursor: int = 0
    has_more: bool = False
    state: SessionState = SessionState.EMPTY
    error: Exception | None = None
    stale: bool = False
    from_fallback: bool = False
    _seen: set[str] = field(default_factory=set, repr=False)

    def merge(self, items: list[ResultItem], limit: int) -> int:
        """
        Append items not seen before, up to ``limit`` results in total.

        Returns:
            Number of items added
        """
        added = 0
        for item in items:
            if len(self.results) >= limit:
                break
            key = item.dedup_key
            if key in self._seen:
                continue
            self._seen.add(key)
            self.results.append(item)
            added += 1
        return added


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of a session for rendering."""

    query: str
    results: tuple[ResultItem, ...]
    state: SessionState
    has_more: bool
    error: Exception | None
    stale: bool
    from_fallback: bool
    page_cursor: int

    @property
    def is_loading(self) -> bool:
        return self.state in (SessionState.LOADING, SessionState.LOADING_MORE)


SessionListener = Callable[[SessionSnapshot], None]


class PaginationAggregator:
    """
    Accumulates ranked, deduplicated results for one query at a time.

    Several aggregators (one per user session) may share a search client,
    and therefore its credential pool and cache.

    Example:
        aggregator = container.aggregator()
        await aggregator.search("network diagram")
        while aggregator.has_more:
            await aggregator.load_more()
        for item in aggregator.results:
            print(item.title)
    """

    def __init__(
        self,
        client: SearchClient,
        pool: CredentialPoolManager,
        ranker: RelevanceRanker | None = None,
        page_size: int | None = None,
        max_pages: int = DEFAULT_MAX_PAGES,
        max_results: int = DEFAULT_MAX_RESULTS,
    ):
        self._client = client
        self._pool = pool
        self._ranker = ranker or RelevanceRanker()
        self._page_size = page_size or client.page_size
        self._max_pages = max_pages
        self._max_results = max_results
        self._generation = 0
        self._session = SearchSession()
        self._listeners: list[SessionListener] = []

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def results(self) -> list[ResultItem]:
        return list(self._session.results)

    @property
    def has_more(self) -> bool:
        return self._session.has_more

    @property
    def is_loading(self) -> bool:
        return self._session.state in (SessionState.LOADING, SessionState.LOADING_MORE)

    @property
    def error(self) -> Exception | None:
        return self._session.error

    @property
    def show_quota_notice(self) -> bool:
        """True only while the pool reports no available credential."""
        return self._pool.status().available_credentials == 0

    def snapshot(self) -> SessionSnapshot:
        s = self._session
        return SessionSnapshot(
            query=s.query,
            results=tuple(s.results),
            state=s.state,
            has_more=s.has_more,
            error=s.error,
            stale=s.stale,
            from_fallback=s.from_fallback,
            page_cursor=s.page_cursor,
        )

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Call ``listener`` with a snapshot after every state change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def search(self, query: str) -> None:
        """Start a new session for ``query`` and load its first page."""
        if not query or not query.strip():
            self.reset_search()
            return

        generation = self._new_session(query.strip(), SessionState.LOADING)
        self._notify()

        try:
            page = await self._client.fetch_page(self._session.query, 1)
        except Exception as e:
            if generation != self._generation:
                return
            self._fail(e)
            return

        if generation != self._generation:
            logger.debug(f"Discarding response for superseded search {query!r}")
            return

        session = self._session
        session.merge(self._ranker.rank(page.items, session.query), self._max_results)
        session.page_cursor = 1
        self._absorb_origin(page)
        session.has_more = self._compute_has_more(page)
        session.state = SessionState.LOADED
        logger.info(
            f"Search {session.query!r}: {len(session.results)} result(s) "
            f"from {page.origin.value}, has_more={session.has_more}"
        )
        self._notify()

    async def load_more(self) -> None:
        """
        Fetch the next page and merge its new items.

        No-op unless the session is LOADED with more pages available,
        which also makes a second call while one is in flight a no-op.
        """
        session = self._session
        if session.state is not SessionState.LOADED or not session.has_more:
            return

        generation = self._generation
        next_page = session.page_cursor + 1
        session.state = SessionState.LOADING_MORE
        self._notify()

        try:
            page = await self._client.fetch_page(session.query, next_page)
        except Exception as e:
            if generation != self._generation:
                return
            self._fail(e)
            return

        if generation != self._generation:
            logger.debug(f"Discarding page {next_page} for superseded search {session.query!r}")
            return

        added = session.merge(self._ranker.rank(page.items, session.query), self._max_results)
        session.page_cursor = next_page
        self._absorb_origin(page)

        if added == 0:
            session.has_more = False
            session.state = SessionState.EXHAUSTED
            logger.info(f"Search {session.query!r} exhausted at page {next_page}")
        else:
            session.has_more = self._compute_has_more(page)
            session.state = SessionState.LOADED
            logger.info(
                f"Search {session.query!r} page {next_page}: +{added}, "
                f"{len(session.results)} total, has_more={session.has_more}"
            )
        self._notify()

    def reset_search(self) -> None:
        """Drop the current session; in-flight responses are discarded."""
        self._new_session("", SessionState.EMPTY)
        self._notify()

    def get_pool_status(self) -> PoolStatus:
        return self._pool.status()

    def reset_all_credentials(self) -> PoolStatus:
        return self._pool.reset_all()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _new_session(self, query: str, state: SessionState) -> int:
        self._generation += 1
        self._session = SearchSession(query=query, state=state)
        return self._generation

    def _compute_has_more(self, page: ResultPage) -> bool:
        return (
            len(page.items) >= self._page_size
            and self._session.page_cursor < self._max_pages
            and len(self._session.results) < self._max_results
        )

    def _absorb_origin(self, page: ResultPage) -> None:
        if page.origin is PageOrigin.STALE_CACHE:
            self._session.stale = True
        if page.origin is PageOrigin.FALLBACK:
            self._session.from_fallback = True

    def _fail(self, error: Exception) -> None:
        session = self._session
        session.state = SessionState.ERROR
        session.error = error
        session.has_more = False
        logger.error(f"Search {session.query!r} failed: {error}")
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
