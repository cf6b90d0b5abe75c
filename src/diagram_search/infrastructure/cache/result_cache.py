"""
Result Cache

Session-scoped cache of result pages keyed by (normalized query, page).

Features:
- Freshness by per-entry TTL (fresh iff now - created_at < ttl)
- Stale reads for degraded serving
- Retention sweep plus capacity bound (oldest evicted first)
- Pluggable key-value backing store; default is cachetools.FIFOCache
- Optional periodic sweeper task on the running event loop
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from cachetools import FIFOCache

from diagram_search.domain.entities.result import ResultItem

logger = logging.getLogger(__name__)

DEFAULT_TTL = 30 * 60.0
DEFAULT_RETENTION = 60 * 60.0
DEFAULT_CAPACITY = 100
DEFAULT_SWEEP_INTERVAL = 5 * 60.0


def normalize_query(query: str) -> str:
    """Case-fold and collapse whitespace: "Network  Diagram" -> "network diagram"."""
    return " ".join(query.casefold().split())


@dataclass(frozen=True)
class CacheEntry:
    """One cached result page."""

    query: str  # normalized
    page: int
    results: tuple[ResultItem, ...]
    created_at: float
    ttl: float

    @property
    def key(self) -> tuple[str, int]:
        return (self.query, self.page)

    def age(self, now: float) -> float:
        return now - self.created_at

    def is_fresh(self, now: float) -> bool:
        return now - self.created_at < self.ttl


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal storage interface the cache needs."""

    def get(self, key: str) -> CacheEntry | None: ...

    def set(self, key: str, value: CacheEntry) -> None: ...

    def delete(self, key: str) -> bool: ...

    def keys(self) -> Iterable[str]: ...

    def __len__(self) -> int: ...


class InMemoryStore:
    """KeyValueStore over cachetools.FIFOCache (insertion-order eviction)."""

    def __init__(self, max_size: int = DEFAULT_CAPACITY):
        self._cache: FIFOCache[str, CacheEntry] = FIFOCache(maxsize=max_size)

    def get(self, key: str) -> CacheEntry | None:
        return self._cache.get(key)

    def set(self, key: str, value: CacheEntry) -> None:
        # Re-insert so an overwritten key moves to the young end
        self._cache.pop(key, None)
        self._cache[key] = value

    def delete(self, key: str) -> bool:
        return self._cache.pop(key, None) is not None

    def keys(self) -> Iterator[str]:
        return iter(list(self._cache.keys()))

    def __len__(self) -> int:
        return len(self._cache)


@dataclass
class CacheStats:
    """Cache statistics."""

    hits: int = 0
    stale_hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0-1)."""
        total = self.total_requests
        return self.hits / total if total > 0 else 0.0

    def reset(self) -> None:
        self.hits = 0
        self.stale_hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0


class ResultCache:
    """
    TTL-bounded result page cache.

    Example:
        cache = ResultCache(ttl=1800)
        cache.put("Network Diagram", 1, items)
        entry = cache.get("network   diagram", 1)   # same key
        stale = cache.get_stale("network diagram", 1)  # ignores TTL
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        ttl: float = DEFAULT_TTL,
        retention: float = DEFAULT_RETENTION,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize cache.

        Args:
            store: Backing key-value store (default: in-memory FIFO)
            ttl: Freshness window in seconds
            retention: Entries older than this are removed by sweep()
            capacity: Maximum number of entries kept
            clock: Time source (seconds)
        """
        self._store: KeyValueStore = store if store is not None else InMemoryStore(capacity)
        self._ttl = ttl
        self._retention = retention
        self._capacity = capacity
        self._clock = clock
        self._stats = CacheStats()
        self._sweeper: asyncio.Task[None] | None = None

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def capacity(self) -> int:
        return self._capacity

    @staticmethod
    def make_key(query: str, page: int) -> str:
        return f"search:{normalize_query(query)}:{page}"

    def get(self, query: str, page: int) -> CacheEntry | None:
        """
        Fresh entry for (query, page).

        Returns:
            The entry, or None if absent or past its TTL
        """
        entry = self._store.get(self.make_key(query, page))
        if entry is not None and entry.is_fresh(self._clock()):
            self._stats.hits += 1
            logger.debug(f"Cache hit: {entry.query!r} page {page}")
            return entry
        self._stats.misses += 1
        return None

    def get_stale(self, query: str, page: int) -> CacheEntry | None:
        """Any entry for (query, page), regardless of TTL."""
        entry = self._store.get(self.make_key(query, page))
        if entry is not None:
            self._stats.stale_hits += 1
        return entry

    def put(self, query: str, page: int, results: Sequence[ResultItem]) -> CacheEntry:
        entry = CacheEntry(
            query=normalize_query(query),
            page=page,
            results=tuple(results),
            created_at=self._clock(),
            ttl=self._ttl,
        )
        self._store.set(self.make_key(query, page), entry)
        self._stats.evictions += self._enforce_capacity()
        return entry

    def invalidate(self, query: str, page: int) -> bool:
        return self._store.delete(self.make_key(query, page))

    def clear(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries cleared
        """
        keys = list(self._store.keys())
        for key in keys:
            self._store.delete(key)
        return len(keys)

    def sweep(self, now: float | None = None) -> int:
        """
        Drop entries older than the retention window, then enforce capacity.

        Returns:
            Number of entries removed
        """
        now = self._clock() if now is None else now
        expired = 0
        for key, entry in self._entries():
            if entry.age(now) >= self._retention:
                self._store.delete(key)
                expired += 1
        evicted = self._enforce_capacity()

        self._stats.expirations += expired
        self._stats.evictions += evicted
        if expired or evicted:
            logger.info(f"Cache sweep removed {expired} expired and {evicted} excess entries")
        return expired + evicted

    # ------------------------------------------------------------------
    # Periodic sweeping
    # ------------------------------------------------------------------

    def start_sweeper(self, interval: float = DEFAULT_SWEEP_INTERVAL) -> asyncio.Task[None]:
        """Run sweep() every ``interval`` seconds on the running loop."""
        if self._sweeper is not None and not self._sweeper.done():
            return self._sweeper

        async def _run() -> None:
            while True:
                await asyncio.sleep(interval)
                self.sweep()

        self._sweeper = asyncio.get_running_loop().create_task(_run(), name="result-cache-sweeper")
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None

    # ------------------------------------------------------------------

    def _entries(self) -> list[tuple[str, CacheEntry]]:
        pairs = []
        for key in list(self._store.keys()):
            entry = self._store.get(key)
            if entry is not None:
                pairs.append((key, entry))
        return pairs

    def _enforce_capacity(self) -> int:
        excess = len(self._store) - self._capacity
        if excess <= 0:
            return 0
        oldest = sorted(self._entries(), key=lambda pair: pair[1].created_at)[:excess]
        for key, _ in oldest:
            self._store.delete(key)
        logger.debug(f"Evicted {len(oldest)} oldest cache entries")
        return len(oldest)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, item: tuple[str, int]) -> bool:
        query, page = item
        return self._store.get(self.make_key(query, page)) is not None
