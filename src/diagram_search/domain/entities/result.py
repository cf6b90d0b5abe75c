"""
Domain Entity: ResultItem / ResultPage

A single diagram image result and one page of results as returned by
the search client. Pure domain entities; provider payload mapping is
handled by the infrastructure layer.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlsplit, urlunsplit

FALLBACK_SCHEME = "fallback"


def normalize_image_location(location: str) -> str:
    """
    Deduplication identity of an image URL.

    Query string and fragment are dropped; scheme and host are
    case-folded. ``X?a=1`` and ``X?a=2`` therefore normalize equally.
    """
    parts = urlsplit(location.strip())
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, "", ""))


class PageOrigin(str, Enum):
    """Where a result page came from."""

    LIVE = "live"
    CACHE = "cache"
    FALLBACK = "fallback"
    STALE_CACHE = "stale_cache"


@dataclass(frozen=True)
class ResultItem:
    """
    One image result.

    Identity for deduplication is ``dedup_key`` (the normalized image
    location), not ``id``. ``relevance_score`` is derived by the ranker
    and excluded from equality and serialization.
    """

    id: str
    title: str
    image_location: str
    author: str | None = None
    tags: tuple[str, ...] = ()
    source_location: str | None = None
    is_generated: bool = False
    relevance_score: float = field(default=0.0, compare=False)

    @property
    def dedup_key(self) -> str:
        return normalize_image_location(self.image_location)

    @property
    def is_fallback(self) -> bool:
        """Whether this item came from the offline fallback collections."""
        return bool(self.source_location and self.source_location.startswith(f"{FALLBACK_SCHEME}://"))

    def with_score(self, score: float) -> ResultItem:
        return dataclasses.replace(self, relevance_score=score)

    def to_dict(self) -> dict:
        """Serialize to dictionary (score is not persisted)."""
        data = dataclasses.asdict(self)
        data.pop("relevance_score")
        data["tags"] = list(self.tags)
        return data


@dataclass
class ResultPage:
    """One search client response."""

    query: str
    page: int
    items: list[ResultItem] = field(default_factory=list)
    origin: PageOrigin = PageOrigin.LIVE
    notice: str | None = None  # why the page is degraded, if it is

    @property
    def is_degraded(self) -> bool:
        return self.origin in (PageOrigin.FALLBACK, PageOrigin.STALE_CACHE)

    @property
    def stale(self) -> bool:
        return self.origin is PageOrigin.STALE_CACHE

    def __len__(self) -> int:
        return len(self.items)
