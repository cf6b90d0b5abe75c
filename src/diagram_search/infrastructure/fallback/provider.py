"""
Fallback Content Provider

Deterministic offline results for when live search is unavailable.
Queries are routed to a topic collection by keyword; unmatched queries
get a general mix shuffled by a seed derived from the query, so the
same query always sees the same order. Pages wrap cyclically and never
run out.
"""

from __future__ import annotations

import hashlib
import logging
import random
import re
from collections.abc import Sequence

from diagram_search.core.exceptions import InvalidParameterError
from diagram_search.domain.entities.result import FALLBACK_SCHEME, ResultItem
from diagram_search.infrastructure.cache.result_cache import normalize_query

from .collections import DEFAULT_COLLECTIONS, FallbackCollection

logger = logging.getLogger(__name__)

GENERAL_COLLECTION = "general"

_TOKEN_RE = re.compile(r"[a-z0-9]+")


def query_tokens(query: str) -> set[str]:
    return set(_TOKEN_RE.findall(query.casefold()))


def query_seed(query: str) -> int:
    """Stable 64-bit seed from the normalized query text."""
    digest = hashlib.sha256(normalize_query(query).encode("utf-8")).hexdigest()
    return int(digest[:16], 16)


class FallbackContentProvider:
    """
    Topic-keyed offline collections with cyclic pagination.

    Example:
        fallback = FallbackContentProvider()
        items = fallback.fetch("network diagram", page=1, page_size=10)
    """

    def __init__(self, collections: Sequence[FallbackCollection] | None = None):
        self._collections = tuple(DEFAULT_COLLECTIONS if collections is None else collections)

    @property
    def collections(self) -> tuple[FallbackCollection, ...]:
        return self._collections

    def select(self, query: str) -> FallbackCollection:
        """First collection whose keywords match the query, else a general mix."""
        normalized = normalize_query(query)
        tokens = query_tokens(normalized)
        for collection in self._collections:
            if collection.matches(tokens, normalized):
                logger.debug(f"Fallback collection {collection.name!r} selected for {normalized!r}")
                return collection
        return self._general_mix(normalized)

    def page(
        self,
        collection: FallbackCollection,
        page_number: int,
        page_size: int,
    ) -> list[ResultItem]:
        """
        One page of a collection, wrapping around its end.

        Returns min(page_size, len(collection)) items starting at
        ((page_number - 1) * page_size) mod len(collection).
        """
        if page_number < 1:
            raise InvalidParameterError("page_number", page_number, "an integer >= 1")
        if page_size < 1:
            raise InvalidParameterError("page_size", page_size, "an integer >= 1")

        total = len(collection)
        if total == 0:
            return []

        start = ((page_number - 1) * page_size) % total
        items = []
        for offset in range(min(page_size, total)):
            index = (start + offset) % total
            template = collection.templates[index]
            items.append(
                ResultItem(
                    id=f"fallback-{collection.name}-{index}",
                    title=template.title,
                    image_location=template.image_location,
                    author=template.author,
                    tags=template.tags,
                    source_location=f"{FALLBACK_SCHEME}://{collection.name}/{index}",
                    is_generated=False,
                )
            )
        return items

    def fetch(self, query: str, page: int, page_size: int) -> list[ResultItem]:
        collection = self.select(query)
        items = self.page(collection, page, page_size)
        logger.info(
            f"Serving {len(items)} fallback item(s) from {collection.name!r} "
            f"for {query!r} page {page}"
        )
        return items

    def _general_mix(self, normalized_query: str) -> FallbackCollection:
        seen: set[str] = set()
        templates = []
        for collection in self._collections:
            for template in collection.templates:
                if template.photo_id not in seen:
                    seen.add(template.photo_id)
                    templates.append(template)

        random.Random(query_seed(normalized_query)).shuffle(templates)
        return FallbackCollection(
            name=GENERAL_COLLECTION,
            keywords=frozenset(),
            templates=tuple(templates),
        )
