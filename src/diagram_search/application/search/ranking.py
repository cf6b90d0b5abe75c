"""
Relevance Ranker

Scores result items against a query and orders them, best first.

Scoring:
- +3 if the title contains the whole (normalized) query
- +1 per query token among the title words
- +2 per query token among the tag words
- +2 per intent keyword in the title/tags, for each intent the query
  signals (educational, professional, technical)

Ranking is pure and stable: equal scores keep their input order.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from diagram_search.domain.entities.result import ResultItem

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[a-z0-9]+")

INTENT_KEYWORDS: dict[str, frozenset[str]] = {
    "educational": frozenset({
        "education", "educational", "learn", "learning", "study", "concept",
        "lesson", "tutorial", "teaching", "student", "school", "explained",
    }),
    "professional": frozenset({
        "business", "professional", "corporate", "presentation", "management",
        "strategy", "marketing", "report", "organization", "finance",
    }),
    "technical": frozenset({
        "technical", "engineering", "architecture", "system", "software",
        "network", "database", "circuit", "algorithm", "schematic", "uml",
    }),
}


def tokenize(text: str) -> list[str]:
    """Unique lower-case alphanumeric tokens in order of appearance."""
    return list(dict.fromkeys(_TOKEN_RE.findall(text.casefold())))


def _words(parts: Iterable[str]) -> set[str]:
    words: set[str] = set()
    for part in parts:
        words.update(_TOKEN_RE.findall(part.casefold()))
    return words


@dataclass(frozen=True)
class ScoreBreakdown:
    """Score of one item with the reasons that produced it."""

    score: float
    reasons: list[str] = field(default_factory=list)


class RelevanceRanker:
    """
    Deterministic relevance ordering.

    Example:
        ranker = RelevanceRanker()
        ranked = ranker.rank(items, "network diagram")
    """

    def __init__(self, intent_keywords: dict[str, frozenset[str]] | None = None):
        self._intents = intent_keywords if intent_keywords is not None else INTENT_KEYWORDS

    def detect_intents(self, query: str) -> list[str]:
        tokens = set(tokenize(query))
        return [name for name, keywords in self._intents.items() if tokens & keywords]

    def explain(self, item: ResultItem, query: str) -> ScoreBreakdown:
        normalized = " ".join(query.casefold().split())
        tokens = tokenize(query)
        title = " ".join(item.title.casefold().split())
        title_words = _words([item.title])
        tag_words = _words(item.tags)

        score = 0.0
        reasons: list[str] = []

        if normalized and normalized in title:
            score += 3
            reasons.append("title contains query")

        in_title = [t for t in tokens if t in title_words]
        if in_title:
            score += len(in_title)
            reasons.append(f"title tokens: {', '.join(in_title)}")

        in_tags = [t for t in tokens if t in tag_words]
        if in_tags:
            score += 2 * len(in_tags)
            reasons.append(f"tag tokens: {', '.join(in_tags)}")

        item_words = title_words | tag_words
        for intent in self.detect_intents(query):
            hits = sorted(self._intents[intent] & item_words)
            if hits:
                score += 2 * len(hits)
                reasons.append(f"{intent} intent: {', '.join(hits)}")

        return ScoreBreakdown(score=score, reasons=reasons)

    def score(self, item: ResultItem, query: str) -> float:
        return self.explain(item, query).score

    def rank(self, items: Sequence[ResultItem], query: str) -> list[ResultItem]:
        """Items with relevance_score set, highest first; ties keep input order."""
        scored = [item.with_score(self.score(item, query)) for item in items]
        ranked = sorted(scored, key=lambda item: -item.relevance_score)
        if ranked:
            logger.debug(f"Ranked {len(ranked)} item(s) for {query!r}; top score {ranked[0].relevance_score}")
        return ranked
