"""
Query Enhancement and Tag Generation

Turns a user query into the provider query string (exact phrase plus
diagram-oriented modifiers) and derives display tags for provider hits.
"""

from __future__ import annotations

import re

DOMAIN_TERMS: tuple[str, ...] = (
    "diagram",
    "educational",
    "visualization",
    "infographic",
)

DATA_STRUCTURE_TOKENS = frozenset({"algorithm", "algorithms", "dsa"})
DATA_STRUCTURE_SUFFIX = "educational computer science visualization diagram"

EDUCATIONAL_TAG_KEYWORDS: tuple[str, ...] = (
    "diagram", "concept", "visual", "model", "theory", "framework", "map",
)

MAX_TAGS = 8

_NON_WORD_RE = re.compile(r"[^a-z0-9]")


def core_terms(query: str) -> list[str]:
    """Lower-cased query words longer than two characters."""
    return [term for term in query.lower().split() if len(term) > 2]


def is_data_structure_query(query: str) -> bool:
    lowered = " ".join(query.lower().split())
    return "data structure" in lowered or not DATA_STRUCTURE_TOKENS.isdisjoint(lowered.split())


def enhance_query(query: str) -> str:
    """
    Provider query for a user query.

    The query is quoted as an exact phrase and followed by the domain
    terms that none of its core terms already cover, e.g.
    ``network topology`` -> ``"network topology" diagram educational
    visualization infographic``. Data-structure and algorithm queries
    get a computer-science suffix instead.
    """
    query = " ".join(query.split())
    if is_data_structure_query(query):
        return f'"{query}" {DATA_STRUCTURE_SUFFIX}'

    terms = core_terms(query)
    extra = [term for term in DOMAIN_TERMS if not any(core in term for core in terms)]
    return f'"{query}" {" ".join(extra)}'.strip()


def _words(text: str) -> list[str]:
    words = (_NON_WORD_RE.sub("", word) for word in text.lower().split())
    return [word for word in words if word]


def generate_tags(title: str, snippet: str = "") -> tuple[str, ...]:
    """
    Display tags for a hit, drawn from its own text only.

    Up to three title words and two snippet words longer than three
    characters, then educational keywords found in the title or
    snippet. Unique, at most eight. Query terms are not copied in.
    """
    title_lower = title.lower()
    snippet_lower = snippet.lower()

    title_words = [w for w in _words(title) if len(w) > 3]
    snippet_words = [w for w in _words(snippet) if len(w) > 3 and w not in title_words]
    keywords = [
        k for k in EDUCATIONAL_TAG_KEYWORDS
        if k in title_lower or k in snippet_lower
    ]

    tags = [*title_words[:3], *snippet_words[:2], *keywords]
    return tuple(dict.fromkeys(tags))[:MAX_TAGS]
