"""Search-box suggestions for partial queries."""

from __future__ import annotations

COMMON_DIAGRAM_TYPES: tuple[str, ...] = (
    "flowchart",
    "sequence diagram",
    "entity relationship diagram",
    "class diagram",
    "use case diagram",
    "state diagram",
    "activity diagram",
    "component diagram",
    "deployment diagram",
    "uml diagram",
    "mind map",
    "concept map",
    "process flow",
    "data flow diagram",
    "network diagram",
    "system architecture",
    "database schema",
)

ACADEMIC_FIELDS: tuple[str, ...] = (
    "biology",
    "chemistry",
    "physics",
    "mathematics",
    "computer science",
    "engineering",
    "medicine",
    "psychology",
    "sociology",
    "economics",
    "business",
    "history",
    "geography",
    "linguistics",
    "education",
)


def get_search_suggestions(query: str, limit: int = 5) -> list[str]:
    """
    Suggestions containing the typed text.

    Exact matches come first, then prefix matches, then the rest, each
    group alphabetical. Queries shorter than two characters get none.
    """
    typed = query.strip().lower()
    if len(typed) < 2:
        return []

    candidates = [t for t in COMMON_DIAGRAM_TYPES if typed in t]
    candidates += [f"{field} diagram" for field in ACADEMIC_FIELDS if typed in field]

    def order(suggestion: str) -> tuple[int, str]:
        if suggestion == typed:
            return (0, suggestion)
        if suggestion.startswith(typed):
            return (1, suggestion)
        return (2, suggestion)

    return sorted(dict.fromkeys(candidates), key=order)[:limit]
