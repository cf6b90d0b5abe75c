"""Search: ranking, query enhancement, suggestions and the page client."""

from .query_enhancer import enhance_query, generate_tags
from .ranking import RelevanceRanker, ScoreBreakdown
from .suggestions import get_search_suggestions
from .client import SearchClient, hit_to_item

__all__ = [
    "SearchClient",
    "RelevanceRanker",
    "ScoreBreakdown",
    "enhance_query",
    "generate_tags",
    "get_search_suggestions",
    "hit_to_item",
]
