"""Query sessions: pagination, deduplication and state."""

from .aggregator import (
    PaginationAggregator,
    SearchSession,
    SessionSnapshot,
    SessionState,
)

__all__ = [
    "PaginationAggregator",
    "SearchSession",
    "SessionSnapshot",
    "SessionState",
]
