"""Tests for relevance ranking."""

import pytest

from diagram_search.application.search.ranking import RelevanceRanker, tokenize


@pytest.fixture
def ranker():
    return RelevanceRanker()


class TestScoring:
    def test_full_query_in_title(self, ranker, make_item):
        # +3 full query, +1 network, +1 diagram, +2 technical intent (network)
        assert ranker.score(make_item(title="Network Diagram Example"), "network diagram") == 7

    def test_tokens_in_title_only(self, ranker, make_item):
        assert ranker.score(make_item(title="Diagram of a plant cell"), "cell diagram") == 2

    def test_tag_matches(self, ranker, make_item):
        item = make_item(title="Untitled", tags=("star", "topology"))
        assert ranker.score(item, "star topology") == 4

    def test_intent_bonus(self, ranker, make_item):
        # "learning" signals the educational intent; item mentions "study" and "concept"
        item = make_item(title="Concept study sheet")
        assert ranker.score(item, "photosynthesis learning") == 4

    def test_no_intent_no_bonus(self, ranker, make_item):
        assert ranker.score(make_item(title="Concept study sheet"), "photosynthesis") == 0

    def test_detect_intents(self, ranker):
        assert ranker.detect_intents("business network architecture") == ["professional", "technical"]
        assert ranker.detect_intents("zebra") == []

    def test_explain_lists_reasons(self, ranker, make_item):
        breakdown = ranker.explain(make_item(title="Network Diagram"), "network diagram")
        assert breakdown.score == 7
        assert "title contains query" in breakdown.reasons


class TestRank:
    def test_monotonicity(self, ranker, make_item):
        relevant = make_item(title="Network Diagram Example", location="https://x/1.png")
        unrelated = make_item(title="Unrelated Chart", location="https://x/2.png")

        ranked = ranker.rank([unrelated, relevant], "network diagram")

        assert ranked[0] == relevant
        assert ranked[0].relevance_score > ranked[1].relevance_score

    def test_stable_for_ties(self, ranker, make_item):
        items = [make_item(title=f"Chart {i}", location=f"https://x/{i}.png") for i in range(5)]
        assert ranker.rank(items, "zebra") == items

    def test_pure(self, ranker, make_item):
        items = [make_item(title="Network Diagram")]
        ranker.rank(items, "network diagram")
        assert items[0].relevance_score == 0.0

    def test_deterministic(self, ranker, make_item):
        items = [make_item(title=t, location=f"https://x/{t}.png") for t in ("B network", "A diagram", "C")]
        assert ranker.rank(items, "network diagram") == ranker.rank(items, "network diagram")


def test_tokenize_unique_in_order():
    assert tokenize("ER-Diagram er diagram!") == ["er", "diagram"]
