"""Tests for query enhancement, tag generation and suggestions."""

from diagram_search.application.search.query_enhancer import (
    DATA_STRUCTURE_SUFFIX,
    enhance_query,
    generate_tags,
    is_data_structure_query,
)
from diagram_search.application.search.suggestions import get_search_suggestions

# ============================================================
# Query Enhancement
# ============================================================


class TestEnhanceQuery:
    def test_adds_domain_terms(self):
        assert enhance_query("network topology") == (
            '"network topology" diagram educational visualization infographic'
        )

    def test_skips_terms_already_covered(self):
        enhanced = enhance_query("network diagram")
        assert enhanced.startswith('"network diagram" ')
        assert enhanced.count("diagram") == 1

    def test_collapses_whitespace(self):
        assert enhance_query("  cell   cycle ").startswith('"cell cycle"')

    def test_data_structure_specialization(self):
        assert enhance_query("binary tree data structure") == (
            f'"binary tree data structure" {DATA_STRUCTURE_SUFFIX}'
        )
        assert is_data_structure_query("sorting algorithm")
        assert is_data_structure_query("DSA cheatsheet")
        assert not is_data_structure_query("data flow")


# ============================================================
# Tags
# ============================================================


class TestGenerateTags:
    def test_only_hit_text(self):
        tags = generate_tags("Star topology layout")
        assert tags == ("star", "topology", "layout")
        assert "network" not in tags

    def test_title_and_snippet_words(self):
        tags = generate_tags(
            "Office LAN cabling plan",
            snippet="switches routers firewall",
        )
        assert tags == ("office", "cabling", "plan", "switches", "routers")

    def test_educational_keywords(self):
        tags = generate_tags("Concept map")
        assert "concept" in tags
        assert "map" in tags

    def test_unique_and_limited(self):
        tags = generate_tags(
            "Alpha Bravo Charlie Delta diagram model theory framework",
            snippet="echo foxtrot golf hotel",
        )
        assert len(tags) == 8
        assert len(set(tags)) == len(tags)


# ============================================================
# Suggestions
# ============================================================


class TestSuggestions:
    def test_short_query_has_none(self):
        assert get_search_suggestions("f") == []
        assert get_search_suggestions("   ") == []

    def test_exact_then_prefix_then_alphabetical(self):
        assert get_search_suggestions("flowchart") == ["flowchart"]
        suggestions = get_search_suggestions("flow")
        assert suggestions == ["flowchart", "data flow diagram", "process flow"]

    def test_academic_fields(self):
        assert get_search_suggestions("biol") == ["biology diagram"]

    def test_limit(self):
        assert len(get_search_suggestions("diagram")) == 5
