"""
Tests for fuzzy name matching.
"""

from __future__ import annotations

from adventure.skills.matching import match_name, significant_words, strip_keywords

EXITS = ["North", "Deeper Into Forest", "Up The Slope"]


class TestMatchName:
    """Tests for match_name precedence."""

    def test_exact_is_case_insensitive(self):
        assert match_name("NORTH", EXITS) == 0

    def test_candidate_inside_query(self):
        assert match_name("head deeper into forest please", EXITS) == 1

    def test_query_inside_candidate(self):
        assert match_name("slope", EXITS) == 2

    def test_exact_beats_substring(self):
        assert match_name("gruk", ["King Gruk", "Gruk"]) == 1

    def test_earliest_candidate_wins_within_tier(self):
        assert match_name("potion", ["Health Potion", "Mana Potion"]) == 0

    def test_typo_does_not_match(self):
        assert match_name("Norht", EXITS) is None

    def test_empty_query(self):
        assert match_name("   ", EXITS) is None


def test_significant_words_drop_stop_words():
    assert significant_words("Back to the Town-Square") == ["back", "town", "square"]


def test_strip_keywords():
    assert strip_keywords("Buy the Health Potion", {"buy", "the"}) == "health potion"
