"""
Fuzzy Name Matching Skill.

Resolves a player's free-text reference ("north", "gruk", "the potion")
against the display names of exits, characters and items.
"""

from __future__ import annotations

from collections.abc import Sequence

# Words ignored when comparing references word by word
STOP_WORDS = frozenset({"the", "a", "an", "to", "into", "at", "in", "on", "and", "my", "of"})


def normalize(text: str) -> str:
    """Lowercase and collapse whitespace."""
    return " ".join(text.lower().split())


def match_name(query: str, candidates: Sequence[str]) -> int | None:
    """
    Find the candidate a query refers to.

    Precedence (first tier with a hit wins, earliest candidate within a tier):
    1. Exact match, case-insensitive.
    2. Keyword-in-command: the candidate's full name appears inside the query
       ("go through the north gate" -> "North Gate").
    3. Substring: the query appears inside the candidate's name
       ("gruk" -> "King Gruk").

    Args:
        query: What the player typed
        candidates: Display names to search

    Returns:
        Index of the matched candidate, or None
    """
    q = normalize(query)
    if not q:
        return None

    names = [normalize(c) for c in candidates]

    for i, name in enumerate(names):
        if name and name == q:
            return i

    for i, name in enumerate(names):
        if name and name in q:
            return i

    for i, name in enumerate(names):
        if name and q in name:
            return i

    return None


def significant_words(text: str) -> list[str]:
    """Split text into words, dropping stop words."""
    words = normalize(text).replace("-", " ").split()
    return [w for w in words if w not in STOP_WORDS]


def strip_keywords(text: str, keywords: set[str] | frozenset[str]) -> str:
    """Remove command keywords and return the remaining target text."""
    words = normalize(text).split()
    return " ".join(w for w in words if w not in keywords)
