"""
Stateless Skills for the adventure engine.

Skills are pure functions that:
- Take character snapshots or definition models as input
- Compute rules outcomes (combat, gathering, crafting, trade, matching)
- NEVER mutate session state
- NEVER call LLMs
"""

from adventure.skills.combat import (
    AttackResult,
    CombatStats,
    CompanionAssistance,
    FleeResult,
    RollSource,
    armor_reduction,
    attempt_flee,
    base_damage,
    companion_assistance,
    crit_chance,
    flee_chance,
    health_bar,
    hit_chance,
    resolve_attack,
)
from adventure.skills.gathering import GatherRoll, gather_chance, roll_gather
from adventure.skills.matching import match_name, normalize, strip_keywords
from adventure.skills.trade import TradeQuote, buy_quote, experience_for_defeat, sell_quote

__all__ = [
    # Combat
    "AttackResult",
    "CombatStats",
    "CompanionAssistance",
    "FleeResult",
    "RollSource",
    "armor_reduction",
    "attempt_flee",
    "base_damage",
    "companion_assistance",
    "crit_chance",
    "flee_chance",
    "health_bar",
    "hit_chance",
    "resolve_attack",
    # Gathering
    "GatherRoll",
    "gather_chance",
    "roll_gather",
    # Matching
    "match_name",
    "normalize",
    "strip_keywords",
    # Trade
    "TradeQuote",
    "buy_quote",
    "experience_for_defeat",
    "sell_quote",
]
