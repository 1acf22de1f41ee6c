"""
Combat Resolution Skill.

Pure functions over character snapshots. Equipment is resolved into a
CombatStats snapshot before any roll; all randomness comes from a single
injectable RollSource.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from adventure.models.character import Character


MIN_HIT_CHANCE = 20
MAX_HIT_CHANCE = 95
MIN_CRIT_CHANCE = 1
MAX_CRIT_CHANCE = 50
MIN_FLEE_CHANCE = 15
MAX_FLEE_CHANCE = 95
MAX_ARMOR_REDUCTION = 15
CRITICAL_MULTIPLIER = 1.5
COMPANION_DAMAGE_SHARE = 0.2


class RollSource(Protocol):
    """Uniform integer source; random.Random satisfies it."""

    def randrange(self, stop: int) -> int:
        """Return an integer in [0, stop)."""
        ...


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


# =============================================================================
# Snapshots and results
# =============================================================================


class CombatStats(BaseModel):
    """Everything the resolver needs to know about one combatant."""

    name: str
    strength: int = 10
    agility: int = 10
    armor: int = Field(default=0, description="Base armor plus equipped armor bonuses")
    weapon_bonus: int = 0

    @classmethod
    def from_character(cls, character: Character) -> CombatStats:
        return cls(
            name=character.name,
            strength=character.strength,
            agility=character.agility,
            armor=character.total_armor(),
            weapon_bonus=character.weapon_bonus(),
        )


class AttackResult(BaseModel):
    """Outcome of one attack."""

    hit: bool
    critical: bool = False
    roll: int = Field(description="Hit roll in [0, 100)")
    hit_chance: int
    damage: int = Field(default=0, description="Damage before armor")
    reduction: int = 0
    final_damage: int = 0
    message: str


class FleeResult(BaseModel):
    """Outcome of a flee attempt."""

    succeeded: bool
    roll: int
    flee_chance: int
    message: str


class CompanionAssistance(BaseModel):
    """Bonus damage and flavour lines from companions."""

    damage_bonus: int = 0
    messages: list[str] = Field(default_factory=list)

    @property
    def has_companions(self) -> bool:
        return bool(self.messages)


# =============================================================================
# Formulas
# =============================================================================


def accuracy(agility: int) -> int:
    return 70 + 2 * (agility - 10)


def dodge(agility: int) -> int:
    return 10 + 3 * (agility - 10)


def hit_chance(attacker_agility: int, defender_agility: int) -> int:
    return clamp(accuracy(attacker_agility) - dodge(defender_agility), MIN_HIT_CHANCE, MAX_HIT_CHANCE)


def crit_chance(agility: int) -> int:
    return clamp(5 + (agility - 10), MIN_CRIT_CHANCE, MAX_CRIT_CHANCE)


def base_damage(strength: int, weapon_bonus: int = 0) -> int:
    return max(1, 5 + math.floor((strength - 10) / 2)) + weapon_bonus


def armor_reduction(total_armor: int) -> int:
    return min(max(0, total_armor) // 2, MAX_ARMOR_REDUCTION)


def apply_armor(damage: int, total_armor: int) -> int:
    """Damage after armor; a landed hit always deals at least 1."""
    return max(1, damage - armor_reduction(total_armor))


def flee_chance(player_agility: int, enemy_agility: int) -> int:
    return clamp(50 + 5 * (player_agility - enemy_agility), MIN_FLEE_CHANCE, MAX_FLEE_CHANCE)


# =============================================================================
# Resolution
# =============================================================================


def resolve_attack(attacker: CombatStats, defender: CombatStats, rng: RollSource) -> AttackResult:
    """
    Resolve one attack.

    Draws the hit roll first and, only on a hit, the critical roll.

    Args:
        attacker: Attacker snapshot
        defender: Defender snapshot
        rng: Roll source

    Returns:
        AttackResult with the combat log line in ``message``
    """
    chance = hit_chance(attacker.agility, defender.agility)
    roll = rng.randrange(100)
    if roll >= chance:
        return AttackResult(
            hit=False,
            roll=roll,
            hit_chance=chance,
            message=f"{defender.name} dodges the attack!",
        )

    damage = base_damage(attacker.strength, attacker.weapon_bonus)
    critical = rng.randrange(100) < crit_chance(attacker.agility)
    if critical:
        damage = int(damage * CRITICAL_MULTIPLIER)

    reduction = armor_reduction(defender.armor)
    final = max(1, damage - reduction)

    crit_text = " CRITICAL HIT!" if critical else ""
    armor_text = f" ({damage} - {reduction} armor = {final})" if reduction > 0 else ""
    return AttackResult(
        hit=True,
        critical=critical,
        roll=roll,
        hit_chance=chance,
        damage=damage,
        reduction=reduction,
        final_damage=final,
        message=f"{attacker.name} attacks {defender.name} for {final} damage{crit_text}{armor_text}",
    )


def attempt_flee(player: CombatStats, enemy: CombatStats, rng: RollSource) -> FleeResult:
    """Roll to escape combat; succeeds iff roll < flee chance."""
    chance = flee_chance(player.agility, enemy.agility)
    roll = rng.randrange(100)
    succeeded = roll < chance
    if succeeded:
        message = f"You successfully escape from {enemy.name}! (Roll {roll} vs {chance}% chance)"
    else:
        message = (
            f"You try to flee but {enemy.name} cuts off your escape! "
            f"(Roll {roll} vs {chance}% chance)"
        )
    return FleeResult(succeeded=succeeded, roll=roll, flee_chance=chance, message=message)


def companion_assistance(companions: list[CombatStats]) -> CompanionAssistance:
    """Each companion adds a fifth of their own damage to the player's hit."""
    result = CompanionAssistance()
    for companion in companions:
        total = base_damage(companion.strength, companion.weapon_bonus)
        result.damage_bonus += math.floor(COMPANION_DAMAGE_SHARE * total)
        if companion.strength >= companion.agility:
            result.messages.append(f"{companion.name} charges in with a powerful strike!")
        else:
            result.messages.append(f"{companion.name} darts in with a swift flurry of blows!")
    return result


def health_bar(current: int, maximum: int, width: int = 20) -> str:
    """Render ``[████░░░░] 050%``."""
    maximum = max(1, maximum)
    current = clamp(current, 0, maximum)
    percent = current * 100 // maximum
    filled = percent * width // 100
    return f"[{'█' * filled}{'░' * (width - filled)}] {percent:03d}%"
