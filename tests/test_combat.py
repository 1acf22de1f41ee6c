"""
Tests for the combat resolver.
"""

from __future__ import annotations

import pytest

from adventure.skills.combat import (
    CombatStats,
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


@pytest.fixture
def attacker() -> CombatStats:
    return CombatStats(name="Hero", strength=10, agility=10)


@pytest.fixture
def defender() -> CombatStats:
    return CombatStats(name="Goblin", strength=10, agility=10)


# =============================================================================
# Formulas
# =============================================================================


class TestFormulas:
    """Tests for the combat formulas and their clamps."""

    def test_even_hit_chance(self):
        assert hit_chance(10, 10) == 60

    def test_hit_chance_clamped_low(self):
        assert hit_chance(0, 100) == 20

    def test_hit_chance_clamped_high(self):
        assert hit_chance(100, 0) == 95

    def test_crit_chance_clamps(self):
        assert crit_chance(0) == 1
        assert crit_chance(10) == 5
        assert crit_chance(100) == 50

    def test_flee_chance_clamps(self):
        assert flee_chance(0, 100) == 15
        assert flee_chance(10, 10) == 50
        assert flee_chance(100, 0) == 95

    def test_base_damage(self):
        assert base_damage(10) == 5
        assert base_damage(12) == 6
        assert base_damage(9) == 4
        assert base_damage(0) == 1
        assert base_damage(10, weapon_bonus=8) == 13

    def test_armor_reduction_capped(self):
        assert armor_reduction(0) == 0
        assert armor_reduction(7) == 3
        assert armor_reduction(1000) == 15


# =============================================================================
# Attacks
# =============================================================================


class TestResolveAttack:
    """Tests for resolve_attack."""

    def test_plain_hit(self, attacker: CombatStats, defender: CombatStats, rolls):
        # Hit roll 0, crit roll 99 (no crit)
        result = resolve_attack(attacker, defender, rolls(0, 99))
        assert result.hit is True
        assert result.critical is False
        assert result.final_damage == 5
        assert result.message == "Hero attacks Goblin for 5 damage"

    def test_miss_draws_one_roll(self, attacker: CombatStats, defender: CombatStats, rolls):
        source = rolls(60)
        result = resolve_attack(attacker, defender, source)
        assert result.hit is False
        assert result.final_damage == 0
        assert result.message == "Goblin dodges the attack!"
        assert source.requested == [100]

    def test_critical_hit(self, attacker: CombatStats, defender: CombatStats, rolls):
        result = resolve_attack(attacker, defender, rolls(0, 0))
        assert result.critical is True
        assert result.final_damage == 7
        assert "CRITICAL HIT!" in result.message

    def test_armor_cap(self, defender: CombatStats, rolls):
        brute = CombatStats(name="Brute", strength=40, agility=10)
        tank = CombatStats(name="Tank", agility=10, armor=1000)
        result = resolve_attack(brute, tank, rolls(0, 99))
        assert result.damage == 20
        assert result.reduction == 15
        assert result.final_damage == 5
        assert "(20 - 15 armor = 5)" in result.message

    def test_landed_hit_deals_at_least_one(self, attacker: CombatStats, rolls):
        wall = CombatStats(name="Wall", agility=10, armor=30)
        result = resolve_attack(attacker, wall, rolls(0, 99))
        assert result.final_damage == 1

    def test_weapon_bonus_applies(self, defender: CombatStats, rolls):
        armed = CombatStats(name="Hero", strength=10, agility=10, weapon_bonus=8)
        result = resolve_attack(armed, defender, rolls(0, 99))
        assert result.final_damage == 13


class TestFlee:
    """Tests for attempt_flee."""

    def test_roll_below_chance_escapes(self, attacker: CombatStats, defender: CombatStats, rolls):
        result = attempt_flee(attacker, defender, rolls(49))
        assert result.succeeded is True
        assert result.message == "You successfully escape from Goblin! (Roll 49 vs 50% chance)"

    def test_roll_at_chance_fails(self, attacker: CombatStats, defender: CombatStats, rolls):
        result = attempt_flee(attacker, defender, rolls(50))
        assert result.succeeded is False
        assert "cuts off your escape" in result.message


class TestCompanions:
    def test_no_companions(self):
        result = companion_assistance([])
        assert result.damage_bonus == 0
        assert not result.has_companions

    def test_fifth_of_damage_per_companion(self):
        ranger = CombatStats(name="Sylva", strength=13, agility=15)
        smith = CombatStats(name="Gruff", strength=14, agility=9, weapon_bonus=8)
        result = companion_assistance([ranger, smith])
        # floor(0.2 * 6) + floor(0.2 * 15)
        assert result.damage_bonus == 1 + 3
        assert result.messages == [
            "Sylva darts in with a swift flurry of blows!",
            "Gruff charges in with a powerful strike!",
        ]


def test_health_bar():
    assert health_bar(50, 100, 20) == "[██████████░░░░░░░░░░] 050%"
    assert health_bar(100, 100, 10) == "[██████████] 100%"
    assert health_bar(-5, 100, 4) == "[░░░░] 000%"
