"""
Tests for the turn pipeline.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from adventure.engine import ActionKind, EngineConfig, GameEngine
from adventure.engine.display import NOT_UNDERSTOOD
from adventure.engine.game import GAME_OVER, HANDLER_FAILURE, TURN_FAILURE
from adventure.models import Game, WinCondition, WinConditionType
from adventure.services import LLMService, MockLLMProvider


@pytest.fixture
def start(game: Game, rolls):
    """Factory: ``start(0, 99)`` begins an offline session with scripted rolls."""

    def factory(*roll_values: int, llm: LLMService | None = None, config: EngineConfig | None = None) -> GameEngine:
        return GameEngine.start(game, player_name="Hero", llm=llm, config=config, rng=rolls(*roll_values))

    return factory


# =============================================================================
# Session setup
# =============================================================================


class TestStart:
    def test_definition_is_not_shared(self, start, game: Game):
        engine = start()
        engine.state.npcs["dragon"].take_damage(50)
        assert game.npcs["dragon"].health == 200

    def test_introduction(self, start):
        text = start().introduction()
        assert text.startswith("=== The Dragon's Hoard ===\nA Classic Fantasy Adventure")
        assert "🎯 Objective: Defeat Infernus" in text
        assert "📍 **Location:** Ravensholm Town Square" in text
        assert "💰 **Currency:** 🪙 75 Gold, 🥈 0 Silver" in text

    def test_invalid_game_is_rejected(self):
        with pytest.raises(ValueError):
            GameEngine.start(Game(id="broken", title="Broken", starting_room_id="nowhere"))

    def test_command_window_follows_config(self, start):
        engine = start(config=EngineConfig(recent_command_window=2))
        assert engine.state.recent_command_limit == 2


# =============================================================================
# Offline turns
# =============================================================================


class TestOfflineTurns:
    """Turns with no LLM: fallback parser and template narration."""

    @pytest.mark.asyncio
    async def test_move_with_footer(self, start):
        engine = start()
        result = await engine.process_turn("go north")

        assert result.response.startswith("You go North. You arrive at Forest Entrance.")
        assert "📍 **Location:** Forest Entrance" in result.response
        assert "🚪 **Exits:** South, Deeper Into Forest, Up The Slope" in result.response
        assert [i.action for i in result.intents] == [ActionKind.MOVE]
        assert result.turn_number == 1
        assert engine.state.recent_commands == ["go north"]

    @pytest.mark.asyncio
    async def test_not_understood(self, start):
        engine = start()
        result = await engine.process_turn("Norht")
        assert result.response.startswith(NOT_UNDERSTOOD)
        assert result.intents == []
        assert engine.state.current_room_id == "town_square"

    @pytest.mark.asyncio
    async def test_dead_npc_marked_in_footer(self, start):
        engine = start()
        engine.state.npcs["town_crier"].take_damage(1000)
        response = await engine.respond("look")
        assert "👥 **NPCs Here:** Gruff the Blacksmith | ☠️ Herald Aldous" in response

    @pytest.mark.asyncio
    async def test_quest_completion_is_announced(self, start):
        engine = start(0, 99)
        state = engine.state
        king = state.npcs["goblin_king"]
        king.health = 1
        state.player.carried_items.add_item(king.carried_items.get_item("magic_key").item)
        king.release_item("magic_key")
        state.relocate_party("goblin_cave")

        response = await engine.respond("attack gruk")

        assert "📜 Quest complete: The Goblin Menace!" in response
        assert state.player.experience == 50 + 100
        assert state.player.wallet.total == 7500 + 3000 + 5000


# =============================================================================
# Combat
# =============================================================================


class TestCombatTurns:
    """Tests for combat mode across turns."""

    @pytest.fixture
    def engine(self, start) -> GameEngine:
        engine = start()
        engine.state.relocate_party("goblin_cave")
        engine.state.enter_combat("goblin_king")
        return engine

    @pytest.mark.asyncio
    async def test_cannot_walk_away(self, engine: GameEngine):
        response = await engine.respond("go back to forest")
        assert response.startswith("You're in combat with King Gruk! Attack or flee.")
        assert engine.state.current_room_id == "goblin_cave"

    @pytest.mark.asyncio
    async def test_cannot_teleport_away(self, engine: GameEngine):
        engine.state.player.carried_items.add_item(engine.game.items["home_scroll"])

        response = await engine.respond("use scroll of home")

        assert response.startswith("You're in combat with King Gruk! Attack or flee.")
        assert engine.state.current_room_id == "goblin_cave"
        assert engine.state.combat_npc_id == "goblin_king"
        assert "home_scroll" in engine.state.player.carried_items

    @pytest.mark.asyncio
    async def test_any_action_keeps_health_bars(self, engine: GameEngine):
        response = await engine.respond("inventory")
        assert response.startswith("Inventory:")
        assert "=== COMBAT MODE ===" in response
        assert "📍" not in response

    @pytest.mark.asyncio
    async def test_status_shows_health_bars(self, engine: GameEngine):
        response = await engine.respond("status")
        assert response.startswith("=== COMBAT MODE ===")
        assert response.count("=== COMBAT MODE ===") == 1
        assert "King Gruk: [████████████████████] 100% 100/100 HP" in response
        assert "📍" not in response

    @pytest.mark.asyncio
    async def test_attack_shows_health_bars_once(self, start):
        engine = start(0, 99, 0, 99)
        engine.state.relocate_party("goblin_cave")

        response = await engine.respond("attack gruk")

        assert "🚨 Goblin Shaman looks ready to turn on you!" in response
        assert response.count("=== COMBAT MODE ===") == 1
        assert response.rstrip().endswith("Commands: attack|fight|flee|status|stop")

    @pytest.mark.asyncio
    async def test_flee_restores_footer(self, start):
        engine = start(49)
        engine.state.relocate_party("goblin_cave")
        engine.state.enter_combat("goblin_king")

        response = await engine.respond("flee")

        assert response.startswith("You successfully escape from King Gruk!")
        assert "📍 **Location:** Goblin Cave" in response
        assert not engine.state.in_combat

    @pytest.mark.asyncio
    async def test_game_over(self, start):
        engine = start(0, 99, 0, 99)
        engine.state.relocate_party("goblin_cave")
        engine.state.player.health = 1

        result = await engine.process_turn("attack gruk")

        assert result.game_over
        assert "💀 YOU HAVE BEEN DEFEATED! Game Over." in result.response

        # No rolls left: a further turn must not reach the executor
        after = await engine.process_turn("attack gruk")
        assert after.response == GAME_OVER
        assert after.game_over

    @pytest.mark.asyncio
    async def test_victory(self, start):
        engine = start(0, 99)
        engine.state.relocate_party("dragon_lair")
        engine.state.npcs["dragon"].health = 1

        result = await engine.process_turn("attack infernus")

        assert result.victory
        assert engine.victory
        assert "🏆 **VICTORY!** 🏆" in result.response
        assert "Infernus falls, and the mountain trembles." in result.response
        assert "dragon" in engine.state.rooms["dragon_lair"].npc_ids


# =============================================================================
# Win conditions
# =============================================================================


class TestWinConditions:
    def test_room_condition(self, game: Game, start):
        game.win_conditions = [
            WinCondition(type=WinConditionType.ROOM, target_id="tavern", victory_message="Ale for all!")
        ]
        engine = start()
        assert engine.check_win_condition() is None
        engine.state.relocate_party("tavern")
        assert engine.check_win_condition() == "Ale for all!"

    def test_item_condition(self, game: Game, start):
        game.win_conditions = [WinCondition(type=WinConditionType.ITEM, target_id="crown_of_amalion")]
        engine = start()
        engine.state.player.carried_items.add_item(game.items["crown_of_amalion"])
        assert engine.check_win_condition() == "You have achieved victory!"

    def test_legacy_room_list(self, game: Game, start):
        game.win_conditions = []
        game.win_condition_room_ids = ["marketplace"]
        engine = start()
        engine.state.relocate_party("marketplace")
        assert engine.check_win_condition() == "You have achieved victory!"

    def test_legacy_list_ignored_when_conditions_exist(self, game: Game, start):
        game.win_condition_room_ids = ["town_square"]
        assert start().check_win_condition() is None


# =============================================================================
# LLM turns and failures
# =============================================================================


class TestLLMTurns:
    """Turns driven through the mock provider."""

    @pytest.mark.asyncio
    async def test_interpret_then_narrate(self, start, llm: LLMService, provider: MockLLMProvider):
        provider.enqueue('[{"action": "move", "target": "east"}]', "Warmth and song greet you in the tavern.")
        engine = start(llm=llm)

        result = await engine.process_turn("head into the tavern")

        assert engine.state.current_room_id == "tavern"
        assert result.narration == "Warmth and song greet you in the tavern."
        assert "📍 **Location:** The Wandering Wyvern Tavern" in result.response
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_dialogue_is_not_renarrated(self, start, llm: LLMService, provider: MockLLMProvider):
        provider.enqueue(
            '[{"action": "talk", "target": "Herald Aldous"}]',
            "The player greets you",
            "Hear ye, hear ye!",
        )
        engine = start(llm=llm)

        response = await engine.respond("hello herald")

        assert response.startswith('Herald Aldous says: "Hear ye, hear ye!"')
        assert len(provider.calls) == 3

    @pytest.mark.asyncio
    async def test_multiple_intents_run_in_order(self, start, llm: LLMService, provider: MockLLMProvider):
        provider.enqueue('[{"action": "move", "target": "north"}, {"action": "move", "target": "south"}]')
        engine = start(llm=llm, config=EngineConfig(use_llm_narration=False))

        result = await engine.process_turn("go north then come back")

        assert [r.result.success for r in result.results] == [True, True]
        assert engine.state.current_room_id == "town_square"
        assert result.response.index("You go North.") < result.response.index("You go South.")

    @pytest.mark.asyncio
    async def test_narration_follows_execution_order(self, start, llm: LLMService, provider: MockLLMProvider):
        provider.enqueue(
            '[{"action": "move", "target": "continue deeper"}, {"action": "attack", "target": "King Gruk"}]',
            "You creep into the reeking cave.",
        )
        engine = start(59, llm=llm)
        engine.state.relocate_party("dark_forest")

        response = await engine.respond("go deeper and attack gruk")

        assert response.startswith("You creep into the reeking cave.")
        assert response.index("You creep into") < response.index("King Gruk dodges the attack!")

    @pytest.mark.asyncio
    async def test_llm_failure_uses_fallback(self, start):
        engine = start(llm=LLMService(provider=MockLLMProvider(fail=True)))
        response = await engine.respond("go north")
        assert response.startswith("You go North.")

    @pytest.mark.asyncio
    async def test_handler_exception_is_contained(self, start):
        engine = start()
        engine.executor.execute = AsyncMock(side_effect=RuntimeError("boom"))
        result = await engine.process_turn("look")
        assert result.response.startswith(HANDLER_FAILURE)
        assert result.error is None

    @pytest.mark.asyncio
    async def test_turn_exception_is_contained(self, start):
        engine = start()
        engine.interpreter.interpret = AsyncMock(side_effect=RuntimeError("boom"))
        result = await engine.process_turn("look")
        assert result.response == TURN_FAILURE
        assert result.error == "boom"
