"""
Tests for intent interpretation.
"""

from __future__ import annotations

import pytest

from adventure.engine import (
    ActionIntent,
    ActionKind,
    FallbackIntentParser,
    IntentInterpreter,
    WorldSnapshot,
    build_snapshot,
    parse_intents,
    render_context,
)
from adventure.models import Game, SessionState
from adventure.services import LLMService, MockLLMProvider


@pytest.fixture
def parser() -> FallbackIntentParser:
    return FallbackIntentParser()


@pytest.fixture
def square(state: SessionState, game: Game) -> WorldSnapshot:
    return build_snapshot(state, game)


def snapshot_at(state: SessionState, game: Game, room_id: str) -> WorldSnapshot:
    state.relocate_party(room_id)
    return build_snapshot(state, game)


# =============================================================================
# Snapshot
# =============================================================================


class TestSnapshot:
    """Tests for build_snapshot and render_context."""

    def test_town_square(self, square: WorldSnapshot):
        assert square.room_name == "Ravensholm Town Square"
        assert square.exits == ["North", "East", "South"]
        assert square.npcs == ["Gruff the Blacksmith", "Herald Aldous"]
        assert square.crafters == ["Gruff the Blacksmith"]
        assert square.inventory == ["Health Potion (consumable)"]
        assert square.economy_enabled is True

    def test_locked_exits_hidden(self, state: SessionState, game: Game):
        snapshot = snapshot_at(state, game, "high_peaks")
        assert snapshot.exits == ["Down The Mountain"]

    def test_dead_npcs_listed_separately(self, state: SessionState, game: Game):
        state.npcs["goblin_shaman"].take_damage(1000)
        snapshot = snapshot_at(state, game, "goblin_cave")
        assert snapshot.npcs == ["King Gruk"]
        assert snapshot.dead_npcs == ["Goblin Shaman"]
        assert "Goblin Shaman (dead)" in render_context(snapshot)

    def test_render_context(self, square: WorldSnapshot):
        context = render_context(square)
        assert "Current Location: Ravensholm Town Square" in context
        assert "Available exits: North, East, South" in context
        assert "Crafters: Gruff the Blacksmith" in context
        assert "In combat: no" in context


# =============================================================================
# Reply parsing
# =============================================================================


class TestParseIntents:
    def test_array_with_prose_around_it(self):
        text = 'Sure! [{"action": "move", "target": "north"}] Hope that helps.'
        assert parse_intents(text) == [ActionIntent(action=ActionKind.MOVE, target="north")]

    def test_lone_object(self):
        intents = parse_intents('{"action": "look"}')
        assert [i.action for i in intents] == [ActionKind.LOOK]

    def test_aliases_and_unknown_actions(self):
        intents = parse_intents('[{"action": "flee"}, {"action": "dance"}, {"action": "Go", "target": "east"}]')
        assert [i.action for i in intents] == [ActionKind.STOP, ActionKind.UNKNOWN, ActionKind.MOVE]

    def test_null_fields_become_empty(self):
        intents = parse_intents('[{"action": "look", "target": null, "details": null}]')
        assert intents[0].target == ""
        assert intents[0].details == ""

    def test_malformed_json(self):
        assert parse_intents("[{action: move}]") == []

    def test_non_object_entries_skipped(self):
        assert parse_intents('["move", 3]') == []

    def test_empty_array(self):
        assert parse_intents("[]") == []


# =============================================================================
# Fallback parser
# =============================================================================


class TestFallbackParser:
    """Tests for the deterministic keyword parser."""

    def test_direction(self, parser: FallbackIntentParser, square: WorldSnapshot):
        intent = parser.parse("go north", square)
        assert intent == ActionIntent(action=ActionKind.MOVE, target="north")

    def test_exit_name_word(self, parser: FallbackIntentParser, state: SessionState, game: Game):
        snapshot = snapshot_at(state, game, "forest_entrance")
        intent = parser.parse("head deeper", snapshot)
        assert intent == ActionIntent(action=ActionKind.MOVE, target="Deeper Into Forest")

    def test_typo_is_not_understood(self, parser: FallbackIntentParser, square: WorldSnapshot):
        assert parser.parse("Norht", square) is None

    def test_action_verb_blocks_movement(self, parser: FallbackIntentParser, square: WorldSnapshot):
        intent = parser.parse("look at the fountain", square)
        assert intent.action == ActionKind.EXAMINE
        assert intent.target == "fountain"

    def test_single_words(self, parser: FallbackIntentParser, square: WorldSnapshot):
        assert parser.parse("i", square).action == ActionKind.INVENTORY
        assert parser.parse("Look", square).action == ActionKind.LOOK
        assert parser.parse("flee", square).action == ActionKind.STOP
        assert parser.parse("quest log", square).action == ActionKind.QUESTS

    def test_shop_needs_economy(self, parser: FallbackIntentParser):
        snapshot = WorldSnapshot(room_name="Hut", economy_enabled=False)
        assert parser.parse("shop", snapshot) is None

    def test_talk(self, parser: FallbackIntentParser, square: WorldSnapshot):
        intent = parser.parse("talk to herald aldous", square)
        assert intent.action == ActionKind.TALK
        assert intent.target == "Herald Aldous"

    def test_crafting_order_through_ask(self, parser: FallbackIntentParser, square: WorldSnapshot):
        intent = parser.parse("ask gruff to forge a dragon slayer sword", square)
        assert intent.action == ActionKind.CRAFT
        assert intent.target == "Gruff the Blacksmith"
        assert intent.details == "dragon slayer sword"

    def test_recipes_before_craft(self, parser: FallbackIntentParser, square: WorldSnapshot):
        intent = parser.parse("what can you make?", square)
        assert intent.action == ActionKind.RECIPES
        assert intent.target == "Gruff the Blacksmith"

    def test_use(self, parser: FallbackIntentParser, square: WorldSnapshot):
        intent = parser.parse("drink health potion", square)
        assert intent == ActionIntent(action=ActionKind.USE, target="health potion")

    def test_use_on_someone(self, parser: FallbackIntentParser, square: WorldSnapshot):
        intent = parser.parse("use health potion on gruff", square)
        assert intent == ActionIntent(action=ActionKind.USE, target="gruff", details="health potion")

    def test_buy_from_named_merchant(self, parser: FallbackIntentParser, state: SessionState, game: Game):
        snapshot = snapshot_at(state, game, "marketplace")
        intent = parser.parse("buy health potion from silara", snapshot)
        assert intent.action == ActionKind.BUY
        assert intent.target == "Silara the Merchant"
        assert intent.details == "health potion"

    def test_attack_by_partial_name(self, parser: FallbackIntentParser, state: SessionState, game: Game):
        snapshot = snapshot_at(state, game, "goblin_cave")
        intent = parser.parse("attack gruk", snapshot)
        assert intent.action == ActionKind.ATTACK
        assert intent.target == "King Gruk"

    def test_attack_in_combat_targets_opponent(self, parser: FallbackIntentParser, state: SessionState, game: Game):
        state.enter_combat("goblin_king")
        snapshot = snapshot_at(state, game, "goblin_cave")
        intent = parser.parse("hit it again", snapshot)
        assert intent.target == "King Gruk"

    def test_follow(self, parser: FallbackIntentParser, state: SessionState, game: Game):
        snapshot = snapshot_at(state, game, "forest_entrance")
        intent = parser.parse("ask sylva to follow me", snapshot)
        assert intent.action == ActionKind.FOLLOW
        assert intent.target == "Sylva the Ranger"

    def test_give_request(self, parser: FallbackIntentParser, state: SessionState, game: Game):
        snapshot = snapshot_at(state, game, "tavern")
        intent = parser.parse("give me your potions, marta", snapshot)
        assert intent.action == ActionKind.GIVE
        assert intent.target == "Marta"

    def test_gather(self, parser: FallbackIntentParser, state: SessionState, game: Game):
        snapshot = snapshot_at(state, game, "forest_entrance")
        intent = parser.parse("search for herbs", snapshot)
        assert intent == ActionIntent(action=ActionKind.GATHER, target="herbs")

    def test_take(self, parser: FallbackIntentParser, square: WorldSnapshot):
        intent = parser.parse("pick up the sword", square)
        assert intent == ActionIntent(action=ActionKind.TAKE, target="sword")


# =============================================================================
# Interpreter
# =============================================================================


class TestIntentInterpreter:
    """Tests for LLM interpretation with fallback."""

    @pytest.mark.asyncio
    async def test_uses_llm_reply(self, llm: LLMService, provider: MockLLMProvider, square: WorldSnapshot):
        provider.enqueue('[{"action": "move", "target": "east"}, {"action": "look"}]')
        interpreter = IntentInterpreter(llm=llm)

        intents = await interpreter.interpret("go east and look around", square)

        assert [i.action for i in intents] == [ActionKind.MOVE, ActionKind.LOOK]
        prompt = provider.calls[0][-1]["content"]
        assert prompt.endswith("Player command: go east and look around")
        assert "Current Location: Ravensholm Town Square" in prompt

    @pytest.mark.asyncio
    async def test_falls_back_on_garbage(self, llm: LLMService, provider: MockLLMProvider, square: WorldSnapshot):
        provider.enqueue("I think they want to go north?")
        intents = await IntentInterpreter(llm=llm).interpret("go north", square)
        assert intents == [ActionIntent(action=ActionKind.MOVE, target="north")]

    @pytest.mark.asyncio
    async def test_falls_back_on_failure(self, square: WorldSnapshot):
        llm = LLMService(provider=MockLLMProvider(fail=True))
        intents = await IntentInterpreter(llm=llm).interpret("inventory", square)
        assert intents == [ActionIntent(action=ActionKind.INVENTORY)]

    @pytest.mark.asyncio
    async def test_falls_back_when_all_unknown(self, llm: LLMService, provider: MockLLMProvider, square: WorldSnapshot):
        provider.enqueue('[{"action": "dance"}]')
        intents = await IntentInterpreter(llm=llm).interpret("look", square)
        assert intents == [ActionIntent(action=ActionKind.LOOK)]

    @pytest.mark.asyncio
    async def test_without_llm(self, square: WorldSnapshot):
        assert await IntentInterpreter().interpret("sing a song", square) == []
