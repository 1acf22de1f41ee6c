"""
Tests for outcome narration.
"""

from __future__ import annotations

import pytest

from adventure.engine import (
    ActionIntent,
    ActionKind,
    ActionResult,
    ExecutedAction,
    LLMOutcomeNarrator,
    TemplateOutcomeNarrator,
)
from adventure.engine.narrator import segment_results
from adventure.models import Game, SessionState
from adventure.services import LLMService, MockLLMProvider


def executed(kind: ActionKind, message: str, success: bool = True) -> ExecutedAction:
    return ExecutedAction(
        intent=ActionIntent(action=kind),
        result=ActionResult(success=success, message=message),
    )


TALK = executed(ActionKind.TALK, 'Marta says: "Welcome, traveler."')
MOVE = executed(ActionKind.MOVE, "You go East. You arrive at The Wandering Wyvern Tavern.")
BLOCKED = executed(ActionKind.MOVE, "A shimmering magical barrier blocks the entrance to the lair.", success=False)
GIVE = executed(ActionKind.GIVE, 'Marta says: "Take these."\n\n✓ You received: Health Potion (x2)')


class TestSegmentResults:
    def test_dialogue_is_verbatim(self):
        segments = segment_results([TALK, MOVE])
        assert segments == [
            'Marta says: "Welcome, traveler."',
            [("move", True, "You go East. You arrive at The Wandering Wyvern Tavern.")],
        ]

    def test_reference_listings_are_verbatim(self):
        segments = segment_results([executed(ActionKind.INVENTORY, "Inventory: Health Potion x1")])
        assert segments == ["Inventory: Health Potion x1"]

    def test_give_splits_speech_from_transfer(self):
        segments = segment_results([GIVE])
        assert segments == ['Marta says: "Take these."', [("item transfer", True, "✓ You received: Health Potion (x2)")]]

    def test_failure_is_flagged(self):
        (run,) = segment_results([BLOCKED])
        assert run[0][1] is False

    def test_execution_order_is_kept(self):
        segments = segment_results([MOVE, BLOCKED, TALK, MOVE])
        assert [len(s) if isinstance(s, list) else s for s in segments] == [
            2,
            'Marta says: "Welcome, traveler."',
            1,
        ]


class TestTemplateNarrator:
    @pytest.mark.asyncio
    async def test_messages_in_order(self, game: Game, state: SessionState):
        text = await TemplateOutcomeNarrator().narrate("talk then go", [TALK, MOVE], state, game)
        assert text == (
            'Marta says: "Welcome, traveler."\n\n'
            "You go East. You arrive at The Wandering Wyvern Tavern."
        )


class TestLLMNarrator:
    """Tests for LLM narration and its fallbacks."""

    @pytest.mark.asyncio
    async def test_retells_non_dialogue(
        self, game: Game, state: SessionState, llm: LLMService, provider: MockLLMProvider
    ):
        provider.enqueue("You push open the tavern door and warmth spills out.")
        narrator = LLMOutcomeNarrator(llm=llm)

        text = await narrator.narrate("say hi and go east", [TALK, MOVE], state, game)

        assert text == (
            'Marta says: "Welcome, traveler."\n\n'
            "You push open the tavern door and warmth spills out."
        )
        prompt = provider.calls[0][-1]["content"]
        assert "Player's Original Request: say hi and go east" in prompt
        assert "- move (succeeded): You go East." in prompt
        assert "Marta" not in prompt.split("Action Results:")[1]

    @pytest.mark.asyncio
    async def test_narration_stays_where_it_happened(
        self, game: Game, state: SessionState, llm: LLMService, provider: MockLLMProvider
    ):
        provider.enqueue("You stride into the tavern.", "You head back out.")
        narrator = LLMOutcomeNarrator(llm=llm)

        text = await narrator.narrate("go east, greet marta, go back", [MOVE, TALK, BLOCKED], state, game)

        assert text == (
            "You stride into the tavern.\n\n"
            'Marta says: "Welcome, traveler."\n\n'
            "You head back out."
        )
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_failed_actions_marked(
        self, game: Game, state: SessionState, llm: LLMService, provider: MockLLMProvider
    ):
        await LLMOutcomeNarrator(llm=llm).narrate("enter the lair", [BLOCKED], state, game)
        assert "- move (FAILED): A shimmering magical barrier" in provider.calls[0][-1]["content"]

    @pytest.mark.asyncio
    async def test_dialogue_only_skips_llm(
        self, game: Game, state: SessionState, llm: LLMService, provider: MockLLMProvider
    ):
        text = await LLMOutcomeNarrator(llm=llm).narrate("hi marta", [TALK], state, game)
        assert text == 'Marta says: "Welcome, traveler."'
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_messages(self, game: Game, state: SessionState):
        narrator = LLMOutcomeNarrator(llm=LLMService(provider=MockLLMProvider(fail=True)))
        text = await narrator.narrate("go east", [MOVE], state, game)
        assert text == "You go East. You arrive at The Wandering Wyvern Tavern."

    @pytest.mark.asyncio
    async def test_empty_reply_falls_back(
        self, game: Game, state: SessionState, llm: LLMService, provider: MockLLMProvider
    ):
        provider.enqueue("   ")
        text = await LLMOutcomeNarrator(llm=llm).narrate("go east", [MOVE], state, game)
        assert text == "You go East. You arrive at The Wandering Wyvern Tavern."
