"""
Tests for the LLM service layer and NPC dialogue.
"""

from __future__ import annotations

import pytest

from adventure.models import Character, SessionState
from adventure.services import (
    LLMService,
    MockLLMProvider,
    NPCDialogueService,
    OpenRouterProvider,
    build_personality_prompt,
    create_llm_service,
)
from adventure.services.llm import INTERPRETER_SYSTEM_PROMPT, MOCK_DEFAULT_RESPONSE

USER = [{"role": "user", "content": "Where is the dragon?"}]


# =============================================================================
# Providers
# =============================================================================


class TestMockProvider:
    """Tests for MockLLMProvider."""

    @pytest.mark.asyncio
    async def test_queue_comes_first(self, provider: MockLLMProvider):
        provider.set_response("dragon", "On the mountain.")
        provider.enqueue("queued")
        assert await provider.complete(USER) == "queued"
        assert await provider.complete(USER) == "On the mountain."

    @pytest.mark.asyncio
    async def test_exact_trigger_beats_substring(self, provider: MockLLMProvider):
        provider.set_response("dragon", "substring")
        provider.set_response("Where is the dragon?", "exact")
        assert await provider.complete(USER) == "exact"

    @pytest.mark.asyncio
    async def test_default_and_calls(self, provider: MockLLMProvider):
        assert await provider.complete(USER) == MOCK_DEFAULT_RESPONSE
        assert provider.calls == [USER]

    @pytest.mark.asyncio
    async def test_fail(self):
        provider = MockLLMProvider(fail=True)
        with pytest.raises(RuntimeError):
            await provider.complete(USER)
        assert len(provider.calls) == 1


class TestOpenRouterProvider:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch: pytest.MonkeyPatch):
        for name in ("OPENROUTER_API_KEY", "OPENROUTER_MODEL", "LLM_BASE_URL", "LLM_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        provider = OpenRouterProvider()
        assert not provider.is_available
        with pytest.raises(RuntimeError, match="OPENROUTER_API_KEY"):
            await provider.complete(USER)

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-test")
        monkeypatch.setenv("OPENROUTER_MODEL", "meta-llama/llama-3-8b")
        monkeypatch.setenv("LLM_TIMEOUT", "5")

        provider = OpenRouterProvider()

        assert provider.is_available
        assert provider.model_name == "meta-llama/llama-3-8b"
        assert provider.timeout == 5.0

    def test_bad_timeout_is_ignored(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("LLM_TIMEOUT", "soon")
        assert OpenRouterProvider().timeout == 60.0


def test_create_llm_service():
    service = create_llm_service(provider_type="mock", default_response="hi")
    assert isinstance(service.provider, MockLLMProvider)
    assert service.is_available

    with pytest.raises(ValueError, match="Unknown provider type: carrier-pigeon"):
        create_llm_service(provider_type="carrier-pigeon")


# =============================================================================
# Prompts
# =============================================================================


class TestLLMService:
    """Tests for the prompt-owning methods."""

    @pytest.mark.asyncio
    async def test_decide_actions_messages(self, llm: LLMService, provider: MockLLMProvider):
        await llm.decide_actions("Current Location: Tavern", "order an ale")
        system, user = provider.calls[0]
        assert system == {"role": "system", "content": INTERPRETER_SYSTEM_PROMPT}
        assert user["content"] == "Current Location: Tavern\n\nPlayer command: order an ale"

    @pytest.mark.asyncio
    async def test_narrate_results_prompt(self, llm: LLMService, provider: MockLLMProvider):
        await llm.narrate_results(
            player_command="go east",
            location="Tavern",
            location_description="Warm.",
            health="90/100",
            inventory=[],
            results=[("move", True, "You go East."), ("take", False, "No sword here.")],
            creativity=10,
        )
        prompt = provider.calls[0][-1]["content"]
        assert "- move (succeeded): You go East." in prompt
        assert "- take (FAILED): No sword here." in prompt
        assert "- Inventory: empty" in prompt
        assert "- Characters present: none" in prompt
        assert "Be terse and literal." in prompt

    @pytest.mark.asyncio
    async def test_follow_decision_adds_personality(self, llm: LLMService, provider: MockLLMProvider):
        await llm.follow_decision("Sylva", personality="You distrust strangers.")
        system = provider.calls[0][0]["content"]
        assert system.startswith("You are Sylva.")
        assert system.endswith("You distrust strangers.")

    @pytest.mark.asyncio
    async def test_give_decision_with_empty_inventory(self, llm: LLMService, provider: MockLLMProvider):
        await llm.give_decision("Marta", [], "give me ale")
        assert "Your inventory: nothing" in provider.calls[0][-1]["content"]


# =============================================================================
# NPC dialogue
# =============================================================================


class TestNPCDialogueService:
    """Tests for conversation memory and degradation."""

    @pytest.mark.asyncio
    async def test_history_window(self, state: SessionState, llm: LLMService, provider: MockLLMProvider):
        npc = state.npcs["town_crier"]
        dialogue = NPCDialogueService(llm=llm, history_window=2)
        provider.enqueue("First.", "Second.", "Third.")

        await dialogue.converse(npc, "Hello")
        await dialogue.converse(npc, "Any news?")
        reply = await dialogue.converse(npc, "Farewell")

        assert reply == "Third."
        assert len(npc.conversation_history) == 6
        assert provider.calls[2][1:] == [
            {"role": "user", "content": "Any news?"},
            {"role": "assistant", "content": "Second."},
            {"role": "user", "content": "Farewell"},
        ]

    @pytest.mark.asyncio
    async def test_failure_is_confused_and_unrecorded(self, state: SessionState):
        npc = state.npcs["town_crier"]
        dialogue = NPCDialogueService(llm=LLMService(provider=MockLLMProvider(fail=True)))

        reply = await dialogue.converse(npc, "Hello")

        assert reply == "*Herald Aldous seems confused and cannot speak.*"
        assert npc.conversation_history == []

    @pytest.mark.asyncio
    async def test_offline(self, state: SessionState):
        reply = await NPCDialogueService().converse(state.npcs["blacksmith"], "Hello")
        assert reply == NPCDialogueService.confused_line(state.npcs["blacksmith"])

    def test_authored_personality_wins(self):
        npc = Character(id="x", name="X", personality_prompt="You are X, a riddle.")
        assert NPCDialogueService().system_prompt(npc) == "You are X, a riddle."

    def test_generated_personality(self, state: SessionState):
        prompt = build_personality_prompt(state.npcs["tavern_keeper"])
        assert prompt.startswith("You are Marta,")
        assert "You are carrying: " in prompt
        assert "FOLLOW THE PLAYER: NO" in prompt
