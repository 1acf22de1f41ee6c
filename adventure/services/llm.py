"""
LLM Service for the adventure engine.

Provides BYOK (Bring Your Own Key) LLM integration via OpenRouter or any
other OpenAI-compatible endpoint (OpenAI, a local Ollama server, ...).
The service owns every prompt; callers parse and validate the replies.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections import deque
from dataclasses import dataclass, field
from typing import Protocol

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

MOCK_DEFAULT_RESPONSE = "[Mock LLM response]"


class LLMProvider(Protocol):
    """
    Interface for LLM providers.

    Supports any OpenAI-compatible API (OpenRouter, OpenAI, Ollama, etc.)
    """

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 256,
        temperature: float = 0.7,
    ) -> str:
        """
        Generate a completion from messages.

        Args:
            messages: List of {"role": "user"|"assistant"|"system", "content": str}
            max_tokens: Maximum tokens in response
            temperature: Randomness (0.0 = deterministic, 1.0 = creative)

        Returns:
            Generated text response
        """
        ...

    @property
    def model_name(self) -> str:
        """The model being used."""
        ...

    @property
    def is_available(self) -> bool:
        """Whether the provider is configured and ready."""
        ...


@dataclass
class OpenRouterProvider:
    """
    OpenRouter LLM provider using OpenAI-compatible API.

    Configuration via environment variables:
        OPENROUTER_API_KEY: Your OpenRouter API key (required)
        OPENROUTER_MODEL: Model to use (default: anthropic/claude-3-haiku)
        LLM_BASE_URL: Custom base URL, e.g. http://localhost:11434/v1 for Ollama
        OPENROUTER_SITE_URL: Your site URL for rankings (optional)
        OPENROUTER_SITE_NAME: Your site name (optional)
        LLM_TIMEOUT: Request timeout in seconds (default: 60)
    """

    api_key: str | None = None
    model: str = "anthropic/claude-3-haiku"
    base_url: str = "https://openrouter.ai/api/v1"
    site_url: str | None = None
    site_name: str = "LLM Adventure"
    timeout: float = 60.0

    _client: AsyncOpenAI | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        """Initialize from environment if not provided."""
        if self.api_key is None:
            self.api_key = os.getenv("OPENROUTER_API_KEY")

        if os.getenv("OPENROUTER_MODEL"):
            self.model = os.getenv("OPENROUTER_MODEL", self.model)

        if os.getenv("LLM_BASE_URL"):
            self.base_url = os.getenv("LLM_BASE_URL", self.base_url)

        if os.getenv("OPENROUTER_SITE_URL"):
            self.site_url = os.getenv("OPENROUTER_SITE_URL")

        if os.getenv("OPENROUTER_SITE_NAME"):
            self.site_name = os.getenv("OPENROUTER_SITE_NAME", self.site_name)

        if os.getenv("LLM_TIMEOUT"):
            try:
                self.timeout = float(os.getenv("LLM_TIMEOUT", self.timeout))
            except ValueError:
                logger.warning("Ignoring invalid LLM_TIMEOUT=%r", os.getenv("LLM_TIMEOUT"))

        if self.api_key:
            headers = {"X-Title": self.site_name}
            if self.site_url:
                headers["HTTP-Referer"] = self.site_url

            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                default_headers=headers,
                timeout=self.timeout,
            )

    @property
    def model_name(self) -> str:
        """The model being used."""
        return self.model

    @property
    def is_available(self) -> bool:
        """Whether the provider is configured and ready."""
        return self._client is not None

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 256,
        temperature: float = 0.7,
    ) -> str:
        """
        Generate a completion from messages.

        Raises:
            RuntimeError: If provider is not configured (no API key)
        """
        if self._client is None:
            raise RuntimeError(
                "OpenRouter provider not configured. Set OPENROUTER_API_KEY environment variable."
            )

        # Retry up to 3 times for empty responses or rate limits
        content = ""
        for attempt in range(3):
            try:
                response = await self._client.chat.completions.create(
                    model=self.model,
                    messages=messages,  # type: ignore[arg-type]
                    max_tokens=max_tokens,
                    temperature=temperature,
                )

                content = response.choices[0].message.content or ""
                if content.strip():
                    return content
                logger.warning("Empty completion from %s (attempt %d)", self.model, attempt + 1)
            except Exception as e:
                logger.warning("Completion failed on attempt %d: %s", attempt + 1, e)

            if attempt < 2:
                await asyncio.sleep(2.0**attempt)

        return content


@dataclass
class MockLLMProvider:
    """
    Mock LLM provider for testing and offline play.

    Reply precedence: queued replies (FIFO), then a trigger that equals
    or appears in the last user message, then a fixed default. Every call
    is recorded in ``calls``. Set ``fail`` to make calls raise.
    """

    model: str = "mock"
    responses: dict[str, str] = field(default_factory=dict)
    queue: deque[str] = field(default_factory=deque)
    fail: bool = False
    default_response: str = MOCK_DEFAULT_RESPONSE
    calls: list[list[dict[str, str]]] = field(default_factory=list)

    @property
    def model_name(self) -> str:
        """The model being used."""
        return self.model

    @property
    def is_available(self) -> bool:
        """Mock provider is always available."""
        return True

    async def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int = 256,
        temperature: float = 0.7,
    ) -> str:
        """Return a mock response."""
        self.calls.append(messages)
        if self.fail:
            raise RuntimeError("Mock LLM failure")

        if self.queue:
            return self.queue.popleft()

        last_user_msg = next(
            (m["content"] for m in reversed(messages) if m["role"] == "user"),
            "",
        )
        if last_user_msg in self.responses:
            return self.responses[last_user_msg]
        for trigger, response in self.responses.items():
            if trigger and trigger in last_user_msg:
                return response

        return self.default_response

    def set_response(self, trigger: str, response: str) -> None:
        """Set a custom response for a specific input."""
        self.responses[trigger] = response

    def enqueue(self, *responses: str) -> None:
        """Queue replies returned in order by the next calls."""
        self.queue.extend(responses)


# =============================================================================
# Prompts
# =============================================================================

INTERPRETER_SYSTEM_PROMPT = """You are a game AI. Your ONLY job is to decide what commands to execute.

RESPONSE FORMAT - Return ONLY a JSON array with no markdown, no explanation, no code blocks:
[{"action":"ACTION","target":"TARGET","details":""}]

'target' MUST contain the specific thing the player referred to, using full names from the context:
- 'take sword' -> "target":"sword"
- 'attack gruk' -> "target":"King Gruk"
- 'move north' -> "target":"north"
- 'look' -> "target":""

Valid actions: move, look, inventory, talk, follow, examine, take, drop, use, attack, give, equip, unequip, equipped, buy, sell, shop, gather, craft, recipes, quests, stop, status, help

Rules:
1. Return ONLY the JSON array
2. Match the player's intent EXACTLY - never add actions the player did not ask for
3. Only return multiple commands if the player explicitly asked for multiple actions
4. Resolve abbreviations to exact item and character names from the context
5. For buy/sell/craft, target = the NPC and details = the item
6. For give (asking an NPC for items), target = the NPC and details = the requested items
7. For use on someone, target = the character and details = the item
8. If the command is unclear, return an empty array: []"""

NARRATOR_SYSTEM_PROMPT = """You are a fantasy RPG narrator. Based on the player's original intent and the actual game results, write an engaging description (2-3 sentences) of what happened.

CRITICAL RULES:
1. ONLY mention characters and locations that appear in the context
2. NEVER invent new characters, creatures, items or rooms
3. If an action failed, describe why using the result message; never present it as a success
4. If an action succeeded, describe exactly what the results say happened
5. Do NOT describe characters doing things not mentioned in the results"""

CONVERTER_SYSTEM_PROMPT = (
    "You are a message converter. Convert player commands to natural messages for NPCs."
)

DECISION_SYSTEM_PROMPT = "You are a Game Master. Respond only with valid JSON."


@dataclass
class LLMService:
    """
    High-level LLM service for game features.

    Provides specialized methods for each question the engine asks,
    handling prompt construction. Replies are returned raw; the engine
    extracts and validates structure.
    """

    provider: LLMProvider

    @property
    def is_available(self) -> bool:
        """Whether LLM features are available."""
        return self.provider.is_available

    async def decide_actions(
        self,
        context: str,
        player_command: str,
        max_tokens: int = 300,
        temperature: float = 0.2,
    ) -> str:
        """
        Ask which actions a command maps to.

        Args:
            context: Rendered world snapshot
            player_command: What the player typed

        Returns:
            Raw reply expected to contain a JSON array of
            {"action", "target", "details"} objects
        """
        messages = [
            {"role": "system", "content": INTERPRETER_SYSTEM_PROMPT},
            {"role": "user", "content": f"{context}\n\nPlayer command: {player_command}"},
        ]
        return await self.provider.complete(
            messages=messages, max_tokens=max_tokens, temperature=temperature
        )

    async def narrate_results(
        self,
        player_command: str,
        location: str,
        location_description: str,
        health: str,
        inventory: list[str],
        results: list[tuple[str, bool, str]],
        characters_present: list[str] | None = None,
        creativity: int = 50,
        max_tokens: int = 300,
        temperature: float = 0.7,
    ) -> str:
        """
        Narrate mechanically resolved results.

        Args:
            player_command: The player's original words
            location: Current room name
            location_description: Current room description
            health: "current/max"
            inventory: Item names the player holds
            results: (action, success, message) for each narrated action
            characters_present: Names the narrator may mention
            creativity: 0-100, how much colour the narrator may add

        Returns:
            Narrative text
        """
        summary = "\n".join(
            f"- {action} ({'succeeded' if ok else 'FAILED'}): {message}"
            for action, ok, message in results
        )
        present = ", ".join(characters_present or []) or "none"
        style = "Be terse and literal." if creativity < 40 else "Use vivid, atmospheric language."

        user_prompt = f"""Player's Original Request: {player_command}

Current Game State:
- Location: {location}
- Description: {location_description}
- Characters present: {present}
- Player Health: {health}
- Inventory: {", ".join(inventory) or "empty"}

Action Results:
{summary}

{style} Describe what happened (2-3 sentences):"""

        messages = [
            {"role": "system", "content": NARRATOR_SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ]
        return await self.provider.complete(
            messages=messages, max_tokens=max_tokens, temperature=temperature
        )

    async def convert_to_npc_message(
        self,
        player_command: str,
        npc_name: str,
        max_tokens: int = 100,
        temperature: float = 0.3,
    ) -> str:
        """Rephrase a raw command ("ask gruff about swords") as speech addressed to the NPC."""
        prompt = f"""Convert this player command into a natural message from the player to the NPC named {npc_name}.
The message should be in third person and frame it as the player saying or asking something.

Examples:
- "ask Sylva for arrows" -> "The player asks you for arrows"
- "ask Sylva to follow" -> "The player asks you to follow"
- "tell Marta I'm ready" -> "The player tells you they're ready"

Player command: "{player_command}"

Return ONLY the converted message - no other text."""

        messages = [
            {"role": "system", "content": CONVERTER_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        return await self.provider.complete(
            messages=messages, max_tokens=max_tokens, temperature=temperature
        )

    async def npc_reply(
        self,
        system_prompt: str,
        history: list[dict[str, str]],
        message: str,
        max_tokens: int = 256,
        temperature: float = 0.8,
    ) -> str:
        """Generate an in-character reply given the NPC's recent conversation."""
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(history)
        messages.append({"role": "user", "content": message})
        return await self.provider.complete(
            messages=messages, max_tokens=max_tokens, temperature=temperature
        )

    async def give_decision(
        self,
        npc_name: str,
        carried_items: list[str],
        player_request: str,
        max_tokens: int = 256,
        temperature: float = 0.3,
    ) -> str:
        """Ask an NPC which of their own items they will hand over."""
        items = ", ".join(carried_items) if carried_items else "nothing"
        prompt = f"""The player asks: "{player_request}"

Your inventory: {items}

Respond ONLY with JSON (no markdown, no explanation):
{{
  "willGive": true/false,
  "itemsToGive": ["item1", "item2"],
  "reason": "why you will or won't give",
  "narrative": "what you say to the player about this"
}}

RULES:
1. willGive = true ONLY if you have items the player requested
2. itemsToGive = exact names of items from your inventory above
3. narrative = your dialogue response (1-2 sentences, in character)
4. Never claim to have items not in your inventory list above"""

        messages = [
            {
                "role": "system",
                "content": f"You are {npc_name}. Decide what items to give the player based on your inventory.",
            },
            {"role": "user", "content": prompt},
        ]
        return await self.provider.complete(
            messages=messages, max_tokens=max_tokens, temperature=temperature
        )

    async def follow_decision(
        self,
        npc_name: str,
        personality: str | None = None,
        max_tokens: int = 150,
        temperature: float = 0.3,
    ) -> str:
        """Ask an NPC whether they will join the party."""
        prompt = """The player asks you to follow them and join their party.

Respond ONLY with JSON (no markdown, no explanation):
{
  "willFollow": true/false,
  "response": "your dialogue response to the player (1-2 sentences)"
}"""
        system = f"You are {npc_name}. Answer whether you will follow the player. Be direct and honest."
        if personality:
            system = f"{system}\n\n{personality}"

        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        return await self.provider.complete(
            messages=messages, max_tokens=max_tokens, temperature=temperature
        )

    async def gather_decision(
        self,
        room_name: str,
        room_description: str,
        biome: str,
        resource_tags: list[str],
        target: str,
        max_tokens: int = 200,
        temperature: float = 0.5,
    ) -> str:
        """Ask whether a searched-for resource can plausibly be found here."""
        prompt = f"""You are a Game Master deciding if a player can find resources.

Location: {room_name}
Description: {room_description}
Biome: {biome}
Resource tags: {", ".join(resource_tags) or "none"}

Player is searching for: {target}

Decide:
1. Can this resource reasonably be found here?
2. If yes, what exactly did they find? (item name)
3. Quantity found (1-3)
4. A brief narration of finding it

Respond in JSON format only:
{{"found": true/false, "itemName": "name", "quantity": 1, "narration": "..."}}"""

        messages = [
            {"role": "system", "content": DECISION_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        return await self.provider.complete(
            messages=messages, max_tokens=max_tokens, temperature=temperature
        )


def create_llm_service(
    provider_type: str = "openrouter",
    **kwargs,
) -> LLMService:
    """
    Factory function to create an LLM service.

    Args:
        provider_type: Type of provider ("openrouter", "mock")
        **kwargs: Provider-specific configuration

    Returns:
        Configured LLMService

    Example:
        # Auto-configure from environment
        service = create_llm_service()

        # Local Ollama server
        service = create_llm_service(
            api_key="ollama",
            base_url="http://localhost:11434/v1",
            model="llama3.1",
        )

        # Mock for testing
        service = create_llm_service(provider_type="mock")
    """
    if provider_type == "mock":
        provider = MockLLMProvider(**kwargs)
    elif provider_type == "openrouter":
        provider = OpenRouterProvider(**kwargs)
    else:
        raise ValueError(f"Unknown provider type: {provider_type}")

    return LLMService(provider=provider)
