"""
NPC Dialogue Service for the adventure engine.

Drives in-character conversation: builds each NPC's system prompt,
keeps a bounded conversation memory, and degrades to a canned line
when the LLM cannot answer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from adventure.models.character import Character, ConversationEntry

if TYPE_CHECKING:
    from adventure.services.llm import LLMService

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_WINDOW = 10


def build_personality_prompt(npc: Character) -> str:
    """
    System prompt for an NPC without an authored personality.

    Lists what the NPC actually carries and whether they can join the
    party, so the model cannot promise things the engine will refuse.
    """
    items = npc.carried_items.names()
    carrying = ", ".join(items) if items else "nothing"
    can_follow = "YES" if npc.can_join_party else "NO"

    return f"""You are {npc.name}, a character in a text adventure.
{npc.description}

Health: {npc.health}/{npc.max_health} | Level: {npc.level}
You are carrying: {carrying}

WHAT YOU CAN DO:
- TALK: respond in character, in 1-3 sentences
- GIVE ITEMS: you may only offer items you are carrying
- FOLLOW THE PLAYER: {can_follow}

CONSTRAINTS:
- Never claim to have items not listed above
- Never describe other characters, places or creatures that were not mentioned to you
- Stay in character and never mention being an AI"""


@dataclass
class NPCDialogueService:
    """
    Service for in-character NPC conversation.

    Conversation memory lives on the Character itself so it travels
    with the session; only the most recent ``history_window`` entries are
    sent to the LLM.
    """

    llm: LLMService | None = None
    history_window: int = DEFAULT_HISTORY_WINDOW
    max_tokens: int = 256
    temperature: float = 0.8

    def system_prompt(self, npc: Character) -> str:
        if npc.personality_prompt:
            return npc.personality_prompt
        return build_personality_prompt(npc)

    def recent_history(self, npc: Character) -> list[dict[str, str]]:
        """The NPC's last ``history_window`` lines as chat messages."""
        entries = npc.conversation_history[-self.history_window :] if self.history_window else []
        return [{"role": e.role, "content": e.content} for e in entries]

    @staticmethod
    def confused_line(npc: Character) -> str:
        return f"*{npc.name} seems confused and cannot speak.*"

    def record(self, npc: Character, role: str, content: str) -> None:
        npc.conversation_history.append(ConversationEntry(role=role, content=content))

    async def converse(self, npc: Character, message: str) -> str:
        """
        Send a message to an NPC and return their reply.

        Both sides of the exchange are recorded in the NPC's history.
        The reply is a canned line if the LLM is missing or fails.

        Args:
            npc: Who is being spoken to
            message: What the player says, already phrased for the NPC

        Returns:
            The NPC's reply text
        """
        reply = ""
        if self.llm is not None and self.llm.is_available:
            try:
                reply = await self.llm.npc_reply(
                    system_prompt=self.system_prompt(npc),
                    history=self.recent_history(npc),
                    message=message,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                )
            except Exception as e:
                logger.warning("Dialogue with %s failed: %s", npc.name, e)
                reply = ""

        reply = reply.strip()
        if not reply:
            return self.confused_line(npc)

        self.record(npc, "user", message)
        self.record(npc, "assistant", reply)
        return reply
