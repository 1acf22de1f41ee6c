"""
Outcome Narrator for the adventure engine.

Turns executed actions into the text the player reads. Results that
already carry resolved text (dialogue, combat logs, listings) are shown
verbatim; the rest may be retold by the LLM under a prompt that forbids
inventing anything. Narration runs after execution and cannot change
what happened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from adventure.engine.models import ActionKind, ExecutedAction

if TYPE_CHECKING:
    from adventure.models.game import Game
    from adventure.models.state import SessionState
    from adventure.services.llm import LLMService

logger = logging.getLogger(__name__)

# Already-resolved speech and combat logs
PASS_THROUGH_KINDS = frozenset({ActionKind.TALK, ActionKind.FOLLOW, ActionKind.ATTACK, ActionKind.STOP})

# Menus and listings the player needs word for word
REFERENCE_KINDS = frozenset(
    {
        ActionKind.HELP,
        ActionKind.STATUS,
        ActionKind.QUESTS,
        ActionKind.INVENTORY,
        ActionKind.EQUIPPED,
        ActionKind.SHOP,
        ActionKind.RECIPES,
    }
)


class OutcomeNarrator(Protocol):
    """Interface for turning results into player-facing text."""

    async def narrate(
        self,
        command: str,
        executed: list[ExecutedAction],
        state: SessionState,
        game: Game,
    ) -> str:
        ...


Narratable = tuple[str, bool, str]


def segment_results(executed: list[ExecutedAction]) -> list[str | list[Narratable]]:
    """
    Split results into segments, keeping execution order.

    A string segment is shown verbatim. A list segment is a run of
    consecutive (action, success, message) results that may be retold
    together. A give result is split on its first blank line: the NPC's
    words are verbatim, the item transfer is retold.
    """
    segments: list[str | list[Narratable]] = []

    def retell(entry: Narratable) -> None:
        if segments and isinstance(segments[-1], list):
            segments[-1].append(entry)
        else:
            segments.append([entry])

    for action in executed:
        kind = action.intent.action
        result = action.result
        if kind in PASS_THROUGH_KINDS or kind in REFERENCE_KINDS:
            segments.append(result.message)
        elif kind == ActionKind.GIVE:
            speech, _, transfer = result.message.partition("\n\n")
            segments.append(speech)
            if transfer.strip():
                retell(("item transfer", True, transfer.strip()))
        else:
            retell((kind.value, result.success, result.message))
    return segments


def raw_messages(run: list[Narratable]) -> str:
    return "\n\n".join(message for _, _, message in run)


def join_sections(sections: list[str]) -> str:
    return "\n\n".join(s.strip() for s in sections if s.strip())


@dataclass
class TemplateOutcomeNarrator:
    """Offline narrator: every result message, verbatim, in order."""

    async def narrate(
        self,
        command: str,
        executed: list[ExecutedAction],
        state: SessionState,
        game: Game,
    ) -> str:
        segments = segment_results(executed)
        return join_sections([s if isinstance(s, str) else raw_messages(s) for s in segments])


@dataclass
class LLMOutcomeNarrator:
    """
    Narrator that retells non-dialogue results through the LLM.

    Falls back to the verbatim result messages if the LLM is missing,
    raises, or replies with nothing.
    """

    llm: LLMService | None = None
    max_tokens: int = 300
    temperature: float = 0.7

    async def narrate(
        self,
        command: str,
        executed: list[ExecutedAction],
        state: SessionState,
        game: Game,
    ) -> str:
        """
        Produce the narrative part of a response.

        Args:
            command: The player's original words
            executed: Intents with their results, in execution order
            state: Session after execution
            game: Definition, for the authority's creativity level

        Returns:
            Verbatim lines and narration, in execution order
        """
        sections = []
        for segment in segment_results(executed):
            if isinstance(segment, str):
                sections.append(segment)
            else:
                sections.append(await self._retell(command, segment, state, game))
        return join_sections(sections)

    async def _retell(self, command: str, run: list[Narratable], state: SessionState, game: Game) -> str:
        """One consecutive run of results as prose, or their raw messages."""
        fallback = raw_messages(run)
        if self.llm is None or not self.llm.is_available:
            return fallback

        room = state.current_room()
        player = state.player
        try:
            narration = await self.llm.narrate_results(
                player_command=command,
                location=room.name,
                location_description=room.description,
                health=f"{player.health}/{player.max_health}",
                inventory=player.carried_items.names(),
                results=run,
                characters_present=[n.name for n in state.npcs_in_room()],
                creativity=game.authority.narration_creativity,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            logger.warning("Narration failed, showing raw results: %s", e)
            narration = ""

        return narration.strip() or fallback
