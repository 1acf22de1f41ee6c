"""
NPC Decisions for the adventure engine.

Bounded questions put to the LLM ("will you give me this?", "will you
follow me?", "is there ore here?") come back as NpcDecisions. A
decision is only ever a proposal: the executor validates it against
the world before anything changes hands.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from adventure.engine.intent import extract_json_object
from adventure.engine.models import NpcDecision

if TYPE_CHECKING:
    from adventure.models.character import Character
    from adventure.models.item import InventoryItem
    from adventure.models.world import Room
    from adventure.services.llm import LLMService

logger = logging.getLogger(__name__)

# Accepted spellings of each decision field, across the three question shapes
_WILL_KEYS = ("willGive", "willFollow", "found", "will_act")
_SUBJECT_KEYS = ("itemsToGive", "itemName", "subject")
_NARRATIVE_KEYS = ("narrative", "response", "narration")
_RATIONALE_KEYS = ("reason", "rationale")
_MAX_DYNAMIC_QUANTITY = 3


def _first(payload: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "y", "1"}
    return bool(value)


def parse_decision(text: str, default: NpcDecision) -> NpcDecision:
    """
    Build a decision from the JSON object embedded in an LLM reply.

    Args:
        text: Raw reply, possibly wrapped in prose or code fences
        default: Returned unchanged when no usable object is found

    Returns:
        Parsed NpcDecision
    """
    payload = extract_json_object(text)
    if payload is None:
        logger.warning("No decision object in reply: %r", text)
        return default

    subject = _first(payload, _SUBJECT_KEYS)
    if isinstance(subject, str):
        subject = [subject] if subject.strip() else []
    elif not isinstance(subject, list):
        subject = []

    quantity = payload.get("quantity", 1)
    try:
        quantity = max(0, int(quantity))
    except (TypeError, ValueError):
        quantity = 1

    return NpcDecision(
        will_act=_as_bool(_first(payload, _WILL_KEYS)),
        subject=[str(s) for s in subject if str(s).strip()],
        quantity=quantity,
        rationale=str(_first(payload, _RATIONALE_KEYS) or ""),
        narrative=str(_first(payload, _NARRATIVE_KEYS) or ""),
    )


def enforce_give(npc: Character, decision: NpcDecision) -> list[InventoryItem]:
    """
    Resolve a give decision against what the NPC really carries.

    Names are matched case-insensitively and exactly; anything the NPC
    does not hold is dropped. Each item is returned once.
    """
    if not decision.will_act:
        return []

    stacks = []
    seen = set()
    by_name = {e.item.name.lower(): e for e in npc.carried_items.items.values()}
    for name in decision.subject:
        entry = by_name.get(name.strip().lower())
        if entry is not None and entry.item.id not in seen:
            seen.add(entry.item.id)
            stacks.append(entry)
    return stacks


@dataclass
class NpcDecisionMaker:
    """Asks the LLM bounded questions and degrades to a refusal on failure."""

    llm: LLMService | None = None
    max_tokens: int = 256
    temperature: float = 0.3

    @property
    def is_available(self) -> bool:
        return self.llm is not None and self.llm.is_available

    async def give_decision(self, npc: Character, request: str) -> NpcDecision:
        """Will the NPC hand over any of their items for this request?"""
        confused = NpcDecision(
            will_act=False,
            rationale="I'm confused",
            narrative="Sorry, I'm not sure what you want.",
        )
        if not self.is_available:
            return confused
        try:
            raw = await self.llm.give_decision(
                npc_name=npc.name,
                carried_items=npc.carried_items.names(),
                player_request=request,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            logger.warning("Give decision for %s failed: %s", npc.name, e)
            return confused

        default = NpcDecision(
            will_act=False,
            rationale="Unable to understand",
            narrative="Sorry, I'm not sure what you want.",
        )
        return parse_decision(raw, default)

    async def follow_decision(self, npc: Character) -> NpcDecision:
        """Will the NPC join the party?"""
        if not self.is_available:
            return NpcDecision(will_act=False, narrative="I'm not sure about that.")
        try:
            raw = await self.llm.follow_decision(
                npc_name=npc.name,
                personality=npc.personality_prompt,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            logger.warning("Follow decision for %s failed: %s", npc.name, e)
            return NpcDecision(will_act=False, narrative="I'm not sure about that.")

        return parse_decision(raw, NpcDecision(will_act=False, narrative="I'm uncertain about this."))

    async def gather_decision(self, room: Room, target: str) -> NpcDecision:
        """Can the searched-for resource plausibly be found here?"""
        if not self.is_available:
            return NpcDecision(will_act=False)
        resources = room.resources
        try:
            raw = await self.llm.gather_decision(
                room_name=room.name,
                room_description=room.description,
                biome=room.biome or "unknown",
                resource_tags=resources.resource_tags if resources else [],
                target=target,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            logger.warning("Gather decision in %s failed: %s", room.id, e)
            return NpcDecision(will_act=False, failed=True)

        decision = parse_decision(raw, NpcDecision(will_act=False, failed=True))
        decision.quantity = max(1, min(decision.quantity, _MAX_DYNAMIC_QUANTITY))
        return decision
