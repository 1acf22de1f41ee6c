"""
Intent Interpreter for the adventure engine.

Turns a free-text command into an ordered list of ActionIntents.
The primary path asks the LLM for a JSON array; a deterministic
keyword parser takes over whenever the LLM is unavailable, fails, or
yields nothing usable. Interpretation never mutates session state.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from adventure.engine.models import ActionIntent, ActionKind, WorldSnapshot
from adventure.models.character import NPCRole
from adventure.skills.matching import match_name, normalize, significant_words, strip_keywords

if TYPE_CHECKING:
    from adventure.models.game import Game
    from adventure.models.state import SessionState
    from adventure.services.llm import LLMService

logger = logging.getLogger(__name__)


# =============================================================================
# Snapshot
# =============================================================================


def build_snapshot(state: SessionState, game: Game) -> WorldSnapshot:
    """Capture what the interpreter may know about the current turn."""
    room = state.current_room()
    present = state.npcs_in_room()
    living = [n for n in present if n.is_alive]
    player = state.player
    opponent = state.combat_opponent()

    return WorldSnapshot(
        room_name=room.name,
        room_description=room.description,
        exits=room.exit_names(),
        npcs=[n.name for n in living],
        dead_npcs=[n.name for n in present if not n.is_alive],
        merchants=[n.name for n in living if n.role == NPCRole.MERCHANT],
        crafters=[n.name for n in living if n.can_craft],
        companions=[c.name for c in state.companions_present()],
        npc_inventories={n.name: n.carried_items.names() for n in living if len(n.carried_items)},
        inventory=[e.item.label() for e in player.carried_items.items.values()],
        item_names=player.carried_items.names(),
        equipped=[i.name for i in player.equipped_items()],
        ground_items=room.items.names(),
        player_health=f"{player.health}/{player.max_health}",
        in_combat=state.in_combat,
        combat_opponent=opponent.name if opponent else None,
        economy_enabled=game.economy.enabled,
        crafting_enabled=game.crafting.enabled,
        recent_commands=state.recent_commands_context(),
    )


def render_context(snapshot: WorldSnapshot) -> str:
    """Render a snapshot as the context block of the interpretation prompt."""
    npcs = [f"{name} (alive)" for name in snapshot.npcs]
    npcs += [f"{name} (dead)" for name in snapshot.dead_npcs]

    lines = [
        f"Current Location: {snapshot.room_name}",
        f"Available exits: {', '.join(snapshot.exits) or 'None'}",
        f"NPCs here: {', '.join(npcs) or 'None'}",
    ]
    if snapshot.npc_inventories:
        lines.append("NPC inventory:")
        for name, items in snapshot.npc_inventories.items():
            lines.append(f"  {name} has: {', '.join(items)}")
    if snapshot.merchants:
        lines.append(f"Merchants: {', '.join(snapshot.merchants)}")
    if snapshot.crafters:
        lines.append(f"Crafters: {', '.join(snapshot.crafters)}")
    if snapshot.companions:
        lines.append(f"Your companions: {', '.join(snapshot.companions)}")
    lines.append(f"Your inventory: {', '.join(snapshot.inventory) or 'Empty'}")
    if snapshot.equipped:
        lines.append(f"Equipped: {', '.join(snapshot.equipped)}")
    if snapshot.ground_items:
        lines.append(f"Items on the ground: {', '.join(snapshot.ground_items)}")
    if snapshot.player_health:
        lines.append(f"Player health: {snapshot.player_health}")
    if snapshot.in_combat:
        lines.append(f"In combat: yes, fighting {snapshot.combat_opponent}")
    else:
        lines.append("In combat: no")
    if snapshot.recent_commands:
        lines.append(snapshot.recent_commands)
    return "\n".join(lines)


# =============================================================================
# JSON extraction
# =============================================================================


def _extract(text: str, open_char: str, close_char: str) -> Any:
    start = text.find(open_char)
    end = text.rfind(close_char)
    if start < 0 or end <= start:
        return None
    try:
        return json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        logger.warning("Malformed JSON in LLM reply: %s", e)
        return None


def extract_json_array(text: str) -> list[Any] | None:
    """Parse the span from the first "[" to the last "]", if it is a JSON array."""
    value = _extract(text or "", "[", "]")
    return value if isinstance(value, list) else None


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Parse the span from the first "{" to the last "}", if it is a JSON object."""
    value = _extract(text or "", "{", "}")
    return value if isinstance(value, dict) else None


def parse_intents(text: str) -> list[ActionIntent]:
    """
    Build intents from an LLM reply.

    Accepts a JSON array of intent objects, or a lone object. Entries
    that fail validation are skipped.
    """
    payload: list[Any] | None = extract_json_array(text)
    if payload is None:
        single = extract_json_object(text)
        payload = [single] if single is not None else []

    intents = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        try:
            intents.append(ActionIntent.model_validate(entry))
        except ValidationError as e:
            logger.debug("Skipping invalid intent %r: %s", entry, e)
    return intents


# =============================================================================
# Fallback parser
# =============================================================================

DIRECTIONS = ("north", "south", "east", "west", "up", "down", "left", "right", "forward")

# First words that name some other action, so an exit keyword later in
# the command is not a movement request
NON_MOVE_VERBS = frozenset(
    {
        "look", "examine", "inspect", "take", "grab", "loot", "get", "drop", "use",
        "drink", "eat", "talk", "ask", "speak", "tell", "attack", "fight", "kill", "hit",
        "equip", "wear", "wield", "unequip", "remove", "buy", "sell", "purchase", "give",
        "craft", "forge", "brew", "make", "search", "gather", "forage", "mine", "pick",
        "shop", "browse",
    }
)  # fmt: skip

SINGLE_WORD_COMMANDS: dict[str, ActionKind] = {
    "look": ActionKind.LOOK,
    "look around": ActionKind.LOOK,
    "inventory": ActionKind.INVENTORY,
    "inv": ActionKind.INVENTORY,
    "i": ActionKind.INVENTORY,
    "help": ActionKind.HELP,
    "?": ActionKind.HELP,
    "status": ActionKind.STATUS,
    "stats": ActionKind.STATUS,
    "stop": ActionKind.STOP,
    "flee": ActionKind.STOP,
    "run": ActionKind.STOP,
    "exit combat": ActionKind.STOP,
    "equipped": ActionKind.EQUIPPED,
    "equipment": ActionKind.EQUIPPED,
    "show equipment": ActionKind.EQUIPPED,
    "what am i wearing": ActionKind.EQUIPPED,
    "what's equipped": ActionKind.EQUIPPED,
    "quests": ActionKind.QUESTS,
    "quest log": ActionKind.QUESTS,
    "recipes": ActionKind.RECIPES,
    "shop": ActionKind.SHOP,
    "browse": ActionKind.SHOP,
    "wares": ActionKind.SHOP,
}

EQUIP_PATTERN = re.compile(r"^(equip|wear|wield)\b")
UNEQUIP_PATTERN = re.compile(r"^(unequip|remove|dequip|take off)\b")
ATTACK_PATTERN = re.compile(r"^(attack|fight|kill|hit)\b")
FOLLOW_PATTERN = re.compile(r"\b(follow|join)\b")
TALK_PATTERN = re.compile(r"^(talk|ask|speak|tell|greet)\b")
GIVE_PATTERN = re.compile(r"\bgive\b|\bask for\b|\brequest\b")
GIVE_ITEM_WORDS = re.compile(r"\b(item|items|potion|potions|food|stim|stims|kit|equipment)\b")
SHOP_PATTERN = re.compile(r"what do you have|for sale|show wares|show shop")
BUY_PATTERN = re.compile(r"^(buy|purchase)\b")
SELL_PATTERN = re.compile(r"^sell\b")
TAKE_PATTERN = re.compile(r"^(take|grab|loot|get|pick up)\b")
GATHER_PATTERN = re.compile(r"^(search|gather|forage|mine|pick)\b|\blook for\b")
RECIPES_PATTERN = re.compile(r"recipe|what can you make|what can you craft")
CRAFT_PATTERN = re.compile(r"^craft\b|\b(forge|brew|make)\b")
QUEST_PATTERN = re.compile(r"\bquests?\b")
EXAMINE_PATTERN = re.compile(r"^(examine|inspect|look at|check)\b")
DROP_PATTERN = re.compile(r"^(drop|discard)\b")
USE_PATTERN = re.compile(r"^(use|drink|eat|quaff|read)\b")

EQUIP_KEYWORDS = frozenset({"equip", "wear", "wield", "the", "a", "an", "my"})
UNEQUIP_KEYWORDS = frozenset({"unequip", "remove", "dequip", "take", "off", "the", "a", "an", "my"})
BUY_KEYWORDS = frozenset({"buy", "purchase", "from", "the", "a", "an"})
SELL_KEYWORDS = frozenset({"sell", "to", "the", "a", "an", "my"})
GATHER_KEYWORDS = frozenset(
    {"search", "gather", "forage", "mine", "pick", "look", "for", "the", "some", "any"}
)
CRAFT_KEYWORDS = frozenset(
    {"craft", "forge", "brew", "make", "create", "a", "an", "the", "me", "ask", "to"}
)
TAKE_KEYWORDS = frozenset({"take", "grab", "loot", "get", "pick", "up", "the", "a", "an", "from"})
EXAMINE_KEYWORDS = frozenset({"examine", "inspect", "look", "at", "check", "the", "a", "an"})
DROP_KEYWORDS = frozenset({"drop", "discard", "the", "a", "an", "my"})
USE_KEYWORDS = frozenset({"use", "drink", "eat", "quaff", "read", "the", "a", "an", "my"})


def _words(text: str) -> list[str]:
    return text.replace("-", " ").split()


def _npc_in_command(lower: str, names: list[str]) -> str | None:
    """A character named in the command, by full name or any significant name word."""
    for name in names:
        if name.lower() in lower:
            return name
    words = set(_words(lower))
    for name in names:
        if any(len(w) >= 3 and w in words for w in significant_words(name)):
            return name
    return None


@dataclass
class FallbackIntentParser:
    """
    Deterministic keyword parser used when the LLM cannot answer.

    Produces at most one intent. Rules are tried in a fixed order and
    the first hit wins.
    """

    def parse(self, command: str, snapshot: WorldSnapshot) -> ActionIntent | None:
        """
        Parse a command against the visible world.

        Args:
            command: Raw player input
            snapshot: What is visible this turn

        Returns:
            One ActionIntent, or None if no rule matched
        """
        lower = normalize(command)
        if not lower:
            return None
        words = _words(lower)
        first = words[0]

        intent = self._movement(lower, words, first, snapshot)
        if intent is not None:
            return intent

        if lower in SINGLE_WORD_COMMANDS:
            kind = SINGLE_WORD_COMMANDS[lower]
            if kind == ActionKind.SHOP and not snapshot.economy_enabled:
                return None
            return ActionIntent(action=kind)

        if EQUIP_PATTERN.match(lower):
            target = strip_keywords(lower, EQUIP_KEYWORDS)
            if target:
                return ActionIntent(action=ActionKind.EQUIP, target=target)

        if UNEQUIP_PATTERN.match(lower):
            target = strip_keywords(lower, UNEQUIP_KEYWORDS)
            if target:
                return ActionIntent(action=ActionKind.UNEQUIP, target=target)

        all_npcs = snapshot.npcs + snapshot.dead_npcs

        if ATTACK_PATTERN.match(lower):
            if snapshot.in_combat and snapshot.combat_opponent:
                return ActionIntent(
                    action=ActionKind.ATTACK, target=snapshot.combat_opponent, details=lower
                )
            name = _npc_in_command(lower, all_npcs)
            if name is not None:
                return ActionIntent(action=ActionKind.ATTACK, target=name, details=lower)

        if FOLLOW_PATTERN.search(lower):
            name = _npc_in_command(lower, snapshot.npcs)
            if name is not None:
                return ActionIntent(action=ActionKind.FOLLOW, target=name, details=lower)

        if TALK_PATTERN.match(lower):
            name = _npc_in_command(lower, snapshot.npcs)
            # "ask the smith to forge a sword" is a crafting order
            crafting = name in snapshot.crafters and CRAFT_PATTERN.search(lower)
            if name is not None and not crafting:
                return ActionIntent(action=ActionKind.TALK, target=name, details=lower)

        if GIVE_PATTERN.search(lower) or ("ask" in words and GIVE_ITEM_WORDS.search(lower)):
            name = _npc_in_command(lower, snapshot.npcs)
            if name is not None:
                return ActionIntent(action=ActionKind.GIVE, target=name, details=lower)

        if snapshot.economy_enabled:
            intent = self._economy(lower, snapshot)
            if intent is not None:
                return intent

        if TAKE_PATTERN.match(lower):
            target = strip_keywords(lower, TAKE_KEYWORDS)
            if target:
                return ActionIntent(action=ActionKind.TAKE, target=target)

        if GATHER_PATTERN.search(lower):
            target = strip_keywords(lower, GATHER_KEYWORDS) or "resources"
            return ActionIntent(action=ActionKind.GATHER, target=target)

        crafter = snapshot.crafters[0] if snapshot.crafters else ""
        if RECIPES_PATTERN.search(lower):
            return ActionIntent(action=ActionKind.RECIPES, target=crafter)

        if CRAFT_PATTERN.search(lower):
            item = strip_keywords(lower, CRAFT_KEYWORDS)
            named = _npc_in_command(lower, snapshot.crafters)
            if named is not None:
                crafter = named
                item = " ".join(w for w in _words(item) if w not in significant_words(named))
            return ActionIntent(action=ActionKind.CRAFT, target=crafter, details=item)

        if QUEST_PATTERN.search(lower):
            return ActionIntent(action=ActionKind.QUESTS)

        if EXAMINE_PATTERN.match(lower):
            return ActionIntent(
                action=ActionKind.EXAMINE,
                target=strip_keywords(lower, EXAMINE_KEYWORDS),
                details=lower,
            )

        if DROP_PATTERN.match(lower):
            return ActionIntent(action=ActionKind.DROP, target=strip_keywords(lower, DROP_KEYWORDS))

        if USE_PATTERN.match(lower):
            rest = strip_keywords(lower, USE_KEYWORDS)
            item, _, on = rest.partition(" on ")
            if on:
                return ActionIntent(action=ActionKind.USE, target=on.strip(), details=item.strip())
            return ActionIntent(action=ActionKind.USE, target=rest)

        return None

    def _movement(
        self, lower: str, words: list[str], first: str, snapshot: WorldSnapshot
    ) -> ActionIntent | None:
        if first in NON_MOVE_VERBS or not snapshot.exits:
            return None

        for direction in DIRECTIONS:
            if direction in words and match_name(direction, snapshot.exits) is not None:
                return ActionIntent(action=ActionKind.MOVE, target=direction)

        for exit_name in snapshot.exits:
            exit_lower = exit_name.lower()
            if lower == exit_lower:
                return ActionIntent(action=ActionKind.MOVE, target=exit_name)
            for word in significant_words(exit_name):
                if any(w == word or w.startswith(word) for w in words):
                    return ActionIntent(action=ActionKind.MOVE, target=exit_name)
            if exit_lower in lower:
                return ActionIntent(action=ActionKind.MOVE, target=exit_name)

        if lower in {"go", "go out"}:
            default = next((e for e in snapshot.exits if "out" in e.lower()), snapshot.exits[0])
            return ActionIntent(action=ActionKind.MOVE, target=default)

        return None

    def _economy(self, lower: str, snapshot: WorldSnapshot) -> ActionIntent | None:
        merchant = snapshot.merchants[0] if snapshot.merchants else ""

        if SHOP_PATTERN.search(lower):
            return ActionIntent(action=ActionKind.SHOP, target=merchant)

        if BUY_PATTERN.match(lower):
            item = strip_keywords(lower, BUY_KEYWORDS)
            named = _npc_in_command(lower, snapshot.merchants)
            if named is not None:
                merchant = named
                item = " ".join(w for w in _words(item) if w not in significant_words(named))
            return ActionIntent(action=ActionKind.BUY, target=merchant, details=item)

        if SELL_PATTERN.match(lower):
            item = strip_keywords(lower, SELL_KEYWORDS)
            named = _npc_in_command(lower, snapshot.merchants)
            if named is not None:
                merchant = named
                item = " ".join(w for w in _words(item) if w not in significant_words(named))
            return ActionIntent(action=ActionKind.SELL, target=merchant, details=item)

        return None


# =============================================================================
# Interpreter
# =============================================================================


@dataclass
class IntentInterpreter:
    """
    Primary LLM interpretation with deterministic fallback.

    The fallback runs whenever the LLM is missing, raises, or returns
    nothing but unknown actions.
    """

    llm: LLMService | None = None
    fallback: FallbackIntentParser = field(default_factory=FallbackIntentParser)
    max_tokens: int = 300
    temperature: float = 0.2

    async def interpret(self, command: str, snapshot: WorldSnapshot) -> list[ActionIntent]:
        """
        Interpret a command.

        Args:
            command: Raw player input
            snapshot: Read-only view of the current turn

        Returns:
            Intents in execution order; empty if nothing was understood
        """
        intents: list[ActionIntent] = []

        if self.llm is not None and self.llm.is_available:
            try:
                raw = await self.llm.decide_actions(
                    render_context(snapshot),
                    command,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                )
                logger.debug("Interpreter reply for %r: %s", command, raw)
                intents = parse_intents(raw)
            except Exception as e:
                logger.warning("Intent interpretation failed, using fallback: %s", e)
                intents = []

        if all(i.action == ActionKind.UNKNOWN for i in intents):
            fallback = self.fallback.parse(command, snapshot)
            if fallback is not None:
                logger.debug("Fallback parser: %s -> %s", command, fallback)
                intents = [fallback]

        logger.debug("Intents for %r: %s", command, intents)
        return intents
