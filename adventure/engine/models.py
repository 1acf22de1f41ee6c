"""
Engine Data Models for the adventure engine.

Defines the core data structures for the turn pipeline:
- ActionIntent: One structured action parsed from player input
- ActionResult: Mechanically true outcome of executing an intent
- NpcDecision: Typed answer to an ask-then-enforce question
- WorldSnapshot: Read-only view handed to the interpreter
- TurnResult: Everything a turn produced
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class ActionKind(str, Enum):
    """Closed set of actions the executor knows how to handle."""

    # Movement and perception
    MOVE = "move"
    LOOK = "look"
    EXAMINE = "examine"

    # Items
    INVENTORY = "inventory"
    TAKE = "take"
    DROP = "drop"
    USE = "use"
    EQUIP = "equip"
    UNEQUIP = "unequip"
    EQUIPPED = "equipped"

    # Social
    TALK = "talk"
    FOLLOW = "follow"
    GIVE = "give"

    # Combat
    ATTACK = "attack"
    STOP = "stop"

    # Economy and crafting
    BUY = "buy"
    SELL = "sell"
    SHOP = "shop"
    GATHER = "gather"
    CRAFT = "craft"
    RECIPES = "recipes"

    # Meta
    QUESTS = "quests"
    STATUS = "status"
    HELP = "help"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | ActionKind | None) -> ActionKind:
        """Normalise a free-form action name; anything unrecognised is UNKNOWN."""
        if isinstance(value, ActionKind):
            return value
        if not value:
            return cls.UNKNOWN
        name = value.strip().lower()
        name = ACTION_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN


ACTION_ALIASES: dict[str, str] = {
    "flee": "stop",
    "run": "stop",
    "search": "gather",
    "go": "move",
    "walk": "move",
    "fight": "attack",
    "inv": "inventory",
    "wear": "equip",
    "wield": "equip",
    "quest": "quests",
    "stats": "status",
    "speak": "talk",
}


class ActionIntent(BaseModel):
    """One structured action derived from the player's words."""

    action: ActionKind
    target: str = Field(default="", description="Exit, character or item reference")
    details: str = Field(default="", description="Anything else: what was said, what is wanted")

    @field_validator("action", mode="before")
    @classmethod
    def _parse_action(cls, value: object) -> ActionKind:
        return ActionKind.parse(value if isinstance(value, str) else None)

    @field_validator("target", "details", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> str:
        return "" if value is None else str(value)


class ActionResult(BaseModel):
    """Structured, authoritative outcome of one action. Never narrated here."""

    success: bool
    message: str = ""

    @classmethod
    def ok(cls, message: str) -> ActionResult:
        return cls(success=True, message=message)

    @classmethod
    def fail(cls, message: str) -> ActionResult:
        return cls(success=False, message=message)


class ExecutedAction(BaseModel):
    """An intent paired with what it did."""

    intent: ActionIntent
    result: ActionResult


class NpcDecision(BaseModel):
    """
    Answer to a bounded yes/no question put to the LLM.

    ``subject`` names what the decision is about (items to hand over, the
    resource found). It is never trusted: callers validate it against the
    world before acting on it.
    """

    will_act: bool = False
    subject: list[str] = Field(default_factory=list)
    quantity: int = Field(default=1, ge=0)
    rationale: str = ""
    narrative: str = ""
    failed: bool = Field(default=False, description="The LLM call errored or gave no usable answer")


class WorldSnapshot(BaseModel):
    """What the interpreter may see of the world."""

    room_name: str
    room_description: str = ""
    exits: list[str] = Field(default_factory=list)
    npcs: list[str] = Field(default_factory=list, description="Living characters present")
    dead_npcs: list[str] = Field(default_factory=list)
    merchants: list[str] = Field(default_factory=list)
    crafters: list[str] = Field(default_factory=list)
    companions: list[str] = Field(default_factory=list)
    npc_inventories: dict[str, list[str]] = Field(
        default_factory=dict, description="Living character name -> carried item names"
    )
    inventory: list[str] = Field(default_factory=list, description="Item labels")
    item_names: list[str] = Field(default_factory=list, description="Carried item names")
    equipped: list[str] = Field(default_factory=list)
    player_health: str = ""
    ground_items: list[str] = Field(default_factory=list)
    in_combat: bool = False
    combat_opponent: str | None = None
    economy_enabled: bool = False
    crafting_enabled: bool = False
    recent_commands: str = ""


class TurnResult(BaseModel):
    """Everything one turn produced."""

    response: str = Field(description="Full text shown to the player")
    intents: list[ActionIntent] = Field(default_factory=list)
    results: list[ExecutedAction] = Field(default_factory=list)
    narration: str = ""
    victory: bool = False
    game_over: bool = False
    turn_number: int = 0
    processing_time_ms: int = 0
    error: str | None = None


class EngineConfig(BaseModel):
    """Engine configuration."""

    # LLM settings
    interpret_max_tokens: int = 300
    interpret_temperature: float = 0.2
    narrate_max_tokens: int = 300
    narrate_temperature: float = 0.7
    decision_max_tokens: int = 256
    decision_temperature: float = 0.3
    dialogue_max_tokens: int = 256
    dialogue_temperature: float = 0.8

    # Context settings
    dialogue_history_window: int = 10
    recent_command_window: int = 5

    # Behavior
    use_llm_narration: bool = True
    health_bar_width: int = 20
    rng_seed: int | None = None
