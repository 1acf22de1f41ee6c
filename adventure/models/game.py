"""
Game Definition Models.

A Game is the immutable definition a session is built from: rooms,
characters, items, quests, and the per-game configuration for equipment,
economy, crafting and how much the narrator may invent.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from adventure.models.character import Character
from adventure.models.economy import EconomyConfig
from adventure.models.equipment import EquipmentSlotConfiguration
from adventure.models.item import Inventory, Item
from adventure.models.world import Room


# =============================================================================
# Crafting
# =============================================================================


class RecipeIngredient(BaseModel):
    """One input of a recipe."""

    item_id: str
    item_name: str | None = None
    quantity: int = Field(default=1, ge=1)


class CraftingRecipe(BaseModel):
    """A recipe turning ingredients (and a fee) into an item."""

    id: str
    name: str
    description: str = ""
    output_item_id: str
    output_quantity: int = Field(default=1, ge=1)
    ingredients: list[RecipeIngredient] = Field(default_factory=list)
    crafter_id: str | None = Field(default=None, description="Only this NPC can craft it")
    crafting_specialty: str | None = Field(
        default=None, description="Any crafter with this specialty can craft it"
    )
    crafting_cost: int = Field(default=0, ge=0, description="Fee in base currency units")
    player_can_craft: bool = False
    category: str | None = None

    def missing_ingredients(self, inventory: Inventory) -> list[RecipeIngredient]:
        """Ingredients the inventory does not hold enough of."""
        return [
            ing for ing in self.ingredients if inventory.quantity_of(ing.item_id) < ing.quantity
        ]

    def can_craft(self, inventory: Inventory) -> bool:
        return not self.missing_ingredients(inventory)

    def ingredients_display(self) -> str:
        return ", ".join(f"{i.item_name or i.item_id} x{i.quantity}" for i in self.ingredients)


class CraftingConfig(BaseModel):
    """Whether and by whom recipes can be crafted."""

    enabled: bool = False
    player_crafting_enabled: bool = False
    npc_crafting_enabled: bool = True
    recipes: dict[str, CraftingRecipe] = Field(default_factory=dict)

    @classmethod
    def disabled(cls) -> CraftingConfig:
        return cls(enabled=False)

    @classmethod
    def npc_only(cls) -> CraftingConfig:
        return cls(enabled=True, player_crafting_enabled=False, npc_crafting_enabled=True)

    @classmethod
    def full(cls) -> CraftingConfig:
        return cls(enabled=True, player_crafting_enabled=True, npc_crafting_enabled=True)


# =============================================================================
# Authority
# =============================================================================


class GameMasterAuthority(BaseModel):
    """How much content the narrator and decision calls may invent."""

    can_create_items: bool = False
    can_create_quests: bool = False
    can_decide_resources: bool = False
    can_create_recipes: bool = False
    can_create_npcs: bool = False
    can_modify_environment: bool = False
    narration_creativity: int = Field(default=50, ge=0, le=100)

    @classmethod
    def strict(cls) -> GameMasterAuthority:
        return cls(narration_creativity=25)

    @classmethod
    def balanced(cls) -> GameMasterAuthority:
        return cls(can_decide_resources=True, can_modify_environment=True, narration_creativity=50)

    @classmethod
    def dynamic(cls) -> GameMasterAuthority:
        return cls(
            can_create_items=True,
            can_create_quests=True,
            can_decide_resources=True,
            can_create_recipes=True,
            can_create_npcs=True,
            can_modify_environment=True,
            narration_creativity=75,
        )

    @classmethod
    def open_world(cls) -> GameMasterAuthority:
        authority = cls.dynamic()
        authority.narration_creativity = 100
        return authority


# =============================================================================
# Quests and win conditions
# =============================================================================


class QuestStatus(str, Enum):
    OFFERED = "offered"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class QuestType(str, Enum):
    STORY = "story"
    JOB = "job"
    CRAFTING_ORDER = "crafting_order"
    BOUNTY = "bounty"


class ObjectiveType(str, Enum):
    """What completes a quest objective."""

    VISIT_ROOM = "visit_room"
    OBTAIN_ITEM = "obtain_item"
    DEFEAT_NPC = "defeat_npc"


class QuestObjective(BaseModel):
    """A trackable quest step."""

    description: str
    type: ObjectiveType
    target_id: str
    completed: bool = False


class Quest(BaseModel):
    """A quest the player can carry in their log."""

    id: str
    title: str
    description: str = ""
    type: QuestType = QuestType.STORY
    giver_npc_id: str | None = None
    status: QuestStatus = QuestStatus.ACCEPTED
    objectives: list[QuestObjective] = Field(default_factory=list)
    reward_experience: int = Field(default=0, ge=0)
    reward_currency: int = Field(default=0, ge=0)

    @property
    def is_active(self) -> bool:
        return self.status in {QuestStatus.ACCEPTED, QuestStatus.IN_PROGRESS}

    @property
    def is_complete(self) -> bool:
        if self.status == QuestStatus.COMPLETED:
            return True
        return bool(self.objectives) and all(o.completed for o in self.objectives)


class WinConditionType(str, Enum):
    ROOM = "room"
    ITEM = "item"
    NPC_DEFEAT = "npc_defeat"
    QUEST_COMPLETE = "quest_complete"


class WinCondition(BaseModel):
    """A global condition that ends the game in victory."""

    id: str = ""
    description: str = ""
    type: WinConditionType = WinConditionType.ROOM
    target_id: str | None = Field(default=None, description="Room, item, NPC or quest id")
    victory_message: str | None = None
    victory_narration: str | None = None

    def message(self) -> str:
        return self.victory_message or self.victory_narration or "You have achieved victory!"


# =============================================================================
# Game
# =============================================================================


class Game(BaseModel):
    """A complete game definition."""

    id: str
    title: str
    subtitle: str | None = None
    description: str = ""
    story_introduction: str | None = None
    objective: str | None = None

    rooms: dict[str, Room] = Field(default_factory=dict)
    npcs: dict[str, Character] = Field(default_factory=dict)
    items: dict[str, Item] = Field(default_factory=dict)
    quests: list[Quest] = Field(default_factory=list)

    starting_room_id: str = "start"
    win_conditions: list[WinCondition] = Field(default_factory=list)
    win_condition_room_ids: list[str] = Field(
        default_factory=list, description="Legacy: reaching any of these rooms wins"
    )

    initial_player_health: int = Field(default=100, ge=1)
    initial_player_description: str = "A brave adventurer"
    starting_currency: int = Field(default=0, ge=0)
    starting_item_ids: list[str] = Field(default_factory=list)

    equipment: EquipmentSlotConfiguration = Field(
        default_factory=EquipmentSlotConfiguration.default
    )
    economy: EconomyConfig = Field(default_factory=EconomyConfig.disabled)
    authority: GameMasterAuthority = Field(default_factory=GameMasterAuthority.balanced)
    crafting: CraftingConfig = Field(default_factory=CraftingConfig.disabled)

    def validate_world(self) -> None:
        """
        Check referential integrity.

        Raises:
            ValueError: If the starting room is missing, or an exit, NPC
                placement or starting item refers to something undefined
        """
        if self.starting_room_id not in self.rooms:
            raise ValueError(f"Starting room '{self.starting_room_id}' does not exist")

        for room in self.rooms.values():
            for exit_ in room.exits:
                if exit_.destination_room_id not in self.rooms:
                    raise ValueError(
                        f"Exit '{exit_.display_name}' in room '{room.id}' leads to "
                        f"missing room '{exit_.destination_room_id}'"
                    )
            for npc_id in room.npc_ids:
                if npc_id not in self.npcs:
                    raise ValueError(f"Room '{room.id}' lists unknown NPC '{npc_id}'")

        for item_id in self.starting_item_ids:
            if item_id not in self.items:
                raise ValueError(f"Starting item '{item_id}' does not exist")
