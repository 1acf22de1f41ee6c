"""
World Models for the adventure engine.

Definition tables (rooms, characters, items, quests) and the mutable
session state built from them.
"""

from adventure.models.character import Alignment, Character, ConversationEntry, NPCRole
from adventure.models.economy import (
    EconomyConfig,
    EconomyType,
    TieredCurrencyNames,
    Wallet,
    format_amount,
    split_tiers,
)
from adventure.models.equipment import EquipmentSlotConfiguration, EquipmentSlotDefinition
from adventure.models.game import (
    CraftingConfig,
    CraftingRecipe,
    Game,
    GameMasterAuthority,
    ObjectiveType,
    Quest,
    QuestObjective,
    QuestStatus,
    QuestType,
    RecipeIngredient,
    WinCondition,
    WinConditionType,
)
from adventure.models.item import Inventory, InventoryItem, Item, ItemPricing, ItemType
from adventure.models.state import PLAYER_ID, GameMode, SessionState
from adventure.models.world import Exit, GatherableResource, Room, RoomResources

__all__ = [
    # Items
    "Item",
    "ItemType",
    "ItemPricing",
    "Inventory",
    "InventoryItem",
    # Economy
    "EconomyConfig",
    "EconomyType",
    "TieredCurrencyNames",
    "Wallet",
    "format_amount",
    "split_tiers",
    # Equipment
    "EquipmentSlotConfiguration",
    "EquipmentSlotDefinition",
    # Characters
    "Alignment",
    "Character",
    "ConversationEntry",
    "NPCRole",
    # World
    "Exit",
    "GatherableResource",
    "Room",
    "RoomResources",
    # Game definition
    "CraftingConfig",
    "CraftingRecipe",
    "Game",
    "GameMasterAuthority",
    "ObjectiveType",
    "Quest",
    "QuestObjective",
    "QuestStatus",
    "QuestType",
    "RecipeIngredient",
    "WinCondition",
    "WinConditionType",
    # Session
    "GameMode",
    "PLAYER_ID",
    "SessionState",
]
