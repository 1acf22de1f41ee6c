"""
Character Models for the adventure engine.

The player and every NPC share one model. Characters are never removed
from the world: a defeated NPC stays in its room as an immobile body that
can be examined and looted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from adventure.models.economy import Wallet
from adventure.models.item import Inventory, Item, ItemType


class Alignment(str, Enum):
    """Moral alignment, used by the combat intervention heuristic."""

    GOOD = "good"
    NEUTRAL = "neutral"
    EVIL = "evil"


class NPCRole(str, Enum):
    """What an NPC does in the world."""

    COMMON_PERSON = "common_person"
    MERCHANT = "merchant"
    HEALER = "healer"
    MAGE = "mage"
    WARRIOR = "warrior"
    SCHOLAR = "scholar"
    GUARD = "guard"
    CRAFTER = "crafter"
    QUEST_GIVER = "quest_giver"
    BOSS = "boss"


class ConversationEntry(BaseModel):
    """One line of an NPC's conversation memory."""

    role: str = Field(description="user or assistant")
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Character(BaseModel):
    """A player or NPC."""

    id: str
    name: str
    description: str = ""
    is_player: bool = False

    # Vitals
    health: int = Field(default=100, ge=0)
    max_health: int = Field(default=100, ge=1)
    level: int = Field(default=1, ge=1)
    experience: int = Field(default=0, ge=0)

    # Combat stats
    strength: int = 10
    agility: int = 10
    armor: int = Field(default=0, ge=0, description="Base armor before equipment")
    skills: dict[str, int] = Field(default_factory=dict, description="Skill name -> level")

    # Possessions
    carried_items: Inventory = Field(default_factory=Inventory)
    equipment_slots: dict[str, str] = Field(
        default_factory=dict, description="Slot id -> equipped item id"
    )
    wallet: Wallet = Field(default_factory=Wallet)

    # Disposition
    alignment: Alignment = Alignment.NEUTRAL
    role: NPCRole = NPCRole.COMMON_PERSON
    relationships: list[str] = Field(
        default_factory=list, description="Ids of characters this one will defend"
    )
    personality_prompt: str | None = None
    conversation_history: list[ConversationEntry] = Field(default_factory=list)

    # Movement and party
    can_move: bool = True
    can_join_party: bool = False
    current_room_id: str | None = None
    home_room_id: str | None = None

    # Crafting
    can_craft: bool = False
    known_recipes: list[str] = Field(default_factory=list)
    crafting_specialty: str | None = None

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def health_percent(self) -> int:
        return self.health * 100 // self.max_health

    def take_damage(self, amount: int) -> None:
        """Reduce health, never below zero."""
        self.health = max(0, self.health - max(0, amount))

    def heal(self, amount: int) -> None:
        """Restore health, never above max."""
        self.health = min(self.max_health, self.health + max(0, amount))

    def gain_experience(self, amount: int) -> None:
        self.experience += max(0, amount)

    # =========================================================================
    # Equipment
    # =========================================================================

    def equip(self, item: Item, slot: str) -> str | None:
        """
        Equip a carried item into a slot.

        Returns:
            Id of the item previously in the slot, if any
        """
        if item.id not in self.carried_items:
            raise ValueError(f"{self.name} is not carrying {item.name}")

        # An item occupies at most one slot
        for slot_id, item_id in list(self.equipment_slots.items()):
            if item_id == item.id:
                del self.equipment_slots[slot_id]

        previous = self.equipment_slots.get(slot)
        self.equipment_slots[slot] = item.id
        return previous if previous != item.id else None

    def unequip(self, slot: str) -> Item | None:
        """Empty a slot; the item stays in the inventory."""
        item_id = self.equipment_slots.pop(slot, None)
        if item_id is None:
            return None
        entry = self.carried_items.get_item(item_id)
        return entry.item if entry else None

    def slot_of(self, item_id: str) -> str | None:
        return next((s for s, i in self.equipment_slots.items() if i == item_id), None)

    def equipped_items(self) -> list[Item]:
        """Items currently worn or wielded, in slot order."""
        items = []
        for item_id in self.equipment_slots.values():
            entry = self.carried_items.get_item(item_id)
            if entry is not None:
                items.append(entry.item)
        return items

    def equipped_weapon(self) -> Item | None:
        return next((i for i in self.equipped_items() if i.type == ItemType.WEAPON), None)

    def weapon_bonus(self) -> int:
        weapon = self.equipped_weapon()
        return weapon.damage_bonus if weapon else 0

    def total_armor(self) -> int:
        """Base armor plus every equipped item's armor bonus."""
        return self.armor + sum(max(0, i.armor_bonus) for i in self.equipped_items())

    def release_item(self, item_id: str, quantity: int = 1) -> bool:
        """
        Remove carried units, unequipping the item if none remain.

        Returns False (and changes nothing) if not enough units are held.
        """
        if not self.carried_items.remove_item(item_id, quantity):
            return False
        if item_id not in self.carried_items:
            slot = self.slot_of(item_id)
            if slot is not None:
                del self.equipment_slots[slot]
        return True
