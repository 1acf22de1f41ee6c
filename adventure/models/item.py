"""
Item Models for the adventure engine.

Items are immutable templates; quantities and remaining uses are tracked
by whoever holds them (see Inventory).
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from adventure.skills.matching import match_name


class ItemType(str, Enum):
    """Categories of items."""

    WEAPON = "weapon"
    ARMOR = "armor"
    KEY = "key"
    TELEPORTATION = "teleportation"
    CONSUMABLE = "consumable"
    QUEST_ITEM = "quest_item"
    CRAFTING_MATERIAL = "crafting_material"
    TREASURE = "treasure"
    JUNK = "junk"
    TOOL = "tool"
    MISC = "misc"


class ItemPricing(BaseModel):
    """Explicit pricing rule for an item."""

    base_price: int = Field(default=0, ge=0, description="Price in base currency units")
    buy_multiplier: float = Field(default=1.0, ge=0.0)
    sell_multiplier: float = Field(default=0.5, ge=0.0)
    can_buy: bool = True
    can_sell: bool = True

    def buy_price(self) -> int:
        return int(self.base_price * self.buy_multiplier)

    def sell_price(self) -> int:
        return int(self.base_price * self.sell_multiplier)


class Item(BaseModel):
    """An item template."""

    model_config = {"frozen": True}

    id: str
    name: str
    description: str = ""
    type: ItemType = ItemType.MISC

    # Combat
    damage_bonus: int = Field(default=0, description="Added to base damage when wielded")
    armor_bonus: int = Field(default=0, description="Added to armor when worn")
    equipment_slot: str | None = Field(default=None, description="Explicit slot affinity")
    equippable: bool | None = Field(
        default=None, description="Override; weapons and armor are equippable by default"
    )

    # Keys and teleportation
    unlocks_exit: str | None = Field(default=None, description="Exit display name this key opens")
    teleport_destination_room_id: str | None = None
    teleport_message: str | None = None

    # Consumables
    consumable_uses: int = Field(default=0, ge=0, description="Uses per unit (0 = not consumable)")
    consumable_effects: dict[str, int] = Field(
        default_factory=dict, description='Effect name -> magnitude, e.g. {"heal": 50}'
    )

    stackable: bool = False
    value: int = Field(default=0, ge=0)
    weight: int = Field(default=0, ge=0)
    pricing: ItemPricing | None = None

    @property
    def is_equippable(self) -> bool:
        if self.equippable is not None:
            return self.equippable
        return self.type in {ItemType.WEAPON, ItemType.ARMOR}

    @property
    def is_consumable(self) -> bool:
        return self.type == ItemType.CONSUMABLE or self.consumable_uses > 0

    @property
    def is_teleportation(self) -> bool:
        return self.type == ItemType.TELEPORTATION

    @property
    def can_be_sold(self) -> bool:
        if self.pricing is not None:
            return self.pricing.can_sell
        return self.type != ItemType.QUEST_ITEM

    def buy_price(self) -> int:
        """Price a merchant charges for one unit."""
        if self.pricing is not None:
            return self.pricing.buy_price()
        return self.value

    def sell_price(self) -> int:
        """Price a merchant pays for one unit."""
        if self.pricing is not None:
            return self.pricing.sell_price()
        return self.value // 2

    def label(self) -> str:
        """Name with a short type hint, used in LLM context."""
        if self.is_consumable:
            return f"{self.name} (consumable)"
        if self.is_equippable:
            return f"{self.name} (equipment)"
        return self.name


class InventoryItem(BaseModel):
    """A stack of one item held by a character."""

    item: Item
    quantity: int = Field(default=1, ge=0)
    uses_remaining: int | None = Field(
        default=None, description="Uses left on the unit in hand (consumables)"
    )


class Inventory(BaseModel):
    """Item id -> held stack."""

    items: dict[str, InventoryItem] = Field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.items

    def add_item(self, item: Item, quantity: int = 1) -> None:
        """Add units of an item, stacking onto an existing entry."""
        if quantity <= 0:
            return
        entry = self.items.get(item.id)
        if entry is None:
            self.items[item.id] = InventoryItem(
                item=item,
                quantity=quantity,
                uses_remaining=item.consumable_uses or None,
            )
        else:
            entry.quantity += quantity

    def remove_item(self, item_id: str, quantity: int = 1) -> bool:
        """
        Remove units of an item.

        Removing more than is held is a no-op and returns False.
        """
        entry = self.items.get(item_id)
        if entry is None or quantity <= 0 or entry.quantity < quantity:
            return False
        entry.quantity -= quantity
        if entry.quantity == 0:
            del self.items[item_id]
        return True

    def remove_all(self, item_id: str) -> InventoryItem | None:
        """Remove and return a whole stack."""
        return self.items.pop(item_id, None)

    def get_item(self, item_id: str) -> InventoryItem | None:
        return self.items.get(item_id)

    def quantity_of(self, item_id: str) -> int:
        entry = self.items.get(item_id)
        return entry.quantity if entry else 0

    def find_by_name(self, query: str) -> InventoryItem | None:
        """Fuzzy lookup by item name or id."""
        if not query:
            return None
        entries = list(self.items.values())
        match = match_name(query, [e.item.name for e in entries])
        if match is not None:
            return entries[match]
        match = match_name(query, [e.item.id for e in entries])
        if match is not None:
            return entries[match]
        return None

    def names(self) -> list[str]:
        return [entry.item.name for entry in self.items.values()]
