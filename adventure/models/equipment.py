"""
Equipment Slot Models.

Each game declares its own slot layout; items are routed to a slot by
explicit affinity, item type, or name keywords.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from adventure.models.item import Item, ItemType


class EquipmentSlotDefinition(BaseModel):
    """One equipment slot."""

    id: str
    display_name: str
    description: str = ""
    keywords: list[str] = Field(default_factory=list, description="Name hints for this slot")
    compatible_types: list[ItemType] = Field(default_factory=list)
    display_order: int = 0


class EquipmentSlotConfiguration(BaseModel):
    """The slot layout used by a game."""

    slots: list[EquipmentSlotDefinition] = Field(default_factory=list)

    @classmethod
    def default(cls) -> EquipmentSlotConfiguration:
        """Fantasy layout: two hands plus five armor slots."""
        armor = [ItemType.ARMOR]
        return cls(
            slots=[
                EquipmentSlotDefinition(
                    id="main_hand",
                    display_name="Main Hand",
                    description="Primary weapon or tool",
                    keywords=["weapon", "sword", "axe", "bow", "staff", "dagger", "mace", "spear", "wand"],
                    compatible_types=[ItemType.WEAPON],
                    display_order=1,
                ),
                EquipmentSlotDefinition(
                    id="off_hand",
                    display_name="Off Hand",
                    description="Secondary weapon, shield, or tool",
                    keywords=["shield", "buckler", "offhand"],
                    compatible_types=[ItemType.WEAPON, ItemType.ARMOR],
                    display_order=2,
                ),
                EquipmentSlotDefinition(
                    id="head",
                    display_name="Head",
                    keywords=["helmet", "hat", "crown", "cap", "hood", "circlet", "mask"],
                    compatible_types=armor,
                    display_order=3,
                ),
                EquipmentSlotDefinition(
                    id="chest",
                    display_name="Chest",
                    keywords=["armor", "chestplate", "robe", "tunic", "vest", "shirt", "breastplate"],
                    compatible_types=armor,
                    display_order=4,
                ),
                EquipmentSlotDefinition(
                    id="hands",
                    display_name="Hands",
                    keywords=["gloves", "gauntlets", "bracers", "wristguards"],
                    compatible_types=armor,
                    display_order=5,
                ),
                EquipmentSlotDefinition(
                    id="legs",
                    display_name="Legs",
                    keywords=["pants", "leggings", "greaves", "legguards", "trousers"],
                    compatible_types=armor,
                    display_order=6,
                ),
                EquipmentSlotDefinition(
                    id="feet",
                    display_name="Feet",
                    keywords=["boots", "shoes", "sandals"],
                    compatible_types=armor,
                    display_order=7,
                ),
            ]
        )

    @classmethod
    def minimal(cls) -> EquipmentSlotConfiguration:
        """A single weapon slot."""
        return cls(
            slots=[
                EquipmentSlotDefinition(
                    id="weapon",
                    display_name="Weapon",
                    keywords=["weapon", "sword", "gun", "blade"],
                    compatible_types=[ItemType.WEAPON],
                    display_order=1,
                )
            ]
        )

    @classmethod
    def sci_fi(cls) -> EquipmentSlotConfiguration:
        armor = [ItemType.ARMOR]
        return cls(
            slots=[
                EquipmentSlotDefinition(
                    id="primary_weapon",
                    display_name="Primary Weapon",
                    keywords=["rifle", "gun", "blaster", "weapon", "firearm"],
                    compatible_types=[ItemType.WEAPON],
                    display_order=1,
                ),
                EquipmentSlotDefinition(
                    id="secondary_weapon",
                    display_name="Secondary Weapon",
                    keywords=["pistol", "sidearm", "backup"],
                    compatible_types=[ItemType.WEAPON],
                    display_order=2,
                ),
                EquipmentSlotDefinition(
                    id="helmet",
                    display_name="Helmet",
                    keywords=["helmet", "visor", "headgear"],
                    compatible_types=armor,
                    display_order=3,
                ),
                EquipmentSlotDefinition(
                    id="suit",
                    display_name="Suit",
                    keywords=["suit", "armor", "exosuit", "body"],
                    compatible_types=armor,
                    display_order=4,
                ),
                EquipmentSlotDefinition(
                    id="gloves",
                    display_name="Gloves",
                    keywords=["gloves", "gauntlets", "hands"],
                    compatible_types=armor,
                    display_order=5,
                ),
                EquipmentSlotDefinition(
                    id="boots",
                    display_name="Boots",
                    keywords=["boots", "shoes", "footwear"],
                    compatible_types=armor,
                    display_order=6,
                ),
            ]
        )

    def get_slot(self, slot_id: str) -> EquipmentSlotDefinition | None:
        slot_id = slot_id.lower()
        return next((s for s in self.slots if s.id.lower() == slot_id), None)

    def ordered_slots(self) -> list[EquipmentSlotDefinition]:
        return sorted(self.slots, key=lambda s: s.display_order)

    def slots_for_type(self, item_type: ItemType) -> list[EquipmentSlotDefinition]:
        return [s for s in self.ordered_slots() if item_type in s.compatible_types]

    def determine_slot_for_item(self, item: Item) -> str | None:
        """
        Pick the slot an item goes into.

        Precedence: explicit slot, the only type-compatible slot, a
        type-compatible slot whose keyword appears in the item name, the
        first type-compatible slot, then a keyword match across all slots.
        """
        if item.equipment_slot:
            explicit = self.get_slot(item.equipment_slot)
            if explicit is not None:
                return explicit.id

        type_matches = self.slots_for_type(item.type)
        if len(type_matches) == 1:
            return type_matches[0].id
        if type_matches:
            return self._keyword_slot(item, type_matches) or type_matches[0].id

        return self._keyword_slot(item, self.ordered_slots())

    @staticmethod
    def _keyword_slot(item: Item, slots: list[EquipmentSlotDefinition]) -> str | None:
        # Name keywords first, then the type name ("armor")
        for text in (item.name.lower(), item.type.value):
            for slot in slots:
                if any(k in text for k in slot.keywords):
                    return slot.id
        return None

    def match_slot_name(self, text: str) -> str | None:
        """Resolve "main hand", "mainhand" or "Head" to a slot id."""
        query = text.lower().replace(" ", "").replace("_", "")
        if not query:
            return None
        for slot in self.ordered_slots():
            for name in (slot.id, slot.display_name):
                candidate = name.lower().replace(" ", "").replace("_", "")
                if query in candidate or candidate in query:
                    return slot.id
        return None
