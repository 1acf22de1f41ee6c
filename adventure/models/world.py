"""
Room Models for the adventure engine.

Rooms hold exits, the ids of characters present, items lying on the
ground, and optional gatherable resource definitions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from adventure.models.item import Inventory
from adventure.skills.matching import match_name

DEFAULT_RESPAWN_TURNS = 10


class Exit(BaseModel):
    """A way out of a room, shown to the player by display name."""

    display_name: str = Field(description='e.g. "North", "Into the tavern"')
    destination_room_id: str
    description: str | None = None
    is_available: bool = True
    unavailable_reason: str | None = Field(default=None, description='e.g. "The door is locked"')


class GatherableResource(BaseModel):
    """A resource that can be gathered in a room."""

    item_id: str
    display_name: str | None = None
    min_quantity: int = Field(default=1, ge=1)
    max_quantity: int = Field(default=1, ge=1)
    find_chance: int = Field(default=50, ge=0, le=100)
    renewable: bool = True
    respawn_turns: int | None = None
    required_tool: str | None = Field(default=None, description="Item id needed to gather")
    gather_verb: str = "gather"
    related_skill: str | None = None
    difficulty: int = 0


class RoomResources(BaseModel):
    """Resource configuration and depletion state for one room."""

    resources: list[GatherableResource] = Field(default_factory=list)
    biome: str | None = Field(default=None, description="forest, cave, mountain, ...")
    resource_tags: list[str] = Field(
        default_factory=list, description="Kinds of material plausibly found here"
    )
    depleted: dict[str, int] = Field(
        default_factory=dict, description="Item id -> turns until it respawns"
    )

    def is_depleted(self, item_id: str) -> bool:
        return self.depleted.get(item_id, 0) > 0

    def deplete(self, resource: GatherableResource) -> None:
        self.depleted[resource.item_id] = resource.respawn_turns or DEFAULT_RESPAWN_TURNS

    def tick(self) -> None:
        """Advance respawn counters by one turn."""
        for item_id in list(self.depleted):
            self.depleted[item_id] -= 1
            if self.depleted[item_id] <= 0:
                del self.depleted[item_id]


class Room(BaseModel):
    """A location in the game world."""

    id: str
    name: str
    description: str = ""
    exits: list[Exit] = Field(default_factory=list)
    npc_ids: list[str] = Field(default_factory=list)
    items: Inventory = Field(default_factory=Inventory, description="Items on the ground")
    metadata: dict[str, Any] = Field(default_factory=dict)
    resources: RoomResources | None = None

    @property
    def biome(self) -> str | None:
        if self.resources is not None and self.resources.biome:
            return self.resources.biome
        biome = self.metadata.get("biome")
        return biome if isinstance(biome, str) else None

    def available_exits(self) -> list[Exit]:
        return [e for e in self.exits if e.is_available]

    def exit_names(self) -> list[str]:
        return [e.display_name for e in self.available_exits()]

    def find_exit(self, name: str) -> Exit | None:
        """Resolve an exit reference among the available exits."""
        exits = self.available_exits()
        index = match_name(name, [e.display_name for e in exits])
        return exits[index] if index is not None else None

    def _exit_named(self, display_name: str) -> Exit | None:
        target = display_name.lower()
        return next((e for e in self.exits if e.display_name.lower() == target), None)

    def lock_exit(self, display_name: str, reason: str | None = None) -> bool:
        exit_ = self._exit_named(display_name)
        if exit_ is None:
            return False
        exit_.is_available = False
        exit_.unavailable_reason = reason
        return True

    def unlock_exit(self, display_name: str) -> bool:
        exit_ = self._exit_named(display_name)
        if exit_ is None:
            return False
        exit_.is_available = True
        exit_.unavailable_reason = None
        return True

    def add_npc(self, npc_id: str) -> None:
        if npc_id not in self.npc_ids:
            self.npc_ids.append(npc_id)

    def remove_npc(self, npc_id: str) -> None:
        if npc_id in self.npc_ids:
            self.npc_ids.remove(npc_id)
