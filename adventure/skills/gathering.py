"""
Resource Gathering Skill.

Success is a percentile roll against the resource's find chance plus a
bonus of 2 per level in the related skill.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from adventure.skills.combat import RollSource
from adventure.skills.matching import normalize

if TYPE_CHECKING:
    from adventure.models.world import GatherableResource, RoomResources

SKILL_BONUS_PER_LEVEL = 2


class GatherRoll(BaseModel):
    """Result of a gather roll."""

    success: bool
    roll: int
    chance: int
    quantity: int = 0


def gather_chance(resource: GatherableResource, skills: dict[str, int]) -> int:
    chance = resource.find_chance
    if resource.related_skill:
        chance += skills.get(resource.related_skill, 0) * SKILL_BONUS_PER_LEVEL
    return chance


def roll_gather(resource: GatherableResource, skills: dict[str, int], rng: RollSource) -> GatherRoll:
    """
    Roll for a resource.

    Quantity on success is uniform in [min_quantity, max_quantity].
    """
    chance = gather_chance(resource, skills)
    roll = rng.randrange(100)
    if roll >= chance:
        return GatherRoll(success=False, roll=roll, chance=chance)

    low = resource.min_quantity
    high = max(low, resource.max_quantity)
    quantity = low + rng.randrange(high - low + 1)
    return GatherRoll(success=True, roll=roll, chance=chance, quantity=quantity)


def find_resource(resources: RoomResources, target: str) -> GatherableResource | None:
    """
    Match a gather target by item id, display name or gather verb.

    An empty target means "whatever is here" and picks the first resource.
    """
    query = normalize(target)
    if not query:
        return resources.resources[0] if resources.resources else None
    for resource in resources.resources:
        if query in resource.item_id.lower():
            return resource
        if resource.display_name and query in resource.display_name.lower():
            return resource
        if resource.gather_verb.lower() in query:
            return resource
    return None


def matches_tag(resources: RoomResources, target: str) -> bool:
    query = normalize(target)
    if not query:
        return False
    return any(tag.lower() in query or query in tag.lower() for tag in resources.resource_tags)


def gathered_verb(resource: GatherableResource) -> str:
    """Past tense used in the success line: "found", "mined", "picked"."""
    verb = resource.gather_verb
    if verb == "gather":
        return "found"
    return f"{verb}d" if verb.endswith("e") else f"{verb}ed"
