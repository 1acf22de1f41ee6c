"""
Crafting Skill.

Recipe lookup and crafter capability checks. Nothing here mutates
inventories; the executor performs the transfer once every check passes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from adventure.skills.matching import match_name

if TYPE_CHECKING:
    from adventure.models.character import Character
    from adventure.models.game import CraftingRecipe
    from adventure.models.item import Inventory


def can_make(crafter: Character, recipe: CraftingRecipe) -> bool:
    """A crafter can make a recipe they know, or one in their specialty."""
    if recipe.crafter_id is not None and recipe.crafter_id == crafter.id:
        return True
    if recipe.id in crafter.known_recipes:
        return True
    return crafter.crafting_specialty is not None and (
        recipe.crafting_specialty == crafter.crafting_specialty
    )


def recipes_for(crafter: Character, recipes: dict[str, CraftingRecipe]) -> list[CraftingRecipe]:
    return [r for r in recipes.values() if can_make(crafter, r)]


def find_recipe(query: str, recipes: list[CraftingRecipe]) -> CraftingRecipe | None:
    """Resolve a recipe by name, then by output item id."""
    index = match_name(query, [r.name for r in recipes])
    if index is None:
        index = match_name(query, [r.output_item_id.replace("_", " ") for r in recipes])
    return recipes[index] if index is not None else None


def missing_display(recipe: CraftingRecipe, inventory: Inventory) -> str:
    """Comma-separated "Name xN" for each ingredient the player lacks."""
    return ", ".join(
        f"{i.item_name or i.item_id} x{i.quantity}" for i in recipe.missing_ingredients(inventory)
    )
