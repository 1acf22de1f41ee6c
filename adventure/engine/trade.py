"""
Merchant and crafter handlers.

Every handler checks all of its preconditions before touching any
wallet or inventory, so a refused trade leaves the world unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from adventure.engine.models import ActionResult
from adventure.models.character import NPCRole
from adventure.models.economy import format_amount
from adventure.models.item import ItemType
from adventure.skills.crafting import can_make, find_recipe, missing_display, recipes_for
from adventure.skills.trade import buy_quote, sell_quote

if TYPE_CHECKING:
    from adventure.models.character import Character
    from adventure.models.game import Game
    from adventure.models.state import SessionState


def _find_merchant(state: SessionState, name: str) -> Character | None:
    """The named character, else the first living merchant present."""
    if name:
        npc = state.find_npc_in_room(name)
        if npc is not None:
            return npc
    return next((n for n in state.living_npcs_in_room() if n.role == NPCRole.MERCHANT), None)


def _find_crafter(state: SessionState, name: str) -> Character | None:
    if name:
        npc = state.find_npc_in_room(name)
        if npc is not None:
            return npc
    return next((n for n in state.living_npcs_in_room() if n.can_craft), None)


def _check_merchant(merchant: Character | None, missing: str) -> ActionResult | None:
    if merchant is None:
        return ActionResult.fail(missing)
    if not merchant.is_alive:
        return ActionResult.fail(f"{merchant.name} is dead.")
    if merchant.role != NPCRole.MERCHANT:
        return ActionResult.fail(f"{merchant.name} is not a merchant.")
    return None


def handle_buy(state: SessionState, game: Game, merchant_name: str, item_name: str) -> ActionResult:
    """Buy one unit of an item from a merchant."""
    if not game.economy.enabled:
        return ActionResult.fail("This game doesn't have an economy system.")

    merchant = _find_merchant(state, merchant_name)
    refusal = _check_merchant(merchant, "There's no merchant here to buy from.")
    if refusal is not None:
        return refusal
    if not item_name.strip():
        return ActionResult.fail("Buy what?")

    stock = merchant.carried_items.find_by_name(item_name)
    if stock is None:
        return ActionResult.fail(f"{merchant.name} doesn't have '{item_name}' for sale.")

    item = stock.item
    player = state.player
    quote = buy_quote(player, item)
    price_text = format_amount(quote.price, game.economy)
    if quote.reason == "not_for_sale":
        return ActionResult.fail(f"{item.name} is not for sale.")
    if not quote.allowed:
        return ActionResult.fail(
            f"{item.name} costs {price_text}. You only have {player.wallet.format(game.economy)}."
        )

    player.wallet.remove(quote.price)
    merchant.wallet.add(quote.price)
    merchant.release_item(item.id, 1)
    player.carried_items.add_item(item, 1)
    return ActionResult.ok(f"You bought {item.name} from {merchant.name} for {price_text}.")


def handle_sell(state: SessionState, game: Game, merchant_name: str, item_name: str) -> ActionResult:
    """Sell one unit of a carried item to a merchant."""
    if not game.economy.enabled:
        return ActionResult.fail("This game doesn't have an economy system.")

    merchant = _find_merchant(state, merchant_name)
    refusal = _check_merchant(merchant, "There's no merchant here to sell to.")
    if refusal is not None:
        return refusal
    if not item_name.strip():
        return ActionResult.fail("Sell what?")

    player = state.player
    held = player.carried_items.find_by_name(item_name)
    if held is None:
        return ActionResult.fail(f"You don't have '{item_name}' to sell.")

    item = held.item
    quote = sell_quote(merchant, item)
    if quote.reason == "unsellable":
        return ActionResult.fail(f"{item.name} cannot be sold.")
    if not quote.allowed:
        return ActionResult.fail(f"{merchant.name} doesn't have enough money to buy {item.name}.")

    merchant.wallet.remove(quote.price)
    player.wallet.add(quote.price)
    player.release_item(item.id, 1)
    merchant.carried_items.add_item(item, 1)
    price_text = format_amount(quote.price, game.economy)
    return ActionResult.ok(f"You sold {item.name} to {merchant.name} for {price_text}.")


def handle_shop(state: SessionState, game: Game, merchant_name: str) -> ActionResult:
    """List a merchant's wares with prices."""
    if not game.economy.enabled:
        return ActionResult.fail("This game doesn't have an economy system.")

    merchant = _find_merchant(state, merchant_name)
    refusal = _check_merchant(merchant, "There's no merchant here.")
    if refusal is not None:
        return refusal
    if not len(merchant.carried_items):
        return ActionResult.ok(f"{merchant.name} has nothing for sale right now.")

    lines = [f"🛒 {merchant.name}'s Wares:", ""]
    for stock in merchant.carried_items.items.values():
        item = stock.item
        line = f"  • {item.name}"
        if stock.quantity > 1:
            line += f" (x{stock.quantity})"
        line += f" - {format_amount(item.buy_price(), game.economy)}"
        if item.type == ItemType.WEAPON:
            line += f" [+{item.damage_bonus} dmg]"
        elif item.type == ItemType.ARMOR:
            line += f" [+{item.armor_bonus} armor]"
        elif item.is_consumable:
            line += " [consumable]"
        lines.append(line)

    lines.append("")
    lines.append(f"Your money: {state.player.wallet.format(game.economy)}")
    return ActionResult.ok("\n".join(lines))


def handle_recipes(state: SessionState, game: Game, crafter_name: str) -> ActionResult:
    """List what a crafter present can make."""
    if not game.crafting.enabled:
        return ActionResult.fail("Crafting is not available in this game.")

    crafter = _find_crafter(state, crafter_name)
    if crafter is None or not crafter.can_craft:
        return ActionResult.fail("There's no crafter here.")

    recipes = recipes_for(crafter, game.crafting.recipes)
    if not recipes:
        return ActionResult.ok(f"{crafter.name} doesn't have any recipes available.")

    lines = [f"⚒️ {crafter.name}'s Recipes:", ""]
    for recipe in recipes:
        cost = format_amount(recipe.crafting_cost, game.economy) if game.economy.enabled else "free"
        lines.append(f"  • {recipe.name} - {cost}")
        lines.append(f"    Requires: {recipe.ingredients_display() or 'nothing'}")
    return ActionResult.ok("\n".join(lines))


def handle_craft(state: SessionState, game: Game, crafter_name: str, item_name: str) -> ActionResult:
    """
    Have a crafter make an item.

    Ingredients and the fee are both verified before anything is
    consumed, paid or granted.
    """
    if not game.crafting.enabled:
        return ActionResult.fail("Crafting is not available in this game.")

    crafter = _find_crafter(state, crafter_name)
    if crafter is None:
        return ActionResult.fail("There's no one here who can craft.")
    if not crafter.can_craft:
        return ActionResult.fail(f"{crafter.name} doesn't know how to craft.")
    if not crafter.is_alive:
        return ActionResult.fail(f"{crafter.name} is dead.")
    if not item_name.strip():
        return handle_recipes(state, game, crafter.name)

    recipe = find_recipe(item_name, list(game.crafting.recipes.values()))
    if recipe is None:
        return ActionResult.fail(f"{crafter.name} doesn't know how to craft '{item_name}'.")
    if not can_make(crafter, recipe):
        return ActionResult.fail(f"{crafter.name} can't craft {recipe.name}.")

    player = state.player
    if not recipe.can_craft(player.carried_items):
        return ActionResult.fail(
            "You don't have the required materials. "
            f"Need: {missing_display(recipe, player.carried_items)}"
        )

    cost = recipe.crafting_cost if game.economy.enabled else 0
    cost_text = format_amount(cost, game.economy) if game.economy.enabled else "free"
    if cost > 0 and not player.wallet.can_afford(cost):
        return ActionResult.fail(f"Crafting {recipe.name} costs {cost_text}. You can't afford it.")

    output = game.items.get(recipe.output_item_id)
    if output is None:
        return ActionResult.fail(f"{crafter.name} can't craft {recipe.name}.")

    for ingredient in recipe.ingredients:
        player.release_item(ingredient.item_id, ingredient.quantity)
    if cost > 0:
        player.wallet.remove(cost)
        crafter.wallet.add(cost)
    player.carried_items.add_item(output, recipe.output_quantity)

    return ActionResult.ok(
        f"{crafter.name} crafts {recipe.output_quantity}x {recipe.name} for you! (Cost: {cost_text})"
    )
