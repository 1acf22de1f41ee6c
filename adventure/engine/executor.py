"""
Action Executor for the adventure engine.

Applies one ActionIntent to the session and returns the mechanically
true ActionResult. Each ActionKind maps to exactly one handler; handlers
mutate the SessionState they are given and never narrate.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from adventure.engine import trade
from adventure.engine.decisions import NpcDecisionMaker, enforce_give
from adventure.engine.display import (
    available_actions,
    combat_status,
    player_status,
    quest_log,
)
from adventure.engine.models import ActionIntent, ActionKind, ActionResult
from adventure.models.character import Alignment, Character, NPCRole
from adventure.models.economy import format_amount
from adventure.models.item import InventoryItem, Item, ItemType
from adventure.services.npc import NPCDialogueService
from adventure.skills.combat import (
    CombatStats,
    RollSource,
    attempt_flee,
    base_damage,
    companion_assistance,
    health_bar,
    resolve_attack,
)
from adventure.skills.gathering import find_resource, gathered_verb, matches_tag, roll_gather
from adventure.skills.matching import match_name, normalize
from adventure.skills.trade import experience_for_defeat

if TYPE_CHECKING:
    from adventure.models.game import Game
    from adventure.models.state import SessionState
    from adventure.models.world import GatherableResource, Room
    from adventure.services.llm import LLMService

logger = logging.getLogger(__name__)

SELF_WORDS = frozenset({"", "me", "myself", "self", "yourself", "player"})
GENERIC_GATHER_TARGETS = frozenset({"", "resources", "resource", "materials", "anything"})
DYNAMIC_ITEM_VALUE = 5


Handler = Callable[["ActionExecutor", ActionIntent, "SessionState", str], Awaitable[ActionResult]]


@dataclass
class ActionExecutor:
    """
    Executes intents against a session.

    Args:
        game: The definition the session was built from (configuration
            and item templates)
        rng: Roll source for combat, flee and gathering
        llm: Used to phrase player speech for NPCs
        decisions: Bounded NPC decisions (give, follow, dynamic gather)
        dialogue: In-character NPC conversation
    """

    game: Game
    rng: RollSource
    llm: LLMService | None = None
    decisions: NpcDecisionMaker = field(default_factory=NpcDecisionMaker)
    dialogue: NPCDialogueService = field(default_factory=NPCDialogueService)
    health_bar_width: int = 20

    async def execute(self, intent: ActionIntent, state: SessionState, command: str = "") -> ActionResult:
        """
        Run the handler for an intent.

        Args:
            intent: What to do
            state: Session to act on
            command: The player's original words, for handlers that infer targets

        Returns:
            ActionResult describing what actually happened
        """
        handler = HANDLERS[intent.action]
        logger.debug("Executing %s target=%r details=%r", intent.action.value, intent.target, intent.details)
        return await handler(self, intent, state, command)

    # =========================================================================
    # Movement and perception
    # =========================================================================

    async def _move(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        room = state.current_room()
        target = intent.target or intent.details
        exits = ", ".join(room.exit_names()) or "none"
        if not target.strip():
            return ActionResult.fail(f"Go where? Available exits: {exits}")

        exit_ = state.move_through_exit(target)
        if exit_ is None:
            blocked = next(
                (
                    e
                    for e in room.exits
                    if not e.is_available and match_name(target, [e.display_name]) is not None
                ),
                None,
            )
            if blocked is not None:
                return ActionResult.fail(blocked.unavailable_reason or f"The way {blocked.display_name} is blocked.")
            return ActionResult.fail(f'You can\'t go "{target}". Available exits: {exits}')

        return ActionResult.ok(f"You go {exit_.display_name}. You arrive at {state.current_room().name}.")

    async def _look(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        room = state.current_room()
        seen = [n.name if n.is_alive else f"{n.name} (dead)" for n in state.npcs_in_room()]
        lines = [
            room.description or room.name,
            "",
            f"You can go: {', '.join(room.exit_names()) or 'nowhere'}",
            f"You see: {', '.join(seen) or 'no one'}",
        ]
        if len(room.items):
            lines.append(f"On the ground: {', '.join(room.items.names())}")
        return ActionResult.ok("\n".join(lines))

    async def _inventory(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        player = state.player
        if not len(player.carried_items):
            message = "Your inventory is empty."
        else:
            entries = [f"{e.item.name} x{e.quantity}" for e in player.carried_items.items.values()]
            message = f"Inventory: {', '.join(entries)}"
        if self.game.economy.enabled:
            message += f"\nMoney: {player.wallet.format(self.game.economy)}"
        return ActionResult.ok(message)

    async def _examine(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        target = intent.target.strip()
        if not target:
            inferred = self._infer_examine_target(state, command or intent.details)
            if inferred is None:
                return ActionResult.fail("Examine what?")
            return self._describe_character(inferred)

        held = state.player.carried_items.find_by_name(target)
        if held is not None:
            return ActionResult.ok(self._describe_item(held.item))

        npc = state.find_npc_in_room(target)
        if npc is not None:
            return self._describe_character(npc)

        ground = state.current_room().items.find_by_name(target)
        if ground is not None:
            return ActionResult.ok(self._describe_item(ground.item))

        return ActionResult.fail(f"You don't see '{target}' here.")

    def _infer_examine_target(self, state: SessionState, command: str) -> Character | None:
        lower = normalize(command)
        present = state.npcs_in_room()
        for npc in present:
            if lower and npc.name.lower() in lower:
                return npc
        # "search the body" and friends: the first body here
        return next((n for n in present if not n.is_alive), None)

    def _describe_item(self, item: Item) -> str:
        text = f"{item.name}: {item.description or 'Nothing remarkable.'}"
        if item.type == ItemType.WEAPON:
            text += f" (Damage: {item.damage_bonus})"
        elif item.type == ItemType.ARMOR:
            text += f" (Armor: {item.armor_bonus})"
        if self.game.economy.enabled and item.can_be_sold:
            text += f"\nSell value: {format_amount(item.sell_price(), self.game.economy)}"
        return text

    def _describe_character(self, npc: Character) -> ActionResult:
        text = f"{npc.name}: {npc.description or 'An NPC'}"
        if npc.is_alive:
            bar = health_bar(npc.health, npc.max_health, self.health_bar_width)
            text += f"\n\nHealth: {bar} {npc.health}/{npc.max_health} HP"
            text += (
                f"\nLevel: {npc.level} | Strength: {npc.strength} | "
                f"Agility: {npc.agility} | Armor: {npc.total_armor()}"
            )
            if npc.role == NPCRole.MERCHANT:
                text += "\n\n🛒 This is a merchant. Use 'shop' to see their wares."
            return ActionResult.ok(text)

        text += f"\n\n☠️ {npc.name} is dead. Their body lies here lifeless. (HP: 0/{npc.max_health})"
        if len(npc.carried_items):
            loot = ", ".join(
                f"{e.item.name} (x{e.quantity})" if e.quantity > 1 else e.item.name
                for e in npc.carried_items.items.values()
            )
            text += f"\nOn their body, you find: {loot}"
            text += "\nYou can use 'take [item name]' to loot these items."
        else:
            text += "\nTheir body has no items on it."
        return ActionResult.ok(text)

    # =========================================================================
    # Items
    # =========================================================================

    async def _take(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        target = (intent.target or intent.details).strip()
        if not target:
            return ActionResult.fail("Take what?")

        player = state.player
        room = state.current_room()
        bodies = [n for n in state.npcs_in_room() if not n.is_alive]

        # Naming a body loots everything on it
        body_index = match_name(target, [n.name for n in bodies])
        body = bodies[body_index] if body_index is not None else None
        if body is not None and body.carried_items.find_by_name(target) is None:
            if not len(body.carried_items):
                return ActionResult.fail(f"{body.name}'s body has no items to take.")
            names = []
            for entry in list(body.carried_items.items.values()):
                self._transfer(body, player, entry.item, entry.quantity)
                names.append(entry.item.name)
            return ActionResult.ok(f"You take {', '.join(names)} from {body.name}'s body.")

        ground = room.items.find_by_name(target)
        if ground is not None:
            item, quantity = ground.item, ground.quantity
            room.items.remove_item(item.id, quantity)
            player.carried_items.add_item(item, quantity)
            return ActionResult.ok(f"You take {item.name}.")

        for body in bodies:
            entry = body.carried_items.find_by_name(target)
            if entry is not None:
                item = entry.item
                self._transfer(body, player, item, entry.quantity)
                return ActionResult.ok(f"You take {item.name} from {body.name}'s body.")

        held = player.carried_items.find_by_name(target)
        if held is not None:
            return ActionResult.fail(f"You already have {held.item.name}.")

        return ActionResult.fail(f"You don't see '{target}' here to take.")

    @staticmethod
    def _transfer(source: Character, dest: Character, item: Item, quantity: int) -> None:
        if source.release_item(item.id, quantity):
            dest.carried_items.add_item(item, quantity)

    async def _drop(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        target = (intent.target or intent.details).strip()
        if not target:
            return ActionResult.fail("Drop what?")

        held = state.player.carried_items.find_by_name(target)
        if held is None:
            return ActionResult.fail(f"You don't have '{target}'.")

        item = held.item
        state.player.release_item(item.id, 1)
        state.current_room().items.add_item(item, 1)
        return ActionResult.ok(f"You dropped {item.name}.")

    async def _use(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        # "use potion on ranger" arrives as target=ranger, details=potion
        if intent.details.strip():
            item_name, on_target = intent.details.strip(), intent.target.strip()
        else:
            item_name, on_target = intent.target.strip(), ""
        if not item_name:
            return ActionResult.fail("Use what?")

        player = state.player
        held = player.carried_items.find_by_name(item_name)
        if held is None:
            return ActionResult.fail(f"You don't have '{item_name}'.")
        item = held.item

        if item.is_teleportation and item.teleport_destination_room_id in state.rooms:
            enemy = state.combat_opponent()
            if enemy is not None:
                return ActionResult.fail(f"You're in combat with {enemy.name}! Attack or flee.")
            state.relocate_party(item.teleport_destination_room_id)
            text = f"You use {item.name} and are transported to {state.current_room().name}!"
            if item.teleport_message:
                text = f"{item.teleport_message}\n\n{text}"
            return ActionResult.ok(text)

        if item.unlocks_exit:
            room = state.current_room()
            if room.unlock_exit(item.unlocks_exit):
                return ActionResult.ok(f"You use {item.name} to unlock {item.unlocks_exit}.")
            return ActionResult.fail(f"There's nothing here to unlock with {item.name}.")

        if item.is_consumable:
            recipient = player
            if normalize(on_target) not in SELF_WORDS:
                recipient = state.find_npc_in_room(on_target, alive_only=True)
                if recipient is None:
                    return ActionResult.fail(f"You don't see '{on_target}' here.")

            heal = item.consumable_effects.get("heal", 0)
            before = recipient.health
            recipient.heal(heal)
            restored = recipient.health - before
            self._consume_use(player, held)

            if recipient is player:
                if heal:
                    return ActionResult.ok(f"You use {item.name} and restore {restored} health.")
                return ActionResult.ok(f"You use {item.name}.")
            if heal:
                return ActionResult.ok(
                    f"You give {item.name} to {recipient.name}.\n"
                    f"{recipient.name} uses it and recovers {restored} health."
                )
            return ActionResult.ok(f"You use {item.name} on {recipient.name}.")

        return ActionResult.fail(f"You can't use {item.name} like that.")

    @staticmethod
    def _consume_use(player: Character, held: InventoryItem) -> None:
        """Spend one use; the unit is gone when its uses run out."""
        uses = held.uses_remaining if held.uses_remaining is not None else 1
        uses -= 1
        if uses > 0:
            held.uses_remaining = uses
            return
        player.release_item(held.item.id, 1)
        if held.quantity > 0:
            held.uses_remaining = held.item.consumable_uses or None

    async def _equip(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        target = (intent.target or intent.details).strip()
        if not target:
            return ActionResult.fail("Equip what?")

        player = state.player
        held = player.carried_items.find_by_name(target)
        if held is None:
            return ActionResult.fail(f"You don't have '{target}' in your inventory.")
        item = held.item
        if not item.is_equippable:
            return ActionResult.fail(f"{item.name} cannot be equipped.")

        slot = self.game.equipment.determine_slot_for_item(item)
        if slot is None:
            return ActionResult.fail(f"{item.name} doesn't have a valid equipment slot.")

        previous_id = player.equip(item, slot)
        text = f"You equip {item.name}"
        if previous_id is not None:
            previous = player.carried_items.get_item(previous_id)
            text += f" (unequipped {previous.item.name if previous else previous_id})"
        text += "."
        if item.damage_bonus:
            text += f" [+{item.damage_bonus} damage]"
        if item.armor_bonus:
            text += f" [+{item.armor_bonus} armor]"
        return ActionResult.ok(text)

    async def _unequip(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        target = (intent.target or intent.details).strip()
        if not target:
            return ActionResult.fail("Unequip what?")

        player = state.player
        equipped = player.equipped_items()
        slot = None
        index = match_name(target, [i.name for i in equipped])
        if index is not None:
            slot = player.slot_of(equipped[index].id)
        else:
            slot_id = self.game.equipment.match_slot_name(target)
            if slot_id is not None and slot_id in player.equipment_slots:
                slot = slot_id

        item = player.unequip(slot) if slot is not None else None
        if item is None:
            return ActionResult.fail(f"You don't have '{target}' equipped.")
        return ActionResult.ok(f"You unequip {item.name}.")

    async def _equipped(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        player = state.player
        if not player.equipped_items():
            return ActionResult.ok("You have nothing equipped.")

        lines = ["Currently Equipped:"]
        slot_names = {s.id: s.display_name for s in self.game.equipment.ordered_slots()}
        order = [s.id for s in self.game.equipment.ordered_slots()]
        slots = sorted(
            player.equipment_slots.items(),
            key=lambda kv: order.index(kv[0]) if kv[0] in order else len(order),
        )
        for slot_id, item_id in slots:
            entry = player.carried_items.get_item(item_id)
            if entry is None:
                continue
            item = entry.item
            bonuses = []
            if item.damage_bonus:
                bonuses.append(f"+{item.damage_bonus} dmg")
            if item.armor_bonus:
                bonuses.append(f"+{item.armor_bonus} armor")
            suffix = f" [{', '.join(bonuses)}]" if bonuses else ""
            lines.append(f"  {slot_names.get(slot_id, slot_id)}: {item.name}{suffix}")

        lines.append(
            f"\nTotal: {base_damage(player.strength, player.weapon_bonus())} damage, "
            f"{player.total_armor()} armor"
        )
        return ActionResult.ok("\n".join(lines))

    # =========================================================================
    # Social
    # =========================================================================

    async def _talk(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        name = intent.target.strip()
        npc = state.find_npc_in_room(name) if name else None
        if npc is None:
            return ActionResult.fail(f"You don't see '{name}' here to talk to.")
        if not npc.is_alive:
            return ActionResult.fail(f"{npc.name} is dead and cannot respond.")

        message = await self._npc_message(intent.details or command, npc)
        reply = await self.dialogue.converse(npc, message)
        if reply == self.dialogue.confused_line(npc):
            return ActionResult.ok(reply)
        return ActionResult.ok(f'{npc.name} says: "{reply}"')

    async def _npc_message(self, command: str, npc: Character) -> str:
        """Phrase the player's command as speech addressed to the NPC."""
        command = command.strip()
        if not command:
            return "The player greets you."
        if self.llm is None or not self.llm.is_available:
            return f'The player says: "{command}"'
        try:
            converted = await self.llm.convert_to_npc_message(command, npc.name)
        except Exception as e:
            logger.warning("Message conversion for %s failed: %s", npc.name, e)
            converted = ""
        converted = converted.strip().strip('"')
        return converted or f'The player says: "{command}"'

    async def _follow(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        name = intent.target.strip()
        npc = state.find_npc_in_room(name, alive_only=True) if name else None
        if npc is None:
            return ActionResult.fail(f"You don't see '{name}' here to ask to follow.")
        if npc.id in state.companions:
            return ActionResult.ok(f"{npc.name} is already with you.")
        if not npc.can_join_party or not npc.can_move:
            return ActionResult.fail(f"{npc.name} doesn't want to follow you.")

        decision = await self.decisions.follow_decision(npc)
        response = decision.narrative or "..."
        if not decision.will_act:
            return ActionResult.fail(f'{npc.name} says: "{response}"')

        state.add_companion(npc.id)
        state.move_npc(npc.id, state.current_room_id)
        return ActionResult.ok(
            f'{npc.name} says: "{response}"\n\n{npc.name} joins your party and will follow you.'
        )

    async def _give(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        name = intent.target.strip()
        npc = state.find_npc_in_room(name, alive_only=True) if name else None
        if npc is None:
            return ActionResult.fail(f"You don't see '{name}' here to ask for items.")

        request = intent.details or command or f"The player asks {npc.name} for items"
        decision = await self.decisions.give_decision(npc, request)

        received = []
        for entry in enforce_give(npc, decision):
            item, quantity = entry.item, entry.quantity
            self._transfer(npc, state.player, item, quantity)
            received.append(f"{item.name} (x{quantity})")

        text = f'{npc.name} says: "{decision.narrative or decision.rationale}"'
        if received:
            text += f"\n\n✓ You received: {', '.join(received)}"
        return ActionResult.ok(text)

    # =========================================================================
    # Combat
    # =========================================================================

    async def _attack(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        name = intent.target.strip()
        npc = state.find_npc_in_room(name) if name else state.combat_opponent()
        if npc is None:
            return ActionResult.fail(f"You can't attack '{name}' - they're not here.")
        if not npc.is_alive:
            return ActionResult.fail(
                f"{npc.name} is already dead. You can examine their body if you'd like."
            )

        state.remove_companion(npc.id)
        state.enter_combat(npc.id)
        player = state.player

        helpers = [CombatStats.from_character(c) for c in state.companions_present() if c.id != npc.id]
        assistance = companion_assistance(helpers)
        attack = resolve_attack(CombatStats.from_character(player), CombatStats.from_character(npc), self.rng)

        lines = [attack.message]
        lines.extend(assistance.messages)

        if not attack.hit:
            lines.append("")
            lines.append(combat_status(state, self.health_bar_width))
            return ActionResult.ok("\n".join(lines))

        npc.take_damage(attack.final_damage + assistance.damage_bonus)
        if assistance.damage_bonus > 0:
            lines.append(f"✦ Companion bonus damage: +{assistance.damage_bonus}")

        if not npc.is_alive:
            lines.extend(self._defeat(state, npc))
            return ActionResult.ok("\n".join(lines))

        lines.append(f"\n{npc.name} retaliates!")
        lines.extend(self._counter_attack(state, npc))
        if state.game_over:
            return ActionResult.ok("\n".join(lines))

        lines.extend(self._intervention_warnings(state, npc))
        lines.append("")
        lines.append(combat_status(state, self.health_bar_width))
        return ActionResult.ok("\n".join(lines))

    def _defeat(self, state: SessionState, npc: Character) -> list[str]:
        """The NPC stays in the room as an immobile, lootable body."""
        npc.can_move = False
        xp = experience_for_defeat(npc)
        state.player.gain_experience(xp)
        lines = [f"\n🎉 {npc.name} is defeated! You gain {xp} experience."]

        if self.game.economy.enabled and npc.wallet.total > 0:
            amount = npc.wallet.take_all()
            state.player.wallet.add(amount)
            lines.append(f"💰 You loot {format_amount(amount, self.game.economy)} from the body!")

        lines.append(f"The {npc.name}'s body remains here for you to search or examine.")
        state.exit_combat()
        return lines

    def _counter_attack(self, state: SessionState, npc: Character) -> list[str]:
        """Opponent strikes the player; ends the game if the player falls."""
        player = state.player
        counter = resolve_attack(CombatStats.from_character(npc), CombatStats.from_character(player), self.rng)
        lines = [counter.message]
        if counter.hit:
            player.take_damage(counter.final_damage)
            if not player.is_alive:
                lines.append("\n💀 YOU HAVE BEEN DEFEATED! Game Over.")
                state.exit_combat()
                state.game_over = True
        return lines

    def _intervention_warnings(self, state: SessionState, enemy: Character) -> list[str]:
        """Bystanders who would side with the enemy. Warnings only."""
        lines = []
        for npc in state.living_npcs_in_room():
            if npc.id == enemy.id or npc.id in state.companions:
                continue
            reason = None
            if npc.alignment == Alignment.EVIL:
                reason = f"{npc.name} sees an opportunity to cause trouble!"
            elif npc.alignment == Alignment.GOOD and enemy.alignment == Alignment.EVIL:
                reason = None
            elif npc.id in enemy.relationships or enemy.id in npc.relationships:
                reason = f"{npc.name} rushes to help {enemy.name}!"
            if reason is not None:
                lines.append("")
                lines.append(f"⚠️ {reason}")
                lines.append(f"🚨 {npc.name} looks ready to turn on you!")
        return lines

    async def _stop(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        enemy = state.combat_opponent()
        if not state.in_combat or enemy is None:
            return ActionResult.fail("You're not in combat.")

        flee = attempt_flee(CombatStats.from_character(state.player), CombatStats.from_character(enemy), self.rng)
        if flee.succeeded:
            state.exit_combat()
            return ActionResult.ok(flee.message)

        lines = [flee.message, f"\n{enemy.name} seizes the opportunity to attack!"]
        lines.extend(self._counter_attack(state, enemy))
        if not state.game_over:
            lines.append("")
            lines.append(combat_status(state, self.health_bar_width))
        return ActionResult.fail("\n".join(lines))

    # =========================================================================
    # Economy, crafting and gathering
    # =========================================================================

    async def _buy(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        merchant, item = self._party_and_item(intent, state)
        return trade.handle_buy(state, self.game, merchant, item)

    async def _sell(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        merchant, item = self._party_and_item(intent, state)
        return trade.handle_sell(state, self.game, merchant, item)

    async def _shop(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        return trade.handle_shop(state, self.game, intent.target)

    async def _craft(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        crafter, item = self._party_and_item(intent, state)
        return trade.handle_craft(state, self.game, crafter, item)

    async def _recipes(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        return trade.handle_recipes(state, self.game, intent.target)

    @staticmethod
    def _party_and_item(intent: ActionIntent, state: SessionState) -> tuple[str, str]:
        """Split (npc, item); a lone target that names nobody present is the item."""
        if intent.details.strip():
            return intent.target, intent.details
        if intent.target and state.find_npc_in_room(intent.target) is None:
            return "", intent.target
        return intent.target, ""

    async def _gather(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        target = (intent.target or intent.details).strip()
        query = "" if normalize(target) in GENERIC_GATHER_TARGETS else target
        room = state.current_room()
        resources = room.resources

        if resources is not None and resources.resources:
            resource = find_resource(resources, query)
            if resource is None and matches_tag(resources, query):
                resource = resources.resources[self.rng.randrange(len(resources.resources))]
            if resource is not None:
                return self._gather_defined(state, room, resource)

        label = query or "resources"
        if self.game.authority.can_decide_resources:
            return await self._gather_dynamic(state, room, label)

        return ActionResult.fail(f"You search {room.biome or 'this area'} thoroughly but find no {label}.")

    def _gather_defined(self, state: SessionState, room: Room, resource: GatherableResource) -> ActionResult:
        player = state.player
        template = self.game.items.get(resource.item_id)
        display = resource.display_name or (template.name if template else resource.item_id.replace("_", " "))

        if resource.required_tool and resource.required_tool not in player.carried_items:
            tool = self.game.items.get(resource.required_tool)
            tool_name = tool.name if tool else resource.required_tool.replace("_", " ")
            return ActionResult.fail(f"You need a {tool_name} to gather this resource.")

        if room.resources.is_depleted(resource.item_id):
            return ActionResult.fail("This area has been searched recently. Try again later.")

        roll = roll_gather(resource, player.skills, self.rng)
        if not roll.success:
            return ActionResult.fail(f"You search carefully but don't find any {display}.")

        item = template or Item(
            id=resource.item_id,
            name=display.title(),
            type=ItemType.CRAFTING_MATERIAL,
            stackable=True,
        )
        player.carried_items.add_item(item, roll.quantity)
        if not resource.renewable:
            room.resources.deplete(resource)
        return ActionResult.ok(f"You {gathered_verb(resource)} {roll.quantity}x {item.name}!")

    async def _gather_dynamic(self, state: SessionState, room: Room, target: str) -> ActionResult:
        decision = await self.decisions.gather_decision(room, target)
        if decision.failed:
            return ActionResult.fail(f"You search but don't find any {target} in this location.")
        if not decision.will_act or not decision.subject:
            return ActionResult.fail(f"You search the area but don't find any {target} here.")

        name = decision.subject[0].strip()
        item_id = name.lower().replace(" ", "_")
        item = self.game.items.get(item_id) or Item(
            id=item_id,
            name=name,
            type=ItemType.CRAFTING_MATERIAL,
            stackable=True,
            value=DYNAMIC_ITEM_VALUE,
        )
        quantity = max(1, decision.quantity)
        state.player.carried_items.add_item(item, quantity)

        found = f"✓ You found {quantity}x {item.name}!"
        if decision.narrative:
            return ActionResult.ok(f"{decision.narrative}\n\n{found}")
        return ActionResult.ok(found)

    # =========================================================================
    # Meta
    # =========================================================================

    async def _quests(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        return ActionResult.ok(quest_log(state, self.game))

    async def _status(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        if state.in_combat:
            return ActionResult.ok(combat_status(state, self.health_bar_width))
        return ActionResult.ok(player_status(state, self.game))

    async def _help(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        return ActionResult.ok(available_actions(state, self.game))

    async def _unknown(self, intent: ActionIntent, state: SessionState, command: str) -> ActionResult:
        return ActionResult.fail("I don't understand what you're trying to do.")


HANDLERS: dict[ActionKind, Handler] = {
    ActionKind.MOVE: ActionExecutor._move,
    ActionKind.LOOK: ActionExecutor._look,
    ActionKind.EXAMINE: ActionExecutor._examine,
    ActionKind.INVENTORY: ActionExecutor._inventory,
    ActionKind.TAKE: ActionExecutor._take,
    ActionKind.DROP: ActionExecutor._drop,
    ActionKind.USE: ActionExecutor._use,
    ActionKind.EQUIP: ActionExecutor._equip,
    ActionKind.UNEQUIP: ActionExecutor._unequip,
    ActionKind.EQUIPPED: ActionExecutor._equipped,
    ActionKind.TALK: ActionExecutor._talk,
    ActionKind.FOLLOW: ActionExecutor._follow,
    ActionKind.GIVE: ActionExecutor._give,
    ActionKind.ATTACK: ActionExecutor._attack,
    ActionKind.STOP: ActionExecutor._stop,
    ActionKind.BUY: ActionExecutor._buy,
    ActionKind.SELL: ActionExecutor._sell,
    ActionKind.SHOP: ActionExecutor._shop,
    ActionKind.GATHER: ActionExecutor._gather,
    ActionKind.CRAFT: ActionExecutor._craft,
    ActionKind.RECIPES: ActionExecutor._recipes,
    ActionKind.QUESTS: ActionExecutor._quests,
    ActionKind.STATUS: ActionExecutor._status,
    ActionKind.HELP: ActionExecutor._help,
    ActionKind.UNKNOWN: ActionExecutor._unknown,
}

_unmapped = set(ActionKind) - set(HANDLERS)
if _unmapped:
    raise RuntimeError(f"Action kinds without a handler: {sorted(k.value for k in _unmapped)}")
