"""
Player-facing status text: the exploration footer, combat health bars,
the help listing and the quest log.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from adventure.models.character import NPCRole
from adventure.models.economy import format_amount
from adventure.models.game import QuestStatus, QuestType
from adventure.skills.combat import health_bar

if TYPE_CHECKING:
    from adventure.models.game import Game
    from adventure.models.state import SessionState

NOT_UNDERSTOOD = (
    "I don't understand what you're trying to do. Try describing your action more clearly."
)

COMBAT_HEADER = "=== COMBAT MODE ==="

QUEST_ICONS = {
    QuestType.STORY: "⭐",
    QuestType.JOB: "💼",
    QuestType.CRAFTING_ORDER: "⚒️",
    QuestType.BOUNTY: "⚔️",
}
COMPLETED_QUESTS_SHOWN = 5


def combat_status(state: SessionState, width: int = 20) -> str:
    """Health bars for the player, companions present, and the opponent."""
    player = state.player
    lines = [
        COMBAT_HEADER,
        "",
        f"Location: {state.current_room().name}",
        "",
        f"You:      {health_bar(player.health, player.max_health, width)} "
        f"{player.health}/{player.max_health} HP",
    ]
    for companion in state.companions_present():
        bar = health_bar(companion.health, companion.max_health, width)
        lines.append(f"{companion.name}: {bar} {companion.health}/{companion.max_health} HP 👥")

    enemy = state.combat_opponent()
    if enemy is not None:
        lines.append("")
        lines.append(
            f"{enemy.name}: {health_bar(enemy.health, enemy.max_health, width)} "
            f"{enemy.health}/{enemy.max_health} HP"
        )

    lines.append("")
    lines.append("Commands: attack|fight|flee|status|stop")
    return "\n".join(lines)


def format_footer(state: SessionState, game: Game) -> str:
    """The status block appended to every exploration response."""
    room = state.current_room()
    player = state.player
    present = state.npcs_in_room()

    living = []
    for npc in present:
        if npc.is_alive:
            marker = " 🛒" if npc.role == NPCRole.MERCHANT else ""
            living.append(f"{npc.name}{marker}")
    dead = [f"☠️ {npc.name}" for npc in present if not npc.is_alive]
    npc_text = ", ".join(living) if living else "none"
    if dead:
        npc_text = f"{npc_text} | {', '.join(dead)}"

    lines = [
        "---",
        "",
        f"📍 **Location:** {room.name}",
        f"❤️ **Health:** {player.health}/{player.max_health}",
    ]
    if game.economy.enabled:
        lines.append(f"💰 **Currency:** {player.wallet.format(game.economy)}")
    lines.append(f"🚪 **Exits:** {', '.join(room.exit_names()) or 'none'}")
    lines.append(f"👥 **NPCs Here:** {npc_text}")
    lines.append(f"🎒 **Inventory:** {', '.join(player.carried_items.names()) or 'empty'}")
    return "\n".join(lines)


def victory_banner(message: str) -> str:
    return f"🏆 **VICTORY!** 🏆\n\n{message}"


def available_actions(state: SessionState, game: Game) -> str:
    """Command reference tailored to the game's features and the current room."""
    room = state.current_room()

    lines = [
        "=== Available Commands ===",
        "look - Examine your surroundings",
        "inventory - Check your items",
        "examine [item/npc] - Look closely at something",
        "go [direction] - Travel in a direction (natural language works!)",
        "talk [npc] - Speak with an NPC",
        "follow - Ask an NPC to join your party",
        "give [npc] [items] - Ask an NPC to give you items",
        "use [item] - Use an item (potion, scroll, etc)",
        "take [item] - Pick up an item",
        "drop [item] - Drop an item from inventory",
        "equip/unequip [item] - Change your equipment; 'equipped' lists it",
        "attack [npc] - Attack an NPC (enters COMBAT MODE)",
        "status - Show current game status",
        "",
    ]

    if game.economy.enabled:
        lines += [
            "=== ECONOMY COMMANDS ===",
            "shop - View a merchant's wares",
            "buy [item] - Buy an item from a merchant",
            "sell [item] - Sell an item to a merchant",
            "",
        ]

    if game.crafting.enabled:
        lines += [
            "=== CRAFTING COMMANDS ===",
            "recipes - View available recipes from a crafter",
            "craft [item] - Ask a crafter to make something",
            "",
        ]

    if room.resources is not None or game.authority.can_decide_resources:
        lines += [
            "=== GATHERING COMMANDS ===",
            "search [resource] - Search for resources (ore, herbs, etc.)",
            "gather/forage - Gather materials from the environment",
            "",
        ]

    lines.append("quests - View your quest log")
    lines.append("")

    if state.in_combat:
        lines += [
            "=== COMBAT COMMANDS ===",
            "attack/fight - Attack the enemy again",
            "status - Show combat status with health bars",
            "stop - Exit combat mode (flee)",
            "",
        ]

    lines.append("=== Current Location ===")
    lines.append(f"Room: {room.name}")
    lines.append(f"Exits: {', '.join(room.exit_names()) or 'None'}")
    npc_names = [n.name for n in state.npcs_in_room()]
    if npc_names:
        lines.append(f"NPCs: {', '.join(npc_names)}")
    if room.biome:
        lines.append(f"Biome: {room.biome}")
    if room.resources is not None and room.resources.resource_tags:
        lines.append(f"Resources: {', '.join(room.resources.resource_tags)}")

    lines.append("")
    lines.append(
        "💡 Tip: You can use natural language! Try: 'go to the tavern', "
        "'search for ore', 'ask blacksmith to craft sword', etc."
    )
    return "\n".join(lines)


def quest_log(state: SessionState, game: Game) -> str:
    quests = state.active_quests
    if not quests:
        return "You have no quests. Talk to NPCs to find opportunities."

    active = [q for q in quests if q.is_active]
    completed = [q for q in quests if q.status == QuestStatus.COMPLETED]

    lines = ["📜 Quest Log:", ""]
    if active:
        lines.append("=== Active Quests ===")
        for quest in active:
            icon = QUEST_ICONS.get(quest.type, "📋")
            lines.append(f"{icon} {quest.title}")
            if quest.description:
                lines.append(f"   {quest.description}")
            for objective in quest.objectives:
                mark = "✓" if objective.completed else "○"
                lines.append(f"   {mark} {objective.description}")
            rewards = []
            if quest.reward_experience:
                rewards.append(f"{quest.reward_experience} XP")
            if quest.reward_currency and game.economy.enabled:
                rewards.append(format_amount(quest.reward_currency, game.economy))
            if rewards:
                lines.append(f"   Reward: {', '.join(rewards)}")
            lines.append("")

    if completed:
        lines.append("=== Completed ===")
        for quest in completed[:COMPLETED_QUESTS_SHOWN]:
            lines.append(f"✓ {quest.title}")

    return "\n".join(lines).rstrip()


def player_status(state: SessionState, game: Game) -> str:
    player = state.player
    lines = [
        f"Location: {state.current_room().name}",
        f"Health: {player.health}/{player.max_health}",
        f"Level: {player.level}",
        f"Experience: {player.experience}",
    ]
    if game.economy.enabled:
        lines.append(f"Currency: {player.wallet.format(game.economy)}")
    return "\n".join(lines)
