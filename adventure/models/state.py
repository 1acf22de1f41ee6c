"""
Session State for the adventure engine.

A SessionState is the single mutable world a session plays in. It is
built as a deep copy of a Game definition, owned by the engine, and
passed explicitly to every action handler.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from adventure.models.character import Character
from adventure.models.game import Game, ObjectiveType, Quest, QuestStatus
from adventure.models.world import Exit, Room
from adventure.skills.matching import match_name

PLAYER_ID = "player"
RECENT_COMMAND_LIMIT = 5


class GameMode(str, Enum):
    """Session state machine."""

    EXPLORING = "exploring"
    IN_COMBAT = "in_combat"


class SessionState(BaseModel):
    """Mutable state of one play session."""

    current_room_id: str
    rooms: dict[str, Room] = Field(default_factory=dict)
    player: Character
    npcs: dict[str, Character] = Field(default_factory=dict)
    active_quests: list[Quest] = Field(default_factory=list)
    recent_commands: list[str] = Field(default_factory=list)
    recent_command_limit: int = Field(default=RECENT_COMMAND_LIMIT, ge=1)
    companions: list[str] = Field(default_factory=list, description="Ordered companion NPC ids")
    combat_npc_id: str | None = None
    game_over: bool = False
    turn_count: int = 0

    @classmethod
    def from_game(cls, game: Game, player_name: str = "Adventurer") -> SessionState:
        """Build a fresh session that shares nothing with the definition."""
        game.validate_world()

        rooms = {rid: room.model_copy(deep=True) for rid, room in game.rooms.items()}
        npcs = {nid: npc.model_copy(deep=True) for nid, npc in game.npcs.items()}
        for room in rooms.values():
            for npc_id in room.npc_ids:
                npcs[npc_id].current_room_id = room.id
                if npcs[npc_id].home_room_id is None:
                    npcs[npc_id].home_room_id = room.id

        player = Character(
            id=PLAYER_ID,
            name=player_name,
            description=game.initial_player_description,
            is_player=True,
            health=game.initial_player_health,
            max_health=game.initial_player_health,
            strength=12,
            agility=11,
            current_room_id=game.starting_room_id,
        )
        player.wallet.add(game.starting_currency)
        for item_id in game.starting_item_ids:
            player.carried_items.add_item(game.items[item_id])

        quests = [q.model_copy(deep=True) for q in game.quests if q.is_active]

        return cls(
            current_room_id=game.starting_room_id,
            rooms=rooms,
            player=player,
            npcs=npcs,
            active_quests=quests,
        )

    # =========================================================================
    # Mode
    # =========================================================================

    @property
    def in_combat(self) -> bool:
        return self.combat_npc_id is not None

    @property
    def mode(self) -> GameMode:
        return GameMode.IN_COMBAT if self.in_combat else GameMode.EXPLORING

    def combat_opponent(self) -> Character | None:
        if self.combat_npc_id is None:
            return None
        return self.npcs.get(self.combat_npc_id)

    def enter_combat(self, npc_id: str) -> None:
        if npc_id not in self.npcs:
            raise KeyError(npc_id)
        self.combat_npc_id = npc_id

    def exit_combat(self) -> None:
        self.combat_npc_id = None

    # =========================================================================
    # Lookups
    # =========================================================================

    def current_room(self) -> Room:
        return self.rooms[self.current_room_id]

    def npcs_in_room(self, room_id: str | None = None) -> list[Character]:
        """Characters present in a room, living and dead, in room order."""
        room = self.rooms[room_id or self.current_room_id]
        return [self.npcs[nid] for nid in room.npc_ids if nid in self.npcs]

    def living_npcs_in_room(self) -> list[Character]:
        return [n for n in self.npcs_in_room() if n.is_alive]

    def find_npc_in_room(self, name: str, *, alive_only: bool = False) -> Character | None:
        """Resolve a character reference in the current room by name or id."""
        npcs = self.living_npcs_in_room() if alive_only else self.npcs_in_room()
        index = match_name(name, [n.name for n in npcs])
        if index is None:
            index = match_name(name, [n.id for n in npcs])
        return npcs[index] if index is not None else None

    def companion_characters(self) -> list[Character]:
        return [self.npcs[cid] for cid in self.companions if cid in self.npcs]

    def companions_present(self) -> list[Character]:
        """Living companions standing in the player's room."""
        return [
            c
            for c in self.companion_characters()
            if c.is_alive and c.id in self.current_room().npc_ids
        ]

    # =========================================================================
    # Movement and party
    # =========================================================================

    def move_through_exit(self, exit_name: str) -> Exit | None:
        """
        Move the player and every living companion through an exit.

        The exit is resolved before anything changes, so either everyone
        moves or nobody does.
        """
        exit_ = self.current_room().find_exit(exit_name)
        if exit_ is None or exit_.destination_room_id not in self.rooms:
            return None
        self.relocate_party(exit_.destination_room_id)
        return exit_

    def relocate_party(self, room_id: str) -> None:
        """Place the player, then each living companion, in a room."""
        if room_id not in self.rooms:
            raise KeyError(room_id)
        followers = [c for c in self.companion_characters() if c.is_alive]
        self.current_room_id = room_id
        self.player.current_room_id = room_id
        for companion in followers:
            self.move_npc(companion.id, room_id)

    def move_npc(self, npc_id: str, room_id: str) -> None:
        npc = self.npcs[npc_id]
        if npc.current_room_id and npc.current_room_id in self.rooms:
            self.rooms[npc.current_room_id].remove_npc(npc_id)
        self.rooms[room_id].add_npc(npc_id)
        npc.current_room_id = room_id

    def add_companion(self, npc_id: str) -> None:
        if npc_id in self.npcs and npc_id not in self.companions:
            self.companions.append(npc_id)

    def remove_companion(self, npc_id: str) -> None:
        if npc_id in self.companions:
            self.companions.remove(npc_id)

    # =========================================================================
    # History and quests
    # =========================================================================

    def record_command(self, command: str) -> None:
        self.recent_commands.append(command)
        del self.recent_commands[: -self.recent_command_limit]

    def recent_commands_context(self) -> str:
        if not self.recent_commands:
            return ""
        return "Recent actions: " + ", ".join(self.recent_commands)

    def tick(self) -> None:
        """Advance per-turn counters."""
        self.turn_count += 1
        for room in self.rooms.values():
            if room.resources is not None:
                room.resources.tick()

    def update_quests(self) -> list[Quest]:
        """
        Mark objectives met by the current world and complete quests.

        Rewards are granted once, when a quest completes.

        Returns:
            Quests completed by this update
        """
        completed = []
        for quest in self.active_quests:
            if not quest.is_active:
                continue
            for objective in quest.objectives:
                if objective.completed:
                    continue
                if objective.type == ObjectiveType.VISIT_ROOM:
                    objective.completed = self.current_room_id == objective.target_id
                elif objective.type == ObjectiveType.OBTAIN_ITEM:
                    objective.completed = objective.target_id in self.player.carried_items
                elif objective.type == ObjectiveType.DEFEAT_NPC:
                    npc = self.npcs.get(objective.target_id)
                    objective.completed = npc is not None and not npc.is_alive
            if quest.is_complete:
                quest.status = QuestStatus.COMPLETED
                self.player.gain_experience(quest.reward_experience)
                self.player.wallet.add(quest.reward_currency)
                completed.append(quest)
        return completed
