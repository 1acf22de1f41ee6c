"""
Consistency checks for the built-in game.
"""

from __future__ import annotations

from adventure.models import Game


def test_world_is_valid(game: Game):
    game.validate_world()
    assert len(game.rooms) == 9
    assert game.starting_room_id == "town_square"


def test_every_npc_is_placed_once(game: Game):
    placed = [npc_id for room in game.rooms.values() for npc_id in room.npc_ids]
    assert sorted(placed) == sorted(game.npcs)


def test_item_references_resolve(game: Game):
    for npc in game.npcs.values():
        for item_id in npc.carried_items.items:
            assert item_id in game.items
    for room in game.rooms.values():
        if room.resources is None:
            continue
        for resource in room.resources.resources:
            assert resource.item_id in game.items
            if resource.required_tool:
                assert resource.required_tool in game.items


def test_lair_is_sealed_by_the_key(game: Game):
    peaks = game.rooms["high_peaks"]
    sealed = [e for e in peaks.exits if not e.is_available]
    assert [e.destination_room_id for e in sealed] == ["dragon_lair"]
    assert game.items["magic_key"].unlocks_exit == sealed[0].display_name


def test_teleports_lead_somewhere(game: Game):
    for item in game.items.values():
        if item.teleport_destination_room_id is not None:
            assert item.teleport_destination_room_id in game.rooms


def test_recipes_reference_items(game: Game):
    assert game.crafting.enabled
    for recipe in game.crafting.recipes.values():
        assert recipe.output_item_id in game.items
        for ingredient in recipe.ingredients:
            assert ingredient.item_id in game.items


def test_quest_targets_exist(game: Game):
    for quest in game.quests:
        assert quest.giver_npc_id in game.npcs
        for objective in quest.objectives:
            assert objective.target_id in {**game.rooms, **game.npcs, **game.items}


def test_dragon_defeat_wins(game: Game):
    (condition,) = game.win_conditions
    assert condition.target_id in game.npcs
    assert game.npcs[condition.target_id].name == "Infernus the Dragon"


def test_json_round_trip(game: Game):
    restored = Game.model_validate_json(game.model_dump_json())
    assert restored == game
