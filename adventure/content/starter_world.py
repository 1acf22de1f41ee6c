"""
Starter World for the adventure engine.

Provides "The Dragon's Hoard", a complete game definition players can
start exploring immediately.
"""

from __future__ import annotations

from adventure.models import (
    Alignment,
    Character,
    CraftingConfig,
    CraftingRecipe,
    EconomyConfig,
    Exit,
    Game,
    GameMasterAuthority,
    GatherableResource,
    Item,
    ItemType,
    NPCRole,
    ObjectiveType,
    Quest,
    QuestObjective,
    QuestType,
    RecipeIngredient,
    Room,
    RoomResources,
    WinCondition,
    WinConditionType,
)

# One Gold is 100 Silver; prices below are in Silver
GOLD = 100


def _npc(npc_id: str, name: str, *, items: list[tuple[Item, int]] | None = None, **fields) -> Character:
    npc = Character(id=npc_id, name=name, **fields)
    for item, quantity in items or []:
        npc.carried_items.add_item(item, quantity)
    return npc


def create_starter_game() -> Game:
    """
    Create the starter game.

    Returns a world with:
    - The town of Ravensholm (square, tavern, marketplace)
    - A forest and mountain route to the Dragon's Lair
    - Merchants, crafters, recruitable companions and two bosses
    - Gatherable herbs and ore feeding NPC crafting recipes

    The dragon's lair is sealed by a barrier that only the Mystic Key,
    stolen by the goblins, can open.

    Returns:
        Game definition that passes validate_world()
    """
    # =========================================================================
    # Items
    # =========================================================================

    iron_sword = Item(
        id="iron_sword",
        name="Iron Sword",
        description="A well-crafted iron sword with a leather grip",
        type=ItemType.WEAPON,
        damage_bonus=8,
        weight=5,
        value=50 * GOLD,
    )
    wooden_staff = Item(
        id="wooden_staff",
        name="Wooden Staff",
        description="A gnarled wooden staff suitable for channeling magic",
        type=ItemType.WEAPON,
        damage_bonus=5,
        weight=4,
        value=30 * GOLD,
    )
    dragon_slayer = Item(
        id="dragon_slayer",
        name="Dragon Slayer Sword",
        description="A legendary blade forged to slay dragons. It glows with an ethereal blue light.",
        type=ItemType.WEAPON,
        damage_bonus=20,
        weight=6,
        value=500 * GOLD,
    )
    leather_armor = Item(
        id="leather_armor",
        name="Leather Armor",
        description="Supple yet protective leather armor",
        type=ItemType.ARMOR,
        armor_bonus=3,
        equipment_slot="chest",
        weight=5,
        value=40 * GOLD,
    )
    iron_helmet = Item(
        id="iron_helmet",
        name="Iron Helmet",
        description="A dented but sturdy iron helmet",
        type=ItemType.ARMOR,
        armor_bonus=2,
        weight=3,
        value=25 * GOLD,
    )
    pickaxe = Item(
        id="pickaxe",
        name="Pickaxe",
        description="A miner's pickaxe with a worn handle",
        type=ItemType.TOOL,
        weight=4,
        value=10 * GOLD,
    )
    magic_key = Item(
        id="magic_key",
        name="Mystic Key of Aldric",
        description="A shimmering key that glows with magical energy. It unlocks magical barriers.",
        type=ItemType.KEY,
        unlocks_exit="Into Dragon's Lair",
        weight=1,
        value=100 * GOLD,
    )
    home_scroll = Item(
        id="home_scroll",
        name="Scroll of Home",
        description="An ancient scroll. When unrolled, it transports the bearer home.",
        type=ItemType.TELEPORTATION,
        teleport_destination_room_id="town_square",
        teleport_message="You unroll the scroll and feel a warm tingling. Suddenly, you're back in town!",
        value=150 * GOLD,
    )
    portal_stone = Item(
        id="portal_stone",
        name="Portal Stone",
        description="A glowing stone that opens a portal to the peaks of Mount Infernus",
        type=ItemType.TELEPORTATION,
        teleport_destination_room_id="high_peaks",
        teleport_message="The stone glows. A shimmering portal opens, depositing you on the high peaks.",
        weight=2,
        value=200 * GOLD,
    )
    health_potion = Item(
        id="health_potion",
        name="Health Potion",
        description="A bottle of red liquid that restores vitality",
        type=ItemType.CONSUMABLE,
        consumable_uses=1,
        consumable_effects={"heal": 50},
        stackable=True,
        weight=1,
        value=25 * GOLD,
    )
    healing_herb = Item(
        id="healing_herb",
        name="Healing Herb",
        description="A fragrant green herb prized by apothecaries",
        type=ItemType.CRAFTING_MATERIAL,
        stackable=True,
        value=2 * GOLD,
    )
    iron_ore = Item(
        id="iron_ore",
        name="Iron Ore",
        description="A heavy lump of rust-streaked ore",
        type=ItemType.CRAFTING_MATERIAL,
        stackable=True,
        weight=2,
        value=5 * GOLD,
    )
    crown = Item(
        id="crown_of_amalion",
        name="Crown of Amalion",
        description="A magnificent crown radiating magical power. The prize sought by kings and heroes.",
        type=ItemType.QUEST_ITEM,
        weight=2,
        value=1000 * GOLD,
    )

    items = [
        iron_sword,
        wooden_staff,
        dragon_slayer,
        leather_armor,
        iron_helmet,
        pickaxe,
        magic_key,
        home_scroll,
        portal_stone,
        health_potion,
        healing_herb,
        iron_ore,
        crown,
    ]

    # =========================================================================
    # Rooms
    # =========================================================================

    town_square = Room(
        id="town_square",
        name="Ravensholm Town Square",
        description=(
            "A modest town square at the crossroads of trade. Stone buildings surround a "
            "central fountain. The Tavern lies to the east, the Market to the south, and a "
            "winding forest path leads north toward the mountains."
        ),
        exits=[
            Exit(display_name="North", destination_room_id="forest_entrance"),
            Exit(display_name="East", destination_room_id="tavern", description="The warm glow of the Tavern"),
            Exit(display_name="South", destination_room_id="marketplace"),
        ],
        npc_ids=["blacksmith", "town_crier"],
        metadata={"danger_level": 0},
    )
    tavern = Room(
        id="tavern",
        name="The Wandering Wyvern Tavern",
        description=(
            "A cozy tavern filled with the smells of mead and hearty stew. A roaring fireplace "
            "warms the room while a bard plays a melancholy tune."
        ),
        exits=[Exit(display_name="Back to Town Square", destination_room_id="town_square")],
        npc_ids=["tavern_keeper", "old_mage"],
        metadata={"danger_level": 0},
    )
    marketplace = Room(
        id="marketplace",
        name="Ravensholm Marketplace",
        description=(
            "A bustling marketplace filled with merchant stalls. You smell spices, leather "
            "and fresh bread. Vendors hawk their goods to passing travelers."
        ),
        exits=[Exit(display_name="Back to Town Square", destination_room_id="town_square")],
        npc_ids=["merchant", "apothecary"],
        metadata={"danger_level": 0},
    )
    forest_entrance = Room(
        id="forest_entrance",
        name="Forest Entrance",
        description=(
            "The forest path begins here, winding through ancient oaks and pines. The path "
            "splits: one way leads deeper into the forest, another climbs a rocky slope."
        ),
        exits=[
            Exit(display_name="South", destination_room_id="town_square"),
            Exit(display_name="Deeper Into Forest", destination_room_id="dark_forest"),
            Exit(display_name="Up The Slope", destination_room_id="mountain_pass"),
        ],
        npc_ids=["ranger"],
        resources=RoomResources(
            biome="forest",
            resource_tags=["herbs", "wood", "berries"],
            resources=[
                GatherableResource(
                    item_id="healing_herb",
                    display_name="healing herbs",
                    min_quantity=1,
                    max_quantity=3,
                    find_chance=70,
                    gather_verb="pick",
                    related_skill="herbalism",
                ),
            ],
        ),
        metadata={"danger_level": 1},
    )
    dark_forest = Room(
        id="dark_forest",
        name="Dark Forest",
        description=(
            "Ancient trees tower overhead, blocking out the sky. The air is thick with the "
            "smell of decay and unsettling sounds come from the undergrowth."
        ),
        exits=[
            Exit(display_name="Back To Entrance", destination_room_id="forest_entrance"),
            Exit(display_name="Continue Deeper", destination_room_id="goblin_cave"),
        ],
        resources=RoomResources(biome="forest", resource_tags=["herbs", "mushrooms"]),
        metadata={"danger_level": 2},
    )
    goblin_cave = Room(
        id="goblin_cave",
        name="Goblin Cave",
        description=(
            "A foul-smelling cave reeking of smoke and waste. Bones litter the floor and "
            "crude drawings cover the walls. This is the lair of the Goblin King."
        ),
        exits=[Exit(display_name="Back To Forest", destination_room_id="dark_forest")],
        npc_ids=["goblin_king", "goblin_shaman"],
        metadata={"danger_level": 3},
    )
    mountain_pass = Room(
        id="mountain_pass",
        name="Mountain Pass",
        description=(
            "The path climbs steeply into the mountains. Cold wind whips around you. Veins "
            "of rust-red ore streak the rock face, and smoke rises from Mount Infernus ahead."
        ),
        exits=[
            Exit(display_name="Down To Forest", destination_room_id="forest_entrance"),
            Exit(display_name="Higher Into Mountains", destination_room_id="high_peaks"),
        ],
        npc_ids=["hermit"],
        resources=RoomResources(
            biome="mountain",
            resource_tags=["ore", "stone", "minerals"],
            resources=[
                GatherableResource(
                    item_id="iron_ore",
                    display_name="iron ore",
                    min_quantity=1,
                    max_quantity=2,
                    find_chance=60,
                    required_tool="pickaxe",
                    gather_verb="mine",
                    related_skill="mining",
                ),
            ],
        ),
        metadata={"danger_level": 2},
    )
    high_peaks = Room(
        id="high_peaks",
        name="High Mountain Peaks",
        description=(
            "You stand at a precipitous height where the air is thin and cold. The entrance "
            "to the Dragon's Lair yawns ahead, sealed by a shimmering barrier."
        ),
        exits=[
            Exit(display_name="Down The Mountain", destination_room_id="mountain_pass"),
            Exit(
                display_name="Into Dragon's Lair",
                destination_room_id="dragon_lair",
                is_available=False,
                unavailable_reason="A shimmering magical barrier blocks the entrance to the lair.",
            ),
        ],
        metadata={"danger_level": 3},
    )
    dragon_lair = Room(
        id="dragon_lair",
        name="The Dragon's Lair",
        description=(
            "A massive cavern within Mount Infernus. Molten lava flows from cracks in the "
            "stone. Coiled upon a mountain of gold sleeps a dragon of terrible beauty, the "
            "Crown of Amalion glowing atop its hoard."
        ),
        exits=[Exit(display_name="Back To Peak", destination_room_id="high_peaks")],
        npc_ids=["dragon"],
        metadata={"danger_level": 5},
    )

    rooms = [
        town_square,
        tavern,
        marketplace,
        forest_entrance,
        dark_forest,
        goblin_cave,
        mountain_pass,
        high_peaks,
        dragon_lair,
    ]

    # =========================================================================
    # NPCs
    # =========================================================================

    npcs = [
        _npc(
            "blacksmith",
            "Gruff the Blacksmith",
            description="A muscular dwarf with a magnificent beard and calloused hands",
            health=60,
            max_health=60,
            level=2,
            strength=14,
            agility=9,
            armor=2,
            alignment=Alignment.GOOD,
            role=NPCRole.CRAFTER,
            can_move=False,
            can_craft=True,
            crafting_specialty="smithing",
            personality_prompt=(
                "You are Gruff the Blacksmith. You forge weapons and armor from ore the "
                "player brings you. You're gruff but fair, with a heart of gold beneath a "
                "rough exterior. Keep replies to 1-3 sentences."
            ),
        ),
        _npc(
            "town_crier",
            "Herald Aldous",
            description="A portly man in a feathered cap, forever clearing his throat",
            health=40,
            max_health=40,
            strength=8,
            agility=12,
            role=NPCRole.QUEST_GIVER,
            personality_prompt=(
                "You are Herald Aldous, the town crier. You know all the gossip: a dragon "
                "named Infernus stole the Crown of Amalion, and goblins in the Dark Forest "
                "stole the Mystic Key that opens the dragon's lair. You speak dramatically."
            ),
        ),
        _npc(
            "tavern_keeper",
            "Marta",
            description="A warm, motherly woman polishing a tankard",
            health=50,
            max_health=50,
            strength=9,
            agility=10,
            armor=1,
            items=[(health_potion, 2)],
            personality_prompt=(
                "You are Marta, the tavern keeper. Warm, motherly and wise. You hear every "
                "secret that travels through the tavern."
            ),
        ),
        _npc(
            "old_mage",
            "Aldric the Wise",
            description="An elderly wizard with a long silver beard and staff",
            health=70,
            max_health=70,
            level=4,
            strength=7,
            agility=8,
            armor=2,
            alignment=Alignment.GOOD,
            role=NPCRole.MAGE,
            can_join_party=True,
            items=[(wooden_staff, 1)],
            personality_prompt=(
                "You are Aldric the Wise, an old wizard studying in the tavern. The goblin "
                "king stole your Mystic Key, the only thing that opens the dragon's barrier. "
                "You speak in riddles sometimes and might aid a worthy hero."
            ),
        ),
        _npc(
            "merchant",
            "Silara the Merchant",
            description="A sharp-eyed trader behind a stall heaped with goods",
            health=45,
            max_health=45,
            strength=8,
            agility=11,
            role=NPCRole.MERCHANT,
            can_move=False,
            items=[
                (health_potion, 5),
                (iron_sword, 1),
                (leather_armor, 1),
                (iron_helmet, 1),
                (pickaxe, 2),
                (home_scroll, 1),
            ],
            personality_prompt=(
                "You are Silara, a merchant. You buy and sell goods. You're interested in "
                "profit but fair, and you know about distant lands."
            ),
        ),
        _npc(
            "apothecary",
            "Old Hesta",
            description="A stooped woman surrounded by drying herbs and bubbling flasks",
            health=55,
            max_health=55,
            level=2,
            strength=9,
            agility=12,
            armor=1,
            role=NPCRole.HEALER,
            can_move=False,
            can_craft=True,
            crafting_specialty="alchemy",
            personality_prompt=(
                "You are Old Hesta, the apothecary. You brew potions from herbs the player "
                "gathers. You're mysterious and somewhat cryptic."
            ),
        ),
        _npc(
            "ranger",
            "Sylva the Ranger",
            description="A weathered ranger with keen eyes and a bow",
            health=80,
            max_health=80,
            level=3,
            strength=13,
            agility=15,
            armor=2,
            alignment=Alignment.GOOD,
            role=NPCRole.WARRIOR,
            can_join_party=True,
            personality_prompt=(
                "You are Sylva the Ranger. You're skilled in combat and survival and know "
                "the wilderness. You're brave and honorable and might join a worthy quest."
            ),
        ),
        _npc(
            "hermit",
            "The Hermit",
            description="An ancient hermit wrapped in furs",
            health=65,
            max_health=65,
            level=2,
            strength=10,
            agility=9,
            armor=1,
            role=NPCRole.SCHOLAR,
            items=[(portal_stone, 1)],
            personality_prompt=(
                "You are an old hermit living in the mountains. You're solitary and speak "
                "little, but you know the secrets of the mountains."
            ),
        ),
        _npc(
            "goblin_king",
            "King Gruk",
            description="A hulking goblin in a crown of bent nails, clutching a glowing key",
            health=100,
            max_health=100,
            level=3,
            strength=14,
            agility=11,
            armor=4,
            alignment=Alignment.EVIL,
            role=NPCRole.BOSS,
            relationships=["goblin_shaman"],
            items=[(magic_key, 1), (health_potion, 1)],
            personality_prompt=(
                "You are King Gruk, the Goblin King. You're cruel and cunning and rule "
                "through fear. You have no mercy for intruders."
            ),
        ),
        _npc(
            "goblin_shaman",
            "Goblin Shaman",
            description="A wizened goblin draped in feathers and rattling bones",
            health=40,
            max_health=40,
            level=2,
            strength=8,
            agility=12,
            alignment=Alignment.EVIL,
            role=NPCRole.MAGE,
            relationships=["goblin_king"],
            items=[(healing_herb, 2)],
            personality_prompt=(
                "You are the Goblin Shaman, loyal servant of King Gruk. You hiss and cackle "
                "and speak of dark spirits."
            ),
        ),
        _npc(
            "dragon",
            "Infernus the Dragon",
            description="The Dragon of Mount Infernus. Scales of molten gold. Eyes like burning embers.",
            health=200,
            max_health=200,
            level=5,
            strength=18,
            agility=12,
            armor=12,
            alignment=Alignment.EVIL,
            role=NPCRole.BOSS,
            can_move=False,
            items=[(crown, 1)],
            personality_prompt=(
                "You are Infernus, an ancient and mighty dragon. You're proud, territorial "
                "and deadly, and value your hoard above all else. Speak with the voice of a god."
            ),
        ),
    ]
    wallets = {"merchant": 200 * GOLD, "goblin_king": 30 * GOLD, "dragon": 500 * GOLD}
    for npc in npcs:
        npc.wallet.add(wallets.get(npc.id, 0))

    # =========================================================================
    # Crafting
    # =========================================================================

    crafting = CraftingConfig.npc_only()
    for recipe in [
        CraftingRecipe(
            id="forge_dragon_slayer",
            name="Dragon Slayer Sword",
            description="Folded iron, quenched in the fountain of Ravensholm",
            output_item_id="dragon_slayer",
            ingredients=[RecipeIngredient(item_id="iron_ore", item_name="Iron Ore", quantity=3)],
            crafting_specialty="smithing",
            crafting_cost=40 * GOLD,
            category="weapons",
        ),
        CraftingRecipe(
            id="forge_iron_helmet",
            name="Iron Helmet",
            output_item_id="iron_helmet",
            ingredients=[RecipeIngredient(item_id="iron_ore", item_name="Iron Ore", quantity=2)],
            crafting_specialty="smithing",
            crafting_cost=10 * GOLD,
            category="armor",
        ),
        CraftingRecipe(
            id="brew_health_potion",
            name="Health Potion",
            output_item_id="health_potion",
            output_quantity=2,
            ingredients=[
                RecipeIngredient(item_id="healing_herb", item_name="Healing Herb", quantity=2)
            ],
            crafting_specialty="alchemy",
            crafting_cost=5 * GOLD,
            category="potions",
        ),
    ]:
        crafting.recipes[recipe.id] = recipe

    # =========================================================================
    # Quests
    # =========================================================================

    quests = [
        Quest(
            id="dragon_quest",
            title="Defeat the Dragon",
            description=(
                "Travel to Mount Infernus and defeat the dragon Infernus to recover the "
                "Crown of Amalion."
            ),
            type=QuestType.STORY,
            giver_npc_id="town_crier",
            objectives=[
                QuestObjective(
                    description="Reach the Dragon's Lair",
                    type=ObjectiveType.VISIT_ROOM,
                    target_id="dragon_lair",
                ),
                QuestObjective(
                    description="Defeat Infernus the Dragon",
                    type=ObjectiveType.DEFEAT_NPC,
                    target_id="dragon",
                ),
                QuestObjective(
                    description="Recover the Crown of Amalion",
                    type=ObjectiveType.OBTAIN_ITEM,
                    target_id="crown_of_amalion",
                ),
            ],
            reward_experience=500,
            reward_currency=200 * GOLD,
        ),
        Quest(
            id="goblin_menace",
            title="The Goblin Menace",
            description="King Gruk holds the Mystic Key. Take it back from the goblin cave.",
            type=QuestType.BOUNTY,
            giver_npc_id="old_mage",
            objectives=[
                QuestObjective(
                    description="Defeat King Gruk",
                    type=ObjectiveType.DEFEAT_NPC,
                    target_id="goblin_king",
                ),
                QuestObjective(
                    description="Recover the Mystic Key",
                    type=ObjectiveType.OBTAIN_ITEM,
                    target_id="magic_key",
                ),
            ],
            reward_experience=100,
            reward_currency=50 * GOLD,
        ),
    ]

    game = Game(
        id="dragons_hoard",
        title="The Dragon's Hoard",
        subtitle="A Classic Fantasy Adventure",
        description=(
            "An epic quest to defeat the Dragon of Mount Infernus and recover the stolen "
            "Crown of Amalion."
        ),
        story_introduction=(
            "Long ago, the kingdom of Amalion prospered under the protection of the Crown. "
            "Then a dragon, drawn by its magic, descended upon the kingdom and stole it away. "
            "Crops fail. Animals sicken. You have answered the call for a hero, and your "
            "journey begins in the border town of Ravensholm..."
        ),
        objective="Defeat Infernus and recover the Crown of Amalion from the Dragon's Lair",
        rooms={room.id: room for room in rooms},
        npcs={npc.id: npc for npc in npcs},
        items={item.id: item for item in items},
        quests=quests,
        starting_room_id="town_square",
        win_conditions=[
            WinCondition(
                id="slay_dragon",
                description="Defeat Infernus the Dragon",
                type=WinConditionType.NPC_DEFEAT,
                target_id="dragon",
                victory_message=(
                    "Infernus falls, and the mountain trembles. The Crown of Amalion is free, "
                    "and the kingdom will prosper once more!"
                ),
            )
        ],
        initial_player_health=100,
        initial_player_description="A resourceful adventurer with determination in your eyes",
        starting_currency=75 * GOLD,
        starting_item_ids=["health_potion"],
        economy=EconomyConfig.tiered(),
        authority=GameMasterAuthority.balanced(),
        crafting=crafting,
    )
    game.validate_world()
    return game
