"""
Game Engine for the adventure engine.

The orchestration layer that processes player turns:
record -> interpret -> execute -> check victory -> narrate -> footer.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field

from adventure.engine.decisions import NpcDecisionMaker
from adventure.engine.display import (
    NOT_UNDERSTOOD,
    available_actions,
    combat_status,
    format_footer,
    victory_banner,
)
from adventure.engine.executor import ActionExecutor
from adventure.engine.intent import IntentInterpreter, build_snapshot
from adventure.engine.models import (
    ActionIntent,
    ActionKind,
    ActionResult,
    EngineConfig,
    ExecutedAction,
    TurnResult,
)
from adventure.engine.narrator import LLMOutcomeNarrator, OutcomeNarrator, TemplateOutcomeNarrator
from adventure.models.game import Game, QuestStatus, WinConditionType
from adventure.models.state import SessionState
from adventure.services.llm import LLMService
from adventure.services.npc import NPCDialogueService
from adventure.skills.combat import RollSource

logger = logging.getLogger(__name__)

HANDLER_FAILURE = "Something went wrong while doing that. Nothing happened."
TURN_FAILURE = "Something unexpected happened. What do you do?"
GAME_OVER = "💀 Your adventure has ended. Start a new game to play again."


@dataclass
class GameEngine:
    """
    Main game engine for one play session.

    Owns the SessionState and threads it through every component. One
    turn is fully resolved before the next is accepted.
    """

    game: Game
    state: SessionState
    llm: LLMService | None = None
    config: EngineConfig = field(default_factory=EngineConfig)
    rng: RollSource | None = None

    # Components (initialized in __post_init__)
    interpreter: IntentInterpreter = field(init=False)
    executor: ActionExecutor = field(init=False)
    narrator: OutcomeNarrator = field(init=False)
    dialogue: NPCDialogueService = field(init=False)

    victory: bool = field(init=False, default=False)

    def __post_init__(self) -> None:
        """Initialize engine components."""
        if self.rng is None:
            self.rng = random.Random(self.config.rng_seed)
        self.state.recent_command_limit = self.config.recent_command_window

        self.interpreter = IntentInterpreter(
            llm=self.llm,
            max_tokens=self.config.interpret_max_tokens,
            temperature=self.config.interpret_temperature,
        )
        self.dialogue = NPCDialogueService(
            llm=self.llm,
            history_window=self.config.dialogue_history_window,
            max_tokens=self.config.dialogue_max_tokens,
            temperature=self.config.dialogue_temperature,
        )
        self.executor = ActionExecutor(
            game=self.game,
            rng=self.rng,
            llm=self.llm,
            decisions=NpcDecisionMaker(
                llm=self.llm,
                max_tokens=self.config.decision_max_tokens,
                temperature=self.config.decision_temperature,
            ),
            dialogue=self.dialogue,
            health_bar_width=self.config.health_bar_width,
        )
        if self.config.use_llm_narration and self.llm is not None:
            self.narrator = LLMOutcomeNarrator(
                llm=self.llm,
                max_tokens=self.config.narrate_max_tokens,
                temperature=self.config.narrate_temperature,
            )
        else:
            self.narrator = TemplateOutcomeNarrator()

    @classmethod
    def start(
        cls,
        game: Game,
        player_name: str = "Adventurer",
        llm: LLMService | None = None,
        config: EngineConfig | None = None,
        rng: RollSource | None = None,
    ) -> GameEngine:
        """
        Start a new session of a game.

        Args:
            game: Definition to play; it is copied, never mutated
            player_name: Name of the player character
            llm: LLM service; None plays fully offline
            config: Engine configuration
            rng: Roll source; defaults to random.Random(config.rng_seed)

        Returns:
            Engine bound to a fresh SessionState

        Raises:
            ValueError: If the game definition is inconsistent
        """
        state = SessionState.from_game(game, player_name)
        return cls(game=game, state=state, llm=llm, config=config or EngineConfig(), rng=rng)

    def set_narrator(self, narrator: OutcomeNarrator) -> None:
        """Set a custom outcome narrator."""
        self.narrator = narrator

    # =========================================================================
    # Turns
    # =========================================================================

    async def process_turn(self, command: str) -> TurnResult:
        """
        Process a single player turn.

        This is the main game loop entry point.

        Args:
            command: Raw text from the player

        Returns:
            TurnResult with the full response and what happened
        """
        start_time = time.time()
        state = self.state

        if state.game_over:
            return TurnResult(response=GAME_OVER, game_over=True, turn_number=state.turn_count)

        state.record_command(command)
        state.tick()

        try:
            snapshot = build_snapshot(state, self.game)
            intents = await self.interpreter.interpret(command, snapshot)

            if not intents:
                return TurnResult(
                    response=self._with_footer(NOT_UNDERSTOOD),
                    narration=NOT_UNDERSTOOD,
                    turn_number=state.turn_count,
                    processing_time_ms=int((time.time() - start_time) * 1000),
                )

            executed = []
            for intent in intents:
                result = await self._execute(intent, command)
                executed.append(ExecutedAction(intent=intent, result=result))
                if state.game_over:
                    break

            completed = state.update_quests()
            victory_message = self.check_win_condition()

            narration = await self.narrator.narrate(command, executed, state, self.game)
            for quest in completed:
                narration += f"\n\n📜 Quest complete: {quest.title}!"

            if victory_message is not None and not state.game_over:
                self.victory = True
                narration = f"{narration}\n\n{victory_banner(victory_message)}".strip()

            return TurnResult(
                response=self._with_footer(narration),
                intents=intents,
                results=executed,
                narration=narration,
                victory=self.victory,
                game_over=state.game_over,
                turn_number=state.turn_count,
                processing_time_ms=int((time.time() - start_time) * 1000),
            )

        except Exception as e:
            logger.exception("Turn failed for command %r", command)
            return TurnResult(
                response=TURN_FAILURE,
                narration=TURN_FAILURE,
                game_over=state.game_over,
                turn_number=state.turn_count,
                processing_time_ms=int((time.time() - start_time) * 1000),
                error=str(e),
            )

    async def respond(self, command: str) -> str:
        """Process one turn and return only the text shown to the player."""
        result = await self.process_turn(command)
        return result.response

    async def _execute(self, intent: ActionIntent, command: str) -> ActionResult:
        intercepted = self._intercept_combat(intent)
        if intercepted is not None:
            return intercepted
        try:
            return await self.executor.execute(intent, self.state, command)
        except Exception:
            logger.exception("Handler for %s failed", intent.action.value)
            return ActionResult.fail(HANDLER_FAILURE)

    def _intercept_combat(self, intent: ActionIntent) -> ActionResult | None:
        """While in combat, the player cannot walk away; status shows the fight."""
        if not self.state.in_combat:
            return None
        if intent.action == ActionKind.STATUS:
            return ActionResult.ok(self.combat_status())
        if intent.action == ActionKind.MOVE:
            enemy = self.state.combat_opponent()
            name = enemy.name if enemy else "your opponent"
            return ActionResult.fail(f"You're in combat with {name}! Attack or flee.")
        return None

    def _with_footer(self, narration: str) -> str:
        if self.state.game_over:
            return narration
        if self.state.in_combat:
            bars = self.combat_status()
            # Attack, failed flee and status results already end with the bars
            if narration.rstrip().endswith(bars):
                return narration
            return f"{narration}\n\n{bars}"
        return f"{narration}\n\n{format_footer(self.state, self.game)}"

    # =========================================================================
    # Queries
    # =========================================================================

    def check_win_condition(self) -> str | None:
        """
        Check every global victory condition.

        Falls back to the legacy room list when the game defines no
        conditions.

        Returns:
            Victory message, or None
        """
        state = self.state
        for condition in self.game.win_conditions:
            target = condition.target_id
            met = False
            if condition.type == WinConditionType.ROOM:
                met = state.current_room_id == target
            elif condition.type == WinConditionType.ITEM:
                met = target in state.player.carried_items
            elif condition.type == WinConditionType.NPC_DEFEAT:
                npc = state.npcs.get(target or "")
                met = npc is not None and not npc.is_alive
            elif condition.type == WinConditionType.QUEST_COMPLETE:
                met = any(
                    q.id == target and q.status == QuestStatus.COMPLETED for q in state.active_quests
                )
            if met:
                return condition.message()

        if not self.game.win_conditions and state.current_room_id in self.game.win_condition_room_ids:
            return "You have achieved victory!"
        return None

    def combat_status(self) -> str:
        return combat_status(self.state, self.config.health_bar_width)

    def available_actions(self) -> str:
        return available_actions(self.state, self.game)

    def introduction(self) -> str:
        """Opening text: title, story, objective and the starting room."""
        game = self.game
        room = self.state.current_room()
        lines = [f"=== {game.title} ==="]
        if game.subtitle:
            lines.append(game.subtitle)
        lines.append("")
        lines.append(game.story_introduction or game.description)
        if game.objective:
            lines.append("")
            lines.append(f"🎯 Objective: {game.objective}")
        lines.append("")
        lines.append(room.description or room.name)
        return self._with_footer("\n".join(lines).strip())
