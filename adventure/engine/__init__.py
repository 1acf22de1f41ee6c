"""
Core Engine for the adventure engine.

The engine orchestrates one turn at a time:
- Intent interpretation (player words -> ActionIntents)
- Action execution (the only place the world changes)
- NPC decisions (ask the LLM, then enforce against the world)
- Outcome narration (retelling results without inventing facts)
"""

from __future__ import annotations

from adventure.engine.decisions import NpcDecisionMaker, enforce_give, parse_decision
from adventure.engine.executor import ActionExecutor
from adventure.engine.game import GameEngine
from adventure.engine.intent import (
    FallbackIntentParser,
    IntentInterpreter,
    build_snapshot,
    parse_intents,
    render_context,
)
from adventure.engine.models import (
    ActionIntent,
    ActionKind,
    ActionResult,
    EngineConfig,
    ExecutedAction,
    NpcDecision,
    TurnResult,
    WorldSnapshot,
)
from adventure.engine.narrator import (
    LLMOutcomeNarrator,
    OutcomeNarrator,
    TemplateOutcomeNarrator,
)

__all__ = [
    # Main engine
    "GameEngine",
    # Models
    "ActionIntent",
    "ActionKind",
    "ActionResult",
    "EngineConfig",
    "ExecutedAction",
    "NpcDecision",
    "TurnResult",
    "WorldSnapshot",
    # Interpretation
    "FallbackIntentParser",
    "IntentInterpreter",
    "build_snapshot",
    "parse_intents",
    "render_context",
    # Execution
    "ActionExecutor",
    "NpcDecisionMaker",
    "enforce_give",
    "parse_decision",
    # Narration
    "LLMOutcomeNarrator",
    "OutcomeNarrator",
    "TemplateOutcomeNarrator",
]
