"""
Service layer for the adventure engine.

Services wrap external collaborators (the LLM) behind prompt-owning
methods and degrade gracefully when those collaborators fail.
"""

from __future__ import annotations

from adventure.services.llm import (
    LLMProvider,
    LLMService,
    MockLLMProvider,
    OpenRouterProvider,
    create_llm_service,
)
from adventure.services.npc import NPCDialogueService, build_personality_prompt

__all__ = [
    "LLMProvider",
    "LLMService",
    "MockLLMProvider",
    "NPCDialogueService",
    "OpenRouterProvider",
    "build_personality_prompt",
    "create_llm_service",
]
