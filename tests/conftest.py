"""
Shared fixtures for the adventure engine tests.
"""

from __future__ import annotations

import pytest

from adventure.content import create_starter_game
from adventure.models import Game, SessionState
from adventure.services import LLMService, MockLLMProvider


class ScriptedRolls:
    """Roll source that returns predetermined values in order."""

    def __init__(self, *rolls: int) -> None:
        self.rolls = list(rolls)
        self.requested: list[int] = []

    def randrange(self, stop: int) -> int:
        self.requested.append(stop)
        if not self.rolls:
            raise AssertionError("ScriptedRolls ran out of rolls")
        roll = self.rolls.pop(0)
        assert 0 <= roll < stop, f"Scripted roll {roll} outside [0, {stop})"
        return roll


@pytest.fixture
def game() -> Game:
    return create_starter_game()


@pytest.fixture
def state(game: Game) -> SessionState:
    return SessionState.from_game(game, "Hero")


@pytest.fixture
def provider() -> MockLLMProvider:
    return MockLLMProvider()


@pytest.fixture
def llm(provider: MockLLMProvider) -> LLMService:
    return LLMService(provider=provider)


@pytest.fixture
def rolls() -> type[ScriptedRolls]:
    """Factory for scripted roll sources: ``rolls(0, 99)``."""
    return ScriptedRolls
