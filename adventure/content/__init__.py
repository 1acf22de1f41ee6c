"""Built-in game content."""

from __future__ import annotations

from adventure.content.starter_world import create_starter_game

__all__ = ["create_starter_game"]
