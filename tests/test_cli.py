"""
Tests for the console front end.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from adventure.cli import repl
from adventure.cli.repl import GameREPL, TranscriptRecorder, load_game
from adventure.engine import GameEngine
from adventure.models import Game


@pytest.fixture
def make_repl(game: Game, rolls):
    def factory(*roll_values: int, transcript: TranscriptRecorder | None = None) -> GameREPL:
        engine = GameEngine.start(game, player_name="Hero", rng=rolls(*roll_values))
        return GameREPL(engine, transcript=transcript)

    return factory


# =============================================================================
# Transcript
# =============================================================================


class TestTranscriptRecorder:
    def test_render(self):
        transcript = TranscriptRecorder(title="Quest", introduction="Once upon a time.", objective="Win.")
        transcript.record("Town", "100/100", "look", "You see a fountain.")
        transcript.outcome = "🎉 Victory!"

        text = transcript.render()

        assert text.startswith("# Quest - Game Replay")
        assert "> **Narrator:** Once upon a time." in text
        assert "> **Objective:** Win." in text
        assert "### Turn 1\n\n**Location:** Town\n\n**Health:** 100/100" in text
        assert "> **Player:** look\n\n> **Narrator:** You see a fountain." in text
        assert text.rstrip().endswith("## 🎉 Victory!")

    def test_save(self, tmp_path: Path):
        path = tmp_path / "replay.md"
        TranscriptRecorder(title="Quest").save(path)
        assert path.read_text(encoding="utf-8").startswith("# Quest - Game Replay")


# =============================================================================
# REPL input handling
# =============================================================================


class TestGameREPL:
    """Tests for handle_input."""

    @pytest.mark.asyncio
    async def test_quit(self, make_repl):
        console = make_repl()
        assert await console.handle_input("  QUIT ") is None
        assert console.running is False

    @pytest.mark.asyncio
    async def test_blank_line(self, make_repl):
        console = make_repl()
        assert await console.handle_input("   ") is None
        assert console.running

    @pytest.mark.asyncio
    async def test_help_skips_the_turn(self, make_repl):
        console = make_repl()
        text = await console.handle_input("?")
        assert text.startswith("=== Available Commands ===")
        assert console.engine.state.turn_count == 0

    @pytest.mark.asyncio
    async def test_turn_records_starting_location(self, make_repl):
        transcript = TranscriptRecorder(title="Quest")
        console = make_repl(transcript=transcript)

        response = await console.handle_input("go north")

        assert response.startswith("You go North.")
        (entry,) = transcript.entries
        assert entry.location == "Ravensholm Town Square"
        assert entry.health == "100/100"
        assert entry.utterance == "go north"
        assert entry.response == response

    @pytest.mark.asyncio
    async def test_game_over_ends_session(self, make_repl):
        transcript = TranscriptRecorder(title="Quest")
        console = make_repl(0, 99, 0, 99, transcript=transcript)
        console.engine.state.relocate_party("goblin_cave")
        console.engine.state.player.health = 1

        response = await console.handle_input("attack gruk")

        assert "GAME OVER - You have been defeated!" in response
        assert console.running is False
        assert transcript.outcome == "💀 Game Over"

    @pytest.mark.asyncio
    async def test_victory_ends_session(self, make_repl):
        transcript = TranscriptRecorder(title="Quest")
        console = make_repl(0, 99, transcript=transcript)
        console.engine.state.relocate_party("dragon_lair")
        console.engine.state.npcs["dragon"].health = 1

        await console.handle_input("attack infernus")

        assert console.running is False
        assert transcript.outcome == "🎉 Victory!"


# =============================================================================
# Entry points
# =============================================================================


class TestLoadGame:
    def test_default_is_starter_game(self):
        assert load_game(None).title == "The Dragon's Hoard"

    def test_from_json(self, game: Game, tmp_path: Path):
        path = tmp_path / "game.json"
        path.write_text(game.model_dump_json(), encoding="utf-8")
        assert load_game(str(path)) == game

    def test_invalid_world(self, tmp_path: Path):
        path = tmp_path / "broken.json"
        path.write_text('{"id": "broken", "title": "Broken", "starting_room_id": "nowhere"}', encoding="utf-8")
        with pytest.raises(ValueError, match="Starting room 'nowhere' does not exist"):
            load_game(str(path))


def test_main_passes_arguments(monkeypatch: pytest.MonkeyPatch):
    seen = {}
    monkeypatch.setattr(repl, "run_game", lambda **kwargs: seen.update(kwargs))

    repl.main(["--name", "Rowan", "--provider", "mock", "--seed", "7", "--transcript", "out.md"])

    assert seen == {
        "player_name": "Rowan",
        "provider": "mock",
        "game_path": None,
        "seed": 7,
        "transcript_path": "out.md",
    }
