"""
Interactive REPL for the adventure engine.

Provides a text-based interface for playing a game, with an optional
markdown transcript of the session.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

from adventure.content import create_starter_game
from adventure.engine import EngineConfig, GameEngine
from adventure.models import Game
from adventure.services import LLMService, create_llm_service

logger = logging.getLogger(__name__)

QUIT_WORDS = frozenset({"quit", "exit", "q"})
HELP_WORDS = frozenset({"help", "?"})
RULE = "=" * 60


class TranscriptEntry(BaseModel):
    """One recorded turn."""

    location: str
    health: str
    utterance: str
    response: str


@dataclass
class TranscriptRecorder:
    """Collects turns and renders them as a markdown replay log."""

    title: str
    introduction: str = ""
    objective: str = ""
    entries: list[TranscriptEntry] = field(default_factory=list)
    outcome: str | None = None

    def record(self, location: str, health: str, utterance: str, response: str) -> None:
        self.entries.append(
            TranscriptEntry(location=location, health=health, utterance=utterance, response=response)
        )

    def render(self) -> str:
        lines = [f"# {self.title} - Game Replay", "", f"**Date:** {datetime.now():%Y-%m-%d %H:%M:%S}", ""]
        if self.introduction:
            lines += ["## Game Start", "", f"> **Narrator:** {self.introduction}", ""]
        if self.objective:
            lines += [f"> **Objective:** {self.objective}", ""]

        for turn, entry in enumerate(self.entries, start=1):
            lines += [
                f"### Turn {turn}",
                "",
                f"**Location:** {entry.location}",
                "",
                f"**Health:** {entry.health}",
                "",
                f"> **Player:** {entry.utterance}",
                "",
                f"> **Narrator:** {entry.response}",
                "",
            ]

        if self.outcome:
            lines += [f"## {self.outcome}", ""]
        return "\n".join(lines)

    def save(self, path: Path) -> None:
        path.write_text(self.render(), encoding="utf-8")


class GameREPL:
    """
    Interactive console loop.

    quit/exit/q end the session; help/? show the action list without a
    trip through interpretation. Everything else is a turn.
    """

    def __init__(
        self,
        engine: GameEngine,
        transcript: TranscriptRecorder | None = None,
    ) -> None:
        self.engine = engine
        self.transcript = transcript
        self.running = True

    async def handle_input(self, text: str) -> str | None:
        """
        Handle one line of player input.

        Returns:
            Text to print, or None when nothing should be printed
        """
        text = text.strip()
        if not text:
            return None

        lowered = text.lower()
        if lowered in QUIT_WORDS:
            self.running = False
            return None
        if lowered in HELP_WORDS:
            return self.engine.available_actions()

        # Where the player stood when they spoke
        player = self.engine.state.player
        location = self.engine.state.current_room().name
        health = f"{player.health}/{player.max_health}"

        response = await self.engine.respond(text)
        if self.transcript is not None:
            self.transcript.record(location, health, text, response)

        if self.engine.state.game_over:
            self.running = False
            self._set_outcome("💀 Game Over")
            response += f"\n\n{RULE}\nGAME OVER - You have been defeated!\n{RULE}"
        elif self.engine.victory:
            self.running = False
            self._set_outcome("🎉 Victory!")
        return response

    def _set_outcome(self, outcome: str) -> None:
        if self.transcript is not None:
            self.transcript.outcome = outcome

    def _print_banner(self) -> None:
        game = self.engine.game
        print(f"\n{RULE}")
        print(f"  {game.title}")
        if game.subtitle:
            print(f"  {game.subtitle}")
        print(RULE)
        print("Type 'help' for available actions, or just describe what you do.\n")

    async def run(self) -> None:
        """Run the interactive REPL."""
        self._print_banner()
        print(self.engine.introduction())
        print()

        while self.running:
            try:
                user_input = input("> ")
            except (KeyboardInterrupt, EOFError):
                print("\n")
                break

            response = await self.handle_input(user_input)
            if response:
                print()
                print(response)
                print()

        print("Thanks for playing!")


def load_game(path: str | None) -> Game:
    """Load a JSON game definition, or the starter game when no path is given."""
    if path is None:
        return create_starter_game()
    game = Game.model_validate_json(Path(path).read_text(encoding="utf-8"))
    game.validate_world()
    return game


def run_game(
    player_name: str = "Adventurer",
    provider: str = "openrouter",
    game_path: str | None = None,
    seed: int | None = None,
    transcript_path: str | None = None,
) -> None:
    """
    Run a game in the console.

    Args:
        player_name: Name for the player character
        provider: LLM provider type (openrouter or mock)
        game_path: Optional JSON game definition
        seed: Seed for deterministic rolls
        transcript_path: Where to write a markdown transcript
    """
    game = load_game(game_path)

    llm: LLMService | None = create_llm_service(provider)
    if not llm.is_available:
        logger.warning("LLM provider %s is not available; playing offline", provider)
        llm = None

    # The mock provider cannot narrate meaningfully
    config = EngineConfig(rng_seed=seed, use_llm_narration=provider != "mock")
    engine = GameEngine.start(game, player_name=player_name, llm=llm, config=config)

    transcript = None
    if transcript_path:
        transcript = TranscriptRecorder(
            title=game.title,
            introduction=game.story_introduction or game.description,
            objective=game.objective or "",
        )

    repl = GameREPL(engine, transcript=transcript)
    try:
        asyncio.run(repl.run())
    finally:
        if transcript is not None:
            transcript.save(Path(transcript_path))
            print(f"📝 Transcript saved to: {transcript_path}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="LLM-narrated text adventure")
    parser.add_argument("--name", default="Adventurer", help="Character name")
    parser.add_argument(
        "--provider",
        choices=["openrouter", "mock"],
        default="openrouter",
        help="LLM provider",
    )
    parser.add_argument("--game", default=None, help="Path to a JSON game definition")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for deterministic rolls")
    parser.add_argument("--transcript", default=None, help="Write a markdown transcript to this path")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_game(
        player_name=args.name,
        provider=args.provider,
        game_path=args.game,
        seed=args.seed,
        transcript_path=args.transcript,
    )


if __name__ == "__main__":
    main()
