# ABOUTME: Entry point for running a game in the console.
# ABOUTME: Usage: python -m board_moderator.interface [game_id]

import argparse
import asyncio
import sys

from loguru import logger

from board_moderator.config.settings import get_settings
from board_moderator.game import GameDefinitionError, GameLoader
from board_moderator.interface.console import ConsoleNarrator, ModeratorConsole
from board_moderator.llm import LLMClient, RequestPipeline
from board_moderator.orchestration import Orchestrator
from board_moderator.utils.logging import setup_logging


def parse_args(argv: list[str] | None = None, default_game: str | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Run a voice board game moderator in the console"
    )

    parser.add_argument(
        "game_id",
        nargs="?",
        default=default_game,
        help="Game module directory under the games path (default: settings.default_game)"
    )

    return parser.parse_args(argv)


def main() -> None:
    """Load the game module and run the console loop"""
    settings = get_settings()
    setup_logging(log_level=settings.log_level, log_dir=settings.log_dir, console_output=False)

    game_id = parse_args(default_game=settings.default_game).game_id

    try:
        definition = GameLoader(settings.games_path).load_game(game_id)
    except GameDefinitionError as e:
        print(f"Error: {e}")
        sys.exit(1)

    pipeline = RequestPipeline(
        LLMClient.from_settings(settings),
        dedup_window=settings.dedup_window_seconds,
        attempts=settings.llm_retry_attempts,
        min_wait=settings.llm_retry_min_seconds,
        max_wait=settings.llm_retry_max_seconds,
    )
    narrator = ConsoleNarrator(sound_effects=definition.sound_effects)
    orchestrator = Orchestrator.from_definition(
        definition,
        pipeline,
        narrator,
        max_effect_depth=settings.max_effect_depth,
        max_validation_attempts=settings.max_validation_attempts,
        max_board_chain=settings.max_board_chain,
    )

    try:
        asyncio.run(ModeratorConsole(orchestrator, narrator).run())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        print(f"\nFatal error: {e}")
        logger.exception("Fatal error in console")
        sys.exit(1)


if __name__ == "__main__":
    main()
