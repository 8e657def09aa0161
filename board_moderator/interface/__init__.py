# ABOUTME: Console interface exports standing in for the voice front-end.
# ABOUTME: Provides the narrator, transcript router, name collection flow and console loop.

from board_moderator.interface.console import (
    ConsoleNarrator,
    ModeratorConsole,
    NameCollector,
    TranscriptRouter,
)

__all__ = [
    "ConsoleNarrator",
    "ModeratorConsole",
    "NameCollector",
    "TranscriptRouter",
]
