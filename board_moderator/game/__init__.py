# ABOUTME: Game module loading exports.
# ABOUTME: Provides GameLoader and the load-time validation error.

from board_moderator.game.exceptions import GameDefinitionError
from board_moderator.game.loader import GameLoader, parse_game_definition

__all__ = [
    "GameDefinitionError",
    "GameLoader",
    "parse_game_definition",
]
