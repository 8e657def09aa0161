# ABOUTME: Utility module exports for dice rolling and structured logging.
# ABOUTME: Provides dice.py (dice notation for ROLL_DICE) and logging.py (loguru config and event helpers).

from board_moderator.utils.dice import parse_dice_notation, resolve_die, roll_dice
from board_moderator.utils.logging import get_logger, setup_logging

__all__ = [
    "parse_dice_notation",
    "resolve_die",
    "roll_dice",
    "setup_logging",
    "get_logger",
]
