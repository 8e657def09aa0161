# ABOUTME: Dice notation parsing and rolling for the ROLL_DICE action.
# ABOUTME: Supports "2d6+3", "1d20", "d6" (implicit 1d6), "3d8-2"; accepts an injectable RNG for tests.

import random
import re
from datetime import datetime

from loguru import logger

from board_moderator.models.dice_models import DiceRoll

MAX_DICE = 100
MAX_SIDES = 1000
DEFAULT_DIE = "1d6"

DICE_PATTERN = re.compile(r'^(\d*)d(\d+)([+-]\d+)?$')


def parse_dice_notation(notation: str) -> tuple[int, int, int]:
    """
    Parse dice notation into components.

    Supports patterns:
    - "2d6+3" -> (2, 6, 3)
    - "1d20" -> (1, 20, 0)
    - "d6" -> (1, 6, 0) (implicit 1 die)
    - "3d8-2" -> (3, 8, -2)

    Args:
        notation: Dice notation string (e.g., "2d6+3")

    Returns:
        Tuple of (num_dice, die_size, modifier)

    Raises:
        ValueError: If notation is invalid or out of range
    """
    notation = notation.strip().lower()

    match = DICE_PATTERN.match(notation)
    if not match:
        raise ValueError(
            f"Invalid dice notation: '{notation}'. "
            f"Expected format: 'XdY' or 'XdY+Z' (e.g., '2d6', '1d20+5', 'd6')"
        )

    num_dice_str, die_size_str, modifier_str = match.groups()

    num_dice = int(num_dice_str) if num_dice_str else 1
    die_size = int(die_size_str)
    modifier = int(modifier_str) if modifier_str else 0

    if num_dice < 1:
        raise ValueError(f"Number of dice must be at least 1, got {num_dice}")

    if num_dice > MAX_DICE:
        raise ValueError(f"Number of dice cannot exceed {MAX_DICE}, got {num_dice}")

    if die_size < 2 or die_size > MAX_SIDES:
        raise ValueError(
            f"Invalid die size: d{die_size}. Dice must have between 2 and {MAX_SIDES} sides"
        )

    return num_dice, die_size, modifier


def resolve_die(die: str) -> str:
    """
    Turn a free-text die request into notation roll_dice accepts.

    A bare number is a die size ("6" -> "1d6"). Anything unreadable rolls a d6.

    Args:
        die: Requested die, as given in a ROLL_DICE action

    Returns:
        Valid dice notation
    """
    text = die.strip().lower()
    notation = f"1d{text}" if text.isdigit() else text
    try:
        parse_dice_notation(notation)
    except ValueError as e:
        logger.warning(f"Unreadable die {die!r} ({e}); rolling {DEFAULT_DIE}")
        return DEFAULT_DIE
    return notation


def roll_dice(notation: str, rng: random.Random | None = None) -> DiceRoll:
    """
    Roll dice and return a DiceRoll model.

    Examples:
        >>> roll = roll_dice("2d6+3")
        >>> roll.dice_count
        2
        >>> roll.total  # sum of rolls + 3

    Args:
        notation: Dice notation string (e.g., "2d6+3")
        rng: Optional random generator (defaults to the module RNG)

    Returns:
        DiceRoll model instance with roll results

    Raises:
        ValueError: If notation is invalid
    """
    num_dice, die_size, modifier = parse_dice_notation(notation)

    source = rng or random
    individual_rolls = [source.randint(1, die_size) for _ in range(num_dice)]

    return DiceRoll(
        notation=notation.strip(),
        dice_count=num_dice,
        dice_sides=die_size,
        modifier=modifier,
        individual_rolls=individual_rolls,
        total=sum(individual_rolls) + modifier,
        timestamp=datetime.now()
    )
