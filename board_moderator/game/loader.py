# ABOUTME: Loads game modules from <games_path>/<game_id>/config.json and validates them once.
# ABOUTME: Rejects missing sections, duplicate decision points, negative positions and cyclic move tables.

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from board_moderator.game.exceptions import GameDefinitionError
from board_moderator.models.game_definition import GameDefinition
from board_moderator.models.game_state import GamePhase


def _check_required(raw: dict[str, Any]) -> None:
    metadata = raw.get("metadata") or {}
    if not metadata.get("id") or not metadata.get("name"):
        raise GameDefinitionError("Invalid game module: missing metadata")

    if not isinstance(raw.get("initialState"), dict):
        raise GameDefinitionError("Invalid game module: missing initialState")

    rules = raw.get("rules") or {}
    if not rules.get("objective") or not rules.get("mechanics"):
        raise GameDefinitionError("Invalid game module: missing rules")


def _table(board: dict[str, Any], name: str) -> dict[int, Any]:
    table = board.get(name) or {}
    if not isinstance(table, dict):
        raise GameDefinitionError(f"board.{name} must be an object keyed by position")
    try:
        return {int(key): value for key, value in table.items()}
    except ValueError as e:
        raise GameDefinitionError(f"board.{name} has a non-integer position key") from e


def check_board(state: dict[str, Any]) -> None:
    """
    Validate board tables and decision points of an initial state.

    Args:
        state: Initial state document

    Raises:
        GameDefinitionError: On negative positions, duplicate decision points or move cycles
    """
    board = state.get("board") or {}
    moves = _table(board, "moves")
    squares = _table(board, "squares")

    for start, destination in moves.items():
        if not isinstance(destination, int) or isinstance(destination, bool):
            raise GameDefinitionError(f"board.moves[{start}] must be an integer position")
        if start < 0 or destination < 0:
            raise GameDefinitionError(f"board.moves[{start}] -> {destination} uses a negative position")

    for position in squares:
        if position < 0:
            raise GameDefinitionError(f"board.squares has a negative position {position}")

    # Every chain must end; a revisit means a cycle
    for start in moves:
        seen = {start}
        position = moves[start]
        while position in moves and moves[position] != position:
            if position in seen:
                raise GameDefinitionError(f"board.moves contains a cycle through position {position}")
            seen.add(position)
            position = moves[position]

    seen_positions: set[int] = set()
    for index, decision in enumerate(state.get("decisionPoints") or []):
        if not isinstance(decision, dict):
            raise GameDefinitionError(f"decisionPoints[{index}] must be an object")
        position = decision.get("position")
        if not isinstance(position, int) or isinstance(position, bool) or position < 0:
            raise GameDefinitionError(f"decisionPoints[{index}] needs a non-negative integer position")
        if not decision.get("requiredField"):
            raise GameDefinitionError(f"decisionPoints[{index}] is missing requiredField")
        if position in seen_positions:
            raise GameDefinitionError(f"Two decision points share board position {position}")
        seen_positions.add(position)


def normalize_initial_state(state: dict[str, Any]) -> dict[str, Any]:
    """Fill the game record fields the core relies on"""
    game = state.setdefault("game", {})
    game.setdefault("phase", GamePhase.SETUP.value)
    game.setdefault("turn", None)
    game.setdefault("playerOrder", [])
    game.setdefault("winner", None)
    game.setdefault("lastRoll", None)
    state.setdefault("players", {})
    return state


def parse_game_definition(raw: dict[str, Any]) -> GameDefinition:
    """
    Validate a raw game module.

    Args:
        raw: Parsed config.json content

    Returns:
        GameDefinition with a normalized initial state

    Raises:
        GameDefinitionError: If the module is invalid
    """
    if not isinstance(raw, dict):
        raise GameDefinitionError("Invalid game module: expected a JSON object")

    _check_required(raw)
    check_board(raw["initialState"])

    try:
        definition = GameDefinition.model_validate(raw)
    except ValidationError as e:
        raise GameDefinitionError(f"Invalid game module: {e}") from e

    normalize_initial_state(definition.initial_state)
    if not definition.initial_state["game"].get("name"):
        definition.initial_state["game"]["name"] = definition.metadata.name
    return definition


class GameLoader:
    """Loads game modules from a directory of <game_id>/config.json files"""

    def __init__(self, games_path: str | Path):
        self.games_path = Path(games_path)

    def available_games(self) -> list[str]:
        if not self.games_path.is_dir():
            return []
        return sorted(p.parent.name for p in self.games_path.glob("*/config.json"))

    def load_game(self, game_id: str) -> GameDefinition:
        """
        Load and validate one game module.

        Args:
            game_id: Directory name under games_path

        Returns:
            Validated GameDefinition

        Raises:
            GameDefinitionError: If the file is missing, not JSON, or invalid
        """
        config_path = self.games_path / game_id / "config.json"
        logger.info(f"Loading game module: {game_id}")

        try:
            with open(config_path, encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError as e:
            raise GameDefinitionError(f"Game module not found: {config_path}") from e
        except json.JSONDecodeError as e:
            raise GameDefinitionError(f"Invalid JSON in {config_path}: {e}") from e

        definition = parse_game_definition(raw)
        logger.info(
            f"Game module loaded: {definition.metadata.name} v{definition.metadata.version}"
        )
        return definition
