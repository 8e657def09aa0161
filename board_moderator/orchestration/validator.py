# ABOUTME: Action validator that folds a candidate batch over a working copy of the game state.
# ABOUTME: Enforces turn ownership, path/type rules, decision blocks and protected fields; never partially commits.

import copy
import random
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from board_moderator.models.actions import (
    AddStateAction,
    NarrateAction,
    PlayerAnsweredAction,
    PlayerRolledAction,
    ReadStateAction,
    ResetGameAction,
    RollDiceAction,
    SetStateAction,
    SubtractStateAction,
    parse_action,
)
from board_moderator.models.dice_models import DiceRoll
from board_moderator.models.game_state import GamePhase, decision_points_of
from board_moderator.orchestration.decision_gate import find_pending_decision
from board_moderator.orchestration.exceptions import (
    ActionValidationError,
    DecisionPendingError,
    EffectInFlightError,
    PathNotFoundError,
    ProtectedPathError,
    TypeMismatchError,
)
from board_moderator.orchestration.turn_manager import check_turn_ownership, player_id_of
from board_moderator.state.roster import build_roster, roster_names
from board_moderator.state.store import MISSING, get_by_path, set_by_path, split_path
from board_moderator.utils.dice import resolve_die, roll_dice

# Fields owned by the turn manager and phase transitions
PROTECTED_PATHS: dict[str, str] = {
    "game": "the game record is managed by the moderator; write individual fields instead",
    "game.turn": "turns advance automatically once the current turn has fully resolved",
    "game.phase": "the phase changes automatically at setup, on a win and on reset",
    "game.playerOrder": "player order is fixed when players join",
}

WHOLE_RECORD_ONLY: frozenset[str] = frozenset({"game"})

# Static board configuration
CONFIG_ROOTS: tuple[str, ...] = ("board", "decisionPoints")


def protected_root(path: str) -> str | None:
    """The protected path covering `path` (itself or an ancestor), if any"""
    for protected in PROTECTED_PATHS:
        if path == protected:
            return protected
        # Other game fields stay writable one at a time
        if protected not in WHOLE_RECORD_ONLY and path.startswith(protected + "."):
            return protected
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_position(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


@dataclass
class BatchOutcome:
    """Result of an accepted batch, ready to commit"""

    state: dict[str, Any]
    actions: list[Any] = field(default_factory=list)
    narrations: list[NarrateAction] = field(default_factory=list)
    reads: dict[str, Any] = field(default_factory=dict)
    rolls: list[DiceRoll] = field(default_factory=list)
    moved_players: list[str] = field(default_factory=list)
    player_rolled: bool = False
    reset: ResetGameAction | None = None
    reset_names: list[str] = field(default_factory=list)
    discarded: int = 0

    def mark_moved(self, player_id: str) -> None:
        if player_id not in self.moved_players:
            self.moved_players.append(player_id)


class ActionValidator:
    """
    Validates and applies a batch of actions against a working snapshot.

    The authoritative store is never touched here: validate() returns the
    folded working state and the orchestrator commits it in one step.
    """

    def __init__(self, initial_state: dict[str, Any], rng: random.Random | None = None):
        """
        Initialize validator.

        Args:
            initial_state: Game definition's initial state, used by RESET_GAME
            rng: Random generator for ROLL_DICE (injectable for tests)
        """
        self.initial_state = copy.deepcopy(initial_state)
        self.rng = rng

    def validate(
        self,
        actions: list[Any],
        state: dict[str, Any],
        board_effect_in_flight: bool = False,
    ) -> BatchOutcome:
        """
        Fold a batch over a copy of the state, stopping at the first rejection.

        Args:
            actions: Typed actions or raw action dicts, in order
            state: Current authoritative state (not mutated)
            board_effect_in_flight: True while a square effect is being resolved

        Returns:
            BatchOutcome with the new working state and side effects to dispatch

        Raises:
            ActionValidationError: On the first action that breaks a rule
        """
        outcome = BatchOutcome(state=copy.deepcopy(state))

        for index, raw in enumerate(actions):
            try:
                action = parse_action(raw, index)
            except ValueError as e:
                raise ActionValidationError(str(e)) from e

            if isinstance(action, ResetGameAction):
                self._apply_reset(action, outcome)
                outcome.actions.append(action)
                outcome.discarded = len(actions) - index - 1
                if outcome.discarded:
                    logger.info(f"RESET_GAME discarded {outcome.discarded} trailing action(s)")
                break

            self._apply(action, outcome, index, board_effect_in_flight)
            outcome.actions.append(action)

        return outcome

    # ------------------------------------------------------------------
    # Per-action rules
    # ------------------------------------------------------------------

    def _apply(self, action: Any, outcome: BatchOutcome, index: int, in_flight: bool) -> None:
        working = outcome.state

        if isinstance(action, NarrateAction):
            outcome.narrations.append(action)

        elif isinstance(action, ReadStateAction):
            outcome.reads[action.path] = self._resolve(working, action.path, index)

        elif isinstance(action, SetStateAction):
            self._check_write(working, action.path, index)
            self._resolve(working, action.path, index)
            self._check_value(working, action.path, action.value, index)
            self._write(outcome, action.path, action.value, index, supplies=action)

        elif isinstance(action, (AddStateAction, SubtractStateAction)):
            self._check_write(working, action.path, index)
            current = self._resolve(working, action.path, index)
            if not _is_number(current):
                raise TypeMismatchError(
                    f"{action.action} requires numeric value at path {action.path}, "
                    f"got {type(current).__name__}",
                    index,
                )
            delta = action.value if isinstance(action, AddStateAction) else -action.value
            new_value = current + delta
            self._check_value(working, action.path, new_value, index)
            self._write(outcome, action.path, new_value, index)

        elif isinstance(action, RollDiceAction):
            roll = roll_dice(resolve_die(action.die), self.rng)
            working.setdefault("game", {})["lastRoll"] = roll.total
            outcome.rolls.append(roll)

        elif isinstance(action, PlayerRolledAction):
            self._apply_player_rolled(action, outcome, index, in_flight)

        elif isinstance(action, PlayerAnsweredAction):
            working.setdefault("game", {})["lastAnswer"] = action.answer

    def _apply_player_rolled(
        self,
        action: PlayerRolledAction,
        outcome: BatchOutcome,
        index: int,
        in_flight: bool,
    ) -> None:
        working = outcome.state

        if in_flight:
            raise EffectInFlightError(
                "PLAYER_ROLLED not allowed during square effect processing; "
                "the current square's effect must be resolved first",
                index,
            )

        current_turn = (working.get("game") or {}).get("turn")
        if not current_turn:
            raise ActionValidationError("PLAYER_ROLLED requires a current player", index)

        path = f"players.{current_turn}.position"
        position = self._resolve(working, path, index)
        if not _is_position(position):
            raise TypeMismatchError(
                f"{path} must hold a non-negative integer, got {position!r}",
                index,
            )

        self._write(outcome, path, position + action.value, index)
        working["game"]["lastRoll"] = action.value
        outcome.player_rolled = True

    def _apply_reset(self, action: ResetGameAction, outcome: BatchOutcome) -> None:
        names = roster_names(outcome.state) if action.keep_player_names else []
        fresh = copy.deepcopy(self.initial_state)
        if names:
            players, _ = build_roster(self.initial_state, names)
            fresh["players"] = players

        # Reset always lands in SETUP; the orchestrator restarts play with the kept names
        game = fresh.setdefault("game", {})
        game["phase"] = GamePhase.SETUP.value
        game["turn"] = None
        game["winner"] = None

        outcome.state = fresh
        outcome.reset = action
        outcome.reset_names = names

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def _resolve(self, working: dict[str, Any], path: str, index: int) -> Any:
        """Resolve a path or raise PathNotFoundError"""
        try:
            value = get_by_path(working, path)
        except ValueError as e:
            raise PathNotFoundError(str(e), index) from e

        if value is MISSING and self._is_decision_field(working, path):
            return None

        if value is MISSING:
            raise PathNotFoundError(f"references non-existent path: {path}", index)
        return value

    def _is_decision_field(self, working: dict[str, Any], path: str) -> bool:
        """players.<id>.<requiredField> on an existing player resolves even when unset"""
        parts = path.split(".")
        if len(parts) != 3 or parts[0] != "players":
            return False
        if not isinstance((working.get("players") or {}).get(parts[1]), dict):
            return False
        return any(dp.required_field == parts[2] for dp in decision_points_of(working))

    def _check_write(self, working: dict[str, Any], path: str, index: int) -> None:
        try:
            parts = split_path(path)
        except ValueError as e:
            raise PathNotFoundError(str(e), index) from e

        protected = protected_root(path)
        if protected is not None:
            raise ProtectedPathError(f"Cannot write {path}: {PROTECTED_PATHS[protected]}", index)

        if parts[0] in CONFIG_ROOTS:
            raise ProtectedPathError(
                f"Cannot write {path}: board configuration is fixed by the game definition",
                index,
            )

        phase = (working.get("game") or {}).get("phase")
        if path == "players" and phase == GamePhase.PLAYING.value:
            raise ProtectedPathError(
                "Cannot replace all players during play; write players.<id>.<field> instead",
                index,
            )

        check_turn_ownership(working, path, index)

    def _check_value(self, working: dict[str, Any], path: str, value: Any, index: int) -> None:
        """Type rules for the value about to be stored"""
        parts = path.split(".")

        if path == "game.winner" and value is not None:
            order = (working.get("game") or {}).get("playerOrder") or []
            if value not in order:
                raise TypeMismatchError(
                    f"game.winner must be one of {order}, got {value!r}",
                    index,
                )

        if parts[0] != "players":
            return

        if len(parts) == 3 and parts[2] == "position" and not _is_position(value):
            raise TypeMismatchError(
                f"{path} must be a non-negative integer, got {value!r}",
                index,
            )

        if len(parts) == 1:
            if not isinstance(value, dict):
                raise TypeMismatchError(
                    f"players must be an object of player records, got {type(value).__name__}",
                    index,
                )
            for player_id, record in value.items():
                self._check_record(f"players.{player_id}", record, index)

        if len(parts) == 2:
            self._check_record(path, value, index)

    @staticmethod
    def _check_record(path: str, record: Any, index: int) -> None:
        """A whole player record must be an object with a valid position"""
        if not isinstance(record, dict):
            raise TypeMismatchError(
                f"{path} must be a player record object, got {type(record).__name__}",
                index,
            )
        if not _is_position(record.get("position")):
            raise TypeMismatchError(
                f"{path}.position must be a non-negative integer, got {record.get('position')!r}",
                index,
            )

    def _write(
        self,
        outcome: BatchOutcome,
        path: str,
        value: Any,
        index: int,
        supplies: SetStateAction | None = None,
    ) -> None:
        """Apply one write to the working state, blocking moves past an open decision"""
        working = outcome.state
        player_id = player_id_of(path)
        old_position = None

        if player_id is not None:
            player = (working.get("players") or {}).get(player_id)
            old_position = player.get("position") if isinstance(player, dict) else None

            new_position = self._position_after(path, value, old_position)
            if new_position != old_position:
                self._check_decision(working, player_id, supplies, index)

        try:
            set_by_path(working, path, value)
        except KeyError as e:
            raise PathNotFoundError(f"references non-existent path: {path}", index) from e

        if player_id is not None:
            player = (working.get("players") or {}).get(player_id)
            new_position = player.get("position") if isinstance(player, dict) else None
            if new_position != old_position and new_position is not None:
                outcome.mark_moved(player_id)

    @staticmethod
    def _position_after(path: str, value: Any, old_position: Any) -> Any:
        parts = path.split(".")
        if len(parts) == 3 and parts[2] == "position":
            return value
        if len(parts) == 2 and isinstance(value, dict):
            return value.get("position", old_position)
        return old_position

    @staticmethod
    def _check_decision(
        working: dict[str, Any],
        player_id: str,
        supplies: SetStateAction | None,
        index: int,
    ) -> None:
        decision = find_pending_decision(working, player_id)
        if decision is None:
            return

        # A whole-record write may answer the decision while moving
        if supplies is not None and isinstance(supplies.value, dict):
            if supplies.path == f"players.{player_id}" and supplies.value.get(decision.required_field) is not None:
                return

        raise DecisionPendingError(
            f"Cannot move from position {decision.position}: {player_id} must choose "
            f"'{decision.required_field}' first (set players.{player_id}.{decision.required_field})",
            index,
        )
