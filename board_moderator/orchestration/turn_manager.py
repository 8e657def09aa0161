# ABOUTME: Turn state machine: pending-decision query, cyclic turn advancement and ownership checks.
# ABOUTME: The only writer of game.turn; refuses to advance while anything about the turn is unresolved.

from typing import Any

from loguru import logger

from board_moderator.models.game_state import GamePhase, TurnAnnouncement
from board_moderator.orchestration.decision_gate import find_pending_decision
from board_moderator.orchestration.exceptions import TurnOwnershipError
from board_moderator.state.store import StateStore
from board_moderator.utils.logging import log_turn_advance


def player_id_of(path: str) -> str | None:
    """Return <id> for a players.<id>[...] path, else None"""
    parts = path.split(".")
    if parts[0] != "players" or len(parts) < 2 or not parts[1]:
        return None
    return parts[1]


def announce(player_id: str, record: Any) -> TurnAnnouncement:
    """Build a turn announcement, tolerating a missing or malformed record"""
    if not isinstance(record, dict):
        record = {}
    position = record.get("position")
    if not isinstance(position, int) or isinstance(position, bool) or position < 0:
        position = 0
    return TurnAnnouncement(
        player_id=player_id,
        name=record.get("name") or player_id,
        position=position,
    )


def check_turn_ownership(state: dict[str, Any], path: str, index: int | None = None) -> None:
    """
    Enforce turn ownership against a state document.

    During PLAYING only the current player's record may be written, and a
    missing turn blocks every player write. Outside PLAYING any player may be
    corrected.

    Args:
        state: Game state document (usually the validator's working copy)
        path: Path being written
        index: Position of the action in its batch, for the error message

    Raises:
        TurnOwnershipError: If the path targets a player who does not own the turn
    """
    player_id = player_id_of(path)
    if player_id is None:
        return

    game = state.get("game") or {}
    if game.get("phase") != GamePhase.PLAYING.value:
        return

    current_turn = game.get("turn")
    if player_id != current_turn:
        raise TurnOwnershipError(player_id, current_turn or "nobody", index)


class TurnManager:
    """Owns turn advancement over the authoritative store"""

    def __init__(self, store: StateStore):
        """
        Initialize turn manager.

        Args:
            store: Authoritative state store
        """
        self.store = store

    def current_player(self) -> tuple[str, dict[str, Any]] | None:
        """Return (player_id, record) for the active player, or None"""
        current_turn = self.store.get("game.turn")
        if not current_turn:
            return None
        player = (self.store.get("players") or {}).get(current_turn)
        if not isinstance(player, dict):
            return None
        return current_turn, player

    def has_pending_decisions(self) -> bool:
        """True iff the active player stands on a decision point with its field unset"""
        state = self.store.snapshot()
        return find_pending_decision(state, state.get("game", {}).get("turn")) is not None

    def advance_turn(self, is_board_effect_in_flight: bool = False) -> TurnAnnouncement | None:
        """
        Hand the turn to the next player in playerOrder.

        Args:
            is_board_effect_in_flight: True while a square effect is resolving

        Returns:
            Announcement for the next player, or None when advancement is refused
        """
        game = self.store.get("game") or {}
        players = self.store.get("players") or {}
        current_turn = game.get("turn")
        player_order = game.get("playerOrder") or []

        if game.get("phase") != GamePhase.PLAYING.value:
            logger.debug("Turn not advanced: game is not in PLAYING phase")
            return None

        if game.get("winner"):
            logger.info("Game has winner, not advancing turn")
            return None

        if not current_turn:
            logger.warning("No current turn set, cannot advance")
            return None

        if not player_order:
            logger.warning("No playerOrder set, cannot advance")
            return None

        if is_board_effect_in_flight:
            logger.info("Turn advancement blocked: board effect in flight")
            return None

        if self.has_pending_decisions():
            logger.info("Turn advancement blocked: current player has pending decisions")
            return None

        # An unknown current turn restarts the cycle at the first player
        current_index = player_order.index(current_turn) if current_turn in player_order else -1
        next_player_id = player_order[(current_index + 1) % len(player_order)]

        self.store.set("game.turn", next_player_id)
        log_turn_advance(current_turn, next_player_id)

        return announce(next_player_id, players.get(next_player_id))

    def begin(self, player_order: list[str]) -> TurnAnnouncement | None:
        """
        Start turn order at setup time.

        Args:
            player_order: Player ids in play order

        Returns:
            Announcement for the first player, or None for an empty order
        """
        self.store.set("game.playerOrder", list(player_order))
        if not player_order:
            self.store.set("game.turn", None)
            return None

        first = player_order[0]
        self.store.set("game.turn", first)
        logger.info(f"Turn order set: {', '.join(player_order)} (first: {first})")
        return announce(first, (self.store.get("players") or {}).get(first))

    def assert_player_turn_ownership(self, path: str) -> None:
        """
        Check that a direct write targets the active player.

        No-op for non-player paths or when no turn is set.

        Args:
            path: State path being mutated (e.g., "players.p1.position")

        Raises:
            TurnOwnershipError: If the path targets another player
        """
        player_id = player_id_of(path)
        if player_id is None:
            return

        current_turn = self.store.get("game.turn")
        if not current_turn:
            return

        if player_id != current_turn:
            raise TurnOwnershipError(player_id, current_turn)
