# ABOUTME: Board effects propagator: resolves auto-move chains and triggers square encounters.
# ABOUTME: Auto-moves are committed silently; encounters re-enter the transcript pipeline as system events.

import json
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from board_moderator.models.game_state import board_table
from board_moderator.orchestration.exceptions import BoardConfigurationError
from board_moderator.state.store import StateStore

# (transcript, depth) -> None
EffectRunner = Callable[[str, int], Awaitable[None]]


def resolve_move_chain(
    moves: dict[int, int],
    position: int,
    max_chain: int,
) -> tuple[int, list[tuple[int, int]]]:
    """
    Follow board.moves from a position until no move applies.

    Args:
        moves: Move table (position -> destination)
        position: Landing position
        max_chain: Maximum number of hops

    Returns:
        Tuple of (final position, list of (from, to) hops)

    Raises:
        BoardConfigurationError: If the chain is longer than max_chain
    """
    start = position
    hops: list[tuple[int, int]] = []
    while position in moves and moves[position] != position:
        if len(hops) >= max_chain:
            raise BoardConfigurationError(
                f"Move chain from position {start} exceeds {max_chain} hops; "
                f"check board.moves for a cycle"
            )
        destination = int(moves[position])
        hops.append((position, destination))
        position = destination
    return position, hops


def square_transcript(player_id: str, player: dict[str, Any], position: int, square: Any) -> str:
    """Build the system transcript describing a square encounter"""
    name = player.get("name") or player_id
    return (
        f"[SYSTEM: {name} ({player_id}) just landed on square {position}. "
        f"Square data: {json.dumps(square)}. "
        f"You MUST process this square's effect now according to game rules.]"
    )


class BoardEffectsPropagator:
    """Reacts to committed position changes"""

    def __init__(self, store: StateStore, run_effect: EffectRunner, max_chain: int = 10):
        """
        Initialize the propagator.

        Args:
            store: Authoritative state store
            run_effect: Orchestrator hook that processes a square encounter
                with the board-effect status set
            max_chain: Maximum chained auto-moves before failing
        """
        self.store = store
        self.run_effect = run_effect
        self.max_chain = max_chain

    def apply_moves(self, player_id: str) -> int | None:
        """
        Resolve auto-moves for a player and commit the final position.

        Args:
            player_id: Player whose position changed

        Returns:
            Final position, or None if the player has no integer position

        Raises:
            BoardConfigurationError: If the move chain does not terminate
        """
        path = f"players.{player_id}.position"
        position = self.store.get(path)
        if not isinstance(position, int) or isinstance(position, bool):
            return None

        final, hops = resolve_move_chain(
            board_table(self.store.snapshot(), "moves"), position, self.max_chain
        )
        for start, destination in hops:
            kind = "boost" if destination > start else "setback"
            logger.info(f"Auto-applying {kind} for {player_id}: position {start} -> {destination}")

        if hops:
            self.store.set(path, final)
        return final

    async def propagate(self, player_id: str, depth: int) -> bool:
        """
        Apply auto-moves, then trigger the encounter on the final square.

        Args:
            player_id: Player whose position changed
            depth: Depth of the transcript that moved the player

        Returns:
            True if a square encounter was processed
        """
        position = self.apply_moves(player_id)
        if position is None:
            return False

        square = board_table(self.store.snapshot(), "squares").get(position)
        if not square:
            return False

        player = (self.store.get("players") or {}).get(player_id) or {}
        logger.info(f"Square effect at position {position} for {player_id}: {square}")
        await self.run_effect(square_transcript(player_id, player, position, square), depth + 1)
        return True
