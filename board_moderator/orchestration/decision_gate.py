# ABOUTME: Decision gate that blocks turn completion until a per-position field is filled.
# ABOUTME: Re-enters the transcript pipeline with a system prompt asking the active player to decide.

from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from board_moderator.models.game_state import DecisionPoint, decision_points_of
from board_moderator.state.store import StateStore

# (transcript, depth) -> None
Reenter = Callable[[str, int], Awaitable[None]]


def find_pending_decision(state: dict[str, Any], player_id: str | None) -> DecisionPoint | None:
    """
    Find the unanswered decision point a player is standing on.

    Args:
        state: Game state document (authoritative or working copy)
        player_id: Player to check

    Returns:
        The matching DecisionPoint when its required field is absent or None, else None
    """
    if not player_id:
        return None

    player = (state.get("players") or {}).get(player_id)
    if not isinstance(player, dict):
        return None

    position = player.get("position")
    if not isinstance(position, int) or isinstance(position, bool):
        return None

    for decision in decision_points_of(state):
        if decision.position == position:
            if player.get(decision.required_field) is None:
                return decision
            return None
    return None


def decision_prompt(player_id: str, player: dict[str, Any], decision: DecisionPoint) -> str:
    """Build the system transcript asking a player for a decision"""
    name = player.get("name") or player_id
    return (
        f"[SYSTEM: {name} ({player_id}) is at position {decision.position} and MUST choose "
        f"'{decision.required_field}' before proceeding. Ask them: \"{decision.prompt}\"]"
    )


class DecisionGate:
    """
    Enforces decision points for the active player.

    Pending decisions of other players are reported, never enforced.
    """

    def __init__(self, store: StateStore, reenter: Reenter):
        """
        Initialize the gate.

        Args:
            store: Authoritative state store (read only here)
            reenter: Orchestrator entry point for synthetic transcripts
        """
        self.store = store
        self.reenter = reenter
        self._prompted: tuple[str, int, str] | None = None

    def reset(self) -> None:
        """Allow the next enforce() to prompt again (called per user utterance)"""
        self._prompted = None

    async def enforce(self, depth: int) -> bool:
        """
        Prompt the active player if they sit on an unanswered decision point.

        Args:
            depth: Depth of the transcript that just committed

        Returns:
            True if a decision prompt was issued
        """
        state = self.store.snapshot()
        current_turn = state.get("game", {}).get("turn")
        decision = find_pending_decision(state, current_turn)
        if decision is None:
            return False

        # One prompt per utterance; the prompt transcript itself must not re-prompt
        key = (current_turn, decision.position, decision.required_field)
        if key == self._prompted:
            return False
        self._prompted = key

        player = state["players"][current_turn]
        logger.info(
            f"Enforcing decision point for {current_turn} at position "
            f"{decision.position}: {decision.required_field}"
        )
        await self.reenter(decision_prompt(current_turn, player, decision), depth + 1)
        return True

    def pending_for_others(self) -> dict[str, DecisionPoint]:
        """
        Pending decisions of every player except the active one.

        Returns:
            Mapping of player id to the decision point they still owe
        """
        state = self.store.snapshot()
        current_turn = state.get("game", {}).get("turn")
        pending = {}
        for player_id in state.get("players") or {}:
            if player_id == current_turn:
                continue
            decision = find_pending_decision(state, player_id)
            if decision is not None:
                pending[player_id] = decision
        return pending

    def context_note(self) -> str | None:
        """Informational narration context about other players' open decisions"""
        pending = self.pending_for_others()
        if not pending:
            return None
        notes = [
            f"{player_id} still has to choose '{decision.required_field}' at position {decision.position}"
            for player_id, decision in pending.items()
        ]
        return "[INFO: " + "; ".join(notes) + ". Mention it if relevant, do not block the current player.]"
