# ABOUTME: Enums and pydantic models describing the game document and orchestrator status.
# ABOUTME: The document itself stays an open dict; these types cover its fixed parts.

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class GamePhase(str, Enum):
    """Lifecycle phases; only a reset moves backwards"""
    SETUP = "SETUP"
    PLAYING = "PLAYING"
    FINISHED = "FINISHED"


# Allowed forward transitions (reset to SETUP is handled separately)
PHASE_TRANSITIONS: dict[GamePhase, set[GamePhase]] = {
    GamePhase.SETUP: {GamePhase.PLAYING},
    GamePhase.PLAYING: {GamePhase.FINISHED},
    GamePhase.FINISHED: set(),
}


class OrchestratorStatus(str, Enum):
    """Single status replacing separate busy / board-effect flags"""
    IDLE = "IDLE"
    PROCESSING = "PROCESSING"
    BOARD_EFFECT = "BOARD_EFFECT"


class DecisionPoint(BaseModel):
    """A board position where a player must fill a field before moving on"""

    position: int = Field(ge=0, description="Board position that triggers the decision")
    required_field: str = Field(
        alias="requiredField",
        min_length=1,
        description="Player record field that must be non-null"
    )
    prompt: str = Field(description="Question asked to the player")

    model_config = {"populate_by_name": True}


class TurnAnnouncement(BaseModel):
    """Who plays next, for an external announcer"""

    player_id: str
    name: str
    position: int


def decision_points_of(state: dict[str, Any]) -> list[DecisionPoint]:
    """Read decisionPoints from a document as typed models"""
    return [DecisionPoint.model_validate(dp) for dp in state.get("decisionPoints") or []]


def board_table(state: dict[str, Any], table: str) -> dict[int, Any]:
    """
    Read board.moves or board.squares with integer keys.

    JSON objects only have string keys, so "3" and 3 are the same square.
    """
    raw = (state.get("board") or {}).get(table) or {}
    return {int(key): value for key, value in raw.items()}
