# ABOUTME: Orchestration layer exports for transcript processing and turn management.
# ABOUTME: Provides the Orchestrator plus its validator, turn manager, board effects and decision gate.

from board_moderator.orchestration.board_effects import BoardEffectsPropagator
from board_moderator.orchestration.decision_gate import DecisionGate
from board_moderator.orchestration.exceptions import (
    ActionValidationError,
    BoardConfigurationError,
    DecisionPendingError,
    EffectInFlightError,
    InvalidPhaseTransition,
    PathNotFoundError,
    ProtectedPathError,
    RecursionLimitExceeded,
    TurnOwnershipError,
    TypeMismatchError,
)
from board_moderator.orchestration.orchestrator import Narrator, Orchestrator
from board_moderator.orchestration.turn_manager import TurnManager
from board_moderator.orchestration.validator import ActionValidator, BatchOutcome

__all__ = [
    "Orchestrator",
    "Narrator",
    "ActionValidator",
    "BatchOutcome",
    "TurnManager",
    "BoardEffectsPropagator",
    "DecisionGate",
    "ActionValidationError",
    "TurnOwnershipError",
    "PathNotFoundError",
    "TypeMismatchError",
    "DecisionPendingError",
    "ProtectedPathError",
    "EffectInFlightError",
    "RecursionLimitExceeded",
    "InvalidPhaseTransition",
    "BoardConfigurationError",
]
