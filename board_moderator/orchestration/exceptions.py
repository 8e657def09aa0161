# ABOUTME: Exception definitions for orchestration layer errors.
# ABOUTME: Validation rejections fed back to the generator, plus recursion, phase and board config errors.


class ActionValidationError(Exception):
    """Raised when a candidate action batch breaks a game rule.

    The message is replayed to the generator as corrective context, so it
    should say what was wrong and what would have been accepted.
    """

    def __init__(self, message: str, index: int | None = None):
        self.index = index
        if index is not None:
            message = f"Action at index {index}: {message}"
        super().__init__(message)


class TurnOwnershipError(ActionValidationError):
    """Raised when a write targets a player other than the one whose turn it is"""

    def __init__(self, attempted_player: str, current_turn: str, index: int | None = None):
        self.attempted_player = attempted_player
        self.current_turn = current_turn
        super().__init__(
            f"Cannot modify players.{attempted_player} when it's {current_turn}'s turn",
            index,
        )


class PathNotFoundError(ActionValidationError):
    """Raised when a path does not resolve in the current state"""
    pass


class TypeMismatchError(ActionValidationError):
    """Raised when the addressed value has the wrong type for the action"""
    pass


class DecisionPendingError(ActionValidationError):
    """Raised when a player tries to move before answering a decision point"""
    pass


class ProtectedPathError(ActionValidationError):
    """Raised when an action writes a field owned by the orchestrator"""
    pass


class EffectInFlightError(ActionValidationError):
    """Raised when a new roll arrives while a board effect is still resolving"""
    pass


class RecursionLimitExceeded(Exception):
    """Raised when synthetic transcripts nest beyond the configured depth"""
    pass


class InvalidPhaseTransition(Exception):
    """Raised when attempting invalid phase transition"""
    pass


class BoardConfigurationError(Exception):
    """Raised when board tables chain past the iteration cap"""
    pass
