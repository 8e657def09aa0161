"""Data models for the board game moderator"""

from .actions import (
    ACTION_TYPES,
    Action,
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
    parse_actions,
)
from .dice_models import DiceRoll
from .game_definition import DisplayMode, GameDefinition, GameMetadata, GameRules
from .game_state import (
    PHASE_TRANSITIONS,
    DecisionPoint,
    GamePhase,
    OrchestratorStatus,
    TurnAnnouncement,
)

__all__ = [
    # Action models
    "ACTION_TYPES",
    "Action",
    "NarrateAction",
    "SetStateAction",
    "AddStateAction",
    "SubtractStateAction",
    "ReadStateAction",
    "RollDiceAction",
    "ResetGameAction",
    "PlayerRolledAction",
    "PlayerAnsweredAction",
    "parse_action",
    "parse_actions",
    # Game state models
    "GamePhase",
    "PHASE_TRANSITIONS",
    "OrchestratorStatus",
    "DecisionPoint",
    "TurnAnnouncement",
    # Game definition models
    "DisplayMode",
    "GameDefinition",
    "GameMetadata",
    "GameRules",
    # Dice
    "DiceRoll",
]
