# ABOUTME: Pydantic models for a game module loaded from JSON (metadata, rules, initial state).
# ABOUTME: Field names map the camelCase config keys; stateDisplay drives the prompt's state rendering.

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class DisplayMode(str, Enum):
    """How a state field is rendered into the generation prompt"""
    ALWAYS = "always"
    IF_SET = "if_set"
    NEVER = "never"


class GameMetadata(BaseModel):
    """Identity of a game module"""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    version: str = "1.0.0"
    min_players: int = Field(default=1, ge=1, alias="minPlayers")
    max_players: int = Field(default=8, ge=1, alias="maxPlayers")

    model_config = {"populate_by_name": True}


class GameRules(BaseModel):
    """Free-text rules injected into the generation prompt"""

    objective: str = Field(min_length=1)
    mechanics: str = Field(min_length=1)
    turn_structure: str = Field(default="", alias="turnStructure")
    board_layout: str = Field(default="", alias="boardLayout")
    examples: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class GameDefinition(BaseModel):
    """Complete game module"""

    metadata: GameMetadata
    rules: GameRules
    initial_state: dict[str, Any] = Field(alias="initialState")
    state_display: dict[str, DisplayMode] = Field(
        default_factory=dict,
        alias="stateDisplay",
        description="Per-field prompt visibility, keyed 'game.<field>' or 'players.<field>'"
    )
    sound_effects: dict[str, str] = Field(default_factory=dict, alias="soundEffects")

    model_config = {"populate_by_name": True, "use_enum_values": True}
