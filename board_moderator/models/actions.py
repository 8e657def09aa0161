# ABOUTME: Pydantic models for the primitive actions produced per transcript.
# ABOUTME: A discriminated union on the "action" tag plus helpers to decode raw JSON items by index.

from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    field_validator,
)

Number = StrictInt | StrictFloat


class _ActionBase(BaseModel):
    """Shared config: wire names are camelCase, unknown keys are ignored"""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire field names, dropping unset optionals"""
        return self.model_dump(by_alias=True, exclude_none=True)


class NarrateAction(_ActionBase):
    """Speak text to the players, optionally with a sound effect"""

    action: Literal["NARRATE"] = "NARRATE"
    text: StrictStr
    sound_effect: StrictStr | None = Field(default=None, alias="soundEffect")


class SetStateAction(_ActionBase):
    """Overwrite the value at a path"""

    action: Literal["SET_STATE"] = "SET_STATE"
    path: StrictStr
    value: Any


class AddStateAction(_ActionBase):
    """Add to a numeric value at a path"""

    action: Literal["ADD_STATE"] = "ADD_STATE"
    path: StrictStr
    value: Number


class SubtractStateAction(_ActionBase):
    """Subtract from a numeric value at a path"""

    action: Literal["SUBTRACT_STATE"] = "SUBTRACT_STATE"
    path: StrictStr
    value: Number


class ReadStateAction(_ActionBase):
    """Read a value for reference; never mutates"""

    action: Literal["READ_STATE"] = "READ_STATE"
    path: StrictStr


class RollDiceAction(_ActionBase):
    """Moderator-side roll for NPC randomness"""

    action: Literal["ROLL_DICE"] = "ROLL_DICE"
    # Free text; resolved to notation when rolled
    die: StrictStr


class ResetGameAction(_ActionBase):
    """Rewind the game to its initial state"""

    action: Literal["RESET_GAME"] = "RESET_GAME"
    keep_player_names: StrictBool = Field(default=False, alias="keepPlayerNames")


class PlayerRolledAction(_ActionBase):
    """The current player reports a physical dice roll"""

    action: Literal["PLAYER_ROLLED"] = "PLAYER_ROLLED"
    value: StrictInt = Field(gt=0)


class PlayerAnsweredAction(_ActionBase):
    """The current player answers a question"""

    action: Literal["PLAYER_ANSWERED"] = "PLAYER_ANSWERED"
    answer: StrictStr = Field(min_length=1)

    @field_validator("answer")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("answer must not be blank")
        return v


Action = Annotated[
    NarrateAction
    | SetStateAction
    | AddStateAction
    | SubtractStateAction
    | ReadStateAction
    | RollDiceAction
    | ResetGameAction
    | PlayerRolledAction
    | PlayerAnsweredAction,
    Field(discriminator="action"),
]

ACTION_TYPES: tuple[str, ...] = (
    "NARRATE",
    "SET_STATE",
    "ADD_STATE",
    "SUBTRACT_STATE",
    "READ_STATE",
    "ROLL_DICE",
    "RESET_GAME",
    "PLAYER_ROLLED",
    "PLAYER_ANSWERED",
)

_action_adapter: TypeAdapter[Any] = TypeAdapter(Action)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"][1:]) or "action"
    return f"'{location}' {first['msg'].lower()}"


def parse_action(item: Any, index: int = 0) -> Any:
    """
    Decode one raw action record.

    Args:
        item: Raw action (dict from JSON, or an already-built action model)
        index: Position in the batch, used in error messages

    Returns:
        Typed action model

    Raises:
        ValueError: If the record is not an object, has an unknown tag, or bad fields
    """
    if isinstance(item, BaseModel):
        return item

    if not isinstance(item, dict):
        raise ValueError(f"Action at index {index} is not an object")

    if "action" not in item:
        raise ValueError(f"Action at index {index} missing 'action' field")

    tag = item["action"]
    if tag not in ACTION_TYPES:
        raise ValueError(f"Action at index {index} has invalid action type: {tag}")

    try:
        return _action_adapter.validate_python(item)
    except ValidationError as e:
        raise ValueError(f"{tag} at index {index} has invalid field: {_describe(e)}") from e


def parse_actions(items: list[Any]) -> list[Any]:
    """
    Decode a batch of raw actions, failing on the first bad item.

    Args:
        items: Raw action records

    Returns:
        List of typed action models in the same order

    Raises:
        ValueError: If any item is invalid (message names its index)
    """
    return [parse_action(item, index) for index, item in enumerate(items)]
