# ABOUTME: Pydantic model for dice rolls made by the moderator (ROLL_DICE helper).
# ABOUTME: Player dice are physical and reported via PLAYER_ROLLED; these rolls are for NPC randomness.

from datetime import datetime

from pydantic import BaseModel, Field


class DiceRoll(BaseModel):
    """Dice roll result structure"""

    notation: str = Field(
        description="Dice notation (e.g., '2d6', '1d20+5')"
    )
    dice_count: int = Field(
        ge=1,
        description="Number of dice rolled"
    )
    dice_sides: int = Field(
        ge=2,
        description="Number of sides per die"
    )
    modifier: int = Field(
        default=0,
        description="Static modifier to add"
    )
    individual_rolls: list[int] = Field(
        description="Individual die results"
    )
    total: int = Field(
        description="Sum of rolls + modifier"
    )
    timestamp: datetime

    @property
    def rolls_sum(self) -> int:
        """Sum of individual rolls before modifier"""
        return sum(self.individual_rolls)
