# ABOUTME: Unit tests for dice rolling utilities
# ABOUTME: Validates notation parsing, range limits and seeded rolls for ROLL_DICE

import random

import pytest

from board_moderator.models.dice_models import DiceRoll
from board_moderator.utils.dice import DEFAULT_DIE, MAX_DICE, parse_dice_notation, resolve_die, roll_dice


class TestParseDiceNotation:
    """Test suite for parse_dice_notation function"""

    def test_standard_notation_with_modifier(self):
        assert parse_dice_notation("2d6+3") == (2, 6, 3)
        assert parse_dice_notation("1d20+10") == (1, 20, 10)

    def test_standard_notation_without_modifier(self):
        assert parse_dice_notation("1d20") == (1, 20, 0)
        assert parse_dice_notation("4d10") == (4, 10, 0)

    def test_implicit_single_die(self):
        """Test notation with implicit 1 die (e.g., 'd6')"""
        assert parse_dice_notation("d6") == (1, 6, 0)

    def test_negative_modifier(self):
        assert parse_dice_notation("3d8-2") == (3, 8, -2)

    def test_case_and_whitespace(self):
        assert parse_dice_notation("  2D6+3 ") == (2, 6, 3)

    def test_unusual_die_sizes_allowed(self):
        """Board games use d3 and d2 spinners, not only polyhedral dice"""
        assert parse_dice_notation("1d3") == (1, 3, 0)
        assert parse_dice_notation("1d2") == (1, 2, 0)

    @pytest.mark.parametrize("notation", ["", "2d", "d", "abc", "2x6", "1d6+", "+3"])
    def test_invalid_notation(self, notation):
        with pytest.raises(ValueError, match="Invalid dice notation"):
            parse_dice_notation(notation)

    def test_zero_dice_rejected(self):
        with pytest.raises(ValueError, match="at least 1"):
            parse_dice_notation("0d6")

    def test_too_many_dice_rejected(self):
        with pytest.raises(ValueError, match="cannot exceed"):
            parse_dice_notation(f"{MAX_DICE + 1}d6")

    def test_one_sided_die_rejected(self):
        with pytest.raises(ValueError, match="Invalid die size"):
            parse_dice_notation("1d1")


class TestResolveDie:
    """Test suite for resolve_die function"""

    def test_valid_notation_kept(self):
        assert resolve_die("2d6+3") == "2d6+3"
        assert resolve_die(" D20 ") == "d20"

    @pytest.mark.parametrize(("die", "expected"), [("6", "1d6"), ("12", "1d12"), (" 4 ", "1d4")])
    def test_bare_number_is_die_size(self, die, expected):
        assert resolve_die(die) == expected

    @pytest.mark.parametrize("die", ["six-sided", "", "1", "0", "1d1", f"{MAX_DICE + 1}d6"])
    def test_unreadable_die_falls_back(self, die):
        assert resolve_die(die) == DEFAULT_DIE

    def test_result_always_rolls(self):
        roll = roll_dice(resolve_die("a big die"), random.Random(1))

        assert roll.dice_sides == 6

class TestRollDice:
    """Test suite for roll_dice function"""

    def test_returns_dice_roll_model(self):
        roll = roll_dice("2d6+3")

        assert isinstance(roll, DiceRoll)
        assert roll.dice_count == 2
        assert roll.dice_sides == 6
        assert roll.modifier == 3
        assert len(roll.individual_rolls) == 2
        assert roll.total == roll.rolls_sum + 3

    def test_rolls_within_range(self):
        for _ in range(50):
            roll = roll_dice("3d4")
            assert all(1 <= value <= 4 for value in roll.individual_rolls)
            assert 3 <= roll.total <= 12

    def test_seeded_rng_is_repeatable(self):
        first = roll_dice("4d6", random.Random(7))
        second = roll_dice("4d6", random.Random(7))

        assert first.individual_rolls == second.individual_rolls
        assert first.total == second.total

    def test_invalid_notation_propagates(self):
        with pytest.raises(ValueError):
            roll_dice("not dice")
