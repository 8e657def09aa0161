# ABOUTME: Unit tests for prompt template generation functions.
# ABOUTME: Tests rules formatting, the system preamble and the per-request user message.

from board_moderator.config.prompts import (
    RULES_PREAMBLE,
    build_system_prompt,
    build_user_prompt,
    format_game_rules,
)
from board_moderator.models.game_definition import GameRules


class TestFormatGameRules:
    """Test rules rendering for the system prompt"""

    def test_required_sections_only(self):
        """Optional sections are left out when empty"""
        rules = GameRules(objective="Reach 100.", mechanics="Roll and move.")

        result = format_game_rules(rules)

        assert result == "GAME RULES\n\nObjective: Reach 100.\n\nMechanics: Roll and move."

    def test_all_sections_with_name(self):
        rules = GameRules.model_validate({
            "objective": "Reach 100.",
            "mechanics": "Roll and move.",
            "turnStructure": "Clockwise.",
            "boardLayout": "Ten rows.",
            "examples": ["'I rolled 3' -> PLAYER_ROLLED 3"],
        })

        result = format_game_rules(rules, "Snakes and Ladders")

        assert result.startswith("GAME RULES: Snakes and Ladders")
        assert "Turn structure: Clockwise." in result
        assert "Board layout: Ten rows." in result
        assert "Examples:\n- 'I rolled 3' -> PLAYER_ROLLED 3" in result


class TestSystemPrompt:
    """Test the primitives preamble"""

    def test_preamble_lists_every_action(self):
        for action in [
            "PLAYER_ROLLED", "PLAYER_ANSWERED", "SET_STATE", "ADD_STATE", "SUBTRACT_STATE",
            "READ_STATE", "NARRATE", "ROLL_DICE", "RESET_GAME",
        ]:
            assert action in RULES_PREAMBLE

    def test_preamble_demands_bare_array(self):
        assert "no markdown fences" in RULES_PREAMBLE

    def test_rules_appended(self):
        result = build_system_prompt("GAME RULES\n\nObjective: Win.")

        assert result.startswith(RULES_PREAMBLE)
        assert result.endswith("Objective: Win.")


class TestUserPrompt:
    """Test the per-request message"""

    def test_state_then_command(self):
        result = build_user_prompt("Current state:\ngame: turn=\"p1\"", "I rolled a 5")

        assert result == 'Current state:\ngame: turn="p1"\n\nUser Command: "I rolled a 5"'

    def test_notes_precede_command(self):
        result = build_user_prompt("Current state:", "hi", notes=["[INFO: a]", "[INFO: b]"])

        assert result.index("[INFO: a]\n[INFO: b]") < result.index("User Command")

    def test_feedback_appended_last(self):
        result = build_user_prompt("Current state:", "hi", feedback="Action at index 0: bad path")

        assert result.endswith(
            "Your previous reply was rejected: Action at index 0: bad path\n"
            "Fix the problem and reply again with a valid JSON array of actions."
        )
