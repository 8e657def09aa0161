# ABOUTME: Unit tests for game module loading and load-time validation
# ABOUTME: Covers required sections, board checks, normalization and the bundled module

import copy
import json
from pathlib import Path

import pytest

from board_moderator.game.exceptions import GameDefinitionError
from board_moderator.game.loader import GameLoader, check_board, parse_game_definition

GAMES_PATH = Path(__file__).resolve().parents[3] / "games"

MINIMAL = {
    "metadata": {"id": "race", "name": "Race"},
    "rules": {"objective": "Get to 20.", "mechanics": "Roll and move."},
    "initialState": {"players": {"p1": {"name": "", "position": 0}}},
}


def module(**initial_state_updates):
    raw = copy.deepcopy(MINIMAL)
    raw["initialState"].update(initial_state_updates)
    return raw


class TestParseGameDefinition:
    """Test suite for parse_game_definition"""

    def test_minimal_module_normalized(self):
        definition = parse_game_definition(module())

        game = definition.initial_state["game"]
        assert game["phase"] == "SETUP"
        assert game["turn"] is None
        assert game["playerOrder"] == []
        assert game["name"] == "Race"
        assert definition.state_display == {}

    @pytest.mark.parametrize("section", ["metadata", "initialState", "rules"])
    def test_missing_section(self, section):
        raw = module()
        del raw[section]

        with pytest.raises(GameDefinitionError, match=f"missing {section}"):
            parse_game_definition(raw)

    def test_not_an_object(self):
        with pytest.raises(GameDefinitionError, match="expected a JSON object"):
            parse_game_definition([])

    def test_bad_display_mode(self):
        raw = module()
        raw["stateDisplay"] = {"players.hearts": "sometimes"}

        with pytest.raises(GameDefinitionError):
            parse_game_definition(raw)


class TestCheckBoard:
    """Test suite for load-time board validation"""

    def test_valid_board(self):
        check_board({
            "board": {"moves": {"3": 7, "7": 12}, "squares": {"12": {"type": "star"}}},
            "decisionPoints": [{"position": 40, "requiredField": "pathChoice", "prompt": "?"}],
        })

    def test_move_cycle(self):
        with pytest.raises(GameDefinitionError, match="cycle"):
            check_board({"board": {"moves": {"3": 7, "7": 3}}})

    def test_negative_move(self):
        with pytest.raises(GameDefinitionError, match="negative"):
            check_board({"board": {"moves": {"3": -1}}})

    def test_non_integer_key(self):
        with pytest.raises(GameDefinitionError, match="non-integer"):
            check_board({"board": {"squares": {"start": {}}}})

    def test_duplicate_decision_positions(self):
        points = [
            {"position": 40, "requiredField": "pathChoice", "prompt": "Left or right?"},
            {"position": 40, "requiredField": "door", "prompt": "Which door?"},
        ]

        with pytest.raises(GameDefinitionError, match="Two decision points share board position 40"):
            check_board({"decisionPoints": points})

    def test_decision_point_without_field(self):
        with pytest.raises(GameDefinitionError, match="requiredField"):
            check_board({"decisionPoints": [{"position": 4, "prompt": "?"}]})


class TestGameLoader:
    """Test suite for GameLoader"""

    def test_bundled_module_loads(self):
        loader = GameLoader(GAMES_PATH)

        definition = loader.load_game("snakes_and_ladders")

        assert "snakes_and_ladders" in loader.available_games()
        assert definition.metadata.name == "Snakes and Ladders"
        assert definition.initial_state["board"]["winPosition"] == 100
        assert definition.state_display["players.hearts"] == "always"

    def test_missing_module(self, tmp_path):
        with pytest.raises(GameDefinitionError, match="not found"):
            GameLoader(tmp_path).load_game("nope")

    def test_invalid_json(self, tmp_path):
        (tmp_path / "broken").mkdir()
        (tmp_path / "broken" / "config.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(GameDefinitionError, match="Invalid JSON"):
            GameLoader(tmp_path).load_game("broken")

    def test_loads_from_directory(self, tmp_path):
        (tmp_path / "race").mkdir()
        (tmp_path / "race" / "config.json").write_text(json.dumps(MINIMAL), encoding="utf-8")

        loader = GameLoader(tmp_path)

        assert loader.available_games() == ["race"]
        assert loader.load_game("race").metadata.id == "race"

    def test_available_games_missing_directory(self, tmp_path):
        assert GameLoader(tmp_path / "absent").available_games() == []
