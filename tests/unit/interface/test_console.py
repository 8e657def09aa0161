# ABOUTME: Unit tests for the console front-end
# ABOUTME: Covers command parsing, the transcript router side channel, name collection and the run loop

import io
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from board_moderator.interface.__main__ import parse_args
from board_moderator.interface.console import (
    ConsoleCommandParser,
    ConsoleCommandType,
    ConsoleNarrator,
    InvalidCommandError,
    ModeratorConsole,
    NameCollector,
    TranscriptRouter,
    extract_name,
)
from board_moderator.models.game_state import TurnAnnouncement


def scripted_input(lines):
    """input() replacement that raises EOFError once the script is exhausted"""
    pending = list(lines)

    def _read():
        if not pending:
            raise EOFError
        return pending.pop(0)

    return _read


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def narrator(output):
    return ConsoleNarrator(output, sound_effects={"ladder": "sounds/ladder.mp3"})


class TestConsoleCommandParser:
    """Test suite for ConsoleCommandParser"""

    @pytest.fixture
    def parser(self):
        return ConsoleCommandParser()

    def test_plain_text_is_speech(self, parser):
        command = parser.parse("  I rolled a six ")

        assert command.command_type == ConsoleCommandType.SPEAK
        assert command.text == "I rolled a six"

    def test_state_command(self, parser):
        assert parser.parse("/state").command_type == ConsoleCommandType.STATE

    @pytest.mark.parametrize("line", ["/quit", "/exit", "/QUIT"])
    def test_quit_command(self, parser, line):
        assert parser.parse(line).command_type == ConsoleCommandType.QUIT

    def test_unknown_command(self, parser):
        with pytest.raises(InvalidCommandError, match="Unknown command: /dance"):
            parser.parse("/dance now")

    def test_empty_input(self, parser):
        with pytest.raises(InvalidCommandError, match="empty"):
            parser.parse("   ")


class TestExtractName:

    @pytest.mark.parametrize("text,expected", [
        ("alice", "Alice"),
        ("My name is bob.", "Bob"),
        ("I'm Cara!", "Cara"),
        ("call me Dee", "Dee"),
    ])
    def test_names(self, text, expected):
        assert extract_name(text) == expected

    def test_no_name(self):
        assert extract_name("my name is") is None
        assert extract_name("x" * 41) is None


class TestConsoleNarrator:

    @pytest.mark.asyncio
    async def test_speak(self, narrator, output):
        await narrator.speak("Hello")

        assert output.getvalue() == "MODERATOR: Hello\n"

    def test_play_sound(self, narrator, output):
        narrator.play_sound("ladder")
        narrator.play_sound("kazoo")

        assert output.getvalue() == "[sound: ladder]\n[sound: kazoo]\n"


class TestTranscriptRouter:
    """Test suite for the side channel"""

    @pytest.mark.asyncio
    async def test_defaults_to_core(self):
        core = AsyncMock()
        router = TranscriptRouter(core)

        await router.deliver("I rolled a 2")

        core.assert_awaited_once_with("I rolled a 2")

    @pytest.mark.asyncio
    async def test_registered_handler_intercepts(self):
        core, side = AsyncMock(), AsyncMock()
        router = TranscriptRouter(core)
        router.register_handler(side)

        await router.deliver("Alice")

        side.assert_awaited_once_with("Alice")
        core.assert_not_awaited()
        assert router.has_handler

        router.clear_handler()
        await router.deliver("I rolled a 2")
        core.assert_awaited_once_with("I rolled a 2")


class TestNameCollector:
    """Test suite for setup-time name collection"""

    @pytest.mark.asyncio
    async def test_collects_until_done(self, narrator, output):
        router = TranscriptRouter(AsyncMock())
        on_complete = AsyncMock()
        collector = NameCollector(router, narrator, on_complete)

        await collector.start()
        for line in ["my name is alice", "Bob", "done"]:
            await router.deliver(line)

        on_complete.assert_awaited_once_with(["Alice", "Bob"])
        assert not router.has_handler
        assert "Welcome, Alice! Player 2" in output.getvalue()

    @pytest.mark.asyncio
    async def test_done_ignored_without_players(self, narrator):
        router = TranscriptRouter(AsyncMock())
        on_complete = AsyncMock()
        collector = NameCollector(router, narrator, on_complete)
        await collector.start()

        await router.deliver("done")

        on_complete.assert_not_awaited()
        assert collector.names == ["Done"]

    @pytest.mark.asyncio
    async def test_stops_at_max_players(self, narrator):
        router = TranscriptRouter(AsyncMock())
        on_complete = AsyncMock()
        collector = NameCollector(router, narrator, on_complete, max_players=2)
        await collector.start()

        await router.deliver("Ann")
        await router.deliver("Ben")

        on_complete.assert_awaited_once_with(["Ann", "Ben"])

    @pytest.mark.asyncio
    async def test_unclear_name_reprompts(self, narrator, output):
        collector = NameCollector(TranscriptRouter(AsyncMock()), narrator, AsyncMock())
        await collector.start()

        await collector.handle("i am")

        assert collector.names == []
        assert "didn't get that name" in output.getvalue()


class TestModeratorConsole:
    """Test suite for the console run loop"""

    @pytest.mark.asyncio
    async def test_setup_flow_starts_play(self, make_orchestrator, setup_state, narrator, output):
        orchestrator = make_orchestrator(setup_state)
        console = ModeratorConsole(
            orchestrator, narrator, scripted_input(["my name is alice", "Bob", "done", "/quit"])
        )

        await console.run()

        state = orchestrator.get_state()
        assert state["game"]["phase"] == "PLAYING"
        assert state["game"]["turn"] == "p1"
        assert [p["name"] for p in state["players"].values()] == ["Alice", "Bob"]
        text = output.getvalue()
        assert "Let's play! Alice, Bob are in." in text
        assert "Alice, it's your turn. You're on square 0." in text

    @pytest.mark.asyncio
    async def test_speech_goes_to_orchestrator(self, playing_state, narrator, output):
        orchestrator = MagicMock()
        orchestrator.get_state.return_value = playing_state
        orchestrator.handle_transcript = AsyncMock()
        console = ModeratorConsole(
            orchestrator, narrator, scripted_input(["I rolled a 4", "/fly", "/state"])
        )

        await console.run()

        orchestrator.handle_transcript.assert_awaited_once_with("I rolled a 4")
        text = output.getvalue()
        assert "Error: Unknown command: /fly" in text
        assert json.dumps(playing_state, indent=2) in text

    @pytest.mark.asyncio
    async def test_announce_turn(self, narrator, output):
        console = ModeratorConsole(MagicMock(), narrator, scripted_input([]))

        await console.announce_turn(TurnAnnouncement(player_id="p2", name="Bob", position=7))

        assert output.getvalue() == "MODERATOR: Bob, it's your turn. You're on square 7.\n"


class TestParseArgs:
    """Test suite for the entry point's argument parsing"""

    def test_game_id_positional(self):
        assert parse_args(["trivia"], default_game="snakes_and_ladders").game_id == "trivia"

    def test_game_id_defaults_to_settings(self):
        assert parse_args([], default_game="snakes_and_ladders").game_id == "snakes_and_ladders"

    def test_unknown_option_exits(self):
        with pytest.raises(SystemExit):
            parse_args(["--nope"], default_game="snakes_and_ladders")
