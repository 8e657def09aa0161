# ABOUTME: Console stand-in for the voice front-end: typed lines are transcripts, narration is printed.
# ABOUTME: Includes the transcript router side channel and the setup-time name collection flow.

import asyncio
import json
import re
import sys
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from loguru import logger

from board_moderator.models.game_state import TurnAnnouncement
from board_moderator.orchestration.orchestrator import Orchestrator

TranscriptHandler = Callable[[str], Awaitable[None]]


class InvalidCommandError(Exception):
    """Raised when a console command cannot be parsed"""
    pass


class ConsoleNarrator:
    """Narrator that prints speech and sound cues to a stream"""

    def __init__(self, stream: TextIO | None = None, sound_effects: dict[str, str] | None = None):
        self.stream = stream or sys.stdout
        self.sound_effects = sound_effects or {}

    async def speak(self, text: str) -> None:
        print(f"MODERATOR: {text}", file=self.stream, flush=True)

    def play_sound(self, sound_id: str) -> None:
        if sound_id not in self.sound_effects:
            logger.warning(f"Unknown sound effect: {sound_id}")
        print(f"[sound: {sound_id}]", file=self.stream, flush=True)


class TranscriptRouter:
    """
    Delivers each utterance to the core, unless a presentation handler is registered.

    Presentation flows (name collection) register a handler so their answers
    never reach the orchestrator.
    """

    def __init__(self, core_handler: TranscriptHandler):
        self.core_handler = core_handler
        self._handler: TranscriptHandler | None = None

    def register_handler(self, handler: TranscriptHandler) -> None:
        self._handler = handler

    def clear_handler(self) -> None:
        self._handler = None

    @property
    def has_handler(self) -> bool:
        return self._handler is not None

    async def deliver(self, text: str) -> None:
        if self._handler is not None:
            await self._handler(text)
        else:
            await self.core_handler(text)


class NameCollector:
    """Setup dialogue collecting player names through the router side channel"""

    DONE_WORDS = {"done", "that's all", "start", "no more"}

    def __init__(
        self,
        router: TranscriptRouter,
        narrator: ConsoleNarrator,
        on_complete: Callable[[list[str]], Awaitable[None]],
        max_players: int = 8,
    ):
        self.router = router
        self.narrator = narrator
        self.on_complete = on_complete
        self.max_players = max_players
        self.names: list[str] = []

    async def start(self) -> None:
        self.router.register_handler(self.handle)
        await self.narrator.speak("Welcome! Player 1, what's your name?")

    async def handle(self, text: str) -> None:
        answer = text.strip()
        if answer.lower() in self.DONE_WORDS and self.names:
            await self._finish()
            return

        name = extract_name(answer)
        if not name:
            await self.narrator.speak("Sorry, I didn't get that name. Please say it again.")
            return

        self.names.append(name)
        if len(self.names) >= self.max_players:
            await self._finish()
            return
        await self.narrator.speak(
            f"Welcome, {name}! Player {len(self.names) + 1}, what's your name? "
            f"Say 'done' when everyone has joined."
        )

    async def _finish(self) -> None:
        self.router.clear_handler()
        await self.on_complete(list(self.names))


NAME_PREFIX = re.compile(r"^(?:my name is|i am|i'm|call me|it's)\s+", re.IGNORECASE)


def extract_name(text: str) -> str | None:
    """Pull a name out of 'my name is X' style answers"""
    name = NAME_PREFIX.sub("", text.strip()).strip(" .!?")
    if not name or len(name) > 40:
        return None
    return name[:1].upper() + name[1:]


class ConsoleCommandType(str, Enum):
    """Slash commands understood by the console"""
    STATE = "state"
    QUIT = "quit"
    SPEAK = "speak"


@dataclass
class ParsedCommand:
    """Parsed console line"""
    command_type: ConsoleCommandType
    text: str


class ConsoleCommandParser:
    """
    Parser for console input.

    Plain text is a spoken transcript; "/state" prints the game document and
    "/quit" exits.
    """

    COMMAND_PATTERNS = {
        ConsoleCommandType.STATE: r'^/state$',
        ConsoleCommandType.QUIT: r'^/(?:quit|exit)$',
    }

    def parse(self, user_input: str) -> ParsedCommand:
        """
        Parse one console line.

        Raises:
            InvalidCommandError: If the line is empty or an unknown slash command
        """
        if not user_input or not user_input.strip():
            raise InvalidCommandError("Cannot parse empty input")

        line = user_input.strip()
        for command_type, pattern in self.COMMAND_PATTERNS.items():
            if re.match(pattern, line, re.IGNORECASE):
                return ParsedCommand(command_type=command_type, text=line)

        if line.startswith("/"):
            raise InvalidCommandError(f"Unknown command: {line.split()[0]}")

        return ParsedCommand(command_type=ConsoleCommandType.SPEAK, text=line)


class ModeratorConsole:
    """Runs a game from the terminal"""

    def __init__(
        self,
        orchestrator: Orchestrator,
        narrator: ConsoleNarrator,
        input_fn: Callable[[], str] = input,
    ):
        self.orchestrator = orchestrator
        self.narrator = narrator
        self.input_fn = input_fn
        self.parser = ConsoleCommandParser()
        self.router = TranscriptRouter(orchestrator.handle_transcript)
        self.orchestrator.on_turn_advanced = self.announce_turn

    async def announce_turn(self, announcement: TurnAnnouncement) -> None:
        await self.narrator.speak(
            f"{announcement.name}, it's your turn. You're on square {announcement.position}."
        )

    async def _players_ready(self, names: list[str]) -> None:
        announcement = self.orchestrator.setup_players(names)
        if announcement is not None:
            await self.narrator.speak(f"Let's play! {', '.join(names)} are in.")
            await self.announce_turn(announcement)

    async def run(self) -> None:
        """Read lines until /quit or end of input"""
        state = self.orchestrator.get_state()
        if state["game"].get("phase") == "SETUP":
            collector = NameCollector(self.router, self.narrator, self._players_ready)
            await collector.start()

        while True:
            try:
                line = await asyncio.to_thread(self.input_fn)
            except EOFError:
                break

            try:
                command = self.parser.parse(line)
            except InvalidCommandError as e:
                if line.strip():
                    print(f"Error: {e}", file=self.narrator.stream)
                continue

            if command.command_type == ConsoleCommandType.QUIT:
                break
            if command.command_type == ConsoleCommandType.STATE:
                print(json.dumps(self.orchestrator.get_state(), indent=2), file=self.narrator.stream)
                continue

            await self.router.deliver(command.text)
