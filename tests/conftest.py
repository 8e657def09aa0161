# ABOUTME: Shared pytest fixtures for all test modules (unit and integration).
# ABOUTME: Provides game state documents, a scripted fake provider client, pipelines and orchestrators.

import copy
import json
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from board_moderator.llm.exceptions import LLMCallFailed
from board_moderator.llm.request_pipeline import RequestPipeline
from board_moderator.orchestration.orchestrator import Orchestrator
from board_moderator.state.store import StateStore

# --- Helper Functions ---


def make_player(player_id: str, name: str, position: int = 0, **fields: Any) -> dict[str, Any]:
    """Helper to create a player record"""
    return {"id": player_id, "name": name, "position": position, **fields}


def make_state(
    turn: str | None = "p1",
    phase: str = "PLAYING",
    positions: dict[str, int] | None = None,
    moves: dict[str, int] | None = None,
    squares: dict[str, Any] | None = None,
    decision_points: list[dict[str, Any]] | None = None,
    win_position: int | None = None,
) -> dict[str, Any]:
    """Helper to create a three-player game document"""
    positions = positions or {}
    names = {"p1": "Alice", "p2": "Bob", "p3": "Cara"}
    board: dict[str, Any] = {"moves": moves or {}, "squares": squares or {}}
    if win_position is not None:
        board["winPosition"] = win_position
    return {
        "game": {
            "name": "Test Game",
            "phase": phase,
            "turn": turn,
            "playerOrder": ["p1", "p2", "p3"],
            "winner": None,
            "lastRoll": None,
        },
        "players": {
            pid: make_player(pid, name, positions.get(pid, 0), hearts=0)
            for pid, name in names.items()
        },
        "board": board,
        "decisionPoints": decision_points or [],
    }


def actions_json(*actions: dict[str, Any]) -> str:
    """Serialize actions the way a well-behaved provider replies"""
    return json.dumps(list(actions))


def narrate(text: str) -> dict[str, Any]:
    return {"action": "NARRATE", "text": text}


class FakeLLMClient:
    """
    Scripted stand-in for LLMClient.

    Each call pops the next reply; an Exception instance is raised instead of
    returned. When the script runs out, the fallback reply is returned.
    """

    def __init__(self, replies: list[Any] | None = None, fallback: str = "[]"):
        self.replies = list(replies or [])
        self.fallback = fallback
        self.prompts: list[str] = []
        self.system_prompts: list[str | None] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def complete(self, prompt: str, system_prompt: str | None = None) -> str:
        self.prompts.append(prompt)
        self.system_prompts.append(system_prompt)
        reply = self.replies.pop(0) if self.replies else self.fallback
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# --- State Fixtures ---


@pytest.fixture
def playing_state() -> dict[str, Any]:
    """Three players, p1 to move, everyone on square 0"""
    return make_state()


@pytest.fixture
def setup_state() -> dict[str, Any]:
    """Initial document of a game in SETUP with a single template player"""
    return {
        "game": {
            "name": "Test Game",
            "phase": "SETUP",
            "turn": None,
            "playerOrder": [],
            "winner": None,
            "lastRoll": None,
        },
        "players": {"p1": make_player("p1", "", 0, hearts=0, pathChoice=None)},
        "board": {"moves": {"3": 7, "7": 12}, "squares": {}},
        "decisionPoints": [],
    }


@pytest.fixture
def store(playing_state) -> StateStore:
    return StateStore(playing_state)


# --- Mock Clients ---


@pytest.fixture
def fake_client() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_pipeline(fake_clock) -> Callable[..., RequestPipeline]:
    """Factory for pipelines with zero retry waits and a manual clock"""

    def _make(client: Any, **kwargs: Any) -> RequestPipeline:
        options = {"min_wait": 0, "max_wait": 0, "clock": fake_clock}
        options.update(kwargs)
        pipeline = RequestPipeline(client, **options)
        pipeline.set_game_rules("GAME RULES\n\nObjective: Reach the end.")
        return pipeline

    return _make


@pytest.fixture
def mock_narrator() -> MagicMock:
    """Narrator with an async speak() and a sync play_sound()"""
    narrator = MagicMock()
    narrator.speak = AsyncMock()
    narrator.play_sound = MagicMock()
    return narrator


@pytest.fixture
def make_orchestrator(make_pipeline, mock_narrator) -> Callable[..., Orchestrator]:
    """Factory building an orchestrator around a scripted provider"""

    def _make(
        state: dict[str, Any],
        replies: list[Any] | None = None,
        **kwargs: Any,
    ) -> Orchestrator:
        client = kwargs.pop("client", None) or FakeLLMClient(replies)
        pipeline = make_pipeline(client)
        return Orchestrator(copy.deepcopy(state), pipeline, mock_narrator, **kwargs)

    return _make


@pytest.fixture
def network_failure() -> LLMCallFailed:
    return LLMCallFailed("Chat completion failed: connection refused")
