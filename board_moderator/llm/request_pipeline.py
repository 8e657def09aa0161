# ABOUTME: Request pipeline turning a transcript plus game state into a validated-shape action list.
# ABOUTME: Adds duplicate suppression, retry with backoff, strict raw-JSON-array parsing and typed failures.

import json
import time
from collections.abc import Callable
from typing import Any

from loguru import logger

from board_moderator.config.prompts import build_system_prompt, build_user_prompt
from board_moderator.llm.exceptions import (
    EmptyReplyError,
    LLMCallFailed,
    NetworkError,
    NotASequenceError,
    PipelineError,
    WrongShapeError,
)
from board_moderator.llm.llm_client import LLMClient
from board_moderator.llm.retry import generation_retrying
from board_moderator.llm.state_context import format_state_context
from board_moderator.models.actions import parse_actions


def parse_reply(text: str) -> list[Any]:
    """
    Parse a provider reply as a bare JSON array of actions.

    Fenced replies (```json ... ```) are rejected, not unwrapped.

    Args:
        text: Raw reply content

    Returns:
        Typed actions in reply order (possibly empty)

    Raises:
        WrongShapeError: Fenced, unparseable, or containing an invalid action
        NotASequenceError: Valid JSON that is not an array
    """
    stripped = text.strip()
    if stripped.startswith("```"):
        raise WrongShapeError(
            "Reply is wrapped in a markdown code fence; send the bare JSON array only"
        )

    try:
        data = json.loads(stripped)
    except json.JSONDecodeError as e:
        raise WrongShapeError(f"Reply is not valid JSON: {e.msg} at position {e.pos}") from e

    if isinstance(data, dict):
        raise NotASequenceError(
            "Reply is a single JSON object; wrap the action(s) in a JSON array"
        )
    if not isinstance(data, list):
        raise NotASequenceError(f"Reply must be a JSON array, got {type(data).__name__}")

    try:
        return parse_actions(data)
    except ValueError as e:
        raise WrongShapeError(str(e)) from e


class RequestPipeline:
    """
    Wraps one generation provider behind get_actions().

    Identical transcripts (case-insensitive) inside the dedup window are
    dropped without a network call; only successful, non-empty replies are
    remembered for deduplication.
    """

    def __init__(
        self,
        client: LLMClient,
        dedup_window: float = 2.0,
        attempts: int = 3,
        min_wait: float = 0.5,
        max_wait: float = 2.0,
        state_display: dict[str, Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the pipeline.

        Args:
            client: Provider client
            dedup_window: Seconds during which a repeated transcript is ignored
            attempts: Generation attempts per transcript
            min_wait: First retry delay in seconds
            max_wait: Maximum retry delay in seconds
            state_display: stateDisplay config for the prompt's state block
            clock: Monotonic time source (injectable for tests)
        """
        self.client = client
        self.dedup_window = dedup_window
        self.attempts = attempts
        self.min_wait = min_wait
        self.max_wait = max_wait
        self.state_display = state_display or {}
        self.clock = clock

        self.system_prompt: str | None = None
        self.last_failure: PipelineError | None = None
        self._last_transcript: str | None = None
        self._last_transcript_at = 0.0

    def set_game_rules(self, rules: str) -> None:
        """Install the game's formatted rules into the system prompt"""
        self.system_prompt = build_system_prompt(rules)

    def is_duplicate(self, transcript: str) -> bool:
        if self._last_transcript is None:
            return False
        same = transcript.strip().lower() == self._last_transcript
        return same and (self.clock() - self._last_transcript_at) < self.dedup_window

    def _record(self, transcript: str) -> None:
        self._last_transcript = transcript.strip().lower()
        self._last_transcript_at = self.clock()

    async def get_actions(
        self,
        transcript: str,
        state: dict[str, Any],
        feedback: str | None = None,
        notes: list[str] | None = None,
        synthetic: bool = False,
    ) -> list[Any]:
        """
        Produce the action list for one transcript.

        Args:
            transcript: User speech or synthetic system transcript
            state: Current game state snapshot
            feedback: Rejection reason from a previous batch; bypasses deduplication
            notes: Informational context lines for the prompt
            synthetic: True for moderator-generated transcripts; skips deduplication

        Returns:
            Typed actions, or [] for a duplicate or after all attempts failed
            (the failure is kept in last_failure)

        Raises:
            RuntimeError: If set_game_rules() was never called
        """
        if self.system_prompt is None:
            raise RuntimeError("Game rules not set; call set_game_rules() first")

        dedup = feedback is None and not synthetic
        if dedup and self.is_duplicate(transcript):
            logger.info(f"Duplicate transcript ignored: {transcript!r}")
            return []

        self.last_failure = None
        correction = feedback
        actions: list[Any] = []

        try:
            async for attempt in generation_retrying(self.attempts, self.min_wait, self.max_wait):
                with attempt:
                    try:
                        actions = await self._attempt(transcript, state, correction, notes)
                    except (WrongShapeError, NotASequenceError) as e:
                        # Parse errors feed the next attempt's correction section
                        correction = str(e)
                        raise
        except PipelineError as e:
            self.last_failure = e
            logger.warning(f"All {self.attempts} generation attempts failed: {type(e).__name__}: {e}")
            return []

        if dedup:
            self._record(transcript)
        logger.debug(f"Generated {len(actions)} action(s) for {transcript!r}")
        return actions

    async def _attempt(
        self,
        transcript: str,
        state: dict[str, Any],
        correction: str | None,
        notes: list[str] | None,
    ) -> list[Any]:
        prompt = build_user_prompt(
            format_state_context(state, self.state_display),
            transcript,
            feedback=correction,
            notes=notes,
        )

        try:
            reply = await self.client.complete(prompt, system_prompt=self.system_prompt)
        except LLMCallFailed as e:
            raise NetworkError(str(e)) from e

        actions = parse_reply(reply)
        if not actions:
            raise EmptyReplyError("Provider returned no actions")
        return actions
