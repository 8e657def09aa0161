# ABOUTME: Orchestration core: one entry point per transcript composing pipeline, validator and effects.
# ABOUTME: Commits accepted batches atomically, narrates, propagates board effects, gates decisions, advances turns.

import inspect
import random
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from loguru import logger

from board_moderator.config.prompts import format_game_rules
from board_moderator.llm.request_pipeline import RequestPipeline
from board_moderator.models.game_definition import GameDefinition
from board_moderator.models.game_state import (
    PHASE_TRANSITIONS,
    GamePhase,
    OrchestratorStatus,
    TurnAnnouncement,
)
from board_moderator.orchestration.board_effects import BoardEffectsPropagator
from board_moderator.orchestration.decision_gate import DecisionGate
from board_moderator.orchestration.exceptions import (
    ActionValidationError,
    InvalidPhaseTransition,
    RecursionLimitExceeded,
)
from board_moderator.orchestration.turn_manager import TurnManager
from board_moderator.orchestration.validator import ActionValidator, BatchOutcome
from board_moderator.state.roster import build_roster
from board_moderator.state.store import StateStore
from board_moderator.utils.logging import log_phase_transition, log_transcript_event

COULD_NOT_PROCESS = "I couldn't process that."
TRY_AGAIN = "Sorry, I didn't catch that. Please try again."


class Narrator(Protocol):
    """Speech output consumed by the core"""

    async def speak(self, text: str) -> None: ...

    def play_sound(self, sound_id: str) -> None: ...


TurnCallback = Callable[[TurnAnnouncement], Awaitable[None] | None]


class Orchestrator:
    """
    Turns transcripts into committed game state.

    External transcripts are dropped while the core is not IDLE; synthetic
    transcripts (square encounters, decision prompts, dice follow-ups)
    re-enter _process_transcript with depth + 1 and are bounded by
    max_effect_depth instead.
    """

    def __init__(
        self,
        initial_state: dict[str, Any],
        pipeline: RequestPipeline,
        narrator: Narrator,
        game_rules: str | None = None,
        max_effect_depth: int = 3,
        max_validation_attempts: int = 3,
        max_board_chain: int = 10,
        on_turn_advanced: TurnCallback | None = None,
        rng: random.Random | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            initial_state: Game definition's initial state
            pipeline: Request pipeline wrapping the generation provider
            narrator: Speech/sound output
            game_rules: Formatted rules for the system prompt (if not already set)
            max_effect_depth: Deepest allowed synthetic transcript
            max_validation_attempts: Regenerations when a batch is rejected
            max_board_chain: Auto-move chain cap
            on_turn_advanced: Called with the next player's announcement
            rng: Random generator for ROLL_DICE
        """
        self.store = StateStore(initial_state)
        self.pipeline = pipeline
        self.narrator = narrator
        self.max_effect_depth = max_effect_depth
        self.max_validation_attempts = max_validation_attempts
        self.on_turn_advanced = on_turn_advanced

        self.validator = ActionValidator(initial_state, rng)
        self.turn_manager = TurnManager(self.store)
        self.board_effects = BoardEffectsPropagator(self.store, self._run_board_effect, max_board_chain)
        self.decision_gate = DecisionGate(self.store, self._process_transcript)

        self.status = OrchestratorStatus.IDLE
        self._turn_rolled = False

        if game_rules is not None:
            self.pipeline.set_game_rules(game_rules)

    @classmethod
    def from_definition(
        cls,
        definition: GameDefinition,
        pipeline: RequestPipeline,
        narrator: Narrator,
        **kwargs: Any,
    ) -> "Orchestrator":
        """Build an orchestrator for a loaded game module"""
        if not pipeline.state_display:
            pipeline.state_display = dict(definition.state_display)
        return cls(
            definition.initial_state,
            pipeline,
            narrator,
            game_rules=format_game_rules(definition.rules, definition.metadata.name),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Exposed interface
    # ------------------------------------------------------------------

    async def handle_transcript(self, text: str) -> None:
        """
        Process one user utterance; dropped if a previous one is still in flight.

        Args:
            text: Recognized speech
        """
        if self.status != OrchestratorStatus.IDLE:
            logger.info(f"Orchestrator busy ({self.status}), ignoring: {text!r}")
            return

        self.status = OrchestratorStatus.PROCESSING
        try:
            await self._process_transcript(text, 0)
        except Exception as e:
            logger.exception(f"Transcript processing failed: {type(e).__name__}: {e}")
        finally:
            self.status = OrchestratorStatus.IDLE

    async def test_execute_actions(self, actions: list[Any]) -> bool:
        """
        Validate and commit actions without the generation step.

        Args:
            actions: Typed actions or raw action dicts

        Returns:
            True if the batch was accepted and committed
        """
        if self.status != OrchestratorStatus.IDLE:
            logger.info("Orchestrator busy, ignoring direct actions")
            return False

        self.status = OrchestratorStatus.PROCESSING
        try:
            try:
                outcome = self.validator.validate(actions, self.store.snapshot())
            except ActionValidationError as e:
                logger.warning(f"Direct actions rejected: {e}")
                return False

            self.decision_gate.reset()
            await self._apply_outcome(outcome, 0)
            await self._finish_turn()
            return True
        finally:
            self.status = OrchestratorStatus.IDLE

    def is_processing_effect(self) -> bool:
        """True while a square encounter is being resolved"""
        return self.status == OrchestratorStatus.BOARD_EFFECT

    def get_state(self) -> dict[str, Any]:
        """Snapshot of the current game document"""
        return self.store.snapshot()

    def setup_players(self, names: list[str]) -> TurnAnnouncement | None:
        """
        Create the roster from collected names and start play.

        Args:
            names: Player names in play order

        Returns:
            Announcement for the first player, or None for an empty list

        Raises:
            InvalidPhaseTransition: If the game is not in SETUP
        """
        phase = self.store.get("game.phase")
        if phase != GamePhase.SETUP.value:
            raise InvalidPhaseTransition(f"Players can only be set up during SETUP, not {phase}")

        players, order = build_roster(self.store.initial_state, names)
        self.store.set("players", players)
        return self._start_play(order)

    def transition_phase(self, phase: GamePhase | str) -> None:
        """
        Move the game to another phase.

        Args:
            phase: Target phase

        Raises:
            InvalidPhaseTransition: If the move is not SETUP->PLAYING or PLAYING->FINISHED
        """
        current = GamePhase(self.store.get("game.phase") or GamePhase.SETUP.value)
        target = GamePhase(phase)
        if target == current:
            return
        if target not in PHASE_TRANSITIONS[current]:
            raise InvalidPhaseTransition(
                f"Cannot transition from {current.value} to {target.value}"
            )
        self.store.set("game.phase", target.value)
        log_phase_transition(current.value, target.value)

    async def advance_turn(self) -> TurnAnnouncement | None:
        """Advance the turn now, if nothing blocks it, and announce the next player"""
        announcement = self.turn_manager.advance_turn(self.is_processing_effect())
        if announcement is not None:
            self._turn_rolled = False
            await self._announce(announcement)
        return announcement

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _process_transcript(self, text: str, depth: int) -> None:
        if depth > self.max_effect_depth:
            error = RecursionLimitExceeded(
                f"Synthetic transcript at depth {depth} exceeds limit {self.max_effect_depth}"
            )
            logger.warning(f"{error}; dropping: {text[:120]!r}")
            return

        log_transcript_event("Processing transcript", text, depth, status=self.status.value)

        notes = None
        if depth == 0:
            self.decision_gate.reset()
            note = self.decision_gate.context_note()
            notes = [note] if note else None

        outcome = await self._generate_and_validate(text, depth, notes)
        if outcome is None:
            return

        await self._apply_outcome(outcome, depth)

        if depth == 0:
            await self._finish_turn()

    async def _generate_and_validate(
        self,
        text: str,
        depth: int,
        notes: list[str] | None,
    ) -> BatchOutcome | None:
        """Ask for actions until a batch passes validation or attempts run out"""
        feedback: str | None = None

        for attempt in range(1, self.max_validation_attempts + 1):
            actions = await self.pipeline.get_actions(
                text,
                self.store.snapshot(),
                feedback=feedback,
                notes=notes,
                synthetic=depth > 0,
            )
            if not actions:
                if self.pipeline.last_failure is not None:
                    logger.warning(f"No actions produced: {self.pipeline.last_failure}")
                    await self._say(TRY_AGAIN)
                return None

            try:
                return self.validator.validate(
                    actions, self.store.snapshot(), self.is_processing_effect()
                )
            except ActionValidationError as e:
                feedback = str(e)
                logger.warning(
                    f"Batch rejected (attempt {attempt}/{self.max_validation_attempts}): {e}"
                )

        await self._say(COULD_NOT_PROCESS)
        return None

    async def _apply_outcome(self, outcome: BatchOutcome, depth: int) -> None:
        """Commit a validated batch and run everything that follows from it"""
        previous_phase = self.store.get("game.phase")
        self.store.replace(outcome.state)
        logger.info(f"Committed {len(outcome.actions)} action(s) at depth {depth}")

        for roll in outcome.rolls:
            logger.info(f"Rolled {roll.notation}: {roll.individual_rolls} -> {roll.total}")
        for path, value in outcome.reads.items():
            logger.debug(f"Read {path} = {value!r}")

        await self._dispatch_narration(outcome)

        if outcome.reset is not None:
            self._turn_rolled = False
            log_phase_transition(previous_phase or GamePhase.SETUP.value, GamePhase.SETUP.value, "reset")
            if outcome.reset_names:
                announcement = self._start_play(list(self.store.get("players") or {}))
                if announcement is not None:
                    await self._announce(announcement)
            return

        if outcome.player_rolled:
            self._turn_rolled = True

        for player_id in outcome.moved_players:
            await self.board_effects.propagate(player_id, depth)
            self._check_winner(player_id)

        self._check_declared_winner()
        announcement = self._maybe_start_play()
        if announcement is not None:
            await self._announce(announcement)

        for roll in outcome.rolls:
            await self._process_transcript(
                f"[SYSTEM: Rolled {roll.notation} and got {roll.total}. What happens next?]",
                depth + 1,
            )

        if self.store.get("game.phase") == GamePhase.PLAYING.value:
            await self.decision_gate.enforce(depth)

    async def _finish_turn(self) -> None:
        """Advance once the current player's roll and all its consequences are resolved"""
        if not self._turn_rolled:
            return
        await self.advance_turn()

    async def _run_board_effect(self, transcript: str, depth: int) -> None:
        previous = self.status
        self.status = OrchestratorStatus.BOARD_EFFECT
        try:
            await self._process_transcript(transcript, depth)
        finally:
            self.status = previous

    # ------------------------------------------------------------------
    # Phase and winner bookkeeping
    # ------------------------------------------------------------------

    def _start_play(self, order: list[str]) -> TurnAnnouncement | None:
        announcement = self.turn_manager.begin(order)
        if order:
            self.transition_phase(GamePhase.PLAYING)
        return announcement

    def _maybe_start_play(self) -> TurnAnnouncement | None:
        """Start play once every player in SETUP has a name"""
        if self.store.get("game.phase") != GamePhase.SETUP.value:
            return None
        players = self.store.get("players") or {}
        if not players or not all(
            isinstance(record, dict) and record.get("name") for record in players.values()
        ):
            return None
        order = self.store.get("game.playerOrder") or list(players)
        logger.info("All players named, starting play")
        return self._start_play(order)

    def _check_winner(self, player_id: str) -> None:
        win_position = self.store.get("board.winPosition")
        if not isinstance(win_position, int) or self.store.get("game.winner"):
            return
        position = self.store.get(f"players.{player_id}.position")
        if isinstance(position, int) and position >= win_position:
            logger.info(f"{player_id} reached winning position {win_position}")
            self.store.set("game.winner", player_id)
            self._check_declared_winner()

    def _check_declared_winner(self) -> None:
        if self.store.get("game.winner") and self.store.get("game.phase") == GamePhase.PLAYING.value:
            self.transition_phase(GamePhase.FINISHED)

    # ------------------------------------------------------------------
    # Narrator
    # ------------------------------------------------------------------

    async def _dispatch_narration(self, outcome: BatchOutcome) -> None:
        for narration in outcome.narrations:
            if narration.sound_effect:
                try:
                    self.narrator.play_sound(narration.sound_effect)
                except Exception as e:
                    logger.error(f"Sound '{narration.sound_effect}' failed: {e}")
            await self._say(narration.text)

    async def _say(self, text: str) -> None:
        try:
            await self.narrator.speak(text)
        except Exception as e:
            logger.error(f"Narrator failed to speak: {e}")

    async def _announce(self, announcement: TurnAnnouncement) -> None:
        if self.on_turn_advanced is None:
            return
        try:
            result = self.on_turn_advanced(announcement)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Turn announcement failed: {e}")
