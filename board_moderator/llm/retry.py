# ABOUTME: Tenacity retry policy for generation attempts with increasing delay.
# ABOUTME: Retries network, parse and empty-reply failures; logs each retry through loguru.

from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from board_moderator.llm.exceptions import PipelineError


def _log_retry(retry_state: RetryCallState) -> None:
    """Log a failed attempt before sleeping"""
    error = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        f"Generation attempt {retry_state.attempt_number} failed: "
        f"{type(error).__name__}: {error}; retrying in {delay:.1f}s"
    )


def generation_retrying(
    attempts: int = 3,
    min_wait: float = 0.5,
    max_wait: float = 2.0,
) -> AsyncRetrying:
    """
    Build the retry controller for one transcript's generation attempts.

    Defaults give waits of 0.5s then 1s (capped at 2s) between attempts.

    Usage:
        async for attempt in generation_retrying():
            with attempt:
                actions = await fetch()

    Args:
        attempts: Total number of attempts
        min_wait: First backoff delay in seconds
        max_wait: Upper bound for the delay

    Returns:
        Configured AsyncRetrying controller (reraises the last PipelineError)
    """
    return AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(PipelineError),
        before_sleep=_log_retry,
        reraise=True,
    )
