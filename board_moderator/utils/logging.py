# ABOUTME: Structured logging configuration using loguru for the moderator pipeline.
# ABOUTME: Supports context fields (depth, phase, player) and rotating file plus console output.

import sys
from pathlib import Path
from typing import Any

from loguru import logger


# Default log format with structured context
DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level> | "
    "{extra}"
)

VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def setup_logging(
    log_level: str = "INFO",
    log_dir: str | Path | None = None,
    console_output: bool = True,
    file_output: bool = True,
    format_string: str | None = None,
    rotation: str = "50 MB",
    retention: str = "14 days",
    compression: str = "zip"
) -> None:
    """
    Configure loguru sinks for the moderator.

    Usage:
        >>> setup_logging(log_level="DEBUG", log_dir="logs")
        >>> logger = get_logger()
        >>> logger.bind(depth=1).info("Synthetic transcript")

    Args:
        log_level: Minimum log level ("DEBUG", "INFO", "WARNING", "ERROR")
        log_dir: Directory for log files (default: "logs")
        console_output: Enable console logging (default: True)
        file_output: Enable file logging (default: True)
        format_string: Custom format string (default: structured format)
        rotation: When to rotate log files
        retention: How long to keep old logs
        compression: Compression for rotated logs

    Raises:
        ValueError: If log_level is invalid
    """
    log_level = log_level.upper()
    if log_level not in VALID_LEVELS:
        raise ValueError(
            f"Invalid log level: '{log_level}'. "
            f"Must be one of: {', '.join(sorted(VALID_LEVELS))}"
        )

    logger.remove()

    fmt = format_string or DEFAULT_FORMAT

    if console_output:
        logger.add(
            sys.stderr,
            format=fmt,
            level=log_level,
            colorize=True,
            backtrace=True,
            diagnose=True,
        )

    if file_output:
        log_dir = Path(log_dir) if log_dir is not None else Path("logs")
        log_dir.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(log_dir / "moderator_{time:YYYY-MM-DD}.log"),
            format=fmt,
            level=log_level,
            rotation=rotation,
            retention=retention,
            compression=compression,
            backtrace=True,
            diagnose=True,
            enqueue=True,
        )

    logger.info(
        f"Logging configured: level={log_level}, "
        f"console={console_output}, file={file_output}"
    )


def get_logger() -> Any:
    """
    Get configured loguru logger instance.

    Returns:
        Configured loguru logger instance
    """
    return logger


def log_transcript_event(
    message: str,
    transcript: str,
    depth: int,
    level: str = "INFO",
    **extra_context: Any
) -> None:
    """
    Log a transcript pipeline event with standard context fields.

    Usage:
        >>> log_transcript_event(
        ...     "Batch committed",
        ...     transcript="I rolled a 4",
        ...     depth=0,
        ...     actions=2
        ... )

    Args:
        message: Log message
        transcript: Transcript being processed
        depth: Synthetic nesting depth (0 for user speech)
        level: Log level (default: "INFO")
        **extra_context: Additional context fields
    """
    context = {
        "transcript": transcript,
        "depth": depth,
        **extra_context
    }
    logger.bind(**context).log(level.upper(), message)


def log_phase_transition(from_phase: str, to_phase: str, reason: str | None = None) -> None:
    """
    Log a game phase transition.

    Args:
        from_phase: Previous phase
        to_phase: New phase
        reason: Optional trigger (e.g., "reset", "winner")
    """
    context: dict[str, Any] = {"from_phase": from_phase, "to_phase": to_phase}
    if reason:
        context["reason"] = reason

    logger.bind(**context).info(f"Phase transition: {from_phase} -> {to_phase}")


def log_turn_advance(from_player: str | None, to_player: str) -> None:
    """Log a turn handover"""
    logger.bind(from_player=from_player, to_player=to_player).info(
        f"Turn advanced: {from_player} -> {to_player}"
    )
