# ABOUTME: Generation layer exports: provider client, request pipeline and typed failures.
# ABOUTME: Everything between a transcript and a parsed action list lives here.

from board_moderator.llm.exceptions import (
    EmptyReplyError,
    LLMCallFailed,
    NetworkError,
    NotASequenceError,
    PipelineError,
    WrongShapeError,
)
from board_moderator.llm.llm_client import LLMClient
from board_moderator.llm.request_pipeline import RequestPipeline, parse_reply
from board_moderator.llm.state_context import format_state_context

__all__ = [
    "LLMClient",
    "RequestPipeline",
    "parse_reply",
    "format_state_context",
    "PipelineError",
    "NetworkError",
    "WrongShapeError",
    "NotASequenceError",
    "EmptyReplyError",
    "LLMCallFailed",
]
