# ABOUTME: Exception definitions for the request pipeline around the text-generation provider.
# ABOUTME: Typed failures (network, wrong shape, not a sequence) drive retries and corrective prompts.


class PipelineError(Exception):
    """Base class for failures while turning a transcript into actions"""
    pass


class NetworkError(PipelineError):
    """Raised when the provider call fails (connection, timeout, rate limit, API error)"""
    pass


class WrongShapeError(PipelineError):
    """Raised when the reply is not a bare JSON array of valid actions"""
    pass


class NotASequenceError(PipelineError):
    """Raised when the reply is valid JSON but a single record instead of an array"""
    pass


class EmptyReplyError(PipelineError):
    """Raised when the provider returns no actions; retried, never accepted as a no-op"""
    pass


class LLMCallFailed(Exception):
    """Raised when the provider API call fails"""
    pass
