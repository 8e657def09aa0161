# ABOUTME: Async client wrapper for OpenAI-compatible chat completion endpoints.
# ABOUTME: Serves OpenAI, Ollama and Gemini through base_url; raises LLMCallFailed on any API error.

from typing import Any

from openai import AsyncOpenAI

from board_moderator.config.settings import Settings
from board_moderator.llm.exceptions import LLMCallFailed


class LLMClient:
    """
    Thin wrapper around AsyncOpenAI chat completions.

    Retries live in the request pipeline, not here: one call is one attempt.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 1024,
        timeout: float = 20.0,
    ):
        """
        Initialize LLM client wrapper.

        Args:
            client: AsyncOpenAI client instance
            model: Model name for chat completions
            temperature: Sampling temperature
            max_tokens: Reply token limit
            timeout: Request timeout in seconds
        """
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMClient":
        """Build a client for the configured provider"""
        client = AsyncOpenAI(
            # Ollama ignores the key but the SDK requires one
            api_key=settings.openai_api_key or "not-needed",
            base_url=settings.provider_base_url,
        )
        return cls(
            client,
            model=settings.llm_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout_seconds,
        )

    async def complete(self, prompt: str, system_prompt: str | None = None) -> str:
        """
        Send one prompt and return the reply text.

        Args:
            prompt: User message content
            system_prompt: Optional system message

        Returns:
            Reply content ("" when the provider returns none)

        Raises:
            LLMCallFailed: When the API call fails
        """
        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
        }

        try:
            response = await self.client.chat.completions.create(**kwargs)
        except Exception as e:
            raise LLMCallFailed(f"Chat completion failed: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
