# ABOUTME: Configuration settings for the board game moderator using Pydantic Settings.
# ABOUTME: Loads provider, retry, recursion and logging options from environment variables or .env.

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    # Text generation provider
    llm_provider: Literal["openai", "ollama", "gemini"] = Field(
        default="openai",
        description="Provider preset used to pick the default base URL"
    )
    openai_api_key: str | None = Field(
        default=None,
        description="API key for the generation provider (not needed for Ollama)"
    )
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="Model name passed to the chat completions endpoint"
    )
    llm_base_url: str | None = Field(
        default=None,
        description="Override for the OpenAI-compatible base URL"
    )
    llm_temperature: float = Field(
        default=0.7,
        description="Sampling temperature for action generation"
    )
    llm_max_tokens: int = Field(
        default=1024,
        description="Maximum tokens in one generation reply"
    )
    llm_timeout_seconds: float = Field(
        default=20.0,
        description="Request timeout for one provider call"
    )

    # Request pipeline
    llm_retry_attempts: int = Field(
        default=3,
        description="Number of generation attempts per transcript"
    )
    llm_retry_min_seconds: float = Field(
        default=0.5,
        description="First backoff delay between generation attempts"
    )
    llm_retry_max_seconds: float = Field(
        default=2.0,
        description="Upper bound for the backoff delay"
    )
    dedup_window_seconds: float = Field(
        default=2.0,
        description="Identical transcripts inside this window are ignored"
    )

    # Orchestration
    max_effect_depth: int = Field(
        default=3,
        description="Maximum nesting of synthetic transcripts (board effects, decision prompts)"
    )
    max_validation_attempts: int = Field(
        default=3,
        description="Regeneration attempts when a batch is rejected by the validator"
    )
    max_board_chain: int = Field(
        default=10,
        description="Maximum chained auto-moves before the board is considered misconfigured"
    )

    # Application
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_dir: str = Field(
        default="logs",
        description="Directory for rotating log files"
    )
    games_path: str = Field(
        default="games",
        description="Directory holding one sub-directory per game module"
    )
    default_game: str = Field(
        default="snakes_and_ladders",
        description="Game module loaded when none is given on the command line"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def provider_base_url(self) -> str | None:
        """Resolve the base URL for the configured provider"""
        if self.llm_base_url:
            return self.llm_base_url
        return PROVIDER_BASE_URLS.get(self.llm_provider)


# None means the OpenAI client default
PROVIDER_BASE_URLS: dict[str, str | None] = {
    "openai": None,
    "ollama": "http://localhost:11434/v1",
    "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
}


# Singleton settings instance - lazy initialization to allow import without .env
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the singleton settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
