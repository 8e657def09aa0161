# ABOUTME: Unit tests for environment-driven settings.
# ABOUTME: Validates defaults, environment overrides and provider base URL resolution.

import pytest

from board_moderator.config.settings import PROVIDER_BASE_URLS, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host environment variables out of the settings under test"""
    for name in ["LLM_PROVIDER", "LLM_MODEL", "LLM_BASE_URL", "MAX_EFFECT_DEPTH", "LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Test suite for Settings"""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.llm_provider == "openai"
        assert settings.max_effect_depth == 3
        assert settings.max_validation_attempts == 3
        assert settings.max_board_chain == 10
        assert settings.llm_retry_attempts == 3
        assert settings.dedup_window_seconds == 2.0

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MAX_EFFECT_DEPTH", "5")
        monkeypatch.setenv("LLM_PROVIDER", "gemini")

        settings = Settings(_env_file=None)

        assert settings.max_effect_depth == 5
        assert settings.llm_provider == "gemini"

    def test_unknown_provider_rejected(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "carrier-pigeon")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    @pytest.mark.parametrize("provider", ["openai", "ollama", "gemini"])
    def test_provider_base_url(self, provider):
        settings = Settings(_env_file=None, llm_provider=provider)

        assert settings.provider_base_url == PROVIDER_BASE_URLS[provider]

    def test_explicit_base_url_wins(self):
        settings = Settings(_env_file=None, llm_provider="ollama", llm_base_url="http://gpu-box:8000/v1")

        assert settings.provider_base_url == "http://gpu-box:8000/v1"
