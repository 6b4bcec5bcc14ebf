"""
Configuration Tests

Tests for environment-driven settings and logging setup.
"""

import logging

import pytest
from pydantic import SecretStr, ValidationError

from app.config import Settings, configure_logging, get_settings


class TestProviderKeys:
    """Provider keys are optional and blank means unset."""

    def test_keys_default_to_unset(self):
        """The test environment configures no provider."""
        settings = get_settings()

        assert all(key is None for key in settings.provider_keys().values())

    def test_key_from_environment(self, monkeypatch):
        """Keys are read from the environment as SecretStr."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-env")

        settings = Settings()

        assert isinstance(settings.anthropic_api_key, SecretStr)
        assert settings.anthropic_api_key.get_secret_value() == "sk-ant-env"
        assert "sk-ant-env" not in repr(settings)

    @pytest.mark.parametrize("value", ["", "   ", "\t"])
    def test_blank_key_is_unset(self, value):
        """Empty or whitespace-only keys count as not configured."""
        settings = Settings(xai_api_key=value)

        assert settings.xai_api_key is None

    def test_provider_keys_mapping(self):
        """provider_keys() maps every provider ID to its environment key."""
        settings = Settings(
            anthropic_api_key="a",
            openai_api_key="o",
            google_api_key="g",
            xai_api_key="x",
        )

        keys = {pid: key.get_secret_value() for pid, key in settings.provider_keys().items()}
        assert keys == {"claude": "a", "chatgpt": "o", "gemini": "g", "grok": "x"}


class TestDispatchSettings:
    """Dispatch behavior switches."""

    def test_defaults(self):
        """No timeout and no prompt replication unless asked for."""
        settings = Settings()

        assert settings.provider_timeout_seconds is None
        assert settings.replicate_prompt_to_all_providers is False

    def test_timeout_from_environment(self, monkeypatch):
        monkeypatch.setenv("PROVIDER_TIMEOUT_SECONDS", "30")

        assert Settings().provider_timeout_seconds == 30.0

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(provider_timeout_seconds=0)

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            Settings(log_level="VERBOSE")

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()


class TestConfigureLogging:
    """Logging setup."""

    def test_http_client_loggers_silenced(self):
        """httpx request lines would carry the Gemini key; keep them quiet."""
        configure_logging(Settings(log_level="DEBUG"))

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING
