"""
AI Aggregate Configuration Module

This module manages application settings and environment variables using
pydantic-settings for type-safe configuration management.

Environment variables are loaded from .env file or system environment.
Provider API keys use SecretStr to prevent accidental logging; they only
seed the committed credential set at start-up and can be replaced at
runtime through the settings endpoints.
"""

from functools import lru_cache
from typing import Literal
import logging
import sys

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic Settings automatically reads from:
    1. Environment variables
    2. .env file in working directory
    3. Default values defined here

    Every provider key is optional: a provider without a key is simply
    "not configured" and is skipped by the dispatcher.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    anthropic_api_key: SecretStr | None = Field(
        default=None, description="Anthropic API key for Claude"
    )

    openai_api_key: SecretStr | None = Field(
        default=None, description="OpenAI API key for ChatGPT"
    )

    google_api_key: SecretStr | None = Field(
        default=None, description="Google AI API key for Gemini"
    )

    xai_api_key: SecretStr | None = Field(
        default=None, description="xAI API key for Grok"
    )

    provider_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Per-call timeout for provider requests (default: no timeout)",
    )

    replicate_prompt_to_all_providers: bool = Field(
        default=False,
        description="Append each prompt to every transcript, not only dispatched ones",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Application log level"
    )

    host: str = Field(default="0.0.0.0", description="Server bind host")

    port: int = Field(default=8000, description="Server bind port")

    debug: bool = Field(default=False, description="Enable debug mode")

    @field_validator(
        "anthropic_api_key", "openai_api_key", "google_api_key", "xai_api_key"
    )
    @classmethod
    def blank_key_is_unset(cls, v: SecretStr | None) -> SecretStr | None:
        """Treat empty or whitespace-only keys as not configured."""
        if v is not None and not v.get_secret_value().strip():
            return None
        return v

    def provider_keys(self) -> dict[str, SecretStr | None]:
        """
        Map provider IDs to the keys configured in the environment.

        Returns:
            Dictionary of provider ID to SecretStr (or None when unset).
        """
        return {
            "claude": self.anthropic_api_key,
            "chatgpt": self.openai_api_key,
            "gemini": self.google_api_key,
            "grok": self.xai_api_key,
        }


@lru_cache
def get_settings() -> Settings:
    """
    Returns cached settings instance.

    Using lru_cache ensures settings are loaded once and reused,
    avoiding repeated file reads and environment parsing.

    Returns:
        Settings: The application settings singleton.
    """
    return Settings()


def configure_logging(settings: Settings) -> None:
    """
    Configure application logging based on settings.

    Sets up structured logging with timestamps and silences the HTTP
    client loggers, whose request lines would include the Gemini key
    carried in the query string.

    Args:
        settings: The application settings instance.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
