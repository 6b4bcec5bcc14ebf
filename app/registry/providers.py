"""
Provider Registry

This module defines the fixed pool of text-completion providers that a
prompt is fanned out to:
- Claude (Anthropic Messages API)
- ChatGPT (OpenAI Chat Completions API)
- Gemini (Google Generative Language API)
- Grok (xAI Responses API)

Each entry includes:
- Display metadata used by the presentation layer (name, theme token)
- Credential shape (label, placeholder hint, where to obtain a key)
- Fixed wire constants (endpoint, model name, output limit, system prompt)

Entries are immutable and defined once at start-up. Adding a provider means
adding one entry here plus one adapter in app/dispatcher/handlers.py.
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class ProviderId(str, Enum):
    """Supported completion providers, in registry (dispatch) order."""

    CLAUDE = "claude"
    CHATGPT = "chatgpt"
    GEMINI = "gemini"
    GROK = "grok"


GROK_SYSTEM_PROMPT = "You are Grok, an extremely intelligent, helpful AI assistant."


class ProviderMetadata(BaseModel):
    """
    Complete metadata for a registered provider.

    This class holds all information needed to:
    1. Render the provider's panel and settings entry
    2. Build the provider's wire request
    """

    model_config = ConfigDict(frozen=True)

    provider_id: ProviderId = Field(
        ...,
        description="Unique identifier used for state and dispatch",
    )

    display_name: str = Field(
        ...,
        description="Human-readable provider name",
    )

    theme_token: str = Field(
        ...,
        description="Visual theme token for the provider's panel",
    )

    credential_label: str = Field(
        ...,
        description="Label for the provider's API key field",
    )

    placeholder_hint: str = Field(
        ...,
        description="Placeholder text showing the expected key prefix",
    )

    credential_help_reference: str = Field(
        ...,
        description="Where a user can obtain an API key",
    )

    endpoint: str = Field(
        ...,
        description="Completion endpoint URL",
    )

    api_model_name: str = Field(
        ...,
        description="Model name used in provider API calls",
    )

    max_tokens: int | None = Field(
        default=None,
        gt=0,
        description="Fixed max output tokens, when the wire format carries one",
    )

    system_prompt: str | None = Field(
        default=None,
        description="Fixed system instruction, when the wire format carries one",
    )


class ProviderRegistry:
    """
    Central registry of all available providers.

    The registry follows a singleton-like pattern where provider
    definitions are loaded once and reused throughout the application
    lifecycle. Insertion order is dispatch order.

    Attributes:
        _providers: Dictionary mapping provider IDs to their metadata
    """

    def __init__(self) -> None:
        self._providers: dict[ProviderId, ProviderMetadata] = {}
        self._initialize_providers()

    def _initialize_providers(self) -> None:
        """Register all available providers with their metadata."""

        self._register(
            ProviderMetadata(
                provider_id=ProviderId.CLAUDE,
                display_name="Claude",
                theme_token="purple-blue",
                credential_label="Anthropic API Key",
                placeholder_hint="sk-ant-...",
                credential_help_reference="console.anthropic.com",
                endpoint="https://api.anthropic.com/v1/messages",
                api_model_name="claude-sonnet-4-20250514",
                max_tokens=1000,
            )
        )

        self._register(
            ProviderMetadata(
                provider_id=ProviderId.CHATGPT,
                display_name="ChatGPT",
                theme_token="green-teal",
                credential_label="OpenAI API Key",
                placeholder_hint="sk-...",
                credential_help_reference="platform.openai.com",
                endpoint="https://api.openai.com/v1/chat/completions",
                api_model_name="gpt-5-nano",
                max_tokens=1000,
            )
        )

        self._register(
            ProviderMetadata(
                provider_id=ProviderId.GEMINI,
                display_name="Gemini",
                theme_token="blue-cyan",
                credential_label="Google AI API Key",
                placeholder_hint="AIza...",
                credential_help_reference="makersuite.google.com/app/apikey",
                endpoint=(
                    "https://generativelanguage.googleapis.com/v1beta/models/"
                    "gemini-3-flash-preview:generateContent"
                ),
                api_model_name="gemini-3-flash-preview",
            )
        )

        self._register(
            ProviderMetadata(
                provider_id=ProviderId.GROK,
                display_name="Grok",
                theme_token="black-gray",
                credential_label="xAI API Key",
                placeholder_hint="xai-...",
                credential_help_reference="console.x.ai/home",
                endpoint="https://api.x.ai/v1/responses",
                api_model_name="grok-4",
                system_prompt=GROK_SYSTEM_PROMPT,
            )
        )

    def _register(self, provider: ProviderMetadata) -> None:
        """Register a provider in the registry."""
        self._providers[provider.provider_id] = provider

    def get_provider(self, provider_id: ProviderId | str) -> ProviderMetadata | None:
        """
        Retrieve provider metadata by ID.

        Args:
            provider_id: The provider identifier (enum member or raw string)

        Returns:
            ProviderMetadata if found, None otherwise
        """
        try:
            return self._providers.get(ProviderId(provider_id))
        except ValueError:
            return None

    def list_providers(self) -> list[ProviderMetadata]:
        """
        Return all registered providers in registry order.

        Returns:
            List of all ProviderMetadata instances
        """
        return list(self._providers.values())

    def get_provider_ids(self) -> list[ProviderId]:
        """
        Return all registered provider IDs in registry order.

        Returns:
            List of ProviderId members
        """
        return list(self._providers.keys())


_registry_instance: ProviderRegistry | None = None


def get_provider_registry() -> ProviderRegistry:
    """
    Get the global provider registry instance.

    Uses lazy initialization to create the registry only when needed.

    Returns:
        The singleton ProviderRegistry instance
    """
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = ProviderRegistry()
    return _registry_instance
