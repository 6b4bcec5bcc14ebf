"""
Pydantic Schemas for the Chat API

This module defines the request and response models for the AI Aggregate API:
- ChatRequest / ChatAccepted: submitting one prompt to every provider
- ConversationResponse: one provider's transcript and dispatch state
- ProviderInfo / CredentialDraftUpdate: registry and settings views
- Error responses and health check schemas

Credential values never appear in any response model; settings views
only report whether a key is present.
"""

from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.registry.providers import ProviderId
from app.state.conversations import DispatchStatus, Speaker

if TYPE_CHECKING:
    from app.registry.providers import ProviderMetadata
    from app.state.conversations import ConversationView


# =============================================================================
# REQUEST MODELS
# =============================================================================


class ChatRequest(BaseModel):
    """
    Request body for the /chat endpoint.

    Example:
        {"prompt": "Explain CRDTs in two sentences."}
    """

    prompt: str = Field(
        ...,
        min_length=1,
        description="Prompt sent, unchanged, to every configured provider",
    )

    @field_validator("prompt")
    @classmethod
    def validate_prompt_not_whitespace(cls, v: str) -> str:
        """Ensure prompt is not empty or whitespace only."""
        if not v.strip():
            raise ValueError("Prompt cannot be empty or whitespace only")
        return v


class CredentialDraftUpdate(BaseModel):
    """
    Request body for PATCH /settings/draft.

    Keys are provider IDs; an empty string clears that provider's key.

    Example:
        {"credentials": {"claude": "sk-ant-...", "grok": ""}}
    """

    credentials: dict[ProviderId, str] = Field(
        ...,
        description="New draft key per provider ID",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [{"credentials": {"claude": "sk-ant-...", "gemini": "AIza..."}}]
        }
    )


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class TurnSchema(BaseModel):
    """One turn of a provider's transcript."""

    speaker: Speaker = Field(..., description="Who produced the turn")
    text: str = Field(..., description="Turn text (markdown from providers)")


class DispatchStateSchema(BaseModel):
    """Dispatch state of one provider."""

    status: DispatchStatus = Field(..., description="idle or in_flight")
    in_flight: bool = Field(..., description="Whether a completion is outstanding")
    last_error: str | None = Field(
        default=None,
        description="Error text from the provider's last round, if it failed",
    )


class ConversationResponse(BaseModel):
    """
    One provider's conversation as seen by the presentation layer.

    Example:
        {
            "provider_id": "claude",
            "display_name": "Claude",
            "configured": true,
            "transcript": [
                {"speaker": "user", "text": "ping"},
                {"speaker": "assistant", "text": "pong"}
            ],
            "state": {"status": "idle", "in_flight": false, "last_error": null}
        }
    """

    provider_id: ProviderId
    display_name: str
    configured: bool = Field(..., description="Whether the provider has a committed key")
    transcript: list[TurnSchema] = Field(default_factory=list)
    state: DispatchStateSchema


class ConversationsResponse(BaseModel):
    """Every provider's conversation, in registry order."""

    busy: bool = Field(..., description="Whether any provider is in flight")
    conversations: list[ConversationResponse] = Field(default_factory=list)


class ChatAccepted(BaseModel):
    """Response from POST /chat once the prompt has been dispatched."""

    accepted: bool = True
    dispatched: list[ProviderId] = Field(
        ...,
        description="Providers the prompt was sent to, in dispatch order",
    )


class ProviderInfo(BaseModel):
    """Registry entry of one provider, plus whether it is configured."""

    provider_id: ProviderId
    display_name: str
    theme_token: str
    credential_label: str
    placeholder_hint: str
    credential_help_reference: str
    configured: bool


class ProvidersResponse(BaseModel):
    """Response from GET /providers."""

    providers: list[ProviderInfo]
    visible: list[ProviderId] = Field(
        ...,
        description="Configured providers, the ones presentation shows",
    )


class CredentialFieldInfo(BaseModel):
    """Settings view of one provider's draft key (value never included)."""

    provider_id: ProviderId
    credential_label: str
    placeholder_hint: str
    credential_help_reference: str
    has_value: bool


class CredentialDraftResponse(BaseModel):
    """Response from the /settings/draft endpoints."""

    fields: list[CredentialFieldInfo]


class CommitResponse(BaseModel):
    """Response from POST /settings/commit."""

    configured: list[ProviderId]


# =============================================================================
# ERROR MODELS
# =============================================================================


class ErrorCodes:
    """
    Standard error codes for API responses.

    These codes enable programmatic error handling by clients
    without parsing human-readable messages.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    PROMPT_EMPTY = "PROMPT_EMPTY"
    NO_CREDENTIALS = "NO_CREDENTIALS"
    BUSY = "BUSY"
    UNKNOWN_PROVIDER = "UNKNOWN_PROVIDER"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    """
    Detailed error information for API error responses.

    Provides machine-readable error codes, human-readable messages,
    and optional field information for validation errors.
    """

    code: str = Field(
        ...,
        description="Machine-readable error code for programmatic handling",
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
    )

    field: str | None = Field(
        default=None,
        description="Field that caused the error (for validation errors)",
    )


class ErrorResponse(BaseModel):
    """
    Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "BUSY",
                "message": "A previous prompt is still being answered",
                "field": null
            }
        }
    """

    error: ErrorDetail = Field(
        ...,
        description="Error details",
    )


# =============================================================================
# HEALTH MODELS
# =============================================================================


class ComponentHealth(BaseModel):
    """Health status of an individual system component."""

    name: str = Field(
        ...,
        description="Component name (e.g., 'registry', 'credentials')",
    )

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        ...,
        description="Component health status",
    )

    message: str | None = Field(
        default=None,
        description="Additional status information or error details",
    )


class HealthResponse(BaseModel):
    """
    Response from the /health endpoint.

    Example:
        {
            "status": "healthy",
            "service": "ai-aggregate",
            "version": "0.1.0",
            "components": [
                {"name": "registry", "status": "healthy"},
                {"name": "credentials", "status": "degraded"}
            ],
            "uptime_seconds": 3600.5
        }
    """

    status: Literal["healthy", "degraded", "unhealthy"] = Field(
        ...,
        description="Overall service health status",
    )

    service: str = Field(
        default="ai-aggregate",
        description="Service identifier",
    )

    version: str = Field(
        ...,
        description="Application version",
    )

    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Health status of individual components",
    )

    uptime_seconds: float | None = Field(
        default=None,
        ge=0.0,
        description="Time since service start in seconds",
    )


# =============================================================================
# CONVERSION UTILITIES
# =============================================================================


def build_conversation_response(
    view: "ConversationView",
    provider: "ProviderMetadata",
    configured: bool,
) -> ConversationResponse:
    """
    Convert a store view into the API representation.

    Args:
        view: Snapshot of one provider's slice from the conversation store
        provider: Registry metadata for the same provider
        configured: Whether the provider has a committed key

    Returns:
        ConversationResponse ready for API serialization
    """
    return ConversationResponse(
        provider_id=view.provider_id,
        display_name=provider.display_name,
        configured=configured,
        transcript=[TurnSchema(speaker=t.speaker, text=t.text) for t in view.transcript],
        state=DispatchStateSchema(
            status=view.state.status,
            in_flight=view.state.in_flight,
            last_error=view.state.last_error,
        ),
    )


def build_provider_info(provider: "ProviderMetadata", configured: bool) -> ProviderInfo:
    """Convert registry metadata into the API representation."""
    return ProviderInfo(
        provider_id=provider.provider_id,
        display_name=provider.display_name,
        theme_token=provider.theme_token,
        credential_label=provider.credential_label,
        placeholder_hint=provider.placeholder_hint,
        credential_help_reference=provider.credential_help_reference,
        configured=configured,
    )
