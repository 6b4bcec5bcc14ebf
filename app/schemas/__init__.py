"""
Schemas module: Pydantic request/response models.

This module provides validated data models for the AI Aggregate API:
- Request/response models for /chat and /conversations
- Provider registry and credential settings views
- Error response models for consistent error handling
- Health check response models
"""

from app.schemas.chat import (
    # Request models
    ChatRequest,
    CredentialDraftUpdate,
    # Response models
    TurnSchema,
    DispatchStateSchema,
    ConversationResponse,
    ConversationsResponse,
    ChatAccepted,
    ProviderInfo,
    ProvidersResponse,
    CredentialFieldInfo,
    CredentialDraftResponse,
    CommitResponse,
    # Error models
    ErrorCodes,
    ErrorDetail,
    ErrorResponse,
    # Health models
    ComponentHealth,
    HealthResponse,
    # Utilities
    build_conversation_response,
    build_provider_info,
)

__all__ = [
    # Request models
    "ChatRequest",
    "CredentialDraftUpdate",
    # Response models
    "TurnSchema",
    "DispatchStateSchema",
    "ConversationResponse",
    "ConversationsResponse",
    "ChatAccepted",
    "ProviderInfo",
    "ProvidersResponse",
    "CredentialFieldInfo",
    "CredentialDraftResponse",
    "CommitResponse",
    # Error models
    "ErrorCodes",
    "ErrorDetail",
    "ErrorResponse",
    # Health models
    "ComponentHealth",
    "HealthResponse",
    # Utilities
    "build_conversation_response",
    "build_provider_info",
]
