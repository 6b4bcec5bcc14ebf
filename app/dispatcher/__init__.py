"""
Dispatcher module: provider adapters and the fan-out coordinator.

This module provides a unified interface for sending one prompt to every
configured completion provider (Claude, ChatGPT, Gemini, Grok). It
handles provider-specific API calls, response normalization, and
per-provider error isolation.

Key exports:
- complete(): Send a prompt to one provider and return its text
- DispatchCoordinator: Fan a prompt out and reconcile results per provider
- get_coordinator(): Get the global coordinator instance
- ProviderError and subclasses: Failure taxonomy recorded as last_error
"""

from app.dispatcher.errors import (
    # Error taxonomy
    ProviderError,
    MissingCredentialError,
    TransportError,
    MalformedResponseError,
    GenericError,
)
from app.dispatcher.handlers import (
    # HTTP client
    get_http_client,
    close_http_client,
    # Core completion function
    complete,
    # Provider-specific (for testing/advanced use)
    complete_claude,
    complete_chatgpt,
    complete_gemini,
    complete_grok,
)
from app.dispatcher.coordinator import (
    DispatchCoordinator,
    RejectionReason,
    get_coordinator,
)

__all__ = [
    # Error taxonomy
    "ProviderError",
    "MissingCredentialError",
    "TransportError",
    "MalformedResponseError",
    "GenericError",
    # HTTP client
    "get_http_client",
    "close_http_client",
    # Core completion function
    "complete",
    # Provider-specific
    "complete_claude",
    "complete_chatgpt",
    "complete_gemini",
    "complete_grok",
    # Coordinator
    "DispatchCoordinator",
    "RejectionReason",
    "get_coordinator",
]
