"""
State module: session-lifetime state read by presentation.

This module contains:
- conversations.py: per-provider transcripts and dispatch states
- credentials.py: committed/draft credential snapshots

Nothing here is persisted; a restart starts from an empty conversation
and the keys found in the environment.
"""

from app.state.conversations import (
    ConversationStore,
    ConversationView,
    DispatchState,
    DispatchStatus,
    Speaker,
    Turn,
    get_conversation_store,
)
from app.state.credentials import (
    CredentialSnapshot,
    CredentialStore,
    get_credential_store,
)

__all__ = [
    "ConversationStore",
    "ConversationView",
    "DispatchState",
    "DispatchStatus",
    "Speaker",
    "Turn",
    "get_conversation_store",
    "CredentialSnapshot",
    "CredentialStore",
    "get_credential_store",
]
