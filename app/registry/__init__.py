"""
Registry module: Provider pool configuration and metadata.

This module contains:
- providers.py: the four completion providers with display, credential
  and wire metadata

Public API:
- ProviderId: Enum of provider identifiers (registry order)
- ProviderMetadata: Pydantic model for provider configuration
- ProviderRegistry: Central registry class
- get_provider_registry: Singleton accessor function
"""

from app.registry.providers import (
    ProviderId,
    ProviderMetadata,
    ProviderRegistry,
    get_provider_registry,
)

__all__ = [
    "ProviderId",
    "ProviderMetadata",
    "ProviderRegistry",
    "get_provider_registry",
]
