"""
Dispatcher Handlers - Provider-specific completion adapters.

This module performs the actual API calls to the completion providers
(Anthropic, OpenAI, Google, xAI), hiding each provider's wire format
behind a single `complete(provider_id, prompt, credential) -> str` call.

Each adapter:
- builds the provider's request (endpoint, auth scheme, body schema)
- issues exactly one HTTP call through the shared httpx client
- turns a non-2xx status into TransportError, using the provider's
  `error.message` when the body carries one
- extracts the single completion text from the provider's envelope, or
  raises MalformedResponseError when the shape is not what it expects

Credentials are passed per call and never logged or stored here.
"""

import logging
import time
from typing import Any

import httpx

from app.config import get_settings
from app.dispatcher.errors import (
    GenericError,
    MalformedResponseError,
    MissingCredentialError,
    TransportError,
    UNKNOWN_ERROR_MESSAGE,
)
from app.registry.providers import ProviderId, ProviderMetadata, get_provider_registry

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"

# Location of the completion text inside each provider's success envelope.
CLAUDE_TEXT_PATH = ("content", 0, "text")
CHATGPT_TEXT_PATH = ("choices", 0, "message", "content")
GEMINI_TEXT_PATH = ("candidates", 0, "content", "parts", 0, "text")
GROK_TEXT_PATH = ("output", 0, "content", 0, "text")


_http_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    """
    Get the shared async HTTP client (lazy initialization).

    The client carries no timeout unless PROVIDER_TIMEOUT_SECONDS is set,
    so a hung provider only keeps its own panel loading.

    Returns:
        The singleton httpx.AsyncClient instance.
    """
    global _http_client
    if _http_client is None:
        settings = get_settings()
        _http_client = httpx.AsyncClient(timeout=settings.provider_timeout_seconds)
        logger.debug("Initialized provider HTTP client")
    return _http_client


async def close_http_client() -> None:
    """Close the shared HTTP client, if one was created."""
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


def _require_credential(provider: ProviderMetadata, credential: str) -> None:
    if not credential or not credential.strip():
        raise MissingCredentialError(provider.provider_id.value, provider.display_name)


def _extract_error_message(response: httpx.Response) -> str:
    """
    Pull the provider's human-readable error from a failed response.

    All four providers report failures as `{"error": {"message": ...}}`.

    Args:
        response: The non-2xx HTTP response.

    Returns:
        The provider's message, or a generic fallback when the body is
        missing, not JSON, or shaped differently.
    """
    try:
        data = response.json()
    except ValueError:
        return UNKNOWN_ERROR_MESSAGE

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, str) and message:
                return message

    return UNKNOWN_ERROR_MESSAGE


def _extract_text(provider: ProviderMetadata, data: Any, path: tuple) -> str:
    """
    Walk a success envelope down to the completion text.

    Args:
        provider: Provider the response came from.
        data: Parsed JSON body.
        path: Sequence of dict keys and list indexes leading to the text.

    Returns:
        The completion text.

    Raises:
        MalformedResponseError: If any step of the path is absent or the
            final value is not a string.
    """
    node = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(node, list) or len(node) <= step:
                break
        elif not isinstance(node, dict) or step not in node:
            break
        node = node[step]
    else:
        if isinstance(node, str):
            return node

    dotted = ".".join(f"[{s}]" if isinstance(s, int) else s for s in path)
    raise MalformedResponseError(
        provider.provider_id.value,
        f"Unexpected response from {provider.display_name}: missing {dotted}",
    )


async def _post_json(
    provider: ProviderMetadata,
    headers: dict[str, str],
    payload: dict,
    params: dict[str, str] | None = None,
) -> Any:
    """
    Issue the single POST for a completion and return the parsed body.

    Raises:
        TransportError: On network failure or a non-2xx status.
        MalformedResponseError: If a 2xx body is not JSON.
    """
    client = get_http_client()
    provider_id = provider.provider_id.value
    start_time = time.perf_counter()

    try:
        response = await client.post(
            provider.endpoint, headers=headers, json=payload, params=params
        )
    except httpx.RequestError as e:
        latency_ms = (time.perf_counter() - start_time) * 1000
        logger.error(
            f"{provider.display_name} request failed after {latency_ms:.0f}ms: "
            f"{type(e).__name__}"
        )
        raise TransportError(
            provider_id, f"Network error: {str(e) or type(e).__name__}"
        ) from e

    latency_ms = (time.perf_counter() - start_time) * 1000

    if not response.is_success:
        message = _extract_error_message(response)
        logger.warning(
            f"{provider.display_name} returned HTTP {response.status_code} "
            f"after {latency_ms:.0f}ms: {message}"
        )
        raise TransportError(provider_id, message, status_code=response.status_code)

    logger.info(
        f"{provider.display_name} completed: model={provider.api_model_name}, "
        f"latency={latency_ms:.0f}ms"
    )

    try:
        return response.json()
    except ValueError as e:
        raise MalformedResponseError(
            provider_id, f"Unexpected response from {provider.display_name}: not JSON"
        ) from e


async def complete_claude(provider: ProviderMetadata, prompt: str, credential: str) -> str:
    """
    Request a completion from the Anthropic Messages API.

    Auth is the `x-api-key` header plus a pinned `anthropic-version`.
    """
    _require_credential(provider, credential)

    data = await _post_json(
        provider,
        headers={
            "Content-Type": "application/json",
            "x-api-key": credential,
            "anthropic-version": ANTHROPIC_VERSION,
        },
        payload={
            "model": provider.api_model_name,
            "max_tokens": provider.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        },
    )
    return _extract_text(provider, data, CLAUDE_TEXT_PATH)


async def complete_chatgpt(provider: ProviderMetadata, prompt: str, credential: str) -> str:
    """Request a completion from the OpenAI Chat Completions API (Bearer auth)."""
    _require_credential(provider, credential)

    data = await _post_json(
        provider,
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        },
        payload={
            "model": provider.api_model_name,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": provider.max_tokens,
        },
    )
    return _extract_text(provider, data, CHATGPT_TEXT_PATH)


async def complete_gemini(provider: ProviderMetadata, prompt: str, credential: str) -> str:
    """
    Request a completion from the Gemini generateContent API.

    Gemini takes the key as a `key` query parameter rather than a header.
    """
    _require_credential(provider, credential)

    data = await _post_json(
        provider,
        headers={"Content-Type": "application/json"},
        payload={"contents": [{"parts": [{"text": prompt}]}]},
        params={"key": credential},
    )
    return _extract_text(provider, data, GEMINI_TEXT_PATH)


async def complete_grok(provider: ProviderMetadata, prompt: str, credential: str) -> str:
    """Request a completion from the xAI Responses API with a fixed system prompt."""
    _require_credential(provider, credential)

    data = await _post_json(
        provider,
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        },
        payload={
            "input": [
                {"role": "system", "content": provider.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "model": provider.api_model_name,
        },
    )
    return _extract_text(provider, data, GROK_TEXT_PATH)


async def complete(provider_id: ProviderId | str, prompt: str, credential: str) -> str:
    """
    Send one prompt to one provider and return its completion text.

    This is the main entry point for the dispatcher. It routes to the
    appropriate adapter based on the provider ID.

    Args:
        provider_id: Provider to call.
        prompt: User prompt, sent as a single stateless user message.
        credential: API key captured by the caller at dispatch time.

    Returns:
        The completion text.

    Raises:
        ProviderError: Any subclass, describing why no text was produced.
    """
    provider = get_provider_registry().get_provider(provider_id)
    if provider is None:
        logger.error(f"Unknown provider: {provider_id}")
        raise GenericError(str(provider_id), f"Unknown provider: {provider_id}")

    logger.info(f"Dispatching prompt to {provider.display_name}")

    match provider.provider_id:
        case ProviderId.CLAUDE:
            return await complete_claude(provider, prompt, credential)
        case ProviderId.CHATGPT:
            return await complete_chatgpt(provider, prompt, credential)
        case ProviderId.GEMINI:
            return await complete_gemini(provider, prompt, credential)
        case ProviderId.GROK:
            return await complete_grok(provider, prompt, credential)
        case _:
            raise GenericError(
                provider.provider_id.value, f"No adapter for provider: {provider_id}"
            )
