"""
Pytest configuration and shared fixtures.

Provides test utilities, mock HTTP clients, and environment setup
for the AI Aggregate test suite.

IMPORTANT: Environment variables must be set BEFORE importing app modules
that use pydantic-settings, so that keys from a developer's shell or .env
never leak into a test run.
"""

import os
import sys

# Set test environment variables before importing app modules
for _var in ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GOOGLE_API_KEY", "XAI_API_KEY"):
    os.environ[_var] = ""
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["DEBUG"] = "false"
os.environ["REPLICATE_PROMPT_TO_ALL_PROVIDERS"] = "false"

# Now safe to import everything else
import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi.testclient import TestClient

from tests.fixtures import ControlledCompletion


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "asyncio: mark test as async")


@pytest.fixture(autouse=True)
def reset_singletons():
    """
    Reset all singleton instances between tests.

    This ensures each test starts with a clean state.
    """
    yield

    from app.config import get_settings

    get_settings.cache_clear()

    from app.registry import providers

    providers._registry_instance = None

    from app.state import conversations, credentials

    conversations._store = None
    credentials._credential_store = None

    from app.dispatcher import coordinator, handlers

    coordinator._coordinator = None
    handlers._http_client = None


@pytest.fixture
def provider_registry():
    """Get the provider registry instance."""
    from app.registry import get_provider_registry

    return get_provider_registry()


@pytest.fixture
def claude(provider_registry):
    """Claude provider metadata."""
    return provider_registry.get_provider("claude")


@pytest.fixture
def chatgpt(provider_registry):
    """ChatGPT provider metadata."""
    return provider_registry.get_provider("chatgpt")


@pytest.fixture
def gemini(provider_registry):
    """Gemini provider metadata."""
    return provider_registry.get_provider("gemini")


@pytest.fixture
def grok(provider_registry):
    """Grok provider metadata."""
    return provider_registry.get_provider("grok")


@pytest.fixture
def mock_http_client():
    """
    Factory fixture for a mocked httpx.AsyncClient.

    Usage:
        client = mock_http_client(200, json={"content": [{"text": "hi"}]})
        client = mock_http_client(side_effect=httpx.ConnectError("down"))
    """

    def _create(status_code: int = 200, side_effect=None, **response_kwargs):
        client = MagicMock(spec=httpx.AsyncClient)
        if side_effect is not None:
            client.post = AsyncMock(side_effect=side_effect)
        else:
            client.post = AsyncMock(
                return_value=httpx.Response(status_code, **response_kwargs)
            )
        return client

    return _create


@pytest.fixture
def patch_http_client():
    """
    Patch the dispatcher's shared HTTP client with the given mock.

    Usage:
        with patch_http_client(client):
            await complete("claude", "hi", "key")
    """

    def _patch(client):
        return patch("app.dispatcher.handlers.get_http_client", return_value=client)

    return _patch


@pytest.fixture
def controlled_completion():
    """A completion function whose calls resolve only when the test says so."""
    return ControlledCompletion()


@pytest.fixture
def make_coordinator(provider_registry):
    """
    Factory fixture for a DispatchCoordinator with its own stores.

    Usage:
        coordinator, store, creds = make_coordinator(
            {ProviderId.CLAUDE: "k1", ProviderId.GEMINI: "k3"}, complete_fn=fake
        )
    """

    def _create(keys: dict | None = None, complete_fn=None, replicate_to_all=False):
        from app.dispatcher.coordinator import DispatchCoordinator
        from app.state import ConversationStore, CredentialStore

        ids = provider_registry.get_provider_ids()
        store = ConversationStore(ids)
        creds = CredentialStore(ids, initial=keys or {})
        coordinator = DispatchCoordinator(
            store=store,
            credentials=creds,
            complete_fn=complete_fn or AsyncMock(return_value="ok"),
            replicate_to_all=replicate_to_all,
        )
        return coordinator, store, creds

    return _create


@pytest.fixture
def test_client():
    """
    Create a FastAPI TestClient with no provider keys configured.

    The app module is re-imported so each test gets fresh singletons.
    """
    if "app.main" in sys.modules:
        del sys.modules["app.main"]

    from app.main import app

    with TestClient(app) as client:
        yield client

    if "app.main" in sys.modules:
        del sys.modules["app.main"]


@pytest.fixture
def configured_client(monkeypatch):
    """
    Create a FastAPI TestClient with Claude and Gemini keys in the
    environment and a mocked completion function.

    Yields (client, completion_mock). The mock answers "pong" by default.
    """
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
    monkeypatch.setenv("GOOGLE_API_KEY", "AIza-test")

    from app.config import get_settings

    get_settings.cache_clear()

    if "app.main" in sys.modules:
        del sys.modules["app.main"]

    from app.dispatcher import get_coordinator
    from app.main import app

    completion = AsyncMock(return_value="pong")
    get_coordinator()._complete = completion

    with TestClient(app) as client:
        yield client, completion

    if "app.main" in sys.modules:
        del sys.modules["app.main"]
