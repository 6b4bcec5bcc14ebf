"""
Test Fixtures

Shared test data and helpers for the AI Aggregate test suite.
Contains canned provider envelopes and a controllable completion function.
"""

import asyncio

from app.registry.providers import ProviderId


# Success envelopes, one per provider, each carrying the text "pong"
SUCCESS_BODIES = {
    ProviderId.CLAUDE: {
        "id": "msg_01",
        "type": "message",
        "content": [{"type": "text", "text": "pong"}],
    },
    ProviderId.CHATGPT: {
        "id": "chatcmpl-1",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": "pong"}}],
    },
    ProviderId.GEMINI: {
        "candidates": [{"content": {"role": "model", "parts": [{"text": "pong"}]}}],
    },
    ProviderId.GROK: {
        "id": "resp_1",
        "output": [
            {"type": "message", "content": [{"type": "output_text", "text": "pong"}]}
        ],
    },
}

BAD_KEY_BODY = {"error": {"message": "bad key"}}


async def settle(rounds: int = 5) -> None:
    """Yield to the event loop a few times so ready tasks can run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class ControlledCompletion:
    """
    Stand-in for app.dispatcher.handlers.complete.

    Each call records (provider_id, prompt, credential) and suspends until
    the test calls resolve() or fail() for that provider.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[ProviderId, str, str]] = []
        self._pending: dict[ProviderId, asyncio.Future] = {}

    async def __call__(self, provider_id: ProviderId, prompt: str, credential: str) -> str:
        self.calls.append((provider_id, prompt, credential))
        future = asyncio.get_running_loop().create_future()
        self._pending[provider_id] = future
        return await future

    @property
    def pending(self) -> list[ProviderId]:
        return list(self._pending)

    def credential_for(self, provider_id: ProviderId) -> list[str]:
        return [c for pid, _, c in self.calls if pid == provider_id]

    def resolve(self, provider_id: ProviderId, text: str) -> None:
        self._pending.pop(provider_id).set_result(text)

    def fail(self, provider_id: ProviderId, exc: BaseException) -> None:
        self._pending.pop(provider_id).set_exception(exc)
