"""
Dispatch Coordinator - fan one prompt out to every configured provider.

A submission turns into one asyncio task per provider that has a
committed API key. Each task owns exactly one provider ID and writes only
to that provider's slice of the conversation store:

    submit("ping")
      -> user turn appended, errors cleared, providers marked in flight
      -> task(claude)  ... resolves -> assistant turn | last_error -> idle
      -> task(gemini)  ... resolves -> assistant turn | last_error -> idle

Tasks start in registry order and may finish in any order. Nothing is
cancelled or retried: a task runs until its single HTTP call resolves.
A new submission is rejected while any provider is still in flight.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable

from app.config import get_settings
from app.dispatcher.errors import GENERIC_ERROR_MESSAGE, GenericError, ProviderError
from app.dispatcher.handlers import complete
from app.registry.providers import ProviderId
from app.state.conversations import (
    ConversationStore,
    Speaker,
    Turn,
    get_conversation_store,
)
from app.state.credentials import CredentialStore, get_credential_store

logger = logging.getLogger(__name__)

CompletionFn = Callable[[ProviderId, str, str], Awaitable[str]]


class RejectionReason(str, Enum):
    """Why a submission was not accepted."""

    EMPTY_PROMPT = "empty_prompt"
    NO_CREDENTIALS = "no_credentials"
    BUSY = "busy"


class DispatchCoordinator:
    """
    Per-provider dispatch and state reconciliation.

    Attributes:
        _store: Conversation state the coordinator writes to
        _credentials: Credential store read at submission time
        _complete: Adapter entry point, `(provider_id, prompt, key) -> text`
        _replicate_to_all: Append user turns to unconfigured providers too
        _tasks: Outstanding dispatch tasks (kept referenced until done)
        _last_round: Providers dispatched by the last accepted submission
    """

    def __init__(
        self,
        store: ConversationStore,
        credentials: CredentialStore,
        complete_fn: CompletionFn = complete,
        replicate_to_all: bool = False,
    ) -> None:
        self._store = store
        self._credentials = credentials
        self._complete = complete_fn
        self._replicate_to_all = replicate_to_all
        self._tasks: set[asyncio.Task] = set()
        self._last_round: list[ProviderId] = []

    @property
    def is_busy(self) -> bool:
        """Whether any provider still has a completion outstanding."""
        return self._store.any_in_flight()

    def dispatched_providers(self) -> list[ProviderId]:
        """Providers dispatched by the last accepted submission."""
        return list(self._last_round)

    def rejection_reason(self, prompt: str) -> RejectionReason | None:
        """
        Check submission preconditions without changing any state.

        Args:
            prompt: Prompt text as typed by the user.

        Returns:
            The first failed precondition, or None if the prompt would be
            accepted.
        """
        if not prompt or not prompt.strip():
            return RejectionReason.EMPTY_PROMPT
        if self.is_busy:
            return RejectionReason.BUSY
        if not self._credentials.configured_providers():
            return RejectionReason.NO_CREDENTIALS
        return None

    def submit(self, prompt: str) -> bool:
        """
        Send a prompt to every configured provider concurrently.

        Must be called from a running event loop. The user turn, cleared
        errors and in-flight flags are all in place when this returns;
        completions land later, one provider at a time.

        Args:
            prompt: Prompt text as typed by the user.

        Returns:
            True if the prompt was dispatched, False if a precondition
            failed (in which case nothing was changed).
        """
        asyncio.get_running_loop()

        reason = self.rejection_reason(prompt)
        if reason is not None:
            logger.debug(f"Submission rejected: {reason.value}")
            return False

        # Keys are captured here; later commits only affect the next round.
        targets = [
            (pid, self._credentials.get(pid))
            for pid in self._credentials.configured_providers()
        ]

        user_turn = Turn(Speaker.USER, prompt)
        recipients = (
            self._store.provider_ids
            if self._replicate_to_all
            else [pid for pid, _ in targets]
        )
        for pid in recipients:
            self._store.append_turn(pid, user_turn)

        self._store.clear_errors(recipients)

        for pid, credential in targets:
            self._store.set_in_flight(pid, True)
            task = asyncio.create_task(
                self._run(pid, prompt, credential), name=f"dispatch-{pid.value}"
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        self._last_round = [pid for pid, _ in targets]
        logger.info(
            f"Prompt dispatched to {len(targets)} provider(s): "
            f"{', '.join(pid.value for pid in self._last_round)}"
        )
        return True

    async def _run(self, provider_id: ProviderId, prompt: str, credential: str) -> None:
        """Run one provider's completion and reconcile it into its own slice."""
        try:
            text = await self._complete(provider_id, prompt, credential)
        except ProviderError as e:
            logger.warning(f"{provider_id.value} dispatch failed: {e}")
            self._store.set_error(provider_id, str(e) or GENERIC_ERROR_MESSAGE)
        except Exception:
            logger.exception(f"Unexpected failure dispatching to {provider_id.value}")
            self._store.set_error(provider_id, str(GenericError(provider_id.value)))
        else:
            self._store.append_turn(provider_id, Turn(Speaker.ASSISTANT, text))
        finally:
            self._store.set_in_flight(provider_id, False)

    async def wait_idle(self) -> None:
        """Wait for every outstanding dispatch task to finish (never cancels)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


_coordinator: DispatchCoordinator | None = None


def get_coordinator() -> DispatchCoordinator:
    """
    Get the global dispatch coordinator instance.

    Wires the global conversation and credential stores to the provider
    adapters.

    Returns:
        Singleton DispatchCoordinator instance
    """
    global _coordinator
    if _coordinator is None:
        settings = get_settings()
        _coordinator = DispatchCoordinator(
            store=get_conversation_store(),
            credentials=get_credential_store(),
            replicate_to_all=settings.replicate_prompt_to_all_providers,
        )
    return _coordinator
