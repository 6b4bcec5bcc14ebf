"""
Conversation State Store

Holds one independent slice of state per provider:
- the transcript (ordered, append-only list of turns)
- the dispatch state (in-flight flag and last error)

The dispatch coordinator is the only writer; the HTTP API and CLI read
snapshots. All access happens on the event loop thread, and every
mutation is scoped to a single provider's slice, so no lock is held.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from app.registry.providers import ProviderId, get_provider_registry


class Speaker(str, Enum):
    """Who produced a turn."""

    USER = "user"
    ASSISTANT = "assistant"


class DispatchStatus(str, Enum):
    """Per-provider dispatch state machine: IDLE -> IN_FLIGHT -> IDLE."""

    IDLE = "idle"
    IN_FLIGHT = "in_flight"


@dataclass(frozen=True)
class Turn:
    """One immutable entry in a provider's transcript."""

    speaker: Speaker
    text: str


@dataclass(frozen=True)
class DispatchState:
    """
    Snapshot of one provider's dispatch state.

    Attributes:
        in_flight: Whether a completion is outstanding for the provider
        last_error: Error text from the provider's last round, if it failed
    """

    in_flight: bool = False
    last_error: str | None = None

    @property
    def status(self) -> DispatchStatus:
        """State machine position derived from the in-flight flag."""
        return DispatchStatus.IN_FLIGHT if self.in_flight else DispatchStatus.IDLE


@dataclass(frozen=True)
class ConversationView:
    """Read-only view of one provider's slice, as handed to presentation."""

    provider_id: ProviderId
    transcript: tuple[Turn, ...]
    state: DispatchState


@dataclass
class _ProviderSlice:
    """Internal mutable state for one provider."""

    transcript: list[Turn] = field(default_factory=list)
    in_flight: bool = False
    last_error: str | None = None


class ConversationStore:
    """
    Per-provider transcripts and dispatch states.

    Every read returns a copy, so callers can never mutate a slice
    behind the coordinator's back.

    Example:
        store = ConversationStore([ProviderId.CLAUDE, ProviderId.GROK])
        store.append_turn(ProviderId.CLAUDE, Turn(Speaker.USER, "hi"))
        store.transcript(ProviderId.CLAUDE)  # (Turn(USER, "hi"),)
    """

    def __init__(self, provider_ids: Iterable[ProviderId]):
        self._slices: dict[ProviderId, _ProviderSlice] = {
            ProviderId(pid): _ProviderSlice() for pid in provider_ids
        }

    def _slice(self, provider_id: ProviderId | str) -> _ProviderSlice:
        try:
            return self._slices[ProviderId(provider_id)]
        except ValueError:
            raise KeyError(provider_id) from None

    @property
    def provider_ids(self) -> list[ProviderId]:
        """Provider IDs held by the store, in registry order."""
        return list(self._slices)

    def append_turn(self, provider_id: ProviderId | str, turn: Turn) -> None:
        """Append a turn to one provider's transcript."""
        self._slice(provider_id).transcript.append(turn)

    def set_in_flight(self, provider_id: ProviderId | str, in_flight: bool) -> None:
        """Set one provider's in-flight flag."""
        self._slice(provider_id).in_flight = in_flight

    def set_error(self, provider_id: ProviderId | str, message: str | None) -> None:
        """Record (or clear, with None) one provider's last error."""
        self._slice(provider_id).last_error = message

    def clear_errors(self, provider_ids: Iterable[ProviderId] | None = None) -> None:
        """Clear the last error of the given providers (default: every provider)."""
        if provider_ids is None:
            provider_ids = self._slices
        for pid in provider_ids:
            self._slice(pid).last_error = None

    def transcript(self, provider_id: ProviderId | str) -> tuple[Turn, ...]:
        """Return a copy of one provider's transcript."""
        return tuple(self._slice(provider_id).transcript)

    def dispatch_state(self, provider_id: ProviderId | str) -> DispatchState:
        """Return a snapshot of one provider's dispatch state."""
        provider_slice = self._slice(provider_id)
        return DispatchState(
            in_flight=provider_slice.in_flight,
            last_error=provider_slice.last_error,
        )

    def view(self, provider_id: ProviderId | str) -> ConversationView:
        """Return transcript and dispatch state of one provider together."""
        return ConversationView(
            provider_id=ProviderId(provider_id),
            transcript=self.transcript(provider_id),
            state=self.dispatch_state(provider_id),
        )

    def snapshot(self) -> list[ConversationView]:
        """Return a view of every provider, in registry order."""
        return [self.view(pid) for pid in self._slices]

    def any_in_flight(self) -> bool:
        """Whether any provider has an outstanding completion."""
        return any(s.in_flight for s in self._slices.values())

    def reset(self) -> None:
        """
        Clear all transcripts and states.

        Primarily used for testing.
        """
        for pid in self._slices:
            self._slices[pid] = _ProviderSlice()


_store: ConversationStore | None = None


def get_conversation_store() -> ConversationStore:
    """
    Get the global conversation store instance.

    Returns:
        Singleton ConversationStore covering every registered provider
    """
    global _store
    if _store is None:
        _store = ConversationStore(get_provider_registry().get_provider_ids())
    return _store
