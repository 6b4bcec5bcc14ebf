"""
Credential Store

Two-phase credential configuration:
- the committed snapshot is what the dispatcher reads
- the draft snapshot is what the settings view edits

Both snapshots are immutable mappings of provider ID to SecretStr. Edits
build a new draft; commit swaps the committed snapshot for the draft in a
single assignment, so a dispatch round sees either the old set or the new
one, never a mix. Calls already in flight keep the key they were given.
"""

import logging
from types import MappingProxyType
from typing import Iterable, Mapping

from pydantic import SecretStr

from app.config import get_settings
from app.registry.providers import ProviderId, get_provider_registry

logger = logging.getLogger(__name__)


CredentialSnapshot = Mapping[ProviderId, SecretStr]


def _freeze(
    provider_ids: Iterable[ProviderId],
    values: Mapping[ProviderId, SecretStr | str | None],
) -> CredentialSnapshot:
    """Build an immutable snapshot holding a SecretStr for every provider."""
    by_id = {ProviderId(pid): value for pid, value in values.items()}
    frozen: dict[ProviderId, SecretStr] = {}
    for pid in provider_ids:
        value = by_id.get(pid)
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        frozen[pid] = SecretStr((value or "").strip())
    return MappingProxyType(frozen)


class CredentialStore:
    """
    Committed and draft credential sets, keyed by provider ID.

    A provider whose committed key is empty is "not configured": it is
    hidden from the visible provider list and skipped on dispatch.

    Example:
        creds = CredentialStore([ProviderId.CLAUDE, ProviderId.GEMINI])
        creds.open_draft()
        creds.edit_draft(ProviderId.CLAUDE, "sk-ant-...")
        creds.commit()
        creds.configured_providers()  # [ProviderId.CLAUDE]
    """

    def __init__(
        self,
        provider_ids: Iterable[ProviderId],
        initial: Mapping[ProviderId, SecretStr | str | None] | None = None,
    ):
        self._provider_ids = [ProviderId(pid) for pid in provider_ids]
        self._committed = _freeze(self._provider_ids, initial or {})
        self._draft = self._committed

    def _check(self, provider_id: ProviderId | str) -> ProviderId:
        try:
            pid = ProviderId(provider_id)
        except ValueError:
            raise KeyError(provider_id) from None
        if pid not in self._provider_ids:
            raise KeyError(provider_id)
        return pid

    @property
    def committed(self) -> CredentialSnapshot:
        """The credential set used for dispatch."""
        return self._committed

    @property
    def draft(self) -> CredentialSnapshot:
        """The credential set being edited, not yet applied."""
        return self._draft

    def open_draft(self) -> CredentialSnapshot:
        """Start editing: the draft becomes a copy of the committed set."""
        self._draft = self._committed
        return self._draft

    def edit_draft(self, provider_id: ProviderId | str, value: str) -> CredentialSnapshot:
        """
        Replace one provider's key in the draft.

        Args:
            provider_id: Provider whose key is edited
            value: New key; empty string clears it

        Returns:
            The new draft snapshot

        Raises:
            KeyError: If the provider is not registered
        """
        pid = self._check(provider_id)
        updated = dict(self._draft)
        updated[pid] = value
        self._draft = _freeze(self._provider_ids, updated)
        return self._draft

    def commit(self) -> list[ProviderId]:
        """
        Apply the draft as the new committed set.

        Returns:
            Provider IDs that are configured after the commit
        """
        self._committed = self._draft
        configured = self.configured_providers()
        logger.info(
            "Credentials committed; configured providers: "
            f"{[pid.value for pid in configured] or 'none'}"
        )
        return configured

    def discard_draft(self) -> None:
        """Abandon draft edits; the draft reverts to the committed set."""
        self._draft = self._committed

    def get(self, provider_id: ProviderId | str) -> str:
        """Return one provider's committed key ("" when not configured)."""
        pid = self._check(provider_id)
        return self._committed[pid].get_secret_value()

    def is_configured(self, provider_id: ProviderId | str) -> bool:
        """Whether a provider has a non-empty committed key."""
        return bool(self.get(provider_id))

    def draft_has_value(self, provider_id: ProviderId | str) -> bool:
        """Whether a provider has a non-empty key in the draft."""
        pid = self._check(provider_id)
        return bool(self._draft[pid].get_secret_value())

    def configured_providers(self) -> list[ProviderId]:
        """Configured providers in registry order (the visible provider list)."""
        return [pid for pid in self._provider_ids if self._committed[pid].get_secret_value()]


_credential_store: CredentialStore | None = None


def get_credential_store() -> CredentialStore:
    """
    Get the global credential store instance.

    The committed set is seeded from provider keys found in the
    environment (see Settings).

    Returns:
        Singleton CredentialStore instance
    """
    global _credential_store
    if _credential_store is None:
        settings = get_settings()
        keys = settings.provider_keys()
        _credential_store = CredentialStore(
            get_provider_registry().get_provider_ids(),
            initial={ProviderId(pid): key for pid, key in keys.items()},
        )
    return _credential_store
