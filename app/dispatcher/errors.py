"""
Provider error taxonomy.

Every failure an adapter can produce is a ProviderError. The coordinator
catches them at the per-provider boundary and records the message as that
provider's last error; none of them escape a dispatch round.
"""

UNKNOWN_ERROR_MESSAGE = "Unknown error"
GENERIC_ERROR_MESSAGE = "An error occurred"


class ProviderError(Exception):
    """
    Base class for provider call failures.

    Attributes:
        provider: Provider ID the failure belongs to
        status_code: HTTP status of the failed call, if one was received
        message: Human-readable error text
    """

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        self.provider = provider
        self.message = message
        self.status_code = status_code
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.status_code} - {self.message}"
        return self.message


class MissingCredentialError(ProviderError):
    """Raised before any network call when a provider has no API key."""

    def __init__(self, provider: str, display_name: str | None = None) -> None:
        name = display_name or provider
        super().__init__(
            provider,
            f"{name} API key not set. Please configure it in settings.",
        )


class TransportError(ProviderError):
    """Network failure, or a non-2xx response from the provider."""


class MalformedResponseError(ProviderError):
    """A 2xx response whose body does not match the provider's envelope."""


class GenericError(ProviderError):
    """Catch-all for failures that fit no other category."""

    def __init__(self, provider: str, message: str = GENERIC_ERROR_MESSAGE) -> None:
        super().__init__(provider, message)
