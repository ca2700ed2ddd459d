"""Error taxonomy for geocoding provider calls."""

from __future__ import annotations


class LocationError(RuntimeError):
    """Base class for every location lookup failure."""


class NetworkError(LocationError):
    """Raised on timeout, DNS or connection failure talking to a provider."""

    def __init__(self, provider: str, message: str = "location service unavailable") -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ProviderError(LocationError):
    """Raised when a provider answers with a non-success status or unusable body."""

    def __init__(self, provider: str, message: str = "location lookup failed") -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message


class ConfigurationError(LocationError):
    """Raised when a provider client is built without its required API key."""
