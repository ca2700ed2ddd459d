"""Common contract implemented by every geocoding provider client."""

from __future__ import annotations

from typing import Protocol

from geonote.protocol.messages import LocationInfo, ProviderKind, ReverseGeocodeResult


class LocationProvider(Protocol):
    """One external (or offline) geocoding backend.

    Each operation performs at most one outbound HTTP call; no retries, no caching.
    Failures surface as `NetworkError` or `ProviderError`.
    """

    provider_id: ProviderKind

    async def search_location(
        self,
        keyword: str,
        city: str | None = None,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        """Free-text place search, in the provider's own relevance order."""
        ...

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        keywords: str | None = None,
        radius: int = 500,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        """Places within `radius` meters of a point."""
        ...

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        """Resolve a point to an address / POI description."""
        ...

    async def geocode(self, address: str, city: str | None = None) -> list[LocationInfo]:
        """Resolve a structured address to candidate points."""
        ...

    async def input_tips(
        self,
        keyword: str,
        city: str | None = None,
        limit: int = 10,
    ) -> list[LocationInfo]:
        """Autocomplete suggestions for a partial keyword; tips without coordinates are dropped."""
        ...
