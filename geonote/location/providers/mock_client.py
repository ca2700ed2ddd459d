"""Offline provider: deterministic in-memory POIs for tests and key-less runs."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from geonote.infra.observability.logger import get_logger
from geonote.location.coord_transform import format_meters, haversine_meters
from geonote.protocol.messages import LocationInfo, ProviderKind, ReverseGeocodeResult

logger = get_logger(__name__)

DEFAULT_FIXTURES = Path(__file__).resolve().parent / "fixtures" / "mock_pois.yaml"
FALLBACK_RESULT_COUNT = 5


@dataclass(frozen=True)
class MockPoi:
    id: str
    name: str
    address: str
    formatted_address: str
    latitude: float
    longitude: float
    province: str
    city: str
    district: str
    street: str

    def matches(self, keyword: str) -> bool:
        return (
            keyword in self.name
            or keyword in self.address
            or keyword in self.formatted_address
        )

    def to_location(self, distance_m: float | None = None) -> LocationInfo:
        return LocationInfo(
            id=self.id,
            name=self.name,
            address=self.address,
            formatted_address=self.formatted_address,
            latitude=self.latitude,
            longitude=self.longitude,
            distance=format_meters(distance_m) if distance_m is not None else None,
            type="mock",
            poi_name=self.name,
            province=self.province,
            city=self.city,
            district=self.district,
            street=self.street,
        )


def load_mock_pois(path: Path = DEFAULT_FIXTURES) -> list[MockPoi]:
    """Parse the YAML fixture file into POIs; rows missing coordinates are skipped."""
    if not path.exists():
        raise FileNotFoundError(f"Mock POI fixture file not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        return []
    defaults: dict[str, Any] = raw.get("defaults") if isinstance(raw.get("defaults"), dict) else {}
    pois: list[MockPoi] = []
    for row in raw.get("pois") or []:
        if not isinstance(row, dict):
            continue
        try:
            lat = float(row["latitude"])
            lon = float(row["longitude"])
        except (KeyError, TypeError, ValueError):
            continue
        pois.append(
            MockPoi(
                id=str(row.get("id") or f"mock_{len(pois)}"),
                name=str(row.get("name") or ""),
                address=str(row.get("address") or ""),
                formatted_address=str(row.get("formatted_address") or ""),
                latitude=lat,
                longitude=lon,
                province=str(row.get("province") or defaults.get("province") or ""),
                city=str(row.get("city") or defaults.get("city") or ""),
                district=str(row.get("district") or ""),
                street=str(row.get("street") or ""),
            )
        )
    return pois


class MockLocationClient:
    """Satisfies the provider contract without network I/O.

    Every call sleeps `latency_seconds` so async call sites behave as with a
    real provider. `search_location` never returns an empty list: when nothing
    matches it returns the first fixtures instead (test convenience).

    Fixture coordinates are GCJ02 (AMap-sourced Beijing points). In mock mode
    this client fills the Open slot, whose map handle still reports `wgs84`
    for the Leaflet/OSM tiles, so markers drawn from these results sit a few
    hundred meters off on that map.
    """

    def __init__(
        self,
        *,
        provider_id: ProviderKind = "amap",
        pois: list[MockPoi] | None = None,
        latency_seconds: float = 0.3,
    ) -> None:
        self.provider_id = provider_id
        self._pois = pois if pois is not None else load_mock_pois()
        if not self._pois:
            raise ValueError("mock provider needs at least one fixture POI")
        self._latency_seconds = latency_seconds
        logger.info("Mock location provider active with %d fixtures", len(self._pois))

    async def _delay(self) -> None:
        if self._latency_seconds > 0:
            await asyncio.sleep(self._latency_seconds)

    def _ranked(self, latitude: float, longitude: float) -> list[tuple[MockPoi, float]]:
        return sorted(
            ((poi, haversine_meters(latitude, longitude, poi.latitude, poi.longitude)) for poi in self._pois),
            key=lambda pair: pair[1],
        )

    async def search_location(
        self,
        keyword: str,
        city: str | None = None,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        await self._delay()
        matched = [poi for poi in self._pois if poi.matches(keyword)]
        if not matched:
            matched = self._pois[:FALLBACK_RESULT_COUNT]
        origin = self._pois[0]
        return [
            poi.to_location(haversine_meters(origin.latitude, origin.longitude, poi.latitude, poi.longitude))
            for poi in matched[:page_size]
        ]

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        keywords: str | None = None,
        radius: int = 500,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        await self._delay()
        ranked = self._ranked(latitude, longitude)
        return [poi.to_location(distance) for poi, distance in ranked[:page_size]]

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        await self._delay()
        nearest, distance = self._ranked(latitude, longitude)[0]
        return ReverseGeocodeResult(
            address=nearest.address,
            formatted_address=nearest.formatted_address,
            province=nearest.province,
            city=nearest.city,
            district=nearest.district,
            street=nearest.street,
            poi_name=nearest.name,
            distance=format_meters(distance),
        )

    async def input_tips(
        self,
        keyword: str,
        city: str | None = None,
        limit: int = 10,
    ) -> list[LocationInfo]:
        """Substring match on name or address; unlike search there is no fallback list."""
        await self._delay()
        matched = [poi for poi in self._pois if keyword in poi.name or keyword in poi.address]
        return [poi.to_location() for poi in matched[:limit]]

    async def geocode(self, address: str, city: str | None = None) -> list[LocationInfo]:
        await self._delay()
        matched = [poi.to_location() for poi in self._pois if poi.matches(address)]
        if matched:
            return matched
        origin = self._pois[0]
        return [
            LocationInfo(
                id="mock_geocode",
                name=address,
                address=address,
                formatted_address=f"{origin.city}{address}",
                latitude=origin.latitude,
                longitude=origin.longitude,
                type="mock",
            )
        ]
