"""Open provider: OpenStreetMap Nominatim. Free, keyless, WGS84.

Nominatim's usage policy requires a descriptive User-Agent and allows roughly one
request per second; the rate limit is a policy obligation and is not enforced here.
"""

from __future__ import annotations

from typing import Any

import httpx

from geonote.infra.observability.logger import get_logger
from geonote.location.coord_transform import is_valid_point
from geonote.location.errors import ProviderError
from geonote.location.providers.http import fetch_json
from geonote.protocol.messages import LocationInfo, ProviderKind, ReverseGeocodeResult

logger = get_logger(__name__)


def _head(display_name: str) -> str:
    return display_name.split(",")[0].strip()


def _place_to_location(place: dict[str, Any], index: int) -> LocationInfo | None:
    try:
        lat = float(place["lat"])
        lon = float(place["lon"])
    except (KeyError, TypeError, ValueError):
        return None
    if not is_valid_point(lat, lon):
        return None
    display_name = str(place.get("display_name") or "")
    place_id = place.get("place_id")
    return LocationInfo(
        id=str(place_id) if place_id is not None else f"osm_{index}",
        name=_head(display_name),
        address=display_name,
        formatted_address=display_name,
        latitude=lat,
        longitude=lon,
        type=str(place.get("type") or "place"),
        poi_name=_head(display_name),
    )


class OpenStreetMapClient:
    """Nominatim search / reverse client; always constructible."""

    provider_id: ProviderKind = "osm"

    def __init__(
        self,
        *,
        base_url: str = "https://nominatim.openstreetmap.org",
        user_agent: str = "GeoNote/1.0",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {"User-Agent": user_agent}
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        payload = await fetch_json(
            self._base_url + path,
            provider=self.provider_id,
            params={**params, "format": "json", "addressdetails": 1},
            headers=self._headers,
            timeout_seconds=self._timeout_seconds,
            transport=self._transport,
        )
        if isinstance(payload, dict) and payload.get("error"):
            logger.warning("osm %s failed: %s", path, payload.get("error"))
            raise ProviderError(self.provider_id, str(payload.get("error")))
        return payload

    async def _search(self, query: str, limit: int) -> list[LocationInfo]:
        payload = await self._get("/search", {"q": query, "limit": limit})
        if not isinstance(payload, list):
            raise ProviderError(self.provider_id, "malformed response")
        results: list[LocationInfo] = []
        for index, place in enumerate(payload):
            if not isinstance(place, dict):
                continue
            item = _place_to_location(place, index)
            if item is not None:
                results.append(item)
        return results

    async def _reverse(self, latitude: float, longitude: float) -> dict[str, Any]:
        payload = await self._get("/reverse", {"lat": latitude, "lon": longitude})
        if not isinstance(payload, dict) or not payload.get("display_name"):
            raise ProviderError(self.provider_id, "no reverse geocode result")
        return payload

    async def search_location(
        self,
        keyword: str,
        city: str | None = None,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        query = f"{keyword}, {city}" if city else keyword
        return await self._search(query, page_size)

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        keywords: str | None = None,
        radius: int = 500,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        """Nominatim has no radius search: returns only the reverse-geocoded point.

        Callers get at most one result, tagged `type="current"`; `keywords`,
        `radius` and `page_size` are ignored.
        """
        place = await self._reverse(latitude, longitude)
        display_name = str(place.get("display_name") or "")
        try:
            lat = float(place.get("lat", latitude))
            lon = float(place.get("lon", longitude))
        except (TypeError, ValueError):
            lat, lon = latitude, longitude
        if not is_valid_point(lat, lon):
            lat, lon = latitude, longitude
        place_id = place.get("place_id")
        return [
            LocationInfo(
                id=f"osm_current_{place_id}" if place_id is not None else "osm_current",
                name=_head(display_name),
                address=display_name,
                formatted_address=display_name,
                latitude=lat,
                longitude=lon,
                distance="0 米",
                type="current",
                poi_name=_head(display_name),
            )
        ]

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        place = await self._reverse(latitude, longitude)
        display_name = str(place.get("display_name") or "")
        address = place.get("address")
        if not isinstance(address, dict):
            address = {}
        first_part = _head(display_name)
        return ReverseGeocodeResult(
            address=first_part,
            formatted_address=display_name,
            province=str(address.get("state") or address.get("country") or ""),
            city=str(address.get("city") or address.get("town") or address.get("village") or ""),
            district=str(address.get("suburb") or address.get("district") or ""),
            street=str(address.get("road") or address.get("street") or ""),
            poi_name=first_part or None,
        )

    async def input_tips(
        self,
        keyword: str,
        city: str | None = None,
        limit: int = 10,
    ) -> list[LocationInfo]:
        query = f"{keyword}, {city}" if city else keyword
        return await self._search(query, limit)

    async def geocode(self, address: str, city: str | None = None) -> list[LocationInfo]:
        query = f"{address}, {city}" if city else address
        return await self._search(query, 10)
