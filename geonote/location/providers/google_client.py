"""Global provider: Google Maps Places / Geocoding web services (WGS84)."""

from __future__ import annotations

from typing import Any

import httpx

from geonote.infra.observability.logger import get_logger
from geonote.location.coord_transform import is_valid_point
from geonote.location.errors import ConfigurationError, ProviderError
from geonote.location.providers.http import fetch_json
from geonote.protocol.messages import LocationInfo, ProviderKind, ReverseGeocodeResult

logger = get_logger(__name__)


def _lat_lng(place: dict[str, Any]) -> tuple[float, float] | None:
    geometry = place.get("geometry")
    location = geometry.get("location") if isinstance(geometry, dict) else None
    if not isinstance(location, dict):
        return None
    try:
        lat, lng = float(location["lat"]), float(location["lng"])
    except (KeyError, TypeError, ValueError):
        return None
    return (lat, lng) if is_valid_point(lat, lng) else None


def _component(components: list[dict[str, Any]], types: list[str]) -> str:
    """Return long_name of the first component matching any of `types`."""
    for item in components:
        item_types = item.get("types") or []
        if any(t in item_types for t in types):
            return str(item.get("long_name") or "")
    return ""


class GoogleMapsClient:
    """Google Maps web service client. Stateless after construction."""

    provider_id: ProviderKind = "google"

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = "https://maps.googleapis.com/maps/api",
        language: str = "en",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ConfigurationError("Google Maps API key is required")
        self._api_key = api_key.strip()
        self._base_url = base_url.rstrip("/")
        self._language = language
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def _get(self, path: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        payload = await fetch_json(
            self._base_url + path,
            provider=self.provider_id,
            params={**params, "key": self._api_key, "language": self._language},
            timeout_seconds=self._timeout_seconds,
            transport=self._transport,
        )
        if not isinstance(payload, dict):
            raise ProviderError(self.provider_id, "malformed response")
        status = str(payload.get("status") or "")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            logger.warning("google %s failed: status=%s", path, status)
            raise ProviderError(self.provider_id, status or "location lookup failed")
        results = payload.get("results")
        if not isinstance(results, list):
            return []
        return [r for r in results if isinstance(r, dict)]

    def _place(self, place: dict[str, Any], *, address: str, formatted: str) -> LocationInfo | None:
        point = _lat_lng(place)
        if point is None:
            return None
        name = str(place.get("name") or "")
        return LocationInfo(
            id=str(place.get("place_id") or ""),
            name=name,
            address=address,
            formatted_address=formatted,
            latitude=point[0],
            longitude=point[1],
            type="place",
            poi_name=name,
        )

    async def _text_search(self, keyword: str, city: str | None, limit: int) -> list[LocationInfo]:
        # textsearch has no city parameter.
        query = f"{keyword} {city}" if city else keyword
        results = await self._get(
            "/place/textsearch/json",
            {"query": query, "fields": "place_id,name,formatted_address,geometry"},
        )
        items: list[LocationInfo] = []
        for place in results:
            formatted = str(place.get("formatted_address") or "")
            item = self._place(place, address=formatted, formatted=formatted)
            if item is not None:
                items.append(item)
            if len(items) >= limit:
                break
        return items

    async def search_location(
        self,
        keyword: str,
        city: str | None = None,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        return await self._text_search(keyword, city, page_size)

    async def input_tips(
        self,
        keyword: str,
        city: str | None = None,
        limit: int = 10,
    ) -> list[LocationInfo]:
        """Place Autocomplete predictions carry no geometry, so tips come from textsearch."""
        return await self._text_search(keyword, city, limit)

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        keywords: str | None = None,
        radius: int = 500,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        results = await self._get(
            "/place/nearbysearch/json",
            {
                "location": f"{latitude},{longitude}",
                "radius": radius,
                "keyword": keywords or "",
            },
        )
        items: list[LocationInfo] = []
        for place in results[:page_size]:
            vicinity = str(place.get("vicinity") or "")
            item = self._place(
                place,
                address=vicinity,
                formatted=vicinity or str(place.get("name") or ""),
            )
            if item is not None:
                items.append(item)
        return items

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        results = await self._get("/geocode/json", {"latlng": f"{latitude},{longitude}"})
        if not results:
            raise ProviderError(self.provider_id, "no reverse geocode result")
        first = results[0]
        components = [c for c in first.get("address_components") or [] if isinstance(c, dict)]
        formatted = str(first.get("formatted_address") or "")
        return ReverseGeocodeResult(
            address=formatted,
            formatted_address=formatted,
            province=_component(components, ["administrative_area_level_1", "country"]),
            city=_component(
                components,
                ["locality", "administrative_area_level_2", "administrative_area_level_1"],
            ),
            district=_component(
                components, ["administrative_area_level_3", "administrative_area_level_2"]
            ),
            street=_component(components, ["route", "street_address"]),
            poi_name=_component(components, ["establishment", "point_of_interest"]) or None,
        )

    async def geocode(self, address: str, city: str | None = None) -> list[LocationInfo]:
        params: dict[str, Any] = {"address": address}
        if city:
            params["components"] = f"locality:{city}"
        results = await self._get("/geocode/json", params)
        items: list[LocationInfo] = []
        for result in results:
            point = _lat_lng(result)
            if point is None:
                continue
            formatted = str(result.get("formatted_address") or "")
            types = result.get("types") or []
            items.append(
                LocationInfo(
                    id=str(result.get("place_id") or ""),
                    name=formatted,
                    address=formatted,
                    formatted_address=formatted,
                    latitude=point[0],
                    longitude=point[1],
                    type=str(types[0]) if types else "place",
                )
            )
        return items
