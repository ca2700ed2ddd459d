"""China provider: AMap (高德) web service API. Coordinates in and out are GCJ02."""

from __future__ import annotations

from typing import Any

import httpx

from geonote.infra.observability.logger import get_logger
from geonote.location.coord_transform import is_valid_point
from geonote.location.errors import ConfigurationError, ProviderError
from geonote.location.providers.http import fetch_json
from geonote.protocol.messages import LocationInfo, ProviderKind, ReverseGeocodeResult

logger = get_logger(__name__)


def _text(value: Any) -> str:
    """AMap returns `[]` instead of an empty string for missing fields."""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _parse_lnglat(raw: Any) -> tuple[float, float] | None:
    """解析高德 "lng,lat" 字符串为 (lat, lng)；越界坐标视为无效。"""
    if not isinstance(raw, str):
        return None
    parts = raw.split(",")
    if len(parts) != 2:
        return None
    try:
        lng = float(parts[0])
        lat = float(parts[1])
    except ValueError:
        return None
    if not is_valid_point(lat, lng):
        return None
    return lat, lng


def _poi_to_location(poi: dict[str, Any]) -> LocationInfo | None:
    point = _parse_lnglat(poi.get("location"))
    if point is None:
        return None
    address = _text(poi.get("address"))
    province = _text(poi.get("pname"))
    city = _text(poi.get("cityname"))
    district = _text(poi.get("adname"))
    distance = None
    raw_distance = _text(poi.get("distance"))
    if raw_distance:
        try:
            distance = f"{int(float(raw_distance))} 米"
        except ValueError:
            distance = None
    name = _text(poi.get("name"))
    return LocationInfo(
        id=_text(poi.get("id")),
        name=name,
        address=address,
        formatted_address=f"{province}{city}{district}{address}",
        latitude=point[0],
        longitude=point[1],
        distance=distance,
        type=_text(poi.get("type")) or None,
        poi_name=name,
        province=province,
        city=city,
        district=district,
        street=address,
    )


class AmapClient:
    """AMap place search / regeo client. Stateless after construction."""

    provider_id: ProviderKind = "amap"

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = "https://restapi.amap.com",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ConfigurationError("Amap API key is required")
        self._api_key = api_key.strip()
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        payload = await fetch_json(
            self._base_url + path,
            provider=self.provider_id,
            params={"key": self._api_key, **params},
            timeout_seconds=self._timeout_seconds,
            transport=self._transport,
        )
        if not isinstance(payload, dict):
            raise ProviderError(self.provider_id, "malformed response")
        if str(payload.get("status")) != "1":
            info = _text(payload.get("info")) or "location lookup failed"
            logger.warning("amap %s failed: info=%s infocode=%s", path, info, payload.get("infocode"))
            raise ProviderError(self.provider_id, info)
        return payload

    def _pois(self, payload: dict[str, Any]) -> list[LocationInfo]:
        raw = payload.get("pois")
        if not isinstance(raw, list):
            return []
        results: list[LocationInfo] = []
        for poi in raw:
            if not isinstance(poi, dict):
                continue
            item = _poi_to_location(poi)
            if item is not None:
                results.append(item)
        return results

    async def search_location(
        self,
        keyword: str,
        city: str | None = None,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        payload = await self._get(
            "/v5/place/text",
            {
                "keywords": keyword,
                "city": city or "",
                "pageSize": page_size,
                "extensions": "all",
            },
        )
        return self._pois(payload)

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        keywords: str | None = None,
        radius: int = 500,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        payload = await self._get(
            "/v5/place/around",
            {
                "location": f"{longitude},{latitude}",
                "keywords": keywords or "",
                "radius": radius,
                "pageSize": page_size,
                "extensions": "all",
            },
        )
        return self._pois(payload)

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        payload = await self._get(
            "/v3/geocode/regeo",
            {
                "location": f"{longitude},{latitude}",
                "radius": 1000,
                "extensions": "all",
                "poitype": "000000",
            },
        )
        regeocode = payload.get("regeocode")
        if not isinstance(regeocode, dict):
            raise ProviderError(self.provider_id, "no reverse geocode result")

        component = regeocode.get("addressComponent")
        if not isinstance(component, dict):
            component = {}
        street_number = component.get("streetNumber")
        street_name = _text(street_number.get("name")) if isinstance(street_number, dict) else ""
        district = _text(component.get("district"))
        township = _text(component.get("township"))
        aois = [a for a in regeocode.get("aois") or [] if isinstance(a, dict)]
        pois = [p for p in regeocode.get("pois") or [] if isinstance(p, dict)]

        # AOI (campus, mall) wins over the nearest single POI.
        poi_name: str | None = None
        if aois:
            aoi_name = _text(aois[0].get("name"))
            address = f"{district}{aoi_name}{township}{street_name}"
            poi_name = aoi_name or None
        elif pois:
            nearest_name = _text(pois[0].get("name"))
            address = f"{district}{nearest_name}{street_name}"
            poi_name = nearest_name or None
            nearest_distance = _text(pois[0].get("distance"))
            if poi_name and nearest_distance:
                poi_name = f"{poi_name} 附近 {nearest_distance} 米"
        else:
            address = f"{district}{street_name}"

        city_raw = component.get("city")
        if isinstance(city_raw, list):
            city = _text(city_raw[0]) if city_raw else ""
        else:
            city = _text(city_raw)
        nearest_distance = _text(pois[0].get("distance")) if pois else ""

        return ReverseGeocodeResult(
            address=address,
            formatted_address=_text(regeocode.get("formatted_address")),
            province=_text(component.get("province")),
            city=city,
            district=district,
            street=township,
            poi_name=poi_name,
            distance=f"{nearest_distance} 米" if nearest_distance else None,
        )

    async def input_tips(
        self,
        keyword: str,
        city: str | None = None,
        limit: int = 10,
    ) -> list[LocationInfo]:
        """输入提示：公交线路、品类词等没有坐标的提示会被丢弃。"""
        payload = await self._get(
            "/v3/assistant/inputtips",
            {
                "keywords": keyword,
                "city": city or "",
                "citylimit": "true" if city else None,
                "datatype": "all",
            },
        )
        raw = payload.get("tips")
        results: list[LocationInfo] = []
        if not isinstance(raw, list):
            return results
        for index, tip in enumerate(raw):
            if not isinstance(tip, dict):
                continue
            point = _parse_lnglat(tip.get("location"))
            if point is None:
                continue
            address = _text(tip.get("address"))
            district = _text(tip.get("district"))
            name = _text(tip.get("name"))
            results.append(
                LocationInfo(
                    id=_text(tip.get("id")) or f"amap_tip_{index}",
                    name=name,
                    address=address,
                    formatted_address=f"{district}{address}",
                    latitude=point[0],
                    longitude=point[1],
                    type="tip",
                    poi_name=name,
                    district=district or None,
                )
            )
            if len(results) >= limit:
                break
        return results

    async def geocode(self, address: str, city: str | None = None) -> list[LocationInfo]:
        payload = await self._get(
            "/v3/geocode/geo",
            {"address": address, "city": city or ""},
        )
        raw = payload.get("geocodes")
        results: list[LocationInfo] = []
        if not isinstance(raw, list):
            return results
        for index, geo in enumerate(raw):
            if not isinstance(geo, dict):
                continue
            point = _parse_lnglat(geo.get("location"))
            if point is None:
                continue
            formatted = _text(geo.get("formatted_address"))
            results.append(
                LocationInfo(
                    id=_text(geo.get("id")) or f"amap_geo_{index}",
                    name=formatted,
                    address=formatted,
                    formatted_address=formatted,
                    latitude=point[0],
                    longitude=point[1],
                    type=_text(geo.get("level")),
                    province=_text(geo.get("province")) or None,
                    city=_text(geo.get("city")) or None,
                    district=_text(geo.get("district")) or None,
                    street=_text(geo.get("street")) or None,
                )
            )
        return results
