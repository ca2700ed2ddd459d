"""Location facade: the single entry point for search, nearby, reverse and IP lookup."""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from geonote.infra.observability.logger import get_logger
from geonote.location.coord_transform import wgs84_to_gcj02
from geonote.location.errors import ConfigurationError
from geonote.location.ip_locator import IpLocator
from geonote.location.map_config import MapConfig
from geonote.location.map_loader import MapHandle, MapHandleRegistry
from geonote.location.providers.amap_client import AmapClient
from geonote.location.providers.base import LocationProvider
from geonote.location.providers.google_client import GoogleMapsClient
from geonote.location.providers.mock_client import MockLocationClient
from geonote.location.providers.osm_client import OpenStreetMapClient
from geonote.location.selector import ProviderSelector
from geonote.protocol.messages import LocationInfo, ProviderKind, ReverseGeocodeResult

logger = get_logger(__name__)


def build_provider_clients(
    config: MapConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[ProviderKind, LocationProvider]:
    """Instantiate every client whose prerequisites are met; Open is always present."""
    clients: dict[ProviderKind, LocationProvider] = {}
    try:
        clients["amap"] = AmapClient(
            config.amap_api_key,
            base_url=config.amap_base_url,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )
    except ConfigurationError:
        logger.warning("AMAP_WEB_API_KEY is not set; China provider disabled.")
    try:
        clients["google"] = GoogleMapsClient(
            config.google_api_key,
            base_url=config.google_base_url,
            language=config.language,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )
    except ConfigurationError:
        logger.warning("GOOGLE_MAPS_API_KEY is not set; Global provider disabled.")
    if config.use_mock:
        clients["osm"] = MockLocationClient(
            provider_id="osm",
            latency_seconds=config.mock_latency_seconds,
        )
    else:
        clients["osm"] = OpenStreetMapClient(
            base_url=config.nominatim_base_url,
            user_agent=config.nominatim_user_agent,
            timeout_seconds=config.timeout_seconds,
            transport=transport,
        )
    return clients


class LocationService:
    """Resolve a provider per call and delegate; exactly one provider answers each call.

    Coordinates are forwarded as given: a caller targeting the China provider
    sends GCJ02. With `convert_wgs84_input` on, inputs are read as WGS84 instead
    and shifted to GCJ02 when the China provider is selected, so GCJ02 inputs
    must not be combined with that flag.

    Results are returned as produced. Provider errors propagate; only
    `get_ip_location` swallows failures.
    """

    def __init__(
        self,
        config: MapConfig,
        *,
        clients: Mapping[ProviderKind, LocationProvider] | None = None,
        ip_locator: IpLocator | None = None,
        map_registry: MapHandleRegistry | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        if clients is None:
            clients = build_provider_clients(config, transport=transport)
        self._clients: dict[ProviderKind, LocationProvider] = dict(clients)
        if "osm" not in self._clients:
            self._clients["osm"] = OpenStreetMapClient(
                base_url=config.nominatim_base_url,
                user_agent=config.nominatim_user_agent,
                timeout_seconds=config.timeout_seconds,
                transport=transport,
            )
        self._selector = ProviderSelector(config, self._clients.keys())
        self._ip_locator = ip_locator or IpLocator(
            url=config.ip_location_url,
            timeout_seconds=config.ip_timeout_seconds,
            transport=transport,
        )
        self._map_registry = map_registry or MapHandleRegistry(config)

    @property
    def config(self) -> MapConfig:
        return self._config

    @property
    def enabled_providers(self) -> list[ProviderKind]:
        return sorted(self._selector.available)

    def select_provider(
        self,
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> ProviderKind:
        return self._selector.select(latitude, longitude)

    def _resolve(
        self,
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> tuple[ProviderKind, LocationProvider]:
        kind = self._selector.select(latitude, longitude)
        logger.debug("location provider selected: %s", kind)
        return kind, self._clients[kind]

    def _provider_coords(self, kind: ProviderKind, latitude: float, longitude: float) -> tuple[float, float]:
        """Shift WGS84 input to GCJ02 for the China provider when conversion is enabled."""
        if kind == "amap" and self._config.convert_wgs84_input:
            return wgs84_to_gcj02(latitude, longitude)
        return latitude, longitude

    async def search_location(
        self,
        keyword: str,
        city: str | None = None,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        _, client = self._resolve()
        return await client.search_location(keyword, city=city, page_size=page_size)

    async def search_nearby(
        self,
        latitude: float,
        longitude: float,
        keywords: str | None = None,
        radius: int = 500,
        page_size: int = 10,
    ) -> list[LocationInfo]:
        kind, client = self._resolve(latitude, longitude)
        lat, lon = self._provider_coords(kind, latitude, longitude)
        return await client.search_nearby(
            lat,
            lon,
            keywords=keywords,
            radius=radius,
            page_size=page_size,
        )

    async def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodeResult:
        kind, client = self._resolve(latitude, longitude)
        lat, lon = self._provider_coords(kind, latitude, longitude)
        return await client.reverse_geocode(lat, lon)

    async def geocode(self, address: str, city: str | None = None) -> list[LocationInfo]:
        _, client = self._resolve()
        return await client.geocode(address, city=city)

    async def input_tips(
        self,
        keyword: str,
        city: str | None = None,
        limit: int = 10,
    ) -> list[LocationInfo]:
        _, client = self._resolve()
        return await client.input_tips(keyword, city=city, limit=limit)

    async def get_ip_location(self) -> LocationInfo:
        """Approximate position from the caller's IP; zeroed location on any failure."""
        return await self._ip_locator.locate()

    async def acquire_map(
        self,
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> MapHandle:
        kind = self._selector.select(latitude, longitude)
        return await self._map_registry.acquire(kind)
