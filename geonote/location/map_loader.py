"""Map SDK boundary: resolve a provider kind to an opaque, memoized map handle."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from geonote.infra.observability.logger import get_logger
from geonote.location.errors import ConfigurationError
from geonote.location.map_config import MapConfig
from geonote.protocol.messages import CoordSystem, MapHandleDto, ProviderKind

logger = get_logger(__name__)

LEAFLET_JS = "https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"
LEAFLET_CSS = "https://unpkg.com/leaflet@1.9.4/dist/leaflet.css"
OSM_TILES = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
OSM_ATTRIBUTION = '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'


@dataclass(frozen=True)
class MapHandle:
    """Everything a rendering layer needs to load one provider's map SDK."""

    provider: ProviderKind
    coord_system: CoordSystem
    script_urls: tuple[str, ...] = field(default_factory=tuple)
    stylesheet_url: str | None = None
    tile_url_template: str | None = None
    attribution: str | None = None

    def to_dto(self) -> MapHandleDto:
        return MapHandleDto(
            provider=self.provider,
            coord_system=self.coord_system,
            script_urls=list(self.script_urls),
            stylesheet_url=self.stylesheet_url,
            tile_url_template=self.tile_url_template,
            attribution=self.attribution,
        )


class MapHandleRegistry:
    """`acquire` is idempotent per provider; concurrent first calls share one build."""

    def __init__(self, config: MapConfig) -> None:
        self._config = config
        self._handles: dict[ProviderKind, MapHandle] = {}
        self._pending: dict[ProviderKind, asyncio.Task[MapHandle]] = {}

    async def acquire(self, kind: ProviderKind) -> MapHandle:
        cached = self._handles.get(kind)
        if cached is not None:
            return cached
        task = self._pending.get(kind)
        if task is None:
            task = asyncio.ensure_future(self._build(kind))
            self._pending[kind] = task
        try:
            handle = await asyncio.shield(task)
        except ConfigurationError:
            # Failed builds are not memoized; a later call retries.
            self._pending.pop(kind, None)
            raise
        self._handles[kind] = handle
        self._pending.pop(kind, None)
        return handle

    async def _build(self, kind: ProviderKind) -> MapHandle:
        if kind == "amap":
            if not self._config.amap_api_key:
                raise ConfigurationError("Amap API key is required")
            handle = MapHandle(
                provider="amap",
                coord_system="gcj02",
                script_urls=(f"https://webapi.amap.com/maps?v=2.0&key={self._config.amap_api_key}",),
            )
        elif kind == "google":
            if not self._config.google_api_key:
                raise ConfigurationError("Google Maps API key is required")
            handle = MapHandle(
                provider="google",
                coord_system="wgs84",
                script_urls=(
                    "https://maps.googleapis.com/maps/api/js"
                    f"?key={self._config.google_api_key}&libraries=places,geocoding",
                ),
            )
        else:
            handle = MapHandle(
                provider="osm",
                coord_system="wgs84",
                script_urls=(LEAFLET_JS,),
                stylesheet_url=LEAFLET_CSS,
                tile_url_template=OSM_TILES,
                attribution=OSM_ATTRIBUTION,
            )
        logger.info("Map handle ready: provider=%s", kind)
        return handle
