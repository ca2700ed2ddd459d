"""Composition layer: build and hold long-lived service objects for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass

from geonote.core.config import Settings
from geonote.location.map_config import MapConfig, resolve_map_config
from geonote.location.service import LocationService


@dataclass
class AppContainer:
    """Container object attached to FastAPI app state."""

    settings: Settings
    map_config: MapConfig
    location_service: LocationService


def build_container(settings: Settings) -> AppContainer:
    """Construct runtime dependencies in one place."""
    map_config = resolve_map_config(settings)
    location_service = LocationService(map_config)
    return AppContainer(
        settings=settings,
        map_config=map_config,
        location_service=location_service,
    )
