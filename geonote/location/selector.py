"""Provider selection policy: forced mode, then location, then key availability."""

from __future__ import annotations

from collections.abc import Iterable

from geonote.location.coord_transform import is_inside_china
from geonote.location.map_config import MapConfig
from geonote.protocol.messages import ProviderKind


class ProviderSelector:
    """Pick one provider per call. Holds no state beyond config and the enabled set.

    Precedence, first match wins:
    1. forced mode whose client exists;
    2. auto mode with coordinates: China inside the box when available, else Global;
    3. Global, then China, then Open. Open is always enabled, so selection never fails.
    """

    def __init__(self, config: MapConfig, available: Iterable[ProviderKind]) -> None:
        self._config = config
        self._available = frozenset(available) | {"osm"}

    @property
    def available(self) -> frozenset[ProviderKind]:
        return self._available

    def select(self, latitude: float | None = None, longitude: float | None = None) -> ProviderKind:
        mode = self._config.provider
        if mode != "auto" and mode in self._available:
            return mode

        if mode == "auto" and latitude is not None and longitude is not None:
            if is_inside_china(latitude, longitude) and "amap" in self._available:
                return "amap"
            if "google" in self._available:
                return "google"

        if "google" in self._available:
            return "google"
        if "amap" in self._available:
            return "amap"
        return "osm"
