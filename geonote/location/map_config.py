"""Map provider config resolver: the immutable view of Settings used by the facade."""

from __future__ import annotations

from dataclasses import dataclass
from typing import get_args

from geonote.core.config import Settings
from geonote.protocol.messages import ProviderMode

_MODES: tuple[str, ...] = get_args(ProviderMode)


@dataclass(frozen=True)
class MapConfig:
    """Resolved provider mode, API keys and endpoints."""

    provider: ProviderMode = "auto"
    amap_api_key: str | None = None
    google_api_key: str | None = None
    amap_base_url: str = "https://restapi.amap.com"
    google_base_url: str = "https://maps.googleapis.com/maps/api"
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = "GeoNote/1.0"
    ip_location_url: str = "https://ipapi.co/json/"
    timeout_seconds: float = 10.0
    ip_timeout_seconds: float = 5.0
    language: str = "en"
    use_mock: bool = False
    mock_latency_seconds: float = 0.3
    convert_wgs84_input: bool = False

    @property
    def forced(self) -> bool:
        return self.provider != "auto"


def _normalize_mode(raw: str | None) -> ProviderMode:
    value = (raw or "").strip().lower()
    if value in _MODES:
        return value  # type: ignore[return-value]
    return "auto"


def _blank_to_none(value: str) -> str | None:
    stripped = value.strip()
    return stripped or None


def resolve_map_config(settings: Settings) -> MapConfig:
    """Build MapConfig from settings; unknown modes fall back to auto."""
    return MapConfig(
        provider=_normalize_mode(settings.map_provider),
        amap_api_key=_blank_to_none(settings.amap_api_key),
        google_api_key=_blank_to_none(settings.google_maps_api_key),
        amap_base_url=settings.amap_base_url,
        google_base_url=settings.google_maps_base_url,
        nominatim_base_url=settings.nominatim_base_url,
        nominatim_user_agent=settings.nominatim_user_agent,
        ip_location_url=settings.ip_location_url,
        timeout_seconds=settings.location_timeout_seconds,
        ip_timeout_seconds=settings.ip_location_timeout_seconds,
        language=settings.location_language,
        use_mock=settings.location_use_mock,
        mock_latency_seconds=settings.location_mock_latency_seconds,
        convert_wgs84_input=settings.location_convert_wgs84,
    )
