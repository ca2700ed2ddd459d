"""Configuration layer: load runtime settings from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_first(*names: str, default: str = "") -> str:
    """Return the first non-blank value among several env aliases."""
    for name in names:
        raw = os.getenv(name)
        if raw and raw.strip():
            return raw.strip()
    return default


@dataclass(frozen=True)
class Settings:
    """Immutable application settings used across API/location layers."""

    app_name: str = "GeoNote Location API"
    app_version: str = "0.1.0"
    env: str = "dev"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    cors_allow_origins: str = "http://localhost:5173,http://127.0.0.1:5173"
    map_provider: str = "auto"
    amap_api_key: str = ""
    amap_base_url: str = "https://restapi.amap.com"
    google_maps_api_key: str = ""
    google_maps_base_url: str = "https://maps.googleapis.com/maps/api"
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    nominatim_user_agent: str = "GeoNote/1.0"
    ip_location_url: str = "https://ipapi.co/json/"
    location_timeout_seconds: float = 10.0
    ip_location_timeout_seconds: float = 5.0
    location_language: str = "en"
    location_use_mock: bool = False
    location_mock_latency_seconds: float = 0.3
    location_convert_wgs84: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from process env with deterministic defaults."""
        return cls(
            app_name=os.getenv("APP_NAME", cls.app_name),
            app_version=os.getenv("APP_VERSION", cls.app_version),
            env=os.getenv("APP_ENV", cls.env),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
            host=os.getenv("HOST", cls.host),
            port=int(os.getenv("PORT", str(cls.port))),
            cors_allow_origins=os.getenv("CORS_ALLOW_ORIGINS", cls.cors_allow_origins),
            map_provider=os.getenv("MAP_PROVIDER", cls.map_provider),
            amap_api_key=_env_first(
                "AMAP_WEB_API_KEY",
                "VITE_AMAP_WEB_API_KEY",
                "NEXT_PUBLIC_AMAP_WEB_API_KEY",
                default=cls.amap_api_key,
            ),
            amap_base_url=os.getenv("AMAP_BASE_URL", cls.amap_base_url),
            google_maps_api_key=_env_first(
                "GOOGLE_MAPS_API_KEY",
                "VITE_GOOGLE_MAPS_API_KEY",
                default=cls.google_maps_api_key,
            ),
            google_maps_base_url=os.getenv("GOOGLE_MAPS_BASE_URL", cls.google_maps_base_url),
            nominatim_base_url=os.getenv("NOMINATIM_BASE_URL", cls.nominatim_base_url),
            nominatim_user_agent=os.getenv("NOMINATIM_USER_AGENT", cls.nominatim_user_agent),
            ip_location_url=os.getenv("IP_LOCATION_URL", cls.ip_location_url),
            location_timeout_seconds=float(
                os.getenv("LOCATION_TIMEOUT_SECONDS", str(cls.location_timeout_seconds))
            ),
            ip_location_timeout_seconds=float(
                os.getenv("IP_LOCATION_TIMEOUT_SECONDS", str(cls.ip_location_timeout_seconds))
            ),
            location_language=os.getenv("LOCATION_LANGUAGE", cls.location_language),
            location_use_mock=_env_bool("LOCATION_USE_MOCK", cls.location_use_mock),
            location_mock_latency_seconds=float(
                os.getenv(
                    "LOCATION_MOCK_LATENCY_SECONDS",
                    str(cls.location_mock_latency_seconds),
                )
            ),
            location_convert_wgs84=_env_bool(
                "LOCATION_CONVERT_WGS84", cls.location_convert_wgs84
            ),
        )
