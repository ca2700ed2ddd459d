"""IP-based approximate location, the last resort when no device fix exists."""

from __future__ import annotations

from typing import Any

import httpx

from geonote.infra.observability.logger import get_logger
from geonote.location.providers.http import fetch_json
from geonote.protocol.messages import LocationInfo

logger = get_logger(__name__)


def default_location() -> LocationInfo:
    return LocationInfo(
        id="default_location",
        name="Default",
        address="",
        formatted_address="",
        latitude=0.0,
        longitude=0.0,
    )


def _coord(value: Any, low: float, high: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if low <= number <= high else 0.0


class IpLocator:
    """Query an ipapi.co-compatible endpoint. `locate` never raises."""

    def __init__(
        self,
        *,
        url: str = "https://ipapi.co/json/",
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    async def locate(self) -> LocationInfo:
        try:
            data = await fetch_json(
                self._url,
                provider="ipapi",
                timeout_seconds=self._timeout_seconds,
                transport=self._transport,
            )
            if not isinstance(data, dict) or data.get("error"):
                logger.warning("IP location lookup returned no usable payload")
                return default_location()
            city = str(data.get("city") or "")
            country = str(data.get("country_name") or "")
            return LocationInfo(
                id="ip_location",
                name=city or "Unknown",
                address=city,
                formatted_address=f"{city}, {country}",
                latitude=_coord(data.get("latitude"), -90.0, 90.0),
                longitude=_coord(data.get("longitude"), -180.0, 180.0),
                province=str(data.get("region") or ""),
                city=city,
            )
        except Exception as exc:
            logger.warning("IP location lookup failed: %s: %s", type(exc).__name__, exc)
            return default_location()
