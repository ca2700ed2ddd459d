"""Protocol layer: location DTOs shared by providers, facade and API modules."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


ProviderKind = Literal["amap", "google", "osm"]
ProviderMode = Literal["auto", "amap", "google", "osm"]
CoordSystem = Literal["wgs84", "gcj02"]


class LocationInfo(BaseModel):
    """A discovered place, normalized across providers.

    Coordinates are GCJ02 when the China provider produced the record and WGS84
    otherwise. `id` is only unique within one provider's result set.
    """

    id: str
    name: str
    address: str = ""
    formatted_address: str = ""
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    distance: str | None = None
    type: str | None = None
    poi_name: str | None = None
    province: str | None = None
    city: str | None = None
    district: str | None = None
    street: str | None = None


class ReverseGeocodeResult(BaseModel):
    """Administrative/POI description of a single point."""

    address: str = ""
    formatted_address: str = ""
    province: str = ""
    city: str = ""
    district: str = ""
    street: str = ""
    poi_name: str | None = None
    distance: str | None = Field(
        default=None,
        description="Distance from the queried point to the nearest named POI.",
    )


class MapHandleDto(BaseModel):
    """Map SDK descriptor handed to the rendering layer."""

    provider: ProviderKind
    coord_system: CoordSystem
    script_urls: list[str] = Field(default_factory=list)
    stylesheet_url: str | None = None
    tile_url_template: str | None = None
    attribution: str | None = None


class ConvertedPointDto(BaseModel):
    """WGS84 input and its GCJ02 counterpart."""

    latitude: float
    longitude: float
    gcj02_latitude: float
    gcj02_longitude: float
    inside_china: bool
