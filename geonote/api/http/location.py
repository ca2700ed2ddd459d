"""HTTP API layer: place search, nearby, reverse geocode and IP location endpoints."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query

from geonote.api.deps import get_location_service
from geonote.location.service import LocationService
from geonote.location.coord_transform import is_inside_china, wgs84_to_gcj02
from geonote.location.errors import NetworkError, ProviderError
from geonote.protocol.messages import (
    ConvertedPointDto,
    LocationInfo,
    MapHandleDto,
    ReverseGeocodeResult,
)

router = APIRouter(prefix="/api/v1/location", tags=["location"])

T = TypeVar("T")


async def _call(operation: Awaitable[T]) -> T:
    """Map provider failures to gateway status codes without upstream bodies."""
    try:
        return await operation
    except NetworkError as exc:
        raise HTTPException(status_code=503, detail="location service unavailable") from exc
    except ProviderError as exc:
        raise HTTPException(status_code=502, detail=exc.message or "location lookup failed") from exc


@router.get("/search", response_model=list[LocationInfo])
async def search_location(
    keyword: str = Query(..., min_length=1, max_length=200),
    city: str | None = Query(default=None),
    page_size: int = Query(default=10, ge=1, le=50),
    service: LocationService = Depends(get_location_service),
) -> list[LocationInfo]:
    return await _call(
        service.search_location(keyword.strip(), city=city, page_size=page_size)
    )


@router.get("/nearby", response_model=list[LocationInfo])
async def search_nearby(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    keywords: str | None = Query(default=None),
    radius: int = Query(default=500, ge=1, le=50000),
    page_size: int = Query(default=10, ge=1, le=50),
    service: LocationService = Depends(get_location_service),
) -> list[LocationInfo]:
    return await _call(
        service.search_nearby(
            latitude,
            longitude,
            keywords=keywords,
            radius=radius,
            page_size=page_size,
        )
    )


@router.get("/reverse", response_model=ReverseGeocodeResult)
async def reverse_geocode(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    service: LocationService = Depends(get_location_service),
) -> ReverseGeocodeResult:
    return await _call(service.reverse_geocode(latitude, longitude))


@router.get("/geocode", response_model=list[LocationInfo])
async def geocode(
    address: str = Query(..., min_length=1, max_length=200),
    city: str | None = Query(default=None),
    service: LocationService = Depends(get_location_service),
) -> list[LocationInfo]:
    return await _call(service.geocode(address.strip(), city=city))


@router.get("/tips", response_model=list[LocationInfo])
async def input_tips(
    keyword: str = Query(..., min_length=1, max_length=100),
    city: str | None = Query(default=None),
    limit: int = Query(default=10, ge=1, le=20),
    service: LocationService = Depends(get_location_service),
) -> list[LocationInfo]:
    return await _call(service.input_tips(keyword.strip(), city=city, limit=limit))


@router.get("/ip", response_model=LocationInfo)
async def ip_location(service: LocationService = Depends(get_location_service)) -> LocationInfo:
    return await service.get_ip_location()


@router.get("/map", response_model=MapHandleDto)
async def map_handle(
    latitude: float | None = Query(default=None, ge=-90, le=90),
    longitude: float | None = Query(default=None, ge=-180, le=180),
    service: LocationService = Depends(get_location_service),
) -> MapHandleDto:
    handle = await service.acquire_map(latitude, longitude)
    return handle.to_dto()


@router.get("/convert", response_model=ConvertedPointDto)
def convert(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
) -> ConvertedPointDto:
    gcj_lat, gcj_lon = wgs84_to_gcj02(latitude, longitude)
    return ConvertedPointDto(
        latitude=latitude,
        longitude=longitude,
        gcj02_latitude=gcj_lat,
        gcj02_longitude=gcj_lon,
        inside_china=is_inside_china(latitude, longitude),
    )
