"""Unit tests for memoized map SDK handle acquisition."""

from __future__ import annotations

import asyncio

import pytest

from geonote.location.errors import ConfigurationError
from geonote.location.map_config import MapConfig
from geonote.location.map_loader import LEAFLET_CSS, MapHandleRegistry


def test_acquire_is_memoized_per_provider() -> None:
    registry = MapHandleRegistry(MapConfig(google_api_key="g-key"))

    async def _twice():
        return await registry.acquire("google"), await registry.acquire("google")

    first, second = asyncio.run(_twice())

    assert first is second
    assert first.coord_system == "wgs84"
    assert "key=g-key" in first.script_urls[0]


def test_concurrent_first_acquire_shares_one_handle() -> None:
    registry = MapHandleRegistry(MapConfig(amap_api_key="a-key"))

    async def _gather():
        return await asyncio.gather(*(registry.acquire("amap") for _ in range(5)))

    handles = asyncio.run(_gather())

    assert all(h is handles[0] for h in handles)
    assert handles[0].coord_system == "gcj02"


def test_open_handle_needs_no_key() -> None:
    handle = asyncio.run(MapHandleRegistry(MapConfig()).acquire("osm"))
    assert handle.stylesheet_url == LEAFLET_CSS
    assert handle.tile_url_template is not None
    assert handle.to_dto().provider == "osm"


def test_missing_key_raises_and_is_not_memoized() -> None:
    registry = MapHandleRegistry(MapConfig())

    with pytest.raises(ConfigurationError):
        asyncio.run(registry.acquire("amap"))
    with pytest.raises(ConfigurationError):
        asyncio.run(registry.acquire("amap"))
