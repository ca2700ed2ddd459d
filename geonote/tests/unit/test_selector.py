"""Unit tests for provider selection precedence."""

from __future__ import annotations

import pytest

from geonote.location.map_config import MapConfig
from geonote.location.selector import ProviderSelector

BEIJING = (39.9042, 116.4074)
PARIS = (48.8566, 2.3522)


def _selector(mode: str = "auto", available: tuple[str, ...] = ("amap", "google")) -> ProviderSelector:
    return ProviderSelector(MapConfig(provider=mode), available)  # type: ignore[arg-type]


def test_forced_provider_with_client_wins_regardless_of_location() -> None:
    assert _selector("google").select(*BEIJING) == "google"
    assert _selector("amap").select(*PARIS) == "amap"
    assert _selector("osm").select(*BEIJING) == "osm"


@pytest.mark.parametrize("coords", [BEIJING, PARIS, (None, None)])
def test_forced_provider_without_key_is_never_selected(coords) -> None:
    assert _selector("amap", available=("google",)).select(*coords) != "amap"
    assert _selector("google", available=("amap",)).select(*coords) != "google"


def test_forced_without_key_skips_location_rule_and_uses_fallback_order() -> None:
    # Rule 2 only applies in auto mode; forced-but-missing goes straight to rule 3.
    assert _selector("amap", available=("google",)).select(*BEIJING) == "google"
    assert _selector("google", available=("amap",)).select(*PARIS) == "amap"
    assert _selector("google", available=()).select(*PARIS) == "osm"


def test_auto_mode_routes_by_location() -> None:
    selector = _selector()
    assert selector.select(*BEIJING) == "amap"
    assert selector.select(*PARIS) == "google"


def test_auto_mode_inside_china_without_amap_prefers_google() -> None:
    assert _selector(available=("google",)).select(*BEIJING) == "google"


def test_auto_mode_outside_china_without_google_falls_back_to_amap() -> None:
    assert _selector(available=("amap",)).select(*PARIS) == "amap"


def test_no_coordinates_prefers_global_then_china_then_open() -> None:
    assert _selector().select() == "google"
    assert _selector(available=("amap",)).select() == "amap"
    assert _selector(available=()).select() == "osm"


def test_open_provider_is_always_available() -> None:
    selector = _selector(available=())
    assert selector.available == frozenset({"osm"})
    assert selector.select(*BEIJING) == "osm"


def test_selection_is_deterministic() -> None:
    selector = _selector()
    picks = {selector.select(*BEIJING) for _ in range(20)}
    assert picks == {"amap"}
