"""Test fixtures shared by unit/integration tests."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from geonote.location.providers.mock_client import MockLocationClient

_LOCATION_ENV = (
    "MAP_PROVIDER",
    "AMAP_WEB_API_KEY",
    "VITE_AMAP_WEB_API_KEY",
    "NEXT_PUBLIC_AMAP_WEB_API_KEY",
    "GOOGLE_MAPS_API_KEY",
    "VITE_GOOGLE_MAPS_API_KEY",
    "LOCATION_USE_MOCK",
    "LOCATION_MOCK_LATENCY_SECONDS",
    "LOCATION_CONVERT_WGS84",
)


@pytest.fixture(autouse=True)
def _isolate_location_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer keys in the shell from leaking into provider selection."""
    for name in _LOCATION_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_client() -> MockLocationClient:
    return MockLocationClient(latency_seconds=0)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def json_transport() -> Callable[[object, int], RecordingTransport]:
    """Build a transport answering every request with one JSON payload."""

    def _factory(payload: object, status_code: int = 200) -> RecordingTransport:
        return RecordingTransport(lambda _req: httpx.Response(status_code, json=payload))

    return _factory


@pytest.fixture
def failing_transport() -> RecordingTransport:
    def _fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    return RecordingTransport(_fail)
