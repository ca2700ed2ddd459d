"""API layer: request-scoped accessors for the container and the location facade."""

from __future__ import annotations

from fastapi import Depends, Request

from geonote.core.container import AppContainer
from geonote.location.service import LocationService


def get_container(request: Request) -> AppContainer:
    return request.app.state.container  # type: ignore[return-value]


def get_location_service(container: AppContainer = Depends(get_container)) -> LocationService:
    """The container's location facade; override this dependency to substitute providers."""
    return container.location_service
