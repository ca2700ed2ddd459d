"""HTTP API layer: health and readiness endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from geonote.api.deps import get_container
from geonote.core.container import AppContainer

router = APIRouter(tags=["health"])


@router.get("/health")
def health(container: AppContainer = Depends(get_container)) -> dict:
    return {
        "status": "ok",
        "env": container.settings.env,
        "map_provider": container.map_config.provider,
        "providers": container.location_service.enabled_providers,
    }
