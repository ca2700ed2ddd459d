"""Lifecycle hooks for startup diagnostics."""

from __future__ import annotations

from geonote.core.container import AppContainer
from geonote.infra.observability.logger import get_logger

logger = get_logger(__name__)


def on_startup(container: AppContainer) -> None:
    logger.info(
        "Location providers ready: mode=%s enabled=%s mock=%s",
        container.map_config.provider,
        ",".join(container.location_service.enabled_providers),
        container.map_config.use_mock,
    )


def on_shutdown() -> None:
    logger.info("GeoNote location service shutdown complete.")
