"""Observability layer: centralized logger setup for API and provider call tracing."""

from __future__ import annotations

import logging


def setup_logging(level: str = "INFO") -> None:
    """Configure root logger once for structured single-line console output."""
    normalized = level.upper()
    logging.basicConfig(
        level=normalized,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        force=True,
    )
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(normalized)
        logger.propagate = True
    # httpx logs full request URLs (api keys included) at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a module-level logger instance."""
    return logging.getLogger(name)
