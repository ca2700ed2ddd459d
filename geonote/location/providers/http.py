"""Single-shot async HTTP GET shared by provider clients."""

from __future__ import annotations

from typing import Any

import httpx

from geonote.infra.observability.logger import get_logger
from geonote.location.errors import NetworkError, ProviderError

logger = get_logger(__name__)


async def fetch_json(
    url: str,
    *,
    provider: str,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """GET `url` once and return the decoded JSON body.

    Transport failures become NetworkError; HTTP error statuses and non-JSON
    bodies become ProviderError. The request is never retried.
    """
    clean_params = {k: v for k, v in (params or {}).items() if v is not None}
    try:
        async with httpx.AsyncClient(timeout=timeout_seconds, transport=transport) as client:
            resp = await client.get(url, params=clean_params, headers=headers)
    except httpx.TimeoutException as exc:
        logger.warning("%s request timed out: %s", provider, type(exc).__name__)
        raise NetworkError(provider, "request timed out") from exc
    except httpx.RequestError as exc:
        # Also covers redirect loops and undecodable content encodings.
        logger.warning("%s request failed: %s", provider, type(exc).__name__)
        raise NetworkError(provider) from exc

    if resp.status_code >= 400:
        logger.warning("%s http_error status=%s", provider, resp.status_code)
        raise ProviderError(provider, f"http status {resp.status_code}")
    try:
        return resp.json()
    except ValueError as exc:
        logger.warning("%s returned a non-JSON body", provider)
        raise ProviderError(provider, "malformed response") from exc
