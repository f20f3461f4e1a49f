from __future__ import annotations

from typing import Any

import httpx

from app.providers.errors import DataError, ProviderTimeoutError, TransportError


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    provider: str,
    timeout: float,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    try:
        response = await client.get(url, params=params, headers=headers, timeout=timeout)
    except httpx.TimeoutException as exc:
        raise ProviderTimeoutError(f"{provider}: timed out after {timeout}s") from exc
    except httpx.HTTPError as exc:
        raise TransportError(f"{provider}: {type(exc).__name__}: {exc}") from exc

    if response.status_code == 429:
        raise TransportError(f"{provider}: rate limited (HTTP 429)")
    if response.status_code >= 400:
        raise TransportError(f"{provider}: HTTP {response.status_code}")

    try:
        return response.json()
    except ValueError as exc:
        raise DataError(f"{provider}: response is not JSON") from exc
