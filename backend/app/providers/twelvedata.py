"""
Twelve Data adapter for the forex / commodity universe.

The price comes from ``/price``; ``/quote`` is queried afterwards for the
daily high, low and volume. Only the first call decides success.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from app.config.settings import ProviderSettings
from app.providers.errors import (
    DataError,
    ProviderConfigError,
    ProviderError,
    parse_optional_float,
    parse_price,
)
from app.providers.http import get_json
from app.schemas.provider import PriceRecord

logger = logging.getLogger(__name__)

_PRICE_PATH = "/price"
_QUOTE_PATH = "/quote"


def _raise_on_error_body(payload: Any, provider: str) -> dict:
    if not isinstance(payload, dict):
        raise DataError(f"{provider}: unexpected body")
    if payload.get("status") == "error":
        raise DataError(f"{provider}: {payload.get('message') or 'error response'}")
    return payload


class TwelveDataProvider:
    name = "twelvedata"

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: ProviderSettings,
        ids: Mapping[str, str],
    ) -> None:
        self._client = client
        self._config = config
        self._ids = ids

    def _url(self, path: str) -> str:
        return f"{self._config.twelvedata_base_url.rstrip('/')}{path}"

    async def resolve(self, symbol: str) -> PriceRecord:
        api_key = self._config.twelvedata_api_key
        if not api_key:
            raise ProviderConfigError(f"{self.name}: api key not configured")
        instrument = self._ids.get(symbol)
        if not instrument:
            raise DataError(f"{self.name}: no instrument known for {symbol}")

        params = {"symbol": instrument, "apikey": api_key}
        payload = _raise_on_error_body(
            await get_json(
                self._client,
                self._url(_PRICE_PATH),
                provider=self.name,
                timeout=self._config.quote_timeout_seconds,
                params=params,
            ),
            self.name,
        )
        price = parse_price(payload.get("price"), self.name)

        details: dict = {}
        try:
            details = _raise_on_error_body(
                await get_json(
                    self._client,
                    self._url(_QUOTE_PATH),
                    provider=self.name,
                    timeout=self._config.quote_timeout_seconds,
                    params=params,
                ),
                self.name,
            )
        except ProviderError as exc:
            logger.info("%s quote details unavailable for %s: %s", self.name, symbol, exc)

        return PriceRecord(
            symbol=symbol,
            price=price,
            high_24h=parse_optional_float(details.get("high")),
            low_24h=parse_optional_float(details.get("low")),
            volume_24h=parse_optional_float(details.get("volume")),
            id=instrument,
            name=details.get("name") if isinstance(details.get("name"), str) else None,
            percent_change_24h=parse_optional_float(details.get("percent_change")),
            source=self.name,
        )
