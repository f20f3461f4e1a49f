"""
CoinGecko adapters.

Two endpoints of the public API (no key required):
  GET /api/v3/coins/markets   ranked market snapshot, used for the list route
  GET /api/v3/simple/price    single asset price, primary single-symbol source
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

import httpx
from pydantic import ValidationError

from app.config.settings import ProviderSettings
from app.providers.errors import DataError, ProviderError, parse_optional_float, parse_price
from app.providers.http import get_json
from app.schemas.provider import PriceRecord

logger = logging.getLogger(__name__)

_MARKETS_PATH = "/api/v3/coins/markets"
_SIMPLE_PRICE_PATH = "/api/v3/simple/price"


class CoinGeckoMarketsProvider:
    """Bulk market list ordered by market cap."""

    name = "coingecko_markets"

    def __init__(self, client: httpx.AsyncClient, config: ProviderSettings) -> None:
        self._client = client
        self._config = config

    async def fetch_markets(self) -> list[PriceRecord]:
        url = f"{self._config.coingecko_base_url.rstrip('/')}{_MARKETS_PATH}"
        params = {
            "vs_currency": "usd",
            "order": "market_cap_desc",
            "per_page": str(self._config.market_list_size),
            "page": "1",
            "sparkline": "false",
            "price_change_percentage": "24h",
        }
        payload = await get_json(
            self._client,
            url,
            provider=self.name,
            timeout=self._config.bulk_timeout_seconds,
            params=params,
        )
        if not isinstance(payload, list):
            raise DataError(f"{self.name}: expected a list, got {type(payload).__name__}")

        records: list[PriceRecord] = []
        for item in payload:
            record = self._to_record(item)
            if record is not None:
                records.append(record)
        if not records:
            raise DataError(f"{self.name}: no usable market entries")
        return records

    def _to_record(self, item: object) -> PriceRecord | None:
        if not isinstance(item, dict):
            return None
        symbol = str(item.get("symbol") or "").strip().upper()
        if not symbol:
            return None
        try:
            return PriceRecord(
                symbol=symbol,
                price=parse_price(item.get("current_price"), self.name),
                high_24h=parse_optional_float(item.get("high_24h")),
                low_24h=parse_optional_float(item.get("low_24h")),
                volume_24h=parse_optional_float(item.get("total_volume")),
                id=item.get("id"),
                name=item.get("name"),
                percent_change_24h=parse_optional_float(item.get("price_change_percentage_24h")),
                market_cap=parse_optional_float(item.get("market_cap")),
                source=self.name,
            )
        except (DataError, ValidationError):
            logger.debug("Skipping unusable %s entry for %s", self.name, symbol)
            return None


class CoinGeckoPriceProvider:
    """Primary single-symbol source; tries every candidate id for a symbol in order."""

    name = "coingecko"

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: ProviderSettings,
        ids: Mapping[str, Sequence[str]],
    ) -> None:
        self._client = client
        self._config = config
        self._ids = ids

    def candidate_ids(self, symbol: str) -> list[str]:
        return [coin_id for coin_id in self._ids.get(symbol, ()) if coin_id]

    async def resolve(self, symbol: str) -> PriceRecord:
        candidates = self.candidate_ids(symbol)
        if not candidates:
            raise DataError(f"{self.name}: no id known for {symbol}")

        errors: list[str] = []
        for coin_id in candidates:
            try:
                return await self._resolve_id(symbol, coin_id)
            except ProviderError as exc:
                logger.debug("%s id %s failed for %s: %s", self.name, coin_id, symbol, exc)
                errors.append(str(exc))
        raise DataError("; ".join(errors))

    async def _resolve_id(self, symbol: str, coin_id: str) -> PriceRecord:
        url = f"{self._config.coingecko_base_url.rstrip('/')}{_SIMPLE_PRICE_PATH}"
        payload = await get_json(
            self._client,
            url,
            provider=self.name,
            timeout=self._config.quote_timeout_seconds,
            params={"ids": coin_id, "vs_currencies": "usd", "include_24hr_vol": "true"},
        )
        entry = payload.get(coin_id) if isinstance(payload, dict) else None
        if not isinstance(entry, dict):
            raise DataError(f"{self.name}: no entry for {coin_id}")
        return PriceRecord(
            symbol=symbol,
            price=parse_price(entry.get("usd"), self.name),
            volume_24h=parse_optional_float(entry.get("usd_24h_vol")),
            id=coin_id,
            source=self.name,
        )
