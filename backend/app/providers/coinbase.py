"""
Coinbase spot price, public endpoint:
  GET /v2/prices/<SYM>-USD/spot
"""
from __future__ import annotations

import httpx

from app.config.settings import ProviderSettings
from app.providers.errors import DataError, parse_price
from app.providers.http import get_json
from app.schemas.provider import PriceRecord


class CoinbaseSpotProvider:
    name = "coinbase"

    def __init__(self, client: httpx.AsyncClient, config: ProviderSettings) -> None:
        self._client = client
        self._config = config

    async def resolve(self, symbol: str) -> PriceRecord:
        product = f"{symbol.upper()}-USD"
        url = f"{self._config.coinbase_base_url.rstrip('/')}/v2/prices/{product}/spot"
        payload = await get_json(
            self._client,
            url,
            provider=self.name,
            timeout=self._config.quote_timeout_seconds,
            headers={"CB-VERSION": self._config.coinbase_api_version},
        )
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise DataError(f"{self.name}: response missing data for {product}")
        return PriceRecord(
            symbol=symbol,
            price=parse_price(data.get("amount"), self.name),
            id=product,
            source=self.name,
        )
