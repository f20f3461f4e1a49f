"""
Binance public market data (no authentication required):
  GET /api/v3/ticker/price?symbol=<SYM>USDT
  GET /api/v3/klines?symbol=BTCUSDT&interval=15m&limit=192
"""
from __future__ import annotations

import httpx

from app.config.settings import ProviderSettings
from app.providers.errors import DataError, parse_price
from app.providers.http import get_json
from app.schemas.provider import Candle, PriceRecord

_TICKER_PATH = "/api/v3/ticker/price"
_KLINES_PATH = "/api/v3/klines"


class BinanceTickerProvider:
    name = "binance"

    def __init__(self, client: httpx.AsyncClient, config: ProviderSettings) -> None:
        self._client = client
        self._config = config

    async def resolve(self, symbol: str) -> PriceRecord:
        pair = f"{symbol.upper()}USDT"
        url = f"{self._config.binance_base_url.rstrip('/')}{_TICKER_PATH}"
        payload = await get_json(
            self._client,
            url,
            provider=self.name,
            timeout=self._config.quote_timeout_seconds,
            params={"symbol": pair},
        )
        if not isinstance(payload, dict):
            raise DataError(f"{self.name}: unexpected body for {pair}")
        return PriceRecord(
            symbol=symbol,
            price=parse_price(payload.get("price"), self.name),
            id=pair,
            source=self.name,
        )


class BinanceKlinesProvider:
    name = "binance_klines"

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: ProviderSettings,
        pair: str = "BTCUSDT",
        interval: str = "15m",
        limit: int = 192,
    ) -> None:
        self._client = client
        self._config = config
        self.pair = pair
        self.interval = interval
        self.limit = limit

    async def fetch_candles(self) -> list[Candle]:
        url = f"{self._config.binance_base_url.rstrip('/')}{_KLINES_PATH}"
        payload = await get_json(
            self._client,
            url,
            provider=self.name,
            timeout=self._config.bulk_timeout_seconds,
            params={"symbol": self.pair, "interval": self.interval, "limit": str(self.limit)},
        )
        if not isinstance(payload, list):
            raise DataError(f"{self.name}: expected a list of klines")

        candles: list[Candle] = []
        for row in payload:
            if not isinstance(row, list) or len(row) < 5:
                raise DataError(f"{self.name}: malformed kline {row!r}")
            try:
                candles.append(
                    Candle(
                        time=int(row[0]) // 1000,
                        open=float(row[1]),
                        high=float(row[2]),
                        low=float(row[3]),
                        close=float(row[4]),
                    )
                )
            except (TypeError, ValueError) as exc:
                raise DataError(f"{self.name}: malformed kline {row!r}") from exc
        return candles
