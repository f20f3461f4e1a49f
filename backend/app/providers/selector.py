"""
Provider selection: ordered fallback chains per symbol universe.

A chain tries its adapters in fixed priority order and returns the first
valid record. Each attempt is recorded so an exhausted chain can report why
every source failed.
"""
from __future__ import annotations

import logging
from collections.abc import Collection, Mapping, Sequence
from typing import Literal, Protocol

from app.providers.binance import BinanceKlinesProvider
from app.providers.coingecko import CoinGeckoMarketsProvider
from app.providers.errors import (
    ProviderAttempt,
    ProviderError,
    UnavailableError,
    UnsupportedSymbolError,
)
from app.schemas.provider import Candle, PriceRecord

logger = logging.getLogger(__name__)

SymbolUniverse = Literal["crypto", "forex"]


class PriceAdapter(Protocol):
    name: str

    async def resolve(self, symbol: str) -> PriceRecord: ...


class FallbackChain:
    def __init__(self, adapters: Sequence[PriceAdapter]) -> None:
        self._adapters = list(adapters)

    @property
    def provider_names(self) -> list[str]:
        return [adapter.name for adapter in self._adapters]

    async def resolve(self, symbol: str) -> PriceRecord:
        attempts: list[ProviderAttempt] = []
        for adapter in self._adapters:
            try:
                record = await adapter.resolve(symbol)
            except ProviderError as exc:
                logger.debug("%s failed for %s: %s", adapter.name, symbol, exc)
                attempts.append(ProviderAttempt(provider=adapter.name, ok=False, error=str(exc)))
                continue
            except Exception as exc:
                logger.exception("%s raised unexpectedly for %s", adapter.name, symbol)
                attempts.append(
                    ProviderAttempt(
                        provider=adapter.name,
                        ok=False,
                        error=f"{type(exc).__name__}: {exc}",
                    )
                )
                continue
            if attempts:
                logger.info(
                    "Resolved %s via fallback %s after %d failed attempts",
                    symbol, adapter.name, len(attempts),
                )
            return record

        error = UnavailableError(symbol, attempts)
        logger.warning("All providers failed for %s: %s", symbol, error)
        raise error


class PriceResolver:
    """Dispatches a canonical symbol to the chain of its universe."""

    def __init__(
        self,
        crypto_chain: FallbackChain,
        forex_chain: FallbackChain,
        markets: CoinGeckoMarketsProvider,
        klines: BinanceKlinesProvider,
        crypto_ids: Mapping[str, Sequence[str]],
        forex_ids: Mapping[str, str],
    ) -> None:
        self.crypto_chain = crypto_chain
        self.forex_chain = forex_chain
        self._markets = markets
        self._klines = klines
        self._crypto_ids = crypto_ids
        self._forex_ids = forex_ids

    def universe_for(self, symbol: str, known: Collection[str] = ()) -> SymbolUniverse:
        if symbol in self._forex_ids:
            return "forex"
        if symbol in self._crypto_ids or symbol in known:
            return "crypto"
        raise UnsupportedSymbolError(symbol)

    async def resolve_symbol(self, symbol: str, known: Collection[str] = ()) -> PriceRecord:
        if self.universe_for(symbol, known) == "forex":
            return await self.forex_chain.resolve(symbol)
        return await self.crypto_chain.resolve(symbol)

    async def resolve_list(self) -> list[PriceRecord]:
        try:
            return await self._markets.fetch_markets()
        except ProviderError as exc:
            attempt = ProviderAttempt(provider=self._markets.name, ok=False, error=str(exc))
            logger.warning("Market list unavailable: %s", exc)
            raise UnavailableError("*", [attempt]) from exc

    async def chart(self) -> list[Candle]:
        return await self._klines.fetch_candles()
