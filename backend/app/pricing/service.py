from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx

from app.cache import PriceCache
from app.config.settings import Settings
from app.freshness import FreshnessPolicy
from app.pricing.degradation import DegradationGate
from app.providers.binance import BinanceKlinesProvider, BinanceTickerProvider
from app.providers.coinbase import CoinbaseSpotProvider
from app.providers.coingecko import CoinGeckoMarketsProvider, CoinGeckoPriceProvider
from app.providers.errors import ProviderError, UnavailableError, UnsupportedSymbolError
from app.providers.selector import FallbackChain, PriceResolver
from app.providers.twelvedata import TwelveDataProvider
from app.schemas.prices import PriceList, SymbolPrice
from app.schemas.provider import Candle, PriceRecord
from app.symbols.normalize import canonicalize

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LIST_KEY = "list:*"


class PriceService:
    def __init__(
        self,
        resolver: PriceResolver,
        cache: PriceCache,
        policy: FreshnessPolicy,
        gate: DegradationGate,
        canonicalizer: Callable[[str], str],
        coalesce: bool = True,
    ) -> None:
        self.resolver = resolver
        self.cache = cache
        self.policy = policy
        self.gate = gate
        self._canonicalize = canonicalizer
        self._coalesce = coalesce
        self._inflight: dict[str, asyncio.Task] = {}

    async def _single_flight(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        if not self._coalesce:
            return await factory()
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._inflight[key] = task

            def _forget(done: asyncio.Task, key: str = key) -> None:
                if self._inflight.get(key) is done:
                    del self._inflight[key]
                # Waiters may all be gone; mark the outcome as retrieved.
                if not done.cancelled():
                    done.exception()

            task.add_done_callback(_forget)
        else:
            logger.debug("Joining in-flight fetch for %s", key)
        return await asyncio.shield(task)

    async def _refresh_symbol(self, symbol: str) -> PriceRecord:
        record = await self.resolver.resolve_symbol(symbol, known=self.cache.symbols())
        await self.cache.put_symbol(record)
        return record

    async def _refresh_list(self) -> PriceList:
        records = await self.resolver.resolve_list()
        entry = await self.cache.put_list(records)
        return PriceList(data=list(entry.entries), prices=dict(entry.price_index))

    async def get_price(self, raw_symbol: str) -> SymbolPrice:
        symbol = self._canonicalize(raw_symbol)
        if not symbol:
            raise UnsupportedSymbolError(raw_symbol)

        entry = self.cache.get_symbol(symbol)
        age = self.cache.age(entry)
        if entry is not None and self.policy.is_fresh(age):
            return SymbolPrice.from_record(entry.record, cached=True)

        try:
            record = await self._single_flight(
                f"symbol:{symbol}", lambda: self._refresh_symbol(symbol)
            )
        except UnavailableError as exc:
            # The entry may have aged while the live attempt was running.
            entry = self.cache.get_symbol(symbol)
            return self.gate.symbol_fallback(symbol, entry, self.cache.age(entry), exc)
        return SymbolPrice.from_record(record)

    async def list_prices(self) -> PriceList:
        entry = self.cache.get_list()
        age = self.cache.age(entry)
        if entry is not None and entry.entries and self.policy.is_fresh(age):
            return PriceList(data=list(entry.entries), prices=dict(entry.price_index))

        try:
            return await self._single_flight(_LIST_KEY, self._refresh_list)
        except UnavailableError as exc:
            entry = self.cache.get_list()
            return self.gate.list_fallback(entry, self.cache.age(entry), exc)

    async def chart(self) -> list[Candle]:
        try:
            return await self.resolver.chart()
        except ProviderError as exc:
            logger.info("Chart unavailable: %s", exc)
            return []


def build_price_service(config: Settings, client: httpx.AsyncClient) -> PriceService:
    providers = config.providers
    symbols = config.symbols

    crypto_chain = FallbackChain(
        [
            CoinGeckoPriceProvider(client, providers, symbols.coingecko_ids),
            BinanceTickerProvider(client, providers),
            CoinbaseSpotProvider(client, providers),
        ]
    )
    forex_chain = FallbackChain([TwelveDataProvider(client, providers, symbols.forex_ids)])
    resolver = PriceResolver(
        crypto_chain=crypto_chain,
        forex_chain=forex_chain,
        markets=CoinGeckoMarketsProvider(client, providers),
        klines=BinanceKlinesProvider(client, providers),
        crypto_ids=symbols.coingecko_ids,
        forex_ids=symbols.forex_ids,
    )
    policy = FreshnessPolicy(
        refresh_window=config.cache.refresh_window_seconds,
        stale_tolerance=config.cache.stale_tolerance_seconds,
    )
    gate = DegradationGate(
        policy,
        static_prices=symbols.static_prices,
        allow_static=config.allow_static_fallback,
        supported_coins=symbols.supported_coins,
    )
    forex_ids = frozenset(symbols.forex_ids)
    universe = config.symbol_universe
    return PriceService(
        resolver=resolver,
        cache=PriceCache(),
        policy=policy,
        gate=gate,
        canonicalizer=lambda raw: canonicalize(raw, forex_ids, universe),
        coalesce=config.coalesce_requests,
    )
