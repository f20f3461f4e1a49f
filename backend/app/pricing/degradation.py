from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from app.cache import CacheEntry, ListCacheEntry
from app.freshness import FreshnessPolicy
from app.providers.errors import UnavailableError
from app.schemas.prices import PriceList, SymbolPrice

logger = logging.getLogger(__name__)


class DegradationGate:
    """Last resort once live resolution failed: stale cache, static table, or give up."""

    def __init__(
        self,
        policy: FreshnessPolicy,
        static_prices: Mapping[str, float],
        allow_static: bool = False,
        supported_coins: Sequence[str] = (),
    ) -> None:
        self._policy = policy
        self._static_prices = dict(static_prices)
        self._allow_static = allow_static
        self._supported_coins = list(supported_coins)

    def symbol_fallback(
        self,
        symbol: str,
        entry: CacheEntry | None,
        age: float | None,
        error: UnavailableError,
    ) -> SymbolPrice:
        if entry is not None and self._policy.servable_stale(age):
            logger.warning("Serving stale price for %s (age %.1fs)", symbol, age)
            return SymbolPrice.from_record(entry.record, stale=True)

        if self._allow_static and symbol in self._static_prices:
            logger.warning("Serving static fallback price for %s", symbol)
            return SymbolPrice(symbol=symbol, price=self._static_prices[symbol], fallback="static")

        raise error

    def list_fallback(
        self,
        entry: ListCacheEntry | None,
        age: float | None,
        error: UnavailableError,
    ) -> PriceList:
        if entry is not None and entry.entries and self._policy.servable_stale(age):
            logger.warning("Serving stale market list (age %.1fs)", age)
            return PriceList(
                data=list(entry.entries),
                prices=dict(entry.price_index),
                stale=True,
            )

        if self._allow_static:
            prices = {
                coin: self._static_prices[coin]
                for coin in self._supported_coins
                if coin in self._static_prices
            }
            if prices:
                logger.warning("Serving static fallback market list")
                return PriceList(data=[], prices=prices, fallback="static")

        raise error
