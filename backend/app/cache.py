from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from app.schemas.provider import PriceRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    record: PriceRecord
    fetched_at: float


@dataclass(frozen=True)
class ListCacheEntry:
    entries: tuple[PriceRecord, ...]
    price_index: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    fetched_at: float = 0.0


class PriceCache:
    """Process-wide, in-memory price cache.

    Holds the last successful market list and the last successful record per
    symbol. Entries are immutable and swapped whole under a lock, so a reader
    never sees a half-written entry. Nothing is persisted across restarts and
    nothing is evicted; old entries simply stop being servable.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = asyncio.Lock()
        self._list: ListCacheEntry | None = None
        self._symbols: dict[str, CacheEntry] = {}

    def age(self, entry: CacheEntry | ListCacheEntry | None) -> float | None:
        if entry is None:
            return None
        return max(0.0, self._clock() - entry.fetched_at)

    def get_symbol(self, symbol: str) -> CacheEntry | None:
        return self._symbols.get(symbol)

    def get_list(self) -> ListCacheEntry | None:
        return self._list

    def symbols(self) -> frozenset[str]:
        return frozenset(self._symbols)

    async def put_symbol(self, record: PriceRecord) -> CacheEntry:
        async with self._lock:
            entry = CacheEntry(record=record, fetched_at=self._clock())
            self._symbols[record.symbol] = entry
        return entry

    async def put_list(self, records: Iterable[PriceRecord]) -> ListCacheEntry:
        records = tuple(records)
        async with self._lock:
            fetched_at = self._clock()
            index: dict[str, float] = {}
            for record in records:
                # Ranked order: the first occurrence of a ticker wins.
                if record.symbol in index:
                    continue
                index[record.symbol] = record.price
                self._symbols[record.symbol] = CacheEntry(record=record, fetched_at=fetched_at)
            entry = ListCacheEntry(
                entries=records,
                price_index=MappingProxyType(index),
                fetched_at=fetched_at,
            )
            self._list = entry
        logger.debug("Market list cached with %d entries", len(records))
        return entry
