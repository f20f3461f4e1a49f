"""
Failure taxonomy for price resolution.

Adapter-local failures (``ProviderError`` and subclasses) only advance the
fallback chain. ``PriceServiceError`` subclasses are the aggregate outcomes a
caller has to handle.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence


class ProviderError(Exception):
    """A single adapter could not produce a price."""


class TransportError(ProviderError):
    """Network failure or non-success HTTP status."""


class ProviderTimeoutError(TransportError):
    """The upstream did not answer within the call timeout."""


class DataError(ProviderError):
    """The upstream answered but the body is unusable."""


class ProviderConfigError(ProviderError):
    """The adapter is disabled by configuration (e.g. missing API key)."""


@dataclass(frozen=True)
class ProviderAttempt:
    provider: str
    ok: bool
    error: str | None = None


class PriceServiceError(Exception):
    def __init__(self, symbol: str, message: str) -> None:
        super().__init__(message)
        self.symbol = symbol


class UnsupportedSymbolError(PriceServiceError):
    def __init__(self, symbol: str) -> None:
        super().__init__(symbol, f"unsupported symbol: {symbol!r}")


class UnavailableError(PriceServiceError):
    """Every adapter in the chain failed for ``symbol``."""

    def __init__(self, symbol: str, attempts: Sequence[ProviderAttempt] = ()) -> None:
        self.attempts = tuple(attempts)
        summary = "; ".join(
            f"{attempt.provider}: {attempt.error}" for attempt in self.attempts if not attempt.ok
        )
        super().__init__(symbol, f"no live price for {symbol}: {summary or 'no providers'}")


def parse_price(value: Any, provider: str) -> float:
    """Coerce an upstream price field, rejecting missing, zero and non-finite values."""
    if value is None or isinstance(value, bool):
        raise DataError(f"{provider}: price field missing")
    try:
        price = float(value)
    except (TypeError, ValueError) as exc:
        raise DataError(f"{provider}: price field not numeric: {value!r}") from exc
    if not math.isfinite(price) or price <= 0:
        raise DataError(f"{provider}: invalid price {price!r}")
    return price


def parse_optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
