from __future__ import annotations

import re
from collections.abc import Container
from typing import Literal

Universe = Literal["crypto", "forex"]

_WHITESPACE_RE = re.compile(r"\s+")
_FOREX_SEPARATORS_RE = re.compile(r"[\s/\-_]+")
_QUOTE_SUFFIXES = ("USDT", "USD")


def _strip_quote_suffix(symbol: str) -> str:
    # Repeat until stable so the result is a fixed point ("ABCUSDUSD" -> "ABC").
    while True:
        for suffix in _QUOTE_SUFFIXES:
            if symbol != suffix and symbol.endswith(suffix):
                symbol = symbol[: -len(suffix)]
                break
        else:
            return symbol


def normalize(raw: str | None, universe: Universe = "crypto") -> str:
    """Map a client supplied asset identifier to its canonical symbol.

    Crypto symbols are upper case tickers with the quote currency removed
    ("TON/USDT" -> "TON", "eth-usd" -> "ETH"). Forex and commodity symbols
    are lower case ids with the pair separators joined ("EUR/USD" -> "eurusd").
    Unknown symbols normalize syntactically; rejecting them is up to the
    resolver.
    """
    if not raw:
        return ""
    if universe == "forex":
        return _FOREX_SEPARATORS_RE.sub("", str(raw)).lower()

    symbol = _WHITESPACE_RE.sub("", str(raw)).upper()
    symbol = symbol.split("/", 1)[0]
    symbol = symbol.split("-", 1)[0]
    return _strip_quote_suffix(symbol)


def canonicalize(
    raw: str | None,
    forex_ids: Container[str],
    universe: Literal["auto", "crypto", "forex"] = "auto",
) -> str:
    if universe != "auto":
        return normalize(raw, universe)
    forex_symbol = normalize(raw, "forex")
    if forex_symbol and forex_symbol in forex_ids:
        return forex_symbol
    crypto_symbol = normalize(raw, "crypto")
    # "xau-usdt" reduces to "XAU", which is a forex id.
    forex_symbol = normalize(crypto_symbol, "forex")
    if forex_symbol and forex_symbol in forex_ids:
        return forex_symbol
    return crypto_symbol
