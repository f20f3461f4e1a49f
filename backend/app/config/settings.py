from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseModel):
    refresh_window_seconds: float = 10.0
    stale_tolerance_seconds: float = 300.0


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PRICEFEED_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )
    twelvedata_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("TWELVEDATA_API_KEY", "PRICEFEED_TWELVEDATA_API_KEY"),
    )
    coingecko_base_url: str = "https://api.coingecko.com"
    binance_base_url: str = "https://api.binance.com"
    coinbase_base_url: str = "https://api.coinbase.com"
    coinbase_api_version: str = "2023-01-01"
    twelvedata_base_url: str = "https://api.twelvedata.com"
    quote_timeout_seconds: float = 5.0
    bulk_timeout_seconds: float = 8.0
    market_list_size: int = 50


class SymbolSettings(BaseModel):
    # A symbol may have several plausible CoinGecko ids; they are tried in order.
    coingecko_ids: Dict[str, List[str]] = Field(
        default_factory=lambda: {
            "BTC": ["bitcoin"],
            "ETH": ["ethereum"],
            "USDT": ["tether"],
            "SOL": ["solana"],
            "XRP": ["ripple"],
            "TON": ["toncoin", "the-open-network"],
            "BNB": ["binancecoin"],
            "ADA": ["cardano"],
            "DOGE": ["dogecoin"],
            "TRX": ["tron"],
            "MATIC": ["matic-network"],
        }
    )
    forex_ids: Dict[str, str] = Field(
        default_factory=lambda: {
            "eurusd": "EUR/USD",
            "gbpusd": "GBP/USD",
            "usdjpy": "USD/JPY",
            "usdchf": "USD/CHF",
            "audusd": "AUD/USD",
            "usdcad": "USD/CAD",
            "xau": "XAU/USD",
            "xauusd": "XAU/USD",
            "xag": "XAG/USD",
            "xagusd": "XAG/USD",
            "wti": "WTI/USD",
        }
    )
    supported_coins: List[str] = Field(
        default_factory=lambda: ["BTC", "ETH", "USDT", "SOL", "XRP", "TON"]
    )
    static_prices: Dict[str, float] = Field(
        default_factory=lambda: {
            "BTC": 107719.98,
            "ETH": 4555.07,
            "SOL": 143.66,
            "XRP": 3.0,
            "TON": 3.34,
            "USDT": 1.0,
        }
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PRICEFEED_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    allow_static_fallback: bool = Field(
        default=False,
        validation_alias=AliasChoices("ALLOW_STATIC_FALLBACK", "PRICEFEED_ALLOW_STATIC_FALLBACK"),
    )
    symbol_universe: Literal["auto", "crypto", "forex"] = "auto"
    coalesce_requests: bool = True
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "PRICEFEED_LOG_LEVEL"),
    )

    cache: CacheSettings = Field(default_factory=CacheSettings)
    providers: ProviderSettings = Field(default_factory=ProviderSettings)
    symbols: SymbolSettings = Field(default_factory=SymbolSettings)


settings = Settings()
