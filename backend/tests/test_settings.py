import asyncio

import httpx

from app.config.settings import ProviderSettings, Settings
from app.pricing.service import build_price_service


def test_static_fallback_flag_from_env(monkeypatch) -> None:
    monkeypatch.setenv("ALLOW_STATIC_FALLBACK", "1")
    assert Settings().allow_static_fallback is True

    monkeypatch.setenv("ALLOW_STATIC_FALLBACK", "0")
    assert Settings().allow_static_fallback is False


def test_twelvedata_key_from_env(monkeypatch) -> None:
    monkeypatch.setenv("TWELVEDATA_API_KEY", "from-env")
    assert ProviderSettings().twelvedata_api_key == "from-env"


def test_prefixed_env_names(monkeypatch) -> None:
    monkeypatch.setenv("PRICEFEED_SYMBOL_UNIVERSE", "forex")
    monkeypatch.setenv("PRICEFEED_COALESCE_REQUESTS", "false")
    config = Settings()
    assert config.symbol_universe == "forex"
    assert config.coalesce_requests is False


def test_build_price_service_wires_chains_in_priority_order() -> None:
    client = httpx.AsyncClient()
    service = build_price_service(Settings(), client)
    asyncio.run(client.aclose())

    assert service.resolver.crypto_chain.provider_names == ["coingecko", "binance", "coinbase"]
    assert service.resolver.forex_chain.provider_names == ["twelvedata"]
    assert service.policy.refresh_window == 10.0
    assert service.policy.stale_tolerance == 300.0
