import asyncio
import json
from unittest.mock import AsyncMock, Mock

from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from app.api.routes import (
    btc_chart_endpoint,
    list_prices_endpoint,
    symbol_price_endpoint,
)
from app.main import app
from app.providers.errors import ProviderAttempt, UnavailableError, UnsupportedSymbolError
from app.schemas.prices import PriceList, SymbolPrice
from app.schemas.provider import Candle, PriceRecord


def _service(**methods) -> Mock:
    service = Mock()
    for name, value in methods.items():
        setattr(service, name, value)
    return service


def _body(response: JSONResponse) -> dict:
    return json.loads(response.body)


def test_symbol_endpoint_returns_service_result() -> None:
    quote = SymbolPrice(symbol="BTC", price=107719.98, cached=True)
    service = _service(get_price=AsyncMock(return_value=quote))

    result = asyncio.run(symbol_price_endpoint("BTC", service=service))

    assert result == quote
    service.get_price.assert_awaited_once_with("BTC")


def test_symbol_endpoint_unavailable_is_503() -> None:
    error = UnavailableError(
        "ETH",
        [
            ProviderAttempt(provider="coingecko", ok=False, error="down"),
            ProviderAttempt(provider="binance", ok=False, error="down"),
        ],
    )
    service = _service(get_price=AsyncMock(side_effect=error))

    response = asyncio.run(symbol_price_endpoint("eth", service=service))

    assert response.status_code == 503
    assert _body(response) == {
        "error": "LIVE_PRICE_UNAVAILABLE",
        "symbol": "ETH",
        "detail": "failed: coingecko, binance",
    }


def test_symbol_endpoint_unsupported_is_503() -> None:
    service = _service(get_price=AsyncMock(side_effect=UnsupportedSymbolError("FOO")))

    response = asyncio.run(symbol_price_endpoint("foo", service=service))

    assert response.status_code == 503
    assert _body(response)["error"] == "LIVE_DATA_UNAVAILABLE"
    assert _body(response)["symbol"] == "FOO"


def test_symbol_endpoint_internal_error_degrades_to_503() -> None:
    service = _service(get_price=AsyncMock(side_effect=RuntimeError("cache corrupted")))

    response = asyncio.run(symbol_price_endpoint("BTC", service=service))

    assert response.status_code == 503
    assert _body(response) == {
        "error": "LIVE_PRICE_UNAVAILABLE",
        "symbol": "BTC",
        "detail": "internal",
    }


def test_list_endpoint_unavailable_is_503() -> None:
    service = _service(list_prices=AsyncMock(side_effect=UnavailableError("*")))

    response = asyncio.run(list_prices_endpoint(service=service))

    assert response.status_code == 503
    assert _body(response) == {"data": [], "prices": {}, "error": "LIVE_PRICE_UNAVAILABLE"}


def test_chart_endpoint_never_fails() -> None:
    service = _service(chart=AsyncMock(side_effect=RuntimeError("boom")))

    result = asyncio.run(btc_chart_endpoint(service=service))

    assert result.candles == []


def test_http_shapes_omit_absent_fields() -> None:
    record = PriceRecord(symbol="BTC", price=107719.98)
    service = _service(
        list_prices=AsyncMock(
            return_value=PriceList(data=[record], prices={"BTC": 107719.98}, stale=True)
        ),
        get_price=AsyncMock(return_value=SymbolPrice(symbol="BTC", price=107719.98)),
        chart=AsyncMock(return_value=[Candle(time=1, open=1, high=2, low=0.5, close=1.5)]),
    )
    app.state.price_service = service
    try:
        client = TestClient(app)
        listed = client.get("/prices")
        single = client.get("/prices/btc-usdt")
        chart = client.get("/prices/chart/btcusdt")
        health = client.get("/health")
    finally:
        del app.state.price_service

    assert listed.status_code == 200
    assert listed.json()["prices"] == {"BTC": 107719.98}
    assert listed.json()["stale"] is True
    assert "fallback" not in listed.json()
    assert listed.json()["data"][0]["symbol"] == "BTC"
    assert single.json() == {"symbol": "BTC", "price": 107719.98}
    service.get_price.assert_awaited_once_with("btc-usdt")
    assert chart.json() == {
        "candles": [{"time": 1, "open": 1.0, "high": 2.0, "low": 0.5, "close": 1.5}]
    }
    assert health.json() == {"status": "ok"}


def test_pair_symbols_with_slash_reach_symbol_endpoint() -> None:
    service = _service(
        get_price=AsyncMock(return_value=SymbolPrice(symbol="TON", price=3.34)),
        chart=AsyncMock(return_value=[]),
    )
    app.state.price_service = service
    try:
        client = TestClient(app)
        encoded = client.get("/prices/TON%2FUSDT")
        forex = client.get("/prices/EUR/USD")
        chart = client.get("/prices/chart/btcusdt")
    finally:
        del app.state.price_service

    assert encoded.status_code == 200
    assert encoded.json() == {"symbol": "TON", "price": 3.34}
    assert forex.status_code == 200
    assert [call.args for call in service.get_price.await_args_list] == [
        ("TON/USDT",),
        ("EUR/USD",),
    ]
    assert chart.json() == {"candles": []}
    service.chart.assert_awaited_once()


def test_unsupported_pair_over_http_is_503_not_404() -> None:
    service = _service(get_price=AsyncMock(side_effect=UnsupportedSymbolError("FOO")))
    app.state.price_service = service
    try:
        response = TestClient(app).get("/prices/FOO%2FUSDT")
    finally:
        del app.state.price_service

    assert response.status_code == 503
    assert response.json() == {
        "error": "LIVE_DATA_UNAVAILABLE",
        "symbol": "FOO",
        "detail": "unsupported symbol",
    }
