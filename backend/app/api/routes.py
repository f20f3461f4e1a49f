import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.pricing.service import PriceService
from app.providers.errors import UnavailableError, UnsupportedSymbolError
from app.schemas.prices import (
    ChartResponse,
    PriceList,
    PriceListError,
    SymbolPrice,
    SymbolPriceError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_price_service(request: Request) -> PriceService:
    return request.app.state.price_service


def _unavailable(body: PriceListError | SymbolPriceError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(exclude_none=True),
    )


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/prices", response_model=PriceList, response_model_exclude_none=True)
async def list_prices_endpoint(
    service: PriceService = Depends(get_price_service),
) -> PriceList | JSONResponse:
    try:
        return await service.list_prices()
    except UnavailableError as exc:
        logger.warning("Market list unavailable: %s", exc)
    except Exception:
        logger.exception("Unexpected error while listing prices")
    return _unavailable(PriceListError())


@router.get(
    "/prices/chart/btcusdt", response_model=ChartResponse, response_model_exclude_none=True
)
async def btc_chart_endpoint(
    service: PriceService = Depends(get_price_service),
) -> ChartResponse:
    try:
        candles = await service.chart()
    except Exception:
        logger.exception("Unexpected error while loading chart")
        candles = []
    return ChartResponse(candles=candles)


@router.get("/prices/{symbol:path}", response_model=SymbolPrice, response_model_exclude_none=True)
async def symbol_price_endpoint(
    symbol: str, service: PriceService = Depends(get_price_service)
) -> SymbolPrice | JSONResponse:
    try:
        return await service.get_price(symbol)
    except UnsupportedSymbolError as exc:
        return _unavailable(
            SymbolPriceError(
                error="LIVE_DATA_UNAVAILABLE", symbol=exc.symbol, detail="unsupported symbol"
            )
        )
    except UnavailableError as exc:
        detail = ", ".join(attempt.provider for attempt in exc.attempts if not attempt.ok)
        return _unavailable(
            SymbolPriceError(
                error="LIVE_PRICE_UNAVAILABLE",
                symbol=exc.symbol,
                detail=f"failed: {detail}" if detail else None,
            )
        )
    except Exception:
        logger.exception("Unexpected error while resolving %s", symbol)
        return _unavailable(
            SymbolPriceError(error="LIVE_PRICE_UNAVAILABLE", symbol=symbol, detail="internal")
        )
