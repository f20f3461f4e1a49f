from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.provider import Candle, PriceRecord


ErrorCode = Literal["LIVE_PRICE_UNAVAILABLE", "LIVE_DATA_UNAVAILABLE"]


class SymbolPrice(BaseModel):
    symbol: str
    price: float
    high_24h: Optional[float] = None
    low_24h: Optional[float] = None
    volume_24h: Optional[float] = None
    stale: Optional[Literal[True]] = None
    cached: Optional[Literal[True]] = None
    fallback: Optional[Literal["static"]] = None

    @classmethod
    def from_record(cls, record: PriceRecord, **flags) -> "SymbolPrice":
        return cls(
            symbol=record.symbol,
            price=record.price,
            high_24h=record.high_24h,
            low_24h=record.low_24h,
            volume_24h=record.volume_24h,
            **flags,
        )


class PriceList(BaseModel):
    data: list[PriceRecord] = Field(default_factory=list)
    prices: dict[str, float] = Field(default_factory=dict)
    stale: Optional[Literal[True]] = None
    fallback: Optional[Literal["static"]] = None


class PriceListError(BaseModel):
    data: list[PriceRecord] = Field(default_factory=list)
    prices: dict[str, float] = Field(default_factory=dict)
    error: ErrorCode = "LIVE_PRICE_UNAVAILABLE"


class SymbolPriceError(BaseModel):
    error: ErrorCode
    symbol: str
    detail: Optional[str] = None


class ChartResponse(BaseModel):
    candles: list[Candle] = Field(default_factory=list)
