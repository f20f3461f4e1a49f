from __future__ import annotations

import datetime
import math

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


class PriceRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    price: float
    high_24h: float | None = None
    low_24h: float | None = None
    volume_24h: float | None = None
    observed_at: datetime.datetime = Field(default_factory=_utc_now)
    id: str | None = None
    name: str | None = None
    percent_change_24h: float | None = None
    market_cap: float | None = None
    source: str | None = None

    @field_validator("price")
    @classmethod
    def _price_positive_finite(cls, value: float) -> float:
        if not math.isfinite(value) or value <= 0:
            raise ValueError("price must be a positive finite number")
        return value


class Candle(BaseModel):
    time: int
    open: float
    high: float
    low: float
    close: float
