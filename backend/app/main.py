from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.api.routes import router
from app.config.settings import settings
from app.pricing.service import build_price_service


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging(settings.log_level)
    async with httpx.AsyncClient(headers={"Accept": "application/json"}) as client:
        app.state.price_service = build_price_service(settings, client)
        yield


app = FastAPI(title="PriceFeed", lifespan=lifespan)
app.include_router(router)
