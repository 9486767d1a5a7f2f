from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api import router
from app.web import STATIC_DIR, router as web_router
from logging_config import configure_logging
from sensors.source import SensorSourceError
from services.poller import build_default_poller

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    poller = build_default_poller()
    try:
        poller.start()
    except SensorSourceError as exc:
        logger.error("Sensor subsystem failed to initialize: %s", exc)
        poller.shutdown()
        build_default_poller.cache_clear()
        raise
    try:
        yield
    finally:
        poller.shutdown()
        build_default_poller.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Hardware Sensor Dashboard",
        description="Live temperature and fan speed charts from local hardware sensors.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
