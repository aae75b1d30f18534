from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.ingestion import build_default_ingestion


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    ingestion = build_default_ingestion()
    try:
        ingestion.load_snapshot()
        ingestion.subscribe()
        yield
    finally:
        ingestion.shutdown()
        build_default_ingestion.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Sensor Chart Feed",
        description="Temperature readings merged from a snapshot and a live push channel.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
