from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI

from simonsays.api import router as api_router
from simonsays.core.config.settings import settings
from simonsays.core.logging.setup import configure_logging

log = structlog.get_logger()


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    log.info("app.startup", environment=settings.env)
    yield
    log.info("app.shutdown")


def create_app() -> FastAPI:
    """
    Application factory: the single place the FastAPI app is created.
    """
    configure_logging(level=settings.log_level, json_logs=settings.json_logs)

    app = FastAPI(
        title="Simon Says",
        version="0.1.0",
        lifespan=_lifespan,
    )

    app.include_router(api_router, prefix="/api")

    return app


# ASGI entrypoint (see simonsays.app.serve)
app = create_app()
