"""Tally — FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tally.application.use_cases.counter_service import CounterService
from tally.config import settings
from tally.infrastructure.api.dependencies import open_counter_repo
from tally.infrastructure.api.routes_counter import router as counter_router
from tally.infrastructure.api.routes_health import router as health_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    try:
        async with open_counter_repo() as repo:
            await CounterService(repo).get_or_create_sheet()
        logger.info("Counter store ready (backend=%s)", settings.counter_backend)
    except Exception as e:
        logger.warning("Counter store not available on startup: %s", e)
    yield
    if settings.counter_backend == "sql":
        from tally.adapters.persistence.database import engine

        await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Tally — counter backend",
        description="Per-slug likes / dislikes / infos counters kept in a spreadsheet",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Counters are bumped from static pages on other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health_router, prefix="/api")
    app.include_router(counter_router, prefix="/api")

    return app


app = create_app()
