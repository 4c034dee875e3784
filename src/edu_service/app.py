from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from edu_service.api.middleware.metrics import RequestTimingMiddleware
from edu_service.api.v1.routers import auth, collections, dashboard, health, ws
from edu_service.application.exceptions import (
    AuthenticationError,
    NotFoundError,
    ValidationError,
)
from edu_service.config import settings
from edu_service.infrastructure.memory.store import CollectionStore
from edu_service.infrastructure.metrics import RequestMetrics
from edu_service.scripts.seed_dev_data import seed

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    if settings.SEED_DEMO_DATA:
        seed(app.state.store)
    logger.info(
        "Collection store ready (%d collections, env=%s)",
        len(app.state.store.names()),
        settings.APP_ENV,
    )

    yield

    logger.info("Shutting down; %d records discarded", sum(app.state.store.counts().values()))
    app.state.store.clear()


def create_app(store: CollectionStore | None = None) -> FastAPI:
    app = FastAPI(
        title="Educational Management Service",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else CollectionStore()
    app.state.metrics = RequestMetrics()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(dashboard.router)
    app.include_router(collections.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"success": False, "message": exc.detail})

    @app.exception_handler(AuthenticationError)
    async def _unauthorized(_req: Request, exc: AuthenticationError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"success": False, "message": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"success": False, "message": exc.detail})
