"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prompthub import __version__
from prompthub.api.admin.router import admin_router
from prompthub.api.middleware.logging import RequestLoggingMiddleware
from prompthub.api.middleware.request_id import RequestIDMiddleware
from prompthub.api.v1.router import v1_router
from prompthub.common.errors import register_error_handlers
from prompthub.common.logging import configure_logging
from prompthub.config import get_settings
from prompthub.db.session import Database
from prompthub.providers.registry import close_http_client

logger = structlog.stdlib.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings.logging.level, settings.logging.format)

    database = Database(settings.database)
    database.open()
    if settings.env == "development":
        await database.create_all()

    await logger.ainfo(
        "prompthub.startup",
        version=__version__,
        env=settings.env,
        database=settings.database.url.split("@")[-1],
    )

    app.state.settings = settings
    app.state.database = database

    yield

    await close_http_client()
    await database.close()
    await logger.ainfo("prompthub.shutdown")


def create_app() -> FastAPI:
    """Application factory, called by Uvicorn."""
    settings = get_settings()

    app = FastAPI(
        title="PromptHub",
        description="Shared prompt templates with variables, run against a managed LLM configuration.",
        version=__version__,
        docs_url="/docs" if settings.env == "development" else None,
        redoc_url="/redoc" if settings.env == "development" else None,
        lifespan=lifespan,
    )

    # Middleware (last added is outermost, so the request id is bound first)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.env == "development" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(v1_router)
    app.include_router(admin_router)

    return app
