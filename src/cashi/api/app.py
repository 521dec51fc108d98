"""FastAPI application configuration (Payment API)."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CollectorRegistry, make_asgi_app, multiprocess

from ..domain.entities import PaymentResponse
from ..envs.server_env import Settings, get_settings
from ..infrastructure.context import AppContext
from .routers import payments

logger = logging.getLogger(__name__)


def _describe_request_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        return f"Invalid request body: {location}: {first.get('msg')}"
    return f"Invalid request body: {first.get('msg')}"


def _metrics_app():
    """Prometheus endpoint; aggregates every worker when multiprocess mode is on."""
    if os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return make_asgi_app(registry=registry)
    return make_asgi_app()


def create_app(
    settings: Optional[Settings] = None,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    A ``context`` passed in is used as is and left open on shutdown; otherwise
    one is built from ``settings`` when the application starts.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = getattr(app.state, "context", None) is None
        if owned:
            app.state.context = AppContext.create(settings)
            logger.info("Connected payment store at %s", settings.database_url)
        try:
            yield
        finally:
            if owned:
                await app.state.context.close()
                app.state.context = None

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Cashi payment submission and transaction history API",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    if context is not None:
        app.state.context = context

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=PaymentResponse(
                success=False, error=_describe_request_error(exc)
            ).to_wire(),
        )

    app.include_router(payments.router)
    app.mount("/metrics", _metrics_app())

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        """Root endpoint."""
        return f"{settings.app_name} is running"

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    return app


app = create_app()
