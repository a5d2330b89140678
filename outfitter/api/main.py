"""FastAPI entrypoint and HTTP routes."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from outfitter import __version__
from outfitter.api.container import ServiceContainer, build_container
from outfitter.api.routes import images, items, outfits, planner, profile
from outfitter.config.settings import Settings, get_settings
from outfitter.monitoring.logging import configure_logging
from outfitter.services.errors import OutfitterError

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    container: ServiceContainer | None = None,
) -> FastAPI:
    """Initialise the FastAPI application.

    A prepared ``container`` is used as-is, which lets tests inject fakes;
    otherwise one is built from ``settings`` at startup.
    """

    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        services = container or build_container(settings)
        await services.database.init_db()
        app.state.container = services
        try:
            yield
        finally:
            await services.close()

    app = FastAPI(
        title="Outfitter API",
        version=__version__,
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.exception_handler(OutfitterError)
    async def handle_domain_error(request: Request, exc: OutfitterError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    @app.get("/metrics", tags=["system"], include_in_schema=False)
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for module in (items, outfits, planner, profile, images):
        app.include_router(module.router)

    return app


app = create_app()
