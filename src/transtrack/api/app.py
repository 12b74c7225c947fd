"""FastAPI application factory."""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from transtrack.config import Settings, settings as default_settings
from transtrack.core.exceptions import install_exception_handlers
from transtrack.core.logging import bind_context, clear_context, get_logger, setup_logging
from transtrack.integrations.translation import TranslationEngine
from transtrack.services.container import build_services


# Initialize logging early
setup_logging(
    level="DEBUG" if default_settings.debug else "INFO",
    json_format=default_settings.is_production(),
    service="api",
)

logger = get_logger(__name__)


def create_app(
    app_settings: Settings | None = None,
    *,
    translator: TranslationEngine | None = None,
) -> FastAPI:
    """Create and configure FastAPI application."""
    settings = app_settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: startup and shutdown."""
        logger.info(
            "Starting TransTrack",
            version=settings.app_version,
            env=settings.env,
        )

        services = await build_services(settings, translator=translator)
        app.state.services = services

        await services.users.ensure_admin(
            settings.security.bootstrap_admin_username,
            settings.security.bootstrap_admin_password,
        )
        if settings.pipeline.reconcile_on_startup:
            # Pipelines hosted by a previous process are gone
            await services.engine.reconcile_stale_jobs(services.stale_after)

        logger.info("TransTrack started successfully")

        yield

        logger.info("Shutting down TransTrack")
        await services.close()
        logger.info("TransTrack shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Document translation job tracker",
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Exception handlers
    install_exception_handlers(app, include_trace=settings.debug)

    # Middleware (order matters - last added is first executed)
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=settings.security.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request context middleware for structured logging
    @app.middleware("http")
    async def add_request_context(request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])

        bind_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_context()

    # Include routers
    from transtrack.api.routes import (
        health_router,
        auth_router,
        languages_router,
        jobs_router,
        users_router,
    )

    app.include_router(health_router)
    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(languages_router, prefix=settings.api_prefix)
    app.include_router(jobs_router, prefix=settings.api_prefix)
    app.include_router(users_router, prefix=settings.api_prefix)

    return app


# Application instance
app = create_app()
