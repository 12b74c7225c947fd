"""Health check routes."""

from fastapi import APIRouter

from transtrack.api.deps import ServicesDep

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(services: ServicesDep):
    """Health check endpoint."""
    settings = services.settings
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.env,
        "dispatcher": settings.pipeline.dispatcher,
    }


@router.get("/")
async def root(services: ServicesDep):
    """Root endpoint."""
    return {
        "app": services.settings.app_name,
        "version": services.settings.app_version,
        "docs": "/docs",
    }
