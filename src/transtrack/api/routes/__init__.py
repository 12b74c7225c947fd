"""API routes."""

from .health import router as health_router
from .auth import router as auth_router
from .languages import router as languages_router
from .jobs import router as jobs_router
from .users import router as users_router

__all__ = [
    "health_router",
    "auth_router",
    "languages_router",
    "jobs_router",
    "users_router",
]
