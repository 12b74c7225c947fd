"""TransTrack custom exceptions and error handlers."""

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("transtrack")


# ─────────────────────────────────────────────────────────────────────────────
# Custom Exceptions
# ─────────────────────────────────────────────────────────────────────────────

class TransTrackException(Exception):
    """Base exception for TransTrack."""

    def __init__(
        self,
        message: str,
        code: str = "TRANSTRACK_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class NotFoundError(TransTrackException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            code="NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "identifier": str(identifier)},
        )


class ValidationError(TransTrackException):
    """Validation error."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"field": field} if field else {},
        )


class InvalidTransitionError(ValidationError):
    """Requested status is not a forward successor of the stored status."""

    def __init__(self, job_id: str, current: str, requested: str):
        super().__init__(
            message=f"Cannot move job {job_id} from {current} to {requested}",
            field="status",
        )
        self.code = "INVALID_TRANSITION"
        self.details.update({"current": current, "requested": requested})


class NotAuthenticatedError(TransTrackException):
    """No current user."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(
            message=message,
            code="NOT_AUTHENTICATED",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class AuthenticationError(TransTrackException):
    """Authentication failed."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_ERROR",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


class AuthorizationError(TransTrackException):
    """Authorization failed."""

    def __init__(self, message: str = "Permission denied"):
        super().__init__(
            message=message,
            code="AUTHORIZATION_ERROR",
            status_code=status.HTTP_403_FORBIDDEN,
        )


class ConflictError(TransTrackException):
    """Resource already exists."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=status.HTTP_409_CONFLICT,
            details={"field": field} if field else {},
        )


class StaleStatusError(TransTrackException):
    """Conditional update lost: the stored status is not the expected one."""

    def __init__(self, job_id: str, expected: str):
        super().__init__(
            message=f"Job {job_id} is no longer {expected}",
            code="STALE_STATUS",
            status_code=status.HTTP_409_CONFLICT,
            details={"job_id": job_id, "expected": expected},
        )


class PersistenceError(TransTrackException):
    """Store unavailable or rejected the operation."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(
            message=message,
            code="PERSISTENCE_ERROR",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details={"operation": operation} if operation else {},
        )


class TranslationEngineError(TransTrackException):
    """Translation provider failed."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(
            message=message,
            code="TRANSLATION_ENGINE_ERROR",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={"provider": provider} if provider else {},
        )


# ─────────────────────────────────────────────────────────────────────────────
# Exception Handlers
# ─────────────────────────────────────────────────────────────────────────────

def install_exception_handlers(app: FastAPI, include_trace: bool = False) -> None:
    """Install exception handlers on FastAPI app."""

    @app.exception_handler(TransTrackException)
    async def transtrack_exception_handler(request: Request, exc: TransTrackException):
        headers = None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.code,
                "message": exc.message,
                "details": exc.details,
            },
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "HTTP_ERROR",
                "message": str(exc.detail),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": jsonable_errors(exc),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        content = {
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred",
        }
        if include_trace:
            content["trace"] = traceback.format_exc()
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
        )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Strip non-serializable context from pydantic error entries."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
