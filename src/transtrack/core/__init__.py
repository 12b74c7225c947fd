"""Core module - exceptions, security, authorization, logging."""

from .exceptions import (
    TransTrackException,
    NotFoundError,
    ValidationError,
    InvalidTransitionError,
    NotAuthenticatedError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    StaleStatusError,
    PersistenceError,
    TranslationEngineError,
    install_exception_handlers,
)
from .security import (
    hash_password,
    verify_password,
    create_access_token,
    decode_token,
)
from .authorization import (
    Principal,
    IdentityProvider,
    StaticIdentity,
    AuthorizationBoundary,
)
from .logging import (
    setup_logging,
    get_logger,
    bind_context,
    clear_context,
    job_context,
)

__all__ = [
    # Exceptions
    "TransTrackException",
    "NotFoundError",
    "ValidationError",
    "InvalidTransitionError",
    "NotAuthenticatedError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "StaleStatusError",
    "PersistenceError",
    "TranslationEngineError",
    "install_exception_handlers",
    # Security
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
    # Authorization
    "Principal",
    "IdentityProvider",
    "StaticIdentity",
    "AuthorizationBoundary",
    # Logging
    "setup_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "job_context",
]
