"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from transtrack.core.authorization import AuthorizationBoundary, Principal
from transtrack.core.exceptions import AuthenticationError
from transtrack.core.logging import bind_context
from transtrack.core.security import decode_token
from transtrack.services.container import Services
from transtrack.services.lifecycle import JobLifecycleEngine
from transtrack.services.users import UserService


# ─────────────────────────────────────────────────────────────────────────────
# Services
# ─────────────────────────────────────────────────────────────────────────────

def get_services(request: Request) -> Services:
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]


def get_engine(services: ServicesDep) -> JobLifecycleEngine:
    return services.engine


def get_user_service(services: ServicesDep) -> UserService:
    return services.users


EngineDep = Annotated[JobLifecycleEngine, Depends(get_engine)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]


# ─────────────────────────────────────────────────────────────────────────────
# Authentication
# ─────────────────────────────────────────────────────────────────────────────

security = HTTPBearer(auto_error=False)


async def principal_from_token(services: Services, token: str | None) -> Principal | None:
    """Resolve a bearer token to a live account, None if it does not resolve."""
    if not token:
        return None
    try:
        payload = decode_token(token)
    except AuthenticationError:
        return None
    user_id = payload.get("sub")
    if not user_id:
        return None
    # Deleted accounts and role changes take effect immediately
    return await services.users.get_principal(user_id)


async def get_current_principal(
    services: ServicesDep,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal | None:
    principal = await principal_from_token(
        services, credentials.credentials if credentials else None
    )
    if principal is not None:
        bind_context(user_id=principal.id)
    return principal


async def get_auth(
    principal: Principal | None = Depends(get_current_principal),
) -> AuthorizationBoundary:
    """Authorization boundary for the caller; services raise if it is empty."""
    return AuthorizationBoundary.for_principal(principal)


AuthDep = Annotated[AuthorizationBoundary, Depends(get_auth)]
