"""Authentication routes."""

from fastapi import APIRouter

from transtrack.api.deps import AuthDep, UserServiceDep
from transtrack.core.security import create_access_token
from transtrack.schemas import PrincipalResponse, Token, UserLogin

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Token)
async def login(data: UserLogin, users: UserServiceDep):
    """Login and get access token."""
    principal = await users.authenticate(data.username, data.password)
    return Token(access_token=create_access_token({"sub": principal.id}))


@router.get("/me", response_model=PrincipalResponse)
async def get_me(auth: AuthDep):
    """Get current user info."""
    return auth.require_user()
