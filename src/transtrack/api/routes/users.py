"""User management routes (admin only)."""

from fastapi import APIRouter, status

from transtrack.api.deps import AuthDep, UserServiceDep
from transtrack.schemas import RoleUpdate, UserCreate, UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
async def list_users(users: UserServiceDep, auth: AuthDep, search: str | None = None):
    """List accounts, oldest first."""
    return await users.list_users(auth, search=search)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(data: UserCreate, users: UserServiceDep, auth: AuthDep):
    """Create an account."""
    return await users.create_user(auth, data.username, data.password, data.role)


@router.patch("/{user_id}/role", response_model=UserResponse)
async def change_role(user_id: str, data: RoleUpdate, users: UserServiceDep, auth: AuthDep):
    """Change an account's role."""
    return await users.change_role(auth, user_id, data.role)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, users: UserServiceDep, auth: AuthDep):
    """Delete an account. Its jobs are kept."""
    await users.delete_user(auth, user_id)
