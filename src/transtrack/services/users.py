"""User accounts: authentication and admin management."""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from transtrack.core.authorization import AuthorizationBoundary, Principal
from transtrack.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from transtrack.core.security import hash_password, verify_password
from transtrack.models import User, UserRole

logger = logging.getLogger("transtrack.users")


def to_principal(user: User) -> Principal:
    return Principal(id=user.id, username=user.username, role=UserRole(user.role))


class UserService:
    """Service for user accounts. Management operations require the admin role."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def _get(self, session: AsyncSession, user_id: str) -> User:
        user = await session.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def _admin_count(self, session: AsyncSession) -> int:
        result = await session.execute(
            select(func.count()).select_from(User).where(User.role == UserRole.ADMIN.value)
        )
        return result.scalar_one()

    # ─────────────────────────────────────────────────────────────────────────
    # Identity
    # ─────────────────────────────────────────────────────────────────────────

    async def authenticate(self, username: str, password: str) -> Principal:
        async with self._session_maker() as session:
            result = await session.execute(select(User).where(User.username == username))
            user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError("Invalid credentials")
        return to_principal(user)

    async def get_principal(self, user_id: str) -> Principal | None:
        async with self._session_maker() as session:
            user = await session.get(User, user_id)
        return to_principal(user) if user else None

    # ─────────────────────────────────────────────────────────────────────────
    # Management
    # ─────────────────────────────────────────────────────────────────────────

    async def list_users(self, auth: AuthorizationBoundary, search: str | None = None) -> list[User]:
        """Users ordered by creation date, optionally matched on username or role."""
        auth.require_role(UserRole.ADMIN)
        query = select(User).order_by(User.created_at, User.username)
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            query = query.where(
                or_(func.lower(User.username).like(pattern), func.lower(User.role).like(pattern))
            )
        async with self._session_maker() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def create_user(
        self,
        auth: AuthorizationBoundary,
        username: str,
        password: str,
        role: UserRole | str = UserRole.USER,
    ) -> User:
        auth.require_role(UserRole.ADMIN)
        return await self._insert(username, password, UserRole(role))

    async def _insert(self, username: str, password: str, role: UserRole) -> User:
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username is required", field="username")
        if not password:
            raise ValidationError("Password is required", field="password")

        user = User(
            id=str(uuid.uuid4()),
            username=username,
            hashed_password=hash_password(password),
            role=role.value,
            created_at=datetime.now(timezone.utc),
        )
        try:
            async with self._session_maker() as session:
                session.add(user)
                await session.commit()
        except IntegrityError:
            raise ConflictError("Username already exists", field="username")
        except SQLAlchemyError as e:
            raise PersistenceError("Could not save the user", operation="insert") from e

        logger.info(f"User {username} created with role {role.value}")
        return user

    async def change_role(
        self,
        auth: AuthorizationBoundary,
        user_id: str,
        role: UserRole | str,
    ) -> User:
        actor = auth.require_role(UserRole.ADMIN)
        role = UserRole(role)
        if user_id == actor.id:
            raise ValidationError("You cannot change your own role", field="role")

        async with self._session_maker() as session:
            user = await self._get(session, user_id)
            if user.role == UserRole.ADMIN.value and role != UserRole.ADMIN:
                if await self._admin_count(session) <= 1:
                    raise ValidationError("At least one admin account is required", field="role")
            user.role = role.value
            await session.commit()

        logger.info(f"{user.username}'s role updated to {role.value}")
        return user

    async def delete_user(self, auth: AuthorizationBoundary, user_id: str) -> None:
        """Remove an account. Jobs it submitted are kept."""
        actor = auth.require_role(UserRole.ADMIN)
        if user_id == actor.id:
            raise ValidationError("You cannot delete your own admin account")

        async with self._session_maker() as session:
            user = await self._get(session, user_id)
            if user.role == UserRole.ADMIN.value and await self._admin_count(session) <= 1:
                raise ValidationError("At least one admin account is required")
            await session.delete(user)
            await session.commit()

        logger.info(f"User {user.username} deleted")

    async def ensure_admin(self, username: str, password: str) -> User | None:
        """Create the first admin when there are no accounts yet."""
        async with self._session_maker() as session:
            result = await session.execute(select(func.count()).select_from(User))
            if result.scalar_one() > 0:
                return None
        logger.warning(f"No users found, creating bootstrap admin {username}")
        return await self._insert(username, password, UserRole.ADMIN)
