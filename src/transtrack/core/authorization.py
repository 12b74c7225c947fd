"""Authorization boundary around the identity provider.

All role decisions go through :class:`AuthorizationBoundary`; services never
compare roles themselves.
"""

from dataclasses import dataclass
from typing import Protocol

from transtrack.core.exceptions import AuthorizationError, NotAuthenticatedError
from transtrack.models.user import UserRole


@dataclass(frozen=True)
class Principal:
    """The authenticated caller."""
    id: str
    username: str
    role: UserRole


class IdentityProvider(Protocol):
    """Anything able to name the current caller."""

    def current_user(self) -> Principal | None:
        ...


class StaticIdentity:
    """Identity provider bound to a fixed principal (or to nobody)."""

    def __init__(self, principal: Principal | None = None):
        self._principal = principal

    def current_user(self) -> Principal | None:
        return self._principal


class AuthorizationBoundary:
    """Exposes the current user and role checks to the services."""

    def __init__(self, identity: IdentityProvider):
        self._identity = identity

    def current_user(self) -> Principal | None:
        return self._identity.current_user()

    def require_user(self) -> Principal:
        """Return the current user or raise NotAuthenticatedError."""
        user = self.current_user()
        if user is None:
            raise NotAuthenticatedError()
        return user

    def has_role(self, role: UserRole | str) -> bool:
        user = self.current_user()
        if user is None:
            return False
        return user.role == UserRole(role)

    def require_role(self, role: UserRole | str) -> Principal:
        """Return the current user if it holds ``role``."""
        user = self.require_user()
        if not self.has_role(role):
            raise AuthorizationError(f"{UserRole(role).value.capitalize()} access required")
        return user

    @classmethod
    def for_principal(cls, principal: Principal | None) -> "AuthorizationBoundary":
        return cls(StaticIdentity(principal))
