"""Authentication context for request handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID


@dataclass
class AuthContext:
    """Runtime authentication context for a request."""

    user_id: UUID | None
    email: str | None = None
    permissions: list[str] = field(default_factory=list)
    token: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Check if the request is authenticated."""
        return self.user_id is not None

    def has_any_permission(self, *permissions: str) -> bool:
        """Check if the user holds at least one of the given permissions."""
        return any(permission in self.permissions for permission in permissions)


def anonymous_context(token: str | None = None) -> AuthContext:
    """Context for a request without a valid session."""
    return AuthContext(user_id=None, token=token)
