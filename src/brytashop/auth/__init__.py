"""Authentication and authorization system for Brytashop."""

from .context import AuthContext
from .errors import AuthenticationError, AuthorizationError
from .middleware import get_auth_context_optional
from .permissions import PermissionName, has_permission

__all__ = [
    "AuthContext",
    "AuthenticationError",
    "AuthorizationError",
    "PermissionName",
    "get_auth_context_optional",
    "has_permission",
]
