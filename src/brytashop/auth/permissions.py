"""Permission checks shared by resolvers."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from .errors import AuthorizationError

if TYPE_CHECKING:
    from .context import AuthContext


class PermissionName(str, Enum):
    """Permission names stored on a user."""

    ADMIN = "ADMIN"
    USER = "USER"
    ITEMCREATE = "ITEMCREATE"
    ITEMUPDATE = "ITEMUPDATE"
    ITEMDELETE = "ITEMDELETE"
    PERMISSIONUPDATE = "PERMISSIONUPDATE"


def has_permission(auth_context: AuthContext, permissions_needed: list[str]) -> None:
    """
    Ensure the user holds at least one of the needed permissions.

    Raises:
        AuthorizationError: If there is no overlap between the user's
            permissions and the allow-list.
    """
    if auth_context.has_any_permission(*permissions_needed):
        return

    raise AuthorizationError(
        "You do not have sufficient permissions\n\n"
        f": {', '.join(permissions_needed)}\n\n"
        "You Have:\n\n"
        f"{', '.join(auth_context.permissions)}"
    )
