"""
Shared access control logic for GraphQL resolvers
"""

from typing import TYPE_CHECKING
from uuid import UUID

import strawberry

from ..auth.context import AuthContext, anonymous_context
from ..auth.errors import AuthenticationError
from ..auth.middleware import get_auth_context_optional
from ..auth.permissions import PermissionName
from ..auth.session import extract_token
from ..logging import get_logger

if TYPE_CHECKING:
    from ..dbmodels import Items, Orders

logger = get_logger(__name__)

LOGIN_REQUIRED_MESSAGE = "You must be logged in to do that!"
PERMISSION_DENIED_MESSAGE = "You don't have permission to do that"


async def get_auth_context_from_info(info: strawberry.Info) -> AuthContext:
    """
    Extract auth context from GraphQL info object.

    The context is resolved once per request and cached on ``info.context``.
    Returns an anonymous context if the request is not available.
    """
    cached = info.context.get("auth_context")
    if cached is not None:
        return cached

    request = info.context.get("request")
    if not request:
        logger.error("Request not found in GraphQL context")
        return anonymous_context()

    auth_context = await get_auth_context_optional(extract_token(request))
    info.context["auth_context"] = auth_context
    return auth_context


def set_auth_context(info: strawberry.Info, auth_context: AuthContext) -> None:
    """Replace the cached auth context after the session changes mid-request."""
    info.context["auth_context"] = auth_context


def require_authenticated(auth_context: AuthContext | None) -> AuthContext:
    """
    Ensure the request belongs to a signed-in user.

    Raises:
        AuthenticationError: If there is no signed-in user.
    """
    if not auth_context or not auth_context.is_authenticated:
        raise AuthenticationError(LOGIN_REQUIRED_MESSAGE)
    return auth_context


def is_self_or_admin(user_id: UUID, auth_context: AuthContext | None) -> bool:
    if not auth_context or not auth_context.is_authenticated:
        return False
    if auth_context.user_id == user_id:
        return True
    return auth_context.has_any_permission(PermissionName.ADMIN.value)


def can_modify_item(item: "Items", auth_context: AuthContext | None, permission: str) -> bool:
    """
    Check if a user can change or delete an item.

    Allowed for the item's owner, an ADMIN, or a holder of ``permission``
    (ITEMUPDATE for edits, ITEMDELETE for deletes).
    """
    if not auth_context or not auth_context.is_authenticated:
        return False

    if item.user_id is not None and item.user_id == auth_context.user_id:
        return True

    return auth_context.has_any_permission(PermissionName.ADMIN.value, permission)


def can_view_order(order: "Orders", auth_context: AuthContext | None) -> bool:
    """An order is visible to its owner and to admins."""
    return is_self_or_admin(order.user_id, auth_context)
