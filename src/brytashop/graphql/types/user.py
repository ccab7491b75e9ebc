"""
User GraphQL type definitions
"""

from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import strawberry

from ...auth.permissions import PermissionName

if TYPE_CHECKING:
    from .cart import CartItem

Permission = strawberry.enum(PermissionName, name="Permission", description="User permission")


@strawberry.type
class User:
    """User type for GraphQL API."""

    id: UUID
    name: str
    email: str
    permissions: list[Permission]  # type: ignore[valid-type]

    @strawberry.field
    async def cart(
        self, info: strawberry.Info
    ) -> list[Annotated["CartItem", strawberry.lazy(".cart")]]:  # noqa: E501
        """Get the user's cart lines. Visible to the user and to admins."""
        from ..resolvers.cart import resolve_user_cart

        return await resolve_user_cart(self, info)
