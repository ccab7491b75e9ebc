"""
Order GraphQL type definitions
"""

from datetime import datetime
from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import strawberry

if TYPE_CHECKING:
    from .user import User


@strawberry.type
class OrderItem:
    """Snapshot of an item as it was when the order was placed."""

    id: UUID
    title: str
    description: str
    price: int
    image: str | None
    large_image: str | None
    quantity: int
    item_id: UUID | None


@strawberry.type
class Order:
    """Order type for GraphQL API."""

    id: UUID
    total: int
    charge: str
    payment_platform: str
    reference: str | None
    trans: str | None
    transaction: str | None
    trxref: str | None
    items: list[OrderItem]
    created_at: datetime
    updated_at: datetime
    user_id: strawberry.Private[UUID]

    @strawberry.field
    async def user(self, info: strawberry.Info) -> Annotated["User", strawberry.lazy(".user")]:
        """Get the user who placed this order."""
        from ..resolvers.order import resolve_order_user

        return await resolve_order_user(self, info)
