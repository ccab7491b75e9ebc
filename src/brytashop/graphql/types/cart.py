"""
Cart GraphQL type definitions
"""

from uuid import UUID

import strawberry

from .item import Item


@strawberry.type
class CartItem:
    """A line in a user's cart."""

    id: UUID
    quantity: int
    item: Item | None
    user_id: strawberry.Private[UUID]
