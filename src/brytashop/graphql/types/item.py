"""
Item GraphQL type definitions
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Annotated
from uuid import UUID

import strawberry

if TYPE_CHECKING:
    from .user import User


@strawberry.enum
class ItemOrderBy(Enum):
    """Sort order for item listings."""

    CREATED_AT_ASC = "created_at_asc"
    CREATED_AT_DESC = "created_at_desc"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    TITLE_ASC = "title_asc"
    TITLE_DESC = "title_desc"


@strawberry.input
class ItemWhereInput:
    """Filter for item listings. Given filters must all match."""

    title_contains: str | None = None
    description_contains: str | None = None


@strawberry.input
class ItemWhereUniqueInput:
    id: UUID


@strawberry.type
class Item:
    """Item type for GraphQL API."""

    id: UUID
    title: str
    description: str
    price: int
    image: str | None
    large_image: str | None
    created_at: datetime
    updated_at: datetime
    user_id: strawberry.Private[UUID | None]

    @strawberry.field
    async def user(
        self, info: strawberry.Info
    ) -> Annotated["User", strawberry.lazy(".user")] | None:  # noqa: E501
        """Get the user who listed this item."""
        if not self.user_id:
            return None
        from ..resolvers.item import resolve_item_user

        return await resolve_item_user(self, info)


@strawberry.type
class AggregateItem:
    count: int


@strawberry.type
class ItemConnection:
    """Aggregate view over a filtered item listing, used for pagination."""

    aggregate: AggregateItem
