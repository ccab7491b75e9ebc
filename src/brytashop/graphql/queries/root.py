"""
Root GraphQL query definitions
"""

from uuid import UUID

import strawberry

from ..types.item import Item, ItemConnection, ItemOrderBy, ItemWhereInput, ItemWhereUniqueInput
from ..types.order import Order
from ..types.user import User


@strawberry.type
class Query:
    """Root GraphQL query type."""

    @strawberry.field
    async def items(
        self,
        info: strawberry.Info,
        where: ItemWhereInput | None = None,
        order_by: ItemOrderBy | None = None,
        skip: int | None = 0,
        first: int | None = None,
    ) -> list[Item]:
        """List items for sale."""
        from ..resolvers.item import resolve_items

        return await resolve_items(info, where, order_by, skip, first)

    @strawberry.field
    async def item(self, info: strawberry.Info, where: ItemWhereUniqueInput) -> Item | None:
        """Get a single item."""
        from ..resolvers.item import resolve_item

        return await resolve_item(info, where)

    @strawberry.field(name="itemsConnection")
    async def items_connection(
        self, info: strawberry.Info, where: ItemWhereInput | None = None
    ) -> ItemConnection:
        """Count the items matching a filter."""
        from ..resolvers.item import resolve_items_connection

        return await resolve_items_connection(info, where)

    @strawberry.field
    async def me(self, info: strawberry.Info) -> User | None:
        """Get the current signed-in user."""
        from ..resolvers.auth import resolve_current_user

        return await resolve_current_user(info)

    @strawberry.field
    async def users(self, info: strawberry.Info) -> list[User]:
        """List all users. Requires ADMIN or PERMISSIONUPDATE."""
        from ..resolvers.user import resolve_users

        return await resolve_users(info)

    @strawberry.field
    async def order(self, info: strawberry.Info, id: UUID) -> Order:
        """Get one of your orders."""
        from ..resolvers.order import resolve_order

        return await resolve_order(info, id)

    @strawberry.field
    async def orders(self, info: strawberry.Info) -> list[Order]:
        """List your orders."""
        from ..resolvers.order import resolve_orders

        return await resolve_orders(info)
