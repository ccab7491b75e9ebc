from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import delete, func, select

from ...auth.permissions import PermissionName
from ...database.connection import get_async_session
from ...dbmodels import CartItems, Items, Users
from ...logging import get_logger
from ..access_control import (
    PERMISSION_DENIED_MESSAGE,
    can_modify_item,
    get_auth_context_from_info,
    require_authenticated,
)
from ..types.item import Item, ItemConnection, ItemOrderBy

if TYPE_CHECKING:
    from ..mutations.root import ItemCreateInput, ItemUpdateInput
    from ..types.item import ItemWhereInput, ItemWhereUniqueInput
    from ..types.user import User

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100

_ORDERINGS = {
    ItemOrderBy.CREATED_AT_ASC: Items.created_at.asc(),
    ItemOrderBy.CREATED_AT_DESC: Items.created_at.desc(),
    ItemOrderBy.PRICE_ASC: Items.price.asc(),
    ItemOrderBy.PRICE_DESC: Items.price.desc(),
    ItemOrderBy.TITLE_ASC: Items.title.asc(),
    ItemOrderBy.TITLE_DESC: Items.title.desc(),
}


def convert_db_to_graphql_item(item: Items) -> Item:
    """Convert a database Item model to GraphQL Item type."""
    return Item(
        id=item.id,
        title=item.title,
        description=item.description,
        price=item.price,
        image=item.image,
        large_image=item.large_image,
        created_at=item.created_at,
        updated_at=item.updated_at,
        user_id=item.user_id,
    )


def _apply_item_filters(stmt, where: ItemWhereInput | None):
    if where is None:
        return stmt
    if where.title_contains:
        stmt = stmt.where(Items.title.contains(where.title_contains, autoescape=True))
    if where.description_contains:
        stmt = stmt.where(
            Items.description.contains(where.description_contains, autoescape=True)
        )
    return stmt


# Query resolvers
async def resolve_items(
    info: strawberry.Info,
    where: ItemWhereInput | None = None,
    order_by: ItemOrderBy | None = None,
    skip: int | None = None,
    first: int | None = None,
) -> list[Item]:
    """
    List items, optionally filtered, sorted and paginated.

    Args:
        where: Text filters on title and description
        order_by: Sort order; newest first when omitted
        skip: Number of items to skip
        first: Page size, capped at MAX_PAGE_SIZE
    """
    stmt = _apply_item_filters(select(Items), where)
    stmt = stmt.order_by(_ORDERINGS[order_by or ItemOrderBy.CREATED_AT_DESC], Items.id)

    if skip:
        stmt = stmt.offset(max(skip, 0))
    if first is not None:
        stmt = stmt.limit(min(max(first, 0), MAX_PAGE_SIZE))

    async with get_async_session() as session:
        result = await session.execute(stmt)
        items = result.scalars().all()

        return [convert_db_to_graphql_item(item) for item in items]


async def resolve_item(info: strawberry.Info, where: ItemWhereUniqueInput) -> Item | None:
    """Resolve a single item by its ID."""
    async with get_async_session() as session:
        result = await session.execute(select(Items).where(Items.id == where.id))
        item = result.scalar_one_or_none()

        if not item:
            logger.info("Item not found", item_id=str(where.id))
            return None

        return convert_db_to_graphql_item(item)


async def resolve_items_connection(
    info: strawberry.Info, where: ItemWhereInput | None = None
) -> ItemConnection:
    """Count the items matching a filter."""
    from ..types.item import AggregateItem

    stmt = _apply_item_filters(select(func.count()).select_from(Items), where)

    async with get_async_session() as session:
        result = await session.execute(stmt)
        count = result.scalar_one()

    return ItemConnection(aggregate=AggregateItem(count=count))


async def resolve_item_user(item: Item, info: strawberry.Info) -> User | None:
    """Resolve the user who listed an item."""
    from .user import convert_db_to_graphql_user

    async with get_async_session() as session:
        result = await session.execute(select(Users).where(Users.id == item.user_id))
        user = result.scalar_one_or_none()

        if not user:
            return None

        return convert_db_to_graphql_user(user)


# Mutation resolvers
async def create_item(info: strawberry.Info, data: ItemCreateInput) -> Item:
    """
    Create a new item.

    The authenticated user becomes the owner of the item.
    """
    auth_context = require_authenticated(await get_auth_context_from_info(info))

    async with get_async_session() as session:
        new_item = Items(
            title=data.title,
            description=data.description,
            price=data.price,
            image=data.image,
            large_image=data.large_image,
            user_id=auth_context.user_id,
        )

        session.add(new_item)
        await session.commit()
        await session.refresh(new_item)

        logger.info(
            "Item created",
            item_id=str(new_item.id),
            user_id=str(auth_context.user_id),
            title=new_item.title,
        )

        return convert_db_to_graphql_item(new_item)


async def update_item(info: strawberry.Info, id: UUID, data: ItemUpdateInput) -> Item:
    """
    Update an existing item.

    Only the owner, an ADMIN or an ITEMUPDATE holder can update an item.
    """
    auth_context = require_authenticated(await get_auth_context_from_info(info))

    async with get_async_session() as session:
        result = await session.execute(select(Items).where(Items.id == id))
        item = result.scalar_one_or_none()

        if not item:
            raise RuntimeError(f"No item found for ID {id}")

        if not can_modify_item(item, auth_context, PermissionName.ITEMUPDATE.value):
            raise RuntimeError(PERMISSION_DENIED_MESSAGE)

        # Only update fields that were provided
        if data.title is not None:
            item.title = data.title
        if data.description is not None:
            item.description = data.description
        if data.price is not None:
            item.price = data.price
        if data.image is not None:
            item.image = data.image
        if data.large_image is not None:
            item.large_image = data.large_image

        item.updated_at = datetime.now(UTC)

        await session.commit()
        await session.refresh(item)

        logger.info("Item updated", item_id=str(id), user_id=str(auth_context.user_id))

        return convert_db_to_graphql_item(item)


async def delete_item(info: strawberry.Info, id: UUID) -> Item:
    """
    Delete an item and the cart lines that reference it.

    Only the owner, an ADMIN or an ITEMDELETE holder can delete an item.
    """
    auth_context = require_authenticated(await get_auth_context_from_info(info))

    async with get_async_session() as session:
        result = await session.execute(select(Items).where(Items.id == id))
        item = result.scalar_one_or_none()

        if not item:
            raise RuntimeError(f"No item found for ID {id}")

        if not can_modify_item(item, auth_context, PermissionName.ITEMDELETE.value):
            raise RuntimeError(PERMISSION_DENIED_MESSAGE)

        deleted = convert_db_to_graphql_item(item)

        await session.execute(delete(CartItems).where(CartItems.item_id == id))
        await session.delete(item)
        await session.commit()

        logger.info("Item deleted", item_id=str(id), user_id=str(auth_context.user_id))

        return deleted
