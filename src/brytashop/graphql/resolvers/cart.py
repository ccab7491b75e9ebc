from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from ...database.connection import get_async_session
from ...dbmodels import CartItems, Items
from ...logging import get_logger
from ..access_control import (
    PERMISSION_DENIED_MESSAGE,
    get_auth_context_from_info,
    is_self_or_admin,
    require_authenticated,
)
from .item import convert_db_to_graphql_item

if TYPE_CHECKING:
    from ..types.cart import CartItem
    from ..types.user import User

logger = get_logger(__name__)


def calculate_cart_total(cart_items: Iterable[CartItems]) -> int:
    """Sum price x quantity over the cart lines. Lines whose item is gone count as zero."""
    return sum(
        cart_item.item.price * cart_item.quantity
        for cart_item in cart_items
        if cart_item.item is not None
    )


def convert_db_to_graphql_cart_item(cart_item: CartItems) -> CartItem:
    """Convert a database CartItem (with its item preloaded) to GraphQL CartItem type."""
    from ..types.cart import CartItem as CartItemType

    return CartItemType(
        id=cart_item.id,
        quantity=cart_item.quantity,
        item=convert_db_to_graphql_item(cart_item.item) if cart_item.item else None,
        user_id=cart_item.user_id,
    )


async def load_cart(user_id: UUID) -> list[CartItems]:
    """Load a user's cart lines with their items, oldest first."""
    async with get_async_session() as session:
        stmt = (
            select(CartItems)
            .where(CartItems.user_id == user_id)
            .options(selectinload(CartItems.item))
            .order_by(CartItems.created_at, CartItems.id)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())


# Field resolvers
async def resolve_user_cart(user: User, info: strawberry.Info) -> list[CartItem]:
    """Resolve a user's cart. Only the user and admins may see it."""
    auth_context = await get_auth_context_from_info(info)
    if not is_self_or_admin(user.id, auth_context):
        raise RuntimeError(PERMISSION_DENIED_MESSAGE)

    cart_items = await load_cart(user.id)
    return [convert_db_to_graphql_cart_item(cart_item) for cart_item in cart_items]


# Mutation resolvers
async def add_to_cart(info: strawberry.Info, id: UUID) -> CartItem:
    """
    Add one of an item to the signed-in user's cart.

    An existing line for the same item has its quantity incremented;
    otherwise a new line with quantity 1 is created.
    """
    auth_context = require_authenticated(await get_auth_context_from_info(info))
    user_id = auth_context.user_id

    async with get_async_session() as session:
        result = await session.execute(select(Items.id).where(Items.id == id))
        if result.scalar_one_or_none() is None:
            raise RuntimeError(f"No item found for ID {id}")

        result = await session.execute(
            select(CartItems.id).where(CartItems.user_id == user_id, CartItems.item_id == id)
        )
        created = False

        if result.scalar_one_or_none() is None:
            session.add(CartItems(user_id=user_id, item_id=id, quantity=1))
            try:
                await session.commit()
                created = True
            except IntegrityError:
                # Another request created the line first
                await session.rollback()

        if not created:
            await session.execute(
                update(CartItems)
                .where(CartItems.user_id == user_id, CartItems.item_id == id)
                .values(quantity=CartItems.quantity + 1)
            )
            await session.commit()

        stmt = (
            select(CartItems)
            .where(CartItems.user_id == user_id, CartItems.item_id == id)
            .options(selectinload(CartItems.item))
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        cart_item = result.scalar_one()

        logger.info(
            "Item added to cart",
            user_id=str(user_id),
            item_id=str(id),
            quantity=cart_item.quantity,
        )

        return convert_db_to_graphql_cart_item(cart_item)


async def remove_from_cart(info: strawberry.Info, id: UUID) -> CartItem:
    """Remove a line from the signed-in user's cart."""
    auth_context = require_authenticated(await get_auth_context_from_info(info))

    async with get_async_session() as session:
        stmt = select(CartItems).where(CartItems.id == id).options(selectinload(CartItems.item))
        result = await session.execute(stmt)
        cart_item = result.scalar_one_or_none()

        if not cart_item:
            raise RuntimeError("No cart item found!")

        if cart_item.user_id != auth_context.user_id:
            raise RuntimeError("Not your cart!")

        removed = convert_db_to_graphql_cart_item(cart_item)

        await session.delete(cart_item)
        await session.commit()

        logger.info("Item removed from cart", user_id=str(auth_context.user_id), cart_item_id=str(id))

        return removed
