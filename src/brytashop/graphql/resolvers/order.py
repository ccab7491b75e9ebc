from __future__ import annotations

import hashlib
from collections.abc import Sequence
from typing import TYPE_CHECKING
from uuid import UUID

import strawberry
from sqlalchemy import delete, select
from sqlalchemy.orm import selectinload

from ...database.connection import get_async_session
from ...dbmodels import CartItems, OrderItems, Orders, Users
from ...logging import get_logger
from ...payments import PaymentResult, get_paystack_provider, get_stripe_provider
from ..access_control import can_view_order, get_auth_context_from_info, require_authenticated
from .cart import calculate_cart_total, load_cart
from .user import convert_db_to_graphql_user

if TYPE_CHECKING:
    from ...auth.context import AuthContext
    from ..types.order import Order
    from ..types.user import User

logger = get_logger(__name__)

EMPTY_CART_MESSAGE = "Your cart is empty"


def convert_db_to_graphql_order(order: Orders) -> Order:
    """Convert a database Order model (with items preloaded) to GraphQL Order type."""
    from ..types.order import Order as OrderType
    from ..types.order import OrderItem as OrderItemType

    return OrderType(
        id=order.id,
        total=order.total,
        charge=order.charge,
        payment_platform=order.payment_platform,
        reference=order.reference,
        trans=order.trans,
        transaction=order.transaction,
        trxref=order.trxref,
        items=[
            OrderItemType(
                id=order_item.id,
                title=order_item.title,
                description=order_item.description,
                price=order_item.price,
                image=order_item.image,
                large_image=order_item.large_image,
                quantity=order_item.quantity,
                item_id=order_item.item_id,
            )
            for order_item in order.items
        ],
        created_at=order.created_at,
        updated_at=order.updated_at,
        user_id=order.user_id,
    )


def cart_idempotency_key(user_id: UUID, cart_items: Sequence[CartItems], token: str) -> str:
    """
    Derive a stable key from the user, the card token and the exact cart contents.

    Retrying checkout with the same card and an unchanged cart yields the same
    key, so the payment provider will not charge twice. A different card gets
    a fresh key, so an earlier decline is not replayed.
    """
    digest = hashlib.sha256(f"{user_id}|{token}".encode())
    for cart_item in sorted(cart_items, key=lambda c: str(c.id)):
        price = cart_item.item.price if cart_item.item is not None else 0
        digest.update(f"|{cart_item.id}:{cart_item.item_id}:{cart_item.quantity}:{price}".encode())
    return f"order-{digest.hexdigest()}"


async def _load_checkout_cart(auth_context: AuthContext) -> tuple[list[CartItems], int]:
    cart_items = [c for c in await load_cart(auth_context.user_id) if c.item is not None]
    if not cart_items:
        raise RuntimeError(EMPTY_CART_MESSAGE)
    return cart_items, calculate_cart_total(cart_items)


async def _persist_order(
    auth_context: AuthContext,
    cart_items: Sequence[CartItems],
    payment: PaymentResult,
    reference: str | None = None,
    trans: str | None = None,
    transaction: str | None = None,
    trxref: str | None = None,
) -> Order:
    """
    Record a paid order and clear the cart lines it was built from.

    Both writes happen in one transaction. The payment has already been
    taken, so a failure here is logged with the charge reference before it
    propagates.
    """
    try:
        async with get_async_session() as session:
            order = Orders(
                total=payment.amount,
                charge=payment.reference,
                payment_platform=payment.platform,
                reference=reference,
                trans=trans,
                transaction=transaction,
                trxref=trxref,
                user_id=auth_context.user_id,
                items=[
                    OrderItems(
                        title=cart_item.item.title,
                        description=cart_item.item.description,
                        price=cart_item.item.price,
                        image=cart_item.item.image,
                        large_image=cart_item.item.large_image,
                        quantity=cart_item.quantity,
                        user_id=auth_context.user_id,
                        item_id=cart_item.item_id,
                    )
                    for cart_item in cart_items
                ],
            )
            session.add(order)
            await session.execute(
                delete(CartItems).where(CartItems.id.in_([c.id for c in cart_items]))
            )
            await session.commit()

            stmt = (
                select(Orders)
                .where(Orders.id == order.id)
                .options(selectinload(Orders.items))
                .execution_options(populate_existing=True)
            )
            result = await session.execute(stmt)
            saved = result.scalar_one()
    except Exception as e:
        logger.error(
            "Failed to record order after successful payment",
            user_id=str(auth_context.user_id),
            charge=payment.reference,
            platform=payment.platform,
            amount=payment.amount,
            error=str(e),
        )
        raise

    logger.info(
        "Order created",
        order_id=str(saved.id),
        user_id=str(auth_context.user_id),
        platform=payment.platform,
        total=saved.total,
        lines=len(saved.items),
    )

    return convert_db_to_graphql_order(saved)


# Mutation resolvers
async def create_order(info: strawberry.Info, token: str) -> Order:
    """
    Charge the signed-in user's cart through Stripe and record the order.
    """
    auth_context = require_authenticated(await get_auth_context_from_info(info))

    cart_items, amount = await _load_checkout_cart(auth_context)

    payment = await get_stripe_provider().charge(
        amount,
        token,
        idempotency_key=cart_idempotency_key(auth_context.user_id, cart_items, token),
    )

    return await _persist_order(auth_context, cart_items, payment)


async def create_order_paystack(
    info: strawberry.Info,
    reference: str,
    trans: str | None = None,
    transaction: str | None = None,
    trxref: str | None = None,
) -> Order:
    """
    Verify a Paystack transaction against the signed-in user's cart and record the order.

    A reference that is already attached to an order is rejected.
    """
    auth_context = require_authenticated(await get_auth_context_from_info(info))
    provider = get_paystack_provider()

    async with get_async_session() as session:
        result = await session.execute(
            select(Orders.id).where(
                Orders.payment_platform == provider.platform,
                Orders.charge == reference,
            )
        )
        if result.scalar_one_or_none() is not None:
            logger.warning(
                "Paystack reference reused",
                reference=reference,
                user_id=str(auth_context.user_id),
            )
            raise RuntimeError(f"Payment reference {reference} has already been used")

    cart_items, amount = await _load_checkout_cart(auth_context)

    payment = await provider.verify(reference, amount)

    return await _persist_order(
        auth_context,
        cart_items,
        payment,
        reference=reference,
        trans=trans,
        transaction=transaction,
        trxref=trxref,
    )


# Query resolvers
async def resolve_order(info: strawberry.Info, id: UUID) -> Order:
    """Resolve an order. Visible to its owner and to admins."""
    auth_context = require_authenticated(await get_auth_context_from_info(info))

    async with get_async_session() as session:
        stmt = select(Orders).where(Orders.id == id).options(selectinload(Orders.items))
        result = await session.execute(stmt)
        order = result.scalar_one_or_none()

        if not order:
            raise RuntimeError(f"No order found for ID {id}")

        if not can_view_order(order, auth_context):
            logger.info(
                "Access denied to order",
                order_id=str(id),
                user_id=str(auth_context.user_id),
            )
            raise RuntimeError("You can't see this order")

        return convert_db_to_graphql_order(order)


async def resolve_orders(info: strawberry.Info) -> list[Order]:
    """List the signed-in user's orders, newest first."""
    auth_context = require_authenticated(await get_auth_context_from_info(info))

    async with get_async_session() as session:
        stmt = (
            select(Orders)
            .where(Orders.user_id == auth_context.user_id)
            .options(selectinload(Orders.items))
            .order_by(Orders.created_at.desc(), Orders.id)
        )
        result = await session.execute(stmt)
        orders = result.scalars().all()

        return [convert_db_to_graphql_order(order) for order in orders]


async def resolve_order_user(order: Order, info: strawberry.Info) -> User:
    """Resolve the user who placed an order."""
    async with get_async_session() as session:
        result = await session.execute(select(Users).where(Users.id == order.user_id))
        user = result.scalar_one_or_none()

        if not user:
            raise RuntimeError("Order owner not found")

        return convert_db_to_graphql_user(user)
