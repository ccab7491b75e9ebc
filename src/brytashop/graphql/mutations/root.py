"""
Root GraphQL mutation definitions
"""

from uuid import UUID

import strawberry

from ..types.cart import CartItem
from ..types.common import SuccessMessage
from ..types.item import Item
from ..types.order import Order
from ..types.user import Permission, User


# Input types for mutations
@strawberry.input
class ItemCreateInput:
    """Input for listing a new item. Prices are in minor currency units."""

    title: str
    description: str
    price: int
    image: str | None = None
    large_image: str | None = None


@strawberry.input
class ItemUpdateInput:
    """Input for updating an item. Omitted fields are left unchanged."""

    title: str | None = None
    description: str | None = None
    price: int | None = None
    image: str | None = None
    large_image: str | None = None


@strawberry.input
class SignupInput:
    """Input for creating an account."""

    email: str
    name: str
    password: str


@strawberry.type
class Mutation:
    """Root GraphQL mutation type."""

    # Item mutations
    @strawberry.mutation(name="createItem")
    async def create_item(self, info: strawberry.Info, data: ItemCreateInput) -> Item:
        """List a new item for sale."""
        from ..resolvers.item import create_item

        return await create_item(info, data)

    @strawberry.mutation(name="updateItem")
    async def update_item(self, info: strawberry.Info, id: UUID, data: ItemUpdateInput) -> Item:
        """Update an existing item."""
        from ..resolvers.item import update_item

        return await update_item(info, id, data)

    @strawberry.mutation(name="deleteItem")
    async def delete_item(self, info: strawberry.Info, id: UUID) -> Item:
        """Delete an item."""
        from ..resolvers.item import delete_item

        return await delete_item(info, id)

    # Account mutations
    @strawberry.mutation
    async def signup(self, info: strawberry.Info, data: SignupInput) -> User:
        """Create an account and sign in."""
        from ..resolvers.auth import signup

        return await signup(info, data)

    @strawberry.mutation
    async def signin(self, info: strawberry.Info, email: str, password: str) -> User:
        """Sign in with email and password."""
        from ..resolvers.auth import signin

        return await signin(info, email, password)

    @strawberry.mutation
    async def signout(self, info: strawberry.Info) -> SuccessMessage:
        """Sign out of the current session."""
        from ..resolvers.auth import signout

        return await signout(info)

    @strawberry.mutation(name="requestReset")
    async def request_reset(self, info: strawberry.Info, email: str) -> SuccessMessage:
        """Email a password reset link."""
        from ..resolvers.auth import request_reset

        return await request_reset(info, email)

    @strawberry.mutation(name="resetPassword")
    async def reset_password(
        self,
        info: strawberry.Info,
        reset_token: str,
        password: str,
        confirm_password: str,
    ) -> User:
        """Set a new password using a reset token."""
        from ..resolvers.auth import reset_password

        return await reset_password(info, reset_token, password, confirm_password)

    @strawberry.mutation(name="updatePermissions")
    async def update_permissions(
        self,
        info: strawberry.Info,
        permissions: list[Permission],  # type: ignore[valid-type]
        user_id: UUID,
    ) -> User:
        """Replace a user's permissions."""
        from ..resolvers.user import update_permissions

        return await update_permissions(info, permissions, user_id)

    # Cart mutations
    @strawberry.mutation(name="addToCart")
    async def add_to_cart(self, info: strawberry.Info, id: UUID) -> CartItem:
        """Add an item to the cart."""
        from ..resolvers.cart import add_to_cart

        return await add_to_cart(info, id)

    @strawberry.mutation(name="removeFromCart")
    async def remove_from_cart(self, info: strawberry.Info, id: UUID) -> CartItem:
        """Remove a line from the cart."""
        from ..resolvers.cart import remove_from_cart

        return await remove_from_cart(info, id)

    # Order mutations
    @strawberry.mutation(name="createOrder")
    async def create_order(self, info: strawberry.Info, token: str) -> Order:
        """Pay for the cart with a Stripe card token."""
        from ..resolvers.order import create_order

        return await create_order(info, token)

    @strawberry.mutation(name="createOrderPaystack")
    async def create_order_paystack(
        self,
        info: strawberry.Info,
        reference: str,
        trans: str | None = None,
        transaction: str | None = None,
        trxref: str | None = None,
    ) -> Order:
        """Record the cart as paid by a verified Paystack transaction."""
        from ..resolvers.order import create_order_paystack

        return await create_order_paystack(info, reference, trans, transaction, trxref)
