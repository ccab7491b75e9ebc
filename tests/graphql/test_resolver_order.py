"""
Unit tests for checkout and order resolvers
"""

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from brytashop.dbmodels import CartItems, Items, Orders
from brytashop.graphql.resolvers.order import (
    cart_idempotency_key,
    create_order,
    create_order_paystack,
    resolve_order,
)
from brytashop.payments.base import PaymentError, PaymentResult

MODULE = "brytashop.graphql.resolvers.order"


def make_item(price: int, title: str) -> MagicMock:
    item = MagicMock(spec=Items)
    item.id = uuid.uuid4()
    item.title = title
    item.description = f"A {title.lower()}"
    item.price = price
    item.image = f"{title.lower()}.jpg"
    item.large_image = None
    return item


def make_cart_item(user_id, item, quantity: int) -> MagicMock:
    cart_item = MagicMock(spec=CartItems)
    cart_item.id = uuid.uuid4()
    cart_item.user_id = user_id
    cart_item.item_id = item.id
    cart_item.item = item
    cart_item.quantity = quantity
    return cart_item


@pytest.fixture
def cart(auth_context):
    return [
        make_cart_item(auth_context.user_id, make_item(1000, "Hat"), quantity=2),
        make_cart_item(auth_context.user_id, make_item(2500, "Scarf"), quantity=1),
    ]


def _result(value) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar_one.return_value = value
    return result


def _persisting_session(mock_session) -> AsyncMock:
    """Session whose queries return whatever order was added to it."""
    mock_db = AsyncMock()
    mock_db.add = MagicMock()
    mock_session.return_value.__aenter__.return_value = mock_db

    async def execute(stmt, *args, **kwargs):
        if mock_db.add.called:
            return _result(mock_db.add.call_args.args[0])
        return _result(None)

    mock_db.execute.side_effect = execute
    return mock_db


def _stripe_provider(amount: int = 4500) -> MagicMock:
    provider = MagicMock()
    provider.charge = AsyncMock(
        return_value=PaymentResult(
            reference="ch_test_1", amount=amount, currency="NGN", platform="Stripe"
        )
    )
    return provider


def _paystack_provider(amount: int = 4500) -> MagicMock:
    provider = MagicMock()
    provider.platform = "Paystack"
    provider.verify = AsyncMock(
        return_value=PaymentResult(
            reference="ps_ref_1", amount=amount, currency="NGN", platform="Paystack"
        )
    )
    return provider


class TestIdempotencyKey:
    def test_stable_for_same_cart_in_any_order(self, auth_context, cart):
        key = cart_idempotency_key(auth_context.user_id, cart, "tok_visa")

        assert key == cart_idempotency_key(auth_context.user_id, list(reversed(cart)), "tok_visa")

    def test_changes_with_quantity(self, auth_context, cart):
        before = cart_idempotency_key(auth_context.user_id, cart, "tok_visa")
        cart[0].quantity += 1

        assert cart_idempotency_key(auth_context.user_id, cart, "tok_visa") != before

    def test_changes_with_user(self, auth_context, cart):
        key = cart_idempotency_key(auth_context.user_id, cart, "tok_visa")

        assert key != cart_idempotency_key(uuid.uuid4(), cart, "tok_visa")

    def test_changes_with_card_token(self, auth_context, cart):
        declined = cart_idempotency_key(auth_context.user_id, cart, "tok_chargeDeclined")
        retried = cart_idempotency_key(auth_context.user_id, cart, "tok_visa")

        assert declined != retried
        assert retried == cart_idempotency_key(auth_context.user_id, cart, "tok_visa")


class TestCreateOrder:
    @pytest.mark.asyncio
    async def test_charges_total_records_order_and_clears_cart(
        self, mock_info, auth_context, cart
    ):
        provider = _stripe_provider()

        with (
            patch(f"{MODULE}.get_auth_context_from_info", return_value=auth_context),
            patch(f"{MODULE}.load_cart", AsyncMock(return_value=cart)),
            patch(f"{MODULE}.get_stripe_provider", return_value=provider),
            patch(f"{MODULE}.get_async_session") as mock_session,
        ):
            mock_db = _persisting_session(mock_session)

            result = await create_order(mock_info, "tok_visa")

        provider.charge.assert_awaited_once_with(
            4500,
            "tok_visa",
            idempotency_key=cart_idempotency_key(auth_context.user_id, cart, "tok_visa"),
        )

        order = mock_db.add.call_args.args[0]
        assert isinstance(order, Orders)
        assert order.total == 4500
        assert order.charge == "ch_test_1"
        assert order.payment_platform == "Stripe"
        assert order.user_id == auth_context.user_id
        assert [(i.title, i.price, i.quantity) for i in order.items] == [
            ("Hat", 1000, 2),
            ("Scarf", 2500, 1),
        ]

        clear_cart = mock_db.execute.await_args_list[0].args[0]
        assert str(clear_cart).startswith("DELETE FROM cart_items")
        mock_db.commit.assert_awaited_once()

        assert result.total == 4500
        assert len(result.items) == 2

    @pytest.mark.asyncio
    async def test_empty_cart_is_not_charged(self, mock_info, auth_context):
        provider = _stripe_provider()

        with (
            patch(f"{MODULE}.get_auth_context_from_info", return_value=auth_context),
            patch(f"{MODULE}.load_cart", AsyncMock(return_value=[])),
            patch(f"{MODULE}.get_stripe_provider", return_value=provider),
        ):
            with pytest.raises(RuntimeError, match="Your cart is empty"):
                await create_order(mock_info, "tok_visa")

        provider.charge.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_declined_charge_records_nothing(self, mock_info, auth_context, cart):
        provider = MagicMock()
        provider.charge = AsyncMock(side_effect=PaymentError("Stripe error: declined"))

        with (
            patch(f"{MODULE}.get_auth_context_from_info", return_value=auth_context),
            patch(f"{MODULE}.load_cart", AsyncMock(return_value=cart)),
            patch(f"{MODULE}.get_stripe_provider", return_value=provider),
            patch(f"{MODULE}.get_async_session") as mock_session,
        ):
            with pytest.raises(PaymentError, match="declined"):
                await create_order(mock_info, "tok_chargeDeclined")

        mock_session.assert_not_called()

    @pytest.mark.asyncio
    async def test_retry_with_another_card_uses_a_new_key(self, mock_info, auth_context, cart):
        provider = _stripe_provider()
        provider.charge.side_effect = [
            PaymentError("Stripe error: declined"),
            provider.charge.return_value,
        ]

        with (
            patch(f"{MODULE}.get_auth_context_from_info", return_value=auth_context),
            patch(f"{MODULE}.load_cart", AsyncMock(return_value=cart)),
            patch(f"{MODULE}.get_stripe_provider", return_value=provider),
            patch(f"{MODULE}.get_async_session") as mock_session,
        ):
            _persisting_session(mock_session)

            with pytest.raises(PaymentError):
                await create_order(mock_info, "tok_chargeDeclined")
            await create_order(mock_info, "tok_visa")

        first, second = provider.charge.await_args_list
        assert first.kwargs["idempotency_key"] != second.kwargs["idempotency_key"]

    @pytest.mark.asyncio
    async def test_persistence_failure_after_charge_is_logged(
        self, mock_info, auth_context, cart
    ):
        with (
            patch(f"{MODULE}.get_auth_context_from_info", return_value=auth_context),
            patch(f"{MODULE}.load_cart", AsyncMock(return_value=cart)),
            patch(f"{MODULE}.get_stripe_provider", return_value=_stripe_provider()),
            patch(f"{MODULE}.get_async_session") as mock_session,
            patch(f"{MODULE}.logger") as mock_logger,
        ):
            mock_db = _persisting_session(mock_session)
            mock_db.commit.side_effect = RuntimeError("database went away")

            with pytest.raises(RuntimeError, match="database went away"):
                await create_order(mock_info, "tok_visa")

        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.kwargs["charge"] == "ch_test_1"


class TestCreateOrderPaystack:
    @pytest.mark.asyncio
    async def test_verifies_amount_and_records_references(self, mock_info, auth_context, cart):
        provider = _paystack_provider()

        with (
            patch(f"{MODULE}.get_auth_context_from_info", return_value=auth_context),
            patch(f"{MODULE}.load_cart", AsyncMock(return_value=cart)),
            patch(f"{MODULE}.get_paystack_provider", return_value=provider),
            patch(f"{MODULE}.get_async_session") as mock_session,
        ):
            mock_db = _persisting_session(mock_session)

            result = await create_order_paystack(
                mock_info, "ps_ref_1", trans="111", transaction="111", trxref="ps_ref_1"
            )

        provider.verify.assert_awaited_once_with("ps_ref_1", 4500)
        order = mock_db.add.call_args.args[0]
        assert order.payment_platform == "Paystack"
        assert order.charge == "ps_ref_1"
        assert (order.reference, order.trans, order.transaction, order.trxref) == (
            "ps_ref_1",
            "111",
            "111",
            "ps_ref_1",
        )
        assert result.total == 4500

    @pytest.mark.asyncio
    async def test_reused_reference_rejected(self, mock_info, auth_context, cart):
        provider = _paystack_provider()

        with (
            patch(f"{MODULE}.get_auth_context_from_info", return_value=auth_context),
            patch(f"{MODULE}.load_cart", AsyncMock(return_value=cart)),
            patch(f"{MODULE}.get_paystack_provider", return_value=provider),
            patch(f"{MODULE}.get_async_session") as mock_session,
        ):
            mock_db = AsyncMock()
            mock_session.return_value.__aenter__.return_value = mock_db
            mock_db.execute.return_value = _result(uuid.uuid4())

            with pytest.raises(RuntimeError, match="already been used"):
                await create_order_paystack(mock_info, "ps_ref_1")

        provider.verify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_amount_mismatch_records_nothing(self, mock_info, auth_context, cart):
        provider = _paystack_provider()
        provider.verify.side_effect = PaymentError(
            "Invalid amount. Received: 'NGN5000'. Expected 'NGN4500'"
        )

        with (
            patch(f"{MODULE}.get_auth_context_from_info", return_value=auth_context),
            patch(f"{MODULE}.load_cart", AsyncMock(return_value=cart)),
            patch(f"{MODULE}.get_paystack_provider", return_value=provider),
            patch(f"{MODULE}.get_async_session") as mock_session,
        ):
            mock_db = _persisting_session(mock_session)

            with pytest.raises(PaymentError, match="Invalid amount"):
                await create_order_paystack(mock_info, "ps_ref_1")

        mock_db.add.assert_not_called()


class TestResolveOrder:
    @pytest.fixture
    def stored_order(self):
        order = MagicMock(spec=Orders)
        order.id = uuid.uuid4()
        order.user_id = uuid.uuid4()
        order.total = 1000
        order.charge = "ch_1"
        order.payment_platform = "Stripe"
        order.reference = None
        order.trans = None
        order.transaction = None
        order.trxref = None
        order.items = []
        order.created_at = datetime.now(UTC)
        order.updated_at = datetime.now(UTC)
        return order

    @pytest.mark.asyncio
    async def test_stranger_cannot_see_order(self, mock_info, auth_context, stored_order):
        with (
            patch(f"{MODULE}.get_auth_context_from_info", return_value=auth_context),
            patch(f"{MODULE}.get_async_session") as mock_session,
        ):
            mock_db = AsyncMock()
            mock_session.return_value.__aenter__.return_value = mock_db
            mock_db.execute.return_value = _result(stored_order)

            with pytest.raises(RuntimeError, match="You can't see this order"):
                await resolve_order(mock_info, stored_order.id)

    @pytest.mark.asyncio
    async def test_owner_sees_order(self, mock_info, auth_context, stored_order):
        stored_order.user_id = auth_context.user_id

        with (
            patch(f"{MODULE}.get_auth_context_from_info", return_value=auth_context),
            patch(f"{MODULE}.get_async_session") as mock_session,
        ):
            mock_db = AsyncMock()
            mock_session.return_value.__aenter__.return_value = mock_db
            mock_db.execute.return_value = _result(stored_order)

            result = await resolve_order(mock_info, stored_order.id)

        assert result.id == stored_order.id

    @pytest.mark.asyncio
    async def test_admin_sees_any_order(self, mock_info, admin_context, stored_order):
        with (
            patch(f"{MODULE}.get_auth_context_from_info", return_value=admin_context),
            patch(f"{MODULE}.get_async_session") as mock_session,
        ):
            mock_db = AsyncMock()
            mock_session.return_value.__aenter__.return_value = mock_db
            mock_db.execute.return_value = _result(stored_order)

            result = await resolve_order(mock_info, stored_order.id)

        assert result.charge == "ch_1"
