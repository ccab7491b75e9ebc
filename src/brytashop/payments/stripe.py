"""Stripe card charges through the official SDK."""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any

import stripe

from ..logging import get_logger
from .base import PaymentError, PaymentProvider, PaymentResult

logger = get_logger(__name__)


class StripePaymentProvider(PaymentProvider):
    platform = "Stripe"

    async def _run_sync(self, func, *args, **kwargs) -> Any:
        """Run a blocking SDK call in the thread pool."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    async def charge(
        self, amount: int, token: str, idempotency_key: str | None = None
    ) -> PaymentResult:
        """Turn a card token into money."""
        api_key = self.ensure_configured()

        try:
            charge = await self._run_sync(
                stripe.Charge.create,
                amount=amount,
                currency=self.currency,
                source=token,
                api_key=api_key,
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as e:
            logger.warning("Stripe charge failed", amount=amount, error=str(e))
            raise PaymentError(f"Stripe error: {e.user_message or e}") from e

        logger.info("Stripe charge created", charge_id=charge.id, amount=charge.amount)

        return PaymentResult(
            reference=charge.id,
            amount=charge.amount,
            currency=self.currency,
            platform=self.platform,
        )
