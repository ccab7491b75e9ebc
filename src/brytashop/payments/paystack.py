"""Paystack transaction verification over the REST API."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from ..logging import get_logger
from .base import PaymentError, PaymentProvider, PaymentResult

logger = get_logger(__name__)


class PaystackPaymentProvider(PaymentProvider):
    platform = "Paystack"

    def __init__(
        self,
        secret_key: str | None,
        currency: str = "NGN",
        base_url: str = "https://api.paystack.co",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(secret_key, currency)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def verify(self, reference: str, expected_amount: int) -> PaymentResult:
        """
        Verify a completed transaction and check it paid the expected amount.

        Raises:
            PaymentError: If the API call fails, the transaction did not
                succeed, or the amount differs from ``expected_amount``.
        """
        secret_key = self.ensure_configured()

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    f"/transaction/verify/{quote(reference, safe='')}",
                    headers={"Authorization": f"Bearer {secret_key}"},
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as e:
            logger.warning("Paystack verification request failed", reference=reference, error=str(e))
            raise PaymentError(f"Paystack error: {e}") from e

        data = body.get("data") or {}
        status = data.get("status")
        if not body.get("status") or status != "success":
            logger.warning("Paystack transaction not successful", reference=reference, status=status)
            raise PaymentError(f"Paystack error: {status or body.get('message')}")

        currency = data.get("currency") or self.currency
        amount = data.get("amount")
        if amount != expected_amount:
            logger.warning(
                "Paystack amount mismatch",
                reference=reference,
                received=amount,
                expected=expected_amount,
            )
            raise PaymentError(
                f"Invalid amount. Received: '{currency}{amount}'. "
                f"Expected '{currency}{expected_amount}'"
            )

        logger.info("Paystack transaction verified", reference=reference, amount=amount)

        return PaymentResult(
            reference=data.get("reference") or reference,
            amount=amount,
            currency=currency,
            platform=self.platform,
        )
