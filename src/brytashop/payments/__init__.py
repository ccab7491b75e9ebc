"""Payment providers used at checkout."""

from ..config import settings
from .base import PaymentError, PaymentProvider, PaymentResult
from .paystack import PaystackPaymentProvider
from .stripe import StripePaymentProvider


def get_stripe_provider() -> StripePaymentProvider:
    """Create the Stripe provider from settings."""
    return StripePaymentProvider(
        secret_key=settings.stripe_secret_key,
        currency=settings.currency,
    )


def get_paystack_provider() -> PaystackPaymentProvider:
    """Create the Paystack provider from settings."""
    return PaystackPaymentProvider(
        secret_key=settings.paystack_secret_key,
        currency=settings.currency,
        base_url=settings.paystack_base_url,
        timeout=settings.paystack_timeout,
    )


__all__ = [
    "PaymentError",
    "PaymentProvider",
    "PaymentResult",
    "PaystackPaymentProvider",
    "StripePaymentProvider",
    "get_paystack_provider",
    "get_stripe_provider",
]
