"""Core payment interfaces."""

from __future__ import annotations

from dataclasses import dataclass


class PaymentError(Exception):
    """Raised when a payment cannot be charged or verified."""

    pass


@dataclass
class PaymentResult:
    """Outcome of a successful charge or verification."""

    reference: str
    amount: int
    currency: str
    platform: str


class PaymentProvider:
    """Base class for payment providers."""

    platform: str

    def __init__(self, secret_key: str | None, currency: str = "NGN"):
        self.secret_key = secret_key
        self.currency = currency

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    def ensure_configured(self) -> str:
        if not self.secret_key:
            raise PaymentError(f"{self.platform} payments are not configured")
        return self.secret_key
