"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from modules.catalog.exceptions import FruitNotFound

__all__ = [
    "FruitNotFound",
    "InsufficientStock",
    "InvalidOrderStatus",
    "InvalidQuantity",
    "OrderAccessDenied",
    "OrderNotFound",
    "PaymentQrUnavailable",
    "PaymentSlipAlreadyExists",
]


class OrderNotFound(Exception):
    """The requested order does not exist."""


class InvalidOrderStatus(Exception):
    """Unknown status value or a transition the state machine forbids."""


class InvalidQuantity(Exception):
    """Non-positive amount, or a fractional amount for a piece-sold fruit."""


class InsufficientStock(Exception):
    """Not enough stock to create or commit the order."""

    def __init__(self, message: str, fruit_id: int | None = None) -> None:
        super().__init__(message)
        self.fruit_id = fruit_id


class OrderAccessDenied(Exception):
    """The caller does not own the order."""


class PaymentSlipAlreadyExists(Exception):
    """A payment slip has already been uploaded for this order."""


class PaymentQrUnavailable(Exception):
    """No PromptPay QR generator is configured."""
