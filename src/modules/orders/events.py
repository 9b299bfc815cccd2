"""Domain events for the Orders bounded context.

Published only after the surrounding transaction commits.
"""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised on every applied status transition, cancellation included."""

    old_status: str = ""
    new_status: str = ""


@dataclass(frozen=True)
class OrderPaid(DomainEvent):
    """Raised when an order enters ``paid``."""


@dataclass(frozen=True)
class PaymentSlipUploaded(DomainEvent):
    """Raised when the customer uploads a payment slip."""
