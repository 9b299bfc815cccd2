"""Order, OrderItem, OrderStatusHistory and PaymentSlip models.

Business rules implemented:
- Order number is ``ORD-YYYY-MMDD-{id}``, assigned right after insert in
  the same transaction (see ``NumberedDocumentModel``).
- Each status change generates a history record with old/new status,
  the acting user (``None`` = system) and notes.
- User FK uses PROTECT to preserve financial history.
- OrderItem snapshots the fruit price at creation time (``price``) and
  is immutable afterwards.
- OrderItem subtotal is ``quantity * price`` rounded half-up to cents.
- At most one payment slip per order (one-to-one).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, NumberedDocumentModel
from modules.orders.constants import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
)

CENT = Decimal("0.01")


def line_subtotal(price: Decimal, quantity: Decimal) -> Decimal:
    return (price * quantity).quantize(CENT, rounding=ROUND_HALF_UP)


class Order(NumberedDocumentModel):
    """Order aggregate root.

    Never physically deleted in normal flow; cancellation is a status.
    """

    number_field = "order_number"
    number_prefix = "ORD"

    order_number = models.CharField(max_length=40, unique=True, editable=False)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    shipping_address = models.TextField()
    shipping_city = models.CharField(max_length=100, blank=True, default="")
    shipping_postal_code = models.CharField(max_length=20, blank=True, default="")
    shipping_country = models.CharField(max_length=100, default="Thailand")
    payment_method = models.CharField(max_length=50, default="Thai QR PromptPay")
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["status", "created_at"], name="orders_status_created_idx"),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, frozenset())

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Line item linking an Order to a Fruit.

    ``quantity`` is expressed in the fruit's unit: whole pieces or
    kilograms.  ``price`` is a snapshot; it never follows later catalog
    price changes.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    fruit = models.ForeignKey(
        "catalog.Fruit",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
    )
    price = models.DecimalField(max_digits=10, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, editable=False)

    class Meta:
        db_table = "order_items"
        ordering = ["fruit_id", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="order_items_quantity_positive",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.subtotal = line_subtotal(self.price, self.quantity)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.fruit_id} x{self.quantity} ({self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    Inherits ``BaseModel`` because audit records are immutable.  ``user``
    is nullable: ``None`` means the change was performed by the system
    (e.g. the expired-order sweep).
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=20, choices=OrderStatus.choices)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["order", "-created_at"], name="osh_order_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"


class PaymentSlip(BaseModel):
    """Bank-transfer slip uploaded by the customer as proof of payment."""

    order = models.OneToOneField(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="payment_slip",
    )
    image_data = models.BinaryField()
    content_type = models.CharField(max_length=50, default="image/jpeg")
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    payment_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "payment_slips"

    def __str__(self) -> str:
        return f"slip for order {self.order_id}"
