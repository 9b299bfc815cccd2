"""Order domain constants.

Defines status choices, the committed/uncommitted partition used by
stock reconciliation, and the valid status transitions of the order
state machine.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    CONFIRMED = "confirmed", "Confirmed"
    PAID = "paid", "Paid"
    PREPARING = "preparing", "Preparing"
    SHIPPED = "shipped", "Shipped"
    COMPLETED = "completed", "Completed"
    RECEIVED = "received", "Received"
    CANCELLED = "cancelled", "Cancelled"


# Statuses in which the order's quantities are deducted from stock.
COMMITTED_STATES: frozenset[str] = frozenset(
    {
        OrderStatus.CONFIRMED,
        OrderStatus.PAID,
        OrderStatus.PREPARING,
        OrderStatus.COMPLETED,
        OrderStatus.SHIPPED,
        OrderStatus.RECEIVED,
    }
)

UNCOMMITTED_STATES: frozenset[str] = frozenset(
    {OrderStatus.PENDING, OrderStatus.PROCESSING, OrderStatus.CANCELLED}
)

TERMINAL_STATES: frozenset[str] = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.RECEIVED, OrderStatus.CANCELLED}
)

# Statuses from which the customer may still pay for the order.
AWAITING_PAYMENT_STATES: frozenset[str] = frozenset(
    {OrderStatus.PENDING, OrderStatus.PROCESSING}
)

VALID_TRANSITIONS: dict[str, frozenset[str]] = {
    OrderStatus.PENDING: frozenset(
        {
            OrderStatus.CONFIRMED,
            OrderStatus.PROCESSING,
            OrderStatus.PAID,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.PROCESSING: frozenset(
        {OrderStatus.CONFIRMED, OrderStatus.PAID, OrderStatus.CANCELLED}
    ),
    OrderStatus.CONFIRMED: frozenset(
        {
            OrderStatus.PAID,
            OrderStatus.PREPARING,
            OrderStatus.SHIPPED,
            OrderStatus.COMPLETED,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.PAID: frozenset(
        {
            OrderStatus.PREPARING,
            OrderStatus.SHIPPED,
            OrderStatus.COMPLETED,
            OrderStatus.RECEIVED,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.PREPARING: frozenset(
        {
            OrderStatus.SHIPPED,
            OrderStatus.COMPLETED,
            OrderStatus.RECEIVED,
            OrderStatus.CANCELLED,
        }
    ),
    OrderStatus.SHIPPED: frozenset(
        {OrderStatus.COMPLETED, OrderStatus.RECEIVED, OrderStatus.CANCELLED}
    ),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.RECEIVED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Statuses counted by the "most bought" report.
PURCHASED_STATES: frozenset[str] = frozenset({OrderStatus.PAID, OrderStatus.COMPLETED})

MOST_BOUGHT_LIMIT = 4
MAX_EXPIRY_MINUTES = 1440
