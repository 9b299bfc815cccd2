"""Event handlers for Orders domain events.

Handlers run after commit and only enqueue Celery tasks; the actual
notification and push work happens in a worker.
"""

from __future__ import annotations

import structlog

from modules.notifications.models import NotificationType
from modules.notifications.tasks import (
    notify_admins,
    notify_customer,
    push_payment_confirmation,
)
from modules.orders.events import OrderPaid, OrderStatusChanged, PaymentSlipUploaded
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderPaidHandler(IEventHandler[OrderPaid]):
    def handle(self, event: OrderPaid) -> None:
        notify_admins.delay(event.aggregate_id, NotificationType.PAYMENT)
        push_payment_confirmation.delay(event.aggregate_id)
        logger.info("order.paid_side_effects_enqueued", order_id=event.aggregate_id)


class PaymentSlipUploadedHandler(IEventHandler[PaymentSlipUploaded]):
    def handle(self, event: PaymentSlipUploaded) -> None:
        notify_admins.delay(event.aggregate_id, NotificationType.PAYMENT_SLIP)
        logger.info("order.slip_side_effects_enqueued", order_id=event.aggregate_id)


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    """Keeps the customer's inbox in step with their order."""

    def handle(self, event: OrderStatusChanged) -> None:
        notify_customer.delay(event.aggregate_id, event.new_status)
        logger.info(
            "order.status_change_notification_enqueued",
            order_id=event.aggregate_id,
            old_status=event.old_status,
            new_status=event.new_status,
        )


order_paid_handler = OrderPaidHandler()
payment_slip_uploaded_handler = PaymentSlipUploadedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
