"""Notification service layer (Use Cases).

In-app notifications are stored per recipient.  Admin fan-out inserts
one row per active staff user; each insert is isolated so one failure
does not stop the others.  Push messages go through the LINE notifier.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.conf import settings
from django.db import DatabaseError, transaction

from modules.notifications.exceptions import NotificationNotFound
from modules.notifications.models import NotificationType
from modules.notifications.push import build_payment_confirmation_message
from modules.orders.constants import OrderStatus

if TYPE_CHECKING:
    from modules.notifications.models import Notification
    from modules.notifications.push import LinePushNotifier
    from modules.notifications.repositories.interfaces import (
        INotificationRepository,
    )

logger = structlog.get_logger(__name__)

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100

ADMIN_MESSAGES = {
    NotificationType.PAYMENT: (
        "Payment received",
        "Order {order_number} has been paid ({total_amount} THB).",
    ),
    NotificationType.PAYMENT_SLIP: (
        "Payment slip uploaded",
        "A payment slip was uploaded for order {order_number} "
        "({total_amount} THB). Please verify it.",
    ),
    NotificationType.ORDER: (
        "Order updated",
        "Order {order_number} was updated.",
    ),
}

CUSTOMER_MESSAGES = {
    OrderStatus.PAID: (
        "Payment confirmed",
        "We received the payment for order {order_number}.",
    ),
    OrderStatus.SHIPPED: (
        "Order shipped",
        "Order {order_number} is on its way.",
    ),
    OrderStatus.CANCELLED: (
        "Order cancelled",
        "Order {order_number} was cancelled.",
    ),
}
DEFAULT_CUSTOMER_MESSAGE = ("Order updated", "Order {order_number} is now {status}.")


class NotificationService:
    def __init__(
        self,
        repository: INotificationRepository,
        notifier: Optional[LinePushNotifier] = None,
    ) -> None:
        self._repo = repository
        self._notifier = notifier

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def notify_admins(
        self,
        kind: str,
        order_id: int,
        order_number: str,
        total_amount: Decimal,
    ) -> int:
        """Create one notification per active admin; return how many were stored."""
        title, template = ADMIN_MESSAGES.get(kind, ADMIN_MESSAGES[NotificationType.ORDER])
        message = template.format(order_number=order_number, total_amount=total_amount)
        created = 0
        for admin_id in self._repo.admin_user_ids():
            try:
                with transaction.atomic():
                    self._repo.create(
                        {
                            "user_id": admin_id,
                            "title": title,
                            "message": message,
                            "type": kind,
                            "related_id": order_id,
                        }
                    )
            except DatabaseError:
                logger.exception(
                    "notification.admin_insert_failed",
                    admin_id=admin_id,
                    order_id=order_id,
                )
                continue
            created += 1
        logger.info(
            "notification.admins_notified", order_id=order_id, kind=kind, count=created
        )
        return created

    def notify_customer(
        self,
        user_id: int,
        order_id: int,
        order_number: str,
        status: str,
    ) -> Notification:
        """Tell the order owner their order moved to ``status``."""
        title, template = CUSTOMER_MESSAGES.get(status, DEFAULT_CUSTOMER_MESSAGE)
        label = OrderStatus(status).label if status in OrderStatus.values else status
        notification = self._repo.create(
            {
                "user_id": user_id,
                "title": title,
                "message": template.format(order_number=order_number, status=label),
                "type": NotificationType.ORDER,
                "related_id": order_id,
            }
        )
        logger.info(
            "notification.customer_notified",
            user_id=user_id,
            order_id=order_id,
            status=status,
        )
        return notification

    def push_payment_confirmation(
        self,
        line_user_id: Optional[str],
        order_number: str,
        total_amount: Decimal,
        invoice_id: Optional[int],
    ) -> bool:
        if self._notifier is None:
            logger.info("line_push.skipped", reason="no_notifier")
            return False
        message = build_payment_confirmation_message(
            order_number=order_number,
            total_amount=total_amount,
            invoice_id=invoice_id,
            frontend_url=settings.FRONTEND_URL,
        )
        return self._notifier.send(line_user_id or "", [message])

    def mark_read(self, notification_id, user_id: int) -> Notification:
        notification = self._repo.get_for_user(notification_id, user_id)
        if not notification:
            raise NotificationNotFound(f"Notification {notification_id} not found.")
        if not notification.is_read:
            notification.is_read = True
            self._repo.save(notification)
        return notification

    def mark_all_read(self, user_id: int) -> int:
        count = self._repo.mark_all_read(user_id)
        logger.info("notification.all_marked_read", user_id=user_id, count=count)
        return count

    def delete(self, notification_id, user_id: int) -> None:
        notification = self._repo.get_for_user(notification_id, user_id)
        if not notification:
            raise NotificationNotFound(f"Notification {notification_id} not found.")
        self._repo.delete(notification.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_for_user(
        self,
        user_id: int,
        is_read: Optional[bool] = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> Dict[str, Any]:
        limit = max(1, min(limit, MAX_PAGE_LIMIT))
        offset = max(0, offset)
        return {
            "notifications": self._repo.list_for_user(user_id, is_read, limit, offset),
            "unread_count": self._repo.count_unread(user_id),
        }
