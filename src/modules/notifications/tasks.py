"""Celery tasks of the notifications module.

Enqueued by order event handlers after the order transaction commits.
Tasks re-read the order; they receive ids only.
"""

import structlog
from celery import shared_task

logger = structlog.get_logger(__name__)


def _load_order(order_id):
    from modules.orders.repositories.django_repository import OrderDjangoRepository

    order = OrderDjangoRepository().get_by_id(order_id)
    if order is None:
        logger.warning("notification.order_missing", order_id=order_id)
    return order


@shared_task(name="notifications.notify_admins")
def notify_admins(order_id, kind):
    from modules.notifications.repositories.django_repository import (
        NotificationDjangoRepository,
    )
    from modules.notifications.services import NotificationService

    order = _load_order(order_id)
    if order is None:
        return 0
    return NotificationService(NotificationDjangoRepository()).notify_admins(
        kind=kind,
        order_id=order.id,
        order_number=order.order_number,
        total_amount=order.total_amount,
    )


@shared_task(name="notifications.notify_customer")
def notify_customer(order_id, status):
    from modules.notifications.repositories.django_repository import (
        NotificationDjangoRepository,
    )
    from modules.notifications.services import NotificationService

    order = _load_order(order_id)
    if order is None:
        return None
    notification = NotificationService(NotificationDjangoRepository()).notify_customer(
        user_id=order.user_id,
        order_id=order.id,
        order_number=order.order_number,
        status=status,
    )
    return notification.id


@shared_task(name="notifications.push_payment_confirmation")
def push_payment_confirmation(order_id):
    from modules.accounts.models import Profile
    from modules.invoices.repositories.django_repository import (
        InvoiceDjangoRepository,
    )
    from modules.notifications.push import LinePushNotifier
    from modules.notifications.repositories.django_repository import (
        NotificationDjangoRepository,
    )
    from modules.notifications.services import NotificationService

    order = _load_order(order_id)
    if order is None:
        return False

    line_user_id = (
        Profile.objects.filter(user_id=order.user_id)
        .values_list("line_user_id", flat=True)
        .first()
    )
    invoice = InvoiceDjangoRepository().get_by_order(order.id)
    service = NotificationService(
        NotificationDjangoRepository(), notifier=LinePushNotifier.from_settings()
    )
    return service.push_payment_confirmation(
        line_user_id=line_user_id,
        order_number=order.order_number,
        total_amount=order.total_amount,
        invoice_id=invoice.id if invoice else None,
    )
