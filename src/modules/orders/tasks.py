"""Celery tasks of the orders module."""

import structlog
from celery import shared_task
from django.conf import settings

logger = structlog.get_logger(__name__)


@shared_task(name="orders.cancel_expired_orders")
def cancel_expired_orders(max_age_minutes=None):
    """Periodic sweep: cancel pending orders past the payment window."""
    from modules.orders.factories import build_order_service

    minutes = (
        settings.ORDER_PAYMENT_TIMEOUT_MINUTES
        if max_age_minutes is None
        else max_age_minutes
    )
    cancelled = build_order_service().cancel_expired_orders(minutes)
    if cancelled:
        logger.info("orders.expired_cancelled", order_numbers=cancelled)
    return {"cancelled": cancelled}
