"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
Write operations are wrapped in ``transaction.atomic()`` so the Order
aggregate (Order + OrderItems) is persisted atomically; when called
inside the service's transaction they become savepoints of it.

Concurrency control on status updates uses ``select_for_update()``
(no ``version`` field exists on the model).
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict, List, Optional

import structlog
from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from modules.core.repositories.interfaces import EntityId, coerce_id
from modules.orders.constants import MAX_EXPIRY_MINUTES, PURCHASED_STATES, OrderStatus
from modules.orders.models import (
    Order,
    OrderItem,
    OrderStatusHistory,
    PaymentSlip,
    line_subtotal,
)
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _with_relations(self):
        return Order.objects.select_related("user").prefetch_related(
            "items__fruit__category", "status_history"
        )

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items atomically.

        The header is inserted first so its id can be embedded in the
        order number; items follow in one bulk insert.
        """
        order = Order(
            user_id=data["user_id"],
            total_amount=data["total_amount"],
            shipping_address=data["shipping_address"],
            shipping_city=data.get("shipping_city", ""),
            shipping_postal_code=data.get("shipping_postal_code", ""),
            shipping_country=data["shipping_country"],
            payment_method=data["payment_method"],
            notes=data.get("notes", ""),
        )
        order.save()
        items = self.create_items(order.id, data.get("items", []))

        logger.info(
            "order.persisted",
            order_id=order.id,
            order_number=order.order_number,
            item_count=len(items),
        )
        return order

    @transaction.atomic
    def create_items(
        self, order_id: int, items: List[Dict[str, Any]]
    ) -> List[OrderItem]:
        rows = []
        for item_data in items:
            item = OrderItem(
                order_id=order_id,
                fruit_id=item_data["fruit_id"],
                quantity=item_data["quantity"],
                price=item_data["price"],
            )
            # bulk_create bypasses save(); derive the subtotal here.
            item.subtotal = line_subtotal(item.price, item.quantity)
            rows.append(item)
        return OrderItem.objects.bulk_create(rows)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: EntityId) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Returns ``None`` for non-existent or malformed IDs.
        """
        pk = coerce_id(id)
        if pk is None:
            return None
        return self._with_relations().filter(id=pk).first()

    def get_for_update(self, id: EntityId) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Must be called inside ``transaction.atomic()``.  ``of=("self",)``
        keeps the lock on the order row only, not on the joined user.
        """
        pk = coerce_id(id)
        if pk is None:
            return None
        return (
            Order.objects.select_for_update(of=("self",))
            .select_related("user")
            .prefetch_related("items__fruit__category")
            .filter(id=pk)
            .first()
        )

    def list(self, filters: Optional[Dict[str, Any]] = None):
        """List orders with optional filters and eager-loaded relations.

        Supported filter keys include ``status``, ``user_id`` and
        ``created_at__range``.
        """
        queryset = self._with_relations()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def list_for_user(self, user_id: int):
        return self.list({"user_id": user_id})

    # ------------------------------------------------------------------
    # Save (IRepository contract)
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist (create or update) an order header."""
        entity.save()
        logger.info("order.saved", order_id=entity.id)
        return entity

    # ------------------------------------------------------------------
    # Order-specific writes
    # ------------------------------------------------------------------

    def update_status(self, order: Order, new_status: str) -> Order:
        order.status = new_status
        order.save(update_fields=["status"])
        return order

    def add_history(
        self,
        order_id: int,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=status,
            user_id=user_id,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=order_id,
            old_status=old_status,
            new_status=status,
        )
        return history

    def add_payment_slip(self, order_id: int, data: Dict[str, Any]) -> PaymentSlip:
        return PaymentSlip.objects.create(order_id=order_id, **data)

    def has_payment_slip(self, order_id: int) -> bool:
        return PaymentSlip.objects.filter(order_id=order_id).exists()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_expired_pending(self, max_age_minutes: int) -> List[int]:
        """Return ids of pending orders older than ``max_age_minutes``.

        Raises:
            ValueError: if ``max_age_minutes`` is outside ``[0, 1440]``.
        """
        if not 0 <= max_age_minutes <= MAX_EXPIRY_MINUTES:
            raise ValueError(
                f"max_age_minutes must be between 0 and {MAX_EXPIRY_MINUTES}."
            )
        cutoff = timezone.now() - timedelta(minutes=max_age_minutes)
        return list(
            Order.objects.filter(status=OrderStatus.PENDING, created_at__lt=cutoff)
            .order_by("id")
            .values_list("id", flat=True)
        )

    def most_bought_fruits(self, user_id: int, limit: int) -> List[Dict[str, Any]]:
        return list(
            OrderItem.objects.filter(
                order__user_id=user_id,
                order__status__in=PURCHASED_STATES,
                fruit__deleted_at__isnull=True,
            )
            .values("fruit_id", "fruit__name", "fruit__price")
            .annotate(
                total_quantity=Sum("quantity"),
                order_count=Count("order", distinct=True),
            )
            .order_by("-total_quantity", "fruit_id")[:limit]
        )
