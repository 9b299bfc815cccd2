"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the order lifecycle
needs: atomic creation with items, row-locked reads, status writes,
history tracking and the expiry / reporting queries.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import EntityId, IRepository

if TYPE_CHECKING:
    from django.db import models

    from modules.orders.models import Order, OrderItem, OrderStatusHistory, PaymentSlip


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes OrderItem children, OrderStatusHistory records
    and the optional PaymentSlip.  Writes never touch inventory.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order header and its items atomically.

        ``data`` must include ``user_id``, ``total_amount``, shipping
        fields and ``items`` (list of dicts with ``fruit_id``,
        ``quantity``, ``price``).
        """

    @abstractmethod
    def create_items(self, order_id: int, items: List[Dict[str, Any]]) -> List[OrderItem]:
        """Bulk-insert order lines."""

    @abstractmethod
    def get_by_id(self, id: EntityId) -> Optional[Order]:
        """Retrieve an order with prefetched items and status history."""

    @abstractmethod
    def get_for_update(self, id: EntityId) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> "models.QuerySet[Order]":
        """List orders with optional filters."""

    @abstractmethod
    def list_for_user(self, user_id: int) -> "models.QuerySet[Order]":
        """List one customer's orders, newest first."""

    @abstractmethod
    def update_status(self, order: Order, new_status: str) -> Order:
        """Persist only ``status`` (and ``updated_at``)."""

    @abstractmethod
    def add_history(
        self,
        order_id: int,
        status: str,
        notes: str = "",
        old_status: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def add_payment_slip(self, order_id: int, data: Dict[str, Any]) -> PaymentSlip:
        """Attach the single payment slip to an order."""

    @abstractmethod
    def has_payment_slip(self, order_id: int) -> bool:
        """Return ``True`` if the order already has a payment slip."""

    @abstractmethod
    def list_expired_pending(self, max_age_minutes: int) -> List[int]:
        """Ids of pending orders created more than ``max_age_minutes`` ago."""

    @abstractmethod
    def most_bought_fruits(self, user_id: int, limit: int) -> List[Dict[str, Any]]:
        """Fruits the user bought most, aggregated over purchased orders."""
