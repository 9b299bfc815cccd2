"""Invoice repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db import models

    from modules.invoices.models import Invoice


class IInvoiceRepository(IRepository["Invoice"]):
    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Invoice]":
        """List invoices with optional filters."""

    @abstractmethod
    def get_by_order(self, order_id: int) -> Optional[Invoice]:
        """Retrieve the invoice of an order, if one was issued."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Invoice:
        """Insert an invoice; raises ``IntegrityError`` on a duplicate order."""
