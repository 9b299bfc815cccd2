"""Django ORM implementation of the Invoice repository."""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.db import transaction

from modules.core.repositories.interfaces import EntityId, coerce_id
from modules.invoices.models import Invoice
from modules.invoices.repositories.interfaces import IInvoiceRepository

logger = structlog.get_logger(__name__)


class InvoiceDjangoRepository(IInvoiceRepository):
    def _with_relations(self):
        return Invoice.objects.select_related("order", "user").prefetch_related(
            "order__items__fruit__category"
        )

    def get_by_id(self, id: EntityId) -> Optional[Invoice]:
        pk = coerce_id(id)
        if pk is None:
            return None
        return self._with_relations().filter(id=pk).first()

    def get_by_order(self, order_id: int) -> Optional[Invoice]:
        pk = coerce_id(order_id)
        if pk is None:
            return None
        return self._with_relations().filter(order_id=pk).first()

    def list(self, filters: Optional[Dict[str, Any]] = None):
        queryset = self._with_relations()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def create(self, data: Dict[str, Any]) -> Invoice:
        invoice = Invoice(**data)
        invoice.save()
        return invoice

    @transaction.atomic
    def save(self, entity: Invoice) -> Invoice:
        entity.save()
        logger.info("invoice.saved", invoice_id=entity.id)
        return entity
