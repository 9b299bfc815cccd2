"""Side effects of order status changes.

- Invoice issuance runs inside the status transaction, in a savepoint,
  while the order row is still locked.  A failure rolls back only the
  savepoint and is logged; the status change itself stands.
- Domain events are published on the in-process bus only after the
  transaction commits.  Handlers enqueue Celery tasks, so notifications
  and push messages never hold the stock transaction open.
"""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Optional

import structlog
from django.db import DEFAULT_DB_ALIAS, transaction

from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from modules.invoices.models import Invoice
    from modules.invoices.services import InvoiceService
    from modules.orders.models import Order
    from shared.domain.bus import IEventBus
    from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class SideEffectDispatcher:
    def __init__(
        self,
        invoice_service: InvoiceService,
        bus: Optional[IEventBus] = None,
        using: str = DEFAULT_DB_ALIAS,
    ) -> None:
        self._invoices = invoice_service
        self._bus = bus if bus is not None else event_bus
        self._using = using

    def issue_invoice(self, order: Order) -> Optional[Invoice]:
        """Issue the order's invoice; ``None`` when issuance failed."""
        try:
            with transaction.atomic(using=self._using):
                invoice, _created = self._invoices.issue(order)
        except Exception:
            logger.exception("invoice.issue_failed", order_id=order.id)
            return None
        return invoice

    def publish_after_commit(self, *events: DomainEvent) -> None:
        """Queue events for publication once the current transaction commits.

        Outside a transaction (autocommit) they are published immediately.
        """
        for event in events:
            transaction.on_commit(
                partial(self._publish, event), using=self._using, robust=True
            )

    def _publish(self, event: DomainEvent) -> None:
        logger.info(
            "order.event_published",
            event_name=event.event_name,
            order_id=event.aggregate_id,
        )
        self._bus.publish(event)
