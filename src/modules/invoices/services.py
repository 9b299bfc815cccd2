"""Invoice service layer (Use Cases).

Issuance is idempotent: an order gets at most one invoice.  The order
row is locked (or already locked by the caller), the existing invoice is
returned when present, and a concurrent duplicate insert is caught via
the UNIQUE constraint and resolved by re-reading.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Tuple

import structlog
from django.db import DEFAULT_DB_ALIAS, IntegrityError, transaction
from django.utils import timezone

from modules.invoices.exceptions import InvoiceNotFound, InvoiceRendererUnavailable
from modules.invoices.models import Invoice
from modules.invoices.rendering import IInvoicePdfRenderer, load_pdf_renderer
from modules.orders.exceptions import OrderNotFound

if TYPE_CHECKING:
    from modules.invoices.repositories.interfaces import IInvoiceRepository
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class InvoiceService:
    """Application service for invoice use-cases.

    ``using`` names the database connection its transactions run on; it
    must match the order service that drives issuance.
    """

    def __init__(
        self,
        repository: IInvoiceRepository,
        order_repository: IOrderRepository,
        renderer: Optional[IInvoicePdfRenderer] = None,
        using: str = DEFAULT_DB_ALIAS,
    ) -> None:
        self._repo = repository
        self._order_repo = order_repository
        self._renderer = renderer
        self._using = using

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def issue(self, order: Order) -> Tuple[Invoice, bool]:
        """Issue the invoice for an order the caller has already locked.

        Returns ``(invoice, created)``.
        """
        existing = self._repo.get_by_order(order.id)
        if existing:
            return existing, False

        items = list(order.items.all())
        subtotal = sum((item.subtotal for item in items), Decimal("0.00"))
        data = {
            "order_id": order.id,
            "user_id": order.user_id,
            "subtotal": subtotal,
            "total_amount": order.total_amount,
            "payment_method": order.payment_method,
            "payment_date": timezone.now(),
            "notes": f"Invoice for order {order.order_number}",
        }
        try:
            with transaction.atomic(using=self._using):
                invoice = self._repo.create(data)
        except IntegrityError:
            existing = self._repo.get_by_order(order.id)
            if existing is None:
                raise
            logger.info("invoice.concurrent_duplicate", order_id=order.id)
            return existing, False

        logger.info(
            "invoice.issued",
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            order_id=order.id,
        )
        return invoice, True

    def issue_for_order(self, order_id: int) -> Tuple[Invoice, bool]:
        """Lock the order and issue its invoice if it has none.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        with transaction.atomic(using=self._using):
            order = self._order_repo.get_for_update(order_id)
            if not order:
                raise OrderNotFound(f"Order {order_id} not found.")
            return self.issue(order)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_invoice(self, invoice_id, user=None) -> Invoice:
        """Retrieve an invoice; non-admin callers only see their own.

        Raises:
            InvoiceNotFound: if missing or owned by someone else.
        """
        invoice = self._repo.get_by_id(invoice_id)
        if not invoice or not _visible_to(invoice, user):
            raise InvoiceNotFound(f"Invoice {invoice_id} not found.")
        return invoice

    def get_invoice_for_order(self, order_id, user=None) -> Invoice:
        invoice = self._repo.get_by_order(order_id)
        if not invoice or not _visible_to(invoice, user):
            raise InvoiceNotFound(f"No invoice for order {order_id}.")
        return invoice

    def list_invoices_for_user(self, user_id: int):
        return self._repo.list({"user_id": user_id})

    def list_all_invoices(self):
        return self._repo.list()

    def render_pdf(self, invoice: Invoice) -> bytes:
        """Render the invoice through the configured PDF renderer.

        Raises:
            InvoiceRendererUnavailable: if no renderer is configured.
        """
        renderer = self._renderer or load_pdf_renderer()
        if renderer is None:
            raise InvoiceRendererUnavailable("No invoice PDF renderer configured.")
        return renderer.render(invoice, list(invoice.order.items.all()))


def _visible_to(invoice: Invoice, user) -> bool:
    if user is None or user.is_staff:
        return True
    return invoice.user_id == user.id
