"""Pluggable PDF rendering for invoices.

The renderer is configured by dotted path in ``INVOICE_PDF_RENDERER``;
an empty value disables PDF downloads.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, Sequence

from django.conf import settings
from django.utils.module_loading import import_string

if TYPE_CHECKING:
    from modules.invoices.models import Invoice
    from modules.orders.models import OrderItem


class IInvoicePdfRenderer(Protocol):
    def render(self, invoice: Invoice, line_items: Sequence[OrderItem]) -> bytes: ...


def load_pdf_renderer() -> Optional[IInvoicePdfRenderer]:
    path = getattr(settings, "INVOICE_PDF_RENDERER", "")
    if not path:
        return None
    return import_string(path)()
