"""Invoice model.

Business rules implemented:
- Invoice number is ``INV-YYYY-MMDD-{id}``, assigned right after insert.
- At most one invoice per order: the one-to-one column is UNIQUE, so a
  concurrent second insert fails at the database.
- Amounts are a snapshot of the order at issuance time.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models

from modules.core.models import NumberedDocumentModel


class Invoice(NumberedDocumentModel):
    number_field = "invoice_number"
    number_prefix = "INV"

    invoice_number = models.CharField(max_length=40, unique=True, editable=False)
    order = models.OneToOneField(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="invoice",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    subtotal = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    payment_method = models.CharField(max_length=50, blank=True, default="")
    payment_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "invoices"
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return self.invoice_number
