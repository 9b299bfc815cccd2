"""Invoice domain exceptions."""

from __future__ import annotations


class InvoiceNotFound(Exception):
    """The requested invoice does not exist or is not visible to the caller."""


class InvoiceRendererUnavailable(Exception):
    """No PDF renderer is configured."""
