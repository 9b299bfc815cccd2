"""Wiring of the order services with their Django-backed collaborators."""

from __future__ import annotations

from django.db import DEFAULT_DB_ALIAS

from modules.catalog.repositories.django_repository import FruitDjangoRepository
from modules.catalog.repositories.ledger import InventoryDjangoLedger
from modules.invoices.repositories.django_repository import InvoiceDjangoRepository
from modules.invoices.services import InvoiceService
from modules.orders.dispatcher import SideEffectDispatcher
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService


def build_invoice_service(using: str = DEFAULT_DB_ALIAS) -> InvoiceService:
    return InvoiceService(
        repository=InvoiceDjangoRepository(),
        order_repository=OrderDjangoRepository(),
        using=using,
    )


def build_order_service(using: str = DEFAULT_DB_ALIAS) -> OrderService:
    """Order service whose transactions and commit hooks run on ``using``."""
    return OrderService(
        order_repository=OrderDjangoRepository(),
        fruit_repository=FruitDjangoRepository(),
        ledger=InventoryDjangoLedger(),
        dispatcher=SideEffectDispatcher(
            invoice_service=build_invoice_service(using), using=using
        ),
        using=using,
    )
