"""Inventory ledger backed by conditional SQL updates.

``reserve`` issues a single
``UPDATE fruits SET stock = stock - x WHERE id = ? AND stock >= x``
so the database evaluates the guard and the decrement atomically.  Two
concurrent reservations can never both pass the check against the same
stale value, and no read-modify-write happens in Python.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

import structlog
from django.db import DEFAULT_DB_ALIAS
from django.db.models import F
from django.utils import timezone

from modules.catalog.models import Fruit
from modules.catalog.repositories.interfaces import IInventoryLedger

logger = structlog.get_logger(__name__)


class InventoryDjangoLedger(IInventoryLedger):
    """Concrete ledger; the only code path that writes ``Fruit.stock``."""

    def _fetch(self, fruit_id: int, using: str) -> Optional[Fruit]:
        return Fruit.objects.using(using).filter(id=fruit_id).first()

    def reserve(
        self, fruit_id: int, amount: Decimal, using: str = DEFAULT_DB_ALIAS
    ) -> Optional[Fruit]:
        updated = (
            Fruit.objects.using(using)
            .filter(id=fruit_id, stock__gte=amount)
            .update(stock=F("stock") - amount, updated_at=timezone.now())
        )
        if not updated:
            logger.warning(
                "ledger.reserve_rejected", fruit_id=fruit_id, amount=str(amount)
            )
            return None
        fruit = self._fetch(fruit_id, using)
        logger.info(
            "ledger.reserved",
            fruit_id=fruit_id,
            amount=str(amount),
            remaining=str(fruit.stock) if fruit else None,
        )
        return fruit

    def release(
        self, fruit_id: int, amount: Decimal, using: str = DEFAULT_DB_ALIAS
    ) -> Optional[Fruit]:
        updated = (
            Fruit.objects.using(using)
            .filter(id=fruit_id)
            .update(stock=F("stock") + amount, updated_at=timezone.now())
        )
        if not updated:
            logger.warning(
                "ledger.release_missing_fruit", fruit_id=fruit_id, amount=str(amount)
            )
            return None
        fruit = self._fetch(fruit_id, using)
        logger.info(
            "ledger.released",
            fruit_id=fruit_id,
            amount=str(amount),
            restored=str(fruit.stock) if fruit else None,
        )
        return fruit

    def set_stock(
        self, fruit_id: int, quantity: Decimal, using: str = DEFAULT_DB_ALIAS
    ) -> Optional[Fruit]:
        if quantity < 0:
            raise ValueError("Stock cannot be negative.")
        updated = (
            Fruit.objects.using(using)
            .filter(id=fruit_id)
            .update(stock=quantity, updated_at=timezone.now())
        )
        if not updated:
            return None
        logger.info("ledger.stock_set", fruit_id=fruit_id, quantity=str(quantity))
        return self._fetch(fruit_id, using)
