"""Catalog repository interfaces.

``ICategoryRepository`` and ``IFruitRepository`` extend ``IDeletableRepository``
with catalog look-ups.  ``IInventoryLedger`` is the only contract allowed
to change ``Fruit.stock``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from django.db import DEFAULT_DB_ALIAS, models

from modules.core.repositories.interfaces import EntityId, IDeletableRepository

if TYPE_CHECKING:
    from modules.catalog.models import Category, Fruit


class ICategoryRepository(IDeletableRepository["Category"]):
    """Repository contract for categories."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Category]":
        """List categories with optional filters."""

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Category]:
        """Retrieve a category by case-insensitive name."""

    @abstractmethod
    def has_fruits(self, id: EntityId) -> bool:
        """Return ``True`` if any fruit (alive or deleted) references it."""


class IFruitRepository(IDeletableRepository["Fruit"]):
    """Read-side repository contract for fruits."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Fruit]":
        """List alive fruits with optional filters."""

    @abstractmethod
    def get_many(self, ids: List[int]) -> Dict[int, Fruit]:
        """Retrieve alive fruits by id, keyed by id, category joined."""

    @abstractmethod
    def popular(self, limit: int) -> List[Fruit]:
        """Return fruits ordered by total quantity ever ordered."""


class IInventoryLedger(ABC):
    """Stock mutation contract.

    Every method runs inside the caller's transaction on the connection
    named by ``using``; none of them opens or commits a transaction.
    Outcomes are reported raw: ``None`` means no row was updated.
    """

    @abstractmethod
    def reserve(
        self, fruit_id: int, amount: Decimal, using: str = DEFAULT_DB_ALIAS
    ) -> Optional[Fruit]:
        """Decrement stock by ``amount`` only if ``stock >= amount``."""

    @abstractmethod
    def release(
        self, fruit_id: int, amount: Decimal, using: str = DEFAULT_DB_ALIAS
    ) -> Optional[Fruit]:
        """Increment stock by ``amount`` unconditionally."""

    @abstractmethod
    def set_stock(
        self, fruit_id: int, quantity: Decimal, using: str = DEFAULT_DB_ALIAS
    ) -> Optional[Fruit]:
        """Overwrite stock with an administrative count (must be >= 0)."""
