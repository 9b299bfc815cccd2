"""Django ORM implementations of the catalog repositories.

Error handling follows the Null Object pattern: methods return ``None``
instead of raising HTTP-level exceptions; the Service Layer decides
how to translate a missing entity into an API response.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.db import transaction
from django.db.models import Sum

from modules.catalog.models import Category, Fruit
from modules.catalog.repositories.interfaces import (
    ICategoryRepository,
    IFruitRepository,
)
from modules.core.repositories.interfaces import EntityId, coerce_id

logger = structlog.get_logger(__name__)


class CategoryDjangoRepository(ICategoryRepository):
    """Concrete Category repository backed by Django ORM."""

    def get_by_id(self, id: EntityId) -> Optional[Category]:
        pk = coerce_id(id)
        if pk is None:
            return None
        return Category.objects.filter(id=pk).first()

    def get_by_name(self, name: str) -> Optional[Category]:
        return Category.objects.filter(name__iexact=name.strip()).first()

    def list(self, filters: Optional[Dict[str, Any]] = None):
        queryset = Category.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def has_fruits(self, id: EntityId) -> bool:
        return Fruit.objects.filter(category_id=coerce_id(id)).exists()

    @transaction.atomic
    def save(self, entity: Category) -> Category:
        is_new = entity._state.adding
        entity.save()
        logger.info("category.saved", category_id=entity.id, is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: EntityId) -> bool:
        category = self.get_by_id(id)
        if not category:
            return False
        category.delete()
        logger.info("category.deleted", category_id=coerce_id(id))
        return True


class FruitDjangoRepository(IFruitRepository):
    """Concrete Fruit repository backed by Django ORM.

    Reads only alive (not soft-deleted) fruits and always joins the
    category so ``Fruit.unit`` never costs an extra query.
    """

    def _alive(self):
        return Fruit.objects.alive().select_related("category")

    def get_by_id(self, id: EntityId) -> Optional[Fruit]:
        pk = coerce_id(id)
        if pk is None:
            return None
        return self._alive().filter(id=pk).first()

    def get_many(self, ids: List[int]) -> Dict[int, Fruit]:
        return {fruit.id: fruit for fruit in self._alive().filter(id__in=ids)}

    def list(self, filters: Optional[Dict[str, Any]] = None):
        """List alive fruits.

        Examples of valid filters::

            {"category_id": 3}
            {"name__icontains": "mango", "price__lte": "50"}
        """
        queryset = self._alive()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def popular(self, limit: int) -> List[Fruit]:
        """Rank fruits by the summed quantity of every order line."""
        return list(
            self._alive()
            .annotate(total_ordered=Sum("order_items__quantity"))
            .filter(total_ordered__gt=0)
            .order_by("-total_ordered", "id")[:limit]
        )

    @transaction.atomic
    def save(self, entity: Fruit) -> Fruit:
        """Persist (create or update) a fruit."""
        is_new = entity._state.adding
        entity.save()
        logger.info("fruit.saved", fruit_id=entity.id, is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: EntityId) -> bool:
        """Soft-delete a fruit by ID.

        Returns ``True`` if the fruit was found and soft-deleted,
        ``False`` otherwise.
        """
        fruit = self.get_by_id(id)
        if not fruit:
            return False
        fruit.delete()
        logger.info("fruit.soft_deleted", fruit_id=fruit.id)
        return True
