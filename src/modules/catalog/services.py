"""Catalog service layer (Use Cases).

Orchestrates business logic for categories and fruits, delegating
persistence to injected repositories and stock writes to the
inventory ledger.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.catalog.exceptions import (
    CategoryAlreadyExists,
    CategoryInUse,
    CategoryNotFound,
    FruitNotFound,
)
from modules.catalog.models import Category, Fruit

if TYPE_CHECKING:
    from modules.catalog.dtos import (
        CreateCategoryDTO,
        CreateFruitDTO,
        PriceQuoteDTO,
        UpdateCategoryDTO,
        UpdateFruitDTO,
    )
    from modules.catalog.repositories.interfaces import (
        ICategoryRepository,
        IFruitRepository,
        IInventoryLedger,
    )

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")
POPULAR_FRUITS_LIMIT = 4


class CategoryService:
    """Application service for category use-cases."""

    def __init__(self, repository: ICategoryRepository) -> None:
        self._repo = repository

    @transaction.atomic
    def create_category(self, dto: CreateCategoryDTO) -> Category:
        if self._repo.get_by_name(dto.name):
            logger.warning("category.duplicate_name", name=dto.name)
            raise CategoryAlreadyExists(f"Category '{dto.name}' already exists.")
        category = self._repo.save(Category(name=dto.name, unit=dto.unit))
        logger.info("category.created", category_id=category.id, unit=category.unit)
        return category

    @transaction.atomic
    def update_category(self, id: str, dto: UpdateCategoryDTO) -> Category:
        category = self.get_category(id)
        if dto.name is not None and dto.name.lower() != category.name.lower():
            if self._repo.get_by_name(dto.name):
                raise CategoryAlreadyExists(f"Category '{dto.name}' already exists.")
            category.name = dto.name
        if dto.unit is not None:
            category.unit = dto.unit
        return self._repo.save(category)

    def list_categories(self, filters: Optional[Dict[str, Any]] = None):
        return self._repo.list(filters)

    def get_category(self, id: str) -> Category:
        category = self._repo.get_by_id(id)
        if not category:
            raise CategoryNotFound(f"Category {id} not found.")
        return category

    @transaction.atomic
    def delete_category(self, id: str) -> None:
        """Delete a category that no fruit references.

        Raises:
            CategoryNotFound: if the category does not exist.
            CategoryInUse: if fruits still reference it.
        """
        category = self.get_category(id)
        if self._repo.has_fruits(category.id):
            raise CategoryInUse(f"Category {id} still has fruits.")
        self._repo.delete(category.id)


class FruitService:
    """Application service for fruit use-cases.

    Receives the fruit and category repositories plus the inventory
    ledger via constructor injection (DIP).
    """

    def __init__(
        self,
        repository: IFruitRepository,
        category_repository: ICategoryRepository,
        ledger: IInventoryLedger,
    ) -> None:
        self._repo = repository
        self._category_repo = category_repository
        self._ledger = ledger

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def _resolve_category(self, category_id: Optional[int]) -> Optional[Category]:
        if category_id is None:
            return None
        category = self._category_repo.get_by_id(category_id)
        if not category:
            raise CategoryNotFound(f"Category {category_id} not found.")
        return category

    @transaction.atomic
    def create_fruit(self, dto: CreateFruitDTO) -> Fruit:
        """Create a fruit.

        Raises:
            CategoryNotFound: if ``category_id`` does not exist.
        """
        fruit = Fruit(
            name=dto.name,
            description=dto.description,
            price=dto.price,
            stock=dto.stock,
            category=self._resolve_category(dto.category_id),
            image_url=dto.image_url,
        )
        fruit = self._repo.save(fruit)
        logger.info("fruit.created", fruit_id=fruit.id, unit=fruit.unit)
        return fruit

    @transaction.atomic
    def update_fruit(self, id: str, dto: UpdateFruitDTO) -> Fruit:
        """Update catalog fields; a supplied ``stock`` goes through the ledger.

        Raises:
            FruitNotFound: if the fruit does not exist.
            CategoryNotFound: if the new category does not exist.
        """
        fruit = self.get_fruit(id)
        log = logger.bind(fruit_id=fruit.id)

        for field in ("name", "price", "description", "image_url"):
            value = getattr(dto, field)
            if value is not None:
                setattr(fruit, field, value)
        if "category_id" in dto.model_fields_set:
            fruit.category = self._resolve_category(dto.category_id)

        fruit.save(
            update_fields=["name", "price", "description", "image_url", "category"]
        )

        if dto.stock is not None:
            self._ledger.set_stock(fruit.id, dto.stock)
            log.info("fruit.stock_corrected", stock=str(dto.stock))

        log.info("fruit.updated")
        return self.get_fruit(fruit.id)

    @transaction.atomic
    def delete_fruit(self, id: str) -> None:
        """Soft-delete a fruit.

        Raises:
            FruitNotFound: if the fruit does not exist.
        """
        if not self._repo.delete(id):
            raise FruitNotFound(f"Fruit {id} not found.")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_fruits(self, filters: Optional[Dict[str, Any]] = None):
        return self._repo.list(filters)

    def get_fruit(self, id) -> Fruit:
        """Retrieve a single alive fruit by ID.

        Raises:
            FruitNotFound: if the fruit does not exist.
        """
        fruit = self._repo.get_by_id(id)
        if not fruit:
            raise FruitNotFound(f"Fruit {id} not found.")
        return fruit

    def popular_fruits(self, limit: int = POPULAR_FRUITS_LIMIT) -> List[Fruit]:
        return self._repo.popular(limit)

    def calculate_total_price(self, dto: PriceQuoteDTO) -> Dict[str, Any]:
        """Price ``weight`` units of a fruit at its current catalog price.

        Raises:
            FruitNotFound: if the fruit does not exist.
        """
        fruit = self.get_fruit(dto.fruit_id)
        total = (fruit.price * dto.weight).quantize(CENT, rounding=ROUND_HALF_UP)
        return {
            "fruit_id": fruit.id,
            "name": fruit.name,
            "unit": fruit.unit,
            "price": fruit.price,
            "weight": dto.weight,
            "total_price": total,
        }
