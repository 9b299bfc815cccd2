"""Category and Fruit models.

Business rules implemented:
- Category name is unique; its ``unit`` (piece / kg) decides how every
  fruit under it is measured and decremented.
- Fruit price must be greater than zero (DB check constraint).
- Fruit stock can never be negative (DB check constraint).  Stock is
  changed only through the inventory ledger.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel

logger = structlog.get_logger(__name__)


class UnitType(models.TextChoices):
    PIECE = "piece", "Piece"
    KG = "kg", "Kilogram"


DEFAULT_UNIT = UnitType.KG


class Category(BaseModel):
    """Fruit category; owns the unit of measure."""

    name = models.CharField(max_length=100, unique=True)
    unit = models.CharField(
        max_length=10,
        choices=UnitType.choices,
        default=DEFAULT_UNIT,
    )

    class Meta:
        db_table = "categories"
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return f"{self.name} ({self.unit})"


class Fruit(SoftDeleteModel):
    """Catalog item.

    ``stock`` holds whole pieces for piece-sold fruits and kilograms
    (three decimal places) for weight-sold fruits.
    """

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    stock = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    category = models.ForeignKey(
        "catalog.Category",
        on_delete=models.PROTECT,
        related_name="fruits",
        null=True,
        blank=True,
    )
    image_url = models.URLField(max_length=500, blank=True, default="")

    class Meta:
        db_table = "fruits"
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="fruits_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="fruits_stock_non_negative",
            ),
        ]

    @property
    def unit(self) -> str:
        """Unit inherited from the category; ``kg`` when uncategorised."""
        if self.category_id is None:
            return DEFAULT_UNIT
        return self.category.unit or DEFAULT_UNIT

    def clean(self) -> None:
        super().clean()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": "Stock cannot be negative."})

    def save(self, *args, **kwargs) -> None:
        is_new = self._state.adding
        super().save(*args, **kwargs)
        if is_new:
            logger.info("fruit_created", fruit_id=self.id, name=self.name)

    def __str__(self) -> str:
        return self.name
