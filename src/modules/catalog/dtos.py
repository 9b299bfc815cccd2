"""Catalog DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``CreateCategoryDTO`` / ``UpdateCategoryDTO``: category input.
- ``CreateFruitDTO`` / ``UpdateFruitDTO``: fruit input.
- ``PriceQuoteDTO``: input for the cart price calculator.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator

from modules.catalog.models import UnitType


class CreateCategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    unit: UnitType = UnitType.KG

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Category name must not be empty.")
        return v.strip()


class UpdateCategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    unit: UnitType | None = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Category name must not be empty.")
        return v.strip() if v is not None else v


class CreateFruitDTO(BaseModel):
    """Immutable DTO for fruit creation requests.

    Validates:
    - ``price`` is greater than zero.
    - ``stock`` is non-negative.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    price: Decimal
    stock: Decimal = Decimal("0")
    description: str = ""
    category_id: int | None = None
    image_url: str = ""

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Fruit name must not be empty.")
        return v.strip()

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Price must be greater than zero.")
        return v

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Stock cannot be negative.")
        return v


class UpdateFruitDTO(BaseModel):
    """Immutable DTO for fruit update requests.

    All fields are optional; only supplied fields are updated.  ``stock``
    is routed through the inventory ledger, never assigned directly.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    price: Decimal | None = None
    stock: Decimal | None = None
    description: str | None = None
    category_id: int | None = None
    image_url: str | None = None

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v <= 0:
            raise ValueError("Price must be greater than zero.")
        return v

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v < 0:
            raise ValueError("Stock cannot be negative.")
        return v


class PriceQuoteDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    fruit_id: int
    weight: Decimal

    @field_validator("weight")
    @classmethod
    def weight_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Weight must be greater than zero.")
        return v
