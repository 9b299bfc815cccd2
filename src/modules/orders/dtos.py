"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderItemDTO``: input for a single order line.
- ``ShippingInfoDTO``: delivery address and payment method.
- ``CreateOrderDTO``: input for order creation (nested items).

Unit-aware rules (integral pieces, positive kilograms) depend on the
fruit's category and are enforced by the service, not here.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class CreateOrderItemDTO(BaseModel):
    """Immutable DTO for a single order line.

    Callers send either ``quantity`` (pieces) or ``weight`` (kilograms);
    ``amount`` resolves whichever was given.  ``price`` is resolved by the
    service from the catalog.
    """

    model_config = ConfigDict(frozen=True)

    fruit_id: int
    quantity: Optional[Decimal] = None
    weight: Optional[Decimal] = None

    @model_validator(mode="after")
    def amount_must_be_given(self):
        if self.quantity is None and self.weight is None:
            raise ValueError("Each item needs a quantity or a weight.")
        return self

    @property
    def amount(self) -> Decimal:
        return self.quantity if self.quantity is not None else self.weight


class ShippingInfoDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    shipping_address: str
    shipping_city: str = ""
    shipping_postal_code: str = ""
    shipping_country: Optional[str] = None
    payment_method: Optional[str] = None

    @field_validator("shipping_address")
    @classmethod
    def address_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Shipping address is required.")
        return v.strip()


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one item.
    - A fruit may appear at most once.
    """

    model_config = ConfigDict(frozen=True)

    user_id: int
    items: List[CreateOrderItemDTO]
    shipping: ShippingInfoDTO
    notes: str = ""

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateOrderItemDTO]
    ) -> List[CreateOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @model_validator(mode="after")
    def no_duplicate_fruits(self):
        fruit_ids = [item.fruit_id for item in self.items]
        if len(fruit_ids) != len(set(fruit_ids)):
            raise ValueError("Duplicate fruit IDs are not allowed in the same order.")
        return self
