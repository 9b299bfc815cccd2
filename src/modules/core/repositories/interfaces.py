"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on Django ORM directly.

Primary keys are database-assigned integers; implementations accept
anything ``int()`` understands and return ``None`` for malformed ids.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, Protocol, TypeVar, Union

from django.db import models

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

EntityId = Union[int, str]


class Queryable(Protocol[T_co]):
    def filter(self, **kwargs: Any) -> models.QuerySet: ...


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the domain entity managed by the
    repository (e.g. ``Fruit``, ``Order``, ``Invoice``).
    """

    @abstractmethod
    def get_by_id(self, id: EntityId) -> Optional[T]:
        """Retrieve an entity by its primary key."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> Queryable[T]:
        """List entities with optional filters."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""


class IDeletableRepository(IRepository[T]):
    """Repository for entities that may be removed.

    Orders, invoices and users are kept for the audit trail and only
    implement ``IRepository``.
    """

    @abstractmethod
    def delete(self, id: EntityId) -> bool:
        """Remove an entity by ID (soft or hard delete)."""


def coerce_id(value: Any) -> Optional[int]:
    """Return ``value`` as a positive int, or ``None`` when it is not one."""
    if isinstance(value, bool):
        return None
    try:
        result = int(value)
    except (TypeError, ValueError):
        return None
    return result if result > 0 else None
