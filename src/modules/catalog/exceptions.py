"""Catalog domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations


class FruitNotFound(Exception):
    """The requested fruit does not exist or has been soft-deleted."""


class CategoryNotFound(Exception):
    """The requested category does not exist."""


class CategoryAlreadyExists(Exception):
    """A category with the same name already exists."""


class CategoryInUse(Exception):
    """The category still has fruits attached and cannot be removed."""
