"""Base abstract models shared by every module.

Provides:
- ``BaseModel``: created_at / updated_at timestamp bookkeeping.  Primary
  keys are database-assigned integers (``DEFAULT_AUTO_FIELD``) because
  public order and invoice numbers embed the row id.
- ``SoftDeleteModel``: Extends BaseModel with soft-delete via ``deleted_at``.

Design decisions:
- Single ``deleted_at`` field instead of dual ``is_deleted`` + ``deleted_at``.
- ``objects`` manager returns ALL records (unfiltered).  Use ``.alive()``
  explicitly to exclude soft-deleted rows.
- ``delete()`` returns Django-compatible ``(count, {label: count})`` tuple.
- ``save()`` guard ensures ``updated_at`` is included when ``update_fields``
  is specified (Django skips ``auto_now`` fields otherwise).
"""

from __future__ import annotations

import uuid

from django.db import models, router, transaction
from django.utils import timezone

# ---------------------------------------------------------------------------
# BaseModel
# ---------------------------------------------------------------------------


class BaseModel(models.Model):
    """Abstract base with timestamp bookkeeping."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        """Ensure ``updated_at`` is refreshed even when ``update_fields`` is passed."""
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["updated_at"]
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Soft Delete infrastructure
# ---------------------------------------------------------------------------


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet with soft-delete helpers."""

    def alive(self) -> SoftDeleteQuerySet:
        """Return only non-deleted records."""
        return self.filter(deleted_at__isnull=True)

    def delete(self) -> tuple[int, dict[str, int]]:
        """Bulk soft-delete: sets ``deleted_at`` + ``updated_at``."""
        now = timezone.now()
        count = self.alive().update(deleted_at=now, updated_at=now)
        return count, {self.model._meta.label: count}


class SoftDeleteManager(models.Manager):
    """Manager that exposes ``.alive()`` on the queryset."""

    def get_queryset(self) -> SoftDeleteQuerySet:
        return SoftDeleteQuerySet(self.model, using=self._db)

    def alive(self) -> SoftDeleteQuerySet:
        return self.get_queryset().alive()


class SoftDeleteModel(BaseModel):
    """Abstract model with soft-delete via a single ``deleted_at`` timestamp.

    - ``objects`` is **unfiltered** (returns all rows).
    - Use ``Model.objects.alive()`` to exclude soft-deleted rows.
    - ``delete()`` performs a soft-delete, on instances and querysets alike.
    """

    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        default=None,
        db_index=True,
    )

    objects = SoftDeleteManager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        """Computed: ``True`` when the record has been soft-deleted."""
        return self.deleted_at is not None

    def delete(self, using=None, keep_parents=False) -> tuple[int, dict[str, int]]:
        """Soft-delete this instance (no-op if already deleted)."""
        if self.is_deleted:
            return 0, {}
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at", "updated_at"])
        return 1, {self._meta.label: 1}


# ---------------------------------------------------------------------------
# Public document numbers
# ---------------------------------------------------------------------------


def build_document_number(prefix: str, created_at, pk: int) -> str:
    """Build ``{prefix}-YYYY-MMDD-{pk}`` from the local creation date."""
    local = timezone.localtime(created_at) if created_at else timezone.localtime()
    return f"{prefix}-{local:%Y}-{local:%m%d}-{pk}"


def temporary_document_number() -> str:
    """Placeholder written on insert, replaced once the row id is known."""
    return f"TEMP-{uuid.uuid4().hex[:20]}"


class NumberedDocumentModel(BaseModel):
    """Abstract model whose public number embeds the database-assigned id.

    The id does not exist before the INSERT, so creation is two-phase:
    insert with a temporary number, derive the real one from
    ``(local creation date, id)`` and write it back in the same
    transaction.  No caller ever observes the temporary value.
    """

    number_field: str = "number"
    number_prefix: str = "DOC"

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        if not self._state.adding or getattr(self, self.number_field):
            super().save(*args, **kwargs)
            return

        using = kwargs.get("using") or router.db_for_write(type(self), instance=self)
        with transaction.atomic(using=using):
            setattr(self, self.number_field, temporary_document_number())
            super().save(*args, **kwargs)
            setattr(
                self,
                self.number_field,
                build_document_number(self.number_prefix, self.created_at, self.pk),
            )
            super().save(using=using, update_fields=[self.number_field])
