"""In-app notifications addressed to a single user."""

from __future__ import annotations

from django.conf import settings
from django.db import models


class NotificationType(models.TextChoices):
    INFO = "info", "Info"
    ORDER = "order", "Order"
    PAYMENT = "payment", "Payment"
    PAYMENT_SLIP = "payment_slip", "Payment slip"


class Notification(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    title = models.CharField(max_length=255)
    message = models.TextField()
    type = models.CharField(
        max_length=20,
        choices=NotificationType.choices,
        default=NotificationType.INFO,
    )
    related_id = models.BigIntegerField(null=True, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user", "is_read"], name="notif_user_read_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.user_id}: {self.title}"
