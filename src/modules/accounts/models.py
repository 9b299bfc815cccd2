"""Account models.

Authentication uses Django's built-in ``User``.  The shop keeps its
extra per-customer data in ``Profile``; the administrator role is the
user's ``is_staff`` flag.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel


class Role(models.TextChoices):
    USER = "user", "User"
    ADMIN = "admin", "Admin"


def role_of(user) -> str:
    return Role.ADMIN if user.is_staff else Role.USER


class Profile(BaseModel):
    """Contact details and the LINE push recipient of a shop user."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    phone = models.CharField(max_length=20, blank=True, default="")
    address = models.TextField(blank=True, default="")
    line_user_id = models.CharField(max_length=64, blank=True, default="")

    class Meta:
        db_table = "profiles"

    def __str__(self) -> str:
        return f"Profile({self.user_id})"
