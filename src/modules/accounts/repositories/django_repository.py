"""Django ORM implementation of the account repository."""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.contrib.auth import get_user_model
from django.db import transaction

from modules.accounts.models import Profile
from modules.accounts.repositories.interfaces import IUserRepository
from modules.core.repositories.interfaces import EntityId, coerce_id

logger = structlog.get_logger(__name__)

User = get_user_model()


class UserDjangoRepository(IUserRepository):
    """Concrete user repository backed by ``django.contrib.auth``."""

    def get_by_id(self, id: EntityId):
        pk = coerce_id(id)
        if pk is None:
            return None
        return User.objects.select_related("profile").filter(id=pk).first()

    def list(self, filters: Optional[Dict[str, Any]] = None):
        queryset = User.objects.select_related("profile").order_by("id")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def username_taken(self, username: str, exclude_id: Optional[int] = None) -> bool:
        return User.objects.filter(username=username).exclude(id=exclude_id).exists()

    def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        return (
            User.objects.filter(email__iexact=email).exclude(id=exclude_id).exists()
        )

    @transaction.atomic
    def create_user(self, data: Dict[str, Any]):
        user = User.objects.create_user(
            username=data["username"],
            email=data["email"],
            password=data["password"],
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
        )
        Profile.objects.create(user=user)
        logger.info("user.created", user_id=user.id)
        return user

    def get_profile(self, user_id: EntityId) -> Profile:
        profile, _ = Profile.objects.get_or_create(user_id=coerce_id(user_id))
        return profile

    def save(self, entity):
        entity.save()
        logger.info("user.saved", user_id=entity.id)
        return entity

    def save_profile(self, profile: Profile) -> Profile:
        profile.save()
        return profile
