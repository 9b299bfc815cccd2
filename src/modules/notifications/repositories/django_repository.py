"""Django ORM implementation of the Notification repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from django.contrib.auth import get_user_model

from modules.core.repositories.interfaces import EntityId, coerce_id
from modules.notifications.models import Notification
from modules.notifications.repositories.interfaces import INotificationRepository


class NotificationDjangoRepository(INotificationRepository):
    def get_by_id(self, id: EntityId) -> Optional[Notification]:
        pk = coerce_id(id)
        if pk is None:
            return None
        return Notification.objects.filter(id=pk).first()

    def get_for_user(self, id: EntityId, user_id: int) -> Optional[Notification]:
        pk = coerce_id(id)
        if pk is None:
            return None
        return Notification.objects.filter(id=pk, user_id=user_id).first()

    def list(self, filters: Optional[Dict[str, Any]] = None):
        queryset = Notification.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def list_for_user(
        self, user_id: int, is_read: Optional[bool], limit: int, offset: int
    ) -> List[Notification]:
        queryset = Notification.objects.filter(user_id=user_id)
        if is_read is not None:
            queryset = queryset.filter(is_read=is_read)
        return list(queryset[offset : offset + limit])

    def count_unread(self, user_id: int) -> int:
        return Notification.objects.filter(user_id=user_id, is_read=False).count()

    def create(self, data: Dict[str, Any]) -> Notification:
        return Notification.objects.create(**data)

    def save(self, entity: Notification) -> Notification:
        entity.save()
        return entity

    def mark_all_read(self, user_id: int) -> int:
        return Notification.objects.filter(user_id=user_id, is_read=False).update(
            is_read=True
        )

    def delete(self, id: EntityId) -> bool:
        deleted, _ = Notification.objects.filter(id=coerce_id(id)).delete()
        return bool(deleted)

    def admin_user_ids(self) -> List[int]:
        User = get_user_model()
        return list(
            User.objects.filter(is_staff=True, is_active=True)
            .order_by("id")
            .values_list("id", flat=True)
        )
