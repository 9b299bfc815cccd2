"""Notification repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IDeletableRepository

if TYPE_CHECKING:
    from modules.notifications.models import Notification


class INotificationRepository(IDeletableRepository["Notification"]):
    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Notification:
        """Insert a notification."""

    @abstractmethod
    def list_for_user(
        self, user_id: int, is_read: Optional[bool], limit: int, offset: int
    ) -> List[Notification]:
        """Newest-first page of a user's notifications."""

    @abstractmethod
    def count_unread(self, user_id: int) -> int:
        """Number of unread notifications of a user."""

    @abstractmethod
    def get_for_user(self, id: int, user_id: int) -> Optional[Notification]:
        """Retrieve a notification only if ``user_id`` owns it."""

    @abstractmethod
    def mark_all_read(self, user_id: int) -> int:
        """Mark every unread notification of a user read; return the count."""

    @abstractmethod
    def admin_user_ids(self) -> List[int]:
        """Ids of active admin (staff) users."""
