"""Account repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import EntityId, IRepository

if TYPE_CHECKING:
    from django.contrib.auth.models import User

    from modules.accounts.models import Profile


class IUserRepository(IRepository["User"]):
    """Repository contract for shop users and their profiles."""

    @abstractmethod
    def username_taken(self, username: str, exclude_id: Optional[int] = None) -> bool:
        """Return ``True`` if another user already has ``username``."""

    @abstractmethod
    def email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        """Return ``True`` if another user already has ``email`` (case-insensitive)."""

    @abstractmethod
    def create_user(self, data: Dict[str, Any]) -> User:
        """Create a user with a hashed password and an empty profile."""

    @abstractmethod
    def get_profile(self, user_id: EntityId) -> Profile:
        """Return the user's profile, creating an empty one when missing."""

    @abstractmethod
    def save_profile(self, profile: Profile) -> Profile:
        """Persist profile changes."""
