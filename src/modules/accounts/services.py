"""Account service layer.

Registration, the caller's own profile, account edits and deactivation
(owner or admin), and the administrator role switch.  The role is stored
as ``User.is_staff``; every permission check in the other modules reads
that flag.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.db import transaction

from modules.accounts.exceptions import (
    InvalidRole,
    UserAccessDenied,
    UserAlreadyExists,
    UserNotFound,
)
from modules.accounts.models import Role

if TYPE_CHECKING:
    from modules.accounts.dtos import EditUserDTO, RegisterUserDTO, UpdateProfileDTO
    from modules.accounts.repositories.interfaces import IUserRepository

logger = structlog.get_logger(__name__)

PROFILE_FIELDS = ("phone", "address", "line_user_id")
USER_FIELDS = ("email", "first_name", "last_name")


class AccountService:
    def __init__(self, repository: IUserRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def register(self, dto: RegisterUserDTO):
        """Create a regular (non-admin) user.

        Raises:
            UserAlreadyExists: if the email or username is taken.
        """
        if self._repo.email_taken(dto.email):
            logger.warning("user.duplicate_email")
            raise UserAlreadyExists("User with this email already exists.")
        if self._repo.username_taken(dto.username):
            logger.warning("user.duplicate_username", username=dto.username)
            raise UserAlreadyExists("Username already taken.")

        user = self._repo.create_user(dto.model_dump())
        logger.info("user.registered", user_id=user.id)
        return user

    @transaction.atomic
    def update_profile(self, user_id: int, dto: UpdateProfileDTO):
        """Apply the fields present in ``dto`` to the user and profile.

        Raises:
            UserNotFound: if the user does not exist.
            UserAlreadyExists: if the new email belongs to another user.
        """
        user = self.get_user(user_id)
        changes = {field: getattr(dto, field) for field in dto.model_fields_set}

        email = changes.get("email")
        if email and self._repo.email_taken(email, exclude_id=user.id):
            raise UserAlreadyExists("Email already taken by another user.")

        user_changes = {
            f: v for f, v in changes.items() if f in USER_FIELDS and v is not None
        }
        if user_changes:
            for field, value in user_changes.items():
                setattr(user, field, value)
            self._repo.save(user)

        profile = self._repo.get_profile(user.id)
        profile_changes = {f: v for f, v in changes.items() if f in PROFILE_FIELDS}
        if profile_changes:
            for field, value in profile_changes.items():
                setattr(profile, field, value or "")
            self._repo.save_profile(profile)

        logger.info(
            "user.profile_updated",
            user_id=user.id,
            fields=sorted(user_changes) + sorted(profile_changes),
        )
        return self.get_user(user.id)

    @transaction.atomic
    def set_role(self, user_id, role: str):
        """Grant or revoke the administrator role.

        Raises:
            InvalidRole: if ``role`` is not ``user`` or ``admin``.
            UserNotFound: if the user does not exist.
        """
        if role not in Role.values:
            raise InvalidRole('Invalid role. Role must be either "user" or "admin".')
        user = self.get_user(user_id)
        is_staff = role == Role.ADMIN
        if user.is_staff != is_staff:
            user.is_staff = is_staff
            self._repo.save(user)
            logger.info("user.role_changed", user_id=user.id, role=role)
        return user

    @transaction.atomic
    def edit_user(self, user_id, actor, dto: EditUserDTO):
        """Edit an account's login details and names.

        Raises:
            UserNotFound: if the user does not exist.
            UserAccessDenied: if ``actor`` is not the owner or an admin.
            UserAlreadyExists: if the new username or email is taken.
        """
        user = self.get_user(user_id)
        _ensure_owner_or_admin(user, actor)
        changes = {
            field: getattr(dto, field)
            for field in dto.model_fields_set
            if getattr(dto, field) is not None
        }

        username = changes.get("username")
        if username and self._repo.username_taken(username, exclude_id=user.id):
            raise UserAlreadyExists("Username already taken by another user.")
        email = changes.get("email")
        if email and self._repo.email_taken(email, exclude_id=user.id):
            raise UserAlreadyExists("Email already taken by another user.")

        password = changes.pop("password", None)
        if password:
            user.set_password(password)
        for field, value in changes.items():
            setattr(user, field, value)
        if changes or password:
            self._repo.save(user)

        logger.info(
            "user.edited",
            user_id=user.id,
            actor_id=actor.id,
            fields=sorted(changes) + (["password"] if password else []),
        )
        return self.get_user(user.id)

    @transaction.atomic
    def deactivate(self, user_id, actor):
        """Close an account. Users own orders and invoices, so the row stays.

        Raises:
            UserNotFound: if the user does not exist.
            UserAccessDenied: if ``actor`` is not the owner or an admin.
        """
        user = self.get_user(user_id)
        _ensure_owner_or_admin(user, actor)
        if user.is_active:
            user.is_active = False
            self._repo.save(user)
            logger.info("user.deactivated", user_id=user.id, actor_id=actor.id)
        return user

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_user(self, user_id):
        user = self._repo.get_by_id(user_id)
        if user is None:
            raise UserNotFound(f"User {user_id} not found.")
        return user

    def get_profile(self, user_id):
        """Return the user with a guaranteed profile row."""
        user = self.get_user(user_id)
        self._repo.get_profile(user.id)
        return self.get_user(user.id)

    def list_users(self):
        return self._repo.list()


def _ensure_owner_or_admin(user, actor) -> None:
    if not actor.is_staff and actor.id != user.id:
        raise UserAccessDenied("You can only manage your own account.")
