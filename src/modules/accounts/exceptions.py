"""Account domain exceptions."""

from __future__ import annotations


class UserNotFound(Exception):
    """The requested user does not exist."""


class UserAlreadyExists(Exception):
    """The username or email is already taken by another user."""


class InvalidRole(Exception):
    """The requested role is neither ``user`` nor ``admin``."""


class UserAccessDenied(Exception):
    """The caller is neither the account owner nor an administrator."""
