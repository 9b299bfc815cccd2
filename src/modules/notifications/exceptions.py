"""Notification domain exceptions."""

from __future__ import annotations


class NotificationNotFound(Exception):
    """The notification does not exist or belongs to another user."""
