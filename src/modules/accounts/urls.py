"""Accounts URL configuration."""

from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from modules.accounts.views import AccountViewSet, UserViewSet

router = DefaultRouter(trailing_slash=True)
router.register("users", UserViewSet, basename="user")

urlpatterns = [
    path(
        "register/",
        AccountViewSet.as_view({"post": "register"}),
        name="account-register",
    ),
    path(
        "me/",
        AccountViewSet.as_view({"get": "me", "patch": "update_me"}),
        name="account-me",
    ),
] + router.urls
