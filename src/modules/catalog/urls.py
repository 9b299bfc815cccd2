"""Catalog URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.catalog.views import CategoryViewSet, FruitViewSet

router = DefaultRouter(trailing_slash=True)
router.register("categories", CategoryViewSet, basename="category")
router.register("fruits", FruitViewSet, basename="fruit")

urlpatterns = router.urls
