"""Catalog API views.

Exposes ``CategoryService`` and ``FruitService`` via DRF ViewSets.
Reads are public; writes require an admin (``is_staff``) user.
Domain exceptions are caught and translated into HTTP status codes.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.catalog.dtos import (
    CreateCategoryDTO,
    CreateFruitDTO,
    PriceQuoteDTO,
    UpdateCategoryDTO,
    UpdateFruitDTO,
)
from modules.catalog.exceptions import (
    CategoryAlreadyExists,
    CategoryInUse,
    CategoryNotFound,
    FruitNotFound,
)
from modules.catalog.filters import FruitFilter
from modules.catalog.models import Category, Fruit
from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    FruitDjangoRepository,
)
from modules.catalog.repositories.ledger import InventoryDjangoLedger
from modules.catalog.serializers import (
    CategorySerializer,
    CategoryWriteSerializer,
    FruitSerializer,
    FruitWriteSerializer,
    PopularFruitSerializer,
    PriceQuoteResultSerializer,
    PriceQuoteSerializer,
)
from modules.catalog.services import CategoryService, FruitService

PUBLIC_ACTIONS = {"list", "retrieve", "popular", "calculate_total_price"}


def _not_found(label: str) -> Response:
    return Response(
        {"detail": f"{label} not found."}, status=status.HTTP_404_NOT_FOUND
    )


class CategoryViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Category CRUD operations."""

    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = CategoryService(repository=CategoryDjangoRepository())

    def get_permissions(self):
        if self.action in PUBLIC_ACTIONS:
            return [AllowAny()]
        return [IsAdminUser()]

    def get_queryset(self):
        return self._service.list_categories()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/categories/{pk}/"""
        try:
            category = self._service.get_category(pk)
        except CategoryNotFound:
            return _not_found("Category")
        return Response(CategorySerializer(category).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/categories/"""
        serializer = CategoryWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            category = self._service.create_category(
                CreateCategoryDTO(**serializer.validated_data)
            )
        except CategoryAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(
            CategorySerializer(category).data, status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/categories/{pk}/"""
        serializer = CategoryWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            category = self._service.update_category(
                pk, UpdateCategoryDTO(**serializer.validated_data)
            )
        except CategoryNotFound:
            return _not_found("Category")
        except CategoryAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(CategorySerializer(category).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/categories/{pk}/"""
        try:
            self._service.delete_category(pk)
        except CategoryNotFound:
            return _not_found("Category")
        except CategoryInUse as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(status=status.HTTP_204_NO_CONTENT)


class FruitViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for Fruit operations.

    Does **not** extend ``ModelViewSet``; all ORM access goes through
    the service/repository layer and stock edits go through the ledger.
    """

    filterset_class = FruitFilter
    search_fields = ["name", "description"]
    ordering_fields = ["name", "price", "stock", "created_at"]
    ordering = ["name", "id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    queryset = Fruit.objects.all()
    serializer_class = FruitSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = FruitService(
            repository=FruitDjangoRepository(),
            category_repository=CategoryDjangoRepository(),
            ledger=InventoryDjangoLedger(),
        )

    def get_permissions(self):
        if self.action in PUBLIC_ACTIONS:
            return [AllowAny()]
        return [IsAdminUser()]

    def get_queryset(self):
        return self._service.list_fruits()

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/fruits/{pk}/"""
        try:
            fruit = self._service.get_fruit(pk)
        except FruitNotFound:
            return _not_found("Fruit")
        return Response(FruitSerializer(fruit).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/fruits/"""
        serializer = FruitWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = CreateFruitDTO(**serializer.validated_data)
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            fruit = self._service.create_fruit(dto)
        except CategoryNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(FruitSerializer(fruit).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/fruits/{pk}/"""
        serializer = FruitWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        try:
            dto = UpdateFruitDTO(**serializer.validated_data)
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            fruit = self._service.update_fruit(pk, dto)
        except FruitNotFound:
            return _not_found("Fruit")
        except CategoryNotFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(FruitSerializer(fruit).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/fruits/{pk}/"""
        try:
            self._service.delete_fruit(pk)
        except FruitNotFound:
            return _not_found("Fruit")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def popular(self, request: Request) -> Response:
        """GET /api/v1/fruits/popular/"""
        fruits = self._service.popular_fruits()
        return Response(PopularFruitSerializer(fruits, many=True).data)

    @action(detail=False, methods=["post"], url_path="calculate-total-price")
    def calculate_total_price(self, request: Request) -> Response:
        """POST /api/v1/fruits/calculate-total-price/"""
        serializer = PriceQuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            dto = PriceQuoteDTO(**serializer.validated_data)
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            quote = self._service.calculate_total_price(dto)
        except FruitNotFound:
            return _not_found("Fruit")
        return Response(PriceQuoteResultSerializer(quote).data)
