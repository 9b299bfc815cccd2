"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes; the view never swallows generic exceptions.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, ShippingInfoDTO
from modules.orders.exceptions import (
    FruitNotFound,
    InsufficientStock,
    InvalidOrderStatus,
    InvalidQuantity,
    OrderAccessDenied,
    OrderNotFound,
    PaymentQrUnavailable,
    PaymentSlipAlreadyExists,
)
from modules.orders.factories import build_order_service
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.serializers import (
    CreateOrderSerializer,
    MostBoughtFruitSerializer,
    OrderListSerializer,
    OrderSerializer,
    PaymentSlipSerializer,
    UpdateStatusSerializer,
)

# Domain exception -> HTTP status
ERROR_STATUS = {
    OrderNotFound: status.HTTP_404_NOT_FOUND,
    FruitNotFound: status.HTTP_404_NOT_FOUND,
    OrderAccessDenied: status.HTTP_403_FORBIDDEN,
    InvalidOrderStatus: status.HTTP_400_BAD_REQUEST,
    InvalidQuantity: status.HTTP_400_BAD_REQUEST,
    InsufficientStock: status.HTTP_409_CONFLICT,
    PaymentSlipAlreadyExists: status.HTTP_409_CONFLICT,
    PaymentQrUnavailable: status.HTTP_501_NOT_IMPLEMENTED,
}
DOMAIN_ERRORS = tuple(ERROR_STATUS)


def _error_response(exc: Exception) -> Response:
    body = {"detail": str(exc)}
    if isinstance(exc, InsufficientStock) and exc.fruit_id is not None:
        body["fruit_id"] = exc.fruit_id
    return Response(body, status=ERROR_STATUS[type(exc)])


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``; all ORM access goes through
    the service/repository layer.
    """

    queryset = Order.objects.all()
    permission_classes = [IsAuthenticated]
    filterset_class = OrderFilter
    search_fields = ["order_number", "user__username", "shipping_address"]
    ordering_fields = ["created_at", "total_amount", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_permissions(self):
        if self.action in {"all_orders", "update_status"}:
            return [IsAdminUser()]
        return super().get_permissions()

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttle scopes per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "all_orders"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        if self.action == "all_orders":
            return self._service.list_all_orders()
        return self._service.list_orders_for_user(self.request.user.id)

    def _paginated(self, request: Request, queryset) -> Response:
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = OrderListSerializer(page, many=True)
            return self.get_paginated_response(serializer.data)
        return Response(OrderListSerializer(queryset, many=True).data)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        create_serializer = CreateOrderSerializer(data=request.data)
        create_serializer.is_valid(raise_exception=True)
        data = create_serializer.validated_data

        try:
            dto = CreateOrderDTO(
                user_id=request.user.id,
                items=[
                    CreateOrderItemDTO(
                        fruit_id=item["fruit_id"],
                        quantity=item.get("quantity"),
                        weight=item.get("weight"),
                    )
                    for item in data["items"]
                ],
                shipping=ShippingInfoDTO(
                    shipping_address=data["shipping_address"],
                    shipping_city=data.get("shipping_city", ""),
                    shipping_postal_code=data.get("shipping_postal_code", ""),
                    shipping_country=data.get("shipping_country") or None,
                    payment_method=data.get("payment_method") or None,
                ),
                notes=data.get("notes", ""),
            )
        except (PydanticValidationError, ValueError) as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            order = self._service.create_order(dto)
        except DOMAIN_ERRORS as exc:
            return _error_response(exc)

        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/ (the caller's own orders)."""
        return self._paginated(request, self.filter_queryset(self.get_queryset()))

    @action(detail=False, methods=["get"], url_path="all")
    def all_orders(self, request: Request) -> Response:
        """GET /api/v1/orders/all/ (admin)."""
        return self._paginated(request, self.filter_queryset(self.get_queryset()))

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order_for_user(pk, request.user)
        except DOMAIN_ERRORS as exc:
            return _error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"], url_path="most-bought")
    def most_bought(self, request: Request) -> Response:
        """GET /api/v1/orders/most-bought/"""
        rows = self._service.most_bought_fruits(request.user.id)
        return Response(MostBoughtFruitSerializer(rows, many=True).data)

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    @action(detail=True, methods=["put", "patch"], url_path="status")
    def update_status(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/orders/{pk}/status/ (admin)."""
        serializer = UpdateStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = self._service.transition_status(
                order_id=pk,
                new_status=serializer.validated_data["status"],
                actor=request.user.id,
                notes=serializer.validated_data["notes"],
            )
        except DOMAIN_ERRORS as exc:
            return _error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="confirm-payment")
    def confirm_payment(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/confirm-payment/ (owner)."""
        try:
            order = self._service.confirm_payment_by_owner(pk, request.user.id)
        except DOMAIN_ERRORS as exc:
            return _error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="payment-slip")
    def payment_slip(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/payment-slip/ (owner)."""
        serializer = PaymentSlipSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            order = self._service.upload_payment_slip(
                order_id=pk,
                user_id=request.user.id,
                image_data=data["slip_image"]["data"],
                content_type=data["slip_image"]["content_type"],
                amount=data.get("amount"),
                payment_date=data.get("payment_date"),
                notes=data.get("notes", ""),
            )
        except DOMAIN_ERRORS as exc:
            return _error_response(exc)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="qr-code")
    def qr_code(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/qr-code/"""
        try:
            qr = self._service.payment_qr(pk, request.user)
        except DOMAIN_ERRORS as exc:
            return _error_response(exc)
        return Response(dict(qr))
