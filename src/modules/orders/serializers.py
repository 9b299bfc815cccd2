"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

import base64
import binascii

from rest_framework import serializers

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderItemSerializer(serializers.Serializer):
    """Validates a single line; exactly one of ``quantity`` / ``weight``."""

    fruit_id = serializers.IntegerField(min_value=1)
    quantity = serializers.DecimalField(
        max_digits=10, decimal_places=3, required=False, allow_null=True
    )
    weight = serializers.DecimalField(
        max_digits=10, decimal_places=3, required=False, allow_null=True
    )

    def validate(self, attrs):
        if attrs.get("quantity") is None and attrs.get("weight") is None:
            raise serializers.ValidationError("Provide a quantity or a weight.")
        return attrs


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload."""

    items = CreateOrderItemSerializer(many=True, allow_empty=False)
    shipping_address = serializers.CharField()
    shipping_city = serializers.CharField(required=False, default="", allow_blank=True)
    shipping_postal_code = serializers.CharField(
        required=False, default="", allow_blank=True
    )
    shipping_country = serializers.CharField(required=False, allow_blank=True)
    payment_method = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class UpdateStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class PaymentSlipSerializer(serializers.Serializer):
    """Accepts the slip image as base64 text or a ``data:`` URL."""

    slip_image = serializers.CharField()
    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    payment_date = serializers.DateTimeField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, default="", allow_blank=True)

    def validate_slip_image(self, value: str):
        content_type = "image/jpeg"
        if value.startswith("data:"):
            header, _, value = value.partition(",")
            content_type = header[len("data:") :].split(";")[0] or content_type
        try:
            data = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise serializers.ValidationError("Slip image is not valid base64.") from exc
        if not data:
            raise serializers.ValidationError("Slip image is empty.")
        return {"data": data, "content_type": content_type}


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order items with fruit snapshot."""

    fruit_name = serializers.CharField(source="fruit.name", read_only=True)
    unit = serializers.CharField(source="fruit.unit", read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "fruit_id",
            "fruit_name",
            "unit",
            "quantity",
            "price",
            "subtotal",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "user_id",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and history."""

    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "user_id",
            "status",
            "total_amount",
            "shipping_address",
            "shipping_city",
            "shipping_postal_code",
            "shipping_country",
            "payment_method",
            "notes",
            "created_at",
            "updated_at",
            "items",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list (no nested relations)."""

    username = serializers.CharField(source="user.username", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "user_id",
            "username",
            "status",
            "total_amount",
            "payment_method",
            "created_at",
        ]
        read_only_fields = fields


class MostBoughtFruitSerializer(serializers.Serializer):
    fruit_id = serializers.IntegerField()
    name = serializers.CharField(source="fruit__name")
    price = serializers.DecimalField(
        source="fruit__price", max_digits=10, decimal_places=2
    )
    total_quantity = serializers.DecimalField(max_digits=14, decimal_places=3)
    order_count = serializers.IntegerField()
