"""Invoice DRF serializers (read-only)."""

from __future__ import annotations

from rest_framework import serializers

from modules.invoices.models import Invoice
from modules.orders.serializers import OrderItemSerializer


class InvoiceSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    items = OrderItemSerializer(source="order.items", many=True, read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "order_id",
            "order_number",
            "user_id",
            "subtotal",
            "total_amount",
            "payment_method",
            "payment_date",
            "notes",
            "created_at",
            "items",
        ]
        read_only_fields = fields


class InvoiceListSerializer(serializers.ModelSerializer):
    order_number = serializers.CharField(source="order.order_number", read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "invoice_number",
            "order_id",
            "order_number",
            "user_id",
            "total_amount",
            "payment_date",
            "created_at",
        ]
        read_only_fields = fields
