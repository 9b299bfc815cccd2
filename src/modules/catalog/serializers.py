"""Catalog DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.catalog.models import Category, Fruit, UnitType


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "unit", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]


class FruitSerializer(serializers.ModelSerializer):
    """Read serializer for fruits with the resolved unit."""

    unit = serializers.CharField(read_only=True)
    category_name = serializers.CharField(
        source="category.name", read_only=True, default=None
    )

    class Meta:
        model = Fruit
        fields = [
            "id",
            "name",
            "description",
            "price",
            "stock",
            "unit",
            "category_id",
            "category_name",
            "image_url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PopularFruitSerializer(FruitSerializer):
    total_ordered = serializers.DecimalField(
        max_digits=14, decimal_places=3, read_only=True
    )

    class Meta(FruitSerializer.Meta):
        fields = FruitSerializer.Meta.fields + ["total_ordered"]
        read_only_fields = fields


class FruitWriteSerializer(serializers.Serializer):
    """Validates fruit create/update payloads."""

    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    stock = serializers.DecimalField(max_digits=12, decimal_places=3, required=False)
    category_id = serializers.IntegerField(required=False, allow_null=True)
    image_url = serializers.URLField(required=False, allow_blank=True)


class CategoryWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    unit = serializers.ChoiceField(choices=UnitType.choices, required=False)


class PriceQuoteSerializer(serializers.Serializer):
    fruit_id = serializers.IntegerField(min_value=1)
    weight = serializers.DecimalField(max_digits=10, decimal_places=3)


class PriceQuoteResultSerializer(serializers.Serializer):
    fruit_id = serializers.IntegerField()
    name = serializers.CharField()
    unit = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    weight = serializers.DecimalField(max_digits=10, decimal_places=3)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2)
