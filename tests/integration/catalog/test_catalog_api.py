from decimal import Decimal

import pytest

from modules.catalog.models import Fruit
from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.integration

FRUITS_URL = "/api/v1/fruits/"
CATEGORIES_URL = "/api/v1/categories/"


class TestPublicReads:
    def test_list_is_public_and_paginated(self, api_client, watermelon, mango):
        response = api_client.get(FRUITS_URL)

        assert response.status_code == 200
        names = [fruit["name"] for fruit in response.data["results"]]
        assert names == ["Mango", "Watermelon"]

    def test_fruit_exposes_unit(self, api_client, watermelon):
        response = api_client.get(f"{FRUITS_URL}{watermelon.id}/")

        assert response.status_code == 200
        assert response.data["unit"] == "piece"
        assert response.data["category_name"] == "Melons"

    def test_filters(self, api_client, watermelon, mango):
        response = api_client.get(FRUITS_URL, {"min_price": "15", "name": "man"})
        assert [f["id"] for f in response.data["results"]] == [mango.id]

        response = api_client.get(FRUITS_URL, {"category": watermelon.category_id})
        assert [f["id"] for f in response.data["results"]] == [watermelon.id]

    def test_deleted_fruit_is_404(self, api_client, mango):
        mango.delete()
        assert api_client.get(f"{FRUITS_URL}{mango.id}/").status_code == 404

    def test_categories_are_public(self, api_client, kg_category):
        response = api_client.get(CATEGORIES_URL)
        assert response.status_code == 200
        assert response.data[0]["unit"] == "kg"

    def test_calculate_total_price(self, api_client, mango):
        response = api_client.post(
            f"{FRUITS_URL}calculate-total-price/",
            {"fruit_id": mango.id, "weight": "2.5"},
            format="json",
        )

        assert response.status_code == 200
        assert Decimal(response.data["total_price"]) == Decimal("50.00")

    def test_calculate_total_price_rejects_zero_weight(self, api_client, mango):
        response = api_client.post(
            f"{FRUITS_URL}calculate-total-price/",
            {"fruit_id": mango.id, "weight": "0"},
            format="json",
        )
        assert response.status_code == 400

    def test_popular_ranks_by_ordered_amount(
        self, api_client, order_service, make_order, watermelon, mango
    ):
        order = make_order()
        order_service.transition_status(order.id, OrderStatus.PAID)

        response = api_client.get(f"{FRUITS_URL}popular/")

        assert response.status_code == 200
        assert [f["id"] for f in response.data] == [watermelon.id, mango.id]


class TestAdminWrites:
    def test_anonymous_cannot_create(self, api_client):
        response = api_client.post(
            FRUITS_URL, {"name": "Durian", "price": "250.00"}, format="json"
        )
        assert response.status_code == 401

    def test_customer_cannot_create(self, customer_client):
        response = customer_client.post(
            FRUITS_URL, {"name": "Durian", "price": "250.00"}, format="json"
        )
        assert response.status_code == 403

    def test_admin_creates_fruit(self, staff_client, kg_category):
        response = staff_client.post(
            FRUITS_URL,
            {
                "name": "Durian",
                "price": "250.00",
                "stock": "12.500",
                "category_id": kg_category.id,
            },
            format="json",
        )

        assert response.status_code == 201
        assert response.data["unit"] == "kg"
        assert Fruit.objects.get(id=response.data["id"]).stock == Decimal("12.5")

    def test_admin_rejects_non_positive_price(self, staff_client):
        response = staff_client.post(
            FRUITS_URL, {"name": "Durian", "price": "0"}, format="json"
        )
        assert response.status_code == 400

    def test_admin_corrects_stock(self, staff_client, watermelon):
        response = staff_client.patch(
            f"{FRUITS_URL}{watermelon.id}/", {"stock": "25"}, format="json"
        )
        assert response.status_code == 200
        assert Decimal(response.data["stock"]) == Decimal("25")

    def test_admin_deletes_fruit(self, staff_client, watermelon):
        response = staff_client.delete(f"{FRUITS_URL}{watermelon.id}/")
        assert response.status_code == 204
        assert Fruit.objects.alive().filter(id=watermelon.id).count() == 0

    def test_duplicate_category_conflicts(self, staff_client, kg_category):
        response = staff_client.post(
            CATEGORIES_URL, {"name": "Tropical", "unit": "kg"}, format="json"
        )
        assert response.status_code == 409

    def test_category_in_use_cannot_be_deleted(self, staff_client, kg_category, mango):
        response = staff_client.delete(f"{CATEGORIES_URL}{kg_category.id}/")
        assert response.status_code == 409
