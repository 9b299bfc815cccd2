from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.catalog.models import Category, Fruit, UnitType
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO, ShippingInfoDTO
from modules.orders.factories import build_order_service


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@pytest.fixture()
def customer():
    return get_user_model().objects.create_user(
        "somchai", email="somchai@example.com", password="fruit-lover-123"
    )


@pytest.fixture()
def other_customer():
    return get_user_model().objects.create_user(
        "malee", email="malee@example.com", password="fruit-lover-456"
    )


@pytest.fixture()
def staff_user():
    return get_user_model().objects.create_user(
        "shopkeeper",
        email="shopkeeper@example.com",
        password="shop-admin-789",
        is_staff=True,
    )


@pytest.fixture()
def customer_client(customer):
    client = APIClient()
    client.force_authenticate(user=customer)
    return client


@pytest.fixture()
def other_client(other_customer):
    client = APIClient()
    client.force_authenticate(user=other_customer)
    return client


@pytest.fixture()
def staff_client(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def piece_category():
    return Category.objects.create(name="Melons", unit=UnitType.PIECE)


@pytest.fixture()
def kg_category():
    return Category.objects.create(name="Tropical", unit=UnitType.KG)


@pytest.fixture()
def watermelon(piece_category):
    """Sold by the piece: 10.00 each, 10 in stock."""
    return Fruit.objects.create(
        name="Watermelon",
        price=Decimal("10.00"),
        stock=Decimal("10"),
        category=piece_category,
    )


@pytest.fixture()
def mango(kg_category):
    """Sold by weight: 20.00 per kg, 5 kg in stock."""
    return Fruit.objects.create(
        name="Mango",
        price=Decimal("20.00"),
        stock=Decimal("5.000"),
        category=kg_category,
    )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    return build_order_service()


@pytest.fixture()
def make_order(order_service, customer, watermelon, mango):
    """Create a pending order: 3 watermelons + 1.5 kg mango (total 60.00)."""

    def _make(user=None, lines=None):
        lines = lines or [
            CreateOrderItemDTO(fruit_id=watermelon.id, quantity=Decimal("3")),
            CreateOrderItemDTO(fruit_id=mango.id, weight=Decimal("1.5")),
        ]
        dto = CreateOrderDTO(
            user_id=(user or customer).id,
            items=lines,
            shipping=ShippingInfoDTO(shipping_address="99 Sukhumvit Rd"),
        )
        return order_service.create_order(dto)

    return _make
