"""InventoryDjangoLedger: the only writer of Fruit.stock."""

from decimal import Decimal

import pytest

from modules.catalog.models import Fruit
from modules.catalog.repositories.ledger import InventoryDjangoLedger

pytestmark = pytest.mark.unit


@pytest.fixture()
def ledger():
    return InventoryDjangoLedger()


class TestReserve:
    def test_reserve_decrements_stock(self, ledger, mango):
        fruit = ledger.reserve(mango.id, Decimal("1.250"))
        assert fruit.stock == Decimal("3.750")

    def test_reserve_whole_stock_leaves_zero(self, ledger, watermelon):
        fruit = ledger.reserve(watermelon.id, Decimal("10"))
        assert fruit.stock == Decimal("0")

    def test_reserve_more_than_available_is_rejected(self, ledger, mango):
        assert ledger.reserve(mango.id, Decimal("5.001")) is None
        mango.refresh_from_db()
        assert mango.stock == Decimal("5.000")

    def test_reserve_unknown_fruit_returns_none(self, ledger):
        assert ledger.reserve(999_999, Decimal("1")) is None

    def test_release_restores_reserved_amount(self, ledger, mango):
        ledger.reserve(mango.id, Decimal("2.5"))
        fruit = ledger.release(mango.id, Decimal("2.5"))
        assert fruit.stock == Decimal("5.000")


class TestSetStock:
    def test_set_stock_overwrites_value(self, ledger, watermelon):
        fruit = ledger.set_stock(watermelon.id, Decimal("42"))
        assert fruit.stock == Decimal("42")

    def test_negative_stock_is_refused(self, ledger, watermelon):
        with pytest.raises(ValueError):
            ledger.set_stock(watermelon.id, Decimal("-1"))
        assert Fruit.objects.get(id=watermelon.id).stock == Decimal("10")

    def test_set_stock_unknown_fruit_returns_none(self, ledger):
        assert ledger.set_stock(999_999, Decimal("1")) is None
