"""Unit tests for CategoryService and FruitService."""

from decimal import Decimal

import pytest

from modules.catalog.dtos import (
    CreateCategoryDTO,
    CreateFruitDTO,
    PriceQuoteDTO,
    UpdateFruitDTO,
)
from modules.catalog.exceptions import (
    CategoryAlreadyExists,
    CategoryInUse,
    CategoryNotFound,
    FruitNotFound,
)
from modules.catalog.models import Fruit, UnitType
from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    FruitDjangoRepository,
)
from modules.catalog.repositories.ledger import InventoryDjangoLedger
from modules.catalog.services import CategoryService, FruitService

pytestmark = pytest.mark.unit


@pytest.fixture()
def category_service():
    return CategoryService(CategoryDjangoRepository())


@pytest.fixture()
def fruit_service():
    return FruitService(
        repository=FruitDjangoRepository(),
        category_repository=CategoryDjangoRepository(),
        ledger=InventoryDjangoLedger(),
    )


class TestCategoryService:
    def test_create_category(self, category_service):
        category = category_service.create_category(
            CreateCategoryDTO(name="  Citrus ", unit=UnitType.KG)
        )
        assert category.name == "Citrus"
        assert category.unit == UnitType.KG

    def test_duplicate_name_is_case_insensitive(self, category_service, kg_category):
        with pytest.raises(CategoryAlreadyExists):
            category_service.create_category(CreateCategoryDTO(name="tropical"))

    def test_category_with_fruits_cannot_be_deleted(
        self, category_service, kg_category, mango
    ):
        with pytest.raises(CategoryInUse):
            category_service.delete_category(kg_category.id)

    def test_unknown_category(self, category_service):
        with pytest.raises(CategoryNotFound):
            category_service.get_category(424242)


class TestFruitService:
    def test_uncategorised_fruit_is_sold_by_kg(self, fruit_service):
        fruit = fruit_service.create_fruit(
            CreateFruitDTO(name="Longan", price=Decimal("70.00"))
        )
        assert fruit.unit == UnitType.KG
        assert fruit.stock == Decimal("0")

    def test_fruit_takes_unit_from_category(self, fruit_service, piece_category):
        fruit = fruit_service.create_fruit(
            CreateFruitDTO(
                name="Cantaloupe",
                price=Decimal("90.00"),
                stock=Decimal("4"),
                category_id=piece_category.id,
            )
        )
        assert fruit.unit == UnitType.PIECE

    def test_create_with_unknown_category(self, fruit_service):
        with pytest.raises(CategoryNotFound):
            fruit_service.create_fruit(
                CreateFruitDTO(name="Longan", price=Decimal("1.00"), category_id=777)
            )

    def test_stock_update_goes_through_ledger(self, fruit_service, mango):
        fruit = fruit_service.update_fruit(
            mango.id, UpdateFruitDTO(stock=Decimal("12.5"), price=Decimal("25.00"))
        )
        assert fruit.stock == Decimal("12.5")
        assert fruit.price == Decimal("25.00")

    def test_category_can_be_cleared(self, fruit_service, mango):
        fruit = fruit_service.update_fruit(mango.id, UpdateFruitDTO(category_id=None))
        assert fruit.category_id is None

    def test_omitted_category_is_kept(self, fruit_service, mango, kg_category):
        fruit = fruit_service.update_fruit(mango.id, UpdateFruitDTO(name="Nam Dok Mai"))
        assert fruit.category_id == kg_category.id
        assert fruit.name == "Nam Dok Mai"

    def test_deleted_fruit_is_hidden(self, fruit_service, mango):
        fruit_service.delete_fruit(mango.id)
        with pytest.raises(FruitNotFound):
            fruit_service.get_fruit(mango.id)
        assert Fruit.objects.filter(id=mango.id).exists()

    def test_price_quote_rounds_half_up(self, fruit_service, kg_category):
        fruit = Fruit.objects.create(
            name="Rambutan", price=Decimal("33.33"), category=kg_category
        )
        quote = fruit_service.calculate_total_price(
            PriceQuoteDTO(fruit_id=fruit.id, weight=Decimal("1.5"))
        )
        # 33.33 * 1.5 = 49.995
        assert quote["total_price"] == Decimal("50.00")
        assert quote["unit"] == UnitType.KG

    def test_price_quote_unknown_fruit(self, fruit_service):
        with pytest.raises(FruitNotFound):
            fruit_service.calculate_total_price(
                PriceQuoteDTO(fruit_id=99999, weight=Decimal("1"))
            )
