import pytest

from modules.catalog.models import Fruit

pytestmark = pytest.mark.unit


class TestSoftDelete:
    def test_instance_delete_keeps_row(self, watermelon):
        assert watermelon.delete() == (1, {"catalog.Fruit": 1})

        watermelon.refresh_from_db()
        assert watermelon.is_deleted
        assert not Fruit.objects.alive().filter(id=watermelon.id).exists()

    def test_second_delete_is_noop(self, watermelon):
        watermelon.delete()
        assert watermelon.delete() == (0, {})

    def test_queryset_delete_is_soft(self, watermelon, mango):
        count, _ = Fruit.objects.filter(id__in=[watermelon.id, mango.id]).delete()

        assert count == 2
        assert Fruit.objects.count() == 2
        assert not Fruit.objects.alive().exists()
