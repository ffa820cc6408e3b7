import pytest

from stock_core import category_service
from stock_core.errors import CategoryNotFound, Conflict, InvalidInput


def test_create_and_list_categories_sorted_by_name(db):
    category_service.create_category(db, "Snacks")
    created = category_service.create_category(db, "  Beverages ")

    assert created.name == "Beverages"
    assert [c.name for c in category_service.list_categories(db)] == ["Beverages", "Snacks"]


def test_duplicate_category_name_conflicts(db):
    category_service.create_category(db, "Snacks")

    with pytest.raises(Conflict, match="Category name already exists"):
        category_service.create_category(db, "Snacks")


@pytest.mark.parametrize("name", [None, "", "   ", 12])
def test_category_name_required(db, name):
    with pytest.raises(InvalidInput):
        category_service.create_category(db, name)


def test_rename_category(db):
    snacks = category_service.create_category(db, "Snacks")
    category_service.create_category(db, "Drinks")

    renamed = category_service.rename_category(db, snacks.id, "Crisps")
    assert renamed.name == "Crisps"
    assert category_service.get_category(db, snacks.id).name == "Crisps"

    with pytest.raises(Conflict):
        category_service.rename_category(db, snacks.id, "Drinks")
    with pytest.raises(CategoryNotFound):
        category_service.rename_category(db, "missing", "Other")


def test_delete_category(db):
    snacks = category_service.create_category(db, "Snacks")

    category_service.delete_category(db, snacks.id)

    with pytest.raises(CategoryNotFound):
        category_service.get_category(db, snacks.id)
    with pytest.raises(CategoryNotFound):
        category_service.delete_category(db, snacks.id)
