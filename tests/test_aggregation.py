"""Tests for the combined shopping list view."""

from tripplanner.modules.shopping.aggregation import (
    aggregate_items,
    filter_items,
    group_by_category,
    sort_items,
)


def _item(item_id, name, quantity=1, unit=None, category=None, purchased=False, notes=None):
    return {
        "id": item_id,
        "name": name,
        "quantity": quantity,
        "unit": unit,
        "category": category,
        "is_purchased": purchased,
        "notes": notes,
        "assigned_to": None,
    }


LISTS = [
    {
        "name": "Groceries",
        "items": [
            _item("1", "Apples", 2, "kg", "Produce"),
            _item("2", "Milk", 1, "l", "Dairy"),
            _item("3", "Bread", None, None, None),
        ],
    },
    {
        "name": "BBQ",
        "items": [
            _item("4", "apples", 1, "KG", "Produce", purchased=True),
            _item("5", "Apples", 3, "pcs", "Produce"),
            _item("6", "Charcoal", 1, "bag", None),
        ],
    },
]


class TestAggregation:
    """Tests for aggregate_items."""

    def test_same_name_and_unit_are_merged(self):
        items = {i["key"]: i for i in aggregate_items(LISTS)}
        apples = items["apples_kg"]
        assert apples["total_quantity"] == 3
        assert [s["list_name"] for s in apples["sources"]] == ["Groceries", "BBQ"]
        assert apples["is_purchased"] is True

    def test_different_units_stay_separate(self):
        keys = {i["key"] for i in aggregate_items(LISTS)}
        assert {"apples_kg", "apples_pcs"} <= keys

    def test_unknown_unit_and_missing_quantity(self):
        items = {i["key"]: i for i in aggregate_items(LISTS)}
        assert items["charcoal_"]["unit"] == ""
        assert items["bread_"]["total_quantity"] == 0

    def test_sorted_by_category_then_name(self):
        names = [i["name"] for i in aggregate_items(LISTS)]
        assert names == ["Milk", "Apples", "Apples", "Bread", "Charcoal"]

    def test_recipe_sources_are_flagged(self):
        items = {i["key"]: i for i in aggregate_items(LISTS, recipe_item_ids={"2"})}
        assert items["milk_l"]["sources"][0]["from_recipe"] is True
        assert filter_items(list(items.values()), "recipes") == [items["milk_l"]]


class TestViewHelpers:
    """Tests for sorting, filtering and grouping."""

    def test_filters(self):
        items = aggregate_items(LISTS)
        assert len(filter_items(items, "purchased")) == 1
        assert len(filter_items(items, "pending")) == 4
        assert [i["name"] for i in filter_items(items, "all", search="dairy")] == ["Milk"]

    def test_sort_by_quantity(self):
        items = sort_items(aggregate_items(LISTS), "quantity")
        assert items[0]["total_quantity"] == 3

    def test_groups(self):
        groups = group_by_category(aggregate_items(LISTS))
        assert [g["category"] for g in groups] == ["Dairy", "Produce", "Uncategorized"]
        assert len(groups[-1]["items"]) == 2
