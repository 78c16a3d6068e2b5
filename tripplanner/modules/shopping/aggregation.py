"""Combined view of the items on all shopping lists of a trip."""
from typing import Dict, Iterable, List, Optional, Set

from tripplanner.core.units import normalize_unit

UNCATEGORIZED = "Uncategorized"

SORT_OPTIONS = ("category", "name", "status", "quantity")
FILTER_OPTIONS = ("all", "pending", "purchased", "recipes")


def aggregation_key(name: str, unit: Optional[str]) -> str:
    return f"{name.strip().lower()}_{normalize_unit(unit)}"


def aggregate_items(lists: Iterable[dict], recipe_item_ids: Optional[Set[str]] = None) -> List[dict]:
    """Merge items with the same name and unit across lists.

    Quantities are summed, every source item is kept, and an aggregated item
    counts as purchased as soon as any of its sources is.
    """
    recipe_item_ids = recipe_item_ids or set()
    merged: Dict[str, dict] = {}
    for shopping_list in lists:
        for item in shopping_list.get("items") or []:
            key = aggregation_key(item["name"], item.get("unit"))
            quantity = item.get("quantity") or 0
            source = {
                "list_name": shopping_list["name"],
                "quantity": quantity,
                "item_id": item["id"],
                "notes": item.get("notes"),
                "assigned_to": item.get("assigned_to"),
                "from_recipe": item["id"] in recipe_item_ids,
            }
            existing = merged.get(key)
            if existing is None:
                merged[key] = {
                    "key": key,
                    "name": item["name"],
                    "total_quantity": quantity,
                    "unit": normalize_unit(item.get("unit")),
                    "category": item.get("category"),
                    "is_purchased": bool(item.get("is_purchased")),
                    "sources": [source],
                }
            else:
                existing["total_quantity"] += quantity
                existing["sources"].append(source)
                if item.get("is_purchased"):
                    existing["is_purchased"] = True
                if not existing["category"] and item.get("category"):
                    existing["category"] = item["category"]
    return sort_items(list(merged.values()), "category")


def sort_items(items: List[dict], sort_by: str = "category") -> List[dict]:
    by_name = sorted(items, key=lambda i: i["name"].lower())
    if sort_by == "name":
        return by_name
    if sort_by == "status":
        return sorted(by_name, key=lambda i: i["is_purchased"])
    if sort_by == "quantity":
        return sorted(by_name, key=lambda i: -i["total_quantity"])
    return sorted(by_name, key=lambda i: (i["category"] or UNCATEGORIZED).lower())


def filter_items(items: List[dict], filter_by: str = "all", search: Optional[str] = None) -> List[dict]:
    if filter_by == "pending":
        items = [i for i in items if not i["is_purchased"]]
    elif filter_by == "purchased":
        items = [i for i in items if i["is_purchased"]]
    elif filter_by == "recipes":
        items = [i for i in items if any(s["from_recipe"] for s in i["sources"])]
    if search:
        term = search.lower()
        items = [
            i for i in items
            if term in i["name"].lower() or term in (i["category"] or "").lower()
        ]
    return items


def group_by_category(items: List[dict]) -> List[dict]:
    """Category groups in alphabetical order, items keep their order within a group."""
    groups: Dict[str, List[dict]] = {}
    for item in items:
        groups.setdefault(item["category"] or UNCATEGORIZED, []).append(item)
    return [{"category": name, "items": groups[name]} for name in sorted(groups, key=str.lower)]
