from supabase import Client
from tripplanner.modules.shopping.schemas import (
    ShoppingListCreate, ShoppingListUpdate, ShoppingListResponse,
    ShoppingItemCreate, ShoppingItemUpdate, ShoppingItemResponse, AggregatedShoppingResponse
)
from tripplanner.modules.shopping.aggregation import aggregate_items, sort_items, filter_items, group_by_category
from typing import Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ShoppingService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _lists_with_items(self, lists: List[dict]) -> List[ShoppingListResponse]:
        if not lists:
            return []
        result = self.supabase.table("shopping_list_items")\
            .select("*")\
            .in_("list_id", [l["id"] for l in lists])\
            .order("created_at")\
            .execute()
        by_list: Dict[str, list] = {}
        for item in result.data or []:
            by_list.setdefault(item["list_id"], []).append(item)
        return [ShoppingListResponse(**l, items=by_list.get(l["id"], [])) for l in lists]

    def get_shopping_lists_for_trip(self, trip_id: str) -> List[ShoppingListResponse]:
        """Shopping lists of a trip with their items, oldest first"""
        try:
            result = self.supabase.table("shopping_lists")\
                .select("*")\
                .eq("trip_id", trip_id)\
                .order("created_at")\
                .execute()
            return self._lists_with_items(result.data or [])
        except Exception as e:
            logger.error(f"Error fetching shopping lists: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_shopping_list(self, list_id: str) -> ShoppingListResponse:
        try:
            result = self.supabase.table("shopping_lists")\
                .select("*")\
                .eq("id", list_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Shopping list not found")
            return self._lists_with_items(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_shopping_list(self, trip_id: str, list_data: ShoppingListCreate, user_id: str) -> ShoppingListResponse:
        try:
            result = self.supabase.table("shopping_lists").insert({
                "trip_id": trip_id,
                "name": list_data.name,
                "description": list_data.description,
                "created_by": user_id
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create shopping list")
            return ShoppingListResponse(**result.data[0], items=[])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating shopping list: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_shopping_list(self, list_id: str, list_data: ShoppingListUpdate) -> ShoppingListResponse:
        try:
            update_data = {"updated_at": _now()}
            if list_data.name:
                update_data["name"] = list_data.name
            if list_data.description is not None:
                update_data["description"] = list_data.description
            result = self.supabase.table("shopping_lists")\
                .update(update_data)\
                .eq("id", list_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Shopping list not found")
            return self._lists_with_items(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating shopping list: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_shopping_list(self, list_id: str) -> bool:
        """Delete list; its items cascade"""
        try:
            result = self.supabase.table("shopping_lists")\
                .delete()\
                .eq("id", list_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting shopping list: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    # Items

    def get_items(self, list_id: str) -> List[ShoppingItemResponse]:
        try:
            result = self.supabase.table("shopping_list_items")\
                .select("*")\
                .eq("list_id", list_id)\
                .order("created_at")\
                .execute()
            return [ShoppingItemResponse(**i) for i in (result.data or [])]
        except Exception as e:
            logger.error(f"Error fetching shopping list items: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def add_item(self, list_id: str, item: ShoppingItemCreate, user_id: str) -> ShoppingItemResponse:
        try:
            result = self.supabase.table("shopping_list_items").insert({
                "list_id": list_id,
                "name": item.name,
                "quantity": item.quantity,
                "unit": item.unit or None,
                "notes": item.notes,
                "category": item.category,
                "assigned_to": item.assigned_to,
                "is_purchased": False,
                "added_by": user_id
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add item")
            return ShoppingItemResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding shopping list item: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_item(self, item_id: str, updates: ShoppingItemUpdate, user_id: Optional[str] = None) -> ShoppingItemResponse:
        """Update an item. Purchasing stamps purchased_at; un-purchasing clears the purchase."""
        try:
            update_data = {"updated_at": _now(), **updates.model_dump(exclude_unset=True)}
            if updates.is_purchased is True:
                update_data["purchased_at"] = _now()
                if not updates.purchased_by:
                    update_data["purchased_by"] = user_id
            elif updates.is_purchased is False:
                update_data["purchased_at"] = None
                update_data["purchased_by"] = None

            result = self.supabase.table("shopping_list_items")\
                .update(update_data)\
                .eq("id", item_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Shopping list item not found")
            return ShoppingItemResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating shopping list item: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def mark_purchased(self, item_id: str, user_id: str) -> ShoppingItemResponse:
        return self.update_item(item_id, ShoppingItemUpdate(is_purchased=True, purchased_by=user_id), user_id)

    def mark_unpurchased(self, item_id: str) -> ShoppingItemResponse:
        return self.update_item(item_id, ShoppingItemUpdate(is_purchased=False))

    def delete_item(self, item_id: str) -> bool:
        try:
            result = self.supabase.table("shopping_list_items")\
                .delete()\
                .eq("id", item_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting shopping list item: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    # Aggregated view

    def _recipe_item_ids(self, item_ids: List[str]) -> set:
        if not item_ids:
            return set()
        try:
            result = self.supabase.table("shopping_list_recipe_items")\
                .select("shopping_list_item_id")\
                .in_("shopping_list_item_id", item_ids)\
                .execute()
            return {r["shopping_list_item_id"] for r in (result.data or [])}
        except Exception as e:
            logger.warning(f"Could not load recipe links for shopping items: {e}")
            return set()

    def get_aggregated_view(
        self,
        trip_id: str,
        sort_by: str = "category",
        filter_by: str = "all",
        search: Optional[str] = None
    ) -> AggregatedShoppingResponse:
        """One row per item name and unit across all of the trip's lists"""
        lists = [l.model_dump() for l in self.get_shopping_lists_for_trip(trip_id)]
        item_ids = [i["id"] for l in lists for i in l["items"]]
        items = aggregate_items(lists, self._recipe_item_ids(item_ids))
        visible = filter_items(sort_items(items, sort_by), filter_by, search)
        return AggregatedShoppingResponse(
            total_items=len(items),
            purchased_items=sum(1 for i in items if i["is_purchased"]),
            items=visible,
            groups=group_by_category(visible)
        )
