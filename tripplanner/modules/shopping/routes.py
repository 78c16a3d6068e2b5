from fastapi import APIRouter, Depends, Query
from tripplanner.database.supabase_client import get_supabase
from tripplanner.modules.shopping.schemas import (
    ShoppingListCreate, ShoppingListUpdate, ShoppingListResponse,
    ShoppingItemCreate, ShoppingItemUpdate, ShoppingItemResponse, AggregatedShoppingResponse
)
from tripplanner.modules.shopping.service import ShoppingService
from tripplanner.core.dependencies import get_current_user_id, check_trip_member, check_record_access
from supabase import Client
from typing import List, Dict, Literal, Optional

router = APIRouter(tags=["shopping"])


def get_shopping_service(supabase: Client = Depends(get_supabase)) -> ShoppingService:
    return ShoppingService(supabase)


@router.get("/trips/{trip_id}/shopping-lists", response_model=List[ShoppingListResponse])
async def list_shopping_lists(
    trip_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.get_shopping_lists_for_trip(trip_id)


@router.post("/trips/{trip_id}/shopping-lists", response_model=ShoppingListResponse, status_code=201)
async def create_shopping_list(
    trip_id: str,
    list_data: ShoppingListCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.create_shopping_list(trip_id, list_data, current_user["id"])


@router.get("/trips/{trip_id}/shopping-lists/aggregated", response_model=AggregatedShoppingResponse)
async def get_aggregated_shopping(
    trip_id: str,
    sort_by: Literal["category", "name", "status", "quantity"] = Query("category"),
    filter_by: Literal["all", "pending", "purchased", "recipes"] = Query("all"),
    search: Optional[str] = Query(None),
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    """Everything the trip still has to buy, merged across lists"""
    check_trip_member(trip_id, current_user, supabase)
    return service.get_aggregated_view(trip_id, sort_by, filter_by, search)


@router.get("/shopping-lists/{list_id}", response_model=ShoppingListResponse)
async def get_shopping_list(
    list_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("shopping_lists", list_id, current_user, supabase)
    return service.get_shopping_list(list_id)


@router.put("/shopping-lists/{list_id}", response_model=ShoppingListResponse)
async def update_shopping_list(
    list_id: str,
    list_data: ShoppingListUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("shopping_lists", list_id, current_user, supabase)
    return service.update_shopping_list(list_id, list_data)


@router.delete("/shopping-lists/{list_id}", status_code=204)
async def delete_shopping_list(
    list_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("shopping_lists", list_id, current_user, supabase)
    service.delete_shopping_list(list_id)
    return None


@router.get("/shopping-lists/{list_id}/items", response_model=List[ShoppingItemResponse])
async def list_items(
    list_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("shopping_lists", list_id, current_user, supabase)
    return service.get_items(list_id)


@router.post("/shopping-lists/{list_id}/items", response_model=ShoppingItemResponse, status_code=201)
async def add_item(
    list_id: str,
    item: ShoppingItemCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("shopping_lists", list_id, current_user, supabase)
    return service.add_item(list_id, item, current_user["id"])


@router.put("/shopping-list-items/{item_id}", response_model=ShoppingItemResponse)
async def update_item(
    item_id: str,
    updates: ShoppingItemUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("shopping_list_items", item_id, current_user, supabase)
    return service.update_item(item_id, updates, current_user["id"])


@router.post("/shopping-list-items/{item_id}/purchase", response_model=ShoppingItemResponse)
async def mark_purchased(
    item_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("shopping_list_items", item_id, current_user, supabase)
    return service.mark_purchased(item_id, current_user["id"])


@router.post("/shopping-list-items/{item_id}/unpurchase", response_model=ShoppingItemResponse)
async def mark_unpurchased(
    item_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("shopping_list_items", item_id, current_user, supabase)
    return service.mark_unpurchased(item_id)


@router.delete("/shopping-list-items/{item_id}", status_code=204)
async def delete_item(
    item_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: ShoppingService = Depends(get_shopping_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("shopping_list_items", item_id, current_user, supabase)
    service.delete_item(item_id)
    return None
