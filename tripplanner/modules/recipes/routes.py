from fastapi import APIRouter, Depends, Query
from tripplanner.database.supabase_client import get_supabase
from tripplanner.modules.recipes.schemas import (
    RecipeCreate, RecipeUpdate, RecipeResponse, IngredientCreate, IngredientUpdate,
    IngredientResponse, ScaledRecipeResponse, AddToShoppingList, AddToShoppingListResponse,
    MealPlanCreate, MealPlanUpdate, MealPlanResponse
)
from tripplanner.modules.recipes.service import RecipeService
from tripplanner.core.dependencies import get_current_user_id, check_trip_member, check_record_access
from tripplanner.core.units import COMMON_UNITS
from supabase import Client
from typing import List, Dict

router = APIRouter(tags=["recipes"])


def get_recipe_service(supabase: Client = Depends(get_supabase)) -> RecipeService:
    return RecipeService(supabase)


@router.get("/units", response_model=List[str])
async def list_units():
    """Units accepted for ingredients and shopping items"""
    return COMMON_UNITS


@router.get("/trips/{trip_id}/recipes", response_model=List[RecipeResponse])
async def list_recipes(
    trip_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.get_recipes_for_trip(trip_id)


@router.post("/trips/{trip_id}/recipes", response_model=RecipeResponse, status_code=201)
async def create_recipe(
    trip_id: str,
    recipe_data: RecipeCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.create_recipe(trip_id, recipe_data, current_user["id"])


@router.get("/recipes/{recipe_id}", response_model=RecipeResponse)
async def get_recipe(
    recipe_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("recipes", recipe_id, current_user, supabase)
    return service.get_recipe(recipe_id)


@router.put("/recipes/{recipe_id}", response_model=RecipeResponse)
async def update_recipe(
    recipe_id: str,
    recipe_data: RecipeUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("recipes", recipe_id, current_user, supabase)
    return service.update_recipe(recipe_id, recipe_data)


@router.delete("/recipes/{recipe_id}", status_code=204)
async def delete_recipe(
    recipe_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("recipes", recipe_id, current_user, supabase)
    service.delete_recipe(recipe_id)
    return None


@router.get("/recipes/{recipe_id}/scaled", response_model=ScaledRecipeResponse)
async def scale_recipe(
    recipe_id: str,
    servings: int = Query(..., gt=0),
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    """Ingredient quantities for a different number of servings"""
    check_record_access("recipes", recipe_id, current_user, supabase)
    return service.scale_recipe(service.get_recipe(recipe_id), servings)


@router.post("/recipes/{recipe_id}/shopping-list", response_model=AddToShoppingListResponse)
async def add_recipe_to_shopping_list(
    recipe_id: str,
    body: AddToShoppingList,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("recipes", recipe_id, current_user, supabase)
    return service.add_scaled_recipe_to_shopping_list(
        recipe_id, body.shopping_list_id, body.target_servings, current_user["id"], body.meal_plan_id
    )


@router.post("/recipes/{recipe_id}/ingredients", response_model=IngredientResponse, status_code=201)
async def add_ingredient(
    recipe_id: str,
    ingredient: IngredientCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("recipes", recipe_id, current_user, supabase)
    return service.add_ingredient(recipe_id, ingredient)


@router.put("/recipe-ingredients/{ingredient_id}", response_model=IngredientResponse)
async def update_ingredient(
    ingredient_id: str,
    updates: IngredientUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("recipe_ingredients", ingredient_id, current_user, supabase)
    return service.update_ingredient(ingredient_id, updates)


@router.delete("/recipe-ingredients/{ingredient_id}", status_code=204)
async def delete_ingredient(
    ingredient_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("recipe_ingredients", ingredient_id, current_user, supabase)
    service.delete_ingredient(ingredient_id)
    return None


@router.get("/trips/{trip_id}/meal-plans", response_model=List[MealPlanResponse])
async def list_meal_plans(
    trip_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.get_meal_plans_for_trip(trip_id)


@router.post("/trips/{trip_id}/meal-plans", response_model=MealPlanResponse, status_code=201)
async def create_meal_plan(
    trip_id: str,
    plan: MealPlanCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_trip_member(trip_id, current_user, supabase)
    return service.create_meal_plan(trip_id, plan, current_user["id"])


@router.put("/meal-plans/{meal_plan_id}", response_model=MealPlanResponse)
async def update_meal_plan(
    meal_plan_id: str,
    updates: MealPlanUpdate,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("meal_plans", meal_plan_id, current_user, supabase)
    return service.update_meal_plan(meal_plan_id, updates)


@router.delete("/meal-plans/{meal_plan_id}", status_code=204)
async def delete_meal_plan(
    meal_plan_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: RecipeService = Depends(get_recipe_service),
    supabase: Client = Depends(get_supabase)
):
    check_record_access("meal_plans", meal_plan_id, current_user, supabase)
    service.delete_meal_plan(meal_plan_id)
    return None
