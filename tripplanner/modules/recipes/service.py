from supabase import Client
from tripplanner.modules.recipes.schemas import (
    RecipeCreate, RecipeUpdate, RecipeResponse, IngredientCreate, IngredientUpdate,
    IngredientResponse, ScaledRecipeResponse, AddToShoppingListResponse,
    MealPlanCreate, MealPlanUpdate, MealPlanResponse
)
from tripplanner.modules.recipes.scaling import (
    scaling_factor, scale_ingredients, shopping_note, format_servings, format_cook_time, format_quantity
)
from typing import Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _ingredient_rows(recipe_id: str, ingredients: List[IngredientCreate]) -> List[dict]:
    return [
        {
            "recipe_id": recipe_id,
            "name": ingredient.name,
            "quantity": ingredient.quantity,
            "unit": ingredient.unit or None,
            "notes": ingredient.notes,
            "category": ingredient.category,
            "optional": ingredient.optional,
            "order_index": index
        }
        for index, ingredient in enumerate(ingredients)
    ]


class RecipeService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _with_ingredients(self, recipes: List[dict]) -> List[RecipeResponse]:
        if not recipes:
            return []
        result = self.supabase.table("recipe_ingredients")\
            .select("*")\
            .in_("recipe_id", [r["id"] for r in recipes])\
            .order("order_index")\
            .execute()
        by_recipe: Dict[str, list] = {}
        for ingredient in result.data or []:
            by_recipe.setdefault(ingredient["recipe_id"], []).append(ingredient)
        return [
            RecipeResponse(
                **r,
                ingredients=by_recipe.get(r["id"], []),
                servings_label=format_servings(r["servings"]),
                time_label=format_cook_time(r.get("prep_time_minutes"), r.get("cook_time_minutes"))
            )
            for r in recipes
        ]

    def get_recipes_for_trip(self, trip_id: str) -> List[RecipeResponse]:
        """Recipes of a trip, newest first, with ingredients in display order"""
        try:
            result = self.supabase.table("recipes")\
                .select("*")\
                .eq("trip_id", trip_id)\
                .order("created_at", desc=True)\
                .execute()
            return self._with_ingredients(result.data or [])
        except Exception as e:
            logger.error(f"Error fetching recipes: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def get_recipe(self, recipe_id: str) -> RecipeResponse:
        try:
            result = self.supabase.table("recipes")\
                .select("*")\
                .eq("id", recipe_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Recipe not found")
            return self._with_ingredients(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_recipe(self, trip_id: str, recipe_data: RecipeCreate, user_id: str) -> RecipeResponse:
        """Create a recipe with its ingredients; the recipe is removed again if the ingredients fail"""
        try:
            result = self.supabase.table("recipes").insert({
                "trip_id": trip_id,
                "name": recipe_data.name,
                "description": recipe_data.description,
                "servings": recipe_data.servings,
                "prep_time_minutes": recipe_data.prep_time_minutes,
                "cook_time_minutes": recipe_data.cook_time_minutes,
                "instructions": recipe_data.instructions,
                "notes": recipe_data.notes,
                "created_by": user_id
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create recipe")
            recipe = result.data[0]

            if recipe_data.ingredients:
                try:
                    self.supabase.table("recipe_ingredients")\
                        .insert(_ingredient_rows(recipe["id"], recipe_data.ingredients))\
                        .execute()
                except Exception as e:
                    logger.error(f"Error creating ingredients, removing recipe {recipe['id']}: {e}")
                    self.supabase.table("recipes").delete().eq("id", recipe["id"]).execute()
                    raise HTTPException(status_code=500, detail=str(e))

            logger.info(f"Recipe {recipe['id']} created on trip {trip_id}")
            return self._with_ingredients([recipe])[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating recipe: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_recipe(self, recipe_id: str, recipe_data: RecipeUpdate) -> RecipeResponse:
        """Update recipe fields; a given ingredient list replaces the existing one.

        New ingredients are inserted before anything else changes, so a failed
        insert leaves the recipe untouched. The old rows are deleted last.
        """
        try:
            self.get_recipe(recipe_id)
            old_ids: List[str] = []
            new_ids: List[str] = []
            if recipe_data.ingredients is not None:
                existing = self.supabase.table("recipe_ingredients")\
                    .select("id")\
                    .eq("recipe_id", recipe_id)\
                    .execute()
                old_ids = [i["id"] for i in (existing.data or [])]
                if recipe_data.ingredients:
                    inserted = self.supabase.table("recipe_ingredients")\
                        .insert(_ingredient_rows(recipe_id, recipe_data.ingredients))\
                        .execute()
                    new_ids = [i["id"] for i in (inserted.data or [])]

            update_data = {
                "updated_at": _now(),
                **recipe_data.model_dump(exclude_unset=True, exclude_none=True, exclude={"ingredients"})
            }
            try:
                result = self.supabase.table("recipes")\
                    .update(update_data)\
                    .eq("id", recipe_id)\
                    .execute()
            except Exception as e:
                logger.error(f"Error updating recipe {recipe_id}, removing new ingredients: {e}")
                if new_ids:
                    self.supabase.table("recipe_ingredients").delete().in_("id", new_ids).execute()
                raise HTTPException(status_code=500, detail=str(e))
            if not result.data:
                raise HTTPException(status_code=404, detail="Recipe not found")

            if old_ids:
                self.supabase.table("recipe_ingredients")\
                    .delete()\
                    .in_("id", old_ids)\
                    .execute()

            return self._with_ingredients(result.data)[0]
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating recipe: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_recipe(self, recipe_id: str) -> bool:
        """Delete recipe; ingredients and meal plans cascade"""
        try:
            result = self.supabase.table("recipes")\
                .delete()\
                .eq("id", recipe_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting recipe: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def add_ingredient(self, recipe_id: str, ingredient: IngredientCreate) -> IngredientResponse:
        """Append an ingredient after the current last one"""
        try:
            last = self.supabase.table("recipe_ingredients")\
                .select("order_index")\
                .eq("recipe_id", recipe_id)\
                .order("order_index", desc=True)\
                .limit(1)\
                .execute()
            next_index = last.data[0]["order_index"] + 1 if last.data else 0
            row = _ingredient_rows(recipe_id, [ingredient])[0]
            row["order_index"] = next_index

            result = self.supabase.table("recipe_ingredients").insert(row).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add ingredient")
            return IngredientResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error adding ingredient: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_ingredient(self, ingredient_id: str, updates: IngredientUpdate) -> IngredientResponse:
        try:
            result = self.supabase.table("recipe_ingredients")\
                .update(updates.model_dump(exclude_unset=True))\
                .eq("id", ingredient_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Ingredient not found")
            return IngredientResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating ingredient: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_ingredient(self, ingredient_id: str) -> bool:
        try:
            result = self.supabase.table("recipe_ingredients")\
                .delete()\
                .eq("id", ingredient_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting ingredient: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def scale_recipe(self, recipe: RecipeResponse, target_servings: int) -> ScaledRecipeResponse:
        ingredients = scale_ingredients(
            [i.model_dump() for i in recipe.ingredients], recipe.servings, target_servings
        )
        return ScaledRecipeResponse(
            recipe_id=recipe.id,
            name=recipe.name,
            servings=recipe.servings,
            target_servings=target_servings,
            servings_label=format_servings(target_servings),
            scaling_factor=scaling_factor(recipe.servings, target_servings),
            ingredients=[
                {**i, "display_quantity": format_quantity(i["scaled_quantity"], i.get("unit"))}
                for i in ingredients
            ]
        )

    def add_scaled_recipe_to_shopping_list(
        self,
        recipe_id: str,
        shopping_list_id: str,
        target_servings: int,
        user_id: str,
        meal_plan_id: Optional[str] = None
    ) -> AddToShoppingListResponse:
        """Add the required (non-optional) ingredients, scaled, to a shopping list.

        Each added item is linked back to the recipe. Items that fail to
        insert are skipped; adding nothing at all is an error.
        """
        recipe = self.get_recipe(recipe_id)
        try:
            shopping_list = self.supabase.table("shopping_lists")\
                .select("id, trip_id")\
                .eq("id", shopping_list_id)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching shopping list: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        if not shopping_list.data:
            raise HTTPException(status_code=404, detail="Shopping list not found")
        if shopping_list.data[0]["trip_id"] != recipe.trip_id:
            raise HTTPException(status_code=400, detail="Shopping list belongs to another trip")

        scaled = self.scale_recipe(recipe, target_servings)
        added = 0
        for ingredient in scaled.ingredients:
            if ingredient.optional:
                continue
            try:
                item = self.supabase.table("shopping_list_items").insert({
                    "list_id": shopping_list_id,
                    "name": ingredient.name,
                    "quantity": ingredient.scaled_quantity,
                    "unit": ingredient.unit or None,
                    "notes": shopping_note(ingredient.notes, recipe.name),
                    "category": ingredient.category,
                    "added_by": user_id,
                    "is_purchased": False
                }).execute()
            except Exception as e:
                logger.error(f"Error adding ingredient '{ingredient.name}' to shopping list: {e}")
                continue
            if not item.data:
                continue

            try:
                self.supabase.table("shopping_list_recipe_items").insert({
                    "shopping_list_item_id": item.data[0]["id"],
                    "recipe_id": recipe_id,
                    "meal_plan_id": meal_plan_id,
                    "scaled_servings": target_servings,
                    "original_quantity": ingredient.original_quantity,
                    "scaled_quantity": ingredient.scaled_quantity
                }).execute()
            except Exception as e:
                # the item itself was added, only the back-link is missing
                logger.warning(f"Error linking shopping item to recipe {recipe_id}: {e}")
            added += 1

        if added == 0:
            raise HTTPException(status_code=400, detail="No ingredients were added")
        logger.info(f"Added {added} ingredient(s) of recipe {recipe_id} to shopping list {shopping_list_id}")
        return AddToShoppingListResponse(success=True, added_items=added)

    # Meal plans

    def get_meal_plans_for_trip(self, trip_id: str) -> List[MealPlanResponse]:
        try:
            result = self.supabase.table("meal_plans")\
                .select("*")\
                .eq("trip_id", trip_id)\
                .order("planned_date")\
                .order("meal_type")\
                .execute()
            return [MealPlanResponse(**m) for m in (result.data or [])]
        except Exception as e:
            logger.error(f"Error fetching meal plans: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def create_meal_plan(self, trip_id: str, plan: MealPlanCreate, user_id: str) -> MealPlanResponse:
        try:
            recipe = self.get_recipe(plan.recipe_id)
            if recipe.trip_id != trip_id:
                raise HTTPException(status_code=400, detail="Recipe belongs to another trip")

            result = self.supabase.table("meal_plans").insert({
                "trip_id": trip_id,
                "recipe_id": plan.recipe_id,
                "planned_date": plan.planned_date.isoformat(),
                "meal_type": plan.meal_type,
                "planned_servings": plan.planned_servings,
                "notes": plan.notes,
                "assigned_cook": plan.assigned_cook,
                "created_by": user_id
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create meal plan")
            return MealPlanResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating meal plan: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def update_meal_plan(self, meal_plan_id: str, updates: MealPlanUpdate) -> MealPlanResponse:
        try:
            update_data = {"updated_at": _now()}
            for field, value in updates.model_dump(exclude_unset=True).items():
                update_data[field] = value.isoformat() if field == "planned_date" and value else value
            result = self.supabase.table("meal_plans")\
                .update(update_data)\
                .eq("id", meal_plan_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Meal plan not found")
            return MealPlanResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating meal plan: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_meal_plan(self, meal_plan_id: str) -> bool:
        try:
            result = self.supabase.table("meal_plans")\
                .delete()\
                .eq("id", meal_plan_id)\
                .execute()
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting meal plan: {e}")
            raise HTTPException(status_code=500, detail=str(e))
