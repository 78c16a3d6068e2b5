from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal
from datetime import date, datetime
from tripplanner.core.units import validate_unit

MealType = Literal["breakfast", "lunch", "dinner", "snack"]


class IngredientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    quantity: float = Field(ge=0)
    unit: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    optional: bool = False

    @field_validator("unit")
    @classmethod
    def check_unit(cls, v):
        return validate_unit(v)


class IngredientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    quantity: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    optional: Optional[bool] = None

    @field_validator("unit")
    @classmethod
    def check_unit(cls, v):
        return validate_unit(v)


class IngredientResponse(BaseModel):
    id: str
    recipe_id: str
    name: str
    quantity: float
    unit: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    optional: bool = False
    order_index: int = 0


class RecipeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    servings: int = Field(gt=0)
    prep_time_minutes: Optional[int] = Field(default=None, ge=0)
    cook_time_minutes: Optional[int] = Field(default=None, ge=0)
    instructions: Optional[List[str]] = None
    notes: Optional[str] = None
    ingredients: List[IngredientCreate] = []


class RecipeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    servings: Optional[int] = Field(default=None, gt=0)
    prep_time_minutes: Optional[int] = Field(default=None, ge=0)
    cook_time_minutes: Optional[int] = Field(default=None, ge=0)
    instructions: Optional[List[str]] = None
    notes: Optional[str] = None
    ingredients: Optional[List[IngredientCreate]] = None  # replaces all ingredients when given


class RecipeResponse(BaseModel):
    id: str
    trip_id: str
    name: str
    description: Optional[str] = None
    servings: int
    prep_time_minutes: Optional[int] = None
    cook_time_minutes: Optional[int] = None
    instructions: Optional[List[str]] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    ingredients: List[IngredientResponse] = []
    servings_label: Optional[str] = None
    time_label: Optional[str] = None


class ScaledIngredient(IngredientResponse):
    original_quantity: float
    scaled_quantity: float
    display_quantity: str


class ScaledRecipeResponse(BaseModel):
    recipe_id: str
    name: str
    servings: int
    target_servings: int
    servings_label: str
    scaling_factor: float
    ingredients: List[ScaledIngredient]


class AddToShoppingList(BaseModel):
    shopping_list_id: str
    target_servings: int = Field(gt=0)
    meal_plan_id: Optional[str] = None


class AddToShoppingListResponse(BaseModel):
    success: bool
    added_items: int


class MealPlanCreate(BaseModel):
    recipe_id: str
    planned_date: date
    meal_type: MealType
    planned_servings: int = Field(gt=0)
    notes: Optional[str] = None
    assigned_cook: Optional[str] = None


class MealPlanUpdate(BaseModel):
    planned_date: Optional[date] = None
    meal_type: Optional[MealType] = None
    planned_servings: Optional[int] = Field(default=None, gt=0)
    notes: Optional[str] = None
    assigned_cook: Optional[str] = None
    is_completed: Optional[bool] = None


class MealPlanResponse(BaseModel):
    id: str
    trip_id: str
    recipe_id: str
    planned_date: date
    meal_type: MealType
    planned_servings: int
    notes: Optional[str] = None
    assigned_cook: Optional[str] = None
    is_completed: bool = False
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
