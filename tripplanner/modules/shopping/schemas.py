from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from tripplanner.core.units import validate_unit


class ShoppingListCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None


class ShoppingListUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None


class ShoppingItemCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    quantity: float = Field(default=1, gt=0)
    unit: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    assigned_to: Optional[str] = None

    @field_validator("unit")
    @classmethod
    def check_unit(cls, v):
        return validate_unit(v)


class ShoppingItemUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    quantity: Optional[float] = Field(default=None, gt=0)
    unit: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    assigned_to: Optional[str] = None
    is_purchased: Optional[bool] = None
    purchased_by: Optional[str] = None

    @field_validator("unit")
    @classmethod
    def check_unit(cls, v):
        return validate_unit(v)


class ShoppingItemResponse(BaseModel):
    id: str
    list_id: str
    name: str
    quantity: Optional[float] = None
    unit: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    assigned_to: Optional[str] = None
    is_purchased: bool = False
    purchased_by: Optional[str] = None
    purchased_at: Optional[datetime] = None
    added_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ShoppingListResponse(BaseModel):
    id: str
    trip_id: str
    name: str
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[ShoppingItemResponse] = []


class AggregatedSource(BaseModel):
    list_name: str
    quantity: float
    item_id: str
    notes: Optional[str] = None
    assigned_to: Optional[str] = None
    from_recipe: bool = False


class AggregatedItem(BaseModel):
    key: str
    name: str
    total_quantity: float
    unit: str
    category: Optional[str] = None
    is_purchased: bool
    sources: List[AggregatedSource]


class CategoryGroup(BaseModel):
    category: str
    items: List[AggregatedItem]


class AggregatedShoppingResponse(BaseModel):
    total_items: int
    purchased_items: int
    items: List[AggregatedItem]
    groups: List[CategoryGroup]
