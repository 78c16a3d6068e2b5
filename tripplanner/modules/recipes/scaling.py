"""Serving-size scaling and display formatting for recipes."""
from typing import List, Optional


def scaling_factor(servings: int, target_servings: int) -> float:
    if servings <= 0:
        raise ValueError("Recipe servings must be positive")
    return target_servings / servings


def scale_quantity(quantity: float, factor: float) -> float:
    return round(quantity * factor, 2)


def scale_ingredients(ingredients: List[dict], servings: int, target_servings: int) -> List[dict]:
    """Copy of each ingredient with original_quantity and scaled_quantity added."""
    factor = scaling_factor(servings, target_servings)
    return [
        {
            **ingredient,
            "original_quantity": ingredient["quantity"],
            "scaled_quantity": scale_quantity(ingredient["quantity"], factor),
        }
        for ingredient in ingredients
    ]


def shopping_note(ingredient_notes: Optional[str], recipe_name: str) -> str:
    if ingredient_notes:
        return f"{ingredient_notes} (from {recipe_name})"
    return f"From {recipe_name}"


def format_servings(servings: int) -> str:
    return "1 serving" if servings == 1 else f"{servings} servings"


def format_cook_time(prep_time: Optional[int] = None, cook_time: Optional[int] = None) -> str:
    parts = []
    if prep_time:
        parts.append(f"{prep_time}min prep")
    if cook_time:
        parts.append(f"{cook_time}min cook")
    return ", ".join(parts) or "Time not specified"


def format_quantity(quantity: float, unit: Optional[str] = None) -> str:
    if float(quantity).is_integer():
        text = str(int(quantity))
    else:
        text = f"{quantity:.2f}"
    return f"{text} {unit}" if unit else text
