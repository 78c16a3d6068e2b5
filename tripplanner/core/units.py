"""Measurement units accepted for recipe ingredients and shopping list items."""
from typing import Optional

WEIGHT_UNITS = ["g", "kg", "mg", "oz", "lb"]
VOLUME_UNITS = ["ml", "l", "fl oz", "tsp", "tbsp", "cup", "pt", "qt", "gal"]
COUNT_UNITS = ["pcs", "unit", "item", "dozen", "pack", "can", "bottle", "jar", "box"]
CULINARY_UNITS = ["pinch", "dash", "clove", "slice", "head", "bunch", "stalk", "sprig", "leaf"]

# "" is for items counted without a unit, e.g. "1 apple"
COMMON_UNITS = WEIGHT_UNITS + VOLUME_UNITS + COUNT_UNITS + CULINARY_UNITS + [""]


def normalize_unit(unit: Optional[str]) -> str:
    """Lowercased known unit, or "" for missing and unknown units."""
    value = (unit or "").strip().lower()
    return value if value in COMMON_UNITS else ""


def validate_unit(unit: Optional[str]) -> Optional[str]:
    """Pydantic field validator helper: None passes, anything else must be a known unit."""
    if unit is None:
        return None
    if unit not in COMMON_UNITS:
        raise ValueError(f"Unknown unit '{unit}'")
    return unit
