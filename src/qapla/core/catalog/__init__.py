"""
Progression catalog for qapla.

Each movement category (Push, Pull, Dips, Legs, Core) is described by a
MovementCategory holding its leveled Movement variants.
"""

from .base import Movement, MovementCategory
from .registry import (
    CATEGORY_IDS,
    CATEGORY_REGISTRY,
    all_categories,
    category_by_id,
    category_by_name,
    get_category,
    movement_by_level,
    movement_by_name,
)

__all__ = [
    "Movement",
    "MovementCategory",
    "CATEGORY_IDS",
    "CATEGORY_REGISTRY",
    "all_categories",
    "category_by_id",
    "category_by_name",
    "get_category",
    "movement_by_level",
    "movement_by_name",
]
