"""
Database models package.

This package contains all SQLAlchemy ORM models for the application.
"""

from .enums import RecipeCategory, RefKind, Unit
from .base import Base, BaseModel
from .ingredient import Ingredient
from .recipe import Recipe, RecipeLine
from .menu_item import MenuItem, MenuItemLine

__all__ = [
    "Base",
    "BaseModel",
    "RecipeCategory",
    "RefKind",
    "Unit",
    "Ingredient",
    "Recipe",
    "RecipeLine",
    "MenuItem",
    "MenuItemLine",
]
