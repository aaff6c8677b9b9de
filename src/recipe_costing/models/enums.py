"""
Enumerations shared by the persistence models and the costing engine.

This module contains:
- Unit: the three measurement units (never converted into each other)
- RefKind: which kind of catalog entry a line references
- RecipeCategory: descriptive recipe grouping
"""

from enum import Enum


class Unit(str, Enum):
    """
    Measurement unit for ingredients, recipe yields and lines.

    Values:
        GRAM: mass
        MILLILITER: volume
        PIECE: count
    """

    GRAM = "g"
    MILLILITER = "ml"
    PIECE = "pc"

    def __str__(self) -> str:
        return self.value


class RefKind(str, Enum):
    """
    Kind of entry a recipe or menu item line points at.

    Values:
        INGREDIENT: line references an Ingredient
        RECIPE: line references a (sub-)Recipe
    """

    INGREDIENT = "ingredient"
    RECIPE = "recipe"

    def __str__(self) -> str:
        return self.value


class RecipeCategory(str, Enum):
    """
    Recipe category. Descriptive only - does not affect costing.

    Values:
        BASE: a recipe served or sold on its own
        SUB_RECIPE: a preparation used inside other recipes
    """

    BASE = "Base"
    SUB_RECIPE = "SubRecipe"

    def __str__(self) -> str:
        return self.value
