"""
Costing engine package.

Pure functions that turn a catalog snapshot into unit costs, totals,
breakdowns and prices. Nothing in this package touches the database.
"""

from .engine import (
    LABEL_MISSING_INGREDIENT,
    LABEL_MISSING_RECIPE,
    ingredient_unit_cost,
    menu_item_cost_per_serving,
    recipe_total_cost,
    recipe_unit_cost,
    resolve_line_unit_cost,
    safe_multiply,
)
from .pricing import food_cost_ratio, parse_target_food_cost, suggested_price
from .records import (
    Catalog,
    ComponentRef,
    CostBreakdownRow,
    Ingredient,
    IngredientRef,
    LineResolution,
    MenuItem,
    MenuItemCostResult,
    Recipe,
    RecipeCostResult,
    RecipeLine,
    RecipeRef,
    make_ref,
)

__all__ = [
    "LABEL_MISSING_INGREDIENT",
    "LABEL_MISSING_RECIPE",
    "ingredient_unit_cost",
    "menu_item_cost_per_serving",
    "recipe_total_cost",
    "recipe_unit_cost",
    "resolve_line_unit_cost",
    "safe_multiply",
    "food_cost_ratio",
    "parse_target_food_cost",
    "suggested_price",
    "Catalog",
    "ComponentRef",
    "CostBreakdownRow",
    "Ingredient",
    "IngredientRef",
    "LineResolution",
    "MenuItem",
    "MenuItemCostResult",
    "Recipe",
    "RecipeCostResult",
    "RecipeLine",
    "RecipeRef",
    "make_ref",
]
