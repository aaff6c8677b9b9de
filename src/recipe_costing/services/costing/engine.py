"""
Costing engine - resolves ingredient, recipe and menu item costs.

Transaction boundary: Pure computation (no database access).

The engine walks the reference graph menu item -> lines -> {ingredient |
recipe} -> lines -> ... and produces unit costs, totals and per-line
breakdowns. It never raises for bad data:

- Unit mismatch between a line and its component: the row's unit cost is
  NaN, the line contributes 0, and "Unit mismatch in <label>" is added to
  errors.
- Missing ingredient/recipe id: the line costs 0 and is labelled
  "Missing ingredient"/"Missing recipe". Nothing is added to errors.
- Cyclic recipe references: the recipe already being resolved contributes 0
  on the cyclic edge. Nothing is added to errors.
- Pack size, yield or servings at or near zero: 0 cost or 1 serving.

Resolution state is explicit: a memo (recipe id -> unit cost) and a
visiting set (recipe ids on the active walk stack) are passed by reference
between the helpers. Each top-level call creates fresh ones unless the
caller passes a memo in to share work across several targets.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from recipe_costing.models.enums import RefKind
from recipe_costing.services.costing.records import (
    CostBreakdownRow,
    Ingredient,
    LineResolution,
    MenuItem,
    MenuItemCostResult,
    Recipe,
    RecipeCostResult,
    RecipeLine,
)
from recipe_costing.services.logging_utils import get_service_logger
from recipe_costing.utils.constants import EPSILON

logger = get_service_logger(__name__)

UNRESOLVED = math.nan

LABEL_MISSING_INGREDIENT = "Missing ingredient"
LABEL_MISSING_RECIPE = "Missing recipe"


def _find_by_id(items: Sequence, item_id: str):
    for item in items:
        if item.id == item_id:
            return item
    return None


def safe_multiply(a: float, b: float) -> float:
    """Multiply, treating a non-finite operand as a zero contribution."""
    if not math.isfinite(a) or not math.isfinite(b):
        return 0.0
    return a * b


def ingredient_unit_cost(ingredient: Ingredient) -> float:
    """
    Cost of one unit (g/ml/pc) of an ingredient.

    Args:
        ingredient: Ingredient record

    Returns:
        pack_cost / pack_size, or 0.0 when pack_size is at or near zero
        (unknown cost)

    Examples:
        >>> ingredient_unit_cost(Ingredient("i1", "Flour", Unit.GRAM, 1000, 2.0))
        0.002
    """
    if ingredient.pack_size <= EPSILON:
        return 0.0
    return ingredient.pack_cost / ingredient.pack_size


def resolve_line_unit_cost(
    line: RecipeLine,
    ingredients: Sequence[Ingredient],
    recipes: Sequence[Recipe],
    memo: Dict[str, float],
    visiting: Set[str],
) -> LineResolution:
    """
    Resolve the unit cost of the component a line references.

    Recipe references go through recipe_unit_cost() sharing memo and
    visiting, so diamond references are computed once and cycles terminate.

    Args:
        line: Line to resolve
        ingredients: Ingredient catalog
        recipes: Recipe catalog
        memo: Recipe id -> unit cost, shared across the resolution
        visiting: Recipe ids currently being resolved

    Returns:
        LineResolution(unit_cost, kind, label); unit_cost is NaN on unit mismatch
    """
    if line.ref.kind is RefKind.INGREDIENT:
        ingredient = _find_by_id(ingredients, line.ref.ref_id)
        if ingredient is None:
            return LineResolution(0.0, RefKind.INGREDIENT, LABEL_MISSING_INGREDIENT)
        unit_cost = ingredient_unit_cost(ingredient)
        if ingredient.unit != line.unit:
            logger.debug(
                f"Unit mismatch: ingredient {ingredient.id} is in {ingredient.unit}, "
                f"line uses {line.unit}"
            )
            return LineResolution(
                UNRESOLVED, RefKind.INGREDIENT, f"{ingredient.name} (unit mismatch)"
            )
        return LineResolution(unit_cost, RefKind.INGREDIENT, ingredient.name)

    recipe = _find_by_id(recipes, line.ref.ref_id)
    if recipe is None:
        return LineResolution(0.0, RefKind.RECIPE, LABEL_MISSING_RECIPE)
    unit_cost = recipe_unit_cost(recipe, ingredients, recipes, memo, visiting)
    if recipe.yield_unit != line.unit:
        logger.debug(
            f"Unit mismatch: recipe {recipe.id} yields {recipe.yield_unit}, "
            f"line uses {line.unit}"
        )
        return LineResolution(UNRESOLVED, RefKind.RECIPE, f"{recipe.name} (unit mismatch)")
    return LineResolution(unit_cost, RefKind.RECIPE, recipe.name)


def _cost_lines(
    lines: Sequence[RecipeLine],
    ingredients: Sequence[Ingredient],
    recipes: Sequence[Recipe],
    memo: Dict[str, float],
    visiting: Set[str],
) -> Tuple[float, List[CostBreakdownRow], List[str]]:
    """Resolve every line in order; returns (total_cost, breakdown, errors)."""
    breakdown: List[CostBreakdownRow] = []
    errors: List[str] = []

    for line in lines:
        resolution = resolve_line_unit_cost(line, ingredients, recipes, memo, visiting)
        if not math.isfinite(resolution.unit_cost):
            errors.append(f"Unit mismatch in {resolution.label}")
        breakdown.append(
            CostBreakdownRow(
                label=resolution.label,
                qty=line.qty,
                unit=line.unit,
                unit_cost=resolution.unit_cost,
                line_cost=safe_multiply(resolution.unit_cost, line.qty),
                kind=resolution.kind,
            )
        )

    total_cost = sum(row.line_cost for row in breakdown if math.isfinite(row.line_cost))
    return total_cost, breakdown, errors


def recipe_total_cost(
    recipe: Recipe,
    ingredients: Sequence[Ingredient],
    recipes: Sequence[Recipe],
    memo: Optional[Dict[str, float]] = None,
    visiting: Optional[Set[str]] = None,
) -> RecipeCostResult:
    """
    Total cost of one batch of a recipe (its full yield).

    Args:
        recipe: Recipe to cost
        ingredients: Ingredient catalog
        recipes: Recipe catalog (for sub-recipe lines)
        memo: Optional shared memo (fresh if None)
        visiting: Optional shared visiting set (fresh if None)

    Returns:
        RecipeCostResult with total_cost, one breakdown row per line (input
        order) and one error string per unit mismatch
    """
    if memo is None:
        memo = {}
    if visiting is None:
        visiting = set()

    total_cost, breakdown, errors = _cost_lines(
        recipe.lines, ingredients, recipes, memo, visiting
    )
    return RecipeCostResult(total_cost=total_cost, breakdown=breakdown, errors=errors)


@dataclass
class _Frame:
    """A recipe whose lines are being summed on the explicit walk stack."""

    recipe: Recipe
    position: int = 0
    total_cost: float = 0.0


def _pending_sub_recipe(
    line: RecipeLine,
    recipes: Sequence[Recipe],
    memo: Dict[str, float],
    visiting: Set[str],
) -> Optional[Recipe]:
    """Sub-recipe a line needs resolved first, or None if its cost is already known."""
    if line.ref.kind is not RefKind.RECIPE:
        return None
    recipe = _find_by_id(recipes, line.ref.ref_id)
    if recipe is None or recipe.id in memo or recipe.id in visiting:
        return None
    return recipe


def recipe_unit_cost(
    recipe: Recipe,
    ingredients: Sequence[Ingredient],
    recipes: Sequence[Recipe],
    memo: Optional[Dict[str, float]] = None,
    visiting: Optional[Set[str]] = None,
) -> float:
    """
    Cost of one unit of a recipe's yield.

    A memoized recipe returns its stored value. A recipe already on the
    visiting set is part of a cycle: it returns 0.0 immediately and the
    placeholder is not memoized.

    Sub-recipes are resolved post-order on an explicit stack, so the depth
    of the reference graph is bounded only by memory. Every recipe finished
    during the walk is memoized.

    Args:
        recipe: Recipe to cost
        ingredients: Ingredient catalog
        recipes: Recipe catalog
        memo: Optional shared memo (fresh if None)
        visiting: Optional shared visiting set (fresh if None)

    Returns:
        total_cost / yield_qty, or 0.0 when yield_qty is at or near zero
    """
    if memo is None:
        memo = {}
    if visiting is None:
        visiting = set()

    if recipe.id in memo:
        return memo[recipe.id]
    if recipe.id in visiting:
        logger.debug(f"Cycle detected at recipe {recipe.id}; cyclic edge contributes 0")
        return 0.0

    stack = [_Frame(recipe)]
    visiting.add(recipe.id)
    try:
        while stack:
            frame = stack[-1]
            lines = frame.recipe.lines

            if frame.position < len(lines):
                line = lines[frame.position]
                sub_recipe = _pending_sub_recipe(line, recipes, memo, visiting)
                if sub_recipe is not None:
                    # Resolve the child first; this line is revisited once it is memoized
                    visiting.add(sub_recipe.id)
                    stack.append(_Frame(sub_recipe))
                    continue

                resolution = resolve_line_unit_cost(line, ingredients, recipes, memo, visiting)
                line_cost = safe_multiply(resolution.unit_cost, line.qty)
                if math.isfinite(line_cost):
                    frame.total_cost += line_cost
                frame.position += 1
                continue

            stack.pop()
            done = frame.recipe
            yield_qty = done.yield_qty
            memo[done.id] = frame.total_cost / yield_qty if yield_qty > EPSILON else 0.0
            visiting.discard(done.id)
    finally:
        for frame in stack:
            visiting.discard(frame.recipe.id)

    return memo[recipe.id]


def menu_item_cost_per_serving(
    item: MenuItem,
    ingredients: Sequence[Ingredient],
    recipes: Sequence[Recipe],
    memo: Optional[Dict[str, float]] = None,
) -> MenuItemCostResult:
    """
    Total and per-serving cost of a menu item.

    Menu items are resolution roots: a fresh visiting set is always used, and
    a fresh memo unless one is passed in for batch computation.

    Args:
        item: Menu item to cost
        ingredients: Ingredient catalog
        recipes: Recipe catalog
        memo: Optional memo shared with other top-level calls

    Returns:
        MenuItemCostResult; servings at or near zero count as 1
    """
    if memo is None:
        memo = {}
    visiting: Set[str] = set()

    total_cost, breakdown, errors = _cost_lines(item.lines, ingredients, recipes, memo, visiting)
    servings = item.servings if item.servings > EPSILON else 1
    return MenuItemCostResult(
        total_cost=total_cost,
        cost_per_serving=total_cost / servings,
        breakdown=breakdown,
        errors=errors,
    )
