"""
Report Service - printable costing summaries.

Builds the three summaries of the catalog (ingredients, recipes, menu
items) from a snapshot and renders them as fixed-width text for printing
or saving.

Transaction boundary: build_report() reads one catalog snapshot when no
catalog is passed; everything else is pure computation.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from ..utils.config import get_config
from ..utils.constants import EPSILON
from ..utils.datetime_utils import iso_timestamp
from . import costing
from .catalog_service import load_catalog
from .dto_utils import money, num, pct, unit_label


@dataclass(frozen=True)
class IngredientSummaryRow:
    name: str
    unit: str
    unit_cost: float


@dataclass(frozen=True)
class RecipeSummaryRow:
    name: str
    yield_qty: float
    yield_unit: str
    total_cost: float
    unit_cost: float
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class MenuItemSummaryRow:
    name: str
    price: float
    cost_per_serving: float
    food_cost_ratio: float
    suggested_price: float
    errors: List[str] = field(default_factory=list)


@dataclass
class CostingReport:
    """Everything the printed report shows."""

    target_food_cost: float
    ingredients: List[IngredientSummaryRow]
    recipes: List[RecipeSummaryRow]
    menu_items: List[MenuItemSummaryRow]
    generated_at: str = field(default_factory=iso_timestamp)

    @property
    def warnings(self) -> List[str]:
        """All unit mismatch messages, prefixed by recipe or menu item name."""
        messages = []
        for row in self.recipes:
            messages.extend(f"{row.name}: {error}" for error in row.errors)
        for row in self.menu_items:
            messages.extend(f"{row.name}: {error}" for error in row.errors)
        return messages


def _by_name(records):
    return sorted(records, key=lambda record: record.name.casefold())


def ingredients_summary(catalog: costing.Catalog) -> List[IngredientSummaryRow]:
    """Name, unit and unit cost of every ingredient, sorted by name."""
    return [
        IngredientSummaryRow(
            name=ingredient.name,
            unit=str(ingredient.unit),
            unit_cost=costing.ingredient_unit_cost(ingredient),
        )
        for ingredient in _by_name(catalog.ingredients)
    ]


def recipes_summary(catalog: costing.Catalog) -> List[RecipeSummaryRow]:
    """
    Yield, batch cost and unit cost of every recipe, sorted by name.

    Each recipe is costed as its own top-level call (fresh memo).
    """
    rows = []
    for recipe in _by_name(catalog.recipes):
        result = costing.recipe_total_cost(recipe, catalog.ingredients, catalog.recipes)
        unit_cost = result.total_cost / recipe.yield_qty if recipe.yield_qty > EPSILON else 0.0
        rows.append(
            RecipeSummaryRow(
                name=recipe.name,
                yield_qty=recipe.yield_qty,
                yield_unit=str(recipe.yield_unit),
                total_cost=result.total_cost,
                unit_cost=unit_cost,
                errors=list(result.errors),
            )
        )
    return rows


def menu_items_summary(
    catalog: costing.Catalog, target_food_cost: float
) -> List[MenuItemSummaryRow]:
    """
    Price, cost per serving, food cost ratio and suggested price per menu
    item, sorted by name.
    """
    rows = []
    for item in _by_name(catalog.menu_items):
        result = costing.menu_item_cost_per_serving(item, catalog.ingredients, catalog.recipes)
        rows.append(
            MenuItemSummaryRow(
                name=item.name,
                price=item.price,
                cost_per_serving=result.cost_per_serving,
                food_cost_ratio=costing.food_cost_ratio(result.cost_per_serving, item.price),
                suggested_price=costing.suggested_price(
                    result.cost_per_serving, target_food_cost
                ),
                errors=list(result.errors),
            )
        )
    return rows


def build_report(
    catalog: Optional[costing.Catalog] = None, target_food_cost: Optional[float] = None
) -> CostingReport:
    """
    Build the full costing report.

    Args:
        catalog: Snapshot to report on (the stored catalog if None)
        target_food_cost: Ratio for suggested prices (config default if None)

    Returns:
        CostingReport

    Raises:
        DatabaseError: If the stored catalog cannot be loaded
    """
    if catalog is None:
        catalog = load_catalog()
    if target_food_cost is None:
        target_food_cost = get_config().target_food_cost

    return CostingReport(
        target_food_cost=target_food_cost,
        ingredients=ingredients_summary(catalog),
        recipes=recipes_summary(catalog),
        menu_items=menu_items_summary(catalog, target_food_cost),
    )


# ============================================================================
# Text Rendering
# ============================================================================


def _table(headers: List[str], rows: List[List[str]], empty: str) -> List[str]:
    if not rows:
        return [f"  {empty}"]
    widths = [len(header) for header in headers]
    for row in rows:
        widths = [max(width, len(cell)) for width, cell in zip(widths, row)]

    def fmt(cells):
        # First column left-aligned, numbers right-aligned
        parts = [cells[0].ljust(widths[0])]
        parts.extend(cell.rjust(width) for cell, width in zip(cells[1:], widths[1:]))
        return "  " + "  ".join(parts).rstrip()

    return [fmt(headers), "  " + "  ".join("-" * width for width in widths)] + [
        fmt(row) for row in rows
    ]


def render_report_text(report: CostingReport) -> str:
    """
    Render a report as fixed-width text.

    Money is shown at 2 decimals, percentages at 1 decimal.
    """
    lines = [
        "Recipe Costing Report",
        f"Generated: {report.generated_at}",
        "",
        "Ingredients summary",
    ]
    lines += _table(
        ["Name", "Unit", "Unit cost"],
        [
            [row.name, unit_label(row.unit), f"{money(row.unit_cost)} per {unit_label(row.unit)}"]
            for row in report.ingredients
        ],
        "No ingredients.",
    )

    lines += ["", "Recipes summary"]
    lines += _table(
        ["Name", "Yield", "Total cost", "Unit cost"],
        [
            [
                row.name,
                f"{num(row.yield_qty)} {unit_label(row.yield_unit)}",
                money(row.total_cost),
                f"{money(row.unit_cost)} per {unit_label(row.yield_unit)}",
            ]
            for row in report.recipes
        ],
        "No recipes.",
    )

    lines += ["", "Menu items summary"]
    target = pct(report.target_food_cost)
    lines += _table(
        ["Name", "Price", "Cost per serving", "Food cost %", "Suggested price"],
        [
            [
                row.name,
                money(row.price),
                money(row.cost_per_serving),
                f"{pct(row.food_cost_ratio)}%",
                f"{money(row.suggested_price)} (at {target}%)",
            ]
            for row in report.menu_items
        ],
        "No menu items.",
    )

    lines += ["", "Suggested price is cost per serving / target food cost."]

    warnings = report.warnings
    if warnings:
        lines += ["", "Warnings"]
        lines += [f"  - {warning}" for warning in warnings]

    return "\n".join(lines) + "\n"


def render_breakdown_text(title: str, result) -> str:
    """
    Render the breakdown of one recipe or menu item.

    Args:
        title: Heading (recipe or menu item name)
        result: RecipeCostResult or MenuItemCostResult

    Returns:
        Text with one row per line; unresolvable unit costs show "N/A"
    """
    rows = [
        [
            row.label,
            str(row.kind),
            f"{num(row.qty)} {unit_label(row.unit)}",
            money(row.unit_cost) if row.is_resolved else "N/A",
            money(row.line_cost),
        ]
        for row in result.breakdown
    ]
    lines = [title]
    lines += _table(["Component", "Kind", "Qty", "Unit cost", "Line cost"], rows, "No lines.")
    lines += ["", f"  Total cost: {money(result.total_cost)}"]

    cost_per_serving = getattr(result, "cost_per_serving", None)
    if cost_per_serving is not None:
        lines.append(f"  Cost per serving: {money(cost_per_serving)}")

    if result.errors:
        lines += ["", "Warnings"]
        lines += [f"  - {error}" for error in result.errors]

    return "\n".join(lines) + "\n"
