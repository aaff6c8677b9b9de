"""
Plain value records consumed and produced by the costing engine.

The engine never sees ORM objects or sessions. Services take a snapshot of
the catalog as these frozen records (see Model.to_record() and
catalog_service.load_catalog()) and hand it to the engine.

This module contains:
- IngredientRef / RecipeRef: the two variants of a line's component reference
- Ingredient, RecipeLine, Recipe, MenuItem: catalog entries
- Catalog: a snapshot of the whole catalog with id lookups
- LineResolution, CostBreakdownRow, RecipeCostResult, MenuItemCostResult: engine output
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from recipe_costing.models.enums import RecipeCategory, RefKind, Unit


# ============================================================================
# Component References
# ============================================================================


@dataclass(frozen=True)
class IngredientRef:
    """Reference from a line to an ingredient."""

    ingredient_id: str

    @property
    def kind(self) -> RefKind:
        return RefKind.INGREDIENT

    @property
    def ref_id(self) -> str:
        return self.ingredient_id


@dataclass(frozen=True)
class RecipeRef:
    """Reference from a line to a (sub-)recipe."""

    recipe_id: str

    @property
    def kind(self) -> RefKind:
        return RefKind.RECIPE

    @property
    def ref_id(self) -> str:
        return self.recipe_id


# Exactly one variant is active per line
ComponentRef = Union[IngredientRef, RecipeRef]


def make_ref(kind: Union[RefKind, str], ref_id: str) -> ComponentRef:
    """
    Build a component reference from a kind tag and an id.

    Args:
        kind: "ingredient" or "recipe" (or the RefKind member)
        ref_id: Referenced entry id

    Returns:
        IngredientRef or RecipeRef

    Raises:
        ValueError: If kind is not a known reference kind
    """
    ref_kind = RefKind(kind)
    if ref_kind is RefKind.INGREDIENT:
        return IngredientRef(ingredient_id=ref_id)
    return RecipeRef(recipe_id=ref_id)


# ============================================================================
# Catalog Entries
# ============================================================================


@dataclass(frozen=True)
class Ingredient:
    """
    A purchasable ingredient.

    Attributes:
        id: Ingredient id
        name: Display name
        unit: Unit the pack size is measured in
        pack_size: Quantity per purchased pack (in unit)
        pack_cost: Cost of one pack
        supplier: Optional supplier name
        notes: Optional notes
        updated_at: ISO timestamp of the last edit (documents only, not costing)
    """

    id: str
    name: str
    unit: Unit
    pack_size: float
    pack_cost: float
    supplier: Optional[str] = None
    notes: Optional[str] = None
    updated_at: Optional[str] = field(default=None, compare=False)


@dataclass(frozen=True)
class RecipeLine:
    """
    One line of a recipe or menu item: a component, a quantity and its unit.

    Attributes:
        ref: IngredientRef or RecipeRef
        qty: Quantity of the component used
        unit: Unit qty is expressed in (must equal the component's unit)
        id: Optional line id (kept for export round trips)
    """

    ref: ComponentRef
    qty: float
    unit: Unit
    id: Optional[str] = None


@dataclass(frozen=True)
class Recipe:
    """
    A recipe producing yield_qty of yield_unit from its lines.

    Lines may reference other recipes; the reference graph may contain cycles.
    """

    id: str
    name: str
    yield_qty: float
    yield_unit: Unit
    lines: Tuple[RecipeLine, ...] = ()
    category: RecipeCategory = RecipeCategory.BASE
    notes: Optional[str] = None
    updated_at: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "lines", tuple(self.lines))


@dataclass(frozen=True)
class MenuItem:
    """
    A sellable dish. Its lines are divided across servings.

    Lines are usually ingredient references, but recipe references are allowed.
    """

    id: str
    name: str
    servings: float
    price: float = 0.0
    lines: Tuple[RecipeLine, ...] = ()
    notes: Optional[str] = None
    updated_at: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "lines", tuple(self.lines))


@dataclass(frozen=True)
class Catalog:
    """Snapshot of every ingredient, recipe and menu item."""

    ingredients: Tuple[Ingredient, ...] = ()
    recipes: Tuple[Recipe, ...] = ()
    menu_items: Tuple[MenuItem, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "ingredients", tuple(self.ingredients))
        object.__setattr__(self, "recipes", tuple(self.recipes))
        object.__setattr__(self, "menu_items", tuple(self.menu_items))

    def find_ingredient(self, ingredient_id: str) -> Optional[Ingredient]:
        return next((i for i in self.ingredients if i.id == ingredient_id), None)

    def find_recipe(self, recipe_id: str) -> Optional[Recipe]:
        return next((r for r in self.recipes if r.id == recipe_id), None)

    def find_menu_item(self, menu_item_id: str) -> Optional[MenuItem]:
        return next((m for m in self.menu_items if m.id == menu_item_id), None)

    @property
    def is_empty(self) -> bool:
        return not (self.ingredients or self.recipes or self.menu_items)


# ============================================================================
# Engine Output
# ============================================================================


@dataclass(frozen=True)
class LineResolution:
    """Resolved unit cost of one line. unit_cost is NaN when unresolvable."""

    unit_cost: float
    kind: RefKind
    label: str


@dataclass(frozen=True)
class CostBreakdownRow:
    """
    One resolved line, for display.

    Attributes:
        label: Component name, "Missing ingredient"/"Missing recipe", or
               "<name> (unit mismatch)"
        qty: Line quantity
        unit: Line unit
        unit_cost: Resolved cost per unit (NaN when unresolvable)
        line_cost: Cost contributed by this line
        kind: RefKind of the referenced component
    """

    label: str
    qty: float
    unit: Unit
    unit_cost: float
    line_cost: float
    kind: RefKind

    @property
    def is_resolved(self) -> bool:
        """False when the unit cost could not be determined (show as N/A)."""
        return math.isfinite(self.unit_cost)


@dataclass
class RecipeCostResult:
    """Total cost of a recipe's lines with breakdown rows and warnings."""

    total_cost: float
    breakdown: List[CostBreakdownRow] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass
class MenuItemCostResult:
    """Total and per-serving cost of a menu item with breakdown rows and warnings."""

    total_cost: float
    cost_per_serving: float
    breakdown: List[CostBreakdownRow] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
