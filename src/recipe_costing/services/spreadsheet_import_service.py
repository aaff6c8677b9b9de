"""
Spreadsheet Import Service - ingredients and dishes from .xlsx workbooks.

Two layouts are understood, both read from the first sheet with a header row:

Ingredients: one row per ingredient.
    Name | Unit | Pack Size | Pack Cost | Supplier | Notes

Dishes: one row per dish/ingredient pair.
    Dish | Ingredient | Qty | Unit | Unit Cost | Price | Servings

Headers may be in English or Greek (see the *_ALIASES tables). Importing is
two-step: parse_*_workbook() returns a SpreadsheetPreview with warnings,
then apply_preview() stores it.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Sequence, Tuple
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy.exc import SQLAlchemyError

from ..models.enums import Unit
from ..utils.constants import ID_PREFIX_INGREDIENT, ID_PREFIX_LINE, ID_PREFIX_MENU_ITEM
from ..utils.datetime_utils import iso_timestamp
from ..utils.ids import new_id
from ..utils.validators import normalize_unit, parse_number
from . import costing
from .catalog_service import clear_catalog, merge_catalog
from .database import session_scope
from .exceptions import DatabaseError, SpreadsheetImportError
from .import_export_service import ImportResult
from .logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)

KIND_INGREDIENTS = "ingredients"
KIND_DISHES = "dishes"
IMPORT_KINDS = (KIND_INGREDIENTS, KIND_DISHES)
APPLY_MODES = ("append", "replace")

# First header present wins
INGREDIENT_NAME_ALIASES = ("Name", "Όνομα", "Υλικό")
UNIT_ALIASES = ("Unit", "Μονάδα", "Μονάδα μέτρησης")
PACK_SIZE_ALIASES = ("Pack Size", "PackSize", "Συσκευασία", "Ποσότητα", "Qty")
PACK_COST_ALIASES = ("Pack Cost", "Cost", "Κόστος", "Τιμή", "€")
SUPPLIER_ALIASES = ("Supplier", "Προμηθευτής")
NOTES_ALIASES = ("Notes", "Σημειώσεις")

DISH_ALIASES = ("Dish", "Πιάτο", "Plate", "Menu Item")
DISH_INGREDIENT_ALIASES = ("Ingredient", "Υλικό", "Raw Material")
QTY_ALIASES = ("Qty", "Quantity", "Ποσότητα", "Gram", "g", "Τεμάχια")
UNIT_COST_ALIASES = ("Unit Cost", "Κόστος μονάδας", "€ ανά μονάδα", "Cost", "€")
PRICE_ALIASES = ("Price", "Selling Price", "Τιμή πώλησης")
SERVINGS_ALIASES = ("Servings", "Μερίδες")


@dataclass
class SpreadsheetPreview:
    """
    Parsed workbook, not yet stored.

    Attributes:
        kind: "ingredients" or "dishes"
        ingredients: Ingredient records to add
        menu_items: Menu item records to add (dishes only)
        warnings: Per-row problems, e.g. "Row 4: missing ingredient name"
        source_label: Workbook file name
    """

    kind: str
    ingredients: List[costing.Ingredient] = field(default_factory=list)
    menu_items: List[costing.MenuItem] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    source_label: str = ""


# ============================================================================
# Workbook Reading
# ============================================================================


def _read_rows(path) -> Iterator[Tuple[int, Dict[str, Any]]]:
    """
    Yield (spreadsheet row number, {header: value}) for each non-blank row.

    Raises:
        SpreadsheetImportError: If the file is not a readable workbook or has no sheet
    """
    try:
        workbook = load_workbook(filename=str(path), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, OSError, KeyError) as e:
        raise SpreadsheetImportError(str(path), f"not a readable .xlsx workbook ({e})")

    try:
        if not workbook.worksheets:
            raise SpreadsheetImportError(str(path), "no sheet found in the workbook")
        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return
        columns = [str(cell).strip() if cell is not None else "" for cell in header]

        for row_number, values in enumerate(rows, start=2):
            if all(value is None or str(value).strip() == "" for value in values):
                continue
            yield row_number, {
                column: value
                for column, value in zip(columns, values)
                if column
            }
    finally:
        workbook.close()


def _pick(row: Dict[str, Any], aliases: Sequence[str], default: Any = "") -> Any:
    """Value of the first alias present as a column; empty cells read as ""."""
    for alias in aliases:
        if alias in row:
            value = row[alias]
            return "" if value is None else value
    return default


def _text(row: Dict[str, Any], aliases: Sequence[str]) -> str:
    return str(_pick(row, aliases)).strip()


# ============================================================================
# Parsing
# ============================================================================


def parse_ingredients_workbook(path) -> SpreadsheetPreview:
    """
    Parse an ingredients workbook.

    Rows without a name are skipped with a warning. An unknown or
    non-positive pack size is stored as 0 and a negative pack cost as 0,
    both with a warning.

    Args:
        path: Path to the .xlsx file

    Returns:
        SpreadsheetPreview of kind "ingredients"

    Raises:
        SpreadsheetImportError: If the workbook is unreadable or has no ingredient rows
    """
    warnings: List[str] = []
    ingredients: List[costing.Ingredient] = []
    stamp = iso_timestamp()

    for row_number, row in _read_rows(path):
        name = _text(row, INGREDIENT_NAME_ALIASES)
        if not name:
            warnings.append(f"Row {row_number}: missing ingredient name")
            continue

        unit = normalize_unit(_pick(row, UNIT_ALIASES))
        pack_size = parse_number(_pick(row, PACK_SIZE_ALIASES))
        pack_cost = parse_number(_pick(row, PACK_COST_ALIASES))

        if pack_size <= 0:
            warnings.append(f"Row {row_number}: unknown pack size, recorded as 0")
        if pack_cost < 0:
            warnings.append(f"Row {row_number}: negative cost, recorded as 0")

        ingredients.append(
            costing.Ingredient(
                id=new_id(ID_PREFIX_INGREDIENT),
                name=name,
                unit=Unit(unit),
                pack_size=pack_size if pack_size > 0 else 0.0,
                pack_cost=pack_cost if pack_cost >= 0 else 0.0,
                supplier=_text(row, SUPPLIER_ALIASES) or None,
                notes=_text(row, NOTES_ALIASES) or None,
                updated_at=stamp,
            )
        )

    if not ingredients:
        raise SpreadsheetImportError(str(path), "no ingredients found in the sheet")

    logger.debug(f"Parsed {len(ingredients)} ingredients from {path} ({len(warnings)} warnings)")
    return SpreadsheetPreview(
        kind=KIND_INGREDIENTS,
        ingredients=ingredients,
        warnings=warnings,
        source_label=Path(str(path)).name,
    )


class _DishSheet:
    """Accumulates ingredients and dishes while reading a dishes sheet."""

    def __init__(self, stamp: str):
        self.stamp = stamp
        self.ingredients: Dict[str, dict] = {}
        self.dishes: Dict[str, dict] = {}

    def ingredient(self, name: str, unit: str, unit_cost: float) -> dict:
        key = name.lower()
        existing = self.ingredients.get(key)
        if existing:
            # A later row with a cost updates the ingredient's cost
            if unit_cost > 0 and unit_cost != existing["pack_cost"]:
                existing["pack_cost"] = unit_cost
            return existing
        entry = {
            "id": new_id(ID_PREFIX_INGREDIENT),
            "name": name,
            "unit": unit,
            "pack_size": 1.0 if unit_cost > 0 else 0.0,
            "pack_cost": unit_cost if unit_cost > 0 else 0.0,
        }
        self.ingredients[key] = entry
        return entry

    def dish(self, name: str, price: float, servings: float) -> dict:
        key = name.lower()
        existing = self.dishes.get(key)
        if existing:
            if price > 0:
                existing["price"] = price
            if servings > 0:
                existing["servings"] = servings
            return existing
        entry = {
            "id": new_id(ID_PREFIX_MENU_ITEM),
            "name": name,
            "servings": servings if servings > 0 else 1.0,
            "price": price if price > 0 else 0.0,
            "lines": [],
        }
        self.dishes[key] = entry
        return entry

    def ingredient_records(self) -> List[costing.Ingredient]:
        return [
            costing.Ingredient(
                id=entry["id"],
                name=entry["name"],
                unit=Unit(entry["unit"]),
                pack_size=entry["pack_size"],
                pack_cost=entry["pack_cost"],
                updated_at=self.stamp,
            )
            for entry in self.ingredients.values()
        ]

    def menu_item_records(self) -> List[costing.MenuItem]:
        return [
            costing.MenuItem(
                id=entry["id"],
                name=entry["name"],
                servings=entry["servings"],
                price=entry["price"],
                lines=entry["lines"],
                updated_at=self.stamp,
            )
            for entry in self.dishes.values()
        ]


def parse_dishes_workbook(path) -> SpreadsheetPreview:
    """
    Parse a dishes workbook (one row per dish/ingredient pair).

    Dishes and ingredients are de-duplicated by case-insensitive name. Each
    ingredient is created with pack size 1 and pack cost equal to the row's
    unit cost, so its unit cost is that cost.

    Args:
        path: Path to the .xlsx file

    Returns:
        SpreadsheetPreview of kind "dishes"

    Raises:
        SpreadsheetImportError: If the workbook is unreadable or has no dish rows
    """
    warnings: List[str] = []
    sheet = _DishSheet(iso_timestamp())

    for row_number, row in _read_rows(path):
        dish_name = _text(row, DISH_ALIASES)
        ingredient_name = _text(row, DISH_INGREDIENT_ALIASES)

        if not dish_name and not ingredient_name:
            continue
        if not dish_name:
            warnings.append(f"Row {row_number}: missing dish name")
            continue
        if not ingredient_name:
            warnings.append(f"Row {row_number}: missing ingredient name for dish {dish_name}")
            continue

        qty = parse_number(_pick(row, QTY_ALIASES))
        unit = normalize_unit(_pick(row, UNIT_ALIASES, "g"))
        unit_cost = parse_number(_pick(row, UNIT_COST_ALIASES))
        price = parse_number(_pick(row, PRICE_ALIASES, 0))
        servings = parse_number(_pick(row, SERVINGS_ALIASES, 1))

        if qty <= 0:
            warnings.append(f"Row {row_number}: quantity for {ingredient_name} recorded as 0")
        if unit_cost < 0:
            warnings.append(f"Row {row_number}: negative unit cost for {ingredient_name}, set to 0")

        ingredient = sheet.ingredient(ingredient_name, unit, unit_cost)
        dish = sheet.dish(dish_name, price, servings)
        dish["lines"].append(
            costing.RecipeLine(
                ref=costing.IngredientRef(ingredient_id=ingredient["id"]),
                qty=qty if qty > 0 else 0.0,
                unit=Unit(unit),
                id=new_id(ID_PREFIX_LINE),
            )
        )

    menu_items = sheet.menu_item_records()
    if not menu_items:
        raise SpreadsheetImportError(str(path), "no dishes found in the sheet")

    logger.debug(
        f"Parsed {len(menu_items)} dishes and {len(sheet.ingredients)} ingredients from {path}"
    )
    return SpreadsheetPreview(
        kind=KIND_DISHES,
        ingredients=sheet.ingredient_records(),
        menu_items=menu_items,
        warnings=warnings,
        source_label=Path(str(path)).name,
    )


def parse_workbook(path, kind: str) -> SpreadsheetPreview:
    """
    Parse a workbook of the given kind ("ingredients" or "dishes").

    Raises:
        ValueError: If kind is unknown
        SpreadsheetImportError: If the workbook cannot be imported
    """
    if kind == KIND_INGREDIENTS:
        return parse_ingredients_workbook(path)
    if kind == KIND_DISHES:
        return parse_dishes_workbook(path)
    raise ValueError(f"Invalid import kind: {kind}. Must be one of {', '.join(IMPORT_KINDS)}.")


# ============================================================================
# Storing
# ============================================================================


def apply_preview(preview: SpreadsheetPreview, mode: str = "append") -> ImportResult:
    """
    Store a parsed workbook.

    Modes:
    - "append": add everything in the preview
    - "replace": an ingredients import first deletes all ingredients; a
      dishes import first deletes all menu items (its ingredients are added)

    Args:
        preview: Result of parse_ingredients_workbook / parse_dishes_workbook
        mode: "append" or "replace"

    Returns:
        ImportResult with per-entity counts and the parse warnings

    Raises:
        ValueError: If mode is not "append" or "replace"
        DatabaseError: If storing fails
    """
    if mode not in APPLY_MODES:
        raise ValueError(f"Invalid import mode: {mode}. Must be 'append' or 'replace'.")

    result = ImportResult()
    for warning in preview.warnings:
        result.add_warning(preview.kind, preview.source_label, warning)

    catalog = costing.Catalog(ingredients=preview.ingredients, menu_items=preview.menu_items)

    try:
        with session_scope() as session:
            if mode == "replace":
                clear_catalog(
                    ingredients=preview.kind == KIND_INGREDIENTS,
                    recipes=False,
                    menu_items=preview.kind == KIND_DISHES,
                    session=session,
                )
            summary = merge_catalog(catalog, session=session)
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to store workbook {preview.source_label}", e)

    result.add_success("ingredients", summary["ingredients"]["added"])
    if preview.kind == KIND_DISHES:
        result.add_success("menu_items", summary["menu_items"]["added"])

    log_operation(
        logger,
        operation="apply_spreadsheet_import",
        outcome="success",
        kind=preview.kind,
        mode=mode,
        source=preview.source_label,
        imported=result.successful,
        warnings=len(result.warnings),
    )
    return result
