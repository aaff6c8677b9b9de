"""
Catalog Service - whole-catalog snapshots and bulk replacement.

The costing engine works on a snapshot of the entire catalog (any recipe
may reference any other). This service produces that snapshot as engine
records and writes record snapshots back, for JSON and spreadsheet imports.
"""

from contextlib import nullcontext
from typing import Dict, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..models import Ingredient, MenuItem, MenuItemLine, Recipe, RecipeLine
from ..utils.datetime_utils import parse_iso_timestamp, utc_now
from . import costing
from .database import session_scope
from .exceptions import DatabaseError
from .logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)


# ============================================================================
# Snapshots
# ============================================================================


def load_catalog(session=None) -> costing.Catalog:
    """
    Snapshot every ingredient, recipe and menu item as engine records.

    Args:
        session: Optional database session (uses session_scope if not provided)

    Returns:
        Catalog of frozen records, each list in creation order

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        cm = nullcontext(session) if session is not None else session_scope()
        with cm as session:
            return _load_catalog_impl(session)
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to load catalog", e)


def _load_catalog_impl(session) -> costing.Catalog:
    ingredients = session.query(Ingredient).order_by(Ingredient.created_at, Ingredient.id).all()
    recipes = session.query(Recipe).order_by(Recipe.created_at, Recipe.id).all()
    menu_items = session.query(MenuItem).order_by(MenuItem.created_at, MenuItem.id).all()
    return costing.Catalog(
        ingredients=[i.to_record() for i in ingredients],
        recipes=[r.to_record() for r in recipes],
        menu_items=[m.to_record() for m in menu_items],
    )


def get_catalog_counts() -> Dict[str, int]:
    """
    Count catalog entries.

    Returns:
        Dict with "ingredients", "recipes" and "menu_items" counts

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            return {
                "ingredients": session.query(Ingredient).count(),
                "recipes": session.query(Recipe).count(),
                "menu_items": session.query(MenuItem).count(),
            }
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to count catalog entries", e)


# ============================================================================
# Record -> Model Conversion
# ============================================================================


def _timestamp(value: Optional[str]):
    return parse_iso_timestamp(value) or utc_now()


def _line_kwargs(line: costing.RecipeLine, position: int) -> dict:
    kwargs = {
        "ref_kind": line.ref.kind.value,
        "ref_id": line.ref.ref_id,
        "qty": line.qty,
        "unit": str(line.unit),
        "position": position,
    }
    if line.id:
        kwargs["id"] = line.id
    return kwargs


def ingredient_from_record(record: costing.Ingredient) -> Ingredient:
    """Build an unsaved Ingredient row from an engine record (id kept)."""
    stamp = _timestamp(record.updated_at)
    return Ingredient(
        id=record.id,
        name=record.name,
        unit=str(record.unit),
        pack_size=record.pack_size,
        pack_cost=record.pack_cost,
        supplier=record.supplier,
        notes=record.notes,
        created_at=stamp,
        updated_at=stamp,
    )


def recipe_from_record(record: costing.Recipe) -> Recipe:
    """Build an unsaved Recipe row and its lines from an engine record (ids kept)."""
    stamp = _timestamp(record.updated_at)
    recipe = Recipe(
        id=record.id,
        name=record.name,
        category=str(record.category),
        yield_qty=record.yield_qty,
        yield_unit=str(record.yield_unit),
        notes=record.notes,
        created_at=stamp,
        updated_at=stamp,
    )
    recipe.lines = [
        RecipeLine(**_line_kwargs(line, position)) for position, line in enumerate(record.lines)
    ]
    return recipe


def menu_item_from_record(record: costing.MenuItem) -> MenuItem:
    """Build an unsaved MenuItem row and its lines from an engine record (ids kept)."""
    stamp = _timestamp(record.updated_at)
    menu_item = MenuItem(
        id=record.id,
        name=record.name,
        servings=record.servings,
        price=record.price,
        notes=record.notes,
        created_at=stamp,
        updated_at=stamp,
    )
    menu_item.lines = [
        MenuItemLine(**_line_kwargs(line, position)) for position, line in enumerate(record.lines)
    ]
    return menu_item


def _add_records(session, model, records: Iterable, factory, skip_existing: bool) -> dict:
    """Add rows built by factory; optionally skip ids already stored."""
    existing = set()
    if skip_existing:
        existing = {row_id for (row_id,) in session.query(model.id).all()}

    added = 0
    skipped_names = []
    for record in records:
        if record.id in existing:
            skipped_names.append(record.name)
            continue
        session.add(factory(record))
        existing.add(record.id)
        added += 1
    return {"added": added, "skipped": len(skipped_names), "skipped_names": skipped_names}


# ============================================================================
# Bulk Writes
# ============================================================================


def clear_catalog(
    ingredients: bool = True, recipes: bool = True, menu_items: bool = True, session=None
) -> Dict[str, int]:
    """
    Delete catalog entries.

    Args:
        ingredients: Delete all ingredients
        recipes: Delete all recipes (and their lines)
        menu_items: Delete all menu items (and their lines)
        session: Optional database session (uses session_scope if not provided)

    Returns:
        Dict of deleted counts per entry type

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        cm = nullcontext(session) if session is not None else session_scope()
        with cm as session:
            deleted = {"ingredients": 0, "recipes": 0, "menu_items": 0}
            if menu_items:
                session.query(MenuItemLine).delete(synchronize_session=False)
                deleted["menu_items"] = session.query(MenuItem).delete(synchronize_session=False)
            if recipes:
                session.query(RecipeLine).delete(synchronize_session=False)
                deleted["recipes"] = session.query(Recipe).delete(synchronize_session=False)
            if ingredients:
                deleted["ingredients"] = session.query(Ingredient).delete(
                    synchronize_session=False
                )
            session.flush()
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to clear catalog", e)

    log_operation(logger, operation="clear_catalog", outcome="success", **deleted)
    return deleted


def replace_catalog(catalog: costing.Catalog) -> Dict[str, int]:
    """
    Replace the whole stored catalog with a snapshot.

    Everything is deleted and the snapshot's records are inserted with their
    ids, in one transaction.

    Args:
        catalog: Catalog snapshot to store

    Returns:
        Dict of stored counts per entry type

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            clear_catalog(session=session)
            counts = {
                "ingredients": _add_records(
                    session, Ingredient, catalog.ingredients, ingredient_from_record, False
                )["added"],
                "recipes": _add_records(
                    session, Recipe, catalog.recipes, recipe_from_record, False
                )["added"],
                "menu_items": _add_records(
                    session, MenuItem, catalog.menu_items, menu_item_from_record, False
                )["added"],
            }
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to replace catalog", e)

    log_operation(logger, operation="replace_catalog", outcome="success", **counts)
    return counts


def merge_catalog(catalog: costing.Catalog, session=None) -> Dict[str, dict]:
    """
    Add the snapshot's records whose ids are not stored yet.

    Stored entries with the same id are left untouched.

    Args:
        catalog: Catalog snapshot to merge
        session: Optional database session (uses session_scope if not provided)

    Returns:
        Dict per entry type of {"added": n, "skipped": n, "skipped_names": [...]}

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        cm = nullcontext(session) if session is not None else session_scope()
        with cm as session:
            summary = {
                "ingredients": _add_records(
                    session, Ingredient, catalog.ingredients, ingredient_from_record, True
                ),
                "recipes": _add_records(
                    session, Recipe, catalog.recipes, recipe_from_record, True
                ),
                "menu_items": _add_records(
                    session, MenuItem, catalog.menu_items, menu_item_from_record, True
                ),
            }
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to merge catalog", e)

    log_operation(
        logger,
        operation="merge_catalog",
        outcome="success",
        added=sum(s["added"] for s in summary.values()),
        skipped=sum(s["skipped"] for s in summary.values()),
    )
    return summary
