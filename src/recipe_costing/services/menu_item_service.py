"""
Menu Item Service - Business logic for sellable dishes.

This service provides CRUD operations for menu items with:
- Input validation
- Line management (usually ingredients, recipes are allowed too)
- Cost per serving and pricing through the costing engine
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..models import MenuItem, MenuItemLine
from ..utils.config import get_config
from ..utils.datetime_utils import utc_now
from ..utils.validators import sanitize_string, validate_menu_item_data
from . import costing
from .catalog_service import load_catalog
from .database import session_scope
from .exceptions import (
    DatabaseError,
    IngredientNotFound,
    LineNotFound,
    MenuItemNotFound,
    RecipeNotFound,
    ValidationError,
)
from .logging_utils import get_service_logger, log_operation
from .recipe_service import line_fields, validate_lines

logger = get_service_logger(__name__)

MENU_ITEM_FIELDS = ("name", "servings", "price", "notes")


def _clean_menu_item_data(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = {key: data[key] for key in MENU_ITEM_FIELDS if key in data}
    for key in ("name", "notes"):
        if key in cleaned:
            cleaned[key] = sanitize_string(cleaned[key])
    for key in ("servings", "price"):
        if cleaned.get(key) is not None:
            cleaned[key] = float(cleaned[key])
    return cleaned


# ============================================================================
# CRUD Operations
# ============================================================================


def create_menu_item(
    menu_item_data: Dict[str, Any], lines_data: Optional[List[Dict[str, Any]]] = None
) -> MenuItem:
    """
    Create a new menu item with optional lines.

    Args:
        menu_item_data: Dictionary with name, servings, price, optional notes
            and optional id (imports)
        lines_data: List of line dicts (see recipe_service.create_recipe)

    Returns:
        Created MenuItem instance

    Raises:
        ValidationError: If menu item or line validation fails
        IngredientNotFound: If a line references an unknown ingredient
        RecipeNotFound: If a line references an unknown recipe
        DatabaseError: If database operation fails
    """
    menu_item_data = {"servings": 1, "price": 0.0, **menu_item_data}
    is_valid, errors = validate_menu_item_data(menu_item_data)
    if not is_valid:
        raise ValidationError(errors)

    lines_data = lines_data or []
    validate_lines(lines_data)

    try:
        with session_scope() as session:
            menu_item = MenuItem(**_clean_menu_item_data(menu_item_data))
            if menu_item_data.get("id"):
                menu_item.id = menu_item_data["id"]

            menu_item.lines = [
                MenuItemLine(**line_fields(session, line_data, position))
                for position, line_data in enumerate(lines_data)
            ]

            session.add(menu_item)
            session.flush()

            log_operation(
                logger,
                operation="create_menu_item",
                outcome="success",
                menu_item_id=menu_item.id,
                line_count=len(lines_data),
            )
            return menu_item

    except (IngredientNotFound, RecipeNotFound):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to create menu item", e)


def get_menu_item(menu_item_id: str) -> MenuItem:
    """
    Retrieve a menu item by ID, with its lines loaded.

    Raises:
        MenuItemNotFound: If menu item doesn't exist
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            menu_item = session.query(MenuItem).filter_by(id=menu_item_id).first()

            if not menu_item:
                raise MenuItemNotFound(menu_item_id)

            return menu_item

    except MenuItemNotFound:
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to retrieve menu item {menu_item_id}", e)


def get_all_menu_items(name_search: Optional[str] = None) -> List[MenuItem]:
    """
    Retrieve all menu items sorted by name.

    Args:
        name_search: Filter by name (case-insensitive partial match)

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            query = session.query(MenuItem)
            if name_search:
                query = query.filter(MenuItem.name.ilike(f"%{name_search}%"))
            return query.order_by(MenuItem.name).all()

    except SQLAlchemyError as e:
        raise DatabaseError("Failed to retrieve menu items", e)


def update_menu_item(
    menu_item_id: str,
    menu_item_data: Dict[str, Any],
    lines_data: Optional[List[Dict[str, Any]]] = None,
) -> MenuItem:
    """
    Update a menu item and optionally its lines.

    Args:
        menu_item_id: Menu item ID
        menu_item_data: Fields to update (missing fields keep their values)
        lines_data: If provided, replaces all lines

    Returns:
        Updated MenuItem instance

    Raises:
        MenuItemNotFound: If menu item doesn't exist
        ValidationError: If data validation fails
        IngredientNotFound: If a line references an unknown ingredient
        RecipeNotFound: If a line references an unknown recipe
        DatabaseError: If database operation fails
    """
    if lines_data is not None:
        validate_lines(lines_data)

    try:
        with session_scope() as session:
            menu_item = session.query(MenuItem).filter_by(id=menu_item_id).first()

            if not menu_item:
                raise MenuItemNotFound(menu_item_id)

            merged = {field: getattr(menu_item, field) for field in MENU_ITEM_FIELDS}
            merged.update(menu_item_data)
            is_valid, errors = validate_menu_item_data(merged)
            if not is_valid:
                raise ValidationError(errors)

            menu_item.update_from_dict(_clean_menu_item_data(menu_item_data))

            if lines_data is not None:
                menu_item.lines = []
                session.flush()
                menu_item.lines = [
                    MenuItemLine(**line_fields(session, line_data, position))
                    for position, line_data in enumerate(lines_data)
                ]

            session.flush()

            log_operation(
                logger, operation="update_menu_item", outcome="success", menu_item_id=menu_item_id
            )
            return menu_item

    except (MenuItemNotFound, ValidationError, IngredientNotFound, RecipeNotFound):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to update menu item {menu_item_id}", e)


def delete_menu_item(menu_item_id: str) -> bool:
    """
    Delete a menu item and its lines.

    Raises:
        MenuItemNotFound: If menu item doesn't exist
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            menu_item = session.query(MenuItem).filter_by(id=menu_item_id).first()

            if not menu_item:
                raise MenuItemNotFound(menu_item_id)

            session.delete(menu_item)

        log_operation(
            logger, operation="delete_menu_item", outcome="success", menu_item_id=menu_item_id
        )
        return True

    except MenuItemNotFound:
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to delete menu item {menu_item_id}", e)


# ============================================================================
# Line Management
# ============================================================================


def add_line_to_menu_item(menu_item_id: str, line_data: Dict[str, Any]) -> MenuItemLine:
    """
    Append a line to a menu item.

    Raises:
        MenuItemNotFound: If menu item doesn't exist
        IngredientNotFound: If the referenced ingredient doesn't exist
        RecipeNotFound: If the referenced recipe doesn't exist
        ValidationError: If line data is invalid
        DatabaseError: If database operation fails
    """
    validate_lines([line_data])

    try:
        with session_scope() as session:
            menu_item = session.query(MenuItem).filter_by(id=menu_item_id).first()
            if not menu_item:
                raise MenuItemNotFound(menu_item_id)

            position = max((line.position for line in menu_item.lines), default=-1) + 1
            line = MenuItemLine(**line_fields(session, line_data, position))
            menu_item.lines.append(line)
            menu_item.updated_at = utc_now()
            session.flush()

            return line

    except (MenuItemNotFound, IngredientNotFound, RecipeNotFound):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to add line to menu item {menu_item_id}", e)


def remove_line_from_menu_item(menu_item_id: str, line_id: str) -> bool:
    """
    Remove one line from a menu item.

    Raises:
        MenuItemNotFound: If menu item doesn't exist
        LineNotFound: If the line is not on this menu item
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            menu_item = session.query(MenuItem).filter_by(id=menu_item_id).first()
            if not menu_item:
                raise MenuItemNotFound(menu_item_id)

            line = next((line for line in menu_item.lines if line.id == line_id), None)
            if line is None:
                raise LineNotFound(menu_item_id, line_id)

            menu_item.lines.remove(line)
            return True

    except (MenuItemNotFound, LineNotFound):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to remove line {line_id} from menu item {menu_item_id}", e)


# ============================================================================
# Cost Calculations
# ============================================================================


def _load_menu_item(menu_item_id: str):
    catalog = load_catalog()
    item = catalog.find_menu_item(menu_item_id)
    if item is None:
        raise MenuItemNotFound(menu_item_id)
    return catalog, item


def calculate_menu_item_cost(menu_item_id: str) -> costing.MenuItemCostResult:
    """
    Cost a menu item against the current catalog.

    Returns:
        MenuItemCostResult with total, cost per serving, breakdown and errors

    Raises:
        MenuItemNotFound: If menu item doesn't exist
        DatabaseError: If database operation fails
    """
    catalog, item = _load_menu_item(menu_item_id)
    return costing.menu_item_cost_per_serving(item, catalog.ingredients, catalog.recipes)


def get_menu_item_pricing(
    menu_item_id: str, target_food_cost: Optional[float] = None
) -> Dict[str, Any]:
    """
    Cost per serving, food cost ratio and suggested price of a menu item.

    Args:
        menu_item_id: Menu item ID
        target_food_cost: Target ratio for the suggested price (config
            default if None)

    Returns:
        Dict with:
            - "menu_item_id", "name", "price", "servings"
            - "total_cost", "cost_per_serving"
            - "food_cost_ratio": cost_per_serving / price (0.0 without a price)
            - "target_food_cost", "suggested_price"
            - "errors": unit mismatch messages

    Raises:
        MenuItemNotFound: If menu item doesn't exist
        DatabaseError: If database operation fails
    """
    if target_food_cost is None:
        target_food_cost = get_config().target_food_cost

    catalog, item = _load_menu_item(menu_item_id)
    result = costing.menu_item_cost_per_serving(item, catalog.ingredients, catalog.recipes)

    return {
        "menu_item_id": item.id,
        "name": item.name,
        "price": item.price,
        "servings": item.servings,
        "total_cost": result.total_cost,
        "cost_per_serving": result.cost_per_serving,
        "food_cost_ratio": costing.food_cost_ratio(result.cost_per_serving, item.price),
        "target_food_cost": target_food_cost,
        "suggested_price": costing.suggested_price(result.cost_per_serving, target_food_cost),
        "errors": list(result.errors),
    }
