"""
Ingredient Service - Business logic for the ingredient catalog.

This service provides CRUD operations for ingredients with:
- Input validation
- Search by name or supplier
- Unit cost lookup

Deleting an ingredient never touches the recipes and menu items that use
it; their lines keep the dangling reference and cost as "Missing ingredient".
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from ..models import Ingredient
from ..utils.validators import sanitize_string, validate_ingredient_data
from .costing import ingredient_unit_cost
from .database import session_scope
from .exceptions import DatabaseError, IngredientNotFound, ValidationError
from .logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)

INGREDIENT_FIELDS = ("name", "unit", "pack_size", "pack_cost", "supplier", "notes")


def _clean_ingredient_data(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = {key: data[key] for key in INGREDIENT_FIELDS if key in data}
    for key in ("name", "supplier", "notes"):
        if key in cleaned:
            cleaned[key] = sanitize_string(cleaned[key])
    if "unit" in cleaned and cleaned["unit"] is not None:
        cleaned["unit"] = str(getattr(cleaned["unit"], "value", cleaned["unit"]))
    for key in ("pack_size", "pack_cost"):
        if key in cleaned and cleaned[key] is not None:
            cleaned[key] = float(cleaned[key])
    return cleaned


# ============================================================================
# CRUD Operations
# ============================================================================


def create_ingredient(ingredient_data: Dict[str, Any]) -> Ingredient:
    """
    Create a new ingredient.

    Args:
        ingredient_data: Dictionary with:
            - name (str, required)
            - unit (str, required): "g", "ml" or "pc"
            - pack_size (float, required): > 0
            - pack_cost (float, required): >= 0
            - supplier (str, optional)
            - notes (str, optional)
            - id (str, optional): keep an existing id (imports)

    Returns:
        Created Ingredient instance

    Raises:
        ValidationError: If data validation fails
        DatabaseError: If database operation fails

    Example:
        >>> flour = create_ingredient(
        ...     {"name": "Flour", "unit": "g", "pack_size": 1000, "pack_cost": 1.20}
        ... )
        >>> flour.id.startswith("ing_")
        True
    """
    is_valid, errors = validate_ingredient_data(ingredient_data)
    if not is_valid:
        raise ValidationError(errors)

    try:
        with session_scope() as session:
            ingredient = Ingredient(**_clean_ingredient_data(ingredient_data))
            if ingredient_data.get("id"):
                ingredient.id = ingredient_data["id"]

            session.add(ingredient)
            session.flush()

            log_operation(
                logger, operation="create_ingredient", outcome="success", ingredient_id=ingredient.id
            )
            return ingredient

    except SQLAlchemyError as e:
        raise DatabaseError("Failed to create ingredient", e)


def get_ingredient(ingredient_id: str) -> Ingredient:
    """
    Retrieve an ingredient by ID.

    Args:
        ingredient_id: Ingredient ID

    Returns:
        Ingredient instance

    Raises:
        IngredientNotFound: If ingredient doesn't exist
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            ingredient = session.query(Ingredient).filter_by(id=ingredient_id).first()

            if not ingredient:
                raise IngredientNotFound(ingredient_id)

            return ingredient

    except IngredientNotFound:
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to retrieve ingredient {ingredient_id}", e)


def get_all_ingredients(name_search: Optional[str] = None) -> List[Ingredient]:
    """
    Retrieve all ingredients, optionally filtered.

    Args:
        name_search: Case-insensitive partial match on name or supplier

    Returns:
        List of Ingredient instances sorted by name

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            query = session.query(Ingredient)

            if name_search:
                pattern = f"%{name_search}%"
                query = query.filter(
                    or_(Ingredient.name.ilike(pattern), Ingredient.supplier.ilike(pattern))
                )

            return query.order_by(Ingredient.name).all()

    except SQLAlchemyError as e:
        raise DatabaseError("Failed to retrieve ingredients", e)


def update_ingredient(ingredient_id: str, ingredient_data: Dict[str, Any]) -> Ingredient:
    """
    Update an ingredient.

    Fields missing from ingredient_data keep their current values.

    Args:
        ingredient_id: Ingredient ID
        ingredient_data: Dictionary with fields to update

    Returns:
        Updated Ingredient instance

    Raises:
        IngredientNotFound: If ingredient doesn't exist
        ValidationError: If the updated ingredient is invalid
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            ingredient = session.query(Ingredient).filter_by(id=ingredient_id).first()

            if not ingredient:
                raise IngredientNotFound(ingredient_id)

            merged = {field: getattr(ingredient, field) for field in INGREDIENT_FIELDS}
            merged.update(ingredient_data)
            is_valid, errors = validate_ingredient_data(merged)
            if not is_valid:
                raise ValidationError(errors)

            ingredient.update_from_dict(_clean_ingredient_data(ingredient_data))
            session.flush()

            log_operation(
                logger, operation="update_ingredient", outcome="success", ingredient_id=ingredient_id
            )
            return ingredient

    except (IngredientNotFound, ValidationError):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to update ingredient {ingredient_id}", e)


def delete_ingredient(ingredient_id: str) -> bool:
    """
    Delete an ingredient.

    Lines that reference it are left in place and cost as "Missing ingredient".

    Args:
        ingredient_id: Ingredient ID

    Returns:
        True if deleted successfully

    Raises:
        IngredientNotFound: If ingredient doesn't exist
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            ingredient = session.query(Ingredient).filter_by(id=ingredient_id).first()

            if not ingredient:
                raise IngredientNotFound(ingredient_id)

            session.delete(ingredient)

        log_operation(
            logger, operation="delete_ingredient", outcome="success", ingredient_id=ingredient_id
        )
        return True

    except IngredientNotFound:
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to delete ingredient {ingredient_id}", e)


# ============================================================================
# Costing
# ============================================================================


def get_ingredient_unit_cost(ingredient_id: str) -> float:
    """
    Cost of one unit (g/ml/pc) of an ingredient.

    Args:
        ingredient_id: Ingredient ID

    Returns:
        pack_cost / pack_size (0.0 when pack size is zero)

    Raises:
        IngredientNotFound: If ingredient doesn't exist
        DatabaseError: If database operation fails
    """
    return ingredient_unit_cost(get_ingredient(ingredient_id).to_record())
