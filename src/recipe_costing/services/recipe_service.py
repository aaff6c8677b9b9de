"""
Recipe Service - Business logic for recipe management.

This service provides CRUD operations for recipes with:
- Input validation
- Line management (ingredient and sub-recipe lines)
- Cost calculations through the costing engine
- Search and filtering
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..models import Ingredient, Recipe, RecipeCategory, RecipeLine, RefKind
from ..utils.datetime_utils import utc_now
from ..utils.validators import sanitize_string, validate_line_data, validate_recipe_data
from . import costing
from .catalog_service import load_catalog
from .database import session_scope
from .exceptions import (
    DatabaseError,
    IngredientNotFound,
    LineNotFound,
    RecipeNotFound,
    ValidationError,
)
from .logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)

RECIPE_FIELDS = ("name", "category", "yield_qty", "yield_unit", "notes")


def _clean_recipe_data(data: Dict[str, Any]) -> Dict[str, Any]:
    cleaned = {key: data[key] for key in RECIPE_FIELDS if key in data}
    for key in ("name", "notes"):
        if key in cleaned:
            cleaned[key] = sanitize_string(cleaned[key])
    for key in ("category", "yield_unit"):
        if cleaned.get(key) is not None:
            cleaned[key] = str(getattr(cleaned[key], "value", cleaned[key]))
    if cleaned.get("yield_qty") is not None:
        cleaned["yield_qty"] = float(cleaned["yield_qty"])
    return cleaned


# ============================================================================
# Line Helpers (shared with menu_item_service)
# ============================================================================


def validate_lines(lines_data: List[Dict[str, Any]]) -> None:
    """
    Validate a list of line dictionaries.

    Raises:
        ValidationError: With every problem found, numbered by line
    """
    errors = []
    for position, line_data in enumerate(lines_data, start=1):
        _, line_errors = validate_line_data(line_data, position)
        errors.extend(line_errors)
    if errors:
        raise ValidationError(errors)


def line_fields(session, line_data: Dict[str, Any], position: int) -> Dict[str, Any]:
    """
    Column values for a new line row.

    The referenced ingredient or recipe must exist when the line is created.

    Args:
        session: Active database session
        line_data: Dict with ingredient_id or recipe_id, qty, unit and optional id
        position: Display position of the line

    Returns:
        Keyword arguments for RecipeLine or MenuItemLine

    Raises:
        IngredientNotFound: If the referenced ingredient doesn't exist
        RecipeNotFound: If the referenced recipe doesn't exist
    """
    if line_data.get("ingredient_id"):
        ref_kind, ref_id = RefKind.INGREDIENT, line_data["ingredient_id"]
        if session.query(Ingredient.id).filter_by(id=ref_id).first() is None:
            raise IngredientNotFound(ref_id)
    else:
        ref_kind, ref_id = RefKind.RECIPE, line_data["recipe_id"]
        if session.query(Recipe.id).filter_by(id=ref_id).first() is None:
            raise RecipeNotFound(ref_id)

    fields = {
        "ref_kind": ref_kind.value,
        "ref_id": ref_id,
        "qty": float(line_data["qty"]),
        "unit": str(getattr(line_data["unit"], "value", line_data["unit"])),
        "position": position,
    }
    if line_data.get("id"):
        fields["id"] = line_data["id"]
    return fields


def _check_no_self_reference(recipe_id: str, lines_data: List[Dict[str, Any]]) -> None:
    for position, line_data in enumerate(lines_data, start=1):
        if recipe_id and line_data.get("recipe_id") == recipe_id:
            raise ValidationError([f"Line {position}: A recipe cannot include itself"])


# ============================================================================
# CRUD Operations
# ============================================================================


def create_recipe(
    recipe_data: Dict[str, Any], lines_data: Optional[List[Dict[str, Any]]] = None
) -> Recipe:
    """
    Create a new recipe with optional lines.

    Args:
        recipe_data: Dictionary with name, category, yield_qty, yield_unit,
            optional notes and optional id (imports)
        lines_data: List of line dicts:
            {"ingredient_id": ..., "qty": ..., "unit": ...} or
            {"recipe_id": ..., "qty": ..., "unit": ...}

    Returns:
        Created Recipe instance

    Raises:
        ValidationError: If recipe or line validation fails
        IngredientNotFound: If a line references an unknown ingredient
        RecipeNotFound: If a line references an unknown recipe
        DatabaseError: If database operation fails
    """
    recipe_data = {"category": RecipeCategory.BASE.value, **recipe_data}
    is_valid, errors = validate_recipe_data(recipe_data)
    if not is_valid:
        raise ValidationError(errors)

    lines_data = lines_data or []
    validate_lines(lines_data)
    _check_no_self_reference(recipe_data.get("id"), lines_data)

    try:
        with session_scope() as session:
            recipe = Recipe(**_clean_recipe_data(recipe_data))
            if recipe_data.get("id"):
                recipe.id = recipe_data["id"]

            recipe.lines = [
                RecipeLine(**line_fields(session, line_data, position))
                for position, line_data in enumerate(lines_data)
            ]

            session.add(recipe)
            session.flush()

            log_operation(
                logger,
                operation="create_recipe",
                outcome="success",
                recipe_id=recipe.id,
                line_count=len(lines_data),
            )
            return recipe

    except (IngredientNotFound, RecipeNotFound):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to create recipe", e)


def get_recipe(recipe_id: str) -> Recipe:
    """
    Retrieve a recipe by ID, with its lines loaded.

    Raises:
        RecipeNotFound: If recipe doesn't exist
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            recipe = session.query(Recipe).filter_by(id=recipe_id).first()

            if not recipe:
                raise RecipeNotFound(recipe_id)

            return recipe

    except RecipeNotFound:
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to retrieve recipe {recipe_id}", e)


def get_all_recipes(
    category: Optional[str] = None,
    name_search: Optional[str] = None,
) -> List[Recipe]:
    """
    Retrieve all recipes with optional filtering.

    Args:
        category: Filter by category (exact match)
        name_search: Filter by name (case-insensitive partial match)

    Returns:
        List of Recipe instances sorted by name

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            query = session.query(Recipe)

            if category:
                query = query.filter(Recipe.category == str(category))

            if name_search:
                query = query.filter(Recipe.name.ilike(f"%{name_search}%"))

            return query.order_by(Recipe.name).all()

    except SQLAlchemyError as e:
        raise DatabaseError("Failed to retrieve recipes", e)


def update_recipe(
    recipe_id: str,
    recipe_data: Dict[str, Any],
    lines_data: Optional[List[Dict[str, Any]]] = None,
) -> Recipe:
    """
    Update a recipe and optionally its lines.

    Args:
        recipe_id: Recipe ID
        recipe_data: Dictionary with recipe fields to update (missing fields
            keep their current values)
        lines_data: If provided, replaces all recipe lines

    Returns:
        Updated Recipe instance

    Raises:
        RecipeNotFound: If recipe (or a referenced sub-recipe) doesn't exist
        ValidationError: If data validation fails or a line references the recipe itself
        IngredientNotFound: If a line references an unknown ingredient
        DatabaseError: If database operation fails
    """
    if lines_data is not None:
        validate_lines(lines_data)
        _check_no_self_reference(recipe_id, lines_data)

    try:
        with session_scope() as session:
            recipe = session.query(Recipe).filter_by(id=recipe_id).first()

            if not recipe:
                raise RecipeNotFound(recipe_id)

            merged = {field: getattr(recipe, field) for field in RECIPE_FIELDS}
            merged.update(recipe_data)
            is_valid, errors = validate_recipe_data(merged)
            if not is_valid:
                raise ValidationError(errors)

            recipe.update_from_dict(_clean_recipe_data(recipe_data))

            if lines_data is not None:
                recipe.lines = []
                session.flush()
                recipe.lines = [
                    RecipeLine(**line_fields(session, line_data, position))
                    for position, line_data in enumerate(lines_data)
                ]

            session.flush()

            log_operation(logger, operation="update_recipe", outcome="success", recipe_id=recipe_id)
            return recipe

    except (RecipeNotFound, ValidationError, IngredientNotFound):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to update recipe {recipe_id}", e)


def delete_recipe(recipe_id: str) -> bool:
    """
    Delete a recipe and its lines.

    Lines of other recipes or menu items that use it are left in place and
    cost as "Missing recipe".

    Raises:
        RecipeNotFound: If recipe doesn't exist
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            recipe = session.query(Recipe).filter_by(id=recipe_id).first()

            if not recipe:
                raise RecipeNotFound(recipe_id)

            # Cascade removes the recipe's own lines
            session.delete(recipe)

        log_operation(logger, operation="delete_recipe", outcome="success", recipe_id=recipe_id)
        return True

    except RecipeNotFound:
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to delete recipe {recipe_id}", e)


# ============================================================================
# Line Management
# ============================================================================


def add_line_to_recipe(recipe_id: str, line_data: Dict[str, Any]) -> RecipeLine:
    """
    Append a line to a recipe.

    Args:
        recipe_id: Recipe ID
        line_data: {"ingredient_id" | "recipe_id": ..., "qty": ..., "unit": ...}

    Returns:
        Created RecipeLine instance

    Raises:
        RecipeNotFound: If the recipe or referenced sub-recipe doesn't exist
        IngredientNotFound: If the referenced ingredient doesn't exist
        ValidationError: If line data is invalid or references the recipe itself
        DatabaseError: If database operation fails
    """
    validate_lines([line_data])
    _check_no_self_reference(recipe_id, [line_data])

    try:
        with session_scope() as session:
            recipe = session.query(Recipe).filter_by(id=recipe_id).first()
            if not recipe:
                raise RecipeNotFound(recipe_id)

            position = max((line.position for line in recipe.lines), default=-1) + 1
            line = RecipeLine(**line_fields(session, line_data, position))
            recipe.lines.append(line)
            recipe.updated_at = utc_now()
            session.flush()

            return line

    except (RecipeNotFound, IngredientNotFound):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to add line to recipe {recipe_id}", e)


def remove_line_from_recipe(recipe_id: str, line_id: str) -> bool:
    """
    Remove one line from a recipe.

    Raises:
        RecipeNotFound: If recipe doesn't exist
        LineNotFound: If the line is not on this recipe
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            recipe = session.query(Recipe).filter_by(id=recipe_id).first()
            if not recipe:
                raise RecipeNotFound(recipe_id)

            line = next((line for line in recipe.lines if line.id == line_id), None)
            if line is None:
                raise LineNotFound(recipe_id, line_id)

            recipe.lines.remove(line)
            return True

    except (RecipeNotFound, LineNotFound):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to remove line {line_id} from recipe {recipe_id}", e)


def _get_recipes_referencing(ref_kind: RefKind, ref_id: str) -> List[Recipe]:
    try:
        with session_scope() as session:
            return (
                session.query(Recipe)
                .join(RecipeLine, RecipeLine.recipe_id == Recipe.id)
                .filter(RecipeLine.ref_kind == ref_kind.value, RecipeLine.ref_id == ref_id)
                .distinct()
                .order_by(Recipe.name)
                .all()
            )
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to find recipes using {ref_id}", e)


def get_recipes_using_ingredient(ingredient_id: str) -> List[Recipe]:
    """
    Get all recipes with a line referencing an ingredient.

    Raises:
        DatabaseError: If database operation fails
    """
    return _get_recipes_referencing(RefKind.INGREDIENT, ingredient_id)


def get_recipes_using_recipe(recipe_id: str) -> List[Recipe]:
    """
    Get all recipes that include a recipe as a sub-recipe line.

    Raises:
        DatabaseError: If database operation fails
    """
    return _get_recipes_referencing(RefKind.RECIPE, recipe_id)


# ============================================================================
# Cost Calculations
# ============================================================================


def calculate_recipe_cost(recipe_id: str) -> costing.RecipeCostResult:
    """
    Cost one batch of a recipe against the current catalog.

    Args:
        recipe_id: Recipe ID

    Returns:
        RecipeCostResult with total cost, breakdown rows and unit mismatch errors

    Raises:
        RecipeNotFound: If recipe doesn't exist
        DatabaseError: If database operation fails
    """
    catalog = load_catalog()
    recipe = catalog.find_recipe(recipe_id)
    if recipe is None:
        raise RecipeNotFound(recipe_id)
    return costing.recipe_total_cost(recipe, catalog.ingredients, catalog.recipes)


def calculate_recipe_unit_cost(recipe_id: str) -> float:
    """
    Cost of one unit of a recipe's yield against the current catalog.

    Raises:
        RecipeNotFound: If recipe doesn't exist
        DatabaseError: If database operation fails
    """
    catalog = load_catalog()
    recipe = catalog.find_recipe(recipe_id)
    if recipe is None:
        raise RecipeNotFound(recipe_id)
    return costing.recipe_unit_cost(recipe, catalog.ingredients, catalog.recipes)
