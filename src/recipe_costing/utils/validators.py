"""
Input validation functions for the Recipe Costing application.

This module provides validation functions for all user inputs including:
- Numeric validation (positive, non-negative, ranges)
- String validation (length, required fields)
- Unit and category validation
- Lenient parsing of numbers and units coming from spreadsheets
"""

import math
import re
from typing import Any, Optional, Tuple

from .constants import (
    ALL_UNITS,
    MAX_COST,
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_QUANTITY,
    MAX_SUPPLIER_LENGTH,
    RECIPE_CATEGORIES,
    UNIT_GRAM,
    UNIT_MILLILITER,
    UNIT_PIECE,
    ERROR_REQUIRED_FIELD,
    ERROR_INVALID_NUMBER,
    ERROR_INVALID_POSITIVE,
    ERROR_INVALID_NON_NEGATIVE,
    ERROR_INVALID_UNIT,
    ERROR_INVALID_CATEGORY,
)


def _to_finite_float(value: Any) -> Optional[float]:
    """Convert to float, returning None for unparsable or non-finite values."""
    if isinstance(value, bool):
        return None
    try:
        num_value = float(value)
    except (ValueError, TypeError):
        return None
    if not math.isfinite(num_value):
        return None
    return num_value


def validate_required_string(value: Optional[str], field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a string field is not empty.

    Args:
        value: The string value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    return True, ""


def validate_string_length(
    value: str, max_length: int, field_name: str = "Field"
) -> Tuple[bool, str]:
    """
    Validate that a string doesn't exceed maximum length.

    Args:
        value: The string value to validate
        max_length: Maximum allowed length
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value and len(value) > max_length:
        return False, f"{field_name}: Must be {max_length} characters or less"
    return True, ""


def validate_positive_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a positive finite number (> 0).

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    num_value = _to_finite_float(value)
    if num_value is None:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if num_value <= 0:
        return False, f"{field_name}: {ERROR_INVALID_POSITIVE}"
    return True, ""


def validate_non_negative_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a non-negative finite number (>= 0).

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    num_value = _to_finite_float(value)
    if num_value is None:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if num_value < 0:
        return False, f"{field_name}: {ERROR_INVALID_NON_NEGATIVE}"
    return True, ""


def validate_number_range(
    value: Any, min_value: float, max_value: float, field_name: str = "Field"
) -> Tuple[bool, str]:
    """
    Validate that a number is within a range (inclusive).

    Args:
        value: The value to validate
        min_value: Minimum allowed value
        max_value: Maximum allowed value
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    num_value = _to_finite_float(value)
    if num_value is None:
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if num_value < min_value or num_value > max_value:
        return False, f"{field_name}: Must be between {min_value} and {max_value}"
    return True, ""


def validate_unit(unit: Any, field_name: str = "Unit") -> Tuple[bool, str]:
    """
    Validate that a unit is one of g, ml or pc.

    Args:
        unit: The unit to validate (string or Unit enum)
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not unit:
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"

    if str(getattr(unit, "value", unit)) not in ALL_UNITS:
        return False, f"{field_name}: {ERROR_INVALID_UNIT}. Valid: {', '.join(ALL_UNITS)}"

    return True, ""


def validate_recipe_category(category: Any, field_name: str = "Category") -> Tuple[bool, str]:
    """
    Validate that a recipe category is Base or SubRecipe.

    Args:
        category: The category to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not category:
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"

    if str(getattr(category, "value", category)) not in RECIPE_CATEGORIES:
        return (
            False,
            f"{field_name}: {ERROR_INVALID_CATEGORY}. Valid: {', '.join(RECIPE_CATEGORIES)}",
        )

    return True, ""


def _validate_name_and_notes(data: dict, label: str, errors: list) -> None:
    """Shared name/notes checks for ingredients, recipes and menu items."""
    is_valid, error = validate_required_string(data.get("name"), f"{label} Name")
    if not is_valid:
        errors.append(error)
    else:
        is_valid, error = validate_string_length(data.get("name"), MAX_NAME_LENGTH, f"{label} Name")
        if not is_valid:
            errors.append(error)

    if data.get("notes"):
        is_valid, error = validate_string_length(data.get("notes"), MAX_NOTES_LENGTH, "Notes")
        if not is_valid:
            errors.append(error)


def validate_ingredient_data(data: dict) -> Tuple[bool, list]:
    """
    Validate all fields for an ingredient.

    Args:
        data: Dictionary with name, unit, pack_size, pack_cost and optional
              supplier/notes

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    _validate_name_and_notes(data, "Ingredient", errors)

    is_valid, error = validate_unit(data.get("unit"), "Unit")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_positive_number(data.get("pack_size"), "Pack Size")
    if not is_valid:
        errors.append(error)
    else:
        is_valid, error = validate_number_range(data.get("pack_size"), 0, MAX_QUANTITY, "Pack Size")
        if not is_valid:
            errors.append(error)

    is_valid, error = validate_non_negative_number(data.get("pack_cost"), "Pack Cost")
    if not is_valid:
        errors.append(error)
    else:
        is_valid, error = validate_number_range(data.get("pack_cost"), 0, MAX_COST, "Pack Cost")
        if not is_valid:
            errors.append(error)

    if data.get("supplier"):
        is_valid, error = validate_string_length(data.get("supplier"), MAX_SUPPLIER_LENGTH, "Supplier")
        if not is_valid:
            errors.append(error)

    return len(errors) == 0, errors


def validate_recipe_data(data: dict) -> Tuple[bool, list]:
    """
    Validate all fields for a recipe.

    Args:
        data: Dictionary with name, category, yield_qty, yield_unit and
              optional notes

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    _validate_name_and_notes(data, "Recipe", errors)

    is_valid, error = validate_recipe_category(data.get("category"), "Category")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_positive_number(data.get("yield_qty"), "Yield Quantity")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_unit(data.get("yield_unit"), "Yield Unit")
    if not is_valid:
        errors.append(error)

    return len(errors) == 0, errors


def validate_menu_item_data(data: dict) -> Tuple[bool, list]:
    """
    Validate all fields for a menu item.

    Args:
        data: Dictionary with name, servings, price and optional notes

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    _validate_name_and_notes(data, "Menu Item", errors)

    is_valid, error = validate_positive_number(data.get("servings"), "Servings")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_non_negative_number(data.get("price", 0), "Price")
    if not is_valid:
        errors.append(error)
    else:
        is_valid, error = validate_number_range(data.get("price", 0), 0, MAX_COST, "Price")
        if not is_valid:
            errors.append(error)

    return len(errors) == 0, errors


def validate_line_data(data: dict, position: Optional[int] = None) -> Tuple[bool, list]:
    """
    Validate a recipe or menu item line.

    A line references exactly one of an ingredient or a recipe.

    Args:
        data: Dictionary with ingredient_id or recipe_id, qty and unit
        position: Optional 1-based line number for error messages

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []
    label = f"Line {position}" if position is not None else "Line"

    has_ingredient = bool(data.get("ingredient_id"))
    has_recipe = bool(data.get("recipe_id"))
    if has_ingredient == has_recipe:
        errors.append(f"{label}: Must reference exactly one of ingredient_id or recipe_id")

    is_valid, error = validate_non_negative_number(data.get("qty"), f"{label} Quantity")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_unit(data.get("unit"), f"{label} Unit")
    if not is_valid:
        errors.append(error)

    return len(errors) == 0, errors


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string value by stripping whitespace and converting empty strings to None.

    Args:
        value: The string value to sanitize

    Returns:
        Sanitized string or None
    """
    if value is None:
        return None
    stripped = str(value).strip()
    return stripped if stripped else None


_NON_NUMERIC = re.compile(r"[^0-9,.\-]")


def parse_number(value: Any, default: float = 0.0) -> float:
    """
    Leniently parse a number typed by a person or read from a spreadsheet cell.

    Currency symbols and other characters are stripped and the first comma
    is taken as a decimal separator ("2,50 €" -> 2.5).

    Args:
        value: The value to parse
        default: Value returned when nothing numeric can be read

    Returns:
        Parsed finite float or default

    Examples:
        >>> parse_number("2,50 €")
        2.5
        >>> parse_number(None)
        0.0
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else default
    if isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value).replace(",", ".", 1)
        try:
            parsed = float(cleaned)
        except ValueError:
            return default
        return parsed if math.isfinite(parsed) else default
    return default


def normalize_unit(text: Any) -> str:
    """
    Map free-text unit names onto g, ml or pc.

    Anything mentioning "ml" is volume, piece words (pc, τεμ, τμχ) are count,
    everything else is treated as grams.

    Args:
        text: Unit text from a spreadsheet cell

    Returns:
        One of "g", "ml", "pc"
    """
    normalized = str(text or "").strip().lower()
    if "ml" in normalized:
        return UNIT_MILLILITER
    if "τεμ" in normalized or "pc" in normalized or "τμχ" in normalized:
        return UNIT_PIECE
    return UNIT_GRAM
