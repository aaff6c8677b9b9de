"""
Constants for the Recipe Costing application.

This module defines all system-wide constants including:
- Application metadata and document schema version
- Units (mass, volume, count) and recipe categories
- Numeric tolerances used by the costing engine
- Validation limits and error messages
"""

from typing import Dict, List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Recipe Costing"
APP_VERSION = "0.1.0"

# Version of the exported/imported JSON catalog document
SCHEMA_VERSION = 1

# ============================================================================
# Costing
# ============================================================================

# Quantities at or below this are treated as zero (pack size, yield, servings)
EPSILON = 1e-9

# Target food cost used for suggested prices (cost per serving / target)
DEFAULT_TARGET_FOOD_COST = 0.30

# ============================================================================
# Units
# ============================================================================

UNIT_GRAM = "g"
UNIT_MILLILITER = "ml"
UNIT_PIECE = "pc"

# Units are never converted into each other; equality is the only relation
ALL_UNITS: List[str] = [UNIT_GRAM, UNIT_MILLILITER, UNIT_PIECE]

UNIT_TYPE_MAP: Dict[str, str] = {
    UNIT_GRAM: "mass",
    UNIT_MILLILITER: "volume",
    UNIT_PIECE: "count",
}

# Display labels used in printed reports
UNIT_LABELS: Dict[str, str] = {
    UNIT_GRAM: "g",
    UNIT_MILLILITER: "ml",
    UNIT_PIECE: "pc",
}

# ============================================================================
# Recipe Categories
# ============================================================================

RECIPE_CATEGORY_BASE = "Base"
RECIPE_CATEGORY_SUB_RECIPE = "SubRecipe"

# Descriptive only - does not affect costing
RECIPE_CATEGORIES: List[str] = [RECIPE_CATEGORY_BASE, RECIPE_CATEGORY_SUB_RECIPE]

# ============================================================================
# Identifiers
# ============================================================================

ID_PREFIX_INGREDIENT = "ing"
ID_PREFIX_RECIPE = "rec"
ID_PREFIX_MENU_ITEM = "menu"
ID_PREFIX_LINE = "line"

# ============================================================================
# Validation Limits
# ============================================================================

MAX_NAME_LENGTH = 200
MAX_SUPPLIER_LENGTH = 200
MAX_ID_LENGTH = 64
MAX_NOTES_LENGTH = 2000

MAX_QUANTITY = 999999.99
MAX_COST = 999999.99

CURRENCY_DECIMAL_PLACES = 2
QUANTITY_DECIMAL_PLACES = 3

# ============================================================================
# Database
# ============================================================================

DATABASE_FILENAME = "recipe_costing.db"

TABLE_INGREDIENT = "ingredients"
TABLE_RECIPE = "recipes"
TABLE_RECIPE_LINE = "recipe_lines"
TABLE_MENU_ITEM = "menu_items"
TABLE_MENU_ITEM_LINE = "menu_item_lines"

# ============================================================================
# Export
# ============================================================================

EXPORT_FILENAME_PREFIX = "recipe-costing-export"

# ============================================================================
# Error Messages
# ============================================================================

ERROR_REQUIRED_FIELD = "This field is required"
ERROR_INVALID_NUMBER = "Please enter a valid number"
ERROR_INVALID_POSITIVE = "Value must be greater than zero"
ERROR_INVALID_NON_NEGATIVE = "Value must be zero or greater"
ERROR_INVALID_UNIT = "Invalid unit type"
ERROR_INVALID_CATEGORY = "Invalid category"
ERROR_UNSUPPORTED_FORMAT = "Unsupported file format"
