"""Service layer exception classes for Recipe Costing.

The costing engine itself never raises for bad catalog data (mismatched
units, missing references and cycles are reported in its results). These
exceptions are raised by the persistence, import and export layers.

Exception Hierarchy:
    ServiceError
    ├── IngredientNotFound
    ├── RecipeNotFound
    ├── MenuItemNotFound
    ├── LineNotFound
    ├── ValidationError
    ├── DatabaseError
    ├── ImportFormatError
    └── SpreadsheetImportError
"""


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions inherit from this class.
    """

    pass


class IngredientNotFound(ServiceError):
    """Raised when an ingredient cannot be found by ID."""

    def __init__(self, ingredient_id: str):
        self.ingredient_id = ingredient_id
        super().__init__(f"Ingredient with ID {ingredient_id} not found")


class RecipeNotFound(ServiceError):
    """Raised when a recipe cannot be found by ID."""

    def __init__(self, recipe_id: str):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe with ID {recipe_id} not found")


class MenuItemNotFound(ServiceError):
    """Raised when a menu item cannot be found by ID.

    Example:
        >>> raise MenuItemNotFound("menu_18c2f0a1b3e_4f1c2a9b8d7e")
        MenuItemNotFound: Menu item with ID menu_18c2f0a1b3e_4f1c2a9b8d7e not found
    """

    def __init__(self, menu_item_id: str):
        self.menu_item_id = menu_item_id
        super().__init__(f"Menu item with ID {menu_item_id} not found")


class LineNotFound(ServiceError):
    """Raised when a line cannot be found on its recipe or menu item."""

    def __init__(self, owner_id: str, line_id: str):
        self.owner_id = owner_id
        self.line_id = line_id
        super().__init__(f"Line {line_id} not found on {owner_id}")


class ValidationError(ServiceError):
    """Raised when data validation fails."""

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")


class ImportFormatError(ServiceError):
    """Raised when a catalog document cannot be imported.

    Covers invalid JSON, a payload that is not an object and an unknown
    schemaVersion.

    Args:
        message: Human-readable reason
        detail: Optional technical detail (parser message, found version)
    """

    def __init__(self, message: str, detail: str = None):
        self.detail = detail
        super().__init__(message)


class SpreadsheetImportError(ServiceError):
    """Raised when a workbook cannot be read or holds no usable rows.

    Args:
        path: Workbook path
        message: Reason the import failed
    """

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Cannot import {path}: {message}")
