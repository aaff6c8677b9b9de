"""
Import/Export Service - the catalog as a versioned JSON document.

The document uses the camelCase layout of the browser version of the app,
so files move freely between the two:

    {
      "schemaVersion": 1,
      "exportedAt": "2025-01-31T09:15:00.123Z",
      "ingredients": [{"id", "name", "unit", "packSize", "packCost",
                       "supplier"?, "notes"?, "updatedAt"}],
      "recipes": [{"id", "name", "category", "yieldQty", "yieldUnit",
                   "notes"?, "updatedAt", "lines": [LINE, ...]}],
      "menuItems": [{"id", "name", "servings", "price", "notes"?,
                     "updatedAt", "lines": [LINE, ...]}]
    }

    LINE = {"id", "ref": {"kind": "ingredient", "ingredientId"}
                         | {"kind": "recipe", "recipeId"},
            "qty", "unit"}
"""

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..models.enums import RecipeCategory, RefKind, Unit
from ..utils.constants import (
    ERROR_UNSUPPORTED_FORMAT,
    EXPORT_FILENAME_PREFIX,
    SCHEMA_VERSION,
)
from ..utils.datetime_utils import filename_timestamp, iso_timestamp
from . import costing
from .catalog_service import load_catalog, merge_catalog, replace_catalog
from .exceptions import ImportFormatError
from .logging_utils import get_service_logger, log_operation

logger = get_service_logger(__name__)

IMPORT_MODES = ("merge", "replace")

ENTITY_INGREDIENTS = "ingredients"
ENTITY_RECIPES = "recipes"
ENTITY_MENU_ITEMS = "menu_items"


# ============================================================================
# Result Classes
# ============================================================================


class ImportResult:
    """Result of an import operation with per-entity tracking."""

    def __init__(self):
        self.total_records = 0
        self.successful = 0
        self.skipped = 0
        self.failed = 0
        self.errors = []
        self.warnings = []
        self.entity_counts: Dict[str, Dict[str, int]] = {}

    def add_success(self, entity_type: str = None, count: int = 1):
        """Record successful imports."""
        self.successful += count
        self.total_records += count
        if entity_type:
            self._ensure_entity(entity_type)
            self.entity_counts[entity_type]["imported"] += count

    def add_skip(self, record_type: str, record_name: str, reason: str):
        """Record a skipped record."""
        self.skipped += 1
        self.total_records += 1
        self._ensure_entity(record_type)
        self.entity_counts[record_type]["skipped"] += 1
        self.warnings.append(
            {
                "record_type": record_type,
                "record_name": record_name,
                "warning_type": "skipped",
                "message": reason,
            }
        )

    def add_error(self, record_type: str, record_name: str, error: str):
        """Record a failed record."""
        self.failed += 1
        self.total_records += 1
        self._ensure_entity(record_type)
        self.entity_counts[record_type]["errors"] += 1
        self.errors.append(
            {
                "record_type": record_type,
                "record_name": record_name,
                "error_type": "import_error",
                "message": error,
            }
        )

    def add_warning(self, record_type: str, record_name: str, message: str):
        """Record a warning (non-fatal issue during import)."""
        self.warnings.append(
            {
                "record_type": record_type,
                "record_name": record_name,
                "warning_type": "warning",
                "message": message,
            }
        )

    def _ensure_entity(self, entity_type: str):
        if entity_type not in self.entity_counts:
            self.entity_counts[entity_type] = {"imported": 0, "skipped": 0, "errors": 0}

    def merge(self, other: "ImportResult"):
        """Merge another ImportResult into this one."""
        self.total_records += other.total_records
        self.successful += other.successful
        self.skipped += other.skipped
        self.failed += other.failed
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        for entity, counts in other.entity_counts.items():
            self._ensure_entity(entity)
            for key in ("imported", "skipped", "errors"):
                self.entity_counts[entity][key] += counts[key]

    def get_summary(self) -> str:
        """Get a user-friendly summary string of the import results."""
        lines = [
            "=" * 60,
            "Import Summary",
            "=" * 60,
        ]

        if self.entity_counts:
            for entity, counts in self.entity_counts.items():
                parts = []
                if counts["imported"] > 0:
                    parts.append(f"{counts['imported']} imported")
                if counts["skipped"] > 0:
                    parts.append(f"{counts['skipped']} skipped")
                if counts["errors"] > 0:
                    parts.append(f"{counts['errors']} errors")
                if parts:
                    lines.append(f"  {entity}: {', '.join(parts)}")
            lines.append("")

        lines.extend(
            [
                f"Total Records: {self.total_records}",
                f"Successful:    {self.successful}",
                f"Skipped:       {self.skipped}",
                f"Failed:        {self.failed}",
            ]
        )

        if self.errors:
            lines.append("\nErrors:")
            for error in self.errors:
                lines.append(f"  - {error['record_type']}: {error['record_name']}")
                lines.append(f"    {error['message']}")

        if self.warnings and len(self.warnings) <= 10:
            lines.append("\nWarnings:")
            for warning in self.warnings:
                lines.append(f"  - {warning['record_type']}: {warning['record_name']}")
                lines.append(f"    {warning['message']}")
        elif self.warnings:
            lines.append(f"\n{len(self.warnings)} warnings (first 10 shown in the log)")
            for warning in self.warnings[:10]:
                logger.info(
                    f"{warning['record_type']}: {warning['record_name']}: {warning['message']}"
                )

        lines.append("=" * 60)
        return "\n".join(lines)


class ExportResult:
    """Result of an export operation."""

    def __init__(self, file_path: str, record_count: int):
        self.file_path = file_path
        self.record_count = record_count
        self.success = True
        self.error = None
        self.entity_counts: Dict[str, int] = {}

    def add_entity_count(self, entity_type: str, count: int):
        """Add count for a specific entity type."""
        self.entity_counts[entity_type] = count

    def get_summary(self) -> str:
        """Get a summary string of the export results."""
        if not self.success:
            return f"Export failed: {self.error}"

        lines = [f"Exported {self.record_count} records to {self.file_path}"]

        if self.entity_counts:
            lines.append("")
            for entity, count in self.entity_counts.items():
                lines.append(f"  {entity}: {count}")

        return "\n".join(lines)


# ============================================================================
# Records -> Document
# ============================================================================


def _json_number(value: float):
    """Write integral floats as ints (1000.0 -> 1000)."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return value


def _line_to_dict(line: costing.RecipeLine) -> Dict[str, Any]:
    if line.ref.kind is RefKind.INGREDIENT:
        ref = {"kind": RefKind.INGREDIENT.value, "ingredientId": line.ref.ref_id}
    else:
        ref = {"kind": RefKind.RECIPE.value, "recipeId": line.ref.ref_id}
    return {
        "id": line.id,
        "ref": ref,
        "qty": _json_number(line.qty),
        "unit": str(line.unit),
    }


def _with_optional(entry: Dict[str, Any], **optional) -> Dict[str, Any]:
    for key, value in optional.items():
        if value:
            entry[key] = value
    return entry


def catalog_to_document(
    catalog: costing.Catalog, exported_at: Optional[str] = None
) -> Dict[str, Any]:
    """
    Convert a catalog snapshot to the JSON document structure.

    Args:
        catalog: Catalog snapshot
        exported_at: Timestamp for "exportedAt" (now if None)

    Returns:
        Document dictionary, ready for json.dumps
    """
    exported_at = exported_at or iso_timestamp()

    ingredients = [
        _with_optional(
            {
                "id": i.id,
                "name": i.name,
                "unit": str(i.unit),
                "packSize": _json_number(i.pack_size),
                "packCost": _json_number(i.pack_cost),
            },
            supplier=i.supplier,
            notes=i.notes,
        )
        for i in catalog.ingredients
    ]
    recipes = [
        _with_optional(
            {
                "id": r.id,
                "name": r.name,
                "category": str(r.category),
                "yieldQty": _json_number(r.yield_qty),
                "yieldUnit": str(r.yield_unit),
                "lines": [_line_to_dict(line) for line in r.lines],
            },
            notes=r.notes,
        )
        for r in catalog.recipes
    ]
    menu_items = [
        _with_optional(
            {
                "id": m.id,
                "name": m.name,
                "servings": _json_number(m.servings),
                "price": _json_number(m.price),
                "lines": [_line_to_dict(line) for line in m.lines],
            },
            notes=m.notes,
        )
        for m in catalog.menu_items
    ]

    for entry, record in zip(
        ingredients + recipes + menu_items,
        list(catalog.ingredients) + list(catalog.recipes) + list(catalog.menu_items),
    ):
        entry["updatedAt"] = record.updated_at or exported_at

    return {
        "ingredients": ingredients,
        "recipes": recipes,
        "menuItems": menu_items,
        "schemaVersion": SCHEMA_VERSION,
        "exportedAt": exported_at,
    }


def export_json(catalog: costing.Catalog) -> str:
    """
    Serialize a catalog as a JSON document (2-space indent, fresh exportedAt).
    """
    return json.dumps(catalog_to_document(catalog), indent=2, ensure_ascii=False)


# ============================================================================
# Document -> Records
# ============================================================================


def _number(entry: Dict[str, Any], key: str, default: float = 0.0) -> float:
    value = entry.get(key, default)
    if value is None or isinstance(value, bool):
        raise ValueError(f"'{key}' must be a number")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"'{key}' must be a finite number")
    return number


def _non_negative(entry: Dict[str, Any], key: str, default: float = 0.0) -> float:
    number = _number(entry, key, default)
    if number < 0:
        raise ValueError(f"'{key}' cannot be negative")
    return number


def _required_text(entry: Dict[str, Any], key: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"'{key}' is required")
    return value


def _unit(entry: Dict[str, Any], key: str) -> Unit:
    value = entry.get(key)
    try:
        return Unit(value)
    except ValueError:
        raise ValueError(f"'{key}' must be one of g, ml, pc (got {value!r})")


def _line_from_dict(entry: Dict[str, Any]) -> costing.RecipeLine:
    ref = entry.get("ref")
    if not isinstance(ref, dict):
        raise ValueError("line 'ref' is required")
    kind = ref.get("kind")
    if kind == RefKind.INGREDIENT.value:
        ref_id = _required_text(ref, "ingredientId")
    elif kind == RefKind.RECIPE.value:
        ref_id = _required_text(ref, "recipeId")
    else:
        raise ValueError(f"line ref kind must be 'ingredient' or 'recipe' (got {kind!r})")
    return costing.RecipeLine(
        ref=costing.make_ref(kind, ref_id),
        qty=_non_negative(entry, "qty"),
        unit=_unit(entry, "unit"),
        id=entry.get("id"),
    )


def _lines(entry: Dict[str, Any]) -> List[costing.RecipeLine]:
    lines = entry.get("lines") or []
    if not isinstance(lines, list):
        raise ValueError("'lines' must be a list")
    return [_line_from_dict(line) for line in lines]


def _ingredient_from_dict(entry: Dict[str, Any]) -> costing.Ingredient:
    return costing.Ingredient(
        id=_required_text(entry, "id"),
        name=_required_text(entry, "name"),
        unit=_unit(entry, "unit"),
        pack_size=_number(entry, "packSize"),
        pack_cost=_non_negative(entry, "packCost"),
        supplier=entry.get("supplier") or None,
        notes=entry.get("notes") or None,
        updated_at=entry.get("updatedAt"),
    )


def _recipe_from_dict(entry: Dict[str, Any]) -> costing.Recipe:
    try:
        category = RecipeCategory(entry.get("category"))
    except ValueError:
        category = RecipeCategory.BASE
    return costing.Recipe(
        id=_required_text(entry, "id"),
        name=_required_text(entry, "name"),
        category=category,
        yield_qty=_number(entry, "yieldQty"),
        yield_unit=_unit(entry, "yieldUnit"),
        lines=_lines(entry),
        notes=entry.get("notes") or None,
        updated_at=entry.get("updatedAt"),
    )


def _menu_item_from_dict(entry: Dict[str, Any]) -> costing.MenuItem:
    return costing.MenuItem(
        id=_required_text(entry, "id"),
        name=_required_text(entry, "name"),
        servings=_number(entry, "servings", 1.0),
        price=_non_negative(entry, "price"),
        lines=_lines(entry),
        notes=entry.get("notes") or None,
        updated_at=entry.get("updatedAt"),
    )


def _convert_entries(
    entries: Any, converter, entity_type: str, result: Optional[ImportResult]
) -> list:
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise ImportFormatError(ERROR_UNSUPPORTED_FORMAT, f"'{entity_type}' must be a list")

    records = []
    for position, entry in enumerate(entries, start=1):
        name = entry.get("name", f"#{position}") if isinstance(entry, dict) else f"#{position}"
        try:
            if not isinstance(entry, dict):
                raise ValueError("entry must be an object")
            records.append(converter(entry))
        except (ValueError, TypeError) as e:
            logger.warning(f"Skipping {entity_type} {name}: {e}")
            if result is not None:
                result.add_error(entity_type, str(name), str(e))
    return records


def document_to_catalog(
    data: Any, result: Optional[ImportResult] = None
) -> costing.Catalog:
    """
    Convert a parsed JSON document to a catalog snapshot.

    Missing lists default to empty. Malformed entries are skipped, logged,
    and recorded as errors on result when one is given.

    Args:
        data: Parsed JSON value
        result: Optional ImportResult collecting per-record errors

    Returns:
        Catalog snapshot

    Raises:
        ImportFormatError: If data is not an object or schemaVersion is not 1
    """
    if not isinstance(data, dict):
        raise ImportFormatError(ERROR_UNSUPPORTED_FORMAT, "document must be a JSON object")
    version = data.get("schemaVersion")
    if version != SCHEMA_VERSION or isinstance(version, bool):
        raise ImportFormatError(
            ERROR_UNSUPPORTED_FORMAT, f"schemaVersion {version!r}, expected {SCHEMA_VERSION}"
        )

    return costing.Catalog(
        ingredients=_convert_entries(
            data.get("ingredients"), _ingredient_from_dict, ENTITY_INGREDIENTS, result
        ),
        recipes=_convert_entries(data.get("recipes"), _recipe_from_dict, ENTITY_RECIPES, result),
        menu_items=_convert_entries(
            data.get("menuItems"), _menu_item_from_dict, ENTITY_MENU_ITEMS, result
        ),
    )


def import_json(text: str, result: Optional[ImportResult] = None) -> costing.Catalog:
    """
    Parse a JSON document into a catalog snapshot.

    Args:
        text: Document text
        result: Optional ImportResult collecting per-record errors

    Returns:
        Catalog snapshot

    Raises:
        ImportFormatError: "Unsupported file format" for invalid JSON, a
            non-object payload or a schemaVersion other than 1
    """
    try:
        data = json.loads(text)
    except (ValueError, TypeError) as e:
        raise ImportFormatError(ERROR_UNSUPPORTED_FORMAT, str(e))
    return document_to_catalog(data, result)


def load_document_or_default(text: Optional[str]) -> costing.Catalog:
    """
    Lenient loader: an unreadable or foreign document yields an empty catalog.

    Args:
        text: Document text (None or empty means no saved data)

    Returns:
        Catalog snapshot, empty on any format problem
    """
    if not text:
        return costing.Catalog()
    try:
        return import_json(text)
    except ImportFormatError as e:
        logger.warning(f"Ignoring saved catalog document: {e} ({e.detail})")
        return costing.Catalog()


# ============================================================================
# File Operations
# ============================================================================


def default_export_filename() -> str:
    """File name for a new export, e.g. "recipe-costing-export_2025-01-31T09-15-00.json"."""
    return f"{EXPORT_FILENAME_PREFIX}_{filename_timestamp()}.json"


def export_catalog_to_file(file_path: str, catalog: Optional[costing.Catalog] = None) -> ExportResult:
    """
    Export the stored catalog (or a given snapshot) to a JSON file.

    Args:
        file_path: Destination path
        catalog: Snapshot to export (the stored catalog if None)

    Returns:
        ExportResult with per-entity counts; success False if the file could
        not be written

    Raises:
        DatabaseError: If the stored catalog cannot be loaded
    """
    if catalog is None:
        catalog = load_catalog()

    counts = {
        ENTITY_INGREDIENTS: len(catalog.ingredients),
        ENTITY_RECIPES: len(catalog.recipes),
        ENTITY_MENU_ITEMS: len(catalog.menu_items),
    }
    result = ExportResult(str(file_path), sum(counts.values()))
    for entity_type, count in counts.items():
        result.add_entity_count(entity_type, count)

    try:
        Path(file_path).write_text(export_json(catalog), encoding="utf-8")
    except OSError as e:
        result.success = False
        result.error = str(e)
        log_operation(logger, operation="export_catalog", outcome="error", error=str(e))
        return result

    log_operation(
        logger,
        operation="export_catalog",
        outcome="success",
        file_path=str(file_path),
        **counts,
    )
    return result


def import_catalog_from_file(file_path: str, mode: str = "merge") -> ImportResult:
    """
    Import a JSON document into the stored catalog.

    Modes:
    - "merge": add entries whose id is not stored yet, skip the rest (default)
    - "replace": clear the catalog first, then store the document

    Args:
        file_path: Path to the JSON document
        mode: "merge" or "replace"

    Returns:
        ImportResult with per-entity statistics

    Raises:
        ValueError: If mode is not "merge" or "replace"
        ImportFormatError: If the file cannot be read or is not a version 1 document
        DatabaseError: If storing the catalog fails
    """
    if mode not in IMPORT_MODES:
        raise ValueError(f"Invalid import mode: {mode}. Must be 'merge' or 'replace'.")

    try:
        text = Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ImportFormatError(ERROR_UNSUPPORTED_FORMAT, str(e))

    result = ImportResult()
    catalog = import_json(text, result)

    if mode == "replace":
        counts = replace_catalog(catalog)
        for entity_type, count in counts.items():
            result.add_success(entity_type, count)
    else:
        summary = merge_catalog(catalog)
        for entity_type, counts in summary.items():
            result.add_success(entity_type, counts["added"])
            for name in counts["skipped_names"]:
                result.add_skip(entity_type, name, "Already exists")

    log_operation(
        logger,
        operation="import_catalog",
        outcome="success",
        mode=mode,
        file_path=str(file_path),
        imported=result.successful,
        skipped=result.skipped,
        failed=result.failed,
    )
    return result

