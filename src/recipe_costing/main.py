"""
Command-line entry point for Recipe Costing.

Usage Examples:
    # Print the costing report for the stored catalog
    recipe-costing report

    # Report on an exported document instead, with a 28% target food cost
    recipe-costing report --catalog backup.json --target 0,28 -o report.txt

    # Cost breakdown of one recipe / menu item
    recipe-costing cost-recipe rec_18d3c2f9a10_5f1e2b7c9a04
    recipe-costing cost-menu-item menu_18d3c2f9a10_0b6c4d2e8f11 --target 0.30

    # Export / import the catalog as JSON
    recipe-costing export backup.json
    recipe-costing import backup.json --mode replace

    # Import a spreadsheet
    recipe-costing import-excel dishes.xlsx --kind dishes --mode append
"""

import argparse
import logging
import sys
from pathlib import Path

from .services import costing
from .services.catalog_service import get_catalog_counts
from .services.database import initialize_app_database, reset_database
from .services.exceptions import ServiceError
from .services.import_export_service import (
    IMPORT_MODES,
    default_export_filename,
    export_catalog_to_file,
    import_catalog_from_file,
    import_json,
)
from .services.menu_item_service import calculate_menu_item_cost, get_menu_item, get_menu_item_pricing
from .services.recipe_service import calculate_recipe_cost, calculate_recipe_unit_cost, get_recipe
from .services.report_service import build_report, render_breakdown_text, render_report_text
from .services.spreadsheet_import_service import (
    APPLY_MODES,
    IMPORT_KINDS,
    apply_preview,
    parse_workbook,
)
from .services.dto_utils import money, num, pct, unit_label
from .utils.config import get_config
from .utils.constants import APP_NAME, APP_VERSION

logger = logging.getLogger(__name__)


def _target(value) -> float:
    if value is None:
        return get_config().target_food_cost
    return costing.parse_target_food_cost(value, get_config().target_food_cost)


def _write_or_print(text: str, output: str = None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        print(f"Wrote {output}")
    else:
        print(text, end="")


# ============================================================================
# Commands
# ============================================================================


def report_cmd(args) -> int:
    """Print (or save) the full costing report."""
    catalog = None
    if args.catalog:
        catalog = import_json(Path(args.catalog).read_text(encoding="utf-8"))
    report = build_report(catalog, _target(args.target))
    _write_or_print(render_report_text(report), args.output)
    return 0


def cost_recipe_cmd(args) -> int:
    """Print the cost breakdown of one recipe."""
    recipe = get_recipe(args.id)
    result = calculate_recipe_cost(args.id)
    unit = unit_label(recipe.yield_unit)
    text = render_breakdown_text(f"{recipe.name} (yield {num(recipe.yield_qty)} {unit})", result)
    text += f"  Unit cost: {money(calculate_recipe_unit_cost(args.id))} per {unit}\n"
    print(text, end="")
    return 0


def cost_menu_item_cmd(args) -> int:
    """Print the cost breakdown and pricing of one menu item."""
    menu_item = get_menu_item(args.id)
    result = calculate_menu_item_cost(args.id)
    pricing = get_menu_item_pricing(args.id, _target(args.target))
    text = render_breakdown_text(f"{menu_item.name} ({num(menu_item.servings)} servings)", result)
    text += f"  Price: {money(pricing['price'])}\n"
    text += f"  Food cost: {pct(pricing['food_cost_ratio'])}%\n"
    text += (
        f"  Suggested price: {money(pricing['suggested_price'])} "
        f"(at {pct(pricing['target_food_cost'])}%)\n"
    )
    print(text, end="")
    return 0


def export_cmd(args) -> int:
    """Export the catalog to a JSON document."""
    output_file = args.file or default_export_filename()
    print(f"Exporting catalog to {output_file}...")
    result = export_catalog_to_file(output_file)

    if result.success:
        print(result.get_summary())
        return 0
    print(f"ERROR: {result.error}")
    return 1


def import_cmd(args) -> int:
    """Import a JSON document."""
    print(f"Importing {args.file} ({args.mode})...")
    result = import_catalog_from_file(args.file, mode=args.mode)
    print(result.get_summary())
    return 0 if result.failed == 0 else 1


def import_excel_cmd(args) -> int:
    """Import an .xlsx workbook of ingredients or dishes."""
    print(f"Reading {args.file} as {args.kind}...")
    preview = parse_workbook(args.file, args.kind)
    result = apply_preview(preview, mode=args.mode)
    print(result.get_summary())
    return 0


def reset_cmd(args) -> int:
    """Delete every ingredient, recipe and menu item."""
    if not args.yes:
        print("Refusing to reset without --yes. This deletes all data!")
        return 1
    reset_database(confirm=True)
    counts = get_catalog_counts()
    print(f"Database reset ({sum(counts.values())} entries remain)")
    return 0


COMMANDS = {
    "report": report_cmd,
    "cost-recipe": cost_recipe_cmd,
    "cost-menu-item": cost_menu_item_cmd,
    "export": export_cmd,
    "import": import_cmd,
    "import-excel": import_excel_cmd,
    "reset": reset_cmd,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recipe-costing",
        description=f"{APP_NAME} {APP_VERSION} - ingredient, recipe and menu item costing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  recipe-costing report --target 0.30
  recipe-costing cost-menu-item <menu item id>
  recipe-costing export backup.json
  recipe-costing import backup.json --mode replace
  recipe-costing import-excel dishes.xlsx --kind dishes
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    report_parser = subparsers.add_parser("report", help="Print the costing report")
    report_parser.add_argument(
        "--catalog", help="Report on a JSON document instead of the stored catalog"
    )
    report_parser.add_argument("--target", help="Target food cost ratio (e.g. 0.30 or 0,30)")
    report_parser.add_argument("-o", "--output", help="Write the report to a file")

    recipe_parser = subparsers.add_parser("cost-recipe", help="Cost breakdown of a recipe")
    recipe_parser.add_argument("id", help="Recipe ID")

    menu_parser = subparsers.add_parser(
        "cost-menu-item", help="Cost breakdown and pricing of a menu item"
    )
    menu_parser.add_argument("id", help="Menu item ID")
    menu_parser.add_argument("--target", help="Target food cost ratio (e.g. 0.30 or 0,30)")

    export_parser = subparsers.add_parser("export", help="Export the catalog as JSON")
    export_parser.add_argument(
        "file", nargs="?", help="JSON file path (default: timestamped file name)"
    )

    import_parser = subparsers.add_parser("import", help="Import a JSON catalog document")
    import_parser.add_argument("file", help="JSON file path")
    import_parser.add_argument(
        "--mode",
        choices=IMPORT_MODES,
        default="merge",
        help="'merge' (default) adds new entries, 'replace' clears the catalog first",
    )

    excel_parser = subparsers.add_parser("import-excel", help="Import an .xlsx workbook")
    excel_parser.add_argument("file", help="Workbook path")
    excel_parser.add_argument("--kind", choices=IMPORT_KINDS, required=True)
    excel_parser.add_argument(
        "--mode",
        choices=APPLY_MODES,
        default="append",
        help="'append' (default) or 'replace' the ingredients / menu items",
    )

    reset_parser = subparsers.add_parser("reset", help="Delete all data")
    reset_parser.add_argument("--yes", action="store_true", help="Confirm deleting all data")

    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if not (args.command == "report" and args.catalog):
            initialize_app_database()
        return COMMANDS[args.command](args)
    except ServiceError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"ERROR: {e}")
        return 1
    except (OSError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
