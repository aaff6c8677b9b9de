"""Tests for importing ingredients and dishes from .xlsx workbooks."""

import pytest
from openpyxl import Workbook

from recipe_costing.models.enums import Unit
from recipe_costing.services import catalog_service, menu_item_service
from recipe_costing.services.exceptions import SpreadsheetImportError
from recipe_costing.services.spreadsheet_import_service import (
    apply_preview,
    parse_dishes_workbook,
    parse_ingredients_workbook,
    parse_workbook,
)


def write_workbook(path, rows):
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    workbook.save(path)
    return path


@pytest.fixture
def ingredients_xlsx(tmp_path):
    return write_workbook(
        tmp_path / "ingredients.xlsx",
        [
            ["Name", "Unit", "Pack Size", "Pack Cost", "Supplier"],
            ["Flour", "g", 1000, 1.2, "Mill Co"],
            ["Milk", "ml", "1000", "1,00 €", None],
            [None, "g", 10, 1],
            [None, None, None, None, None],
            ["Saffron", "g", 0, 8],
            ["Eggs", "τεμ", 12, 3],
        ],
    )


@pytest.fixture
def dishes_xlsx(tmp_path):
    return write_workbook(
        tmp_path / "dishes.xlsx",
        [
            ["Dish", "Ingredient", "Qty", "Unit", "Unit Cost", "Price", "Servings"],
            ["Salad", "Tomato", 200, "g", 0.004, 6.5, 1],
            ["Salad", "Feta", 50, "g", 0.012, None, None],
            ["salad", "tomato", 100, "g", 0.005, None, None],
            ["Soup", "Tomato", 300, "g", None, 4, 2],
            ["Soup", None, 10, "g", 1, None, None],
            [None, "Salt", 1, "g", 0.001, None, None],
        ],
    )


class TestParseIngredients:
    def test_rows_become_ingredients(self, ingredients_xlsx):
        preview = parse_ingredients_workbook(ingredients_xlsx)

        assert preview.kind == "ingredients"
        assert preview.source_label == "ingredients.xlsx"
        assert [i.name for i in preview.ingredients] == ["Flour", "Milk", "Saffron", "Eggs"]

        flour, milk, saffron, eggs = preview.ingredients
        assert flour.supplier == "Mill Co"
        assert milk.unit is Unit.MILLILITER
        assert milk.pack_cost == pytest.approx(1.0)
        assert milk.supplier is None
        assert saffron.pack_size == 0.0
        assert eggs.unit is Unit.PIECE
        assert all(i.id.startswith("ing_") for i in preview.ingredients)

    def test_warnings_use_row_numbers(self, ingredients_xlsx):
        preview = parse_ingredients_workbook(ingredients_xlsx)

        assert preview.warnings == [
            "Row 4: missing ingredient name",
            "Row 6: unknown pack size, recorded as 0",
        ]

    def test_alternative_headers(self, tmp_path):
        path = write_workbook(
            tmp_path / "greek.xlsx",
            [["Όνομα", "Μονάδα", "Συσκευασία", "Κόστος"], ["Ελαιόλαδο", "ml", 1000, 9.5]],
        )

        preview = parse_ingredients_workbook(path)

        assert preview.ingredients[0].name == "Ελαιόλαδο"
        assert preview.ingredients[0].pack_cost == pytest.approx(9.5)

    def test_no_rows(self, tmp_path):
        path = write_workbook(tmp_path / "empty.xlsx", [["Name", "Unit"]])
        with pytest.raises(SpreadsheetImportError):
            parse_ingredients_workbook(path)

    def test_not_a_workbook(self, tmp_path):
        path = tmp_path / "notes.xlsx"
        path.write_text("hello", encoding="utf-8")
        with pytest.raises(SpreadsheetImportError):
            parse_ingredients_workbook(path)


class TestParseDishes:
    def test_dishes_and_ingredients_deduplicated(self, dishes_xlsx):
        preview = parse_dishes_workbook(dishes_xlsx)

        assert [m.name for m in preview.menu_items] == ["Salad", "Soup"]
        assert [i.name for i in preview.ingredients] == ["Tomato", "Feta"]

    def test_dish_lines_and_prices(self, dishes_xlsx):
        preview = parse_dishes_workbook(dishes_xlsx)
        salad, soup = preview.menu_items
        tomato = preview.ingredients[0]

        assert salad.price == pytest.approx(6.5)
        assert salad.servings == pytest.approx(1)
        assert len(salad.lines) == 3
        assert salad.lines[2].ref.ref_id == tomato.id
        assert soup.servings == pytest.approx(2)
        assert soup.lines[0].qty == pytest.approx(300)

    def test_ingredient_cost_is_unit_cost(self, dishes_xlsx):
        preview = parse_dishes_workbook(dishes_xlsx)
        tomato, feta = preview.ingredients

        # The later, different cost wins
        assert tomato.pack_size == pytest.approx(1)
        assert tomato.pack_cost == pytest.approx(0.005)
        assert feta.pack_cost == pytest.approx(0.012)

    def test_warnings(self, dishes_xlsx):
        preview = parse_dishes_workbook(dishes_xlsx)

        assert preview.warnings == [
            "Row 6: missing ingredient name for dish Soup",
            "Row 7: missing dish name",
        ]

    def test_ingredient_without_cost(self, tmp_path):
        path = write_workbook(
            tmp_path / "d.xlsx", [["Dish", "Ingredient", "Qty"], ["Tea", "Water", 250]]
        )

        preview = parse_dishes_workbook(path)

        water = preview.ingredients[0]
        assert water.pack_size == 0.0
        assert water.pack_cost == 0.0
        assert water.unit is Unit.GRAM

    def test_no_dishes(self, tmp_path):
        path = write_workbook(tmp_path / "d.xlsx", [["Dish", "Ingredient"], [None, "Salt"]])
        with pytest.raises(SpreadsheetImportError):
            parse_dishes_workbook(path)


def test_parse_workbook_unknown_kind(tmp_path):
    with pytest.raises(ValueError):
        parse_workbook(tmp_path / "x.xlsx", "recipes")


class TestApplyPreview:
    def test_append_ingredients(self, test_db, flour, ingredients_xlsx):
        preview = parse_workbook(ingredients_xlsx, "ingredients")

        result = apply_preview(preview)

        assert result.successful == 4
        assert len(result.warnings) == 2
        assert catalog_service.get_catalog_counts()["ingredients"] == 5

    def test_replace_ingredients(self, test_db, flour, ingredients_xlsx):
        apply_preview(parse_ingredients_workbook(ingredients_xlsx), mode="replace")

        names = sorted(i.name for i in catalog_service.load_catalog().ingredients)
        assert names == ["Eggs", "Flour", "Milk", "Saffron"]

    def test_dishes_are_costed(self, test_db, dishes_xlsx):
        apply_preview(parse_dishes_workbook(dishes_xlsx))

        catalog = catalog_service.load_catalog()
        salad = next(m for m in catalog.menu_items if m.name == "Salad")
        result = menu_item_service.calculate_menu_item_cost(salad.id)

        # 300 g tomato at 0.005 + 50 g feta at 0.012
        assert result.total_cost == pytest.approx(1.5 + 0.6)

    def test_replace_dishes_keeps_ingredients(self, test_db, pancakes, dishes_xlsx):
        result = apply_preview(parse_dishes_workbook(dishes_xlsx), mode="replace")

        counts = catalog_service.get_catalog_counts()
        assert counts["menu_items"] == 2
        assert counts["ingredients"] == 5
        assert counts["recipes"] == 1
        assert result.entity_counts["menu_items"]["imported"] == 2

    def test_invalid_mode(self, test_db, ingredients_xlsx):
        with pytest.raises(ValueError):
            apply_preview(parse_ingredients_workbook(ingredients_xlsx), mode="merge")
