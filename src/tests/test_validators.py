"""Tests for input validation and lenient spreadsheet parsing."""

import pytest

from recipe_costing.models.enums import Unit
from recipe_costing.utils.validators import (
    normalize_unit,
    parse_number,
    sanitize_string,
    validate_ingredient_data,
    validate_line_data,
    validate_menu_item_data,
    validate_recipe_data,
    validate_unit,
)


class TestValidateIngredientData:
    def test_valid_ingredient(self):
        is_valid, errors = validate_ingredient_data(
            {"name": "Flour", "unit": "g", "pack_size": 1000, "pack_cost": 1.2}
        )
        assert is_valid
        assert errors == []

    def test_missing_fields_reported_together(self):
        is_valid, errors = validate_ingredient_data({"name": " ", "unit": "kg", "pack_size": 0})
        assert not is_valid
        assert len(errors) == 4
        assert any("Ingredient Name" in error for error in errors)
        assert any("Unit" in error for error in errors)
        assert any("Pack Size" in error for error in errors)
        assert any("Pack Cost" in error for error in errors)

    def test_free_pack_is_allowed(self):
        is_valid, _ = validate_ingredient_data(
            {"name": "Water", "unit": "ml", "pack_size": 1, "pack_cost": 0}
        )
        assert is_valid

    def test_non_finite_numbers_rejected(self):
        is_valid, errors = validate_ingredient_data(
            {"name": "X", "unit": "g", "pack_size": float("inf"), "pack_cost": float("nan")}
        )
        assert not is_valid
        assert len(errors) == 2


class TestValidateRecipeData:
    def test_valid_recipe(self):
        is_valid, _ = validate_recipe_data(
            {"name": "Dough", "category": "Base", "yield_qty": 500, "yield_unit": Unit.GRAM}
        )
        assert is_valid

    def test_unknown_category(self):
        is_valid, errors = validate_recipe_data(
            {"name": "Dough", "category": "Dessert", "yield_qty": 500, "yield_unit": "g"}
        )
        assert not is_valid
        assert "Category" in errors[0]

    def test_yield_must_be_positive(self):
        is_valid, errors = validate_recipe_data(
            {"name": "Dough", "category": "Base", "yield_qty": 0, "yield_unit": "g"}
        )
        assert not is_valid
        assert "Yield Quantity" in errors[0]


class TestValidateMenuItemData:
    def test_price_defaults_to_zero(self):
        is_valid, _ = validate_menu_item_data({"name": "Soup", "servings": 4})
        assert is_valid

    def test_negative_price(self):
        is_valid, errors = validate_menu_item_data({"name": "Soup", "servings": 4, "price": -1})
        assert not is_valid
        assert "Price" in errors[0]


class TestValidateLineData:
    def test_ingredient_line(self):
        is_valid, _ = validate_line_data({"ingredient_id": "ing_1", "qty": 10, "unit": "g"})
        assert is_valid

    def test_needs_exactly_one_reference(self):
        _, errors = validate_line_data(
            {"ingredient_id": "ing_1", "recipe_id": "rec_1", "qty": 1, "unit": "g"}, 2
        )
        assert errors == ["Line 2: Must reference exactly one of ingredient_id or recipe_id"]

        _, errors = validate_line_data({"qty": 1, "unit": "g"})
        assert len(errors) == 1

    def test_negative_quantity(self):
        is_valid, errors = validate_line_data({"recipe_id": "rec_1", "qty": -1, "unit": "g"})
        assert not is_valid
        assert "Quantity" in errors[0]


def test_validate_unit_accepts_enum_members():
    assert validate_unit(Unit.PIECE) == (True, "")
    assert validate_unit("lb")[0] is False


def test_sanitize_string():
    assert sanitize_string("  Flour ") == "Flour"
    assert sanitize_string("   ") is None
    assert sanitize_string(None) is None


class TestParseNumber:
    """Lenient numbers from spreadsheet cells."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (2.5, 2.5),
            (3, 3.0),
            ("2,50 €", 2.5),
            ("€ 1.75", 1.75),
            ("1000 g", 1000.0),
            ("-4", -4.0),
        ],
    )
    def test_parses(self, value, expected):
        assert parse_number(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", [None, "", "n/a", True, float("nan"), [1]])
    def test_default(self, value):
        assert parse_number(value) == 0.0
        assert parse_number(value, default=1.0) == 1.0


class TestNormalizeUnit:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("ml", "ml"),
            ("ML", "ml"),
            ("pc", "pc"),
            ("τεμ", "pc"),
            ("τμχ.", "pc"),
            ("g", "g"),
            ("kg", "g"),
            ("", "g"),
            (None, "g"),
        ],
    )
    def test_maps_to_known_units(self, text, expected):
        assert normalize_unit(text) == expected
