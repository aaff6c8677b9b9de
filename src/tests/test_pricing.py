"""Tests for menu item pricing helpers."""

import pytest

from recipe_costing.services.costing import (
    food_cost_ratio,
    parse_target_food_cost,
    suggested_price,
)


class TestFoodCostRatio:
    def test_ratio(self):
        assert food_cost_ratio(1.5, 5.0) == pytest.approx(0.3)

    @pytest.mark.parametrize("price", [0, -2.0, None])
    def test_no_price_gives_zero(self, price):
        assert food_cost_ratio(1.5, price) == 0.0


class TestSuggestedPrice:
    def test_price_hits_target(self):
        assert suggested_price(0.9, 0.30) == pytest.approx(3.0)

    def test_non_positive_target_gives_zero(self):
        assert suggested_price(0.9, 0) == 0.0
        assert suggested_price(0.9, -0.3) == 0.0


class TestParseTargetFoodCost:
    """Targets typed with either decimal separator."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("0.25", 0.25),
            ("0,25", 0.25),
            (" 0,4 ", 0.4),
            (0.35, 0.35),
        ],
    )
    def test_valid_values(self, value, expected):
        assert parse_target_food_cost(value) == pytest.approx(expected)

    @pytest.mark.parametrize("value", ["", "abc", "0", "-0.2", None, True, "nan"])
    def test_invalid_values_fall_back_to_default(self, value):
        assert parse_target_food_cost(value) == pytest.approx(0.30)

    def test_custom_fallback(self):
        assert parse_target_food_cost("x", default=0.28) == pytest.approx(0.28)
