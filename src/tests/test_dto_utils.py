"""Tests for DTO utility functions."""

from decimal import Decimal

from recipe_costing.models.enums import Unit
from recipe_costing.services.dto_utils import cost_to_string, money, num, pct, unit_label


class TestCostToString:
    """Tests for cost_to_string function."""

    def test_none_returns_zero(self):
        """None value returns '0.00'."""
        assert cost_to_string(None) == "0.00"

    def test_decimal_rounding(self):
        """Decimal values are rounded to 2 places using ROUND_HALF_UP."""
        assert cost_to_string(Decimal("12.345")) == "12.35"
        assert cost_to_string(Decimal("12.344")) == "12.34"

    def test_float_value(self):
        """Float values are formatted correctly."""
        assert cost_to_string(12.3) == "12.30"
        assert cost_to_string(0.1 + 0.2) == "0.30"

    def test_int_value(self):
        assert cost_to_string(12) == "12.00"

    def test_non_finite_returns_zero(self):
        """NaN (unresolvable unit cost) and infinities format as zero."""
        assert cost_to_string(float("nan")) == "0.00"
        assert cost_to_string(float("inf")) == "0.00"

    def test_unparsable_string_returns_zero(self):
        assert cost_to_string("abc") == "0.00"


class TestMoney:
    def test_two_decimals(self):
        assert money(2) == "2.00"
        assert money(0.005) == "0.01"


class TestPct:
    """Percentages at 1 decimal without the % sign."""

    def test_ratio_to_percent(self):
        assert pct(0.3) == "30.0"
        assert pct(0.1234) == "12.3"
        assert pct(1) == "100.0"

    def test_non_finite_returns_zero(self):
        assert pct(float("nan")) == "0.0"
        assert pct(None) == "0.0"


class TestNum:
    """Quantities with up to 3 decimals."""

    def test_integers_have_no_decimals(self):
        assert num(1000) == "1000"
        assert num(250.0) == "250"

    def test_trailing_zeros_dropped(self):
        assert num(0.25) == "0.25"
        assert num(10.5) == "10.5"

    def test_rounded_to_three_decimals(self):
        assert num(1 / 3) == "0.333"
        assert num(0.0004) == "0"

    def test_non_finite_returns_zero(self):
        assert num(float("nan")) == "0"


class TestUnitLabel:
    def test_enum_and_string(self):
        assert unit_label(Unit.GRAM) == "g"
        assert unit_label("ml") == "ml"

    def test_unknown_unit_shown_as_given(self):
        assert unit_label("kg") == "kg"
