"""DTO utilities for service layer.

Formatting functions shared by reports and the CLI, so costs, percentages
and quantities print the same way everywhere. Non-finite values (an
unresolvable unit cost is NaN) format as zero.
"""

import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from ..utils.constants import UNIT_LABELS

_TRAILING_ZEROS = re.compile(r"\.?0+$")


def _is_finite(value) -> bool:
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def cost_to_string(value: Union[Decimal, float, int, str, None]) -> str:
    """
    Convert a cost value to a 2-decimal string format.

    Args:
        value: Cost value (Decimal, float, int, str, or None)

    Returns:
        String formatted as "12.34" (2 decimal places).
        Returns "0.00" if value is None or not finite.

    Examples:
        >>> cost_to_string(Decimal("12.345"))
        '12.35'
        >>> cost_to_string(12.3)
        '12.30'
        >>> cost_to_string(None)
        '0.00'
        >>> cost_to_string(float("nan"))
        '0.00'
    """
    if value is None or not _is_finite(value):
        return "0.00"

    decimal_value = Decimal(str(value))
    rounded = decimal_value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    return str(rounded)


def money(value) -> str:
    """Format an amount of money at 2 decimals."""
    return cost_to_string(value)


def pct(ratio) -> str:
    """
    Format a ratio as a percentage number at 1 decimal (0.3 -> "30.0").

    The "%" sign is left to the caller.
    """
    if ratio is None or not _is_finite(ratio):
        return "0.0"
    value = Decimal(str(ratio)) * 100
    return str(value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def num(value) -> str:
    """
    Format a quantity with up to 3 decimals, dropping trailing zeros.

    Examples:
        >>> num(1000)
        '1000'
        >>> num(0.25)
        '0.25'
        >>> num(1 / 3)
        '0.333'
    """
    if value is None or not _is_finite(value):
        return "0"
    text = str(Decimal(str(value)).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP))
    if "." in text:
        text = _TRAILING_ZEROS.sub("", text)
    if text in ("", "-0"):
        return "0"
    return text


def unit_label(unit) -> str:
    """Display label for a unit; unknown units are shown as given."""
    key = str(getattr(unit, "value", unit))
    return UNIT_LABELS.get(key, key)
