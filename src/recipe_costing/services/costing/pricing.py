"""
Pricing helpers for menu items.

Transaction boundary: Pure computation (no database access).
"""

import math
from typing import Any, Optional

from recipe_costing.utils.constants import DEFAULT_TARGET_FOOD_COST


def food_cost_ratio(cost_per_serving: float, price: float) -> float:
    """
    Share of the selling price spent on ingredients.

    Args:
        cost_per_serving: Cost of one serving
        price: Selling price of one serving

    Returns:
        cost_per_serving / price, or 0.0 when price is not positive

    Examples:
        >>> food_cost_ratio(1.5, 5.0)
        0.3
        >>> food_cost_ratio(1.5, 0)
        0.0
    """
    if not price or price <= 0:
        return 0.0
    return cost_per_serving / price


def suggested_price(cost_per_serving: float, target_food_cost: float) -> float:
    """
    Selling price that would hit the target food cost ratio.

    Args:
        cost_per_serving: Cost of one serving
        target_food_cost: Desired food cost ratio (e.g. 0.30)

    Returns:
        cost_per_serving / target_food_cost, or 0.0 when the target is not positive
    """
    if not target_food_cost or target_food_cost <= 0:
        return 0.0
    return cost_per_serving / target_food_cost


def parse_target_food_cost(value: Any, default: Optional[float] = None) -> float:
    """
    Parse a target food cost typed by a person ("0,25" or "0.25").

    Args:
        value: Text or number
        default: Fallback (DEFAULT_TARGET_FOOD_COST if None)

    Returns:
        Parsed positive ratio, or the fallback when unparsable or not positive
    """
    fallback = DEFAULT_TARGET_FOOD_COST if default is None else default
    if value is None or isinstance(value, bool):
        return fallback
    try:
        parsed = float(str(value).strip().replace(",", "."))
    except ValueError:
        return fallback
    if not math.isfinite(parsed) or parsed <= 0:
        return fallback
    return parsed
