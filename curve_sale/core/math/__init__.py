"""
Core math modules для curve_sale

Целочисленные примитивы и pricing engine линейной bonding curve.
"""

# Fixed-point primitives
from curve_sale.core.math.fixed_point import (
    # Constants
    DECIMALS,
    ROUNDTRIP_TOLERANCE_WEI,
    SCALE,
    UINT256_MAX,
    # Exceptions
    ArithmeticBoundsError,
    # Functions
    checked_add,
    checked_sub,
    integer_sqrt,
    validate_uint,
    within_tolerance,
)

# Linear curve engine
from curve_sale.core.math.linear_curve import (
    reserve_at_supply,
    spot_price,
    tokens_for_value,
    value_for_buy,
    value_for_sell,
)

__all__ = [
    # Fixed-point — Constants
    "DECIMALS",
    "ROUNDTRIP_TOLERANCE_WEI",
    "SCALE",
    "UINT256_MAX",
    # Fixed-point — Exceptions
    "ArithmeticBoundsError",
    # Fixed-point — Functions
    "checked_add",
    "checked_sub",
    "integer_sqrt",
    "validate_uint",
    "within_tolerance",
    # Linear curve — Functions
    "reserve_at_supply",
    "spot_price",
    "tokens_for_value",
    "value_for_buy",
    "value_for_sell",
]
