"""
Domain models and value objects.

Contains curve parameters, unit conversions and the sale snapshot model.
"""

from curve_sale.core.domain.curve import CurveParameters
from curve_sale.core.domain.sale_snapshot import AllowanceEntry, SaleSnapshot
from curve_sale.core.domain.units import (
    BASE_UNITS_PER_TOKEN,
    WEI_PER_ETHER,
    ether,
    from_fixed,
    to_fixed,
    tokens,
)

__all__ = [
    # Units module
    "BASE_UNITS_PER_TOKEN",
    "WEI_PER_ETHER",
    "ether",
    "from_fixed",
    "to_fixed",
    "tokens",
    # Curve model
    "CurveParameters",
    # Snapshot model
    "SaleSnapshot",
    "AllowanceEntry",
]
