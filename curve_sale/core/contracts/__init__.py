"""
Contract Validation Module

Модуль для валидации JSON контрактов curve_sale.
"""

from .validators import (
    ContractValidator,
    SaleSnapshotValidator,
    SchemaLoader,
    validate_sale_snapshot,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "SaleSnapshotValidator",
    # Functions
    "validate_sale_snapshot",
]
