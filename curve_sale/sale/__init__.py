"""Sale — ledger state machine для mint/burn по bonding curve.

- receive value → mint
- transfer токенов на адрес sale → burn + выплата
- Atomic sections с откатом состояния и native value
"""

from .ledger import (
    DEFAULT_SALE_ADDRESS,
    ZERO_ADDRESS,
    InvariantCheckResult,
    LedgerState,
    SaleConfig,
    TokenSale,
)
from .value_transport import ValueTransport

__all__ = [
    "DEFAULT_SALE_ADDRESS",
    "ZERO_ADDRESS",
    "InvariantCheckResult",
    "LedgerState",
    "SaleConfig",
    "TokenSale",
    "ValueTransport",
]
