"""
SaleSnapshot — Модель снапшота состояния token sale

Immutable Pydantic модель, представляющая снапшот ledger'а sale.
Полная совместимость с JSON Schema (core/contracts/schema/sale_snapshot.json).
"""

from pydantic import BaseModel, Field, model_validator

from .curve import CurveParameters


# =============================================================================
# NESTED MODELS
# =============================================================================


class AllowanceEntry(BaseModel):
    """Allowance (owner, spender) → оставшаяся сумма."""

    owner: str = Field(..., min_length=1, description="Владелец токенов")
    spender: str = Field(..., min_length=1, description="Получатель права на списание")
    amount: int = Field(..., ge=0, description="Оставшийся лимит (base units)")

    model_config = {"frozen": True}


# =============================================================================
# SALE SNAPSHOT MODEL
# =============================================================================


class SaleSnapshot(BaseModel):
    """
    Снапшот состояния sale.

    Immutable модель (frozen=True). Содержит:
    - Метаданные токена (address, name, symbol, decimals)
    - Параметры кривой (curve)
    - Supply и held value
    - Балансы и allowances (только ненулевые записи)
    """

    # Метаданные
    address: str = Field(..., min_length=1, description="Адрес sale")
    name: str = Field(..., min_length=1, description="Имя токена")
    symbol: str = Field(..., min_length=1, max_length=11, description="Тикер токена")
    decimals: int = Field(..., ge=0, le=36, description="Количество десятичных знаков")

    # Кривая
    curve: CurveParameters = Field(..., description="Параметры кривой")

    # Состояние ledger'а
    total_supply: int = Field(..., ge=0, description="Supply (base units)")
    held_value: int = Field(..., ge=0, description="Collateral sale (wei)")
    balances: dict[str, int] = Field(
        default_factory=dict, description="Балансы держателей (base units)"
    )
    allowances: list[AllowanceEntry] = Field(
        default_factory=list, description="Ненулевые allowances"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_balance_conservation(self) -> "SaleSnapshot":
        """Сумма балансов обязана совпадать с supply."""
        total = sum(self.balances.values())
        if total != self.total_supply:
            raise ValueError(
                f"Sum of balances {total} does not match total supply {self.total_supply}"
            )
        return self
