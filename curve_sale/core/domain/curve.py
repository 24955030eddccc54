"""
CurveParameters — Параметры линейной bonding curve

Immutable Pydantic модель: slope и constant в fixed-point масштабе 10^18.
Параметры фиксируются при создании и не меняются до конца жизни sale.

Инвариант: slope и constant не могут быть одновременно нулевыми
(кривая с нулевой ценой разрешала бы бесплатный mint).
"""

from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from curve_sale.core.domain.units import to_fixed
from curve_sale.core.errors import InvalidCurveError
from curve_sale.core.math.fixed_point import validate_uint
from curve_sale.core.math.linear_curve import (
    reserve_at_supply,
    spot_price,
    tokens_for_value,
    value_for_buy,
    value_for_sell,
)


class CurveParameters(BaseModel):
    """
    Параметры кривой price(x) = slope * x + constant.

    Immutable модель (frozen=True). Методы делегируют в curve engine
    (curve_sale.core.math.linear_curve), подставляя параметры кривой.
    """

    slope: int = Field(..., ge=0, description="Наклон кривой (fixed-point, 10^18)")
    constant: int = Field(
        ..., ge=0, description="Минимальная цена токена (fixed-point, 10^18)"
    )

    model_config = {"frozen": True, "strict": True}

    @model_validator(mode="after")
    def reject_zero_curve(self) -> "CurveParameters":
        """Кривая (0, 0) отклоняется до создания какого-либо состояния."""
        validate_uint(self.slope, "slope")
        validate_uint(self.constant, "constant")
        if self.slope == 0 and self.constant == 0:
            raise InvalidCurveError()
        return self

    @classmethod
    def from_decimal(
        cls, slope: Decimal | str | int, constant: Decimal | str | int
    ) -> "CurveParameters":
        """
        Создание из человекочитаемых значений.

        Examples:
            >>> CurveParameters.from_decimal("0.5", "1").slope
            500000000000000000
        """
        return cls(slope=to_fixed(slope), constant=to_fixed(constant))

    # -------------------------------------------------------------------------
    # Curve engine
    # -------------------------------------------------------------------------

    def value_for_buy(self, tokens: int, supply: int) -> int:
        return value_for_buy(tokens, supply, self.slope, self.constant)

    def value_for_sell(self, tokens: int, supply: int) -> int:
        return value_for_sell(tokens, supply, self.slope, self.constant)

    def tokens_for_value(self, value: int, supply: int) -> int:
        return tokens_for_value(value, supply, self.slope, self.constant)

    def reserve_at_supply(self, supply: int) -> int:
        return reserve_at_supply(supply, self.slope, self.constant)

    def spot_price(self, supply: int) -> int:
        return spot_price(supply, self.slope, self.constant)
