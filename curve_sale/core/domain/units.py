"""
Units — конверсия между человекочитаемыми и fixed-point единицами

Единственный допустимый способ преобразований между:
- ether (Decimal/str) ↔ wei (int)
- токены (Decimal/str) ↔ base units (int)
- slope/constant кривой (Decimal/str) ↔ fixed-point (int)

ЗАПРЕЩЕНО передавать float в fixed-point домен: двоичное представление
float теряет точность уже на 10^-17.
"""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Final

from curve_sale.core.math.fixed_point import DECIMALS, SCALE


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

WEI_PER_ETHER: Final[int] = SCALE

BASE_UNITS_PER_TOKEN: Final[int] = SCALE


# =============================================================================
# БАЗОВЫЕ КОНВЕРТЕРЫ
# =============================================================================


def to_fixed(amount: Decimal | str | int, decimals: int = DECIMALS) -> int:
    """
    Конверсия: десятичное значение → fixed-point int.

    Аналог parseUnits: "3.5" → 3_500_000_000_000_000_000 (decimals=18).

    Args:
        amount: Значение (Decimal, строка или int); float не принимается
        decimals: Количество десятичных знаков

    Returns:
        Fixed-point значение

    Raises:
        TypeError: Если amount — float
        ValueError: Если значение отрицательное, не число, или содержит
            больше знаков после запятой, чем decimals
    """
    if isinstance(amount, float):
        raise TypeError("float amounts are not accepted, use str or Decimal")

    try:
        value = Decimal(amount)
    except InvalidOperation:
        raise ValueError(f"Not a decimal amount: {amount!r}")

    if not value.is_finite():
        raise ValueError(f"Amount must be finite, got {amount!r}")
    if value < 0:
        raise ValueError(f"Amount must be non-negative, got {amount!r}")

    # Точность контекста покрывает все цифры: scaleb не округляет
    with localcontext() as ctx:
        ctx.prec = len(value.as_tuple().digits) + decimals
        scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {amount!r} has more than {decimals} decimal places")

    return int(scaled)


def from_fixed(amount: int, decimals: int = DECIMALS) -> Decimal:
    """
    Конверсия: fixed-point int → Decimal (аналог formatUnits).

    Examples:
        >>> from_fixed(3_500_000_000_000_000_000)
        Decimal('3.5')
    """
    value = Decimal(amount)
    with localcontext() as ctx:
        ctx.prec = max(len(value.as_tuple().digits), ctx.prec)
        return value.scaleb(-decimals).normalize()


def ether(amount: Decimal | str | int) -> int:
    """ether → wei."""
    return to_fixed(amount)


def tokens(amount: Decimal | str | int) -> int:
    """Целые токены → base units."""
    return to_fixed(amount)
