"""
Linear Curve — Bonding Curve Pricing Engine

Модуль вычисляет цены линейной bonding curve в fixed-point арифметике:
- Reserve: интеграл кривой от 0 до supply (collateral, требуемый кривой)
- Прямой интеграл: стоимость покупки dx токенов при supply s
- Обратная функция: количество токенов за value при supply s
- Интеграл продажи: value, возвращаемое при сжигании dx токенов

ФОРМУЛЫ (x — в целых токенах, цена — в ether):
    price(x) = slope * x + constant

    value(dx, s) = Σ price(k), k = s+1 .. s+dx
                 = slope * (dx*s + dx*(dx+1)/2) + constant * dx

    В base units (s, slope, constant масштабированы на SCALE)
    "+1" соответствует одному целому токену, т.е. +SCALE:

    N(s)         = slope*s*(s + SCALE) + 2*SCALE*constant*s
    reserve(s)   = N(s) // (2*SCALE²)
    value(dx, s) = reserve(s + dx) - reserve(s)

    Обратная функция — наибольший y = s + dx с reserve(y) <= reserve(s) + v,
    т.е. N(y) <= T, T = (v + reserve(s) + 1) * 2*SCALE² - 1:
        slope*y² + b*y - T <= 0,  b = slope*SCALE + 2*constant*SCALE
        y = (isqrt(b² + 4*slope*T) - b) // (2*slope)

    При slope == 0: y = T // (2*SCALE*constant)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Все умножения выполняются до единственного floor-деления
2. Результаты проверяются на границу uint256 (ArithmeticBoundsError)
3. Функции чистые: зависят только от аргументов
4. Стоимость диапазона — разность reserve, поэтому сумма цен по пути
   mint/burn телескопируется: held value никогда не меньше reserve(supply)
5. value_for_sell(dx, s) == value_for_buy(dx, s - dx): продажа оплачивается
   ровно тем участком кривой, который удаляется из supply
"""

import logging

from curve_sale.core.math.fixed_point import (
    SCALE,
    UINT256_MAX,
    ArithmeticBoundsError,
    integer_sqrt,
    validate_uint,
)

logger = logging.getLogger(__name__)

# Общий знаменатель slope- и constant-частей интеграла
_DENOMINATOR = 2 * SCALE * SCALE


# =============================================================================
# ВАЛИДАЦИЯ ПАРАМЕТРОВ
# =============================================================================


def _validate_curve(slope: int, constant: int) -> None:
    validate_uint(slope, "slope")
    validate_uint(constant, "constant")
    if slope == 0 and constant == 0:
        raise ValueError("Invalid curve: slope and constant are both zero")


def _integral_numerator(supply: int, slope: int, constant: int) -> int:
    return slope * supply * (supply + SCALE) + 2 * SCALE * constant * supply


# =============================================================================
# RESERVE И ПРЯМОЙ ИНТЕГРАЛ
# =============================================================================


def reserve_at_supply(supply: int, slope: int, constant: int) -> int:
    """
    Collateral, требуемый кривой при данном supply: value(supply, 0).

    Используется как эталон solvency для held value.

    Raises:
        ArithmeticBoundsError: Если supply отрицательный или результат > uint256
    """
    _validate_curve(slope, constant)
    validate_uint(supply, "supply")

    result = _integral_numerator(supply, slope, constant) // _DENOMINATOR
    if result > UINT256_MAX:
        raise ArithmeticBoundsError(f"Curve value exceeds uint256 bound (supply={supply})")
    return result


def value_for_buy(tokens: int, supply: int, slope: int, constant: int) -> int:
    """
    Стоимость (в wei) покупки tokens base units при текущем supply.

    Args:
        tokens: Количество покупаемых токенов (base units)
        supply: Текущий supply (base units)
        slope: Наклон кривой (fixed-point, SCALE)
        constant: Минимальная цена токена (fixed-point, SCALE)

    Returns:
        reserve(supply + tokens) - reserve(supply), в wei

    Raises:
        ArithmeticBoundsError: Если аргументы отрицательные или результат > uint256

    Examples:
        >>> value_for_buy(3 * SCALE, 0, SCALE, 0) == 6 * SCALE
        True
        >>> value_for_buy(3 * SCALE, 3 * SCALE, 2 * SCALE, SCALE) == 33 * SCALE
        True
    """
    validate_uint(tokens, "tokens")
    validate_uint(supply, "supply")
    return reserve_at_supply(supply + tokens, slope, constant) - reserve_at_supply(
        supply, slope, constant
    )


def value_for_sell(tokens: int, supply: int, slope: int, constant: int) -> int:
    """
    Value (в wei), возвращаемое при сжигании tokens при текущем supply.

    Формула: value_for_buy(tokens, supply - tokens). После burn supply станет
    supply - tokens, т.е. оплачивается удаляемый участок кривой.

    Raises:
        ValueError: Если tokens > supply
    """
    validate_uint(tokens, "tokens")
    validate_uint(supply, "supply")
    if tokens > supply:
        raise ValueError(f"Cannot sell {tokens} tokens, supply is {supply}")
    return value_for_buy(tokens, supply - tokens, slope, constant)


def spot_price(supply: int, slope: int, constant: int) -> int:
    """Цена следующего целого токена при текущем supply (в wei)."""
    return value_for_buy(SCALE, supply, slope, constant)


# =============================================================================
# ОБРАТНАЯ ФУНКЦИЯ
# =============================================================================


def tokens_for_value(value: int, supply: int, slope: int, constant: int) -> int:
    """
    Количество токенов (base units), которое можно купить за value wei.

    Наибольшее dx, для которого value_for_buy(dx, supply) <= value: излишек
    value никогда не конвертируется в токены. Floor isqrt перед внешним
    floor-делением даёт точный целочисленный максимум.

    Args:
        value: Вносимая сумма (wei)
        supply: Текущий supply (base units)
        slope: Наклон кривой (fixed-point, SCALE)
        constant: Минимальная цена токена (fixed-point, SCALE)

    Returns:
        Количество токенов в base units (floor)

    Examples:
        >>> tokens_for_value(3 * SCALE, 0, SCALE, 0) == 2 * SCALE
        True
        >>> tokens_for_value(6 * SCALE, 0, 0, SCALE) == 6 * SCALE
        True
    """
    validate_uint(value, "value")
    reserve = reserve_at_supply(supply, slope, constant)

    # Наибольший допустимый числитель интеграла для нового supply
    target = (value + reserve + 1) * _DENOMINATOR - 1

    if slope == 0:
        # constant > 0 гарантирован _validate_curve
        new_supply = target // (2 * SCALE * constant)
    else:
        b = slope * SCALE + 2 * constant * SCALE
        discriminant = b * b + 4 * slope * target
        new_supply = (integer_sqrt(discriminant) - b) // (2 * slope)

    result = new_supply - supply
    if result > UINT256_MAX:
        raise ArithmeticBoundsError(
            f"Token amount exceeds uint256 bound (value={value}, supply={supply})"
        )

    logger.debug(
        "tokens_for_value: value=%d supply=%d slope=%d constant=%d -> %d",
        value,
        supply,
        slope,
        constant,
        result,
    )
    return result
