"""
Fixed-Point Safeguards — Integer Math Primitives

Модуль обеспечивает детерминированную целочисленную арифметику для curve engine:
- Fixed-point масштаб 10^18 (wei / base units токена)
- Checked-операции в домене uint256 (без молчаливого wrap-around)
- Целочисленный квадратный корень (Newton / Babylonian)
- Сравнения с абсолютной толерантностью (в base units)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Никаких float: все значения — int
2. Отрицательные операнды и выход за uint256 → ArithmeticBoundsError
3. Деление всегда floor, выполняется после всех умножений
4. Все операции детерминированы и воспроизводимы
"""

from typing import Final

# =============================================================================
# FIXED-POINT ПАРАМЕТРЫ
# =============================================================================

# Количество десятичных знаков fixed-point представления (как у ether/ERC-20)
DECIMALS: Final[int] = 18

# Масштаб: 1 токен = 10^18 base units, 1 ether = 10^18 wei
SCALE: Final[int] = 10**DECIMALS

# Верхняя граница машинного слова платформы
UINT256_MAX: Final[int] = 2**256 - 1

# Допустимая абсолютная ошибка округления при round-trip price → tokens → price
# (в base units). Ошибка вносится floor-делениями и целочисленным sqrt.
ROUNDTRIP_TOLERANCE_WEI: Final[int] = 300


# =============================================================================
# EXCEPTIONS
# =============================================================================


class ArithmeticBoundsError(ArithmeticError):
    """
    Нарушение границ целочисленного домена.

    Возникает при отрицательном операнде или результате > UINT256_MAX.
    Операция, в которой возникла ошибка, должна быть отменена целиком.
    """


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_uint(value: int, name: str, bound: int | None = UINT256_MAX) -> int:
    """
    Валидация, что значение — неотрицательный int в пределах bound.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)
        bound: Верхняя граница (None — без ограничения)

    Returns:
        value без изменений

    Raises:
        TypeError: Если value не int (bool тоже отклоняется)
        ArithmeticBoundsError: Если value < 0 или value > bound
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")

    if value < 0:
        raise ArithmeticBoundsError(f"{name} must be non-negative, got {value}")

    if bound is not None and value > bound:
        raise ArithmeticBoundsError(f"{name} exceeds uint256 bound: {value}")

    return value


# =============================================================================
# CHECKED АРИФМЕТИКА
# =============================================================================


def checked_add(a: int, b: int, bound: int | None = UINT256_MAX) -> int:
    """Сложение с проверкой переполнения."""
    return validate_uint(a + b, "sum", bound)


def checked_sub(a: int, b: int) -> int:
    """
    Вычитание с проверкой underflow.

    Raises:
        ArithmeticBoundsError: Если b > a
    """
    if b > a:
        raise ArithmeticBoundsError(f"Subtraction underflow: {a} - {b}")
    return a - b


# =============================================================================
# ЦЕЛОЧИСЛЕННЫЙ КВАДРАТНЫЙ КОРЕНЬ
# =============================================================================


def integer_sqrt(value: int) -> int:
    """
    floor(sqrt(value)) методом Ньютона (Babylonian method).

    Начальное приближение 2^ceil(bits/2) всегда >= sqrt(value), поэтому
    последовательность монотонно убывает и останавливается на floor-корне.
    Число итераций ограничено O(log bits).

    Args:
        value: Неотрицательное целое

    Returns:
        Наибольшее r, такое что r * r <= value

    Raises:
        ArithmeticBoundsError: Если value < 0

    Examples:
        >>> integer_sqrt(0)
        0
        >>> integer_sqrt(15)
        3
        >>> integer_sqrt(16)
        4
    """
    if value < 0:
        raise ArithmeticBoundsError(f"Square root of negative value: {value}")
    if value < 2:
        return value

    x = 1 << ((value.bit_length() + 1) // 2)
    while True:
        y = (x + value // x) // 2
        if y >= x:
            return x
        x = y


# =============================================================================
# СРАВНЕНИЯ С ТОЛЕРАНТНОСТЬЮ
# =============================================================================


def within_tolerance(a: int, b: int, tolerance: int = ROUNDTRIP_TOLERANCE_WEI) -> bool:
    """
    Проверка |a - b| <= tolerance (в base units).

    Examples:
        >>> within_tolerance(10**18, 10**18 - 250)
        True
        >>> within_tolerance(10**18, 10**18 - 301)
        False
    """
    if tolerance < 0:
        raise ValueError(f"tolerance must be non-negative, got {tolerance}")
    return abs(a - b) <= tolerance
