"""
Decimal Math — целочисленная арифметика с фиксированной точкой

Модуль заменяет float-арифметику точной целочисленной арифметикой
с неявным масштабом:
- standard: 1e18 (публичный ввод/вывод всех компонентов)
- precise: 1e27 (внутренние трансцендентные вычисления)

Операции:
- Масштабированное умножение/деление (с усечением и с округлением half-up)
- Конверсия standard ↔ precise на границах компонентов
- Точный разбор/форматирование десятичных строк (без float)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Никакой арифметики с плавающей точкой
2. Выход за пределы 256-битного слова → DomainError (никогда не оборачивается)
3. Деление на ноль → DomainError
4. Усекающие операции делят с усечением к нулю (как исходная 256-битная
   среда), а не к минус бесконечности, как оператор // в Python;
   округляющие операции дают floor(v + 1/2) для любого знака
5. Все операции детерминированы и воспроизводимы бит-в-бит
"""

import re
from dataclasses import dataclass
from typing import Final, Union

# =============================================================================
# МАСШТАБЫ И ГРАНИЦЫ СЛОВА
# =============================================================================

# Standard-масштаб: публичный ввод/вывод
UNIT: Final[int] = 10**18

# Precise-масштаб: внутренние вычисления ln/exp/CDF
PRECISE_UNIT: Final[int] = 10**27

# Границы 256-битного слова исходной среды исполнения
UINT256_MAX: Final[int] = 2**256 - 1
INT256_MIN: Final[int] = -(2**255)
INT256_MAX: Final[int] = 2**255 - 1

# Потолок и пол exp() в целых единицах масштаба
MAX_EXP_UNITS_DEFAULT: Final[int] = 100
MIN_EXP_UNITS_DEFAULT: Final[int] = -63

_FIXED_PATTERN = re.compile(r"^([+-])?(\d*)(?:\.(\d*))?$", re.ASCII)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class DomainError(ArithmeticError):
    """
    Вход вне области определения функции.

    Примеры: деление на ноль, произведение за пределами 256-битного слова,
    ln от неположительного аргумента, exp выше потолка.

    Никогда не подменяется значением по умолчанию: подмена здесь
    искажает цену опциона.
    """


# =============================================================================
# КОНФИГУРАЦИЯ ТОЧНОСТИ
# =============================================================================


def _is_power_of_ten(value: int) -> bool:
    if value < 1:
        return False
    while value % 10 == 0:
        value //= 10
    return value == 1


@dataclass(frozen=True)
class PrecisionConfig:
    """Конфигурация масштабов фиксированной точки.

    Передаётся в движки при создании вместо глобальных констант,
    что позволяет тестировать вычисления на разных точностях.

    - unit: standard-масштаб (default 1e18)
    - precise_unit: precise-масштаб (default 1e27)
    - min_exp_units: ниже этого аргумента exp() возвращает ровно 0
    - max_exp_units: выше этого аргумента exp() сигнализирует переполнение
    """
    unit: int = UNIT
    precise_unit: int = PRECISE_UNIT
    min_exp_units: int = MIN_EXP_UNITS_DEFAULT
    max_exp_units: int = MAX_EXP_UNITS_DEFAULT

    def __post_init__(self) -> None:
        if not _is_power_of_ten(self.unit) or self.unit < 10:
            raise ValueError(f"unit must be a power of ten >= 10, got {self.unit}")
        if not _is_power_of_ten(self.precise_unit) or self.precise_unit < self.unit:
            raise ValueError(
                f"precise_unit must be a power of ten >= unit, got {self.precise_unit}"
            )
        if self.max_exp_units <= 0:
            raise ValueError(f"max_exp_units must be positive, got {self.max_exp_units}")
        if self.min_exp_units >= 0:
            raise ValueError(f"min_exp_units must be negative, got {self.min_exp_units}")

    @property
    def conversion_factor(self) -> int:
        """Множитель standard → precise (default 1e9)."""
        return self.precise_unit // self.unit


DEFAULT_PRECISION: Final[PrecisionConfig] = PrecisionConfig()


# =============================================================================
# ЦЕЛОЧИСЛЕННЫЕ ПРИМИТИВЫ
# =============================================================================


def check_word(value: int) -> int:
    """
    Проверка, что промежуточный результат помещается в 256-битное слово.

    Отрицательные значения должны помещаться в int256, неотрицательные — в uint256.

    Raises:
        DomainError: если значение вне допустимого диапазона
    """
    if value < INT256_MIN or value > UINT256_MAX:
        raise DomainError(f"Fixed-point overflow: {value.bit_length()}-bit intermediate")
    return value


def div_trunc(numerator: int, denominator: int) -> int:
    """
    Целочисленное деление с усечением к нулю.

    Examples:
        >>> div_trunc(7, 2)
        3
        >>> div_trunc(-7, 2)
        -3
    """
    if denominator == 0:
        raise DomainError("Division by zero")
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def _round_tenths(quotient_times_ten: int) -> int:
    # Half-up по дополнительной десятичной цифре: floor(v + 1/2)
    return (quotient_times_ten + 5) // 10


# =============================================================================
# МАСШТАБИРОВАННОЕ УМНОЖЕНИЕ И ДЕЛЕНИЕ
# =============================================================================


def multiply_decimal(x: int, y: int, unit: int = UNIT) -> int:
    """
    Масштабированное умножение с усечением: (x * y) / unit.

    Args:
        x: Первый множитель (масштаб unit)
        y: Второй множитель (масштаб unit)
        unit: Масштаб (default: UNIT)

    Returns:
        Произведение в масштабе unit

    Raises:
        DomainError: если x * y не помещается в 256-битное слово

    Examples:
        >>> multiply_decimal(2 * UNIT, 3 * UNIT)
        6000000000000000000
    """
    return div_trunc(check_word(x * y), unit)


def multiply_decimal_round(x: int, y: int, unit: int = UNIT) -> int:
    """
    Масштабированное умножение с округлением half-up: (x * y) / unit.

    Examples:
        >>> multiply_decimal_round(15, 10**17)  # 1.5e-18 → 2e-18
        2
        >>> multiply_decimal_round(14, 10**17)
        1
    """
    return _round_tenths(check_word(x * y) // (unit // 10))


def divide_decimal(x: int, y: int, unit: int = UNIT) -> int:
    """
    Масштабированное деление с усечением: (x * unit) / y.

    Raises:
        DomainError: при y == 0 или переполнении x * unit
    """
    return div_trunc(check_word(x * unit), y)


def divide_decimal_round(x: int, y: int, unit: int = UNIT) -> int:
    """
    Масштабированное деление с округлением half-up: (x * unit) / y.

    Examples:
        >>> divide_decimal_round(2 * UNIT, 3 * UNIT)
        666666666666666667
        >>> divide_decimal(2 * UNIT, 3 * UNIT)
        666666666666666666
    """
    if y == 0:
        raise DomainError("Division by zero")
    return _round_tenths(check_word(x * unit * 10) // y)


# =============================================================================
# КОНВЕРСИЯ МАСШТАБОВ
# =============================================================================


def decimal_to_precise(value: int, config: PrecisionConfig = DEFAULT_PRECISION) -> int:
    """Конверсия standard → precise (точная, без потерь)."""
    return check_word(value * config.conversion_factor)


def precise_to_decimal(value: int, config: PrecisionConfig = DEFAULT_PRECISION) -> int:
    """
    Конверсия precise → standard с округлением half-up.

    Examples:
        >>> precise_to_decimal(1_500_000_000)  # 1.5e-18 в precise
        2
    """
    factor = config.conversion_factor
    if factor == 1:
        return value
    return _round_tenths(value // (factor // 10))


# =============================================================================
# ДЕСЯТИЧНЫЕ СТРОКИ
# =============================================================================


def parse_fixed(value: Union[str, int], unit: int = UNIT) -> int:
    """
    Точная конверсия десятичной строки в fixed-point без float.

    Args:
        value: Десятичная строка ("0.2", "-4.5", "100") или целое число единиц
        unit: Целевой масштаб

    Returns:
        Значение в масштабе unit

    Raises:
        DomainError: если строка не является десятичным числом или содержит
            больше значащих знаков после точки, чем позволяет масштаб

    Examples:
        >>> parse_fixed("0.2")
        200000000000000000
        >>> parse_fixed(3)
        3000000000000000000
    """
    if isinstance(value, bool):
        raise DomainError(f"Not a decimal number: {value!r}")
    if isinstance(value, int):
        return check_word(value * unit)

    match = _FIXED_PATTERN.match(value.strip())
    if match is None or not (match.group(2) or match.group(3)):
        raise DomainError(f"Not a decimal number: {value!r}")

    sign, whole, fraction = match.group(1), match.group(2) or "0", match.group(3) or ""
    decimals = len(str(unit)) - 1
    if fraction[decimals:].strip("0"):
        raise DomainError(f"{value!r} has more than {decimals} significant decimals")
    fraction = fraction[:decimals].ljust(decimals, "0")

    result = int(whole) * unit + int(fraction)
    return check_word(-result if sign == "-" else result)


def format_fixed(value: int, unit: int = UNIT) -> str:
    """
    Форматирование fixed-point значения как десятичной строки.

    Examples:
        >>> format_fixed(1_500_000_000_000_000_000)
        '1.5'
        >>> format_fixed(-UNIT)
        '-1'
    """
    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), unit)
    digits = str(fraction).rjust(len(str(unit)) - 1, "0").rstrip("0")
    if digits:
        return f"{sign}{whole}.{digits}"
    return f"{sign}{whole}"
