"""
Fixed Point Math — трансцендентные функции в фиксированной точке

Детерминированная замена sqrt/ln/exp и нормального распределения,
построенная на примитивах decimal_math:
- sqrt: целочисленный метод Ньютона, O(log x) итераций
- ln: уточнение методом Галлея, не более 8 итераций
- exp: редукция x = k·ln2 + r и 16-членный ряд Тейлора по остатку r
- std_normal / std_normal_cdf: плотность и функция распределения N(0, 1)

ДОМЕННЫЕ ОГРАНИЧЕНИЯ (не ошибки, воспроизводятся точно):
- exp(x) = 0 ровно при x < min_exp_units (истинное значение ниже точности)
- std_normal_cdf(x) = 0 ровно при x < -4.5 и = 1 ровно при x > 10

ОШИБКИ (всегда пробрасываются):
- ln(x) при x <= 0 → DomainError
- exp(x) при x > max_exp_units → ExpOverflowError
- sqrt(x) при x < 0 → DomainError

Точность: exp(ln(x)) и ln(exp(x)) восстанавливают x с относительной
погрешностью порядка 1e-6 и лучше на рабочем диапазоне цен и волатильностей.
"""

from typing import Final

from optcore.core.math.decimal_math import (
    DEFAULT_PRECISION,
    DomainError,
    PrecisionConfig,
    decimal_to_precise,
    div_trunc,
    divide_decimal,
    divide_decimal_round,
    multiply_decimal,
    multiply_decimal_round,
    parse_fixed,
    precise_to_decimal,
)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# ln(2) и sqrt(2π), 60 знаков после точки; масштабируются под нужный unit
_CONSTANT_SCALE: Final[int] = 10**60
LN_2_DIGITS: Final[int] = 693147180559945309417232121458176568075500134360255254120680
SQRT_TWO_PI_DIGITS: Final[int] = (
    2506628274631000502415765284811045253006986740609938316629924
)

# Ограничения итераций
LN_MAX_ITERATIONS: Final[int] = 8
EXP_TAYLOR_TERMS: Final[int] = 16

# Границы аппроксимации CDF (precise-масштаб), вне их ровно 0 или 1
CDF_MIN_INPUT: Final[str] = "-4.5"
CDF_MAX_INPUT: Final[str] = "10"

# Рациональная аппроксимация N(x) (Hart, 1968): числитель и знаменатель
CDF_SPLIT: Final[str] = "7.07106781186547"
CDF_NUMERATOR: Final[tuple[str, ...]] = (
    "220.206867912376",
    "221.213596169931",
    "112.079291497871",
    "33.912866078383",
    "6.37396220353165",
    "0.700383064443688",
    "0.0352624965998911",
)
CDF_DENOMINATOR: Final[tuple[str, ...]] = (
    "440.413735824752",
    "793.826512519948",
    "637.333633378831",
    "296.564248779674",
    "86.7807322029461",
    "16.064177579207",
    "1.75566716318264",
    "0.0883883476483184",
)


class ExpOverflowError(DomainError):
    """exp() от аргумента выше потолка: вход вне области определения."""


def scale_constant(digits: int, unit: int) -> int:
    """Масштабирование 60-знаковой константы под unit с округлением half-up."""
    return (digits * unit + _CONSTANT_SCALE // 2) // _CONSTANT_SCALE


def floor_to_unit(x: int, unit: int) -> int:
    """
    Округление вниз до целого числа единиц масштаба (для x >= 0).

    Examples:
        >>> floor_to_unit(2_700, 1_000)
        2000
    """
    return x - x % unit


# =============================================================================
# FIXED POINT MATH
# =============================================================================


class FixedPointMath:
    """Трансцендентная математика на двух масштабах фиксированной точки.

    Все производные константы (ln2, sqrt(2π), границы exp и CDF,
    коэффициенты CDF) вычисляются один раз при создании из PrecisionConfig.
    Экземпляр не имеет изменяемого состояния и потокобезопасен.
    """

    def __init__(self, precision: PrecisionConfig | None = None):
        self.precision = precision or DEFAULT_PRECISION
        unit = self.precision.unit
        precise_unit = self.precision.precise_unit

        self.ln_2 = scale_constant(LN_2_DIGITS, unit)
        self.precise_ln_2 = scale_constant(LN_2_DIGITS, precise_unit)
        self.sqrt_two_pi = scale_constant(SQRT_TWO_PI_DIGITS, precise_unit)

        self._cdf_min = parse_fixed(CDF_MIN_INPUT, precise_unit)
        self._cdf_max = parse_fixed(CDF_MAX_INPUT, precise_unit)
        self._cdf_split = parse_fixed(CDF_SPLIT, precise_unit)
        self._cdf_numerator = [parse_fixed(c, precise_unit) for c in CDF_NUMERATOR]
        self._cdf_denominator = [parse_fixed(c, precise_unit) for c in CDF_DENOMINATOR]

    @property
    def unit(self) -> int:
        return self.precision.unit

    @property
    def precise_unit(self) -> int:
        return self.precision.precise_unit

    # -------------------------------------------------------------------------
    # sqrt
    # -------------------------------------------------------------------------

    @staticmethod
    def sqrt(x: int) -> int:
        """
        Целочисленный квадратный корень методом Ньютона (floor(√x)).

        Масштаб не учитывается: для fixed-point значений использовать
        sqrt_decimal / sqrt_precise.

        Examples:
            >>> FixedPointMath.sqrt(16)
            4
            >>> FixedPointMath.sqrt(0)
            0
        """
        if x < 0:
            raise DomainError(f"sqrt undefined for negative input {x}")
        if x == 0:
            return 0
        z = (x + 1) // 2
        y = x
        while z < y:
            y = z
            z = (x // z + z) // 2
        return y

    def sqrt_decimal(self, x: int) -> int:
        """√x для значения в standard-масштабе."""
        return self.sqrt(x * self.unit)

    def sqrt_precise(self, x: int) -> int:
        """√x для значения в precise-масштабе.

        Дополнительный множитель unit поглощается корнем:
        sqrt(x * UNIT) = sqrt(x) * sqrt(UNIT).
        """
        return self.sqrt(x * self.precise_unit)

    # -------------------------------------------------------------------------
    # exp / ln
    # -------------------------------------------------------------------------

    def _exp(self, x: int, unit: int, ln_2: int) -> int:
        if x == 0:
            return unit
        if x < 0:
            if x < self.precision.min_exp_units * unit:
                # Истинное значение ниже разрешения масштаба
                return 0
            return divide_decimal_round(unit, self._exp(-x, unit, ln_2), unit)
        if x > self.precision.max_exp_units * unit:
            raise ExpOverflowError(
                f"exp argument {x} exceeds ceiling of {self.precision.max_exp_units} units"
            )

        # x = k·ln2 + r, exp(x) = 2^k · exp(r)
        k = floor_to_unit(divide_decimal(x, ln_2, unit), unit) // unit
        p = 2**k
        r = x - k * ln_2

        # Ряд Тейлора для exp(r) по схеме Горнера
        t = unit
        last_t = None
        for i in range(EXP_TAYLOR_TERMS, 0, -1):
            t = multiply_decimal(t, r // i, unit) + unit
            if t == last_t:
                break
            last_t = t
        return p * t

    def _ln(self, x: int, unit: int, ln_2: int) -> int:
        if x <= 0:
            raise DomainError(f"ln undefined for non-positive input {x}")

        # Начальная оценка по двоичному порядку: x ≈ unit · 2^k
        result = (x.bit_length() - unit.bit_length()) * ln_2
        for _ in range(LN_MAX_ITERATIONS):
            e = self._exp(result, unit, ln_2)
            next_result = result + divide_decimal(2 * (x - e), x + e, unit)
            if next_result == result:
                break
            result = next_result
        return result

    def exp(self, x: int) -> int:
        """
        e^x в standard-масштабе.

        Args:
            x: Показатель (standard-масштаб, знаковый)

        Returns:
            e^x (standard-масштаб); ровно 0 ниже min_exp_units

        Raises:
            ExpOverflowError: если x > max_exp_units

        Examples:
            >>> FixedPointMath().exp(0)
            1000000000000000000
        """
        return self._exp(x, self.unit, self.ln_2)

    def exp_precise(self, x: int) -> int:
        """e^x в precise-масштабе."""
        return self._exp(x, self.precise_unit, self.precise_ln_2)

    def ln(self, x: int) -> int:
        """
        Натуральный логарифм в standard-масштабе.

        Метод Галлея: r ← r + 2(x − e^r)/(x + e^r), не более 8 итераций,
        досрочный выход, если значение не изменилось.

        Args:
            x: Аргумент (standard-масштаб), x > 0

        Raises:
            DomainError: если x <= 0
            ExpOverflowError: если ln(x) выше потолка exp (x > e^max_exp_units)
        """
        return self._ln(x, self.unit, self.ln_2)

    def ln_precise(self, x: int) -> int:
        """Натуральный логарифм в precise-масштабе."""
        return self._ln(x, self.precise_unit, self.precise_ln_2)

    # -------------------------------------------------------------------------
    # Нормальное распределение (precise-масштаб)
    # -------------------------------------------------------------------------

    def std_normal(self, x: int) -> int:
        """Плотность N(0, 1): exp(-x²/2) / √(2π), precise-масштаб."""
        pu = self.precise_unit
        exponent = -multiply_decimal_round(x, div_trunc(x, 2), pu)
        return divide_decimal_round(self.exp_precise(exponent), self.sqrt_two_pi, pu)

    def std_normal_cdf(self, x: int) -> int:
        """
        Функция распределения N(0, 1), precise-масштаб.

        Рациональная аппроксимация Hart (1968) для |x| < 7.07 и цепная дробь
        для хвоста. Вне [-4.5, 10] результат прижимается ровно к 0 или 1:
        там погрешность хвоста велика относительно значения, а влияние
        на цену пренебрежимо.

        Returns:
            N(x) в [0, precise_unit]; ровно precise_unit / 2 при x = 0
        """
        pu = self.precise_unit
        if x < self._cdf_min:
            return 0
        if x > self._cdf_max:
            return pu

        z = abs(x)
        e = self.exp_precise(-div_trunc(multiply_decimal_round(z, z, pu), 2))
        if z < self._cdf_split:
            c = multiply_decimal_round(
                divide_decimal_round(
                    self._horner(self._cdf_numerator, z),
                    self._horner(self._cdf_denominator, z),
                    pu,
                ),
                e,
                pu,
            )
        else:
            # f = z + 1/(z + 2/(z + 3/(z + 4/(z + 13/20))))
            f = z + pu * 13 // 20
            for n in (4, 3, 2, 1):
                f = z + divide_decimal_round(n * pu, f, pu)
            c = divide_decimal_round(e, multiply_decimal_round(f, self.sqrt_two_pi, pu), pu)

        return c if x <= 0 else pu - c

    def _horner(self, coefficients: list[int], z: int) -> int:
        result = 0
        for coefficient in reversed(coefficients):
            result = multiply_decimal(result, z, self.precise_unit) + coefficient
        return result

    # -------------------------------------------------------------------------
    # Обёртки standard-масштаба
    # -------------------------------------------------------------------------

    def std_normal_decimal(self, x: int) -> int:
        """Плотность N(0, 1) для аргумента и результата в standard-масштабе."""
        precise = self.std_normal(decimal_to_precise(x, self.precision))
        return precise_to_decimal(precise, self.precision)

    def std_normal_cdf_decimal(self, x: int) -> int:
        """Функция распределения N(0, 1) в standard-масштабе."""
        precise = self.std_normal_cdf(decimal_to_precise(x, self.precision))
        return precise_to_decimal(precise, self.precision)
