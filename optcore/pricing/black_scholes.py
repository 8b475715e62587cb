"""
Black-Scholes Engine — цены и греки в фиксированной точке

Замкнутое решение Блэка-Шоулза без плавающей точки:
- d1, d2 с минимумами времени (1 секунда) и волатильности (0.01%)
- цена колла с прижатием к 0, цена пута по паритету колл-пут
- дельта: N(d1) и N(d1) - 1
- вега: √t · S · φ(d1)
- стандартизованная вега: вега × √(30 / days) / 100, days >= 7

Публичный ввод/вывод в standard-масштабе (1e18), вычисления в precise (1e27).
Движок не имеет состояния; экземпляр безопасен для параллельного использования.

ФОРМУЛЫ:
    t = seconds / 31_536_000
    d1 = (ln(S/K) + (σ²/2 + r)·t) / (σ·√t)
    d2 = d1 - σ·√t
    C = S·N(d1) - K·e^(-rt)·N(d2)
    P = C + K·e^(-rt) - S
"""

from dataclasses import dataclass
from typing import Final

import structlog

from optcore.core.domain.options import (
    BlackScholesInputs,
    OptionDeltas,
    OptionPrices,
    PricesAndGreeks,
)
from optcore.core.math.decimal_math import (
    DEFAULT_PRECISION,
    PrecisionConfig,
    decimal_to_precise,
    div_trunc,
    divide_decimal_round,
    multiply_decimal_round,
    precise_to_decimal,
)
from optcore.core.math.fixed_point import ExpOverflowError, FixedPointMath

logger = structlog.get_logger(__name__)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Год из 365 дней
SECONDS_PER_YEAR: Final[int] = 31_536_000
SECONDS_PER_DAY: Final[int] = 86_400

# Минимальная волатильность в базисных пунктах (1 bp = 0.01%)
MIN_VOLATILITY_BPS_DEFAULT: Final[int] = 1

# Минимальное время до экспирации для d1/d2
MIN_TIME_SECONDS_DEFAULT: Final[int] = 1

# Нормировка стандартизованной веги: пол срока и опорный период
VEGA_STANDARDISATION_MIN_DAYS: Final[int] = 7
VEGA_STANDARDISATION_PERIOD_DAYS: Final[int] = 30


@dataclass(frozen=True)
class BlackScholesConfig:
    """Конфигурация движка Блэка-Шоулза.

    Нормировка веги (7 дней, 30-дневный период, /100) обеспечивает
    сопоставимость стандартизованной веги между листингами и должна
    сохраняться точно.
    """
    precision: PrecisionConfig = DEFAULT_PRECISION
    seconds_per_year: int = SECONDS_PER_YEAR
    min_volatility_bps: int = MIN_VOLATILITY_BPS_DEFAULT
    min_time_seconds: int = MIN_TIME_SECONDS_DEFAULT
    vega_standardisation_min_days: int = VEGA_STANDARDISATION_MIN_DAYS
    vega_standardisation_period_days: int = VEGA_STANDARDISATION_PERIOD_DAYS

    def __post_init__(self) -> None:
        if self.seconds_per_year <= 0:
            raise ValueError(f"seconds_per_year must be positive, got {self.seconds_per_year}")
        if self.min_volatility_bps <= 0:
            raise ValueError(
                f"min_volatility_bps must be positive, got {self.min_volatility_bps}"
            )
        if self.min_time_seconds <= 0:
            raise ValueError(f"min_time_seconds must be positive, got {self.min_time_seconds}")
        if self.vega_standardisation_min_days <= 0:
            raise ValueError(
                "vega_standardisation_min_days must be positive, "
                f"got {self.vega_standardisation_min_days}"
            )
        if self.vega_standardisation_period_days <= 0:
            raise ValueError(
                "vega_standardisation_period_days must be positive, "
                f"got {self.vega_standardisation_period_days}"
            )

    @property
    def min_volatility(self) -> int:
        """Минимальная волатильность, precise-масштаб."""
        return self.precision.precise_unit * self.min_volatility_bps // 10_000

    @property
    def min_t_annualised(self) -> int:
        """Минимальное время в годах, precise-масштаб."""
        return self.precision.precise_unit * self.min_time_seconds // self.seconds_per_year


# =============================================================================
# ENGINE
# =============================================================================


class BlackScholesEngine:
    """Движок Блэка-Шоулза на целочисленной арифметике.

    Ошибки:
    - ExpOverflowError: дисконт e^(-rt) выше потолка exp (вход вне области)
    Прижатия (не ошибки): минимумы t и σ, цены колла/пута к 0, хвосты N(x).
    """

    def __init__(self, config: BlackScholesConfig | None = None):
        self.config = config or BlackScholesConfig()
        self.math = FixedPointMath(self.config.precision)
        self._precise_unit = self.config.precision.precise_unit

    # -------------------------------------------------------------------------
    # Публичный API (standard-масштаб)
    # -------------------------------------------------------------------------

    def price_options(self, inputs: BlackScholesInputs) -> PricesAndGreeks:
        """
        Полная котировка: цены, дельты, вега и стандартизованная вега.

        Args:
            inputs: Входы модели (standard-масштаб)

        Returns:
            PricesAndGreeks (standard-масштаб)

        Raises:
            ExpOverflowError: если ставка × время выводит дисконт за потолок exp
        """
        t_annualised, volatility, spot, strike, rate = self._to_precise(inputs)
        d1, d2 = self.d1_d2(t_annualised, volatility, spot, strike, rate)
        call, put = self._option_prices(t_annualised, spot, strike, rate, d1, d2, inputs)
        vega, std_vega = self._standard_vega(d1, spot, inputs.time_to_expiry_sec)

        call_delta = self._to_decimal(self.math.std_normal_cdf(d1))
        return PricesAndGreeks(
            call_price=self._to_decimal(call),
            put_price=self._to_decimal(put),
            call_delta=call_delta,
            put_delta=call_delta - self.config.precision.unit,
            vega=self._to_decimal(vega),
            std_vega=self._to_decimal(std_vega),
        )

    prices_delta_std_vega = price_options

    def option_prices(self, inputs: BlackScholesInputs) -> OptionPrices:
        """Цены колла и пута (standard-масштаб)."""
        t_annualised, volatility, spot, strike, rate = self._to_precise(inputs)
        d1, d2 = self.d1_d2(t_annualised, volatility, spot, strike, rate)
        call, put = self._option_prices(t_annualised, spot, strike, rate, d1, d2, inputs)
        return OptionPrices(call=self._to_decimal(call), put=self._to_decimal(put))

    def delta(self, inputs: BlackScholesInputs) -> OptionDeltas:
        """Дельты колла и пута (standard-масштаб); call - put = unit."""
        t_annualised, volatility, spot, strike, rate = self._to_precise(inputs)
        d1, _ = self.d1_d2(t_annualised, volatility, spot, strike, rate)
        call_delta = self._to_decimal(self.math.std_normal_cdf(d1))
        return OptionDeltas(call=call_delta, put=call_delta - self.config.precision.unit)

    def vega(self, inputs: BlackScholesInputs) -> int:
        """Вега на единицу волатильности (standard-масштаб)."""
        t_annualised, volatility, spot, strike, rate = self._to_precise(inputs)
        d1, _ = self.d1_d2(t_annualised, volatility, spot, strike, rate)
        return self._to_decimal(self._vega(t_annualised, spot, d1))

    def standard_vega(self, inputs: BlackScholesInputs) -> int:
        """Стандартизованная вега (standard-масштаб)."""
        t_annualised, volatility, spot, strike, rate = self._to_precise(inputs)
        d1, _ = self.d1_d2(t_annualised, volatility, spot, strike, rate)
        _, std_vega = self._standard_vega(d1, spot, inputs.time_to_expiry_sec)
        return self._to_decimal(std_vega)

    # -------------------------------------------------------------------------
    # Внутренние вычисления (precise-масштаб)
    # -------------------------------------------------------------------------

    def annualise(self, seconds: int) -> int:
        """Секунды → доля года (precise-масштаб, 365-дневный год)."""
        return divide_decimal_round(seconds, self.config.seconds_per_year, self._precise_unit)

    def d1_d2(
        self,
        t_annualised: int,
        volatility: int,
        spot: int,
        strike: int,
        rate: int,
    ) -> tuple[int, int]:
        """
        Коэффициенты d1, d2 (все аргументы и результат в precise-масштабе).

        Время и волатильность поднимаются до минимумов, делитель σ·√t
        всегда положителен. При малых t и σ цена сводится к разнице
        спота и страйка.
        """
        pu = self._precise_unit
        t_annualised = max(t_annualised, self.config.min_t_annualised)
        volatility = max(volatility, self.config.min_volatility)

        vt_sqrt = multiply_decimal_round(volatility, self.math.sqrt_precise(t_annualised), pu)
        log = self.math.ln_precise(divide_decimal_round(spot, strike, pu))
        v2t = multiply_decimal_round(
            div_trunc(multiply_decimal_round(volatility, volatility, pu), 2) + rate,
            t_annualised,
            pu,
        )
        d1 = divide_decimal_round(log + v2t, vt_sqrt, pu)
        d2 = d1 - vt_sqrt
        return d1, d2

    def _option_prices(
        self,
        t_annualised: int,
        spot: int,
        strike: int,
        rate: int,
        d1: int,
        d2: int,
        inputs: BlackScholesInputs,
    ) -> tuple[int, int]:
        pu = self._precise_unit
        try:
            discount = self.math.exp_precise(-multiply_decimal_round(rate, t_annualised, pu))
        except ExpOverflowError:
            logger.warning(
                "black_scholes_discount_overflow",
                rate=inputs.rate,
                time_to_expiry_sec=inputs.time_to_expiry_sec,
            )
            raise
        strike_pv = multiply_decimal_round(strike, discount, pu)
        spot_nd1 = multiply_decimal_round(spot, self.math.std_normal_cdf(d1), pu)
        strike_nd2 = multiply_decimal_round(strike_pv, self.math.std_normal_cdf(d2), pu)

        # Прижатие к 0 при ошибке округления вычитания
        call = spot_nd1 - strike_nd2 if strike_nd2 <= spot_nd1 else 0
        put = call + strike_pv
        put = put - spot if spot <= put else 0
        return call, put

    def _vega(self, t_annualised: int, spot: int, d1: int) -> int:
        pu = self._precise_unit
        return multiply_decimal_round(
            self.math.sqrt_precise(t_annualised),
            multiply_decimal_round(self.math.std_normal(d1), spot, pu),
            pu,
        )

    def _standard_vega(self, d1: int, spot: int, time_to_expiry_sec: int) -> tuple[int, int]:
        vega = self._vega(self.annualise(time_to_expiry_sec), spot, d1)
        factor = self.vega_normalisation_factor(time_to_expiry_sec)
        return vega, multiply_decimal_round(vega, factor, self._precise_unit)

    def vega_normalisation_factor(self, time_to_expiry_sec: int) -> int:
        """
        Множитель √(30 / days) / 100 (precise-масштаб).

        Срок поднимается минимум до 7 дней; days = целые сутки.
        """
        min_seconds = self.config.vega_standardisation_min_days * SECONDS_PER_DAY
        days_to_expiry = max(time_to_expiry_sec, min_seconds) // SECONDS_PER_DAY
        period = self.config.vega_standardisation_period_days * self._precise_unit
        return self.math.sqrt_precise(period // days_to_expiry) // 100

    def _to_precise(self, inputs: BlackScholesInputs) -> tuple[int, int, int, int, int]:
        precision = self.config.precision
        return (
            self.annualise(inputs.time_to_expiry_sec),
            decimal_to_precise(inputs.volatility, precision),
            decimal_to_precise(inputs.spot, precision),
            decimal_to_precise(inputs.strike, precision),
            decimal_to_precise(inputs.rate, precision),
        )

    def _to_decimal(self, value: int) -> int:
        return precise_to_decimal(value, self.config.precision)
