"""
Тесты для Black-Scholes Engine

Проверяет:
1. Сценарии: ATM (колл ≈ пут, дельта ≈ 0.5), глубокий ITM (дельта → 1)
2. Паритет колл-пут с учётом дисконта
3. Монотонность цены колла по споту и волатильности
4. Границы дельт и тождество call_delta - put_delta = 1
5. Минимумы времени и волатильности (нет деления на ноль)
6. Стандартизованную вегу и 7-дневный пол
7. Переполнение дисконта (ExpOverflowError)
8. Работу на другой точности
"""

import math

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st
from structlog.testing import capture_logs

from optcore.core.domain import BlackScholesInputs, PricesAndGreeks
from optcore.core.math import PRECISE_UNIT, UNIT, ExpOverflowError, PrecisionConfig
from optcore.pricing import (
    SECONDS_PER_DAY,
    SECONDS_PER_YEAR,
    BlackScholesConfig,
    BlackScholesEngine,
)

THIRTY_DAYS = 30 * SECONDS_PER_DAY


@pytest.fixture
def engine() -> BlackScholesEngine:
    return BlackScholesEngine()


def _inputs(
    spot: int = 100 * UNIT,
    strike: int = 100 * UNIT,
    volatility: int = UNIT // 5,
    rate: int = 0,
    time_to_expiry_sec: int = THIRTY_DAYS,
) -> BlackScholesInputs:
    return BlackScholesInputs(
        time_to_expiry_sec=time_to_expiry_sec,
        volatility=volatility,
        spot=spot,
        strike=strike,
        rate=rate,
    )


# Пространство входов для свойств: спот/страйк 1..10000, σ 5%..200%,
# срок 1 день..2 года, ставка -5%..20%
spots = st.integers(min_value=1, max_value=10_000).map(lambda v: v * UNIT)
volatilities = st.integers(min_value=5, max_value=200).map(lambda pct: pct * UNIT // 100)
expiries = st.integers(min_value=SECONDS_PER_DAY, max_value=2 * SECONDS_PER_YEAR)
rates = st.integers(min_value=-5, max_value=20).map(lambda pct: pct * UNIT // 100)

# Около денег: d1, d2 остаются внутри [-4.5, 10], где N(x) не прижимается
near_money_spots = st.integers(min_value=80, max_value=120).map(lambda v: v * UNIT)
near_money_volatilities = st.integers(min_value=20, max_value=100).map(
    lambda pct: pct * UNIT // 100
)
long_expiries = st.integers(min_value=THIRTY_DAYS, max_value=2 * SECONDS_PER_YEAR)


# =============================================================================
# СЦЕНАРИИ
# =============================================================================


class TestScenarios:
    """Опорные сценарии"""

    def test_atm_zero_rate(self, engine: BlackScholesEngine) -> None:
        """spot=strike=100, σ=20%, r=0, 30 дней: колл = пут, дельта ≈ 0.5"""
        result = engine.price_options(_inputs())

        assert result.call_price == result.put_price
        assert 22 * UNIT // 10 < result.call_price < 24 * UNIT // 10
        assert UNIT // 2 < result.call_delta < 53 * UNIT // 100
        assert result.call_delta - result.put_delta == UNIT

    def test_atm_matches_float_reference(self, engine: BlackScholesEngine) -> None:
        t = THIRTY_DAYS / SECONDS_PER_YEAR
        d1 = 0.2 * math.sqrt(t) / 2
        cdf = lambda x: 0.5 * math.erfc(-x / math.sqrt(2.0))  # noqa: E731
        expected_call = 100 * (cdf(d1) - cdf(d1 - 0.2 * math.sqrt(t)))

        result = engine.price_options(_inputs())
        assert abs(result.call_price / UNIT - expected_call) < 1e-9
        assert abs(result.call_delta / UNIT - cdf(d1)) < 1e-9

    def test_deep_itm_call(self, engine: BlackScholesEngine) -> None:
        """spot=200, strike=100, 1 день, σ=10%: дельта колла ровно 1"""
        result = engine.price_options(
            _inputs(
                spot=200 * UNIT,
                volatility=UNIT // 10,
                time_to_expiry_sec=SECONDS_PER_DAY,
            )
        )

        assert result.call_delta == UNIT
        assert result.put_delta == 0
        assert result.call_price == 100 * UNIT
        assert result.put_price == 0
        assert result.vega == 0

    def test_deep_otm_call(self, engine: BlackScholesEngine) -> None:
        result = engine.price_options(
            _inputs(
                spot=50 * UNIT,
                volatility=UNIT // 10,
                time_to_expiry_sec=SECONDS_PER_DAY,
            )
        )

        assert result.call_price == 0
        assert result.call_delta == 0
        assert result.put_delta == -UNIT
        assert result.put_price == 50 * UNIT


# =============================================================================
# ПАРИТЕТ И МОНОТОННОСТЬ
# =============================================================================


class TestParity:
    """C - P = S - K·e^(-rt)"""

    @settings(max_examples=60, deadline=None)
    @given(spots, spots, volatilities, rates, expiries)
    def test_call_put_parity(
        self, spot: int, strike: int, volatility: int, rate: int, expiry: int
    ) -> None:
        engine = BlackScholesEngine()
        result = engine.option_prices(_inputs(spot, strike, volatility, rate, expiry))

        t = expiry / SECONDS_PER_YEAR
        strike_pv = strike * math.exp(-(rate / UNIT) * t)
        expected = spot - strike_pv
        tolerance = max(spot, strike) * 1e-9 + 10
        assert abs((result.call - result.put) - expected) <= tolerance

    def test_parity_exact_at_zero_rate(self, engine: BlackScholesEngine) -> None:
        """При r = 0 дисконт ровно 1: C - P = S - K с точностью округления"""
        result = engine.option_prices(_inputs(spot=110 * UNIT, volatility=UNIT // 2))
        assert abs((result.call - result.put) - 10 * UNIT) <= 1

    def test_prices_non_negative(self, engine: BlackScholesEngine) -> None:
        for spot in (1 * UNIT, 100 * UNIT, 10_000 * UNIT):
            result = engine.option_prices(_inputs(spot=spot))
            assert result.call >= 0
            assert result.put >= 0


class TestMonotonicity:
    """Цена колла не убывает по споту и волатильности"""

    @settings(max_examples=60, deadline=None)
    @given(near_money_spots, near_money_spots, near_money_volatilities, long_expiries)
    def test_call_non_decreasing_in_spot(
        self, spot_a: int, spot_b: int, volatility: int, expiry: int
    ) -> None:
        assume(spot_a != spot_b)
        low, high = sorted((spot_a, spot_b))
        engine = BlackScholesEngine()
        call_low = engine.option_prices(_inputs(low, 100 * UNIT, volatility, 0, expiry)).call
        call_high = engine.option_prices(_inputs(high, 100 * UNIT, volatility, 0, expiry)).call
        assert call_high >= call_low - high // 10**10

    @settings(max_examples=60, deadline=None)
    @given(near_money_spots, near_money_volatilities, near_money_volatilities, long_expiries)
    def test_call_non_decreasing_in_volatility(
        self, spot: int, vol_a: int, vol_b: int, expiry: int
    ) -> None:
        assume(vol_a != vol_b)
        low, high = sorted((vol_a, vol_b))
        engine = BlackScholesEngine()
        call_low = engine.option_prices(_inputs(spot, 100 * UNIT, low, 0, expiry)).call
        call_high = engine.option_prices(_inputs(spot, 100 * UNIT, high, 0, expiry)).call
        assert call_high >= call_low - spot // 10**10


# =============================================================================
# ДЕЛЬТЫ
# =============================================================================


class TestDelta:
    """Границы дельт"""

    @settings(max_examples=60, deadline=None)
    @given(spots, spots, volatilities, rates, expiries)
    def test_delta_bounds(
        self, spot: int, strike: int, volatility: int, rate: int, expiry: int
    ) -> None:
        deltas = BlackScholesEngine().delta(_inputs(spot, strike, volatility, rate, expiry))
        assert 0 <= deltas.call <= UNIT
        assert -UNIT <= deltas.put <= 0
        assert deltas.call - deltas.put == UNIT

    def test_delta_matches_full_quote(self, engine: BlackScholesEngine) -> None:
        inputs = _inputs(spot=105 * UNIT, rate=UNIT // 20)
        deltas = engine.delta(inputs)
        quote = engine.price_options(inputs)
        assert (deltas.call, deltas.put) == (quote.call_delta, quote.put_delta)

    def test_call_delta_increases_with_spot(self, engine: BlackScholesEngine) -> None:
        values = [engine.delta(_inputs(spot=s * UNIT)).call for s in (80, 90, 100, 110, 120)]
        assert values == sorted(values)


# =============================================================================
# МИНИМУМЫ
# =============================================================================


class TestFloors:
    """Минимумы времени и волатильности"""

    def test_zero_time_and_volatility(self, engine: BlackScholesEngine) -> None:
        """Нулевые t и σ не приводят к делению на ноль; цена → внутренняя стоимость"""
        result = engine.price_options(
            _inputs(spot=120 * UNIT, volatility=0, time_to_expiry_sec=0)
        )
        assert result.call_price == 20 * UNIT
        assert result.put_price == 0
        assert result.call_delta == UNIT

    def test_zero_volatility_atm(self, engine: BlackScholesEngine) -> None:
        result = engine.price_options(_inputs(volatility=0))
        assert result.call_price >= 0
        assert result.put_price >= 0

    def test_config_floors_in_precise_units(self) -> None:
        config = BlackScholesConfig()
        assert config.min_volatility == PRECISE_UNIT // 10_000
        assert config.min_t_annualised == PRECISE_UNIT // SECONDS_PER_YEAR

    def test_d1_d2_respect_floors(self, engine: BlackScholesEngine) -> None:
        floored = engine.d1_d2(0, 0, PRECISE_UNIT, PRECISE_UNIT, 0)
        explicit = engine.d1_d2(
            engine.config.min_t_annualised,
            engine.config.min_volatility,
            PRECISE_UNIT,
            PRECISE_UNIT,
            0,
        )
        assert floored == explicit

    def test_annualise(self, engine: BlackScholesEngine) -> None:
        assert engine.annualise(SECONDS_PER_YEAR) == PRECISE_UNIT
        assert engine.annualise(SECONDS_PER_YEAR // 2) == PRECISE_UNIT // 2
        assert engine.annualise(0) == 0


# =============================================================================
# ВЕГА
# =============================================================================


class TestVega:
    """Вега и стандартизованная вега"""

    def test_atm_vega_matches_reference(self, engine: BlackScholesEngine) -> None:
        t = THIRTY_DAYS / SECONDS_PER_YEAR
        d1 = 0.2 * math.sqrt(t) / 2
        expected = 100 * math.sqrt(t) * math.exp(-d1 * d1 / 2) / math.sqrt(2 * math.pi)
        assert abs(engine.vega(_inputs()) / UNIT - expected) < 1e-9

    def test_thirty_day_normalisation_is_one_percent(self, engine: BlackScholesEngine) -> None:
        assert engine.vega_normalisation_factor(THIRTY_DAYS) == PRECISE_UNIT // 100
        result = engine.price_options(_inputs())
        assert abs(result.std_vega * 100 - result.vega) <= 100

    def test_seven_day_floor(self, engine: BlackScholesEngine) -> None:
        """Срок короче 7 дней нормируется как 7 дней"""
        seven_days = engine.vega_normalisation_factor(7 * SECONDS_PER_DAY)
        assert engine.vega_normalisation_factor(SECONDS_PER_DAY) == seven_days
        assert engine.vega_normalisation_factor(0) == seven_days
        assert engine.vega_normalisation_factor(8 * SECONDS_PER_DAY) < seven_days

    def test_whole_days(self, engine: BlackScholesEngine) -> None:
        """Срок округляется вниз до целых суток"""
        ten_days = engine.vega_normalisation_factor(10 * SECONDS_PER_DAY)
        assert engine.vega_normalisation_factor(10 * SECONDS_PER_DAY + 86_399) == ten_days

    def test_standard_vega_matches_full_quote(self, engine: BlackScholesEngine) -> None:
        inputs = _inputs(time_to_expiry_sec=3 * SECONDS_PER_DAY)
        assert engine.standard_vega(inputs) == engine.price_options(inputs).std_vega

    def test_vega_matches_full_quote(self, engine: BlackScholesEngine) -> None:
        inputs = _inputs(spot=90 * UNIT, rate=UNIT // 50)
        assert engine.vega(inputs) == engine.price_options(inputs).vega


# =============================================================================
# ОШИБКИ
# =============================================================================


class TestErrors:
    """Переполнение дисконта"""

    def test_discount_overflow_raises(self, engine: BlackScholesEngine) -> None:
        inputs = _inputs(rate=-101 * UNIT, time_to_expiry_sec=SECONDS_PER_YEAR)
        with capture_logs() as logs:
            with pytest.raises(ExpOverflowError):
                engine.price_options(inputs)
        assert logs[0]["event"] == "black_scholes_discount_overflow"
        assert logs[0]["log_level"] == "warning"

    def test_option_prices_overflow_raises(self, engine: BlackScholesEngine) -> None:
        with pytest.raises(ExpOverflowError):
            engine.option_prices(_inputs(rate=-101 * UNIT, time_to_expiry_sec=SECONDS_PER_YEAR))


# =============================================================================
# API И КОНФИГУРАЦИЯ
# =============================================================================


class TestEngineApi:
    """Формы результатов и конфигурация"""

    def test_full_quote_type(self, engine: BlackScholesEngine) -> None:
        assert isinstance(engine.price_options(_inputs()), PricesAndGreeks)

    def test_alias(self, engine: BlackScholesEngine) -> None:
        inputs = _inputs(spot=95 * UNIT)
        assert engine.prices_delta_std_vega(inputs) == engine.price_options(inputs)

    def test_option_prices_match_full_quote(self, engine: BlackScholesEngine) -> None:
        inputs = _inputs(spot=97 * UNIT, rate=UNIT // 10)
        prices = engine.option_prices(inputs)
        quote = engine.price_options(inputs)
        assert (prices.call, prices.put) == (quote.call_price, quote.put_price)

    def test_deterministic(self) -> None:
        inputs = _inputs(spot=101 * UNIT, volatility=UNIT // 3)
        assert BlackScholesEngine().price_options(inputs) == BlackScholesEngine().price_options(
            inputs
        )

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"seconds_per_year": 0},
            {"min_volatility_bps": 0},
            {"min_time_seconds": -1},
            {"vega_standardisation_min_days": 0},
            {"vega_standardisation_period_days": 0},
        ],
    )
    def test_invalid_config(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            BlackScholesConfig(**kwargs)

    def test_lower_precision(self) -> None:
        """Тот же результат на масштабах 1e9 / 1e18 с точностью ~1e-6"""
        precision = PrecisionConfig(unit=10**9, precise_unit=10**18)
        low = BlackScholesEngine(BlackScholesConfig(precision=precision))
        inputs = BlackScholesInputs(
            time_to_expiry_sec=THIRTY_DAYS,
            volatility=10**9 // 5,
            spot=100 * 10**9,
            strike=100 * 10**9,
            rate=0,
        )
        reference = BlackScholesEngine().price_options(_inputs())
        result = low.price_options(inputs)

        assert abs(result.call_price * 10**9 - reference.call_price) <= reference.call_price // 10**6
        assert result.call_delta - result.put_delta == 10**9
