"""
Pricing — Black-Scholes цены и греки в фиксированной точке.
"""

from optcore.pricing.black_scholes import (
    MIN_TIME_SECONDS_DEFAULT,
    MIN_VOLATILITY_BPS_DEFAULT,
    SECONDS_PER_DAY,
    SECONDS_PER_YEAR,
    VEGA_STANDARDISATION_MIN_DAYS,
    VEGA_STANDARDISATION_PERIOD_DAYS,
    BlackScholesConfig,
    BlackScholesEngine,
)

__all__ = [
    # Constants
    "SECONDS_PER_YEAR",
    "SECONDS_PER_DAY",
    "MIN_VOLATILITY_BPS_DEFAULT",
    "MIN_TIME_SECONDS_DEFAULT",
    "VEGA_STANDARDISATION_MIN_DAYS",
    "VEGA_STANDARDISATION_PERIOD_DAYS",
    # Types
    "BlackScholesConfig",
    "BlackScholesEngine",
]
