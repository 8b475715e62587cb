"""
Contract Validation Module

Модуль для валидации JSON контрактов ядра optcore.
"""

from .validators import (
    BlackScholesInputsValidator,
    ContractValidator,
    ObservationSeriesValidator,
    PricesAndGreeksValidator,
    SchemaLoader,
    validate_black_scholes_inputs,
    validate_observation_series,
    validate_prices_and_greeks,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "BlackScholesInputsValidator",
    "PricesAndGreeksValidator",
    "ObservationSeriesValidator",
    # Functions
    "validate_black_scholes_inputs",
    "validate_prices_and_greeks",
    "validate_observation_series",
]
