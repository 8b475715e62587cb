"""
Core math modules для optcore

Целочисленная арифметика с фиксированной точкой и трансцендентные функции
с детерминированным, воспроизводимым бит-в-бит результатом.
"""

# Decimal Math: масштабированная арифметика
from optcore.core.math.decimal_math import (
    # Scales and word bounds
    DEFAULT_PRECISION,
    INT256_MAX,
    INT256_MIN,
    MAX_EXP_UNITS_DEFAULT,
    MIN_EXP_UNITS_DEFAULT,
    PRECISE_UNIT,
    UINT256_MAX,
    UNIT,
    # Exceptions
    DomainError,
    # Types
    PrecisionConfig,
    # Primitives
    check_word,
    div_trunc,
    # Scaled multiply/divide
    divide_decimal,
    divide_decimal_round,
    multiply_decimal,
    multiply_decimal_round,
    # Conversions
    decimal_to_precise,
    format_fixed,
    parse_fixed,
    precise_to_decimal,
)

# Fixed Point Math: sqrt/ln/exp/N(x)
from optcore.core.math.fixed_point import (
    CDF_MAX_INPUT,
    CDF_MIN_INPUT,
    EXP_TAYLOR_TERMS,
    LN_MAX_ITERATIONS,
    ExpOverflowError,
    FixedPointMath,
    floor_to_unit,
    scale_constant,
)

__all__ = [
    # Decimal Math: Scales and word bounds
    "DEFAULT_PRECISION",
    "INT256_MAX",
    "INT256_MIN",
    "MAX_EXP_UNITS_DEFAULT",
    "MIN_EXP_UNITS_DEFAULT",
    "PRECISE_UNIT",
    "UINT256_MAX",
    "UNIT",
    # Decimal Math: Exceptions
    "DomainError",
    # Decimal Math: Types
    "PrecisionConfig",
    # Decimal Math: Primitives
    "check_word",
    "div_trunc",
    # Decimal Math: Scaled multiply/divide
    "divide_decimal",
    "divide_decimal_round",
    "multiply_decimal",
    "multiply_decimal_round",
    # Decimal Math: Conversions
    "decimal_to_precise",
    "format_fixed",
    "parse_fixed",
    "precise_to_decimal",
    # Fixed Point Math: Constants
    "CDF_MAX_INPUT",
    "CDF_MIN_INPUT",
    "EXP_TAYLOR_TERMS",
    "LN_MAX_ITERATIONS",
    # Fixed Point Math: Exceptions
    "ExpOverflowError",
    # Fixed Point Math: Types
    "FixedPointMath",
    # Fixed Point Math: Functions
    "floor_to_unit",
    "scale_constant",
]
