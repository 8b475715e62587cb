"""
Domain models and value objects.

Contains pricing inputs/outputs and GWAV observation records.
"""

from optcore.core.domain.observation import (
    EMPTY_OBSERVATION,
    SNAPSHOT_SCHEMA_VERSION,
    Observation,
    ObservationSeriesSnapshot,
)
from optcore.core.domain.options import (
    BlackScholesInputs,
    OptionDeltas,
    OptionPrices,
    PricesAndGreeks,
)

__all__ = [
    # Options model
    "BlackScholesInputs",
    "PricesAndGreeks",
    "OptionPrices",
    "OptionDeltas",
    # Observation model
    "Observation",
    "ObservationSeriesSnapshot",
    "EMPTY_OBSERVATION",
    "SNAPSHOT_SCHEMA_VERSION",
]
