"""
Oracle — GWAV ряды наблюдений (геометрическое среднее, взвешенное по времени).
"""

from optcore.oracle.gwav import (
    GWAV_CAPACITY_DEFAULT,
    GWAV_CAPACITY_MIN,
    GWAVConfig,
    InvariantViolation,
    ObservationSeries,
)

__all__ = [
    "GWAV_CAPACITY_DEFAULT",
    "GWAV_CAPACITY_MIN",
    "GWAVConfig",
    "InvariantViolation",
    "ObservationSeries",
]
