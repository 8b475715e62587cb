"""
Observation — запись временного ряда GWAV

Immutable Pydantic модели:
- Observation: одна запись кольцевого буфера (аккумулятор ln-значений)
- ObservationSeriesSnapshot: персистентное состояние ряда
  (массив фиксированной длины + курсор)

Полная совместимость с JSON Schema (contracts/schema/observation_series.json).
"""

from typing import Final, Literal

from pydantic import BaseModel, Field, StrictBool, StrictInt, field_validator

SNAPSHOT_SCHEMA_VERSION: Final[str] = "1"


class Observation(BaseModel):
    """
    Запись ряда наблюдений.

    accumulator — сумма ln(value) × elapsed_seconds с момента 0 (standard-масштаб),
    last_value — последнее наблюдённое значение, ставка для следующего прироста.
    Записи копируются по значению; незаписанный слот имеет initialized=False.
    """

    accumulator: StrictInt = Field(0, description="Σ ln(value) × Δt (знаковый)")
    last_value: StrictInt = Field(0, ge=0, description="Последнее наблюдённое значение")
    timestamp: StrictInt = Field(0, ge=0, description="Время наблюдения (секунды)")
    initialized: StrictBool = Field(False, description="Слот записан хотя бы раз")

    model_config = {"frozen": True}


EMPTY_OBSERVATION: Final[Observation] = Observation()


class ObservationSeriesSnapshot(BaseModel):
    """
    Персистентное состояние ряда: массив длины capacity + курсор.

    Единственное долговременное состояние ядра; хранение снапшота —
    ответственность внешнего слоя.
    """

    schema_version: Literal["1"] = Field(SNAPSHOT_SCHEMA_VERSION, description="Версия формата")
    capacity: StrictInt = Field(..., ge=2, description="Ёмкость кольцевого буфера")
    cursor: StrictInt = Field(..., ge=0, description="Индекс новейшей записи")
    observations: tuple[Observation, ...] = Field(..., description="Все слоты буфера")

    model_config = {"frozen": True}

    @field_validator("cursor")
    @classmethod
    def validate_cursor_in_range(cls, v: int, info) -> int:
        """Курсор указывает внутрь буфера."""
        capacity = info.data.get("capacity")
        if capacity is not None and v >= capacity:
            raise ValueError(f"cursor {v} out of range for capacity {capacity}")
        return v

    @field_validator("observations")
    @classmethod
    def validate_fixed_length(
        cls, v: tuple[Observation, ...], info
    ) -> tuple[Observation, ...]:
        """
        Длина массива равна ёмкости, а запись под курсором инициализирована.
        """
        capacity = info.data.get("capacity")
        if capacity is not None and len(v) != capacity:
            raise ValueError(f"expected {capacity} observations, got {len(v)}")
        cursor = info.data.get("cursor")
        if cursor is not None and cursor < len(v) and not v[cursor].initialized:
            raise ValueError(f"observation at cursor {cursor} is not initialized")
        return v
