"""
GWAV Oracle — геометрическое среднее, взвешенное по времени

Ряд наблюдений в кольцевом буфере фиксированной ёмкости. Каждая запись
хранит аккумулятор Σ ln(value) × Δt, поэтому геометрическое среднее
между двумя моментами получается вычитанием аккумуляторов:

    GWAV(A, B) = exp((acc(B) - acc(A)) / (t(B) - t(A)))

ЖИЗНЕННЫЙ ЦИКЛ:
    Uninitialized --initialize(value, ts)--> Active
    Active --write(value, ts)--> Active

WRITE:
    (a) ts совпадает с последней записью → last_value обновляется на месте
    (b) новый ts, значение изменилось → новая запись с приростом аккумулятора
    (c) новый ts, значение не изменилось → ничего не делается
    ts раньше последней записи → InvariantViolation

QUERY (target = now - seconds_ago):
    A: target >= новейшей записи → новейшая запись как есть
    B: target < старейшей записи → аккумулятор старейшей, пересчитанный
       пропорционально acc × target / ts (приближение для «предыстории»)
    C: иначе → бинарный поиск по кольцу: ts <= target < next.ts

Запись и чтение сериализуются RLock: запись читает и двигает курсор,
чтение видит согласованную пару (курсор, буфер).
"""

import threading
from dataclasses import dataclass
from typing import Any, Final, NoReturn

import structlog

from optcore.core.contracts.validators import validate_observation_series
from optcore.core.domain.observation import (
    EMPTY_OBSERVATION,
    Observation,
    ObservationSeriesSnapshot,
)
from optcore.core.math.decimal_math import (
    DEFAULT_PRECISION,
    DomainError,
    PrecisionConfig,
    div_trunc,
)
from optcore.core.math.fixed_point import FixedPointMath

logger = structlog.get_logger(__name__)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

GWAV_CAPACITY_DEFAULT: Final[int] = 65_535
GWAV_CAPACITY_MIN: Final[int] = 2


class InvariantViolation(Exception):
    """Нарушение инварианта ряда: ошибка вызывающей стороны или сдвиг часов."""


@dataclass(frozen=True)
class GWAVConfig:
    """Конфигурация ряда наблюдений."""
    capacity: int = GWAV_CAPACITY_DEFAULT
    precision: PrecisionConfig = DEFAULT_PRECISION

    def __post_init__(self) -> None:
        if self.capacity < GWAV_CAPACITY_MIN:
            raise ValueError(
                f"capacity must be >= {GWAV_CAPACITY_MIN}, got {self.capacity}"
            )


# =============================================================================
# OBSERVATION SERIES
# =============================================================================


class ObservationSeries:
    """
    Ряд наблюдений GWAV: массив из capacity записей и курсор новейшей.

    Каждая отслеживаемая метрика (implied vol листинга, skew) владеет
    собственным рядом. Значения и аккумуляторы в standard-масштабе.
    """

    def __init__(self, config: GWAVConfig | None = None):
        self.config = config or GWAVConfig()
        self.math = FixedPointMath(self.config.precision)
        self._observations: list[Observation] = [EMPTY_OBSERVATION] * self.config.capacity
        self._cursor = 0
        self._initialized = False
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Состояние
    # -------------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return self.config.capacity

    @property
    def cursor(self) -> int:
        """Индекс новейшей записи."""
        with self._lock:
            return self._cursor

    @property
    def initialized(self) -> bool:
        with self._lock:
            return self._initialized

    @property
    def latest(self) -> Observation:
        """Новейшая запись."""
        with self._lock:
            self._require_initialized()
            return self._observations[self._cursor]

    @property
    def oldest(self) -> Observation:
        """Старейшая сохранённая запись."""
        with self._lock:
            self._require_initialized()
            return self._oldest()

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for o in self._observations if o.initialized)

    # -------------------------------------------------------------------------
    # Запись
    # -------------------------------------------------------------------------

    def initialize(self, value: int, timestamp: int) -> None:
        """
        Первая запись ряда: accumulator = ln(value) × timestamp.

        Аккумулятор отсчитывается от момента 0, как если бы значение
        держалось с начала времени.

        Raises:
            DomainError: value <= 0
            InvariantViolation: ряд уже инициализирован или timestamp < 0
        """
        self._require_positive(value)
        with self._lock:
            if self._initialized:
                self._violation("gwav_double_initialize", timestamp=timestamp)
            if timestamp < 0:
                self._violation("gwav_negative_timestamp", timestamp=timestamp)

            self._observations[0] = Observation(
                accumulator=self.math.ln(value) * timestamp,
                last_value=value,
                timestamp=timestamp,
                initialized=True,
            )
            self._cursor = 0
            self._initialized = True
            logger.info("gwav_series_initialized", value=value, timestamp=timestamp)

    def write(self, value: int, timestamp: int) -> None:
        """
        Запись нового наблюдения (случаи a/b/c).

        Raises:
            DomainError: value <= 0
            InvariantViolation: ряд не инициализирован или timestamp
                раньше последней записи
        """
        self._require_positive(value)
        with self._lock:
            self._require_initialized()
            last = self._observations[self._cursor]

            if timestamp < last.timestamp:
                self._violation(
                    "gwav_non_monotonic_write",
                    timestamp=timestamp,
                    last_timestamp=last.timestamp,
                )

            if timestamp == last.timestamp:
                self._observations[self._cursor] = last.model_copy(update={"last_value": value})
                logger.debug("gwav_write_in_place", value=value, timestamp=timestamp)
                return

            if value == last.last_value:
                return

            cursor = (self._cursor + 1) % self.capacity
            if self._observations[cursor].initialized:
                logger.warning(
                    "gwav_series_wrapped",
                    overwritten_timestamp=self._observations[cursor].timestamp,
                    capacity=self.capacity,
                )
            self._observations[cursor] = Observation(
                accumulator=last.accumulator
                + self.math.ln(last.last_value) * (timestamp - last.timestamp),
                last_value=value,
                timestamp=timestamp,
                initialized=True,
            )
            self._cursor = cursor
            logger.debug("gwav_write_appended", value=value, timestamp=timestamp, cursor=cursor)

    # -------------------------------------------------------------------------
    # Запросы
    # -------------------------------------------------------------------------

    def query_first_before(self, now: int, seconds_ago: int) -> tuple[int, int]:
        """
        Аккумулятор и время записи, действующей на момент now - seconds_ago.

        Returns:
            (accumulator, timestamp); в случае B timestamp равен target

        Raises:
            InvariantViolation: seconds_ago > now или ряд не инициализирован
        """
        with self._lock:
            observation = self._query_first_before(now, seconds_ago)
            return observation.accumulator, observation.timestamp

    def query_first_before_and_scale(self, now: int, seconds_ago: int) -> tuple[int, int]:
        """
        Как query_first_before, но аккумулятор продлён ровно до target
        по last_value найденной записи.

        Returns:
            (accumulator, target)
        """
        with self._lock:
            observation = self._query_first_before(now, seconds_ago)
            target = now - seconds_ago
            if observation.timestamp == target:
                return observation.accumulator, target
            extension = self.math.ln(observation.last_value) * (target - observation.timestamp)
            return observation.accumulator + extension, target

    def get_gwav_for_period(self, now: int, seconds_ago_a: int, seconds_ago_b: int) -> int:
        """
        Геометрическое среднее между моментами now - seconds_ago_a и now - seconds_ago_b.

        Если обе точки разрешились в одну запись, возвращается среднее
        с начала времени exp(acc / t); для записи в момент 0 это её
        last_value.

        Returns:
            GWAV (standard-масштаб)
        """
        with self._lock:
            a = self._query_first_before(now, seconds_ago_a)
            b = self._query_first_before(now, seconds_ago_b)

        if a.timestamp == b.timestamp:
            if b.timestamp == 0:
                return b.last_value
            return self.math.exp(div_trunc(b.accumulator, b.timestamp))
        return self.math.exp(
            div_trunc(b.accumulator - a.accumulator, b.timestamp - a.timestamp)
        )

    def observe(self, now: int, seconds_agos: list[int]) -> tuple[list[int], list[int]]:
        """
        Пакетный query_first_before под одной блокировкой.

        Returns:
            (accumulators, timestamps) — параллельные списки
        """
        accumulators: list[int] = []
        timestamps: list[int] = []
        with self._lock:
            for seconds_ago in seconds_agos:
                observation = self._query_first_before(now, seconds_ago)
                accumulators.append(observation.accumulator)
                timestamps.append(observation.timestamp)
        return accumulators, timestamps

    def _query_first_before(self, now: int, seconds_ago: int) -> Observation:
        self._require_initialized()
        if seconds_ago > now:
            self._violation("gwav_query_before_origin", now=now, seconds_ago=seconds_ago)
        target = now - seconds_ago

        # Case A
        newest = self._observations[self._cursor]
        if newest.timestamp <= target:
            return newest

        # Case B
        oldest = self._oldest()
        if oldest.timestamp > target:
            return Observation(
                accumulator=div_trunc(oldest.accumulator * target, oldest.timestamp),
                last_value=oldest.last_value,
                timestamp=target,
                initialized=True,
            )

        # Case C
        return self._binary_search(target)

    def _binary_search(self, target: int) -> Observation:
        capacity = self.capacity
        left = self._oldest_index()
        right = left + capacity - 1
        while left <= right:
            i = (left + right) // 2
            before_or_at = self._observations[i % capacity]
            if not before_or_at.initialized:
                # Незаписанные слоты новее всего
                right = i - 1
                continue
            if before_or_at.timestamp > target:
                right = i - 1
                continue
            at_or_after = self._observations[(i + 1) % capacity]
            if target < at_or_after.timestamp:
                return before_or_at
            left = i + 1
        self._violation("gwav_corrupt_buffer", target=target, cursor=self._cursor)

    # -------------------------------------------------------------------------
    # Снапшоты
    # -------------------------------------------------------------------------

    def to_snapshot(self) -> dict[str, Any]:
        """
        Персистентное состояние: массив из capacity записей + курсор.

        Raises:
            InvariantViolation: ряд не инициализирован
        """
        with self._lock:
            self._require_initialized()
            snapshot = ObservationSeriesSnapshot(
                capacity=self.capacity,
                cursor=self._cursor,
                observations=tuple(self._observations),
            )
        return snapshot.model_dump(mode="json")

    @classmethod
    def from_snapshot(
        cls,
        data: dict[str, Any],
        precision: PrecisionConfig | None = None,
    ) -> "ObservationSeries":
        """
        Восстановление ряда из снапшота.

        Снапшот проверяется контрактом observation_series.json, затем
        Pydantic-моделью, затем на порядок записей по кольцу.

        Raises:
            jsonschema.ValidationError: снапшот не соответствует контракту
            pydantic.ValidationError: нарушены ограничения модели
            InvariantViolation: записи не упорядочены по времени
        """
        validate_observation_series(data)
        snapshot = ObservationSeriesSnapshot.model_validate(data)

        config = GWAVConfig(capacity=snapshot.capacity, precision=precision or DEFAULT_PRECISION)
        series = cls(config)
        series._observations = list(snapshot.observations)
        series._cursor = snapshot.cursor
        series._initialized = True
        series._check_ordering()
        return series

    def _check_ordering(self) -> None:
        start = self._oldest_index()
        length = (self._cursor - start) % self.capacity + 1
        previous: Observation | None = None
        for offset in range(self.capacity):
            index = (start + offset) % self.capacity
            observation = self._observations[index]
            if offset >= length:
                # За новейшей записью только незаписанные слоты
                if observation.initialized:
                    self._violation("gwav_snapshot_stray_observation", index=index)
                continue
            if not observation.initialized:
                self._violation("gwav_snapshot_gap", index=index)
            if previous is not None and observation.timestamp <= previous.timestamp:
                self._violation("gwav_snapshot_unordered", index=index)
            previous = observation

    # -------------------------------------------------------------------------
    # Внутреннее
    # -------------------------------------------------------------------------

    def _oldest_index(self) -> int:
        following = (self._cursor + 1) % self.capacity
        return following if self._observations[following].initialized else 0

    def _oldest(self) -> Observation:
        return self._observations[self._oldest_index()]

    def _require_initialized(self) -> None:
        if not self._initialized:
            self._violation("gwav_series_uninitialized")

    @staticmethod
    def _require_positive(value: int) -> None:
        if value <= 0:
            raise DomainError(f"observed value must be positive, got {value}")

    @staticmethod
    def _violation(event: str, **context: Any) -> NoReturn:
        logger.warning(event, **context)
        raise InvariantViolation(f"{event}: {context}")
