"""
JSON Schema Contract Validators

Модуль для валидации JSON данных, которыми ядро обменивается с внешним
слоем (risk cache / market) и которые оно отдаёт на хранение.
Использует библиотеку jsonschema для проверки соответствия данных схемам.

Схемы (contracts/schema/ внутри пакета):
- black_scholes_inputs.json — входы модели Блэка-Шоулза
- prices_and_greeks.json — цены и греки
- observation_series.json — снапшот ряда GWAV
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы поставляются как package data рядом с этим модулем.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'observation_series')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если файл не является валидной JSON Schema
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Валидация данных против схемы.

        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        """Проверка валидности данных без exception."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        """Итератор по всем ошибкам валидации."""
        return self.validator.iter_errors(data)


class BlackScholesInputsValidator(ContractValidator):
    """Валидатор входов модели Блэка-Шоулза."""

    def __init__(self):
        super().__init__("black_scholes_inputs")


class PricesAndGreeksValidator(ContractValidator):
    """Валидатор цен и греков."""

    def __init__(self):
        super().__init__("prices_and_greeks")


class ObservationSeriesValidator(ContractValidator):
    """
    Валидатор снапшота ряда GWAV.

    Схема проверяет форму записей; длина массива относительно capacity
    и положение курсора проверяются Pydantic-моделью снапшота.
    """

    def __init__(self):
        super().__init__("observation_series")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_black_scholes_inputs(data: Dict[str, Any]) -> None:
    """
    Валидация входов модели Блэка-Шоулза.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    BlackScholesInputsValidator().validate(data)


def validate_prices_and_greeks(data: Dict[str, Any]) -> None:
    """
    Валидация цен и греков.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    PricesAndGreeksValidator().validate(data)


def validate_observation_series(data: Dict[str, Any]) -> None:
    """
    Валидация снапшота ряда GWAV.

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    ObservationSeriesValidator().validate(data)
