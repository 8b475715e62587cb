"""
Options — входы и результаты модели Блэка-Шоулза

Immutable Pydantic модели для обмена с внешним слоем (risk cache / market).
Все денежные величины, волатильность, ставка и дельты — целые числа
в standard-масштабе (1e18). StrictInt запрещает float на входе:
детерминизм цены требует чисто целочисленного ввода.

Полная совместимость с JSON Schema (contracts/schema/black_scholes_inputs.json,
contracts/schema/prices_and_greeks.json).
"""

from typing import NamedTuple

from pydantic import BaseModel, Field, StrictInt


class BlackScholesInputs(BaseModel):
    """
    Входы модели Блэка-Шоулза для одного страйка.

    Минимумы времени и волатильности применяются движком перед
    использованием, поэтому нулевые значения допустимы.
    """

    time_to_expiry_sec: StrictInt = Field(..., ge=0, description="Время до экспирации (секунды)")
    volatility: StrictInt = Field(..., ge=0, description="Годовая волатильность (1e18 = 100%)")
    spot: StrictInt = Field(..., gt=0, description="Цена базового актива")
    strike: StrictInt = Field(..., gt=0, description="Страйк")
    rate: StrictInt = Field(..., description="Безрисковая ставка (знаковая)")

    model_config = {"frozen": True}


class PricesAndGreeks(BaseModel):
    """
    Цены колла/пута и греки для одного набора входов.

    Создаётся заново на каждый вызов, не имеет владельца.
    Инвариант движка: call_delta - put_delta = unit.
    """

    call_price: StrictInt = Field(..., ge=0, description="Цена колла")
    put_price: StrictInt = Field(..., ge=0, description="Цена пута")
    call_delta: StrictInt = Field(..., ge=0, description="Дельта колла [0, unit]")
    put_delta: StrictInt = Field(..., le=0, description="Дельта пута [-unit, 0]")
    vega: StrictInt = Field(..., ge=0, description="Вега на единицу волатильности")
    std_vega: StrictInt = Field(
        ..., ge=0, description="Стандартизованная вега (на 1% волатильности, 30-дневная нормировка)"
    )

    model_config = {"frozen": True}


class OptionPrices(NamedTuple):
    """Цены колла и пута (standard-масштаб)."""
    call: int
    put: int


class OptionDeltas(NamedTuple):
    """Дельты колла и пута (standard-масштаб)."""
    call: int
    put: int
