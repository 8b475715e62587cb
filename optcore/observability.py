"""
Observability — настройка структурированного логирования

Модули ядра получают логгер через structlog.get_logger(__name__) и пишут
события с именованными полями. Чистые математические примитивы не логируют;
логируются жизненный цикл рядов GWAV, перезапись старейших записей и
доменные ошибки перед пробросом.
"""

import logging

import structlog

_TIME_STAMPER = structlog.processors.TimeStamper(fmt="iso")
_LEVEL_ADDER = structlog.processors.add_log_level


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """
    Конфигурация structlog для процесса-потребителя ядра.

    Args:
        level: Минимальный уровень ("DEBUG", "INFO", "WARNING", ...)
        json: True — JSON-строки (для агрегаторов логов), False — консольный вывод
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _TIME_STAMPER,
            _LEVEL_ADDER,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
