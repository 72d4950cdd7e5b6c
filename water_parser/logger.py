# water_parser/logger.py
"""Логгер, который можно передать в функции восстановления JSON.

Интерфейс совпадает с тремя методами: log, warn, error. Подходит любой
объект с такими методами; StdLogger оборачивает стандартный logging.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Protocol


class Logger(Protocol):
    def log(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str, *args: Any) -> None: ...


class StdLogger:
    """Адаптер logging.Logger к интерфейсу Logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("water_parser")

    def log(self, message: str) -> None:
        self._logger.info(message)

    def warn(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str, *args: Any) -> None:
        if args:
            message = " ".join([message, *(str(a) for a in args)])
        self._logger.error(message)
