# water_parser/errors.py
"""Исключения парсера бланков."""
from __future__ import annotations


class WaterParserError(Exception):
    """Базовая ошибка разбора документа."""


class NoJsonFoundError(WaterParserError, ValueError):
    """В ответе модели нет ничего похожего на JSON."""


class JsonUnrecoverableError(WaterParserError, ValueError):
    """JSON найден, но восстановить его не удалось."""


class OllamaError(WaterParserError, RuntimeError):
    """Ollama не ответила или ответила пустотой."""


class UnsupportedFileError(WaterParserError, ValueError):
    pass


class ConversionError(WaterParserError, RuntimeError):
    pass
