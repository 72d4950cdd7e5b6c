# water_parser/json_fix.py
"""Восстановление JSON, который вернула LLM."""
from __future__ import annotations

import json
import re
from typing import Any, Callable, Optional, Tuple

from .logger import Logger


# Текстовые правки применяются по порядку, каждая идемпотентна
_REPAIRS: Tuple[Tuple[re.Pattern, str], ...] = (
    # комментарии // ... (но не http://)
    (re.compile(r"(?<!:)//[^\n]*"), ""),
    # trailing comma перед } или ]
    (re.compile(r",\s*([}\]])"), r"\1"),
    # 'key': -> "key":
    (re.compile(r"'([^'\n]+)'\s*:"), r'"\1":'),
    # NaN, Infinity, -Infinity -> null
    (re.compile(r"(?<=[:\[,])(\s*)-?(?:NaN|Infinity)\b"), r"\1null"),
)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"недопустимое значение {name}")


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant, strict=False)


def apply_repairs(text: str) -> str:
    """Применяет цепочку текстовых исправлений."""
    fixed = text
    for pattern, repl in _REPAIRS:
        fixed = pattern.sub(repl, fixed)
    return fixed


def _parse_as_is(text: str) -> Any:
    return _loads(text)


def _parse_repaired(text: str) -> Any:
    return _loads(apply_repairs(text))


def _parse_object_span(text: str) -> Any:
    fixed = apply_repairs(text)
    start = fixed.find("{")
    end = fixed.rfind("}")
    if start == -1 or end <= start:
        raise ValueError("объект {...} не найден")
    return _loads(fixed[start:end + 1])


_STRATEGIES: Tuple[Tuple[str, Callable[[str], Any]], ...] = (
    ("как есть", _parse_as_is),
    ("после исправлений", _parse_repaired),
    ("объект внутри текста", _parse_object_span),
)


def smart_fix_json(json_str: str, logger: Optional[Logger] = None) -> Any:
    """
    Пытается исправить типичные ошибки JSON от LLM и распарсить.

    Стратегии пробуются по очереди, первая удачная возвращает результат.
    Никогда не бросает исключение.

    Args:
        json_str: Кандидат из extract_json_block
        logger: Необязательный логгер с методами log/warn/error

    Returns:
        Распарсенное значение или None, если JSON невосстановим
    """
    if not isinstance(json_str, str):
        if logger is not None:
            logger.error("smart_fix_json: ожидалась строка, получено", type(json_str).__name__)
        return None

    for label, strategy in _STRATEGIES:
        try:
            return strategy(json_str)
        except (ValueError, RecursionError) as e:
            if logger is not None:
                logger.warn(f"smart_fix_json: попытка '{label}' не удалась: {e}")

    if logger is not None:
        logger.error("smart_fix_json: JSON невосстановим")
    return None
