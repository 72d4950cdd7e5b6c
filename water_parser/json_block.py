# water_parser/json_block.py
"""Поиск JSON-блока в ответе LLM."""
from __future__ import annotations

import re
from typing import Optional

_CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
_LEADING_JSON_RE = re.compile(r"(\{[\s\S]*\}|\[[\s\S]*\])")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def extract_json_block(text: str) -> Optional[str]:
    """
    Вытаскиваем JSON из ответа модели.

    Модель часто оборачивает JSON в ```json ... ``` или пишет пояснение
    до и после. Скобки берём жадно: от первой открывающей до последней
    закрывающей, лишний хвост потом срежет smart_fix_json.

    Returns:
        Строка-кандидат или None, если ничего похожего на JSON нет
    """
    if not text or not isinstance(text, str):
        return None

    cleaned = text.strip()

    # Убираем markdown code block
    m = _CODE_BLOCK_RE.search(cleaned)
    if m:
        cleaned = m.group(1).strip()

    # Начинается с { или [: берём полный JSON
    if cleaned.startswith(("{", "[")):
        m = _LEADING_JSON_RE.search(cleaned)
        if m:
            return m.group(1)

    # Объект где-то в тексте, потом массив
    for pattern in (_OBJECT_RE, _ARRAY_RE):
        m = pattern.search(cleaned)
        if m:
            return m.group(0)

    return None
