# water_parser/normalizer.py
"""Приведение распарсенного ответа модели к WaterAnalysisResult."""
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Tuple

from .schemas import WaterAnalysisResult, WaterParam


# Допустимые ключи для каждого поля: сначала camelCase, затем snake_case.
# Берётся первый присутствующий непустой.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "blank_number": ("blankNumber", "blank_number"),
    "analysis_date": ("analysisDate", "analysis_date"),
    "customer_name": ("customerName", "customer_name"),
    "customer_phone": ("customerPhone", "customer_phone"),
    "object_address": ("objectAddress", "object_address"),
    "intake_type": ("intakeType", "intake_type"),
    "appearance": ("appearance",),
    "sample_date": ("sampleDate", "sample_date"),
    "test_date": ("testDate", "test_date"),
    "model_analysis": ("modelAnalysis", "model_analysis"),
}

PARAMS_ALIASES: Tuple[str, ...] = ("params", "parameters")

PARAM_ALIASES: Dict[str, Tuple[str, ...]] = {
    "name": ("name",),
    "value": ("value",),
    "unit": ("unit",),
    "pdk": ("pdk",),
    "param_code": ("paramCode", "param_code"),
}

# Обёртки, в которые модель иногда кладёт ответ: {"data": {...}}
WRAPPER_KEYS: Tuple[str, ...] = ("data", "result", "payload", "output", "response")

# Строки-заглушки, которые считаем отсутствием значения
PLACEHOLDERS = {"null", "none", "n/a", "-"}

_KNOWN_KEYS = {key for aliases in FIELD_ALIASES.values() for key in aliases} | set(PARAMS_ALIASES)


def _to_str(value: Any) -> str:
    """Строковое представление скаляра; пустая строка если непредставимо."""
    if value is None or isinstance(value, (list, dict)):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    s = str(value).strip()
    if s.lower() in PLACEHOLDERS:
        return ""
    return s


def _to_float(value: Any) -> Optional[float]:
    """Число из значения модели; None если это не конечное число."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        # пробелы между разрядами, десятичная запятая
        value = value.strip().replace("\u00a0", "").replace(" ", "").replace(",", ".")
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _first_str(src: Dict[str, Any], keys: Tuple[str, ...]) -> str:
    for key in keys:
        s = _to_str(src.get(key))
        if s:
            return s
    return ""


def _first_list(src: Dict[str, Any], keys: Tuple[str, ...]) -> List[Any]:
    for key in keys:
        v = src.get(key)
        if isinstance(v, list):
            return v
    return []


def _unwrap(data: Dict[str, Any]) -> Dict[str, Any]:
    """Если ни одного известного ключа нет, но есть обёртка-словарь, берём её."""
    if any(key in data for key in _KNOWN_KEYS):
        return data
    for key in WRAPPER_KEYS:
        nested = data.get(key)
        if isinstance(nested, dict):
            return nested
    return data


def normalize_param(item: Any) -> Optional[WaterParam]:
    """Один показатель. Не-словари пропускаются (None)."""
    if not isinstance(item, dict):
        return None

    value = None
    for key in PARAM_ALIASES["value"]:
        value = _to_float(item.get(key))
        if value is not None:
            break

    pdk = None
    for key in PARAM_ALIASES["pdk"]:
        pdk = _to_float(item.get(key))
        if pdk is not None:
            break

    return WaterParam(
        name=_first_str(item, PARAM_ALIASES["name"]),
        # нет значения или мусор -> 0
        value=value if value is not None else 0.0,
        unit=_first_str(item, PARAM_ALIASES["unit"]),
        pdk=pdk,
        param_code=_first_str(item, PARAM_ALIASES["param_code"]).lower(),
    )


def normalize_result(parsed: Any) -> WaterAnalysisResult:
    """
    Нормализует результат парсинга.

    Всегда возвращает полную запись: отсутствующие и битые поля
    заменяются значениями по умолчанию. На вход можно подать что угодно,
    включая None, список или число.
    """
    if not isinstance(parsed, dict):
        return WaterAnalysisResult()

    data = _unwrap(parsed)

    fields = {name: _first_str(data, keys) for name, keys in FIELD_ALIASES.items()}

    params = []
    for item in _first_list(data, PARAMS_ALIASES):
        param = normalize_param(item)
        if param is not None:
            params.append(param)

    return WaterAnalysisResult(params=params, **fields)
