# water_parser/merger.py
"""Объединение результатов со страниц одного документа."""
from __future__ import annotations

import re
from typing import Dict, Iterable, Sequence

from .sanpin_norms import match_norm_code
from .schemas import SCALAR_FIELDS, WaterAnalysisResult, WaterParam


# Транслитерация для кода показателя, если в справочнике его нет
TRANSLIT = {
    "а": "a", "б": "b", "в": "v", "г": "g", "д": "d", "е": "e", "ё": "e",
    "ж": "zh", "з": "z", "и": "i", "й": "y", "к": "k", "л": "l", "м": "m",
    "н": "n", "о": "o", "п": "p", "р": "r", "с": "s", "т": "t", "у": "u",
    "ф": "f", "х": "kh", "ц": "ts", "ч": "ch", "ш": "sh", "щ": "shch",
    "ъ": "", "ы": "y", "ь": "", "э": "e", "ю": "yu", "я": "ya",
}

MAX_CODE_LENGTH = 32


def _first_non_empty(values: Iterable[str]) -> str:
    for v in values:
        if v and v.strip():
            return v
    return ""


def merge_results(results: Sequence[WaterAnalysisResult]) -> WaterAnalysisResult:
    """
    Объединяет результаты с нескольких страниц.

    - скалярные поля: первое непустое значение по порядку страниц
    - params: без дубликатов по param_code (или name), первое значение остаётся
    - model_analysis: все непустые через перевод строки
    """
    results = list(results)
    if not results:
        return WaterAnalysisResult()
    if len(results) == 1:
        return results[0]

    params: Dict[str, WaterParam] = {}
    for result in results:
        for param in result.params:
            key = param.param_code or param.name
            if key not in params:
                params[key] = param

    analyses = "\n".join(
        r.model_analysis for r in results if r.model_analysis and r.model_analysis.strip()
    )

    scalars = {field: _first_non_empty(getattr(r, field) for r in results) for field in SCALAR_FIELDS}

    return WaterAnalysisResult(
        params=list(params.values()),
        model_analysis=analyses,
        **scalars,
    )


def derive_param_code(name: str, position: int = 1) -> str:
    """
    Код показателя из названия, когда модель его не дала.

    Сначала ищем в справочнике СанПиН, иначе транслит. Если от названия
    ничего не осталось, то param_<position>.
    """
    code = match_norm_code(name)
    if code:
        return code
    text = "".join(TRANSLIT.get(ch, ch) for ch in (name or "").lower())
    code = re.sub(r"[^a-z0-9]+", "_", text).strip("_")
    code = code[:MAX_CODE_LENGTH].rstrip("_")
    return code or f"param_{position}"


def ensure_param_codes(result: WaterAnalysisResult) -> WaterAnalysisResult:
    """Новая запись, где у каждого показателя есть param_code."""
    if all(p.param_code for p in result.params):
        return result
    params = [
        p if p.param_code else p.model_copy(update={"param_code": derive_param_code(p.name, i)})
        for i, p in enumerate(result.params, start=1)
    ]
    return result.model_copy(update={"params": params})
