# water_parser/sanpin_norms.py
"""
Справочник норм СанПиН 1.2.3685-21 для питьевой воды.

Используется для проверки показателей и для подбора кода показателя
по его русскому названию.
"""
from __future__ import annotations

import re
from typing import Dict, List, Optional

from .schemas import NormViolation, SanPinNorm, WaterAnalysisResult


SANPIN_NORMS: Dict[str, SanPinNorm] = {
    "ph": SanPinNorm(min=6.0, max=9.0, unit="pH", name_ru="Водородный показатель (pH)"),
    "hardness": SanPinNorm(max=7.0, unit="мг-экв/л", name_ru="Жёсткость общая"),
    "iron": SanPinNorm(max=0.3, unit="мг/л", name_ru="Железо общее"),
    "manganese": SanPinNorm(max=0.1, unit="мг/л", name_ru="Марганец"),
    "turbidity": SanPinNorm(max=2.6, unit="НТУ", name_ru="Мутность"),
    "color": SanPinNorm(max=20, unit="градусы", name_ru="Цветность"),
    "odor": SanPinNorm(max=2, unit="баллы", name_ru="Запах"),
    "chlorides": SanPinNorm(max=350, unit="мг/л", name_ru="Хлориды"),
    "sulfates": SanPinNorm(max=500, unit="мг/л", name_ru="Сульфаты"),
    "nitrates": SanPinNorm(max=45, unit="мг/л", name_ru="Нитраты"),
    "nitrites": SanPinNorm(max=3.0, unit="мг/л", name_ru="Нитриты"),
    "ammonia": SanPinNorm(max=2.0, unit="мг/л", name_ru="Аммиак (аммоний)"),
    "tds": SanPinNorm(max=1000, unit="мг/л", name_ru="Сухой остаток (TDS)"),
    "oxidizability": SanPinNorm(max=5.0, unit="мг O₂/л", name_ru="Окисляемость перманганатная"),
    "fluoride": SanPinNorm(max=1.5, unit="мг/л", name_ru="Фториды"),
    "conductivity": SanPinNorm(max=2000, unit="мкСм/см", name_ru="Электропроводность"),
    "alkalinity": SanPinNorm(max=6.5, unit="мг-экв/л", name_ru="Щёлочность"),
    "sulphide": SanPinNorm(max=0.003, unit="мг/л", name_ru="Сероводород"),
}

# Типичные написания показателя в бланках лабораторий.
# Порядок важен: "перманганатная" содержит "марган", "сероводород" содержит "водород".
NAME_PATTERNS: Dict[str, List[str]] = {
    "oxidizability": [r"окисляем", r"перманганатн"],
    "sulphide": [r"сероводород", r"сульфид", r"\bh2s\b"],
    "ph": [r"\bph\b", r"водородн"],
    "hardness": [r"ж[её]стк"],
    "iron": [r"желез", r"\bfe\b"],
    "manganese": [r"марган", r"\bmn\b"],
    "turbidity": [r"мутн"],
    "color": [r"цветн"],
    "odor": [r"запах"],
    "chlorides": [r"хлорид"],
    "sulfates": [r"сульфат"],
    "nitrates": [r"нитрат"],
    "nitrites": [r"нитрит"],
    "ammonia": [r"аммиа", r"аммон"],
    "tds": [r"сух\w*\s+остат", r"минерализац", r"\btds\b"],
    "fluoride": [r"фтор"],
    "conductivity": [r"электропровод"],
    "alkalinity": [r"щ[её]лочн"],
}

_COMPILED_PATTERNS = {
    code: [re.compile(p, re.IGNORECASE) for p in patterns]
    for code, patterns in NAME_PATTERNS.items()
}


def get_norm(param_code: str) -> Optional[SanPinNorm]:
    """Норма по коду параметра (без учёта регистра)."""
    if not param_code:
        return None
    return SANPIN_NORMS.get(param_code.strip().lower())


def exceeds_norm(param_code: str, value: float) -> bool:
    """Проверить, выходит ли значение за норму."""
    norm = get_norm(param_code)
    if norm is None:
        return False
    if norm.min is not None and value < norm.min:
        return True
    if norm.max is not None and value > norm.max:
        return True
    return False


def match_norm_code(name: str) -> Optional[str]:
    """Код из справочника по названию показателя, если узнаём его."""
    if not name:
        return None
    s = name.strip().lower()
    if s in SANPIN_NORMS:
        return s
    for code, patterns in _COMPILED_PATTERNS.items():
        if any(p.search(s) for p in patterns):
            return code
    return None


def check_norms(result: WaterAnalysisResult) -> List[NormViolation]:
    """Все показатели документа, которые вышли за нормы СанПиН."""
    violations: List[NormViolation] = []
    for param in result.params:
        norm = get_norm(param.param_code)
        if norm is None:
            continue

        if norm.min is not None and param.value < norm.min:
            kind, limit = "min", norm.min
        elif norm.max is not None and param.value > norm.max:
            kind, limit = "max", norm.max
        else:
            continue

        violations.append(NormViolation(
            param_code=param.param_code,
            name=param.name or norm.name_ru,
            value=param.value,
            unit=param.unit or norm.unit,
            limit=limit,
            kind=kind,
        ))
    return violations
