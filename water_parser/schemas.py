# water_parser/schemas.py
"""Схемы данных бланка анализа воды."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Скалярные поля бланка в фиксированном порядке
SCALAR_FIELDS = (
    "blank_number",
    "analysis_date",
    "customer_name",
    "customer_phone",
    "object_address",
    "intake_type",
    "appearance",
    "sample_date",
    "test_date",
)


class _CamelModel(BaseModel):
    """Неизменяемая модель, которая сериализуется в camelCase."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        protected_namespaces=(),
    )


class WaterParam(_CamelModel):
    """Один показатель воды из бланка."""
    name: str = Field("", description="Название показателя (как в бланке)")
    value: float = Field(0.0, description="Числовое значение")
    unit: str = Field("", description="Единицы измерения")
    pdk: Optional[float] = Field(None, description="ПДК по СанПиН, None если не определена")
    param_code: str = Field("", description="Код показателя латиницей (ph, iron, hardness...)")


class WaterAnalysisResult(_CamelModel):
    """Результат разбора бланка (одной страницы или всего документа)."""
    blank_number: str = Field("", description="Номер бланка/протокола")
    analysis_date: str = Field("", description="Дата анализа")
    customer_name: str = Field("", description="ФИО заказчика")
    customer_phone: str = Field("", description="Телефон заказчика")
    object_address: str = Field("", description="Адрес объекта")
    intake_type: str = Field("", description="Тип водозабора (скважина, колодец, водопровод)")
    appearance: str = Field("", description="Внешний вид воды")
    sample_date: str = Field("", description="Дата отбора пробы")
    test_date: str = Field("", description="Дата проведения анализа")
    params: List[WaterParam] = Field(default_factory=list, description="Показатели в порядке извлечения")
    model_analysis: str = Field("", description="Рекомендации модели")


class SanPinNorm(_CamelModel):
    """Норма СанПиН для показателя."""
    min: Optional[float] = None
    max: Optional[float] = None
    unit: str
    name_ru: str


class NormViolation(_CamelModel):
    """Выход показателя за пределы нормы."""
    param_code: str
    name: str
    value: float
    unit: str
    limit: float
    kind: Literal["min", "max"]

    def describe(self) -> str:
        verb = "ниже нормы" if self.kind == "min" else "превышает норму"
        value = f"{self.value:g} {self.unit}" if self.unit else f"{self.value:g}"
        return f"{self.name}: {value} {verb} {self.limit:g}"


class OllamaStatus(BaseModel):
    """Статус Ollama."""
    available: bool
    error: Optional[str] = None
    models: List[str] = Field(default_factory=list)


class ParseMeta(BaseModel):
    model: str = ""
    elapsed_ms: int = 0
    source_file: str = ""
    pages: int = 0
    pages_failed: int = 0


class ParseResult(BaseModel):
    """Ответ парсера для одного файла."""
    success: bool
    data: Optional[WaterAnalysisResult] = None
    error: Optional[str] = None
    warnings: List[str] = Field(default_factory=list, description="Предупреждения")
    meta: ParseMeta = Field(default_factory=ParseMeta)
