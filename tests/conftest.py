# tests/conftest.py
"""
Общие фикстуры тестов water_parser.

- ответы модели (в markdown, с поясняющим текстом, битые)
- записи страниц для проверки объединения
- заглушки HTTP-ответов Ollama
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

from water_parser.schemas import WaterAnalysisResult, WaterParam


@pytest.fixture
def fenced_reply() -> str:
    """Ответ модели с JSON в блоке ```json."""
    return (
        "Here is the result:\n```json\n"
        '{"blankNumber": "42", "params": [{"name": "pH", "value": "7.0", "paramCode": "ph"}]}'
        "\n```"
    )


@pytest.fixture
def full_page_payload() -> Dict[str, Any]:
    """Полная страница в camelCase, как её просит промпт."""
    return {
        "blankNumber": "117/24",
        "analysisDate": "12.03.2024",
        "customerName": "Иванов И.И.",
        "customerPhone": "+7 900 000-00-00",
        "objectAddress": "д. Берёзовка, ул. Лесная, 5",
        "intakeType": "скважина",
        "appearance": "прозрачная",
        "sampleDate": "10.03.2024",
        "testDate": "11.03.2024",
        "params": [
            {"name": "Железо общее", "value": 0.5, "unit": "мг/л", "pdk": 0.3, "paramCode": "iron"},
            {"name": "Жёсткость общая", "value": 8.3, "unit": "мг-экв/л", "pdk": 7.0, "paramCode": "hardness"},
            {"name": "pH", "value": 7.2, "unit": "", "pdk": None, "paramCode": "ph"},
        ],
        "modelAnalysis": "Рекомендуется обезжелезивание и умягчение.",
    }


@pytest.fixture
def page_a() -> WaterAnalysisResult:
    return WaterAnalysisResult(
        blank_number="1",
        customer_name="Ivanov",
        params=[WaterParam(name="pH", value=7.1, param_code="ph")],
        model_analysis="Страница 1",
    )


@pytest.fixture
def page_b() -> WaterAnalysisResult:
    return WaterAnalysisResult(
        customer_name="Petrov",
        object_address="ул. Садовая, 1",
        params=[
            WaterParam(name="pH", value=7.3, param_code="ph"),
            WaterParam(name="Железо", value=0.2, unit="мг/л", param_code="iron"),
        ],
        model_analysis="Страница 2",
    )


@pytest.fixture
def image_file(tmp_path: Path) -> Path:
    """Файл-изображение; содержимое модели не важно, она замокана."""
    path = tmp_path / "blank.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake")
    return path


def make_chat_response(content: str, status_code: int = 200) -> MagicMock:
    """Заглушка requests.Response для /api/chat."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = {"message": {"role": "assistant", "content": content}}
    response.raise_for_status.return_value = None
    return response


def make_tags_response(models: List[str]) -> MagicMock:
    """Заглушка requests.Response для /api/tags."""
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = {"models": [{"name": m} for m in models]}
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def chat_response():
    return make_chat_response


@pytest.fixture
def tags_response():
    return make_tags_response
