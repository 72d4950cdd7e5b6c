# water_parser/extractor.py
"""Обращение к vision-модели через Ollama."""
from __future__ import annotations

import logging
import subprocess
import time
from typing import Any, Dict, List, Optional

import requests

from .errors import OllamaError
from .file_converter import get_file_size_kb, image_to_base64
from .schemas import OllamaStatus

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama3.2-vision:11b"
DEFAULT_HOST = "http://127.0.0.1:11434"

SYSTEM_PROMPT = (
    "Ты эксперт по анализу воды. Тебе нужно структурировать показатели для "
    "автоматизации подбора фильтров. Используй строго camelCase для всех ключей JSON."
)

EXTRACTION_PROMPT = """Проанализируй изображение бланка/протокола анализа воды и извлеки данные в JSON:

{
  "blankNumber": "номер бланка или пустая строка",
  "analysisDate": "дата анализа или пустая строка",
  "customerName": "ФИО заказчика или пустая строка",
  "customerPhone": "телефон или пустая строка",
  "objectAddress": "адрес объекта или пустая строка",
  "intakeType": "тип водозабора (скважина/колодец/водопровод) или пустая строка",
  "appearance": "внешний вид воды или пустая строка",
  "sampleDate": "дата отбора пробы или пустая строка",
  "testDate": "дата проведения анализа или пустая строка",
  "params": [
    {
      "name": "Название показателя на русском",
      "value": 8.3,
      "unit": "единицы измерения",
      "pdk": 7.0,
      "paramCode": "код латиницей"
    }
  ],
  "modelAnalysis": "краткие рекомендации по водоподготовке"
}

ВАЖНО:
- params: массив ВСЕХ количественных показателей из документа
- value: только число (если "<0.1" или "менее 0.1", используй 0.05; если "не обнаружено", используй 0)
- pdk: ПДК по СанПиН если известна, иначе null
- paramCode: короткий код латиницей (hardness, ph, iron, manganese, nitrates, tds, conductivity и т.д.)
- Отвечай ТОЛЬКО валидным JSON без markdown-разметки"""


def build_chat_payload(
    image_b64: str,
    model: str = DEFAULT_MODEL,
    temperature: float = 0.1,
    num_predict: int = 4096,
) -> Dict[str, Any]:
    """Тело запроса к /api/chat с одной картинкой."""
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": EXTRACTION_PROMPT, "images": [image_b64]},
        ],
        "stream": False,
        "options": {"temperature": temperature, "num_predict": num_predict},
    }


def run_ollama_cli(model: str, prompt: str, timeout_sec: int = 180) -> str:
    """Запуск Ollama через CLI."""
    try:
        proc = subprocess.run(
            ["ollama", "run", model, prompt],
            capture_output=True,
            text=True,
            encoding="utf-8",
            timeout=timeout_sec,
        )
    except FileNotFoundError as e:
        raise OllamaError("Ollama CLI не найден в PATH") from e
    except subprocess.TimeoutExpired as e:
        raise OllamaError(f"Ollama CLI не ответил за {timeout_sec} с") from e

    if proc.returncode != 0:
        raise OllamaError(f"Ollama CLI failed: {proc.stderr[:500]}")
    return proc.stdout.strip()


def _chat_content(data: Any) -> str:
    """Текст ответа из тела /api/chat; OllamaError если структура не та."""
    message = data.get("message") if isinstance(data, dict) else None
    if not isinstance(message, dict):
        raise OllamaError(f"Неожиданный ответ /api/chat: {str(data)[:200]}")
    content = message.get("content")
    if not isinstance(content, str) or not content:
        raise OllamaError("Empty content from /api/chat")
    return content


def _model_names(data: Any) -> List[str]:
    """Имена моделей из тела /api/tags."""
    models = data.get("models") if isinstance(data, dict) else None
    if models is None:
        models = []
    if not isinstance(models, list):
        raise ValueError(f"неожиданный ответ /api/tags: {str(data)[:200]}")
    return [m["name"] for m in models if isinstance(m, dict) and isinstance(m.get("name"), str)]


def call_ollama_vision(
    image_path: str,
    model: str = DEFAULT_MODEL,
    host: str = DEFAULT_HOST,
    retries: int = 2,
    timeout: int = 180,
    temperature: float = 0.1,
    num_predict: int = 4096,
    use_cli_fallback: bool = True,
) -> str:
    """
    Отправляет изображение бланка модели и возвращает сырой текст ответа.

    HTTP API пробуется retries + 1 раз с паузой 1.5 ** attempt секунд,
    затем, если разрешено, ollama run.

    Raises:
        OllamaError: модель недоступна или вернула пустой ответ
    """
    image_b64 = image_to_base64(image_path)
    logger.debug("Изображение %s: %.1f KB", image_path, get_file_size_kb(image_path))

    payload = build_chat_payload(image_b64, model, temperature, num_predict)

    # Пробуем HTTP API с ретраями
    last_error: Optional[Exception] = None
    attempt = 0
    while attempt <= retries:
        try:
            r = requests.post(f"{host}/api/chat", json=payload, timeout=timeout)
            r.raise_for_status()
            content = _chat_content(r.json())
            logger.debug("Длина ответа: %d", len(content))
            return content
        except (requests.RequestException, ValueError, OllamaError) as e:
            # network/timeout/etc
            last_error = e
            attempt += 1
            if attempt > retries:
                logger.warning("HTTP API failed: %s", e)
                break
            backoff = 1.5 ** attempt
            time.sleep(backoff)

    if not use_cli_fallback:
        raise OllamaError(f"Ollama недоступна: {last_error}")

    # Fallback на CLI: путь к картинке в конце промпта
    prompt = f"{SYSTEM_PROMPT}\n\n{EXTRACTION_PROMPT}\n\n{image_path}"
    out = run_ollama_cli(model, prompt, timeout_sec=timeout)
    if not out:
        raise OllamaError("Пустой ответ Ollama CLI")
    return out


def check_ollama_status(
    model: str = DEFAULT_MODEL,
    host: str = DEFAULT_HOST,
    timeout: int = 10,
) -> OllamaStatus:
    """Проверяет доступность Ollama и наличие модели."""
    try:
        r = requests.get(f"{host}/api/tags", timeout=timeout)
        r.raise_for_status()
        models = _model_names(r.json())
    except (requests.RequestException, ValueError) as e:
        return OllamaStatus(
            available=False,
            error=f"Ollama недоступна: {e}. Запустите: docker compose up -d",
        )

    base_name = model.split(":")[0]
    if not any(base_name in m for m in models):
        return OllamaStatus(
            available=False,
            error=f"Модель {model} не найдена. Запустите: ollama pull {model}",
            models=models,
        )

    return OllamaStatus(available=True, models=models)
