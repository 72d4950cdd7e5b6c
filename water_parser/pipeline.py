# water_parser/pipeline.py
"""Основной пайплайн: файл -> страницы -> модель -> JSON -> итоговая запись."""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .errors import JsonUnrecoverableError, NoJsonFoundError, WaterParserError
from .extractor import DEFAULT_HOST, DEFAULT_MODEL, call_ollama_vision, check_ollama_status
from .file_converter import (
    DEFAULT_DPI,
    cleanup_temp_dir,
    convert_to_images,
    get_file_type,
    is_supported_file,
)
from .json_block import extract_json_block
from .json_fix import smart_fix_json
from .logger import Logger, StdLogger
from .merger import ensure_param_codes, merge_results
from .normalizer import normalize_result
from .sanpin_norms import check_norms
from .schemas import OllamaStatus, ParseMeta, ParseResult, WaterAnalysisResult

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    """Конфигурация пайплайна."""
    model: str = DEFAULT_MODEL
    host: str = DEFAULT_HOST
    temperature: float = 0.1
    num_predict: int = 4096
    timeout: int = 180
    retries: int = 2
    use_cli_fallback: bool = True
    pdf_dpi: int = DEFAULT_DPI
    check_norms: bool = True

    @classmethod
    def from_env(cls, **overrides) -> "PipelineConfig":
        """Значения из переменных окружения; overrides важнее окружения."""
        cfg = cls(
            model=os.getenv("OLLAMA_MODEL", DEFAULT_MODEL),
            host=os.getenv("OLLAMA_HOST", DEFAULT_HOST).rstrip("/"),
            temperature=float(os.getenv("OLLAMA_TEMPERATURE", "0.1")),
            num_predict=int(os.getenv("OLLAMA_NUM_PREDICT", "4096")),
            timeout=int(os.getenv("OLLAMA_TIMEOUT", "180")),
            retries=int(os.getenv("OLLAMA_RETRIES", "2")),
            pdf_dpi=int(os.getenv("PDF_DPI", str(DEFAULT_DPI))),
        )
        for key, value in overrides.items():
            if value is not None:
                setattr(cfg, key, value)
        return cfg


def parse_model_reply(text: str, json_logger: Optional[Logger] = None) -> WaterAnalysisResult:
    """
    Текст ответа модели -> запись одной страницы.

    Raises:
        NoJsonFoundError: в ответе нет JSON
        JsonUnrecoverableError: JSON не удалось восстановить
    """
    json_str = extract_json_block(text)
    if not json_str:
        raise NoJsonFoundError("Не удалось найти JSON в ответе модели")

    parsed = smart_fix_json(json_str, json_logger)
    if parsed is None:
        raise JsonUnrecoverableError("Не удалось распарсить JSON из ответа модели")

    return normalize_result(parsed)


class WaterAnalysisPipeline:
    """Пайплайн разбора бланков анализа воды."""

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def _json_logger(self) -> Optional[Logger]:
        # Подробности восстановления JSON нужны только в отладке
        if logger.isEnabledFor(logging.DEBUG):
            return StdLogger(logger)
        return None

    def check_status(self) -> OllamaStatus:
        return check_ollama_status(self.config.model, self.config.host)

    def recognize_page(self, image_path: str) -> WaterAnalysisResult:
        """Одна страница: запрос к модели и разбор ответа."""
        cfg = self.config
        reply = call_ollama_vision(
            image_path,
            model=cfg.model,
            host=cfg.host,
            retries=cfg.retries,
            timeout=cfg.timeout,
            temperature=cfg.temperature,
            num_predict=cfg.num_predict,
            use_cli_fallback=cfg.use_cli_fallback,
        )
        return parse_model_reply(reply, self._json_logger())

    def parse_file(self, file_path: str) -> ParseResult:
        """
        Разбор одного файла (изображение или PDF).

        Страница с ошибкой пропускается и попадает в warnings.
        Ошибкой всего файла считается только провал всех страниц.

        Args:
            file_path: Путь к файлу

        Returns:
            ParseResult с итоговой записью или с текстом ошибки
        """
        start = time.monotonic()
        meta = {"model": self.config.model, "source_file": str(file_path)}

        def _elapsed() -> int:
            return int((time.monotonic() - start) * 1000)

        def _failed(error: str, warnings: Optional[List[str]] = None, **extra) -> ParseResult:
            logger.error("%s: %s", file_path, error)
            return ParseResult(
                success=False,
                error=error,
                warnings=warnings or [],
                meta=ParseMeta(elapsed_ms=_elapsed(), **meta, **extra),
            )

        if not Path(file_path).is_file():
            return _failed(f"Файл не найден: {file_path}")
        if not is_supported_file(file_path):
            return _failed(f"Неподдерживаемый формат файла: {Path(file_path).suffix or file_path}")

        logger.info("Файл: %s (%s), модель: %s", file_path, get_file_type(file_path), self.config.model)

        temp_dir = None
        try:
            images, temp_dir = convert_to_images(file_path, dpi=self.config.pdf_dpi)
            total = len(images)

            pages: List[WaterAnalysisResult] = []
            warnings: List[str] = []
            last_error = ""
            for i, image in enumerate(images, start=1):
                if total > 1:
                    logger.info("Обработка страницы %d/%d", i, total)
                try:
                    pages.append(self.recognize_page(image))
                except (WaterParserError, OSError) as e:
                    last_error = str(e)
                    warnings.append(f"Страница {i}: {e}" if total > 1 else str(e))
                    logger.warning("Страница %d/%d пропущена: %s", i, total, e)

            if not pages:
                return _failed(
                    last_error,
                    warnings if total > 1 else None,
                    pages=total,
                    pages_failed=total,
                )

            # коды нужны до объединения: по ним идёт дедупликация
            merged = merge_results([ensure_param_codes(p) for p in pages])
            if self.config.check_norms:
                warnings.extend(v.describe() for v in check_norms(merged))

            elapsed = _elapsed()
            logger.info("Успешно за %d ms", elapsed)
            return ParseResult(
                success=True,
                data=merged,
                warnings=warnings,
                meta=ParseMeta(
                    elapsed_ms=elapsed,
                    pages=total,
                    pages_failed=total - len(pages),
                    **meta,
                ),
            )
        except WaterParserError as e:
            return _failed(str(e))
        finally:
            # Очищаем временные файлы
            cleanup_temp_dir(temp_dir)

    def parse_batch(self, file_paths: List[str]) -> List[ParseResult]:
        """Пакетная обработка: по результату на каждый файл, в том же порядке."""
        results = []
        for file_path in file_paths:
            try:
                results.append(self.parse_file(file_path))
            except Exception as e:
                logger.exception("Failed to process %s", file_path)
                results.append(ParseResult(
                    success=False,
                    error=f"Failed to process {file_path}: {e}",
                    meta=ParseMeta(model=self.config.model, source_file=str(file_path)),
                ))
        return results

    def parse_directory(self, dir_path: str) -> List[ParseResult]:
        """Все поддерживаемые файлы директории (без вложенных), по имени."""
        return self.parse_batch(find_input_files(dir_path))


def find_input_files(path: str) -> List[str]:
    """Файл -> [файл]; директория -> поддерживаемые файлы в ней."""
    p = Path(path)
    if p.is_dir():
        return sorted(str(f) for f in p.iterdir() if f.is_file() and is_supported_file(str(f)))
    return [str(p)]
