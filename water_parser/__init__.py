# water_parser/__init__.py
"""Разбор бланков анализа воды с помощью vision-модели Ollama."""
from __future__ import annotations

from .errors import (
    ConversionError,
    JsonUnrecoverableError,
    NoJsonFoundError,
    OllamaError,
    UnsupportedFileError,
    WaterParserError,
)
from .json_block import extract_json_block
from .json_fix import smart_fix_json
from .logger import Logger, StdLogger
from .merger import derive_param_code, ensure_param_codes, merge_results
from .normalizer import normalize_result
from .pipeline import PipelineConfig, WaterAnalysisPipeline, parse_model_reply
from .sanpin_norms import SANPIN_NORMS, check_norms, exceeds_norm, get_norm, match_norm_code
from .schemas import (
    NormViolation,
    OllamaStatus,
    ParseMeta,
    ParseResult,
    SanPinNorm,
    WaterAnalysisResult,
    WaterParam,
)

__version__ = "1.0.0"

__all__ = [
    "ConversionError",
    "JsonUnrecoverableError",
    "NoJsonFoundError",
    "OllamaError",
    "UnsupportedFileError",
    "WaterParserError",
    "extract_json_block",
    "smart_fix_json",
    "Logger",
    "StdLogger",
    "derive_param_code",
    "ensure_param_codes",
    "merge_results",
    "normalize_result",
    "PipelineConfig",
    "WaterAnalysisPipeline",
    "parse_model_reply",
    "SANPIN_NORMS",
    "check_norms",
    "exceeds_norm",
    "get_norm",
    "match_norm_code",
    "NormViolation",
    "OllamaStatus",
    "ParseMeta",
    "ParseResult",
    "SanPinNorm",
    "WaterAnalysisResult",
    "WaterParam",
]
