# water_parser/file_converter.py
"""Подготовка входного файла: изображения как есть, PDF постранично в PNG."""
from __future__ import annotations

import base64
import logging
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

try:
    import fitz  # PyMuPDF
    HAS_PYMUPDF = True
except ImportError:
    HAS_PYMUPDF = False

from .errors import ConversionError, UnsupportedFileError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp")
PDF_EXTENSION = ".pdf"
SUPPORTED_EXTENSIONS = IMAGE_EXTENSIONS + (PDF_EXTENSION,)

DEFAULT_DPI = 200


def get_file_type(file_path: str) -> str:
    """Тип файла по расширению: image, pdf или unknown."""
    ext = Path(file_path).suffix.lower()
    if ext in IMAGE_EXTENSIONS:
        return "image"
    if ext == PDF_EXTENSION:
        return "pdf"
    return "unknown"


def is_supported_file(file_path: str) -> bool:
    return get_file_type(file_path) != "unknown"


def pdf_to_images(pdf_path: str, out_dir: str, dpi: int = DEFAULT_DPI) -> List[str]:
    """
    Рендер страниц PDF в PNG.

    Returns:
        Пути к page-001.png, page-002.png, ... в порядке страниц
    """
    if not HAS_PYMUPDF:
        raise ConversionError("PyMuPDF не установлен. Установите: pip install pymupdf")

    images = []
    try:
        doc = fitz.open(pdf_path)
    except Exception as e:
        raise ConversionError(f"Ошибка конвертации PDF: {e}") from e

    try:
        # Увеличиваем масштаб, чтобы модель читала мелкий шрифт
        zoom = dpi / 72
        mat = fitz.Matrix(zoom, zoom)
        for page_num in range(len(doc)):
            pix = doc[page_num].get_pixmap(matrix=mat)
            out_path = Path(out_dir) / f"page-{page_num + 1:03d}.png"
            pix.save(str(out_path))
            images.append(str(out_path))
    finally:
        doc.close()

    return images


def convert_to_images(file_path: str, dpi: int = DEFAULT_DPI) -> Tuple[List[str], Optional[str]]:
    """
    Файл -> список изображений для модели.

    Для изображения возвращается сам файл и temp_dir=None.
    Для PDF страницы пишутся во временную директорию, её надо удалить
    через cleanup_temp_dir.
    """
    file_type = get_file_type(file_path)

    if file_type == "image":
        return [file_path], None

    if file_type == "pdf":
        temp_dir = tempfile.mkdtemp(prefix="water-parser-")
        try:
            images = pdf_to_images(file_path, temp_dir, dpi=dpi)
        except Exception:
            cleanup_temp_dir(temp_dir)
            raise
        if not images:
            cleanup_temp_dir(temp_dir)
            raise ConversionError(f"В PDF нет страниц: {file_path}")
        logger.debug("PDF %s: %d страниц", file_path, len(images))
        return images, temp_dir

    raise UnsupportedFileError(f"Неподдерживаемый формат файла: {Path(file_path).suffix}")


def cleanup_temp_dir(temp_dir: Optional[str]) -> None:
    """Удаляет временную директорию; ошибки очистки не важны."""
    if not temp_dir:
        return
    shutil.rmtree(temp_dir, ignore_errors=True)


def image_to_base64(file_path: str) -> str:
    return base64.b64encode(Path(file_path).read_bytes()).decode("ascii")


def get_file_size_kb(file_path: str) -> float:
    return Path(file_path).stat().st_size / 1024
