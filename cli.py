#!/usr/bin/env python3
"""
CLI для распознавания бланков анализа воды.

Использование:
    python cli.py ./analysis.jpg
    python cli.py ./protocol.pdf --output ./result.json
    python cli.py ./scans/ -m llava:13b
    python cli.py --check
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from water_parser.pipeline import PipelineConfig, WaterAnalysisPipeline, find_input_files


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="water-parser",
        description="Распознавание бланков анализа воды (фото, скан, PDF) через Ollama Vision",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры:
  water-parser analysis.jpg
  water-parser protocol.pdf --output result.json
  water-parser ./scans/ --model llava:13b -v
  water-parser --check
        """
    )
    parser.add_argument("input", nargs="?", help="Путь к файлу или папке (JPG, PNG, WEBP, GIF, BMP, PDF)")
    parser.add_argument("--output", "-o", help="Путь для сохранения JSON (по умолчанию: stdout)")
    parser.add_argument("--model", "-m", help="Модель Ollama (по умолчанию: llama3.2-vision:11b)")
    parser.add_argument("--host", help="Хост Ollama (по умолчанию: http://127.0.0.1:11434)")
    parser.add_argument("--no-cli-fallback", action="store_true",
                        help="Не пробовать ollama run, если HTTP API недоступен")
    parser.add_argument("--check", action="store_true", help="Проверить доступность Ollama и модели")
    parser.add_argument("-v", "--verbose", action="store_true", help="Подробный вывод")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    config = PipelineConfig.from_env(
        model=args.model,
        host=args.host.rstrip("/") if args.host else None,
        use_cli_fallback=False if args.no_cli_fallback else None,
    )
    pipeline = WaterAnalysisPipeline(config)

    # Проверка Ollama
    if args.check:
        status = pipeline.check_status()
        if status.available:
            print(f"Ollama доступна, модель {config.model} найдена")
            if args.verbose:
                for name in status.models:
                    print(f"  - {name}")
            sys.exit(0)
        print(f"Ошибка: {status.error}", file=sys.stderr)
        sys.exit(1)

    input_arg = args.input
    if not input_arg:
        parser.error("не указан путь к файлу или папке")

    input_path = Path(input_arg)
    if not input_path.exists():
        print(f"Ошибка: путь не найден: {input_path}", file=sys.stderr)
        sys.exit(1)

    if args.verbose:
        print(f"Обработка: {input_path}", file=sys.stderr)
        print(f"Модель: {config.model} @ {config.host}", file=sys.stderr)
        print("-" * 50, file=sys.stderr)

    # Пакетная обработка папки
    if input_path.is_dir():
        files = find_input_files(str(input_path))
        if not files:
            print(f"Ошибка: файлы не найдены в {input_path}", file=sys.stderr)
            sys.exit(1)
        print(f"Пакетная обработка: {len(files)} файлов", file=sys.stderr)
        results = pipeline.parse_batch(files)
        output_data = [r.model_dump(mode="json", by_alias=True) for r in results]
    else:
        results = [pipeline.parse_file(str(input_path))]
        output_data = results[0].model_dump(mode="json", by_alias=True)

    text = json.dumps(output_data, ensure_ascii=False, indent=2)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        print(f"Результат: {output_path}", file=sys.stderr)
    else:
        print(text)

    for result in results:
        if not result.success:
            print(f"ОШИБКА: {result.meta.source_file}: {result.error}", file=sys.stderr)
        elif result.warnings and args.verbose:
            print(f"Предупреждения ({result.meta.source_file}):", file=sys.stderr)
            for warn in result.warnings:
                print(f"  - {warn}", file=sys.stderr)

    if len(results) > 1:
        ok = sum(1 for r in results if r.success)
        print(f"\nГотово: {ok} успешно, {len(results) - ok} с ошибками", file=sys.stderr)

    # Возвращаем код ошибки если были ошибки
    has_errors = any(not r.success for r in results)
    sys.exit(1 if has_errors else 0)


if __name__ == "__main__":
    main()
