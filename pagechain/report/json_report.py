# pagechain/report/json_report.py

"""
Генерация JSON-отчёта для проекта PageChain.

Сериализация CrawlResult в словарь и в файл.
"""
import json
from pathlib import Path
from typing import Any, Dict

from pagechain.scanner import CrawlResult


def build_report(result: CrawlResult) -> Dict[str, Any]:
    """Превращает CrawlResult в JSON-совместимый словарь."""
    return {
        "spider": result.spider.identity,
        "terminated": result.terminated,
        "exit_reason": result.spider.exit_reason,
        "pages": [
            {
                "url": p.url,
                "status": p.status,
                "depth": p.request.depth,
                "cycle_tried_times": p.request.cycle_tried_times,
                "content": p.content,
            }
            for p in result.pages
        ],
    }


def render_json(result: CrawlResult, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет отчёт в формате JSON по указанному пути.

    :param result: результат обхода
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    # Запись в файл с отступами и Unicode
    with output.open('w', encoding='utf-8') as f:
        json.dump(build_report(result), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
