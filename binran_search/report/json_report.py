# binran_search/report/json_report.py

"""
Генерация JSON-индекса для проекта BinranSearch.

Сериализация списка ScrapedRecord в один массив ``[{url, content}, ...]``.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Optional, Sequence

from binran_search.crawler.models import ScrapedRecord
from binran_search.logger import get_logger

logger = get_logger("report")


def index_filename(date_stamp: str) -> str:
    """Имя файла индекса для даты в формате YYYYMMDD."""
    return f"index-{date_stamp}.json"


def render_json(records: Iterable[ScrapedRecord], output_path: Path | str) -> Path:
    """
    Сохраняет записи в формате JSON по указанному пути.

    :param records: извлечённые страницы в порядке завершения обхода
    :param output_path: путь к JSON-файлу
    :return: Path сохранённого файла

    Пример:
    ```python
    from binran_search.report.json_report import render_json
    index_path = render_json(records, 'text-20250412/index-20250412.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data = [record.to_dict() for record in records]

    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return output


def write_index(records: Sequence[ScrapedRecord], output_dir: Path | str, date_stamp: str) -> Optional[Path]:
    """Пишет index-<date>.json; ошибки записи только логируются."""
    if not records:
        logger.info("No data collected to write to JSON index file.")
        return None
    path = Path(output_dir) / index_filename(date_stamp)
    try:
        render_json(records, path)
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Failed to write JSON index file %s: %s", path, exc)
        return None
    logger.info("Index JSON saved to: %s (%d records)", path, len(records))
    return path
