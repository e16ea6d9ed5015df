# File: binran_search/engine.py
"""binran_search.engine: Orchestration layer для запуска обхода и записи индекса."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from binran_search.config import CrawlConfig
from binran_search.crawler.crawler import AsyncCrawler
from binran_search.crawler.models import ScrapedRecord
from binran_search.logger import logger
from binran_search.report.json_report import index_filename, write_index

__all__ = ["CrawlResult", "output_paths", "start_crawl"]


@dataclass(slots=True)
class CrawlResult:
    """Итог одного запуска: каталог с текстами, путь к индексу и записи."""

    output_dir: Path
    index_path: Optional[Path]
    records: List[ScrapedRecord] = field(default_factory=list)
    visited: int = 0


def date_stamp(today: Optional[dt.date] = None) -> str:
    return (today or dt.date.today()).strftime("%Y%m%d")


def output_paths(config: CrawlConfig, today: Optional[dt.date] = None) -> Tuple[Path, Path]:
    """Каталог text-YYYYMMDD и путь к index-YYYYMMDD.json внутри него."""
    stamp = date_stamp(today)
    output_dir = Path(config.output_root) / f"text-{stamp}"
    return output_dir, output_dir / index_filename(stamp)


async def start_crawl(config: CrawlConfig, today: Optional[dt.date] = None) -> CrawlResult:
    """Создаёт каталог вывода, обходит сайт и пишет JSON-индекс.

    Ошибка создания каталога фатальна и пробрасывается вызывающему.
    """
    stamp = date_stamp(today)
    output_dir, _ = output_paths(config, today)
    logger.info("Output dir: %s", output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    async with AsyncCrawler(config, output_dir) as crawler:
        records = await crawler.crawl()
        visited = len(crawler.state.visited)

    index_path = write_index(records, output_dir, stamp)
    return CrawlResult(output_dir=output_dir, index_path=index_path, records=list(records), visited=visited)
