# binran_search/crawler/crawler.py
"""
Breadth-first crawl driver: owns the HTTP session and feeds URL layers to the page processor.
"""
from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Awaitable, Iterable, List, Optional, Set

from aiohttp import ClientSession, ClientTimeout

from binran_search.config import CrawlConfig
from binran_search.crawler.fetcher import Fetcher, default_headers
from binran_search.crawler.models import ScrapedRecord
from binran_search.crawler.processor import CrawlSession, PageProcessor
from binran_search.logger import get_logger
from binran_search.utils import normalize_url

__all__ = ("AsyncCrawler",)


class AsyncCrawler:
    """Breadth-first crawler: one layer of links at a time, bounded concurrency inside a layer."""

    def __init__(self, config: CrawlConfig, output_dir: Path, session: Optional[CrawlSession] = None) -> None:
        self.config = config
        self.output_dir = Path(output_dir)
        self.state = session or CrawlSession()
        self.http: Optional[ClientSession] = None
        self.processor: Optional[PageProcessor] = None
        self.layers: int = 0
        self.logger = get_logger("crawler")

    async def __aenter__(self) -> AsyncCrawler:
        timeout = ClientTimeout(total=self.config.timeout)
        self.http = ClientSession(
            timeout=timeout,
            headers=default_headers(self.config.user_agent),
            raise_for_status=False,
        )
        fetcher = Fetcher(self.http, self.config)
        self.processor = PageProcessor(self.config, fetcher, self.state, self.output_dir)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.http and not self.http.closed:
            await self.http.close()

    async def crawl(self) -> List[ScrapedRecord]:
        if self.processor is None:
            raise RuntimeError("Session not initialized")
        start_url = normalize_url(str(self.config.start_url))
        self.logger.info("Starting text crawl for %s", start_url)
        self.logger.info(
            "Allowed: %s%s, concurrency %d, delay %.2f s",
            self.config.allowed_hostname,
            self.config.allowed_path_prefix,
            self.config.max_concurrency,
            self.config.delay,
        )
        started = time.monotonic()

        frontier: Set[str] = {start_url}
        while frontier:
            batch = list(frontier)
            frontier.clear()
            self.layers += 1
            self.logger.info("Layer %d: processing batch of %d URLs", self.layers, len(batch))

            for done in self._pooled(batch):
                for url in await done:
                    if not self.state.is_visited(url):
                        frontier.add(url)
            self.logger.info("Layer %d: found %d new URLs", self.layers, len(frontier))

        duration = time.monotonic() - started
        self.logger.info(
            "Crawl finished: visited %d pages, extracted %d in %.2f s",
            len(self.state.visited),
            len(self.state.records),
            duration,
        )
        return self.state.records

    def _pooled(self, batch: Iterable[str]) -> Iterable[Awaitable[List[str]]]:
        """Schedule ``process`` for every URL of *batch*; yield results in completion order."""
        if self.processor is None:
            raise RuntimeError("Session not initialized")
        processor = self.processor
        semaphore = asyncio.Semaphore(self.config.max_concurrency)

        async def limited(url: str) -> List[str]:
            async with semaphore:
                return await processor.process(url)

        return asyncio.as_completed([limited(url) for url in batch])
