# binran_search/crawler/processor.py
"""
Page processing: fetch one URL, store its text and report the in-scope links it holds.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Set
from urllib.parse import urljoin, urlsplit

from binran_search.config import CrawlConfig
from binran_search.crawler.fetcher import Fetcher
from binran_search.crawler.models import FetchError, ParseError, ScrapedRecord
from binran_search.logger import get_logger
from binran_search.parser.html_parser import parse_html
from binran_search.utils import is_in_scope, normalize_url, url_to_filename

__all__ = ("CrawlSession", "PageProcessor")


@dataclass
class CrawlSession:
    """State of one crawl run, shared by the worker calls of that run."""

    visited: Set[str] = field(default_factory=set)
    records: List[ScrapedRecord] = field(default_factory=list)
    filenames: Dict[str, str] = field(default_factory=dict)

    def claim(self, url: str) -> bool:
        """Mark *url* visited; False if it already was."""
        if url in self.visited:
            return False
        self.visited.add(url)
        return True

    def is_visited(self, url: str) -> bool:
        return url in self.visited


class PageProcessor:
    """Turns a URL into a saved text file, a ScrapedRecord and a list of new links."""

    def __init__(self, config: CrawlConfig, fetcher: Fetcher, session: CrawlSession, output_dir: Path) -> None:
        self.config = config
        self.fetcher = fetcher
        self.session = session
        self.output_dir = Path(output_dir)
        self.logger = get_logger("processor")

    def in_scope(self, url: str) -> bool:
        return is_in_scope(url, self.config.allowed_hostname, self.config.allowed_path_prefix)

    async def process(self, url: str) -> List[str]:
        """
        Process *url* once per session and return the in-scope, unvisited links found on it.

        Every failure is logged and yields an empty list.
        """
        # no await between the visited check and the mark
        if not self.in_scope(url) or not self.session.claim(url):
            return []

        self.logger.info("Processing: %s", url)
        try:
            page = await self.fetcher.fetch_with_retry(url)
            parsed = parse_html(url, page.content, self.config.content_selectors)
            if parsed.text:
                self._save_text(url, parsed.text)
                self.session.records.append(ScrapedRecord(url=url, content=parsed.text))
            else:
                self.logger.info("No text content found for %s", url)
            return self._discover(url, parsed.hrefs)
        except FetchError as exc:
            self.logger.error("Giving up on %s: %s", url, exc)
        except ParseError as exc:
            self.logger.warning("Could not parse HTML for %s: %s", url, exc)
        except Exception:
            self.logger.exception("Failed to process %s", url)
        return []

    def _save_text(self, url: str, text: str) -> None:
        filename = url_to_filename(url, ".txt", self.config.max_filename_length)
        previous = self.session.filenames.setdefault(filename, url)
        if previous != url:
            self.logger.warning("File name %s of %s already used by %s; overwriting", filename, url, previous)
            self.session.filenames[filename] = url
        path = self.output_dir / filename
        try:
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            self.logger.error("Failed to write %s: %s", path, exc)
            return
        self.logger.info("Saved text to %s", path)

    def _discover(self, page_url: str, hrefs: List[str]) -> List[str]:
        found: List[str] = []
        for href in hrefs:
            try:
                absolute = urljoin(page_url, href)
                scheme = urlsplit(absolute).scheme
            except ValueError:
                self.logger.debug("Skipping invalid href %r on %s", href, page_url)
                continue
            if scheme not in ("http", "https"):
                continue
            link = normalize_url(absolute)
            if self.in_scope(link) and not self.session.is_visited(link):
                found.append(link)
        return found
