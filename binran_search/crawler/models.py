# binran_search/crawler/models.py
"""
Data models and errors for the BinranSearch crawler.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional


@dataclass(slots=True, frozen=True)
class ScrapedRecord:
    """Extracted text of one crawled page, as stored in the JSON index."""

    url: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(slots=True)
class FetchedPage:
    """Successful HTTP response: final status and decoded body."""

    url: str
    status: int
    content: str


class CrawlError(Exception):
    """Base class for per-page crawl failures."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})")
        self.url = url


class FetchError(CrawlError):
    """Raised when every fetch attempt for a URL has failed."""

    def __init__(self, url: str, attempts: int, cause: Optional[BaseException] = None) -> None:
        super().__init__(url, f"Failed to fetch after {attempts} attempts: {cause}")
        self.attempts = attempts
        self.cause = cause


class ParseError(CrawlError):
    """Raised when a response body cannot be parsed as HTML."""
