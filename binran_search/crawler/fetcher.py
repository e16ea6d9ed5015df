# binran_search/crawler/fetcher.py
"""
Fetcher module: HTTP GET with a politeness delay and bounded linear retry.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional, Tuple

from aiohttp import ClientError, ClientSession

from binran_search.config import CrawlConfig
from binran_search.crawler.models import FetchedPage, FetchError
from binran_search.logger import get_logger

ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ACCEPT_LANGUAGE = "en-US,en;q=0.5"


def default_headers(user_agent: str) -> Dict[str, str]:
    """Header set sent with every request."""
    return {
        "User-Agent": user_agent,
        "Accept": ACCEPT,
        "Accept-Language": ACCEPT_LANGUAGE,
    }


def retry_decision(attempt: int, max_retries: int, backoff_base: float) -> Tuple[bool, float]:
    """
    Decide what to do after failed attempt number *attempt* (1-based).

    Returns ``(should_retry, wait_seconds)``; the wait grows linearly
    with the attempt number.
    """
    if attempt >= max_retries:
        return False, 0.0
    return True, backoff_base * attempt


class Fetcher:
    """Handles HTTP fetching with politeness delay and retries/backoff."""

    def __init__(self, session: ClientSession, config: CrawlConfig) -> None:
        self.session = session
        self.config = config
        self.logger = get_logger("fetcher")

    async def fetch_with_retry(self, url: str) -> FetchedPage:
        """
        Fetch *url*, retrying failed attempts.

        Any non-2xx status, client error or timeout counts as a failed
        attempt. Raises FetchError once ``max_retries`` attempts failed.
        """
        attempt = 0
        last_error: Optional[BaseException] = None
        while True:
            attempt += 1
            await asyncio.sleep(self.config.delay)
            try:
                async with self.session.get(url, raise_for_status=False) as resp:
                    if not 200 <= resp.status < 300:
                        raise ClientError(f"HTTP error {resp.status}")
                    text = await resp.text(errors="replace")
                    return FetchedPage(url, resp.status, text)
            except (ClientError, asyncio.TimeoutError) as exc:
                last_error = exc
                self.logger.warning(
                    "Fetch attempt %d/%d failed for %s: %r", attempt, self.config.max_retries, url, exc
                )
            should_retry, wait = retry_decision(attempt, self.config.max_retries, self.config.backoff_base)
            if not should_retry:
                raise FetchError(url, attempt, last_error)
            await asyncio.sleep(wait)
