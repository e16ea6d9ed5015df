# File: tests/conftest.py
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web

from binran_search.config import CrawlConfig

#: path prefix every test site lives under
SITE_PREFIX = "/site/"


@pytest.fixture()
def make_config(tmp_path: Path) -> Callable[..., CrawlConfig]:
    """
    Return a factory building a fast CrawlConfig for a local test server.
    """

    def _make(base_url: str, **overrides) -> CrawlConfig:
        params = dict(
            start_url=f"{base_url}{SITE_PREFIX}home",
            allowed_path_prefix=SITE_PREFIX,
            delay=0.0,
            backoff_base=0.01,
            max_retries=3,
            max_concurrency=5,
            user_agent="TestAgent/1.0",
            output_root=tmp_path,
        )
        params.update(overrides)
        return CrawlConfig(**params)

    return _make


@pytest.fixture()
def default_config(tmp_path: Path) -> CrawlConfig:
    """Built-in defaults (the real site), writing into *tmp_path*."""
    return CrawlConfig(output_root=tmp_path)


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> AsyncIterator[Callable[[web.Application], Awaitable[str]]]:
    """
    Start aiohttp applications on free ports; yield a coroutine returning the base URL.
    Every started server is cleaned up after the test.
    """
    runners: list[web.AppRunner] = []

    async def _serve(app: web.Application) -> str:
        port = unused_tcp_port_factory()
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "localhost", port)
        await site.start()
        runners.append(runner)
        return f"http://localhost:{port}"

    yield _serve

    for runner in runners:
        await runner.cleanup()
