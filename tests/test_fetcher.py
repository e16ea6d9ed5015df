import time

import pytest
from aiohttp import ClientSession, web

from binran_search.crawler.fetcher import ACCEPT, ACCEPT_LANGUAGE, Fetcher, default_headers, retry_decision
from binran_search.crawler.models import FetchError


@pytest.mark.parametrize(
    "attempt,expected",
    [
        (1, (True, 1.0)),
        (2, (True, 2.0)),
        (3, (False, 0.0)),
        (4, (False, 0.0)),
    ],
)
def test_retry_decision_is_linear(attempt, expected):
    assert retry_decision(attempt, 3, 1.0) == expected


def test_retry_decision_single_attempt_never_retries():
    assert retry_decision(1, 1, 5.0) == (False, 0.0)


def flaky_app(failures: int, calls: dict) -> web.Application:
    app = web.Application()

    async def flaky(request):
        calls["n"] += 1
        calls["headers"] = dict(request.headers)
        if calls["n"] <= failures:
            return web.Response(status=503)
        return web.Response(text="<p>Recovered</p>", content_type="text/html")

    app.router.add_get("/site/flaky", flaky)
    return app


@pytest.mark.asyncio()
async def test_recovers_within_retry_budget(serve, make_config):
    calls = {"n": 0}
    base = await serve(flaky_app(2, calls))
    config = make_config(base, max_retries=3)

    async with ClientSession(headers=default_headers(config.user_agent)) as http:
        page = await Fetcher(http, config).fetch_with_retry(f"{base}/site/flaky")

    assert page.status == 200
    assert "Recovered" in page.content
    assert calls["n"] == 3


@pytest.mark.asyncio()
async def test_gives_up_after_max_retries(serve, make_config):
    calls = {"n": 0}
    base = await serve(flaky_app(3, calls))
    config = make_config(base, max_retries=3)

    async with ClientSession() as http:
        with pytest.raises(FetchError) as info:
            await Fetcher(http, config).fetch_with_retry(f"{base}/site/flaky")

    assert info.value.attempts == 3
    assert info.value.url == f"{base}/site/flaky"
    assert calls["n"] == 3


@pytest.mark.asyncio()
async def test_not_found_is_a_failed_attempt(serve, make_config):
    base = await serve(web.Application())
    config = make_config(base, max_retries=2)

    async with ClientSession() as http:
        with pytest.raises(FetchError) as info:
            await Fetcher(http, config).fetch_with_retry(f"{base}/site/missing")
    assert info.value.attempts == 2


@pytest.mark.asyncio()
async def test_connection_error_raises_fetch_error(make_config, unused_tcp_port):
    config = make_config(f"http://localhost:{unused_tcp_port}", max_retries=2)

    async with ClientSession() as http:
        with pytest.raises(FetchError):
            await Fetcher(http, config).fetch_with_retry(f"http://localhost:{unused_tcp_port}/site/home")


@pytest.mark.asyncio()
async def test_backoff_grows_linearly(serve, make_config):
    calls = {"n": 0}
    base = await serve(flaky_app(2, calls))
    config = make_config(base, max_retries=3, backoff_base=0.1)

    start = time.perf_counter()
    async with ClientSession() as http:
        await Fetcher(http, config).fetch_with_retry(f"{base}/site/flaky")
    elapsed = time.perf_counter() - start

    # 0.1 after the first failure, 0.2 after the second
    assert elapsed >= 0.3


@pytest.mark.asyncio()
async def test_politeness_delay_before_every_attempt(serve, make_config):
    calls = {"n": 0}
    base = await serve(flaky_app(1, calls))
    config = make_config(base, delay=0.15, backoff_base=0.0)

    start = time.perf_counter()
    async with ClientSession() as http:
        await Fetcher(http, config).fetch_with_retry(f"{base}/site/flaky")
    elapsed = time.perf_counter() - start

    assert calls["n"] == 2
    assert elapsed >= 0.3


@pytest.mark.asyncio()
async def test_sends_fixed_header_set(serve, make_config):
    calls = {"n": 0}
    base = await serve(flaky_app(0, calls))
    config = make_config(base)

    async with ClientSession(headers=default_headers(config.user_agent)) as http:
        await Fetcher(http, config).fetch_with_retry(f"{base}/site/flaky")

    headers = calls["headers"]
    assert headers["User-Agent"] == "TestAgent/1.0"
    assert headers["Accept"] == ACCEPT
    assert headers["Accept-Language"] == ACCEPT_LANGUAGE
