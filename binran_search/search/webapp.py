"""binran_search.search.webapp: aiohttp front end for the search index.

Routes
------
``GET /``            search page (input box and results list)
``GET /search?q=``   HTML fragment with highlighted results, requested on every keystroke
``GET /index.json``  the raw JSON index the page is built from
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from aiohttp import web
from jinja2 import Environment, FileSystemLoader, select_autoescape

from binran_search.logger import get_logger
from binran_search.search.index import SearchIndex

__all__ = ["create_app", "run", "INDEX_KEY", "INDEX_PATH_KEY", "TEMPLATES_KEY"]

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

INDEX_KEY = web.AppKey("index", SearchIndex)
INDEX_PATH_KEY = web.AppKey("index_path", Path)
TEMPLATES_KEY = web.AppKey("templates", Environment)

logger = get_logger("webapp")


def _render(request: web.Request, template: str, **context) -> web.Response:
    env = request.app[TEMPLATES_KEY]
    html = env.get_template(template).render(**context)
    return web.Response(text=html, content_type="text/html")


def _query(request: web.Request) -> tuple[str, list]:
    query = request.query.get("q", "").strip()
    results = request.app[INDEX_KEY].search(query) if query else []
    return query, results


async def handle_page(request: web.Request) -> web.Response:
    query, results = _query(request)
    return _render(request, "search.html.j2", query=query, results=results, documents=len(request.app[INDEX_KEY]))


async def handle_search(request: web.Request) -> web.Response:
    query, results = _query(request)
    logger.debug("Query %r -> %d results", query, len(results))
    return _render(request, "results.html.j2", query=query, results=results)


async def handle_index_json(request: web.Request) -> web.StreamResponse:
    path = request.app[INDEX_PATH_KEY]
    if not path.is_file():
        raise web.HTTPNotFound(text="index not found")
    return web.FileResponse(path, headers={"Content-Type": "application/json; charset=utf-8"})


def create_app(
    index_path: Union[str, Path],
    template_dir: Optional[Union[str, Path]] = None,
) -> web.Application:
    """Build the web application; the index is loaded once, here."""
    path = Path(index_path)
    app = web.Application()
    app[INDEX_PATH_KEY] = path
    app[INDEX_KEY] = SearchIndex.load(path)
    app[TEMPLATES_KEY] = Environment(
        loader=FileSystemLoader(str(template_dir or DEFAULT_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    app.router.add_get("/", handle_page)
    app.router.add_get("/search", handle_search)
    app.router.add_get("/index.json", handle_index_json)
    return app


def run(index_path: Union[str, Path], host: str = "127.0.0.1", port: int = 8080) -> None:
    """Serve the search UI until interrupted."""
    logger.info("Serving %s on http://%s:%d/", index_path, host, port)
    web.run_app(create_app(index_path), host=host, port=port, print=None)
