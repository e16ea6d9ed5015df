"""HTML parsing utilities for BinranSearch.

:func:`parse_html` turns a fetched body into a :class:`ParsedPage` holding
what the page processor needs:

* text: main textual content, taken from the first element matching one
  of the content selectors, else ``<body>``, else the whole document.
* links: raw ``href`` values of every ``<a>`` element, in document order.

Resolving, normalizing and scoping the links is left to the caller.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from bs4 import BeautifulSoup
from bs4.element import Tag

from binran_search.crawler.models import ParseError

__all__: Sequence[str] = ("ParsedPage", "parse_html")

_NOISE_TAGS = ("script", "style", "noscript", "template")


@dataclass(slots=True)
class ParsedPage:
    """Lightweight representation of an HTML page."""

    url: str
    text: str
    hrefs: list[str] = field(default_factory=list)
    from_main: bool = False


def _extract_hrefs(soup: BeautifulSoup) -> list[str]:
    hrefs: list[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if isinstance(href_val, str) and href_val.strip():
            hrefs.append(href_val.strip())
    return hrefs


def parse_html(url: str, html: str, selectors: Sequence[str]) -> ParsedPage:
    """Parse *html* fetched from *url*.

    Raises :class:`ParseError` if the markup cannot be parsed at all.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as exc:
        raise ParseError(url, f"Could not parse HTML: {exc}") from exc

    # before noise removal, so links inside <noscript> are kept
    hrefs = _extract_hrefs(soup)

    for element in soup(list(_NOISE_TAGS)):
        element.decompose()

    main = soup.select_one(", ".join(selectors)) if selectors else None
    scope = main or soup.body or soup
    text = "\n".join(scope.stripped_strings).strip()

    return ParsedPage(url=url, text=text, hrefs=hrefs, from_main=main is not None)
