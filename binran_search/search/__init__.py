"""binran_search.search: full-text index over the crawl output and its web front end."""

from .index import SearchIndex, SearchResult, highlight, tokenize

__all__ = ["SearchIndex", "SearchResult", "highlight", "tokenize"]
