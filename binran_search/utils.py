# File: binran_search/utils.py
"""binran_search.utils: URL normalization, scope checks and file name derivation."""

from __future__ import annotations

import re
import time
from typing import Sequence
from urllib.parse import urlsplit, urlunsplit

from binran_search.logger import get_logger

__all__: Sequence[str] = (
    "normalize_url",
    "remove_dot_segments",
    "is_in_scope",
    "url_to_filename",
)

logger = get_logger("utils")

_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9_\-.]")
_HTTP_SCHEMES = ("http", "https")
_SINGLE_DOT = (".", "%2e")
_DOUBLE_DOT = ("..", ".%2e", "%2e.", "%2e%2e")


def remove_dot_segments(path: str) -> str:
    """Resolve ``.`` and ``..`` segments of an absolute *path*, keeping a trailing slash."""
    if not path.startswith("/"):
        return path
    segments = path.split("/")[1:]
    output: list[str] = []
    for i, segment in enumerate(segments):
        last = i == len(segments) - 1
        lowered = segment.lower()
        if lowered in _DOUBLE_DOT:
            if output:
                output.pop()
            if last:
                output.append("")
        elif lowered in _SINGLE_DOT:
            if last:
                output.append("")
        else:
            output.append(segment)
    return "/" + "/".join(output)


def normalize_url(url: str) -> str:
    """Canonicalize an absolute URL and drop its fragment.

    Scheme and host are lowercased, ``.``/``..`` path segments are resolved
    and http(s) URLs get an explicit ``/`` path. Anything that does not
    parse as an absolute URL is logged and returned unchanged, so the
    function never raises.
    """
    try:
        parts = urlsplit(url.strip())
        if not parts.scheme or not parts.netloc:
            raise ValueError("not an absolute URL")
        parts.port  # raises ValueError on a malformed port
        scheme = parts.scheme.lower()
        path = parts.path
        if scheme in _HTTP_SCHEMES:
            path = remove_dot_segments(path) or "/"
        normalized = urlunsplit((scheme, parts.netloc.lower(), path, parts.query, ""))
    except (ValueError, AttributeError) as exc:
        logger.error("Invalid URL string %r: %s", url, exc)
        return url
    logger.debug("Normalized URL: %s -> %s", url, normalized)
    return normalized


def is_in_scope(url: str, base_hostname: str, path_prefix: str) -> bool:
    """Return True if *url* is http(s), on *base_hostname* and under *path_prefix*."""
    try:
        parsed = urlsplit(url)
        if parsed.scheme.lower() not in _HTTP_SCHEMES:
            return False
        if (parsed.hostname or "") != base_hostname.lower():
            return False
        return parsed.path.startswith(path_prefix)
    except (ValueError, AttributeError):
        return False


def url_to_filename(url: str, extension: str = ".txt", max_length: int = 100) -> str:
    """Derive a filesystem-safe file name from the path, query and fragment of *url*.

    Only the last *max_length* characters are kept, so URLs that differ
    solely before that window map to the same name.
    """
    try:
        parsed = urlsplit(url)
        raw = parsed.path
        if parsed.query:
            raw += "?" + parsed.query
        if parsed.fragment:
            raw += "#" + parsed.fragment
    except (ValueError, AttributeError):
        return f"invalid_url_{int(time.time() * 1000)}{extension}"

    if raw.startswith("/"):
        raw = raw[1:]
    if raw.endswith("/"):
        raw = raw[:-1]
    name = _UNSAFE_CHARS_RE.sub("_", raw.replace("/", "_")) or "index"
    if len(name) > max_length:
        name = name[-max_length:]
    return f"{name}{extension}"

