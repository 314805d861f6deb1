"""URL parsing and normalization for URL-derived record keys."""

from __future__ import annotations

from typing import List
from urllib.parse import SplitResult, urlsplit, urlunsplit

from astool.exceptions import InvalidURLError

DEFAULT_PORTS = {"http": 80, "https": 443}


def parse_url(raw: str) -> SplitResult:
    if any(ord(c) < 0x20 or ord(c) == 0x7F for c in raw):
        raise InvalidURLError(f"invalid control character in URL: {raw!r}")
    try:
        u = urlsplit(raw)
        # port is validated lazily
        u.port
    except ValueError as e:
        raise InvalidURLError(f"parse {raw!r}: {e}") from e
    return u


def _sorted_query(query: str) -> str:
    pairs: List[tuple] = []
    for piece in query.split("&"):
        if not piece:
            continue
        name, _, value = piece.partition("=")
        pairs.append((name, value, piece))
    pairs.sort(key=lambda p: (p[0], p[1]))
    return "&".join(p[2] for p in pairs)


def first_normalize_url(u: SplitResult) -> str:
    """
    Canonical form of a parsed URL, used as the record key.

        HTTP://User@Example.COM:80/Path?b=2&a=1#top -> http://example.com/Path?a=1&b=2

    Scheme and host are lowercased, user info, default port and fragment are
    dropped, and query parameters are sorted. Path case is preserved.
    """
    scheme = u.scheme.lower()
    query = _sorted_query(u.query)

    if not u.netloc:
        return urlunsplit((scheme, "", u.path, query, ""))

    host = (u.hostname or "").rstrip(".")
    if ":" in host:
        host = f"[{host}]"
    port = u.port
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        host = f"{host}:{port}"

    path = u.path or "/"
    return urlunsplit((scheme, host, path, query, ""))


def normalize(raw: str) -> str:
    return first_normalize_url(parse_url(raw))
