"""URL query mutation and origin helpers.

Mirrors the browser's ``URL`` / ``URLSearchParams`` behaviour closely enough
that a URL written here reads back identically through the tab:

* ``set`` replaces the first occurrence and drops later duplicates,
  appending when the key is absent.
* ``delete`` drops every occurrence.
* The query is re-serialised as ``application/x-www-form-urlencoded``.
"""

from __future__ import annotations

from urllib.parse import SplitResult, parse_qsl, urlencode, urlsplit, urlunsplit

from pypreset._constants import DEFAULT_PORTS
from pypreset.exceptions import PresetTransportError

# Schemes whose empty path serialises as "/".
_SPECIAL_SCHEMES = frozenset({"http", "https", "ws", "wss", "ftp"})


def _split(url: str) -> SplitResult:
    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise PresetTransportError(f"Malformed URL {url!r}: {exc}") from exc
    if not parts.scheme:
        raise PresetTransportError(f"Not an absolute URL: {url!r}")
    return parts


class UrlQuery:
    """A parsed URL whose query string can be edited in place."""

    def __init__(self, url: str) -> None:
        self._parts = _split(url)
        self._pairs: list[tuple[str, str]] = parse_qsl(self._parts.query, keep_blank_values=True)
        self.modified = False

    def get(self, key: str) -> str | None:
        """Return the first value for *key*, or ``None`` when absent."""
        for k, v in self._pairs:
            if k == key:
                return v
        return None

    def set(self, key: str, value: str) -> None:
        updated: list[tuple[str, str]] = []
        found = False
        for k, v in self._pairs:
            if k != key:
                updated.append((k, v))
            elif not found:
                found = True
                if v != value:
                    self.modified = True
                updated.append((k, value))
            else:
                self.modified = True
        if not found:
            updated.append((key, value))
            self.modified = True
        self._pairs = updated

    def delete(self, key: str) -> bool:
        """Drop every occurrence of *key*; return whether anything was removed."""
        kept = [(k, v) for k, v in self._pairs if k != key]
        removed = len(kept) != len(self._pairs)
        if removed:
            self._pairs = kept
            self.modified = True
        return removed

    def to_url(self) -> str:
        parts = self._parts
        path = parts.path
        if not path and parts.netloc and parts.scheme in _SPECIAL_SCHEMES:
            path = "/"
        return urlunsplit((parts.scheme, parts.netloc, path, urlencode(self._pairs), parts.fragment))

    def __str__(self) -> str:
        return self.to_url()


def query_value(url: str, key: str) -> str | None:
    """Return the first value of query parameter *key* in *url*."""
    return UrlQuery(url).get(key)


def url_origin(url: str) -> str:
    """Return the ``scheme://host[:port]`` origin of *url*.

    Raises :class:`PresetTransportError` for URLs without a host
    (``about:blank``, ``data:``, ``file:``), which have an opaque origin
    and cannot carry cookies.
    """
    parts = _split(url)
    host = parts.hostname
    if not host:
        raise PresetTransportError(f"URL has an opaque origin: {url!r}")
    try:
        port = parts.port
    except ValueError as exc:
        raise PresetTransportError(f"Malformed port in URL {url!r}") from exc
    scheme = parts.scheme.lower()
    if ":" in host:
        host = f"[{host}]"
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"
