"""Query parameter operators.

Each call reads the tab URL once and issues at most one navigation.
"""

from __future__ import annotations

import logging

from pypreset._browser import TabId, TabProvider
from pypreset._ops._common import matches, report_failure, tab_url
from pypreset._url import UrlQuery, query_value

_logger = logging.getLogger(__name__)


async def apply(tabs: TabProvider, tab_id: TabId, key: str, value: str) -> bool:
    """Set (or overwrite) *key* in the tab URL and navigate to the result."""
    try:
        query = UrlQuery(await tab_url(tabs, tab_id))
        query.set(key, value)
        await tabs.update(tab_id, url=query.to_url())
    except Exception:
        report_failure(_logger, "Failed to apply query param %r on tab %s", key, tab_id)
        return False
    return True


async def remove(tabs: TabProvider, tab_id: TabId, key: str) -> bool:
    """Delete *key* from the tab URL; no navigation when it is already absent."""
    try:
        query = UrlQuery(await tab_url(tabs, tab_id))
        if not query.delete(key):
            return True
        await tabs.update(tab_id, url=query.to_url())
    except Exception:
        report_failure(_logger, "Failed to remove query param %r on tab %s", key, tab_id)
        return False
    return True


async def read(tabs: TabProvider, tab_id: TabId, key: str) -> str | None:
    try:
        return query_value(await tab_url(tabs, tab_id), key)
    except Exception:
        _logger.debug("Could not read query param %r on tab %s", key, tab_id, exc_info=True)
        return None


async def verify(tabs: TabProvider, tab_id: TabId, key: str, expected: str) -> bool:
    return matches(_logger, "Query param", key, await read(tabs, tab_id, key), expected)
