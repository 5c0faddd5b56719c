"""Cookie operators, scoped to the origin of the tab's current URL."""

from __future__ import annotations

import logging

from pypreset._browser import CookieStore, TabId, TabProvider
from pypreset._constants import DEFAULT_COOKIE_PATH
from pypreset._ops._common import matches, report_failure, tab_url
from pypreset._url import url_origin

_logger = logging.getLogger(__name__)


async def _origin(tabs: TabProvider, tab_id: TabId) -> str:
    return url_origin(await tab_url(tabs, tab_id))


async def apply(
    tabs: TabProvider,
    cookies: CookieStore,
    tab_id: TabId,
    key: str,
    value: str,
    *,
    path: str = DEFAULT_COOKIE_PATH,
) -> bool:
    try:
        origin = await _origin(tabs, tab_id)
        await cookies.set(url=origin, name=key, value=value, path=path)
    except Exception:
        report_failure(_logger, "Failed to apply cookie %r on tab %s", key, tab_id)
        return False
    _logger.debug("Set cookie %r for %s", key, origin)
    return True


async def remove(tabs: TabProvider, cookies: CookieStore, tab_id: TabId, key: str) -> bool:
    try:
        origin = await _origin(tabs, tab_id)
        await cookies.remove(url=origin, name=key)
    except Exception:
        report_failure(_logger, "Failed to remove cookie %r on tab %s", key, tab_id)
        return False
    _logger.debug("Removed cookie %r for %s", key, origin)
    return True


async def read(tabs: TabProvider, cookies: CookieStore, tab_id: TabId, key: str) -> str | None:
    try:
        cookie = await cookies.get(url=await _origin(tabs, tab_id), name=key)
    except Exception:
        _logger.debug("Could not read cookie %r on tab %s", key, tab_id, exc_info=True)
        return None
    return cookie.value if cookie is not None else None


async def verify(tabs: TabProvider, cookies: CookieStore, tab_id: TabId, key: str, expected: str) -> bool:
    return matches(_logger, "Cookie", key, await read(tabs, cookies, tab_id, key), expected)
