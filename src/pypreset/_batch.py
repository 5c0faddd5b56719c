"""Batched query parameter mutation.

Navigating once per query parameter would reload the page N times and race
the cookie/storage writes that follow. Instead every query change of one
synchronizer call is applied to a single parsed URL and committed with one
navigation, followed by a fixed settle delay so later operations target the
new document rather than the one being torn down.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from pypreset._browser import TabId, TabProvider
from pypreset._ops._common import report_failure, tab_url
from pypreset._url import UrlQuery
from pypreset.models.parameter import Parameter

_logger = logging.getLogger(__name__)


async def _commit(
    tabs: TabProvider,
    tab_id: TabId,
    edit: Callable[[UrlQuery], None],
    *,
    action: str,
    settle_delay: float,
    only_if_modified: bool,
) -> bool:
    try:
        query = UrlQuery(await tab_url(tabs, tab_id))
        edit(query)
        if only_if_modified and not query.modified:
            _logger.debug("Query %s on tab %s left the URL unchanged; not navigating", action, tab_id)
            return True
        await tabs.update(tab_id, url=query.to_url())
    except Exception:
        report_failure(_logger, "Failed to %s query params on tab %s", action, tab_id)
        return False

    _logger.debug("Navigated tab %s for query %s; settling %.3fs", tab_id, action, settle_delay)
    await asyncio.sleep(settle_delay)
    return True


async def apply_query_batch(
    tabs: TabProvider,
    tab_id: TabId,
    parameters: Sequence[Parameter],
    *,
    settle_delay: float,
) -> bool:
    """Set every query parameter in one navigation.

    Always navigates when *parameters* is non-empty, even if the URL already
    carries the values, so the page reloads with them.
    """
    if not parameters:
        return True

    def _edit(query: UrlQuery) -> None:
        for parameter in parameters:
            query.set(parameter.key, parameter.value)

    return await _commit(tabs, tab_id, _edit, action="apply", settle_delay=settle_delay, only_if_modified=False)


async def remove_query_batch(
    tabs: TabProvider,
    tab_id: TabId,
    to_remove: Sequence[Parameter],
    *,
    to_restore: Sequence[Parameter] = (),
    settle_delay: float,
) -> bool:
    """Delete (and optionally restore) query parameters in at most one navigation.

    Skips the navigation when nothing in the URL actually changes, which
    keeps repeated removal of an already-removed preset free of side effects.
    """
    if not to_remove and not to_restore:
        return True

    def _edit(query: UrlQuery) -> None:
        for parameter in to_remove:
            query.delete(parameter.key)
        for parameter in to_restore:
            query.set(parameter.key, parameter.value)

    return await _commit(tabs, tab_id, _edit, action="remove", settle_delay=settle_delay, only_if_modified=True)
