"""Page-local storage operators.

Writes and reads go through a page function executed in the tab's main
world, so they hit the same ``localStorage`` the page's own scripts see.
"""

from __future__ import annotations

import logging

from pypreset._browser import ScriptExecutor, TabId
from pypreset._constants import (
    DEFAULT_SCRIPT_WORLD,
    GET_LOCAL_ENTRY_JS,
    REMOVE_LOCAL_ENTRY_JS,
    SET_LOCAL_ENTRY_JS,
)
from pypreset._ops._common import matches, report_failure

_logger = logging.getLogger(__name__)


async def apply(
    scripts: ScriptExecutor,
    tab_id: TabId,
    key: str,
    value: str,
    *,
    world: str = DEFAULT_SCRIPT_WORLD,
) -> bool:
    try:
        await scripts.execute_script(tab_id=tab_id, func=SET_LOCAL_ENTRY_JS, args=[key, value], world=world)
    except Exception:
        report_failure(_logger, "Failed to apply local entry %r on tab %s", key, tab_id)
        return False
    return True


async def remove(
    scripts: ScriptExecutor,
    tab_id: TabId,
    key: str,
    *,
    world: str = DEFAULT_SCRIPT_WORLD,
) -> bool:
    try:
        await scripts.execute_script(tab_id=tab_id, func=REMOVE_LOCAL_ENTRY_JS, args=[key], world=world)
    except Exception:
        report_failure(_logger, "Failed to remove local entry %r on tab %s", key, tab_id)
        return False
    return True


async def read(
    scripts: ScriptExecutor,
    tab_id: TabId,
    key: str,
    *,
    world: str = DEFAULT_SCRIPT_WORLD,
) -> str | None:
    try:
        results = await scripts.execute_script(tab_id=tab_id, func=GET_LOCAL_ENTRY_JS, args=[key], world=world)
    except Exception:
        _logger.debug("Could not read local entry %r on tab %s", key, tab_id, exc_info=True)
        return None
    if not results:
        return None
    # Only the top frame's result counts.
    value = results[0].result
    return value if isinstance(value, str) else None


async def verify(
    scripts: ScriptExecutor,
    tab_id: TabId,
    key: str,
    expected: str,
    *,
    world: str = DEFAULT_SCRIPT_WORLD,
) -> bool:
    return matches(_logger, "Local entry", key, await read(scripts, tab_id, key, world=world), expected)
