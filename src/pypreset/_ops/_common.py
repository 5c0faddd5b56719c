"""Shared helpers for the primitive operator modules.

It is internal to pypreset and may change at any time.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from pypreset._browser import TabId, TabProvider
from pypreset._redact import redact_value
from pypreset.exceptions import PresetTransportError


async def tab_url(tabs: TabProvider, tab_id: TabId) -> str:
    """Return the tab's current URL.

    Raises :class:`PresetTransportError` when the tab is gone or has no URL
    (e.g. a restricted page the extension cannot see).
    """
    tab = await tabs.get(tab_id)
    if tab is None:
        raise PresetTransportError(f"Tab {tab_id} not found", method="tabs.get", tab_id=tab_id)
    if not tab.url:
        raise PresetTransportError(f"Tab {tab_id} has no URL", method="tabs.get", tab_id=tab_id)
    return tab.url


def report_failure(logger: logging.Logger, message: str, *args: Any) -> None:
    """Log an operator failure caught at the operator boundary.

    Must be called from inside an ``except`` block.
    """
    exc = sys.exc_info()[1]
    logger.warning(f"{message}: %s", *args, exc)
    logger.debug("Failure detail", exc_info=True)


def matches(logger: logging.Logger, kind: str, key: str, actual: str | None, expected: str) -> bool:
    """Strict string comparison of a read-back value, logging mismatches."""
    if actual == expected:
        return True
    logger.debug(
        "%s %r mismatch: expected=%s actual=%s",
        kind,
        key,
        redact_value(key, expected),
        redact_value(key, actual),
    )
    return False
