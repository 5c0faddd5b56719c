"""Structural interfaces for the browser collaborators.

The engine never imports a browser binding; it talks to these protocols.
The facets of :class:`pypreset.cdp.CdpBrowser` implement them against Chromium,
and tests pass small in-memory doubles.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

from pypreset.models.browser import Cookie, InjectionResult, Tab

TabId = int | str


class TabProvider(Protocol):
    async def get(self, tab_id: TabId) -> Tab | None:
        ...

    async def update(self, tab_id: TabId, *, url: str) -> Tab:
        ...


class CookieStore(Protocol):
    async def set(self, *, url: str, name: str, value: str, path: str = "/") -> Cookie | None:
        ...

    async def get(self, *, url: str, name: str) -> Cookie | None:
        ...

    async def remove(self, *, url: str, name: str) -> None:
        ...


class ScriptExecutor(Protocol):
    async def execute_script(
        self,
        *,
        tab_id: TabId,
        func: str,
        args: Sequence[Any] = (),
        world: str = "MAIN",
    ) -> list[InjectionResult]:
        """Run the JavaScript function source *func* with *args* in the tab."""
        ...
