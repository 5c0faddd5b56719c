"""Chromium remote-debugging backend for the browser collaborators.

Start Chromium with ``--remote-debugging-port=9222`` and point
:attr:`SyncConfig.cdp_endpoint` at it. Tabs are CDP ``page`` targets and a
tab id is the target id string.

Usage::

    async with CdpBrowser(config) as browser:
        sync = PresetSynchronizer(
            tabs=browser.tabs,
            cookies=browser.cookies,
            scripts=browser.scripts,
            repository=repository,
            config=config,
        )
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

import aiohttp

from pypreset._browser import TabId
from pypreset._constants import DEFAULT_COOKIE_PATH, DEFAULT_SCRIPT_WORLD
from pypreset._transport import CdpTransport, Transport
from pypreset.config import SyncConfig
from pypreset.exceptions import PresetError, PresetScriptError, PresetTransportError
from pypreset.models.browser import Cookie, InjectionResult, Tab

_logger = logging.getLogger(__name__)


class _Targets:
    """Page target lookup shared by the three facets."""

    def __init__(self, browser: CdpBrowser) -> None:
        self._browser = browser

    async def pages(self) -> list[dict[str, Any]]:
        targets = await self._browser.require_transport().list_targets()
        return [target for target in targets if target.get("type") == "page"]

    async def find(self, tab_id: TabId) -> dict[str, Any] | None:
        wanted = str(tab_id)
        return next((target for target in await self.pages() if str(target.get("id")) == wanted), None)

    async def socket_for(self, tab_id: TabId) -> str:
        target = await self.find(tab_id)
        if target is None:
            raise PresetTransportError(f"Tab {tab_id} not found", method="json/list", tab_id=tab_id)
        return _socket_url(target, tab_id)

    async def any_socket(self) -> str:
        pages = await self.pages()
        if not pages:
            raise PresetTransportError("No page target available", method="json/list")
        return _socket_url(pages[0], pages[0].get("id"))


def _socket_url(target: dict[str, Any], tab_id: Any) -> str:
    ws_url = target.get("webSocketDebuggerUrl")
    if not ws_url:
        # Chromium omits the URL while another client is attached to the target.
        raise PresetTransportError(f"Tab {tab_id} has no debugger socket", method="json/list", tab_id=tab_id)
    return str(ws_url)


def _to_tab(target: dict[str, Any]) -> Tab:
    return Tab(id=str(target.get("id")), url=target.get("url") or None, title=target.get("title") or None)


class CdpTabs:
    """:class:`~pypreset._browser.TabProvider` over CDP."""

    def __init__(self, browser: CdpBrowser) -> None:
        self._browser = browser
        self._targets = _Targets(browser)

    async def list(self) -> list[Tab]:
        return [_to_tab(target) for target in await self._targets.pages()]

    async def get(self, tab_id: TabId) -> Tab | None:
        target = await self._targets.find(tab_id)
        return _to_tab(target) if target is not None else None

    async def update(self, tab_id: TabId, *, url: str) -> Tab:
        ws_url = await self._targets.socket_for(tab_id)
        result = await self._browser.require_transport().send(ws_url, "Page.navigate", {"url": url})
        error_text = result.get("errorText")
        if error_text:
            raise PresetTransportError(
                f"Navigation to {url} failed: {error_text}", method="Page.navigate", tab_id=tab_id
            )
        return Tab(id=str(tab_id), url=url)


class CdpCookies:
    """:class:`~pypreset._browser.CookieStore` over CDP.

    The ``Network`` cookie commands act on the browser-wide jar, so any
    page target's socket serves.
    """

    def __init__(self, browser: CdpBrowser) -> None:
        self._browser = browser
        self._targets = _Targets(browser)

    async def set(self, *, url: str, name: str, value: str, path: str = DEFAULT_COOKIE_PATH) -> Cookie | None:
        ws_url = await self._targets.any_socket()
        result = await self._browser.require_transport().send(
            ws_url,
            "Network.setCookie",
            {"url": url, "name": name, "value": value, "path": path},
        )
        if result.get("success") is False:
            raise PresetTransportError(f"Browser rejected cookie {name!r} for {url}", method="Network.setCookie")
        return Cookie(name=name, value=value, path=path)

    async def get(self, *, url: str, name: str) -> Cookie | None:
        ws_url = await self._targets.any_socket()
        result = await self._browser.require_transport().send(ws_url, "Network.getCookies", {"urls": [url]})
        for item in result.get("cookies") or ():
            if isinstance(item, dict) and item.get("name") == name:
                return Cookie.model_validate(item)
        return None

    async def remove(self, *, url: str, name: str) -> None:
        ws_url = await self._targets.any_socket()
        await self._browser.require_transport().send(ws_url, "Network.deleteCookies", {"name": name, "url": url})


class CdpScripts:
    """:class:`~pypreset._browser.ScriptExecutor` over CDP ``Runtime.evaluate``.

    Only the page's main world is supported; the function runs in the top
    frame and its JSON-serialisable return value is reported.
    """

    def __init__(self, browser: CdpBrowser) -> None:
        self._browser = browser
        self._targets = _Targets(browser)

    async def execute_script(
        self,
        *,
        tab_id: TabId,
        func: str,
        args: Sequence[Any] = (),
        world: str = DEFAULT_SCRIPT_WORLD,
    ) -> list[InjectionResult]:
        if world != DEFAULT_SCRIPT_WORLD:
            raise PresetScriptError(f"Unsupported script world {world!r}", method="Runtime.evaluate", tab_id=tab_id)
        ws_url = await self._targets.socket_for(tab_id)
        result = await self._browser.require_transport().send(
            ws_url,
            "Runtime.evaluate",
            {
                "expression": build_call_expression(func, args),
                "returnByValue": True,
                "awaitPromise": True,
            },
        )
        details = result.get("exceptionDetails")
        if isinstance(details, dict):
            exception = details.get("exception") or {}
            message = exception.get("description") or details.get("text") or "page script threw"
            raise PresetScriptError(str(message), method="Runtime.evaluate", tab_id=tab_id)
        remote = result.get("result") or {}
        return [InjectionResult(result=remote.get("value"), frame_id=0)]


def build_call_expression(func: str, args: Sequence[Any]) -> str:
    """Render ``(<func>)(<args...>)`` with JSON-encoded arguments."""
    rendered = ", ".join(json.dumps(arg) for arg in args)
    return f"({func})({rendered})"


class CdpBrowser:
    """Owns the HTTP session and exposes the three collaborator facets.

    Pass ``session`` to share an existing :class:`aiohttp.ClientSession`
    (it is then not closed on exit), or ``transport`` to bypass HTTP
    entirely (tests).
    """

    def __init__(
        self,
        config: SyncConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config or SyncConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self.tabs = CdpTabs(self)
        self.cookies = CdpCookies(self)
        self.scripts = CdpScripts(self)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CdpBrowser:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = CdpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    def require_transport(self) -> Transport:
        if self._transport is None:
            raise PresetError("Browser not initialized. Use 'async with CdpBrowser(...) as browser:'")
        return self._transport
