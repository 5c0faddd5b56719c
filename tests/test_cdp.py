from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any

import aiohttp
import pytest

from pypreset._transport import CdpTransport
from pypreset.cdp import CdpBrowser, build_call_expression
from pypreset.config import SyncConfig
from pypreset.exceptions import PresetError, PresetScriptError, PresetTransportError

PAGE = {
    "id": "TARGET-1",
    "type": "page",
    "url": "https://x.com/",
    "title": "X",
    "webSocketDebuggerUrl": "ws://127.0.0.1:9222/devtools/page/TARGET-1",
}
WORKER = {"id": "W-1", "type": "service_worker", "url": "https://x.com/sw.js"}


@dataclass
class FakeCdpTransport:
    targets: list[dict[str, Any]] = field(default_factory=lambda: [WORKER, PAGE])
    replies: dict[str, dict[str, Any]] = field(default_factory=dict)
    sent: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    async def list_targets(self) -> list[dict[str, Any]]:
        return list(self.targets)

    async def send(self, ws_url: str, method: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        self.sent.append((ws_url, method, dict(params or {})))
        return self.replies.get(method, {})


# ------------------------------------------------------------------
# CdpBrowser facets
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_tabs_only_expose_page_targets() -> None:
    browser = CdpBrowser(transport=FakeCdpTransport())

    tabs = await browser.tabs.list()
    assert [tab.id for tab in tabs] == ["TARGET-1"]
    assert (await browser.tabs.get("TARGET-1")).url == "https://x.com/"
    assert await browser.tabs.get("W-1") is None


@pytest.mark.asyncio
async def test_navigation_uses_page_navigate() -> None:
    transport = FakeCdpTransport()
    browser = CdpBrowser(transport=transport)

    tab = await browser.tabs.update("TARGET-1", url="https://x.com/?debug=true")

    assert tab.url == "https://x.com/?debug=true"
    assert transport.sent == [(PAGE["webSocketDebuggerUrl"], "Page.navigate", {"url": "https://x.com/?debug=true"})]


@pytest.mark.asyncio
async def test_navigation_error_text_raises() -> None:
    transport = FakeCdpTransport(replies={"Page.navigate": {"errorText": "net::ERR_NAME_NOT_RESOLVED"}})
    browser = CdpBrowser(transport=transport)

    with pytest.raises(PresetTransportError, match="ERR_NAME_NOT_RESOLVED"):
        await browser.tabs.update("TARGET-1", url="https://nowhere.invalid/")


@pytest.mark.asyncio
async def test_navigation_of_unknown_tab_raises() -> None:
    browser = CdpBrowser(transport=FakeCdpTransport())

    with pytest.raises(PresetTransportError) as excinfo:
        await browser.tabs.update("GONE", url="https://x.com/")
    assert excinfo.value.tab_id == "GONE"


@pytest.mark.asyncio
async def test_cookie_round_trip_through_network_domain() -> None:
    transport = FakeCdpTransport(
        replies={
            "Network.setCookie": {"success": True},
            "Network.getCookies": {
                "cookies": [
                    {"name": "other", "value": "1", "domain": "x.com", "path": "/"},
                    {"name": "session", "value": "abc", "domain": "x.com", "path": "/", "httpOnly": False},
                ]
            },
        }
    )
    browser = CdpBrowser(transport=transport)

    await browser.cookies.set(url="https://x.com", name="session", value="abc")
    found = await browser.cookies.get(url="https://x.com", name="session")
    missing = await browser.cookies.get(url="https://x.com", name="absent")
    await browser.cookies.remove(url="https://x.com", name="session")

    assert found is not None and found.value == "abc"
    assert missing is None
    assert [(method, params) for _, method, params in transport.sent] == [
        ("Network.setCookie", {"url": "https://x.com", "name": "session", "value": "abc", "path": "/"}),
        ("Network.getCookies", {"urls": ["https://x.com"]}),
        ("Network.getCookies", {"urls": ["https://x.com"]}),
        ("Network.deleteCookies", {"name": "session", "url": "https://x.com"}),
    ]


@pytest.mark.asyncio
async def test_rejected_cookie_raises() -> None:
    browser = CdpBrowser(transport=FakeCdpTransport(replies={"Network.setCookie": {"success": False}}))

    with pytest.raises(PresetTransportError):
        await browser.cookies.set(url="https://x.com", name="__Host-x", value="1", path="/a")


@pytest.mark.asyncio
async def test_cookies_need_a_page_target() -> None:
    browser = CdpBrowser(transport=FakeCdpTransport(targets=[WORKER]))

    with pytest.raises(PresetTransportError, match="No page target"):
        await browser.cookies.get(url="https://x.com", name="session")


@pytest.mark.asyncio
async def test_execute_script_evaluates_call_expression() -> None:
    transport = FakeCdpTransport(replies={"Runtime.evaluate": {"result": {"type": "string", "value": "on"}}})
    browser = CdpBrowser(transport=transport)

    results = await browser.scripts.execute_script(
        tab_id="TARGET-1",
        func="(key) => window.localStorage.getItem(key)",
        args=["flag"],
    )

    assert [r.result for r in results] == ["on"]
    _, method, params = transport.sent[0]
    assert method == "Runtime.evaluate"
    assert params["expression"] == '((key) => window.localStorage.getItem(key))("flag")'
    assert params["returnByValue"] is True


@pytest.mark.asyncio
async def test_execute_script_surfaces_page_exceptions() -> None:
    transport = FakeCdpTransport(
        replies={
            "Runtime.evaluate": {
                "result": {"type": "object", "subtype": "error"},
                "exceptionDetails": {
                    "text": "Uncaught",
                    "exception": {"description": "SecurityError: Access is denied for this document."},
                },
            }
        }
    )
    browser = CdpBrowser(transport=transport)

    with pytest.raises(PresetScriptError, match="SecurityError"):
        await browser.scripts.execute_script(tab_id="TARGET-1", func="() => 1")


@pytest.mark.asyncio
async def test_execute_script_rejects_other_worlds() -> None:
    transport = FakeCdpTransport()
    browser = CdpBrowser(transport=transport)

    with pytest.raises(PresetScriptError):
        await browser.scripts.execute_script(tab_id="TARGET-1", func="() => 1", world="ISOLATED")
    assert transport.sent == []


def test_build_call_expression_json_encodes_arguments() -> None:
    expression = build_call_expression("(k, v) => 0", ['a"b', "line\nbreak"])
    assert expression == '((k, v) => 0)("a\\"b", "line\\nbreak")'


@pytest.mark.asyncio
async def test_browser_requires_context_manager() -> None:
    browser = CdpBrowser()
    with pytest.raises(PresetError, match="not initialized"):
        await browser.tabs.list()


# ------------------------------------------------------------------
# CdpTransport
# ------------------------------------------------------------------


class _FakeResponse:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    async def text(self) -> str:
        return self._text


class _FakeSocket:
    def __init__(self, messages: list[Any]) -> None:
        self._messages = messages
        self.sent: list[dict[str, Any]] = []

    async def __aenter__(self) -> _FakeSocket:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    async def send_str(self, data: str) -> None:
        self.sent.append(json.loads(data))

    def __aiter__(self) -> _FakeSocket:
        self._iter = iter(self._messages)
        return self

    async def __anext__(self) -> Any:
        try:
            message = next(self._iter)
        except StopIteration:
            raise StopAsyncIteration from None
        return message(self.sent[-1]["id"]) if callable(message) else message


class _FakeSession:
    def __init__(self, *, response: _FakeResponse | None = None, socket: _FakeSocket | None = None) -> None:
        self._response = response
        self._socket = socket
        self.urls: list[str] = []

    def get(self, url: str) -> _FakeResponse:
        self.urls.append(url)
        assert self._response is not None
        return self._response

    def ws_connect(self, url: str, **_kwargs: Any) -> _FakeSocket:
        self.urls.append(url)
        assert self._socket is not None
        return self._socket


def _text(payload: Any) -> SimpleNamespace:
    return SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=json.dumps(payload))


@pytest.mark.asyncio
async def test_list_targets_reads_json_list() -> None:
    session = _FakeSession(response=_FakeResponse(200, json.dumps([PAGE, "junk"])))
    transport = CdpTransport(SyncConfig(cdp_endpoint="http://127.0.0.1:9222/"), session)  # type: ignore[arg-type]

    assert await transport.list_targets() == [PAGE]
    assert session.urls == ["http://127.0.0.1:9222/json/list"]


@pytest.mark.asyncio
@pytest.mark.parametrize(("status", "body"), [(500, "boom"), (200, "<html>"), (200, '{"not": "a list"}')])
async def test_list_targets_errors(status: int, body: str) -> None:
    session = _FakeSession(response=_FakeResponse(status, body))
    transport = CdpTransport(SyncConfig(), session)  # type: ignore[arg-type]

    with pytest.raises(PresetTransportError) as excinfo:
        await transport.list_targets()
    assert excinfo.value.method == "json/list"


@pytest.mark.asyncio
async def test_send_skips_events_until_matching_reply() -> None:
    socket = _FakeSocket(
        [
            _text({"method": "Page.frameStartedLoading", "params": {"frameId": "F"}}),
            lambda message_id: _text({"id": message_id, "result": {"frameId": "F", "loaderId": "L"}}),
        ]
    )
    transport = CdpTransport(SyncConfig(), _FakeSession(socket=socket))  # type: ignore[arg-type]

    result = await transport.send("ws://t", "Page.navigate", {"url": "https://x.com/"})

    assert result == {"frameId": "F", "loaderId": "L"}
    assert socket.sent[0]["method"] == "Page.navigate"
    assert socket.sent[0]["params"] == {"url": "https://x.com/"}


@pytest.mark.asyncio
async def test_send_raises_on_protocol_error() -> None:
    socket = _FakeSocket(
        [lambda message_id: _text({"id": message_id, "error": {"code": -32000, "message": "No target"}})]
    )
    transport = CdpTransport(SyncConfig(), _FakeSession(socket=socket))  # type: ignore[arg-type]

    with pytest.raises(PresetTransportError, match="No target") as excinfo:
        await transport.send("ws://t", "Network.getCookies", {"urls": []})
    assert excinfo.value.method == "Network.getCookies"


@pytest.mark.asyncio
async def test_send_raises_when_socket_closes_early() -> None:
    socket = _FakeSocket([SimpleNamespace(type=aiohttp.WSMsgType.CLOSED, data=None)])
    transport = CdpTransport(SyncConfig(), _FakeSession(socket=socket))  # type: ignore[arg-type]

    with pytest.raises(PresetTransportError, match="closed"):
        await transport.send("ws://t", "Runtime.evaluate")
