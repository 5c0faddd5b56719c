"""Chrome DevTools Protocol transport over aiohttp."""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pypreset._redact import redact_for_log
from pypreset.config import SyncConfig
from pypreset.exceptions import PresetTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by :mod:`pypreset.cdp`.

    Tests substitute an in-memory backend; production uses `CdpTransport`.
    """

    async def list_targets(self) -> list[dict[str, Any]]:
        ...

    async def send(self, ws_url: str, method: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        ...


class CdpTransport:
    """One-shot CDP exchanges against a remote-debugging endpoint.

    Every :meth:`send` opens a websocket to the target, sends one command,
    waits for the reply with the matching id (ignoring interleaved events)
    and closes the socket.
    """

    def __init__(self, config: SyncConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._ids = itertools.count(1)

    async def list_targets(self) -> list[dict[str, Any]]:
        """Return the ``/json/list`` target descriptors."""
        url = f"{self._config.cdp_endpoint.rstrip('/')}/json/list"
        _logger.debug("GET %s", url)

        try:
            async with asyncio.timeout(self._config.cdp_timeout):
                async with self._http.get(url) as resp:
                    text = await resp.text()
                    if resp.status != 200:
                        raise PresetTransportError(
                            f"HTTP {resp.status} from {url}: {text[:200]}",
                            method="json/list",
                        )
        except PresetTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise PresetTransportError(f"Request to {url} failed: {exc}", method="json/list") from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PresetTransportError(f"Invalid JSON from {url}: {text[:200]}", method="json/list") from exc

        if not isinstance(body, list):
            raise PresetTransportError(f"Expected a target list from {url}", method="json/list")
        return [target for target in body if isinstance(target, dict)]

    async def send(self, ws_url: str, method: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Send one CDP command and return its ``result`` object."""
        message_id = next(self._ids)
        payload = {"id": message_id, "method": method, "params": dict(params or {})}
        _logger.debug("CDP -> %s %s", method, redact_for_log(payload["params"]))

        try:
            async with asyncio.timeout(self._config.cdp_timeout):
                async with self._http.ws_connect(ws_url, max_msg_size=0) as ws:
                    await ws.send_str(json.dumps(payload, separators=(",", ":")))
                    reply = await self._receive_reply(ws, message_id, method)
        except PresetTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError, json.JSONDecodeError) as exc:
            raise PresetTransportError(f"CDP {method} failed: {exc}", method=method) from exc

        error = reply.get("error")
        if isinstance(error, dict):
            raise PresetTransportError(
                f"CDP {method} failed: code={error.get('code')} message={error.get('message', '')}",
                method=method,
            )
        result = reply.get("result")
        _logger.debug("CDP <- %s %s", method, redact_for_log(result))
        return result if isinstance(result, dict) else {}

    @staticmethod
    async def _receive_reply(ws: aiohttp.ClientWebSocketResponse, message_id: int, method: str) -> dict[str, Any]:
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                data = json.loads(msg.data)
                # Domain events share the socket; only our reply carries our id.
                if isinstance(data, dict) and data.get("id") == message_id:
                    return data
            elif msg.type in (aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.ERROR):
                break
        raise PresetTransportError(f"CDP socket closed before {method} replied", method=method)
