"""Helpers for safe debug logging.

Cookie values and page storage entries frequently carry session ids or
feature-flag payloads. Nothing in pypreset logs them verbatim; operators
pass values through :func:`redact_value` first.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SENSITIVE_KEY_MARKERS: tuple[str, ...] = (
    "token",
    "session",
    "secret",
    "password",
    "auth",
    "sid",
)

# CDP fields that embed raw parameter values.
_VALUE_CARRYING_KEYS: frozenset[str] = frozenset({"value", "expression"})


def is_sensitive_key(key: str) -> bool:
    """Return ``True`` when *key* looks like it names a credential."""
    lowered = key.lower()
    return any(marker in lowered for marker in _SENSITIVE_KEY_MARKERS)


def redact_value(key: str, value: str | None, *, max_string: int = 64) -> str:
    """Return a log-safe rendering of a parameter value."""
    if value is None:
        return "<unset>"
    if is_sensitive_key(key):
        return f"<redacted:{len(value)}c>"
    if len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    return value


def redact_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a redacted copy of a CDP message suitable for debug logs."""
    if _depth > 10:
        return "<max-depth>"

    if value is None or isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key in _VALUE_CARRYING_KEYS or is_sensitive_key(key):
                redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, (list, tuple)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
