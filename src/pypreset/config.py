"""Engine configuration for pypreset."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pypreset._constants import (
    DEFAULT_CDP_ENDPOINT,
    DEFAULT_CDP_TIMEOUT,
    DEFAULT_COOKIE_PATH,
    DEFAULT_SCRIPT_WORLD,
    NAVIGATION_SETTLE_DELAY,
    RETRY_PROPAGATION_DELAY,
)
from pypreset.exceptions import PresetConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise PresetConfigError(f"{name} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class SyncConfig:
    """Engine configuration.

    Parameters
    ----------
    navigation_settle_delay : float
        Seconds to wait after the single batched navigation before any
        cookie or storage operation runs, so those target the new document.
    retry_propagation_delay : float
        Seconds to wait between the retry apply and the second verification
        in :meth:`~pypreset.synchronizer.PresetSynchronizer.sync_parameter`.
    restore_shared_values : bool
        When removing a preset, re-apply the value of the last other active
        preset for parameters it still claims with a different value.
        Off by default: shared parameters are simply left alone.
    cookie_path : str
        Path attribute used when setting cookies.
    script_world : str
        Execution world for page storage scripts (``"MAIN"`` shares the
        page's own ``localStorage``).
    cdp_endpoint : str
        HTTP endpoint of a Chromium remote-debugging port, used by
        :class:`~pypreset.cdp.CdpBrowser`.
    cdp_timeout : float
        Total timeout in seconds for a single CDP HTTP or websocket exchange.
    """

    navigation_settle_delay: float = NAVIGATION_SETTLE_DELAY
    retry_propagation_delay: float = RETRY_PROPAGATION_DELAY
    restore_shared_values: bool = False
    cookie_path: str = DEFAULT_COOKIE_PATH
    script_world: str = DEFAULT_SCRIPT_WORLD
    cdp_endpoint: str = DEFAULT_CDP_ENDPOINT
    cdp_timeout: float = DEFAULT_CDP_TIMEOUT

    def __post_init__(self) -> None:
        for name in ("navigation_settle_delay", "retry_propagation_delay"):
            if getattr(self, name) < 0:
                raise PresetConfigError(f"{name} must not be negative")
        if self.cdp_timeout <= 0:
            raise PresetConfigError("cdp_timeout must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> SyncConfig:
        """Create configuration from ``PYPRESET_*`` environment variables.

        Explicit keyword arguments override environment values.

        Raises
        ------
        PresetConfigError
            If a numeric variable cannot be parsed or a delay is negative.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_FLOAT_MAP = {
            "PYPRESET_SETTLE_DELAY": "navigation_settle_delay",
            "PYPRESET_RETRY_DELAY": "retry_propagation_delay",
            "PYPRESET_CDP_TIMEOUT": "cdp_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        _ENV_STR_MAP = {
            "PYPRESET_SCRIPT_WORLD": "script_world",
            "PYPRESET_CDP_ENDPOINT": "cdp_endpoint",
        }
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val.strip()

        if "restore_shared_values" not in overrides:
            config_kwargs["restore_shared_values"] = _env_bool(env.get("PYPRESET_RESTORE_SHARED"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
