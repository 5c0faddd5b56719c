"""Custom exception hierarchy for pypreset.

None of these cross a public :class:`~pypreset.synchronizer.PresetSynchronizer`
coroutine; they travel between collaborators and the operator layer, where
they are logged and turned into ``False``.
"""

from __future__ import annotations


class PresetError(Exception):
    """Base exception for all pypreset errors."""


class PresetConfigError(PresetError):
    """Invalid or missing configuration."""


class PresetNotFoundError(PresetError):
    """A referenced preset does not exist in the repository."""

    def __init__(self, preset_id: str) -> None:
        self.preset_id = preset_id
        super().__init__(f"Preset not found: {preset_id}")


class PresetTransportError(PresetError):
    """A browser call failed (tab gone, no URL, permission denied, protocol error)."""

    def __init__(
        self,
        message: str,
        *,
        method: str = "",
        tab_id: int | str | None = None,
    ) -> None:
        self.method = method
        self.tab_id = tab_id
        super().__init__(message)


class PresetScriptError(PresetTransportError):
    """A page script threw inside the tab.

    Raised when the page refuses storage access (sandboxed frames,
    ``about:`` pages) or the injected function itself fails.
    """
