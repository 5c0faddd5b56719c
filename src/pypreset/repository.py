"""Preset repository interfaces and an in-memory implementation.

The synchronizer only ever reads from a :class:`PresetRepository`; it
never writes presets or activation state. Toggling activation state is
the caller's job, done through :class:`TabStateRepository` by
:class:`~pypreset.manager.PresetManager`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from pydantic import ValidationError

from pypreset._browser import TabId
from pypreset.exceptions import PresetError, PresetNotFoundError
from pypreset.models.parameter import Preset

_logger = logging.getLogger(__name__)


class PresetRepository(Protocol):
    async def get_preset_by_id(self, preset_id: str) -> Preset | None:
        ...

    async def get_presets(self) -> list[Preset]:
        ...

    async def get_active_presets_for_tab(self, tab_id: TabId) -> list[str]:
        ...


class TabStateRepository(PresetRepository, Protocol):
    async def add_active_preset_to_tab(self, tab_id: TabId, preset_id: str) -> None:
        ...

    async def remove_active_preset_from_tab(self, tab_id: TabId, preset_id: str) -> None:
        ...

    async def is_preset_active_on_tab(self, tab_id: TabId, preset_id: str) -> bool:
        ...

    async def cleanup_tab_state(self, tab_id: TabId) -> None:
        ...


class InMemoryPresetRepository:
    """Process-local preset list plus per-tab activation state.

    Nothing survives the process; this is the repository used by the
    command-line script and the test-suite.
    """

    def __init__(
        self,
        presets: Iterable[Preset] = (),
        *,
        tab_states: Mapping[TabId, Sequence[str]] | None = None,
    ) -> None:
        self._presets: list[Preset] = list(presets)
        self._tab_states: dict[TabId, list[str]] = {
            tab_id: list(ids) for tab_id, ids in (tab_states or {}).items() if ids
        }

    @classmethod
    def from_json(cls, text: str) -> InMemoryPresetRepository:
        """Load an exported preset list.

        Accepts either a bare JSON array of presets or an object with a
        ``"presets"`` array.
        """
        try:
            data: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            raise PresetError(f"Invalid preset JSON: {exc}") from exc
        if isinstance(data, dict):
            data = data.get("presets")
        if not isinstance(data, list):
            raise PresetError("Invalid preset JSON: expected an array of presets")
        try:
            presets = [Preset.model_validate(item) for item in data]
        except ValidationError as exc:
            raise PresetError(f"Invalid preset JSON: {exc}") from exc
        return cls(presets)

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    async def get_presets(self) -> list[Preset]:
        return list(self._presets)

    async def get_preset_by_id(self, preset_id: str) -> Preset | None:
        return next((preset for preset in self._presets if preset.id == preset_id), None)

    async def require_preset(self, preset_id: str) -> Preset:
        preset = await self.get_preset_by_id(preset_id)
        if preset is None:
            raise PresetNotFoundError(preset_id)
        return preset

    async def add_preset(self, preset: Preset) -> None:
        """Store *preset*, replacing any existing preset with the same id."""
        for index, existing in enumerate(self._presets):
            if existing.id == preset.id:
                self._presets[index] = preset
                return
        self._presets.append(preset)

    async def delete_preset(self, preset_id: str) -> bool:
        """Delete a preset and scrub it from every tab's activation state."""
        kept = [preset for preset in self._presets if preset.id != preset_id]
        if len(kept) == len(self._presets):
            return False
        self._presets = kept
        for tab_id in list(self._tab_states):
            await self.remove_active_preset_from_tab(tab_id, preset_id)
        return True

    # ------------------------------------------------------------------
    # Tab activation state
    # ------------------------------------------------------------------

    async def get_active_presets_for_tab(self, tab_id: TabId) -> list[str]:
        return list(self._tab_states.get(tab_id, ()))

    async def add_active_preset_to_tab(self, tab_id: TabId, preset_id: str) -> None:
        active = self._tab_states.setdefault(tab_id, [])
        if preset_id not in active:
            active.append(preset_id)

    async def remove_active_preset_from_tab(self, tab_id: TabId, preset_id: str) -> None:
        active = [pid for pid in self._tab_states.get(tab_id, ()) if pid != preset_id]
        if active:
            self._tab_states[tab_id] = active
        else:
            self._tab_states.pop(tab_id, None)

    async def is_preset_active_on_tab(self, tab_id: TabId, preset_id: str) -> bool:
        return preset_id in self._tab_states.get(tab_id, ())

    async def cleanup_tab_state(self, tab_id: TabId) -> None:
        if self._tab_states.pop(tab_id, None) is not None:
            _logger.debug("Dropped activation state for tab %s", tab_id)
