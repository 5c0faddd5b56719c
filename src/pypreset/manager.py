"""Toggle presets on tabs and keep activation state in step.

The synchronizer reports outcomes but never records which presets are
active. This layer does: a preset enters a tab's activation state only
after it was applied successfully, and leaves it only after it was
removed successfully, so a failed call leaves the toggle where it was.
"""

from __future__ import annotations

import logging

from pypreset._browser import TabId
from pypreset.models.parameter import Preset
from pypreset.models.results import ToggleResult
from pypreset.repository import TabStateRepository
from pypreset.synchronizer import PresetSynchronizer

_logger = logging.getLogger(__name__)


class PresetManager:
    def __init__(self, synchronizer: PresetSynchronizer, repository: TabStateRepository) -> None:
        self._sync = synchronizer
        self._repository = repository

    async def toggle_preset(self, tab_id: TabId, preset_id: str) -> ToggleResult:
        """Flip a preset on or off for a tab."""
        if await self._repository.is_preset_active_on_tab(tab_id, preset_id):
            success = await self._sync.remove_preset(tab_id, preset_id)
            if success:
                await self._repository.remove_active_preset_from_tab(tab_id, preset_id)
            return ToggleResult(active=not success, success=success)

        success = await self._sync.apply_preset(tab_id, preset_id)
        if success:
            await self._repository.add_active_preset_to_tab(tab_id, preset_id)
        return ToggleResult(active=success, success=success)

    async def activate_preset(self, tab_id: TabId, preset_id: str) -> bool:
        """Apply a preset unless it is already active on the tab."""
        if await self._repository.is_preset_active_on_tab(tab_id, preset_id):
            return True
        success = await self._sync.apply_preset(tab_id, preset_id)
        if success:
            await self._repository.add_active_preset_to_tab(tab_id, preset_id)
        return success

    async def deactivate_preset(self, tab_id: TabId, preset_id: str) -> bool:
        """Remove a preset if it is active on the tab."""
        if not await self._repository.is_preset_active_on_tab(tab_id, preset_id):
            return True
        success = await self._sync.remove_preset(tab_id, preset_id)
        if success:
            await self._repository.remove_active_preset_from_tab(tab_id, preset_id)
        return success

    async def get_presets_with_active_state(self, tab_id: TabId) -> list[tuple[Preset, bool]]:
        active = set(await self._repository.get_active_presets_for_tab(tab_id))
        return [(preset, preset.id in active) for preset in await self._repository.get_presets()]

    async def forget_tab(self, tab_id: TabId) -> None:
        """Drop a closed tab's activation state."""
        _logger.debug("Forgetting tab %s", tab_id)
        await self._repository.cleanup_tab_state(tab_id)
