"""Ownership resolution between presets active on the same tab.

Two presets may both set ``debug=true``. Deactivating one must not strip a
parameter that a still-active preset depends on, so a parameter is only
removed when no other active preset claims the same ``(type, key)``.
Values play no part in the claim.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from pypreset._browser import TabId
from pypreset.models.parameter import Parameter, ParameterIdentity, ParameterType, Preset
from pypreset.repository import PresetRepository

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RemovalPlan:
    """What a preset removal does with each of the preset's parameters.

    ``to_restore`` holds preserved parameters re-valued to their effective
    value among the other presets; it is only filled when restoring is
    requested and the values differ.
    """

    to_remove: list[Parameter] = field(default_factory=list)
    preserved: list[Parameter] = field(default_factory=list)
    to_restore: list[Parameter] = field(default_factory=list)

    def of_type(self, parameter_type: ParameterType) -> tuple[list[Parameter], list[Parameter]]:
        """Return ``(to_remove, to_restore)`` restricted to one parameter type."""
        return (
            [p for p in self.to_remove if p.type == parameter_type],
            [p for p in self.to_restore if p.type == parameter_type],
        )


def claimed_identities(presets: Sequence[Preset]) -> set[ParameterIdentity]:
    """Every ``(type, key)`` claimed by any of *presets*."""
    return {parameter.identity for preset in presets for parameter in preset.parameters}


def effective_value(parameter_type: ParameterType, key: str, presets: Sequence[Preset]) -> str | None:
    """Value the last preset in *presets* claiming ``(type, key)`` sets, if any.

    Within that preset the first matching parameter counts.
    """
    for preset in reversed(presets):
        for parameter in preset.parameters:
            if parameter.type == parameter_type and parameter.key == key:
                return parameter.value
    return None


def plan_removal(preset: Preset, other_presets: Sequence[Preset], *, restore_shared: bool = False) -> RemovalPlan:
    """Split *preset*'s parameters into removable and preserved ones.

    With no other presets every parameter is removable.
    """
    claimed = claimed_identities(other_presets)
    plan = RemovalPlan()
    for parameter in preset.parameters:
        if parameter.identity not in claimed:
            plan.to_remove.append(parameter)
            continue
        plan.preserved.append(parameter)
        if restore_shared:
            value = effective_value(parameter.type, parameter.key, other_presets)
            if value is not None and value != parameter.value:
                plan.to_restore.append(parameter.model_copy(update={"value": value}))
    return plan


async def load_other_active_presets(repository: PresetRepository, tab_id: TabId, preset_id: str) -> list[Preset]:
    """Resolve the presets active on *tab_id* other than *preset_id*.

    Keeps activation order; ids that no longer resolve to a preset are
    skipped.
    """
    other_ids = [pid for pid in await repository.get_active_presets_for_tab(tab_id) if pid != preset_id]
    if not other_ids:
        return []
    by_id = {preset.id: preset for preset in await repository.get_presets()}
    others: list[Preset] = []
    for pid in other_ids:
        other = by_id.get(pid)
        if other is None:
            _logger.debug("Active preset %s on tab %s no longer exists; ignoring", pid, tab_id)
            continue
        others.append(other)
    return others
