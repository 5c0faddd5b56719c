"""Preset synchronization engine.

Applies, removes, verifies and self-heals presets on a live browser tab.
All browser access goes through the injected collaborators, and no call
keeps state between invocations, so one synchronizer can drive many tabs
concurrently.

Callers must not overlap two calls on the *same* tab (e.g. disable the
toggle while a call is outstanding); nothing here serializes them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from pypreset._batch import apply_query_batch, remove_query_batch
from pypreset._browser import CookieStore, ScriptExecutor, TabId, TabProvider
from pypreset._ops import cookie as _cookie_ops
from pypreset._ops import local_storage as _local_ops
from pypreset._ops import query as _query_ops
from pypreset._ops._common import report_failure
from pypreset.config import SyncConfig
from pypreset.conflicts import load_other_active_presets, plan_removal
from pypreset.models.parameter import Parameter, ParameterType, Preset
from pypreset.models.results import ParameterResult, PresetVerification, VerificationResult
from pypreset.repository import PresetRepository

_logger = logging.getLogger(__name__)


class PresetSynchronizer:
    """Stateless engine writing presets into browser tabs.

    Usage::

        async with CdpBrowser(config) as browser:
            sync = PresetSynchronizer(
                tabs=browser.tabs,
                cookies=browser.cookies,
                scripts=browser.scripts,
                repository=repository,
                config=config,
            )
            ok = await sync.apply_preset(tab_id, "p1")

    Every public coroutine returns a ``bool`` or a small result record;
    browser and repository failures are logged and reported as ``False``,
    never raised.
    """

    def __init__(
        self,
        *,
        tabs: TabProvider,
        cookies: CookieStore,
        scripts: ScriptExecutor,
        repository: PresetRepository,
        config: SyncConfig | None = None,
    ) -> None:
        self._tabs = tabs
        self._cookies = cookies
        self._scripts = scripts
        self._repository = repository
        self._config = config or SyncConfig()

    @property
    def config(self) -> SyncConfig:
        return self._config

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    async def apply_preset(self, tab_id: TabId, preset_id: str) -> bool:
        """Write every parameter of a preset into the tab.

        Query parameters go first in a single navigation (plus settle
        delay), then cookies one by one, then local entries one by one.
        Returns ``True`` only if every parameter succeeded; parameters that
        did succeed stay applied either way.
        """
        preset = await self._load_preset(preset_id, action="apply")
        if preset is None:
            return False

        results: list[ParameterResult] = []

        queries = preset.parameters_of(ParameterType.QUERY_PARAM)
        queries_ok = await apply_query_batch(
            self._tabs,
            tab_id,
            queries,
            settle_delay=self._config.navigation_settle_delay,
        )
        results.extend(ParameterResult(parameter=p, success=queries_ok) for p in queries)

        for parameter in preset.parameters_of(ParameterType.COOKIE):
            results.append(ParameterResult(parameter=parameter, success=await self._apply_cookie(tab_id, parameter)))

        for parameter in preset.parameters_of(ParameterType.LOCAL_ENTRY):
            results.append(ParameterResult(parameter=parameter, success=await self._apply_local(tab_id, parameter)))

        return self._summarize("apply", preset, tab_id, results)

    async def remove_preset(self, tab_id: TabId, preset_id: str) -> bool:
        """Retract a preset's parameters from the tab.

        Parameters still claimed (same type and key) by another preset
        active on the tab are left alone and count as successful. With
        :attr:`SyncConfig.restore_shared_values` set, those whose value
        differs are rewritten to the other preset's value instead.
        """
        preset = await self._load_preset(preset_id, action="remove")
        if preset is None:
            return False

        try:
            others = await load_other_active_presets(self._repository, tab_id, preset_id)
        except Exception:
            report_failure(_logger, "Could not resolve active presets on tab %s", tab_id)
            return False

        plan = plan_removal(preset, others, restore_shared=self._config.restore_shared_values)
        _logger.debug(
            "Removing preset %s (%s) from tab %s: remove=%d preserved=%d restore=%d",
            preset.name,
            preset.id,
            tab_id,
            len(plan.to_remove),
            len(plan.preserved),
            len(plan.to_restore),
        )

        restored_ids = {p.id for p in plan.to_restore}
        results = [ParameterResult(parameter=p, success=True) for p in plan.preserved if p.id not in restored_ids]

        query_remove, query_restore = plan.of_type(ParameterType.QUERY_PARAM)
        queries_ok = await remove_query_batch(
            self._tabs,
            tab_id,
            query_remove,
            to_restore=query_restore,
            settle_delay=self._config.navigation_settle_delay,
        )
        results.extend(ParameterResult(parameter=p, success=queries_ok) for p in (*query_remove, *query_restore))

        cookie_remove, cookie_restore = plan.of_type(ParameterType.COOKIE)
        for parameter in cookie_remove:
            ok = await _cookie_ops.remove(self._tabs, self._cookies, tab_id, parameter.key)
            results.append(ParameterResult(parameter=parameter, success=ok))
        for parameter in cookie_restore:
            results.append(ParameterResult(parameter=parameter, success=await self._apply_cookie(tab_id, parameter)))

        local_remove, local_restore = plan.of_type(ParameterType.LOCAL_ENTRY)
        for parameter in local_remove:
            ok = await _local_ops.remove(self._scripts, tab_id, parameter.key, world=self._config.script_world)
            results.append(ParameterResult(parameter=parameter, success=ok))
        for parameter in local_restore:
            results.append(ParameterResult(parameter=parameter, success=await self._apply_local(tab_id, parameter)))

        return self._summarize("remove", preset, tab_id, results)

    async def verify_preset(self, tab_id: TabId, preset_id: str) -> PresetVerification:
        """Read every parameter of a preset back from the tab, concurrently.

        An unknown preset yields ``all_verified=False`` with no results.
        """
        preset = await self._load_preset(preset_id, action="verify")
        if preset is None:
            return PresetVerification(all_verified=False, results=[])

        outcomes: Sequence[bool] = await asyncio.gather(
            *(self.verify_parameter(tab_id, parameter) for parameter in preset.parameters)
        )
        results = [
            VerificationResult(parameter=parameter, verified=verified)
            for parameter, verified in zip(preset.parameters, outcomes, strict=True)
        ]
        return PresetVerification(all_verified=all(outcomes), results=results)

    # ------------------------------------------------------------------
    # Single parameters
    # ------------------------------------------------------------------

    async def apply_parameter(self, tab_id: TabId, parameter: Parameter) -> bool:
        """Write one parameter; a query parameter navigates on its own."""
        if parameter.type == ParameterType.QUERY_PARAM:
            return await _query_ops.apply(self._tabs, tab_id, parameter.key, parameter.value)
        if parameter.type == ParameterType.COOKIE:
            return await self._apply_cookie(tab_id, parameter)
        if parameter.type == ParameterType.LOCAL_ENTRY:
            return await self._apply_local(tab_id, parameter)
        _logger.warning("Unknown parameter type: %s", parameter.type)
        return False

    async def remove_parameter(self, tab_id: TabId, parameter: Parameter) -> bool:
        """Erase one parameter, without consulting other active presets.

        A boolean parameter is switched off instead: ``"false"`` is written
        under its key.
        """
        if parameter.is_boolean:
            return await self.apply_parameter(tab_id, parameter.model_copy(update={"value": "false"}))
        if parameter.type == ParameterType.QUERY_PARAM:
            return await _query_ops.remove(self._tabs, tab_id, parameter.key)
        if parameter.type == ParameterType.COOKIE:
            return await _cookie_ops.remove(self._tabs, self._cookies, tab_id, parameter.key)
        if parameter.type == ParameterType.LOCAL_ENTRY:
            return await _local_ops.remove(self._scripts, tab_id, parameter.key, world=self._config.script_world)
        _logger.warning("Unknown parameter type: %s", parameter.type)
        return False

    async def get_parameter_current_value(self, tab_id: TabId, parameter: Parameter) -> str | None:
        """Live value of the parameter's key in the tab, or ``None`` if unset or unreadable."""
        if parameter.type == ParameterType.QUERY_PARAM:
            return await _query_ops.read(self._tabs, tab_id, parameter.key)
        if parameter.type == ParameterType.COOKIE:
            return await _cookie_ops.read(self._tabs, self._cookies, tab_id, parameter.key)
        if parameter.type == ParameterType.LOCAL_ENTRY:
            return await _local_ops.read(self._scripts, tab_id, parameter.key, world=self._config.script_world)
        return None

    async def verify_parameter(self, tab_id: TabId, parameter: Parameter) -> bool:
        """Whether the tab's live value equals the parameter's value exactly."""
        if parameter.type == ParameterType.QUERY_PARAM:
            return await _query_ops.verify(self._tabs, tab_id, parameter.key, parameter.value)
        if parameter.type == ParameterType.COOKIE:
            return await _cookie_ops.verify(self._tabs, self._cookies, tab_id, parameter.key, parameter.value)
        if parameter.type == ParameterType.LOCAL_ENTRY:
            return await _local_ops.verify(
                self._scripts,
                tab_id,
                parameter.key,
                parameter.value,
                world=self._config.script_world,
            )
        return False

    async def sync_parameter(self, tab_id: TabId, parameter: Parameter) -> bool:
        """Apply one parameter and verify it, retrying exactly once on mismatch.

        A failed apply (as opposed to a failed verification) ends the call
        immediately. The retry is never repeated, so permanently unreachable
        tabs (restricted pages, missing script permission) fail fast.
        """
        if not await self.apply_parameter(tab_id, parameter):
            return False

        if await self.verify_parameter(tab_id, parameter):
            return True

        _logger.info(
            "%s %r did not verify on tab %s, retrying once",
            parameter.type.label,
            parameter.key,
            tab_id,
        )
        if not await self.apply_parameter(tab_id, parameter):
            return False

        await asyncio.sleep(self._config.retry_propagation_delay)
        return await self.verify_parameter(tab_id, parameter)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _load_preset(self, preset_id: str, *, action: str) -> Preset | None:
        try:
            preset = await self._repository.get_preset_by_id(preset_id)
        except Exception:
            report_failure(_logger, "Could not load preset %s to %s", preset_id, action)
            return None
        if preset is None:
            _logger.warning("Preset not found (%s): %s", action, preset_id)
        return preset

    async def _apply_cookie(self, tab_id: TabId, parameter: Parameter) -> bool:
        return await _cookie_ops.apply(
            self._tabs,
            self._cookies,
            tab_id,
            parameter.key,
            parameter.value,
            path=self._config.cookie_path,
        )

    async def _apply_local(self, tab_id: TabId, parameter: Parameter) -> bool:
        return await _local_ops.apply(
            self._scripts,
            tab_id,
            parameter.key,
            parameter.value,
            world=self._config.script_world,
        )

    @staticmethod
    def _summarize(action: str, preset: Preset, tab_id: TabId, results: list[ParameterResult]) -> bool:
        failed = [r.parameter for r in results if not r.success]
        if failed:
            _logger.warning(
                "Preset %s (%s) %s on tab %s: %d/%d parameters failed (%s)",
                preset.name,
                preset.id,
                action,
                tab_id,
                len(failed),
                len(results),
                ", ".join(f"{p.type.value}:{p.key}" for p in failed),
            )
            return False
        _logger.debug("Preset %s (%s) %s on tab %s: %d ok", preset.name, preset.id, action, tab_id, len(results))
        return True
