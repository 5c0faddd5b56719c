from __future__ import annotations

import asyncio
from typing import Any

import pytest
from _fakes import FakeCookies, FakeScripts, FakeTabs

from pypreset.config import SyncConfig
from pypreset.repository import InMemoryPresetRepository
from pypreset.synchronizer import PresetSynchronizer


@pytest.fixture
def events() -> list[tuple[Any, ...]]:
    return []


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch, events: list[tuple[Any, ...]]) -> list[float]:
    """Record ``asyncio.sleep`` delays while still yielding to the loop."""
    recorded: list[float] = []
    real_sleep = asyncio.sleep

    async def _fake_sleep(delay: float, result: Any = None) -> Any:
        recorded.append(delay)
        events.append(("sleep", delay))
        await real_sleep(0)
        return result

    monkeypatch.setattr(asyncio, "sleep", _fake_sleep)
    return recorded


@pytest.fixture
def tabs(events: list[tuple[Any, ...]]) -> FakeTabs:
    return FakeTabs(events=events)


@pytest.fixture
def cookies(events: list[tuple[Any, ...]]) -> FakeCookies:
    return FakeCookies(events=events)


@pytest.fixture
def scripts(events: list[tuple[Any, ...]]) -> FakeScripts:
    return FakeScripts(events=events)


@pytest.fixture
def repository() -> InMemoryPresetRepository:
    return InMemoryPresetRepository()


@pytest.fixture
def sync(
    tabs: FakeTabs,
    cookies: FakeCookies,
    scripts: FakeScripts,
    repository: InMemoryPresetRepository,
    sleeps: list[float],
) -> PresetSynchronizer:
    return PresetSynchronizer(
        tabs=tabs,
        cookies=cookies,
        scripts=scripts,
        repository=repository,
        config=SyncConfig(),
    )
