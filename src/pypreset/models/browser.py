"""Browser-side records exchanged with the collaborator protocols."""

from __future__ import annotations

from typing import Any

from pypreset.models._base import PresetBaseModel


class Tab(PresetBaseModel):
    """A browser tab as reported by the Tab Provider."""

    id: int | str
    url: str | None = None
    title: str | None = None


class Cookie(PresetBaseModel):
    """A cookie as reported by the Cookie Store."""

    name: str
    value: str
    domain: str | None = None
    path: str | None = None


class InjectionResult(PresetBaseModel):
    """The return value of one frame's page script."""

    result: Any = None
    frame_id: int = 0
