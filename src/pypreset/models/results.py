"""Per-call result records.

These live only for the duration of one synchronizer or manager call and
are never persisted.
"""

from __future__ import annotations

from pydantic import Field

from pypreset.models._base import PresetBaseModel
from pypreset.models.parameter import Parameter


class ParameterResult(PresetBaseModel):
    """Outcome of applying or removing one parameter."""

    parameter: Parameter
    success: bool


class VerificationResult(PresetBaseModel):
    """Outcome of reading one parameter back from the tab."""

    parameter: Parameter
    verified: bool


class PresetVerification(PresetBaseModel):
    """Aggregate verification of every parameter in a preset."""

    all_verified: bool
    results: list[VerificationResult] = Field(default_factory=list)


class ToggleResult(PresetBaseModel):
    """Outcome of :meth:`~pypreset.manager.PresetManager.toggle_preset`."""

    active: bool
    success: bool
