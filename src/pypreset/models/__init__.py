"""Data models for presets, browser records and results."""

from pypreset.models._base import PresetBaseModel, new_id, now_ms
from pypreset.models.browser import Cookie, InjectionResult, Tab
from pypreset.models.parameter import Parameter, ParameterIdentity, ParameterType, Preset, PrimitiveType
from pypreset.models.results import ParameterResult, PresetVerification, ToggleResult, VerificationResult

__all__ = [
    "Cookie",
    "InjectionResult",
    "Parameter",
    "ParameterIdentity",
    "ParameterResult",
    "ParameterType",
    "Preset",
    "PresetBaseModel",
    "PresetVerification",
    "PrimitiveType",
    "Tab",
    "ToggleResult",
    "VerificationResult",
    "new_id",
    "now_ms",
]
