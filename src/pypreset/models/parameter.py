"""Parameter and preset models."""

from __future__ import annotations

import enum
from typing import Any, ClassVar, Literal

from pydantic import Field, field_validator

from pypreset._constants import PARAMETER_TYPE_LABELS
from pypreset.models._base import PresetBaseModel, new_id, now_ms

#: Older exports spell the local entry kind after the browser API.
_LEGACY_TYPE_VALUES: dict[str, str] = {"localStorage": "localEntry"}


class ParameterType(enum.StrEnum):
    """Where a parameter lives in the tab."""

    QUERY_PARAM = "queryParam"
    COOKIE = "cookie"
    LOCAL_ENTRY = "localEntry"

    @classmethod
    def _missing_(cls, value: object) -> ParameterType | None:
        if isinstance(value, str) and value in _LEGACY_TYPE_VALUES:
            return cls(_LEGACY_TYPE_VALUES[value])
        return None

    @property
    def label(self) -> str:
        """Human-readable label (``"Query Parameter"``, ``"Cookie"``, ``"Local Storage"``)."""
        return PARAMETER_TYPE_LABELS.get(self.value, "Unknown")


#: How a value is interpreted; boolean parameters are switched off rather than erased.
PrimitiveType = Literal["string", "boolean"]

#: Identity of a parameter for conflict purposes; the value is not part of it.
ParameterIdentity = tuple[ParameterType, str]


class Parameter(PresetBaseModel):
    """A single ``(type, key, value)`` setting that can be written into a tab."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = {"note": "description"}

    id: str = Field(default_factory=new_id)
    type: ParameterType
    key: str
    value: str
    description: str | None = None
    primitive_type: PrimitiveType = "string"

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Any:
        # Hand-edited JSON exports carry bare booleans and numbers.
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @property
    def is_boolean(self) -> bool:
        return self.primitive_type == "boolean"

    @property
    def identity(self) -> ParameterIdentity:
        return (self.type, self.key)


class Preset(PresetBaseModel):
    """A named, ordered collection of parameters toggled together.

    Duplicate ``(type, key)`` pairs are kept as given; whichever comes last
    in :attr:`parameters` wins when they are written in order.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {"settings": "parameters"}

    id: str = Field(default_factory=new_id)
    name: str
    description: str | None = None
    parameters: list[Parameter] = Field(default_factory=list)
    created_at: int | None = Field(default_factory=now_ms)
    updated_at: int | None = Field(default_factory=now_ms)

    def parameters_of(self, parameter_type: ParameterType) -> list[Parameter]:
        """Return this preset's parameters of one type, in declaration order."""
        return [parameter for parameter in self.parameters if parameter.type == parameter_type]
