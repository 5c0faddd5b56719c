"""Base model for pypreset data.

Every model inherits from :class:`PresetBaseModel` which provides:

* ``alias_generator=to_camel`` so camelCase keys from exported preset
  JSON and browser payloads map to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``None`` values (so the
  field default is used) and renames legacy keys declared in
  ``_KEY_ALIASES``.
"""

from __future__ import annotations

import secrets
import time
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate a unique id in the ``<epoch-ms>-<random>`` form used by exported presets."""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def now_ms() -> int:
    """Current epoch timestamp in milliseconds."""
    return int(time.time() * 1000)


class PresetBaseModel(BaseModel):
    """Base for pypreset models."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = {}
    """Legacy key → current key renames applied before validation.

    A legacy key is only renamed when the current key is absent.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Apply key aliases and drop ``None`` values."""
        if not isinstance(values, dict):
            return values
        working = dict(values)
        for old_key, new_key in cls._KEY_ALIASES.items():
            if old_key in working and new_key not in working:
                working[new_key] = working.pop(old_key)
        return {key: value for key, value in working.items() if value is not None}
