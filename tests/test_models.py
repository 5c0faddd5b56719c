"""Tests for Pydantic model parsing with PresetBaseModel."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pypreset.models import Cookie, Parameter, ParameterType, Preset, Tab

# ------------------------------------------------------------------
# ParameterType
# ------------------------------------------------------------------


class TestParameterType:
    def test_wire_values(self) -> None:
        assert ParameterType("queryParam") is ParameterType.QUERY_PARAM
        assert ParameterType("cookie") is ParameterType.COOKIE
        assert ParameterType("localEntry") is ParameterType.LOCAL_ENTRY

    def test_legacy_storage_spelling_maps_to_local_entry(self) -> None:
        assert ParameterType("localStorage") is ParameterType.LOCAL_ENTRY

    def test_unknown_value_rejected(self) -> None:
        with pytest.raises(ValueError):
            ParameterType("sessionStorage")

    def test_labels(self) -> None:
        assert ParameterType.QUERY_PARAM.label == "Query Parameter"
        assert ParameterType.LOCAL_ENTRY.label == "Local Storage"


# ------------------------------------------------------------------
# Parameter
# ------------------------------------------------------------------


class TestParameter:
    def test_parses_exported_payload(self) -> None:
        parameter = Parameter.model_validate(
            {"id": "1700000000000-ab12cd34", "type": "cookie", "key": "session", "value": "abc", "note": "login"}
        )
        assert parameter.type is ParameterType.COOKIE
        assert parameter.description == "login"
        assert parameter.identity == (ParameterType.COOKIE, "session")

    def test_scalar_values_are_coerced_to_strings(self) -> None:
        flag = Parameter.model_validate({"type": "queryParam", "key": "debug", "value": True})
        level = Parameter.model_validate({"type": "queryParam", "key": "level", "value": 3})
        assert flag.value == "true"
        assert level.value == "3"

    def test_float_values_render_like_the_export(self) -> None:
        whole = Parameter.model_validate({"type": "cookie", "key": "ratio", "value": 1.0})
        fraction = Parameter.model_validate({"type": "cookie", "key": "ratio", "value": 2.5})
        assert whole.value == "1"
        assert fraction.value == "2.5"

    def test_primitive_type_defaults_to_string(self) -> None:
        plain = Parameter(type=ParameterType.COOKIE, key="a", value="1")
        flag = Parameter.model_validate(
            {"type": "queryParam", "key": "debug", "value": "true", "primitiveType": "boolean"}
        )
        assert plain.primitive_type == "string"
        assert plain.is_boolean is False
        assert flag.is_boolean is True

    def test_unknown_primitive_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Parameter.model_validate({"type": "cookie", "key": "a", "value": "1", "primitiveType": "number"})

    def test_missing_id_is_generated(self) -> None:
        first = Parameter(type=ParameterType.COOKIE, key="a", value="1")
        second = Parameter(type=ParameterType.COOKIE, key="a", value="1")
        assert first.id != second.id
        assert first.identity == second.identity

    def test_models_are_frozen(self) -> None:
        parameter = Parameter(type=ParameterType.COOKIE, key="a", value="1")
        with pytest.raises(ValidationError):
            parameter.value = "2"  # type: ignore[misc]


# ------------------------------------------------------------------
# Preset
# ------------------------------------------------------------------


class TestPreset:
    SAMPLE_PAYLOAD: dict = {
        "id": "p1",
        "name": "Debug",
        "description": None,
        "createdAt": 1700000000000,
        "updatedAt": 1700000001000,
        "unknownField": "ignored",
        "parameters": [
            {"type": "queryParam", "key": "debug", "value": "true"},
            {"type": "localStorage", "key": "flag", "value": "on"},
            {"type": "cookie", "key": "session", "value": "abc"},
        ],
    }

    def test_parses_camel_case_export(self) -> None:
        preset = Preset.model_validate(self.SAMPLE_PAYLOAD)
        assert preset.created_at == 1700000000000
        assert preset.updated_at == 1700000001000
        assert preset.description is None
        assert [p.type for p in preset.parameters] == [
            ParameterType.QUERY_PARAM,
            ParameterType.LOCAL_ENTRY,
            ParameterType.COOKIE,
        ]

    def test_parameters_of_keeps_declaration_order(self) -> None:
        preset = Preset.model_validate(
            {
                "name": "x",
                "parameters": [
                    {"type": "cookie", "key": "b", "value": "1"},
                    {"type": "queryParam", "key": "q", "value": "1"},
                    {"type": "cookie", "key": "a", "value": "1"},
                ],
            }
        )
        assert [p.key for p in preset.parameters_of(ParameterType.COOKIE)] == ["b", "a"]

    def test_legacy_settings_key(self) -> None:
        preset = Preset.model_validate(
            {"name": "old", "settings": [{"type": "cookie", "key": "a", "value": "1"}]}
        )
        assert len(preset.parameters) == 1

    def test_round_trips_through_aliases(self) -> None:
        preset = Preset.model_validate(self.SAMPLE_PAYLOAD)
        dumped = preset.model_dump(by_alias=True, mode="json")
        assert dumped["createdAt"] == 1700000000000
        assert dumped["parameters"][1]["type"] == "localEntry"
        assert Preset.model_validate(dumped) == preset


def test_browser_records_accept_cdp_payloads() -> None:
    cookie = Cookie.model_validate(
        {"name": "session", "value": "abc", "domain": ".x.com", "path": "/", "httpOnly": True, "size": 10}
    )
    tab = Tab.model_validate({"id": "E3A1", "url": None, "title": "New Tab"})
    assert cookie.domain == ".x.com"
    assert tab.url is None
