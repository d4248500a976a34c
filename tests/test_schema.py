"""
Tests for schema translation, assembly and parameter name escaping.

Tests cover:
- Escaping bracketed parameter names and mapping them back
- Translating OpenAPI schema objects into SchemaNodes
- Assembling one object schema per operation
- Date/time detection used for the timestamp resource
"""

import logging
from dataclasses import replace

import pytest

from apibridge.tools.openapi.models import Operation, Parameter, RequestBody
from apibridge.tools.openapi.naming import (
    build_parameter_name_mapping,
    escape_parameter_name,
    unescape_parameter_name,
)
from apibridge.tools.openapi.schema import (
    SchemaNode,
    assemble_schema,
    build_input_schema,
    has_date_time_parameters,
    translate_schema,
)


# =============================================================================
# Name escaping
# =============================================================================


class TestEscapeParameterName:
    """Tests for bracketed parameter names."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("filter[created_at]", "filter_created_at_"),
            ("page[size]", "page_size_"),
            ("a[b][c]", "a_b__c_"),
            ("limit", "limit"),
            ("", ""),
        ],
    )
    def test_escape(self, name, expected):
        assert escape_parameter_name(name) == expected

    @pytest.mark.parametrize("name", ["a[b]", "a[b]c", "[x", "a]", "a[b][c]", "filter[status]"])
    def test_escape_is_idempotent(self, name):
        once = escape_parameter_name(name)

        assert escape_parameter_name(once) == once
        assert once.endswith("_")

    @pytest.mark.parametrize("name", ["limit", "page_size", "x_", ""])
    def test_plain_names_unchanged(self, name):
        assert escape_parameter_name(name) == name
        assert escape_parameter_name(escape_parameter_name(name)) == name

    def test_escaped_name_has_no_brackets(self):
        escaped = escape_parameter_name("x[y]")
        assert "[" not in escaped
        assert "]" not in escaped

    def test_mapping_only_contains_changed_names(self):
        params = [
            Parameter(name="limit", location="query"),
            Parameter(name="filter[status]", location="query"),
        ]
        mapping = build_parameter_name_mapping(params)

        assert mapping == {"filter_status_": "filter[status]"}

    def test_unescape_roundtrip(self):
        params = [Parameter(name="page[number]", location="query")]
        mapping = build_parameter_name_mapping(params)

        assert unescape_parameter_name("page_number_", mapping) == "page[number]"
        assert unescape_parameter_name("unknown", mapping) == "unknown"

    def test_collision_last_wins(self):
        params = [
            Parameter(name="a[b]", location="query"),
            Parameter(name="a]b[", location="query"),
        ]
        mapping = build_parameter_name_mapping(params)

        assert mapping["a_b_"] == "a]b["


# =============================================================================
# Translation
# =============================================================================


class TestTranslateSchema:
    """Tests for translate_schema."""

    def test_none_is_absent(self):
        assert translate_schema(None) is None

    def test_basic_fields(self):
        node = translate_schema(
            {
                "type": "string",
                "format": "email",
                "description": "Contact email",
                "enum": ["a@b.c"],
                "default": "a@b.c",
            }
        )

        assert node.to_dict() == {
            "type": "string",
            "format": "email",
            "description": "Contact email",
            "enum": ["a@b.c"],
            "default": "a@b.c",
        }

    def test_first_type_of_list_is_used(self):
        node = translate_schema({"type": ["integer", "null"]})
        assert node.type == "integer"

    def test_example_becomes_examples(self):
        node = translate_schema({"type": "integer", "example": 7})
        assert node.to_dict()["examples"] == [7]

    def test_none_default_is_kept(self):
        node = translate_schema({"type": "string", "default": None})
        assert "default" in node.to_dict()
        assert node.to_dict()["default"] is None

    def test_object_properties_and_required(self):
        node = translate_schema(
            {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "age": {"type": "integer"},
                },
                "required": ["name"],
            }
        )
        data = node.to_dict()

        assert set(data["properties"]) == {"name", "age"}
        assert data["required"] == ["name"]

    def test_array_items(self):
        node = translate_schema({"type": "array", "items": {"type": "string", "enum": ["x"]}})
        assert node.to_dict()["items"] == {"type": "string", "enum": ["x"]}

    def test_unknown_keywords_dropped(self):
        node = translate_schema({"type": "string", "x-internal": True, "pattern": "^a"})
        assert node.to_dict() == {"type": "string"}

    def test_composition_carried_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING):
            node = translate_schema(
                {
                    "oneOf": [{"type": "string"}, {"type": "integer"}],
                    "anyOf": [{"type": "boolean"}],
                    "allOf": [{"type": "object"}],
                    "discriminator": {"propertyName": "kind"},
                }
            )

        data = node.to_dict()
        assert data["oneOf"] == [{"type": "string"}, {"type": "integer"}]
        assert data["anyOf"] == [{"type": "boolean"}]
        assert data["allOf"] == [{"type": "object"}]
        assert data["discriminator"] == {"propertyName": "kind"}
        assert "Only basic support is provided" in caplog.text

    def test_empty_node_renders_empty_mapping(self):
        assert SchemaNode().to_dict() == {}


# =============================================================================
# Assembly
# =============================================================================


class TestAssembleSchema:
    """Tests for assemble_schema."""

    def test_parameters_keyed_by_escaped_name(self):
        params = [
            Parameter(name="filter[name]", location="query", required=True, schema={"type": "string"}),
            Parameter(name="limit", location="query", schema={"type": "integer"}),
        ]
        data = assemble_schema(params).to_dict()

        assert data["type"] == "object"
        assert set(data["properties"]) == {"filter_name_", "limit"}
        assert data["required"] == ["filter_name_"]

    def test_required_omitted_when_empty(self):
        params = [Parameter(name="limit", location="query", schema={"type": "integer"})]
        data = assemble_schema(params).to_dict()

        assert "required" not in data

    def test_parameter_description_overrides_schema(self):
        params = [
            Parameter(
                name="id",
                location="path",
                schema={"type": "string", "description": "schema text"},
                description="parameter text",
            )
        ]
        data = assemble_schema(params).to_dict()

        assert data["properties"]["id"]["description"] == "parameter text"

    def test_unsupported_location_skipped(self, caplog):
        params = [Parameter(name="x", location="matrix", schema={"type": "string"})]

        with caplog.at_level(logging.WARNING):
            data = assemble_schema(params).to_dict()

        assert data["properties"] == {}
        assert "unsupported location" in caplog.text

    def test_json_body_under_request_body(self):
        body = RequestBody(
            required=True,
            content={"application/json": {"type": "object", "properties": {"a": {"type": "string"}}}},
        )
        data = assemble_schema([], body).to_dict()

        assert data["properties"]["requestBody"]["description"] == "The JSON request body."
        assert data["required"] == ["requestBody"]

    def test_vnd_api_json_body(self):
        body = RequestBody(content={"application/vnd.api+json; charset=utf-8": {"type": "object"}})
        data = assemble_schema([], body).to_dict()

        assert "requestBody" in data["properties"]
        assert "required" not in data

    def test_non_json_body_warns_and_is_excluded(self, caplog):
        body = RequestBody(content={"multipart/form-data": {"type": "object"}})

        with caplog.at_level(logging.WARNING):
            data = assemble_schema([], body).to_dict()

        assert "requestBody" not in data["properties"]
        assert "multipart/form-data" in caplog.text

    def test_binary_string_parameter_warns(self, caplog):
        params = [Parameter(name="file", location="query", schema={"type": "string", "format": "binary"})]

        with caplog.at_level(logging.WARNING):
            assemble_schema(params)

        assert "binary" in caplog.text

    def test_build_input_schema(self, get_pet_operation):
        data = build_input_schema(get_pet_operation)

        assert data["properties"]["petId"] == {"type": "integer", "description": "Pet identifier"}
        assert data["required"] == ["petId"]

    def test_build_input_schema_post_process(self, get_pet_operation):
        seen = []

        def add_title(node):
            seen.append(node)
            return replace(node, description="Pet lookup")

        data = build_input_schema(get_pet_operation, add_title)

        assert len(seen) == 1
        assert data["description"] == "Pet lookup"
        assert "petId" in data["properties"]


# =============================================================================
# Date/time detection
# =============================================================================


class TestDateTimeDetection:
    """Tests for has_date_time_parameters."""

    def _op(self, *params, body=None):
        return Operation(
            operation_id="op", method="get", path="/x", parameters=params, request_body=body
        )

    def test_name_hint(self):
        assert has_date_time_parameters(self._op(Parameter(name="created_at", location="query")))
        assert has_date_time_parameters(self._op(Parameter(name="startDate", location="query")))

    def test_format_hint(self):
        param = Parameter(name="when", location="query", schema={"type": "string", "format": "date-time"})
        assert has_date_time_parameters(self._op(param))

    def test_body_format_nested(self):
        body = RequestBody(
            content={
                "application/json": {
                    "type": "object",
                    "properties": {
                        "events": {
                            "type": "array",
                            "items": {"type": "object", "properties": {"at": {"type": "string", "format": "date"}}},
                        }
                    },
                }
            }
        )
        assert has_date_time_parameters(self._op(body=body))

    def test_unrelated_operation(self, get_pet_operation):
        assert not has_date_time_parameters(get_pet_operation)
