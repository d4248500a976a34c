"""
Tests for agent-facing text: example values, tool descriptions and
error guidance.
"""

import json

import pytest

from apibridge.tools.openapi.description import generate_description
from apibridge.tools.openapi.examples import build_example_arguments, generate_example_value
from apibridge.tools.openapi.guidance import (
    GENERIC_GUIDANCE,
    NOT_PROVIDED,
    auth_guidance,
    bad_request_guidance,
    guidance_for_status,
    not_found_guidance,
    server_error_guidance,
)
from apibridge.tools.openapi.models import Operation, Parameter
from apibridge.tools.openapi.schema import build_input_schema


# =============================================================================
# Example values
# =============================================================================


class TestGenerateExampleValue:
    """Tests for the example-value rule."""

    @pytest.mark.parametrize(
        "prop,expected",
        [
            ({"type": "string"}, "example_string"),
            ({"type": "string", "format": "email"}, "user@example.com"),
            ({"type": "string", "format": "uri"}, "https://example.com"),
            ({"type": "string", "format": "url"}, "https://example.com"),
            ({"type": "string", "format": "date"}, "2024-01-01"),
            ({"type": "string", "format": "date-time"}, "2024-01-01T00:00:00Z"),
            ({"type": "string", "format": "uuid"}, "123e4567-e89b-12d3-a456-426614174000"),
            ({"type": "string", "format": "hostname"}, "example_string"),
            ({"type": "number"}, 123.45),
            ({"type": "integer"}, 123),
            ({"type": "boolean"}, True),
            ({"type": "array"}, ["item1", "item2"]),
            ({"type": "array", "items": {"type": "integer"}}, [123]),
            ({"type": "object"}, {"key": "value"}),
            ({}, None),
        ],
    )
    def test_by_type(self, prop, expected):
        assert generate_example_value(prop) == expected

    def test_enum_wins(self):
        prop = {"type": "string", "enum": ["b", "a"], "example": "z"}
        assert generate_example_value(prop) == "b"

    def test_example_before_type(self):
        assert generate_example_value({"type": "integer", "example": 9}) == 9

    def test_examples_list(self):
        assert generate_example_value({"type": "integer", "examples": [4, 5]}) == 4


class TestBuildExampleArguments:
    """Tests for build_example_arguments."""

    SCHEMA = {
        "type": "object",
        "properties": {
            "a": {"type": "string"},
            "b": {"type": "integer"},
            "c": {"type": "boolean"},
            "d": {"type": "number"},
        },
        "required": ["c"],
    }

    def test_required_first_then_optional(self):
        args = build_example_arguments(self.SCHEMA, max_optional=2)
        assert list(args) == ["c", "a", "b"]

    def test_all_properties_by_default(self):
        args = build_example_arguments(self.SCHEMA)
        assert set(args) == {"a", "b", "c", "d"}

    def test_cap_limits_optional(self):
        schema = {
            "properties": {name: {"type": "string"} for name in ("r1", "r2", "r3", "o1")},
            "required": ["r1", "r2", "r3"],
        }
        args = build_example_arguments(schema, max_optional=2, cap=3)
        assert set(args) == {"r1", "r2", "r3"}


# =============================================================================
# Description
# =============================================================================


class TestGenerateDescription:
    """Tests for generate_description."""

    def test_get_operation(self, get_pet_operation):
        schema = build_input_schema(get_pet_operation)
        text = generate_description(get_pet_operation, schema)

        assert text.startswith("Fetch a single pet by id")
        assert "\n\nPARAMETERS:\n• Required:\n  - petId (integer): Pet identifier" in text
        assert '\n\nEXAMPLE: call getPet {"petId":123}' in text
        assert "RESPONSE:" in text
        assert "SAFETY:" not in text
        assert "AUTHENTICATION" not in text

    def test_summary_used_without_description(self, create_pet_operation):
        schema = build_input_schema(create_pet_operation)
        text = generate_description(create_pet_operation, schema)

        assert text.startswith("Create a pet")
        assert text.endswith(
            "SAFETY: This operation modifies data. You will be asked to confirm before execution."
        )

    def test_authentication_section(self):
        op = Operation(
            operation_id="op",
            method="get",
            path="/x",
            security=({"ApiKeyAuth": []}, {"BearerAuth": []}),
        )
        text = generate_description(op, {"type": "object", "properties": {}})

        assert (
            "AUTHENTICATION: Required (ApiKeyAuth OR BearerAuth). "
            "Set environment variables: API_KEY, BEARER_TOKEN, or BASIC_AUTH"
        ) in text

    def test_optional_section_with_enum(self):
        op = Operation(
            operation_id="op",
            method="delete",
            path="/x",
            parameters=(
                Parameter(
                    name="mode",
                    location="query",
                    schema={"type": "string", "enum": ["soft", "hard"]},
                    description="Delete mode",
                ),
            ),
        )
        text = generate_description(op, build_input_schema(op))

        assert "\n• Optional:\n  - mode (string): Delete mode [values: soft, hard]" in text
        assert "RESPONSE:" not in text
        assert "SAFETY:" in text

    def test_deterministic(self, list_pets_operation):
        schema = build_input_schema(list_pets_operation)
        assert generate_description(list_pets_operation, schema) == generate_description(
            list_pets_operation, schema
        )

    def test_example_json_is_parseable(self, list_pets_operation):
        schema = build_input_schema(list_pets_operation)
        text = generate_description(list_pets_operation, schema)

        line = next(ln for ln in text.splitlines() if ln.startswith("EXAMPLE: call listPets "))
        example = json.loads(line[len("EXAMPLE: call listPets "):])
        assert example == {"limit": 123, "tags": ["example_string"]}


# =============================================================================
# Guidance
# =============================================================================


class TestGuidance:
    """Tests for status-specific error guidance."""

    def test_dispatch_by_status(self, get_pet_operation):
        schema = build_input_schema(get_pet_operation)
        args = {"petId": 1}

        assert guidance_for_status(401, get_pet_operation, schema, args, "").startswith(
            "AUTHENTICATION REQUIRED (401)"
        )
        assert guidance_for_status(403, get_pet_operation, schema, args, "").startswith(
            "AUTHORIZATION FAILED (403)"
        )
        assert guidance_for_status(404, get_pet_operation, schema, args, "").startswith(
            "RESOURCE NOT FOUND (404)"
        )
        assert guidance_for_status(400, get_pet_operation, schema, args, "").startswith(
            "BAD REQUEST (400)"
        )
        assert guidance_for_status(503, get_pet_operation, schema, args, "").startswith(
            "SERVER ERROR (503)"
        )
        assert guidance_for_status(409, get_pet_operation, schema, args, "") == GENERIC_GUIDANCE

    def test_not_found_lists_path_params(self, get_pet_operation):
        schema = build_input_schema(get_pet_operation)

        text = not_found_guidance(get_pet_operation, schema, {"petId": 42}, "no such pet")
        assert "• petId: 42" in text
        assert "PATH: GET /pets/{petId}" in text
        assert "SERVER ERROR DETAILS:\nno such pet" in text

        text = not_found_guidance(get_pet_operation, schema, {}, "")
        assert f"• petId: {NOT_PROVIDED}" in text
        assert "SERVER ERROR DETAILS" not in text

    def test_not_found_uses_escaped_name(self):
        op = Operation(
            operation_id="op",
            method="get",
            path="/x/{id[0]}",
            parameters=(Parameter(name="id[0]", location="path", required=True, schema={"type": "string"}),),
        )
        text = not_found_guidance(op, build_input_schema(op), {"id_0_": "abc"}, "")
        assert "• id[0]: abc" in text

    def test_bad_request_marks_required(self, create_pet_operation):
        schema = build_input_schema(create_pet_operation)
        text = bad_request_guidance(create_pet_operation, schema, {"requestBody": {}}, "name missing")

        assert "  - requestBody (object) [REQUIRED]: The JSON request body." in text
        assert "YOUR CURRENT ARGUMENTS:" in text
        assert "EXAMPLE CORRECT USAGE:\ncall createPet" in text
        assert "TROUBLESHOOTING STEPS:" in text

    def test_auth_lists_alternatives(self):
        op = Operation(
            operation_id="op",
            method="get",
            path="/x",
            security=({"ApiKeyAuth": [], "Tenant": []}, {"BearerAuth": []}),
        )
        text = auth_guidance(op, {"type": "object", "properties": {}}, {}, "", 401)

        assert "1. ApiKeyAuth + Tenant\n2. BearerAuth\n" in text
        assert 'export BEARER_TOKEN="your-bearer-token-here"' in text

    @pytest.mark.parametrize(
        "status,label",
        [
            (500, "Internal Server Error"),
            (502, "Bad Gateway"),
            (503, "Service Unavailable"),
            (504, "Gateway Timeout"),
            (507, "Server Error (507)"),
        ],
    )
    def test_server_error_types(self, get_pet_operation, status, label):
        schema = build_input_schema(get_pet_operation)
        text = server_error_guidance(get_pet_operation, schema, {"petId": 1}, "", status)

        assert f"ERROR TYPE: {label}" in text
        assert "RETRY STRATEGY:" in text
        assert "  - petId (integer): Pet identifier [MANDATORY]" in text
