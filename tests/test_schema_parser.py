"""Tests for the schema_parser module."""

import pytest

from apistub.model import HEADER, PATH, QUERY, PrimitiveType, TypeRef
from apistub.schema_parser import (
    classify_parameters,
    collect_parameters,
    pick_media_type,
    render_default,
    select_request_body,
    select_success_content,
)
from apistub.type_resolver import BuildContext, resolver_for


@pytest.fixture
def resolver():
    return resolver_for("python")


def _json(schema):
    return {"content": {"application/json": {"schema": schema}}}


class TestCollectParameters:
    def test_path_item_and_operation_merged(self, petstore):
        path_item = petstore["paths"]["/pets/{id}"]
        params = collect_parameters(petstore, path_item, path_item["get"])
        assert [p["name"] for p in params] == ["id", "x-trace-id"]

    def test_operation_overrides_path_item(self):
        path_item = {"parameters": [
            {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
            {"name": "q", "in": "query"},
        ]}
        operation = {"parameters": [
            {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}},
        ]}
        params = collect_parameters({}, path_item, operation)
        assert [p["name"] for p in params] == ["id", "q"]
        assert params[0]["schema"] == {"type": "integer"}

    def test_operation_only(self):
        operation = {"parameters": [{"name": "q", "in": "query"}]}
        assert collect_parameters({}, {}, operation) == [{"name": "q", "in": "query"}]


class TestClassifyParameters:
    """Test parameter binding by location."""

    def _classify(self, resolver, path_item, operation, spec=None):
        return classify_parameters(resolver, BuildContext(spec or {}), path_item, operation, "Op")

    def test_order_path_query_header(self, resolver):
        operation = {"parameters": [
            {"name": "x-trace-id", "in": "header", "schema": {"type": "string"}},
            {"name": "limit", "in": "query", "schema": {"type": "integer"}},
            {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
            {"name": "offset", "in": "query", "schema": {"type": "integer"}},
        ]}
        bindings = self._classify(resolver, {}, operation)
        assert [b.name for b in bindings] == ["id", "limit", "offset", "xTraceId"]
        assert [b.location for b in bindings] == [PATH, QUERY, QUERY, HEADER]

    def test_location_case_insensitive(self, resolver):
        operation = {"parameters": [{"name": "id", "in": "PATH", "schema": {"type": "string"}}]}
        bindings = self._classify(resolver, {}, operation)
        assert bindings[0].location == PATH

    def test_unknown_locations_skipped(self, resolver):
        operation = {"parameters": [
            {"name": "session", "in": "cookie", "schema": {"type": "string"}},
            {"name": "weird", "in": "matrix"},
            {"name": "q", "in": "query", "schema": {"type": "string"}},
        ]}
        bindings = self._classify(resolver, {}, operation)
        assert [b.wire_name for b in bindings] == ["q"]

    def test_path_always_required(self, resolver):
        operation = {"parameters": [{"name": "owner_id", "in": "path", "schema": {"type": "string"}}]}
        binding = self._classify(resolver, {}, operation)[0]
        assert binding.required is True
        assert binding.name == "ownerId"
        assert binding.wire_name == "owner_id"
        assert binding.default is None

    def test_query_required_copied(self, resolver):
        operation = {"parameters": [
            {"name": "a", "in": "query", "required": True, "schema": {"type": "string"}},
            {"name": "b", "in": "query", "schema": {"type": "string"}},
        ]}
        a, b = self._classify(resolver, {}, operation)
        assert a.required is True
        assert b.required is False

    def test_query_default_rendered(self, resolver):
        operation = {"parameters": [
            {"name": "limit", "in": "query", "schema": {"type": "integer", "default": 20}},
            {"name": "active", "in": "query", "schema": {"type": "boolean", "default": True}},
        ]}
        limit, active = self._classify(resolver, {}, operation)
        assert limit.default == "20"
        assert limit.default_value == 20
        assert active.default == "true"
        assert active.default_value is True

    def test_header_has_no_default(self, resolver):
        operation = {"parameters": [
            {"name": "x-page-size", "in": "header", "required": True,
             "schema": {"type": "integer", "default": 5}},
        ]}
        binding = self._classify(resolver, {}, operation)[0]
        assert binding.name == "xPageSize"
        assert binding.required is True
        assert binding.default is None

    def test_parameter_types_resolved(self, resolver, petstore):
        path_item = petstore["paths"]["/owners/{owner_id}/pets"]
        context = BuildContext(petstore)
        bindings = classify_parameters(resolver, context, path_item, path_item["get"], "ListOwnerPets")
        assert bindings[0].type == PrimitiveType("str")
        assert bindings[1].type == TypeRef("PetStatus")

    def test_parameter_without_schema_is_any(self, resolver):
        operation = {"parameters": [{"name": "q", "in": "query"}]}
        assert self._classify(resolver, {}, operation)[0].type == PrimitiveType("Any")


class TestRenderDefault:
    def test_values(self):
        assert render_default(None) is None
        assert render_default(False) == "false"
        assert render_default(1.5) == "1.5"
        assert render_default("asc") == "asc"
        assert render_default(["a", "b"]) == "a,b"


class TestSelectSuccessContent:
    """Test 2xx response selection."""

    def test_picks_2xx(self, petstore):
        op = {"responses": {"200": _json({"type": "string"}), "404": _json({"type": "integer"})}}
        content = select_success_content(petstore, op)
        assert content["application/json"]["schema"] == {"type": "string"}

    def test_no_2xx(self, petstore):
        op = {"responses": {"404": _json({"type": "integer"})}}
        assert select_success_content(petstore, op) is None

    def test_lowest_2xx_wins(self, petstore):
        op = {"responses": {
            "201": _json({"type": "integer"}),
            "200": _json({"type": "string"}),
        }}
        content = select_success_content(petstore, op)
        assert content["application/json"]["schema"] == {"type": "string"}

    def test_integer_status_codes(self, petstore):
        op = {"responses": {404: _json({"type": "integer"}), 200: _json({"type": "string"})}}
        content = select_success_content(petstore, op)
        assert content["application/json"]["schema"] == {"type": "string"}

    def test_default_is_not_success(self, petstore):
        op = {"responses": {"default": _json({"type": "string"})}}
        assert select_success_content(petstore, op) is None

    def test_response_without_content(self, petstore):
        op = {"responses": {"204": {"description": "Deleted"}}}
        assert select_success_content(petstore, op) is None

    def test_response_ref(self, petstore):
        op = {"responses": {"200": {"$ref": "#/components/responses/ErrorResponse"}}}
        content = select_success_content(petstore, op)
        assert content["application/json"]["schema"] == {"$ref": "#/components/schemas/Error"}


class TestPickMediaType:
    def test_first_entry(self):
        content = {"text/plain": {"schema": {"type": "string"}}, "application/json": {}}
        media_type, media = pick_media_type(content)
        assert media_type == "text/plain"

    def test_empty(self):
        assert pick_media_type(None) is None
        assert pick_media_type({}) is None


class TestSelectRequestBody:
    def test_body(self, petstore):
        op = petstore["paths"]["/pets"]["post"]
        media_type, schema, required = select_request_body(petstore, op)
        assert media_type == "application/json"
        assert schema == {"$ref": "#/components/schemas/NewPet"}
        assert required is True

    def test_no_body(self, petstore):
        assert select_request_body(petstore, {"responses": {}}) is None

    def test_body_without_schema(self, petstore):
        op = {"requestBody": {"content": {"application/octet-stream": {}}}}
        assert select_request_body(petstore, op) is None

    def test_required_defaults_false(self, petstore):
        op = {"requestBody": _json({"type": "string"})}
        assert select_request_body(petstore, op)[2] is False
