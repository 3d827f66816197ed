"""Tests for the extractor module."""

import pytest

from mcp_toolgen.errors import SpecificationError
from mcp_toolgen.extractor import build_endpoint, extract_endpoints


class TestExtractEndpoints:
    """Test the full extraction over the sample document."""

    @pytest.fixture(autouse=True)
    def _extract(self, petstore):
        self.extraction = extract_endpoints(petstore)
        self.by_name = {e.tool_name: e for e in self.extraction.endpoints}

    def test_document_order(self):
        assert [(e.http_method, e.path) for e in self.extraction.endpoints] == [
            ("GET", "/users"),
            ("POST", "/users"),
            ("GET", "/users/{id}"),
            ("DELETE", "/users/{id}"),
            ("PUT", "/users/{userId}/pets/{petId}"),
            ("SEARCH", "/reports"),
        ]

    def test_tool_names(self):
        assert list(self.by_name) == [
            "GetUsers",
            "CreateUser",
            "GetUserById",
            "DeleteUser",
            "UpdateUsersPet",
            "SearchReport",
        ]

    def test_all_tool_names_valid_identifiers(self):
        for endpoint in self.extraction.endpoints:
            assert endpoint.tool_name.isidentifier()

    def test_description_priority(self):
        assert self.by_name["GetUsers"].description == "List users"
        assert self.by_name["GetUserById"].description == "Fetch one user"
        assert self.by_name["DeleteUser"].description == "DELETE /users/{id}"

    def test_parameters_partitioned(self):
        endpoint = self.by_name["GetUserById"]
        assert [p.name for p in endpoint.path_parameters] == ["id"]
        assert [p.name for p in endpoint.header_parameters] == ["X-Trace"]
        assert endpoint.query_parameters == ()

    def test_cookie_reported(self):
        assert any("session" in d for d in self.extraction.diagnostics)

    def test_query_parameters(self):
        endpoint = self.by_name["GetUsers"]
        assert [(p.name, p.required) for p in endpoint.query_parameters] == [("limit", False), ("tag", True)]
        assert [p.name for p in endpoint.required_query_parameters] == ["tag"]
        assert [p.name for p in endpoint.optional_query_parameters] == ["limit"]
        assert endpoint.query_parameters[0].resolved_type == "int"

    def test_path_parameters_in_declaration_order(self):
        endpoint = self.by_name["UpdateUsersPet"]
        assert [p.name for p in endpoint.path_parameters] == ["petId", "userId"]

    def test_request_body(self):
        body = self.by_name["CreateUser"].request_body
        assert body.content_type == "application/json"
        assert body.required is True
        assert self.by_name["UpdateUsersPet"].request_body.content_type == "text/plain"
        assert self.by_name["GetUsers"].request_body is None

    def test_response(self):
        assert self.by_name["GetUsers"].response.schema_type == "list[Any]"
        assert self.by_name["GetUserById"].response.description == "The user"
        assert self.by_name["SearchReport"].response.content_type is None

    def test_extension_keys_are_not_operations(self):
        assert all(e.http_method != "X-INTERNAL" for e in self.extraction.endpoints)

    def test_operation_id_kept(self):
        assert self.by_name["CreateUser"].operation_id == "createUser"


class TestExtractionEdgeCases:

    def test_missing_paths_is_structural_error(self):
        with pytest.raises(SpecificationError):
            extract_endpoints({"openapi": "3.0.0"})

    def test_non_mapping_document(self):
        with pytest.raises(SpecificationError):
            extract_endpoints(["not", "a", "document"])

    def test_duplicate_operation_is_structural_error(self):
        spec = {"paths": {"/a": {"get": {}, "GET": {}}}}
        with pytest.raises(SpecificationError, match="Duplicate operation GET /a"):
            extract_endpoints(spec)

    def test_empty_paths(self):
        extraction = extract_endpoints({"paths": {}})
        assert extraction.endpoints == ()
        assert extraction.diagnostics == ()

    def test_missing_response_is_not_an_error(self):
        [endpoint] = extract_endpoints({"paths": {"/a": {"get": {}}}}).endpoints
        assert endpoint.response is None
        assert endpoint.description == "GET /a"

    def test_blank_summary_falls_through(self):
        spec = {"paths": {"/a": {"get": {"summary": "  ", "description": "Real"}}}}
        [endpoint] = extract_endpoints(spec).endpoints
        assert endpoint.description == "Real"

    def test_malformed_path_item_skipped(self):
        spec = {"paths": {"/a": "nonsense", "/b": {"get": {}}}}
        extraction = extract_endpoints(spec)
        assert [e.path for e in extraction.endpoints] == ["/b"]
        assert extraction.diagnostics

    def test_body_on_get_dropped(self):
        spec = {"paths": {"/a": {"get": {"requestBody": {"content": {"application/json": {}}}}}}}
        extraction = extract_endpoints(spec)
        assert extraction.endpoints[0].request_body is None
        assert any("request body" in d for d in extraction.diagnostics)

    def test_collisions_renamed_in_order(self):
        spec = {
            "paths": {
                "/widgets/{id}": {"get": {}},
                "/widget/{id}": {"get": {}},
            },
        }
        extraction = extract_endpoints(spec)
        assert [e.tool_name for e in extraction.endpoints] == ["GetWidgetById", "GetWidgetById2"]
        assert any("GetWidgetById2" in d for d in extraction.diagnostics)

    def test_reserved_names_avoided(self):
        spec = {"paths": {"/a": {"get": {"operationId": "field"}}}}
        [endpoint] = extract_endpoints(spec, reserved_names={"Field"}).endpoints
        assert endpoint.tool_name == "Field2"

    def test_custom_verb_without_body(self):
        spec = {"paths": {"/jobs": {"purge": {"requestBody": {"content": {}}}}}}
        [endpoint] = extract_endpoints(spec).endpoints
        assert endpoint.http_method == "PURGE"
        assert endpoint.request_body is None


def test_build_endpoint_uses_operation_id():
    endpoint = build_endpoint({}, "post", "/pets", {"operationId": "createPet"})
    assert endpoint.tool_name == "CreatePet"
    assert endpoint.http_method == "POST"
