"""Unit tests for OpenApiDocumentGenerator.

Tests cover:
- Document skeleton (info, servers, tags, components)
- Operations: parameters, request bodies, responses, error responses
- Catch-all parameters and tag derivation
- Registry handle swaps reflected on the next build
- OpenAPI 3.0 downgrade
"""

import pytest
from pydantic import BaseModel, Field

from routespec.compiler.path_meta import HTTPMethod
from routespec.openapi.generator import (
    OpenApiDocumentGenerator,
    derive_tag,
    downgrade_to_openapi_30,
)
from routespec.openapi.options import ContactInfo, OpenApiOptions, ServerInfo
from routespec.registry.registry import RegistryHandle, RouteRegistry
from routespec.registry.route_schema import RouteSchema
from routespec.registry.schemas import as_schema, resolve_response_spec


class User(BaseModel):
    id: int
    name: str
    nickname: str | None = None


class CreateUser(BaseModel):
    name: str


class UserQuery(BaseModel):
    limit: int = Field(10, ge=1, description="Maximum number of users")
    role: str | None = None


class NoQuery(BaseModel):
    pass


class UserPath(BaseModel):
    id: int


def _registry(*schemas: RouteSchema) -> RouteRegistry:
    registry = RouteRegistry()
    for schema in schemas:
        registry.register(schema)
    registry.freeze()
    return registry


LIST_USERS = RouteSchema(
    method=HTTPMethod.GET,
    path="/api/v1/users",
    operation_id="listUsers",
    title="List users",
    description="All users, paginated",
    query_schema=as_schema(UserQuery),
    responses=resolve_response_spec(list[User]),
)
CREATE_USER = RouteSchema(
    method=HTTPMethod.POST,
    path="/api/v1/users",
    operation_id="createUser",
    summary="Create a user",
    body_schema=as_schema(CreateUser),
    responses=resolve_response_spec(None, {201: User}),
)
DELETE_USER = RouteSchema(
    method=HTTPMethod.DELETE,
    path="/api/v1/users/{id}",
    operation_id="deleteUser",
    path_schema=as_schema(UserPath),
    responses=resolve_response_spec(None, {204: None}),
    deprecated=True,
    tags=("admin",),
)
GET_FILE = RouteSchema(
    method=HTTPMethod.GET,
    path="/files/{*path}",
    operation_id="getFile",
    is_catch_all=True,
    responses=resolve_response_spec(dict),
)


@pytest.fixture
def generator(mock_logger):
    return OpenApiDocumentGenerator(
        _registry(LIST_USERS, CREATE_USER, DELETE_USER, GET_FILE), logger=mock_logger
    )


@pytest.mark.unit
class TestBuildPrimary:
    """Test build_primary()."""

    def test_skeleton(self, generator):
        options = OpenApiOptions(
            title="Shop",
            version="2.0.0",
            description="Shop API",
            contact=ContactInfo(email="api@example.com"),
            servers=(ServerInfo(url="https://api.example.com"),),
        )

        document = generator.build_primary(options)

        assert document["openapi"] == "3.1.0"
        assert document["info"] == {
            "title": "Shop",
            "version": "2.0.0",
            "description": "Shop API",
            "contact": {"email": "api@example.com"},
        }
        assert document["servers"] == [{"url": "https://api.example.com"}]
        assert document["tags"] == [{"name": "users"}, {"name": "admin"}, {"name": "files"}]
        assert list(document["paths"]) == ["/api/v1/users", "/api/v1/users/{id}", "/files/{path}"]
        assert list(document["components"]["schemas"]) == sorted(
            ["ErrorResponse", "User", "CreateUser"]
        )

    def test_error_response_component(self, generator):
        schemas = generator.build_primary(OpenApiOptions())["components"]["schemas"]

        error_schema = schemas["ErrorResponse"]
        assert set(error_schema["properties"]) == {"statusCode", "statusMessage", "data"}
        assert error_schema["required"] == ["statusCode", "statusMessage"]

    def test_query_parameters(self, generator):
        operation = generator.build_primary(OpenApiOptions())["paths"]["/api/v1/users"]["get"]

        assert operation["operationId"] == "listUsers"
        assert operation["summary"] == "List users"
        assert operation["description"] == "All users, paginated"
        parameters = {p["name"]: p for p in operation["parameters"]}
        assert parameters["limit"]["in"] == "query"
        assert parameters["limit"]["required"] is False
        assert parameters["limit"]["description"] == "Maximum number of users"
        assert parameters["limit"]["schema"]["minimum"] == 1
        assert "description" not in parameters["role"]
        assert operation["responses"]["200"] == {
            "description": "OK",
            "content": {
                "application/json": {
                    "schema": {"type": "array", "items": {"$ref": "#/components/schemas/User"}}
                }
            },
        }
        assert operation["responses"]["400"]["description"] == "Validation Error"
        assert operation["responses"]["500"]["content"]["application/json"]["schema"] == {
            "$ref": "#/components/schemas/ErrorResponse"
        }

    def test_request_body_and_status_responses(self, generator):
        operation = generator.build_primary(OpenApiOptions())["paths"]["/api/v1/users"]["post"]

        assert operation["summary"] == "Create a user"
        assert "parameters" not in operation
        assert operation["requestBody"] == {
            "required": True,
            "content": {
                "application/json": {"schema": {"$ref": "#/components/schemas/CreateUser"}}
            },
        }
        assert list(operation["responses"]) == ["201", "400", "500"]
        assert operation["responses"]["201"]["description"] == "Created"

    def test_path_parameters_and_flags(self, generator):
        operation = generator.build_primary(OpenApiOptions())["paths"]["/api/v1/users/{id}"][
            "delete"
        ]

        assert operation["tags"] == ["admin"]
        assert operation["deprecated"] is True
        assert operation["parameters"] == [
            {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}}
        ]
        assert operation["responses"]["204"] == {"description": "No Content"}

    def test_catch_all_parameter(self, generator):
        operation = generator.build_primary(OpenApiOptions())["paths"]["/files/{path}"]["get"]

        assert [p["name"] for p in operation["parameters"]] == ["path"]
        assert "400" not in operation["responses"]

    def test_empty_query_schema_omitted(self, mock_logger):
        schema = RouteSchema(
            method=HTTPMethod.GET,
            path="/ping",
            operation_id="ping",
            query_schema=as_schema(NoQuery),
        )
        generator = OpenApiDocumentGenerator(_registry(schema), logger=mock_logger)

        operation = generator.build_primary(OpenApiOptions())["paths"]["/ping"]["get"]

        assert "parameters" not in operation
        assert operation["responses"]["200"] == {"description": "OK"}

    def test_handle_swap_is_reflected(self, mock_logger):
        handle = RegistryHandle(_registry(LIST_USERS))
        generator = OpenApiDocumentGenerator(handle, logger=mock_logger)
        before = generator.build_primary(OpenApiOptions())

        handle.swap(_registry(GET_FILE))
        after = generator.build_primary(OpenApiOptions())

        assert list(before["paths"]) == ["/api/v1/users"]
        assert list(after["paths"]) == ["/files/{path}"]

    def test_openapi_30_output(self, generator):
        document = generator.build_primary(OpenApiOptions(openapi="3.0.0"))

        nickname = document["components"]["schemas"]["User"]["properties"]["nickname"]
        assert document["openapi"] == "3.0.0"
        assert nickname["type"] == "string"
        assert nickname["nullable"] is True
        assert "anyOf" not in nickname

    async def test_generate_without_urls(self, generator):
        document = await generator.generate(OpenApiOptions())

        assert document == generator.build_primary(OpenApiOptions())


@pytest.mark.unit
class TestDeriveTag:
    """Test derive_tag()."""

    @pytest.mark.parametrize(
        ("template", "expected"),
        [
            ("/api/v1/users", "users"),
            ("/api/v2/order-items/{id}", "order items"),
            ("/{tenant}/reports", "reports"),
            ("/", "root"),
            ("/api/v1", "root"),
            ("/health", "health"),
        ],
    )
    def test_derive(self, template, expected):
        assert derive_tag(template) == expected

    def test_custom_ignored_segments(self):
        assert derive_tag("/internal/users", ignored=("internal",)) == "users"


@pytest.mark.unit
class TestDowngradeToOpenApi30:
    """Test downgrade_to_openapi_30()."""

    def test_nullable_ref(self):
        schema = {"anyOf": [{"$ref": "#/components/schemas/User"}, {"type": "null"}], "default": None}

        assert downgrade_to_openapi_30(schema) == {
            "default": None,
            "allOf": [{"$ref": "#/components/schemas/User"}],
            "nullable": True,
        }

    def test_nullable_union(self):
        schema = {"anyOf": [{"type": "string"}, {"type": "integer"}, {"type": "null"}]}

        assert downgrade_to_openapi_30(schema) == {
            "anyOf": [{"type": "string"}, {"type": "integer"}],
            "nullable": True,
        }

    def test_type_list(self):
        assert downgrade_to_openapi_30({"type": ["string", "null"]}) == {
            "type": "string",
            "nullable": True,
        }

    def test_const_examples_and_exclusive_bounds(self):
        schema = {
            "properties": {
                "kind": {"const": "user"},
                "age": {"type": "integer", "exclusiveMinimum": 0, "examples": [30, 40]},
            }
        }

        assert downgrade_to_openapi_30(schema) == {
            "properties": {
                "kind": {"enum": ["user"]},
                "age": {"type": "integer", "minimum": 0, "exclusiveMinimum": True, "example": 30},
            }
        }

    def test_property_names_are_not_keywords(self):
        schema = {"properties": {"const": {"type": "string"}, "examples": {"type": "string"}}}

        assert downgrade_to_openapi_30(schema) == schema
