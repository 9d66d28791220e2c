"""Unit tests for validation schemas and response specifications.

Tests cover:
- PydanticSchema parse/dump/describe
- Field error conversion
- Empty object schema detection
- SingleResponse / ByStatusCode resolution
- resolve_response_spec()
"""

import pytest
from pydantic import BaseModel, Field

from routespec.core.result import Failure, Success
from routespec.registry.schemas import (
    ByStatusCode,
    PydanticSchema,
    SingleResponse,
    as_schema,
    is_empty_object_schema,
    resolve_response_spec,
)


REF = "#/components/schemas/{model}"


class Address(BaseModel):
    city: str


class User(BaseModel):
    id: int
    name: str
    address: Address | None = None


class Pagination(BaseModel):
    limit: int = Field(10, ge=1, le=100)


class Empty(BaseModel):
    pass


@pytest.mark.unit
class TestPydanticSchema:
    """Test PydanticSchema."""

    def test_parse_coerces(self):
        result = PydanticSchema(Pagination).parse({"limit": "25"})

        assert isinstance(result, Success)
        assert result.value == Pagination(limit=25)

    def test_parse_failure_field_errors(self):
        result = PydanticSchema(User).parse({"id": "abc", "address": {}})

        assert isinstance(result, Failure)
        errors = {error.field: error for error in result.error}
        assert errors["id"].code == "int_parsing"
        assert errors["name"].code == "missing"
        assert errors["address.city"].code == "missing"
        assert all(error.message for error in result.error)

    def test_dump_json_compatible(self):
        schema = PydanticSchema(User)

        assert schema.dump(User(id=1, name="Ada")) == {"id": 1, "name": "Ada", "address": None}

    def test_describe_hoists_named_models(self):
        description = PydanticSchema(User).describe(REF)

        assert description.name == "User"
        assert description.schema == {"$ref": "#/components/schemas/User"}
        assert set(description.definitions) == {"User", "Address"}
        assert description.definitions["User"]["properties"]["address"]["anyOf"][0] == {
            "$ref": "#/components/schemas/Address"
        }

    def test_describe_anonymous_type(self):
        description = PydanticSchema(list[User]).describe(REF)

        assert description.name is None
        assert description.schema == {
            "type": "array",
            "items": {"$ref": "#/components/schemas/User"},
        }
        assert "User" in description.definitions

    def test_name_override(self):
        assert PydanticSchema(list[User], name="UserList").name == "UserList"

    def test_as_schema(self):
        existing = PydanticSchema(User)

        assert as_schema(None) is None
        assert as_schema(existing) is existing
        assert isinstance(as_schema(User), PydanticSchema)

    @pytest.mark.parametrize(
        ("schema", "expected"),
        [
            (None, True),
            (PydanticSchema(Empty), True),
            (PydanticSchema(dict[str, int]), True),
            (PydanticSchema(Pagination), False),
            (PydanticSchema(list[int]), False),
        ],
    )
    def test_is_empty_object_schema(self, schema, expected):
        assert is_empty_object_schema(schema) is expected


@pytest.mark.unit
class TestResponseSpec:
    """Test response specification resolution."""

    def test_single_response_covers_2xx(self):
        schema = PydanticSchema(User)
        spec = SingleResponse(schema=schema)

        assert spec.resolve(200) is schema
        assert spec.resolve(201) is schema
        assert spec.resolve(404) is None
        assert spec.by_status() == {200: schema}

    def test_by_status_code_exact_then_200(self):
        ok = PydanticSchema(User)
        created = PydanticSchema(Address)
        spec = ByStatusCode(schemas={201: created, 200: ok, 204: None})

        assert spec.resolve(201) is created
        assert spec.resolve(202) is ok
        assert spec.resolve(204) is None
        assert spec.resolve(404) is None
        assert list(spec.by_status()) == [200, 201, 204]

    def test_resolve_single(self):
        spec = resolve_response_spec(User)

        assert isinstance(spec, SingleResponse)
        assert spec.schema.name == "User"

    def test_resolve_without_response(self):
        spec = resolve_response_spec()

        assert spec == SingleResponse(schema=None)

    def test_resolve_by_status(self):
        spec = resolve_response_spec(User, {"201": Address, 204: None})

        assert isinstance(spec, ByStatusCode)
        assert set(spec.schemas) == {200, 201, 204}
        assert spec.schemas[204] is None

    def test_declared_200_wins_over_response(self):
        spec = resolve_response_spec(User, {200: Address})

        assert spec.schemas[200].name == "Address"

    @pytest.mark.parametrize("status", [99, 600, "abc"])
    def test_invalid_status_rejected(self, status):
        with pytest.raises(ValueError):
            resolve_response_spec(None, {status: User})
