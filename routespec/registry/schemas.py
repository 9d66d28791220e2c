"""Pydantic-backed schemas and response specifications.

PydanticSchema adapts any annotation pydantic understands (a BaseModel
subclass, a TypedDict, ``list[int]``, ``dict[str, str]``...) to
SchemaProtocol through a TypeAdapter.

ResponseSpec is decided once, at registration, instead of inspecting the
shape of the declared responses on every request:

    SingleResponse: one schema for every successful status
    ByStatusCode:   one schema per declared status code

Usage:
    from routespec.registry.schemas import as_schema, resolve_response_spec

    query_schema = as_schema(PageQuery)
    responses = resolve_response_spec(User, {404: NotFound})
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from routespec.core.errors import FieldError
from routespec.core.result import Failure, Result, Success
from routespec.domain.protocols.schema_protocol import (
    SchemaDescription,
    SchemaProtocol,
)


# =============================================================================
# Pydantic Schema
# =============================================================================


class PydanticSchema:
    """SchemaProtocol implementation backed by a pydantic TypeAdapter.

    Args:
        annotation: Type to validate against.
        name: Component name override; defaults to the model class name for
            BaseModel subclasses and None for anonymous types.
    """

    def __init__(self, annotation: Any, *, name: str | None = None) -> None:
        self.annotation = annotation
        self._adapter: TypeAdapter[Any] = TypeAdapter(annotation)
        if name is None and isinstance(annotation, type) and issubclass(annotation, BaseModel):
            name = annotation.__name__
        self.name = name

    def parse(self, value: Any) -> Result[Any, list[FieldError]]:
        try:
            return Success(value=self._adapter.validate_python(value))
        except ValidationError as e:
            return Failure(error=field_errors_from(e))

    def dump(self, value: Any) -> Any:
        return self._adapter.dump_python(value, mode="json")

    def describe(self, ref_template: str) -> SchemaDescription:
        schema = self._adapter.json_schema(ref_template=ref_template)
        definitions: dict[str, dict[str, Any]] = schema.pop("$defs", {})

        if self.name and "$ref" not in schema:
            definitions[self.name] = schema
            schema = {"$ref": ref_template.format(model=self.name)}

        return SchemaDescription(schema=schema, definitions=definitions, name=self.name)

    def __repr__(self) -> str:
        return f"PydanticSchema({self.name or self.annotation!r})"


def field_errors_from(error: ValidationError) -> list[FieldError]:
    """Convert a pydantic ValidationError into field errors.

    Args:
        error: Validation failure raised by pydantic.

    Returns:
        list[FieldError]: One entry per failing location.
    """
    return [
        FieldError(
            field=".".join(str(part) for part in detail["loc"]),
            code=detail["type"],
            message=detail["msg"],
        )
        for detail in error.errors()
    ]


def as_schema(obj: Any) -> SchemaProtocol | None:
    """Coerce a declaration value into a schema.

    Args:
        obj: None, an existing SchemaProtocol, or any pydantic-compatible type.

    Returns:
        SchemaProtocol | None: Schema instance, or None for None.
    """
    if obj is None:
        return None
    if not isinstance(obj, type) and isinstance(obj, SchemaProtocol):
        return obj
    return PydanticSchema(obj)


def is_empty_object_schema(schema: SchemaProtocol | None) -> bool:
    """Whether a schema accepts only objects and declares no properties."""
    if schema is None:
        return True
    description = schema.describe("{model}")
    resolved = description.definitions.get(description.name or "", description.schema)
    return resolved.get("type") == "object" and not resolved.get("properties")


# =============================================================================
# Response Specification
# =============================================================================


@dataclass(frozen=True, slots=True, kw_only=True)
class SingleResponse:
    """One response schema shared by every successful status.

    Attributes:
        schema: Body schema; None means the route returns no body.
    """

    schema: SchemaProtocol | None = None

    def resolve(self, status_code: int) -> SchemaProtocol | None:
        """Schema for a status code (2xx only)."""
        return self.schema if 200 <= status_code < 300 else None

    def by_status(self) -> dict[int, SchemaProtocol | None]:
        """Documented responses keyed by status code."""
        return {200: self.schema}


@dataclass(frozen=True, slots=True, kw_only=True)
class ByStatusCode:
    """One response schema per declared status code.

    Attributes:
        schemas: Body schema per status; a None value documents a status with
            no body.
    """

    schemas: Mapping[int, SchemaProtocol | None] = field(default_factory=dict)

    def resolve(self, status_code: int) -> SchemaProtocol | None:
        """Schema for a status code: exact match, then 200 for other 2xx."""
        if status_code in self.schemas:
            return self.schemas[status_code]
        if 200 <= status_code < 300:
            return self.schemas.get(200)
        return None

    def by_status(self) -> dict[int, SchemaProtocol | None]:
        """Documented responses keyed by status code."""
        return dict(sorted(self.schemas.items()))


type ResponseSpec = SingleResponse | ByStatusCode


def resolve_response_spec(
    response: Any = None,
    responses: Mapping[int | str, Any] | None = None,
) -> ResponseSpec:
    """Build the response specification of a route declaration.

    Args:
        response: Schema for successful responses.
        responses: Schemas keyed by status code. When given, ``response``
            fills status 200 if that status is not declared.

    Returns:
        ResponseSpec: SingleResponse or ByStatusCode.

    Raises:
        ValueError: If a status code key is not an integer in 100..599.
    """
    if not responses:
        return SingleResponse(schema=as_schema(response))

    schemas: dict[int, SchemaProtocol | None] = {}
    for status, declared in responses.items():
        code = int(status)
        if not 100 <= code <= 599:
            raise ValueError(f"Invalid response status code: {status!r}")
        schemas[code] = as_schema(declared)

    if response is not None and 200 not in schemas:
        schemas[200] = as_schema(response)

    return ByStatusCode(schemas=schemas)
