"""SchemaProtocol definition for validation schemas.

Route declarations hand schemas to the registry, the pipeline validates
request and response values with them, and the document assembler asks them
for a JSON Schema. None of these components depend on a concrete validation
library; they only depend on this capability.

The default implementation wraps pydantic (see routespec.registry.schemas).

Usage:
    from routespec.domain.protocols.schema_protocol import SchemaProtocol

    def validate(schema: SchemaProtocol, raw: object):
        match schema.parse(raw):
            case Success(value=value):
                ...
            case Failure(error=field_errors):
                ...
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from routespec.core.errors import FieldError
from routespec.core.result import Result


@dataclass(frozen=True, slots=True, kw_only=True)
class SchemaDescription:
    """JSON Schema rendering of a validation schema.

    Attributes:
        schema: Schema of the value itself; a "$ref" when the value is a named
            model hoisted into definitions.
        definitions: Named sub-schemas keyed by component name.
        name: Component name of the top-level model, if it has one.
    """

    schema: dict[str, Any]
    definitions: dict[str, dict[str, Any]] = field(default_factory=dict)
    name: str | None = None


@runtime_checkable
class SchemaProtocol(Protocol):
    """Opaque validation capability used by registry, pipeline and assembler."""

    def parse(self, value: Any) -> Result[Any, list[FieldError]]:
        """Validate and coerce a raw value.

        Args:
            value: Raw input (query mapping, path mapping, decoded JSON, or a
                handler return value).

        Returns:
            Result: Success with the parsed value, or Failure with field errors.
        """
        ...

    def dump(self, value: Any) -> Any:
        """Serialize a parsed value to a JSON-compatible structure.

        Args:
            value: Value previously returned by parse().

        Returns:
            Any: JSON-compatible data.
        """
        ...

    def describe(self, ref_template: str) -> SchemaDescription:
        """Render the schema as JSON Schema.

        Args:
            ref_template: Format string for "$ref" values ("{model}" placeholder).

        Returns:
            SchemaDescription: Schema with hoisted named definitions.
        """
        ...
