"""OpenAPI document generation from the route registry.

The document is compiled on demand from the registry and never cached, so a
swapped registry (hot reload) is reflected by the next request for the
document.

Per registered route the generator emits one operation with:
    - one response entry per documented status code
    - query parameters from the query schema's properties (omitted when the
      schema declares none)
    - a JSON request body from the body schema (POST, PUT, PATCH)
    - one required string path parameter per URL placeholder, plus ``path``
      for catch-all routes
    - uniform 400 (when any input is validated) and 500 error responses
      referencing the ErrorResponse component, unless the route declares them
    - a tag derived from the first meaningful path segment

Named pydantic models are hoisted into ``components.schemas``.

Usage:
    generator = OpenApiDocumentGenerator(
        registry,
        fetcher=OpenApiDocumentFetcher(logger=logger),
        logger=logger,
    )
    document = await generator.generate(OpenApiOptions(title="Shop API"))
"""

import asyncio
import re
from collections.abc import Iterable, Sequence
from http import HTTPStatus
from typing import Any

from routespec.compiler.path_meta import template_placeholders, to_openapi_path
from routespec.core.constants import (
    BODY_METHODS,
    CATCH_ALL_PARAMETER,
    COMPONENT_REF_TEMPLATE,
    ERROR_RESPONSE_COMPONENT,
)
from routespec.core.result import Failure, Success
from routespec.domain.protocols.document_fetcher_protocol import (
    DocumentFetcherProtocol,
)
from routespec.domain.protocols.logger_protocol import LoggerProtocol
from routespec.domain.protocols.schema_protocol import SchemaProtocol
from routespec.openapi.merge import merge_documents
from routespec.openapi.options import OpenApiOptions
from routespec.registry.registry import RegistryHandle, RouteRegistry
from routespec.registry.route_schema import RouteSchema
from routespec.registry.schemas import is_empty_object_schema
from routespec.schemas.error_schemas import ErrorResponse


_VERSION_SEGMENT = re.compile(r"v\d+")
_ROOT_TAG = "root"
_JSON = "application/json"


class OpenApiDocumentGenerator:
    """Compile the registry into an OpenAPI document.

    Args:
        registry: Registry, or a handle whose current registry is used.
        fetcher: Fetcher for secondary documents; None disables merging.
        logger: Structured logger.
        ignored_tag_segments: Path segments skipped when deriving tags.
    """

    def __init__(
        self,
        registry: RouteRegistry | RegistryHandle,
        *,
        logger: LoggerProtocol,
        fetcher: DocumentFetcherProtocol | None = None,
        ignored_tag_segments: Iterable[str] = ("api",),
    ) -> None:
        self._registry = registry
        self._fetcher = fetcher
        self._logger = logger
        self._ignored_tag_segments = frozenset(ignored_tag_segments)

    # =========================================================================
    # Public API
    # =========================================================================

    def build_primary(self, options: OpenApiOptions) -> dict[str, Any]:
        """Build the document from the registry alone.

        Args:
            options: Info block and output version.

        Returns:
            dict: OpenAPI document.
        """
        components: dict[str, dict[str, Any]] = {
            ERROR_RESPONSE_COMPONENT: _error_response_schema(),
        }
        paths: dict[str, dict[str, Any]] = {}
        tag_names: list[str] = []

        for route in self._routes():
            operation = self._operation(route, components)
            paths.setdefault(to_openapi_path(route.path), {})[
                route.method.value.lower()
            ] = operation
            for tag in operation["tags"]:
                if tag not in tag_names:
                    tag_names.append(tag)

        document: dict[str, Any] = {
            "openapi": options.openapi,
            "info": options.info_block(),
        }
        if options.servers:
            document["servers"] = [
                server.model_dump(exclude_none=True) for server in options.servers
            ]
        document["tags"] = [{"name": name} for name in tag_names]
        document["paths"] = paths
        document["components"] = {"schemas": dict(sorted(components.items()))}

        if options.openapi == "3.0.0":
            document = downgrade_to_openapi_30(document)

        self._logger.debug(
            "openapi_document_built", operations=sum(len(p) for p in paths.values())
        )
        return document

    async def generate(self, options: OpenApiOptions) -> dict[str, Any]:
        """Build the document and merge every reachable secondary document.

        Secondary documents are fetched concurrently. A document that cannot
        be fetched, decoded or merged is logged and skipped; this method
        never fails because of one.

        Args:
            options: Info block, output version and secondary document URLs.

        Returns:
            dict: Primary document with all mergeable secondary documents.
        """
        document = self.build_primary(options)
        urls = list(options.additional_json_urls)
        if not urls or self._fetcher is None:
            return document

        results = await asyncio.gather(
            *(self._fetcher.fetch(url) for url in urls), return_exceptions=True
        )

        for url, result in zip(urls, results):
            if isinstance(result, BaseException):
                self._logger.error("secondary_document_skipped", error=result, url=url)
                continue

            match result:
                case Failure(error=error):
                    self._logger.warning(
                        "secondary_document_skipped",
                        url=url,
                        code=error.code.value,
                        reason=error.message,
                    )
                case Success(value=secondary):
                    match merge_documents(document, secondary, source=url):
                        case Success(value=merged):
                            document = merged
                            self._logger.info("secondary_document_merged", url=url)
                        case Failure(error=error):
                            self._logger.warning(
                                "secondary_document_conflict",
                                url=url,
                                code=error.code.value,
                                conflicts=list(getattr(error, "conflicts", ())),
                            )

        return document

    # =========================================================================
    # Operations
    # =========================================================================

    def _routes(self) -> Sequence[RouteSchema]:
        registry = (
            self._registry.current
            if isinstance(self._registry, RegistryHandle)
            else self._registry
        )
        return registry.all()

    def _operation(
        self, route: RouteSchema, components: dict[str, dict[str, Any]]
    ) -> dict[str, Any]:
        operation: dict[str, Any] = {
            "operationId": route.operation_id,
            "tags": list(route.tags)
            or [derive_tag(route.path, self._ignored_tag_segments)],
        }
        summary = route.summary or route.title
        if summary:
            operation["summary"] = summary
        if route.description:
            operation["description"] = route.description
        if route.deprecated:
            operation["deprecated"] = True

        parameters = [
            *_path_parameters(route),
            *self._query_parameters(route.query_schema, components),
        ]
        if parameters:
            operation["parameters"] = parameters

        has_body = (
            route.body_schema is not None and route.method.value in BODY_METHODS
        )
        if has_body:
            operation["requestBody"] = {
                "required": True,
                "content": {_JSON: {"schema": _describe(route.body_schema, components)}},
            }

        responses: dict[str, Any] = {}
        for status_code, schema in route.responses.by_status().items():
            entry: dict[str, Any] = {"description": _status_phrase(status_code)}
            if schema is not None:
                entry["content"] = {_JSON: {"schema": _describe(schema, components)}}
            responses[str(status_code)] = entry

        validates_input = has_body or any(
            schema is not None for schema in (route.query_schema, route.path_schema)
        )
        if validates_input and "400" not in responses:
            responses["400"] = _error_response("Validation Error")
        if "500" not in responses:
            responses["500"] = _error_response("Internal Server Error")

        operation["responses"] = responses
        return operation

    def _query_parameters(
        self,
        schema: SchemaProtocol | None,
        components: dict[str, dict[str, Any]],
    ) -> list[dict[str, Any]]:
        if schema is None or is_empty_object_schema(schema):
            return []

        description = schema.describe(COMPONENT_REF_TEMPLATE)
        resolved = description.definitions.get(description.name or "", description.schema)
        for name, definition in description.definitions.items():
            if name != description.name:
                components.setdefault(name, definition)

        required = set(resolved.get("required", ()))
        parameters = []
        for name, property_schema in resolved.get("properties", {}).items():
            parameter: dict[str, Any] = {
                "name": name,
                "in": "query",
                "required": name in required,
                "schema": property_schema,
            }
            if "description" in property_schema:
                parameter["description"] = property_schema["description"]
            parameters.append(parameter)
        return parameters


# =============================================================================
# Helpers
# =============================================================================


def derive_tag(url_template: str, ignored: Iterable[str] = ("api",)) -> str:
    """Group an operation under its first meaningful path segment.

    Empty segments, parameter segments, ignored prefixes and version tokens
    (``v1``, ``v2``...) are skipped.

    Args:
        url_template: Route URL template.
        ignored: Segments to skip.

    Returns:
        str: Tag name, or "root" when no segment qualifies.
    """
    skip = frozenset(ignored)
    for segment in url_template.split("/"):
        if not segment or "{" in segment or segment in skip:
            continue
        if _VERSION_SEGMENT.fullmatch(segment):
            continue
        return segment.replace("-", " ")
    return _ROOT_TAG


def _path_parameters(route: RouteSchema) -> list[dict[str, Any]]:
    names = list(template_placeholders(route.path))
    if route.is_catch_all and CATCH_ALL_PARAMETER not in names:
        names.append(CATCH_ALL_PARAMETER)
    return [
        {"name": name, "in": "path", "required": True, "schema": {"type": "string"}}
        for name in names
    ]


def _describe(
    schema: SchemaProtocol, components: dict[str, dict[str, Any]]
) -> dict[str, Any]:
    description = schema.describe(COMPONENT_REF_TEMPLATE)
    for name, definition in description.definitions.items():
        components.setdefault(name, definition)
    return description.schema


def _error_response_schema() -> dict[str, Any]:
    schema = ErrorResponse.model_json_schema(
        ref_template=COMPONENT_REF_TEMPLATE, by_alias=True
    )
    schema.pop("$defs", None)
    return schema


def _error_response(description: str) -> dict[str, Any]:
    return {
        "description": description,
        "content": {
            _JSON: {
                "schema": {
                    "$ref": COMPONENT_REF_TEMPLATE.format(model=ERROR_RESPONSE_COMPONENT)
                }
            }
        },
    }


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return f"Status {status_code}"


# =============================================================================
# OpenAPI 3.0 compatibility
# =============================================================================


def downgrade_to_openapi_30(node: Any) -> Any:
    """Rewrite JSON Schema 2020-12 constructs that OpenAPI 3.0 lacks.

    - ``anyOf: [X, {type: null}]`` becomes X with ``nullable: true``
    - ``type: [X, "null"]`` becomes ``type: X`` with ``nullable: true``
    - ``const: v`` becomes ``enum: [v]``
    - ``examples: [a, ...]`` becomes ``example: a``
    - numeric ``exclusiveMinimum`` / ``exclusiveMaximum`` become the boolean
      form next to ``minimum`` / ``maximum``

    Args:
        node: Document or any sub-tree of it.

    Returns:
        Any: Converted copy.
    """
    if isinstance(node, list):
        return [downgrade_to_openapi_30(item) for item in node]
    if not isinstance(node, dict):
        return node

    converted = {
        key: _downgrade_properties(value)
        if key == "properties" and isinstance(value, dict)
        else downgrade_to_openapi_30(value)
        for key, value in node.items()
    }

    any_of = converted.get("anyOf")
    if isinstance(any_of, list) and {"type": "null"} in any_of:
        remaining = [option for option in any_of if option != {"type": "null"}]
        rest = {key: value for key, value in converted.items() if key != "anyOf"}
        if len(remaining) == 1 and "$ref" in remaining[0]:
            converted = {**rest, "allOf": remaining, "nullable": True}
        elif len(remaining) == 1:
            converted = {**remaining[0], **rest, "nullable": True}
        else:
            converted = {**rest, "anyOf": remaining, "nullable": True}

    types = converted.get("type")
    if isinstance(types, list) and "null" in types:
        non_null = [t for t in types if t != "null"]
        converted["nullable"] = True
        if len(non_null) == 1:
            converted["type"] = non_null[0]
        else:
            converted.pop("type")

    if "const" in converted:
        converted["enum"] = [converted.pop("const")]

    examples = converted.get("examples")
    if isinstance(examples, list):
        converted.pop("examples")
        if examples:
            converted["example"] = examples[0]

    for exclusive, inclusive in (
        ("exclusiveMinimum", "minimum"),
        ("exclusiveMaximum", "maximum"),
    ):
        bound = converted.get(exclusive)
        if isinstance(bound, (int, float)) and not isinstance(bound, bool):
            converted[inclusive] = bound
            converted[exclusive] = True

    return converted


def _downgrade_properties(properties: dict[str, Any]) -> dict[str, Any]:
    # Keys are property names, not schema keywords
    return {name: downgrade_to_openapi_30(schema) for name, schema in properties.items()}
