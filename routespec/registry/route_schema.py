"""Route schema types stored in the registry.

A RouteSchema is everything known about one endpoint: where it lives (method
and URL template, derived from the file path), how it is documented, and how
its inputs and outputs are validated.

Usage:
    from routespec.registry.route_schema import RouteSchema

    schema = RouteSchema(
        method=HTTPMethod.GET,
        path="/users/{id}",
        operation_id="getUser",
        path_schema=as_schema(UserPath),
        responses=SingleResponse(schema=as_schema(User)),
    )
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from routespec.compiler.path_meta import HTTPMethod
from routespec.domain.protocols.schema_protocol import SchemaProtocol
from routespec.pipeline.context import RequestContext
from routespec.registry.schemas import ResponseSpec, SingleResponse


type MiddlewareHandler = Callable[[RequestContext], Awaitable[None] | None]
type ResponseTransformer = Callable[[Any, int], Any]


# =============================================================================
# Middleware
# =============================================================================


@dataclass(frozen=True, slots=True, kw_only=True)
class Middleware:
    """Named middleware run before request validation.

    The handler receives the RequestContext and aborts the request by raising
    (ApiError, HTTPException or any other exception).

    Attributes:
        name: Identifier used in logs and error reports.
        handler: Sync or async callable taking the RequestContext.
        description: Human-readable description of what the middleware checks.
    """

    name: str
    handler: MiddlewareHandler
    description: str | None = None


# =============================================================================
# Route Schema
# =============================================================================


@dataclass(frozen=True, slots=True, kw_only=True)
class RouteSchema:
    """Complete description of a registered route.

    Attributes:
        method: HTTP method.
        path: URL template ("{name}" placeholders, optional "{*path}").
        operation_id: Unique operation id; defaults to the URL template.
        title: Short human-readable name.
        summary: One-line summary for documentation.
        description: Long description for documentation.
        query_schema: Query string validator (None accepts anything).
        path_schema: Path parameter validator (None accepts anything).
        body_schema: Request body validator (POST, PUT, PATCH only).
        responses: Response validators by status.
        middleware: Middleware run in declaration order.
        transform_response: Post-processing applied to validated bodies.
        tags: Explicit tags; derived from the path when empty.
        deprecated: Marks the operation deprecated in the document.
        is_catch_all: Whether the template ends with a catch-all placeholder.
        file_path: Route module that declared the route.
    """

    method: HTTPMethod
    path: str
    operation_id: str
    title: str | None = None
    summary: str | None = None
    description: str | None = None
    query_schema: SchemaProtocol | None = None
    path_schema: SchemaProtocol | None = None
    body_schema: SchemaProtocol | None = None
    responses: ResponseSpec = field(default_factory=SingleResponse)
    middleware: tuple[Middleware, ...] = ()
    transform_response: ResponseTransformer | None = None
    tags: tuple[str, ...] = ()
    deprecated: bool = False
    is_catch_all: bool = False
    file_path: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        """Registry key: (method, path)."""
        return (self.method.value, self.path)
