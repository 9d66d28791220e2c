"""Route declaration API used inside route modules.

A route module declares its contract once and binds a handler to it:

    from pydantic import BaseModel
    from routespec import define_meta

    class UserPath(BaseModel):
        id: int

    meta = define_meta(
        operation_id="getUser",
        path=UserPath,
        response=User,
    )

    @meta.define_event_handler
    async def handler(path: UserPath, query, body) -> User:
        return await users.get(path.id)

The URL template and HTTP method are never written by the author: the build
step (or the route loader) injects ``__path`` and ``__method`` keywords into
the ``define_meta(...)`` call from the file's location. A call that reaches
this module without them raises RouteDeclarationError.

The target registry is either passed explicitly (``registry=``) or bound by
``registration_scope(registry)``; there is no process-wide registry.
"""

from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

from routespec.compiler.path_meta import HTTPMethod
from routespec.core.constants import (
    CACHEABLE_METHODS,
    INJECTED_METHOD_FIELD,
    INJECTED_PATH_FIELD,
)
from routespec.core.container import get_logger
from routespec.core.errors import RegistrationScopeError, RouteDeclarationError
from routespec.domain.protocols.logger_protocol import LoggerProtocol
from routespec.pipeline.cache import ResponseCache
from routespec.pipeline.pipeline import BeforeResponseHook, RoutePipeline
from routespec.pipeline.transformers import compose_transformers
from routespec.presentation.endpoint import RouteEndpoint
from routespec.registry.registry import RouteRegistry
from routespec.registry.route_schema import Middleware, ResponseTransformer, RouteSchema
from routespec.registry.schemas import as_schema, resolve_response_spec


# =============================================================================
# Registration scope
# =============================================================================


@dataclass(slots=True)
class RegistrationScope:
    """Registry and collected endpoints of one route loading pass.

    Attributes:
        registry: Registry receiving every declaration in the scope.
        logger: Logger handed to pipelines created in the scope.
        endpoints: Endpoints created in the scope, in creation order.
    """

    registry: RouteRegistry
    logger: LoggerProtocol
    endpoints: list[RouteEndpoint] = field(default_factory=list)


_current_scope: ContextVar[RegistrationScope | None] = ContextVar(
    "routespec_registration_scope", default=None
)


@contextmanager
def registration_scope(
    registry: RouteRegistry, *, logger: LoggerProtocol | None = None
) -> Iterator[RegistrationScope]:
    """Bind a registry to every define_meta() call in the block.

    Args:
        registry: Registry receiving declarations.
        logger: Logger for pipelines created in the block.

    Yields:
        RegistrationScope: Collects the endpoints created in the block.
    """
    scope = RegistrationScope(registry=registry, logger=logger or get_logger())
    token = _current_scope.set(scope)
    try:
        yield scope
    finally:
        _current_scope.reset(token)


def current_scope() -> RegistrationScope | None:
    """Registration scope bound to the current context, if any."""
    return _current_scope.get()


# =============================================================================
# Handlers
# =============================================================================


@dataclass(frozen=True, slots=True)
class RouteHandler:
    """Handler with per-route before-response hooks.

    Attributes:
        handler: Callable ``handler(path, query, body[, context])``.
        on_before_response: Hooks called with (context, response) before the
            response is sent.
    """

    handler: Callable[..., Any]
    on_before_response: Sequence[BeforeResponseHook] = ()


class RouteDefinition:
    """Registered route contract waiting for its handler.

    Attributes:
        schema: Registered route schema.
    """

    def __init__(
        self,
        schema: RouteSchema,
        *,
        logger: LoggerProtocol,
        scope: RegistrationScope | None = None,
    ) -> None:
        self.schema = schema
        self._logger = logger
        self._scope = scope

    def define_event_handler(
        self, handler: Callable[..., Any] | RouteHandler
    ) -> RouteEndpoint:
        """Bind a handler and build the route's endpoint.

        Usable as a decorator.

        Args:
            handler: Handler callable or RouteHandler.

        Returns:
            RouteEndpoint: Framework endpoint running the route pipeline.
        """
        return self._endpoint(handler, cache=None)

    def define_cached_event_handler(
        self,
        handler: Callable[..., Any] | RouteHandler | None = None,
        *,
        max_age: float,
        max_entries: int = 1024,
    ) -> Any:
        """Bind a handler whose successful responses are cached in memory.

        Responses are keyed by the validated path and query values and kept
        for ``max_age`` seconds. Middleware still runs for cached responses.
        Usable as ``@meta.define_cached_event_handler(max_age=60)``.

        Args:
            handler: Handler callable or RouteHandler.
            max_age: Seconds a cached response stays fresh.
            max_entries: Maximum number of cached responses.

        Returns:
            RouteEndpoint, or a decorator when ``handler`` is omitted.

        Raises:
            RouteDeclarationError: If the route method is not GET or HEAD.
        """
        if self.schema.method.value not in CACHEABLE_METHODS:
            raise RouteDeclarationError(
                f"Cached handlers are only supported for GET and HEAD routes, "
                f"not {self.schema.method.value} {self.schema.path}"
            )
        cache = ResponseCache(max_age=max_age, max_entries=max_entries)

        if handler is None:
            return lambda fn: self._endpoint(fn, cache=cache)
        return self._endpoint(handler, cache=cache)

    def _endpoint(
        self,
        handler: Callable[..., Any] | RouteHandler,
        *,
        cache: ResponseCache | None,
    ) -> RouteEndpoint:
        if isinstance(handler, RouteHandler):
            func, hooks = handler.handler, tuple(handler.on_before_response)
        else:
            func, hooks = handler, ()

        pipeline = RoutePipeline(
            self.schema,
            func,
            logger=self._logger,
            on_before_response=hooks,
            cache=cache,
        )
        endpoint = RouteEndpoint(pipeline, handler=func)
        if self._scope is not None:
            self._scope.endpoints.append(endpoint)
        return endpoint

    def __repr__(self) -> str:
        return f"RouteDefinition({self.schema.method.value} {self.schema.path})"


# =============================================================================
# define_meta
# =============================================================================


def define_meta(
    *,
    operation_id: str | None = None,
    title: str | None = None,
    summary: str | None = None,
    description: str | None = None,
    path: Any = None,
    query: Any = None,
    body: Any = None,
    response: Any = None,
    responses: Mapping[int | str, Any] | None = None,
    middleware: Sequence[Middleware] = (),
    transform_response: ResponseTransformer | Sequence[ResponseTransformer] | None = None,
    tags: Sequence[str] = (),
    deprecated: bool = False,
    registry: RouteRegistry | None = None,
    **build_fields: Any,
) -> RouteDefinition:
    """Declare and register a route's contract.

    Args:
        operation_id: Unique operation id (defaults to the URL template).
        title: Short human-readable name.
        summary: One-line documentation summary (defaults to ``title``).
        description: Long documentation text.
        path: Path parameter schema (values arrive as strings).
        query: Query parameter schema.
        body: Request body schema (POST, PUT, PATCH).
        response: Schema of successful responses.
        responses: Schemas keyed by status code.
        middleware: Middleware run before request validation.
        transform_response: Transformer, or transformers applied in order.
        tags: Explicit document tags.
        deprecated: Mark the operation deprecated.
        registry: Target registry; defaults to the registration scope's.
        **build_fields: ``__path`` and ``__method`` injected by the build.

    Returns:
        RouteDefinition: Bind a handler with define_event_handler().

    Raises:
        RouteDeclarationError: Missing/invalid injected fields, unknown
            keywords or invalid response status codes.
        RegistrationScopeError: No registry given and no scope bound.
        DuplicateRouteRegistration: The (method, path) is already registered.
        RegistryFrozenError: The registry no longer accepts routes.
    """
    url_template, method = _injected_location(build_fields)

    scope = _current_scope.get()
    target = registry if registry is not None else (scope.registry if scope else None)
    if target is None:
        raise RegistrationScopeError(
            f"define_meta() for {method.value} {url_template} has no registry: "
            "pass registry= or load the module inside registration_scope()"
        )

    try:
        response_spec = resolve_response_spec(response, responses)
    except ValueError as e:
        raise RouteDeclarationError(f"{method.value} {url_template}: {e}") from e

    if transform_response is None or callable(transform_response):
        transformer = transform_response
    else:
        transformer = compose_transformers(*transform_response)

    schema = RouteSchema(
        method=method,
        path=url_template,
        operation_id=operation_id or url_template,
        title=title,
        summary=summary,
        description=description,
        query_schema=as_schema(query),
        path_schema=as_schema(path),
        body_schema=as_schema(body),
        responses=response_spec,
        middleware=tuple(middleware),
        transform_response=transformer,
        tags=tuple(tags),
        deprecated=deprecated,
        is_catch_all="{*" in url_template,
    )
    target.register(schema)

    logger = scope.logger if scope is not None else get_logger()
    in_scope = scope if scope is not None and scope.registry is target else None
    return RouteDefinition(schema, logger=logger, scope=in_scope)


def _injected_location(build_fields: dict[str, Any]) -> tuple[str, HTTPMethod]:
    unknown = set(build_fields) - {INJECTED_PATH_FIELD, INJECTED_METHOD_FIELD}
    if unknown:
        raise RouteDeclarationError(
            f"define_meta() got unexpected keyword argument(s): {', '.join(sorted(unknown))}"
        )

    url_template = build_fields.get(INJECTED_PATH_FIELD)
    method_token = build_fields.get(INJECTED_METHOD_FIELD)
    if url_template is None or method_token is None:
        raise RouteDeclarationError(
            "define_meta() is missing the build-injected route location; "
            "route modules must be loaded through the route loader or built "
            "with 'routespec build'"
        )

    if not isinstance(url_template, str) or not url_template.startswith("/"):
        raise RouteDeclarationError(f"Invalid injected route path: {url_template!r}")
    try:
        method = HTTPMethod.from_token(str(method_token))
    except ValueError as e:
        raise RouteDeclarationError(f"Invalid injected HTTP method: {method_token!r}") from e
    return url_template, method
