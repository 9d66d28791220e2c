"""routespec - file-routed API contracts for FastAPI.

Route modules import their declaration API from here:

    from routespec import ApiError, define_meta

    meta = define_meta(operation_id="getUser", path=UserPath, response=User)

    @meta.define_event_handler
    async def handler(path, query, body):
        ...
"""

from routespec.pipeline import middlewares, transformers
from routespec.pipeline.context import RequestContext
from routespec.pipeline.exceptions import ApiError, RateLimitExceeded
from routespec.pipeline.response import RouteResponse
from routespec.presentation.define_meta import (
    RouteDefinition,
    RouteHandler,
    define_meta,
    registration_scope,
)
from routespec.registry.registry import RegistryHandle, RouteRegistry
from routespec.registry.route_schema import Middleware

__all__ = [
    # Declaration
    "define_meta",
    "registration_scope",
    "RouteDefinition",
    "RouteHandler",
    # Runtime
    "ApiError",
    "RateLimitExceeded",
    "RequestContext",
    "RouteResponse",
    "Middleware",
    "middlewares",
    "transformers",
    # Registry
    "RouteRegistry",
    "RegistryHandle",
]
