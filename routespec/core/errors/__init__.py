"""Core errors package.

Exports all error classes for convenient importing.

Usage:
    from routespec.core.errors import InvalidRoutePath, RequestValidationError
"""

from routespec.core.errors.document_errors import DocumentError, FetchError, MergeConflict
from routespec.core.errors.pipeline_errors import (
    FieldError,
    HandlerError,
    InternalError,
    MiddlewareError,
    PipelineError,
    RequestValidationError,
    ResponseValidationError,
    UnregisteredResponseSchema,
)
from routespec.core.errors.route_errors import (
    AmbiguousDeclaration,
    DuplicateParameter,
    DuplicateRouteRegistration,
    InvalidRoutePath,
    ParseError,
    RegistrationScopeError,
    RegistryFrozenError,
    RouteDeclarationError,
    RouteSpecError,
)

__all__ = [
    # Build/startup (raised)
    "RouteSpecError",
    "InvalidRoutePath",
    "DuplicateParameter",
    "ParseError",
    "AmbiguousDeclaration",
    "DuplicateRouteRegistration",
    "RegistryFrozenError",
    "RouteDeclarationError",
    "RegistrationScopeError",
    # Request-time (returned)
    "FieldError",
    "PipelineError",
    "RequestValidationError",
    "MiddlewareError",
    "HandlerError",
    "UnregisteredResponseSchema",
    "ResponseValidationError",
    "InternalError",
    # Document assembly (returned)
    "DocumentError",
    "FetchError",
    "MergeConflict",
]
