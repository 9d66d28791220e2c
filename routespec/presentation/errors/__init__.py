"""Error response rendering.

Exports:
    ErrorResponseBuilder: Pipeline error to uniform error response
    register_exception_handlers: Global handlers using the same shape
"""

from routespec.presentation.errors.error_response_builder import ErrorResponseBuilder
from routespec.presentation.errors.exception_handlers import (
    register_exception_handlers,
)

__all__ = ["ErrorResponseBuilder", "register_exception_handlers"]
