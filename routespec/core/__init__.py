"""Core shared kernel.

This module provides foundational utilities used across all layers:
- Result types for railway-oriented programming
- Build-time exceptions and request-time error data
- Enums, constants and settings

The core module has NO dependencies on other routespec layers.
"""

from routespec.core.enums import ErrorCode
from routespec.core.errors import (
    PipelineError,
    RouteSpecError,
)
from routespec.core.result import Failure, Result, Success

__all__ = [
    # Result types
    "Result",
    "Success",
    "Failure",
    # Errors
    "RouteSpecError",
    "PipelineError",
    "ErrorCode",
]
