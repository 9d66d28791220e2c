"""Shared response schemas."""

from routespec.schemas.error_schemas import ErrorDetail, ErrorResponse, ValidationErrorData

__all__ = ["ErrorDetail", "ErrorResponse", "ValidationErrorData"]
