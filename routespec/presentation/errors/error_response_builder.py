"""Error response builder for the uniform error body.

This module converts pipeline errors into ``{statusCode, statusMessage,
data?}`` JSON responses.

Exposure rules:
    - RequestValidationError: 400 with ``data = {source, errors}``
    - MiddlewareError / HandlerError: status, message and data chosen by the
      middleware or handler
    - UnregisteredResponseSchema, ResponseValidationError, InternalError:
      bare 500; details are logged, never returned

Exports:
    ErrorResponseBuilder: Utility class for building error responses
"""

from collections.abc import Mapping

from fastapi.responses import JSONResponse

from routespec.core.errors import (
    HandlerError,
    MiddlewareError,
    PipelineError,
    RequestValidationError,
)
from routespec.schemas.error_schemas import (
    ErrorDetail,
    ErrorResponse,
    ValidationErrorData,
)


class ErrorResponseBuilder:
    """Build uniform error responses.

    Example:
        >>> error = RequestValidationError(
        ...     code=ErrorCode.QUERY_VALIDATION_FAILED,
        ...     message="Request query failed validation",
        ...     source=InputSource.QUERY,
        ... )
        >>> response = ErrorResponseBuilder.from_pipeline_error(error)
        >>> response.status_code
        400
    """

    @staticmethod
    def from_pipeline_error(
        error: PipelineError,
        headers: Mapping[str, str] | None = None,
    ) -> JSONResponse:
        """Convert PipelineError to a JSON error response.

        Args:
            error: Pipeline error to convert
            headers: Extra response headers (e.g. Retry-After set by middleware)

        Returns:
            JSONResponse with the ErrorResponse body
        """
        body = ErrorResponseBuilder.build(error)
        return JSONResponse(
            status_code=body.status_code,
            content=body.to_body(),
            headers=dict(headers) if headers else None,
        )

    @staticmethod
    def build(error: PipelineError) -> ErrorResponse:
        """Build the error body model for a pipeline error.

        Args:
            error: Pipeline error to convert

        Returns:
            ErrorResponse with status, message and exposable data
        """
        if isinstance(error, RequestValidationError):
            data = ValidationErrorData(
                source=error.source.value,
                errors=[
                    ErrorDetail(field=e.field, code=e.code, message=e.message)
                    for e in error.field_errors
                ],
            ).model_dump(mode="json")
        elif isinstance(error, (MiddlewareError, HandlerError)):
            data = error.data
        else:
            data = None

        return ErrorResponse(
            status_code=error.status_code,
            status_message=error.status_message,
            data=data,
        )
