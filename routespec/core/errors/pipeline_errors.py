"""Request-time errors produced by the validation pipeline.

Pipeline errors are data, not exceptions. Every stage returns
Result[..., PipelineError]; the presentation layer converts the error into
the uniform error body ({statusCode, statusMessage, data?}). A failure in one
request never affects another request.

Architecture:
- Does NOT inherit from Exception (returned in Result, never raised)
- Frozen dataclasses with keyword-only fields
- status_code / status_message describe the HTTP outcome

Status mapping:
- RequestValidationError: 400
- MiddlewareError: status carried by the middleware failure (401, 403, 429)
  or 500 for unexpected exceptions
- HandlerError: status/message passed through from the handler
- UnregisteredResponseSchema, ResponseValidationError, InternalError: 500

Usage:
    from routespec.core.errors import RequestValidationError
    from routespec.core.enums import ErrorCode, InputSource

    return Failure(error=RequestValidationError(
        code=ErrorCode.BODY_VALIDATION_FAILED,
        message="Request body failed validation",
        source=InputSource.BODY,
        field_errors=(FieldError(field="email", code="missing", message="Field required"),),
    ))
"""

from dataclasses import dataclass, field
from typing import Any

from routespec.core.enums import ErrorCode, InputSource, PipelineStage


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldError:
    """Single field-level validation failure.

    Attributes:
        field: Dotted location of the failing value ("" for the root value).
        code: Machine-readable validator code (e.g. "missing", "int_parsing").
        message: Human-readable explanation.
    """

    field: str
    code: str
    message: str


@dataclass(frozen=True, slots=True, kw_only=True)
class PipelineError:
    """Base request-time error (does NOT inherit from Exception).

    Attributes:
        code: Machine-readable error code.
        message: Human-readable message (logged, not always exposed).
        status_code: HTTP status of the error response.
        status_message: HTTP status message of the error response.
        stage: Pipeline stage in which the failure happened.
    """

    code: ErrorCode
    message: str
    status_code: int = 500
    status_message: str = "Internal Server Error"
    stage: PipelineStage | None = None

    def __str__(self) -> str:
        """String representation of error."""
        return f"{self.code.value}: {self.message}"


@dataclass(frozen=True, slots=True, kw_only=True)
class RequestValidationError(PipelineError):
    """Query, path or body input did not match its schema.

    Attributes:
        source: Which input failed.
        field_errors: Structured field-level failures.
    """

    source: InputSource
    field_errors: tuple[FieldError, ...] = field(default_factory=tuple)
    status_code: int = 400
    status_message: str = "Validation Error"


@dataclass(frozen=True, slots=True, kw_only=True)
class MiddlewareError(PipelineError):
    """A middleware raised and aborted the chain.

    Attributes:
        middleware_name: Name of the middleware that failed.
        data: Optional payload supplied by the middleware failure.
    """

    middleware_name: str
    data: Any = None


@dataclass(frozen=True, slots=True, kw_only=True)
class HandlerError(PipelineError):
    """Handler signalled an HTTP failure with an explicit status.

    Attributes:
        data: Optional payload passed through to the error body.
    """

    data: Any = None


@dataclass(frozen=True, slots=True, kw_only=True)
class UnregisteredResponseSchema(PipelineError):
    """Handler produced a body for a status code with no response schema.

    Attributes:
        response_status: Status code the handler produced.
    """

    response_status: int


@dataclass(frozen=True, slots=True, kw_only=True)
class ResponseValidationError(PipelineError):
    """Handler body did not match the response schema for its status.

    Attributes:
        response_status: Status code the handler produced.
        field_errors: Structured field-level failures (logged only).
    """

    response_status: int
    field_errors: tuple[FieldError, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True, kw_only=True)
class InternalError(PipelineError):
    """Unexpected exception inside the pipeline.

    Attributes:
        error_type: Exception class name (logged only).
    """

    error_type: str | None = None
