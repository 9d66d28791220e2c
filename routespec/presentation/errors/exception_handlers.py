"""Global exception handlers for the FastAPI application.

Requests that never reach a route pipeline (unknown paths, wrong methods,
framework-level validation, crashes outside a pipeline) are rendered in the
same uniform error shape as pipeline failures.

Handlers:
    http_exception_handler: Converts HTTPException
    validation_exception_handler: Converts FastAPI RequestValidationError
    generic_exception_handler: Catches all unhandled exceptions

Exports:
    register_exception_handlers: Register all exception handlers with FastAPI app
"""

from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from routespec.core.container import get_logger
from routespec.schemas.error_schemas import (
    ErrorDetail,
    ErrorResponse,
    ValidationErrorData,
)


def _status_message(status_code: int) -> str:
    """Get the HTTP reason phrase for a status code."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


async def http_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Convert HTTPException to the uniform error body.

    Args:
        request: FastAPI Request object.
        exc: HTTPException raised by routing or a dependency.

    Returns:
        JSONResponse with ErrorResponse content.

    Example:
        >>> # GET /unknown
        >>> # {"statusCode": 404, "statusMessage": "Not Found"}
    """
    # Type narrowing: FastAPI registers this handler only for HTTPException
    assert isinstance(exc, HTTPException)

    if isinstance(exc.detail, str) and exc.detail:
        message, data = exc.detail, None
    else:
        message, data = _status_message(exc.status_code), exc.detail

    body = ErrorResponse(
        status_code=exc.status_code,
        status_message=message,
        data=data,
    )

    # Preserve any headers from HTTPException (e.g., Allow, WWW-Authenticate)
    headers = getattr(exc, "headers", None)

    return JSONResponse(
        status_code=exc.status_code,
        content=body.to_body(),
        headers=headers,
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Convert FastAPI RequestValidationError to the uniform error body.

    Route endpoints validate their own inputs, so this only fires for plain
    FastAPI routes mounted next to them.

    Args:
        request: FastAPI Request object.
        exc: RequestValidationError from FastAPI parameter validation.

    Returns:
        JSONResponse (400) with field-level errors in ``data``.
    """
    # Type narrowing: FastAPI registers this handler only for RequestValidationError
    assert isinstance(exc, RequestValidationError)

    errors: list[ErrorDetail] = []
    source = "body"
    for error in exc.errors():
        loc = [str(p) for p in error.get("loc", [])]
        if loc and loc[0] in {"query", "path", "body"}:
            source = loc[0]
            loc = loc[1:]
        errors.append(
            ErrorDetail(
                field=".".join(loc),
                code=error.get("type", "validation_error"),
                message=error.get("msg", "Validation failed"),
            )
        )

    body = ErrorResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        status_message="Validation Error",
        data=ValidationErrorData(source=source, errors=errors).model_dump(mode="json"),
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=body.to_body(),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected Python exceptions.

    Prevents leaking stack traces or internal details to API consumers.

    Args:
        request: FastAPI Request object
        exc: Unhandled exception

    Returns:
        JSONResponse with ErrorResponse content (500 Internal Server Error)
    """
    get_logger().error(
        "unhandled_exception",
        error=exc,
        trace_id=getattr(request.state, "trace_id", None),
        request_path=request.url.path,
        request_method=request.method,
    )

    body = ErrorResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        status_message="Internal Server Error",
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.to_body(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI application.

    Args:
        app: FastAPI application instance

    Example:
        >>> from fastapi import FastAPI
        >>> app = FastAPI()
        >>> register_exception_handlers(app)
    """
    # Handle HTTPException (404, 405, dependencies)
    app.add_exception_handler(HTTPException, http_exception_handler)

    # Handle FastAPI parameter validation errors
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Handle all unhandled exceptions - catch-all for 500 errors
    app.add_exception_handler(Exception, generic_exception_handler)
