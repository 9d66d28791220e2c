"""Per-request validation pipeline.

Flow:
1. MIDDLEWARE: run the route's middleware in declaration order
2. REQUEST_VALIDATED: validate query, then path, then body (POST/PUT/PATCH)
3. HANDLER_INVOKED: call the handler with validated values only
4. RESPONSE_VALIDATED: validate the handler's body against the schema for
   its status code
5. TRANSFORMED: apply the route's response transformer
6. COMPLETED: run before-response hooks and return the response

Any stage can fail; the first failure moves the request to FAILED and is
returned as Failure(PipelineError). Nothing after the failing stage runs:
in particular a handler never sees unvalidated input, and a body that fails
response validation is never returned to the client.

Architecture:
- No framework imports besides starlette's HTTPException/threadpool helper
- Errors returned as data (Result), not raised
- Holds no per-request state; one instance serves concurrent requests
"""

import inspect
from collections.abc import Callable, Sequence
from dataclasses import replace
from http import HTTPStatus
from typing import Any

from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException

from routespec.core.constants import BODY_METHODS
from routespec.core.enums import ErrorCode, InputSource, PipelineStage
from routespec.core.errors import (
    FieldError,
    HandlerError,
    InternalError,
    MiddlewareError,
    PipelineError,
    RequestValidationError,
    ResponseValidationError,
    UnregisteredResponseSchema,
)
from routespec.core.result import Failure, Result, Success
from routespec.domain.protocols.logger_protocol import LoggerProtocol
from routespec.domain.protocols.schema_protocol import SchemaProtocol
from routespec.pipeline.cache import ResponseCache
from routespec.pipeline.context import NO_BODY, RawRequest, RequestContext
from routespec.pipeline.exceptions import ApiError, RateLimitExceeded
from routespec.pipeline.response import RouteResponse
from routespec.registry.route_schema import Middleware, RouteSchema


type BeforeResponseHook = Callable[[RequestContext, RouteResponse], Any]

_VALIDATION_CODES = {
    InputSource.QUERY: ErrorCode.QUERY_VALIDATION_FAILED,
    InputSource.PATH: ErrorCode.PATH_VALIDATION_FAILED,
    InputSource.BODY: ErrorCode.BODY_VALIDATION_FAILED,
}


class RoutePipeline:
    """Runs one route's contract around its handler.

    Args:
        schema: Registered route schema.
        handler: Sync or async callable ``handler(path, query, body)``; if it
            declares a ``context`` parameter it also receives the
            RequestContext.
        logger: Logger for stage transitions and failures.
        on_before_response: Hooks called with (context, response) after the
            response is validated and transformed; a hook may return a
            replacement RouteResponse.
        cache: Optional response cache (cached handler variant).
    """

    def __init__(
        self,
        schema: RouteSchema,
        handler: Callable[..., Any],
        *,
        logger: LoggerProtocol,
        on_before_response: Sequence[BeforeResponseHook] = (),
        cache: ResponseCache | None = None,
    ) -> None:
        self.schema = schema
        self._handler = handler
        self._passes_context = _declares_parameter(handler, "context")
        self._logger = logger
        self._on_before_response = tuple(on_before_response)
        self._cache = cache

    async def execute(
        self, raw: RawRequest, context: RequestContext
    ) -> Result[RouteResponse, PipelineError]:
        """Process one request.

        Args:
            raw: Unvalidated request inputs.
            context: Per-request mutable state.

        Returns:
            Success(RouteResponse) when every stage passed,
            Failure(PipelineError) for the first failing stage.
        """
        logger = self._logger.bind(
            operation_id=self.schema.operation_id,
            method=raw.method,
            path=raw.url_path,
            trace_id=context.trace_id,
        )

        # Step 1: Middleware
        self._advance(context, PipelineStage.MIDDLEWARE, logger)
        for middleware in self.schema.middleware:
            failure = await self._run_middleware(middleware, context, logger)
            if failure is not None:
                return self._fail(context, failure, logger)

        # Step 2: Request validation (query, path, body)
        inputs = self._validate_request(raw)
        if isinstance(inputs, Failure):
            return self._fail(context, inputs.error, logger)
        path, query, body = inputs.value
        self._advance(context, PipelineStage.REQUEST_VALIDATED, logger)

        cache_key = None
        if self._cache is not None:
            cache_key = ResponseCache.key_for(
                self.schema.path,
                _dump(self.schema.path_schema, path),
                _dump(self.schema.query_schema, query),
            )
            cached = self._cache.get(cache_key)
            if cached is not None:
                logger.debug("pipeline_cache_hit")
                self._advance(context, PipelineStage.COMPLETED, logger)
                return Success(value=cached)

        # Step 3: Handler
        outcome = await self._invoke_handler(path, query, body, context, logger)
        if isinstance(outcome, Failure):
            return self._fail(context, outcome.error, logger)
        response = outcome.value
        self._advance(context, PipelineStage.HANDLER_INVOKED, logger)

        # Step 4: Response validation
        validated = self._validate_response(response, logger)
        if isinstance(validated, Failure):
            return self._fail(context, validated.error, logger)
        response = validated.value
        self._advance(context, PipelineStage.RESPONSE_VALIDATED, logger)

        # Step 5: Transform and before-response hooks
        try:
            response = await self._finalize(response, context)
        except Exception as e:
            logger.error("pipeline_transform_failed", error=e)
            return self._fail(context, _internal_error(e), logger)
        self._advance(context, PipelineStage.TRANSFORMED, logger)

        if self._cache is not None and cache_key is not None:
            self._cache.set(cache_key, response)

        # Step 6: Completed
        self._advance(context, PipelineStage.COMPLETED, logger)
        return Success(value=response)

    # =========================================================================
    # Stages
    # =========================================================================

    async def _run_middleware(
        self,
        middleware: Middleware,
        context: RequestContext,
        logger: LoggerProtocol,
    ) -> MiddlewareError | None:
        try:
            result = middleware.handler(context)
            if inspect.isawaitable(result):
                await result
        except RateLimitExceeded as e:
            return MiddlewareError(
                code=ErrorCode.RATE_LIMIT_EXCEEDED,
                message=f"Middleware '{middleware.name}' rejected the request",
                status_code=e.status_code,
                status_message=e.status_message,
                middleware_name=middleware.name,
                data=e.data,
            )
        except (ApiError, HTTPException) as e:
            status_code, status_message, data = _explicit_status(e)
            return MiddlewareError(
                code=ErrorCode.MIDDLEWARE_REJECTED,
                message=f"Middleware '{middleware.name}' rejected the request",
                status_code=status_code,
                status_message=status_message,
                middleware_name=middleware.name,
                data=data,
            )
        except Exception as e:
            logger.error(
                "middleware_failed", error=e, middleware=middleware.name
            )
            return MiddlewareError(
                code=ErrorCode.MIDDLEWARE_FAILED,
                message=f"Middleware '{middleware.name}' failed",
                middleware_name=middleware.name,
            )
        return None

    def _validate_request(
        self, raw: RawRequest
    ) -> Result[tuple[Any, Any, Any], RequestValidationError]:
        query = _parse_input(self.schema.query_schema, dict(raw.query), InputSource.QUERY)
        if isinstance(query, Failure):
            return query

        path = _parse_input(
            self.schema.path_schema, dict(raw.path_params), InputSource.PATH
        )
        if isinstance(path, Failure):
            return path

        body: Any = None
        if self.schema.body_schema is not None and raw.method.upper() in BODY_METHODS:
            if raw.body_error is not None:
                return Failure(
                    error=_validation_error(
                        InputSource.BODY,
                        [FieldError(field="", code="json_invalid", message=raw.body_error)],
                    )
                )
            raw_body = None if raw.body is NO_BODY else raw.body
            parsed = _parse_input(self.schema.body_schema, raw_body, InputSource.BODY)
            if isinstance(parsed, Failure):
                return parsed
            body = parsed.value

        return Success(value=(path.value, query.value, body))

    async def _invoke_handler(
        self,
        path: Any,
        query: Any,
        body: Any,
        context: RequestContext,
        logger: LoggerProtocol,
    ) -> Result[RouteResponse, PipelineError]:
        kwargs: dict[str, Any] = {"context": context} if self._passes_context else {}
        try:
            if inspect.iscoroutinefunction(self._handler):
                result = await self._handler(path, query, body, **kwargs)
            else:
                result = await run_in_threadpool(self._handler, path, query, body, **kwargs)
                if inspect.isawaitable(result):
                    result = await result
        except (ApiError, HTTPException) as e:
            status_code, status_message, data = _explicit_status(e)
            return Failure(
                error=HandlerError(
                    code=ErrorCode.HANDLER_REJECTED,
                    message=f"Handler rejected the request with {status_code}",
                    status_code=status_code,
                    status_message=status_message,
                    data=data,
                )
            )
        except Exception as e:
            logger.error("handler_failed", error=e, exc_info=True)
            return Failure(error=_internal_error(e))

        if isinstance(result, RouteResponse):
            if context.status_code is not None and result.status_code == 200:
                result = replace(result, status_code=context.status_code)
            return Success(value=result)
        return Success(value=RouteResponse(result, context.status_code or 200))

    def _validate_response(
        self, response: RouteResponse, logger: LoggerProtocol
    ) -> Result[RouteResponse, PipelineError]:
        schema = self.schema.responses.resolve(response.status_code)

        if schema is None:
            if response.body is not None:
                logger.error(
                    "response_schema_missing", response_status=response.status_code
                )
                return Failure(
                    error=UnregisteredResponseSchema(
                        code=ErrorCode.UNREGISTERED_RESPONSE_SCHEMA,
                        message=(
                            f"Handler returned a body for status {response.status_code} "
                            "but no response schema is declared for it"
                        ),
                        response_status=response.status_code,
                    )
                )
            return Success(value=response)

        match schema.parse(response.body):
            case Failure(error=field_errors):
                logger.error(
                    "response_validation_failed",
                    response_status=response.status_code,
                    field_errors=[f"{e.field}: {e.message}" for e in field_errors],
                )
                return Failure(
                    error=ResponseValidationError(
                        code=ErrorCode.RESPONSE_VALIDATION_FAILED,
                        message="Handler response does not match the response schema",
                        response_status=response.status_code,
                        field_errors=tuple(field_errors),
                    )
                )
            case Success(value=value):
                return Success(value=replace(response, body=schema.dump(value)))

    async def _finalize(
        self, response: RouteResponse, context: RequestContext
    ) -> RouteResponse:
        transform = self.schema.transform_response
        if transform is not None:
            response = replace(
                response, body=transform(response.body, response.status_code)
            )

        headers = {**context.response_headers, **response.headers}
        response = replace(response, headers=headers)

        for hook in self._on_before_response:
            result = hook(context, response)
            if inspect.isawaitable(result):
                result = await result
            if isinstance(result, RouteResponse):
                response = result
        return response

    # =========================================================================
    # State
    # =========================================================================

    def _advance(
        self, context: RequestContext, stage: PipelineStage, logger: LoggerProtocol
    ) -> None:
        context.stage = stage
        logger.debug("pipeline_stage", stage=stage.value)

    def _fail(
        self,
        context: RequestContext,
        error: PipelineError,
        logger: LoggerProtocol,
    ) -> Failure[PipelineError]:
        failed_at = context.stage
        context.stage = PipelineStage.FAILED
        error = replace(error, stage=failed_at)
        if error.status_code >= 500:
            logger.error(
                "pipeline_failed",
                code=error.code.value,
                stage=failed_at.value,
                status_code=error.status_code,
            )
        else:
            logger.info(
                "pipeline_rejected",
                code=error.code.value,
                stage=failed_at.value,
                status_code=error.status_code,
            )
        return Failure(error=error)


# =============================================================================
# Helpers
# =============================================================================


def _parse_input(
    schema: SchemaProtocol | None, value: Any, source: InputSource
) -> Result[Any, RequestValidationError]:
    if schema is None:
        return Success(value=value)
    match schema.parse(value):
        case Failure(error=field_errors):
            return Failure(error=_validation_error(source, field_errors))
        case Success(value=parsed):
            return Success(value=parsed)


def _validation_error(
    source: InputSource, field_errors: Sequence[FieldError]
) -> RequestValidationError:
    return RequestValidationError(
        code=_VALIDATION_CODES[source],
        message=f"Request {source.value} failed validation",
        source=source,
        field_errors=tuple(field_errors),
    )


def _explicit_status(error: ApiError | HTTPException) -> tuple[int, str, Any]:
    if isinstance(error, ApiError):
        return error.status_code, error.status_message, error.data
    if isinstance(error.detail, str):
        return error.status_code, error.detail, None
    return error.status_code, HTTPStatus(error.status_code).phrase, error.detail


def _internal_error(error: Exception) -> InternalError:
    return InternalError(
        code=ErrorCode.INTERNAL_ERROR,
        message="Unexpected error while processing the request",
        error_type=type(error).__name__,
    )


def _dump(schema: SchemaProtocol | None, value: Any) -> Any:
    return value if schema is None else schema.dump(value)


def _declares_parameter(func: Callable[..., Any], name: str) -> bool:
    try:
        parameters = inspect.signature(func).parameters
    except (TypeError, ValueError):
        return False
    return name in parameters
