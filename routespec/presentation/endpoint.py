"""Framework endpoint wrapping a route pipeline.

RouteEndpoint is the only place where Starlette's Request and Response types
meet the pipeline: it reads the raw inputs, builds the RequestContext, runs
the pipeline and renders either the JSON response or the uniform error body.

Input decoding:
    - Query: repeated keys become lists, single keys stay strings
    - Path: values captured by the router (always strings)
    - Body: JSON, read only for POST, PUT and PATCH; an empty body is "no
      body", malformed JSON is reported as a body validation failure
"""

import json
from collections.abc import Callable
from typing import Any

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from routespec.core.constants import BODY_METHODS
from routespec.core.result import Failure, Success
from routespec.pipeline.context import NO_BODY, RawRequest, RequestContext
from routespec.pipeline.pipeline import RoutePipeline
from routespec.presentation.errors.error_response_builder import ErrorResponseBuilder
from routespec.registry.route_schema import RouteSchema


class RouteEndpoint:
    """Starlette endpoint for one registered route.

    Attributes:
        pipeline: Pipeline enforcing the route's contract.
        handler: Handler the pipeline calls.
    """

    def __init__(self, pipeline: RoutePipeline, *, handler: Callable[..., Any]) -> None:
        self.pipeline = pipeline
        self.handler = handler

    @property
    def schema(self) -> RouteSchema:
        """Route schema the endpoint serves."""
        return self.pipeline.schema

    async def handle(self, request: Request) -> Response:
        """Process one HTTP request.

        Args:
            request: Incoming request routed to this endpoint.

        Returns:
            Response: JSON response, empty response for a None body, or the
            uniform error body.
        """
        raw = await read_raw_request(request)
        context = RequestContext(
            method=raw.method,
            url_path=raw.url_path,
            route=self.schema.path,
            operation_id=self.schema.operation_id,
            headers=raw.headers,
            client_host=request.client.host if request.client else None,
            trace_id=getattr(request.state, "trace_id", None),
            request=request,
        )

        match await self.pipeline.execute(raw, context):
            case Failure(error=error):
                return ErrorResponseBuilder.from_pipeline_error(
                    error, headers=context.response_headers
                )
            case Success(value=response):
                if response.body is None:
                    return Response(
                        status_code=response.status_code,
                        headers=dict(response.headers),
                    )
                return JSONResponse(
                    content=response.body,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                )

    def __repr__(self) -> str:
        return f"RouteEndpoint({self.schema.method.value} {self.schema.path})"


async def read_raw_request(request: Request) -> RawRequest:
    """Extract unvalidated inputs from a Starlette request.

    Args:
        request: Incoming request.

    Returns:
        RawRequest: Query, path params, decoded body and headers.
    """
    query: dict[str, Any] = {}
    for key, value in request.query_params.multi_items():
        if key not in query:
            query[key] = value
        elif isinstance(query[key], list):
            query[key].append(value)
        else:
            query[key] = [query[key], value]

    body: Any = NO_BODY
    body_error: str | None = None
    if request.method.upper() in BODY_METHODS:
        payload = await request.body()
        if payload.strip():
            try:
                body = json.loads(payload)
            except ValueError as e:
                body_error = f"Malformed JSON body: {e}"

    return RawRequest(
        method=request.method.upper(),
        url_path=request.url.path,
        query=query,
        path_params={key: str(value) for key, value in request.path_params.items()},
        body=body,
        body_error=body_error,
        headers={key.lower(): value for key, value in request.headers.items()},
    )
