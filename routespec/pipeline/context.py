"""Per-request data carried through the validation pipeline.

RawRequest is what the transport hands to the pipeline: undecoded inputs,
nothing validated yet. RequestContext is the mutable per-request scratch
space shared by middleware and handlers; it is never shared across requests.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from routespec.core.enums import PipelineStage


class _NoBody:
    """Marker for a request that carried no body at all."""

    def __repr__(self) -> str:
        return "NO_BODY"

    def __bool__(self) -> bool:
        return False


NO_BODY: Any = _NoBody()


@dataclass(slots=True, kw_only=True)
class RawRequest:
    """Unvalidated request inputs.

    Attributes:
        method: HTTP method of the request.
        url_path: Concrete request path.
        query: Query parameters; repeated keys hold lists.
        path_params: Values captured by the URL template placeholders.
        body: Decoded JSON body, or NO_BODY when the request had none.
        body_error: Decoding failure message when the body was not valid JSON.
        headers: Request headers (lower-cased names).
    """

    method: str
    url_path: str = "/"
    query: Mapping[str, Any] = field(default_factory=dict)
    path_params: Mapping[str, str] = field(default_factory=dict)
    body: Any = NO_BODY
    body_error: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(slots=True, kw_only=True)
class RequestContext:
    """Mutable per-request state visible to middleware and handlers.

    Attributes:
        method: HTTP method of the request.
        url_path: Concrete request path.
        route: URL template of the matched route.
        operation_id: Operation id of the matched route.
        headers: Request headers (lower-cased names).
        client_host: Peer address, if known.
        trace_id: Request trace id, if the trace middleware assigned one.
        state: Free-form values set by middleware (e.g. the authenticated user).
        response_headers: Headers to add to the final response.
        status_code: Success status chosen by the handler (defaults to 200).
        stage: Current pipeline stage.
        request: Underlying framework request, when running behind one.
    """

    method: str
    url_path: str = "/"
    route: str = "/"
    operation_id: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    client_host: str | None = None
    trace_id: str | None = None
    state: dict[str, Any] = field(default_factory=dict)
    response_headers: dict[str, str] = field(default_factory=dict)
    status_code: int | None = None
    stage: PipelineStage = PipelineStage.START
    request: Any = None

    def header(self, name: str, default: str | None = None) -> str | None:
        """Case-insensitive request header lookup."""
        return self.headers.get(name.lower(), default)

    def set_status(self, status_code: int) -> None:
        """Choose the success status of the response."""
        self.status_code = status_code
