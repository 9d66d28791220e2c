"""Successful route response produced by the pipeline."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class RouteResponse:
    """Body, status and headers of a successful response.

    Handlers may return one to pick a status other than 200 or to add
    headers; returning a plain value is shorthand for RouteResponse(value).

    Attributes:
        body: Response body (validated against the response schema).
        status_code: Success status.
        headers: Extra response headers.
    """

    body: Any = None
    status_code: int = 200
    headers: dict[str, str] = field(default_factory=dict)
