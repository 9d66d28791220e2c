"""Exceptions route code raises to fail a request with an explicit status.

Handlers and middleware abort a request by raising ApiError (or the web
framework's HTTPException). The pipeline catches them at its stage boundary
and turns them into PipelineError data; the status, message and data are
passed through to the error body unchanged.

Usage:
    from routespec import ApiError

    if user is None:
        raise ApiError(404, "Not Found", data={"id": user_id})
"""

from http import HTTPStatus
from typing import Any


class ApiError(Exception):
    """HTTP failure with an explicit status raised by route code.

    Attributes:
        status_code: HTTP status of the error response.
        status_message: Status message; defaults to the standard reason phrase.
        data: Optional JSON-compatible payload for the error body.
    """

    def __init__(
        self,
        status_code: int = 500,
        status_message: str | None = None,
        data: Any = None,
    ) -> None:
        self.status_code = status_code
        self.status_message = status_message or _reason_phrase(status_code)
        self.data = data
        super().__init__(f"{self.status_code} {self.status_message}")


class RateLimitExceeded(ApiError):
    """Request rejected by a rate limit.

    Attributes:
        retry_after: Seconds until the current window resets.
    """

    def __init__(self, *, retry_after: int, limit: int) -> None:
        self.retry_after = retry_after
        self.limit = limit
        super().__init__(
            429,
            "Too Many Requests",
            data={"limit": limit, "retryAfter": retry_after},
        )


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"
