"""Validation pipeline stages.

Each request walks the stages in declaration order; FAILED is reachable from
every non-terminal stage. COMPLETED and FAILED are terminal.
"""

from enum import Enum


class PipelineStage(str, Enum):
    """Per-request pipeline state."""

    START = "start"
    MIDDLEWARE = "middleware"
    REQUEST_VALIDATED = "request_validated"
    HANDLER_INVOKED = "handler_invoked"
    RESPONSE_VALIDATED = "response_validated"
    TRANSFORMED = "transformed"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether the request can no longer change state."""
        return self in (PipelineStage.COMPLETED, PipelineStage.FAILED)


class InputSource(str, Enum):
    """Request input that failed validation."""

    QUERY = "query"
    PATH = "path"
    BODY = "body"
