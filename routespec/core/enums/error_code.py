"""Machine-readable error codes.

Error codes follow SUBJECT_REASON naming and are carried by every
request-time error (pipeline, document fetch, document merge) so callers can
branch on the failure without parsing messages.

Categories:
- Request errors (*_VALIDATION_FAILED)
- Route authoring errors (UNREGISTERED_RESPONSE_SCHEMA, RESPONSE_*)
- Middleware errors (MIDDLEWARE_*, RATE_LIMIT_EXCEEDED)
- Handler errors (HANDLER_*, INTERNAL_ERROR)
- Document errors (DOCUMENT_*)
"""

from enum import Enum


class ErrorCode(Enum):
    """Machine-readable error codes."""

    # Request validation
    QUERY_VALIDATION_FAILED = "query_validation_failed"
    PATH_VALIDATION_FAILED = "path_validation_failed"
    BODY_VALIDATION_FAILED = "body_validation_failed"

    # Response validation
    RESPONSE_VALIDATION_FAILED = "response_validation_failed"
    UNREGISTERED_RESPONSE_SCHEMA = "unregistered_response_schema"

    # Middleware
    MIDDLEWARE_FAILED = "middleware_failed"
    MIDDLEWARE_REJECTED = "middleware_rejected"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"

    # Handler
    HANDLER_REJECTED = "handler_rejected"
    INTERNAL_ERROR = "internal_error"

    # Document assembly
    DOCUMENT_FETCH_FAILED = "document_fetch_failed"
    DOCUMENT_INVALID = "document_invalid"
    DOCUMENT_MERGE_CONFLICT = "document_merge_conflict"
