"""Uniform error body returned by every failing request.

Every failure, whatever stage produced it, is rendered as:

    {"statusCode": 400, "statusMessage": "Validation Error", "data": {...}}

The same model is published in the API document as the ``ErrorResponse``
component.

Exports:
    ErrorDetail: Individual field-specific error
    ValidationErrorData: ``data`` payload of request validation failures
    ErrorResponse: Uniform error body
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Individual field-specific error.

    Attributes:
        field: Dotted location of the failing value
        code: Machine-readable error code
        message: Human-readable error message

    Examples:
        >>> ErrorDetail(field="email", code="missing", message="Field required")
    """

    field: str = Field(..., description="Dotted field location")
    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")


class ValidationErrorData(BaseModel):
    """``data`` payload of a request validation failure.

    Attributes:
        source: Which input failed (query, path or body)
        errors: Field-level failures
    """

    source: str = Field(..., description="Failing input: query, path or body")
    errors: list[ErrorDetail] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Uniform error body.

    Attributes:
        status_code: HTTP status code (serialized as statusCode)
        status_message: HTTP status message (serialized as statusMessage)
        data: Optional structured payload

    Examples:
        >>> ErrorResponse(status_code=404, status_message="Not Found").to_body()
        {'statusCode': 404, 'statusMessage': 'Not Found'}
    """

    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(..., alias="statusCode", examples=[400])
    status_message: str = Field(..., alias="statusMessage", examples=["Validation Error"])
    data: Any | None = Field(None, description="Optional error payload")

    def to_body(self) -> dict[str, Any]:
        """JSON body with camelCase keys; ``data`` omitted when None."""
        body = self.model_dump(by_alias=True, mode="json")
        if body.get("data") is None:
            body.pop("data", None)
        return body
