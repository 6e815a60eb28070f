"""
Pydantic schemas for the JSON response envelope.

Every handler answers with the same wrapper: a success flag, an optional
message and the payload under `data`. Error responses add `error_kind`.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from crudbase.core.exceptions import ErrorKind


class BaseResponse(BaseModel):
    """
    Base response envelope shared by all endpoints.

    Attributes:
        success: Whether the request was handled successfully
        message: Human-readable message (optional)
        data: Response payload
    """
    success: bool = Field(
        default=True,
        description="Whether the request was handled successfully"
    )
    message: Optional[str] = Field(
        default=None,
        description="Human-readable message"
    )
    data: Any = Field(
        default=None,
        description="Response payload"
    )


class ErrorResponse(BaseResponse):
    """Envelope returned when a request fails."""
    success: bool = Field(
        default=False,
        description="Always false for errors"
    )
    error_kind: ErrorKind = Field(
        description="Classified kind of failure"
    )


class ExampleTestResponse(BaseResponse):
    """Envelope returned by GET /test."""
    data: str = Field(
        description="Test response payload",
        examples=["Ok."],
    )
