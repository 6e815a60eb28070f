"""
Helpers rendering the JSON response envelope.
"""

from typing import Any, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from crudbase.core.exceptions import ErrorKind
from crudbase.schemas.response import BaseResponse, ErrorResponse


def respond(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """
    Wrap `data` in the base envelope.

    Args:
        data: Payload placed under "data"
        message: Optional human-readable message
        status_code: HTTP status of the response

    Returns:
        JSONResponse with {"success": true, "message": ..., "data": ...}

    Example:
        >>> respond(data="Ok.").body
        b'{"success":true,"message":null,"data":"Ok."}'
    """
    envelope = BaseResponse(success=True, message=message, data=data)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope),
    )


def respond_error(
    kind: ErrorKind,
    message: str,
    status_code: int,
) -> JSONResponse:
    """Render an error envelope with the classified error kind."""
    envelope = ErrorResponse(message=message, error_kind=kind)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope),
    )
