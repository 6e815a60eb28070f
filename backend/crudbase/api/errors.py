"""
Exception handlers translating repository and store failures into
error envelopes.

Status codes by error kind:
- not_found: 404
- constraint_violation: 409
- invalid_field: 422
- connection: 503
- store: 500
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from crudbase.api.responses import respond_error
from crudbase.core.exceptions import ErrorKind, RepositoryError, classify_error
from crudbase.core.logging_config import get_logger


logger = get_logger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONSTRAINT_VIOLATION: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_FIELD: 422,
    ErrorKind.CONNECTION: status.HTTP_503_SERVICE_UNAVAILABLE,
    ErrorKind.STORE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    """Render a RepositoryError; its message is safe to show to clients."""
    kind = classify_error(exc)
    return respond_error(kind, str(exc), STATUS_BY_KIND[kind])


async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Render a raw SQLAlchemy failure.

    Clients get a generic message per kind; the driver message is not
    included. The repository has already reported the failure.
    """
    kind = classify_error(exc)
    logger.warning(
        "Store failure reached the HTTP layer",
        extra={
            "path": request.url.path,
            "method": request.method,
            "request_id": getattr(request.state, "request_id", None),
            "error_kind": kind.value,
        },
    )
    message = {
        ErrorKind.CONSTRAINT_VIOLATION: "Request conflicts with existing data",
        ErrorKind.CONNECTION: "Database unavailable",
    }.get(kind, "Database error")
    return respond_error(kind, message, STATUS_BY_KIND[kind])


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the envelope exception handlers to `app`."""
    app.add_exception_handler(RepositoryError, repository_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)
