"""
Error taxonomy for repository operations.

Repository errors carry an ErrorKind tag so callers and HTTP handlers can
dispatch on the kind of failure instead of catching broad exceptions.
Store failures raised by SQLAlchemy are never wrapped; classify_error()
maps them onto the same tags.
"""

from enum import Enum
from typing import Any, Iterable

from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)


class ErrorKind(str, Enum):
    """Kinds of failure a repository operation can end with."""

    NOT_FOUND = "not_found"
    CONSTRAINT_VIOLATION = "constraint_violation"
    CONNECTION = "connection"
    INVALID_FIELD = "invalid_field"
    STORE = "store"


class RepositoryError(Exception):
    """Base exception for repository operations."""

    kind: ErrorKind = ErrorKind.STORE


class EntityNotFoundException(RepositoryError):
    """Raised when the targeted record does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str = "Record not found",
        model: str | None = None,
        entity_id: Any = None,
    ):
        super().__init__(message)
        self.model = model
        self.entity_id = entity_id


class UnknownFieldError(RepositoryError):
    """Raised when attributes name fields the model does not map."""

    kind = ErrorKind.INVALID_FIELD

    def __init__(self, model: str, fields: Iterable[str]):
        self.model = model
        self.fields = sorted(fields)
        super().__init__(
            f"{model} has no field(s): {', '.join(self.fields)}"
        )


def classify_error(exc: BaseException) -> ErrorKind:
    """
    Map an exception onto an ErrorKind.

    Args:
        exc: Exception raised by a repository or by SQLAlchemy

    Returns:
        The matching ErrorKind; STORE for anything unrecognised
    """
    if isinstance(exc, RepositoryError):
        return exc.kind
    if isinstance(exc, IntegrityError):
        return ErrorKind.CONSTRAINT_VIOLATION
    if isinstance(
        exc,
        (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError),
    ):
        return ErrorKind.CONNECTION
    return ErrorKind.STORE
