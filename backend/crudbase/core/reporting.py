"""
Exception reporting for the repository layer.

Repositories hand every store failure to a reporter before rolling back.
The default reporter writes one structured ERROR log entry per failure.
"""

from typing import Any, Protocol

from crudbase.core.exceptions import classify_error
from crudbase.core.logging_config import get_logger


logger = get_logger(__name__)


class Reporter(Protocol):
    """Callable that receives a caught exception plus logging context."""

    def __call__(self, exc: BaseException, **context: Any) -> None: ...


def report_exception(exc: BaseException, **context: Any) -> None:
    """
    Log a caught exception with its classified kind.

    Args:
        exc: The exception being reported
        **context: Extra structured fields (model, operation, ...)

    Example:
        >>> report_exception(err, model="Example", operation="bulk_create")
    """
    kind = classify_error(exc)
    model = context.get("model")
    operation = context.get("operation")

    if operation and model:
        message = f"{operation} failed on {model}: {exc}"
    else:
        message = f"Repository operation failed: {exc}"

    logger.error(
        message,
        extra={
            **context,
            "error_kind": kind.value,
            "exception_type": type(exc).__name__,
        },
        exc_info=(type(exc), exc, exc.__traceback__),
    )
