"""
Tests for error classification and exception reporting.
"""

from unittest.mock import patch

from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    ProgrammingError,
)

from crudbase.core.exceptions import (
    EntityNotFoundException,
    ErrorKind,
    RepositoryError,
    UnknownFieldError,
    classify_error,
)
from crudbase.core.reporting import report_exception


class TestClassifyError:
    """Tests for classify_error()."""

    def test_repository_errors_keep_their_kind(self):
        assert classify_error(EntityNotFoundException()) is ErrorKind.NOT_FOUND
        assert classify_error(UnknownFieldError("Example", ["x"])) is ErrorKind.INVALID_FIELD
        assert classify_error(RepositoryError("boom")) is ErrorKind.STORE

    def test_integrity_error(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        assert classify_error(exc) is ErrorKind.CONSTRAINT_VIOLATION

    def test_connection_errors(self):
        assert classify_error(OperationalError("SELECT 1", {}, Exception("gone"))) is ErrorKind.CONNECTION
        assert classify_error(DisconnectionError()) is ErrorKind.CONNECTION

    def test_other_errors_are_store_failures(self):
        assert classify_error(ProgrammingError("SELECT", {}, Exception("syntax"))) is ErrorKind.STORE
        assert classify_error(ValueError("nope")) is ErrorKind.STORE


class TestUnknownFieldError:
    def test_fields_sorted_in_message(self):
        exc = UnknownFieldError("Example", {"zeta", "alpha"})

        assert exc.fields == ["alpha", "zeta"]
        assert str(exc) == "Example has no field(s): alpha, zeta"


class TestEntityNotFoundException:
    def test_carries_lookup_context(self):
        exc = EntityNotFoundException(model="Example", entity_id="abc")

        assert str(exc) == "Record not found"
        assert exc.model == "Example"
        assert exc.entity_id == "abc"


class TestReportException:
    """Tests for the default reporter."""

    def test_logs_error_with_context(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        with patch("crudbase.core.reporting.logger") as mock_logger:
            report_exception(exc, model="Example", operation="bulk_create")

        mock_logger.error.assert_called_once()
        call = mock_logger.error.call_args
        assert call.args[0].startswith("bulk_create failed on Example:")
        assert call.kwargs["extra"]["model"] == "Example"
        assert call.kwargs["extra"]["operation"] == "bulk_create"
        assert call.kwargs["extra"]["error_kind"] == "constraint_violation"
        assert call.kwargs["extra"]["exception_type"] == "IntegrityError"
        assert call.kwargs["exc_info"][1] is exc

    def test_logs_generic_message_without_context(self):
        exc = ValueError("bad value")

        with patch("crudbase.core.reporting.logger") as mock_logger:
            report_exception(exc)

        call = mock_logger.error.call_args
        assert call.args[0] == "Repository operation failed: bad value"
        assert call.kwargs["extra"]["error_kind"] == "store"
