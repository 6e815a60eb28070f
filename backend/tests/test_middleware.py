"""
Tests for middleware components.

This module tests:
- RequestIDMiddleware (correlation ID tracking)
- LoggingMiddleware (request/response logging)

Tests follow AAA (Arrange, Act, Assert) pattern.
"""

import uuid
from unittest.mock import patch

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from crudbase.middleware.request_id import RequestIDMiddleware
from crudbase.middleware.logging import LoggingMiddleware


def build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/echo")
    async def echo(request: Request):
        return {"request_id": request.state.request_id}

    @app.get("/boom")
    async def boom():
        raise ValueError("Test exception")

    return app


class TestRequestIDMiddleware:
    """Tests for request ID correlation middleware."""

    def test_request_id_generated_when_missing(self):
        """
        Test that request ID is generated when not provided.

        Arrange: App with RequestIDMiddleware
        Act: Make request without X-Request-ID header
        Assert: Response has X-Request-ID header with valid UUID
        """
        # Arrange
        client = TestClient(build_app())

        # Act
        response = client.get("/echo")

        # Assert
        assert response.status_code == 200
        request_id = response.headers["X-Request-ID"]
        uuid.UUID(request_id)  # raises if not a UUID
        assert response.json()["request_id"] == request_id

    def test_request_id_preserved_from_header(self):
        client = TestClient(build_app())

        response = client.get("/echo", headers={"X-Request-ID": "custom-request-id-123"})

        assert response.headers["X-Request-ID"] == "custom-request-id-123"
        assert response.json()["request_id"] == "custom-request-id-123"

    def test_request_id_different_per_request(self):
        client = TestClient(build_app())

        ids = {client.get("/echo").headers["X-Request-ID"] for _ in range(3)}

        assert len(ids) == 3


class TestLoggingMiddleware:
    """Tests for request/response logging middleware."""

    def test_logs_start_and_completion(self):
        """
        Test that logging middleware logs request start and completion.

        Arrange: App with both middleware, mock logger
        Act: Make request
        Assert: Completion log carries status, latency and request ID
        """
        # Arrange
        client = TestClient(build_app())

        with patch("crudbase.middleware.logging.logger") as mock_logger:
            # Act
            response = client.get("/echo?param=value", headers={"X-Request-ID": "req-456"})

        # Assert
        assert response.status_code == 200
        messages = [call.args[0] for call in mock_logger.info.call_args_list]
        assert messages == ["Request started", "Request completed"]

        started = mock_logger.info.call_args_list[0].kwargs["extra"]
        assert started["query_params"] == "param=value"

        completed = mock_logger.info.call_args_list[1].kwargs["extra"]
        assert completed["status_code"] == 200
        assert completed["latency_ms"] >= 0
        assert completed["request_id"] == "req-456"
        assert completed["path"] == "/echo"

    def test_logs_exceptions(self):
        # Arrange
        client = TestClient(build_app())

        with patch("crudbase.middleware.logging.logger") as mock_logger:
            # Act
            with pytest.raises(ValueError):
                client.get("/boom")

        # Assert
        mock_logger.error.assert_called_once()
        call = mock_logger.error.call_args
        assert "Request failed" in call.args[0]
        assert call.kwargs["extra"]["exception_type"] == "ValueError"
        assert call.kwargs["exc_info"] is True
