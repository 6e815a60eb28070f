"""
Tests for the example endpoint and its OpenAPI documentation.

Tests follow AAA (Arrange, Act, Assert) pattern.
"""

from fastapi.testclient import TestClient

from crudbase.main import app


client = TestClient(app)


class TestExampleEndpoint:
    """Tests for GET /test."""

    def test_returns_ok_envelope(self):
        """
        Test that /test returns the base envelope with data "Ok.".

        Act: GET /test
        Assert: Status 200, success flag set, data is "Ok."
        """
        # Act
        response = client.get("/test")

        # Assert
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": None, "data": "Ok."}

    def test_response_carries_request_id(self):
        response = client.get("/test", headers={"X-Request-ID": "req-example-1"})

        assert response.headers["X-Request-ID"] == "req-example-1"


class TestExampleDocumentation:
    """Tests for the OpenAPI metadata attached to GET /test."""

    def test_operation_metadata(self):
        # Act
        schema = client.get("/api/v1/openapi.json").json()

        # Assert
        operation = schema["paths"]["/test"]["get"]
        assert operation["tags"] == ["Example v1"]
        assert operation["summary"] == "Test"
        assert operation["responses"]["200"]["description"] == "Test response"

    def test_tag_description(self):
        schema = client.get("/api/v1/openapi.json").json()

        tags = {tag["name"]: tag["description"] for tag in schema["tags"]}
        assert tags["Example v1"] == "Example endpoints"

    def test_response_schema_extends_base_envelope(self):
        schema = client.get("/api/v1/openapi.json").json()

        properties = schema["components"]["schemas"]["ExampleTestResponse"]["properties"]
        assert {"success", "message", "data"} <= set(properties)
        assert properties["data"]["type"] == "string"
        assert properties["data"]["examples"] == ["Ok."]
