"""Tests for request ID middleware."""

from fastapi.testclient import TestClient

from validly.api.middleware.request_id import get_request_id
from validly.main import create_app


class TestRequestIDMiddleware:
    """Tests for request ID middleware."""

    def test_request_id_in_response_headers(self):
        """Test that request ID is added to response headers."""
        client = TestClient(create_app())

        response = client.get("/health")
        assert "X-Request-ID" in response.headers
        assert response.headers["X-Request-ID"].startswith("req_")

    def test_request_id_format(self):
        """Test that request ID has correct format."""
        client = TestClient(create_app())

        request_id = client.get("/health").headers["X-Request-ID"]
        assert request_id.startswith("req_")
        assert len(request_id) == 36  # req_ (4) + 32 hex chars

    def test_custom_request_id_preserved(self):
        """Test that custom request ID from client is preserved."""
        client = TestClient(create_app())

        custom_id = "req_custom123456789012345678901234"
        response = client.get("/health", headers={"X-Request-ID": custom_id})
        assert response.headers["X-Request-ID"] == custom_id

    def test_request_id_unique_per_request(self):
        """Test that each request gets a unique request ID."""
        client = TestClient(create_app())

        id1 = client.get("/health").headers["X-Request-ID"]
        id2 = client.get("/health").headers["X-Request-ID"]
        assert id1 != id2

    def test_request_id_on_error_response(self):
        """Test that request ID is present on 400 responses."""
        client = TestClient(create_app())

        response = client.post("/validate", json={})
        assert response.status_code == 400
        assert response.headers["X-Request-ID"].startswith("req_")

    def test_request_id_on_not_found(self):
        """Test that request ID is present on unknown routes."""
        client = TestClient(create_app())

        response = client.get("/nonexistent")
        assert response.status_code == 404
        assert "X-Request-ID" in response.headers


class TestRequestIDContext:
    """Tests for request ID context variable."""

    def test_get_request_id_outside_context(self):
        """Test that get_request_id returns empty string outside request context."""
        assert get_request_id() == ""
