"""Tests for health check and provider catalog endpoints."""

from fastapi.testclient import TestClient

from validly.models.providers import Provider


def test_health_check(test_app: TestClient) -> None:
    """
    Test health check endpoint.

    Args:
        test_app: Test client fixture
    """
    response = test_app.get("/health")

    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "Validly"
    assert data["version"] == "0.1.0"
    assert "timestamp" in data


def test_health_check_response_schema(test_app: TestClient) -> None:
    """Test that health check response has correct schema."""
    data = test_app.get("/health").json()

    for field in ["status", "timestamp", "service", "version"]:
        assert field in data, f"Missing required field: {field}"
        assert isinstance(data[field], str)


def test_list_providers(test_app: TestClient) -> None:
    """Test the catalog lists every supported provider with its usage strategy."""
    response = test_app.get("/providers")

    assert response.status_code == 200
    data = response.json()
    assert [entry["provider"] for entry in data] == [provider.value for provider in Provider]

    by_provider = {entry["provider"]: entry for entry in data}
    assert by_provider["openai"] == {
        "provider": "openai",
        "displayName": "OpenAI",
        "description": "GPT-4, GPT-3.5, DALL-E, Whisper",
        "usageStrategy": "billing_probe",
    }
    assert by_provider["llama"]["usageStrategy"] == "unsupported"
