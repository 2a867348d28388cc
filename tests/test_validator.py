"""Tests for the single-probe key validator."""

import httpx
import pytest

from validly.models.providers import Provider
from validly.models.validation import ErrorKind
from validly.services.registry import lookup
from validly.services.validator import KeyValidator, classify_status


@pytest.mark.parametrize(
    ("status_code", "expected"),
    [
        (200, None),
        (204, None),
        (401, ErrorKind.AUTH_ERROR),
        (403, ErrorKind.AUTH_ERROR),
        (429, ErrorKind.RATE_LIMITED),
        (500, ErrorKind.PROVIDER_UNAVAILABLE),
        (503, ErrorKind.PROVIDER_UNAVAILABLE),
        (400, ErrorKind.GENERIC_INVALID),
        (404, ErrorKind.GENERIC_INVALID),
        (302, ErrorKind.GENERIC_INVALID),
    ],
)
def test_classify_status(status_code: int, expected: ErrorKind | None) -> None:
    """Test status code mapping onto the error taxonomy."""
    assert classify_status(status_code) == expected


class TestProbe:
    """Test KeyValidator.probe against a fake provider."""

    @pytest.mark.asyncio
    async def test_accepted_probe_sends_auth(self) -> None:
        """Test a 2xx response is accepted and the auth header is injected."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": []}, headers={"x-test": "1"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await KeyValidator().probe(client, lookup(Provider.OPENAI), "sk-test")

        assert outcome.accepted is True
        assert outcome.status_code == 200
        assert outcome.error_kind is None
        assert outcome.message is None
        assert outcome.headers["x-test"] == "1"
        assert len(seen) == 1
        assert seen[0].method == "GET"
        assert seen[0].url == "https://api.openai.com/v1/models"
        assert seen[0].headers["Authorization"] == "Bearer sk-test"

    @pytest.mark.asyncio
    async def test_gemini_probe_uses_key_url(self) -> None:
        """Test Gemini's key travels as a query parameter."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"models": []})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await KeyValidator().probe(client, lookup(Provider.GEMINI), "AIza-test")

        assert outcome.accepted is True
        assert seen[0].url.params["key"] == "AIza-test"

    @pytest.mark.asyncio
    async def test_unauthorized(self) -> None:
        """Test a 401 maps to an auth error with a permissions message."""
        transport = httpx.MockTransport(lambda request: httpx.Response(401))
        async with httpx.AsyncClient(transport=transport) as client:
            outcome = await KeyValidator().probe(client, lookup(Provider.COHERE), "bad")

        assert outcome.accepted is False
        assert outcome.error_kind == ErrorKind.AUTH_ERROR
        assert outcome.message == "Invalid API key or insufficient permissions"

    @pytest.mark.asyncio
    async def test_forbidden_has_distinct_message(self) -> None:
        """Test a 403 is an auth error with a missing-permissions message."""
        transport = httpx.MockTransport(lambda request: httpx.Response(403))
        async with httpx.AsyncClient(transport=transport) as client:
            outcome = await KeyValidator().probe(client, lookup(Provider.ANTHROPIC), "bad")

        assert outcome.error_kind == ErrorKind.AUTH_ERROR
        assert outcome.message == "API key does not have required permissions"

    @pytest.mark.asyncio
    async def test_response_body_not_forwarded(self) -> None:
        """Test provider error bodies never reach the message."""
        transport = httpx.MockTransport(
            lambda request: httpx.Response(400, json={"error": "secret internal detail"})
        )
        async with httpx.AsyncClient(transport=transport) as client:
            outcome = await KeyValidator().probe(client, lookup(Provider.OPENAI), "bad")

        assert outcome.error_kind == ErrorKind.GENERIC_INVALID
        assert outcome.message == "Invalid API key"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc_type",
        [httpx.ConnectTimeout, httpx.ReadTimeout, httpx.ConnectError, httpx.RemoteProtocolError],
    )
    async def test_transport_failure_is_network_error(self, exc_type: type[Exception]) -> None:
        """Test timeouts and connection failures map to a network error without retries."""
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise exc_type("boom", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            outcome = await KeyValidator().probe(client, lookup(Provider.OPENAI), "sk-test")

        assert outcome.accepted is False
        assert outcome.status_code is None
        assert outcome.error_kind == ErrorKind.NETWORK_ERROR
        assert outcome.message == "Network error. Please check your connection and try again"
        assert len(calls) == 1
