"""Pytest configuration and fixtures."""

import random
from collections.abc import Callable, Iterator
from datetime import UTC, datetime

import httpx
import pytest
from fastapi.testclient import TestClient

from validly.core.config import ValidationConfig
from validly.main import app
from validly.services.orchestrator import ValidationOrchestrator
from validly.services.usage import UsageEstimator

# Wednesday, mid-month, mid-afternoon.
FIXED_NOW = datetime(2026, 3, 11, 14, 30, tzinfo=UTC)

Handler = Callable[[httpx.Request], httpx.Response]


class FixedRandom(random.Random):
    """Random source with no jitter that always picks the first tier."""

    def randint(self, a: int, b: int) -> int:
        return 0

    def choice(self, seq):  # type: ignore[no-untyped-def]
        return seq[0]


class ProviderAPI:
    """Fake provider side of the wire that records every outbound request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.handler: Handler = lambda request: httpx.Response(200, json={"data": []})

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


@pytest.fixture
def provider_api() -> ProviderAPI:
    """Create a recording fake for provider APIs."""
    return ProviderAPI()


@pytest.fixture
def now() -> datetime:
    """The frozen current time used by deterministic fixtures."""
    return FIXED_NOW


@pytest.fixture
def fixed_clock(now: datetime) -> Callable[[], datetime]:
    """Clock frozen at FIXED_NOW."""
    return lambda: now


@pytest.fixture
def fixed_random() -> FixedRandom:
    """Random source without jitter that always picks the first tier."""
    return FixedRandom()


@pytest.fixture
def estimator(fixed_clock: Callable[[], datetime], fixed_random: FixedRandom) -> UsageEstimator:
    """Deterministic usage estimator."""
    return UsageEstimator(clock=fixed_clock, rng=fixed_random)


@pytest.fixture
def orchestrator(provider_api: ProviderAPI, estimator: UsageEstimator) -> ValidationOrchestrator:
    """Orchestrator wired to the fake provider API and a deterministic estimator."""
    return ValidationOrchestrator(
        ValidationConfig(probe_timeout_seconds=5.0, usage_timeout_seconds=5.0),
        estimator=estimator,
        transport=provider_api.transport,
    )


@pytest.fixture(scope="session")
def test_app() -> Iterator[TestClient]:
    """
    Create a test client for the FastAPI app.

    Yields:
        TestClient for making requests to the app
    """
    with TestClient(app) as client:
        yield client
