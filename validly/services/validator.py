"""Single-probe credential validity check."""

from dataclasses import dataclass, field
from time import perf_counter

import httpx

from validly.core.logging import get_logger
from validly.core.security import redact_secret
from validly.models.validation import ErrorKind
from validly.services.registry import ProviderDescriptor

logger = get_logger(__name__)

ERROR_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.AUTH_ERROR: "Invalid API key or insufficient permissions",
    ErrorKind.RATE_LIMITED: "Rate limit exceeded. Please try again later",
    ErrorKind.PROVIDER_UNAVAILABLE: "Provider service temporarily unavailable",
    ErrorKind.NETWORK_ERROR: "Network error. Please check your connection and try again",
    ErrorKind.GENERIC_INVALID: "Invalid API key",
}
FORBIDDEN_MESSAGE = "API key does not have required permissions"


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of one validity probe."""

    accepted: bool
    status_code: int | None = None
    error_kind: ErrorKind | None = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)

    @property
    def message(self) -> str | None:
        """User-facing explanation for a rejected probe."""
        if self.accepted or self.error_kind is None:
            return None
        if self.status_code == 403:
            return FORBIDDEN_MESSAGE
        return ERROR_MESSAGES[self.error_kind]


def classify_status(status_code: int) -> ErrorKind | None:
    """
    Map a probe status code onto the error taxonomy.

    Args:
        status_code: HTTP status returned by the provider

    Returns:
        None for 2xx, otherwise the matching error kind
    """
    if 200 <= status_code < 300:
        return None
    if status_code in (401, 403):
        return ErrorKind.AUTH_ERROR
    if status_code == 429:
        return ErrorKind.RATE_LIMITED
    if status_code >= 500:
        return ErrorKind.PROVIDER_UNAVAILABLE
    return ErrorKind.GENERIC_INVALID


class KeyValidator:
    """Issues one authenticated listing call and turns its outcome into a verdict."""

    async def probe(
        self,
        client: httpx.AsyncClient,
        descriptor: ProviderDescriptor,
        api_key: str,
    ) -> ProbeOutcome:
        """
        Check whether the provider accepts a key.

        No retries are attempted; a transport failure or timeout is reported
        as a network error.

        Args:
            client: HTTP client scoped to the current validation call
            descriptor: Provider capabilities
            api_key: Trimmed credential

        Returns:
            Probe outcome
        """
        start = perf_counter()
        try:
            response = await client.get(
                descriptor.probe_target(api_key),
                headers=descriptor.auth_headers(api_key),
            )
        except httpx.TransportError as e:
            # Covers timeouts, connect errors and protocol errors.
            logger.warning(
                "Provider probe failed before a response was received",
                extra={
                    "provider": descriptor.provider.value,
                    "error_type": type(e).__name__,
                    "error": redact_secret(str(e), api_key),
                },
            )
            return ProbeOutcome(accepted=False, error_kind=ErrorKind.NETWORK_ERROR)

        error_kind = classify_status(response.status_code)
        logger.info(
            "Provider probe completed",
            extra={
                "provider": descriptor.provider.value,
                "status_code": response.status_code,
                "accepted": error_kind is None,
                "duration_ms": round((perf_counter() - start) * 1000, 2),
            },
        )
        return ProbeOutcome(
            accepted=error_kind is None,
            status_code=response.status_code,
            error_kind=error_kind,
            headers=response.headers,
        )
