"""Validation entry point composing registry, validator and usage estimator."""

from collections.abc import Iterator
from contextlib import contextmanager

import httpx
from pydantic import SecretStr

from validly.core.config import ValidationConfig
from validly.core.logging import get_logger
from validly.models.validation import ValidationRequest, ValidationResult
from validly.services import registry
from validly.services.errors import InputValidationError, InternalValidationError
from validly.services.usage import UsageEstimator
from validly.services.validator import KeyValidator

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again"


class _Credential:
    """Holds a trimmed key for the duration of one call."""

    __slots__ = ("_value",)

    def __init__(self, value: str) -> None:
        self._value: str | None = value

    @property
    def value(self) -> str:
        if self._value is None:
            raise RuntimeError("Credential used outside its scope")
        return self._value

    def discard(self) -> None:
        self._value = None

    def __repr__(self) -> str:
        return "_Credential('**********')"


@contextmanager
def credential_scope(secret: SecretStr) -> Iterator[_Credential]:
    """
    Expose a key only inside a ``with`` block.

    The reference is dropped when the block exits, whether it returns or
    raises.
    """
    credential = _Credential(secret.get_secret_value().strip())
    try:
        yield credential
    finally:
        credential.discard()


class ValidationOrchestrator:
    """
    Validates one provider credential per call.

    Each call is independent: it opens its own HTTP client, issues the
    validity probe, and only if the key was accepted asks the usage
    estimator for a best-effort estimate.
    """

    def __init__(
        self,
        config: ValidationConfig,
        validator: KeyValidator | None = None,
        estimator: UsageEstimator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Timeouts and usage toggle
            validator: Key validator, defaults to a new instance
            estimator: Usage estimator, defaults to one using the configured usage timeout
            transport: Optional HTTP transport, mainly for tests
        """
        self.config = config
        self.validator = validator or KeyValidator()
        self.estimator = estimator or UsageEstimator(
            timeout_seconds=config.usage_timeout_seconds
        )
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.probe_timeout_seconds),
            transport=self._transport,
        )

    async def validate(self, request: ValidationRequest) -> ValidationResult:
        """
        Validate a credential and estimate its usage.

        Args:
            request: Provider and key to check

        Returns:
            Validation result; rejected keys are a normal result, not an error

        Raises:
            InputValidationError: If the provider or key is empty
            UnsupportedProviderError: If the provider is not in the catalog
            InternalValidationError: For any unexpected failure
        """
        if not request.provider.strip():
            raise InputValidationError("Provider and API key are required")
        api_key = request.api_key.get_secret_value().strip()
        if not api_key:
            raise InputValidationError("API key cannot be empty")
        # Keys travel in HTTP headers, which only carry printable ASCII.
        if not (api_key.isascii() and api_key.isprintable()):
            raise InputValidationError("API key contains invalid characters")

        descriptor = registry.lookup(request.provider)

        try:
            with credential_scope(request.api_key) as credential:
                async with self._client() as client:
                    outcome = await self.validator.probe(client, descriptor, credential.value)

                    if not outcome.accepted:
                        return ValidationResult(
                            is_valid=False,
                            error=outcome.message,
                            error_kind=outcome.error_kind,
                        )

                    token_usage = None
                    if self.config.usage_enabled:
                        token_usage = await self.estimator.estimate(
                            client, descriptor, credential.value, outcome
                        )
        except Exception as e:
            logger.error(
                "Validation failed unexpectedly",
                extra={"provider": descriptor.provider.value, "error_type": type(e).__name__},
            )
            raise InternalValidationError(INTERNAL_ERROR_MESSAGE) from e

        return ValidationResult(
            is_valid=True,
            token_usage=token_usage,
            has_real_time_data=token_usage is not None,
        )
