"""Services for the application."""

from validly.services.errors import (
    InputValidationError,
    InternalValidationError,
    KeyCheckError,
    UnsupportedProviderError,
)
from validly.services.orchestrator import ValidationOrchestrator
from validly.services.usage import UsageEstimator
from validly.services.validator import KeyValidator, ProbeOutcome

__all__ = [
    "InputValidationError",
    "InternalValidationError",
    "KeyCheckError",
    "KeyValidator",
    "ProbeOutcome",
    "UnsupportedProviderError",
    "UsageEstimator",
    "ValidationOrchestrator",
]
