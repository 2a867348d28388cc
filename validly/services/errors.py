"""Exceptions raised by the validation services."""

from validly.models.validation import ErrorKind


class KeyCheckError(Exception):
    """Base exception for failures that end a validation call without a verdict."""

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputValidationError(KeyCheckError):
    """Raised when the provider or key is missing or blank."""

    kind = ErrorKind.INPUT_ERROR


class UnsupportedProviderError(KeyCheckError):
    """Raised when the provider is not in the registry."""

    kind = ErrorKind.UNSUPPORTED_PROVIDER


class InternalValidationError(KeyCheckError):
    """Raised when validation fails for a reason unrelated to the provider's answer."""

    kind = ErrorKind.INTERNAL_ERROR
