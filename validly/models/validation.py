"""Validation request/response models."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic.alias_generators import to_camel


class ErrorKind(StrEnum):
    """Uniform error taxonomy for validation outcomes."""

    INPUT_ERROR = "input_error"
    UNSUPPORTED_PROVIDER = "unsupported_provider"
    AUTH_ERROR = "auth_error"
    RATE_LIMITED = "rate_limited"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    NETWORK_ERROR = "network_error"
    GENERIC_INVALID = "generic_invalid"
    INTERNAL_ERROR = "internal_error"


class UsageSource(StrEnum):
    """Where a usage estimate came from."""

    HEADERS = "headers"
    BILLING = "billing"
    HEURISTIC = "heuristic"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ValidationRequest(_CamelModel):
    """Request model for the validate endpoint."""

    provider: str = Field(description="Provider identifier, e.g. 'openai'")
    api_key: SecretStr = Field(description="Credential to check; never stored or logged")

    @field_validator("provider", mode="before")
    @classmethod
    def strip_provider(cls, value: object) -> object:
        """Normalize the provider identifier."""
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("api_key", mode="before")
    @classmethod
    def strip_api_key(cls, value: object) -> object:
        """Trim surrounding whitespace from the credential."""
        if isinstance(value, str):
            return value.strip()
        return value


class TokenUsage(_CamelModel):
    """Best-effort quota estimate. Advisory, not billing data."""

    used: int = Field(ge=0, description="Estimated tokens consumed in the current period")
    limit: int = Field(gt=0, description="Estimated token limit for the current period")
    requests_used: int | None = Field(default=None, ge=0, description="Requests consumed")
    requests_limit: int | None = Field(default=None, ge=0, description="Request limit")
    reset_date: datetime | None = Field(default=None, description="When the quota resets")
    source: UsageSource = Field(description="Strategy that produced the estimate")


class ValidationResult(_CamelModel):
    """Response model for the validate endpoint."""

    is_valid: bool = Field(description="Whether the provider accepted the credential")
    error: str | None = Field(default=None, description="Human-readable failure reason")
    error_kind: ErrorKind | None = Field(default=None, description="Machine-readable failure tag")
    token_usage: TokenUsage | None = Field(default=None, description="Usage estimate, if any")
    has_real_time_data: bool | None = Field(
        default=None, description="Whether a usage estimate was produced"
    )
