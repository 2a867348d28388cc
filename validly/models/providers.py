"""Provider-related models and enums."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Provider(StrEnum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    COHERE = "cohere"
    GEMINI = "gemini"
    LLAMA = "llama"


class UsageStrategy(StrEnum):
    """How quota usage is inferred for a provider."""

    HEADER_EXTRACTION = "header_extraction"
    BILLING_PROBE = "billing_probe"
    SYNTHETIC = "synthetic"
    UNSUPPORTED = "unsupported"


class ProviderInfo(BaseModel):
    """Public catalog entry for a supported provider."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    provider: Provider = Field(description="Provider identifier")
    display_name: str = Field(description="Human-readable provider name")
    description: str = Field(description="Notable models offered by the provider")
    usage_strategy: UsageStrategy = Field(description="How usage is estimated for this provider")
