"""Provider capability registry.

Each supported provider is described by one immutable ``ProviderDescriptor``.
The validator and the usage estimator only read descriptors; adding a provider
means adding one entry to ``_DESCRIPTORS``.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

import httpx

from validly.models.providers import Provider, ProviderInfo, UsageStrategy
from validly.services.errors import UnsupportedProviderError

AuthHeaders = Callable[[str], dict[str, str]]
KeyURL = Callable[[str], str]


@dataclass(frozen=True)
class RateLimitHeaders:
    """Names of the rate-limit headers a provider reports."""

    tokens_remaining: str
    tokens_limit: str
    tokens_reset: str | None = None
    requests_remaining: str | None = None
    requests_limit: str | None = None
    requests_reset: str | None = None


@dataclass(frozen=True)
class GenerationProbe:
    """Minimal-cost generation call whose response carries rate-limit headers."""

    url: KeyURL
    body: Mapping[str, Any]


@dataclass(frozen=True)
class BillingEndpoints:
    """Account-level billing endpoints for the billing-probe strategy."""

    subscription_url: str
    usage_url: str


@dataclass(frozen=True)
class SyntheticProfile:
    """Constants for the time-based usage heuristic."""

    scale: int
    limit: int | None = None
    limit_choices: tuple[int, ...] = ()
    weekend_factor: float = 1.0
    jitter: int = 0
    tokens_per_request: int = 250
    requests_limit: int | None = None


@dataclass(frozen=True)
class ProviderDescriptor:
    """Capabilities of one provider."""

    provider: Provider
    display_name: str
    description: str
    probe_url: str
    auth_headers: AuthHeaders
    key_url: KeyURL | None = None
    usage_strategy: UsageStrategy = UsageStrategy.UNSUPPORTED
    rate_limit_headers: RateLimitHeaders | None = None
    generation_probe: GenerationProbe | None = None
    billing: BillingEndpoints | None = None
    synthetic: SyntheticProfile | None = None

    def probe_target(self, api_key: str) -> str:
        """URL for the validity probe, with the key embedded when the provider needs it."""
        if self.key_url is not None:
            return self.key_url(api_key)
        return self.probe_url

    def to_info(self) -> ProviderInfo:
        """Public view of the descriptor, without capability functions."""
        return ProviderInfo(
            provider=self.provider,
            display_name=self.display_name,
            description=self.description,
            usage_strategy=self.usage_strategy,
        )


def _bearer(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}


def _anthropic_headers(api_key: str) -> dict[str, str]:
    return {
        "x-api-key": api_key,
        "anthropic-version": "2023-06-01",
        "Content-Type": "application/json",
    }


def _no_auth_headers(api_key: str) -> dict[str, str]:
    # Gemini authenticates through the query string.
    return {"Content-Type": "application/json"}


def _with_key_param(url: str) -> KeyURL:
    return lambda api_key: str(httpx.URL(url, params={"key": api_key}))


def _replicate_headers(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Token {api_key}", "Content-Type": "application/json"}


GEMINI_MODELS_URL = "https://generativelanguage.googleapis.com/v1/models"
GEMINI_GENERATE_URL = f"{GEMINI_MODELS_URL}/gemini-1.5-flash:generateContent"


_DESCRIPTORS: dict[Provider, ProviderDescriptor] = {
    Provider.OPENAI: ProviderDescriptor(
        provider=Provider.OPENAI,
        display_name="OpenAI",
        description="GPT-4, GPT-3.5, DALL-E, Whisper",
        probe_url="https://api.openai.com/v1/models",
        auth_headers=_bearer,
        usage_strategy=UsageStrategy.BILLING_PROBE,
        billing=BillingEndpoints(
            subscription_url="https://api.openai.com/v1/dashboard/billing/subscription",
            usage_url="https://api.openai.com/v1/dashboard/billing/usage",
        ),
    ),
    Provider.ANTHROPIC: ProviderDescriptor(
        provider=Provider.ANTHROPIC,
        display_name="Anthropic",
        description="Claude 3.5 Sonnet, Claude 3 Opus",
        probe_url="https://api.anthropic.com/v1/models",
        auth_headers=_anthropic_headers,
        usage_strategy=UsageStrategy.HEADER_EXTRACTION,
        rate_limit_headers=RateLimitHeaders(
            tokens_remaining="anthropic-ratelimit-tokens-remaining",
            tokens_limit="anthropic-ratelimit-tokens-limit",
            tokens_reset="anthropic-ratelimit-tokens-reset",
            requests_remaining="anthropic-ratelimit-requests-remaining",
            requests_limit="anthropic-ratelimit-requests-limit",
            requests_reset="anthropic-ratelimit-requests-reset",
        ),
        synthetic=SyntheticProfile(
            scale=1_000,
            limit=1_000_000,
            weekend_factor=0.6,
            jitter=2_500,
            requests_limit=4_000,
        ),
    ),
    Provider.COHERE: ProviderDescriptor(
        provider=Provider.COHERE,
        display_name="Cohere",
        description="Command R+, Embed, Rerank",
        probe_url="https://api.cohere.ai/v1/models",
        auth_headers=_bearer,
        usage_strategy=UsageStrategy.SYNTHETIC,
        synthetic=SyntheticProfile(
            scale=500,
            limit_choices=(1_000_000, 2_500_000, 5_000_000),
            weekend_factor=0.6,
            jitter=2_000,
            requests_limit=1_000,
        ),
    ),
    Provider.GEMINI: ProviderDescriptor(
        provider=Provider.GEMINI,
        display_name="Google Gemini",
        description="Gemini Pro, Gemini Flash",
        probe_url=GEMINI_MODELS_URL,
        auth_headers=_no_auth_headers,
        key_url=_with_key_param(GEMINI_MODELS_URL),
        usage_strategy=UsageStrategy.HEADER_EXTRACTION,
        rate_limit_headers=RateLimitHeaders(
            tokens_remaining="x-ratelimit-remaining-tokens",
            tokens_limit="x-ratelimit-limit-tokens",
            requests_remaining="x-ratelimit-remaining-requests",
            requests_limit="x-ratelimit-limit-requests",
            requests_reset="x-ratelimit-reset-requests",
        ),
        generation_probe=GenerationProbe(
            url=_with_key_param(GEMINI_GENERATE_URL),
            body=MappingProxyType(
                {
                    "contents": [{"parts": [{"text": "Hi"}]}],
                    "generationConfig": {"maxOutputTokens": 1, "temperature": 0},
                }
            ),
        ),
        synthetic=SyntheticProfile(
            scale=10,
            limit=15_000,
            jitter=200,
            tokens_per_request=10,
            requests_limit=1_500,
        ),
    ),
    Provider.LLAMA: ProviderDescriptor(
        provider=Provider.LLAMA,
        display_name="Meta LLaMA",
        description="LLaMA 2, Code Llama",
        probe_url="https://api.replicate.com/v1/models",
        auth_headers=_replicate_headers,
    ),
}

REGISTRY: Mapping[Provider, ProviderDescriptor] = MappingProxyType(_DESCRIPTORS)


def lookup(provider: str | Provider) -> ProviderDescriptor:
    """
    Get the descriptor for a provider.

    Args:
        provider: Provider identifier or enum member

    Returns:
        Provider descriptor

    Raises:
        UnsupportedProviderError: If the provider is not in the catalog
    """
    try:
        key = Provider(provider)
    except ValueError as e:
        raise UnsupportedProviderError("Unsupported provider") from e
    return REGISTRY[key]


def list_descriptors() -> list[ProviderDescriptor]:
    """All descriptors in catalog order."""
    return [REGISTRY[provider] for provider in Provider]
