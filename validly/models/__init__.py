"""Data models for the application."""

from validly.models.providers import Provider, ProviderInfo, UsageStrategy
from validly.models.validation import (
    ErrorKind,
    TokenUsage,
    UsageSource,
    ValidationRequest,
    ValidationResult,
)

__all__ = [
    "ErrorKind",
    "Provider",
    "ProviderInfo",
    "TokenUsage",
    "UsageSource",
    "UsageStrategy",
    "ValidationRequest",
    "ValidationResult",
]
