"""Best-effort usage estimation for accepted keys.

Estimates are advisory. Every strategy runs inside ``UsageEstimator.estimate``,
which turns any failure into ``None`` so that estimation can never change the
outcome of a validation call.
"""

import math
import random
from collections.abc import Awaitable, Callable, Mapping
from datetime import UTC, date, datetime, timedelta
from typing import Any, Final

import httpx

from validly.core.logging import get_logger
from validly.core.security import redact_secret
from validly.models.providers import UsageStrategy
from validly.models.validation import TokenUsage, UsageSource
from validly.services.registry import ProviderDescriptor, RateLimitHeaders, SyntheticProfile
from validly.services.validator import ProbeOutcome

logger = get_logger(__name__)

Clock = Callable[[], datetime]

# Limits at or below this are treated as a daily free tier.
FREE_TIER_TOKEN_LIMIT: Final = 15_000
# Rough conversion at $0.002 per 1K tokens: one cent buys about 500 tokens.
TOKENS_PER_CENT: Final = 500
DEFAULT_HARD_LIMIT_USD: Final = 100.0
TOKENS_PER_REQUEST_ESTIMATE: Final = 100
# Reset header values above this are absolute epoch seconds, below it relative seconds.
EPOCH_SECONDS_THRESHOLD: Final = 1_000_000_000


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


def next_reset(limit: int, now: datetime) -> datetime:
    """
    Default quota reset for a limit when the provider reports none.

    Free-tier limits reset at the next midnight, anything larger on the first
    day of next month.

    Args:
        limit: Token limit for the period
        now: Current time (timezone-aware)

    Returns:
        Reset moment, always strictly after ``now``
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if limit <= FREE_TIER_TOKEN_LIMIT:
        return midnight + timedelta(days=1)
    if now.month == 12:
        return midnight.replace(year=now.year + 1, month=1, day=1)
    return midnight.replace(month=now.month + 1, day=1)


def parse_reset_header(value: str | None, now: datetime) -> datetime | None:
    """
    Parse a provider reset header.

    Accepts absolute epoch seconds, seconds relative to now, or an ISO-8601
    timestamp. Values that do not land strictly after ``now`` are ignored.
    """
    if not value:
        return None
    value = value.strip()

    reset: datetime | None
    try:
        seconds = float(value)
    except ValueError:
        try:
            reset = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if reset.tzinfo is None:
            reset = reset.replace(tzinfo=UTC)
    else:
        if not math.isfinite(seconds):
            return None
        try:
            if seconds > EPOCH_SECONDS_THRESHOLD:
                reset = datetime.fromtimestamp(seconds, UTC)
            else:
                reset = now + timedelta(seconds=seconds)
        except (OverflowError, ValueError, OSError):
            return None

    return reset if reset > now else None


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(float(value.strip()))
    except (ValueError, OverflowError):
        return None


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def usage_from_headers(
    headers: Mapping[str, str], names: RateLimitHeaders, now: datetime
) -> TokenUsage | None:
    """
    Build a usage estimate from rate-limit headers.

    Args:
        headers: Response headers (case-insensitive mapping)
        names: Header names reported by the provider
        now: Current time

    Returns:
        Usage estimate, or None when token remaining/limit are not both numeric
    """
    tokens_remaining = _parse_int(headers.get(names.tokens_remaining))
    tokens_limit = _parse_int(headers.get(names.tokens_limit))
    if tokens_remaining is None or tokens_limit is None or tokens_limit <= 0:
        return None

    requests_used: int | None = None
    requests_limit: int | None = None
    if names.requests_remaining and names.requests_limit:
        requests_remaining = _parse_int(headers.get(names.requests_remaining))
        requests_limit = _parse_int(headers.get(names.requests_limit))
        if requests_remaining is None or requests_limit is None or requests_limit < 0:
            requests_limit = None
        else:
            requests_used = max(0, requests_limit - requests_remaining)

    reset: datetime | None = None
    for header in (names.tokens_reset, names.requests_reset):
        if header:
            reset = parse_reset_header(headers.get(header), now)
            if reset is not None:
                break

    return TokenUsage(
        used=max(0, tokens_limit - tokens_remaining),
        limit=tokens_limit,
        requests_used=requests_used,
        requests_limit=requests_limit,
        reset_date=reset or next_reset(tokens_limit, now),
        source=UsageSource.HEADERS,
    )


def usage_from_billing(
    subscription: Mapping[str, Any], usage: Mapping[str, Any], now: datetime
) -> TokenUsage:
    """
    Convert billing summaries into a token estimate.

    Monetary usage (cents) and the account's hard spending cap (USD) are both
    converted with ``TOKENS_PER_CENT``.
    """
    total_cents = _as_number(usage.get("total_usage")) or 0.0
    used = max(0, math.floor(total_cents * TOKENS_PER_CENT))

    hard_limit_usd = _as_number(subscription.get("hard_limit_usd"))
    if hard_limit_usd is None or hard_limit_usd <= 0:
        hard_limit_usd = DEFAULT_HARD_LIMIT_USD
    limit = max(1, math.floor(hard_limit_usd * 100 * TOKENS_PER_CENT))

    daily_costs = usage.get("daily_costs")
    requests_used = len(daily_costs) if isinstance(daily_costs, list) else 0

    return TokenUsage(
        used=used,
        limit=limit,
        requests_used=requests_used,
        requests_limit=limit // TOKENS_PER_REQUEST_ESTIMATE,
        reset_date=next_reset(limit, now),
        source=UsageSource.BILLING,
    )


def month_bounds(today: date) -> tuple[date, date]:
    """First and last day of the month containing ``today``."""
    start = today.replace(day=1)
    if today.month == 12:
        next_month = date(today.year + 1, 1, 1)
    else:
        next_month = date(today.year, today.month + 1, 1)
    return start, next_month - timedelta(days=1)


StrategyFn = Callable[
    [httpx.AsyncClient, ProviderDescriptor, str, ProbeOutcome],
    Awaitable[TokenUsage | None],
]


class UsageEstimator:
    """
    Produces a quota estimate for an accepted key.

    The strategy is chosen by the provider descriptor. Clock and random
    source are injectable so the heuristic path is deterministic in tests.
    """

    def __init__(
        self,
        clock: Clock = utc_now,
        rng: random.Random | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """
        Initialize the estimator.

        Args:
            clock: Returns the current timezone-aware time
            rng: Random source for heuristic jitter and tier selection
            timeout_seconds: Timeout for each usage call, None to use the client's
        """
        self._clock = clock
        self._rng = rng if rng is not None else random.Random()
        self._timeout = timeout_seconds
        self._strategies: dict[UsageStrategy, StrategyFn] = {
            UsageStrategy.HEADER_EXTRACTION: self._estimate_from_headers,
            UsageStrategy.BILLING_PROBE: self._estimate_from_billing,
            UsageStrategy.SYNTHETIC: self._estimate_synthetic,
        }

    async def estimate(
        self,
        client: httpx.AsyncClient,
        descriptor: ProviderDescriptor,
        api_key: str,
        probe: ProbeOutcome,
    ) -> TokenUsage | None:
        """
        Estimate usage for an accepted key.

        Never raises: any failure is logged and reported as no usage data.

        Args:
            client: HTTP client scoped to the current validation call
            descriptor: Provider capabilities
            api_key: Trimmed credential
            probe: Outcome of the successful validity probe

        Returns:
            Usage estimate, or None when unsupported or unavailable
        """
        strategy = self._strategies.get(descriptor.usage_strategy)
        if strategy is None:
            return None

        try:
            usage = await strategy(client, descriptor, api_key, probe)
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "Usage estimation failed",
                extra={
                    "provider": descriptor.provider.value,
                    "strategy": descriptor.usage_strategy.value,
                    "error_type": type(e).__name__,
                    "error": redact_secret(str(e), api_key),
                },
            )
            return None

        logger.debug(
            "Usage estimation completed",
            extra={
                "provider": descriptor.provider.value,
                "strategy": descriptor.usage_strategy.value,
                "source": usage.source.value if usage else None,
            },
        )
        return usage

    def synthetic_usage(self, profile: SyntheticProfile) -> TokenUsage:
        """
        Time-based heuristic estimate for providers without usage telemetry.

        The base figure grows through the month with day-of-month and
        hour-of-day, is damped on weekends, and gets bounded jitter.
        """
        now = self._clock()
        base = (now.day * 24 + now.hour) * profile.scale
        if now.weekday() >= 5:
            base = int(base * profile.weekend_factor)
        jitter = self._rng.randint(-profile.jitter, profile.jitter) if profile.jitter else 0

        if profile.limit is not None:
            limit = profile.limit
        else:
            limit = self._rng.choice(profile.limit_choices)

        used = min(max(0, base + jitter), limit)
        requests_used = used // profile.tokens_per_request
        if profile.requests_limit is not None:
            requests_used = min(requests_used, profile.requests_limit)

        return TokenUsage(
            used=used,
            limit=limit,
            requests_used=requests_used,
            requests_limit=profile.requests_limit,
            reset_date=next_reset(limit, now),
            source=UsageSource.HEURISTIC,
        )

    def _fallback(self, descriptor: ProviderDescriptor) -> TokenUsage | None:
        if descriptor.synthetic is None:
            return None
        return self.synthetic_usage(descriptor.synthetic)

    def _request_kwargs(self) -> dict[str, Any]:
        return {} if self._timeout is None else {"timeout": self._timeout}

    async def _estimate_from_headers(
        self,
        client: httpx.AsyncClient,
        descriptor: ProviderDescriptor,
        api_key: str,
        probe: ProbeOutcome,
    ) -> TokenUsage | None:
        names = descriptor.rate_limit_headers
        if names is None:
            return self._fallback(descriptor)

        headers: Mapping[str, str] = probe.headers
        generation = descriptor.generation_probe
        if generation is not None:
            response = await client.post(
                generation.url(api_key),
                headers=descriptor.auth_headers(api_key),
                json=dict(generation.body),
                **self._request_kwargs(),
            )
            if not response.is_success:
                logger.info(
                    "Generation probe rejected, no usage data",
                    extra={
                        "provider": descriptor.provider.value,
                        "status_code": response.status_code,
                    },
                )
                return None
            headers = response.headers

        usage = usage_from_headers(headers, names, self._clock())
        if usage is None:
            # No real signal reported, fall back to the heuristic.
            return self._fallback(descriptor)
        return usage

    async def _estimate_from_billing(
        self,
        client: httpx.AsyncClient,
        descriptor: ProviderDescriptor,
        api_key: str,
        probe: ProbeOutcome,
    ) -> TokenUsage | None:
        billing = descriptor.billing
        if billing is None:
            return None
        headers = descriptor.auth_headers(api_key)

        subscription = await client.get(
            billing.subscription_url, headers=headers, **self._request_kwargs()
        )
        if not subscription.is_success:
            logger.info(
                "Billing subscription unavailable",
                extra={
                    "provider": descriptor.provider.value,
                    "status_code": subscription.status_code,
                },
            )
            return None

        now = self._clock()
        start, end = month_bounds(now.date())
        usage = await client.get(
            billing.usage_url,
            params={"start_date": start.isoformat(), "end_date": end.isoformat()},
            headers=headers,
            **self._request_kwargs(),
        )
        if not usage.is_success:
            logger.info(
                "Billing usage unavailable",
                extra={"provider": descriptor.provider.value, "status_code": usage.status_code},
            )
            return None

        return usage_from_billing(subscription.json(), usage.json(), now)

    async def _estimate_synthetic(
        self,
        client: httpx.AsyncClient,
        descriptor: ProviderDescriptor,
        api_key: str,
        probe: ProbeOutcome,
    ) -> TokenUsage | None:
        return self._fallback(descriptor)
