"""Delay computation between retry attempts."""

import random

import httpx

from zenodo_client.resilience.policy import RetryPolicy
from zenodo_client.resilience.rate_limit import RateLimitSnapshot, rate_limit_wait

# Upper bound (exclusive) of the random jitter added to generic backoff
MAX_JITTER = 1.0


def uses_rate_limit_wait(
    response: httpx.Response | None,
    snapshot: RateLimitSnapshot | None,
    policy: RetryPolicy,
) -> bool:
    """True when the next delay comes from the rate limit headers."""
    return (
        response is not None
        and response.status_code == 429
        and policy.respect_rate_limit
        and snapshot is not None
    )


def compute_delay(
    attempt: int,
    policy: RetryPolicy,
    response: httpx.Response | None = None,
    snapshot: RateLimitSnapshot | None = None,
) -> float:
    """Seconds to sleep before retrying.

    Rate limited responses with usable headers wait exactly until the quota
    resets (no jitter). Everything else, including network faults where no
    response exists, uses ``base_delay * 2**attempt`` (or ``base_delay``
    with linear backoff) plus jitter in ``[0, MAX_JITTER)``.

    Args:
        attempt: Zero-based index of the attempt that just failed
        policy: Retry policy of the call
        response: Failed response, None for network faults
        snapshot: Parsed rate limit headers of ``response``, if any
    """
    if uses_rate_limit_wait(response, snapshot, policy):
        return rate_limit_wait(snapshot)

    if policy.use_exponential_backoff:
        delay = policy.base_delay * (2 ** attempt)
    else:
        delay = policy.base_delay

    return delay + random.random() * MAX_JITTER
