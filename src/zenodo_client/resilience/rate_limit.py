"""Rate limit header parsing for Zenodo responses.

Zenodo reports its quota on every response with three headers::

    X-RateLimit-Limit: 133
    X-RateLimit-Remaining: 0
    X-RateLimit-Reset: 1700000000   (epoch seconds)

All three must be present and integer-valued for a snapshot to be produced;
otherwise the quota is unknown and callers fall back to generic backoff.
"""

import time
from collections.abc import Mapping
from dataclasses import dataclass

LIMIT_HEADER = "x-ratelimit-limit"
REMAINING_HEADER = "x-ratelimit-remaining"
RESET_HEADER = "x-ratelimit-reset"

# Seconds added to every rate limit wait to absorb client/server clock skew
CLOCK_SKEW_BUFFER = 1.0


@dataclass(frozen=True)
class RateLimitSnapshot:
    """Decoded rate limit headers of a single response."""

    limit: int
    remaining: int
    reset: int  # epoch seconds


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def parse_rate_limit(headers: Mapping[str, str]) -> RateLimitSnapshot | None:
    """Build a snapshot from response headers.

    Args:
        headers: Response headers (``httpx.Headers`` or any str mapping;
            lookup is case-insensitive)

    Returns:
        RateLimitSnapshot, or None when any header is missing or malformed
    """
    lowered = {key.lower(): value for key, value in headers.items()}

    limit = _parse_int(lowered.get(LIMIT_HEADER))
    remaining = _parse_int(lowered.get(REMAINING_HEADER))
    reset = _parse_int(lowered.get(RESET_HEADER))

    if limit is None or remaining is None or reset is None:
        return None

    return RateLimitSnapshot(limit=limit, remaining=remaining, reset=reset)


def rate_limit_wait(snapshot: RateLimitSnapshot, now: float | None = None) -> float:
    """Seconds to wait before the quota allows another request.

    Returns 0 while requests remain. Once the quota is spent, waits until the
    reset time plus ``CLOCK_SKEW_BUFFER``.
    """
    if snapshot.remaining > 0:
        return 0.0

    if now is None:
        now = time.time()

    return max(0.0, snapshot.reset - now) + CLOCK_SKEW_BUFFER
