"""Resilient request core for the Zenodo API.

Provides rate limit parsing, retry classification, backoff scheduling and
the ``execute`` retry loop that every endpoint call goes through.
"""

from .backoff import compute_delay
from .classifier import is_retryable_status, should_retry
from .http_client import FormData, RequestSpec, build_headers, build_url, execute
from .policy import RetryPolicy
from .rate_limit import RateLimitSnapshot, parse_rate_limit, rate_limit_wait
from .session import ZenodoSession

__all__ = [
    "FormData",
    "RateLimitSnapshot",
    "RequestSpec",
    "RetryPolicy",
    "ZenodoSession",
    "build_headers",
    "build_url",
    "compute_delay",
    "execute",
    "is_retryable_status",
    "parse_rate_limit",
    "rate_limit_wait",
    "should_retry",
]
