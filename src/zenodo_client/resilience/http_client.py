"""Resilient request core for the Zenodo API.

Every Zenodo endpoint funnels through ``execute()``, which turns the
rate-limited and occasionally flaky upstream API into a single outcome per
logical call: either a response with the expected status, or one raised
exception. Intermediate failures are retried transparently:

- 408, 429 and 5xx answers are retried with backoff, honouring the rate
  limit headers on 429
- 401/403 answers trigger one token verification unless the session already
  knows its token is bad
- transport faults are retried with the same backoff and the original
  exception is re-raised once the budget is spent

The attempt counter is local to each call so concurrent calls on one
session never share retry state.
"""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

import httpx

from zenodo_client.errors import ZenodoApiError
from zenodo_client.resilience.backoff import compute_delay, uses_rate_limit_wait
from zenodo_client.resilience.classifier import should_retry
from zenodo_client.resilience.error_detail import build_api_error
from zenodo_client.resilience.policy import RetryPolicy
from zenodo_client.resilience.rate_limit import parse_rate_limit
from zenodo_client.resilience.session import ZenodoSession

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


@dataclass
class FormData:
    """Multipart form payload.

    ``files`` is handed to httpx as-is so the transport sets its own
    multipart boundary header.
    """

    files: list[tuple[str, tuple[str, Any, str]]] = field(default_factory=list)
    data: dict[str, str] = field(default_factory=dict)

    def append(
        self,
        name: str,
        content: Any,
        filename: str,
        content_type: str = "application/octet-stream",
    ) -> None:
        self.files.append((name, (filename, content, content_type)))


@dataclass(frozen=True)
class RequestSpec:
    """Description of one logical Zenodo request."""

    route: str
    method: str = "GET"
    body: str | bytes | FormData | None = None
    content_type: str | None = None  # None: infer from body
    search_params: Mapping[str, str] | None = None
    expected_status: int = 200

    @property
    def effective_content_type(self) -> str | None:
        """Explicit content type, else JSON unless the body is multipart."""
        if self.content_type is not None:
            return self.content_type
        if isinstance(self.body, FormData):
            return None
        return JSON_CONTENT_TYPE


def build_url(base_url: str, route: str, search_params: Mapping[str, str] | None = None) -> str:
    """Join base URL, route and URL-encoded query parameters (order preserved)."""
    url = base_url + route.lstrip("/")
    if search_params:
        url = f"{url}?{urlencode(list(search_params.items()))}"
    return url


def build_headers(access_token: str | None, content_type: str | None) -> dict[str, str]:
    headers = {}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if content_type:
        headers["Content-Type"] = content_type
    return headers


async def _send(
    session: ZenodoSession,
    spec: RequestSpec,
    url: str,
    headers: dict[str, str],
) -> httpx.Response:
    if isinstance(spec.body, FormData):
        return await session.http.request(
            spec.method,
            url,
            headers=headers,
            files=spec.body.files,
            data=spec.body.data or None,
        )
    return await session.http.request(
        spec.method,
        url,
        headers=headers,
        content=spec.body,
    )


async def execute(
    session: ZenodoSession,
    spec: RequestSpec,
    policy: RetryPolicy | None = None,
) -> httpx.Response:
    """Perform a request with retry, backoff and re-authentication.

    Args:
        session: Zenodo session providing base URL, token, logger and HTTP client
        spec: The request to perform
        policy: Retry policy (defaults to ``RetryPolicy()``)

    Returns:
        The response whose status equals ``spec.expected_status``

    Raises:
        ZenodoApiError: On a non-retryable status, or a retryable one once
            ``policy.max_retries`` retries are spent
        Exception: The original transport error once retries are spent
    """
    if policy is None:
        policy = RetryPolicy()

    log = session.logger or logger
    url = build_url(session.base_url, spec.route, spec.search_params)
    content_type = spec.effective_content_type
    attempt = 0

    while True:
        headers = build_headers(session.access_token, content_type)

        try:
            response = await _send(session, spec, url, headers)
        except ZenodoApiError:
            # Already a complete failure from an inner layer
            raise
        except Exception as e:
            if attempt >= policy.max_retries:
                log.error(f"Network error after {attempt} retries: {e}")
                raise
            delay = compute_delay(attempt, policy)
            log.warning(
                f"Network error: {e}. Waiting {delay:.2f}s before retry "
                f"{attempt + 1}/{policy.max_retries}"
            )
            await asyncio.sleep(delay)
            attempt += 1
            continue

        snapshot = parse_rate_limit(response.headers)
        if snapshot is not None:
            log.debug(
                f"Rate limit status: {snapshot.remaining}/{snapshot.limit} remaining, "
                f"resets at {snapshot.reset}"
            )

        if response.status_code == spec.expected_status:
            if attempt > 0:
                log.info(f"Request succeeded after {attempt} retries")
            return response

        retryable = await should_retry(response.status_code, session)
        if not retryable or attempt >= policy.max_retries:
            error = await build_api_error(
                response, url, spec.method, content_type, spec.body, log
            )
            log.error(
                f"Error fetching {url} with {spec.method} and {content_type}: {error}"
            )
            raise error

        delay = compute_delay(attempt, policy, response, snapshot)
        if uses_rate_limit_wait(response, snapshot, policy):
            log.warning(
                f"Rate limit exceeded. Waiting {delay:.2f}s before retry "
                f"{attempt + 1}/{policy.max_retries}"
            )
        else:
            log.warning(
                f"Retryable error ({response.status_code}). Waiting {delay:.2f}s "
                f"before retry {attempt + 1}/{policy.max_retries}"
            )
        await asyncio.sleep(delay)
        attempt += 1
