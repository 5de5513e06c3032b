"""Retry classification of Zenodo response status codes."""

import logging

from zenodo_client.auth import AuthenticationState
from zenodo_client.resilience.session import ZenodoSession

logger = logging.getLogger(__name__)

# 408 Request Timeout and 429 Too Many Requests; every 5xx is retryable too
RETRYABLE_STATUS_CODES = frozenset({408, 429})
AUTH_STATUS_CODES = frozenset({401, 403})


def is_retryable_status(status_code: int) -> bool:
    """True for statuses that are retried without further checks."""
    return status_code in RETRYABLE_STATUS_CODES or 500 <= status_code <= 599


def is_auth_status(status_code: int) -> bool:
    return status_code in AUTH_STATUS_CODES


async def should_retry(status_code: int, session: ZenodoSession) -> bool:
    """Decide whether a failed attempt is worth another try.

    401/403 answers are re-verified once against the API root unless the
    session already knows its token is bad. The verification result itself
    is not inspected: any verification that completes makes the attempt
    retryable, and the updated state decides the next call.

    Args:
        status_code: Status of the failed response
        session: Session owning the authentication state

    Returns:
        True if the request should be attempted again
    """
    if is_retryable_status(status_code):
        return True

    if not is_auth_status(status_code):
        return False

    if session.authentication_state is AuthenticationState.FAILED:
        return False

    log = session.logger or logger
    log.debug(
        f"Authentication error ({status_code}) with state "
        f"{session.authentication_state.value}, verifying access token"
    )
    try:
        await session.verify_authentication()
    except Exception as e:
        log.warning(f"Authentication verification failed: {e}")
        return False

    return True
