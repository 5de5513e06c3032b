"""Authentication state tracking for Zenodo sessions.

The Zenodo API intermittently answers 401 Unauthorized or 403 Forbidden for
credentials that are actually valid. Each session keeps an
``AuthenticationState`` cell so the retry logic can tell a glitch worth one
re-verification from a token already known to be bad:

- NOT_TRIED: the token has never been verified
- SUCCEEDED: the last verification succeeded, auth errors are likely transient
- FAILED: the last verification failed, auth errors are final

Transitions only happen through ``Zenodo.verify_authentication()``; the
state is never reset automatically.
"""

from enum import Enum


class AuthenticationState(Enum):
    """Result of the most recent authentication verification."""
    NOT_TRIED = "not_tried"
    FAILED = "failed"
    SUCCEEDED = "succeeded"
