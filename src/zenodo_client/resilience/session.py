"""Interface the request core expects from a Zenodo session."""

from typing import Any, Protocol

import httpx

from zenodo_client.auth import AuthenticationState


class ZenodoSession(Protocol):
    """Shared state of one Zenodo client instance.

    ``authentication_state`` is the only mutable piece; it is written by
    ``verify_authentication()`` and read by the retry classifier.
    """

    base_url: str
    access_token: str | None
    logger: Any
    http: httpx.AsyncClient
    authentication_state: AuthenticationState

    async def verify_authentication(self) -> bool:
        ...
