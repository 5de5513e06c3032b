"""Exceptions raised by the Zenodo client.

Two failure shapes reach callers of the request core:

- ``ZenodoApiError``: Zenodo answered with a status other than the expected
  one and the request is not (or no longer) retried. Carries a
  ``FailureCause`` describing the request and the response.
- Network faults: the original exception raised by the HTTP transport
  (usually an ``httpx.TransportError``), re-raised unchanged once retries
  are exhausted.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx


class ZenodoError(Exception):
    """Base class for errors raised by this package."""


@dataclass(frozen=True)
class FailureCause:
    """Structured context of a failed Zenodo request."""

    url: str
    method: str
    content_type: str | None
    body: Any
    response: httpx.Response | None
    status: int
    status_text: str
    headers: dict[str, str] = field(default_factory=dict)
    detail: str | None = None


class ZenodoApiError(ZenodoError):
    """Zenodo answered with an unexpected status code."""

    def __init__(self, message: str, cause: FailureCause):
        super().__init__(message, cause)
        self.cause = cause

    def __str__(self) -> str:
        return self.args[0]

    @property
    def status_code(self) -> int:
        return self.cause.status

    @property
    def response(self) -> httpx.Response | None:
        return self.cause.response

    def __repr__(self) -> str:
        return (
            f"ZenodoApiError(status={self.cause.status}, "
            f"method={self.cause.method}, url={self.cause.url!r})"
        )
