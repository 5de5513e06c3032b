"""Files attached to Zenodo depositions and records."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, NamedTuple

import httpx

from zenodo_client.resilience.error_detail import build_api_error
from zenodo_client.models import ZenodoFileValue, validate_file

if TYPE_CHECKING:
    from zenodo_client.zenodo import Zenodo

logger = logging.getLogger(__name__)


class Attachment(NamedTuple):
    """In-memory file to upload."""
    name: str
    content: bytes
    content_type: str = "application/octet-stream"


class ZenodoFile:
    """A file known to Zenodo, with access to its content."""

    def __init__(self, zenodo: Zenodo, value: Any):
        self.zenodo = zenodo
        self.value: ZenodoFileValue = validate_file(value)

    def __repr__(self) -> str:
        return f"ZenodoFile(name={self.value.name!r}, checksum={self.value.checksum!r})"

    @property
    def download_link(self) -> str | None:
        links = self.value.links
        return links.get("download") or links.get("content")

    async def get_content_response(self) -> httpx.Response:
        """Download the file content.

        The link is absolute, so the request goes straight to the session's
        HTTP client with the bearer token rather than through the retry core.

        Raises:
            ValueError: If the file has no download link
            ZenodoApiError: If the download does not succeed
        """
        link = self.download_link
        if not link:
            raise ValueError(f"File {self.value.name} has no download link")

        headers = {}
        if self.zenodo.access_token:
            headers["Authorization"] = f"Bearer {self.zenodo.access_token}"

        response = await self.zenodo.http.get(link, headers=headers, follow_redirects=True)
        if not response.is_success:
            raise await build_api_error(
                response, link, "GET", None, None, self.zenodo.logger
            )
        return response

    async def get_content(self) -> bytes:
        response = await self.get_content_response()
        return response.content
