"""Records: the current (InvenioRDM) generation of Zenodo uploads."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from zenodo_client.files import Attachment, ZenodoFile
from zenodo_client.models import ZenodoRecord, ZenodoReview, validate_record, validate_review
from zenodo_client.utils.zip import zip_files

if TYPE_CHECKING:
    from zenodo_client.zenodo import Zenodo

logger = logging.getLogger(__name__)

_REQUESTS_PREFIX = re.compile(r".*requests/")


def file_route(record_id: str | int | None, filename: str) -> str:
    """Draft file route with the filename escaped as a single path segment."""
    return f"records/{record_id}/draft/files/{quote(filename, safe='')}"


def to_requests_route(url: str) -> str:
    """Reduce an absolute request link to its ``requests/...`` API route."""
    return _REQUESTS_PREFIX.sub("requests/", url, count=1)


class Record:
    """A Zenodo record (draft or published) bound to its session."""

    def __init__(self, zenodo: Zenodo, value: Any):
        self.zenodo = zenodo
        self.value: ZenodoRecord = validate_record(value)

    def __repr__(self) -> str:
        return f"Record(id={self.value.id!r})"

    @property
    def id(self) -> str | int | None:
        return self.value.id

    @property
    def _log(self):
        return self.zenodo.logger or logger

    async def upload_files(self, attachments: Sequence[Attachment]) -> list[ZenodoFile]:
        """Upload files to the record draft.

        Follows the three step draft upload: declare all file keys, then
        upload and commit each file's content concurrently.
        """
        await self.zenodo.request(
            f"records/{self.id}/draft/files",
            method="POST",
            body=json.dumps([{"key": attachment.name} for attachment in attachments]),
            expected_status=201,
        )

        async def upload(attachment: Attachment) -> ZenodoFile:
            await self.zenodo.request(
                f"{file_route(self.id, attachment.name)}/content",
                method="PUT",
                body=attachment.content,
                content_type="application/octet-stream",
            )
            response = await self.zenodo.request(
                f"{file_route(self.id, attachment.name)}/commit",
                method="POST",
            )
            return ZenodoFile(self.zenodo, response.json())

        files = await asyncio.gather(*(upload(attachment) for attachment in attachments))
        self._log.info(f"Uploaded {len(files)} files to record {self.id}")
        return list(files)

    async def upload_files_as_zip(
        self,
        attachments: Sequence[Attachment],
        zip_name: str,
    ) -> list[ZenodoFile]:
        return await self.upload_files([zip_files(attachments, zip_name)])

    async def list_files(self) -> list[ZenodoFile]:
        response = await self.zenodo.request(f"records/{self.id}/draft/files")
        data = response.json()
        entries = data.get("entries") or []

        if not entries:
            self._log.info(f"No files found for record {self.id}")
            return []
        if data.get("links", {}).get("next"):
            # TODO: follow links.next once draft file listings are paginated in practice
            self._log.warning(
                f"Multiple pages of files found for record {self.id}. "
                f"Only the first page is returned."
            )

        self._log.info(f"Listed {len(entries)} files for record {self.id}")
        return [ZenodoFile(self.zenodo, entry) for entry in entries]

    async def delete_file(self, filename: str) -> None:
        await self.zenodo.request(
            file_route(self.id, filename),
            method="DELETE",
            expected_status=204,
        )
        self._log.info(f"Deleted file {filename} for record {self.id}")

    async def delete_all_files(self) -> None:
        for file in await self.list_files():
            await self.delete_file(file.value.key)
        self._log.info(f"Deleted all files for record {self.id}")

    async def retrieve_file(self, filename: str) -> ZenodoFile:
        response = await self.zenodo.request(file_route(self.id, filename))
        file = ZenodoFile(self.zenodo, response.json())
        self._log.info(f"Retrieved file {filename} for record {self.id}")
        return file

    async def update(self, metadata: dict[str, Any], is_published: bool = False) -> Record:
        """Replace the metadata of the draft, or of the published record."""
        route = f"records/{self.id}" if is_published else f"records/{self.id}/draft"
        response = await self.zenodo.request(
            route,
            method="PUT",
            body=json.dumps({"metadata": metadata}),
        )
        record = Record(self.zenodo, response.json())
        self._log.info(f"Updated record {self.id}")
        return record

    async def publish(self) -> Record:
        response = await self.zenodo.request(
            f"records/{self.id}/actions/publish",
            method="POST",
            expected_status=201,
        )
        record = Record(self.zenodo, response.json())
        self._log.info(f"Published record {self.id}")
        return record

    async def new_version(self) -> Record:
        response = await self.zenodo.request(
            f"records/{self.id}/actions/newversion",
            method="POST",
            expected_status=201,
        )
        record = Record(self.zenodo, response.json())
        self._log.info(f"Created new version for record {self.id}")
        return record

    async def submit_for_review(self, url: str | None = None) -> ZenodoReview:
        """Submit the record's pending review request.

        Args:
            url: Submit link of the request. When omitted, the open requests
                are searched for the one targeting this record.

        Raises:
            LookupError: If no request targets this record
        """
        if url:
            route = to_requests_route(url)
            response = await self.zenodo.request(route, method="POST")
            self._log.info(f"Submitted record {self.id} for review via {route}")
            return validate_review(response.json())

        reviews = await self.zenodo.retrieve_requests()
        review = next(
            (review for review in reviews if review.record_id == str(self.id)),
            None,
        )
        if review is None:
            raise LookupError(f"No review request found for record {self.id}")

        submit_link = review.links.actions.get("submit")
        if not submit_link:
            raise LookupError(f"Review request {review.id} has no submit action")

        await self.zenodo.request(
            to_requests_route(submit_link),
            method="POST",
            expected_status=202,
        )
        self._log.info(f"Submitted record {self.id} for review")
        return review

    async def add_to_community(self, community_id: str) -> dict[str, Any]:
        """Request inclusion of the draft in a community."""
        response = await self.zenodo.request(
            f"records/{self.id}/draft/review",
            method="PUT",
            body=json.dumps({
                "receiver": {"community": community_id},
                "type": "community-submission",
            }),
        )
        self._log.info(f"Added record {self.id} to community {community_id}")
        return response.json()

    async def reserve_doi(self) -> Record:
        response = await self.zenodo.request(
            f"records/{self.id}/draft/pids/doi",
            method="POST",
            expected_status=201,
        )
        record = Record(self.zenodo, response.json())
        self._log.info(f"Reserved DOI for record {self.id}")
        return record
