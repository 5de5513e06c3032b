"""Depositions: the legacy generation of Zenodo uploads."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, Literal

from zenodo_client.files import Attachment, ZenodoFile
from zenodo_client.models import ZenodoDeposition, validate_deposition, validate_metadata
from zenodo_client.resilience.http_client import FormData

if TYPE_CHECKING:
    from zenodo_client.zenodo import Zenodo

logger = logging.getLogger(__name__)

# Seconds to wait before each upload round of create_files()
DEFAULT_UPLOAD_DELAYS = (0, 1, 2, 4, 8, 16)


@dataclass
class FileUploadStatus:
    """Outcome of one file in a batch upload."""

    status: Literal["fulfilled", "rejected"]
    filename: str
    value: ZenodoFile | None = None
    error: str | None = None


class Deposition:
    """A legacy deposition bound to its session."""

    def __init__(self, zenodo: Zenodo, value: Any):
        self.zenodo = zenodo
        self.value: ZenodoDeposition = validate_deposition(value)

    def __repr__(self) -> str:
        return f"Deposition(id={self.value.id}, title={self.value.title!r})"

    @property
    def id(self) -> int:
        return self.value.id

    @property
    def _log(self):
        return self.zenodo.logger or logger

    async def create_file(self, attachment: Attachment) -> ZenodoFile:
        """Upload one file as a multipart form."""
        form = FormData()
        form.append("file", attachment.content, attachment.name, attachment.content_type)
        response = await self.zenodo.request(
            f"deposit/depositions/{self.id}/files",
            method="POST",
            body=form,
            expected_status=201,
        )
        file = ZenodoFile(self.zenodo, response.json())
        self._log.info(f"Created file {file.value.id} for deposition {self.id}")
        return file

    async def create_files(
        self,
        attachments: Sequence[Attachment],
        delays: Sequence[float] = DEFAULT_UPLOAD_DELAYS,
    ) -> list[FileUploadStatus]:
        """Upload several files concurrently, retrying failed ones in rounds.

        Each round waits for the next entry of ``delays`` and re-uploads only
        the files that failed so far. Each file still gets the request core's
        own retries within a round.

        Returns:
            One status per attachment, in input order

        Raises:
            ValueError: If delays is empty
        """
        if not delays:
            raise ValueError("delays must contain at least one upload round")

        statuses: dict[int, FileUploadStatus] = {}
        remaining = list(range(len(attachments)))

        for wait in delays:
            if not remaining:
                break
            await asyncio.sleep(wait)

            results = await asyncio.gather(
                *(self.create_file(attachments[index]) for index in remaining),
                return_exceptions=True,
            )

            failed = []
            for index, result in zip(remaining, results):
                name = attachments[index].name
                if isinstance(result, BaseException):
                    statuses[index] = FileUploadStatus("rejected", name, error=str(result))
                    failed.append(index)
                else:
                    statuses[index] = FileUploadStatus("fulfilled", name, value=result)
            remaining = failed

        if remaining:
            names = ", ".join(attachments[index].name for index in remaining)
            self._log.warning(
                f"Failed to upload {len(remaining)} files after {len(delays)} attempts: {names}"
            )
        else:
            self._log.info(f"Successfully uploaded all files for deposition {self.id}")

        return [statuses[index] for index in sorted(statuses)]

    async def list_files(self) -> list[ZenodoFile]:
        response = await self.zenodo.request(f"deposit/depositions/{self.id}/files")
        files = response.json()
        self._log.info(f"Listed {len(files)} files for deposition {self.id}")
        return [ZenodoFile(self.zenodo, file) for file in files]

    async def sort_files(self, file_ids: Sequence[str]) -> list[ZenodoFile]:
        """Reorder the deposition's files; the first ID becomes the first file."""
        response = await self.zenodo.request(
            f"deposit/depositions/{self.id}/files",
            method="PUT",
            body=json.dumps([{"id": file_id} for file_id in file_ids]),
        )
        files = response.json()
        self._log.info(f"Sorted {len(files)} files for deposition {self.id}")
        return [ZenodoFile(self.zenodo, file) for file in files]

    async def delete_file(self, file_id: str) -> None:
        """Delete a file by ID or name."""
        await self.zenodo.request(
            f"deposit/depositions/{self.id}/files/{file_id}",
            method="DELETE",
            expected_status=204,
        )
        self._log.info(f"Deleted file {file_id} for deposition {self.id}")

    async def retrieve_file(self, file_id: str) -> ZenodoFile:
        """Retrieve a file by ID or name."""
        response = await self.zenodo.request(f"deposit/depositions/{self.id}/files/{file_id}")
        file = ZenodoFile(self.zenodo, response.json())
        self._log.info(f"Retrieved file {file_id} for deposition {self.id}")
        return file

    async def update(self, metadata: dict[str, Any]) -> Deposition:
        validate_metadata(metadata)
        response = await self.zenodo.request(
            f"deposit/depositions/{self.id}",
            method="PUT",
            body=json.dumps({"metadata": metadata}),
        )
        deposition = Deposition(self.zenodo, response.json())
        self._log.info(f"Updated deposition {self.id}")
        return deposition

    async def publish(self) -> Deposition:
        response = await self.zenodo.request(
            f"deposit/depositions/{self.id}/actions/publish",
            method="POST",
            expected_status=202,
        )
        deposition = Deposition(self.zenodo, response.json())
        self._log.info(f"Published deposition {self.id}")
        return deposition

    async def new_version(self) -> Deposition:
        """Create a new version draft.

        Zenodo clears ``publication_date`` on new version drafts; it is set
        to today so the draft can be published without further edits.
        """
        response = await self.zenodo.request(
            f"deposit/depositions/{self.id}/actions/newversion",
            method="POST",
            expected_status=201,
        )
        deposition = Deposition(self.zenodo, response.json())
        if not deposition.value.metadata.publication_date:
            metadata = deposition.value.metadata.model_dump(exclude_none=True)
            metadata["publication_date"] = date.today().isoformat()
            deposition = await deposition.update(metadata)
        self._log.info(f"Created new version for deposition {self.id}")
        return deposition
