"""Bundle several attachments into one zip archive before upload."""

import io
import logging
import zipfile
from collections.abc import Sequence

from zenodo_client.files import Attachment

logger = logging.getLogger(__name__)

# Largest single file Zenodo accepts
MAX_ZIP_SIZE = 50 * 1024 * 1024 * 1024


def zip_files(attachments: Sequence[Attachment], zip_name: str) -> Attachment:
    """Zip attachments into ``<zip_name>.zip``.

    Args:
        attachments: Files to include; their names become archive entries
        zip_name: Archive name without the ``.zip`` extension

    Returns:
        Attachment holding the archive bytes

    Raises:
        ValueError: If the archive exceeds Zenodo's 50GB file limit
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for attachment in attachments:
            archive.writestr(attachment.name, attachment.content)

    content = buffer.getvalue()
    if len(content) > MAX_ZIP_SIZE:
        raise ValueError("Zip file exceeds Zenodo's 50GB limit.")

    logger.debug(f"Zipped {len(attachments)} files into {zip_name}.zip ({len(content)} bytes)")
    return Attachment(name=f"{zip_name}.zip", content=content, content_type="application/zip")
