"""Response models for the Zenodo depositions, records and requests APIs.

Models validate the fields this client relies on and keep every other key
(``extra="allow"``) so new upstream fields never break parsing.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ZenodoModel(BaseModel):
    """Base model tolerant of unknown keys."""
    model_config = ConfigDict(extra="allow")


# ===== Depositions (legacy API) =====

class Creator(ZenodoModel):
    name: str
    affiliation: str | None = None
    orcid: str | None = None
    gnd: str | None = None


class DepositionMetadata(ZenodoModel):
    """Metadata of a legacy deposition"""
    upload_type: Literal[
        "publication", "poster", "presentation", "dataset", "image",
        "video", "software", "lesson", "physicalobject", "other",
    ]
    title: str
    creators: list[Creator]
    description: str
    access_right: Literal["open", "embargoed", "restricted", "closed"]
    publication_date: str | None = None
    publication_type: str | None = None
    image_type: str | None = None
    license: str | None = None
    embargo_date: str | None = None
    access_conditions: str | None = None
    doi: str | None = None
    prereserve_doi: bool | dict[str, Any] | None = None
    keywords: list[str] | None = None
    notes: str | None = None
    communities: list[dict[str, str]] | None = None
    version: str | None = None
    language: str | None = None


class ZenodoFileValue(ZenodoModel):
    """A file attached to a deposition or a record draft.

    Depositions describe files with ``id/filename/filesize``; record drafts
    use ``key/size``. Both shapes are accepted.
    """
    id: str | None = None
    filename: str | None = None
    filesize: int | None = None
    key: str | None = None
    size: int | None = None
    checksum: str | None = None
    mimetype: str | None = None
    status: str | None = None
    links: dict[str, str] = Field(default_factory=dict)

    @property
    def name(self) -> str | None:
        return self.filename or self.key


class ZenodoDeposition(ZenodoModel):
    """A deposition returned by /deposit/depositions"""
    id: int
    created: datetime
    modified: datetime
    title: str
    owner: int
    metadata: DepositionMetadata
    links: dict[str, str] = Field(default_factory=dict)
    files: list[ZenodoFileValue] = Field(default_factory=list)
    state: Literal["unsubmitted", "inprogress", "done", "error"]
    submitted: bool
    doi: str | None = None
    doi_url: str | None = None
    record_id: int | None = None
    record_url: str | None = None


# ===== Records (current API) =====

class ZenodoRecord(ZenodoModel):
    """A record or record draft returned by /records"""
    id: str | int | None = None
    created: datetime | None = None
    updated: datetime | None = None
    links: dict[str, str] = Field(default_factory=dict)
    metadata: dict[str, Any] | None = None
    pids: dict[str, Any] | None = None
    files: dict[str, Any] | None = None
    status: str | None = None
    is_published: bool | None = None
    is_draft: bool | None = None


# ===== Requests (reviews) =====

class ReviewLinks(ZenodoModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    actions: dict[str, str] = Field(default_factory=dict)
    self_link: str | None = Field(default=None, alias="self")
    self_html: str | None = None
    comments: str | None = None
    timeline: str | None = None


class ZenodoReview(ZenodoModel):
    """A review request (the API calls these "requests")"""
    id: str | int
    number: str | None = None
    type: str | None = None
    status: str | None = None
    is_open: bool | None = None
    is_closed: bool | None = None
    links: ReviewLinks = Field(default_factory=ReviewLinks)
    receiver: dict[str, str] | None = None
    topic: dict[str, str] | None = None
    created: datetime | None = None
    updated: datetime | None = None

    @property
    def record_id(self) -> str | None:
        return (self.topic or {}).get("record")


def validate_metadata(data: Any) -> DepositionMetadata:
    """Check deposition metadata before it is sent to Zenodo.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid
    """
    return DepositionMetadata.model_validate(data)


def validate_deposition(data: Any) -> ZenodoDeposition:
    return ZenodoDeposition.model_validate(data)


def validate_record(data: Any) -> ZenodoRecord:
    return ZenodoRecord.model_validate(data)


def validate_file(data: Any) -> ZenodoFileValue:
    return ZenodoFileValue.model_validate(data)


def validate_review(data: Any) -> ZenodoReview:
    return ZenodoReview.model_validate(data)
