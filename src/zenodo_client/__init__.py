"""Async client for the Zenodo deposit API with a resilient request core."""

import logging

from zenodo_client.auth import AuthenticationState
from zenodo_client.depositions import Deposition, FileUploadStatus
from zenodo_client.errors import FailureCause, ZenodoApiError, ZenodoError
from zenodo_client.files import Attachment, ZenodoFile
from zenodo_client.records import Record
from zenodo_client.resilience import FormData, RequestSpec, RetryPolicy, execute
from zenodo_client.zenodo import Zenodo

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Attachment",
    "AuthenticationState",
    "Deposition",
    "FailureCause",
    "FileUploadStatus",
    "FormData",
    "Record",
    "RequestSpec",
    "RetryPolicy",
    "Zenodo",
    "ZenodoApiError",
    "ZenodoError",
    "ZenodoFile",
    "execute",
]
