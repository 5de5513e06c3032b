"""Pytest fixtures and helpers for zenodo-client tests"""

import os
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from zenodo_client.auth import AuthenticationState
from zenodo_client.zenodo import Zenodo

# Keep a developer's real token out of the test run
os.environ.pop("ZENODO_ACCESS_TOKEN", None)

BASE_URL = "https://sandbox.zenodo.org/api/"
TOKEN = "test-token"


class ScriptedTransport(httpx.AsyncBaseTransport):
    """Replays scripted responses or exceptions, one per request.

    The last outcome repeats once the script is exhausted, so a single
    outcome behaves as "always". Every request seen is recorded with its
    body already read.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    @property
    def attempts(self) -> int:
        return len(self.requests)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)

        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return httpx.Response(
            outcome.status_code,
            headers=outcome.headers,
            content=outcome.content,
            request=request,
        )


class FakeSession:
    """Minimal session for exercising the request core directly."""

    def __init__(self, transport: httpx.AsyncBaseTransport):
        self.base_url = BASE_URL
        self.access_token = TOKEN
        self.logger = Mock()
        self.http = httpx.AsyncClient(transport=transport)
        self.authentication_state = AuthenticationState.NOT_TRIED
        self.verify_authentication = AsyncMock(return_value=True)


@pytest.fixture
def mock_sleep():
    """Patch asyncio.sleep so backoff delays are recorded, not waited."""
    with patch("zenodo_client.resilience.http_client.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


@pytest.fixture
def make_session():
    """Factory for a FakeSession over a scripted transport."""
    def _make(*outcomes):
        transport = ScriptedTransport(*outcomes)
        return FakeSession(transport), transport
    return _make


@pytest.fixture
def make_zenodo():
    """Factory for a real Zenodo session over a scripted transport."""
    def _make(*outcomes, **kwargs):
        transport = ScriptedTransport(*outcomes)
        kwargs.setdefault("logger", Mock())
        return Zenodo(TOKEN, transport=transport, **kwargs), transport
    return _make


@pytest.fixture
def deposition_json():
    return {
        "id": 1234,
        "created": "2024-01-01T10:00:00.000000+00:00",
        "modified": "2024-01-01T10:00:00.000000+00:00",
        "title": "Test dataset",
        "owner": 42,
        "metadata": {
            "upload_type": "dataset",
            "title": "Test dataset",
            "creators": [{"name": "Doe, Jane", "affiliation": "Zenodo"}],
            "description": "A test dataset",
            "access_right": "open",
            "publication_date": "2024-01-01",
        },
        "links": {"self": f"{BASE_URL}deposit/depositions/1234"},
        "files": [],
        "state": "unsubmitted",
        "submitted": False,
    }


@pytest.fixture
def record_json():
    return {
        "id": "12345",
        "created": "2024-01-01T10:00:00.000000+00:00",
        "updated": "2024-01-01T10:00:00.000000+00:00",
        "links": {"self": f"{BASE_URL}records/12345/draft"},
        "metadata": {"title": "Test record", "resource_type": {"id": "dataset"}},
        "status": "draft",
        "is_published": False,
        "is_draft": True,
    }


@pytest.fixture
def file_json():
    return {
        "key": "data.csv",
        "size": 10,
        "checksum": "md5:0123456789abcdef",
        "mimetype": "text/csv",
        "status": "completed",
        "links": {
            "self": f"{BASE_URL}records/12345/draft/files/data.csv",
            "content": f"{BASE_URL}records/12345/draft/files/data.csv/content",
        },
    }


@pytest.fixture
def review_json():
    return {
        "id": "req-1",
        "type": "community-submission",
        "status": "created",
        "is_open": False,
        "topic": {"record": "12345"},
        "receiver": {"community": "comm-1"},
        "links": {
            "self": f"{BASE_URL}requests/req-1",
            "actions": {"submit": f"{BASE_URL}requests/req-1/actions/submit"},
        },
    }
