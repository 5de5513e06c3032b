"""Tests for the Zenodo session and its top-level endpoints"""

import json

import httpx
import pytest
from pydantic import ValidationError

from zenodo_client.auth import AuthenticationState
from zenodo_client.config import Settings
from zenodo_client.depositions import Deposition
from zenodo_client.errors import ZenodoApiError
from zenodo_client.records import Record
from zenodo_client.resilience.policy import RetryPolicy
from zenodo_client.zenodo import Zenodo, build_search_params

BASE_URL = "https://sandbox.zenodo.org/api/"


class TestZenodoInit:
    """Tests for session construction"""

    def test_defaults(self):
        zenodo = Zenodo("tok")
        assert zenodo.base_url == BASE_URL
        assert zenodo.access_token == "tok"
        assert zenodo.logger is None
        assert zenodo.retry_policy == RetryPolicy()
        assert zenodo.authentication_state is AuthenticationState.NOT_TRIED
        assert isinstance(zenodo.http, httpx.AsyncClient)

    def test_production_host(self):
        assert Zenodo("tok", host="zenodo.org").base_url == "https://zenodo.org/api/"

    def test_empty_token_rejected(self):
        with pytest.raises(ValueError, match="access_token is required"):
            Zenodo("")

    def test_sessions_have_independent_state(self):
        first, second = Zenodo("a"), Zenodo("b")
        first.authentication_state = AuthenticationState.FAILED
        assert second.authentication_state is AuthenticationState.NOT_TRIED

    def test_from_settings(self):
        settings = Settings(
            zenodo_access_token="tok",
            zenodo_host="zenodo.org",
            zenodo_max_retries=5,
            zenodo_retry_base_delay=0.5,
        )
        zenodo = Zenodo.from_settings(settings)
        assert zenodo.base_url == "https://zenodo.org/api/"
        assert zenodo.retry_policy.max_retries == 5
        assert zenodo.retry_policy.base_delay == 0.5

    def test_from_settings_requires_token(self):
        with pytest.raises(ValueError, match="ZENODO_ACCESS_TOKEN"):
            Zenodo.from_settings(Settings(zenodo_access_token=None))

    @pytest.mark.asyncio
    async def test_context_manager_closes_client(self):
        async with Zenodo("tok") as zenodo:
            assert not zenodo.http.is_closed
        assert zenodo.http.is_closed


class TestVerifyAuthentication:
    """Tests for the authentication state machine"""

    @pytest.mark.asyncio
    async def test_success(self, make_zenodo):
        zenodo, transport = make_zenodo(httpx.Response(200, json={}))

        assert await zenodo.verify_authentication() is True
        assert zenodo.authentication_state is AuthenticationState.SUCCEEDED
        request = transport.requests[0]
        assert str(request.url) == BASE_URL
        assert request.headers["authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403, 500])
    async def test_rejected(self, status, make_zenodo):
        zenodo, transport = make_zenodo(httpx.Response(status))

        assert await zenodo.verify_authentication() is False
        assert zenodo.authentication_state is AuthenticationState.FAILED
        assert transport.attempts == 1

    @pytest.mark.asyncio
    async def test_network_error_counts_as_failure(self, make_zenodo):
        zenodo, transport = make_zenodo(httpx.ConnectError("down"))

        assert await zenodo.verify_authentication() is False
        assert zenodo.authentication_state is AuthenticationState.FAILED

    @pytest.mark.asyncio
    async def test_request_reverifies_after_401(self, make_zenodo, mock_sleep):
        """Test 401, verification, then a successful retry."""
        zenodo, transport = make_zenodo(
            httpx.Response(401),
            httpx.Response(200, json={}),
            httpx.Response(200, json={"id": "1"}),
        )

        response = await zenodo.request("records/1")

        assert response.json() == {"id": "1"}
        assert [str(r.url) for r in transport.requests] == [
            f"{BASE_URL}records/1", BASE_URL, f"{BASE_URL}records/1",
        ]
        assert zenodo.authentication_state is AuthenticationState.SUCCEEDED

    @pytest.mark.asyncio
    async def test_bad_token_fails_after_one_verification(self, make_zenodo, mock_sleep):
        zenodo, transport = make_zenodo(httpx.Response(401))

        with pytest.raises(ZenodoApiError):
            await zenodo.request("records/1")

        # request, verification, request; then FAILED stops retrying
        assert transport.attempts == 3
        assert zenodo.authentication_state is AuthenticationState.FAILED


class TestSearchParams:
    """Tests for list option encoding"""

    def test_values_stringified(self):
        params = build_search_params(q="title:x", page=2, size=10, all_versions=True)
        assert params == {"q": "title:x", "page": "2", "size": "10", "all_versions": "true"}

    def test_false_and_none(self):
        assert build_search_params(all_versions=False, sort=None) == {"all_versions": "false"}


class TestRecordEndpoints:
    """Tests for record endpoints on the session"""

    @pytest.mark.asyncio
    async def test_list_records(self, make_zenodo, record_json):
        zenodo, transport = make_zenodo(
            httpx.Response(200, json={"hits": {"hits": [record_json], "total": 1}})
        )

        records = await zenodo.list_records(status="draft", size=5)

        assert len(records) == 1
        assert isinstance(records[0], Record)
        assert records[0].id == "12345"
        params = transport.requests[0].url.params
        assert transport.requests[0].url.path == "/api/user/records"
        assert params["status"] == "draft"
        assert params["size"] == "5"
        assert "q" not in params

    @pytest.mark.asyncio
    async def test_list_records_empty(self, make_zenodo):
        zenodo, transport = make_zenodo(httpx.Response(200, json={"hits": {"hits": []}}))
        assert await zenodo.list_records() == []

    @pytest.mark.asyncio
    async def test_create_record(self, make_zenodo, record_json):
        zenodo, transport = make_zenodo(httpx.Response(201, json=record_json))

        record = await zenodo.create_record({"title": "Test record"})

        assert record.id == "12345"
        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/records"
        assert json.loads(request.content) == {"metadata": {"title": "Test record"}}
        zenodo.logger.info.assert_any_call("Created record 12345")

    @pytest.mark.asyncio
    async def test_create_record_unexpected_status(self, make_zenodo, mock_sleep):
        zenodo, transport = make_zenodo(httpx.Response(400, json={"message": "Invalid"}))

        with pytest.raises(ZenodoApiError, match="Invalid"):
            await zenodo.create_record({})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("is_published,path", [
        (False, "/api/records/12345/draft"),
        (True, "/api/records/12345"),
    ])
    async def test_retrieve_record(self, is_published, path, make_zenodo, record_json):
        zenodo, transport = make_zenodo(httpx.Response(200, json=record_json))

        record = await zenodo.retrieve_record("12345", is_published=is_published)

        assert record.value.metadata["title"] == "Test record"
        assert transport.requests[0].url.path == path

    @pytest.mark.asyncio
    async def test_delete_record(self, make_zenodo):
        zenodo, transport = make_zenodo(httpx.Response(204))

        assert await zenodo.delete_record("12345") is None
        assert transport.requests[0].method == "DELETE"
        assert transport.requests[0].url.path == "/api/records/12345/draft"

    @pytest.mark.asyncio
    async def test_retrieve_versions(self, make_zenodo, record_json):
        zenodo, transport = make_zenodo(
            httpx.Response(200, json={"hits": {"hits": [record_json, record_json]}})
        )

        versions = await zenodo.retrieve_versions("12345")

        assert len(versions) == 2
        assert transport.requests[0].url.path == "/api/records/12345/versions"

    @pytest.mark.asyncio
    async def test_retrieve_requests(self, make_zenodo, review_json):
        zenodo, transport = make_zenodo(httpx.Response(200, json={"hits": {"hits": [review_json]}}))

        reviews = await zenodo.retrieve_requests(is_open=True)

        assert reviews[0].id == "req-1"
        assert reviews[0].record_id == "12345"
        assert transport.requests[0].url.params["is_open"] == "true"


class TestDepositionEndpoints:
    """Tests for legacy deposition endpoints on the session"""

    @pytest.mark.asyncio
    async def test_list_depositions(self, make_zenodo, deposition_json):
        zenodo, transport = make_zenodo(httpx.Response(200, json=[deposition_json]))

        depositions = await zenodo.list_depositions(q="title:test")

        assert isinstance(depositions[0], Deposition)
        assert depositions[0].id == 1234
        assert transport.requests[0].url.path == "/api/deposit/depositions"
        assert transport.requests[0].url.params["q"] == "title:test"

    @pytest.mark.asyncio
    async def test_create_deposition(self, make_zenodo, deposition_json):
        zenodo, transport = make_zenodo(httpx.Response(201, json=deposition_json))

        deposition = await zenodo.create_deposition(deposition_json["metadata"])

        assert deposition.value.metadata.creators[0].name == "Doe, Jane"
        body = json.loads(transport.requests[0].content)
        assert body["metadata"]["upload_type"] == "dataset"

    @pytest.mark.asyncio
    async def test_create_deposition_rejects_invalid_metadata(self, make_zenodo, deposition_json):
        """Test that missing required fields never reach the API."""
        zenodo, transport = make_zenodo(httpx.Response(201, json=deposition_json))
        metadata = {**deposition_json["metadata"], "upload_type": "spreadsheet"}

        with pytest.raises(ValidationError):
            await zenodo.create_deposition(metadata)

        assert transport.attempts == 0

    @pytest.mark.asyncio
    async def test_retrieve_deposition(self, make_zenodo, deposition_json):
        zenodo, transport = make_zenodo(httpx.Response(200, json=deposition_json))

        deposition = await zenodo.retrieve_deposition(1234)

        assert deposition.value.state == "unsubmitted"
        assert transport.requests[0].url.path == "/api/deposit/depositions/1234"

    @pytest.mark.asyncio
    async def test_delete_deposition(self, make_zenodo):
        zenodo, transport = make_zenodo(httpx.Response(204))

        await zenodo.delete_deposition(1234)

        assert transport.requests[0].method == "DELETE"

    @pytest.mark.asyncio
    async def test_session_without_logger(self, deposition_json):
        """Test endpoints fall back to module loggers."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=deposition_json))
        zenodo = Zenodo("tok", transport=transport)

        deposition = await zenodo.retrieve_deposition(1234)

        assert deposition.id == 1234
