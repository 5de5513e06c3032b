"""Zenodo session: credentials, authentication state and top-level endpoints.

Usage:
    async with Zenodo(access_token="...", host="zenodo.org") as zenodo:
        record = await zenodo.create_record({"title": "My dataset", ...})
        await record.upload_files([Attachment("data.csv", b"a,b\\n1,2\\n")])

Each instance owns its own HTTP client and authentication state, so two
sessions never influence each other's retry decisions. Concurrent calls on
one session share only the authentication state.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from zenodo_client.auth import AuthenticationState
from zenodo_client.config import Settings
from zenodo_client.depositions import Deposition
from zenodo_client.models import ZenodoReview, validate_metadata, validate_review
from zenodo_client.records import Record
from zenodo_client.resilience.http_client import FormData, RequestSpec, build_headers, execute
from zenodo_client.resilience.policy import RetryPolicy

logger = logging.getLogger(__name__)


def build_search_params(**options: Any) -> dict[str, str]:
    """Stringify list options for the query string, dropping unset ones.

    ``all_versions`` keeps its snake_case name because that is what the API
    expects; booleans are sent as ``true``/``false``.
    """
    params = {}
    for key, value in options.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        params[key] = str(value)
    return params


class Zenodo:
    """Client session for one Zenodo host and access token."""

    def __init__(
        self,
        access_token: str,
        host: str = "sandbox.zenodo.org",
        logger: logging.Logger | None = None,
        retry_policy: RetryPolicy | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize a session.

        Args:
            access_token: Zenodo personal access token
            host: API host, ``sandbox.zenodo.org`` or ``zenodo.org``
            logger: Logger for request and endpoint messages (module loggers if None)
            retry_policy: Default policy for every request of this session
            timeout: Per-attempt HTTP timeout in seconds
            transport: Optional httpx transport (used by tests)

        Raises:
            ValueError: If access_token is empty
        """
        if not access_token:
            raise ValueError("access_token is required")

        self.host = host
        self.base_url = f"https://{host}/api/"
        self.access_token = access_token
        self.logger = logger
        self.retry_policy = retry_policy or RetryPolicy()
        self.authentication_state = AuthenticationState.NOT_TRIED
        self.http = httpx.AsyncClient(timeout=timeout, transport=transport)

        self._log.debug(
            f"Initialized Zenodo session: base_url={self.base_url}, "
            f"max_retries={self.retry_policy.max_retries}"
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "Zenodo":
        """Create a session from ``Settings``.

        Raises:
            ValueError: If no access token is configured
        """
        if not settings.zenodo_access_token:
            raise ValueError("ZENODO_ACCESS_TOKEN is required to create a Zenodo session")
        return cls(
            access_token=settings.zenodo_access_token,
            host=settings.zenodo_host,
            retry_policy=settings.get_retry_policy(),
            timeout=settings.zenodo_timeout,
            **kwargs,
        )

    async def __aenter__(self) -> "Zenodo":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http.aclose()

    @property
    def _log(self):
        return self.logger or logger

    async def verify_authentication(self) -> bool:
        """Check the access token against the API root.

        Sends one plain authenticated GET, outside the retry core so an auth
        failure can never recurse into another verification. Network errors
        count as a failed verification.

        Returns:
            True if the API answered 200
        """
        try:
            response = await self.http.get(
                self.base_url,
                headers=build_headers(self.access_token, None),
            )
        except Exception as e:
            self._log.warning(f"Authentication verification request failed: {e}")
            self.authentication_state = AuthenticationState.FAILED
            return False

        if response.status_code == 200:
            self.authentication_state = AuthenticationState.SUCCEEDED
            self._log.debug("Access token verified")
            return True

        self.authentication_state = AuthenticationState.FAILED
        self._log.warning(f"Access token rejected by Zenodo ({response.status_code})")
        return False

    async def request(
        self,
        route: str,
        method: str = "GET",
        body: str | bytes | FormData | None = None,
        content_type: str | None = None,
        search_params: Mapping[str, str] | None = None,
        expected_status: int = 200,
        policy: RetryPolicy | None = None,
    ) -> httpx.Response:
        """Send a request through the retry core using this session's policy."""
        spec = RequestSpec(
            route=route,
            method=method,
            body=body,
            content_type=content_type,
            search_params=search_params,
            expected_status=expected_status,
        )
        return await execute(self, spec, policy or self.retry_policy)

    # ===== Records =====

    async def list_records(
        self,
        q: str | None = None,
        status: str | None = None,
        sort: str | None = None,
        page: int | None = None,
        size: int | None = None,
        all_versions: bool | None = None,
    ) -> list[Record]:
        """List the records of the token owner.

        Args:
            q: Search query (Elasticsearch query string syntax)
            status: ``draft`` or ``published``
            sort: ``bestmatch`` or ``mostrecent``, prefix ``-`` for descending
            page: Page number
            size: Results per page
            all_versions: Include every version of each record
        """
        response = await self.request(
            "user/records",
            search_params=build_search_params(
                q=q, status=status, sort=sort, page=page, size=size,
                all_versions=all_versions,
            ),
        )
        hits = response.json().get("hits", {}).get("hits", [])
        self._log.info(f"Listed {len(hits)} records")
        return [Record(self, hit) for hit in hits]

    async def create_record(self, metadata: dict[str, Any]) -> Record:
        response = await self.request(
            "records",
            method="POST",
            body=json.dumps({"metadata": metadata}),
            expected_status=201,
        )
        record = Record(self, response.json())
        self._log.info(f"Created record {record.id}")
        return record

    async def retrieve_record(self, record_id: str | int, is_published: bool = False) -> Record:
        route = f"records/{record_id}" if is_published else f"records/{record_id}/draft"
        response = await self.request(route)
        self._log.info(f"Retrieved record {record_id}")
        return Record(self, response.json())

    async def delete_record(self, record_id: str | int) -> None:
        """Discard a record draft."""
        await self.request(
            f"records/{record_id}/draft",
            method="DELETE",
            expected_status=204,
        )
        self._log.info(f"Deleted record {record_id}")

    async def retrieve_versions(self, record_id: str | int) -> list[Record]:
        response = await self.request(f"records/{record_id}/versions")
        hits = response.json().get("hits", {}).get("hits", [])
        self._log.info(f"Retrieved {len(hits)} versions of record {record_id}")
        return [Record(self, hit) for hit in hits]

    async def retrieve_requests(self, **options: Any) -> list[ZenodoReview]:
        """List review requests visible to the token owner."""
        response = await self.request(
            "requests",
            search_params=build_search_params(**options),
        )
        hits = response.json().get("hits", {}).get("hits", [])
        self._log.info(f"Retrieved {len(hits)} requests")
        return [validate_review(hit) for hit in hits]

    # ===== Depositions (legacy API) =====

    async def list_depositions(
        self,
        q: str | None = None,
        status: str | None = None,
        sort: str | None = None,
        page: int | None = None,
        size: int | None = None,
        all_versions: bool | None = None,
    ) -> list[Deposition]:
        response = await self.request(
            "deposit/depositions",
            search_params=build_search_params(
                q=q, status=status, sort=sort, page=page, size=size,
                all_versions=all_versions,
            ),
        )
        depositions = response.json()
        self._log.info(f"Listed {len(depositions)} depositions")
        return [Deposition(self, deposition) for deposition in depositions]

    async def create_deposition(self, metadata: dict[str, Any]) -> Deposition:
        validate_metadata(metadata)
        response = await self.request(
            "deposit/depositions",
            method="POST",
            body=json.dumps({"metadata": metadata}),
            expected_status=201,
        )
        deposition = Deposition(self, response.json())
        self._log.info(f"Created deposition {deposition.id}")
        return deposition

    async def retrieve_deposition(self, deposition_id: int) -> Deposition:
        response = await self.request(f"deposit/depositions/{deposition_id}")
        self._log.info(f"Retrieved deposition {deposition_id}")
        return Deposition(self, response.json())

    async def delete_deposition(self, deposition_id: int) -> None:
        await self.request(
            f"deposit/depositions/{deposition_id}",
            method="DELETE",
            expected_status=204,
        )
        self._log.info(f"Deleted deposition {deposition_id}")
