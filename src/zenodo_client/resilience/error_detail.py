"""Build ``ZenodoApiError`` instances from failed responses.

Extraction is best effort: each stage (read body, parse JSON, pick a detail)
degrades to the next fallback instead of failing, so a broken error body
never hides the original HTTP failure.
"""

import json
import logging
from typing import Any

import httpx

from zenodo_client.errors import FailureCause, ZenodoApiError
from zenodo_client.statuses import describe_status

logger = logging.getLogger(__name__)

_NOT_JSON = object()


async def read_body_text(response: httpx.Response, log: Any = None) -> str | None:
    """Read the response body as text, None if it cannot be read."""
    try:
        await response.aread()
        return response.text
    except Exception as e:
        (log or logger).warning(f"Could not read error response body: {e}")
        return None


def parse_json(text: str | None) -> Any:
    """Parse ``text`` as JSON, returning ``_NOT_JSON`` on failure or empty input."""
    if not text or not text.strip():
        return _NOT_JSON
    try:
        return json.loads(text)
    except ValueError:
        return _NOT_JSON


def _stringify(entry: Any) -> str:
    if isinstance(entry, str):
        return entry
    return json.dumps(entry)


def extract_error_detail(payload: Any) -> str | None:
    """Pick the most useful error detail out of a parsed JSON error body.

    Priority: ``message`` string, ``error`` string, ``errors`` list joined
    with commas, then the whole payload serialized.
    """
    if payload is _NOT_JSON or payload is None:
        return None

    if isinstance(payload, dict):
        message = payload.get("message")
        if isinstance(message, str):
            return message
        error = payload.get("error")
        if isinstance(error, str):
            return error
        errors = payload.get("errors")
        if isinstance(errors, list):
            return ", ".join(_stringify(entry) for entry in errors)

    return json.dumps(payload)


async def build_api_error(
    response: httpx.Response,
    url: str,
    method: str,
    content_type: str | None,
    body: Any,
    log: Any = None,
) -> ZenodoApiError:
    """Create the error raised for a non-retryable or exhausted response."""
    text = await read_body_text(response, log)
    detail = extract_error_detail(parse_json(text))

    base = describe_status(response.status_code, response.reason_phrase)
    message = f"{base}: {detail}" if detail else base

    cause = FailureCause(
        url=url,
        method=method,
        content_type=content_type,
        body=body,
        response=response,
        status=response.status_code,
        status_text=response.reason_phrase,
        headers=dict(response.headers),
        detail=detail,
    )
    return ZenodoApiError(message, cause)
