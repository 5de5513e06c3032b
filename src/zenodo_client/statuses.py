"""Human-readable descriptions of the status codes documented by Zenodo."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ResponseStatus:
    code: int
    name: str
    description: str


RESPONSE_STATUSES: dict[int, ResponseStatus] = {
    status.code: status
    for status in (
        ResponseStatus(
            200, "OK",
            "Request succeeded. Response included. Usually sent for GET/PUT/PATCH requests.",
        ),
        ResponseStatus(
            201, "Created",
            "Request succeeded. Response included. Usually sent for POST requests.",
        ),
        ResponseStatus(
            202, "Accepted",
            "Request succeeded. Response included. Usually sent for POST requests, "
            "where background processing is needed to fulfill the request.",
        ),
        ResponseStatus(
            204, "No Content",
            "Request succeeded. No response included. Usually sent for DELETE requests.",
        ),
        ResponseStatus(
            400, "Bad Request",
            "Request failed. Error response included.",
        ),
        ResponseStatus(
            401, "Unauthorized",
            "Request failed, due to an invalid access token. Error response included.",
        ),
        ResponseStatus(
            403, "Forbidden",
            "Request failed, due to missing authorization (e.g. deleting an already "
            "submitted upload or missing scopes for your access token). "
            "Error response included.",
        ),
        ResponseStatus(
            404, "Not Found",
            "Request failed, due to the resource not being found. Error response included.",
        ),
        ResponseStatus(
            405, "Method Not Allowed",
            "Request failed, due to unsupported HTTP method. Error response included.",
        ),
        ResponseStatus(
            409, "Conflict",
            "Request failed, due to the current state of the resource (e.g. edit a "
            "deposition which is not fully integrated). Error response included.",
        ),
        ResponseStatus(
            415, "Unsupported Media Type",
            "Request failed, due to missing or invalid request header Content-Type. "
            "Error response included.",
        ),
        ResponseStatus(
            429, "Too Many Requests",
            "Request failed, due to rate limiting. Error response included.",
        ),
        ResponseStatus(
            500, "Internal Server Error",
            "Request failed, due to an internal server error. Error response NOT "
            "included. Zenodo admins have been notified and will be dealing with "
            "the problem ASAP.",
        ),
    )
}


def describe_status(status_code: int, status_text: str = "") -> str:
    """Return the documented description for a status code.

    Falls back to the response's reason phrase for unmapped codes, and to a
    generic ``HTTP <code>`` label when that is empty too.
    """
    status = RESPONSE_STATUSES.get(status_code)
    if status is not None:
        return status.description
    return status_text or f"HTTP {status_code}"
