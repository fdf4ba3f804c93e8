"""Human-readable rendering of outcome errors.

The classifier produces values; this module turns them into text for the
CLI and into exit codes:

* :func:`field_name` maps a JSON:API error pointer to a form field name.
* :func:`errors_by_field` groups a document's errors by field.
* :func:`describe_error` / :func:`describe_lines` render any
  :data:`~jsonapi_remote.outcomes.OutcomeError`.
* :func:`exit_code_for` picks the process exit code for an error.
* :func:`unwrap` returns a success value or raises
  :class:`~jsonapi_remote.exceptions.RequestFailedError`.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Optional

from jsonapi_remote.exceptions import RequestFailedError
from jsonapi_remote.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_BAD_BODY,
    EXIT_CONNECTION_ERROR,
    EXIT_CUSTOM_ERROR,
    EXIT_DOCUMENT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)
from jsonapi_remote.models import JsonApiError
from jsonapi_remote.outcomes import (
    BadBody,
    BadStatus,
    BadUrl,
    CustomError,
    DocumentError,
    NetworkError,
    OutcomeError,
    Timeout,
    TransportError,
    WithHeaders,
)
from jsonapi_remote.remote import Failed, InFlight, NotRequested, RemoteData, Succeeded

ATTRIBUTE_POINTER_PREFIX = "/data/attributes/"


def field_name(error: JsonApiError) -> Optional[str]:
    """Return the attribute an error points at, or ``None``.

    ``source.pointer = "/data/attributes/username"`` yields ``"username"``.
    Errors without a source, without a pointer, or pointing elsewhere have
    no field.
    """
    if error.source is None or not error.source.pointer:
        return None
    pointer = error.source.pointer
    if not pointer.startswith(ATTRIBUTE_POINTER_PREFIX):
        return None
    return pointer[len(ATTRIBUTE_POINTER_PREFIX):] or None


def error_text(error: JsonApiError) -> str:
    """Best single-line text for one JSON:API error."""
    return error.detail or error.title or error.code or "Invalid value"


def errors_by_field(errors: tuple[JsonApiError, ...]) -> dict[Optional[str], list[str]]:
    """Group error texts by field name, preserving server order.

    Errors without a field are collected under ``None``.
    """
    grouped: dict[Optional[str], list[str]] = {}
    for error in errors:
        grouped.setdefault(field_name(error), []).append(error_text(error))
    return grouped


def _status_text(status_code: int) -> str:
    try:
        return f"{status_code} {HTTPStatus(status_code).phrase}"
    except ValueError:
        return str(status_code)


def _unwrap_headers(error: Any) -> OutcomeError:
    return error.value if isinstance(error, WithHeaders) else error


def describe_error(error: Any) -> str:
    """One-line summary of an outcome error (headed or not)."""
    error = _unwrap_headers(error)
    if isinstance(error, TransportError):
        http_error = error.error
        if isinstance(http_error, BadUrl):
            return f"Invalid URL: {http_error.url}"
        if isinstance(http_error, Timeout):
            return "The request timed out"
        if isinstance(http_error, NetworkError):
            return "Network error: the server could not be reached"
        if isinstance(http_error, BadStatus):
            return f"Unexpected HTTP status {_status_text(http_error.status_code)}"
        if isinstance(http_error, BadBody):
            return f"Malformed response body: {http_error.message}"
    if isinstance(error, DocumentError):
        count = len(error.errors)
        return f"The server rejected the request ({count} error{'s' if count != 1 else ''})"
    if isinstance(error, CustomError):
        return error.message
    raise TypeError(f"Not an outcome error: {error!r}")


def describe_lines(error: Any) -> list[str]:
    """Summary line followed by one line per document error.

    Field errors render as ``field: message``; errors without a field
    render as the bare message.
    """
    lines = [describe_error(error)]
    error = _unwrap_headers(error)
    if isinstance(error, DocumentError):
        for name, texts in errors_by_field(error.errors).items():
            for text in texts:
                lines.append(f"{name}: {text}" if name else text)
    return lines


def exit_code_for(error: Any) -> int:
    """Map an outcome error to a process exit code."""
    error = _unwrap_headers(error)
    if isinstance(error, DocumentError):
        return EXIT_DOCUMENT_ERROR
    if isinstance(error, CustomError):
        return EXIT_CUSTOM_ERROR
    http_error = error.error
    if isinstance(http_error, BadUrl):
        return EXIT_INVALID_USAGE
    if isinstance(http_error, (Timeout, NetworkError)):
        return EXIT_CONNECTION_ERROR
    if isinstance(http_error, BadBody):
        return EXIT_BAD_BODY
    status = http_error.status_code
    if status in (401, 403):
        return EXIT_AUTH_FAILURE
    if status == 404:
        return EXIT_NOT_FOUND
    if 500 <= status < 600:
        return EXIT_SERVER_ERROR
    return EXIT_GENERIC_FAILURE


def unwrap(result: RemoteData) -> Any:
    """Return the success value of a settled *result*.

    ``WithHeaders`` pairings are unwrapped as well.

    Raises:
        RequestFailedError: If *result* is ``Failed``.
        ValueError: If *result* is still ``NotRequested`` or ``InFlight``.
    """
    if isinstance(result, Succeeded):
        value = result.value
        return value.value if isinstance(value, WithHeaders) else value
    if isinstance(result, Failed):
        raise RequestFailedError(
            describe_error(result.error),
            _unwrap_headers(result.error),
            exit_code=exit_code_for(result.error),
        )
    if isinstance(result, (NotRequested, InFlight)):
        raise ValueError(f"Result is not settled: {result!r}")
    raise TypeError(f"Not a remote data value: {result!r}")
