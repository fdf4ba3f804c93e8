"""Typed outcome values produced by the response classifier.

Errors
    :data:`HttpError` covers what went wrong on the wire or while reading the
    body (:class:`BadUrl`, :class:`Timeout`, :class:`NetworkError`,
    :class:`BadStatus`, :class:`BadBody`).  :data:`OutcomeError` is the closed
    set a request can fail with: a :class:`TransportError` wrapping one
    ``HttpError``, a :class:`DocumentError` holding the server's JSON:API
    error list, or a :class:`CustomError` raised by a custom decoder.

Success shapes
    Plain requests succeed with the decoded value.  No-content requests
    succeed with ``None``.  Advance-content requests succeed with either
    :class:`DocumentContent` or the :class:`NoContent` marker.

Headers
    The headed entry points pair both the error and the value with the
    extracted response headers in :class:`WithHeaders`;
    :func:`strip_headers` drops that pairing for call sites that do not care.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from jsonapi_remote.models import JsonApiError
from jsonapi_remote.remote import Failed, RemoteData, Succeeded

T = TypeVar("T")

HeaderList = tuple[tuple[str, str], ...]


# --- Transport-level errors ---


@dataclass(frozen=True)
class BadUrl:
    """The URL was rejected before anything was sent."""

    url: str


@dataclass(frozen=True)
class Timeout:
    """The configured timeout elapsed before a response arrived."""


@dataclass(frozen=True)
class NetworkError:
    """The connection failed or was aborted."""


@dataclass(frozen=True)
class BadStatus:
    """The server answered with a status this request does not accept."""

    status_code: int


@dataclass(frozen=True)
class BadBody:
    """The body could not be parsed; ``message`` is the parser's own text."""

    message: str


HttpError = Union[BadUrl, Timeout, NetworkError, BadStatus, BadBody]


# --- Outcome errors ---


@dataclass(frozen=True)
class TransportError:
    error: HttpError


@dataclass(frozen=True)
class DocumentError:
    """The server sent a JSON:API error document.

    ``errors`` keeps the server's order and is never empty.
    """

    errors: tuple[JsonApiError, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "errors", tuple(self.errors))


@dataclass(frozen=True)
class CustomError:
    message: str


OutcomeError = Union[TransportError, DocumentError, CustomError]


# --- Success shapes ---


@dataclass(frozen=True)
class DocumentContent(Generic[T]):
    """A decoded body returned by an advance-content request."""

    value: T


@dataclass(frozen=True)
class NoContent:
    """Marker for a 204 answer to an advance-content request."""


AdvanceContent = Union[DocumentContent[T], NoContent]


# --- Header pairing ---


@dataclass(frozen=True)
class WithHeaders(Generic[T]):
    """A value paired with the response headers the caller asked for."""

    value: T
    headers: HeaderList = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "headers", tuple((str(k), str(v)) for k, v in self.headers)
        )

    def header(self, name: str) -> str | None:
        """Return the first extracted value for *name* (case-insensitive)."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None


def strip_headers(result: RemoteData[WithHeaders[T], WithHeaders[T]]) -> RemoteData:
    """Drop the header pairing from both sides of a result.

    ``Failed(WithHeaders(e, h))`` becomes ``Failed(e)`` and
    ``Succeeded(WithHeaders(s, h))`` becomes ``Succeeded(s)``; the two
    pending variants are returned unchanged.
    """
    if isinstance(result, Failed):
        return Failed(result.error.value)
    if isinstance(result, Succeeded):
        return Succeeded(result.value.value)
    return result
