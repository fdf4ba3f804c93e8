"""Raw transport outcomes and the httpx glue that produces them.

Whatever happens to a request ends up as exactly one :data:`RawOutcome`:

* :class:`RawBadUrl` -- httpx refused the URL before sending.
* :class:`RawTimeout` -- the configured timeout fired.
* :class:`RawNetworkError` -- any other transport failure.
* :class:`RawBadStatus` -- a response with a non-2xx status.
* :class:`RawGoodStatus` -- a response with a 2xx status.

:func:`from_exception` and :func:`from_response` fold httpx's exceptions and
responses into these values so that no transport exception escapes a client.
:func:`build_request_kwargs` turns a
:class:`~jsonapi_remote.request.RequestDescriptor` into keyword arguments
for :meth:`httpx.Client.request` / :meth:`httpx.Client.stream`.
"""

from __future__ import annotations

import io
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Callable, Optional, Union

import httpx

from jsonapi_remote.headers import outbound_headers, serialize_body
from jsonapi_remote.request import FilePart, MultipartBody, RequestDescriptor

RAW_TRANSPORT_ERRORS = (httpx.InvalidURL, httpx.RequestError)


@dataclass(frozen=True)
class RawBadUrl:
    url: str


@dataclass(frozen=True)
class RawTimeout:
    pass


@dataclass(frozen=True)
class RawNetworkError:
    pass


@dataclass(frozen=True)
class RawBadStatus:
    status_code: int
    headers: tuple[tuple[str, str], ...]
    body: str


@dataclass(frozen=True)
class RawGoodStatus:
    status_code: int
    headers: tuple[tuple[str, str], ...]
    body: str


RawOutcome = Union[RawBadUrl, RawTimeout, RawNetworkError, RawBadStatus, RawGoodStatus]


def from_exception(exc: Exception, url: str) -> RawOutcome:
    """Fold an httpx exception raised while sending to *url* into a raw outcome."""
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol)):
        return RawBadUrl(url)
    if isinstance(exc, httpx.TimeoutException):
        return RawTimeout()
    return RawNetworkError()


def response_headers(response: httpx.Response) -> tuple[tuple[str, str], ...]:
    """Return the response headers in wire order with their original casing."""
    encoding = response.headers.encoding
    return tuple(
        (name.decode(encoding), value.decode(encoding))
        for name, value in response.headers.raw
    )


def from_response(response: httpx.Response, text: Optional[str] = None) -> RawOutcome:
    """Fold a received response into :class:`RawGoodStatus` or :class:`RawBadStatus`.

    Args:
        response: The httpx response.  Its body must already be read unless
            *text* is given.
        text: The decoded body, for streamed responses that were consumed
            chunk by chunk.
    """
    body = response.text if text is None else text
    headers = response_headers(response)
    if 200 <= response.status_code < 300:
        return RawGoodStatus(response.status_code, headers, body)
    return RawBadStatus(response.status_code, headers, body)


def describe(raw: RawOutcome) -> str:
    """Return a short label for *raw*, used in debug output."""
    if isinstance(raw, (RawBadStatus, RawGoodStatus)):
        return f"{type(raw).__name__}({raw.status_code})"
    return type(raw).__name__


def _open_file(part: FilePart, stack: ExitStack) -> IO[bytes]:
    content = part.content
    if isinstance(content, bytes):
        return io.BytesIO(content)
    if isinstance(content, Path):
        return stack.enter_context(content.open("rb"))
    return content


def build_request_kwargs(
    descriptor: RequestDescriptor[Any],
    stack: ExitStack,
    wrap_file: Optional[Callable[[IO[bytes]], Any]] = None,
) -> dict[str, Any]:
    """Translate *descriptor* into keyword arguments for httpx.

    JSON bodies are serialised compactly and sent as
    ``application/vnd.api+json``.  Multipart bodies leave the content type
    to httpx so that it can set the boundary; files given as paths are
    opened inside *stack*.

    Args:
        descriptor: The request to send.
        stack: Owns any file handles opened for the request.
        wrap_file: Optional wrapper applied to every file object, used by
            uploads to meter progress.
    """
    body = descriptor.body
    kwargs: dict[str, Any] = {
        "method": descriptor.method.value,
        "url": descriptor.url,
    }

    if isinstance(body, MultipartBody):
        kwargs["headers"] = outbound_headers(descriptor.headers, has_body=False)
        if body.fields:
            kwargs["data"] = dict(body.fields)
        files = []
        for part in body.files:
            handle: Any = _open_file(part, stack)
            if wrap_file is not None:
                handle = wrap_file(handle)
            if part.content_type:
                files.append((part.name, (part.resolved_filename(), handle, part.content_type)))
            else:
                files.append((part.name, (part.resolved_filename(), handle)))
        kwargs["files"] = files
    elif body is not None:
        kwargs["headers"] = outbound_headers(descriptor.headers, has_body=True)
        kwargs["content"] = serialize_body(body)
    else:
        kwargs["headers"] = outbound_headers(descriptor.headers, has_body=False)

    return kwargs
