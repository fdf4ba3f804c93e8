"""Request descriptors -- immutable values describing one outbound call.

A :class:`RequestDescriptor` bundles everything a client needs to issue a
call and classify its answer: target URL, verb, caller headers, body,
decoder, and the names of response headers to keep.  Descriptors are built
per call and never mutated.

Multipart submissions use a :class:`MultipartBody` as the descriptor body;
see :meth:`~jsonapi_remote.client.SyncClient.upload` for the tracked,
callback-based variant.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Generic, Mapping, Optional, TypeVar, Union

from jsonapi_remote.decoding import Decoder
from jsonapi_remote.exceptions import InvalidUsageError
from jsonapi_remote.models import HTTPMethod

T = TypeVar("T")


def _normalise_headers(headers: Any) -> tuple[tuple[str, str], ...]:
    items = headers.items() if isinstance(headers, Mapping) else headers
    normalised = []
    for item in items:
        if not isinstance(item, (tuple, list)) or len(item) != 2:
            raise InvalidUsageError(f"Header must be a (name, value) pair, got {item!r}")
        name, value = item
        if not isinstance(name, str) or not isinstance(value, str):
            raise InvalidUsageError(f"Header name and value must be strings, got {item!r}")
        normalised.append((name, value))
    return tuple(normalised)


@dataclass(frozen=True)
class FilePart:
    """One file of a multipart body.

    ``content`` may be raw bytes, a filesystem path (opened when the
    request is sent), or an open binary file object.
    """

    name: str
    content: Union[bytes, Path, IO[bytes]]
    filename: Optional[str] = None
    content_type: Optional[str] = None

    def resolved_filename(self) -> str:
        if self.filename:
            return self.filename
        if isinstance(self.content, Path):
            return self.content.name
        return self.name


@dataclass(frozen=True)
class MultipartBody:
    """A ``multipart/form-data`` body: plain form fields plus files."""

    fields: tuple[tuple[str, str], ...] = ()
    files: tuple[FilePart, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _normalise_headers(self.fields))
        object.__setattr__(self, "files", tuple(self.files))


@dataclass(frozen=True)
class RequestDescriptor(Generic[T]):
    """Everything needed to send one JSON:API request and classify its answer.

    Args:
        url: Absolute URL, or a path relative to the client's ``base_url``.
        method: One of :class:`~jsonapi_remote.models.HTTPMethod`; strings
            are accepted in any case.
        headers: Caller headers as a mapping or ``(name, value)`` pairs.
            ``Accept: application/vnd.api+json`` is always sent first.
        body: JSON-serialisable payload, pydantic model, or
            :class:`MultipartBody`.  ``None`` sends no body.
        decoder: Decoder for the expected payload.  Required by every entry
            point except the no-content one.
        extract_headers: Response header names to keep in the result.

    Example::

        RequestDescriptor(
            url="/articles/1",
            method="patch",
            body=resource_document("articles", {"title": "Hello"}, id="1"),
            decoder=decode_document,
        )
    """

    url: str
    method: HTTPMethod = HTTPMethod.GET
    headers: tuple[tuple[str, str], ...] = ()
    body: Any = None
    decoder: Optional[Decoder[T]] = None
    extract_headers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", HTTPMethod.parse(self.method))
        object.__setattr__(self, "headers", _normalise_headers(self.headers))
        if isinstance(self.extract_headers, str):
            raise InvalidUsageError("extract_headers must be a sequence of names, not a string")
        object.__setattr__(self, "extract_headers", tuple(self.extract_headers))

    @property
    def is_multipart(self) -> bool:
        return isinstance(self.body, MultipartBody)


def resource_document(
    type_: str,
    attributes: Mapping[str, Any],
    id: Optional[str] = None,
    relationships: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Build a ``{"data": {...}}`` request document for one resource."""
    data: dict[str, Any] = {"type": type_, "attributes": dict(attributes)}
    if id is not None:
        data["id"] = id
    if relationships:
        data["relationships"] = dict(relationships)
    return {"data": data}
