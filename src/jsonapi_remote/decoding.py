"""Two-level decoders for response bodies.

A decoder is any callable ``str -> DecodeOutcome``.  The outer level says
whether the body could be parsed at all; the inner level says what the
parsed payload means:

* :class:`ParseFailure` -- the body is malformed or structurally wrong.
  The classifier reports it as ``BadBody`` with ``message`` verbatim.
* ``Parsed(Decoded(value))`` -- the payload decoded into ``value``.
* ``Parsed(Rejected(errors))`` -- the payload is a JSON:API error document;
  ``errors`` is the non-empty error list in server order.
* ``Parsed(Refused(message))`` -- a custom decoder parsed the payload but
  refused it for a domain reason.

Three decoders ship with the library, all built on pydantic:

* :func:`decode_document` -- any JSON:API top-level document.
* :func:`resource_decoder` -- primary data validated into a pydantic model.
* :func:`custom_decoder` -- arbitrary JSON validated into a model or
  :class:`~pydantic.TypeAdapter`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from jsonapi_remote.models import Document, JsonApiError, ResourceObject

T = TypeVar("T")


@dataclass(frozen=True)
class Decoded(Generic[T]):
    value: T


@dataclass(frozen=True)
class Rejected:
    errors: tuple[JsonApiError, ...]

    def __post_init__(self) -> None:
        errors = tuple(self.errors)
        if not errors:
            raise ValueError("Rejected requires at least one error")
        object.__setattr__(self, "errors", errors)


@dataclass(frozen=True)
class Refused:
    message: str


@dataclass(frozen=True)
class Parsed(Generic[T]):
    result: Union[Decoded[T], Rejected, Refused]


@dataclass(frozen=True)
class ParseFailure:
    message: str


DecodeOutcome = Union[Parsed[T], ParseFailure]
Decoder = Callable[[str], DecodeOutcome[T]]

_ANY_JSON: TypeAdapter[Any] = TypeAdapter(Any)


def decode_document(body: str) -> DecodeOutcome[Document]:
    """Decode *body* as a JSON:API top-level document.

    A document with a non-empty ``errors`` member is ``Rejected``; any other
    valid document is ``Decoded``.
    """
    try:
        document = Document.model_validate_json(body)
    except ValidationError as exc:
        return ParseFailure(str(exc))
    if document.errors:
        return Parsed(Rejected(document.errors))
    return Parsed(Decoded(document))


def _flatten(resource: ResourceObject) -> dict[str, Any]:
    return {**resource.attributes, "id": resource.id, "type": resource.type}


def resource_decoder(model: type[T], many: bool = False) -> Decoder[Any]:
    """Build a decoder that validates primary data into *model*.

    Each resource's ``attributes`` are merged with its ``id`` and ``type``
    and validated through *model*.  With ``many=True`` the primary data must
    be a collection and the decoded value is a list.

    Example::

        class Article(BaseModel):
            id: str
            title: str

        decoder = resource_decoder(Article, many=True)
    """
    adapter: TypeAdapter[Any] = TypeAdapter(list[model] if many else model)  # type: ignore[valid-type]

    def decode(body: str) -> DecodeOutcome[Any]:
        outcome = decode_document(body)
        if isinstance(outcome, ParseFailure) or not isinstance(outcome.result, Decoded):
            return outcome
        data = outcome.result.value.data
        if many:
            if not isinstance(data, list):
                return ParseFailure("Expected a collection of resources as primary data")
            payload: Any = [_flatten(resource) for resource in data]
        else:
            if not isinstance(data, ResourceObject):
                return ParseFailure("Expected a single resource as primary data")
            payload = _flatten(data)
        try:
            return Parsed(Decoded(adapter.validate_python(payload)))
        except ValidationError as exc:
            return ParseFailure(str(exc))

    return decode


def _error_document(payload: Any) -> Optional[Document]:
    if not isinstance(payload, dict) or not payload.get("errors") or "data" in payload:
        return None
    try:
        return Document.model_validate(payload)
    except ValidationError:
        return None


def custom_decoder(
    target: Union[type[T], TypeAdapter[T]],
    check: Optional[Callable[[T], Optional[str]]] = None,
) -> Decoder[T]:
    """Build a decoder for a non-document payload.

    The body is parsed as JSON and validated through *target* (a pydantic
    model, any type pydantic understands, or a ready
    :class:`~pydantic.TypeAdapter`).  A JSON:API error document is still
    recognised and ``Rejected``, so 422 answers stay typed.

    Args:
        target: What the payload should validate into.
        check: Optional domain check run on the validated value.  Returning
            a message refuses the payload; returning ``None`` accepts it.
    """
    adapter: TypeAdapter[T] = target if isinstance(target, TypeAdapter) else TypeAdapter(target)

    def decode(body: str) -> DecodeOutcome[T]:
        try:
            payload = _ANY_JSON.validate_json(body)
        except ValidationError as exc:
            return ParseFailure(str(exc))
        errors_doc = _error_document(payload)
        if errors_doc is not None and errors_doc.errors:
            return Parsed(Rejected(errors_doc.errors))
        try:
            value = adapter.validate_python(payload)
        except ValidationError as exc:
            return ParseFailure(str(exc))
        if check is not None:
            message = check(value)
            if message is not None:
                return Parsed(Refused(message))
        return Parsed(Decoded(value))

    return decode
