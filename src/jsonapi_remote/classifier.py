"""Response classification -- raw transport outcomes to typed results.

One decision table serves all three request shapes:

===================  ===========================  =======================================
Raw outcome          Condition                    Result
===================  ===========================  =======================================
``RawBadUrl``        --                           ``Failed(TransportError(BadUrl))``
``RawTimeout``       --                           ``Failed(TransportError(Timeout))``
``RawNetworkError``  --                           ``Failed(TransportError(NetworkError))``
``RawBadStatus``     status 422                   decode the body
``RawBadStatus``     any other status             ``Failed(TransportError(BadStatus))``
``RawGoodStatus``    status is content-free       ``Succeeded(shape.content_free_value)``
``RawGoodStatus``    shape has a decoder          decode the body
``RawGoodStatus``    shape has no decoder         ``Failed(TransportError(BadStatus))``
===================  ===========================  =======================================

Decoding maps :class:`~jsonapi_remote.decoding.ParseFailure` to ``BadBody``,
``Rejected`` to :class:`~jsonapi_remote.outcomes.DocumentError`, ``Refused``
to :class:`~jsonapi_remote.outcomes.CustomError` and ``Decoded`` to success.

Extracted headers ride along on every result derived from an actual
response; the three outcomes without a response carry an empty list.

Everything here is pure: no I/O, no logging, no state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, TypeVar

from jsonapi_remote.decoding import Decoder, ParseFailure, Refused, Rejected, decode_document
from jsonapi_remote.headers import extract_headers
from jsonapi_remote.outcomes import (
    AdvanceContent,
    BadBody,
    BadStatus,
    BadUrl,
    CustomError,
    DocumentContent,
    DocumentError,
    NetworkError,
    NoContent,
    OutcomeError,
    Timeout,
    TransportError,
    WithHeaders,
)
from jsonapi_remote.remote import Failed, RemoteData, Succeeded
from jsonapi_remote.transport import (
    RawBadStatus,
    RawBadUrl,
    RawGoodStatus,
    RawNetworkError,
    RawOutcome,
    RawTimeout,
)

T = TypeVar("T")

UNPROCESSABLE_ENTITY = 422
NO_CONTENT_STATUSES = frozenset({200, 202, 204})
ADVANCE_NO_CONTENT_STATUSES = frozenset({204})

Classified = RemoteData[WithHeaders[OutcomeError], WithHeaders[T]]


def _identity(value: Any) -> Any:
    return value


@dataclass(frozen=True)
class SuccessShape:
    """How a request shape turns a good response into a success.

    Attributes:
        content_free_statuses: 2xx statuses that succeed without reading
            the body.
        content_free_value: The success value for those statuses.
        wrap: Applied to every decoded value.
    """

    content_free_statuses: frozenset[int] = frozenset()
    content_free_value: Any = None
    wrap: Callable[[Any], Any] = _identity


PLAIN = SuccessShape()
NO_CONTENT = SuccessShape(content_free_statuses=NO_CONTENT_STATUSES)
ADVANCE_CONTENT = SuccessShape(
    content_free_statuses=ADVANCE_NO_CONTENT_STATUSES,
    content_free_value=NoContent(),
    wrap=DocumentContent,
)


def _failed(error: OutcomeError, headers: tuple[tuple[str, str], ...] = ()) -> Classified[Any]:
    return Failed(WithHeaders(error, headers))


def _decode_body(
    body: str,
    decoder: Decoder[Any],
    headers: tuple[tuple[str, str], ...],
    wrap: Callable[[Any], Any],
) -> Classified[Any]:
    try:
        outcome = decoder(body)
    except ValueError as exc:
        return _failed(TransportError(BadBody(str(exc))), headers)
    if isinstance(outcome, ParseFailure):
        return _failed(TransportError(BadBody(outcome.message)), headers)
    result = outcome.result
    if isinstance(result, Rejected):
        return _failed(DocumentError(result.errors), headers)
    if isinstance(result, Refused):
        return _failed(CustomError(result.message), headers)
    return Succeeded(WithHeaders(wrap(result.value), headers))


def _decode_unprocessable(body: str, headers: tuple[tuple[str, str], ...]) -> Classified[Any]:
    # Shapes without a decoder still surface 422 validation errors; any
    # other 422 payload remains a bad status.
    verdict = _decode_body(body, decode_document, headers, _identity)
    if isinstance(verdict, Succeeded):
        return _failed(TransportError(BadStatus(UNPROCESSABLE_ENTITY)), headers)
    return verdict


def classify_with(
    raw: RawOutcome,
    decoder: Optional[Decoder[Any]],
    extract: Iterable[str],
    shape: SuccessShape,
) -> Classified[Any]:
    """Run the decision table for *raw* under the given success *shape*.

    Args:
        raw: What the transport reported.
        decoder: Body decoder, or ``None`` for shapes that never decode.
        extract: Response header names to keep.
        shape: The request shape's success strategy.

    Returns:
        Exactly one ``Failed`` or ``Succeeded`` value, both paired with the
        extracted headers.

    Raises:
        TypeError: If *raw* is not a raw outcome variant.
    """
    if isinstance(raw, RawBadUrl):
        return _failed(TransportError(BadUrl(raw.url)))
    if isinstance(raw, RawTimeout):
        return _failed(TransportError(Timeout()))
    if isinstance(raw, RawNetworkError):
        return _failed(TransportError(NetworkError()))

    if isinstance(raw, RawBadStatus):
        headers = extract_headers(raw.headers, extract)
        if raw.status_code != UNPROCESSABLE_ENTITY:
            return _failed(TransportError(BadStatus(raw.status_code)), headers)
        if decoder is None:
            return _decode_unprocessable(raw.body, headers)
        return _decode_body(raw.body, decoder, headers, shape.wrap)

    if isinstance(raw, RawGoodStatus):
        headers = extract_headers(raw.headers, extract)
        if raw.status_code in shape.content_free_statuses:
            return Succeeded(WithHeaders(shape.content_free_value, headers))
        if decoder is None:
            return _failed(TransportError(BadStatus(raw.status_code)), headers)
        return _decode_body(raw.body, decoder, headers, shape.wrap)

    raise TypeError(f"Not a raw transport outcome: {raw!r}")


def classify(
    raw: RawOutcome,
    decoder: Decoder[T],
    extract: Iterable[str] = (),
) -> Classified[T]:
    """Classify a response whose body is always decoded (plain or custom payloads)."""
    return classify_with(raw, decoder, extract, PLAIN)


def classify_no_content(raw: RawOutcome, extract: Iterable[str] = ()) -> Classified[None]:
    """Classify a response that is expected to carry no body.

    200, 202 and 204 succeed with ``None``; any other 2xx is a bad status.
    """
    return classify_with(raw, None, extract, NO_CONTENT)


def classify_advance_content(
    raw: RawOutcome,
    decoder: Decoder[T],
    extract: Iterable[str] = (),
) -> Classified[AdvanceContent[T]]:
    """Classify a response that may carry a document or answer 204.

    204 succeeds with :class:`~jsonapi_remote.outcomes.NoContent` without
    looking at the body; any other 2xx is decoded and wrapped in
    :class:`~jsonapi_remote.outcomes.DocumentContent`.
    """
    return classify_with(raw, decoder, extract, ADVANCE_CONTENT)
