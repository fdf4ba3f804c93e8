"""Tests for the response classification decision table."""

from __future__ import annotations

import json

import pytest

from jsonapi_remote.classifier import (
    ADVANCE_CONTENT,
    NO_CONTENT,
    PLAIN,
    classify,
    classify_advance_content,
    classify_no_content,
    classify_with,
)
from jsonapi_remote.decoding import (
    Decoded,
    ParseFailure,
    Parsed,
    Refused,
    custom_decoder,
    decode_document,
)
from jsonapi_remote.models import Document
from jsonapi_remote.outcomes import (
    BadBody,
    BadStatus,
    BadUrl,
    CustomError,
    DocumentContent,
    DocumentError,
    NetworkError,
    NoContent,
    Timeout,
    TransportError,
    WithHeaders,
)
from jsonapi_remote.remote import Failed, Succeeded
from jsonapi_remote.transport import (
    RawBadStatus,
    RawBadUrl,
    RawGoodStatus,
    RawNetworkError,
    RawTimeout,
)

HEADERS = (("X-Total", "5"), ("X-Other", "y"), ("Content-Type", "application/vnd.api+json"))


def _exploding_decoder(body: str):
    raise AssertionError("decoder must not be called")


def _echo_decoder(body: str):
    return Parsed(Decoded(body))


# ---------------------------------------------------------------------------
# Outcomes without a response
# ---------------------------------------------------------------------------


class TestTransportFailures:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (RawBadUrl("htp:/nope"), BadUrl("htp:/nope")),
            (RawTimeout(), Timeout()),
            (RawNetworkError(), NetworkError()),
        ],
    )
    @pytest.mark.parametrize("shape", [PLAIN, NO_CONTENT, ADVANCE_CONTENT])
    def test_fail_without_headers(self, raw, expected, shape) -> None:
        result = classify_with(raw, _exploding_decoder, ["x-total"], shape)
        assert result == Failed(WithHeaders(TransportError(expected), ()))

    def test_unknown_raw_outcome_is_rejected(self) -> None:
        with pytest.raises(TypeError):
            classify("not a raw outcome", decode_document)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Bad statuses
# ---------------------------------------------------------------------------


class TestBadStatus:
    @pytest.mark.parametrize("status", [400, 401, 404, 409, 500, 503])
    def test_body_is_never_inspected(self, status: int, errors_body: str) -> None:
        raw = RawBadStatus(status, HEADERS, errors_body)
        result = classify(raw, _exploding_decoder, ["x-total"])
        assert result == Failed(
            WithHeaders(TransportError(BadStatus(status)), (("X-Total", "5"),))
        )

    def test_422_with_errors_is_document_error(self, errors_body: str) -> None:
        raw = RawBadStatus(422, HEADERS, errors_body)
        result = classify(raw, decode_document, [])
        assert isinstance(result, Failed)
        error = result.error.value
        assert isinstance(error, DocumentError)
        assert [e.detail for e in error.errors] == [
            "must be at least 8 characters",
            "has already been taken",
            None,
        ]
        assert result.error.headers == ()

    def test_422_with_malformed_body_is_bad_body(self) -> None:
        result = classify(RawBadStatus(422, (), "<html>oops</html>"), decode_document)
        assert isinstance(result, Failed)
        assert isinstance(result.error.value.error, BadBody)

    def test_422_no_content_still_reports_document_errors(self, errors_body: str) -> None:
        result = classify_no_content(RawBadStatus(422, HEADERS, errors_body), ["X-TOTAL"])
        assert isinstance(result, Failed)
        assert isinstance(result.error.value, DocumentError)
        assert result.error.headers == (("X-Total", "5"),)

    def test_422_no_content_with_data_document_is_bad_status(self, article_body: str) -> None:
        result = classify_no_content(RawBadStatus(422, (), article_body))
        assert result == Failed(WithHeaders(TransportError(BadStatus(422)), ()))

    def test_422_advance_content_uses_caller_decoder(self, errors_body: str) -> None:
        result = classify_advance_content(RawBadStatus(422, (), errors_body), decode_document)
        assert isinstance(result, Failed)
        assert len(result.error.value.errors) == 3


# ---------------------------------------------------------------------------
# Plain shape
# ---------------------------------------------------------------------------


class TestPlain:
    def test_decodes_good_status(self, article_body: str) -> None:
        result = classify(RawGoodStatus(200, HEADERS, article_body), decode_document, ["x-total"])
        assert isinstance(result, Succeeded)
        assert isinstance(result.value.value, Document)
        assert result.value.value.data.attributes["words"] == 120
        assert result.value.headers == (("X-Total", "5"),)

    def test_decoder_value_passes_through(self) -> None:
        result = classify(RawGoodStatus(201, (), "payload"), _echo_decoder)
        assert result == Succeeded(WithHeaders("payload", ()))

    def test_parse_failure_message_is_verbatim(self) -> None:
        result = classify(RawGoodStatus(200, (), "x"), lambda body: ParseFailure("boom: x"))
        assert result == Failed(WithHeaders(TransportError(BadBody("boom: x")), ()))

    def test_decoder_value_error_is_bad_body(self) -> None:
        def raising(body: str):
            raise ValueError("unexpected token")

        result = classify(RawGoodStatus(200, (), "x"), raising)
        assert result == Failed(WithHeaders(TransportError(BadBody("unexpected token")), ()))

    def test_error_document_on_200_is_document_error(self, errors_body: str) -> None:
        result = classify(RawGoodStatus(200, (), errors_body), decode_document)
        assert isinstance(result, Failed)
        assert isinstance(result.error.value, DocumentError)

    def test_refused_is_custom_error(self) -> None:
        result = classify(RawGoodStatus(200, (), "{}"), lambda body: Parsed(Refused("quota exceeded")))
        assert result == Failed(WithHeaders(CustomError("quota exceeded"), ()))

    def test_custom_decoder(self) -> None:
        decoder = custom_decoder(dict[str, int])
        result = classify(RawGoodStatus(200, (), json.dumps({"count": 3})), decoder)
        assert result == Succeeded(WithHeaders({"count": 3}, ()))

    def test_idempotent(self, article_body: str) -> None:
        raw = RawGoodStatus(200, HEADERS, article_body)
        assert classify(raw, decode_document, ["x-other"]) == classify(
            raw, decode_document, ["x-other"]
        )


# ---------------------------------------------------------------------------
# No-content shape
# ---------------------------------------------------------------------------


class TestNoContent:
    @pytest.mark.parametrize("status", [200, 202, 204])
    def test_content_free_statuses_succeed(self, status: int) -> None:
        result = classify_no_content(RawGoodStatus(status, HEADERS, "garbage{"), ["x-other"])
        assert result == Succeeded(WithHeaders(None, (("X-Other", "y"),)))

    @pytest.mark.parametrize("status", [201, 203, 206, 418])
    def test_other_statuses_are_bad_status(self, status: int) -> None:
        result = classify_no_content(RawGoodStatus(status, (), ""))
        assert result == Failed(WithHeaders(TransportError(BadStatus(status)), ()))


# ---------------------------------------------------------------------------
# Advance-content shape
# ---------------------------------------------------------------------------


class TestAdvanceContent:
    def test_204_skips_decoding(self) -> None:
        result = classify_advance_content(
            RawGoodStatus(204, HEADERS, "not json at all"), _exploding_decoder, ["x-total"]
        )
        assert result == Succeeded(WithHeaders(NoContent(), (("X-Total", "5"),)))

    def test_200_wraps_document(self, article_body: str) -> None:
        result = classify_advance_content(RawGoodStatus(200, (), article_body), decode_document)
        assert isinstance(result, Succeeded)
        assert isinstance(result.value.value, DocumentContent)
        assert result.value.value.value.data.id == "1"

    def test_200_with_echo_decoder(self) -> None:
        result = classify_advance_content(RawGoodStatus(200, (), "v"), _echo_decoder)
        assert result == Succeeded(WithHeaders(DocumentContent("v"), ()))

    def test_malformed_200_is_bad_body(self) -> None:
        result = classify_advance_content(RawGoodStatus(200, (), ""), decode_document)
        assert isinstance(result, Failed)
        assert isinstance(result.error.value.error, BadBody)
