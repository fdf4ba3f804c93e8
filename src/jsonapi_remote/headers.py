"""Header handling for JSON:API requests and responses.

Outbound, every request advertises ``Accept: application/vnd.api+json`` and
a request that carries a body sends it as ``application/vnd.api+json``
without pretty-printing.  Inbound, :func:`extract_headers` keeps only the
response headers the caller listed.
"""

from __future__ import annotations

import json
import string
from typing import Any, Iterable

from pydantic import BaseModel

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _ascii_lower(value: str) -> str:
    return value.translate(_ASCII_LOWER)


def extract_headers(
    headers: Iterable[tuple[str, str]],
    names: Iterable[str],
) -> tuple[tuple[str, str], ...]:
    """Return the response headers whose name appears in *names*.

    Names are compared after ASCII lowercasing on both sides.  The result
    keeps the response's order and the response's own casing; requested
    names the response does not carry are simply absent.

    Example::

        >>> extract_headers([("X-Total", "5"), ("X-Other", "y")], ["x-total"])
        (('X-Total', '5'),)
    """
    wanted = {_ascii_lower(name) for name in names}
    if not wanted:
        return ()
    return tuple(
        (name, value) for name, value in headers if _ascii_lower(name) in wanted
    )


def outbound_headers(
    headers: Iterable[tuple[str, str]],
    has_body: bool,
) -> list[tuple[str, str]]:
    """Build the header list sent on the wire.

    ``Accept`` is always first.  When a JSON body is sent, any caller
    ``Content-Type`` is replaced by the JSON:API media type.
    """
    merged: list[tuple[str, str]] = [("Accept", JSONAPI_MEDIA_TYPE)]
    for name, value in headers:
        if has_body and _ascii_lower(name) == "content-type":
            continue
        merged.append((name, value))
    if has_body:
        merged.append(("Content-Type", JSONAPI_MEDIA_TYPE))
    return merged


def serialize_body(body: Any) -> bytes:
    """Encode *body* as compact UTF-8 JSON.

    Pydantic models are dumped in JSON mode with ``None`` members omitted,
    everything else goes through :func:`json.dumps` as is.
    """
    if isinstance(body, BaseModel):
        body = body.model_dump(mode="json", by_alias=True, exclude_none=True)
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
