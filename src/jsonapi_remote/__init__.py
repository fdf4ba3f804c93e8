"""jsonapi_remote -- JSON:API over httpx, with results instead of raw responses.

Application code describes a call with a
:class:`~jsonapi_remote.request.RequestDescriptor`, hands it to a
:class:`~jsonapi_remote.client.SyncClient` or
:class:`~jsonapi_remote.client.AsyncClient`, and receives a four-state
:mod:`remote <jsonapi_remote.remote>` value: ``NotRequested``, ``InFlight``,
``Failed(error)`` or ``Succeeded(value)``.  Transport failures, HTTP status
problems, malformed bodies and JSON:API validation errors all come back as
values, never as exceptions.

Typical use::

    from jsonapi_remote import RequestDescriptor, SyncClient, decode_document

    with SyncClient() as client:
        result = client.request(
            RequestDescriptor(
                url="https://api.example.com/articles",
                decoder=decode_document,
                extract_headers=("x-total-count",),
            )
        )

Modules:
    classifier: The response classification decision table.
    client: Blocking and asyncio clients backed by :mod:`httpx`.
    decoding: Two-level JSON:API and custom payload decoders.
    outcomes: Error variants, success shapes and the header pairing.
    remote: The four-state result type.
    upload: Cancelable multipart uploads with progress callbacks.
    app: Typer command line interface.
"""

__version__ = "0.3.0"

from jsonapi_remote.classifier import (
    classify,
    classify_advance_content,
    classify_no_content,
)
from jsonapi_remote.client import AsyncClient, SyncClient
from jsonapi_remote.decoding import (
    custom_decoder,
    decode_document,
    resource_decoder,
)
from jsonapi_remote.headers import extract_headers
from jsonapi_remote.models import Document, HTTPMethod, JsonApiError, RequestConfig
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
    strip_headers,
)
from jsonapi_remote.remote import Failed, InFlight, NotRequested, Succeeded
from jsonapi_remote.request import FilePart, MultipartBody, RequestDescriptor
from jsonapi_remote.upload import Progress, UploadTracker

__all__ = [
    "AsyncClient",
    "BadBody",
    "BadStatus",
    "BadUrl",
    "CustomError",
    "Document",
    "DocumentContent",
    "DocumentError",
    "Failed",
    "FilePart",
    "HTTPMethod",
    "InFlight",
    "JsonApiError",
    "MultipartBody",
    "NetworkError",
    "NoContent",
    "NotRequested",
    "Progress",
    "RequestConfig",
    "RequestDescriptor",
    "Succeeded",
    "SyncClient",
    "Timeout",
    "TransportError",
    "UploadTracker",
    "WithHeaders",
    "classify",
    "classify_advance_content",
    "classify_no_content",
    "custom_decoder",
    "decode_document",
    "extract_headers",
    "resource_decoder",
    "strip_headers",
]
