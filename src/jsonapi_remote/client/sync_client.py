"""Synchronous JSON:API client -- requests in, classified results out.

This module provides :class:`SyncClient`, the blocking client backed by
:class:`httpx.Client`.  Each public entry point sends one
:class:`~jsonapi_remote.request.RequestDescriptor` and runs the answer
through the classifier, so callers always receive a
:mod:`remote <jsonapi_remote.remote>` value:

- :meth:`SyncClient.request` -- decode the body (document, resource, or
  custom payload).
- :meth:`SyncClient.request_no_content` -- success depends on the status
  only.
- :meth:`SyncClient.request_advance_content` -- a decoded body, or
  :class:`~jsonapi_remote.outcomes.NoContent` on 204.
- :meth:`SyncClient.upload` -- multipart submission on a worker thread with
  progress reporting and cancellation.

No entry point raises for network failures, timeouts, bad URLs or bad
statuses.  There is no retry logic; re-issue the descriptor to retry.

See Also:
    :class:`~jsonapi_remote.client.async_client.AsyncClient` for the
    asyncio equivalent.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Callable, Optional

import httpx

from jsonapi_remote.classifier import (
    Classified,
    classify,
    classify_advance_content,
    classify_no_content,
)
from jsonapi_remote.decoding import Decoder, decode_document
from jsonapi_remote.exceptions import InvalidUsageError
from jsonapi_remote.models import HTTPMethod, RequestConfig
from jsonapi_remote.output import get_output
from jsonapi_remote.outcomes import AdvanceContent
from jsonapi_remote.remote import Failed
from jsonapi_remote.request import MultipartBody, RequestDescriptor
from jsonapi_remote.transport import (
    RAW_TRANSPORT_ERRORS,
    RawOutcome,
    build_request_kwargs,
    describe,
    from_exception,
    from_response,
)
from jsonapi_remote.upload import Progress, UploadTracker, run_upload


class SyncClient:
    """Blocking JSON:API client.

    Must be used as a context manager so that the underlying
    :class:`httpx.Client` (and the upload worker pool, if one was started)
    is opened and closed properly.

    Args:
        config: Transport settings.  The default has no base URL and no
            timeout.
        transport: Optional httpx transport, typically
            :class:`httpx.MockTransport` in tests.

    Example::

        with SyncClient(RequestConfig(base_url="https://api.example.com")) as client:
            result = client.get("/articles", decode_document, extract=["x-total"])
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.Client] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        config = self._config
        self._client = httpx.Client(
            base_url=config.base_url or "",
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=config.follow_redirects,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Classified entry points
    # ------------------------------------------------------------------ #

    def request(self, descriptor: RequestDescriptor[Any]) -> Classified[Any]:
        """Send *descriptor* and decode the body with its decoder.

        Raises:
            InvalidUsageError: If the descriptor has no decoder.
        """
        decoder = _require_decoder(descriptor)
        raw = self.send(descriptor)
        return self._report(classify(raw, decoder, descriptor.extract_headers))

    def request_no_content(self, descriptor: RequestDescriptor[Any]) -> Classified[None]:
        """Send *descriptor*; 200, 202 and 204 succeed with ``None``.

        The descriptor's decoder, if any, is never called for a 2xx answer.
        """
        raw = self.send(descriptor)
        return self._report(classify_no_content(raw, descriptor.extract_headers))

    def request_advance_content(
        self, descriptor: RequestDescriptor[Any]
    ) -> Classified[AdvanceContent[Any]]:
        """Send *descriptor*; 204 yields ``NoContent``, other 2xx are decoded.

        Raises:
            InvalidUsageError: If the descriptor has no decoder.
        """
        decoder = _require_decoder(descriptor)
        raw = self.send(descriptor)
        return self._report(classify_advance_content(raw, decoder, descriptor.extract_headers))

    def upload(
        self,
        descriptor: RequestDescriptor[Any],
        on_complete: Optional[Callable[[Classified[Any]], None]] = None,
        on_progress: Optional[Callable[[Progress], None]] = None,
    ) -> UploadTracker:
        """Submit a multipart *descriptor* on a worker thread.

        Returns immediately with an :class:`~jsonapi_remote.upload.UploadTracker`
        that can cancel the submission and resolves exactly once with the
        classified result.  *on_complete* is invoked exactly once with that
        result; *on_progress* receives upload and download progress events
        from the worker thread.

        Raises:
            InvalidUsageError: If the descriptor has no decoder or names a
                file part that does not exist.
        """
        _require_decoder(descriptor)
        _require_files(descriptor)
        client = self._require_client()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(thread_name_prefix="jsonapi-upload")
        get_output().debug(f"Upload {descriptor.method.value} {descriptor.url}")
        tracker = UploadTracker()
        future = self._executor.submit(run_upload, client, descriptor, tracker, on_progress)
        tracker.attach(future, on_complete)
        return tracker

    # ------------------------------------------------------------------ #
    # Verb helpers
    # ------------------------------------------------------------------ #

    def get(
        self,
        url: str,
        decoder: Decoder[Any] = decode_document,
        headers: Any = (),
        extract: Any = (),
    ) -> Classified[Any]:
        """GET *url* and decode the answer."""
        return self.request(
            RequestDescriptor(url, HTTPMethod.GET, headers, None, decoder, extract)
        )

    def post(
        self,
        url: str,
        body: Any,
        decoder: Decoder[Any] = decode_document,
        headers: Any = (),
        extract: Any = (),
    ) -> Classified[Any]:
        """POST *body* to *url* and decode the answer."""
        return self.request(
            RequestDescriptor(url, HTTPMethod.POST, headers, body, decoder, extract)
        )

    def put(
        self,
        url: str,
        body: Any,
        decoder: Decoder[Any] = decode_document,
        headers: Any = (),
        extract: Any = (),
    ) -> Classified[Any]:
        """PUT *body* to *url* and decode the answer."""
        return self.request(
            RequestDescriptor(url, HTTPMethod.PUT, headers, body, decoder, extract)
        )

    def patch(
        self,
        url: str,
        body: Any,
        decoder: Decoder[Any] = decode_document,
        headers: Any = (),
        extract: Any = (),
    ) -> Classified[AdvanceContent[Any]]:
        """PATCH *body* to *url*; the server may answer with the resource or 204."""
        return self.request_advance_content(
            RequestDescriptor(url, HTTPMethod.PATCH, headers, body, decoder, extract)
        )

    def delete(self, url: str, headers: Any = (), extract: Any = ()) -> Classified[None]:
        """DELETE *url*, expecting no content."""
        return self.request_no_content(
            RequestDescriptor(url, HTTPMethod.DELETE, headers, None, None, extract)
        )

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #

    def send(self, descriptor: RequestDescriptor[Any]) -> RawOutcome:
        """Send *descriptor* and report what the transport saw.

        Never raises for transport failures; they are folded into the
        returned :data:`~jsonapi_remote.transport.RawOutcome`.
        """
        client = self._require_client()
        output = get_output()
        output.debug(f"{descriptor.method.value} {descriptor.url}")

        with ExitStack() as stack:
            try:
                kwargs = build_request_kwargs(descriptor, stack)
                response = client.request(**kwargs)
            except RAW_TRANSPORT_ERRORS as exc:
                raw = from_exception(exc, descriptor.url)
                output.debug(f"Transport failure: {exc!r} -> {describe(raw)}")
                return raw

        raw = from_response(response)
        output.debug(f"Response {describe(raw)} ({len(response.content)} bytes)")
        return raw

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _require_client(self) -> httpx.Client:
        if self._client is None:
            raise InvalidUsageError("Client not initialised -- use as context manager")
        return self._client

    def _report(self, result: Classified[Any]) -> Classified[Any]:
        verdict = "failed" if isinstance(result, Failed) else "succeeded"
        get_output().debug(f"Classified as {verdict}: {result!r}")
        return result


def _require_files(descriptor: RequestDescriptor[Any]) -> None:
    if not isinstance(descriptor.body, MultipartBody):
        return
    for part in descriptor.body.files:
        if isinstance(part.content, Path) and not part.content.is_file():
            raise InvalidUsageError(f"File not found: {part.content}")


def _require_decoder(descriptor: RequestDescriptor[Any]) -> Decoder[Any]:
    if descriptor.decoder is None:
        raise InvalidUsageError(
            f"{descriptor.method.value} {descriptor.url} needs a decoder for this request shape"
        )
    return descriptor.decoder
