"""Asynchronous JSON:API client -- mirrors :class:`~jsonapi_remote.client.sync_client.SyncClient`.

This module provides :class:`AsyncClient`, the non-blocking counterpart to
:class:`~jsonapi_remote.client.sync_client.SyncClient`.  It wraps
:class:`httpx.AsyncClient` and exposes the same classified entry points as
coroutines.  Awaiting one is the single-resolution future: it completes
exactly once and never raises for transport failures.

.. note::
   Multipart uploads with progress and cancellation are only offered by
   :class:`~jsonapi_remote.client.sync_client.SyncClient`.  Multipart
   descriptors can still be sent here through :meth:`AsyncClient.request`,
   and cancelling the awaiting task cancels the request.
"""

from __future__ import annotations

from contextlib import ExitStack
from typing import Any, Optional

import httpx

from jsonapi_remote.classifier import (
    Classified,
    classify,
    classify_advance_content,
    classify_no_content,
)
from jsonapi_remote.client.sync_client import _require_decoder
from jsonapi_remote.decoding import Decoder, decode_document
from jsonapi_remote.exceptions import InvalidUsageError
from jsonapi_remote.models import HTTPMethod, RequestConfig
from jsonapi_remote.output import get_output
from jsonapi_remote.outcomes import AdvanceContent
from jsonapi_remote.remote import Failed
from jsonapi_remote.request import RequestDescriptor
from jsonapi_remote.transport import (
    RAW_TRANSPORT_ERRORS,
    RawOutcome,
    build_request_kwargs,
    describe,
    from_exception,
    from_response,
)


class AsyncClient:
    """Asynchronous JSON:API client.

    Must be used as an async context manager.

    Args:
        config: Transport settings.  The default has no base URL and no
            timeout.
        transport: Optional async httpx transport, typically
            :class:`httpx.MockTransport` in tests.

    Example::

        async with AsyncClient(config) as client:
            result = await client.get("/articles")
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncClient:
        config = self._config
        self._client = httpx.AsyncClient(
            base_url=config.base_url or "",
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=config.follow_redirects,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Classified entry points
    # ------------------------------------------------------------------ #

    async def request(self, descriptor: RequestDescriptor[Any]) -> Classified[Any]:
        """Send *descriptor* and decode the body with its decoder.

        Behaves identically to
        :meth:`~jsonapi_remote.client.sync_client.SyncClient.request`.
        """
        decoder = _require_decoder(descriptor)
        raw = await self.send(descriptor)
        return self._report(classify(raw, decoder, descriptor.extract_headers))

    async def request_no_content(self, descriptor: RequestDescriptor[Any]) -> Classified[None]:
        """Send *descriptor*; 200, 202 and 204 succeed with ``None``."""
        raw = await self.send(descriptor)
        return self._report(classify_no_content(raw, descriptor.extract_headers))

    async def request_advance_content(
        self, descriptor: RequestDescriptor[Any]
    ) -> Classified[AdvanceContent[Any]]:
        """Send *descriptor*; 204 yields ``NoContent``, other 2xx are decoded."""
        decoder = _require_decoder(descriptor)
        raw = await self.send(descriptor)
        return self._report(classify_advance_content(raw, decoder, descriptor.extract_headers))

    # ------------------------------------------------------------------ #
    # Verb helpers
    # ------------------------------------------------------------------ #

    async def get(
        self,
        url: str,
        decoder: Decoder[Any] = decode_document,
        headers: Any = (),
        extract: Any = (),
    ) -> Classified[Any]:
        return await self.request(
            RequestDescriptor(url, HTTPMethod.GET, headers, None, decoder, extract)
        )

    async def post(
        self,
        url: str,
        body: Any,
        decoder: Decoder[Any] = decode_document,
        headers: Any = (),
        extract: Any = (),
    ) -> Classified[Any]:
        return await self.request(
            RequestDescriptor(url, HTTPMethod.POST, headers, body, decoder, extract)
        )

    async def put(
        self,
        url: str,
        body: Any,
        decoder: Decoder[Any] = decode_document,
        headers: Any = (),
        extract: Any = (),
    ) -> Classified[Any]:
        return await self.request(
            RequestDescriptor(url, HTTPMethod.PUT, headers, body, decoder, extract)
        )

    async def patch(
        self,
        url: str,
        body: Any,
        decoder: Decoder[Any] = decode_document,
        headers: Any = (),
        extract: Any = (),
    ) -> Classified[AdvanceContent[Any]]:
        return await self.request_advance_content(
            RequestDescriptor(url, HTTPMethod.PATCH, headers, body, decoder, extract)
        )

    async def delete(self, url: str, headers: Any = (), extract: Any = ()) -> Classified[None]:
        return await self.request_no_content(
            RequestDescriptor(url, HTTPMethod.DELETE, headers, None, None, extract)
        )

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #

    async def send(self, descriptor: RequestDescriptor[Any]) -> RawOutcome:
        """Send *descriptor* and report what the transport saw."""
        if self._client is None:
            raise InvalidUsageError("Client not initialised -- use as async context manager")
        output = get_output()
        output.debug(f"{descriptor.method.value} {descriptor.url}")

        with ExitStack() as stack:
            try:
                kwargs = build_request_kwargs(descriptor, stack)
                response = await self._client.request(**kwargs)
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

    def _report(self, result: Classified[Any]) -> Classified[Any]:
        verdict = "failed" if isinstance(result, Failed) else "succeeded"
        get_output().debug(f"Classified as {verdict}: {result!r}")
        return result
