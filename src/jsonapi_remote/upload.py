"""Cancelable multipart uploads with progress reporting.

:meth:`SyncClient.upload <jsonapi_remote.client.SyncClient.upload>` submits
:func:`run_upload` to a worker thread and hands back an
:class:`UploadTracker`.  The tracker wraps the worker's
:class:`concurrent.futures.Future`, which always resolves with a classified
result: transport failures and cancellation are folded into ``Failed``
exactly like the other request shapes.

Progress is reported in two phases:

* ``"upload"`` -- bytes of file content read by httpx while sending.
* ``"download"`` -- bytes of the response body received.
"""

from __future__ import annotations

import io
import threading
from concurrent.futures import Future, wait
from contextlib import ExitStack
from dataclasses import dataclass
from typing import IO, Any, Callable, Optional

import httpx

from jsonapi_remote.classifier import Classified, classify
from jsonapi_remote.outcomes import NetworkError, TransportError, WithHeaders
from jsonapi_remote.output import get_output
from jsonapi_remote.remote import Failed
from jsonapi_remote.request import RequestDescriptor
from jsonapi_remote.transport import (
    RAW_TRANSPORT_ERRORS,
    build_request_kwargs,
    from_exception,
    from_response,
)

UPLOAD = "upload"
DOWNLOAD = "download"

CANCELLED_RESULT: Classified[Any] = Failed(WithHeaders(TransportError(NetworkError()), ()))


@dataclass(frozen=True)
class Progress:
    """One progress event.

    Attributes:
        phase: ``"upload"`` or ``"download"``.
        transferred: Bytes transferred so far in this phase.
        total: Expected bytes for this phase, or ``None`` when unknown.
    """

    phase: str
    transferred: int
    total: Optional[int] = None

    @property
    def fraction(self) -> Optional[float]:
        """Completed share in ``[0, 1]``, or ``None`` when the total is unknown."""
        if not self.total:
            return None
        return min(self.transferred / self.total, 1.0)


class _UploadCancelled(Exception):
    """Raised inside the worker to abort a request in progress."""


class UploadTracker:
    """Handle on a running upload.

    The tracker is created by the client; callers use it to cancel the
    submission or to wait for the classified result.
    """

    def __init__(self) -> None:
        self._cancel_event = threading.Event()
        self._future: Optional[Future[Classified[Any]]] = None

    def attach(
        self,
        future: Future[Classified[Any]],
        on_complete: Optional[Callable[[Classified[Any]], None]] = None,
    ) -> None:
        """Bind the worker *future*; *on_complete* fires once when it resolves."""
        self._future = future
        if on_complete is not None:
            future.add_done_callback(lambda done: on_complete(_settled(done)))

    @property
    def future(self) -> Future[Classified[Any]]:
        if self._future is None:
            raise RuntimeError("Upload has not been submitted")
        return self._future

    @property
    def cancelled(self) -> bool:
        """True once :meth:`cancel` has been called."""
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Ask the worker to abort.

        The upload still resolves exactly once, with a ``NetworkError``
        failure unless the response had already been classified.
        """
        self._cancel_event.set()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> Classified[Any]:
        """Block until the upload resolves and return its classified result.

        Raises:
            TimeoutError: If *timeout* elapses first.
        """
        future = self.future
        if not wait([future], timeout).done:
            raise TimeoutError(f"Upload still running after {timeout}s")
        return _settled(future)

    def check_cancelled(self) -> None:
        if self._cancel_event.is_set():
            raise _UploadCancelled()


class _Meter:
    def __init__(self, tracker: UploadTracker, on_progress: Optional[Callable[[Progress], None]]):
        self.tracker = tracker
        self.on_progress = on_progress
        self.total: Optional[int] = 0
        self.sent = 0

    def add_length(self, length: Optional[int]) -> None:
        if length is None or self.total is None:
            self.total = None
        else:
            self.total += length

    def advance(self, count: int) -> None:
        self.sent += count
        self.report(Progress(UPLOAD, self.sent, self.total))

    def report(self, event: Progress) -> None:
        if self.on_progress is None:
            return
        try:
            self.on_progress(event)
        except Exception as exc:
            # A broken sink is dropped; the upload itself carries on.
            get_output().warning(f"Progress callback failed and was disabled: {exc!r}")
            self.on_progress = None


class _ProgressReader:
    """File wrapper that meters reads and aborts them once cancelled."""

    def __init__(self, raw: IO[bytes], meter: _Meter) -> None:
        self._raw = raw
        self._meter = meter
        meter.add_length(_remaining_length(raw))

    def read(self, size: int = -1) -> bytes:
        self._meter.tracker.check_cancelled()
        chunk = self._raw.read(size)
        if chunk:
            self._meter.advance(len(chunk))
        return chunk

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        return self._raw.seek(offset, whence)

    def tell(self) -> int:
        return self._raw.tell()

    def __getattr__(self, name: str) -> Any:
        return getattr(self._raw, name)


def _remaining_length(raw: IO[bytes]) -> Optional[int]:
    try:
        offset = raw.tell()
        end = raw.seek(0, io.SEEK_END)
        raw.seek(offset)
    except (AttributeError, OSError):
        return None
    return end - offset


def _settled(future: Future[Classified[Any]]) -> Classified[Any]:
    """Return the result of a finished worker *future*, never raising.

    A worker cancelled before it started resolves as cancelled; a worker
    that died with an unexpected exception resolves as a network failure.
    """
    if future.cancelled():
        return CANCELLED_RESULT
    exc = future.exception()
    if exc is not None:
        get_output().debug(f"Upload worker failed: {exc!r}")
        return Failed(WithHeaders(TransportError(NetworkError()), ()))
    return future.result()


def _content_length(response: httpx.Response) -> Optional[int]:
    value = response.headers.get("content-length")
    if value is None or not value.isdigit():
        return None
    return int(value)


def run_upload(
    client: httpx.Client,
    descriptor: RequestDescriptor[Any],
    tracker: UploadTracker,
    on_progress: Optional[Callable[[Progress], None]] = None,
) -> Classified[Any]:
    """Send a multipart *descriptor* through *client* and classify the answer.

    Runs on the client's worker thread.  Never raises for transport
    failures or cancellation.
    """
    meter = _Meter(tracker, on_progress)
    try:
        tracker.check_cancelled()
        with ExitStack() as stack:
            kwargs = build_request_kwargs(
                descriptor, stack, wrap_file=lambda handle: _ProgressReader(handle, meter)
            )
            with client.stream(**kwargs) as response:
                total = _content_length(response)
                chunks = []
                for chunk in response.iter_bytes():
                    tracker.check_cancelled()
                    chunks.append(chunk)
                    meter.report(Progress(DOWNLOAD, response.num_bytes_downloaded, total))
                tracker.check_cancelled()
                text = b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")
                raw = from_response(response, text)
    except _UploadCancelled:
        return CANCELLED_RESULT
    except RAW_TRANSPORT_ERRORS as exc:
        raw = from_exception(exc, descriptor.url)
    return classify(raw, descriptor.decoder, descriptor.extract_headers)
