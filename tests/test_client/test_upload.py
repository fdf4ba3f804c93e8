"""Tests for tracked multipart uploads."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from pathlib import Path

import httpx
import pytest

from jsonapi_remote.client.sync_client import SyncClient
from jsonapi_remote.decoding import decode_document
from jsonapi_remote.exceptions import InvalidUsageError
from jsonapi_remote.models import Document, RequestConfig
from jsonapi_remote.outcomes import BadStatus, DocumentError, NetworkError, TransportError, WithHeaders
from jsonapi_remote.output import OutputManager, reset_output, set_output
from jsonapi_remote.remote import Failed, Succeeded
from jsonapi_remote.request import FilePart, MultipartBody, RequestDescriptor
from jsonapi_remote.upload import CANCELLED_RESULT, Progress, UploadTracker, run_upload

BASE_URL = "https://api.example.com"


@pytest.fixture(autouse=True)
def _clean_output():
    set_output(OutputManager(no_color=True, quiet=True))
    yield
    reset_output()


def _descriptor(content: bytes | Path = b"hello world", **kwargs) -> RequestDescriptor:
    body = MultipartBody(
        fields=[("caption", "holiday")],
        files=[FilePart("photo", content, filename="photo.jpg", content_type="image/jpeg")],
    )
    return RequestDescriptor("/photos", method="POST", body=body, decoder=decode_document, **kwargs)


class TestProgress:
    def test_fraction(self) -> None:
        assert Progress("upload", 5, 10).fraction == 0.5
        assert Progress("upload", 15, 10).fraction == 1.0
        assert Progress("download", 5, None).fraction is None
        assert Progress("download", 0, 0).fraction is None


class TestUpload:
    def test_success_reports_progress_and_completes_once(
        self, mock_transport, article_body: str
    ) -> None:
        transport = mock_transport(
            lambda request: httpx.Response(201, headers={"Location": "/photos/1"}, text=article_body)
        )
        completed = []
        events: list[Progress] = []

        with SyncClient(RequestConfig(base_url=BASE_URL), transport=transport) as client:
            tracker = client.upload(
                _descriptor(extract_headers=["location"]),
                on_complete=completed.append,
                on_progress=events.append,
            )
            result = tracker.result(timeout=5)

        assert isinstance(result, Succeeded)
        assert isinstance(result.value.value, Document)
        assert result.value.headers == (("Location", "/photos/1"),)
        assert completed == [result]
        assert tracker.done()
        assert not tracker.cancelled

        uploads = [e for e in events if e.phase == "upload"]
        downloads = [e for e in events if e.phase == "download"]
        assert uploads and uploads[-1].transferred == len(b"hello world")
        assert downloads and downloads[-1].transferred == len(article_body.encode("utf-8"))
        assert downloads[-1].total == len(article_body.encode("utf-8"))

    def test_multipart_payload(self, mock_transport, article_body: str, tmp_path: Path) -> None:
        path = tmp_path / "photo.jpg"
        path.write_bytes(b"\xff\xd8jpeg")
        transport = mock_transport(lambda request: httpx.Response(201, text=article_body))

        with SyncClient(RequestConfig(base_url=BASE_URL), transport=transport) as client:
            client.upload(_descriptor(path)).result(timeout=5)

        sent = transport.requests[0]
        assert sent.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert b'name="caption"' in sent.content
        assert b'filename="photo.jpg"' in sent.content
        assert b"\xff\xd8jpeg" in sent.content

    def test_validation_errors(self, mock_transport, errors_body: str) -> None:
        transport = mock_transport(lambda request: httpx.Response(422, text=errors_body))
        with SyncClient(RequestConfig(base_url=BASE_URL), transport=transport) as client:
            result = client.upload(_descriptor()).result(timeout=5)
        assert isinstance(result.error.value, DocumentError)

    def test_bad_status(self, mock_transport) -> None:
        transport = mock_transport(lambda request: httpx.Response(413, text="too large"))
        with SyncClient(RequestConfig(base_url=BASE_URL), transport=transport) as client:
            result = client.upload(_descriptor()).result(timeout=5)
        assert result == Failed(WithHeaders(TransportError(BadStatus(413)), ()))

    def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        completed = []
        with SyncClient(RequestConfig(base_url=BASE_URL), transport=httpx.MockTransport(handler)) as client:
            client.upload(_descriptor(), on_complete=completed.append)
        assert completed == [Failed(WithHeaders(TransportError(NetworkError()), ()))]

    def test_cancel_while_waiting_for_response(self, article_body: str) -> None:
        started = threading.Event()
        release = threading.Event()

        def handler(request: httpx.Request) -> httpx.Response:
            started.set()
            release.wait(5)
            return httpx.Response(201, text=article_body)

        completed = []
        with SyncClient(RequestConfig(base_url=BASE_URL), transport=httpx.MockTransport(handler)) as client:
            tracker = client.upload(_descriptor(), on_complete=completed.append)
            assert started.wait(5)
            tracker.cancel()
            release.set()
            result = tracker.result(timeout=5)

        assert tracker.cancelled
        assert result == CANCELLED_RESULT
        assert completed == [CANCELLED_RESULT]

    def test_missing_file_part_rejected_before_submit(
        self, mock_transport, tmp_path: Path
    ) -> None:
        transport = mock_transport(lambda request: httpx.Response(201))
        completed = []
        with SyncClient(RequestConfig(base_url=BASE_URL), transport=transport) as client:
            with pytest.raises(InvalidUsageError, match="File not found"):
                client.upload(_descriptor(tmp_path / "missing.bin"), on_complete=completed.append)
        assert completed == []
        assert transport.requests == []

    def test_failing_progress_callback_still_completes(
        self, mock_transport, article_body: str
    ) -> None:
        transport = mock_transport(lambda request: httpx.Response(201, text=article_body))
        calls = []
        completed = []

        def broken_sink(event: Progress) -> None:
            calls.append(event)
            raise RuntimeError("ui closed")

        with SyncClient(RequestConfig(base_url=BASE_URL), transport=transport) as client:
            tracker = client.upload(
                _descriptor(), on_complete=completed.append, on_progress=broken_sink
            )
            result = tracker.result(timeout=5)

        assert isinstance(result, Succeeded)
        assert completed == [result]
        assert len(calls) == 1

    def test_requires_decoder(self, mock_transport) -> None:
        transport = mock_transport(lambda request: httpx.Response(201))
        descriptor = RequestDescriptor("/photos", method="POST", body=MultipartBody())
        with SyncClient(transport=transport) as client:
            with pytest.raises(InvalidUsageError):
                client.upload(descriptor)


class TestRunUpload:
    def test_cancelled_before_start(self, mock_transport) -> None:
        transport = mock_transport(lambda request: httpx.Response(201))
        tracker = UploadTracker()
        tracker.cancel()
        with httpx.Client(base_url=BASE_URL, transport=transport) as client:
            result = run_upload(client, _descriptor(), tracker)
        assert result == CANCELLED_RESULT
        assert transport.requests == []

    def test_cancelled_while_sending(self, mock_transport) -> None:
        tracker = UploadTracker()
        transport = mock_transport(lambda request: httpx.Response(201))

        def cancel_on_first_chunk(event: Progress) -> None:
            tracker.cancel()

        big = b"x" * (256 * 1024)
        with httpx.Client(base_url=BASE_URL, transport=transport) as client:
            result = run_upload(client, _descriptor(big), tracker, cancel_on_first_chunk)
        assert result == CANCELLED_RESULT

    def test_tracker_result_timeout(self) -> None:
        tracker = UploadTracker()
        tracker.attach(Future())
        with pytest.raises(TimeoutError):
            tracker.result(timeout=0.01)

    def test_tracker_without_future(self) -> None:
        with pytest.raises(RuntimeError):
            UploadTracker().future


class TestUploadTracker:
    def test_worker_exception_resolves_once(self) -> None:
        completed = []
        future: Future = Future()
        tracker = UploadTracker()
        tracker.attach(future, completed.append)

        future.set_exception(FileNotFoundError("photo.jpg"))

        expected = Failed(WithHeaders(TransportError(NetworkError()), ()))
        assert completed == [expected]
        assert tracker.result(timeout=1) == expected

    def test_cancelled_future_resolves_as_cancelled(self) -> None:
        completed = []
        future: Future = Future()
        tracker = UploadTracker()
        tracker.attach(future, completed.append)

        future.cancel()

        assert completed == [CANCELLED_RESULT]
        assert tracker.result(timeout=1) == CANCELLED_RESULT

    def test_success_passes_through(self) -> None:
        completed = []
        future: Future = Future()
        tracker = UploadTracker()
        tracker.attach(future, completed.append)

        future.set_result(Succeeded(WithHeaders(None, ())))

        assert completed == [Succeeded(WithHeaders(None, ()))]
