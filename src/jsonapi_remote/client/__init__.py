"""JSON:API clients for jsonapi_remote.

Provides synchronous and asynchronous clients that wrap :mod:`httpx` and
return classified :mod:`remote <jsonapi_remote.remote>` values instead of
raw responses.

Classes:
    :class:`SyncClient` -- blocking client backed by :class:`httpx.Client`,
    including tracked multipart uploads.
    :class:`AsyncClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.

Both clients are context managers and accept the same parameters: a
:class:`~jsonapi_remote.models.RequestConfig` and an optional httpx
transport.

Example::

    from jsonapi_remote.client import SyncClient

    with SyncClient(config) as client:
        result = client.get("/articles")
"""

from jsonapi_remote.client.async_client import AsyncClient
from jsonapi_remote.client.sync_client import SyncClient

__all__ = ["SyncClient", "AsyncClient"]
