"""Shared test fixtures for jsonapi_remote.

Provides raw-outcome builders, canned JSON:API bodies, isolated config
environments, output state management and a CLI runner.  These fixtures are
automatically discovered by pytest.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest

from jsonapi_remote.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# JSON:API bodies
# ---------------------------------------------------------------------------


ARTICLE_DOCUMENT: dict[str, Any] = {
    "data": {
        "type": "articles",
        "id": "1",
        "attributes": {"title": "JSON:API paints my bikeshed!", "words": 120},
    }
}

VALIDATION_ERRORS: dict[str, Any] = {
    "errors": [
        {
            "status": "422",
            "title": "Invalid Attribute",
            "detail": "must be at least 8 characters",
            "source": {"pointer": "/data/attributes/password"},
        },
        {
            "status": "422",
            "detail": "has already been taken",
            "source": {"pointer": "/data/attributes/username"},
        },
        {"status": "422", "title": "Request is invalid"},
    ]
}


@pytest.fixture
def article_body() -> str:
    return json.dumps(ARTICLE_DOCUMENT)


@pytest.fixture
def errors_body() -> str:
    return json.dumps(VALIDATION_ERRORS)


# ---------------------------------------------------------------------------
# Transport helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_transport() -> Callable[..., httpx.MockTransport]:
    """Build an :class:`httpx.MockTransport` that records every request.

    The returned factory takes a handler ``request -> Response`` and gives
    back the transport; recorded requests are on ``transport.requests``.
    """

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.MockTransport:
        seen: list[httpx.Request] = []

        def recording(request: httpx.Request) -> httpx.Response:
            request.read()
            seen.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording)
        transport.requests = seen  # type: ignore[attr-defined]
        return transport

    return factory


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME at ``tmp_path / "config"``, forces the XDG
    layout regardless of platform, and clears the JSONAPI_REMOTE_*
    environment variables.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setattr("jsonapi_remote.config._is_xdg_platform", lambda: True)
    for var in ["JSONAPI_REMOTE_BASE_URL", "JSONAPI_REMOTE_TIMEOUT"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a plain, quiet OutputManager for tests that ignore output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner with stderr captured separately."""
    from typer.testing import CliRunner

    try:
        return CliRunner(mix_stderr=False)
    except TypeError:
        return CliRunner()
