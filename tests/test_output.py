"""Tests for the OutputManager and its stdout/stderr discipline."""

from __future__ import annotations

import json

import pytest

from jsonapi_remote import output as output_module
from jsonapi_remote.output import (
    OutputFormat,
    OutputManager,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture
def non_tty(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("jsonapi_remote.output._is_tty", lambda: False)


@pytest.fixture
def tty(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("jsonapi_remote.output._is_tty", lambda: True)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("TERM", raising=False)


# ---------------------------------------------------------------------------
# Format resolution
# ---------------------------------------------------------------------------


class TestFormatResolution:
    def test_auto_on_tty_is_rich(self, tty) -> None:
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_when_piped_is_plain(self, non_tty) -> None:
        assert OutputManager().format == OutputFormat.PLAIN

    def test_no_color_forces_plain(self, tty) -> None:
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_no_color_env(self, tty, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NO_COLOR", "")
        assert OutputManager().format == OutputFormat.PLAIN

    def test_term_dumb(self, tty, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TERM", "dumb")
        assert OutputManager().format == OutputFormat.PLAIN

    def test_explicit_format_wins(self, non_tty) -> None:
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


# ---------------------------------------------------------------------------
# stdout
# ---------------------------------------------------------------------------


class TestFormatResponse:
    def test_json(self, capsys) -> None:
        document = {"data": {"type": "articles", "id": "1"}}
        OutputManager(format=OutputFormat.JSON, no_color=True).format_response(document)
        captured = capsys.readouterr()
        assert json.loads(captured.out) == document
        assert captured.err == ""

    def test_plain_dict_nests_as_json(self, capsys) -> None:
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(
            {"data": {"id": "1"}, "meta": "x"}
        )
        assert capsys.readouterr().out == 'data\t{"id": "1"}\nmeta\tx\n'

    def test_plain_list(self, capsys) -> None:
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(
            [{"id": "1", "type": "articles"}, "loose"]
        )
        assert capsys.readouterr().out == "1\tarticles\nloose\n"


# ---------------------------------------------------------------------------
# stderr
# ---------------------------------------------------------------------------


class TestDiagnostics:
    def test_error_never_suppressed(self, capsys) -> None:
        OutputManager(no_color=True, quiet=True).error("boom")
        captured = capsys.readouterr()
        assert captured.err == "Error: boom\n"
        assert captured.out == ""

    def test_warning_not_suppressed_by_quiet(self, capsys) -> None:
        OutputManager(no_color=True, quiet=True).warning("careful")
        assert capsys.readouterr().err == "Warning: careful\n"

    def test_quiet_suppresses_info_and_success(self, capsys) -> None:
        out = OutputManager(no_color=True, quiet=True)
        out.info("hello")
        out.success("done")
        assert capsys.readouterr().err == ""

    def test_debug_requires_verbose(self, capsys) -> None:
        OutputManager(no_color=True).debug("hidden")
        OutputManager(no_color=True, verbose=True).debug("GET /articles")
        assert capsys.readouterr().err == "[debug] GET /articles\n"

    def test_progress_only_on_tty(self, non_tty, capsys) -> None:
        OutputManager(no_color=True).progress("upload 50%")
        assert capsys.readouterr().err == ""

    def test_print_headers(self, capsys) -> None:
        OutputManager(no_color=True).print_headers((("ETag", "v2"), ("X-Total", "5")))
        captured = capsys.readouterr()
        assert captured.err == "ETag: v2\nX-Total: 5\n"
        assert captured.out == ""

    def test_print_headers_quiet(self, capsys) -> None:
        OutputManager(no_color=True, quiet=True).print_headers((("ETag", "v2"),))
        assert capsys.readouterr().err == ""


# ---------------------------------------------------------------------------
# Global instance
# ---------------------------------------------------------------------------


class TestGlobalOutput:
    def test_lazy_default_is_silent_for_debug(self, capsys) -> None:
        reset_output()
        output_module.debug("not shown")
        assert not get_output().is_verbose
        assert capsys.readouterr().err == ""

    def test_set_and_reset(self) -> None:
        custom = OutputManager(no_color=True, verbose=True)
        set_output(custom)
        assert get_output() is custom
        reset_output()
        assert get_output() is not custom

    def test_convenience_functions_use_global(self, capsys) -> None:
        set_output(OutputManager(format=OutputFormat.JSON, no_color=True))
        output_module.format_response({"ok": True})
        output_module.error("bad")
        captured = capsys.readouterr()
        assert json.loads(captured.out) == {"ok": True}
        assert captured.err == "Error: bad\n"
