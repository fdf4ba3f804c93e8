"""Typer application and CLI entry point for jsonapi-remote.

The root callback turns the global flags into an
:class:`~jsonapi_remote.output.OutputManager` and stores the connection
overrides in ``ctx.obj`` for the sub-commands:

* request commands (``get``, ``post``, ``put``, ``patch``, ``delete``,
  ``upload``) from :mod:`jsonapi_remote.commands.requests`;
* the ``config`` group from :mod:`jsonapi_remote.commands.config`.

:func:`main` is the console-script entry point declared in
``pyproject.toml``.
"""

from __future__ import annotations

import signal
import sys
from typing import Any, Optional

import typer

from jsonapi_remote import __version__
from jsonapi_remote.commands.config import config_app
from jsonapi_remote.commands.requests import register_request_commands
from jsonapi_remote.exceptions import JsonApiRemoteError
from jsonapi_remote.output import OutputFormat, OutputManager, error, set_output

app = typer.Typer(
    name="jsonapi-remote",
    help="Issue JSON:API requests and print classified results.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(config_app, name="config", help="Configuration management.")
register_request_commands(app)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"jsonapi-remote {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Prefix for relative request URLs."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", min=0, help="Request timeout in seconds (0 disables)."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global output manager and records ``base_url`` and
    ``timeout`` overrides in ``ctx.obj``.  An ``obj`` dict passed in by the
    caller (tests pass an httpx ``transport`` this way) is preserved.
    """
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["base_url"] = base_url
    ctx.obj["timeout"] = timeout
    ctx.obj["format_forced"] = fmt != OutputFormat.AUTO
    ctx.obj["no_color"] = no_color
    ctx.obj["quiet"] = quiet
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``jsonapi-remote`` console script.

    :class:`~jsonapi_remote.exceptions.JsonApiRemoteError` instances that
    escape a command end the process with the error's ``exit_code``.
    """
    _setup_signal_handlers()
    try:
        app()
    except JsonApiRemoteError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
