"""Request commands -- one command per HTTP verb, plus ``upload``.

Every command builds a :class:`~jsonapi_remote.request.RequestDescriptor`,
sends it through :class:`~jsonapi_remote.client.SyncClient`, and renders the
classified result:

* success -- the decoded document on stdout, extracted headers on stderr;
* failure -- the rendered error lines on stderr and the exit code from
  :func:`~jsonapi_remote.messages.exit_code_for`.

``get``, ``post`` and ``put`` decode a JSON:API document; ``patch`` accepts
either a document or ``204 No Content``; ``delete`` only looks at the status.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import typer

from jsonapi_remote.client import SyncClient
from jsonapi_remote.config import resolve_config
from jsonapi_remote.decoding import decode_document
from jsonapi_remote.exceptions import InvalidUsageError, JsonApiRemoteError
from jsonapi_remote.messages import describe_lines, exit_code_for
from jsonapi_remote.models import Document, GlobalConfig, HTTPMethod
from jsonapi_remote.output import OutputFormat, OutputManager, get_output, set_output
from jsonapi_remote.outcomes import DocumentContent, NoContent
from jsonapi_remote.remote import Failed
from jsonapi_remote.request import FilePart, MultipartBody, RequestDescriptor
from jsonapi_remote.upload import Progress

_HEADER_HELP = "Request header as NAME:VALUE (repeatable)."
_EXTRACT_HELP = "Response header to print on stderr (repeatable)."
_BODY_HELP = "JSON:API request document, or @path to read it from a file."


# ------------------------------------------------------------------ #
# Argument parsing
# ------------------------------------------------------------------ #


def parse_header_options(values: Optional[list[str]]) -> list[tuple[str, str]]:
    """Parse repeated ``NAME:VALUE`` options into header pairs."""
    headers = []
    for raw in values or []:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Header must look like NAME:VALUE, got {raw!r}")
        headers.append((name.strip(), value.strip()))
    return headers


def parse_pair_options(values: Optional[list[str]], what: str) -> list[tuple[str, str]]:
    """Parse repeated ``NAME=VALUE`` options."""
    pairs = []
    for raw in values or []:
        name, sep, value = raw.partition("=")
        if not sep or not name:
            raise InvalidUsageError(f"{what} must look like NAME=VALUE, got {raw!r}")
        pairs.append((name, value))
    return pairs


def load_body(body: Optional[str]) -> Any:
    """Parse the ``--body`` option; ``@path`` reads the document from a file."""
    if body is None:
        return None
    text = body
    if body.startswith("@"):
        path = Path(body[1:]).expanduser()
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise InvalidUsageError(f"Cannot read body file {path}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"Request body is not valid JSON: {exc}") from exc


# ------------------------------------------------------------------ #
# Execution and rendering
# ------------------------------------------------------------------ #


def _load_config(ctx: typer.Context) -> GlobalConfig:
    obj = ctx.obj or {}
    config = resolve_config(cli_base_url=obj.get("base_url"), cli_timeout=obj.get("timeout"))
    if not obj.get("format_forced") and config.output.format != OutputFormat.AUTO.value:
        try:
            fmt = OutputFormat(config.output.format)
        except ValueError:
            raise InvalidUsageError(
                f"Unknown output format {config.output.format!r} in config"
            ) from None
        set_output(
            OutputManager(
                format=fmt,
                no_color=obj.get("no_color", False),
                quiet=obj.get("quiet", False),
                verbose=obj.get("verbose", False),
            )
        )
    return config


def _payload(value: Any) -> Any:
    if isinstance(value, DocumentContent):
        value = value.value
    if isinstance(value, Document):
        return value.model_dump(mode="json", exclude_none=True)
    return value


def render_result(result: Any) -> None:
    """Print a classified result; exit non-zero when it failed."""
    output = get_output()
    paired = result.error if isinstance(result, Failed) else result.value
    output.print_headers(paired.headers)

    if isinstance(result, Failed):
        for line in describe_lines(paired):
            output.error(line)
        raise typer.Exit(code=exit_code_for(paired))

    value = paired.value
    if value is None:
        output.success("Request succeeded (no content).")
    elif isinstance(value, NoContent):
        output.success("Request succeeded (204 No Content).")
    else:
        output.format_response(_payload(value))


def _run(
    ctx: typer.Context,
    send: Callable[[SyncClient, GlobalConfig], Any],
) -> None:
    try:
        config = _load_config(ctx)
        transport = (ctx.obj or {}).get("transport")
        with SyncClient(config.request, transport=transport) as client:
            result = send(client, config)
    except JsonApiRemoteError as exc:
        get_output().error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    render_result(result)


def _descriptor(
    config: GlobalConfig,
    url: str,
    method: HTTPMethod,
    header: Optional[list[str]],
    extract: Optional[list[str]],
    body: Any = None,
    decoder: Any = decode_document,
) -> RequestDescriptor[Any]:
    return RequestDescriptor(
        url=url,
        method=method,
        headers=parse_header_options(header),
        body=body,
        decoder=decoder,
        extract_headers=tuple(extract) if extract else tuple(config.extract_headers),
    )


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


def get_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path relative to --base-url."),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help=_HEADER_HELP),
    extract: Optional[list[str]] = typer.Option(None, "--extract", "-x", help=_EXTRACT_HELP),
) -> None:
    """Fetch a JSON:API document.

    Example::

        jsonapi-remote get /articles?page[size]=5 -x X-Total-Count
    """
    _run(
        ctx,
        lambda client, config: client.request(
            _descriptor(config, url, HTTPMethod.GET, header, extract)
        ),
    )


def post_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path relative to --base-url."),
    body: str = typer.Option(..., "--body", "-d", help=_BODY_HELP),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help=_HEADER_HELP),
    extract: Optional[list[str]] = typer.Option(None, "--extract", "-x", help=_EXTRACT_HELP),
) -> None:
    """Create a resource; validation errors are listed per field."""
    _run(
        ctx,
        lambda client, config: client.request(
            _descriptor(config, url, HTTPMethod.POST, header, extract, load_body(body))
        ),
    )


def put_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path relative to --base-url."),
    body: str = typer.Option(..., "--body", "-d", help=_BODY_HELP),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help=_HEADER_HELP),
    extract: Optional[list[str]] = typer.Option(None, "--extract", "-x", help=_EXTRACT_HELP),
) -> None:
    """Replace a resource."""
    _run(
        ctx,
        lambda client, config: client.request(
            _descriptor(config, url, HTTPMethod.PUT, header, extract, load_body(body))
        ),
    )


def patch_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path relative to --base-url."),
    body: str = typer.Option(..., "--body", "-d", help=_BODY_HELP),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help=_HEADER_HELP),
    extract: Optional[list[str]] = typer.Option(None, "--extract", "-x", help=_EXTRACT_HELP),
) -> None:
    """Update a resource; the server may answer with the resource or 204."""
    _run(
        ctx,
        lambda client, config: client.request_advance_content(
            _descriptor(config, url, HTTPMethod.PATCH, header, extract, load_body(body))
        ),
    )


def delete_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path relative to --base-url."),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help=_HEADER_HELP),
    extract: Optional[list[str]] = typer.Option(None, "--extract", "-x", help=_EXTRACT_HELP),
) -> None:
    """Delete a resource; 200, 202 and 204 count as success."""
    _run(
        ctx,
        lambda client, config: client.request_no_content(
            _descriptor(config, url, HTTPMethod.DELETE, header, extract, decoder=None)
        ),
    )


def _report_progress(event: Progress) -> None:
    fraction = event.fraction
    if fraction is None:
        get_output().progress(f"{event.phase}: {event.transferred} bytes")
    else:
        get_output().progress(f"{event.phase}: {fraction:.0%}")


def upload_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Absolute URL or path relative to --base-url."),
    file: list[str] = typer.Option(
        ..., "--file", "-F", help="File part as FIELD=PATH (repeatable)."
    ),
    field: Optional[list[str]] = typer.Option(
        None, "--field", help="Form field as NAME=VALUE (repeatable)."
    ),
    method: str = typer.Option("POST", "--method", "-X", help="HTTP method."),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help=_HEADER_HELP),
    extract: Optional[list[str]] = typer.Option(None, "--extract", "-x", help=_EXTRACT_HELP),
) -> None:
    """Submit files as multipart/form-data, reporting progress on stderr."""

    def send(client: SyncClient, config: GlobalConfig) -> Any:
        parts = []
        for name, path in parse_pair_options(file, "File part"):
            parts.append(FilePart(name=name, content=Path(path).expanduser()))
        body = MultipartBody(fields=parse_pair_options(field, "Form field"), files=parts)
        descriptor = _descriptor(
            config, url, HTTPMethod.parse(method), header, extract, body
        )
        tracker = client.upload(descriptor, on_progress=_report_progress)
        try:
            return tracker.result()
        except (KeyboardInterrupt, SystemExit):
            # Cancel before the client waits on its worker pool.
            tracker.cancel()
            raise

    _run(ctx, send)


def register_request_commands(app: typer.Typer) -> None:
    """Register the request commands on the root *app*."""
    app.command("get")(get_command)
    app.command("post")(post_command)
    app.command("put")(put_command)
    app.command("patch")(patch_command)
    app.command("delete")(delete_command)
    app.command("upload")(upload_command)
