"""Config commands -- view and modify the config file.

Provides the ``jsonapi-remote config`` group.  Keys use dot notation over
:class:`~jsonapi_remote.models.GlobalConfig`, e.g. ``request.base_url`` or
``output.format``.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from jsonapi_remote.config import (
    config_path,
    load_global_config,
    reset_global_config,
    save_global_config,
)
from jsonapi_remote.exceptions import ConfigError
from jsonapi_remote.exit_codes import EXIT_INVALID_USAGE
from jsonapi_remote.models import GlobalConfig
from jsonapi_remote.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)

_UNSET = ("", "none", "null")


def _load() -> GlobalConfig:
    try:
        return load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _coerce(current: Any, value: str) -> Any:
    """Convert *value* to the shape of the field it replaces."""
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, list):
        return [item.strip() for item in value.split(",") if item.strip()]
    if value.lower() in _UNSET:
        return None
    return value


@config_app.command("show")
def config_show() -> None:
    """Show the effective config file contents.

    Example::

        jsonapi-remote config show --json
    """
    config = _load()
    info(f"Config file: {config_path()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'request.timeout')."),
    value: str = typer.Argument(help="Value to set; 'none' clears optional keys."),
) -> None:
    """Set a configuration value.

    List keys such as ``extract_headers`` take a comma separated value.
    The result is validated against the config model before saving.

    Example::

        jsonapi-remote config set request.base_url https://api.example.com
        jsonapi-remote config set extract_headers X-Total-Count,ETag
    """
    data = _load().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if not isinstance(target.get(k), dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)

    coerced = _coerce(target[final_key], value)
    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Delete the config file so every setting falls back to its default."""
    if not yes and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    if reset_global_config():
        success("Configuration reset to defaults.")
    else:
        info("No config file; already using defaults.")
