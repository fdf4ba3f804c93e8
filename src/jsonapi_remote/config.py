"""Configuration management with XDG paths, atomic writes, and precedence resolution.

The only persisted state is a single :class:`~jsonapi_remote.models.GlobalConfig`
JSON file:

* **Location** -- ``$XDG_CONFIG_HOME/jsonapi-remote/config.json`` on
  Linux/BSD (default ``~/.config/jsonapi-remote/``), ``~/.jsonapi-remote/``
  on macOS and Windows.  See :func:`get_config_dir`.
* **Precedence** -- :func:`resolve_config` layers CLI flags over the
  ``JSONAPI_REMOTE_BASE_URL`` / ``JSONAPI_REMOTE_TIMEOUT`` environment
  variables over the file over the model defaults.

Writes go through :func:`_atomic_write` (temp file then rename).
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from jsonapi_remote.exceptions import ConfigError
from jsonapi_remote.models import GlobalConfig

_APP_NAME = "jsonapi-remote"
_CONFIG_FILENAME = "config.json"

ENV_BASE_URL = "JSONAPI_REMOTE_BASE_URL"
ENV_TIMEOUT = "JSONAPI_REMOTE_TIMEOUT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary."""
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_path() -> Path:
    """Path to the config file (which may not exist yet)."""
    return get_config_dir() / _CONFIG_FILENAME


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* through a sibling temp file and ``os.replace``.

    The temp file is removed if anything fails before the rename.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        mode="w",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
        encoding="utf-8",
    )
    try:
        with tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp.name, path)
    except BaseException:
        Path(tmp.name).unlink(missing_ok=True)
        raise


# --- Global config ---


def load_global_config() -> GlobalConfig:
    """Load the config file, or defaults when it does not exist.

    Raises:
        ConfigError: If the file holds invalid JSON or fails validation.
    """
    path = config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist *config* atomically."""
    data = config.model_dump(mode="json")
    _atomic_write(config_path(), json.dumps(data, indent=2) + "\n")


def reset_global_config() -> bool:
    """Delete the config file.  Returns ``False`` if there was none."""
    path = config_path()
    if not path.is_file():
        return False
    path.unlink()
    return True


# --- Precedence resolution ---


def parse_timeout(value: str, source: str) -> Optional[float]:
    """Parse a timeout in seconds; empty, ``0`` or ``none`` mean no timeout.

    Raises:
        ConfigError: If *value* is not a non-negative number.
    """
    text = value.strip().lower()
    if text in ("", "none"):
        return None
    try:
        seconds = float(text)
    except ValueError:
        raise ConfigError(f"Invalid timeout {value!r} from {source}") from None
    if seconds < 0:
        raise ConfigError(f"Timeout from {source} must not be negative, got {value!r}")
    return seconds or None


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_timeout: Optional[float] = None,
) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``JSONAPI_REMOTE_BASE_URL``,
           ``JSONAPI_REMOTE_TIMEOUT``)
        3. User config file
        4. Defaults
    """
    config = load_global_config()
    request = config.request

    env_base_url = os.environ.get(ENV_BASE_URL)
    if cli_base_url is not None:
        request.base_url = cli_base_url
    elif env_base_url:
        request.base_url = env_base_url

    env_timeout = os.environ.get(ENV_TIMEOUT)
    if cli_timeout is not None:
        request.timeout = cli_timeout or None
    elif env_timeout is not None:
        request.timeout = parse_timeout(env_timeout, ENV_TIMEOUT)

    return config
