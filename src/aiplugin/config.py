"""User configuration for the ``aiplugin`` CLI.

The library itself takes everything as arguments; only the CLI reads
settings from the environment. This module covers:

* **Where files live** -- ``$XDG_CONFIG_HOME/aiplugin`` and
  ``$XDG_DATA_HOME/aiplugin`` on Linux/BSD, ``~/.aiplugin`` elsewhere.
* **The config file** -- one :class:`~aiplugin.models.GlobalConfig` stored as
  JSON, written atomically.
* **Precedence** -- :func:`resolve_config` layers ``AIPLUGIN_*`` environment
  variables and CLI flags over the file.
* **Credential sources** -- :func:`resolve_credential` turns ``env:``,
  ``file:``, ``value:`` and ``prompt`` descriptors into tokens and client
  secrets, so secrets never have to appear on a command line.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
import tempfile
from pathlib import Path
from typing import Optional

from aiplugin.exceptions import ConfigError
from aiplugin.models import GlobalConfig

_APP_NAME = "aiplugin"
_CONFIG_FILENAME = "config.json"

ENV_SERVICE_NAME = "AIPLUGIN_SERVICE_NAME"
ENV_MANIFEST_PATH = "AIPLUGIN_MANIFEST_PATH"
ENV_TIMEOUT = "AIPLUGIN_TIMEOUT"


# --- Directories ---


def _is_xdg_platform() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(xdg_var: str, xdg_default: tuple[str, ...], fallback: tuple[str, ...]) -> Path:
    if _is_xdg_platform():
        base = os.environ.get(xdg_var) or Path.home().joinpath(*xdg_default)
        path = Path(base) / _APP_NAME
    else:
        path = Path.home().joinpath(f".{_APP_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return (and create) the directory holding ``config.json``.

    ``$XDG_CONFIG_HOME/aiplugin`` (default ``~/.config/aiplugin``) on
    Linux/BSD, ``~/.aiplugin`` on macOS and Windows.
    """
    return _app_dir("XDG_CONFIG_HOME", (".config",), ())


def get_data_dir() -> Path:
    """Return (and create) the directory for crash logs.

    ``$XDG_DATA_HOME/aiplugin`` (default ``~/.local/share/aiplugin``) on
    Linux/BSD, ``~/.aiplugin/logs`` on macOS and Windows.
    """
    return _app_dir("XDG_DATA_HOME", (".local", "share"), ("logs",))


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* so readers never see a partial file.

    The data goes to a temporary sibling first, which is renamed over *path*
    once it is on disk. The temporary file is removed if anything fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
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


# --- Config file ---


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read ``config.json``, or return defaults when there is none.

    Raises:
        ConfigError: If the file is not valid JSON or does not validate.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    text = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    _atomic_write(global_config_path(), text)


def resolve_config(
    cli_manifest_path: Optional[str] = None,
    cli_timeout: Optional[float] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Return the effective configuration.

    Later sources win: built-in defaults, then ``config.json``, then the
    ``AIPLUGIN_SERVICE_NAME`` / ``AIPLUGIN_MANIFEST_PATH`` /
    ``AIPLUGIN_TIMEOUT`` environment variables (empty values are ignored),
    then the global CLI flags. The service name is overridden per command
    by ``aiplugin call --service``.

    Raises:
        ConfigError: If the config file is invalid, ``AIPLUGIN_TIMEOUT`` is
            not a number, or the manifest path does not start with ``/``.
    """
    config = load_global_config()

    if os.environ.get(ENV_SERVICE_NAME):
        config.service_name = os.environ[ENV_SERVICE_NAME]
    if os.environ.get(ENV_MANIFEST_PATH):
        config.manifest_path = os.environ[ENV_MANIFEST_PATH]
    if os.environ.get(ENV_TIMEOUT):
        raw_timeout = os.environ[ENV_TIMEOUT]
        try:
            config.request.timeout = float(raw_timeout)
        except ValueError as exc:
            raise ConfigError(
                f"{ENV_TIMEOUT} must be a number of seconds, got {raw_timeout!r}"
            ) from exc

    if cli_manifest_path is not None:
        config.manifest_path = cli_manifest_path
    if cli_timeout is not None:
        config.request.timeout = cli_timeout
    if cli_format is not None:
        config.output.format = cli_format

    if not config.manifest_path.startswith("/"):
        raise ConfigError(
            f"Manifest path must start with '/', got {config.manifest_path!r}"
        )
    return config


# --- Credential sources ---


def resolve_credential(source: str) -> str:
    """Resolve a token or client secret from its source descriptor.

    ``env:NAME``
        The environment variable ``NAME`` (an empty value is a value).
    ``file:PATH``
        The file's content, stripped; ``~`` is expanded.
    ``value:TEXT``
        ``TEXT`` itself.
    ``prompt``
        Asked for without echo; stdin must be a terminal.

    Raises:
        ConfigError: If the source cannot be resolved or is not one of the
            above.
    """
    kind, sep, arg = source.partition(":")

    if kind == "env" and arg:
        value = os.environ.get(arg)
        if value is None:
            raise ConfigError(f"Environment variable '{arg}' is not set (source: {source})")
        return value

    if kind == "file" and arg:
        path = Path(arg).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if kind == "value" and sep:
        return arg

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError("Cannot prompt for credentials: stdin is not a TTY (source: prompt)")
        return getpass.getpass("Enter credential: ")

    raise ConfigError(f"Unknown credential source format: {source}")
