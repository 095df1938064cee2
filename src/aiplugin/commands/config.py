"""Config commands -- view and change the persisted defaults.

``aiplugin config`` edits ``config.json`` in the config directory (see
:func:`~aiplugin.config.get_config_dir`). Values stored there are the lowest
layer of :func:`~aiplugin.config.resolve_config`, so ``AIPLUGIN_*``
variables and flags still win over them::

    aiplugin config set service_name openai
    aiplugin config set request.timeout 10
    aiplugin --json config show
"""

from __future__ import annotations

from typing import Any, NoReturn

import typer
from pydantic import ValidationError

from aiplugin.config import get_config_dir, load_global_config, save_global_config
from aiplugin.exceptions import ConfigError
from aiplugin.exit_codes import EXIT_INVALID_USAGE
from aiplugin.models import GlobalConfig
from aiplugin.output import error, format_response, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the stored configuration."""
    config = _load()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, dotted for nested ones (request.timeout)."),
    value: str = typer.Argument(help="New value."),
) -> None:
    """Store one configuration value.

    The value takes the type of the current one: ``true``/``1``/``yes`` for
    flags, a number for numeric settings, text otherwise.
    """
    data = _load().model_dump(mode="json")

    *parents, name = key.split(".")
    target: dict[str, Any] = data
    for part in parents:
        if not isinstance(target.get(part), dict):
            _usage_error(f"Invalid config key: {key}")
        target = target[part]
    if name not in target or isinstance(target[name], dict):
        _usage_error(f"Unknown config key: {key}")

    target[name] = _coerce(key, target[name], value)

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        _usage_error(f"Invalid value for {key}: {exc.errors()[0]['msg']}")
    if not new_config.manifest_path.startswith("/"):
        _usage_error(f"Manifest path must start with '/', got {new_config.manifest_path!r}")

    save_global_config(new_config)
    success(f"Set {key} = {target[name]}")


@config_app.command("reset")
def config_reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Restore the default configuration."""
    if not yes and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")


def _load() -> GlobalConfig:
    try:
        return load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _coerce(key: str, current: Any, value: str) -> Any:
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, (int, float)):
        try:
            return type(current)(value)
        except ValueError:
            _usage_error(f"Expected a number for {key}, got: {value}")
    return value


def _usage_error(message: str) -> NoReturn:
    error(message)
    raise typer.Exit(code=EXIT_INVALID_USAGE)
