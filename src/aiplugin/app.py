"""Typer application and CLI entry point for aiplugin.

This module wires together the top-level Typer application and registers the
built-in commands (``inspect``, ``paths``, ``call``, ``oauth``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~aiplugin.exceptions.AIPluginError` exits with the error's code;
anything else is written to a crash log under the data directory.

See Also:
    :mod:`aiplugin.config`: Configuration resolution.
    :mod:`aiplugin.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from aiplugin import __version__
from aiplugin.commands.call import call_command
from aiplugin.commands.config import config_app
from aiplugin.commands.inspect import inspect_command, paths_command
from aiplugin.commands.oauth import oauth_app
from aiplugin.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="aiplugin",
    help="Discover, inspect, and call AI plugins published by websites.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("inspect")(inspect_command)
app.command("paths")(paths_command)
app.command("call")(call_command)
app.add_typer(oauth_app, name="oauth", help="Run a plugin's OAuth flow.")
app.add_typer(config_app, name="config", help="View or change stored defaults.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"aiplugin {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send library log records to stderr through Rich when *verbose*."""
    logger = logging.getLogger("aiplugin")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    if verbose:
        handler = RichHandler(
            console=Console(stderr=True), show_path=False, rich_tracebacks=True
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.WARNING)


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
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    manifest_path: Optional[str] = typer.Option(
        None, "--manifest-path", help="Path of the plugin manifest on a site."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Request timeout in seconds."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~aiplugin.output.OutputManager` and
    logging from the flags, resolves the effective configuration, and stores
    it in ``ctx.obj["config"]`` for the commands.
    """
    from aiplugin.config import resolve_config
    from aiplugin.exceptions import ConfigError
    from aiplugin.output import OutputFormat, OutputManager, error, set_output, warning

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )
    _configure_logging(verbose)
    if json_output and plain_output:
        warning("--json and --plain both given; using JSON")

    try:
        config = resolve_config(
            cli_manifest_path=manifest_path,
            cli_timeout=timeout,
            cli_format=fmt.value if fmt != OutputFormat.AUTO else None,
        )
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from aiplugin.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        f"{type(exc).__name__}: {exc}\n\n{traceback.format_exc()}", encoding="utf-8"
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``aiplugin`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from aiplugin.exceptions import AIPluginError
        from aiplugin.output import error

        if isinstance(exc, AIPluginError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
