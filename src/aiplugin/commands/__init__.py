"""Built-in CLI sub-commands for aiplugin.

Each module registers thin Typer callbacks over the library:

* :mod:`~aiplugin.commands.inspect` -- ``inspect`` (manifest discovery) and
  ``paths`` (operations of the plugin's OpenAPI document).
* :mod:`~aiplugin.commands.call` -- ``call`` an endpoint of a plugin.
* :mod:`~aiplugin.commands.oauth` -- the ``oauth`` group (authorization URL
  and code exchange).
* :mod:`~aiplugin.commands.config` -- the ``config`` group (show, set and
  reset the stored defaults).

Commands read the effective :class:`~aiplugin.models.GlobalConfig` from
``ctx.obj["config"]`` (set by :func:`~aiplugin.app.main_callback`). An
``httpx`` transport placed in ``ctx.obj["transport"]`` is used for every
request, which is how the integration tests run the CLI offline.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, Optional, TypeVar

import httpx
import typer

from aiplugin.client import create_async_client
from aiplugin.exceptions import AIPluginError
from aiplugin.models import GlobalConfig
from aiplugin.output import error

T = TypeVar("T")


def get_config(ctx: typer.Context) -> GlobalConfig:
    """Return the effective config stored by the root callback."""
    obj = ctx.find_root().obj or {}
    return obj.get("config") or GlobalConfig()


def open_client(ctx: typer.Context) -> httpx.AsyncClient:
    """Create the HTTP client for one command invocation."""
    obj = ctx.find_root().obj or {}
    transport: Optional[httpx.AsyncBaseTransport] = obj.get("transport")
    return create_async_client(get_config(ctx), transport=transport)


def run_command(coro: Coroutine[Any, Any, T]) -> T:
    """Run *coro* to completion, turning library errors into a clean exit.

    Raises:
        typer.Exit: With the error's ``exit_code`` on :class:`AIPluginError`.
    """
    try:
        return asyncio.run(coro)
    except AIPluginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
