"""Inspect commands -- look at a site's plugin without calling it.

* ``aiplugin inspect URL`` -- discover and print the site's manifest.
  Exits with :data:`~aiplugin.exit_codes.EXIT_NOT_FOUND` when the site
  publishes none.
* ``aiplugin paths URL`` -- list the operations declared by the plugin's
  OpenAPI document.
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from aiplugin.commands import get_config, open_client, run_command
from aiplugin.exit_codes import EXIT_NOT_FOUND
from aiplugin.explorer import PluginExplorer
from aiplugin.models import Manifest, OpenAPISpec
from aiplugin.output import error, get_output, info, suggest
from aiplugin.parser import iter_operations
from aiplugin.plugin import load_plugin


def inspect_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Any URL of the plugin's site."),
) -> None:
    """Show the AI plugin manifest published by a site.

    Example::

        aiplugin inspect https://example.com
        aiplugin --json inspect https://example.com
    """
    config = get_config(ctx)

    async def _inspect() -> Optional[Manifest]:
        async with open_client(ctx) as client:
            explorer = PluginExplorer(client, manifest_path=config.manifest_path)
            return await explorer.inspect(url)

    manifest = run_command(_inspect())
    if manifest is None:
        error(f"No AI plugin found at {url}")
        raise typer.Exit(code=EXIT_NOT_FOUND)

    get_output().print_record(_manifest_fields(manifest), title=manifest.name_for_human)
    suggest(f"List its operations: aiplugin paths {url}")


def paths_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Any URL of the plugin's site."),
) -> None:
    """List the operations of a plugin's OpenAPI document.

    Example::

        aiplugin paths https://example.com
    """
    config = get_config(ctx)

    async def _paths() -> Optional[OpenAPISpec]:
        async with open_client(ctx) as client:
            plugin = await load_plugin(
                url,
                client,
                service_name=config.service_name,
                manifest_path=config.manifest_path,
            )
            if plugin is None:
                return None
            return await plugin.get_spec()

    spec = run_command(_paths())
    if spec is None:
        error(f"No AI plugin found at {url}")
        raise typer.Exit(code=EXIT_NOT_FOUND)

    rows = [
        [method, path, operation.get("summary") or operation.get("operationId") or "-"]
        for method, path, operation in iter_operations(spec)
    ]
    if not rows:
        info("The plugin's OpenAPI document declares no operations.")
        return

    title = spec.info.title or "API"
    get_output().print_table(
        ["Method", "Path", "Summary"], rows, title=f"{title} -- Paths ({len(rows)})"
    )


def _manifest_fields(manifest: Manifest) -> dict[str, Any]:
    data = manifest.model_dump(mode="json")
    auth = data.pop("auth")
    api = data.pop("api")
    data["auth_type"] = auth["type"]
    data["api_url"] = api["url"]
    data["api_user_authenticated"] = api["is_user_authenticated"]
    return data
