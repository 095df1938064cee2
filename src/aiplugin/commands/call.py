"""Call command -- invoke one endpoint of a site's plugin.

``aiplugin call URL METHOD ENDPOINT`` discovers the plugin, resolves its
OpenAPI document, authenticates as the manifest requires, and sends the
request. The HTTP status goes to stderr and the body to stdout; a non-2xx
response from the plugin still exits 0, like ``curl`` without ``--fail``.

Tokens are given as credential sources (``env:VAR``, ``file:/path``,
``prompt`` or ``value:TOKEN``) so they stay out of shell history::

    aiplugin call https://example.com GET /todos --params '{"user": "bob"}' \\
        --user-token env:TODO_TOKEN
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
import typer

from aiplugin.auth import StaticTokenProvider
from aiplugin.client import format_api_response
from aiplugin.commands import get_config, open_client, run_command
from aiplugin.config import resolve_credential
from aiplugin.exceptions import AIPluginError
from aiplugin.exit_codes import EXIT_INVALID_USAGE, EXIT_NOT_FOUND
from aiplugin.models import HTTPMethod
from aiplugin.output import debug, error
from aiplugin.plugin import load_plugin


def call_command(
    ctx: typer.Context,
    url: str = typer.Argument(help="Any URL of the plugin's site."),
    method: str = typer.Argument(help="HTTP method, e.g. GET or POST."),
    endpoint: str = typer.Argument(help="Path declared by the plugin, e.g. /todos."),
    params: Optional[str] = typer.Option(
        None, "--params", help="JSON parameters (query for GET, body otherwise)."
    ),
    service: Optional[str] = typer.Option(
        None, "--service", help="Service name for service_http plugins."
    ),
    user_token: Optional[str] = typer.Option(
        None, "--user-token", help="User token source for user_http plugins."
    ),
    oauth_token: Optional[str] = typer.Option(
        None, "--oauth-token", help="Access token source for oauth plugins."
    ),
) -> None:
    """Call an endpoint of a site's AI plugin."""
    try:
        http_method = HTTPMethod(method.upper())
    except ValueError:
        choices = ", ".join(m.value for m in HTTPMethod)
        error(f"Unsupported method {method!r}; expected one of {choices}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    parameters = _parse_params(params)

    try:
        tokens = StaticTokenProvider(
            oauth_token=resolve_credential(oauth_token) if oauth_token else None,
            user_token=resolve_credential(user_token) if user_token else None,
        )
    except AIPluginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    config = get_config(ctx)
    service_name = service or config.service_name

    async def _call() -> Optional[httpx.Response]:
        async with open_client(ctx) as client:
            plugin = await load_plugin(
                url,
                client,
                service_name=service_name,
                manifest_path=config.manifest_path,
            )
            if plugin is None:
                return None
            debug(f"Calling {plugin.name_for_model}: {http_method.value} {endpoint}")
            response = await plugin.interact(endpoint, http_method, parameters, tokens)
            await response.aread()
            return response

    response = run_command(_call())
    if response is None:
        error(f"No AI plugin found at {url}")
        raise typer.Exit(code=EXIT_NOT_FOUND)

    format_api_response(response)


def _parse_params(params: Optional[str]) -> Any:
    if params is None:
        return None
    try:
        return json.loads(params)
    except json.JSONDecodeError as exc:
        error(f"--params is not valid JSON: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None
