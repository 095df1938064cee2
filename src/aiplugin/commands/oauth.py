"""OAuth commands -- run the authorization-code flow of an ``oauth`` plugin.

Typical workflow::

    aiplugin oauth url https://example.com --client-id env:CLIENT_ID \\
        --redirect-uri https://localhost/callback
    # open the printed URL, approve, copy the URL the browser lands on
    aiplugin oauth exchange https://example.com 'https://localhost/callback?code=...' \\
        --client-id env:CLIENT_ID --client-secret env:CLIENT_SECRET \\
        --redirect-uri https://localhost/callback

The access token printed by ``exchange`` can then be passed to
``aiplugin call --oauth-token``.
"""

from __future__ import annotations

import typer

from aiplugin.auth import OAuthAuthenticator, OAuthClientCredentials, OAuthTokens
from aiplugin.commands import get_config, open_client, run_command
from aiplugin.config import resolve_credential
from aiplugin.exceptions import AIPluginError
from aiplugin.exit_codes import EXIT_INVALID_USAGE, EXIT_NOT_FOUND
from aiplugin.explorer import PluginExplorer
from aiplugin.models import Manifest, OAuthAuth
from aiplugin.output import error, get_output, success

oauth_app = typer.Typer(no_args_is_help=True)


@oauth_app.command("url")
def oauth_url(
    ctx: typer.Context,
    url: str = typer.Argument(help="Any URL of the plugin's site."),
    client_id: str = typer.Option(..., "--client-id", help="Client id source."),
    redirect_uri: str = typer.Option(..., "--redirect-uri", help="Redirect URI."),
) -> None:
    """Print the URL that starts the plugin's OAuth flow."""
    credentials = _credentials(client_id, None)
    manifest = _discover(ctx, url)
    oauth_config = _oauth_config(manifest)

    async def _url() -> str:
        async with open_client(ctx) as client:
            authenticator = OAuthAuthenticator(
                oauth_config, credentials, redirect_uri, client
            )
            return authenticator.get_authentication_url()

    get_output().print_data(run_command(_url()))


@oauth_app.command("exchange")
def oauth_exchange(
    ctx: typer.Context,
    url: str = typer.Argument(help="Any URL of the plugin's site."),
    callback_url: str = typer.Argument(help="URL the browser was redirected to."),
    client_id: str = typer.Option(..., "--client-id", help="Client id source."),
    client_secret: str = typer.Option(
        ..., "--client-secret", help="Client secret source."
    ),
    redirect_uri: str = typer.Option(..., "--redirect-uri", help="Redirect URI."),
) -> None:
    """Exchange the code in CALLBACK_URL for tokens and print them."""
    credentials = _credentials(client_id, client_secret)
    manifest = _discover(ctx, url)
    oauth_config = _oauth_config(manifest)

    async def _exchange() -> OAuthTokens:
        async with open_client(ctx) as client:
            authenticator = OAuthAuthenticator(
                oauth_config, credentials, redirect_uri, client
            )
            return await authenticator.handle_callback(callback_url)

    tokens = run_command(_exchange())
    get_output().print_record(
        {"access_token": tokens.access_token, "refresh_token": tokens.refresh_token},
        title="OAuth tokens",
    )
    success(f"Authorized {manifest.name_for_human}.")


def _credentials(client_id: str, client_secret: str | None) -> OAuthClientCredentials:
    try:
        return OAuthClientCredentials(
            client_id=resolve_credential(client_id),
            client_secret=resolve_credential(client_secret) if client_secret else "",
        )
    except AIPluginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _discover(ctx: typer.Context, url: str) -> Manifest:
    config = get_config(ctx)

    async def _inspect() -> Manifest | None:
        async with open_client(ctx) as client:
            explorer = PluginExplorer(client, manifest_path=config.manifest_path)
            return await explorer.inspect(url)

    manifest = run_command(_inspect())
    if manifest is None:
        error(f"No AI plugin found at {url}")
        raise typer.Exit(code=EXIT_NOT_FOUND)
    return manifest


def _oauth_config(manifest: Manifest) -> OAuthAuth:
    if not isinstance(manifest.auth, OAuthAuth):
        error(
            f"{manifest.name_for_human} uses {manifest.auth.type!r} auth, not oauth"
        )
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    return manifest.auth
