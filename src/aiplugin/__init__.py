"""aiplugin -- discover, trust-check, and call AI plugins published by websites.

A site advertises an AI plugin by publishing a manifest at
``/.well-known/ai-plugin.json``. The manifest points at an OpenAPI document
describing the plugin's API and declares how callers authenticate. This
package finds and validates that manifest, fetches the OpenAPI document under
a root-domain redirect policy, and sends correctly-shaped, authenticated
requests to the declared endpoints.

Typical usage::

    from aiplugin import StaticTokenProvider, create_async_client, load_plugin

    async with create_async_client() as client:
        plugin = await load_plugin("https://example.com", client)
        if plugin is not None:
            response = await plugin.interact(
                "/todos", "GET", {"user": "bob"}, StaticTokenProvider(user_token="t")
            )

Modules:
    explorer: Manifest discovery and trust checks.
    redirect: Root-domain redirect policy.
    openapi: OpenAPI document fetching and API invocation.
    auth: Manifest auth strategies and the OAuth flow.
    plugin: The :class:`AIPlugin` facade.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from aiplugin.auth import AuthProvider, StaticTokenProvider, TokenProvider  # noqa: E402
from aiplugin.client import create_async_client  # noqa: E402
from aiplugin.exceptions import (  # noqa: E402
    AIPluginError,
    DomainPolicyError,
    ManifestFetchError,
    ManifestValidationError,
    PluginAPIError,
    PluginAuthenticationError,
    SpecParseError,
    UnreachableError,
)
from aiplugin.explorer import PluginExplorer  # noqa: E402
from aiplugin.models import HTTPMethod, Manifest, OpenAPISpec  # noqa: E402
from aiplugin.openapi import OpenAPIExplorer, OpenAPIProvider  # noqa: E402
from aiplugin.plugin import AIPlugin, load_plugin  # noqa: E402
from aiplugin.redirect import RedirectValidator  # noqa: E402

__all__ = [
    "AIPlugin",
    "AIPluginError",
    "AuthProvider",
    "DomainPolicyError",
    "HTTPMethod",
    "Manifest",
    "ManifestFetchError",
    "ManifestValidationError",
    "OpenAPIExplorer",
    "OpenAPIProvider",
    "OpenAPISpec",
    "PluginAPIError",
    "PluginAuthenticationError",
    "PluginExplorer",
    "RedirectValidator",
    "SpecParseError",
    "StaticTokenProvider",
    "TokenProvider",
    "UnreachableError",
    "create_async_client",
    "load_plugin",
    "__version__",
]
