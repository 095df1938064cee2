"""The AI plugin facade: construct once from a manifest, call many times.

:class:`AIPlugin` wraps a validated :class:`~aiplugin.models.Manifest`. The
plugin's OpenAPI document is fetched once per instance and shared by every
call: resolution starts as soon as the plugin is created inside a running
event loop (or on the first :meth:`AIPlugin.interact` otherwise), and every
call -- concurrent or not -- awaits that same task. A failed resolution is
not retried; every later call sees the same error.

:func:`load_plugin` composes discovery and the facade for the common case.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Union

import httpx

from aiplugin.auth.base import TokenProvider
from aiplugin.auth.manager import AuthProvider
from aiplugin.explorer import PluginExplorer
from aiplugin.models import MANIFEST_PATH, HTTPMethod, Manifest, OpenAPISpec
from aiplugin.openapi.explorer import OpenAPIExplorer
from aiplugin.openapi.provider import OpenAPIProvider
from aiplugin.redirect import RedirectValidator

logger = logging.getLogger(__name__)


class AIPlugin:
    """An AI plugin whose API can be called.

    Args:
        manifest: The plugin's validated manifest.
        client: HTTP client for the OpenAPI document fetch and API calls.
        auth_provider: Header source; built from ``manifest.auth`` and
            *service_name* when ``None``.
        openapi_explorer: Spec fetcher; a default one over *client* when
            ``None``.
        service_name: Calling service, for ``service_http`` plugins.

    Example::

        plugin = AIPlugin(manifest, client)
        response = await plugin.interact("/todos", "GET", {"user": "bob"}, tokens)
    """

    def __init__(
        self,
        manifest: Manifest,
        client: httpx.AsyncClient,
        auth_provider: Optional[AuthProvider] = None,
        openapi_explorer: Optional[OpenAPIExplorer] = None,
        service_name: Optional[str] = None,
    ) -> None:
        self._manifest = manifest
        self._client = client
        self._auth_provider = auth_provider or AuthProvider(
            manifest.auth, service_name=service_name
        )
        self._openapi_explorer = openapi_explorer or OpenAPIExplorer(client)
        self._provider_task: Optional[asyncio.Task[OpenAPIProvider]] = None

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No loop yet: resolution starts with the first call instead.
            pass
        else:
            self._start_resolution()

    # ------------------------------------------------------------------ #
    # Manifest fields
    # ------------------------------------------------------------------ #

    @property
    def manifest(self) -> Manifest:
        return self._manifest

    @property
    def schema_version(self) -> str:
        return self._manifest.schema_version

    @property
    def name_for_model(self) -> str:
        return self._manifest.name_for_model

    @property
    def name_for_human(self) -> str:
        return self._manifest.name_for_human

    @property
    def description_for_model(self) -> str:
        return self._manifest.description_for_model

    @property
    def description_for_human(self) -> str:
        return self._manifest.description_for_human

    @property
    def logo_url(self) -> str:
        return self._manifest.logo_url

    @property
    def contact_email(self) -> str:
        return self._manifest.contact_email

    @property
    def legal_info_url(self) -> str:
        return self._manifest.legal_info_url

    # ------------------------------------------------------------------ #
    # API access
    # ------------------------------------------------------------------ #

    async def interact(
        self,
        endpoint: str,
        method: Union[HTTPMethod, str],
        parameters: Any,
        token_provider: TokenProvider,
    ) -> httpx.Response:
        """Call *endpoint* on the plugin's API and return the raw response.

        See :meth:`~aiplugin.openapi.provider.OpenAPIProvider.interact` for
        how the request is built.

        Raises:
            ManifestFetchError: If the OpenAPI document could not be fetched.
            ManifestValidationError: If fetching it was redirected off-domain.
            SpecParseError: If the OpenAPI document could not be parsed.
            PluginAPIError: If the call is not allowed by the document.
        """
        provider = await self._get_provider()
        return await provider.interact(endpoint, method, parameters, token_provider)

    async def get_spec(self) -> OpenAPISpec:
        """Return the plugin's OpenAPI document, resolving it if needed."""
        provider = await self._get_provider()
        return provider.spec

    def _start_resolution(self) -> asyncio.Task[OpenAPIProvider]:
        if self._provider_task is None:
            self._provider_task = asyncio.ensure_future(self._resolve_provider())
            self._provider_task.add_done_callback(_retrieve_failure)
        return self._provider_task

    async def _get_provider(self) -> OpenAPIProvider:
        return await self._start_resolution()

    async def _resolve_provider(self) -> OpenAPIProvider:
        logger.debug(
            "Resolving OpenAPI document for %s from %s",
            self._manifest.name_for_model,
            self._manifest.api.url,
        )
        spec = await self._openapi_explorer.inspect(self._manifest.api.url)
        return OpenAPIProvider(spec, self._client, self._auth_provider)

    def __repr__(self) -> str:
        return f"AIPlugin(name_for_model={self.name_for_model!r})"


def _retrieve_failure(task: asyncio.Task[OpenAPIProvider]) -> None:
    # Marks an eager resolution's failure as seen, so asyncio does not report
    # it when no caller ever awaits the task. Later callers still get it.
    if not task.cancelled() and task.exception() is not None:
        logger.debug("OpenAPI resolution failed: %s", task.exception())


async def load_plugin(
    url: str,
    client: httpx.AsyncClient,
    *,
    service_name: Optional[str] = None,
    manifest_path: str = MANIFEST_PATH,
    redirect_validator: Optional[RedirectValidator] = None,
) -> Optional[AIPlugin]:
    """Discover the plugin published for *url*'s site and wrap it.

    Returns:
        The plugin, or ``None`` when the site has no manifest.

    Raises:
        ManifestFetchError: If the manifest could not be fetched.
        ManifestValidationError: If the manifest is invalid or untrusted.
    """
    validator = redirect_validator or RedirectValidator()
    explorer = PluginExplorer(
        client, redirect_validator=validator, manifest_path=manifest_path
    )
    manifest = await explorer.inspect(url)
    if manifest is None:
        return None
    return AIPlugin(
        manifest,
        client,
        openapi_explorer=OpenAPIExplorer(client, redirect_validator=validator),
        service_name=service_name,
    )
