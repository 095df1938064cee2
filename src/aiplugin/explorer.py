"""Manifest discovery -- find and trust-check a site's AI plugin manifest.

:class:`PluginExplorer` answers "does this site publish a plugin, and can we
trust what it says about itself?". It fetches the manifest from the
well-known path, refuses redirects that leave the site's root domain,
validates the payload's shape, and checks that the URLs and contact address
the manifest declares belong to the same domain as the manifest itself.

It does not talk to the plugin's API; see :class:`~aiplugin.plugin.AIPlugin`
for that.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional
from urllib.parse import urlsplit, urlunsplit

import httpx
from pydantic import ValidationError

from aiplugin.client.http import fetch
from aiplugin.exceptions import ManifestFetchError, ManifestValidationError
from aiplugin.models import MANIFEST_PATH, Manifest, parse_manifest
from aiplugin.redirect import RedirectValidator

logger = logging.getLogger(__name__)


class PluginExplorer:
    """Discover and validate AI plugin manifests.

    Args:
        client: HTTP client used for the manifest request. It must follow
            redirects so the effective URL can be checked.
        manifest_parser: Validates the decoded payload and returns a
            :class:`~aiplugin.models.Manifest`, raising
            :class:`pydantic.ValidationError` on mismatch.
        redirect_validator: Root-domain policy.
        manifest_path: Path of the manifest on a site; must start with ``/``.

    Example::

        async with create_async_client() as client:
            manifest = await PluginExplorer(client).inspect("https://example.com")
            if manifest is None:
                print("no plugin here")
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        manifest_parser: Callable[[Any], Manifest] = parse_manifest,
        redirect_validator: Optional[RedirectValidator] = None,
        manifest_path: str = MANIFEST_PATH,
    ) -> None:
        self._client = client
        self._parse_manifest = manifest_parser
        self._redirect_validator = redirect_validator or RedirectValidator()
        self._manifest_path = manifest_path

    async def inspect(self, url: str) -> Optional[Manifest]:
        """Fetch and validate the manifest published for *url*'s site.

        Args:
            url: Any URL of the site, or the manifest URL itself.

        Returns:
            The validated manifest, or ``None`` when the site answers 404.

        Raises:
            ManifestFetchError: On transport failure or a non-404 error status.
            ManifestValidationError: If a redirect leaves the root domain, the
                payload has the wrong shape, or a declared URL or the contact
                e-mail belongs to another domain.
        """
        manifest_url = self.resolve_manifest_url(url)
        response = await fetch(self._client, manifest_url)
        self._redirect_validator.validate_redirect(manifest_url, str(response.url))

        if not response.is_success:
            if response.status_code == 404:
                logger.debug("No plugin manifest at %s", manifest_url)
                return None
            raise ManifestFetchError(
                f"Request for {manifest_url} failed with status {response.status_code}",
                response,
            )

        manifest = self._parse(response)
        self._validate_declared_urls(manifest_url, manifest)
        logger.debug("Found plugin %r at %s", manifest.name_for_model, manifest_url)
        return manifest

    def resolve_manifest_url(self, url: str) -> str:
        """Return the manifest URL for *url*.

        *url* is returned verbatim when its path already is the manifest
        path; otherwise its path is replaced (query and fragment dropped).
        """
        parts = urlsplit(url)
        if parts.path == self._manifest_path:
            return url
        return urlunsplit((parts.scheme, parts.netloc, self._manifest_path, "", ""))

    def _parse(self, response: httpx.Response) -> Manifest:
        try:
            return self._parse_manifest(response.json())
        except ValidationError as exc:
            raise ManifestValidationError(
                f"Invalid plugin manifest: {exc}", cause=exc
            ) from exc
        except Exception as exc:
            raise ManifestValidationError(
                f"Failed to parse plugin manifest: {exc}", cause=exc
            ) from exc

    def _validate_declared_urls(self, manifest_url: str, manifest: Manifest) -> None:
        validator = self._redirect_validator
        validator.validate_redirect(manifest_url, manifest.api.url)

        if not validator.is_same_second_domain(manifest_url, manifest.legal_info_url):
            raise ManifestValidationError(
                f"Legal info URL {manifest.legal_info_url} is not on the "
                f"plugin's domain"
            )
        if not validator.is_same_second_domain(manifest_url, manifest.contact_domain):
            raise ManifestValidationError(
                f"Contact e-mail {manifest.contact_email} is not on the "
                f"plugin's domain"
            )
