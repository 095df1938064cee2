"""Fetch and parse a plugin's OpenAPI document."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from aiplugin.client.http import fetch
from aiplugin.exceptions import ManifestFetchError
from aiplugin.models import OpenAPISpec
from aiplugin.parser import content_type_hint, extract_spec, parse_content
from aiplugin.redirect import RedirectValidator

logger = logging.getLogger(__name__)


class OpenAPIExplorer:
    """Fetches OpenAPI documents under the same redirect policy as manifests.

    Args:
        client: HTTP client; must follow redirects.
        redirect_validator: Root-domain policy applied to the document URL.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        redirect_validator: Optional[RedirectValidator] = None,
    ) -> None:
        self._client = client
        self._redirect_validator = redirect_validator or RedirectValidator()

    async def inspect(self, url: str) -> OpenAPISpec:
        """Fetch the document at *url* and return it parsed and dereferenced.

        Raises:
            ManifestFetchError: On transport failure or a non-success status.
            DomainPolicyError: If the request was redirected off-domain.
            SpecParseError: If the body is not a usable JSON/YAML document.
        """
        response = await fetch(self._client, url)
        self._redirect_validator.validate_redirect(url, str(response.url))

        if not response.is_success:
            raise ManifestFetchError(
                f"Fetching OpenAPI document {url} failed with status "
                f"{response.status_code}",
                response,
            )

        hint = content_type_hint(response.headers.get("content-type", ""))
        raw = parse_content(response.text, hint=hint)
        spec = extract_spec(raw, source_url=str(response.url))
        logger.debug(
            "Parsed OpenAPI document %s (version %r, %d paths)",
            url,
            spec.version,
            len(spec.paths),
        )
        return spec
