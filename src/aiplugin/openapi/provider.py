"""Invoke plugin endpoints described by an OpenAPI document.

:class:`OpenAPIProvider` turns "call *endpoint* with *method* and
*parameters*" into an HTTP request:

1. The endpoint and method must be declared in the document's ``paths``.
2. The base URL depends on the document version: ``host`` (plus the first
   of ``schemes``) for Swagger 2.0, the first ``servers`` entry for OpenAPI
   3.0 and 3.1. Any other version is refused.
3. The endpoint replaces the base URL's path.
4. ``GET`` sends the parameters as the query string; ``POST``, ``PUT``,
   ``PATCH`` and ``DELETE`` send them as a JSON body; ``HEAD`` and
   ``OPTIONS`` send neither.
5. Auth headers from the plugin's :class:`~aiplugin.auth.AuthProvider` are
   added, and the response is returned as-is -- interpreting its status is
   the caller's business.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional, Union
from urllib.parse import urljoin, urlsplit, urlunsplit

import httpx

from aiplugin.auth.base import TokenProvider
from aiplugin.auth.manager import AuthProvider
from aiplugin.exceptions import PluginAPIError, UnreachableError
from aiplugin.models import HTTPMethod, OpenAPISpec

logger = logging.getLogger(__name__)

_BODY_METHODS = frozenset(
    {HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH, HTTPMethod.DELETE}
)
_BARE_METHODS = frozenset({HTTPMethod.HEAD, HTTPMethod.OPTIONS})


def coerce_method(method: Union[HTTPMethod, str]) -> HTTPMethod:
    """Return *method* as an :class:`~aiplugin.models.HTTPMethod`.

    Raises:
        UnreachableError: If *method* is not one of the supported methods.
    """
    if isinstance(method, HTTPMethod):
        return method
    try:
        return HTTPMethod(method.upper())
    except (ValueError, AttributeError):
        raise UnreachableError(method) from None


class OpenAPIProvider:
    """Builds and sends requests against one plugin's API.

    Args:
        spec: The plugin's parsed OpenAPI document.
        client: HTTP client used to send requests.
        auth_provider: Source of the plugin's auth headers.
    """

    def __init__(
        self,
        spec: OpenAPISpec,
        client: httpx.AsyncClient,
        auth_provider: AuthProvider,
    ) -> None:
        self._spec = spec
        self._client = client
        self._auth_provider = auth_provider

    @property
    def spec(self) -> OpenAPISpec:
        return self._spec

    async def interact(
        self,
        endpoint: str,
        method: Union[HTTPMethod, str],
        parameters: Any,
        token_provider: TokenProvider,
    ) -> httpx.Response:
        """Call *endpoint* on the plugin and return the raw response.

        Args:
            endpoint: Path as declared in the document, e.g. ``"/todos"``.
            method: HTTP method.
            parameters: Query parameters for ``GET`` (a mapping), JSON body
                for methods that carry one, ignored for ``HEAD``/``OPTIONS``.
            token_provider: Caller's source of user/OAuth tokens.

        Raises:
            PluginAPIError: If the call is not allowed by the document, a
                service token is missing, or the request cannot be sent.
        """
        method = coerce_method(method)
        self.get_endpoint_spec(endpoint, method)
        # No token is asked for when the document cannot yield a URL.
        self.resolve_url(endpoint)
        headers = await self._auth_provider.get_auth_headers(token_provider)
        request = self.build_request(endpoint, method, parameters, headers)

        logger.debug("%s %s", request.method, request.url)
        try:
            return await self._client.send(request)
        except httpx.HTTPError as exc:
            raise PluginAPIError(f"Request to {request.url} failed: {exc}") from exc

    def build_request(
        self,
        endpoint: str,
        method: Union[HTTPMethod, str],
        parameters: Any,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Request:
        """Build the request for *endpoint* without sending it.

        Raises:
            PluginAPIError: If the endpoint or method is not declared, the
                version is unsupported, no base URL is declared, or ``GET``
                parameters are not a mapping.
        """
        method = coerce_method(method)
        self.get_endpoint_spec(endpoint, method)
        url = self.resolve_url(endpoint)

        params: Optional[dict[str, Any]] = None
        json_body: Any = None
        if method == HTTPMethod.GET:
            params = _query_params(parameters)
        elif method in _BODY_METHODS:
            json_body = parameters
        elif method not in _BARE_METHODS:
            raise UnreachableError(method)

        return self._client.build_request(
            method.value,
            url,
            params=params,
            json=json_body,
            headers=dict(headers or {}),
        )

    def get_endpoint_spec(
        self, endpoint: str, method: Union[HTTPMethod, str]
    ) -> dict[str, Any]:
        """Return the operation object declared for *method* at *endpoint*.

        Raises:
            PluginAPIError: If the document has no paths, lacks *endpoint*,
                or lacks *method* at *endpoint*.
        """
        method = coerce_method(method)
        if not self._spec.paths:
            raise PluginAPIError("Plugin does not specify any OpenAPI paths")

        path_item = self._spec.paths.get(endpoint)
        if path_item is None:
            raise PluginAPIError(f'Plugin does not specify OpenAPI path: "{endpoint}"')

        operation = path_item.get(method.value.lower())
        if operation is None:
            raise PluginAPIError(
                f"Plugin does not specify {method.value} method for path {endpoint}"
            )
        return operation

    def resolve_base_url(self) -> str:
        """Return the API base URL declared by the document.

        Raises:
            PluginAPIError: If the version is unsupported or no base URL is
                declared.
        """
        version = self._spec.version
        if version.startswith("2"):
            base_url = self._swagger_base_url()
        elif version.startswith(("3.0", "3.1")):
            base_url = self._server_base_url()
        else:
            raise PluginAPIError(f"Unsupported OpenAPI version: {version!r}")

        if not base_url:
            raise PluginAPIError(
                f"Plugin's OpenAPI document (version {version}) does not "
                "specify a base URL"
            )
        return base_url

    def resolve_url(self, endpoint: str) -> str:
        """Return the base URL with its path replaced by *endpoint*."""
        parts = urlsplit(self.resolve_base_url())
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return urlunsplit((parts.scheme, parts.netloc, path, "", ""))

    def _swagger_base_url(self) -> Optional[str]:
        host = self._spec.host
        if not host:
            return None
        if "://" in host:
            return host
        if self._spec.schemes:
            scheme = self._spec.schemes[0]
        elif self._spec.source_url:
            scheme = urlsplit(self._spec.source_url).scheme
        else:
            scheme = "https"
        return f"{scheme}://{host}"

    def _server_base_url(self) -> Optional[str]:
        if not self._spec.servers:
            return None
        url = self._spec.servers[0].url
        if urlsplit(url).scheme:
            return url
        # Relative server URLs are relative to the document's own location.
        if self._spec.source_url:
            return urljoin(self._spec.source_url, url)
        return None


def _query_params(parameters: Any) -> Optional[dict[str, Any]]:
    if parameters is None:
        return None
    if not isinstance(parameters, Mapping):
        raise PluginAPIError(
            f"GET parameters must be a mapping (got {type(parameters).__name__})"
        )
    return {
        key: json.dumps(value) if isinstance(value, Mapping) else value
        for key, value in parameters.items()
    }
