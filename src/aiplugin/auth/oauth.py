"""OAuth authorization-code helper for plugins declaring ``oauth`` auth.

A plugin's manifest names the page users are sent to (``client_url``), the
scope, and the endpoint that trades an authorization code for tokens
(``authorization_url``) together with the ``Content-Type`` that endpoint
expects. The client id and secret are handed out by the plugin developer
out of band and supplied as :class:`OAuthClientCredentials`.

The helper covers the two legs around the user's consent:

1. :meth:`OAuthAuthenticator.get_authentication_url` -- where to send the
   user.
2. :meth:`OAuthAuthenticator.handle_callback` -- given the URL the user was
   redirected back to, exchange the ``code`` for tokens.

Storing the tokens and serving them through a
:class:`~aiplugin.auth.base.TokenProvider` is left to the caller.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import parse_qs, urlencode, urlsplit

import httpx

from aiplugin.exceptions import PluginAuthenticationError
from aiplugin.models import OAuthAuth

logger = logging.getLogger(__name__)

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class OAuthClientCredentials:
    """Client id and secret the plugin developer issued to the caller."""

    client_id: str
    client_secret: str


@dataclass(frozen=True)
class OAuthTokens:
    """Tokens returned by the plugin's authorization endpoint."""

    access_token: str
    refresh_token: Optional[str] = None


class OAuthAuthenticator:
    """Run the authorization-code flow against one plugin.

    Args:
        config: The manifest's ``oauth`` auth section.
        credentials: Client id and secret for this plugin.
        redirect_uri: Where the plugin should send the user back to.
        client: HTTP client used for the token exchange.
    """

    def __init__(
        self,
        config: OAuthAuth,
        credentials: OAuthClientCredentials,
        redirect_uri: str,
        client: httpx.AsyncClient,
    ) -> None:
        self._config = config
        self._credentials = credentials
        self._redirect_uri = redirect_uri
        self._client = client

    def get_authentication_url(self) -> str:
        """Return the URL that starts the flow in the user's browser."""
        params = urlencode(
            {
                "response_type": "code",
                "client_id": self._credentials.client_id,
                "scope": self._config.scope,
                "redirect_uri": self._redirect_uri,
            }
        )
        separator = "&" if urlsplit(self._config.client_url).query else "?"
        return f"{self._config.client_url}{separator}{params}"

    async def handle_callback(self, redirected_url: str) -> OAuthTokens:
        """Exchange the code carried by *redirected_url* for tokens.

        Raises:
            PluginAuthenticationError: If the callback carries an error or no
                code, or the exchange fails.
        """
        params = parse_qs(urlsplit(redirected_url).query)

        if "error" in params:
            raise PluginAuthenticationError(
                f"OAuth authorization failed: {params['error'][0]}"
            )
        code = params.get("code", [""])[0]
        if not code:
            raise PluginAuthenticationError(
                "No authorization code provided in OAuth callback"
            )

        token_data = await self.exchange_code(code)
        return OAuthTokens(
            access_token=token_data["access_token"],
            refresh_token=token_data.get("refresh_token"),
        )

    async def exchange_code(self, code: str) -> dict[str, Any]:
        """POST the authorization code to the manifest's ``authorization_url``.

        The body is encoded according to ``authorization_content_type``: form
        encoding for ``application/x-www-form-urlencoded``, JSON otherwise.

        Returns:
            The decoded token response, guaranteed to hold ``access_token``.

        Raises:
            PluginAuthenticationError: On transport failure, a non-success
                status, or a response without ``access_token``.
        """
        payload = {
            "grant_type": "authorization_code",
            "client_id": self._credentials.client_id,
            "client_secret": self._credentials.client_secret,
            "code": code,
            "redirect_uri": self._redirect_uri,
        }
        content_type = self._config.authorization_content_type
        if content_type.split(";")[0].strip().lower() == _FORM_CONTENT_TYPE:
            body = urlencode(payload)
        else:
            body = json.dumps(payload)

        logger.debug("Exchanging OAuth code at %s", self._config.authorization_url)
        try:
            response = await self._client.post(
                self._config.authorization_url,
                content=body,
                headers={"Content-Type": content_type, "Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            raise PluginAuthenticationError(f"Token exchange failed: {exc}") from exc

        if not response.is_success:
            raise PluginAuthenticationError(
                f"Token exchange failed with status {response.status_code}: "
                f"{response.text}"
            )

        try:
            token_data = response.json()
        except ValueError as exc:
            raise PluginAuthenticationError(
                "Token exchange returned a non-JSON response"
            ) from exc

        if not isinstance(token_data, dict) or "access_token" not in token_data:
            raise PluginAuthenticationError("Token response missing 'access_token' field")
        return token_data
