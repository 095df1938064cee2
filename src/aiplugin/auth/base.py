"""Building blocks of the authentication subsystem.

This module defines:

- :class:`TokenProvider` -- the caller-supplied source of per-user and OAuth
  tokens, consulted at call time.
- :class:`StaticTokenProvider` -- a :class:`TokenProvider` holding fixed
  tokens (used by the CLI and handy in tests).
- :class:`AuthResult` -- the HTTP headers an auth strategy produces.
- :class:`AuthStrategy` -- the abstract base class every manifest auth type
  is implemented by.
- :func:`format_authorization` -- renders an ``Authorization`` header value
  for the manifest's declared ``authorization_type``.

To support a new manifest auth type, subclass :class:`AuthStrategy`, return
the type from :attr:`~AuthStrategy.auth_type`, implement
:meth:`~AuthStrategy.authenticate`, and register an instance with
:class:`~aiplugin.auth.manager.AuthManager`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Protocol, runtime_checkable

from aiplugin.exceptions import PluginAuthenticationError, UnreachableError
from aiplugin.models import AuthorizationType


@runtime_checkable
class TokenProvider(Protocol):
    """Source of end-user credentials, supplied per call by the caller."""

    async def get_oauth_token(self) -> str:
        """Return the OAuth access token for the current user."""
        ...

    async def get_user_token(self) -> str:
        """Return the user_http token for the current user."""
        ...


@dataclass(frozen=True)
class StaticTokenProvider:
    """A :class:`TokenProvider` returning fixed tokens.

    Raises :class:`~aiplugin.exceptions.PluginAuthenticationError` when a
    token that was not supplied is requested.
    """

    oauth_token: Optional[str] = None
    user_token: Optional[str] = None

    async def get_oauth_token(self) -> str:
        if self.oauth_token is None:
            raise PluginAuthenticationError("No OAuth token available")
        return self.oauth_token

    async def get_user_token(self) -> str:
        if self.user_token is None:
            raise PluginAuthenticationError("No user token available")
        return self.user_token


class AuthResult:
    """Container for the headers to inject into a plugin request.

    Args:
        headers: HTTP headers to add (e.g. ``{"Authorization": "Bearer ..."}``).

    Example::

        result = AuthResult(headers={"Authorization": "Bearer tok123"})
        assert result.headers["Authorization"] == "Bearer tok123"
    """

    def __init__(self, headers: dict[str, str] | None = None):
        self.headers = headers or {}


def format_authorization(authorization_type: AuthorizationType | str, token: str) -> str:
    """Render an ``Authorization`` header value.

    The token is used verbatim: manifests and token providers hand out
    already-encoded credentials, including for ``basic``.

    Raises:
        UnreachableError: If *authorization_type* is not ``bearer``/``basic``.
    """
    if authorization_type == AuthorizationType.BASIC:
        return f"Basic {token}"
    if authorization_type == AuthorizationType.BEARER:
        return f"Bearer {token}"
    raise UnreachableError(authorization_type)


class AuthStrategy(ABC):
    """Abstract base class for manifest auth strategies.

    Every concrete strategy must provide:

    1. An :attr:`auth_type` property returning the manifest ``auth.type`` it
       handles (``"none"``, ``"service_http"``, ``"user_http"``, ``"oauth"``).
    2. An :meth:`authenticate` implementation that turns the manifest's auth
       section plus the caller's token source into an :class:`AuthResult`.

    Strategies are stateless; they are registered with
    :class:`~aiplugin.auth.manager.AuthManager` and looked up by
    ``auth_type`` for every call.
    """

    @property
    @abstractmethod
    def auth_type(self) -> str:
        """Return the manifest ``auth.type`` this strategy handles."""
        ...

    @abstractmethod
    async def authenticate(
        self,
        auth_config: Any,
        token_provider: TokenProvider,
        service_name: Optional[str] = None,
    ) -> AuthResult:
        """Produce the headers for one outbound plugin request.

        Args:
            auth_config: The manifest's ``auth`` section (the variant
                matching :attr:`auth_type`).
            token_provider: Caller-supplied source of user/OAuth tokens.
            service_name: Name of the calling service, used to pick a
                ``service_http`` verification token.

        Returns:
            An :class:`AuthResult` with the headers to inject.
        """
        ...
