"""Authentication for calls to AI plugins.

A manifest declares one of four auth types; this package turns that
declaration plus a caller-supplied :class:`TokenProvider` into request
headers, and helps obtain OAuth tokens in the first place.

The main entry points are:

- :class:`AuthProvider` -- headers for one plugin, used by the invocation
  engine.
- :class:`AuthManager` / :func:`create_default_manager` -- registry mapping
  auth types to :class:`AuthStrategy` implementations.
- :class:`OAuthAuthenticator` -- authorization-code flow helper.

Typical usage::

    from aiplugin.auth import AuthProvider, StaticTokenProvider

    provider = AuthProvider(manifest.auth, service_name="openai")
    headers = await provider.get_auth_headers(StaticTokenProvider(user_token="t"))
"""

from aiplugin.auth.base import (
    AuthResult,
    AuthStrategy,
    StaticTokenProvider,
    TokenProvider,
    format_authorization,
)
from aiplugin.auth.manager import AuthManager, AuthProvider, create_default_manager
from aiplugin.auth.oauth import OAuthAuthenticator, OAuthClientCredentials, OAuthTokens

__all__ = [
    "AuthManager",
    "AuthProvider",
    "AuthResult",
    "AuthStrategy",
    "OAuthAuthenticator",
    "OAuthClientCredentials",
    "OAuthTokens",
    "StaticTokenProvider",
    "TokenProvider",
    "create_default_manager",
    "format_authorization",
]
