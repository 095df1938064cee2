"""Auth manager -- registry and dispatcher for manifest auth strategies.

The :class:`AuthManager` maps manifest ``auth.type`` strings (``"none"``,
``"service_http"``, ``"user_http"``, ``"oauth"``) to
:class:`~aiplugin.auth.base.AuthStrategy` instances. :class:`AuthProvider`
binds one manifest's auth section (and the calling service's name) to a
manager and is what the invocation engine asks for headers.

For most use cases, call :func:`create_default_manager` to get a manager
pre-loaded with every built-in strategy.

See Also:
    :class:`~aiplugin.openapi.provider.OpenAPIProvider` -- consumes the
    headers produced here.
"""

from __future__ import annotations

import logging
from typing import Optional

from aiplugin.auth.base import AuthResult, AuthStrategy, TokenProvider
from aiplugin.exceptions import UnreachableError
from aiplugin.models import AuthConfig

logger = logging.getLogger(__name__)


class AuthManager:
    """Registry and dispatcher for auth strategies.

    Example::

        manager = AuthManager()
        manager.register(NoAuthStrategy())
        result = await manager.authenticate(manifest.auth, tokens)
    """

    def __init__(self) -> None:
        self._strategies: dict[str, AuthStrategy] = {}

    def register(self, strategy: AuthStrategy) -> None:
        """Register a strategy, keyed by its :attr:`~AuthStrategy.auth_type`.

        A strategy already registered for the same type is replaced.
        """
        self._strategies[strategy.auth_type] = strategy

    def get_strategy(self, auth_type: str) -> AuthStrategy:
        """Retrieve the strategy for *auth_type*.

        The manifest model only admits known auth types, so a missing
        strategy is a wiring mistake rather than bad input.

        Raises:
            UnreachableError: If no strategy is registered for *auth_type*.
        """
        strategy = self._strategies.get(auth_type)
        if strategy is None:
            raise UnreachableError(auth_type)
        return strategy

    async def authenticate(
        self,
        auth_config: AuthConfig,
        token_provider: TokenProvider,
        service_name: Optional[str] = None,
    ) -> AuthResult:
        """Delegate to the strategy registered for ``auth_config.type``."""
        strategy = self.get_strategy(auth_config.type)
        return await strategy.authenticate(auth_config, token_provider, service_name)


def create_default_manager() -> AuthManager:
    """Create an :class:`AuthManager` with the four built-in strategies."""
    from aiplugin.auth.strategies import (
        NoAuthStrategy,
        OAuthStrategy,
        ServiceHttpStrategy,
        UserHttpStrategy,
    )

    manager = AuthManager()
    manager.register(NoAuthStrategy())
    manager.register(ServiceHttpStrategy())
    manager.register(UserHttpStrategy())
    manager.register(OAuthStrategy())
    return manager


class AuthProvider:
    """Produces auth headers for one plugin.

    Args:
        auth_config: The manifest's ``auth`` section.
        service_name: Name of the calling service, for ``service_http``.
        manager: Strategy registry; :func:`create_default_manager` when
            ``None``.
    """

    def __init__(
        self,
        auth_config: AuthConfig,
        service_name: Optional[str] = None,
        manager: Optional[AuthManager] = None,
    ) -> None:
        self._auth_config = auth_config
        self._service_name = service_name
        self._manager = manager or create_default_manager()

    @property
    def auth_type(self) -> str:
        return self._auth_config.type

    async def get_auth_headers(self, token_provider: TokenProvider) -> dict[str, str]:
        """Return the headers to add to a request against this plugin.

        Raises:
            PluginAPIError: For ``service_http`` without a token for the
                configured service.
            UnreachableError: For an auth type with no registered strategy.
        """
        logger.debug("Resolving %s auth headers", self._auth_config.type)
        result = await self._manager.authenticate(
            self._auth_config, token_provider, self._service_name
        )
        return dict(result.headers)
