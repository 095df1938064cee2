"""Construction of the shared :class:`httpx.AsyncClient` transport.

The client follows redirects itself; callers compare the requested URL with
``response.url`` afterwards to apply the root-domain policy of
:mod:`aiplugin.redirect`. Timeouts and cancellation are the client's
concern, nothing above it retries.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from aiplugin import __version__
from aiplugin.exceptions import ManifestFetchError
from aiplugin.models import GlobalConfig

logger = logging.getLogger(__name__)


def create_async_client(
    config: Optional[GlobalConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Create an :class:`httpx.AsyncClient` configured for plugin traffic.

    Args:
        config: Global configuration supplying timeout, TLS verification and
            an optional ``User-Agent`` override. Defaults apply when ``None``.
        transport: Optional transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Returns:
        A client that follows redirects. The caller owns it and must close
        it (``async with`` or :meth:`~httpx.AsyncClient.aclose`).
    """
    config = config or GlobalConfig()
    return httpx.AsyncClient(
        timeout=config.request.timeout,
        verify=config.request.verify_ssl,
        follow_redirects=True,
        headers={"User-Agent": config.user_agent or f"aiplugin/{__version__}"},
        transport=transport,
    )


async def fetch(client: httpx.AsyncClient, url: str) -> httpx.Response:
    """Issue a ``GET`` for *url*, following redirects.

    Non-success statuses are returned, not raised; only transport-level
    failures become errors.

    Raises:
        ManifestFetchError: On connection, timeout or protocol errors.
    """
    logger.debug("GET %s", url)
    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        raise ManifestFetchError(f"Failed to fetch {url}: {exc}") from exc

    if str(response.url) != url:
        logger.debug("Redirected %s -> %s", url, response.url)
    return response
