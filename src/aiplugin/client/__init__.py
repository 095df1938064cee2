"""HTTP client module for aiplugin.

Every network operation in the package goes through an injected
:class:`httpx.AsyncClient`. This module builds that client from the user's
configuration and offers small helpers shared by the explorers and the CLI:

* :func:`create_async_client` -- configured :class:`httpx.AsyncClient`
  (timeout, TLS verification, redirect following, ``User-Agent``).
* :func:`fetch` -- ``GET`` with transport failures mapped to
  :class:`~aiplugin.exceptions.ManifestFetchError`.
* :func:`format_api_response` -- render a raw response for the CLI.

Example::

    from aiplugin.client import create_async_client

    async with create_async_client(config) as client:
        manifest = await PluginExplorer(client).inspect("https://example.com")
"""

from aiplugin.client.http import create_async_client, fetch
from aiplugin.client.response import extract_response_data, format_api_response

__all__ = [
    "create_async_client",
    "fetch",
    "extract_response_data",
    "format_api_response",
]
