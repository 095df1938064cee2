"""Fetching plugin OpenAPI documents and invoking the APIs they describe.

* :class:`OpenAPIExplorer` -- fetch a document under the root-domain
  redirect policy and parse it into an :class:`~aiplugin.models.OpenAPISpec`.
* :class:`OpenAPIProvider` -- build and send version-correct, authenticated
  requests against a parsed spec.
"""

from aiplugin.openapi.explorer import OpenAPIExplorer
from aiplugin.openapi.provider import OpenAPIProvider

__all__ = ["OpenAPIExplorer", "OpenAPIProvider"]
