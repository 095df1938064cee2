"""Build an :class:`~aiplugin.models.OpenAPISpec` from a decoded document.

The invocation engine only needs three things from a plugin's OpenAPI
document: which methods exist at which paths, where the API is served
(``host``/``basePath``/``schemes`` for Swagger 2.0, ``servers`` for OpenAPI
3.x), and the literal version string to choose between them.
:func:`extract_spec` dereferences the document and collects exactly that,
keeping each operation object intact for callers that want more.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

from aiplugin.exceptions import SpecParseError
from aiplugin.models import APIInfo, OpenAPISpec, ServerInfo
from aiplugin.parser.loader import detect_openapi_version
from aiplugin.parser.resolver import resolve_refs

# Operation keys of an OpenAPI Path Item Object
_OPERATION_KEYS = frozenset(
    {"get", "put", "post", "delete", "options", "head", "patch", "trace"}
)


def extract_spec(
    raw_spec: dict[str, Any], source_url: Optional[str] = None
) -> OpenAPISpec:
    """Dereference *raw_spec* and build an :class:`~aiplugin.models.OpenAPISpec`.

    Args:
        raw_spec: The decoded document, as returned by
            :func:`~aiplugin.parser.loader.parse_content`.
        source_url: Where the document was fetched from; used later to
            resolve relative server URLs.

    Returns:
        The normalised spec, stamped with the document's literal version.

    Raises:
        SpecParseError: If a ``$ref`` cannot be resolved or ``paths`` is not
            an object.

    Example::

        raw = parse_content(response.text)
        spec = extract_spec(raw, str(response.url))
        spec.paths["/todos"]["get"]["summary"]
    """
    spec = resolve_refs(raw_spec)
    return OpenAPISpec(
        version=detect_openapi_version(spec),
        info=_extract_info(spec),
        paths=_extract_paths(spec),
        host=spec.get("host"),
        base_path=spec.get("basePath"),
        schemes=list(spec.get("schemes") or []),
        servers=_extract_servers(spec),
        source_url=source_url,
        raw=spec,
    )


def iter_operations(spec: OpenAPISpec) -> Iterator[tuple[str, str, dict[str, Any]]]:
    """Yield ``(method, path, operation)`` for every operation, sorted by path."""
    for path in sorted(spec.paths):
        for method, operation in spec.paths[path].items():
            yield method.upper(), path, operation


def _extract_info(spec: dict[str, Any]) -> APIInfo:
    info = spec.get("info") or {}
    return APIInfo(
        title=str(info.get("title", "")),
        version=str(info.get("version", "")),
        description=info.get("description"),
    )


def _extract_servers(spec: dict[str, Any]) -> list[ServerInfo]:
    return [
        ServerInfo(url=server.get("url", "/"), description=server.get("description"))
        for server in spec.get("servers") or []
        if isinstance(server, dict)
    ]


def _extract_paths(spec: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Collect operation objects per path, with lower-cased method keys.

    Non-operation members of a path item (``parameters``, ``summary``,
    vendor extensions) are dropped.
    """
    paths = spec.get("paths")
    if paths is None:
        return {}
    if not isinstance(paths, dict):
        raise SpecParseError(
            f"'paths' must be an object (got {type(paths).__name__})"
        )

    result: dict[str, dict[str, Any]] = {}
    for path, item in paths.items():
        if not isinstance(item, dict):
            continue
        operations = {
            key.lower(): operation
            for key, operation in item.items()
            if key.lower() in _OPERATION_KEYS and isinstance(operation, dict)
        }
        result[path] = operations
    return result
