"""Inline internal ``$ref`` pointers of an OpenAPI or Swagger document.

Plugin documents reference shared schemas through JSON Pointers such as
``#/components/schemas/Todo`` (OpenAPI 3.x) or ``#/definitions/Todo``
(Swagger 2.0). :func:`resolve_refs` returns a copy of the document with
every such pointer replaced by its target, so operation objects can be
handed out self-contained.

Only same-document pointers are followed; a plugin cannot make us fetch
another URL through a ``$ref``. A pointer that refers back to one of its own
ancestors is a cycle and is left in place as the ``{"$ref": ...}`` dict.
"""

from __future__ import annotations

import copy
from typing import Any

from aiplugin.exceptions import SpecParseError


def resolve_refs(spec: dict[str, Any]) -> dict[str, Any]:
    """Return a deep copy of *spec* with internal ``$ref`` pointers inlined.

    Raises:
        SpecParseError: If a pointer is external or does not exist.
    """
    root = copy.deepcopy(spec)
    return _inline(root, root, frozenset())


def _resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Follow a ``#/a/b/0`` pointer through *root* (RFC 6901 escaping)."""
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are followed."
        )

    node: Any = root
    for token in ref[2:].split("/"):
        token = token.replace("~1", "/").replace("~0", "~")
        if isinstance(node, dict) and token in node:
            node = node[token]
        elif isinstance(node, list) and token.isdigit() and int(token) < len(node):
            node = node[int(token)]
        else:
            raise SpecParseError(f"Cannot resolve $ref '{ref}': '{token}' not found")
    return node


def _inline(node: Any, root: dict[str, Any], active: frozenset[str]) -> Any:
    # active: pointers being expanded on the current branch
    if isinstance(node, dict):
        ref = node.get("$ref")
        if isinstance(ref, str):
            if ref in active:
                return node
            return _inline(_resolve_pointer(ref, root), root, active | {ref})
        return {key: _inline(value, root, active) for key, value in node.items()}
    if isinstance(node, list):
        return [_inline(item, root, active) for item in node]
    return node
