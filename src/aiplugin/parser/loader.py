"""Decode OpenAPI documents and detect their version.

Plugins publish their OpenAPI document as JSON or YAML, and the
``Content-Type`` they serve it with is often wrong (``text/plain`` for a
``.yaml`` file is common). :func:`parse_content` therefore tries both formats,
using the content type only as a hint.

:func:`detect_openapi_version` reads the literal version string. It does not
judge it: whether a version is usable is decided when a request is built
(see :class:`~aiplugin.openapi.provider.OpenAPIProvider`).
"""

from __future__ import annotations

import json
from typing import Any

import yaml

from aiplugin.exceptions import SpecParseError


def content_type_hint(content_type: str) -> str:
    """Map a ``Content-Type`` header value to a :func:`parse_content` hint."""
    if "json" in content_type:
        return "json"
    if "yaml" in content_type or "yml" in content_type:
        return "yaml"
    return ""


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary.

    Raises:
        SpecParseError: If the content cannot be parsed as either format or
            is not a mapping.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if not content.strip():
        raise SpecParseError("OpenAPI document is empty")

    if hint != "yaml":
        try:
            result = json.loads(content)
            if not isinstance(result, dict):
                raise SpecParseError(
                    "OpenAPI document must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result
        except json.JSONDecodeError as exc:
            json_error = exc

    try:
        result = yaml.safe_load(content)
        if not isinstance(result, dict):
            raise SpecParseError(
                "OpenAPI document must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse OpenAPI document as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)


def detect_openapi_version(spec: dict[str, Any]) -> str:
    """Return the literal version string a document declares.

    Swagger 2.0 documents declare ``swagger``, OpenAPI 3.x documents declare
    ``openapi``. YAML may load unquoted versions such as ``2.0`` as floats,
    so the value is normalised to ``str``.

    Args:
        spec: The parsed document.

    Returns:
        The version (e.g. ``"2.0"``, ``"3.0.3"``, ``"3.1.0"``), or ``""`` when
        the document declares neither field.
    """
    if "swagger" in spec:
        return str(spec["swagger"])
    if "openapi" in spec:
        return str(spec["openapi"])
    return ""
