"""OpenAPI document parser -- decode, dereference, and normalise.

Turns the body of a plugin's OpenAPI document (JSON or YAML, Swagger 2.0 or
OpenAPI 3.x) into an :class:`~aiplugin.models.OpenAPISpec`.

Typical usage::

    from aiplugin.parser import extract_spec, parse_content

    raw = parse_content(response.text, hint="yaml")
    spec = extract_spec(raw, source_url=str(response.url))

Sub-modules:

* :mod:`~aiplugin.parser.loader` -- JSON/YAML decoding and version detection.
* :mod:`~aiplugin.parser.resolver` -- internal ``$ref`` inlining with cycle
  detection.
* :mod:`~aiplugin.parser.extractor` -- builds the normalised spec.
"""

from aiplugin.parser.extractor import extract_spec, iter_operations
from aiplugin.parser.loader import content_type_hint, detect_openapi_version, parse_content

__all__ = [
    "content_type_hint",
    "detect_openapi_version",
    "extract_spec",
    "iter_operations",
    "parse_content",
]
