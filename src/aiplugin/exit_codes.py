"""Process exit codes of the ``aiplugin`` CLI.

Every :class:`~aiplugin.exceptions.AIPluginError` subclass carries one of
these, so a script can tell "this site has no plugin" (4) from "this site's
plugin is not trustworthy" (7) without reading stderr::

    $ aiplugin inspect https://example.com
    $ echo $?
    4
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""Any failure without a more specific code, including bad configuration."""

EXIT_INVALID_USAGE = 2
"""Bad arguments: unknown method, invalid JSON parameters, wrong auth type."""

EXIT_AUTH_FAILURE = 3
"""Authentication failed (OAuth callback, token exchange, missing token)."""

EXIT_NOT_FOUND = 4
"""No plugin manifest was found at the well-known location (HTTP 404)."""

EXIT_API_ERROR = 5
"""The plugin's OpenAPI document does not allow the requested call."""

EXIT_FETCH_ERROR = 6
"""A manifest or OpenAPI document could not be fetched."""

EXIT_VALIDATION_ERROR = 7
"""The manifest is malformed or violates the cross-domain trust policy."""

EXIT_SPEC_PARSE_ERROR = 8
"""The OpenAPI document could not be parsed or dereferenced."""
