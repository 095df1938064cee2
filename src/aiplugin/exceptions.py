"""Exception hierarchy for aiplugin.

All recoverable errors inherit from :class:`AIPluginError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`aiplugin.exit_codes`.
The CLI entry point in :func:`aiplugin.app.main` catches ``AIPluginError``
and exits with the appropriate code. Library callers catch the specific
subclasses they care about; nothing in the core suppresses them.

Subclass hierarchy::

    AIPluginError (exit 1)
    +-- ManifestFetchError         (exit 6)
    +-- ManifestValidationError    (exit 7)
    |   +-- DomainPolicyError      (exit 7)
    +-- SpecParseError             (exit 8)
    +-- PluginAuthenticationError  (exit 3)
    +-- PluginAPIError             (exit 5)
    +-- ConfigError                (exit 1)

    UnreachableError (AssertionError) -- contract fault, never recoverable
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from aiplugin.exit_codes import (
    EXIT_API_ERROR,
    EXIT_AUTH_FAILURE,
    EXIT_FETCH_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_VALIDATION_ERROR,
)


class AIPluginError(Exception):
    """Base exception for all aiplugin errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`aiplugin.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ManifestFetchError(AIPluginError):
    """Raised when a manifest or OpenAPI document cannot be retrieved.

    Covers both transport failures (``response`` is ``None``) and non-success
    HTTP statuses (``response`` holds the raw :class:`httpx.Response` so the
    caller can inspect it).
    """

    exit_code = EXIT_FETCH_ERROR

    def __init__(self, message: str, response: Optional[httpx.Response] = None):
        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> Optional[int]:
        """HTTP status of the failed response, if one was received."""
        if self.response is None:
            return None
        return self.response.status_code


class ManifestValidationError(AIPluginError):
    """Raised when a manifest is malformed or fails a cross-domain check.

    When wrapping an underlying failure (e.g. a pydantic ``ValidationError``)
    the original exception is kept in ``cause`` as well as ``__cause__``.
    """

    exit_code = EXIT_VALIDATION_ERROR

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class DomainPolicyError(ManifestValidationError):
    """Raised when a redirect or declared URL escapes the plugin's root domain."""


class SpecParseError(AIPluginError):
    """Raised when an OpenAPI document cannot be parsed or dereferenced."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class PluginAuthenticationError(AIPluginError):
    """Raised when a token cannot be obtained (OAuth callback or exchange failure)."""

    exit_code = EXIT_AUTH_FAILURE


class PluginAPIError(AIPluginError):
    """Raised when the plugin's OpenAPI document does not allow the requested call.

    Examples: unknown path or method, no usable base URL, unsupported OpenAPI
    version, or no static token for the calling service.
    """

    exit_code = EXIT_API_ERROR


class ConfigError(AIPluginError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class UnreachableError(AssertionError):
    """A value outside a closed set reached a branch with no handler.

    Not an :class:`AIPluginError`: it signals a programming
    error and must never be handled as a recoverable condition.
    """

    def __init__(self, value: Any):
        super().__init__(f"Unreachable branch reached with value: {value!r}")
        self.value = value
