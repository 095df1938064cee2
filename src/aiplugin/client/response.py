"""Render a plugin's raw response for the CLI.

:meth:`~aiplugin.plugin.AIPlugin.interact` hands back the plugin's response
untouched, whatever its status. :func:`format_api_response` shows it the
``curl -i`` way, split across streams: the status line (and, with
``--verbose``, the request line and response headers) on stderr, the decoded
body on stdout.
"""

from __future__ import annotations

from typing import Any

import httpx

from aiplugin.output import get_output


def format_api_response(response: httpx.Response) -> None:
    """Print *response* through the global output manager.

    The body must already be read (``await response.aread()``).
    """
    output = get_output()

    request = response.request
    output.debug(f"{request.method} {request.url}")
    for name, value in response.headers.items():
        output.debug(f"< {name}: {value}")
    output.info(f"HTTP {response.status_code} {response.reason_phrase}".rstrip())

    data = extract_response_data(response)
    if data is not None:
        output.format_response(
            data, response.headers.get("content-type", "application/json")
        )


def extract_response_data(response: httpx.Response) -> Any:
    """Return the body decoded as JSON, else as text, or ``None`` if empty.

    Plugins often serve JSON as ``text/plain``, so decoding is attempted
    whatever the ``Content-Type`` says.
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
