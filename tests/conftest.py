"""Shared test fixtures for aiplugin.

Provides fixture data (manifest and OpenAPI documents), a fake web of sites
served through :class:`httpx.MockTransport`, isolated config environments,
and output state management. These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, Union

import httpx
import pytest

from aiplugin.models import Manifest
from aiplugin.output import OutputFormat, OutputManager, reset_output, set_output

FIXTURES_DIR = Path(__file__).parent / "fixtures"

MANIFEST_URL = "https://example.com/.well-known/ai-plugin.json"
OPENAPI_URL = "https://example.com/openapi.yaml"


def read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


def manifest_data(**overrides: Any) -> dict[str, Any]:
    """The fixture manifest as a dict, with top-level keys replaced."""
    data = json.loads(read_fixture("ai-plugin.json"))
    data.update(overrides)
    return data


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams, the cached
    references go stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Fake web
# ---------------------------------------------------------------------------


def _without_query(url: httpx.URL) -> str:
    return str(url).split("?", 1)[0]


Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeWeb:
    """Routes requests by full URL (without query) to canned responses.

    Unknown URLs answer 404. Every request is recorded in :attr:`requests`.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, route: Route) -> None:
        self.routes[url] = route

    def add_json(self, url: str, data: Any, status_code: int = 200) -> None:
        self.routes[url] = httpx.Response(status_code, json=data)

    def add_text(
        self, url: str, text: str, content_type: str = "text/plain", status_code: int = 200
    ) -> None:
        self.routes[url] = httpx.Response(
            status_code, text=text, headers={"content-type": content_type}
        )

    def redirect(self, url: str, location: str, status_code: int = 302) -> None:
        self.routes[url] = httpx.Response(status_code, headers={"location": location})

    def requests_to(self, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if _without_query(r.url) == url]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(_without_query(request.url))
        if route is None:
            return httpx.Response(404, text="Not Found")
        if isinstance(route, httpx.Response):
            # Responses are single-use once read; hand out a fresh copy.
            return httpx.Response(
                route.status_code, headers=route.headers, content=route.content
            )
        return route(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport(), follow_redirects=True)


@pytest.fixture
def web() -> FakeWeb:
    """An empty fake web; tests add the routes they need."""
    return FakeWeb()


@pytest.fixture
def todo_site(web: FakeWeb) -> FakeWeb:
    """example.com publishing the TODO plugin and its OpenAPI 3.0 document."""
    web.add_json(MANIFEST_URL, manifest_data())
    web.add_text(OPENAPI_URL, read_fixture("openapi_3.0.yaml"), "application/yaml")
    return web


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_manifest_data() -> Callable[..., dict[str, Any]]:
    """Factory for manifest payloads with top-level keys replaced."""
    return manifest_data


@pytest.fixture
def manifest() -> Manifest:
    return Manifest.model_validate(manifest_data())


@pytest.fixture
def openapi_30_text() -> str:
    return read_fixture("openapi_3.0.yaml")


@pytest.fixture
def openapi_31_raw() -> dict[str, Any]:
    return json.loads(read_fixture("openapi_3.1.json"))


@pytest.fixture
def swagger_20_raw() -> dict[str, Any]:
    return json.loads(read_fixture("openapi_2.0.json"))


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME at subdirectories of tmp_path,
    forces the XDG layout, and clears all AIPLUGIN_* environment variables.

    Returns:
        The tmp_path root directory.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setattr("aiplugin.config._is_xdg_platform", lambda: True)

    for var in ["AIPLUGIN_SERVICE_NAME", "AIPLUGIN_MANIFEST_PATH", "AIPLUGIN_TIMEOUT"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
