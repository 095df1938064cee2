"""Tests for aiplugin.openapi.provider.OpenAPIProvider -- request building."""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx
import pytest

from aiplugin.auth import AuthProvider, StaticTokenProvider
from aiplugin.exceptions import PluginAPIError, PluginAuthenticationError, UnreachableError
from aiplugin.models import HTTPMethod, NoAuth, OpenAPISpec, ServerInfo, UserHttpAuth
from aiplugin.openapi import OpenAPIProvider
from aiplugin.parser import extract_spec, parse_content

TOKENS = StaticTokenProvider(user_token="user-tok")

TODO_PATHS = {
    "/todos": {"get": {}, "post": {}, "delete": {}, "head": {}, "options": {}},
    "/todos/archive": {"put": {}, "patch": {}},
}


def _spec(**fields: Any) -> OpenAPISpec:
    fields.setdefault("version", "3.0.3")
    fields.setdefault("paths", TODO_PATHS)
    fields.setdefault("servers", [ServerInfo(url="https://api.example.com")])
    return OpenAPISpec(**fields)


def _provider(
    spec: OpenAPISpec,
    handler=None,
    auth: Optional[AuthProvider] = None,
) -> OpenAPIProvider:
    handler = handler or (lambda request: httpx.Response(200, json={"ok": True}))
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAPIProvider(spec, client, auth or AuthProvider(NoAuth()))


# ---------------------------------------------------------------------------
# Base URL per OpenAPI version
# ---------------------------------------------------------------------------


class TestResolveBaseUrl:
    def test_openapi_30_uses_first_server(self) -> None:
        spec = _spec(
            servers=[
                ServerInfo(url="https://api.example.com/v1"),
                ServerInfo(url="https://staging.example.com"),
            ]
        )
        assert _provider(spec).resolve_base_url() == "https://api.example.com/v1"

    def test_openapi_31_uses_first_server(self) -> None:
        spec = _spec(version="3.1.0")
        assert _provider(spec).resolve_base_url() == "https://api.example.com"

    def test_relative_server_resolves_against_document(self) -> None:
        spec = _spec(
            servers=[ServerInfo(url="/v1")],
            source_url="https://example.com/specs/openapi.yaml",
        )
        assert _provider(spec).resolve_base_url() == "https://example.com/v1"

    def test_relative_server_without_document_url(self) -> None:
        spec = _spec(servers=[ServerInfo(url="/v1")])
        with pytest.raises(PluginAPIError, match="does not specify a base URL"):
            _provider(spec).resolve_base_url()

    def test_openapi_3_without_servers(self) -> None:
        with pytest.raises(PluginAPIError, match="does not specify a base URL"):
            _provider(_spec(servers=[])).resolve_base_url()

    def test_swagger_20_uses_host_and_first_scheme(self) -> None:
        spec = _spec(version="2.0", servers=[], host="notes.example.com", schemes=["http", "https"])
        assert _provider(spec).resolve_base_url() == "http://notes.example.com"

    def test_swagger_20_scheme_falls_back_to_document_scheme(self) -> None:
        spec = _spec(
            version="2.0",
            servers=[],
            host="notes.example.com",
            source_url="http://example.com/swagger.json",
        )
        assert _provider(spec).resolve_base_url() == "http://notes.example.com"

    def test_swagger_20_scheme_defaults_to_https(self) -> None:
        spec = _spec(version="2.0", servers=[], host="notes.example.com")
        assert _provider(spec).resolve_base_url() == "https://notes.example.com"

    def test_swagger_20_without_host(self) -> None:
        with pytest.raises(PluginAPIError, match="does not specify a base URL"):
            _provider(_spec(version="2.0", servers=[])).resolve_base_url()

    @pytest.mark.parametrize("version", ["", "1.2", "3.2.0", "4.0.0"])
    def test_unsupported_versions(self, version: str) -> None:
        with pytest.raises(PluginAPIError, match="Unsupported OpenAPI version"):
            _provider(_spec(version=version)).resolve_base_url()

    def test_endpoint_replaces_base_path(self) -> None:
        spec = _spec(servers=[ServerInfo(url="https://api.example.com/v1?x=1")])
        assert _provider(spec).resolve_url("/todos") == "https://api.example.com/todos"


# ---------------------------------------------------------------------------
# Endpoint lookup
# ---------------------------------------------------------------------------


class TestGetEndpointSpec:
    def test_returns_operation(self) -> None:
        spec = _spec(paths={"/todos": {"get": {"operationId": "getTodos"}}})
        assert _provider(spec).get_endpoint_spec("/todos", "GET") == {
            "operationId": "getTodos"
        }

    def test_no_paths(self) -> None:
        with pytest.raises(PluginAPIError, match="Plugin does not specify any OpenAPI paths"):
            _provider(_spec(paths={})).get_endpoint_spec("/todos", HTTPMethod.GET)

    def test_unknown_path(self) -> None:
        with pytest.raises(
            PluginAPIError, match='Plugin does not specify OpenAPI path: "/users"'
        ):
            _provider(_spec()).get_endpoint_spec("/users", HTTPMethod.GET)

    def test_unknown_method(self) -> None:
        with pytest.raises(
            PluginAPIError,
            match="Plugin does not specify PUT method for path /todos",
        ):
            _provider(_spec()).get_endpoint_spec("/todos", HTTPMethod.PUT)

    def test_method_outside_closed_set(self) -> None:
        with pytest.raises(UnreachableError):
            _provider(_spec()).get_endpoint_spec("/todos", "TRACE")

    def test_lower_case_method_string(self) -> None:
        assert _provider(_spec()).get_endpoint_spec("/todos", "get") == {}


# ---------------------------------------------------------------------------
# Request shapes
# ---------------------------------------------------------------------------


class TestBuildRequest:
    def test_get_sends_query(self) -> None:
        request = _provider(_spec()).build_request(
            "/todos", HTTPMethod.GET, {"username": "bob", "limit": 5}
        )
        assert request.method == "GET"
        assert request.url == httpx.URL("https://api.example.com/todos?username=bob&limit=5")
        assert request.content == b""

    def test_get_nested_values_are_json_encoded(self) -> None:
        request = _provider(_spec()).build_request(
            "/todos", HTTPMethod.GET, {"filter": {"done": False}}
        )
        assert request.url.params["filter"] == '{"done": false}'

    def test_get_without_parameters(self) -> None:
        request = _provider(_spec()).build_request("/todos", HTTPMethod.GET, None)
        assert str(request.url) == "https://api.example.com/todos"

    def test_get_rejects_non_mapping(self) -> None:
        with pytest.raises(PluginAPIError, match="GET parameters must be a mapping"):
            _provider(_spec()).build_request("/todos", HTTPMethod.GET, ["a", "b"])

    @pytest.mark.parametrize(
        "method, endpoint",
        [
            (HTTPMethod.POST, "/todos"),
            (HTTPMethod.PUT, "/todos/archive"),
            (HTTPMethod.PATCH, "/todos/archive"),
            (HTTPMethod.DELETE, "/todos"),
        ],
    )
    def test_body_methods_send_json(self, method: HTTPMethod, endpoint: str) -> None:
        body = {"todo": "buy milk", "tags": ["home"]}
        request = _provider(_spec()).build_request(endpoint, method, body)

        assert request.method == method.value
        assert str(request.url) == f"https://api.example.com{endpoint}"
        assert request.headers["content-type"] == "application/json"
        assert json.loads(request.content) == body

    @pytest.mark.parametrize("method", [HTTPMethod.HEAD, HTTPMethod.OPTIONS])
    def test_bare_methods_send_nothing(self, method: HTTPMethod) -> None:
        request = _provider(_spec()).build_request("/todos", method, {"ignored": True})
        assert str(request.url) == "https://api.example.com/todos"
        assert request.content == b""

    def test_headers_are_added(self) -> None:
        request = _provider(_spec()).build_request(
            "/todos", HTTPMethod.GET, None, {"Authorization": "Bearer t"}
        )
        assert request.headers["authorization"] == "Bearer t"

    def test_undeclared_endpoint_builds_nothing(self) -> None:
        with pytest.raises(PluginAPIError):
            _provider(_spec()).build_request("/nope", HTTPMethod.GET, None)


# ---------------------------------------------------------------------------
# interact
# ---------------------------------------------------------------------------


class TestInteract:
    @pytest.mark.asyncio
    async def test_sends_authenticated_request(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"todos": ["a"]})

        provider = _provider(
            _spec(), handler, AuthProvider(UserHttpAuth(authorization_type="bearer"))
        )
        response = await provider.interact("/todos", "GET", {"username": "bob"}, TOKENS)

        assert response.json() == {"todos": ["a"]}
        assert seen[0].headers["authorization"] == "Bearer user-tok"
        assert seen[0].url.params["username"] == "bob"

    @pytest.mark.asyncio
    async def test_error_statuses_are_returned_not_raised(self) -> None:
        provider = _provider(_spec(), lambda request: httpx.Response(500, text="oops"))
        response = await provider.interact("/todos", HTTPMethod.POST, {"todo": "x"}, TOKENS)
        assert response.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        provider = _provider(_spec(), handler)
        with pytest.raises(PluginAPIError, match="failed"):
            await provider.interact("/todos", HTTPMethod.GET, None, TOKENS)

    @pytest.mark.asyncio
    async def test_undeclared_call_sends_nothing(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        with pytest.raises(PluginAPIError):
            await _provider(_spec(), handler).interact("/users", "GET", None, TOKENS)

    @pytest.mark.asyncio
    async def test_missing_user_token(self) -> None:
        provider = _provider(_spec(), auth=AuthProvider(UserHttpAuth(authorization_type="basic")))
        with pytest.raises(PluginAuthenticationError):
            await provider.interact("/todos", "GET", None, StaticTokenProvider())

    @pytest.mark.asyncio
    async def test_unusable_document_is_reported_before_asking_for_tokens(self) -> None:
        asked: list[str] = []

        class CountingTokens(StaticTokenProvider):
            async def get_user_token(self) -> str:
                asked.append("user")
                return await super().get_user_token()

        provider = _provider(
            _spec(version=""), auth=AuthProvider(UserHttpAuth(authorization_type="bearer"))
        )
        with pytest.raises(PluginAPIError, match="Unsupported OpenAPI version"):
            await provider.interact("/todos", "GET", None, CountingTokens())
        assert asked == []

    @pytest.mark.asyncio
    async def test_with_parsed_swagger_document(self, swagger_20_raw: dict[str, Any]) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        provider = _provider(extract_spec(swagger_20_raw), handler)
        await provider.interact("/notes", "PATCH", {"id": 1, "text": "hi"}, TOKENS)
        assert str(seen[0].url) == "https://notes.example.com/notes"

    @pytest.mark.asyncio
    async def test_with_parsed_relative_server(self, openapi_31_raw: dict[str, Any]) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        spec = extract_spec(openapi_31_raw, source_url="https://example.com/openapi.json")
        await _provider(spec, handler).interact("/forecast", "GET", {"city": "Oslo"}, TOKENS)
        assert str(seen[0].url) == "https://example.com/forecast?city=Oslo"

    def test_fixture_yaml_document(self, openapi_30_text: str) -> None:
        provider = _provider(extract_spec(parse_content(openapi_30_text)))
        assert provider.resolve_url("/todos") == "https://api.example.com/todos"
