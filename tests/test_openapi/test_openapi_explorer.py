"""Tests for aiplugin.openapi.explorer.OpenAPIExplorer."""

from __future__ import annotations

import json
from typing import Any

import pytest

from aiplugin.exceptions import DomainPolicyError, ManifestFetchError, SpecParseError
from aiplugin.openapi import OpenAPIExplorer

OPENAPI_URL = "https://example.com/openapi.yaml"


class TestOpenAPIExplorer:
    @pytest.mark.asyncio
    async def test_fetches_yaml_document(self, todo_site) -> None:
        async with todo_site.client() as client:
            spec = await OpenAPIExplorer(client).inspect(OPENAPI_URL)

        assert spec.version == "3.0.1"
        assert spec.info.title == "TODO Plugin"
        assert spec.source_url == OPENAPI_URL
        assert "/todos" in spec.paths

    @pytest.mark.asyncio
    async def test_yaml_served_as_text_plain(self, web, openapi_30_text: str) -> None:
        web.add_text(OPENAPI_URL, openapi_30_text, "text/plain")
        async with web.client() as client:
            spec = await OpenAPIExplorer(client).inspect(OPENAPI_URL)
        assert spec.version == "3.0.1"

    @pytest.mark.asyncio
    async def test_fetches_json_document(self, web, swagger_20_raw: dict[str, Any]) -> None:
        url = "https://example.com/swagger.json"
        web.add_json(url, swagger_20_raw)
        async with web.client() as client:
            spec = await OpenAPIExplorer(client).inspect(url)
        assert spec.version == "2.0"
        assert spec.host == "notes.example.com"

    @pytest.mark.asyncio
    async def test_source_url_is_the_final_url(self, web, openapi_30_text: str) -> None:
        final = "https://docs.example.com/v2/openapi.yaml"
        web.redirect(OPENAPI_URL, final, status_code=301)
        web.add_text(final, openapi_30_text, "application/yaml")
        async with web.client() as client:
            spec = await OpenAPIExplorer(client).inspect(OPENAPI_URL)
        assert spec.source_url == final

    @pytest.mark.asyncio
    async def test_rejects_redirect_off_domain(self, web, openapi_30_text: str) -> None:
        evil = "https://evil.com/openapi.yaml"
        web.redirect(OPENAPI_URL, evil)
        web.add_text(evil, openapi_30_text, "application/yaml")
        async with web.client() as client:
            with pytest.raises(DomainPolicyError):
                await OpenAPIExplorer(client).inspect(OPENAPI_URL)

    @pytest.mark.asyncio
    async def test_not_found_is_an_error(self, web) -> None:
        async with web.client() as client:
            with pytest.raises(ManifestFetchError) as exc_info:
                await OpenAPIExplorer(client).inspect(OPENAPI_URL)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_unparseable_document(self, web) -> None:
        web.add_text(OPENAPI_URL, "- just\n- a list\n", "application/yaml")
        async with web.client() as client:
            with pytest.raises(SpecParseError):
                await OpenAPIExplorer(client).inspect(OPENAPI_URL)

    @pytest.mark.asyncio
    async def test_dangling_ref(self, web) -> None:
        doc = {"openapi": "3.0.0", "paths": {"/x": {"get": {"$ref": "#/nope"}}}}
        web.add_text(OPENAPI_URL, json.dumps(doc), "application/json")
        async with web.client() as client:
            with pytest.raises(SpecParseError, match="Cannot resolve"):
                await OpenAPIExplorer(client).inspect(OPENAPI_URL)
