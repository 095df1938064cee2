"""Tests for aiplugin.parser.loader."""

from __future__ import annotations

import textwrap

import pytest

from aiplugin.exceptions import SpecParseError
from aiplugin.parser.loader import content_type_hint, detect_openapi_version, parse_content


class TestParseContent:
    def test_parses_json(self) -> None:
        assert parse_content('{"openapi": "3.0.3", "paths": {}}') == {
            "openapi": "3.0.3",
            "paths": {},
        }

    def test_parses_yaml(self) -> None:
        content = textwrap.dedent("""\
            openapi: "3.1.0"
            info:
              title: YAML Test
        """)
        result = parse_content(content)
        assert result["openapi"] == "3.1.0"
        assert result["info"]["title"] == "YAML Test"

    def test_yaml_served_as_json_still_parses(self) -> None:
        assert parse_content("openapi: 3.0.0\npaths: {}\n", hint="json")["paths"] == {}

    def test_yaml_hint_skips_json(self) -> None:
        assert parse_content('{"swagger": "2.0"}', hint="yaml") == {"swagger": "2.0"}

    def test_fixture_document(self, openapi_30_text: str) -> None:
        result = parse_content(openapi_30_text, hint="yaml")
        assert result["openapi"] == "3.0.1"
        assert "/todos" in result["paths"]

    def test_empty_content(self) -> None:
        with pytest.raises(SpecParseError, match="empty"):
            parse_content("   \n")

    def test_json_array_is_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="must be a JSON/YAML object"):
            parse_content("[1, 2, 3]")

    def test_yaml_scalar_is_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="must be a JSON/YAML object"):
            parse_content("just some text")

    def test_garbage_is_rejected(self) -> None:
        with pytest.raises(SpecParseError, match="Failed to parse"):
            parse_content("{unclosed: [")


class TestContentTypeHint:
    @pytest.mark.parametrize(
        "content_type, hint",
        [
            ("application/json", "json"),
            ("application/json; charset=utf-8", "json"),
            ("application/vnd.oai.openapi+json", "json"),
            ("application/yaml", "yaml"),
            ("text/x-yaml", "yaml"),
            ("application/x-yml", "yaml"),
            ("text/plain", ""),
            ("", ""),
        ],
    )
    def test_hint(self, content_type: str, hint: str) -> None:
        assert content_type_hint(content_type) == hint


class TestDetectOpenAPIVersion:
    def test_swagger(self) -> None:
        assert detect_openapi_version({"swagger": "2.0"}) == "2.0"

    def test_openapi(self) -> None:
        assert detect_openapi_version({"openapi": "3.1.0"}) == "3.1.0"

    def test_unquoted_yaml_version_is_normalised(self) -> None:
        assert detect_openapi_version(parse_content("swagger: 2.0\n")) == "2.0"

    def test_swagger_wins_over_openapi(self) -> None:
        assert detect_openapi_version({"swagger": "2.0", "openapi": "3.0.0"}) == "2.0"

    def test_unknown_versions_are_reported_not_rejected(self) -> None:
        assert detect_openapi_version({"openapi": "4.0.0"}) == "4.0.0"

    def test_missing(self) -> None:
        assert detect_openapi_version({"info": {}}) == ""
