"""Tests for nouncli.parser.loader."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest

from nouncli.exceptions import SchemaError
from nouncli.parser.loader import _parse_content, load_definition, load_definition_dict

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


class TestLoadDefinition:
    def test_loads_yaml_fixture(self) -> None:
        config = load_definition(FIXTURES_DIR / "shop.yaml")
        assert config.cli_name == "shop"
        assert config.version == "1.2.3"
        assert config.base_url == "https://api.shop.test/v1"
        assert config.auth is not None
        assert config.auth.header_name == "X-API-Key"
        assert list(config.nouns) == ["Customer", "Order", "LineItem"]
        assert config.nouns["Order"]["customer"] == "->Customer"
        assert config.verbs["Customer"] == ["archive"]

    def test_loads_json_with_snake_case_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "app.json"
        path.write_text(
            json.dumps(
                {
                    "cli_name": "crm",
                    "nouns": {"Lead": {"name": "string"}},
                    "verbs": {"Lead": ["convert"]},
                }
            )
        )
        config = load_definition(path)
        assert config.cli_name == "crm"
        assert config.verbs == {"Lead": ["convert"]}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SchemaError, match="not found"):
            load_definition(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("   \n")
        with pytest.raises(SchemaError, match="empty"):
            load_definition(path)

    def test_validation_failure_is_schema_error(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"nouns": ["not", "a", "mapping"]}))
        with pytest.raises(SchemaError, match="Invalid application definition"):
            load_definition(path)

    def test_schema_error_exit_code(self, tmp_path: Path) -> None:
        with pytest.raises(SchemaError) as exc_info:
            load_definition(tmp_path / "missing.json")
        assert exc_info.value.exit_code == 7


class TestParseContent:
    def test_json_without_hint(self) -> None:
        assert _parse_content('{"nouns": {}}') == {"nouns": {}}

    def test_yaml_without_hint(self) -> None:
        content = textwrap.dedent(
            """\
            nouns:
              Customer:
                name: string
            """
        )
        assert _parse_content(content) == {"nouns": {"Customer": {"name": "string"}}}

    def test_invalid_json_with_json_hint(self) -> None:
        with pytest.raises(SchemaError, match="Invalid JSON"):
            _parse_content("{nope", hint="json")

    def test_non_object_document(self) -> None:
        with pytest.raises(SchemaError, match="object"):
            _parse_content("- a\n- b\n", hint="yaml")

    def test_unparseable(self) -> None:
        with pytest.raises(SchemaError, match="Failed to parse"):
            _parse_content("key: [unclosed")


class TestLoadDefinitionDict:
    def test_suffix_less_file_detected(self, tmp_path: Path) -> None:
        path = tmp_path / "definition"
        path.write_text("cliName: x\nnouns: {}\n")
        assert load_definition_dict(path) == {"cliName": "x", "nouns": {}}
