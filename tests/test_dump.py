"""Tests for symdoc.dump."""

from __future__ import annotations

import json

import pytest
import yaml

from symdoc.dump import dump_results, result_to_payload
from symdoc.errors import UnsupportedLanguage
from symdoc.extractor import ExtractionResult, Extractor
from symdoc.models import Language


def test_payload_shape(sample_unit) -> None:
    result = Extractor().extract(sample_unit("App.tsx"))

    payload = result_to_payload(result)

    assert payload["origin"] == "App.tsx"
    assert payload["language"] == "typescript"
    assert payload["truncated"] is False
    assert payload["cancelled"] is False
    assert payload["failure"] is None
    (symbol,) = payload["symbols"]
    assert symbol["qualified_name"] == "App"
    assert symbol["kind"] == "function"
    assert symbol["modifiers"] == ["default-export"]
    assert symbol["parameters"] == [
        {
            "name": "{ title }",
            "type": "AppProps",
            "nullable": False,
            "has_default": False,
            "default": None,
            "optional": False,
            "variadic": False,
        }
    ]
    assert symbol["span"]["line"] == 10


def test_modifiers_are_serialized_in_stable_order(sample_unit) -> None:
    payload = result_to_payload(Extractor().extract(sample_unit("finalClass.php")))

    modifiers = {symbol["qualified_name"]: symbol["modifiers"] for symbol in payload["symbols"]}
    assert modifiers == {
        "MyApp\\Util\\ExampleUtil": ["public", "final"],
        "MyApp\\Util\\ExampleUtil.exampleFunction": ["public", "static"],
    }


def test_failures_and_diagnostics_are_serialized(sample_unit, extract_text) -> None:
    failed = ExtractionResult(unit=sample_unit("App.tsx"), failure=UnsupportedLanguage("no front end"))
    truncated = extract_text(Language.JAVASCRIPT, "function f() {\n", origin="broken.js")

    payload = json.loads(dump_results([failed, truncated]))

    assert payload[0]["failure"] == {"kind": "UnsupportedLanguage", "message": "no front end"}
    assert payload[1]["truncated"] is True
    assert payload[1]["diagnostics"][0]["kind"] == "truncated-input"
    assert payload[1]["diagnostics"][0]["origin"] == "broken.js"


def test_yaml_output_round_trips(sample_unit) -> None:
    result = Extractor().extract(sample_unit("class.php"))

    loaded = yaml.safe_load(dump_results([result], fmt="YAML"))

    assert [symbol["name"] for symbol in loaded[0]["symbols"]] == ["ExampleClass", "__construct", "exampleFunction"]
    assert loaded[0]["symbols"][2]["documentation"] == "An example function.\n\n@return int"


def test_json_indent_is_configurable(sample_unit) -> None:
    result = Extractor().extract(sample_unit("App.tsx"))

    assert dump_results([result], indent=4).splitlines()[1].startswith("    {")


def test_unknown_format_raises() -> None:
    with pytest.raises(ValueError, match="Unsupported output format"):
        dump_results([], fmt="xml")
