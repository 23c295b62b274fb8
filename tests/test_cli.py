"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
import shutil
from pathlib import Path

import pytest
import yaml

from symdoc.cli import _build_parser, main

SAMPLES = Path(__file__).parent / "_fixtures" / "samples"


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "extract", "src"])
    assert args.verbose is True
    assert args.command == "extract"
    assert args.paths == ["src"]


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["extract", "a.php", "b.ts", "--verbose"])
    assert args.verbose is True
    assert args.paths == ["a.php", "b.ts"]


def test_cli_extract_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["extract", "src", "--format", "yaml", "--workers", "3", "--suppress-test-callbacks", "--config", "cfg.yml"]
    )
    assert args.format == "yaml"
    assert args.workers == 3
    assert args.suppress_test_callbacks is True
    assert args.config == "cfg.yml"


def test_cli_serve_defaults() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8000


def test_cli_rejects_unknown_format() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["extract", "src", "--format", "xml"])


def test_extract_prints_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = tmp_path / "finalClass.php"
    shutil.copy(SAMPLES / "finalClass.php", target)

    main(["extract", str(target), "--config", str(tmp_path)])

    payload = json.loads(capsys.readouterr().out)
    assert [symbol["qualified_name"] for symbol in payload[0]["symbols"]] == [
        "MyApp\\Util\\ExampleUtil",
        "MyApp\\Util\\ExampleUtil.exampleFunction",
    ]


def test_extract_yaml_with_suppressed_callbacks(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    shutil.copy(SAMPLES / "should4.js", tmp_path / "should4.js")
    shutil.copy(SAMPLES / "App.tsx", tmp_path / "App.tsx")

    main(["extract", str(tmp_path), "--config", str(tmp_path), "--format", "yaml", "--suppress-test-callbacks"])

    payload = yaml.safe_load(capsys.readouterr().out)
    by_file = {Path(entry["origin"]).name: entry for entry in payload}
    assert by_file["should4.js"]["symbols"] == []
    assert [symbol["name"] for symbol in by_file["App.tsx"]["symbols"]] == ["App"]


def test_extract_uses_config_output_format(source_tree, capsys: pytest.CaptureFixture[str]) -> None:
    source_tree.write(
        {
            ".symdoc.yml": "output:\n  format: yaml\n",
            "a.ts": "export function a() {}\n",
        }
    )

    main(["extract", str(source_tree.path()), "--config", str(source_tree.path())])

    payload = yaml.safe_load(capsys.readouterr().out)
    assert payload[0]["symbols"][0]["modifiers"] == ["exported"]


def test_extract_without_sources_exits(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "notes.txt").write_text("nothing here\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["extract", str(tmp_path), "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "No supported source files" in capsys.readouterr().err


def test_extract_missing_path_exits(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["extract", str(tmp_path / "missing.php"), "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "Source path not found" in capsys.readouterr().err


def test_extract_invalid_config_exits(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / ".symdoc.yml").write_text("output:\n  format: xml\n", encoding="utf-8")
    (tmp_path / "a.ts").write_text("function a() {}\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["extract", str(tmp_path), "--config", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "Invalid configuration" in capsys.readouterr().err


def test_extract_rejects_non_positive_workers(tmp_path: Path) -> None:
    (tmp_path / "a.ts").write_text("function a() {}\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["extract", str(tmp_path), "--config", str(tmp_path), "--workers", "0"])

    assert excinfo.value.code == 1


def test_cli_accepts_logging_options_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["extract", "src", "-q", "--log-file", "run.log"])
    assert args.quiet is True
    assert args.verbose is False
    assert args.log_file == "run.log"


def test_extract_quiet_run_logs_diagnostics_to_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    sources = tmp_path / "src"
    sources.mkdir()
    (sources / "cut.ts").write_text("export function f(a: string, b = ", encoding="utf-8")
    log_file = tmp_path / "logs" / "run.log"

    main(["extract", str(sources), "--config", str(tmp_path), "--quiet", "--log-file", str(log_file)])

    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert payload[0]["truncated"] is True
    assert "unterminated" not in captured.err
    assert "unterminated" in log_file.read_text(encoding="utf-8")
