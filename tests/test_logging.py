"""Logging configuration tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from symdoc.logging import configure_logging, get_log_file_path, get_logger, resolve_level, unit_logger


def test_resolve_level_precedence() -> None:
    assert resolve_level() == logging.INFO
    assert resolve_level("warn") == logging.WARNING
    assert resolve_level("DEBUG", quiet=True) == logging.ERROR
    assert resolve_level(quiet=True, verbose=True) == logging.DEBUG


def test_resolve_level_rejects_unknown_names() -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        resolve_level("chatty")


def test_quiet_console_still_fills_log_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    log_file = tmp_path / "logs" / "symdoc.log"
    configure_logging(quiet=True, log_file=log_file)

    logger = get_logger("extractor")
    logger.warning("duplicate symbol Foo")
    logger.error("extraction failed")

    err = capsys.readouterr().err
    assert "symdoc: ERROR extraction failed" in err
    assert "duplicate symbol" not in err
    written = log_file.read_text(encoding="utf-8")
    assert "WARNING" in written and "symdoc.extractor: duplicate symbol Foo" in written
    assert get_log_file_path() == log_file


def test_reconfiguring_replaces_handlers(tmp_path: Path) -> None:
    configure_logging(log_file=tmp_path / "first.log")
    logger = configure_logging(console="stdout")

    assert len(logger.handlers) == 1
    assert get_log_file_path() is None
    assert logger.level == logging.INFO


def test_unit_logger_prefixes_origin(caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="symdoc"):
        unit_logger(get_logger("extractor"), "src/a.php").debug("extracted %d symbols", 3)

    assert [record.getMessage() for record in caplog.records] == ["src/a.php: extracted 3 symbols"]
    assert caplog.records[0].name == "symdoc.extractor"
