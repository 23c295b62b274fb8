"""Logging for symdoc: console and file sinks plus per-unit message context."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, MutableMapping

_ROOT = "symdoc"

_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

_CONSOLE_FORMAT = "symdoc: %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(threadName)s %(name)s: %(message)s"

# File sink of the last configure_logging call, pointed to in failure messages.
_log_file_path: Path | None = None


class UnitLogAdapter(logging.LoggerAdapter):
    """Prefixes every message with the origin of the source unit being processed."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        return f"{self.extra['origin']}: {msg}", kwargs


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``symdoc.<name>``, or the package logger when no name is given."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def unit_logger(logger: logging.Logger, origin: str) -> UnitLogAdapter:
    return UnitLogAdapter(logger, {"origin": origin})


def get_log_file_path() -> Path | None:
    return _log_file_path


def resolve_level(level: str | None = None, *, verbose: bool = False, quiet: bool = False) -> int:
    """Pick the console level: ``verbose`` wins over ``quiet``, both over ``level``.

    Quiet mode hides per-file diagnostics, which are logged as warnings.
    """
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    if level is None:
        return logging.INFO
    try:
        return _LEVEL_MAP[level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level {level!r}; expected one of {', '.join(_LEVEL_MAP)}") from None


def _create_handler(destination: str | Path) -> logging.Handler:
    """Create a handler for ``"stderr"``, ``"stdout"`` or a file path."""
    if destination == "stderr":
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        return handler
    if destination == "stdout":
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        return handler
    path = Path(destination)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    level: str | None = None,
    log_file: Path | None = None,
    console: str = "stderr",
) -> logging.Logger:
    """Install symdoc's console handler and an optional file sink.

    The file sink always records DEBUG so a quiet console run still leaves a
    full trace behind. Existing handlers are closed first; calling this again
    replaces the previous setup.
    """
    global _log_file_path

    console_level = resolve_level(level, verbose=verbose, quiet=quiet)
    logger = logging.getLogger(_ROOT)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream = _create_handler(console)
    stream.setLevel(console_level)
    logger.addHandler(stream)

    _log_file_path = None
    if log_file is not None:
        sink = _create_handler(log_file)
        sink.setLevel(logging.DEBUG)
        logger.addHandler(sink)
        _log_file_path = Path(log_file)

    logger.setLevel(logging.DEBUG if log_file is not None else console_level)
    return logger


__all__ = [
    "UnitLogAdapter",
    "configure_logging",
    "get_log_file_path",
    "get_logger",
    "resolve_level",
    "unit_logger",
]
