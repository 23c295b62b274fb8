"""CLI entrypoints for symdoc commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .discovery import SourceDiscovery
from .dump import FORMATS, dump_results
from .extractor import Extractor
from .logging import configure_logging, get_log_file_path


def _add_logging_options(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Only log errors; per-file diagnostics are hidden.",
    )
    parser.add_argument(
        "--log-file",
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write a DEBUG-level log to this file.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="symdoc",
        description="Extract documented symbols from PHP, TypeScript and JavaScript sources.",
    )
    _add_logging_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract_parser = subparsers.add_parser(
        "extract",
        help="Extract symbols from files or directories and print them.",
    )
    _add_logging_options(extract_parser, suppress_default=True)
    extract_parser.add_argument(
        "paths",
        nargs="+",
        help="Source files or directories to scan.",
    )
    extract_parser.add_argument(
        "--format",
        choices=FORMATS,
        default=None,
        help="Output format (defaults to output.format from .symdoc.yml, else json).",
    )
    extract_parser.add_argument(
        "--config",
        default=None,
        help="Path to .symdoc.yml or the directory holding it (defaults to current directory).",
    )
    extract_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for batch extraction.",
    )
    extract_parser.add_argument(
        "--suppress-test-callbacks",
        action="store_true",
        help="Drop symbols for function literals passed to describe/it style calls.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP extraction service.",
    )
    _add_logging_options(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for symdoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = Path(args.log_file) if args.log_file else None
    configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=log_file)

    if args.command == "extract":
        _run_extract(parser, args)
    elif args.command == "serve":
        from .service.app import run_service

        try:
            run_service(host=args.host, port=args.port)
        except RuntimeError as exc:
            parser.exit(1, f"{exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_extract(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    config_path = Path(args.config) if args.config else Path.cwd()
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")
    if args.suppress_test_callbacks:
        config.extractor.test_callbacks = "suppress"
    if args.workers is not None and args.workers < 1:
        parser.exit(1, "--workers must be a positive integer\n")

    try:
        units = SourceDiscovery(config).load(args.paths)
    except FileNotFoundError as exc:
        parser.exit(1, f"{exc}\n")
    if not units:
        parser.exit(1, "No supported source files found.\n")

    results = Extractor(config.extractor).extract_many(units, max_workers=args.workers)
    print(dump_results(results, args.format or config.output.format, config.output.indent))

    failures = [result for result in results if result.failure is not None]
    if failures:
        log_file = get_log_file_path()
        hint = f"See {log_file} for details." if log_file else "Run with --verbose for more details."
        parser.exit(1, f"symdoc extract failed for {len(failures)} file(s). {hint}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
