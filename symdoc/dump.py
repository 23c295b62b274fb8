"""Serialize extraction results to JSON or YAML."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List

import yaml

from .extractor import ExtractionResult

FORMATS = ("json", "yaml")


def result_to_payload(result: ExtractionResult) -> Dict[str, Any]:
    """Return a plain mapping describing one unit's extraction."""
    failure = None
    if result.failure is not None:
        failure = {"kind": type(result.failure).__name__, "message": str(result.failure)}
    return {
        "origin": result.unit.origin,
        "language": result.unit.language.value,
        "truncated": result.truncated,
        "cancelled": result.cancelled,
        "symbols": [symbol.to_dict() for symbol in result.symbols],
        "diagnostics": [diagnostic.to_dict() for diagnostic in result.diagnostics],
        "failure": failure,
    }


def results_to_payload(results: Iterable[ExtractionResult]) -> List[Dict[str, Any]]:
    return [result_to_payload(result) for result in results]


def dump_results(results: Iterable[ExtractionResult], fmt: str = "json", indent: int = 2) -> str:
    """Serialize ``results`` as ``json`` or ``yaml``."""
    payload = results_to_payload(results)
    fmt = fmt.lower()
    if fmt == "json":
        return json.dumps(payload, indent=indent, ensure_ascii=False)
    if fmt == "yaml":
        return yaml.safe_dump(payload, indent=indent, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unsupported output format: {fmt!r} (expected one of {', '.join(FORMATS)})")


__all__ = ["FORMATS", "dump_results", "result_to_payload", "results_to_payload"]
