"""Language detection from file suffixes."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Union

from .models import Language

_LANGUAGE_BY_SUFFIX = {
    ".php": Language.PHP,
    ".phtml": Language.PHP,
    ".inc": Language.PHP,
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TYPESCRIPT,
    ".mts": Language.TYPESCRIPT,
    ".cts": Language.TYPESCRIPT,
    ".js": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".mjs": Language.JAVASCRIPT,
    ".cjs": Language.JAVASCRIPT,
}


def detect_language(
    path: Union[str, Path], overrides: Optional[Mapping[str, Language]] = None
) -> Optional[Language]:
    """Return the language for ``path``, consulting ``overrides`` first."""
    suffix = Path(path).suffix.lower()
    if overrides and suffix in overrides:
        return overrides[suffix]
    return _LANGUAGE_BY_SUFFIX.get(suffix)


def supported_suffixes(overrides: Optional[Mapping[str, Language]] = None) -> frozenset[str]:
    suffixes = set(_LANGUAGE_BY_SUFFIX)
    if overrides:
        suffixes.update(overrides)
    return frozenset(suffixes)


__all__ = ["detect_language", "supported_suffixes"]
