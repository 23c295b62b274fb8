"""Language front ends and their registry."""

from __future__ import annotations

from importlib import metadata
from typing import Dict, Iterable, Union

from ..errors import UnsupportedLanguage
from ..models import Language
from .base import Candidate, CandidateKind, DeclarationTokenizer, LanguageFrontend, SignatureParser, get_language
from .comments import DocCommentScanner, scan_doc_comment
from .javascript import JavaScriptParser, JavaScriptTokenizer
from .php import PhpParser, PhpTokenizer
from .typescript import TypeScriptParser, TypeScriptTokenizer

_ENTRY_POINT_GROUP = "symdoc.frontends"

_BUILTIN_FRONTENDS: Dict[Language, LanguageFrontend] = {
    Language.PHP: LanguageFrontend(Language.PHP, PhpTokenizer, PhpParser),
    Language.TYPESCRIPT: LanguageFrontend(Language.TYPESCRIPT, TypeScriptTokenizer, TypeScriptParser),
    Language.JAVASCRIPT: LanguageFrontend(Language.JAVASCRIPT, JavaScriptTokenizer, JavaScriptParser),
}


def discover_frontends() -> Dict[Language, LanguageFrontend]:
    """Return built-in front ends, overridden by any registered entry points."""

    frontends = dict(_BUILTIN_FRONTENDS)
    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - broken third-party plugin
            raise RuntimeError(f"Failed to load front end entry point '{entry.name}': {exc}") from exc
        frontend = loaded() if callable(loaded) and not isinstance(loaded, LanguageFrontend) else loaded
        if not isinstance(frontend, LanguageFrontend):
            raise TypeError(f"Front end entry point '{entry.name}' did not provide a LanguageFrontend")
        frontends[frontend.language] = frontend
    return frontends


def frontend_for(
    language: Union[Language, str],
    frontends: Dict[Language, LanguageFrontend] | None = None,
) -> LanguageFrontend:
    """Return the front end registered for ``language``."""

    registry = _BUILTIN_FRONTENDS if frontends is None else frontends
    try:
        tag = Language(language)
    except ValueError:
        raise UnsupportedLanguage(f"Unsupported language: {language!r}") from None
    try:
        return registry[tag]
    except KeyError:
        raise UnsupportedLanguage(f"No front end registered for {tag.value}") from None


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    try:
        entry_points = metadata.entry_points()
    except Exception:  # pragma: no cover - unreadable distribution metadata
        return []
    return entry_points.select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Candidate",
    "CandidateKind",
    "DeclarationTokenizer",
    "DocCommentScanner",
    "LanguageFrontend",
    "SignatureParser",
    "discover_frontends",
    "frontend_for",
    "get_language",
    "scan_doc_comment",
]
