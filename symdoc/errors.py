"""Exception hierarchy for symbol extraction."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional


class SymdocError(RuntimeError):
    """Base class for all symdoc errors."""


class UnsupportedLanguage(SymdocError, ValueError):
    """Raised when no front end is registered for a language tag."""


class ExtractionError(SymdocError):
    """A condition raised while extracting one source unit."""

    kind = "extraction-error"

    def __init__(
        self,
        message: str,
        *,
        origin: str = "",
        offset: Optional[int] = None,
        line: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.origin = origin
        self.offset = offset
        self.line = line

    def __str__(self) -> str:
        location = self.origin
        if self.line is not None:
            location = f"{location}:{self.line}" if location else f"line {self.line}"
        return f"{location}: {self.message}" if location else self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "origin": self.origin,
            "offset": self.offset,
            "line": self.line,
        }


class MalformedDeclaration(ExtractionError):
    """A declaration header was recognized but could not be parsed."""

    kind = "malformed-declaration"


class TruncatedInput(ExtractionError):
    """A string, comment or bracket was still open at end of input."""

    kind = "truncated-input"


class DuplicateSymbol(ExtractionError):
    """Two declarations produced the same qualified name within one unit."""

    kind = "duplicate-symbol"

    def __init__(self, qualified_name: str, **kwargs: Any) -> None:
        super().__init__(f"duplicate symbol '{qualified_name}'", **kwargs)
        self.qualified_name = qualified_name


class ConflictingModifiers(ExtractionError):
    """More than one visibility modifier reached normalization."""

    kind = "conflicting-modifiers"

    def __init__(self, name: str, modifiers: Iterable[str], **kwargs: Any) -> None:
        self.modifiers = tuple(sorted(modifiers))
        super().__init__(
            f"conflicting visibility modifiers on '{name}': {', '.join(self.modifiers)}",
            **kwargs,
        )
        self.name = name


__all__ = [
    "ConflictingModifiers",
    "DuplicateSymbol",
    "ExtractionError",
    "MalformedDeclaration",
    "SymdocError",
    "TruncatedInput",
    "UnsupportedLanguage",
]
