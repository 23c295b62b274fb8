"""Core data models shared across symdoc components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


class Language(str, Enum):
    PHP = "php"
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"


class Modifier(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"
    STATIC = "static"
    FINAL = "final"
    EXPORTED = "exported"
    DEFAULT_EXPORT = "default-export"


VISIBILITY_MODIFIERS = frozenset({Modifier.PUBLIC, Modifier.PRIVATE, Modifier.PROTECTED})


class SymbolKind(str, Enum):
    FUNCTION = "function"
    METHOD = "method"
    CLASS = "class"
    COMPONENT = "component"


class RawKind(str, Enum):
    FUNCTION = "function"
    METHOD = "method"
    CLASS = "class"
    ARROW_BINDING = "arrow-binding"


_JSX_SUFFIXES = (".tsx", ".jsx")


@dataclass(frozen=True)
class SourceUnit:
    """One input file: language tag, raw text and where it came from."""

    language: Language
    text: str
    origin: str

    @property
    def jsx(self) -> bool:
        """Return True when JSX markup may appear in expression position."""
        if self.language is Language.JAVASCRIPT:
            return True
        return self.language is Language.TYPESCRIPT and self.origin.lower().endswith(_JSX_SUFFIXES)


@dataclass(frozen=True)
class Span:
    """Character offsets and 1-based lines of a declaration."""

    start: int
    end: int
    line: int
    end_line: int


@dataclass(frozen=True)
class RawParameter:
    name: str
    type_text: Optional[str] = None
    default: Optional[str] = None
    nullable: bool = False
    optional_marker: bool = False
    variadic: bool = False
    modifiers: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RawDeclaration:
    """Language-specific declaration record produced by a signature parser."""

    kind: RawKind
    name: str
    key: int
    span: Span
    anchor: int
    modifiers: Tuple[str, ...] = ()
    parameters: Tuple[RawParameter, ...] = ()
    return_type: Optional[str] = None
    exported: bool = False
    default_export: bool = False
    parent: Optional[int] = None
    namespace: str = ""
    callee: Optional[str] = None
    truncated: bool = False


@dataclass(frozen=True)
class ParameterDescriptor:
    name: str
    type_text: Optional[str] = None
    nullable: bool = False
    has_default: bool = False
    default: Optional[str] = None
    optional: bool = False
    variadic: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type_text,
            "nullable": self.nullable,
            "has_default": self.has_default,
            "default": self.default,
            "optional": self.optional,
            "variadic": self.variadic,
        }


_MODIFIER_ORDER = {modifier: index for index, modifier in enumerate(Modifier)}


@dataclass(frozen=True)
class Symbol:
    """Normalized, language-agnostic record of one declared entity."""

    qualified_name: str
    name: str
    kind: SymbolKind
    language: Language
    span: Span
    origin: str
    modifiers: FrozenSet[Modifier] = field(default_factory=frozenset)
    parameters: Tuple[ParameterDescriptor, ...] = ()
    return_type: Optional[str] = None
    documentation: str = ""
    parent: Optional[str] = None
    truncated: bool = False

    def sorted_modifiers(self) -> Tuple[Modifier, ...]:
        return tuple(sorted(self.modifiers, key=_MODIFIER_ORDER.__getitem__))

    def to_dict(self) -> Dict[str, Any]:
        """Return a mapping safe for JSON or YAML serialization."""
        return {
            "qualified_name": self.qualified_name,
            "name": self.name,
            "kind": self.kind.value,
            "language": self.language.value,
            "origin": self.origin,
            "modifiers": [modifier.value for modifier in self.sorted_modifiers()],
            "parameters": [parameter.to_dict() for parameter in self.parameters],
            "return_type": self.return_type,
            "documentation": self.documentation,
            "parent": self.parent,
            "span": {
                "start": self.span.start,
                "end": self.span.end,
                "line": self.span.line,
                "end_line": self.span.end_line,
            },
            "truncated": self.truncated,
        }
