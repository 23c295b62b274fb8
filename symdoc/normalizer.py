"""Reconcile language-specific raw declarations into the shared symbol model."""

from __future__ import annotations

from typing import FrozenSet, Optional, Set

from .config import ExtractorConfig
from .errors import ConflictingModifiers
from .models import (
    Language,
    Modifier,
    ParameterDescriptor,
    RawDeclaration,
    RawKind,
    RawParameter,
    SourceUnit,
    Symbol,
    SymbolKind,
)

_VISIBILITY_WORDS = frozenset({"public", "private", "protected"})


class Normalizer:
    """Builds :class:`Symbol` records from raw declarations.

    PHP visibility defaults to ``public``; TypeScript and JavaScript never carry
    visibility and report ``exported``/``default-export`` instead. Keywords
    outside the modifier vocabulary (``abstract``, ``readonly``, ``async``...)
    are dropped here.
    """

    def __init__(self, config: Optional[ExtractorConfig] = None) -> None:
        self.config = config or ExtractorConfig()

    def suppresses(self, raw: RawDeclaration) -> bool:
        """Return True when the test-callback policy drops this declaration."""
        return (
            self.config.suppress_test_callbacks
            and raw.callee is not None
            and self.config.is_test_callee(raw.callee)
        )

    def normalize(
        self,
        raw: RawDeclaration,
        unit: SourceUnit,
        documentation: Optional[str] = None,
        enclosing: Optional[str] = None,
    ) -> Symbol:
        return Symbol(
            qualified_name=self.qualified_name(raw, enclosing),
            name=raw.name,
            kind=self.kind(raw, unit),
            language=unit.language,
            span=raw.span,
            origin=unit.origin,
            modifiers=self.modifiers(raw, unit),
            parameters=tuple(self.parameter(parameter) for parameter in raw.parameters),
            return_type=raw.return_type,
            documentation=documentation or "",
            parent=enclosing,
            truncated=raw.truncated,
        )

    @staticmethod
    def qualified_name(raw: RawDeclaration, enclosing: Optional[str]) -> str:
        if enclosing:
            return f"{enclosing}.{raw.name}"
        if raw.namespace:
            return f"{raw.namespace}\\{raw.name}"
        return raw.name

    @staticmethod
    def kind(raw: RawDeclaration, unit: SourceUnit) -> SymbolKind:
        if raw.kind is RawKind.ARROW_BINDING:
            if unit.jsx and raw.name[:1].isupper():
                return SymbolKind.COMPONENT
            return SymbolKind.FUNCTION
        return SymbolKind(raw.kind.value)

    def modifiers(self, raw: RawDeclaration, unit: SourceUnit) -> FrozenSet[Modifier]:
        words = {word.lower() for word in raw.modifiers}
        visibility = words & _VISIBILITY_WORDS
        if len(visibility) > 1:
            raise ConflictingModifiers(
                raw.name,
                visibility,
                origin=unit.origin,
                offset=raw.key,
                line=raw.span.line,
            )

        result: Set[Modifier] = set()
        if "static" in words:
            result.add(Modifier.STATIC)
        if unit.language is Language.PHP:
            result.add(Modifier(visibility.pop()) if visibility else Modifier.PUBLIC)
            if "final" in words:
                result.add(Modifier.FINAL)
        elif raw.default_export:
            result.add(Modifier.DEFAULT_EXPORT)
        elif raw.exported:
            result.add(Modifier.EXPORTED)
        return frozenset(result)

    @staticmethod
    def parameter(raw: RawParameter) -> ParameterDescriptor:
        has_default = raw.default is not None
        return ParameterDescriptor(
            name=raw.name,
            type_text=raw.type_text,
            nullable=raw.nullable,
            has_default=has_default,
            default=raw.default,
            optional=has_default or raw.optional_marker or raw.variadic,
            variadic=raw.variadic,
        )


__all__ = ["Normalizer"]
