"""Tests for symdoc.registry."""

from __future__ import annotations

from typing import Optional

import pytest

from symdoc.errors import DuplicateSymbol
from symdoc.models import Language, Span, Symbol, SymbolKind
from symdoc.registry import SymbolRegistry


def _symbol(qualified_name: str, parent: Optional[str] = None, line: int = 1) -> Symbol:
    return Symbol(
        qualified_name=qualified_name,
        name=qualified_name.rsplit(".", 1)[-1],
        kind=SymbolKind.METHOD if parent else SymbolKind.CLASS,
        language=Language.PHP,
        span=Span(start=line * 10, end=line * 10 + 5, line=line, end_line=line),
        origin="registry.php",
        parent=parent,
    )


def test_register_keeps_declaration_order() -> None:
    registry = SymbolRegistry()
    for symbol in (_symbol("B"), _symbol("A"), _symbol("B.run", parent="B")):
        registry.register(symbol)

    assert [symbol.qualified_name for symbol in registry] == ["B", "A", "B.run"]
    assert len(registry) == 3
    assert "B.run" in registry
    assert "C" not in registry


def test_duplicate_registration_raises_and_keeps_first() -> None:
    registry = SymbolRegistry()
    first = _symbol("A.f", parent="A", line=2)
    registry.register(first)

    with pytest.raises(DuplicateSymbol) as excinfo:
        registry.register(_symbol("A.f", parent="A", line=5))

    assert excinfo.value.qualified_name == "A.f"
    assert excinfo.value.line == 5
    assert excinfo.value.origin == "registry.php"
    assert registry.all_symbols() == [first]


def test_nesting_is_resolved_by_name() -> None:
    registry = SymbolRegistry()
    parent = _symbol("A")
    child = _symbol("A.f", parent="A")
    registry.register(parent)
    registry.register(child)
    registry.register(_symbol("B"))

    assert registry.children("A") == [child]
    assert registry.parent_of(child) == parent
    assert registry.parent_of(parent) is None
    assert registry.by_qualified_name("missing") is None


def test_all_symbols_returns_a_copy() -> None:
    registry = SymbolRegistry()
    registry.register(_symbol("A"))

    registry.all_symbols().clear()

    assert len(registry) == 1
