"""Append-only symbol storage for one source unit."""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from .errors import DuplicateSymbol
from .models import Symbol


class SymbolRegistry:
    """Symbols of one unit in declaration order, indexed by qualified name.

    Nesting is recorded by name only: a symbol's ``parent`` is looked up here
    rather than held as an object reference.
    """

    def __init__(self) -> None:
        self._symbols: List[Symbol] = []
        self._index: Dict[str, Symbol] = {}

    def register(self, symbol: Symbol) -> None:
        """Add ``symbol``; raise :class:`DuplicateSymbol` when its name is taken."""
        if symbol.qualified_name in self._index:
            raise DuplicateSymbol(
                symbol.qualified_name,
                origin=symbol.origin,
                offset=symbol.span.start,
                line=symbol.span.line,
            )
        self._symbols.append(symbol)
        self._index[symbol.qualified_name] = symbol

    def all_symbols(self) -> List[Symbol]:
        return list(self._symbols)

    def by_qualified_name(self, name: str) -> Optional[Symbol]:
        return self._index.get(name)

    def children(self, name: str) -> List[Symbol]:
        return [symbol for symbol in self._symbols if symbol.parent == name]

    def parent_of(self, symbol: Symbol) -> Optional[Symbol]:
        return self._index.get(symbol.parent) if symbol.parent is not None else None

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols)

    def __contains__(self, name: object) -> bool:
        return name in self._index


__all__ = ["SymbolRegistry"]
