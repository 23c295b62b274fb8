"""Base classes for language front ends built on tree-sitter grammars."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Type

import tree_sitter_javascript
import tree_sitter_php
import tree_sitter_typescript
from tree_sitter import Language as Grammar
from tree_sitter import Node, Parser

from ..errors import MalformedDeclaration
from ..models import Language, RawDeclaration, RawKind, SourceUnit, Span

_GRAMMARS = {
    "php": tree_sitter_php.language_php,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
    "javascript": tree_sitter_javascript.language,
}

_VISIBILITY = frozenset({"public", "private", "protected"})

# Leaf types whose text may legitimately start with "/*" without closing it.
_TEXT_NODES = frozenset(
    {"comment", "text", "jsx_text", "string_content", "string_fragment", "heredoc_body", "nowdoc_body"}
)


@lru_cache(maxsize=None)
def get_language(name: str) -> Grammar:
    """Return the tree-sitter grammar registered under ``name``."""
    try:
        loader = _GRAMMARS[name]
    except KeyError:
        raise ValueError(f"No tree-sitter grammar named {name!r}") from None
    return Grammar(loader())


def grammar_name(unit: SourceUnit) -> str:
    if unit.language is Language.PHP:
        return "php"
    if unit.language is Language.JAVASCRIPT:
        return "javascript"
    return "tsx" if unit.jsx else "typescript"


def parse_unit(unit: SourceUnit) -> Node:
    parser = Parser(get_language(grammar_name(unit)))
    return parser.parse(unit.text.encode("utf-8")).root_node


def comment_spans(root: Node, source: SourceText) -> List[Tuple[int, int]]:
    """Return the character spans of every comment node under ``root``, in source order."""
    spans: List[Tuple[int, int]] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "comment":
            spans.append((source.offset(node.start_byte), source.offset(node.end_byte)))
            continue
        stack.extend(node.children)
    spans.sort()
    return spans


class SourceText:
    """UTF-8 view of a unit's text mapping tree-sitter byte offsets to characters."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.data = text.encode("utf-8")
        self.content_end = len(self.data.rstrip())
        self._ascii = len(self.data) == len(text)

    def offset(self, byte: int) -> int:
        if self._ascii:
            return byte
        return len(self.data[:byte].decode("utf-8", errors="ignore"))

    def of(self, node: Optional[Node]) -> str:
        if node is None:
            return ""
        return self.data[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def flat(self, node: Optional[Node]) -> str:
        return " ".join(self.of(node).split())

    def reaches_end(self, node: Node) -> bool:
        return node.end_byte >= self.content_end

    def span(self, first: Node, last: Node) -> Span:
        return Span(
            start=self.offset(first.start_byte),
            end=self.offset(last.end_byte),
            line=first.start_point[0] + 1,
            end_line=last.end_point[0] + 1,
        )


class CandidateKind(str, Enum):
    FUNCTION = "function"
    CLASS = "class"
    METHOD = "method"
    BINDING = "binding"
    PROPERTY = "property"
    CALLBACK = "callback"
    EXPORTS = "exports"


@dataclass(frozen=True)
class Candidate:
    """One syntax node plausibly holding a declaration.

    ``key`` is the character offset where the declaration starts, including
    any ``export`` or decorator prefix, and doubles as its identity within the
    unit. ``parent`` is the key of the enclosing candidate. ``name`` is only
    set for declarations recovered from an ``ERROR`` node.
    """

    kind: CandidateKind
    node: Node = field(compare=False, repr=False)
    key: int
    span: Span
    anchor: int
    parent: Optional[int] = None
    namespace: str = ""
    prefix: Tuple[str, ...] = ()
    callee: Optional[str] = None
    label: Optional[str] = None
    name: Optional[str] = None
    truncated: bool = False


class DeclarationTokenizer(ABC):
    """Walks a unit's syntax tree and yields declaration candidates."""

    # Keywords that open a declaration when found loose inside an ERROR node.
    recovery_keywords: Dict[str, CandidateKind] = {}
    # Node types that can carry a recovered declaration's name.
    name_types: frozenset = frozenset()
    prefix_words: frozenset = frozenset()

    def __init__(self, unit: SourceUnit) -> None:
        self.unit = unit
        self.source = SourceText(unit.text)
        self.root = parse_unit(unit)
        self.comments: List[Tuple[int, int]] = []
        self.truncations: List[Tuple[int, int]] = []
        self._cutoff: Optional[int] = None
        self._inspect()

    def __iter__(self) -> Iterator[Candidate]:
        for candidate in self.candidates():
            if self._cutoff is not None and candidate.key >= self.source.offset(self._cutoff):
                continue
            yield candidate

    @abstractmethod
    def candidates(self) -> Iterator[Candidate]:
        """Yield candidates in source order, enclosing declarations before members."""

    def candidate(
        self,
        kind: CandidateKind,
        node: Node,
        outer: Optional[Node] = None,
        first: Optional[Node] = None,
        **fields,
    ) -> Candidate:
        outer = outer or node
        first = first or outer
        key = self.source.offset(first.start_byte)
        fields.setdefault("anchor", key)
        fields["truncated"] = fields.get("truncated", False) or self.is_truncated(outer)
        return Candidate(kind=kind, node=node, key=key, span=self.source.span(first, outer), **fields)

    def is_truncated(self, node: Node) -> bool:
        if node.has_error and self.source.reaches_end(node):
            return True
        return self._cutoff is not None and node.start_byte < self._cutoff < node.end_byte

    def recover(
        self, error: Node, function_kind: Optional[CandidateKind] = None, **fields
    ) -> Iterator[Tuple[int, Candidate]]:
        """Yield ``(index, candidate)`` for declaration keywords loose in ``error``.

        ``function_kind`` replaces the kind of recovered functions, so those
        inside a class body become methods.
        """
        children = error.children
        for index, child in enumerate(children):
            found = self.recovery_keywords.get(child.type)
            if found is None:
                continue
            name = self._recovered_name(children[index + 1 :])
            if name is None:
                continue
            start = index
            while start > 0 and self._prefix_word(children[start - 1]) is not None:
                start -= 1
            prefix = tuple(self._prefix_word(node) for node in children[start:index])
            if function_kind is not None and found is CandidateKind.FUNCTION:
                found = function_kind
            yield index, self.candidate(
                found,
                error,
                first=children[start],
                name=name,
                prefix=prefix,
                **fields,
            )

    def _recovered_name(self, following: Sequence[Node]) -> Optional[str]:
        for node in following:
            if not node.is_named or node.type in ("ERROR", "reference_modifier"):
                continue
            while node.type not in self.name_types and node.child_count:
                node = node.children[0]
            return self.source.of(node) if node.type in self.name_types else None
        return None

    def _prefix_word(self, node: Node) -> Optional[str]:
        if node.type in self.prefix_words:
            return node.type
        if node.type.endswith("_modifier") and node.type != "reference_modifier":
            return self.source.flat(node).lower()
        return None

    def _inspect(self) -> None:
        self.comments = comment_spans(self.root, self.source)
        stack: List[Node] = [self.root]
        errors: List[Node] = []
        data = self.source.data
        while stack:
            node = stack.pop()
            if node.type == "comment":
                continue
            if node.is_error or node.is_missing:
                errors.append(node)
            if (
                self.root.has_error
                and node.type not in _TEXT_NODES
                and data.startswith(b"/*", node.start_byte)
                and data.find(b"*/", node.start_byte + 2) == -1
                and (self._cutoff is None or node.start_byte < self._cutoff)
            ):
                self._cutoff = node.start_byte
            stack.extend(node.children)

        if self._cutoff is not None:
            self.source.content_end = min(self.source.content_end, self._cutoff)
            line = data.count(b"\n", 0, self._cutoff) + 1
            self.truncations.append((self.source.offset(self._cutoff), line))
            return
        open_at: Optional[Node] = None
        for node in errors:
            if node.is_missing:
                if node.start_byte < self.source.content_end:
                    continue
                node = node.parent or node
            elif not self.source.reaches_end(node):
                continue
            if open_at is None or node.start_byte < open_at.start_byte:
                open_at = node
        if open_at is not None:
            self.truncations.append((self.source.offset(open_at.start_byte), open_at.start_point[0] + 1))


class SignatureParser(ABC):
    """Turns one candidate into a language-specific raw declaration."""

    def __init__(self, unit: SourceUnit) -> None:
        self.unit = unit
        self.source = SourceText(unit.text)

    @abstractmethod
    def parse(self, candidate: Candidate) -> Optional[RawDeclaration]:
        """Return the raw declaration, or None when the node matches no known shape."""

    def parse_exports(self, candidate: Candidate) -> Dict[str, str]:
        """Return ``name -> "exported" | "default-export"`` for an export clause."""
        return {}

    def declaration(
        self,
        candidate: Candidate,
        kind: RawKind,
        name: str,
        words: Iterable[str],
        parameters=(),
        return_type: Optional[str] = None,
    ) -> RawDeclaration:
        modifiers: List[str] = []
        for word in words:
            if word not in modifiers:
                modifiers.append(word)
        visibility = [word for word in modifiers if word in _VISIBILITY]
        if len(visibility) > 1:
            raise self.malformed(candidate, f"multiple visibility keywords: {' '.join(visibility)}")
        return RawDeclaration(
            kind=kind,
            name=name,
            key=candidate.key,
            span=candidate.span,
            anchor=candidate.anchor,
            modifiers=tuple(modifiers),
            parameters=tuple(parameters),
            return_type=return_type or None,
            exported="export" in modifiers,
            default_export="default" in modifiers,
            parent=candidate.parent,
            namespace=candidate.namespace,
            callee=candidate.callee,
            truncated=candidate.truncated,
        )

    def partial(self, candidate: Candidate) -> RawDeclaration:
        """Build a name-only declaration for a header cut off by the end of input."""
        if not candidate.truncated:
            raise self.malformed(candidate, f"unparseable declaration of '{candidate.name}'")
        kinds = {
            CandidateKind.CLASS: RawKind.CLASS,
            CandidateKind.METHOD: RawKind.METHOD,
            CandidateKind.PROPERTY: RawKind.METHOD,
        }
        return self.declaration(candidate, kinds.get(candidate.kind, RawKind.FUNCTION), candidate.name, candidate.prefix)

    def malformed(self, candidate: Candidate, message: str) -> MalformedDeclaration:
        return MalformedDeclaration(
            message,
            origin=self.unit.origin,
            offset=candidate.key,
            line=candidate.span.line,
        )


@dataclass(frozen=True)
class LanguageFrontend:
    """Tokenizer and parser pair registered for one language."""

    language: Language
    tokenizer: Type[DeclarationTokenizer]
    parser: Type[SignatureParser]
