"""PHP front end: declaration tokenizer and signature parser."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Tuple

from tree_sitter import Node

from ..models import RawDeclaration, RawKind, RawParameter
from .base import Candidate, CandidateKind, DeclarationTokenizer, SignatureParser

_CLASS_TYPES = frozenset({"class_declaration", "interface_declaration", "trait_declaration", "enum_declaration"})
_PARAMETER_TYPES = frozenset({"simple_parameter", "variadic_parameter", "property_promotion_parameter"})
# Statements whose blocks may hold conditional declarations such as
# `if (!function_exists('f')) { function f() {} }`.
_BLOCK_TYPES = frozenset(
    {
        "compound_statement",
        "colon_block",
        "if_statement",
        "else_clause",
        "else_if_clause",
        "while_statement",
        "for_statement",
        "foreach_statement",
        "do_statement",
        "try_statement",
        "catch_clause",
        "finally_clause",
        "switch_statement",
        "switch_block",
        "case_statement",
        "default_statement",
        "declare_statement",
    }
)


class PhpTokenizer(DeclarationTokenizer):
    """Finds functions, classes and methods; function bodies are never entered."""

    recovery_keywords = {
        "function": CandidateKind.FUNCTION,
        "class": CandidateKind.CLASS,
        "interface": CandidateKind.CLASS,
        "trait": CandidateKind.CLASS,
        "enum": CandidateKind.CLASS,
    }
    name_types = frozenset({"name"})

    def candidates(self) -> Iterator[Candidate]:
        yield from self._scan_statements(self.root.named_children, "")

    def _scan_statements(self, nodes: Iterable[Node], namespace: str) -> Iterator[Candidate]:
        for child in nodes:
            if child.type == "namespace_definition":
                name = self.source.flat(child.child_by_field_name("name")).lstrip("\\")
                body = child.child_by_field_name("body")
                if body is None:
                    namespace = name
                else:
                    yield from self._scan_statements(body.named_children, name)
            elif child.type == "function_definition":
                yield self.candidate(CandidateKind.FUNCTION, child, namespace=namespace)
            elif child.type in _CLASS_TYPES:
                candidate = self.candidate(CandidateKind.CLASS, child, namespace=namespace)
                yield candidate
                body = child.child_by_field_name("body")
                if body is not None:
                    yield from self._scan_members(body.named_children, candidate.key, namespace)
            elif child.type == "ERROR":
                yield from self._recover(child, namespace, parent=None)
            elif child.type in _BLOCK_TYPES:
                yield from self._scan_statements(child.named_children, namespace)

    def _scan_members(self, nodes: Iterable[Node], parent: int, namespace: str) -> Iterator[Candidate]:
        for child in nodes:
            if child.type == "method_declaration":
                yield self.candidate(CandidateKind.METHOD, child, parent=parent, namespace=namespace)
            elif child.type == "ERROR":
                yield from self._recover(child, namespace, parent=parent)

    def _recover(self, error: Node, namespace: str, parent: Optional[int]) -> Iterator[Candidate]:
        kind = CandidateKind.METHOD if parent is not None else None
        recovered = dict(self.recover(error, kind, parent=parent, namespace=namespace))
        for index, child in enumerate(error.children):
            if index in recovered:
                yield recovered[index]
            elif parent is None:
                yield from self._scan_statements([child], namespace)
            else:
                yield from self._scan_members([child], parent, namespace)


class PhpParser(SignatureParser):
    """Parses PHP function, method and class declarations."""

    def parse(self, candidate: Candidate) -> Optional[RawDeclaration]:
        if candidate.name is not None:
            return self.partial(candidate)
        node = candidate.node
        name = node.child_by_field_name("name")
        if name is None:
            raise self.malformed(candidate, f"{node.type.split('_')[0]} declaration without a name")
        words = self._modifiers(node)
        if candidate.kind is CandidateKind.CLASS:
            return self.declaration(candidate, RawKind.CLASS, self.source.of(name), words)

        kind = RawKind.METHOD if candidate.kind is CandidateKind.METHOD else RawKind.FUNCTION
        return self.declaration(
            candidate,
            kind,
            self.source.of(name),
            words,
            self._parameters(candidate, node.child_by_field_name("parameters")),
            self.source.flat(node.child_by_field_name("return_type")).lstrip(":").strip(),
        )

    def _modifiers(self, node: Node) -> List[str]:
        return [
            self.source.flat(child).lower()
            for child in node.children
            if child.type.endswith("_modifier") and child.type != "reference_modifier"
        ]

    def _parameters(self, candidate: Candidate, node: Optional[Node]) -> Tuple[RawParameter, ...]:
        if node is None:
            if candidate.truncated:
                return ()
            raise self.malformed(candidate, "function without a parameter list")
        parameters: List[RawParameter] = []
        for child in node.named_children:
            if child.type in _PARAMETER_TYPES:
                parameters.append(self._parameter(candidate, child))
            elif (child.is_error or child.is_missing) and not candidate.truncated:
                raise self.malformed(candidate, f"unparseable parameter {self.source.flat(child)!r}")
        return tuple(parameters)

    def _parameter(self, candidate: Candidate, node: Node) -> RawParameter:
        name = node.child_by_field_name("name")
        if name is None:
            raise self.malformed(candidate, f"parameter without a variable name: {self.source.flat(node)!r}")

        type_text = self.source.flat(node.child_by_field_name("type"))
        nullable = False
        if type_text.startswith("?"):
            nullable = True
            type_text = type_text[1:].strip()
        elif "null" in (part.strip().lower() for part in type_text.split("|")):
            nullable = True

        default = node.child_by_field_name("default_value")
        modifiers = [
            self.source.flat(child).lower()
            for child in node.children
            if child.type in ("visibility_modifier", "readonly_modifier")
        ]
        return RawParameter(
            name=self.source.flat(name).lstrip("&$ "),
            type_text=type_text or None,
            default=self.source.of(default).strip() or None,
            nullable=nullable,
            variadic=node.type == "variadic_parameter",
            modifiers=tuple(modifiers),
        )


__all__ = ["PhpParser", "PhpTokenizer"]
