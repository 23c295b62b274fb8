"""TypeScript/TSX front end.

The tokenizer walks module-level statements of the syntax tree and the
members of class bodies. Function bodies are never entered, except that the
JavaScript subclass follows function literals passed to labelled calls.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple

from tree_sitter import Node

from ..models import Modifier, RawDeclaration, RawKind, RawParameter
from .base import Candidate, CandidateKind, DeclarationTokenizer, SignatureParser

_FUNCTION_LITERALS = frozenset({"arrow_function", "function_expression", "function", "generator_function"})
_FUNCTION_DECLARATIONS = frozenset({"function_declaration", "generator_function_declaration"})
_CLASS_DECLARATIONS = frozenset({"class_declaration", "abstract_class_declaration", "class"})
_BINDINGS = frozenset({"lexical_declaration", "variable_declaration"})
_METHODS = frozenset({"method_definition", "abstract_method_signature", "method_signature"})
_FIELDS = frozenset({"public_field_definition", "field_definition"})
# Call scanning never looks inside these.
_OPAQUE = _FUNCTION_LITERALS | _FUNCTION_DECLARATIONS | _CLASS_DECLARATIONS
_KEYWORDS = frozenset({"async", "static", "readonly", "abstract", "declare", "get", "set", "accessor"})
_PARAMETER_MODIFIERS = frozenset({"accessibility_modifier", "override_modifier", "readonly"})


class _CallContext(NamedTuple):
    callee: str
    label: str
    anchor: int


class TypeScriptTokenizer(DeclarationTokenizer):
    """Finds functions, classes, arrow bindings, class members and export clauses."""

    recovery_keywords = {"function": CandidateKind.FUNCTION, "class": CandidateKind.CLASS}
    name_types = frozenset({"identifier", "type_identifier"})
    prefix_words = frozenset({"export", "default", "declare", "async", "abstract"})
    follow_callbacks = False

    def candidates(self) -> Iterator[Candidate]:
        yield from self._scan(self.root.named_children, None)

    def _scan(
        self, nodes: Iterable[Node], parent: Optional[int], context: Optional[_CallContext] = None
    ) -> Iterator[Candidate]:
        for node in nodes:
            yield from self._statement(node, parent, context)

    def _statement(
        self,
        node: Node,
        parent: Optional[int],
        context: Optional[_CallContext],
        outer: Optional[Node] = None,
        prefix: Tuple[str, ...] = (),
    ) -> Iterator[Candidate]:
        kind = node.type
        if kind == "export_statement":
            yield from self._export(node, parent, context)
        elif kind == "ambient_declaration":
            for child in node.named_children:
                yield from self._statement(child, parent, context, outer or node, prefix + ("declare",))
        elif kind in _FUNCTION_DECLARATIONS:
            yield self.candidate(CandidateKind.FUNCTION, node, outer, parent=parent, prefix=prefix)
        elif kind == "function_signature":
            # Overload signatures give way to the implementation that follows.
            cut_off = self._cut_off(outer or node)
            if "declare" in prefix or cut_off:
                yield self.candidate(
                    CandidateKind.FUNCTION, node, outer, parent=parent, prefix=prefix, truncated=cut_off
                )
        elif kind in _CLASS_DECLARATIONS:
            yield from self._class(node, outer, parent, prefix)
        elif kind in _BINDINGS:
            yield from self._bindings(node, outer, parent, context, prefix)
        elif kind == "ERROR":
            yield from self._recover(node, parent, context)
        elif self.follow_callbacks:
            yield from self._calls(node, parent, context)

    def _export(self, node: Node, parent: Optional[int], context: Optional[_CallContext]) -> Iterator[Candidate]:
        words: Tuple[str, ...] = ("export",)
        if any(child.type == "default" for child in node.children):
            words += ("default",)
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            yield from self._statement(declaration, parent, context, node, words)
            return
        value = node.child_by_field_name("value")
        if value is not None and value.type in _FUNCTION_LITERALS:
            yield self.candidate(CandidateKind.FUNCTION, value, node, parent=parent, prefix=words)
        elif value is not None and value.type == "class":
            yield from self._class(value, node, parent, words)
        elif node.child_by_field_name("source") is None and (
            (value is not None and value.type == "identifier")
            or any(child.type == "export_clause" for child in node.children)
        ):
            yield self.candidate(CandidateKind.EXPORTS, node, parent=parent)

    def _class(
        self, node: Node, outer: Optional[Node], parent: Optional[int], prefix: Tuple[str, ...]
    ) -> Iterator[Candidate]:
        if node.type == "abstract_class_declaration":
            prefix += ("abstract",)
        candidate = self.candidate(CandidateKind.CLASS, node, outer, parent=parent, prefix=prefix)
        yield candidate
        body = node.child_by_field_name("body")
        if body is not None:
            yield from self._members(body.named_children, candidate.key)

    def _bindings(
        self,
        node: Node,
        outer: Optional[Node],
        parent: Optional[int],
        context: Optional[_CallContext],
        prefix: Tuple[str, ...],
    ) -> Iterator[Candidate]:
        declarators = [child for child in node.named_children if child.type == "variable_declarator"]
        for index, declarator in enumerate(declarators):
            name = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            literal = value is not None and value.type in _FUNCTION_LITERALS
            if literal and name is not None and name.type == "identifier":
                # Only the first declarator shares the statement's start and doc comment.
                statement = (outer or node) if index == 0 else None
                yield self.candidate(CandidateKind.BINDING, declarator, statement, parent=parent, prefix=prefix)
            elif value is not None and self.follow_callbacks:
                yield from self._calls(value, parent, context)

    def _members(self, nodes: Iterable[Node], parent: int) -> Iterator[Candidate]:
        decorators: List[Node] = []
        for child in nodes:
            if child.type == "comment":
                continue
            if child.type == "decorator":
                decorators.append(child)
                continue
            first = decorators[0] if decorators else None
            decorators = []
            if child.type in _METHODS:
                if child.type == "method_signature" and not self.is_truncated(child):
                    continue
                yield self.candidate(CandidateKind.METHOD, child, first=first, parent=parent)
            elif child.type in _FIELDS:
                value = child.child_by_field_name("value")
                if value is not None and value.type in _FUNCTION_LITERALS:
                    yield self.candidate(CandidateKind.PROPERTY, child, first=first, parent=parent)
            elif child.type == "ERROR":
                recovered = dict(self.recover(child, CandidateKind.METHOD, parent=parent))
                for index, part in enumerate(child.children):
                    if index in recovered:
                        yield recovered[index]
                    else:
                        yield from self._members([part], parent)

    def _recover(
        self, error: Node, parent: Optional[int], context: Optional[_CallContext]
    ) -> Iterator[Candidate]:
        recovered = dict(self.recover(error, parent=parent))
        for index, child in enumerate(error.children):
            if index in recovered:
                yield recovered[index]
            elif child.is_named:
                yield from self._statement(child, parent, context)

    def _cut_off(self, node: Node) -> bool:
        """Return True when ``node`` or the broken block right after it runs into the end of input."""
        if self.is_truncated(node):
            return True
        following = node.next_sibling
        return (
            following is not None
            and following.has_error
            and self.source.reaches_end(following)
            and self.source.data.startswith(b"{", following.start_byte)
        )

    # -- calls and function literals ----------------------------------------

    def _calls(self, node: Node, parent: Optional[int], context: Optional[_CallContext]) -> Iterator[Candidate]:
        if node.type == "call_expression":
            yield from self._call(node, parent, context)
        elif node.type not in _OPAQUE:
            for child in node.named_children:
                yield from self._calls(child, parent, context)

    def _call(self, call: Node, parent: Optional[int], context: Optional[_CallContext]) -> Iterator[Candidate]:
        function = call.child_by_field_name("function")
        if function is not None:
            yield from self._calls(function, parent, context)
        arguments = call.child_by_field_name("arguments")
        if arguments is None or arguments.type != "arguments":
            return
        values = [child for child in arguments.named_children if child.type != "comment"]
        callee = self._callee(function)
        label = self._label(values[0]) if values else None
        if callee is not None and label is not None:
            context = _CallContext(callee, label, self.source.offset(call.start_byte))
        for value in values:
            if value.type in _FUNCTION_LITERALS:
                yield from self._callback(value, parent, context)
            else:
                yield from self._calls(value, parent, context)

    def _callback(
        self, literal: Node, parent: Optional[int], context: Optional[_CallContext]
    ) -> Iterator[Candidate]:
        scope = parent
        if context is not None:
            candidate = self.candidate(
                CandidateKind.CALLBACK,
                literal,
                parent=parent,
                anchor=context.anchor,
                callee=context.callee,
                label=context.label,
            )
            yield candidate
            scope = candidate.key
        body = literal.child_by_field_name("body")
        if body is None:
            return
        if body.type == "statement_block":
            yield from self._scan(body.named_children, scope)
        else:
            yield from self._calls(body, scope, None)

    def _callee(self, node: Optional[Node]) -> Optional[str]:
        if node is None:
            return None
        if node.type in ("identifier", "this"):
            return self.source.of(node)
        if node.type != "member_expression":
            return None
        prop = node.child_by_field_name("property")
        if prop is None:
            return None
        base = self._callee(node.child_by_field_name("object"))
        return f"{base}.{self.source.of(prop)}" if base else self.source.of(prop)

    def _label(self, node: Node) -> Optional[str]:
        if node.type == "string":
            return self.source.of(node)[1:-1]
        if node.type == "template_string" and not any(
            child.type == "template_substitution" for child in node.named_children
        ):
            return self.source.of(node)[1:-1]
        return None


class TypeScriptParser(SignatureParser):
    """Parses declarations found by :class:`TypeScriptTokenizer`."""

    typed = True

    def parse(self, candidate: Candidate) -> Optional[RawDeclaration]:
        if candidate.name is not None:
            return self.partial(candidate)
        handlers = {
            CandidateKind.FUNCTION: self._parse_function,
            CandidateKind.CLASS: self._parse_class,
            CandidateKind.BINDING: self._parse_binding,
            CandidateKind.METHOD: self._parse_member,
            CandidateKind.PROPERTY: self._parse_member,
            CandidateKind.CALLBACK: self._parse_callback,
        }
        handler = handlers.get(candidate.kind)
        return handler(candidate) if handler is not None else None

    def parse_exports(self, candidate: Candidate) -> Dict[str, str]:
        node = candidate.node
        if node.child_by_field_name("source") is not None:
            return {}
        value = node.child_by_field_name("value")
        if value is not None:
            if value.type != "identifier":
                return {}
            return {self.source.of(value): Modifier.DEFAULT_EXPORT.value}
        exports: Dict[str, str] = {}
        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                name = specifier.child_by_field_name("name")
                if specifier.type != "export_specifier" or name is None:
                    continue
                alias = self.source.of(specifier.child_by_field_name("alias"))
                export = Modifier.DEFAULT_EXPORT if alias == "default" else Modifier.EXPORTED
                exports[self.source.of(name)] = export.value
        return exports

    # -- declarations --------------------------------------------------------

    def _parse_function(self, candidate: Candidate) -> RawDeclaration:
        node = candidate.node
        words = candidate.prefix + self._keywords(node)
        name = node.child_by_field_name("name")
        if name is None and "default" not in words:
            raise self.malformed(candidate, "function declaration without a name")
        parameters, return_type = self._signature(candidate, node)
        return self.declaration(
            candidate,
            RawKind.FUNCTION,
            self.source.of(name) if name is not None else "default",
            words,
            parameters,
            return_type,
        )

    def _parse_class(self, candidate: Candidate) -> RawDeclaration:
        name = candidate.node.child_by_field_name("name")
        if name is None and "default" not in candidate.prefix:
            raise self.malformed(candidate, "class declaration without a name")
        text = self.source.of(name) if name is not None else "default"
        return self.declaration(candidate, RawKind.CLASS, text, candidate.prefix)

    def _parse_binding(self, candidate: Candidate) -> RawDeclaration:
        declarator = candidate.node
        name = self.source.of(declarator.child_by_field_name("name"))
        parameters, return_type = self._signature(candidate, declarator.child_by_field_name("value"))
        return self.declaration(candidate, RawKind.ARROW_BINDING, name, candidate.prefix, parameters, return_type)

    def _parse_member(self, candidate: Candidate) -> RawDeclaration:
        node = candidate.node
        words = self._keywords(node)
        name = self._member_name(node)
        if name is None:
            raise self.malformed(candidate, "class member without a name")
        if "get" in words:
            name = f"get {name}"
        elif "set" in words:
            name = f"set {name}"
        literal = node if candidate.kind is CandidateKind.METHOD else node.child_by_field_name("value")
        parameters, return_type = self._signature(candidate, literal)
        return self.declaration(candidate, RawKind.METHOD, name, words, parameters, return_type)

    def _parse_callback(self, candidate: Candidate) -> RawDeclaration:
        parameters, return_type = self._signature(candidate, candidate.node)
        name = f"{candidate.callee}({candidate.label})"
        return self.declaration(candidate, RawKind.FUNCTION, name, (), parameters, return_type)

    # -- pieces ----------------------------------------------------------------

    def _keywords(self, node: Node) -> Tuple[str, ...]:
        name = node.child_by_field_name("name") or node.child_by_field_name("property")
        words: List[str] = []
        for child in node.children:
            if name is not None and child.start_byte >= name.start_byte:
                break
            if child.type in _KEYWORDS:
                words.append(child.type)
            elif child.type == "accessibility_modifier":
                words.append(self.source.flat(child))
            elif child.type == "override_modifier":
                words.append("override")
        return tuple(words)

    def _member_name(self, node: Node) -> Optional[str]:
        name = node.child_by_field_name("name") or node.child_by_field_name("property")
        if name is None:
            return None
        if name.type == "string":
            return self.source.of(name)[1:-1]
        return self.source.flat(name)

    def _signature(
        self, candidate: Candidate, node: Optional[Node]
    ) -> Tuple[Tuple[RawParameter, ...], Optional[str]]:
        if node is None:
            if candidate.truncated:
                return (), None
            raise self.malformed(candidate, "declaration without a function value")
        parameters = node.child_by_field_name("parameters")
        single = node.child_by_field_name("parameter")
        if parameters is not None:
            result = self._parameters(candidate, parameters)
        elif single is not None:
            result = (RawParameter(name=self.source.flat(single)),)
        elif candidate.truncated:
            result = ()
        else:
            raise self.malformed(candidate, "function without a parameter list")
        return result, self._type(node.child_by_field_name("return_type"))

    def _type(self, node: Optional[Node]) -> Optional[str]:
        if node is None or not self.typed:
            return None
        return self.source.flat(node).lstrip(":").strip() or None

    def _parameters(self, candidate: Candidate, node: Node) -> Tuple[RawParameter, ...]:
        parameters: List[RawParameter] = []
        for child in node.named_children:
            if child.type in ("comment", "decorator"):
                continue
            if child.is_error or child.is_missing:
                if candidate.truncated:
                    continue
                raise self.malformed(candidate, f"unparseable parameter {self.source.flat(child)!r}")
            parameters.append(self._parameter(child))
        return tuple(parameters)

    def _parameter(self, node: Node) -> RawParameter:
        pattern: Optional[Node] = node
        type_node: Optional[Node] = None
        default: Optional[Node] = None
        modifiers: List[str] = []
        if node.type in ("required_parameter", "optional_parameter"):
            pattern = node.child_by_field_name("pattern")
            type_node = node.child_by_field_name("type")
            default = node.child_by_field_name("value")
            modifiers = [self.source.flat(child) for child in node.children if child.type in _PARAMETER_MODIFIERS]
        elif node.type == "assignment_pattern":
            pattern = node.child_by_field_name("left")
            default = node.child_by_field_name("right")

        variadic = pattern is not None and pattern.type == "rest_pattern"
        name = self.source.flat(pattern or node)
        if variadic:
            name = name[3:].strip()
        return RawParameter(
            name=name,
            type_text=self._type(type_node),
            default=self.source.of(default).strip() or None,
            optional_marker=node.type == "optional_parameter",
            variadic=variadic,
            modifiers=tuple(modifiers),
        )


__all__ = ["TypeScriptParser", "TypeScriptTokenizer"]
