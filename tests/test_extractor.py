"""Tests for symdoc.extractor."""

from __future__ import annotations

import logging
import threading
from dataclasses import replace

import pytest

from symdoc.errors import ConflictingModifiers, DuplicateSymbol, TruncatedInput, UnsupportedLanguage
from symdoc.extraction import Candidate, LanguageFrontend, frontend_for
from symdoc.extraction.php import PhpParser, PhpTokenizer
from symdoc.extractor import Extractor, extract
from symdoc.models import Language, Modifier, RawDeclaration, SourceUnit


def _unit(language: Language, text: str, origin: str = "sample") -> SourceUnit:
    return SourceUnit(language=language, text=text, origin=origin)


def test_duplicate_method_is_reported_and_not_registered(extract_text) -> None:
    result = extract_text(
        Language.PHP,
        """
        <?php
        class A {
            function f() {}
            function f() {}
        }
        """,
    )

    assert [symbol.qualified_name for symbol in result.symbols] == ["A", "A.f"]
    assert result.registry.by_qualified_name("A.f").modifiers == {Modifier.PUBLIC}
    (diagnostic,) = result.diagnostics
    assert isinstance(diagnostic, DuplicateSymbol)
    assert diagnostic.qualified_name == "A.f"
    assert diagnostic.line == 4
    assert result.ok


def test_unterminated_comment_yields_partial_result(extract_text) -> None:
    result = extract_text(
        Language.TYPESCRIPT,
        """
        export function kept() {}
        /* this comment never ends
        function lost() {}
        """,
    )

    assert [symbol.name for symbol in result.symbols] == ["kept"]
    assert result.truncated
    (diagnostic,) = result.diagnostics
    assert isinstance(diagnostic, TruncatedInput)
    assert diagnostic.line == 2


def test_truncation_is_logged_as_warning(extract_text, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="symdoc"):
        extract_text(Language.PHP, "<?php\nfunction f() { $s = 'open;\n")

    assert any("unterminated" in record.getMessage() for record in caplog.records)


def test_cancelled_before_start_yields_nothing(sample_unit) -> None:
    cancel = threading.Event()
    cancel.set()

    result = Extractor().extract(sample_unit("all.php"), cancel=cancel)

    assert result.cancelled
    assert result.symbols == []


def test_unsupported_language_raises() -> None:
    with pytest.raises(UnsupportedLanguage):
        frontend_for("cobol")


def test_extract_many_isolates_failures(sample_unit) -> None:
    php_only = {Language.PHP: frontend_for(Language.PHP)}
    extractor = Extractor(frontends=php_only)

    results = extractor.extract_many([sample_unit("finalClass.php"), sample_unit("App.tsx"), sample_unit("class.php")])

    assert [result.unit.origin for result in results] == ["finalClass.php", "App.tsx", "class.php"]
    assert [result.ok for result in results] == [True, False, True]
    assert isinstance(results[1].failure, UnsupportedLanguage)
    assert results[1].symbols == []
    assert len(results[0].symbols) == 2
    assert len(results[2].symbols) == 3


class _ConflictingParser(PhpParser):
    """Parser that lets a conflicting visibility pair through to normalization."""

    def parse(self, candidate: Candidate) -> RawDeclaration | None:
        raw = super().parse(candidate)
        if raw is None:
            return None
        return replace(raw, modifiers=("public", "private"))


def test_conflicting_modifiers_propagate_from_extract() -> None:
    frontends = {
        Language.PHP: LanguageFrontend(Language.PHP, PhpTokenizer, _ConflictingParser),
    }
    extractor = Extractor(frontends=frontends)

    with pytest.raises(ConflictingModifiers):
        extractor.extract(_unit(Language.PHP, "<?php\nfunction f() {}\n"))


def test_conflicting_modifiers_become_unit_failure_in_batch(caplog) -> None:
    frontends = {
        Language.PHP: LanguageFrontend(Language.PHP, PhpTokenizer, _ConflictingParser),
        Language.TYPESCRIPT: frontend_for(Language.TYPESCRIPT),
    }
    extractor = Extractor(frontends=frontends)

    with caplog.at_level(logging.ERROR, logger="symdoc"):
        results = extractor.extract_many(
            [_unit(Language.PHP, "<?php\nfunction f() {}\n"), _unit(Language.TYPESCRIPT, "function g() {}\n")],
            max_workers=2,
        )

    assert isinstance(results[0].failure, ConflictingModifiers)
    assert [symbol.name for symbol in results[1].symbols] == ["g"]
    assert any("invariant" in record.getMessage() for record in caplog.records)


def test_module_level_extract_uses_defaults(sample_unit) -> None:
    result = extract(sample_unit("App.tsx"))

    assert [symbol.name for symbol in result.symbols] == ["App"]


def test_extract_many_of_nothing_is_empty() -> None:
    assert Extractor().extract_many([]) == []


def test_symbol_spans_cover_declarations(extract_text) -> None:
    result = extract_text(
        Language.TYPESCRIPT,
        """
        function a() {
          return 1;
        }
        """,
    )

    (symbol,) = result.symbols
    assert (symbol.span.line, symbol.span.end_line) == (1, 3)
    assert result.unit.text[symbol.span.start : symbol.span.end].endswith("}")
