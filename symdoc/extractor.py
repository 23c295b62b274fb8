"""Pipeline driver: tokenizer, signature parser, normalizer and registry per unit."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional

from .config import ExtractorConfig
from .errors import (
    ConflictingModifiers,
    DuplicateSymbol,
    ExtractionError,
    MalformedDeclaration,
    SymdocError,
    TruncatedInput,
)
from .extraction import CandidateKind, DocCommentScanner, LanguageFrontend, discover_frontends, frontend_for
from .logging import get_logger, unit_logger
from .models import Language, Modifier, RawDeclaration, SourceUnit, Symbol
from .normalizer import Normalizer
from .registry import SymbolRegistry


@dataclass
class ExtractionResult:
    """Outcome of extracting one source unit."""

    unit: SourceUnit
    registry: SymbolRegistry = field(default_factory=SymbolRegistry)
    diagnostics: List[ExtractionError] = field(default_factory=list)
    truncated: bool = False
    cancelled: bool = False
    failure: Optional[SymdocError] = None

    @property
    def symbols(self) -> List[Symbol]:
        return self.registry.all_symbols()

    @property
    def ok(self) -> bool:
        return self.failure is None


class Extractor:
    """Extracts symbols from source units; units never share state."""

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        frontends: Optional[Dict[Language, LanguageFrontend]] = None,
    ) -> None:
        self.config = config or ExtractorConfig()
        self.normalizer = Normalizer(self.config)
        self.frontends = frontends if frontends is not None else discover_frontends()
        self.logger = get_logger("extractor")

    def extract(self, unit: SourceUnit, cancel: Optional[threading.Event] = None) -> ExtractionResult:
        """Extract one unit.

        Malformed declarations, truncated input and duplicate names are recorded
        on ``diagnostics``. :class:`ConflictingModifiers` and
        :class:`UnsupportedLanguage` propagate.
        """
        frontend = frontend_for(unit.language, self.frontends)
        started = time.perf_counter()
        result = ExtractionResult(unit=unit)
        log = unit_logger(self.logger, unit.origin)
        tokenizer = frontend.tokenizer(unit)
        parser = frontend.parser(unit)

        raws: List[RawDeclaration] = []
        parents: Dict[int, Optional[int]] = {}
        exports: Dict[str, str] = {}
        for candidate in tokenizer:
            if cancel is not None and cancel.is_set():
                result.cancelled = True
                log.debug("cancelled after %d declarations", len(raws))
                break
            parents[candidate.key] = candidate.parent
            if candidate.kind is CandidateKind.EXPORTS:
                exports.update(parser.parse_exports(candidate))
                continue
            try:
                raw = parser.parse(candidate)
            except MalformedDeclaration as exc:
                self._record(result, exc)
                continue
            if raw is None:
                log.debug("skipping unrecognized %s candidate on line %d", candidate.kind.value, candidate.span.line)
                continue
            raws.append(raw)

        for offset, line in tokenizer.truncations:
            self._record(
                result,
                TruncatedInput(
                    "unterminated string, comment or bracket at end of input",
                    origin=unit.origin,
                    offset=offset,
                    line=line,
                ),
            )
        result.truncated = bool(tokenizer.truncations) or any(raw.truncated for raw in raws)

        scanner = DocCommentScanner(unit.text, tokenizer.comments, unit.language)
        names: Dict[int, Optional[str]] = {}
        for raw in raws:
            if exports and raw.parent is None and raw.name in exports:
                raw = _apply_export(raw, exports[raw.name])
            enclosing = _enclosing_name(raw.parent, names, parents)
            if self.normalizer.suppresses(raw):
                log.debug("suppressing test callback %s", raw.name)
                names[raw.key] = enclosing
                continue
            documentation = scanner.scan(raw.anchor)
            symbol = self.normalizer.normalize(raw, unit, documentation=documentation, enclosing=enclosing)
            names[raw.key] = symbol.qualified_name
            try:
                result.registry.register(symbol)
            except DuplicateSymbol as exc:
                self._record(result, exc)

        log.debug("extracted %d symbols in %.3fs", len(result.registry), time.perf_counter() - started)
        return result

    def extract_many(
        self,
        units: Iterable[SourceUnit],
        max_workers: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
    ) -> List[ExtractionResult]:
        """Extract units concurrently; results keep input order."""
        units = list(units)
        if not units:
            return []
        workers = max_workers or self.config.max_workers
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="symdoc") as pool:
            futures = [pool.submit(self._extract_isolated, unit, cancel) for unit in units]
            return [future.result() for future in futures]

    def _extract_isolated(self, unit: SourceUnit, cancel: Optional[threading.Event]) -> ExtractionResult:
        try:
            return self.extract(unit, cancel)
        except ConflictingModifiers as exc:
            unit_logger(self.logger, unit.origin).error("internal invariant violated: %s", exc, exc_info=True)
            return ExtractionResult(unit=unit, failure=exc)
        except SymdocError as exc:
            unit_logger(self.logger, unit.origin).error("extraction failed: %s", exc)
            return ExtractionResult(unit=unit, failure=exc)

    def _record(self, result: ExtractionResult, error: ExtractionError) -> None:
        result.diagnostics.append(error)
        self.logger.warning("%s", error)


def _apply_export(raw: RawDeclaration, export: str) -> RawDeclaration:
    if export == Modifier.DEFAULT_EXPORT.value:
        return replace(raw, default_export=True)
    return replace(raw, exported=True)


def _enclosing_name(
    key: Optional[int],
    names: Dict[int, Optional[str]],
    parents: Dict[int, Optional[int]],
) -> Optional[str]:
    # Candidates that produced no symbol resolve to their own enclosing scope.
    while key is not None:
        if key in names:
            return names[key]
        key = parents.get(key)
    return None


def extract(unit: SourceUnit, config: Optional[ExtractorConfig] = None) -> ExtractionResult:
    """Extract one unit with a throwaway :class:`Extractor`."""
    return Extractor(config).extract(unit)


__all__ = ["ExtractionResult", "Extractor", "extract"]
