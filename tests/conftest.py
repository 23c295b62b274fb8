from __future__ import annotations

import logging
import textwrap
from pathlib import Path
from typing import Callable, Iterator

import pytest

from symdoc.extractor import ExtractionResult, Extractor
from symdoc.models import Language, SourceUnit
from tests._fixtures.source_tree import SourceTreeBuilder

SAMPLES = Path(__file__).parent / "_fixtures" / "samples"

_LANGUAGE_BY_SUFFIX = {
    ".php": Language.PHP,
    ".tsx": Language.TYPESCRIPT,
    ".ts": Language.TYPESCRIPT,
    ".js": Language.JAVASCRIPT,
}


@pytest.fixture(autouse=True)
def _reset_symdoc_logger() -> Iterator[None]:
    """Undo handlers installed by configure_logging so caplog sees every record."""
    yield
    logger = logging.getLogger("symdoc")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def source_tree(tmp_path: Path) -> SourceTreeBuilder:
    """Provide a reusable source tree builder rooted at the pytest tmp_path."""
    return SourceTreeBuilder(tmp_path)


@pytest.fixture
def sample_unit() -> Callable[[str], SourceUnit]:
    """Load one of the bundled sample sources as a SourceUnit."""

    def _load(name: str) -> SourceUnit:
        path = SAMPLES / name
        return SourceUnit(
            language=_LANGUAGE_BY_SUFFIX[path.suffix],
            text=path.read_text(encoding="utf-8"),
            origin=name,
        )

    return _load


@pytest.fixture
def extract_text() -> Callable[..., ExtractionResult]:
    """Extract dedented source text with a default extractor."""

    def _extract(language: Language, text: str, origin: str = "sample", extractor: Extractor | None = None):
        unit = SourceUnit(language=language, text=textwrap.dedent(text).lstrip("\n"), origin=origin)
        return (extractor or Extractor()).extract(unit)

    return _extract
