"""Tests for symdoc.languages."""

from __future__ import annotations

import pytest

from symdoc.languages import detect_language, supported_suffixes
from symdoc.models import Language


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("src/Example.php", Language.PHP),
        ("templates/page.PHTML", Language.PHP),
        ("App.tsx", Language.TYPESCRIPT),
        ("lib/index.mts", Language.TYPESCRIPT),
        ("should4.js", Language.JAVASCRIPT),
        ("view.jsx", Language.JAVASCRIPT),
        ("config.cjs", Language.JAVASCRIPT),
        ("README.md", None),
        ("Makefile", None),
    ],
)
def test_detect_language(path: str, expected: Language | None) -> None:
    assert detect_language(path) is expected


def test_overrides_take_precedence() -> None:
    overrides = {".inc": Language.JAVASCRIPT, ".module": Language.PHP}

    assert detect_language("lib.inc", overrides) is Language.JAVASCRIPT
    assert detect_language("hook.module", overrides) is Language.PHP
    assert ".module" in supported_suffixes(overrides)
    assert ".module" not in supported_suffixes()
