"""JavaScript front end.

Same declaration shapes as TypeScript without type text. Function literals
passed to calls are followed as well, so test-style ``describe``/``it``
callbacks become symbols named after the call and its label.
"""

from __future__ import annotations

from .typescript import TypeScriptParser, TypeScriptTokenizer


class JavaScriptTokenizer(TypeScriptTokenizer):
    follow_callbacks = True


class JavaScriptParser(TypeScriptParser):
    typed = False


__all__ = ["JavaScriptParser", "JavaScriptTokenizer"]
