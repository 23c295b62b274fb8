"""Doc-comment scanning: find the comment block that documents a declaration."""

from __future__ import annotations

import textwrap
from bisect import bisect_right
from typing import List, Optional, Sequence, Tuple

from ..models import Language, SourceUnit
from .base import SourceText, comment_spans, parse_unit

_LINE_MARKERS = {
    Language.PHP: ("//", "#"),
    Language.TYPESCRIPT: ("//",),
    Language.JAVASCRIPT: ("//",),
}


class DocCommentScanner:
    """Attaches comments to declarations using the comment spans of a syntax tree.

    ``comments`` holds ``(start, end)`` character offsets in source order.
    Only whitespace may sit between a comment and the declaration it documents.
    """

    def __init__(self, text: str, comments: Sequence[Tuple[int, int]], language: Language) -> None:
        self.text = text
        self.markers = _LINE_MARKERS.get(language, ("//",))
        self._spans = [(start, self._trimmed_end(start, end)) for start, end in comments]
        self._ends = [end for _, end in self._spans]

    def scan(self, offset: int) -> Optional[str]:
        """Return the cleaned comment immediately preceding ``offset``, if any."""
        index = self._preceding(offset)
        if index is None:
            return None
        start, end = self._spans[index]
        comment = self.text[start:end]
        if not comment.startswith(self.markers):
            return _clean_block(comment)
        if not self._starts_line(start):
            return None
        lines = [comment]
        while index > 0:
            start, _ = self._spans[index]
            previous_start, previous_end = self._spans[index - 1]
            comment = self.text[previous_start:previous_end]
            gap = self.text[previous_end:start]
            if gap.strip() or gap.count("\n") != 1:
                break
            if not comment.startswith(self.markers) or not self._starts_line(previous_start):
                break
            lines.append(comment)
            index -= 1
        lines.reverse()
        return _trim_blank_lines([self._strip_line_marker(line).rstrip() for line in lines])

    def _preceding(self, offset: int) -> Optional[int]:
        end = offset
        while end > 0 and self.text[end - 1].isspace():
            end -= 1
        index = bisect_right(self._ends, end) - 1
        if index < 0 or self._ends[index] != end:
            return None
        return index

    def _trimmed_end(self, start: int, end: int) -> int:
        while end > start and self.text[end - 1].isspace():
            end -= 1
        return end

    def _starts_line(self, start: int) -> bool:
        line_start = self.text.rfind("\n", 0, start) + 1
        return not self.text[line_start:start].strip()

    def _strip_line_marker(self, line: str) -> str:
        for marker in self.markers:
            if line.startswith(marker):
                line = line.lstrip(marker[0])
                break
        return line[1:] if line.startswith(" ") else line


def scan_doc_comment(unit: SourceUnit, offset: int) -> Optional[str]:
    """Parse ``unit`` and return the comment documenting the declaration at ``offset``."""
    source = SourceText(unit.text)
    comments = comment_spans(parse_unit(unit), source)
    return DocCommentScanner(unit.text, comments, unit.language).scan(offset)


def _strip_margin(line: str) -> str:
    stripped = line.lstrip()
    if stripped.startswith("*"):
        stripped = stripped[1:]
        if stripped.startswith(" "):
            stripped = stripped[1:]
    return stripped


def _clean_block(comment: str) -> str:
    body = comment[2:-2]
    body = body.lstrip("*") if body.startswith("*") else body
    lines = body.split("\n")
    first, rest = lines[0].strip(), lines[1:]
    if all(not line.strip() or line.lstrip().startswith("*") for line in rest):
        rest = [_strip_margin(line) for line in rest]
    else:
        rest = textwrap.dedent("\n".join(rest)).split("\n")
    return _trim_blank_lines([first] + [line.rstrip() for line in rest])


def _trim_blank_lines(lines: List[str]) -> str:
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


__all__ = ["DocCommentScanner", "scan_doc_comment"]
