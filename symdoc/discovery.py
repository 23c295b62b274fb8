"""Source discovery: walk paths and load source units for extraction."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence

from .config import SymdocConfig
from .languages import detect_language
from .logging import get_logger
from .models import SourceUnit

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "vendor",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".idea",
    "dist",
}


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .symdoc.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


class SourceDiscovery:
    """Finds supported source files and reads them into :class:`SourceUnit` objects."""

    def __init__(self, config: Optional[SymdocConfig] = None) -> None:
        self.config = config
        self.logger = get_logger("discovery")

    def discover(self, paths: Iterable[Path | str]) -> List[Path]:
        """Return supported files under ``paths`` in a stable order.

        Explicit file arguments are kept whenever their language is known;
        directories are walked honouring ``.gitignore`` and ``exclude_paths``.
        """
        found: List[Path] = []
        seen: set[Path] = set()
        for entry in paths:
            path = Path(entry).expanduser()
            if not path.exists():
                raise FileNotFoundError(f"Source path not found: {entry}")
            candidates = [path] if path.is_file() else self._walk(path)
            for candidate in candidates:
                if self._language_of(candidate) is None:
                    continue
                key = candidate.resolve()
                if key in seen:
                    continue
                seen.add(key)
                found.append(candidate)
        return found

    def load(self, paths: Iterable[Path | str]) -> List[SourceUnit]:
        """Discover files and read them; undecodable files are skipped with a warning."""
        units: List[SourceUnit] = []
        for path in self.discover(paths):
            language = self._language_of(path)
            try:
                text = path.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                self.logger.warning("Skipping %s: not valid UTF-8", path)
                continue
            except OSError as exc:
                self.logger.warning("Skipping %s: %s", path, exc)
                continue
            units.append(SourceUnit(language=language, text=text, origin=path.as_posix()))
        self.logger.debug("Loaded %d source units", len(units))
        return units

    def _language_of(self, path: Path):
        overrides = self.config.languages if self.config is not None else None
        return detect_language(path, overrides)

    def _rules(self, root: Path) -> List[IgnoreRule]:
        rules = parse_gitignore(root / ".gitignore")
        if self.config is not None:
            for pattern in self.config.exclude_paths:
                rule = build_ignore_rule(pattern)
                if rule is not None:
                    rules.append(rule)
        return rules

    def _walk(self, root: Path) -> Iterator[Path]:
        rules = self._rules(root)
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept_dirs = []
            for name in sorted(dirnames):
                if name in _EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if should_ignore(rel_path, True, rules):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in sorted(filenames):
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if should_ignore(rel_path, False, rules):
                    continue
                yield current_dir / filename


__all__ = ["IgnoreRule", "SourceDiscovery", "build_ignore_rule", "parse_gitignore", "should_ignore"]
