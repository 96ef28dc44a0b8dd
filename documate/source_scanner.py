"""Project root detection and source file enumeration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

EXCLUDED_DIRS = frozenset({"bin", "obj", ".git", "packages", "node_modules"})


@dataclass
class IgnoreRule:
    """Glob pattern excluding paths relative to the project root."""

    pattern: str
    directory_only: bool
    anchored: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def build_ignore_rule(pattern: str) -> IgnoreRule | None:
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
        has_slash="/" in pattern,
    )


class SourceScanner:
    """Finds the project marker and walks the tree for source files."""

    def __init__(
        self,
        *,
        suffixes: Sequence[str] = (".cs",),
        marker_glob: str = "*.sln",
        exclude_paths: Iterable[str] = (),
    ) -> None:
        self.suffixes = tuple(suffix.lower() for suffix in suffixes)
        self.marker_glob = marker_glob
        self._rules: List[IgnoreRule] = [
            rule for rule in (build_ignore_rule(p) for p in exclude_paths) if rule is not None
        ]

    def find_markers(self, root: Path) -> List[Path]:
        """Return project marker files sitting directly under ``root``."""
        if not root.is_dir():
            return []
        return sorted(path for path in root.glob(self.marker_glob) if path.is_file())

    def scan(self, root: Path) -> List[Path]:
        """Return every source file below ``root`` that is not excluded."""
        return list(self._iter_files(root))

    def _iter_files(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept_dirs = []
            for name in dirnames:
                if name in EXCLUDED_DIRS:
                    continue
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if self._is_ignored(rel_path, True):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for filename in filenames:
                if not filename.lower().endswith(self.suffixes):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if self._is_ignored(rel_path, False):
                    continue
                yield current_dir / filename

    def _is_ignored(self, rel_path: str, is_dir: bool) -> bool:
        return any(rule.matches(rel_path, is_dir) for rule in self._rules)


__all__ = ["EXCLUDED_DIRS", "IgnoreRule", "SourceScanner", "build_ignore_rule"]
