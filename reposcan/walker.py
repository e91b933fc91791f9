"""Filesystem traversal with exclusion rules shared by every scan consumer."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .logging import get_logger
from .models import FileRecord

DEPENDENCY_CACHE_DIRS = frozenset(
    {
        "node_modules",
        "venv",
        "vendor",
        "__pycache__",
        "bower_components",
    }
)

BUILD_OUTPUT_DIRS = frozenset({"build", "dist"})

_HIDDEN_PREFIX = "."

logger = get_logger("walker")


class FatalInputError(RuntimeError):
    """Raised when the scan root is missing or not a directory."""


@dataclass(frozen=True)
class ExcludeRule:
    """Glob exclusion parsed from the ``exclude_paths`` setting."""

    pattern: str
    directory_only: bool
    anchored: bool

    @classmethod
    def parse(cls, raw: str) -> Optional["ExcludeRule"]:
        pattern = raw.strip()
        if not pattern:
            return None
        directory_only = pattern.endswith("/")
        if directory_only:
            pattern = pattern.rstrip("/")
        anchored = pattern.startswith("/") or "/" in pattern
        pattern = pattern.lstrip("/")
        if not pattern:
            return None
        return cls(pattern=pattern, directory_only=directory_only, anchored=anchored)

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.anchored:
            return fnmatchcase(rel_path, self.pattern)
        return fnmatchcase(rel_path.rsplit("/", 1)[-1], self.pattern)


def resolve_root(path: str | os.PathLike[str]) -> Path:
    """Return the absolute scan root or raise :class:`FatalInputError`."""
    root = Path(path).expanduser()
    if not root.exists():
        raise FatalInputError(f"Error: Directory '{path}' does not exist")
    if not root.is_dir():
        raise FatalInputError(f"Error: '{path}' is not a directory")
    return root.resolve()


def extension_of(filename: str) -> str:
    """Return the lowercased extension without its dot, or ``""``."""
    stem, dot, suffix = filename.rpartition(".")
    if not dot or not stem:
        return ""
    return suffix.lower()


class FileWalker:
    """Walks a directory tree, pruning excluded subtrees before descending."""

    def __init__(
        self,
        extra_excluded_dirs: Iterable[str] = (),
        exclude_paths: Iterable[str] = (),
    ) -> None:
        self.excluded_dirs = DEPENDENCY_CACHE_DIRS | BUILD_OUTPUT_DIRS | frozenset(extra_excluded_dirs)
        self.rules: List[ExcludeRule] = [
            rule for rule in (ExcludeRule.parse(raw) for raw in exclude_paths) if rule is not None
        ]

    def is_excluded_dir(self, name: str, rel_path: str) -> bool:
        if name.startswith(_HIDDEN_PREFIX) or name in self.excluded_dirs:
            return True
        return self._matches_rules(rel_path, True)

    def excludes(self, rel_path: str) -> bool:
        """Return True when :meth:`walk` would never yield ``rel_path``."""
        parts = rel_path.split("/")
        for index, name in enumerate(parts[:-1]):
            if self.is_excluded_dir(name, "/".join(parts[: index + 1])):
                return True
        if parts[-1].startswith(_HIDDEN_PREFIX):
            return True
        return self._matches_rules(rel_path, False)

    def walk(
        self,
        root: Path,
        *,
        max_depth: int | None = None,
        include_hidden_files: bool = False,
    ) -> Iterator[FileRecord]:
        """Yield every non-excluded regular file below ``root`` in sorted order."""
        for rel_dir, filenames in self._traverse(root, max_depth):
            base = root / rel_dir if rel_dir else root
            for filename in filenames:
                if filename.startswith(_HIDDEN_PREFIX) and not include_hidden_files:
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if self._matches_rules(rel_path, False):
                    continue
                if (base / filename).is_symlink():
                    continue
                yield FileRecord(path=rel_path, extension=extension_of(filename))

    def walk_directories(self, root: Path, *, max_depth: int | None = None) -> Iterator[str]:
        """Yield relative paths of non-excluded subdirectories (the root excluded)."""
        for rel_dir, _ in self._traverse(root, max_depth, directory_limit=True):
            if rel_dir:
                yield rel_dir

    def _traverse(
        self,
        root: Path,
        max_depth: int | None,
        *,
        directory_limit: bool = False,
    ) -> Iterator[Tuple[str, Sequence[str]]]:
        # File depth is directory depth + 1; directories themselves are bounded
        # by max_depth when only directories are requested.
        for dirpath, dirnames, filenames in os.walk(root, onerror=self._on_error):
            current = Path(dirpath)
            rel_dir = current.relative_to(root).as_posix() if current != root else ""
            depth = rel_dir.count("/") + 1 if rel_dir else 0

            kept = []
            for name in sorted(dirnames):
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if self.is_excluded_dir(name, rel_path):
                    continue
                if (current / name).is_symlink():
                    continue
                kept.append(name)

            if max_depth is not None:
                limit = max_depth if directory_limit else max_depth - 1
                if depth >= limit:
                    kept = []
            dirnames[:] = kept

            yield rel_dir, sorted(filenames)

    def _matches_rules(self, rel_path: str, is_dir: bool) -> bool:
        return any(rule.matches(rel_path, is_dir) for rule in self.rules)

    def _on_error(self, error: OSError) -> None:
        logger.debug("os.walk error: %s", error)
        logger.warning("Skipped unreadable directory: %s", error.filename)


__all__ = [
    "BUILD_OUTPUT_DIRS",
    "DEPENDENCY_CACHE_DIRS",
    "ExcludeRule",
    "FatalInputError",
    "FileWalker",
    "extension_of",
    "resolve_root",
]
