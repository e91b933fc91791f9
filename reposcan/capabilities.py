"""Content search and directory tree rendering with optional external tools.

Both concerns have a baseline implementation built on :class:`FileWalker` and
an enhanced one that shells out to ``rg`` / ``tree``. The enhanced variants are
chosen once by :func:`detect_capabilities` and fall back to the baseline when a
call fails, so a missing or broken tool never surfaces as an error.
"""

from __future__ import annotations

import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from .logging import get_logger
from .walker import ExcludeRule, FileWalker

_TREE_LINE_LIMIT = 40

logger = get_logger("capabilities")


class ContentSearcher(ABC):
    """Regex search over source files restricted to a set of extensions."""

    @abstractmethod
    def find_files(
        self,
        root: Path,
        pattern: str,
        extensions: Sequence[str],
        *,
        limit: int | None = None,
    ) -> List[str]:
        """Return sorted relative paths of files containing ``pattern``."""

    @abstractmethod
    def matching_lines(self, root: Path, pattern: str, extensions: Sequence[str]) -> List[str]:
        """Return every line matching ``pattern`` across the selected files."""

    def first_match(self, root: Path, pattern: str, extensions: Sequence[str]) -> Optional[str]:
        matches = self.find_files(root, pattern, extensions, limit=1)
        return matches[0] if matches else None


class DirectoryTreeRenderer(ABC):
    """Renders the directory layout near the repository root."""

    @abstractmethod
    def render(self, root: Path, *, depth: int = 2, limit: int = _TREE_LINE_LIMIT) -> List[str]:
        """Return display lines for directories up to ``depth`` levels deep."""


class WalkingSearcher(ContentSearcher):
    """Baseline searcher reading files found by the walker.

    Files are scanned line by line; scanning a file stops at the first NUL
    byte, which is how ripgrep treats binary content.
    """

    def __init__(self, walker: FileWalker | None = None) -> None:
        self.walker = walker or FileWalker()

    def find_files(
        self,
        root: Path,
        pattern: str,
        extensions: Sequence[str],
        *,
        limit: int | None = None,
    ) -> List[str]:
        regex = re.compile(pattern)
        matches: List[str] = []
        for rel_path in self._iter_paths(root, extensions):
            if any(regex.search(line) for line in _iter_lines(root / rel_path)):
                matches.append(rel_path)
                if limit is not None and len(matches) >= limit:
                    break
        return matches

    def matching_lines(self, root: Path, pattern: str, extensions: Sequence[str]) -> List[str]:
        regex = re.compile(pattern)
        lines: List[str] = []
        for rel_path in self._iter_paths(root, extensions):
            lines.extend(line for line in _iter_lines(root / rel_path) if regex.search(line))
        return lines

    def _iter_paths(self, root: Path, extensions: Sequence[str]) -> Iterator[str]:
        wanted = {ext.lower() for ext in extensions}
        for record in self.walker.walk(root):
            if wanted and record.extension not in wanted:
                continue
            yield record.path


class RipgrepSearcher(ContentSearcher):
    """Searcher backed by ripgrep, falling back to the walker on failure.

    Walker exclusions are passed as ``--glob`` filters so rg skips those
    subtrees, and every reported path is checked against the walker again, so
    both searchers see the same set of files.
    """

    def __init__(self, executable: str, fallback: WalkingSearcher) -> None:
        self.executable = executable
        self.fallback = fallback

    @property
    def walker(self) -> FileWalker:
        return self.fallback.walker

    def find_files(
        self,
        root: Path,
        pattern: str,
        extensions: Sequence[str],
        *,
        limit: int | None = None,
    ) -> List[str]:
        output = self._run(root, ["--files-with-matches", "-e", pattern], extensions)
        if output is None:
            return self.fallback.find_files(root, pattern, extensions, limit=limit)
        paths = sorted(
            path
            for path in (_normalise_rg_path(line) for line in output.splitlines() if line.strip())
            if not self.walker.excludes(path)
        )
        return paths[:limit] if limit is not None else paths

    def matching_lines(self, root: Path, pattern: str, extensions: Sequence[str]) -> List[str]:
        output = self._run(
            root,
            ["--with-filename", "--null", "--no-line-number", "--no-heading", "-e", pattern],
            extensions,
        )
        if output is None:
            return self.fallback.matching_lines(root, pattern, extensions)
        lines: List[str] = []
        for entry in output.splitlines():
            path, _, line = entry.partition("\0")
            if not self.walker.excludes(_normalise_rg_path(path)):
                lines.append(line)
        return lines

    def command(self, args: Sequence[str], extensions: Sequence[str]) -> List[str]:
        """Build the rg argv for ``args`` restricted to ``extensions``."""
        command = [self.executable, "--no-ignore", "--color", "never", *args]
        for ext in extensions:
            command.extend(["--iglob", f"*.{ext}"])
        for name in sorted(self.walker.excluded_dirs):
            command.extend(["--glob", f"!{name}/"])
        for rule in self.walker.rules:
            command.extend(["--glob", _exclude_glob(rule)])
        command.append(".")
        return command

    def _run(self, root: Path, args: List[str], extensions: Sequence[str]) -> Optional[str]:
        command = self.command(args, extensions)
        try:
            completed = subprocess.run(
                command,
                cwd=str(root),
                check=False,
                text=True,
                capture_output=True,
            )
        except OSError as exc:
            logger.debug("ripgrep unavailable, using walker search: %s", exc)
            return None
        # Exit code 1 means "no matches"; 2 with output means partial read errors.
        if completed.returncode == 1:
            return ""
        if completed.returncode != 0 and not completed.stdout:
            logger.debug("ripgrep failed (%s), using walker search", completed.returncode)
            return None
        return completed.stdout


class WalkingTreeRenderer(DirectoryTreeRenderer):
    """Baseline renderer listing directories found by the walker."""

    def __init__(self, walker: FileWalker | None = None) -> None:
        self.walker = walker or FileWalker()

    def render(self, root: Path, *, depth: int = 2, limit: int = _TREE_LINE_LIMIT) -> List[str]:
        lines: List[str] = []
        for rel_dir in self.walker.walk_directories(root, max_depth=depth):
            level = rel_dir.count("/")
            lines.append(f"{'  ' * level}{rel_dir.rsplit('/', 1)[-1]}/")
            if len(lines) >= limit:
                break
        return lines


class TreeCommandRenderer(DirectoryTreeRenderer):
    """Renderer backed by the ``tree`` command, falling back to the walker.

    ``tree -I`` only matches entry names, so path-anchored exclusion rules
    are rendered by the walker instead.
    """

    def __init__(self, executable: str, fallback: WalkingTreeRenderer) -> None:
        self.executable = executable
        self.fallback = fallback

    def command(self, depth: int) -> Optional[List[str]]:
        """Build the tree argv, or ``None`` when ``tree`` cannot express the exclusions."""
        walker = self.fallback.walker
        if any(rule.anchored for rule in walker.rules):
            return None
        ignore = sorted(walker.excluded_dirs) + [rule.pattern for rule in walker.rules]
        return [
            self.executable,
            "-L",
            str(depth),
            "-d",
            "--noreport",
            "--charset",
            "ascii",
            "-I",
            "|".join(ignore),
            ".",
        ]

    def render(self, root: Path, *, depth: int = 2, limit: int = _TREE_LINE_LIMIT) -> List[str]:
        command = self.command(depth)
        if command is None:
            logger.debug("Path exclusions in effect, using walker rendering")
            return self.fallback.render(root, depth=depth, limit=limit)
        try:
            completed = subprocess.run(
                command,
                cwd=str(root),
                check=True,
                text=True,
                capture_output=True,
            )
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.debug("tree unavailable, using walker rendering: %s", exc)
            return self.fallback.render(root, depth=depth, limit=limit)
        # The first line is the root itself (".").
        lines = [line.rstrip() for line in completed.stdout.splitlines()[1:] if line.strip()]
        return lines[:limit]


@dataclass
class Capabilities:
    """Search and tree implementations selected for one process."""

    searcher: ContentSearcher
    tree_renderer: DirectoryTreeRenderer


def detect_capabilities(walker: FileWalker, *, use_external_tools: bool = True) -> Capabilities:
    """Pick enhanced implementations for tools found on ``PATH``."""
    searcher: ContentSearcher = WalkingSearcher(walker)
    tree_renderer: DirectoryTreeRenderer = WalkingTreeRenderer(walker)
    if not use_external_tools:
        return Capabilities(searcher=searcher, tree_renderer=tree_renderer)

    rg = shutil.which("rg")
    if rg:
        logger.debug("Using ripgrep at %s for content search", rg)
        searcher = RipgrepSearcher(rg, WalkingSearcher(walker))
    tree = shutil.which("tree")
    if tree:
        logger.debug("Using tree at %s for directory rendering", tree)
        tree_renderer = TreeCommandRenderer(tree, WalkingTreeRenderer(walker))
    return Capabilities(searcher=searcher, tree_renderer=tree_renderer)


def _normalise_rg_path(line: str) -> str:
    path = line.strip().replace("\\", "/")
    return path[2:] if path.startswith("./") else path


def _exclude_glob(rule: ExcludeRule) -> str:
    prefix = "/" if rule.anchored else ""
    suffix = "/" if rule.directory_only else ""
    return f"!{prefix}{rule.pattern}{suffix}"


def _iter_lines(path: Path) -> Iterator[str]:
    try:
        with path.open(encoding="utf-8", errors="ignore") as handle:
            for line in handle:
                if "\0" in line:
                    return
                yield line.rstrip("\n")
    except OSError:
        return


__all__ = [
    "Capabilities",
    "ContentSearcher",
    "DirectoryTreeRenderer",
    "RipgrepSearcher",
    "TreeCommandRenderer",
    "WalkingSearcher",
    "WalkingTreeRenderer",
    "detect_capabilities",
]
