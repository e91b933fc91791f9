"""Counting helpers that turn walker output into summary statistics."""

from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Mapping, Tuple

from .models import FileRecord, FileStatistics

NO_EXTENSION = "(no extension)"


def aggregate(records: Iterable[FileRecord], directories: Iterable[str]) -> FileStatistics:
    """Count files per extension and the directories they live in.

    ``directories`` holds the non-root subdirectories; the root itself is
    counted as one directory so an empty tree reports ``0 files in 1
    directories``.
    """
    histogram: Counter[str] = Counter()
    total_files = 0
    for record in records:
        histogram[record.extension or NO_EXTENSION] += 1
        total_files += 1

    total_dirs = 1 + sum(1 for _ in directories)
    return FileStatistics(
        histogram=dict(histogram),
        total_files=total_files,
        total_dirs=total_dirs,
    )


def top_counts(counts: Mapping[str, int], limit: int) -> List[Tuple[str, int]]:
    """Return the ``limit`` largest entries, ties broken by name ascending."""
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ordered[:limit]


__all__ = ["NO_EXTENSION", "aggregate", "top_counts"]
