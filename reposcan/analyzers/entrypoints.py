"""Analyzer that lists files conventionally used as program entry points."""

from __future__ import annotations

from fnmatch import fnmatchcase

from ..models import ReportBuilder
from .base import Analyzer, ScanContext

ENTRYPOINT_PATTERNS = ("main.*", "index.*", "app.*", "__main__.py")
ENTRYPOINT_DEPTH = 3


class EntryPointAnalyzer(Analyzer):
    """Finds ``main.*``, ``index.*``, ``app.*`` and ``__main__.py`` near the root."""

    def supports(self, context: ScanContext) -> bool:
        return True

    def analyze(self, context: ScanContext, builder: ReportBuilder) -> None:
        builder.entry_points = [
            record.path
            for record in context.walker.walk(context.root, max_depth=ENTRYPOINT_DEPTH)
            if any(fnmatchcase(record.name, pattern) for pattern in ENTRYPOINT_PATTERNS)
        ]
