"""Documentation presence analyzer."""

from __future__ import annotations

from fnmatch import fnmatchcase

from ..models import ReportBuilder
from .base import Analyzer, ScanContext

DOC_PATTERNS = ("README*", "CONTRIBUTING*", "CHANGELOG*", "LICENSE*")
DOC_DEPTH = 2


class DocumentationAnalyzer(Analyzer):
    """Finds top-level project documents and counts markdown under docs/."""

    def supports(self, context: ScanContext) -> bool:
        return True

    def analyze(self, context: ScanContext, builder: ReportBuilder) -> None:
        builder.documentation = [
            record.path
            for record in context.walker.walk(context.root, max_depth=DOC_DEPTH)
            if any(fnmatchcase(record.name, pattern) for pattern in DOC_PATTERNS)
        ]
        if (context.root / "docs").is_dir():
            builder.docs_markdown = sum(
                1
                for record in context.records
                if record.path.startswith("docs/") and record.extension == "md"
            )
