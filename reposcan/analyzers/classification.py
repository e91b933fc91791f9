"""Project type and framework detection analyzer."""

from __future__ import annotations

from ..classifier import classify
from ..models import ReportBuilder
from .base import Analyzer, ScanContext


class ClassificationAnalyzer(Analyzer):
    """Evaluates the ecosystem and framework rule tables."""

    def supports(self, context: ScanContext) -> bool:
        return True

    def analyze(self, context: ScanContext, builder: ReportBuilder) -> None:
        builder.classification = classify(
            context.root,
            searcher=context.capabilities.searcher,
            extensions=context.extensions,
        )
