"""Build system and CI/CD analyzer."""

from __future__ import annotations

from ..classifier import BUILD_SIGNALS, MarkerContext, evaluate_signals
from ..models import BuildMarker, ReportBuilder
from .base import Analyzer, ScanContext


class BuildAnalyzer(Analyzer):
    """Detects build tooling and CI pipelines at the repository root."""

    def supports(self, context: ScanContext) -> bool:
        return True

    def analyze(self, context: ScanContext, builder: ReportBuilder) -> None:
        marker_context = MarkerContext(root=context.root, searcher=context.capabilities.searcher)
        builder.build = [
            BuildMarker(label=label, attributes=attributes)
            for label, attributes in evaluate_signals(BUILD_SIGNALS, marker_context).items()
        ]
