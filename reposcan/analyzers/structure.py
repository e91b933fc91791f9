"""Directory layout analyzer."""

from __future__ import annotations

from ..models import ReportBuilder
from .base import Analyzer, ScanContext

TREE_DEPTH = 2


class StructureAnalyzer(Analyzer):
    """Renders the top levels of the directory tree."""

    def supports(self, context: ScanContext) -> bool:
        return True

    def analyze(self, context: ScanContext, builder: ReportBuilder) -> None:
        renderer = context.capabilities.tree_renderer
        builder.directory_tree = renderer.render(context.root, depth=TREE_DEPTH)
