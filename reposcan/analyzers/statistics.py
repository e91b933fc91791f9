"""File statistics analyzer."""

from __future__ import annotations

from ..aggregator import aggregate
from ..models import ReportBuilder
from .base import Analyzer, ScanContext


class StatisticsAnalyzer(Analyzer):
    """Counts files by extension and the directories that hold them."""

    def supports(self, context: ScanContext) -> bool:
        return True

    def analyze(self, context: ScanContext, builder: ReportBuilder) -> None:
        directories = context.walker.walk_directories(context.root)
        statistics = aggregate(context.records, directories)
        statistics.display_limit = context.config.top_extensions
        builder.statistics = statistics
