"""Test footprint analyzer."""

from __future__ import annotations

from ..classifier import TEST_FRAMEWORK_SIGNALS, MarkerContext, evaluate_signals
from ..models import ReportBuilder, TestSummary
from .base import Analyzer, ScanContext

_TEST_NAME_TOKENS = ("test", "spec")


class TestAnalyzer(Analyzer):
    """Counts test-like files and detects test frameworks."""

    __test__ = False

    def supports(self, context: ScanContext) -> bool:
        return True

    def analyze(self, context: ScanContext, builder: ReportBuilder) -> None:
        test_files = sum(
            1
            for record in context.records
            if any(token in record.name.lower() for token in _TEST_NAME_TOKENS)
        )
        marker_context = MarkerContext(
            root=context.root,
            searcher=context.capabilities.searcher,
            extensions=context.extensions,
        )
        frameworks = list(evaluate_signals(TEST_FRAMEWORK_SIGNALS, marker_context))
        builder.tests = TestSummary(test_files=test_files, frameworks=frameworks)
