"""Dependency analyzer implementation."""

from __future__ import annotations

from ..classifier import SECURITY_SIGNALS, MarkerContext, evaluate_signals
from ..logging import get_logger
from ..manifests import collect_dependencies
from ..models import ReportBuilder
from .base import Analyzer, ScanContext

logger = get_logger("analyzers.dependencies")


class DependencyAnalyzer(Analyzer):
    """Parses manifests of the ecosystems the classifier reported."""

    requires = ("classification",)

    def supports(self, context: ScanContext) -> bool:
        return True

    def analyze(self, context: ScanContext, builder: ReportBuilder) -> None:
        manifests = collect_dependencies(context.root, builder.classification.ecosystems)
        for manifest in manifests:
            if manifest.error:
                logger.info("Could not parse %s: %s", manifest.manifest, manifest.error)
            else:
                logger.debug(
                    "Parsed %d dependencies from %s", len(manifest.records), manifest.manifest
                )
        builder.dependencies = manifests

        marker_context = MarkerContext(root=context.root, searcher=context.capabilities.searcher)
        builder.security_tools = list(evaluate_signals(SECURITY_SIGNALS, marker_context))
