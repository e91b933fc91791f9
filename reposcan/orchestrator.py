"""Scan pipeline orchestration."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

from .analyzers import Analyzer, ScanContext, discover_analyzers
from .capabilities import Capabilities, detect_capabilities
from .config import ConfigError, ScanConfig, load_config
from .logging import collect_warnings, get_logger
from .models import AnalysisReport, ReportBuilder
from .walker import FileWalker, resolve_root


class Orchestrator:
    """Runs the walker and every analyzer, producing one :class:`AnalysisReport`."""

    def __init__(
        self,
        analyzers: Optional[Iterable[Analyzer]] = None,
        capabilities: Capabilities | None = None,
        *,
        use_external_tools: bool | None = None,
    ) -> None:
        self._analyzer_overrides = list(analyzers) if analyzers is not None else None
        self._capabilities = capabilities
        self._use_external_tools = use_external_tools
        self.logger = get_logger("orchestrator")

    def run(self, path: str) -> AnalysisReport:
        """Scan ``path``; raises :class:`FatalInputError` for an unusable root.

        Warnings logged anywhere under the ``reposcan`` logger while the scan
        runs are copied into the report's ``warnings``.
        """
        root = resolve_root(path)
        self.logger.debug("Starting scan of %s", root)

        with collect_warnings() as collector:
            builder = self._scan(root)
        for message in collector.messages:
            builder.warn(message)
        return builder.build()

    def _scan(self, root: Path) -> ReportBuilder:
        config = self._load_config(root)
        walker = FileWalker(
            extra_excluded_dirs=config.exclude_dirs,
            exclude_paths=config.exclude_paths,
        )
        capabilities = self._capabilities or detect_capabilities(
            walker, use_external_tools=self._resolve_external_tools(config)
        )

        records = list(walker.walk(root))
        self.logger.debug("Walker discovered %d files", len(records))

        context = ScanContext(
            root=root,
            records=records,
            walker=walker,
            capabilities=capabilities,
            config=config,
        )
        builder = ReportBuilder(root=str(root))

        for analyzer in self._select_analyzers(config):
            if not analyzer.supports(context):
                self.logger.debug("Skipping analyzer %s", type(analyzer).__name__)
                continue
            analyzer.analyze(context, builder)
        return builder

    def _load_config(self, root: Path) -> ScanConfig:
        try:
            return load_config(root)
        except ConfigError as exc:
            self.logger.warning("Ignoring invalid configuration: %s", exc)
            return ScanConfig(root=root)

    def _resolve_external_tools(self, config: ScanConfig) -> bool:
        if self._use_external_tools is not None:
            return self._use_external_tools
        return config.external_tools

    def _select_analyzers(self, config: ScanConfig) -> List[Analyzer]:
        if self._analyzer_overrides is not None:
            return list(self._analyzer_overrides)
        enabled = config.analyzers.enabled or None
        try:
            return discover_analyzers(enabled)
        except ValueError as exc:
            self.logger.warning("%s; running all analyzers", exc)
            return discover_analyzers()
