"""Configuration surface analyzer."""

from __future__ import annotations

from fnmatch import fnmatchcase

from ..models import ReportBuilder
from .base import Analyzer, ScanContext

CONFIG_PATTERNS = (
    "*.config.*",
    "*rc",
    "*.yml",
    "*.yaml",
    "*.toml",
    ".env*",
    "Dockerfile*",
    "docker-compose.*",
)
CONFIG_DEPTH = 3


class ConfigFileAnalyzer(Analyzer):
    """Lists configuration files within the first levels of the tree."""

    def supports(self, context: ScanContext) -> bool:
        return True

    def analyze(self, context: ScanContext, builder: ReportBuilder) -> None:
        records = context.walker.walk(
            context.root,
            max_depth=CONFIG_DEPTH,
            include_hidden_files=True,
        )
        builder.config_files = [
            record.path
            for record in records
            if any(fnmatchcase(record.name, pattern) for pattern in CONFIG_PATTERNS)
        ]
