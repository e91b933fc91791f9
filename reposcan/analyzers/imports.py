"""Import frequency and internal module structure analyzer."""

from __future__ import annotations

import re
from collections import Counter
from typing import List

from ..aggregator import top_counts
from ..manifests.node import load_workspaces
from ..manifests.rust import load_workspace_members
from ..models import ImportSummary, ModuleStructure, ReportBuilder
from .base import Analyzer, ScanContext

_PY_IMPORT = r"^(import|from) "
_PY_RELATIVE_IMPORT = r"^from \."
_JS_IMPORT = r"^import.*from ['\"]"
_JS_SOURCE = re.compile(r"""from\s+['"]([^'"]+)['"]""")

PYTHON_EXTENSIONS = ("py",)
JS_EXTENSIONS = ("js", "jsx", "ts", "tsx")


class ImportAnalyzer(Analyzer):
    """Tallies the most frequent external imports and maps package layout."""

    def supports(self, context: ScanContext) -> bool:
        return True

    def analyze(self, context: ScanContext, builder: ReportBuilder) -> None:
        builder.imports = self._imports(context)
        builder.modules = self._modules(context)

    def _imports(self, context: ScanContext) -> ImportSummary:
        searcher = context.capabilities.searcher
        limit = context.config.top_imports
        summary = ImportSummary()

        if context.extensions.intersection(PYTHON_EXTENSIONS):
            counts: Counter[str] = Counter()
            for line in searcher.matching_lines(context.root, _PY_IMPORT, PYTHON_EXTENSIONS):
                module = _python_module(line)
                if module:
                    counts[module] += 1
            summary.python = top_counts(counts, limit)
            summary.relative_import_files = len(
                searcher.find_files(context.root, _PY_RELATIVE_IMPORT, PYTHON_EXTENSIONS)
            )

        if context.extensions.intersection(JS_EXTENSIONS):
            counts = Counter()
            for line in searcher.matching_lines(context.root, _JS_IMPORT, JS_EXTENSIONS):
                match = _JS_SOURCE.search(line)
                if not match:
                    continue
                source = match.group(1)
                if source.startswith((".", "@/")):
                    continue
                counts[source] += 1
            summary.javascript = top_counts(counts, limit)

        return summary

    def _modules(self, context: ScanContext) -> ModuleStructure:
        modules = ModuleStructure()
        modules.python_packages = sorted(
            record.parent for record in context.records if record.name == "__init__.py"
        )
        if (context.root / "go.mod").is_file():
            modules.go_packages = sorted(
                {record.parent for record in context.records if record.extension == "go"}
            )
        modules.node_workspaces = load_workspaces(_read(context, "package.json"))
        modules.rust_workspace_members = load_workspace_members(_read(context, "Cargo.toml"))
        return modules


def _python_module(line: str) -> str:
    parts: List[str] = line.split()
    if len(parts) < 2:
        return ""
    module = parts[1].rstrip(",")
    if module.startswith("."):
        return ""
    return module


def _read(context: ScanContext, name: str) -> str:
    path = context.root / name
    if not path.is_file():
        return ""
    try:
        return path.read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return ""
