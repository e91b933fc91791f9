"""Text and JSON rendering for analysis reports."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .classifier import GO
from .models import AnalysisReport, DependencyKind, ManifestDependencies

RULE = "=" * 51
SEPARATOR = "-" * 51
NONE_FOUND = "  (None found)"

_KIND_TITLES = (
    (DependencyKind.PRODUCTION, "Production"),
    (DependencyKind.DEVELOPMENT, "Development"),
    (DependencyKind.INDIRECT, "Indirect"),
)


@dataclass
class ReportSection:
    """A titled block of report lines."""

    title: str
    lines: List[str] = field(default_factory=list)


class ReportRenderer:
    """Lays out report sections through a Jinja2 template."""

    TEMPLATE = "report.txt.j2"

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, report: AnalysisReport) -> str:
        """Return the nine-section structure report."""
        sections = [
            ReportSection("FILE STATISTICS", self._statistics_lines(report)),
            ReportSection("PROJECT TYPE DETECTION", self._classification_lines(report)),
            ReportSection("ENTRY POINTS", _listing(report.entry_points, "  (None found with common names)")),
            ReportSection("DIRECTORY STRUCTURE", _listing(report.directory_tree, NONE_FOUND)),
            ReportSection("CONFIGURATION FILES", _listing(report.config_files, NONE_FOUND)),
            ReportSection("DEPENDENCIES", self._dependency_summary_lines(report)),
            ReportSection("TESTS", self._test_lines(report)),
            ReportSection("BUILD & CI/CD", self._build_lines(report)),
            ReportSection("DOCUMENTATION", self._documentation_lines(report)),
        ]
        return self._render("Codebase Structure Analysis", report, sections, "Analysis complete!")

    def render_dependency_map(self, report: AnalysisReport) -> str:
        """Return the detailed dependency map."""
        sections = [
            ReportSection("EXTERNAL DEPENDENCIES", self._dependency_listing_lines(report)),
            ReportSection("INTERNAL MODULE STRUCTURE", self._module_lines(report)),
            ReportSection("IMPORT PATTERNS", self._import_lines(report)),
            ReportSection("DEPENDENCY HEALTH CHECKS", self._health_lines(report)),
            ReportSection("CIRCULAR DEPENDENCY DETECTION", self._circular_lines(report)),
        ]
        return self._render(
            "Dependency Mapping Analysis", report, sections, "Dependency analysis complete!"
        )

    def _render(
        self,
        title: str,
        report: AnalysisReport,
        sections: Sequence[ReportSection],
        footer: str,
    ) -> str:
        template = self._env.get_template(self.TEMPLATE)
        return template.render(
            title=title,
            target=report.root,
            sections=sections,
            footer=footer,
            rule=RULE,
            separator=SEPARATOR,
        )

    # ------------------------------------------------------------------
    # Structure report sections

    def _statistics_lines(self, report: AnalysisReport) -> List[str]:
        stats = report.statistics
        lines = ["Files by type:"]
        top = stats.top()
        if top:
            lines.extend(f"  {ext:<15} {count:>6} files" for ext, count in top)
        else:
            lines.append(NONE_FOUND)
        lines.append("")
        lines.append(f"Total: {stats.total_files} files in {stats.total_dirs} directories")
        lines.extend(f"⚠ {warning}" for warning in report.warnings)
        return lines

    def _classification_lines(self, report: AnalysisReport) -> List[str]:
        classification = report.classification
        lines: List[str] = []
        if classification.ecosystems:
            for label, attributes in classification.ecosystems.items():
                lines.append(f"✓ {label}")
                lines.extend(_attribute_lines(attributes))
        else:
            lines.append("  (No ecosystem markers found)")
        lines.append("")
        lines.append("Frameworks/Libraries detected:")
        lines.extend(_listing(classification.frameworks, NONE_FOUND, prefix="  - "))
        return lines

    def _dependency_summary_lines(self, report: AnalysisReport) -> List[str]:
        if not report.dependencies:
            return ["  (No dependency manifests found, 0 dependencies)"]
        lines: List[str] = []
        for index, manifest in enumerate(report.dependencies):
            if index:
                lines.append("")
            lines.append(f"{manifest.ecosystem} dependencies ({manifest.manifest}):")
            if manifest.error:
                lines.append(f"  ⚠ Could not parse {manifest.manifest}: {manifest.error}")
                continue
            counted = False
            for kind, title in _KIND_TITLES:
                count = manifest.count(kind)
                if count:
                    lines.append(f"  - {title}: {count}")
                    counted = True
            if not counted:
                lines.append("  - 0 dependencies")
            lines.extend(_advisory_lines(manifest))
            lines.extend(_lockfile_lines(manifest))
        return lines

    def _test_lines(self, report: AnalysisReport) -> List[str]:
        lines = [f"Test files found: {report.tests.test_files}"]
        lines.extend(
            _listing(report.tests.frameworks, "  (No test frameworks detected)", prefix="  - ")
        )
        return lines

    def _build_lines(self, report: AnalysisReport) -> List[str]:
        if not report.build:
            return [NONE_FOUND]
        lines: List[str] = []
        for marker in report.build:
            lines.append(f"✓ {marker.label}")
            lines.extend(_attribute_lines(marker.attributes))
        return lines

    def _documentation_lines(self, report: AnalysisReport) -> List[str]:
        lines = [f"  {path}" for path in report.documentation]
        if report.docs_markdown is not None:
            lines.append(f"  docs/ directory ({report.docs_markdown} markdown files)")
        return lines or [NONE_FOUND]

    # ------------------------------------------------------------------
    # Dependency map sections

    def _dependency_listing_lines(self, report: AnalysisReport) -> List[str]:
        if not report.dependencies:
            return ["  (No dependency manifests found, 0 dependencies)"]
        lines: List[str] = []
        for index, manifest in enumerate(report.dependencies):
            if index:
                lines.append("")
            lines.append(f"{manifest.ecosystem} Dependencies ({manifest.manifest}):")
            if manifest.error:
                lines.append(f"  ⚠ Could not parse {manifest.manifest}: {manifest.error}")
                continue
            if not manifest.records:
                lines.append("  (No dependencies declared)")
            for kind, title in _KIND_TITLES:
                records = sorted(
                    (record for record in manifest.records if record.kind is kind),
                    key=lambda record: record.name.lower(),
                )
                if not records:
                    continue
                lines.append(f"  {title} Dependencies:")
                lines.extend(
                    f"    {record.name} {record.version_spec}".rstrip() for record in records
                )
            lines.extend(_lockfile_lines(manifest))
        return lines

    def _module_lines(self, report: AnalysisReport) -> List[str]:
        modules = report.modules
        lines: List[str] = []
        go_module = report.classification.ecosystems.get(GO, {}).get("Module")
        if go_module:
            lines.append(f"Go Module: {go_module}")
        groups: Tuple[Tuple[str, List[str]], ...] = (
            ("Python Packages:", modules.python_packages),
            ("Go Packages:", modules.go_packages),
            ("Workspace Packages:", modules.node_workspaces),
            ("Rust Workspace Members:", modules.rust_workspace_members),
        )
        for heading, items in groups:
            if not items:
                continue
            if lines:
                lines.append("")
            lines.append(heading)
            lines.extend(f"  {item}" for item in items)
        return lines or [NONE_FOUND]

    def _import_lines(self, report: AnalysisReport) -> List[str]:
        imports = report.imports
        lines: List[str] = []
        for heading, counts in (
            ("Top Python imports:", imports.python),
            ("Top JavaScript/TypeScript imports:", imports.javascript),
        ):
            if not counts:
                continue
            if lines:
                lines.append("")
            lines.append(heading)
            lines.extend(f"  {count:>3}  {name}" for name, count in counts)
        return lines or [NONE_FOUND]

    def _health_lines(self, report: AnalysisReport) -> List[str]:
        lines = ["Potential Issues:"]
        issues: List[str] = []
        for manifest in report.dependencies:
            wildcards = manifest.advisory_count("wildcard")
            if wildcards:
                issues.append(
                    f"  ⚠ Found {wildcards} wildcard (*) versions in {manifest.manifest}"
                )
            unpinned = manifest.advisory_count("unpinned")
            if unpinned:
                issues.append(
                    f"  ⚠ Found {unpinned} unpinned dependencies in {manifest.manifest}"
                )
            if manifest.error:
                issues.append(f"  ⚠ Could not parse {manifest.manifest}")
        lines.extend(issues or ["  (No issues found)"])
        lines.append("")
        lines.append("Security Considerations:")
        lines.extend(
            _listing(
                [f"✓ {tool} configuration found" for tool in report.security_tools],
                "  (No dependency update or audit tooling configured)",
                prefix="  ",
            )
        )
        return lines

    def _circular_lines(self, report: AnalysisReport) -> List[str]:
        if "py" not in report.statistics.histogram:
            return ["  (No Python sources found)"]
        return [
            f"  Files with relative imports: {report.imports.relative_import_files}",
            "  (Manual review recommended for circular dependencies)",
        ]


def render(report: AnalysisReport) -> str:
    """Render the structure report with the default templates."""
    return ReportRenderer().render(report)


def render_dependency_map(report: AnalysisReport) -> str:
    """Render the dependency map with the default templates."""
    return ReportRenderer().render_dependency_map(report)


def render_json(report: AnalysisReport) -> str:
    """Serialise the report for automated consumers."""
    return json.dumps(report.to_dict(), indent=2, sort_keys=True, ensure_ascii=False)


def _listing(items: Sequence[str], empty: str, *, prefix: str = "  ") -> List[str]:
    if not items:
        return [empty]
    return [f"{prefix}{item}" for item in items]


def _attribute_lines(attributes: Dict[str, str]) -> List[str]:
    return [f"  - {key}: {value}" for key, value in attributes.items()]


def _advisory_lines(manifest: ManifestDependencies) -> List[str]:
    lines = []
    unpinned = manifest.advisory_count("unpinned")
    if unpinned:
        lines.append(f"  ⚠ {unpinned} unpinned")
    wildcards = manifest.advisory_count("wildcard")
    if wildcards:
        lines.append(f"  ⚠ {wildcards} wildcard (*) versions")
    return lines


def _lockfile_lines(manifest: ManifestDependencies) -> List[str]:
    if manifest.lockfile:
        return [f"  ✓ Locked: {manifest.lockfile}"]
    if manifest.lockfile_expected:
        return ["  ⚠ No lock file found"]
    return []


__all__ = [
    "ReportRenderer",
    "ReportSection",
    "render",
    "render_dependency_map",
    "render_json",
]
