"""Core data models shared across reposcan components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class FileRecord:
    """A regular file discovered beneath the scan root."""

    path: str
    extension: str

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def parent(self) -> str:
        if "/" not in self.path:
            return "."
        return self.path.rsplit("/", 1)[0]

    @property
    def depth(self) -> int:
        return self.path.count("/") + 1


class DependencyKind(str, Enum):
    """How a dependency is consumed by the declaring project."""

    PRODUCTION = "production"
    DEVELOPMENT = "development"
    INDIRECT = "indirect"


@dataclass(frozen=True)
class DependencyRecord:
    """A single declared dependency in its ecosystem's native syntax."""

    name: str
    version_spec: str
    kind: DependencyKind
    advisories: Tuple[str, ...] = ()


@dataclass
class ManifestDependencies:
    """Dependencies declared by one manifest file."""

    ecosystem: str
    manifest: str
    records: List[DependencyRecord] = field(default_factory=list)
    lockfile: Optional[str] = None
    lockfile_expected: bool = False
    error: Optional[str] = None

    def count(self, kind: DependencyKind) -> int:
        return sum(1 for record in self.records if record.kind is kind)

    def advisory_count(self, advisory: str) -> int:
        return sum(1 for record in self.records if advisory in record.advisories)


@dataclass
class ProjectClassification:
    """Ecosystems and frameworks detected for the repository."""

    ecosystems: Dict[str, Dict[str, str]] = field(default_factory=dict)
    frameworks: List[str] = field(default_factory=list)


@dataclass
class FileStatistics:
    """File counts grouped by extension."""

    histogram: Dict[str, int] = field(default_factory=dict)
    total_files: int = 0
    total_dirs: int = 0
    display_limit: int = 20

    def top(self, limit: int | None = None) -> List[Tuple[str, int]]:
        """Return extensions by descending count, ties broken by name."""
        from .aggregator import top_counts

        return top_counts(self.histogram, self.display_limit if limit is None else limit)


@dataclass
class BuildMarker:
    """Build or CI tooling detected at the repository root."""

    label: str
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass
class TestSummary:
    """Test footprint of the repository."""

    __test__ = False

    test_files: int = 0
    frameworks: List[str] = field(default_factory=list)


@dataclass
class ImportSummary:
    """Most frequent import targets per language."""

    python: List[Tuple[str, int]] = field(default_factory=list)
    javascript: List[Tuple[str, int]] = field(default_factory=list)
    relative_import_files: int = 0


@dataclass
class ModuleStructure:
    """Internal package layout signals."""

    python_packages: List[str] = field(default_factory=list)
    go_packages: List[str] = field(default_factory=list)
    node_workspaces: List[str] = field(default_factory=list)
    rust_workspace_members: List[str] = field(default_factory=list)


@dataclass
class AnalysisReport:
    """Everything a single scan discovered about a repository."""

    root: str
    statistics: FileStatistics = field(default_factory=FileStatistics)
    classification: ProjectClassification = field(default_factory=ProjectClassification)
    entry_points: List[str] = field(default_factory=list)
    directory_tree: List[str] = field(default_factory=list)
    config_files: List[str] = field(default_factory=list)
    dependencies: List[ManifestDependencies] = field(default_factory=list)
    tests: TestSummary = field(default_factory=TestSummary)
    build: List[BuildMarker] = field(default_factory=list)
    documentation: List[str] = field(default_factory=list)
    docs_markdown: Optional[int] = None
    imports: ImportSummary = field(default_factory=ImportSummary)
    modules: ModuleStructure = field(default_factory=ModuleStructure)
    security_tools: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def dependencies_by_ecosystem(self) -> Dict[str, List[DependencyRecord]]:
        grouped: Dict[str, List[DependencyRecord]] = {}
        for manifest in self.dependencies:
            grouped.setdefault(manifest.ecosystem, []).extend(manifest.records)
        return grouped

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serialisable view of the report."""
        payload = asdict(self)
        for manifest in payload["dependencies"]:
            for record in manifest["records"]:
                record["kind"] = record["kind"].value
                record["advisories"] = list(record["advisories"])
        payload["imports"]["python"] = [list(item) for item in self.imports.python]
        payload["imports"]["javascript"] = [list(item) for item in self.imports.javascript]
        return payload


@dataclass
class ReportBuilder:
    """Mutable accumulator passed through analyzers during a scan."""

    root: str
    statistics: FileStatistics = field(default_factory=FileStatistics)
    classification: ProjectClassification = field(default_factory=ProjectClassification)
    entry_points: List[str] = field(default_factory=list)
    directory_tree: List[str] = field(default_factory=list)
    config_files: List[str] = field(default_factory=list)
    dependencies: List[ManifestDependencies] = field(default_factory=list)
    tests: TestSummary = field(default_factory=TestSummary)
    build: List[BuildMarker] = field(default_factory=list)
    documentation: List[str] = field(default_factory=list)
    docs_markdown: Optional[int] = None
    imports: ImportSummary = field(default_factory=ImportSummary)
    modules: ModuleStructure = field(default_factory=ModuleStructure)
    security_tools: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)

    def build(self) -> AnalysisReport:
        """Freeze the accumulated state into an :class:`AnalysisReport`."""
        return AnalysisReport(
            root=self.root,
            statistics=self.statistics,
            classification=self.classification,
            entry_points=sorted(self.entry_points),
            directory_tree=list(self.directory_tree),
            config_files=sorted(self.config_files),
            dependencies=list(self.dependencies),
            tests=self.tests,
            build=list(self.build),
            documentation=sorted(self.documentation),
            docs_markdown=self.docs_markdown,
            imports=self.imports,
            modules=self.modules,
            security_tools=list(self.security_tools),
            warnings=list(self.warnings),
        )
