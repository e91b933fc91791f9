"""Rule table that classifies a repository by marker files and content patterns."""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from .capabilities import ContentSearcher, WalkingSearcher
from .models import ProjectClassification

NODE = "JavaScript/TypeScript (Node.js)"
PYTHON = "Python"
GO = "Go"
RUST = "Rust"
JAVA = "Java"
PHP = "PHP"
RUBY = "Ruby"


class SignalKind(str, Enum):
    ECOSYSTEM = "ecosystem"
    FRAMEWORK = "framework"
    TEST_FRAMEWORK = "test_framework"
    BUILD_TOOL = "build_tool"
    SECURITY_TOOL = "security_tool"


@dataclass
class MarkerContext:
    """Inputs shared by every marker test during one classification pass."""

    root: Path
    searcher: ContentSearcher
    extensions: Optional[FrozenSet[str]] = None
    _manifests: Dict[str, str] = field(default_factory=dict, repr=False)

    def manifest_text(self, name: str) -> str:
        if name not in self._manifests:
            try:
                self._manifests[name] = (self.root / name).read_text(encoding="utf-8", errors="ignore")
            except OSError:
                self._manifests[name] = ""
        return self._manifests[name]

    def has_extension(self, extensions: Sequence[str]) -> bool:
        if self.extensions is None:
            return True
        return any(ext in self.extensions for ext in extensions)


class MarkerTest(ABC):
    """A yes/no check evaluated against the repository."""

    @abstractmethod
    def evaluate(self, context: MarkerContext) -> bool:
        """Return True when the repository exhibits this marker."""


@dataclass(frozen=True)
class MarkerFileExists(MarkerTest):
    """Any of ``names`` exists relative to the root (file or directory)."""

    names: Tuple[str, ...]

    def evaluate(self, context: MarkerContext) -> bool:
        return any((context.root / name).exists() for name in self.names)


@dataclass(frozen=True)
class ManifestContains(MarkerTest):
    """A root manifest's raw text contains any of ``needles``."""

    manifest: str
    needles: Tuple[str, ...]

    def evaluate(self, context: MarkerContext) -> bool:
        text = context.manifest_text(self.manifest)
        return bool(text) and any(needle in text for needle in self.needles)


@dataclass(frozen=True)
class ContentPatternMatches(MarkerTest):
    """Some source file with one of ``extensions`` matches ``pattern``."""

    pattern: str
    extensions: Tuple[str, ...]

    def evaluate(self, context: MarkerContext) -> bool:
        if not context.has_extension(self.extensions):
            return False
        return context.searcher.first_match(context.root, self.pattern, self.extensions) is not None


AttributeExtractor = Callable[[Path], Dict[str, str]]


@dataclass(frozen=True)
class ClassificationSignal:
    """One row of the classification table."""

    kind: SignalKind
    label: str
    test: MarkerTest
    attributes: Optional[AttributeExtractor] = None


def _node_module_system(root: Path) -> Dict[str, str]:
    try:
        data = json.loads((root / "package.json").read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError):
        return {}
    if not isinstance(data, dict):
        return {}
    return {"Module system": "ES Modules" if data.get("type") == "module" else "CommonJS"}


_GO_MODULE = re.compile(r"^module\s+(\S+)", re.MULTILINE)


def _go_module_name(root: Path) -> Dict[str, str]:
    try:
        text = (root / "go.mod").read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return {}
    match = _GO_MODULE.search(text)
    if not match:
        return {}
    return {"Module": match.group(1).strip('"')}


_TOML_TABLE = re.compile(r"^\s*\[")
_CRATE_NAME = re.compile(r"""^\s*name\s*=\s*["']([^"']+)["']""")


def _rust_crate_name(root: Path) -> Dict[str, str]:
    try:
        lines = (root / "Cargo.toml").read_text(encoding="utf-8", errors="ignore").splitlines()
    except OSError:
        return {}
    in_package = False
    for line in lines:
        if _TOML_TABLE.match(line):
            in_package = line.strip() == "[package]"
            continue
        if in_package:
            match = _CRATE_NAME.match(line)
            if match:
                return {"Crate": match.group(1)}
    return {}


def _workflow_count(root: Path) -> Dict[str, str]:
    workflows = root / ".github" / "workflows"
    if not workflows.is_dir():
        return {}
    try:
        count = sum(
            1 for path in workflows.rglob("*") if path.is_file() and path.suffix in {".yml", ".yaml"}
        )
    except OSError:
        return {}
    return {"Workflows": str(count)}


ECOSYSTEM_SIGNALS: Tuple[ClassificationSignal, ...] = (
    ClassificationSignal(SignalKind.ECOSYSTEM, NODE, MarkerFileExists(("package.json",)), _node_module_system),
    ClassificationSignal(
        SignalKind.ECOSYSTEM,
        PYTHON,
        MarkerFileExists(("requirements.txt", "setup.py", "pyproject.toml")),
    ),
    ClassificationSignal(SignalKind.ECOSYSTEM, GO, MarkerFileExists(("go.mod",)), _go_module_name),
    ClassificationSignal(SignalKind.ECOSYSTEM, RUST, MarkerFileExists(("Cargo.toml",)), _rust_crate_name),
    ClassificationSignal(
        SignalKind.ECOSYSTEM,
        JAVA,
        MarkerFileExists(("pom.xml", "build.gradle", "build.gradle.kts")),
    ),
    ClassificationSignal(SignalKind.ECOSYSTEM, PHP, MarkerFileExists(("composer.json",))),
    ClassificationSignal(SignalKind.ECOSYSTEM, RUBY, MarkerFileExists(("Gemfile",))),
)

FRAMEWORK_SIGNALS: Tuple[ClassificationSignal, ...] = (
    ClassificationSignal(SignalKind.FRAMEWORK, "React", ManifestContains("package.json", ('"react"',))),
    ClassificationSignal(SignalKind.FRAMEWORK, "Vue", ManifestContains("package.json", ('"vue"',))),
    ClassificationSignal(
        SignalKind.FRAMEWORK,
        "Angular",
        ManifestContains("package.json", ('"angular"', '"@angular/core"')),
    ),
    ClassificationSignal(SignalKind.FRAMEWORK, "Next.js", ManifestContains("package.json", ('"next"',))),
    ClassificationSignal(SignalKind.FRAMEWORK, "Express", ManifestContains("package.json", ('"express"',))),
    ClassificationSignal(
        SignalKind.FRAMEWORK,
        "NestJS",
        ManifestContains("package.json", ('"nestjs"', '"@nestjs/core"')),
    ),
    ClassificationSignal(SignalKind.FRAMEWORK, "Django", ContentPatternMatches(r"from django", ("py",))),
    ClassificationSignal(SignalKind.FRAMEWORK, "Flask", ContentPatternMatches(r"from flask", ("py",))),
    ClassificationSignal(SignalKind.FRAMEWORK, "FastAPI", ContentPatternMatches(r"from fastapi", ("py",))),
    ClassificationSignal(
        SignalKind.FRAMEWORK,
        "Spring Boot",
        ContentPatternMatches(r"@SpringBootApplication", ("java", "kt")),
    ),
)

TEST_FRAMEWORK_SIGNALS: Tuple[ClassificationSignal, ...] = (
    ClassificationSignal(SignalKind.TEST_FRAMEWORK, "pytest (Python)", MarkerFileExists(("pytest.ini",))),
    ClassificationSignal(
        SignalKind.TEST_FRAMEWORK,
        "pytest (Python)",
        ManifestContains("requirements.txt", ("pytest",)),
    ),
    ClassificationSignal(
        SignalKind.TEST_FRAMEWORK,
        "pytest (Python)",
        ManifestContains("pyproject.toml", ("[tool.pytest",)),
    ),
    ClassificationSignal(SignalKind.TEST_FRAMEWORK, "Jest (JavaScript)", ManifestContains("package.json", ('"jest"',))),
    ClassificationSignal(SignalKind.TEST_FRAMEWORK, "Mocha (JavaScript)", ManifestContains("package.json", ('"mocha"',))),
    ClassificationSignal(
        SignalKind.TEST_FRAMEWORK,
        "Go testing",
        ContentPatternMatches(r"testing\.T|testify", ("go",)),
    ),
    ClassificationSignal(
        SignalKind.TEST_FRAMEWORK,
        "Rust tests",
        ContentPatternMatches(r"#\[cfg\(test\)\]", ("rs",)),
    ),
)

BUILD_SIGNALS: Tuple[ClassificationSignal, ...] = (
    ClassificationSignal(SignalKind.BUILD_TOOL, "Makefile", MarkerFileExists(("Makefile",))),
    ClassificationSignal(SignalKind.BUILD_TOOL, "Dockerfile", MarkerFileExists(("Dockerfile",))),
    ClassificationSignal(
        SignalKind.BUILD_TOOL,
        "Docker Compose",
        MarkerFileExists(("docker-compose.yml", "docker-compose.yaml")),
    ),
    ClassificationSignal(
        SignalKind.BUILD_TOOL,
        "GitHub Actions",
        MarkerFileExists((".github/workflows",)),
        _workflow_count,
    ),
    ClassificationSignal(SignalKind.BUILD_TOOL, "GitLab CI", MarkerFileExists((".gitlab-ci.yml",))),
    ClassificationSignal(SignalKind.BUILD_TOOL, "Travis CI", MarkerFileExists((".travis.yml",))),
    ClassificationSignal(SignalKind.BUILD_TOOL, "CircleCI", MarkerFileExists((".circleci/config.yml",))),
    ClassificationSignal(SignalKind.BUILD_TOOL, "Jenkins", MarkerFileExists(("Jenkinsfile",))),
)

SECURITY_SIGNALS: Tuple[ClassificationSignal, ...] = (
    ClassificationSignal(SignalKind.SECURITY_TOOL, "Snyk", MarkerFileExists((".snyk", "snyk.json"))),
    ClassificationSignal(
        SignalKind.SECURITY_TOOL,
        "Dependabot",
        MarkerFileExists((".github/dependabot.yml", ".github/dependabot.yaml", ".dependabot/config.yml")),
    ),
    ClassificationSignal(
        SignalKind.SECURITY_TOOL,
        "Renovate",
        MarkerFileExists(("renovate.json", ".renovaterc", ".renovaterc.json")),
    ),
)


def evaluate_signals(
    signals: Sequence[ClassificationSignal], context: MarkerContext
) -> Dict[str, Dict[str, str]]:
    """Return matched labels in table order, each with its extracted attributes.

    Rows sharing a label are alternatives; the first matching row wins and the
    remaining rows for that label are skipped.
    """
    matched: Dict[str, Dict[str, str]] = {}
    for signal in signals:
        if signal.label in matched:
            continue
        if not signal.test.evaluate(context):
            continue
        attributes: Dict[str, str] = {}
        if signal.attributes is not None:
            attributes = signal.attributes(context.root)
        matched[signal.label] = attributes
    return matched


def classify(
    root: Path,
    *,
    searcher: ContentSearcher | None = None,
    extensions: Optional[FrozenSet[str]] = None,
) -> ProjectClassification:
    """Evaluate the ecosystem and framework tables against ``root``.

    When ``extensions`` is given, content-pattern rows only run if a file with
    a relevant extension was seen during the walk.
    """
    context = MarkerContext(root=root, searcher=searcher or WalkingSearcher(), extensions=extensions)
    ecosystems = evaluate_signals(ECOSYSTEM_SIGNALS, context)
    frameworks: List[str] = list(evaluate_signals(FRAMEWORK_SIGNALS, context))
    return ProjectClassification(ecosystems=ecosystems, frameworks=frameworks)


__all__ = [
    "BUILD_SIGNALS",
    "ClassificationSignal",
    "ContentPatternMatches",
    "ECOSYSTEM_SIGNALS",
    "FRAMEWORK_SIGNALS",
    "ManifestContains",
    "MarkerContext",
    "MarkerFileExists",
    "MarkerTest",
    "SECURITY_SIGNALS",
    "SignalKind",
    "TEST_FRAMEWORK_SIGNALS",
    "classify",
    "evaluate_signals",
]
