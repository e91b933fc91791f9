"""Maven and Gradle dependency parsers."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import List

from ..classifier import JAVA
from ..models import DependencyKind, DependencyRecord
from .base import ManifestParseError, ManifestParser

_GRADLE_COORDINATE = re.compile(r"""['"]([\w\-.]+):([\w\-.]+)(?::([^'"]+))?['"]""")
_GRADLE_CONFIGURATION = re.compile(
    r"^\s*(implementation|api|compile|compileOnly|runtimeOnly|testImplementation|"
    r"testCompile|testRuntimeOnly|annotationProcessor|kapt)\b"
)


class MavenParser(ManifestParser):
    """``<dependency>`` entries from pom.xml; ``test`` scope is development."""

    ecosystem = JAVA
    manifest = "pom.xml"

    def parse_text(self, text: str) -> List[DependencyRecord]:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as exc:
            raise ManifestParseError(f"invalid XML in pom.xml: {exc}") from exc

        namespace = _detect_xml_namespace(root)
        prefix = f"{{{namespace}}}" if namespace else ""

        records: List[DependencyRecord] = []
        for dep in root.iter(f"{prefix}dependency"):
            group = (dep.findtext(f"{prefix}groupId") or "").strip()
            artifact = (dep.findtext(f"{prefix}artifactId") or "").strip()
            if not group or not artifact:
                continue
            version = (dep.findtext(f"{prefix}version") or "").strip()
            scope = (dep.findtext(f"{prefix}scope") or "").strip()
            kind = DependencyKind.DEVELOPMENT if scope == "test" else DependencyKind.PRODUCTION
            records.append(DependencyRecord(f"{group}:{artifact}", version, kind))
        return records


class GradleParser(ManifestParser):
    """Dependency configuration lines with ``group:artifact[:version]`` coordinates."""

    ecosystem = JAVA
    manifest = "build.gradle"
    lockfiles = ("gradle.lockfile",)

    def parse_text(self, text: str) -> List[DependencyRecord]:
        records: List[DependencyRecord] = []
        for line in text.splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("//"):
                continue
            configuration = _GRADLE_CONFIGURATION.match(stripped)
            if not configuration:
                continue
            coordinate = _GRADLE_COORDINATE.search(stripped)
            if not coordinate:
                continue
            group, artifact, version = coordinate.groups()
            kind = (
                DependencyKind.DEVELOPMENT
                if configuration.group(1).startswith("test")
                else DependencyKind.PRODUCTION
            )
            records.append(DependencyRecord(f"{group}:{artifact}", version or "", kind))
        return records


class GradleKotlinParser(GradleParser):
    manifest = "build.gradle.kts"


def _detect_xml_namespace(element: ET.Element) -> str | None:
    match = re.match(r"\{(.+)}", element.tag)
    return match.group(1) if match else None
