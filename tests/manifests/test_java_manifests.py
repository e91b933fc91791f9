from __future__ import annotations

import pytest

from reposcan.manifests import ManifestParseError
from reposcan.manifests.java import GradleKotlinParser, GradleParser, MavenParser
from reposcan.models import DependencyKind

POM = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <dependencies>
    <dependency>
      <groupId>org.springframework.boot</groupId>
      <artifactId>spring-boot-starter-web</artifactId>
      <version>3.2.0</version>
    </dependency>
    <dependency>
      <groupId>junit</groupId>
      <artifactId>junit</artifactId>
      <version>4.13.2</version>
      <scope>test</scope>
    </dependency>
  </dependencies>
</project>
"""


def test_maven_namespaced_pom() -> None:
    records = MavenParser().parse_text(POM)

    assert [(r.name, r.version_spec, r.kind) for r in records] == [
        ("org.springframework.boot:spring-boot-starter-web", "3.2.0", DependencyKind.PRODUCTION),
        ("junit:junit", "4.13.2", DependencyKind.DEVELOPMENT),
    ]


def test_maven_without_namespace_or_version() -> None:
    text = "<project><dependencies><dependency><groupId>g</groupId><artifactId>a</artifactId></dependency></dependencies></project>"

    records = MavenParser().parse_text(text)

    assert [(r.name, r.version_spec) for r in records] == [("g:a", "")]


def test_maven_invalid_xml_raises() -> None:
    with pytest.raises(ManifestParseError):
        MavenParser().parse_text("<project><dependencies>")


def test_gradle_configurations() -> None:
    text = """
plugins { id 'java' }

dependencies {
    implementation 'com.google.guava:guava:33.0.0-jre'
    // implementation 'commented:out:1.0'
    testImplementation "org.junit.jupiter:junit-jupiter:5.10.0"
    runtimeOnly 'org.postgresql:postgresql'
}
"""

    records = GradleParser().parse_text(text)

    assert [(r.name, r.version_spec, r.kind) for r in records] == [
        ("com.google.guava:guava", "33.0.0-jre", DependencyKind.PRODUCTION),
        ("org.junit.jupiter:junit-jupiter", "5.10.0", DependencyKind.DEVELOPMENT),
        ("org.postgresql:postgresql", "", DependencyKind.PRODUCTION),
    ]


def test_gradle_kotlin_dsl() -> None:
    text = 'dependencies {\n    implementation("io.ktor:ktor-server-core:2.3.9")\n}\n'

    records = GradleKotlinParser().parse_text(text)

    assert GradleKotlinParser.manifest == "build.gradle.kts"
    assert [(r.name, r.version_spec) for r in records] == [("io.ktor:ktor-server-core", "2.3.9")]
