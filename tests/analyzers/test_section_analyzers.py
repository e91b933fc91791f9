"""Scan-level tests for the individual report sections."""

from __future__ import annotations

from reposcan.aggregator import NO_EXTENSION
from reposcan.classifier import GO, NODE, PYTHON
from reposcan.models import DependencyKind
from tests._fixtures.repo_builder import RepoBuilder


def test_statistics_section(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "src/a.py": "x = 1\n",
            "src/b.py": "y = 2\n",
            "src/pkg/c.js": "1\n",
            "Makefile": "all:\n",
            "node_modules/dep/index.js": "ignored\n",
        }
    )

    report = repo_builder.scan()
    stats = report.statistics

    assert stats.total_files == 4
    assert stats.histogram == {"py": 2, "js": 1, NO_EXTENSION: 1}
    assert stats.total_dirs == 3
    assert stats.top()[0] == ("py", 2)


def test_statistics_display_limit_from_config(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".reposcan.yml": "top_extensions: 2\n",
            "a.py": "",
            "b.go": "",
            "c.rs": "",
        }
    )

    report = repo_builder.scan()

    assert report.statistics.display_limit == 2
    assert report.statistics.top() == [("go", 1), ("py", 1)]


def test_entry_points_are_depth_limited(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "main.go": "package main\n",
            "src/index.ts": "export {}\n",
            "pkg/cli/__main__.py": "",
            "a/b/c/app.py": "",
            "src/main_helpers.py": "",
            "build/main.js": "",
        }
    )

    report = repo_builder.scan()

    assert report.entry_points == ["main.go", "pkg/cli/__main__.py", "src/index.ts"]


def test_configuration_files_include_hidden(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".eslintrc": "{}\n",
            ".env.example": "KEY=1\n",
            "pyproject.toml": "[project]\nname='x'\n",
            "deploy/docker-compose.yml": "services: {}\n",
            "webpack.config.js": "module.exports = {}\n",
            "src/settings.py": "",
            "a/b/c/deep.yml": "",
        }
    )

    report = repo_builder.scan()

    assert report.config_files == [
        ".env.example",
        ".eslintrc",
        "deploy/docker-compose.yml",
        "pyproject.toml",
        "webpack.config.js",
    ]


def test_directory_tree_two_levels(repo_builder: RepoBuilder) -> None:
    repo_builder.mkdir("src/pkg/deep", "docs", "node_modules/x", ".git")

    report = repo_builder.scan()

    assert report.directory_tree == ["docs/", "src/", "  pkg/"]


def test_dependencies_follow_classification(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "package.json": '{"dependencies": {"left-pad": "^1.3.0"}, "devDependencies": {"jest": "^29"}}',
            "package-lock.json": "{}",
            "requirements.txt": "requests==2.31.0\nflask\n",
        }
    )

    report = repo_builder.scan()

    assert [(m.ecosystem, m.manifest) for m in report.dependencies] == [
        (NODE, "package.json"),
        (PYTHON, "requirements.txt"),
    ]
    node, python = report.dependencies
    assert node.lockfile == "package-lock.json"
    assert node.count(DependencyKind.PRODUCTION) == 1
    assert node.count(DependencyKind.DEVELOPMENT) == 1
    assert python.advisory_count("unpinned") == 1
    assert sorted(report.dependencies_by_ecosystem()) == sorted([NODE, PYTHON])


def test_security_tools(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            ".github/dependabot.yml": "version: 2\n",
            "renovate.json": "{}\n",
        }
    )

    report = repo_builder.scan()

    assert report.security_tools == ["Dependabot", "Renovate"]


def test_tests_section(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "requirements.txt": "pytest==8.0.0\n",
            "tests/test_app.py": "def test_ok():\n    assert True\n",
            "web/app.spec.ts": "it('works', () => {})\n",
            "pkg/main_test.go": "package pkg\nimport \"testing\"\nfunc TestX(t *testing.T) {}\n",
            "src/app.py": "",
        }
    )

    report = repo_builder.scan()

    assert report.tests.test_files == 3
    assert report.tests.frameworks == ["pytest (Python)", "Go testing"]


def test_build_section(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "Dockerfile": "FROM python:3.12\n",
            ".github/workflows/ci.yml": "on: push\n",
            "Jenkinsfile": "pipeline {}\n",
        }
    )

    report = repo_builder.scan()

    assert [(marker.label, marker.attributes) for marker in report.build] == [
        ("Dockerfile", {}),
        ("GitHub Actions", {"Workflows": "1"}),
        ("Jenkins", {}),
    ]


def test_documentation_section(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "README.md": "# demo\n",
            "LICENSE": "MIT\n",
            "pkg/CHANGELOG.md": "",
            "a/b/README.md": "",
            "docs/index.md": "",
            "docs/guide/setup.md": "",
            "docs/logo.png": "",
        }
    )

    report = repo_builder.scan()

    assert report.documentation == ["LICENSE", "README.md", "pkg/CHANGELOG.md"]
    assert report.docs_markdown == 2


def test_documentation_without_docs_dir(repo_builder: RepoBuilder) -> None:
    repo_builder.write({"README.md": "# demo\n"})

    assert repo_builder.scan().docs_markdown is None


def test_import_patterns(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "pkg/__init__.py": "",
            "pkg/a.py": "import os\nimport sys\nfrom . import b\n",
            "pkg/b.py": "import os\nfrom collections import Counter\n",
            "web/app.js": "import React from 'react'\nimport util from './util'\nimport x from '@/x'\n",
            "web/b.ts": "import { useState } from \"react\"\n",
        }
    )

    report = repo_builder.scan()

    assert report.imports.python == [("os", 2), ("collections", 1), ("sys", 1)]
    assert report.imports.javascript == [("react", 2)]
    assert report.imports.relative_import_files == 1
    assert report.modules.python_packages == ["pkg"]


def test_module_structure(repo_builder: RepoBuilder) -> None:
    repo_builder.write(
        {
            "go.mod": "module example.com/foo\n",
            "main.go": "package main\n",
            "internal/db/db.go": "package db\n",
            "package.json": '{"workspaces": ["packages/*"]}',
            "Cargo.toml": '[workspace]\nmembers = ["crates/core"]\n',
        }
    )

    report = repo_builder.scan()

    assert report.classification.ecosystems[GO] == {"Module": "example.com/foo"}
    assert report.modules.go_packages == [".", "internal/db"]
    assert report.modules.node_workspaces == ["packages/*"]
    assert report.modules.rust_workspace_members == ["crates/core"]
