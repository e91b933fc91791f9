from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from reposcan import capabilities as capabilities_module
from reposcan.capabilities import (
    RipgrepSearcher,
    TreeCommandRenderer,
    WalkingSearcher,
    WalkingTreeRenderer,
    detect_capabilities,
)
from reposcan.walker import FileWalker


def _write(root: Path, rel: str, content: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture
def sample_repo(tmp_path: Path) -> Path:
    _write(tmp_path, "app/main.py", "import os\nfrom flask import Flask\n")
    _write(tmp_path, "app/util.py", "import os\n")
    _write(tmp_path, "web/index.js", "import React from 'react'\n")
    _write(tmp_path, "node_modules/lib/index.py", "from flask import Flask\n")
    return tmp_path


def test_walking_searcher_finds_files_by_extension(sample_repo: Path) -> None:
    searcher = WalkingSearcher(FileWalker())

    assert searcher.find_files(sample_repo, r"^import os", ["py"]) == ["app/main.py", "app/util.py"]
    assert searcher.find_files(sample_repo, r"^import os", ["py"], limit=1) == ["app/main.py"]
    assert searcher.first_match(sample_repo, r"from flask", ["py"]) == "app/main.py"
    assert searcher.first_match(sample_repo, r"from flask", ["js"]) is None


def test_walking_searcher_matching_lines(sample_repo: Path) -> None:
    searcher = WalkingSearcher(FileWalker())

    assert searcher.matching_lines(sample_repo, r"^import ", ["py"]) == ["import os", "import os"]


def test_walking_tree_renderer_indents_directories(sample_repo: Path) -> None:
    (sample_repo / "app" / "sub" / "deeper").mkdir(parents=True)

    lines = WalkingTreeRenderer(FileWalker()).render(sample_repo, depth=2)

    assert lines == ["app/", "  sub/", "web/"]
    assert WalkingTreeRenderer(FileWalker()).render(sample_repo, depth=2, limit=1) == ["app/"]


def test_detect_capabilities_without_external_tools(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(capabilities_module.shutil, "which", lambda name: f"/usr/bin/{name}")

    selected = detect_capabilities(FileWalker(), use_external_tools=False)

    assert isinstance(selected.searcher, WalkingSearcher)
    assert isinstance(selected.tree_renderer, WalkingTreeRenderer)


def test_detect_capabilities_when_tools_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(capabilities_module.shutil, "which", lambda name: None)

    selected = detect_capabilities(FileWalker())

    assert isinstance(selected.searcher, WalkingSearcher)
    assert isinstance(selected.tree_renderer, WalkingTreeRenderer)


def test_detect_capabilities_prefers_installed_tools(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(capabilities_module.shutil, "which", lambda name: f"/usr/bin/{name}")

    selected = detect_capabilities(FileWalker())

    assert isinstance(selected.searcher, RipgrepSearcher)
    assert isinstance(selected.tree_renderer, TreeCommandRenderer)
    assert selected.searcher.executable == "/usr/bin/rg"


def test_ripgrep_failure_falls_back_to_walker(monkeypatch: pytest.MonkeyPatch, sample_repo: Path) -> None:
    def broken_run(*args, **kwargs):
        raise OSError("rg vanished")

    monkeypatch.setattr(capabilities_module.subprocess, "run", broken_run)
    walker = FileWalker()
    searcher = RipgrepSearcher("/missing/rg", WalkingSearcher(walker))

    assert searcher.find_files(sample_repo, r"from flask", ["py"]) == ["app/main.py"]
    assert searcher.matching_lines(sample_repo, r"^import React", ["js"]) == ["import React from 'react'"]


def test_ripgrep_output_is_normalised(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = []

    def fake_run(command, **kwargs):
        calls.append((command, kwargs))
        return subprocess.CompletedProcess(command, 0, stdout="./b.py\n./a.py\n", stderr="")

    monkeypatch.setattr(capabilities_module.subprocess, "run", fake_run)
    searcher = RipgrepSearcher("rg", WalkingSearcher(FileWalker()))

    assert searcher.find_files(tmp_path, "x", ["py"]) == ["a.py", "b.py"]
    command, kwargs = calls[0]
    assert command[:4] == ["rg", "--no-ignore", "--color", "never"]
    assert "!node_modules/" in command
    assert command[command.index("*.py") - 1] == "--iglob"
    assert kwargs["cwd"] == str(tmp_path)


def test_ripgrep_no_matches_is_empty(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        capabilities_module.subprocess,
        "run",
        lambda command, **kwargs: subprocess.CompletedProcess(command, 1, stdout="", stderr=""),
    )
    searcher = RipgrepSearcher("rg", WalkingSearcher(FileWalker()))

    assert searcher.find_files(tmp_path, "x", ["py"]) == []
    assert searcher.matching_lines(tmp_path, "x", ["py"]) == []


def test_tree_failure_falls_back_to_walker(monkeypatch: pytest.MonkeyPatch, sample_repo: Path) -> None:
    def failing_run(command, **kwargs):
        raise subprocess.CalledProcessError(2, command)

    monkeypatch.setattr(capabilities_module.subprocess, "run", failing_run)
    renderer = TreeCommandRenderer("tree", WalkingTreeRenderer(FileWalker()))

    assert renderer.render(sample_repo, depth=1) == ["app/", "web/"]


def test_tree_output_drops_root_line(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    output = ".\n|-- app\n`-- web\n"
    monkeypatch.setattr(
        capabilities_module.subprocess,
        "run",
        lambda command, **kwargs: subprocess.CompletedProcess(command, 0, stdout=output, stderr=""),
    )
    renderer = TreeCommandRenderer("tree", WalkingTreeRenderer(FileWalker()))

    assert renderer.render(tmp_path) == ["|-- app", "`-- web"]


def _glob_values(command: list[str], flag: str) -> list[str]:
    return [command[index + 1] for index, arg in enumerate(command[:-1]) if arg == flag]


def test_ripgrep_command_carries_walker_exclusions() -> None:
    walker = FileWalker(
        extra_excluded_dirs=["generated"],
        exclude_paths=["legacy/", "*.generated", "docs/api/", "/setup.py"],
    )
    searcher = RipgrepSearcher("rg", WalkingSearcher(walker))

    command = searcher.command(["--files-with-matches", "-e", "x"], ["py", "js"])

    assert _glob_values(command, "--iglob") == ["*.py", "*.js"]
    excludes = _glob_values(command, "--glob")
    assert "!generated/" in excludes
    assert "!node_modules/" in excludes
    assert "!legacy/" in excludes
    assert "!*.generated" in excludes
    assert "!/docs/api/" in excludes
    assert "!/setup.py" in excludes
    assert command[-1] == "."


def test_ripgrep_results_are_filtered_through_walker(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_run(command, **kwargs):
        if "--files-with-matches" in command:
            stdout = "./legacy/old.py\n./app/views.py\n./.hidden.py\n"
        else:
            stdout = "./legacy/old.py\0from django import db\n./app/views.py\0from django import urls\n"
        return subprocess.CompletedProcess(command, 0, stdout=stdout, stderr="")

    monkeypatch.setattr(capabilities_module.subprocess, "run", fake_run)
    searcher = RipgrepSearcher("rg", WalkingSearcher(FileWalker(exclude_paths=["legacy/"])))

    assert searcher.find_files(tmp_path, "from django", ["py"]) == ["app/views.py"]
    assert searcher.matching_lines(tmp_path, "from django", ["py"]) == ["from django import urls"]


def test_walking_and_ripgrep_agree_on_excluded_paths(tmp_path: Path) -> None:
    _write(tmp_path, "legacy/old.py", "from django import db\n")
    _write(tmp_path, "app/Views.PY", "from django import urls\n")
    walker = FileWalker(exclude_paths=["legacy/"])

    def fake_run(command, **kwargs):
        assert "!legacy/" in command
        return subprocess.CompletedProcess(command, 0, stdout="./legacy/old.py\n./app/Views.PY\n", stderr="")

    with pytest.MonkeyPatch.context() as patch:
        patch.setattr(capabilities_module.subprocess, "run", fake_run)
        via_rg = RipgrepSearcher("rg", WalkingSearcher(walker)).find_files(tmp_path, "from django", ["py"])

    assert via_rg == WalkingSearcher(walker).find_files(tmp_path, "from django", ["py"]) == ["app/Views.PY"]


def test_tree_command_ignores_unanchored_rules() -> None:
    walker = FileWalker(exclude_paths=["*.egg-info/"])
    renderer = TreeCommandRenderer("tree", WalkingTreeRenderer(walker))

    command = renderer.command(2)

    ignore = command[command.index("-I") + 1].split("|")
    assert "*.egg-info" in ignore
    assert "node_modules" in ignore


def test_tree_anchored_rules_use_walker(monkeypatch: pytest.MonkeyPatch, sample_repo: Path) -> None:
    def unexpected_run(command, **kwargs):
        raise AssertionError("tree must not run for anchored exclusions")

    monkeypatch.setattr(capabilities_module.subprocess, "run", unexpected_run)
    renderer = TreeCommandRenderer("tree", WalkingTreeRenderer(FileWalker(exclude_paths=["/web"])))

    assert renderer.command(1) is None
    assert renderer.render(sample_repo, depth=1) == ["app/"]


def test_walking_searcher_reads_whole_file(tmp_path: Path) -> None:
    filler = "# padding line\n" * 50_000
    _write(tmp_path, "big.py", filler + "from flask import Flask\n")

    searcher = WalkingSearcher(FileWalker())

    assert searcher.first_match(tmp_path, r"^from flask", ["py"]) == "big.py"
    assert searcher.matching_lines(tmp_path, r"^from flask", ["py"]) == ["from flask import Flask"]


def test_walking_searcher_stops_at_binary_content(tmp_path: Path) -> None:
    (tmp_path / "blob.py").write_bytes(b"import os\n\x00\x01\nimport sys\n")

    searcher = WalkingSearcher(FileWalker())

    assert searcher.matching_lines(tmp_path, r"^import ", ["py"]) == ["import os"]
    assert searcher.first_match(tmp_path, r"^import sys", ["py"]) is None
