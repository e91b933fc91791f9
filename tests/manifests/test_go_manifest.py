from __future__ import annotations

import pytest

from reposcan.manifests import ManifestParseError
from reposcan.manifests.go import GoModParser
from reposcan.models import DependencyKind

GO_MOD = """
module example.com/foo

go 1.22

require github.com/pkg/errors v0.9.1

require (
	github.com/stretchr/testify v1.9.0
	golang.org/x/sys v0.20.0 // indirect
	// a comment
)
"""


def test_require_lines_and_blocks() -> None:
    records = GoModParser().parse_text(GO_MOD)

    assert [(r.name, r.version_spec, r.kind) for r in records] == [
        ("github.com/pkg/errors", "v0.9.1", DependencyKind.PRODUCTION),
        ("github.com/stretchr/testify", "v1.9.0", DependencyKind.PRODUCTION),
        ("golang.org/x/sys", "v0.20.0", DependencyKind.INDIRECT),
    ]


def test_module_without_requirements() -> None:
    assert GoModParser().parse_text("module example.com/foo\n") == []


def test_unterminated_require_block_raises() -> None:
    with pytest.raises(ManifestParseError, match="unterminated"):
        GoModParser().parse_text("module x\nrequire (\n\tgithub.com/a/b v1.0.0\n")


def test_require_block_with_trailing_comments() -> None:
    text = (
        "module example.com/foo\n"
        "\n"
        "require ( // runtime deps\n"
        "\tgithub.com/google/uuid v1.6.0\n"
        "\tgolang.org/x/text v0.14.0 // indirect\n"
        ") // end require\n"
        "\n"
        "require github.com/pkg/errors v0.9.1 // pinned\n"
    )

    records = GoModParser().parse_text(text)

    assert [(r.name, r.version_spec, r.kind) for r in records] == [
        ("github.com/google/uuid", "v1.6.0", DependencyKind.PRODUCTION),
        ("golang.org/x/text", "v0.14.0", DependencyKind.INDIRECT),
        ("github.com/pkg/errors", "v0.9.1", DependencyKind.PRODUCTION),
    ]
