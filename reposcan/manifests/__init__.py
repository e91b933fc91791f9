"""Ecosystem-specific dependency manifest parsers."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Tuple

from ..models import ManifestDependencies
from .base import ManifestParseError, ManifestParser
from .go import GoModParser
from .java import GradleKotlinParser, GradleParser, MavenParser
from .node import PackageJsonParser
from .php import ComposerParser
from .python import PyprojectParser, RequirementsParser, SetupPyParser
from .ruby import GemfileParser
from .rust import CargoParser

PARSERS: Tuple[ManifestParser, ...] = (
    PackageJsonParser(),
    RequirementsParser(),
    SetupPyParser(),
    PyprojectParser(),
    GoModParser(),
    CargoParser(),
    MavenParser(),
    GradleParser(),
    GradleKotlinParser(),
    GemfileParser(),
    ComposerParser(),
)


def parsers_for(ecosystems: Iterable[str]) -> List[ManifestParser]:
    """Return parsers belonging to the given ecosystem labels, in table order."""
    wanted = set(ecosystems)
    return [parser for parser in PARSERS if parser.ecosystem in wanted]


def collect_dependencies(root: Path, ecosystems: Iterable[str]) -> List[ManifestDependencies]:
    """Parse every present manifest of the detected ecosystems under ``root``."""
    results: List[ManifestDependencies] = []
    for parser in parsers_for(ecosystems):
        if not (root / parser.manifest).is_file():
            continue
        results.append(parser.collect(root))
    return results


__all__ = [
    "PARSERS",
    "ManifestParseError",
    "ManifestParser",
    "collect_dependencies",
    "parsers_for",
]
