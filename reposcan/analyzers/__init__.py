"""Section analyzer implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, List, Sequence, Set

from .base import Analyzer, ScanContext
from .build import BuildAnalyzer
from .classification import ClassificationAnalyzer
from .configfiles import ConfigFileAnalyzer
from .dependencies import DependencyAnalyzer
from .documentation import DocumentationAnalyzer
from .entrypoints import EntryPointAnalyzer
from .imports import ImportAnalyzer
from .statistics import StatisticsAnalyzer
from .structure import StructureAnalyzer
from .testing import TestAnalyzer

_ENTRY_POINT_GROUP = "reposcan.analyzers"

# Pipeline order; ``Analyzer.requires`` may move a requirement earlier.
_BUILTIN_FACTORIES: dict[str, Callable[[], Analyzer]] = {
    "statistics": StatisticsAnalyzer,
    "classification": ClassificationAnalyzer,
    "entrypoints": EntryPointAnalyzer,
    "structure": StructureAnalyzer,
    "config": ConfigFileAnalyzer,
    "dependencies": DependencyAnalyzer,
    "tests": TestAnalyzer,
    "build": BuildAnalyzer,
    "documentation": DocumentationAnalyzer,
    "imports": ImportAnalyzer,
}


def discover_analyzers(enabled: Sequence[str] | None = None) -> List[Analyzer]:
    """Return instantiated analyzers, honoring optional enabled names.

    Analyzers named in another analyzer's ``requires`` are added when missing
    and always run before it; otherwise pipeline order is kept.
    """

    factories = _collect_factories()

    if enabled is None:
        selected: Set[str] = set(factories)
    else:
        selected = {name.lower() for name in enabled}
        missing = selected - factories.keys()
        if missing:
            raise ValueError(f"Unknown analyzers requested: {', '.join(sorted(missing))}")

    ordered: List[str] = []
    visiting: Set[str] = set()

    def _visit(name: str) -> None:
        if name in ordered:
            return
        if name in visiting:
            raise RuntimeError(f"Analyzer requirements form a cycle through '{name}'")
        visiting.add(name)
        for required in getattr(factories[name], "requires", ()):
            key = required.lower()
            if key not in factories:
                raise RuntimeError(f"Analyzer '{name}' requires unknown analyzer '{required}'")
            _visit(key)
        visiting.discard(name)
        ordered.append(name)

    for name in factories:
        if name in selected:
            _visit(name)

    return [_coerce_analyzer(factories[name]) for name in ordered]


def _collect_factories() -> Dict[str, object]:
    # Built-ins first; an entry point cannot replace one.
    factories: Dict[str, object] = dict(_BUILTIN_FACTORIES)
    for entry in _iter_entry_points():
        key = entry.name.lower()
        if key in factories:
            continue
        try:
            factories[key] = entry.load()
        except Exception as exc:  # pragma: no cover - third-party plugin failure
            raise RuntimeError(f"Failed to load analyzer entry point '{entry.name}': {exc}") from exc
    return factories


def _coerce_analyzer(obj: object) -> Analyzer:
    if isinstance(obj, Analyzer):
        return obj
    if isinstance(obj, type) and issubclass(obj, Analyzer):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Analyzer):
            return instance
    raise TypeError("Analyzer entry point must be an Analyzer subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Analyzer",
    "ScanContext",
    "discover_analyzers",
]
