"""Base class for ecosystem manifest parsers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Tuple

from ..models import DependencyRecord, ManifestDependencies


class ManifestParseError(ValueError):
    """Raised when a manifest exists but is structurally invalid for its format."""


class ManifestParser(ABC):
    """Extracts :class:`DependencyRecord` entries from one manifest format."""

    ecosystem: str = ""
    manifest: str = ""
    lockfiles: Tuple[str, ...] = ()
    lockfile_expected: bool = False

    def parse_dependencies(self, manifest_path: Path) -> List[DependencyRecord]:
        """Return declared dependencies; an absent manifest yields ``[]``."""
        if not manifest_path.is_file():
            return []
        try:
            text = manifest_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ManifestParseError(f"cannot read {manifest_path.name}: {exc}") from exc
        return self.parse_text(text)

    @abstractmethod
    def parse_text(self, text: str) -> List[DependencyRecord]:
        """Parse manifest contents already read from disk."""

    def find_lockfile(self, root: Path) -> Optional[str]:
        for name in self.lockfiles:
            if (root / name).is_file():
                return name
        return None

    def collect(self, root: Path) -> ManifestDependencies:
        """Parse the manifest under ``root`` without raising on invalid content."""
        result = ManifestDependencies(
            ecosystem=self.ecosystem,
            manifest=self.manifest,
            lockfile=self.find_lockfile(root),
            lockfile_expected=self.lockfile_expected,
        )
        try:
            result.records = self.parse_dependencies(root / self.manifest)
        except ManifestParseError as exc:
            result.error = str(exc)
        return result


def split_requirement(spec: str) -> Tuple[str, str]:
    """Split a PEP 508 style string into ``(name, version_spec)``."""
    spec = spec.strip()
    for index, char in enumerate(spec):
        if char in "<>=!~;[@ (":
            name = spec[:index].strip()
            remainder = spec[index:].strip()
            if remainder.startswith("["):
                closing = remainder.find("]")
                if closing != -1:
                    remainder = remainder[closing + 1 :].strip()
            return name, remainder
    return spec, ""
