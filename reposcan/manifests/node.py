"""package.json dependency parser."""

from __future__ import annotations

import json
from typing import List

from ..classifier import NODE
from ..models import DependencyKind, DependencyRecord
from .base import ManifestParseError, ManifestParser

_SECTIONS = (
    ("dependencies", DependencyKind.PRODUCTION),
    ("devDependencies", DependencyKind.DEVELOPMENT),
)


class PackageJsonParser(ManifestParser):
    """Reads ``dependencies`` and ``devDependencies`` from package.json."""

    ecosystem = NODE
    manifest = "package.json"
    lockfiles = ("package-lock.json", "yarn.lock", "pnpm-lock.yaml")
    lockfile_expected = True

    def parse_text(self, text: str) -> List[DependencyRecord]:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ManifestParseError(f"invalid JSON in package.json: {exc}") from exc
        if not isinstance(data, dict):
            raise ManifestParseError("package.json must contain a JSON object")

        records: List[DependencyRecord] = []
        for key, kind in _SECTIONS:
            section = data.get(key) or {}
            if not isinstance(section, dict):
                continue
            for name in sorted(section):
                version = section[name]
                spec = version if isinstance(version, str) else json.dumps(version)
                advisories = ("wildcard",) if spec.strip() == "*" else ()
                records.append(DependencyRecord(name, spec, kind, advisories))
        return records


def load_workspaces(text: str) -> List[str]:
    """Return workspace globs declared in package.json, tolerating bad input."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return []
    if not isinstance(data, dict):
        return []
    workspaces = data.get("workspaces")
    if isinstance(workspaces, dict):
        workspaces = workspaces.get("packages")
    if not isinstance(workspaces, list):
        return []
    return [item for item in workspaces if isinstance(item, str)]
